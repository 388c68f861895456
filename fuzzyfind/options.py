"""Command-line option parsing."""

from __future__ import annotations

import enum
import re
import sys
from collections.abc import Iterator, Sequence
from dataclasses import dataclass

VERSION = "1.1"

DEFAULT_TTY = "/dev/tty"
DEFAULT_PROMPT = "> "
DEFAULT_NUM_LINES = 10
DEFAULT_WORKERS = 0
DEFAULT_BENCHMARK_RUNS = 100
MIN_LINES = 3
LINES_MAX = 2**31 - 1

_USAGE = (
    "Usage: {prog} [OPTION]...\n"
    " -l, --lines=LINES        Specify how many lines of results to show (default 10)\n"
    " -p, --prompt=PROMPT      Input prompt (default '> ')\n"
    " -q, --query=QUERY        Use QUERY as the initial search string\n"
    " -e, --show-matches=QUERY Output the sorted matches of QUERY\n"
    " -t, --tty=TTY            Specify file to use as TTY device (default /dev/tty)\n"
    " -s, --show-scores        Show the scores of each match\n"
    " -0, --read-null          Read input delimited by ASCII NUL characters\n"
    " -j, --workers NUM        Use NUM workers for searching. (default is # of CPUs)\n"
    " -i, --show-info          Show selection info line\n"
    " -h, --help     Display this help and exit\n"
    " -v, --version  Output version information and exit\n"
)


class _Arg(enum.Enum):
    NONE = enum.auto()
    REQUIRED = enum.auto()
    OPTIONAL = enum.auto()


_LONG_OPTIONS = {
    "show-matches": ("e", _Arg.REQUIRED),
    "query": ("q", _Arg.REQUIRED),
    "lines": ("l", _Arg.REQUIRED),
    "tty": ("t", _Arg.REQUIRED),
    "prompt": ("p", _Arg.REQUIRED),
    "show-scores": ("s", _Arg.NONE),
    "read-null": ("0", _Arg.NONE),
    "version": ("v", _Arg.NONE),
    "benchmark": ("b", _Arg.OPTIONAL),
    "workers": ("j", _Arg.REQUIRED),
    "show-info": ("i", _Arg.NONE),
    "help": ("h", _Arg.NONE),
}

_SHORT_OPTIONS = {
    "v": False,
    "h": False,
    "s": False,
    "0": False,
    "e": True,
    "q": True,
    "l": True,
    "t": True,
    "p": True,
    "j": True,
    "i": False,
}

_INT_PREFIX = re.compile(r"\s*([+-]?[0-9]+)")


class ExitRequest(Exception):
    """Parsing ended early; the program should print the given text and exit."""

    def __init__(self, status: int, stdout: str = "", stderr: str = "") -> None:
        super().__init__(stderr or stdout)
        self.status = status
        self.stdout = stdout
        self.stderr = stderr


class OptionsError(ExitRequest):
    """The command line is invalid; the program should exit with failure."""

    def __init__(self, stderr: str) -> None:
        super().__init__(1, stderr=stderr)


@dataclass
class Options:
    """Settings chosen on the command line."""

    benchmark: int = 0
    filter: str | None = None
    init_search: str | None = None
    tty_filename: str = DEFAULT_TTY
    show_scores: bool = False
    num_lines: int = DEFAULT_NUM_LINES
    scrolloff: int = 1
    prompt: str = DEFAULT_PROMPT
    workers: int = DEFAULT_WORKERS
    input_delimiter: str = "\n"
    show_info: bool = False


def usage(prog: str = "fuzzyfind") -> str:
    """Return the usage text."""
    return _USAGE.format(prog=prog)


def _scan_int(text: str, unsigned: bool = False) -> int | None:
    """Read a leading integer the way scanf does, ignoring trailing text."""
    found = _INT_PREFIX.match(text)
    if found is None:
        return None
    value = int(found.group(1))
    return value % 2**32 if unsigned else value


def _bad_option(prog: str, message: str) -> ExitRequest:
    return ExitRequest(0, stderr=f"{prog}: {message}\n" + usage(prog))


def _lookup_long(name: str, prog: str, arg: str) -> tuple[str, _Arg]:
    if name in _LONG_OPTIONS:
        return _LONG_OPTIONS[name]
    candidates = [key for key in _LONG_OPTIONS if key.startswith(name)]
    if len(candidates) == 1:
        return _LONG_OPTIONS[candidates[0]]
    if candidates:
        raise _bad_option(prog, f"option '{arg}' is ambiguous")
    raise _bad_option(prog, f"unrecognized option '{arg}'")


def _scan(args: Sequence[str], prog: str) -> Iterator[tuple[str | None, str | None]]:
    """Yield (option, value) pairs; operands come as (None, operand)."""
    remaining = iter(args)
    for arg in remaining:
        if arg == "--":
            for operand in remaining:
                yield None, operand
            return
        if arg.startswith("--"):
            name, has_value, value = arg[2:].partition("=")
            key, kind = _lookup_long(name, prog, arg)
            if kind is _Arg.NONE:
                if has_value:
                    raise _bad_option(prog, f"option '--{name}' doesn't allow an argument")
                yield key, None
            elif kind is _Arg.REQUIRED:
                if not has_value:
                    next_arg = next(remaining, None)
                    if next_arg is None:
                        raise _bad_option(prog, f"option '--{name}' requires an argument")
                    value = next_arg
                yield key, value
            else:
                yield key, value if has_value else None
        elif arg.startswith("-") and len(arg) > 1:
            body = arg[1:]
            for pos, ch in enumerate(body):
                if ch not in _SHORT_OPTIONS:
                    raise _bad_option(prog, f"invalid option -- '{ch}'")
                if not _SHORT_OPTIONS[ch]:
                    yield ch, None
                    continue
                value = body[pos + 1 :]
                if not value:
                    next_arg = next(remaining, None)
                    if next_arg is None:
                        raise _bad_option(prog, f"option requires an argument -- '{ch}'")
                    value = next_arg
                yield ch, value
                break
        else:
            yield None, arg


def parse_options(argv: Sequence[str] | None = None, prog: str = "fuzzyfind") -> Options:
    """Parse command-line arguments (without the program name) into Options.

    Raises ExitRequest for --help, --version and unknown options, and
    OptionsError for invalid values or stray operands.
    """
    if argv is None:
        argv = sys.argv[1:]
    options = Options()
    operands: list[str] = []

    for key, value in _scan(argv, prog):
        if key is None:
            operands.append(value or "")
        elif key == "v":
            raise ExitRequest(0, stdout=f"{prog} {VERSION}\n")
        elif key == "s":
            options.show_scores = True
        elif key == "0":
            options.input_delimiter = "\0"
        elif key == "q":
            options.init_search = value
        elif key == "e":
            options.filter = value
        elif key == "b":
            if value is None:
                options.benchmark = DEFAULT_BENCHMARK_RUNS
            else:
                runs = _scan_int(value)
                if runs is None:
                    raise OptionsError(usage(prog))
                options.benchmark = runs
        elif key == "t":
            options.tty_filename = value or ""
        elif key == "p":
            options.prompt = value or ""
        elif key == "j":
            workers = _scan_int(value or "", unsigned=True)
            if workers is None:
                raise OptionsError(usage(prog))
            options.workers = workers
        elif key == "l":
            text = value or ""
            if text == "max":
                lines: int | None = LINES_MAX
            else:
                lines = _scan_int(text)
                if lines is None or lines < MIN_LINES:
                    raise OptionsError(
                        f"Invalid format for --lines: {text}\n"
                        f"Must be integer in range {MIN_LINES}..\n" + usage(prog)
                    )
            options.num_lines = lines
        elif key == "i":
            options.show_info = True
        else:
            raise ExitRequest(0, stderr=usage(prog))

    if operands:
        raise OptionsError(usage(prog))
    return options