"""Command-line entry point."""

from __future__ import annotations

import dataclasses
import sys
import termios

from .choices import Choices
from .interface import TtyInterface
from .options import ExitRequest, Options, parse_options
from .tty import Tty

PROG = "fuzzyfind"


def _write_out(text: str) -> None:
    """Write to stdout, passing undecodable input bytes through unchanged."""
    try:
        sys.stdout.write(text)
    except UnicodeEncodeError:
        sys.stdout.flush()
        sys.stdout.buffer.write(text.encode("utf-8", errors="surrogateescape"))
        sys.stdout.buffer.flush()


class _StdoutWriter:
    def write(self, text: str) -> None:
        _write_out(text)


def _read_stdin(choices: Choices, delimiter: str) -> None:
    choices.read(getattr(sys.stdin, "buffer", sys.stdin), delimiter)


def _interactive(options: Options, choices: Choices) -> int:
    stdin_is_tty = sys.stdin.isatty()
    if stdin_is_tty:
        _read_stdin(choices, options.input_delimiter)

    try:
        tty = Tty(options.tty_filename)
    except (OSError, termios.error) as err:
        print(f"Failed to open tty: {err}", file=sys.stderr)
        return 1

    try:
        if not stdin_is_tty:
            _read_stdin(choices, options.input_delimiter)

        num_lines = min(options.num_lines, len(choices))
        adjustment = 2 if options.show_info else 1
        if num_lines + adjustment > tty.height():
            num_lines = max(tty.height() - adjustment, 0)
        options = dataclasses.replace(options, num_lines=num_lines)

        interface = TtyInterface(tty, choices, options, _StdoutWriter())
        status = interface.run()
    finally:
        tty.close()
    sys.stdout.flush()
    return status


def main(argv: list[str] | None = None) -> int:
    """Run the program; returns the process exit status."""
    try:
        options = parse_options(argv, PROG)
    except ExitRequest as request:
        if request.stdout:
            sys.stdout.write(request.stdout)
        if request.stderr:
            sys.stderr.write(request.stderr)
        return request.status

    choices = Choices(options.workers)

    if options.benchmark:
        if options.filter is None:
            print("Must specify -e/--show-matches with --benchmark", file=sys.stderr)
            return 1
        _read_stdin(choices, options.input_delimiter)
        for _ in range(options.benchmark):
            choices.search(options.filter)
        return 0

    if options.filter is not None:
        _read_stdin(choices, options.input_delimiter)
        choices.search(options.filter)
        for result in choices.results:
            prefix = f"{result.score:f}\t" if options.show_scores else ""
            _write_out(f"{prefix}{result.string}\n")
        sys.stdout.flush()
        return 0

    return _interactive(options, choices)


if __name__ == "__main__":
    sys.exit(main())