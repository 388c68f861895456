"""Interactive selection of a choice on a terminal."""

from __future__ import annotations

import codecs
import sys
from collections.abc import Callable
from typing import IO, Any

from .choices import Choices
from .match import SCORE_MIN, match_positions
from .options import Options
from .tty import Color

SEARCH_SIZE_MAX = 4096
KEYTIMEOUT = 25
HIGHLIGHT_COLOR = Color.YELLOW

_WHITESPACE = frozenset(" \t\n\v\f\r")


def _ctrl(key: str) -> bytes:
    return bytes([ord(key) - ord("@")])


def _byte_length(text: str) -> int:
    return len(text.encode("utf-8", errors="surrogateescape"))


def _truncate(text: str) -> str:
    """Cut ``text`` to at most SEARCH_SIZE_MAX bytes of UTF-8."""
    data = text.encode("utf-8", errors="surrogateescape")[:SEARCH_SIZE_MAX]
    return data.decode("utf-8", errors="surrogateescape")


def _is_printable(ch: str) -> bool:
    return " " <= ch <= "~" or ord(ch) >= 0x80


class TtyInterface:
    """Prompt, result list and key handling for choosing one candidate."""

    def __init__(
        self,
        tty: Any,
        choices: Choices,
        options: Options,
        output: IO[str] | None = None,
    ) -> None:
        self.tty = tty
        self.choices = choices
        self.options = options
        self.output = output if output is not None else sys.stdout
        self.search = _truncate(options.init_search or "")
        self.last_search = ""
        self.cursor = len(self.search)
        self.ambiguous_key_pending = False
        self.exit_status: int | None = None
        self._input = b""
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="surrogateescape")
        self._keybindings: dict[bytes, Callable[[], None]] = {
            b"\x1b": self._action_exit,
            b"\x7f": self._action_del_char,
            _ctrl("H"): self._action_del_char,
            _ctrl("W"): self._action_del_word,
            _ctrl("U"): self._action_del_all,
            _ctrl("I"): self._action_next,
            _ctrl("C"): self._action_exit,
            _ctrl("D"): self._action_exit,
            _ctrl("G"): self._action_exit,
            _ctrl("M"): self._action_emit,
            _ctrl("P"): self._action_prev,
            _ctrl("N"): self._action_next,
            _ctrl("K"): self._action_prev,
            _ctrl("J"): self._action_next,
            _ctrl("A"): self._action_beginning,
            _ctrl("E"): self._action_end,
            b"\x1bOD": self._action_left,
            b"\x1b[D": self._action_left,
            b"\x1bOC": self._action_right,
            b"\x1b[C": self._action_right,
            b"\x1b[1~": self._action_beginning,
            b"\x1b[H": self._action_beginning,
            b"\x1b[4~": self._action_end,
            b"\x1b[F": self._action_end,
            b"\x1b[A": self._action_prev,
            b"\x1bOA": self._action_prev,
            b"\x1b[B": self._action_next,
            b"\x1bOB": self._action_next,
            b"\x1b[5~": self._action_pageup,
            b"\x1b[6~": self._action_pagedown,
            b"\x1b[200~": self._action_ignore,
            b"\x1b[201~": self._action_ignore,
        }
        self._update_search()

    # Drawing

    def _lines_with_info(self) -> int:
        return self.options.num_lines + (1 if self.options.show_info else 0)

    def _clear(self) -> None:
        tty = self.tty
        tty.set_col(0)
        lines = self._lines_with_info()
        for _ in range(lines):
            tty.newline()
        tty.clear_line()
        if self.options.num_lines > 0:
            tty.move_up(lines)
        tty.flush()

    def _draw_match(self, choice: str, selected: bool) -> None:
        tty = self.tty
        score, positions = match_positions(self.last_search, choice)
        highlighted = set(positions)

        if self.options.show_scores:
            if score == SCORE_MIN:
                tty.write("(     ) ")
            else:
                tty.write(f"({score:5.2f}) ")

        if selected:
            tty.set_invert()

        tty.set_nowrap()
        for index, ch in enumerate(choice):
            tty.set_fg(HIGHLIGHT_COLOR if index in highlighted else Color.NORMAL)
            tty.write(" " if ch == "\n" else ch)
        tty.set_wrap()
        tty.set_normal()

    def draw(self) -> None:
        """Redraw the prompt and the visible part of the result list."""
        tty = self.tty
        choices = self.choices
        options = self.options

        num_lines = options.num_lines
        selection = choices.selection
        start = 0
        if selection + options.scrolloff >= num_lines:
            start = selection + options.scrolloff - num_lines + 1
            available = choices.available()
            if start + num_lines >= available and available > 0:
                start = available - num_lines

        tty.set_col(0)
        tty.write(f"{options.prompt}{self.search}")
        tty.clear_line()

        if options.show_info:
            tty.write(f"\n[{choices.available()}/{len(choices)}]")
            tty.clear_line()

        for i in range(start, start + num_lines):
            tty.write("\n")
            tty.clear_line()
            choice = choices.get(i)
            if choice is not None:
                self._draw_match(choice, i == selection)

        info_lines = self._lines_with_info()
        if info_lines:
            tty.move_up(info_lines)

        tty.set_col(0)
        tty.write(options.prompt + self.search[: self.cursor])
        tty.flush()

    # Search state

    def _update_search(self) -> None:
        self.choices.search(self.search)
        self.last_search = self.search

    def _update_state(self) -> None:
        if self.last_search != self.search:
            self._update_search()
            self.draw()

    def _append_search(self, ch: str) -> None:
        if _byte_length(self.search) < SEARCH_SIZE_MAX:
            self.search = self.search[: self.cursor] + ch + self.search[self.cursor :]
            self.cursor += 1

    # Actions

    def _action_emit(self) -> None:
        self._update_state()
        self._clear()
        self.tty.close()
        selection = self.choices.get(self.choices.selection)
        self.output.write(f"{selection if selection is not None else self.search}\n")
        self.exit_status = 0

    def _action_exit(self) -> None:
        self._clear()
        self.tty.close()
        self.exit_status = 1

    def _action_del_char(self) -> None:
        if self.cursor == 0:
            return
        self.search = self.search[: self.cursor - 1] + self.search[self.cursor :]
        self.cursor -= 1

    def _action_del_word(self) -> None:
        cursor = self.cursor
        while cursor and self.search[cursor - 1] in _WHITESPACE:
            cursor -= 1
        while cursor and self.search[cursor - 1] not in _WHITESPACE:
            cursor -= 1
        self.search = self.search[:cursor] + self.search[self.cursor :]
        self.cursor = cursor

    def _action_del_all(self) -> None:
        self.search = self.search[self.cursor :]
        self.cursor = 0

    def _action_prev(self) -> None:
        self._update_state()
        self.choices.prev()

    def _action_next(self) -> None:
        self._update_state()
        self.choices.next()

    def _action_ignore(self) -> None:
        pass

    def _action_left(self) -> None:
        if self.cursor > 0:
            self.cursor -= 1

    def _action_right(self) -> None:
        if self.cursor < len(self.search):
            self.cursor += 1

    def _action_beginning(self) -> None:
        self.cursor = 0

    def _action_end(self) -> None:
        self.cursor = len(self.search)

    def _action_pageup(self) -> None:
        self._update_state()
        for _ in range(self.options.num_lines):
            if self.choices.selection <= 0:
                break
            self.choices.prev()

    def _action_pagedown(self) -> None:
        self._update_state()
        for _ in range(self.options.num_lines):
            if self.choices.selection >= self.choices.available() - 1:
                break
            self.choices.next()

    # Input

    def handle_input(self, data: bytes, handle_ambiguous_key: bool = False) -> None:
        """Feed raw key bytes; run a keybinding or extend the search."""
        self.ambiguous_key_pending = False
        self._input += data

        found: Callable[[], None] | None = None
        in_middle = False
        for key, action in self._keybindings.items():
            if self._input == key:
                found = action
            elif key.startswith(self._input):
                in_middle = True

        if found is not None and (not in_middle or handle_ambiguous_key):
            self._input = b""
            found()
            return

        if found is not None and in_middle:
            self.ambiguous_key_pending = True
            return

        if in_middle:
            return

        for ch in self._decoder.decode(self._input):
            if _is_printable(ch):
                self._append_search(ch)
        self._input = b""

    def run(self) -> int:
        """Read keys until a choice is made or the user quits; return the exit status."""
        self.draw()
        try:
            while True:
                while True:
                    while not self.tty.input_ready(-1, True):
                        # Woken by a window-size change.
                        self.draw()

                    self.handle_input(self.tty.getchar(), False)
                    if self.exit_status is not None:
                        return self.exit_status

                    self.draw()
                    timeout = KEYTIMEOUT if self.ambiguous_key_pending else 0
                    if not self.tty.input_ready(timeout, False):
                        break

                if self.ambiguous_key_pending:
                    self.handle_input(b"", True)
                    if self.exit_status is not None:
                        return self.exit_status

                self._update_state()
        except EOFError:
            self.tty.close()
            return 1