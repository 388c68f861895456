import io

import pytest

from fuzzyfind.choices import Choices
from fuzzyfind.interface import SEARCH_SIZE_MAX, TtyInterface
from fuzzyfind.options import Options
from fuzzyfind.tty import Color


class FakeTty:
    def __init__(self, keys=b""):
        self.keys = list(keys)
        self.chunks = []
        self.closed = False

    @property
    def text(self):
        return "".join(self.chunks)

    def write(self, text):
        self.chunks.append(text)

    def set_col(self, col):
        self.write(f"\x1b[{col + 1}G")

    def clear_line(self):
        self.write("\x1b[K")

    def newline(self):
        self.write("\x1b[K\n")

    def move_up(self, i):
        self.write(f"\x1b[{i}A")

    def set_fg(self, fg):
        self.write(f"<fg{int(fg)}>")

    def set_invert(self):
        self.write("<invert>")

    def set_underline(self):
        self.write("<underline>")

    def set_normal(self):
        self.write("<normal>")

    def set_nowrap(self):
        self.write("<nowrap>")

    def set_wrap(self):
        self.write("<wrap>")

    def flush(self):
        pass

    def close(self):
        self.closed = True

    def input_ready(self, timeout, return_on_signal):
        if timeout < 0:
            return True
        return bool(self.keys)

    def getchar(self):
        if not self.keys:
            raise EOFError
        return bytes([self.keys.pop(0)])


def make(strings=("tags", "test"), keys=b"", **opts):
    tty = FakeTty(keys)
    choices = Choices(workers=1)
    for s in strings:
        choices.add(s)
    out = io.StringIO()
    iface = TtyInterface(tty, choices, Options(**opts), out)
    return iface, tty, out


def test_enter_emits_best_match():
    iface, tty, out = make(keys=b"ts\r")
    assert iface.run() == 0
    assert out.getvalue() == "test\n"
    assert tty.closed


def test_enter_without_match_emits_query():
    iface, tty, out = make(keys=b"zz\r")
    assert iface.run() == 0
    assert out.getvalue() == "zz\n"


def test_down_arrow_selects_next():
    iface, tty, out = make(keys=b"\x1b[B\r")
    assert iface.run() == 0
    assert out.getvalue() == "test\n"


def test_lone_escape_exits_with_failure():
    iface, tty, out = make(keys=b"\x1b")
    assert iface.run() == 1
    assert out.getvalue() == ""
    assert tty.closed


def test_ctrl_c_exits():
    iface, tty, out = make(keys=b"\x03")
    assert iface.run() == 1
    assert tty.closed


def test_end_of_input_fails():
    iface, tty, out = make(keys=b"")
    assert iface.run() == 1
    assert tty.closed


def test_initial_search_is_applied():
    iface, _, _ = make(init_search="te")
    assert iface.search == "te"
    assert iface.cursor == 2
    assert iface.choices.available() == 1


def test_ctrl_w_deletes_word():
    iface, _, _ = make(init_search="foo bar")
    iface.handle_input(b"\x17", False)
    assert iface.search == "foo "
    assert iface.cursor == len("foo ")


def test_ctrl_u_deletes_before_cursor():
    iface, _, _ = make(init_search="abc")
    iface.handle_input(b"\x1b[D", False)
    assert iface.cursor == 2
    iface.handle_input(b"\x15", False)
    assert iface.search == "c"
    assert iface.cursor == 0


@pytest.mark.parametrize("key", [b"\x7f", b"\x08"])
def test_backspace_deletes_previous_character(key):
    iface, _, _ = make(init_search="abc")
    iface.handle_input(key, False)
    assert iface.search == "ab"
    assert iface.cursor == 2


def test_multibyte_character_moves_as_one():
    iface, _, _ = make()
    iface.handle_input(b"\xc3", False)
    iface.handle_input(b"\xa9", False)
    assert iface.search == "é"
    assert iface.cursor == 1
    iface.handle_input(b"\x1bOD", False)
    assert iface.cursor == 0
    iface.handle_input(b"\x1bOC", False)
    assert iface.cursor == 1
    iface.handle_input(b"\x7f", False)
    assert iface.search == ""


def test_unbound_control_character_is_ignored():
    iface, _, _ = make(init_search="ab")
    iface.handle_input(b"\x02", False)
    assert iface.search == "ab"
    assert iface.exit_status is None


def test_ambiguous_escape_waits_then_exits():
    iface, tty, _ = make()
    iface.handle_input(b"\x1b", False)
    assert iface.ambiguous_key_pending
    assert iface.exit_status is None
    iface.handle_input(b"", True)
    assert iface.exit_status == 1
    assert tty.closed


def test_home_and_end():
    iface, _, _ = make(init_search="abc")
    iface.handle_input(b"\x01", False)
    assert iface.cursor == 0
    iface.handle_input(b"\x05", False)
    assert iface.cursor == len("abc")


def test_page_down_and_up_move_by_page():
    iface, _, _ = make(strings=["a1", "a2", "a3", "a4", "a5"], num_lines=3)
    iface.handle_input(b"\x1b[6~", False)
    assert iface.choices.selection == 3
    iface.handle_input(b"\x1b[5~", False)
    assert iface.choices.selection == 0


def test_search_is_limited_in_size():
    iface, _, _ = make(init_search="a" * (SEARCH_SIZE_MAX + 10))
    assert len(iface.search) == SEARCH_SIZE_MAX
    iface.handle_input(b"b", False)
    assert iface.search == "a" * SEARCH_SIZE_MAX


def test_draw_shows_prompt_info_and_highlight():
    iface, tty, _ = make(init_search="te", show_info=True, prompt="$ ")
    iface.draw()
    assert "$ te" in tty.text
    assert "[1/2]" in tty.text
    assert f"<fg{int(Color.YELLOW)}>t" in tty.text
    assert "<invert>" in tty.text


def test_draw_shows_blank_score_for_empty_query():
    iface, tty, _ = make(show_scores=True)
    iface.draw()
    assert tty.text.count("(     ) ") == 2