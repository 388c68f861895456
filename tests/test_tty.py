import fcntl
import os
import select
import signal
import struct
import termios
import time

import pytest

from fuzzyfind.tty import Color, Tty


def _drain(master, timeout=0.5):
    chunks = []
    while True:
        readable, _, _ = select.select([master], [], [], timeout)
        if not readable:
            break
        try:
            data = os.read(master, 4096)
        except OSError:
            break
        if not data:
            break
        chunks.append(data)
        timeout = 0.05
    return b"".join(chunks)


@pytest.fixture
def pair():
    master, slave = os.openpty()
    fcntl.ioctl(master, termios.TIOCSWINSZ, struct.pack("HHHH", 40, 100, 0, 0))
    name = os.ttyname(slave)
    original = termios.tcgetattr(slave)
    yield master, slave, name, original
    os.close(slave)
    os.close(master)


@pytest.fixture
def terminal(pair):
    master, slave, name, original = pair
    tty = Tty(name)
    tty.flush()
    _drain(master)
    yield tty, master, slave
    tty.close()


def _emitted(tty, master, action):
    action()
    tty.flush()
    return _drain(master)


def test_init_resets_attributes(pair):
    master, _, name, _ = pair
    with Tty(name) as tty:
        assert tty.fgcolor == Color.NORMAL
        tty.flush()
        assert _drain(master) == b"\x1b[0m"


def test_size_from_window(terminal):
    tty, _, _ = terminal
    assert tty.width() == 100
    assert tty.height() == 40


def test_raw_mode_and_restore(pair):
    _, slave, name, original = pair
    tty = Tty(name)
    assert tty.height() == 40
    attrs = termios.tcgetattr(slave)
    assert attrs[3] & termios.ICANON == 0
    assert attrs[3] & termios.ECHO == 0
    assert attrs[3] & termios.ISIG == 0
    assert attrs[0] & termios.ICRNL == 0
    tty.close()
    assert tty._closed is True
    assert termios.tcgetattr(slave) == original
    tty.close()
    assert tty._closed is True
    assert termios.tcgetattr(slave) == original


def test_getchar_reads_bytes_without_translation(terminal):
    tty, master, _ = terminal
    os.write(master, b"q\r")
    assert tty.getchar() == b"q"
    assert tty.getchar() == b"\r"


def test_input_ready(terminal):
    tty, master, _ = terminal
    assert tty.input_ready(0, False) is False
    os.write(master, b"x")
    assert tty.input_ready(1000, False) is True
    assert tty.getchar() == b"x"
    assert tty.input_ready(0, True) is False


def test_set_fg_only_on_change(terminal):
    tty, master, _ = terminal
    first = _emitted(tty, master, lambda: tty.set_fg(Color.YELLOW))
    assert first.startswith(b"\x1b[") and first.endswith(b"m")
    assert tty.fgcolor == Color.YELLOW
    assert _emitted(tty, master, lambda: tty.set_fg(Color.YELLOW)) == b""
    tty.set_normal()
    assert tty.fgcolor == Color.NORMAL
    tty.flush()
    _drain(master)
    assert _emitted(tty, master, lambda: tty.set_fg(Color.YELLOW)) == first


def test_cursor_movement(terminal):
    tty, master, _ = terminal
    assert _emitted(tty, master, lambda: tty.set_col(0)) == b"\x1b[1G"
    assert _emitted(tty, master, lambda: tty.move_up(3)) == b"\x1b[3A"


def test_newline_clears_line_first(terminal):
    tty, master, _ = terminal
    cleared = _emitted(tty, master, tty.clear_line)
    newline = _emitted(tty, master, tty.newline)
    assert cleared.startswith(b"\x1b[")
    assert newline.startswith(cleared)
    assert newline.endswith(b"\n")


def test_wrap_and_nowrap_pair(terminal):
    tty, master, _ = terminal
    nowrap = _emitted(tty, master, tty.set_nowrap)
    wrap = _emitted(tty, master, tty.set_wrap)
    assert nowrap[:-1] == wrap[:-1]
    assert nowrap != wrap


def test_invert_and_underline_are_sgr(terminal):
    tty, master, _ = terminal
    invert = _emitted(tty, master, tty.set_invert)
    underline = _emitted(tty, master, tty.set_underline)
    assert invert.startswith(b"\x1b[") and invert.endswith(b"m")
    assert underline.startswith(b"\x1b[") and underline.endswith(b"m")
    assert invert != underline


def test_write_unicode(terminal):
    tty, master, _ = terminal
    assert _emitted(tty, master, lambda: tty.write("héllo")) == "héllo".encode()


def test_output_is_buffered_until_flush(terminal):
    tty, master, _ = terminal
    tty.write("abc")
    assert _drain(master, timeout=0.1) == b""
    tty.flush()
    assert _drain(master) == b"abc"


def test_signal_interrupts_wait(terminal):
    tty, _, _ = terminal
    os.kill(os.getpid(), signal.SIGWINCH)
    assert tty.input_ready(0, False) is False
    start = time.monotonic()
    assert tty.input_ready(2000, True) is False
    assert time.monotonic() - start < 1.0


def test_close_restores_signal_handler(pair):
    _, _, name, _ = pair
    before = signal.getsignal(signal.SIGWINCH)
    with Tty(name) as tty:
        assert signal.getsignal(signal.SIGWINCH) is not before
    assert signal.getsignal(signal.SIGWINCH) is before
    assert tty._closed is True


def test_missing_device_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        Tty(str(tmp_path / "no-such-tty"))