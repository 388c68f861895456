"""Raw-mode terminal access and ANSI output."""

from __future__ import annotations

import enum
import fcntl
import os
import select
import signal
import struct
import sys
import termios
from types import TracebackType

from .options import DEFAULT_TTY

_ESC = "\x1b["
_OUTPUT_BUFFER = 16384


class Color(enum.IntEnum):
    """ANSI foreground colour numbers."""

    BLACK = 0
    RED = 1
    GREEN = 2
    YELLOW = 3
    BLUE = 4
    MAGENTA = 5
    CYAN = 6
    WHITE = 7
    NORMAL = 9


def _ignore_signal(signum: int, frame: object) -> None:
    """Handler that only makes the signal wake up select."""


class Tty:
    """A terminal opened in raw mode for reading keys and drawing output."""

    def __init__(self, filename: str = DEFAULT_TTY) -> None:
        self._closed = False
        self._fdin = os.open(filename, os.O_RDONLY | os.O_NOCTTY)
        try:
            out_fd = os.open(filename, os.O_WRONLY | os.O_NOCTTY)
            self._out = open(
                out_fd,
                "w",
                buffering=_OUTPUT_BUFFER,
                encoding="utf-8",
                errors="surrogateescape",
                newline="",
            )
            self._original = termios.tcgetattr(self._fdin)
        except BaseException:
            os.close(self._fdin)
            raise

        raw = termios.tcgetattr(self._fdin)
        raw[0] &= ~termios.ICRNL
        raw[3] &= ~(termios.ICANON | termios.ECHO | termios.ISIG)
        try:
            termios.tcsetattr(self._fdin, termios.TCSANOW, raw)
        except termios.error as err:
            print(f"tcsetattr: {err}", file=sys.stderr)

        self.maxwidth = 80
        self.maxheight = 25
        self.update_size()

        self.fgcolor = Color.NORMAL
        self.set_normal()

        self._wake_r: int | None = None
        self._wake_w: int | None = None
        self._prev_handler: object = None
        self._prev_wakeup = -1
        self._install_winch_handler()

    def _install_winch_handler(self) -> None:
        wake_r, wake_w = os.pipe()
        os.set_blocking(wake_r, False)
        os.set_blocking(wake_w, False)
        try:
            self._prev_handler = signal.signal(signal.SIGWINCH, _ignore_signal)
            self._prev_wakeup = signal.set_wakeup_fd(wake_w, warn_on_full_buffer=False)
        except ValueError:
            # Signals can only be handled from the main thread.
            os.close(wake_r)
            os.close(wake_w)
            return
        self._wake_r, self._wake_w = wake_r, wake_w

    def _restore_winch_handler(self) -> None:
        if self._wake_r is None or self._wake_w is None:
            return
        signal.set_wakeup_fd(self._prev_wakeup)
        signal.signal(signal.SIGWINCH, self._prev_handler)  # type: ignore[arg-type]
        os.close(self._wake_r)
        os.close(self._wake_w)
        self._wake_r = self._wake_w = None

    def _drain_wakeup(self) -> None:
        if self._wake_r is None:
            return
        try:
            while os.read(self._wake_r, 512):
                pass
        except BlockingIOError:
            pass

    def __enter__(self) -> Tty:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    def reset(self) -> None:
        """Restore the terminal settings found when it was opened."""
        termios.tcsetattr(self._fdin, termios.TCSANOW, self._original)

    def close(self) -> None:
        """Restore the terminal and close it; safe to call more than once."""
        if self._closed:
            return
        self._closed = True
        try:
            self.reset()
        finally:
            self._out.close()
            os.close(self._fdin)
            self._restore_winch_handler()

    def update_size(self) -> None:
        """Query the window size, falling back to 80x25."""
        try:
            packed = fcntl.ioctl(self._out.fileno(), termios.TIOCGWINSZ, b"\0" * 8)
        except OSError:
            self.maxwidth, self.maxheight = 80, 25
            return
        rows, cols, _, _ = struct.unpack("HHHH", packed)
        self.maxwidth, self.maxheight = cols, rows

    def getchar(self) -> bytes:
        """Read one byte from the terminal, blocking until it arrives."""
        data = os.read(self._fdin, 1)
        if not data:
            raise EOFError("end of input on tty")
        return data

    def input_ready(self, timeout: int, return_on_signal: bool) -> bool:
        """Wait up to ``timeout`` ms (forever if negative) for input.

        Returns False on timeout, or when a window-size signal arrives and
        ``return_on_signal`` is true.
        """
        watched = [self._fdin]
        if return_on_signal and self._wake_r is not None:
            watched.append(self._wake_r)
        seconds = None if timeout < 0 else timeout / 1000
        readable, _, _ = select.select(watched, [], [], seconds)
        if self._wake_r is not None and self._wake_r in readable:
            self._drain_wakeup()
            return False
        return self._fdin in readable

    def _sgr(self, code: int) -> None:
        self.write(f"{_ESC}{code}m")

    def set_fg(self, fg: int) -> None:
        """Switch the foreground colour, writing nothing if it is unchanged."""
        if self.fgcolor != fg:
            self._sgr(30 + fg)
            self.fgcolor = Color(fg)

    def set_invert(self) -> None:
        self._sgr(7)

    def set_underline(self) -> None:
        self._sgr(4)

    def set_normal(self) -> None:
        """Reset all attributes."""
        self._sgr(0)
        self.fgcolor = Color.NORMAL

    def set_nowrap(self) -> None:
        self.write(f"{_ESC}?7l")

    def set_wrap(self) -> None:
        self.write(f"{_ESC}?7h")

    def newline(self) -> None:
        """Clear to the end of the line and move to the next one."""
        self.write(f"{_ESC}K\n")

    def clear_line(self) -> None:
        """Clear to the end of the line without moving the cursor."""
        self.write(f"{_ESC}K")

    def set_col(self, col: int) -> None:
        """Move the cursor to zero-based column ``col``."""
        self.write(f"{_ESC}{col + 1}G")

    def move_up(self, i: int) -> None:
        self.write(f"{_ESC}{i}A")

    def write(self, text: str) -> None:
        self._out.write(text)

    def flush(self) -> None:
        self._out.flush()

    def width(self) -> int:
        return self.maxwidth

    def height(self) -> int:
        return self.maxheight