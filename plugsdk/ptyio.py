"""A minimal pseudo-terminal pair."""

from __future__ import annotations

import fcntl
import os
import struct
import termios
from typing import BinaryIO

__all__ = ["Pty", "open_pty"]


class Pty:
    """A pseudo-terminal.

    ``in_pipe`` is the terminal side a process reads from and writes to;
    ``out_pipe`` is the controlling side that sees what the process writes.
    """

    def __init__(self, in_pipe: BinaryIO, out_pipe: BinaryIO) -> None:
        self.in_pipe = in_pipe
        self.out_pipe = out_pipe

    def resize(self, cols: int, rows: int) -> None:
        """Set the window size of the terminal."""
        size = struct.pack("HHHH", rows, cols, 0, 0)
        fcntl.ioctl(self.in_pipe.fileno(), termios.TIOCSWINSZ, size)

    def close(self) -> None:
        """Close both sides of the terminal."""
        for pipe in (self.out_pipe, self.in_pipe):
            try:
                pipe.close()
            except OSError:
                pass

    def __enter__(self) -> Pty:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


def open_pty() -> Pty:
    """Open a new pseudo-terminal."""
    master, slave = os.openpty()
    out_pipe = os.fdopen(master, "r+b", buffering=0)
    in_pipe = os.fdopen(slave, "r+b", buffering=0)
    return Pty(in_pipe=in_pipe, out_pipe=out_pipe)