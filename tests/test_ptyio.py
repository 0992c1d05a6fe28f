import os
import select

from plugsdk.ptyio import open_pty


def _read_available(fd, timeout=2.0):
    data = b""
    while True:
        ready, _, _ = select.select([fd], [], [], timeout)
        if not ready:
            return data
        chunk = os.read(fd, 1024)
        if not chunk:
            return data
        data += chunk
        timeout = 0.2


def test_open_pty_returns_terminal_pair():
    with open_pty() as pty:
        in_fd = pty.in_pipe.fileno()
        out_fd = pty.out_pipe.fileno()
        assert in_fd != out_fd
        assert os.isatty(in_fd)
        assert os.isatty(out_fd)
        assert os.ttyname(in_fd).startswith("/dev/")


def test_written_data_reaches_out_pipe():
    with open_pty() as pty:
        pty.in_pipe.write(b"hello")
        data = _read_available(pty.out_pipe.fileno())
        assert b"hello" in data


def test_resize_sets_window_size():
    with open_pty() as pty:
        pty.resize(100, 40)
        size = os.get_terminal_size(pty.in_pipe.fileno())
        assert (size.columns, size.lines) == (100, 40)


def test_resize_again_changes_size():
    with open_pty() as pty:
        pty.resize(80, 24)
        pty.resize(132, 50)
        size = os.get_terminal_size(pty.in_pipe.fileno())
        assert (size.columns, size.lines) == (132, 50)


def test_close_closes_both_and_is_repeatable():
    pty = open_pty()
    pty.close()
    assert pty.in_pipe.closed
    assert pty.out_pipe.closed
    pty.close()
    assert pty.in_pipe.closed


def test_context_manager_closes():
    with open_pty() as pty:
        pass
    assert pty.in_pipe.closed and pty.out_pipe.closed