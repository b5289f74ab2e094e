from __future__ import annotations

from typing import Callable

import pytest

from nntpwire.channel import LineChannel
from nntpwire.errors import NNTPConnectionError
from nntpwire.fifo import BytesFifo


def test_fifo_readline() -> None:
    fifo = BytesFifo(b"one\r\ntw")
    assert fifo.readline() == b"one\r\n"
    assert fifo.readline() == b""
    fifo.write(b"o\r\n")
    assert fifo.readline() == b"two\r\n"
    assert len(fifo) == 0


def test_fifo_unread() -> None:
    fifo = BytesFifo(b"abcdef")
    assert fifo.read(3) == b"abc"
    fifo.unread(b"xyz")
    assert fifo.read() == b"xyzdef"


def test_read_line(make_channel: Callable[[bytes], LineChannel]) -> None:
    channel = make_channel(b"200 hello there\r\n.\r\nbare\n\r\n")
    assert channel.read_line() == b"200 hello there"
    assert channel.read_line() == b"."
    assert channel.read_line() == b"bare"
    assert channel.read_line() == b""


def test_read_line_end_of_stream(
    make_channel: Callable[[bytes], LineChannel],
) -> None:
    channel = make_channel(b"partial")
    with pytest.raises(NNTPConnectionError):
        channel.read_line()


def test_read_some_and_unread(make_channel: Callable[[bytes], LineChannel]) -> None:
    channel = make_channel(b"0123456789\r\n")
    data = channel.read_some()
    assert data == b"0123456"
    channel.unread(data[3:])
    assert channel.read_line() == b"3456789"


def test_write_line(make_channel: Callable[[bytes], LineChannel]) -> None:
    channel = make_channel(b"")
    channel.write_line("GROUP alt.test")
    channel.write_line(b"QUIT")
    assert channel.socket.sent == b"GROUP alt.test\r\nQUIT\r\n"  # type: ignore[attr-defined]
