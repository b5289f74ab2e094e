from __future__ import annotations

import zlib
from typing import Callable

import pytest

from nntpwire.channel import LineChannel
from nntpwire.errors import NNTPDecodeError, NNTPProtocolError
from nntpwire.reader import DotReader, ZlibDotReader

ChannelFactory = Callable[[bytes], LineChannel]


def stuff(line: bytes) -> bytes:
    return b"." + line if line.startswith(b".") else line


def test_dot_reader(make_channel: ChannelFactory) -> None:
    channel = make_channel(
        b"Blah, blah.\r\n..A single leading .\r\nFin.\r\n.\r\nnext\r\n"
    )
    with DotReader(channel) as reader:
        body = reader.read()
        assert reader.finished
    assert body == b"Blah, blah.\r\n.A single leading .\r\nFin.\r\n"
    assert channel.read_line() == b"next"


def test_dot_reader_empty_body(make_channel: ChannelFactory) -> None:
    reader = DotReader(make_channel(b".\r\n"))
    assert reader.read() == b""
    assert reader.finished


def test_dot_reader_lines(make_channel: ChannelFactory) -> None:
    reader = DotReader(make_channel(b"first line\r\nsecond\r\n.\r\n"))
    assert list(reader) == [b"first line\r\n", b"second\r\n"]


def test_dot_reader_readline_size(make_channel: ChannelFactory) -> None:
    reader = DotReader(make_channel(b"abcdef\r\n.\r\n"))
    assert reader.readline(4) == b"abcd"
    assert reader.readline() == b"ef\r\n"
    assert reader.readline() == b""


def test_dot_reader_small_reads(make_channel: ChannelFactory) -> None:
    reader = DotReader(make_channel(b"abc\r\nde\r\n.\r\n"))
    chunks = []
    while True:
        chunk = reader.read(2)
        if not chunk:
            break
        chunks.append(chunk)
    assert chunks == [b"ab", b"c\r", b"\n", b"de", b"\r\n"]


@pytest.mark.parametrize(
    "line",
    [b".", b"..", b".hidden", b"..double", b"...", b"plain", b""],
)
def test_dot_stuffing_round_trip(make_channel: ChannelFactory, line: bytes) -> None:
    reader = DotReader(make_channel(stuff(line) + b"\r\n.\r\n"))
    assert reader.next_line() == line
    assert reader.next_line() is None


def test_dot_reader_drain_on_close(make_channel: ChannelFactory) -> None:
    channel = make_channel(b"one\r\ntwo\r\nthree\r\n.\r\n224 next\r\n")
    reader = DotReader(channel)
    assert reader.readline() == b"one\r\n"
    reader.close()
    assert reader.finished
    assert channel.read_line() == b"224 next"


def test_dot_reader_closed(make_channel: ChannelFactory) -> None:
    reader = DotReader(make_channel(b".\r\n"))
    reader.close()
    reader.close()
    with pytest.raises(ValueError):
        reader.read()


OVERVIEW = (
    b"10\tSubject10\tAuthor <author@server>\tSat, 18 Oct 2003 18:00:00 +0030"
    b"\t<d@e.f>\t\t1000\t9\r\n"
    b"11\tSubject11\t\t18 Oct 2003 19:00:00 +0030\t<e@f.g>\t<d@e.f> <a@b.c>"
    b"\t2000\t18\tExtra stuff\r\n"
)


def test_zlib_dot_reader(make_channel: ChannelFactory) -> None:
    channel = make_channel(zlib.compress(OVERVIEW) + b".\r\n205 bye\r\n")
    with ZlibDotReader(channel) as reader:
        lines = list(reader)
    assert reader.finished
    assert b"".join(lines) == OVERVIEW
    assert lines[1].startswith(b"11\t")
    assert channel.read_line() == b"205 bye"


def test_zlib_dot_reader_gzip(make_channel: ChannelFactory) -> None:
    compress = zlib.compressobj(wbits=zlib.MAX_WBITS | 16)
    data = compress.compress(OVERVIEW) + compress.flush()
    channel = make_channel(data + b".\r\n")
    with ZlibDotReader(channel) as reader:
        assert reader.read() == OVERVIEW


def test_zlib_dot_reader_drain_on_close(make_channel: ChannelFactory) -> None:
    channel = make_channel(zlib.compress(OVERVIEW * 50) + b".\r\n205 bye\r\n")
    reader = ZlibDotReader(channel)
    assert reader.readline().startswith(b"10\t")
    reader.close()
    assert reader.finished
    assert channel.read_line() == b"205 bye"


def test_zlib_dot_reader_bad_terminator(make_channel: ChannelFactory) -> None:
    channel = make_channel(zlib.compress(OVERVIEW) + b"224 oops\r\n")
    reader = ZlibDotReader(channel)
    assert reader.read() == OVERVIEW
    with pytest.raises(NNTPProtocolError) as excinfo:
        reader.close()
    assert excinfo.value.line == b"224 oops"
    assert reader.closed


def test_zlib_dot_reader_corrupt(make_channel: ChannelFactory) -> None:
    data = bytearray(zlib.compress(OVERVIEW))
    data[-1] ^= 0xFF  # break the checksum
    reader = ZlibDotReader(make_channel(bytes(data) + b".\r\n"))
    with pytest.raises(NNTPDecodeError):
        reader.close()
    assert not reader.finished


def test_zlib_dot_reader_garbage(make_channel: ChannelFactory) -> None:
    reader = ZlibDotReader(make_channel(b"this is not compressed\r\n.\r\n"))
    with pytest.raises(NNTPDecodeError):
        reader.read()
    reader.close()


def test_reader_close_after_connection_closed(make_channel: ChannelFactory) -> None:
    channel = make_channel(b"one\r\ntwo\r\n")
    reader = DotReader(channel)
    assert reader.readline() == b"one\r\n"
    channel.close()
    reader.close()
    assert reader.closed
    assert not reader.finished
