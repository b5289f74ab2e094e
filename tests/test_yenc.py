from __future__ import annotations

from typing import Callable

import pytest

from nntpwire.channel import LineChannel
from nntpwire.errors import NNTPFormatError
from nntpwire.reader import DotReader
from nntpwire.yenc import YEnc, YEncReader, YEncState

ChannelFactory = Callable[[bytes], LineChannel]


def yenc_encode(data: bytes) -> bytes:
    out = bytearray()
    for b in data:
        c = (b + 42) & 0xFF
        if c in (0x00, 0x0A, 0x0D, 0x3D):
            out += bytes([0x3D, (c + 64) & 0xFF])
        else:
            out.append(c)
    return bytes(out)


def yenc_body(*lines: bytes) -> bytes:
    return (
        b"=ybegin line=128 size=2 name=hi.txt\r\n"
        + b"".join(line + b"\r\n" for line in lines)
        + b"=yend size=2\r\n.\r\n"
    )


def test_decode() -> None:
    assert YEnc().decode(b"r\x93") == b"Hi"


def test_decode_escape() -> None:
    # NUL, LF, CR and '=' are always escaped
    assert YEnc().decode(b"=@=J=M=}") == b"\xd6\xe0\xe3\x13"


def test_decode_escape_across_lines() -> None:
    decoder = YEnc()
    assert decoder.decode(b"r=") == b"H"
    assert decoder.decode(b"@r") == b"\xd6H"


def test_decode_all_bytes() -> None:
    data = bytes(range(256)) * 2
    assert YEnc().decode(yenc_encode(data)) == data


def test_reader(make_channel: ChannelFactory) -> None:
    channel = make_channel(yenc_body(yenc_encode(b"Hi")) + b"205 bye\r\n")
    with YEncReader(DotReader(channel)) as reader:
        assert reader.read() == b"Hi"
        assert reader.state is YEncState.DONE
    assert reader.finished
    assert channel.read_line() == b"205 bye"


def test_reader_multiple_lines(make_channel: ChannelFactory) -> None:
    data = bytes(range(256))
    encoded = yenc_encode(data)
    lines = [encoded[i : i + 64] for i in range(0, len(encoded), 64)]
    reader = YEncReader(DotReader(make_channel(yenc_body(*lines))))
    assert reader.read() == data


def test_reader_escape_only_line(make_channel: ChannelFactory) -> None:
    reader = YEncReader(DotReader(make_channel(yenc_body(b"r=", b"@"))))
    assert reader.read() == b"H\xd6"


def test_reader_ypart_is_data(make_channel: ChannelFactory) -> None:
    reader = YEncReader(DotReader(make_channel(yenc_body(b"=ypart"))))
    assert reader.read() == YEnc().decode(b"=ypart")


def test_reader_missing_header(make_channel: ChannelFactory) -> None:
    channel = make_channel(b"not yenc\r\nat all\r\n.\r\n205 bye\r\n")
    reader = YEncReader(DotReader(channel))
    with pytest.raises(NNTPFormatError, match="expected =ybegin") as excinfo:
        reader.read()
    assert excinfo.value.line == b"not yenc"
    assert not reader.finished
    reader.close()
    assert reader.finished
    assert channel.read_line() == b"205 bye"


def test_reader_missing_trailer(make_channel: ChannelFactory) -> None:
    reader = YEncReader(DotReader(make_channel(b"=ybegin name=x\r\nr\x93\r\n.\r\n")))
    with pytest.raises(NNTPFormatError, match="missing =yend"):
        reader.read()
    assert reader.finished


def test_reader_drain_on_close(make_channel: ChannelFactory) -> None:
    channel = make_channel(
        yenc_body(yenc_encode(b"Hi"), yenc_encode(b"there")) + b"205 bye\r\n"
    )
    reader = YEncReader(DotReader(channel))
    assert reader.read(1) == b"H"
    reader.close()
    assert reader.finished
    assert channel.read_line() == b"205 bye"


def test_reader_close_unread(make_channel: ChannelFactory) -> None:
    channel = make_channel(yenc_body(yenc_encode(b"Hi")) + b"205 bye\r\n")
    YEncReader(DotReader(channel)).close()
    assert channel.read_line() == b"205 bye"
