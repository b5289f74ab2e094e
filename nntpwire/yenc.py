"""
Basic yEnc decoder.
Copyright (C) 2013-2024  Byron Platt

This program is free software: you can redistribute it and/or modify
it under the terms of the GNU General Public License as published by
the Free Software Foundation, either version 3 of the License, or
(at your option) any later version.

This program is distributed in the hope that it will be useful,
but WITHOUT ANY WARRANTY; without even the implied warranty of
MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
GNU General Public License for more details.

You should have received a copy of the GNU General Public License
along with this program.  If not, see <http://www.gnu.org/licenses/>.
"""

from __future__ import annotations

from enum import Enum

from .errors import NNTPFormatError
from .reader import BodyReader, DotReader

__all__ = ["YBEGIN", "YEND", "YEnc", "YEncReader", "YEncState"]


YBEGIN = b"=ybegin"
YEND = b"=yend"

_ESCAPE = 0x3D
_OFFSET = 42
_ESCAPE_OFFSET = 64


class YEnc:
    """A basic yEnc decoder.

    The escape state is kept between calls so an escape character at the end
    of one line applies to the first character of the next.

    Note:
        CRC values are not checked and multi-part headers are not recognised.
    """

    def __init__(self) -> None:
        self._escape = False

    def decode(self, line: bytes) -> bytes:
        """Decode a line of yEnc data with its line terminator removed."""
        buf = bytearray(line)
        j = 0
        for i in range(len(buf)):
            b = buf[i]
            if self._escape:
                buf[j] = (((b - _OFFSET) & 0xFF) - _ESCAPE_OFFSET) & 0xFF
                self._escape = False
            elif b == _ESCAPE:
                self._escape = True
                continue
            else:
                buf[j] = (b - _OFFSET) & 0xFF
            j += 1
        del buf[j:]
        return bytes(buf)


class YEncState(Enum):
    AWAITING_HEADER = "awaiting header"
    DECODING = "decoding"
    DONE = "done"


class YEncReader(BodyReader):
    """Reader for a single part yEnc body.

    Reads lines from a DotReader and presents the decoded binary data. The
    first line must be a =ybegin header and the data ends at the =yend
    trailer. Closing the reader skips the rest of the yEnc data and then the
    rest of the body.
    """

    def __init__(self, source: DotReader) -> None:
        super().__init__(source._channel)
        self._source = source
        self._decoder = YEnc()
        self.state = YEncState.AWAITING_HEADER

    @property
    def finished(self) -> bool:
        return self._source.finished

    def _next_line(self) -> bytes:
        line = self._source.next_line()
        if line is None:
            self.state = YEncState.DONE
            raise NNTPFormatError("missing =yend trailer")
        return line

    def _next_chunk(self) -> bytes | None:
        while self.state is not YEncState.DONE:
            line = self._next_line()

            if self.state is YEncState.AWAITING_HEADER:
                if not line.startswith(YBEGIN):
                    self.state = YEncState.DONE
                    raise NNTPFormatError(f"expected =ybegin, got {line!r}", line)
                self.state = YEncState.DECODING
                continue

            if line.startswith(YEND):
                self.state = YEncState.DONE
                break

            data = self._decoder.decode(line)
            if data:
                return data

        return None

    def _drain(self) -> None:
        try:
            if self.state is YEncState.DECODING:
                while self._next_chunk() is not None:
                    pass
        finally:
            self._source.close()
