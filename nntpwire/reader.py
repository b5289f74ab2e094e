"""
Readers for the multi-line bodies that follow NNTP status lines.
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

import io
import logging
import zlib
from typing import Any

from .channel import CRLF, LineChannel
from .errors import NNTPDecodeError, NNTPProtocolError

__all__ = ["BodyReader", "DotReader", "ZlibDotReader"]


log = logging.getLogger(__name__)


class BodyReader(io.RawIOBase):
    """Base class for response body readers.

    A body reader is a read-only binary file object over the body of a single
    response. Subclasses produce the body in chunks from _next_chunk() and
    know how to skip whatever is left of the body in _drain().

    Closing a reader drains it, so that the connection is positioned at the
    start of the next response even if the body was not fully read. Nothing
    is drained once the connection itself has been closed.
    """

    def __init__(self, channel: LineChannel) -> None:
        super().__init__()
        self._channel = channel
        self._pending = b""
        self._exhausted = False

    @property
    def finished(self) -> bool:
        """True once the body terminator has been consumed."""
        raise NotImplementedError

    def _next_chunk(self) -> bytes | None:
        """Return the next non-empty chunk of the body or None at the end."""
        raise NotImplementedError

    def _drain(self) -> None:
        raise NotImplementedError

    def _fill(self) -> bool:
        while not self._pending:
            if self._exhausted:
                return False
            chunk = self._next_chunk()
            if chunk is None:
                self._exhausted = True
                return False
            self._pending = chunk
        return True

    def readable(self) -> bool:
        return True

    def readinto(self, b: Any) -> int:
        if self.closed:
            raise ValueError("I/O operation on closed body")
        if not self._fill():
            return 0
        n = min(len(b), len(self._pending))
        b[:n] = self._pending[:n]
        self._pending = self._pending[n:]
        return n

    def readline(self, size: int | None = -1) -> bytes:
        if self.closed:
            raise ValueError("I/O operation on closed body")
        if size is None:
            size = -1
        line = bytearray()
        while (size < 0 or len(line) < size) and self._fill():
            end = self._pending.find(b"\n") + 1 or len(self._pending)
            if size >= 0:
                end = min(end, size - len(line))
            line += self._pending[:end]
            self._pending = self._pending[end:]
            if line.endswith(b"\n"):
                break
        return bytes(line)

    def close(self) -> None:
        if self.closed:
            return
        try:
            # nothing left to drain once the connection is gone
            if not self._channel.closed:
                self._drain()
        finally:
            self._pending = b""
            super().close()


class DotReader(BodyReader):
    """Reader for a dot terminated, dot stuffed body.

    Each content line is presented followed by CRLF. A line consisting of a
    single period ends the body and a leading doubled period is reduced to a
    single one.
    """

    def __init__(self, channel: LineChannel) -> None:
        super().__init__(channel)
        self._eof = False

    @property
    def finished(self) -> bool:
        return self._eof

    def next_line(self) -> bytes | None:
        """Reads the next content line.

        Returns:
            The unstuffed line without its terminator, or None once the
            terminating line has been read.
        """
        if self._eof:
            return None
        line = self._channel.read_line()
        if line == b".":
            self._eof = True
            return None
        if line.startswith(b".."):
            return line[1:]
        return line

    def _next_chunk(self) -> bytes | None:
        line = self.next_line()
        if line is None:
            return None
        return line + CRLF

    def _drain(self) -> None:
        count = 0
        while self.next_line() is not None:
            count += 1
        if count:
            log.debug("Discarded %d unread body lines", count)


class ZlibDotReader(BodyReader):
    """Reader for a compressed body.

    The server sends a compressed stream directly after the status line,
    followed by a terminating line in clear text. The end of the compressed
    data is found by the decompressor itself, and only then is the clear
    terminating line read.

    By default zlib and gzip framing are both accepted.
    """

    def __init__(
        self, channel: LineChannel, wbits: int = zlib.MAX_WBITS | 32
    ) -> None:
        super().__init__(channel)
        self._inflate = zlib.decompressobj(wbits)
        self._broken = False
        self._dot_read = False

    @property
    def finished(self) -> bool:
        return self._dot_read

    def _next_chunk(self) -> bytes | None:
        while not self._inflate.eof:
            data = self._channel.read_some()
            try:
                data = self._inflate.decompress(data)
            except zlib.error as e:
                self._broken = True
                raise NNTPDecodeError(f"Decompression failed: {e}") from e
            if self._inflate.eof:
                # anything past the compressed stream belongs to the clear text
                self._channel.unread(self._inflate.unused_data)
            if data:
                return data
        return None

    def _read_dot(self) -> None:
        if self._dot_read:
            return
        self._dot_read = True
        line = self._channel.read_line()
        if line != b".":
            raise NNTPProtocolError(f'expected "." on a line, got {line!r}', line)

    def _drain(self) -> None:
        if self._broken:
            return
        discarded = 0
        while True:
            chunk = self._next_chunk()
            if chunk is None:
                break
            discarded += len(chunk)
        if discarded:
            log.debug("Discarded %d unread decompressed bytes", discarded)
        self._read_dot()
