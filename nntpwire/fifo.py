"""
A reasonably efficient FIFO byte buffer.
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

__all__ = ["BytesFifo"]


_DISCARD_SIZE = 0xFFFF


class BytesFifo:
    """Byte buffer that is written at the back and read from the front.

    Writes are collected in a list and only joined when a read needs them.
    Consumed data is discarded lazily once enough of it has piled up.
    """

    eol = b"\n"

    def __init__(self, data: bytes | None = None) -> None:
        self.buf = data or b""
        self.buflist: list[bytes] = []
        self.pos = 0

    def __len__(self) -> int:
        return len(self.buf) - self.pos + sum(map(len, self.buflist))

    def __discard(self) -> None:
        if self.pos > _DISCARD_SIZE:
            self.buf = self.buf[self.pos :]
            self.pos = 0

    def __append(self) -> None:
        if self.buflist:
            self.buf += b"".join(self.buflist)
            self.buflist = []

    def clear(self) -> None:
        self.buf = b""
        self.buflist = []
        self.pos = 0

    def write(self, data: bytes) -> None:
        if data:
            self.buflist.append(data)

    def unread(self, data: bytes) -> None:
        """Put data back at the front of the buffer."""
        if data:
            self.__append()
            self.buf = data + self.buf[self.pos :]
            self.pos = 0

    def read(self, length: int = 0) -> bytes:
        """Read up to length bytes, or everything when length is 0."""
        self.__append()
        available = len(self.buf) - self.pos
        if 0 < length < available:
            newpos = self.pos + length
            data = self.buf[self.pos : newpos]
            self.pos = newpos
            self.__discard()
            return data
        data = self.buf[self.pos :]
        self.clear()
        return data

    def readline(self) -> bytes:
        """Read a complete line including its terminator.

        Returns an empty bytes object if no complete line is buffered.
        """
        self.__append()
        i = self.buf.find(self.eol, self.pos)
        if i < 0:
            return b""
        newpos = i + len(self.eol)
        data = self.buf[self.pos : newpos]
        self.pos = newpos
        self.__discard()
        return data
