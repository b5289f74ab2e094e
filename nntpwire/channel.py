"""
Line framing over an NNTP connection.
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

import socket
from typing import Union

from .errors import NNTPConnectionError
from .fifo import BytesFifo

__all__ = ["CRLF", "LineChannel"]


CRLF = b"\r\n"


class LineChannel:
    """Reads and writes CRLF terminated lines over a socket.

    All reads go through a single buffer so that line reads and raw reads
    (used for compressed bodies) can be freely interleaved without losing
    data.
    """

    def __init__(self, sock: socket.socket, bufsize: int = 4096) -> None:
        self.socket = sock
        self.bufsize = bufsize
        self._buffer = BytesFifo()
        self.closed = False

    def _recv(self) -> None:
        """Reads data from the socket into the buffer.

        Raises:
            NNTPConnectionError: If the server has closed the connection.
            OSError: On socket errors, including timeouts.
        """
        data = self.socket.recv(self.bufsize)
        if not data:
            raise NNTPConnectionError("Connection closed by server")
        self._buffer.write(data)

    def read_line(self) -> bytes:
        """Reads a line of data from the server.

        Blocks until a complete line is available. The line terminator (LF
        with an optional CR before it) is removed.

        Returns:
            The line as bytes without its terminator.
        """
        while True:
            line = self._buffer.readline()
            if line:
                break
            self._recv()
        line = line[:-1]
        if line.endswith(b"\r"):
            line = line[:-1]
        return line

    def read_some(self) -> bytes:
        """Reads a block of raw data.

        Returns whatever is buffered, or if nothing is buffered the data from
        a single read on the socket.
        """
        if not len(self._buffer):
            self._recv()
        return self._buffer.read()

    def unread(self, data: bytes) -> None:
        """Returns data to the front of the read buffer."""
        self._buffer.unread(data)

    def write_line(self, line: Union[str, bytes], encoding: str = "utf-8") -> None:
        """Sends a line followed by CRLF."""
        if isinstance(line, str):
            line = line.encode(encoding)
        self.socket.sendall(line + CRLF)

    def close(self) -> None:
        self.closed = True
        self._buffer.clear()
        self.socket.close()
