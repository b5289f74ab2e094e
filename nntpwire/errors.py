"""
NNTP wire layer exceptions.
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

from typing import Union

__all__ = [
    "NNTPConnectionError",
    "NNTPDataError",
    "NNTPDecodeError",
    "NNTPError",
    "NNTPFormatError",
    "NNTPPermanentError",
    "NNTPProtocolError",
    "NNTPReplyError",
    "NNTPSyncError",
    "NNTPTemporaryError",
]


class NNTPError(Exception):
    """Base class for all NNTP errors."""


class NNTPConnectionError(NNTPError, ConnectionError):
    """The server closed the connection."""


class NNTPSyncError(NNTPError):
    """NNTP sync errors.

    Raised when a command is issued while the body of a previous response is
    still being read.
    """


class NNTPReplyError(NNTPError):
    """NNTP response status errors."""

    def __init__(self, code: int, message: str) -> None:
        """NNTP response error.

        Args:
            code: The response status code.
            message: The response message.
        """
        self.code = code
        self.message = message
        super().__init__(code, message)

    def __str__(self) -> str:
        return "%d %s" % (self.code, self.message)


class NNTPTemporaryError(NNTPReplyError):
    """NNTP temporary errors.

    Temporary errors have response codes from 400 to 499.
    """


class NNTPPermanentError(NNTPReplyError):
    """NNTP permanent errors.

    Permanent errors have response codes from 500 to 599.
    """


class NNTPProtocolError(NNTPError):
    """NNTP protocol error.

    Protocol errors are raised when the stream breaks the framing rules, for
    example an invalid status line or a missing body terminator. The
    connection should not be reused after one of these.
    """

    def __init__(self, message: str, line: Union[bytes, None] = None) -> None:
        self.line = line
        super().__init__(message)


class NNTPDataError(NNTPError):
    """NNTP data error.

    Data errors are raised when the content of a response cannot be parsed.
    """


class NNTPFormatError(NNTPDataError):
    """A body did not follow the grammar it is expected to follow."""

    def __init__(
        self, message: str, line: Union[bytes, str, None] = None
    ) -> None:
        self.line = line
        super().__init__(message)


class NNTPDecodeError(NNTPDataError):
    """A compressed body failed to decompress."""
