"""
An NNTP library - a bit more useful than the nntplib one (hopefully).
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

import logging
import socket
import ssl
from collections.abc import Iterator
from datetime import datetime
from types import TracebackType
from typing import TYPE_CHECKING, Literal, Optional, TypeVar, Union

from . import utils
from .channel import LineChannel
from .errors import (
    NNTPConnectionError,
    NNTPDataError,
    NNTPDecodeError,
    NNTPError,
    NNTPFormatError,
    NNTPPermanentError,
    NNTPProtocolError,
    NNTPReplyError,
    NNTPSyncError,
    NNTPTemporaryError,
)
from .headerdict import HeaderDict
from .reader import BodyReader, DotReader, ZlibDotReader
from .types import Article, Group, Newsgroup, Overview, Range, Support
from .yenc import YEncReader

if TYPE_CHECKING:
    from typing_extensions import Self

__all__ = [
    "BaseNNTPClient",
    "NNTPClient",
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


log = logging.getLogger(__name__)

R = TypeVar("R", bound=BodyReader)

# compressed overview extension
XZVER = "XZVER"


class BaseNNTPClient:
    """NNTP BaseNNTPClient.

    Base class for NNTP clients implements the basic command interface and
    keeps track of the state of the connection: the body reader that is
    currently open, what is known about the optional commands the server
    supports and the currently selected newsgroup.
    """

    encoding = "utf-8"
    errors = "surrogateescape"

    def __init__(
        self,
        host: str,
        port: int = 119,
        username: str = "",
        password: str = "",
        timeout: int = 30,
        use_ssl: bool = False,
    ) -> None:
        """Constructor for BasicNNTPClient.

        Connects to usenet server and reads the greeting.

        Args:
            host: Hostname for usenet server.
            port: Port for usenet server.
            username: Username for usenet account
            password: Password for usenet account
            timeout: Connection timeout
            use_ssl: Should we use ssl

        Raises:
            IOError (socket.error): On error in underlying socket and/or ssl
                wrapper. See socket and ssl modules for further details.
            NNTPReplyError: On bad response code from server.
        """
        self.username = username
        self.password = password

        self._reader: Optional[BodyReader] = None
        self._support: dict[str, Support] = {}

        self.selected_group: Optional[Group] = None
        self.article_pointer: Optional[int] = None

        # connect
        log.debug("Connecting to %s:%d", host, port)
        sock = socket.create_connection((host, port), timeout=timeout)
        if use_ssl:
            context = ssl.create_default_context()
            sock = context.wrap_socket(sock, server_hostname=host)
        self.socket = sock
        self._channel = LineChannel(sock)

        code, message = self.status()
        if code not in (200, 201):
            raise NNTPReplyError(code, message)

    def support(self, extension: str) -> Support:
        """What is known about the server's support for an extension."""
        return self._support.get(extension, Support.UNKNOWN)

    def _open(self, reader: R) -> R:
        """Registers a reader as the one reading the current response."""
        self._reader = reader
        return reader

    def status(self) -> tuple[int, str]:
        """Reads a command response status.

        If there is no response message then the returned status message will
        be an empty string.

        Raises:
            NNTPError: If data is required to be read from the socket and
                fails.
            NNTPProtocolError: If the status line can't be parsed.
            NNTPTemporaryError: For status code 400-499
            NNTPPermanentError: For status code 500-599

        Returns:
            A tuple of status code and status message.
        """
        line = self._channel.read_line().rstrip()
        parts = line.split(None, 1)

        try:
            code, data = int(parts[0]), b""
        except (IndexError, ValueError):
            raise NNTPProtocolError(f"Invalid status line {line!r}", line)

        if code < 100 or code >= 600:
            raise NNTPProtocolError(f"Invalid status code {line!r}", line)

        if len(parts) > 1:
            data = parts[1]

        message = data.decode(self.encoding, self.errors)
        log.debug("<< %d %s", code, message)

        if 400 <= code <= 499:
            raise NNTPTemporaryError(code, message)

        if 500 <= code <= 599:
            raise NNTPPermanentError(code, message)

        return code, message

    def info(self, reader: BodyReader) -> Iterator[str]:
        """Generator for the lines of a body.

        Args:
            reader: The reader for the body.

        Yields:
            A line of the body as a string, including the line terminator.
        """
        for line in reader:
            yield line.decode(self.encoding, self.errors)

    def command(self, verb: str, args: Union[str, None] = None) -> tuple[int, str]:
        """Call a command on the server.

        If the user has not authenticated then authentication will be done
        as part of calling the command on the server.

        For commands that don't return a status message the status message
        will default to an empty string.

        Args:
            verb: The verb of the command to call.
            args: The arguments of the command as a string (default None).

        Returns:
            A tuple of status code (as an integer) and status message.

        Raises:
            NNTPSyncError: If the body of the previous response has not been
                read to the end or closed.

        Note:
            You can run raw commands by supplying the full command (including
            args) in the verb.
        """
        if self._reader is not None:
            if not self._reader.finished:
                raise NNTPSyncError("Command issued while a body reader is open")
            self._reader = None

        cmd = f"{verb} {args}" if args else verb
        if verb == "AUTHINFO PASS":
            log.debug(">> %s ****", verb)
        else:
            log.debug(">> %s", cmd)

        self._channel.write_line(cmd, self.encoding)

        try:
            code, message = self.status()
        except NNTPTemporaryError as e:
            if e.code != 480:
                raise e
            code, message = self.command("AUTHINFO USER", self.username)
            if code == 381:
                code, message = self.command("AUTHINFO PASS", self.password)
            if code != 281:
                raise NNTPReplyError(code, message)
            code, message = self.command(verb, args)

        return code, message

    def close(self) -> None:
        """Closes the connection at the client.

        Once this method has been called, no other methods of the NNTPClient
        object should be called.
        """
        self._reader = None
        self._support.clear()
        self._channel.close()


class NNTPClient(BaseNNTPClient):
    """NNTP NNTPClient.

    Implements the commands that are commonly used by current usenet servers,
    including the compressed overview extension.

    Commands that return a list of things are generators. The command is only
    sent once iteration starts and the response must be iterated to the end
    (or the generator closed) before the next command is issued. Commands that
    return a body return a reader that must be read to the end or closed.

    Note: All commands can raise the following exceptions:
            NNTPError
            NNTPProtocolError
            NNTPPermanentError
            NNTPReplyError
            IOError (socket.error)

    Note: All commands that use compressed responses can also raise an
        NNTPDecodeError.
    """

    def __init__(
        self,
        host: str,
        port: int = 119,
        username: str = "",
        password: str = "",
        timeout: int = 30,
        use_ssl: bool = False,
        reader: bool = True,
    ) -> None:
        """Constructor for NNTP NNTPClient.

        Connects to usenet server.

        Args:
            host: Hostname for usenet server.
            port: Port for usenet server.
            username: Username for usenet account
            password: Password for usenet account
            timeout: Connection timeout
            use_ssl: Should we use ssl
            reader: Use reader mode

        Raises:
            socket.error: On error in underlying socket and/or ssl wrapper. See
                socket and ssl modules for further details.
            NNTPReplyError: On bad response code from server.
        """
        super().__init__(host, port, username, password, timeout, use_ssl)
        if reader:
            self.mode_reader()

    def __enter__(self) -> "Self":
        """Support for the 'with' context manager statement."""
        return self

    def __exit__(
        self,
        exc_type: Union[type[BaseException], None],
        exc_val: Union[BaseException, None],
        exc_tb: Union[TracebackType, None],
    ) -> Literal[False]:
        """Support for the 'with' context manager statement."""
        try:
            self.quit()
        except NNTPError:
            self.close()
            raise
        return False

    # session administration commands
    def capabilities(self, keyword: Union[str, None] = None) -> Iterator[str]:
        """CAPABILITIES command.

        Determines the capabilities of the server.

        See <http://tools.ietf.org/html/rfc3977#section-5.2>

        Yields:
            Each of the capabilities supported by the server. The VERSION
            capability is the first capability to be yielded.
        """
        code, message = self.command("CAPABILITIES", keyword)
        if code != 101:
            raise NNTPReplyError(code, message)

        with self._open(DotReader(self._channel)) as reader:
            for line in self.info(reader):
                yield line.strip()

    def mode_reader(self) -> bool:
        """MODE READER command.

        Instructs a mode-switching server to switch modes.

        See <http://tools.ietf.org/html/rfc3977#section-5.3>

        Returns:
            Boolean value indicating whether posting is allowed or not.
        """
        code, message = self.command("MODE READER")
        if code not in (200, 201):
            raise NNTPReplyError(code, message)

        return code == 200

    def quit(self) -> None:
        """QUIT command.

        Tells the server to close the connection. After the server acknowledges
        the request to quit the connection is closed both at the server and
        client.

        See <http://tools.ietf.org/html/rfc3977#section-5.4>
        """
        code, message = self.command("QUIT")
        if code != 205:
            raise NNTPReplyError(code, message)

        self.close()

    # information commands
    def date(self) -> datetime:
        """DATE command.

        Coordinated Universal time from the perspective of the usenet server.

        See <http://tools.ietf.org/html/rfc3977#section-7.1>

        Returns:
            The UTC time according to the server as a datetime object.

        Raises:
            NNTPDataError: If the timestamp can't be parsed.
        """
        code, message = self.command("DATE")
        if code != 111:
            raise NNTPReplyError(code, message)

        try:
            return utils.parse_date(message)
        except ValueError:
            raise NNTPDataError(f'Invalid DATE status "{message}"')

    def newgroups(self, timestamp: datetime) -> Iterator[Newsgroup]:
        """NEWGROUPS command.

        Retrieves a list of newsgroups created on the server since the
        specified timestamp.

        See <http://tools.ietf.org/html/rfc3977#section-7.3>

        Yields:
            A 4-tuple containing the name, low water mark, high water mark, and
            status for the newsgroup, for each newsgroup.

        Note: If the datetime object supplied as the timestamp is naive (tzinfo
            is None) then it is assumed to be given as GMT.
        """
        code, message = self.command("NEWGROUPS", utils.unparse_date(timestamp))
        if code != 231:
            raise NNTPReplyError(code, message)

        with self._open(DotReader(self._channel)) as reader:
            for line in self.info(reader):
                try:
                    yield utils.parse_newsgroup(line)
                except ValueError:
                    raise NNTPFormatError("Invalid NEWGROUPS response", line)

    def newnews(self, pattern: str, timestamp: datetime) -> Iterator[str]:
        """NEWNEWS command.

        Retrieves a list of message-ids for articles created since the
        specified timestamp for newsgroups with names that match the given
        pattern.

        See <http://tools.ietf.org/html/rfc3977#section-7.4>

        Yields:
            A message-id as string, for each article.
        """
        args = pattern + " " + utils.unparse_date(timestamp)

        code, message = self.command("NEWNEWS", args)
        if code != 230:
            raise NNTPReplyError(code, message)

        with self._open(DotReader(self._channel)) as reader:
            for line in self.info(reader):
                yield line.strip()

    # list commands
    def list_active(self, pattern: Union[str, None] = None) -> Iterator[Newsgroup]:
        """LIST ACTIVE command.

        Retrieves a list of active newsgroups that match the specified pattern.

        See <http://tools.ietf.org/html/rfc3977#section-7.6.3>

        Yields:
            A 4-tuple containing the name, low water mark, high water mark,
            and status for the newsgroup, for each newsgroup.
        """
        cmd = "LIST" if pattern is None else "LIST ACTIVE"

        code, message = self.command(cmd, pattern)
        if code != 215:
            raise NNTPReplyError(code, message)

        with self._open(DotReader(self._channel)) as reader:
            for line in self.info(reader):
                try:
                    yield utils.parse_newsgroup(line)
                except ValueError:
                    raise NNTPFormatError("Invalid LIST ACTIVE response", line)

    def list_newsgroups(
        self,
        pattern: Union[str, None] = None,
    ) -> Iterator[tuple[str, str]]:
        """LIST NEWSGROUPS command.

        Retrieves a list of newsgroups including the name and a short
        description.

        See <http://tools.ietf.org/html/rfc3977#section-7.6.6>

        Yields:
            A tuple containing the name, and description for the newsgroup, for
            each newsgroup that matches the pattern.
        """
        code, message = self.command("LIST NEWSGROUPS", pattern)
        if code != 215:
            raise NNTPReplyError(code, message)

        with self._open(DotReader(self._channel)) as reader:
            for line in self.info(reader):
                parts = line.strip().split(None, 1)
                if not parts:
                    continue
                name, description = parts[0], ""
                if len(parts) > 1:
                    description = parts[1]
                yield name, description

    def list_extensions(self) -> Iterator[str]:
        """LIST EXTENSIONS command.

        See <https://tools.ietf.org/html/draft-ietf-nntpext-base-20#section-5.3>

        Yields:
            The name of the extension of each of the available extensions.
        """
        code, message = self.command("LIST EXTENSIONS")
        if code != 202:
            raise NNTPReplyError(code, message)

        with self._open(DotReader(self._channel)) as reader:
            for line in self.info(reader):
                yield line.strip()

    def list(
        self,
        keyword: Union[str, None] = None,
        arg: Union[str, None] = None,
    ) -> Iterator[object]:
        """LIST command.

        A wrapper for the ACTIVE, NEWSGROUPS and EXTENSIONS list commands.

        Raises:
            NotImplementedError: For unsupported keywords.
        """
        if keyword:
            keyword = keyword.upper()

        if keyword is None or keyword == "ACTIVE":
            return self.list_active(arg)
        if keyword == "NEWSGROUPS":
            return self.list_newsgroups(arg)
        if keyword == "EXTENSIONS":
            return self.list_extensions()

        raise NotImplementedError

    # article selection commands
    def group(self, name: str) -> Group:
        """GROUP command.

        Selects a newsgroup as the currently selected newsgroup and returns
        summary information about it. The current article is set to the first
        article in the group.

        See <https://tools.ietf.org/html/rfc3977#section-6.1.1>

        Returns:
            The name, low and high water marks and estimated article count of
            the group.

        Raises:
            NNTPReplyError: If no such newsgroup exists.
        """
        code, message = self.command("GROUP", name)
        if code != 211:
            raise NNTPReplyError(code, message)

        try:
            group = utils.parse_group(message)
        except ValueError as e:
            raise NNTPFormatError(str(e), message)

        self.selected_group = group
        self.article_pointer = group.low if group.count else None
        return group

    def _pointer(self, verb: str, args: Union[str, None] = None) -> tuple[int, str]:
        code, message = self.command(verb, args)
        if code != 223:
            raise NNTPReplyError(code, message)

        article, msgid = self._article_status(verb, message)
        self.article_pointer = article
        return article, msgid

    def _article_status(self, verb: str, message: str) -> tuple[int, str]:
        parts = message.split(None, 2)
        try:
            article = int(parts[0])
            msgid = parts[1]
        except (IndexError, ValueError):
            raise NNTPFormatError(f"Invalid {verb} status", message)
        return article, msgid

    def stat(self, msgid_article: Union[str, int, None] = None) -> tuple[int, str]:
        """STAT command.

        See <https://tools.ietf.org/html/rfc3977#section-6.2.4>

        Returns:
            A 2-tuple of the article number and message id.
        """
        args = None if msgid_article is None else str(msgid_article)
        return self._pointer("STAT", args)

    def next(self) -> tuple[int, str]:
        """NEXT command.

        Sets the current article number to the next article in the current
        newsgroup.

        See <https://tools.ietf.org/html/rfc3977#section-6.1.4>

        Returns:
            A 2-tuple of the article number and message id.
        """
        return self._pointer("NEXT")

    def last(self) -> tuple[int, str]:
        """LAST command.

        Sets the current article number to the previous article in the current
        newsgroup.

        See <https://tools.ietf.org/html/rfc3977#section-6.1.3>

        Returns:
            A 2-tuple of the article number and message id.
        """
        return self._pointer("LAST")

    # article retrieval commands
    def article(self, msgid_article: Union[str, int, None] = None) -> Article:
        """ARTICLE command.

        Selects an article according to the arguments and presents the entire
        article (that is, the headers, an empty line, and the body, in that
        order) to the client.

        See <https://tools.ietf.org/html/rfc3977#section-6.2.1>

        Args:
            msgid_article: A message-id as a string, or an article number as an
                integer. A msgid_article of None (the default) uses the current
                article.

        Returns:
            The article with its headers parsed. The body is left unread and
            must be read to the end or closed before the next command.

        Raises:
            NNTPReplyError: If no such article exists.
        """
        args = None if msgid_article is None else str(msgid_article)

        code, message = self.command("ARTICLE", args)
        if code != 220:
            raise NNTPReplyError(code, message)

        articleno, msgid = self._article_status("ARTICLE", message)
        if articleno:
            self.article_pointer = articleno

        reader = self._open(DotReader(self._channel))
        try:
            headers = utils.parse_headers(self.info(reader))
        except ValueError:
            reader.close()
            raise NNTPFormatError("Invalid article headers")

        return Article(articleno, msgid, headers, reader)

    def head(self, msgid_article: Union[str, int, None] = None) -> HeaderDict:
        """HEAD command.

        Identical to the ARTICLE command except that only the headers are
        presented.

        See <https://tools.ietf.org/html/rfc3977#section-6.2.2>

        Returns:
            The article headers.

        Raises:
            NNTPReplyError: If no such article exists.
        """
        args = None if msgid_article is None else str(msgid_article)

        code, message = self.command("HEAD", args)
        if code != 221:
            raise NNTPReplyError(code, message)

        with self._open(DotReader(self._channel)) as reader:
            try:
                return utils.parse_headers(self.info(reader))
            except ValueError:
                raise NNTPFormatError("Invalid article headers")

    def body(
        self,
        msgid_article: Union[str, int, None] = None,
        yenc: bool = False,
    ) -> BodyReader:
        """BODY command.

        Identical to the ARTICLE command except that only the body is
        presented.

        See <https://tools.ietf.org/html/rfc3977#section-6.2.3>

        Args:
            msgid_article: A message-id as a string, or an article number as an
                integer. A msgid_article of None (the default) uses the current
                article.
            yenc: Decode the body as a single part yEnc encoded binary.

        Returns:
            A reader for the body, which must be read to the end or closed
            before the next command.

        Raises:
            NNTPReplyError: If no such article exists.
        """
        args = None if msgid_article is None else str(msgid_article)

        code, message = self.command("BODY", args)
        if code != 222:
            raise NNTPReplyError(code, message)

        reader = DotReader(self._channel)
        if yenc:
            return self._open(YEncReader(reader))
        return self._open(reader)

    def _hdr(
        self,
        header: str,
        msgid_range: Union[str, Range, None] = None,
        verb: str = "HDR",
    ) -> list[tuple[int, str]]:
        args = header
        if msgid_range is not None:
            args += " " + utils.unparse_msgid_range(msgid_range)

        code, message = self.command(verb, args)
        if not 200 <= code <= 299:
            raise NNTPReplyError(code, message)

        if verb == "XZHDR":
            reader: BodyReader = ZlibDotReader(self._channel)
        else:
            reader = DotReader(self._channel)

        result = []
        with self._open(reader):
            for line in self.info(reader):
                parts = line.split(None, 1)
                try:
                    articleno = int(parts[0])
                    value = parts[1].rstrip("\r\n") if len(parts) > 1 else ""
                except (IndexError, ValueError):
                    raise NNTPFormatError(f"Invalid {verb} response", line)
                result.append((articleno, value))
        return result

    def hdr(
        self,
        header: str,
        msgid_range: Union[str, Range, None] = None,
    ) -> list[tuple[int, str]]:
        """HDR command.

        Provides access to specific fields from an article specified by
        message-id, or from a specified article or range of articles in the
        currently selected newsgroup.

        See <https://tools.ietf.org/html/rfc3977#section-8.5>

        Returns:
            A 2-tuple giving the article number and value for the provided
            header field for each article in the given range.
        """
        return self._hdr(header, msgid_range)

    def xhdr(
        self,
        header: str,
        msgid_range: Union[str, Range, None] = None,
    ) -> list[tuple[int, str]]:
        """XHDR command. See hdr()."""
        return self._hdr(header, msgid_range, verb="XHDR")

    def xzhdr(
        self,
        header: str,
        msgid_range: Union[str, Range, None] = None,
    ) -> list[tuple[int, str]]:
        """XZHDR command.

        The compressed version of XHDR. See hdr().
        """
        return self._hdr(header, msgid_range, verb="XZHDR")

    # overview commands
    def _over(self, verb: str, range: Range) -> list[Overview]:
        code, message = self.command(verb, utils.unparse_range(range))
        if not 200 <= code <= 299:
            raise NNTPReplyError(code, message)

        if verb == XZVER:
            self._support[XZVER] = Support.SUPPORTED
            reader: BodyReader = ZlibDotReader(self._channel)
        else:
            reader = DotReader(self._channel)

        overviews = []
        with self._open(reader):
            for line in self.info(reader):
                try:
                    overviews.append(utils.parse_overview(line))
                except ValueError:
                    raise NNTPFormatError(f"Invalid {verb} response", line)
        return overviews

    def over(self, range: Range) -> list[Overview]:
        """OVER command.

        Returns information from the overview database for the article(s)
        specified.

        See <https://tools.ietf.org/html/rfc3977#section-8.3>

        Args:
            range: An article number as an integer, or a tuple of specifying a
                range of article numbers in the form (first, [last]). If last
                is omitted then all articles after first are included.

        Returns:
            An overview record for each available article in the range, in
            the order given by the server.

        Raises:
            NNTPReplyError: If the command fails.
            NNTPFormatError: If a record has an invalid article number.
        """
        return self._over("OVER", range)

    def xover(self, range: Range) -> list[Overview]:
        """XOVER command.

        The original name of the OVER command. See over().

        <http://tools.ietf.org/html/rfc2980#section-2.8>
        """
        return self._over("XOVER", range)

    def xzver(self, range: Range) -> list[Overview]:
        """XZVER command.

        The compressed version of XOVER. See over().
        """
        return self._over(XZVER, range)

    def overview(self, first: int, last: int) -> list[Overview]:
        """Overview records for the articles from first to last inclusive.

        Tries the compressed XZVER command, then OVER, then XOVER, returning
        the records from the first that succeeds. Once XZVER has failed it is
        not tried again on this connection. OVER and XOVER are tried afresh
        every time.

        Raises:
            NNTPReplyError: The failure of XOVER, if all three fail.
            NNTPFormatError: If a record has an invalid article number.
        """
        articles = (first, last)

        if self.support(XZVER) is not Support.UNSUPPORTED:
            try:
                return self.xzver(articles)
            except NNTPReplyError as e:
                log.info("%s not supported (%s)", XZVER, e)
                self._support[XZVER] = Support.UNSUPPORTED

        try:
            return self.over(articles)
        except NNTPReplyError as e:
            log.info("OVER failed (%s), trying XOVER", e)

        return self.xover(articles)
