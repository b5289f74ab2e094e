"""
Parsing helpers for NNTP responses.
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

from collections.abc import Iterable
from datetime import datetime, timezone
from io import StringIO
from typing import Optional, Union

from dateutil import parser as dateparser
from dateutil.tz import tzoffset, tzutc

from .headerdict import HeaderDict
from .types import Group, Newsgroup, Overview, Range

# Zone names found in the dates of old articles. Anything else has to be given
# as a numeric offset.
_TZINFOS = {
    "UT": tzutc(),
    "UTC": tzutc(),
    "GMT": tzutc(),
    "Z": tzutc(),
    "EST": tzoffset("EST", -5 * 3600),
    "EDT": tzoffset("EDT", -4 * 3600),
    "CST": tzoffset("CST", -6 * 3600),
    "CDT": tzoffset("CDT", -5 * 3600),
    "MST": tzoffset("MST", -7 * 3600),
    "MDT": tzoffset("MDT", -6 * 3600),
    "PST": tzoffset("PST", -8 * 3600),
    "PDT": tzoffset("PDT", -7 * 3600),
}


# Two defaults that differ in every date part. A date missing any of its parts
# parses differently against each.
_DEFAULTS = (datetime(1970, 1, 1), datetime(1971, 2, 2))


def unparse_range(obj: Range) -> str:
    """Unparse a range argument.

    Args:
        obj: An article range. There are a number of valid formats; an integer
            specifying a single article or a tuple specifying an article range.
            If the range doesn't specify a last article then all articles from
            the first specified article up to the current last article for the
            group are included.

    Returns:
        The range as a string that can be used by an NNTP command.

    Note: Sample valid formats.
        4678
        (4245,)
        (4245, 5234)
    """
    if isinstance(obj, int):
        return str(obj)

    if isinstance(obj, tuple):
        if len(obj) == 1:
            return f"{obj[0]}-"
        if len(obj) == 2:
            return f"{obj[0]}-{obj[1]}"
        raise ValueError("Invalid range format")

    raise ValueError("Must be an integer or tuple")


def unparse_msgid_range(obj: Union[str, Range]) -> str:
    """Unparse a message-id or range argument.

    Args:
        obj: A message id as a string or a range as specified by
            unparse_range().

    Raises:
        ValueError: If obj is not a valid message id or range format. See
            unparse_range() for valid range formats.

    Returns:
        A message id or range as a string that can be used by an NNTP command.
    """
    if isinstance(obj, str):
        return obj

    return unparse_range(obj)


def parse_newsgroup(line: str) -> Newsgroup:
    """Parse a newsgroup info line to python types.

    Args:
        line: An info response line containing newsgroup info in the form
            `name high low status`.

    Returns:
        A tuple of group name, low-water as integer, high-water as integer and
        posting status.

    Raises:
        ValueError: If the newsgroup info cannot be parsed.

    Note:
        Posting status is a character is one of (but not limited to):
            "y" posting allowed
            "n" posting not allowed
            "m" posting is moderated
    """
    parts = line.split()
    try:
        name = parts[0]
        high = int(parts[1])
        low = int(parts[2])
        status = parts[3]
    except (IndexError, ValueError):
        raise ValueError("Invalid newsgroup info")
    return Newsgroup(name, low, high, status)


def parse_group(message: str) -> Group:
    """Parse the status message of a successful GROUP command.

    Args:
        message: The status message in the form `count low high name`.

    Raises:
        ValueError: If the message cannot be parsed.
    """
    parts = message.split(None, 4)
    try:
        count = int(parts[0])
        low = int(parts[1])
        high = int(parts[2])
        name = parts[3]
    except (IndexError, ValueError):
        raise ValueError(f'Invalid GROUP status "{message}"')
    return Group(name, low, high, count)


def _parse_header(line: str) -> Union[str, tuple[str, str], None]:
    """Parse a header line.

    Args:
        line: A header line as a string.

    Returns:
        None if end of headers is found. A string giving the continuation line
        if a continuation is found. A tuple of name, value when a header line
        is found.

    Raises:
        ValueError: If the line cannot be parsed as a header.
    """
    # End of headers
    if not line or line == "\r\n":
        return None
    # Continuation line
    if line[0] in " \t":
        return line.rstrip()
    name, value = line.split(":", 1)
    return name.strip(), value.strip()


def parse_headers(obj: Union[str, Iterable[str]]) -> HeaderDict:
    """Parse a string a iterable object (including file like objects) to a
    header dictionary.

    Reading stops at the first empty line, so the same iterable can then be
    used to read the body of an article.

    Args:
        obj: An iterable object including file-like objects.

    Returns:
        A dictionary of headers. Repeated headers keep every value.

    Raises:
        ValueError: If the first line is a continuation line or the headers
            cannot be parsed.
    """
    if isinstance(obj, str):
        obj = StringIO(obj)
    hdrs: list[tuple[str, str]] = []
    for line in obj:
        hdr = _parse_header(line)
        if not hdr:
            break
        if isinstance(hdr, str):
            if not hdrs:
                raise ValueError("First header is a continuation")
            hdrs[-1] = hdrs[-1][0], hdrs[-1][1] + hdr
            continue
        hdrs.append(hdr)
    return HeaderDict(hdrs)


def parse_date(value: Union[str, int]) -> datetime:
    """Parse a date as returned by the `DATE` command.

    Args:
        value: A date as a string in the format `YYYYMMDDHHMMSS`.

    Returns:
        A datetime object representing the date with timezone set to UTC.

    Raises:
        ValueError: If the value cannot be parsed.
    """
    i = int(value)
    M, S = divmod(i, 100)
    H, M = divmod(M, 100)
    d, H = divmod(H, 100)
    m, d = divmod(d, 100)
    Y, m = divmod(m, 100)
    return datetime(Y % 10000, m, d, H, M, S, tzinfo=timezone.utc)


def unparse_date(timestamp: datetime) -> str:
    """Format a timestamp as used by the NEWGROUPS and NEWNEWS commands.

    A naive timestamp is assumed to be given as GMT.
    """
    if timestamp.tzinfo:
        timestamp = timestamp.astimezone(timezone.utc)
    return timestamp.strftime("%Y%m%d %H%M%S GMT")


def parse_overview_date(value: str) -> Optional[datetime]:
    """Parse the date field of an overview record.

    Accepts the date formats found in articles, with or without the weekday
    name and with a numeric or named timezone, e.g.
    `Sat, 18 Oct 2003 18:00:00 +0030` or
    `Mon, 8 Jun 2009 06:27:41 -0700 (PDT)`.

    Returns:
        The date, or None if it cannot be parsed or is missing its year, month
        or day.
    """
    value = value.strip()
    if not value:
        return None
    try:
        first, second = (
            dateparser.parse(value, default=default, tzinfos=_TZINFOS)
            for default in _DEFAULTS
        )
    except (ValueError, OverflowError):
        return None
    if first != second:
        return None
    return first


def _parse_count(value: str) -> int:
    try:
        return int(value)
    except ValueError:
        return 0


def parse_overview(line: str) -> Overview:
    """Parse an overview line to python types.

    The fields are, in order: article number, subject, from, date,
    message-id, references, byte count and line count, followed by any
    number of extra fields. Missing fields are empty, a date that cannot be
    parsed is None and byte or line counts that cannot be parsed are 0.

    Some servers fold long References values with tabs, so fields after the
    references that hold more message-ids are joined back into them.

    Args:
        line: An overview line, with or without its line terminator.

    Raises:
        ValueError: If the article number is not a plain decimal number.
    """
    parts = line.rstrip("\r\n").split("\t")

    if not (parts[0].isascii() and parts[0].isdigit()):
        raise ValueError(f"Invalid article number {parts[0]!r}")
    number = int(parts[0])

    parts += [""] * (6 - len(parts))
    end = 6
    for i in range(6, len(parts)):
        field = parts[i].strip()
        if field.startswith("<"):
            end = i + 1
        elif field:
            break
    references = " ".join(parts[5:end]).split()
    rest = parts[end:] + [""] * (end + 2 - len(parts))

    return Overview(
        number=number,
        subject=parts[1],
        sender=parts[2],
        date=parse_overview_date(parts[3]),
        message_id=parts[4],
        references=references,
        byte_count=_parse_count(rest[0]),
        line_count=_parse_count(rest[1]),
        extra=rest[2:],
    )
