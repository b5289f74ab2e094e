from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, NamedTuple, Optional, Union

from .headerdict import HeaderDict

if TYPE_CHECKING:
    from .reader import BodyReader

Range = Union[int, tuple[int], tuple[int, int]]


class Newsgroup(NamedTuple):
    name: str
    low: int
    high: int
    status: str


class Group(NamedTuple):
    """The currently selected newsgroup as reported by the GROUP command."""

    name: str
    low: int
    high: int
    count: int


class Overview(NamedTuple):
    """A single record from the overview database."""

    number: int
    subject: str
    sender: str
    date: Optional[datetime]
    """None when the server supplied a date that could not be parsed."""
    message_id: str
    references: list[str]
    byte_count: int
    line_count: int
    extra: list[str]
    """Fields after the line count, verbatim (commonly an Xref field)."""


class Article(NamedTuple):
    """An article whose body has not been read yet.

    The body is only valid until it is read to the end or closed, and must be
    closed before the next command is issued.
    """

    number: int
    message_id: str
    headers: HeaderDict
    body: "BodyReader"


class Support(str, Enum):
    """What is known about a server's support for an optional command."""

    UNKNOWN = "unknown"
    SUPPORTED = "supported"
    UNSUPPORTED = "unsupported"
