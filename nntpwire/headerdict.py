"""
Case-insentitive ordered multi-valued mapping for headers.
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

from collections import OrderedDict
from collections.abc import Iterable, Iterator, Mapping, MutableMapping
from itertools import chain

__all__ = ["HeaderDict"]


class HeaderName(str):  # noqa: SLOT000
    def __eq__(self, other: object) -> bool:
        return isinstance(other, str) and self.casefold() == other.casefold()

    def __hash__(self) -> int:
        return hash(self.casefold())


class HeaderDict(MutableMapping[str, str]):
    """Article headers.

    Header names are case-insensitive and keep the order in which they were
    first seen. A header that appears more than once keeps all of its values;
    item access gives the last one and get_all() gives all of them.
    """

    def __init__(
        self,
        other: Mapping[str, str] | Iterable[tuple[str, str]] | None = None,
        **kwargs: str,
    ) -> None:
        self.__proxy = OrderedDict[HeaderName, list[str]]()
        other_pairs: Iterable[tuple[str, str]] = (
            ()
            if other is None
            else other.items()
            if isinstance(other, Mapping)
            else other
        )
        for k, v in chain(other_pairs, kwargs.items()):
            self.add(k, v)

    def add(self, key: str, value: str) -> None:
        """Add a value for a header, keeping any existing values."""
        if not isinstance(key, str):
            raise TypeError(f"Header name must be a string: {key!r}")
        if not isinstance(value, str):
            raise TypeError(f"Header value must be a string: {value!r}")
        self.__proxy.setdefault(HeaderName(key), []).append(value)

    def get_all(self, key: str) -> list[str]:
        """All values of a header in the order they were added."""
        return list(self.__proxy.get(HeaderName(key), []))

    def __getitem__(self, key: str) -> str:
        return self.__proxy[HeaderName(key)][-1]

    def __setitem__(self, key: str, value: str) -> None:
        self.__proxy[HeaderName(key)] = [value]

    def __delitem__(self, key: str) -> None:
        del self.__proxy[HeaderName(key)]

    def __iter__(self) -> Iterator[str]:
        return iter(self.__proxy)

    def __len__(self) -> int:
        return len(self.__proxy)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, HeaderDict):
            return self.__proxy == other.__proxy
        if isinstance(other, (Mapping, Iterable)):
            try:
                other = HeaderDict(other)  # type: ignore[arg-type]
            except (TypeError, ValueError):
                return False
            return self == other
        return False

    def __repr__(self) -> str:
        clsname = type(self).__name__
        pairs = [(k, v) for k, values in self.__proxy.items() for v in values]
        return f"{clsname}({pairs!r})"
