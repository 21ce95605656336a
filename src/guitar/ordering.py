"""Deterministic ordering of headers for the sidecar file."""

from __future__ import annotations

from enum import Enum
from typing import Iterable

from .header import Header


def _name_key(header: Header) -> bytes:
    # Compare the bytes of the name; undecodable tar names were decoded
    # with surrogateescape and go back to their original bytes here.
    return header.name.encode("utf-8", "surrogateescape")


def precedes(a: Header, b: Header) -> bool:
    """Return ``True`` if *a* sorts before *b* (byte order of their names)."""
    return _name_key(a) < _name_key(b)


class SortKey(str, Enum):
    """Field a header list can be sorted by."""
    NAME = "name"

    def __str__(self) -> str:          # noqa: D105
        return self.value


_SORT_KEYS = {
    SortKey.NAME: _name_key,
}


def sort_headers(headers: Iterable[Header], key: SortKey = SortKey.NAME) -> list[Header]:
    """Return *headers* as a new list sorted by *key*."""
    return sorted(headers, key=_SORT_KEYS[SortKey(key)])


def sort_headers_by_name(headers: Iterable[Header]) -> list[Header]:
    """Return *headers* sorted by name."""
    return sort_headers(headers, SortKey.NAME)
