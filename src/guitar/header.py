"""Normalized tar headers and the codec to and from :class:`tarfile.TarInfo`.

A :class:`Header` keeps the subset of a tar header that a plain directory
tree loses (type, mode, ownership, link target, device numbers and
modification time) in a form that serializes to stable, readable JSON.
"""

from __future__ import annotations

import tarfile
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum

from .exceptions import ModeConversionError, TimeConversionError, UnrecognizedEntryType

# Largest value the 7-digit octal mode field of a tar header can hold.
MAX_MODE = 0o7777777

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


class EntryType(str, Enum):
    """Archive entry type, stored as a one-letter code.

    Members: ``FILE`` (F), ``DIRECTORY`` (D), ``SYMLINK`` (S),
    ``HARDLINK`` (H), ``CHAR_DEVICE`` (C), ``BLOCK_DEVICE`` (B),
    ``FIFO`` (P).
    """
    FILE = "F"
    DIRECTORY = "D"
    SYMLINK = "S"
    HARDLINK = "H"
    CHAR_DEVICE = "C"
    BLOCK_DEVICE = "B"
    FIFO = "P"

    def __str__(self) -> str:          # noqa: D105
        return self.value

    @classmethod
    def from_letter(cls, letter, name: str | None = None) -> EntryType:
        """Return the member for *letter*, raising :class:`UnrecognizedEntryType`."""
        try:
            return cls(letter)
        except ValueError:
            raise UnrecognizedEntryType(letter, name) from None

    @classmethod
    def from_typeflag(cls, flag: bytes, name: str | None = None) -> EntryType:
        """Convert a :mod:`tarfile` type flag to an :class:`EntryType`."""
        try:
            return _FLAG_TO_TYPE[flag]
        except KeyError:
            raise UnrecognizedEntryType(flag, name) from None

    @property
    def typeflag(self) -> bytes:
        """Return the :mod:`tarfile` type flag written for this type."""
        return _TYPE_TO_FLAG[self]


_TYPE_TO_FLAG = {
    EntryType.FILE: tarfile.REGTYPE,
    EntryType.DIRECTORY: tarfile.DIRTYPE,
    EntryType.SYMLINK: tarfile.SYMTYPE,
    EntryType.HARDLINK: tarfile.LNKTYPE,
    EntryType.CHAR_DEVICE: tarfile.CHRTYPE,
    EntryType.BLOCK_DEVICE: tarfile.BLKTYPE,
    EntryType.FIFO: tarfile.FIFOTYPE,
}
_FLAG_TO_TYPE = {v: k for k, v in _TYPE_TO_FLAG.items()}
# Old-style regular files collapse into FILE; import always writes REGTYPE.
_FLAG_TO_TYPE[tarfile.AREGTYPE] = EntryType.FILE


@dataclass(frozen=True)
class Header:
    """A normalized tar header, one per archive entry.

    Attributes:
        name: Entry path as stored in the archive.
        type: :class:`EntryType` of the entry.
        mode: Mode bits as the decimal digits of their octal text
            (``0o755`` is stored as ``755``).
        mod_time: Modification time in UTC, ``None`` for a zero mtime.
        uid: Owner user id.
        gid: Owner group id.
        linkname: Target of a symlink or hard link.
        devmajor: Major number of a character or block device.
        devminor: Minor number of a character or block device.
    """
    name: str
    type: EntryType
    mode: int
    mod_time: datetime | None = None
    uid: int = 0
    gid: int = 0
    linkname: str = ""
    devmajor: int = 0
    devminor: int = 0


# ---------------------------------------------------------------------------
# Mode
# ---------------------------------------------------------------------------

def _check_int(value) -> None:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ModeConversionError(value, "not an integer")
    if value < 0:
        raise ModeConversionError(value, "negative")


def encode_mode(mode: int) -> int:
    """Return *mode* as the integer whose decimal digits spell its octal text.

    ``encode_mode(0o644) == 644``.
    """
    _check_int(mode)
    if mode > MAX_MODE:
        raise ModeConversionError(mode, "out of range")
    return int(format(mode, "o"))


def decode_mode(value: int) -> int:
    """Inverse of :func:`encode_mode`: ``decode_mode(644) == 0o644``."""
    _check_int(value)
    try:
        mode = int(str(value), 8)
    except ValueError:
        raise ModeConversionError(value, "digits are not octal") from None
    if mode > MAX_MODE:
        raise ModeConversionError(value, "out of range")
    return mode


# ---------------------------------------------------------------------------
# Time
# ---------------------------------------------------------------------------

def _time_from_mtime(mtime, name: str | None = None) -> datetime | None:
    if not mtime:
        return None
    # GNU base-256 fields can hold times datetime cannot represent.
    try:
        return datetime.fromtimestamp(mtime, tz=timezone.utc)
    except (ValueError, OverflowError, OSError):
        raise TimeConversionError(mtime, name) from None


def _mtime_from_time(when: datetime | None):
    """Return a tar mtime; an ``int`` unless *when* has a sub-second part."""
    if when is None:
        return 0
    delta = when - _EPOCH
    seconds = delta.days * 86400 + delta.seconds
    if delta.microseconds:
        return seconds + delta.microseconds / 1_000_000
    return seconds


def format_time(when: datetime) -> str:
    """Format *when* as RFC 3339 in UTC, e.g. ``2014-05-06T12:34:56Z``.

    Fractional seconds appear only when non-zero, with trailing zeros trimmed.
    """
    when = when.astimezone(timezone.utc)
    text = when.replace(tzinfo=None, microsecond=0).isoformat()
    if when.microsecond:
        text += "." + f"{when.microsecond:06d}".rstrip("0")
    return text + "Z"


def parse_time(text: str) -> datetime:
    """Parse an RFC 3339 timestamp and normalize it to UTC.

    Raises ``ValueError`` for malformed text.
    """
    when = datetime.fromisoformat(text)
    if when.tzinfo is None:
        when = when.replace(tzinfo=timezone.utc)
    return when.astimezone(timezone.utc)


# ---------------------------------------------------------------------------
# Codec
# ---------------------------------------------------------------------------

def export_header(info: tarfile.TarInfo) -> Header:
    """Convert a tar member header into a :class:`Header`.

    Raises :class:`UnrecognizedEntryType` for type flags outside the seven
    known types, :class:`ModeConversionError` for an unusable mode and
    :class:`TimeConversionError` for an mtime outside the datetime range.
    """
    entry_type = EntryType.from_typeflag(info.type, info.name)
    try:
        mode = encode_mode(info.mode)
    except ModeConversionError as exc:
        raise ModeConversionError(info.mode, exc.reason, info.name) from None
    return Header(
        name=info.name,
        type=entry_type,
        mode=mode,
        mod_time=_time_from_mtime(info.mtime, info.name),
        uid=info.uid,
        gid=info.gid,
        linkname=info.linkname,
        devmajor=info.devmajor,
        devminor=info.devminor,
    )


def import_header(header: Header) -> tarfile.TarInfo:
    """Convert a :class:`Header` back into a :class:`tarfile.TarInfo`.

    The returned member has ``size == 0``; callers writing a regular file
    set the size from the file on disk.
    """
    info = tarfile.TarInfo(header.name)
    info.type = EntryType.from_letter(header.type, header.name).typeflag
    try:
        info.mode = decode_mode(header.mode)
    except ModeConversionError as exc:
        raise ModeConversionError(header.mode, exc.reason, header.name) from None
    info.mtime = _mtime_from_time(header.mod_time)
    info.uid = header.uid
    info.gid = header.gid
    info.linkname = header.linkname
    info.devmajor = header.devmajor
    info.devminor = header.devminor
    return info
