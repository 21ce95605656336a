"""The ``.guitar`` sidecar file: one JSON header record per line.

Records are compact JSON objects with the keys ``Name``, ``Type``, ``Mode``
and, when non-zero or non-empty, ``ModTime``, ``Uid``, ``Gid``,
``Linkname``, ``Devmajor`` and ``Devminor``, always in that order::

    {"Name":"a","Type":"D","Mode":755,"ModTime":"2014-05-06T12:34:56Z"}
    {"Name":"a/b.txt","Type":"F","Mode":644,"Uid":1000,"Gid":1000}
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import IO, Iterable

from .exceptions import FilesystemError, MetadataCodecError, MissingMetadataError
from .header import EntryType, Header, format_time, parse_time

METADATA_FILENAME = ".guitar"


def metadata_path(directory: str | os.PathLike[str]) -> Path:
    """Return the sidecar path inside *directory*."""
    return Path(directory) / METADATA_FILENAME


# ---------------------------------------------------------------------------
# Line codec
# ---------------------------------------------------------------------------

def header_record(header: Header) -> dict:
    """Return *header* as a JSON-ready dict, zero and empty fields omitted."""
    record = {
        "Name": header.name,
        "Type": EntryType.from_letter(header.type, header.name).value,
        "Mode": header.mode,
    }
    if header.mod_time is not None:
        record["ModTime"] = format_time(header.mod_time)
    if header.uid:
        record["Uid"] = header.uid
    if header.gid:
        record["Gid"] = header.gid
    if header.linkname:
        record["Linkname"] = header.linkname
    if header.devmajor:
        record["Devmajor"] = header.devmajor
    if header.devminor:
        record["Devminor"] = header.devminor
    return record


def encode_header_line(header: Header) -> bytes:
    """Encode *header* as one newline-terminated UTF-8 JSON line."""
    record = header_record(header)
    try:
        text = json.dumps(record, ensure_ascii=False, separators=(",", ":"))
        return text.encode("utf-8") + b"\n"
    except (TypeError, ValueError) as exc:
        raise MetadataCodecError(
            f"Cannot encode metadata for {header.name!r}: {exc}"
        ) from exc


def _field(record: dict, key: str, kind: type, default, line: int | None):
    if key not in record:
        if default is None:
            raise MetadataCodecError(f"Missing field {key!r}", line)
        return default
    value = record[key]
    if not isinstance(value, kind) or (kind is int and isinstance(value, bool)):
        raise MetadataCodecError(
            f"Field {key!r} must be {kind.__name__}, got {value!r}", line
        )
    return value


def decode_header_line(line: bytes | str, line_number: int | None = None) -> Header:
    """Decode one sidecar line into a :class:`Header`.

    Unknown keys are ignored.  Raises :class:`MetadataCodecError` for
    malformed records and :class:`UnrecognizedEntryType` for an unknown
    ``Type`` letter.
    """
    try:
        record = json.loads(line)
    except ValueError as exc:
        raise MetadataCodecError(f"Invalid JSON: {exc}", line_number) from exc
    if not isinstance(record, dict):
        raise MetadataCodecError("Record is not a JSON object", line_number)

    mod_time = None
    mod_time_text = _field(record, "ModTime", str, "", line_number)
    if mod_time_text:
        try:
            mod_time = parse_time(mod_time_text)
        except ValueError as exc:
            raise MetadataCodecError(
                f"Invalid ModTime {mod_time_text!r}", line_number
            ) from exc

    name = _field(record, "Name", str, None, line_number)
    letter = _field(record, "Type", str, None, line_number)
    return Header(
        name=name,
        type=EntryType.from_letter(letter, name),
        mode=_field(record, "Mode", int, None, line_number),
        mod_time=mod_time,
        uid=_field(record, "Uid", int, 0, line_number),
        gid=_field(record, "Gid", int, 0, line_number),
        linkname=_field(record, "Linkname", str, "", line_number),
        devmajor=_field(record, "Devmajor", int, 0, line_number),
        devminor=_field(record, "Devminor", int, 0, line_number),
    )


# ---------------------------------------------------------------------------
# File I/O
# ---------------------------------------------------------------------------

def write_sidecar(directory: str | os.PathLike[str], headers: Iterable[Header]) -> Path:
    """Write *headers*, in the given order, to the sidecar in *directory*.

    Every record is encoded before the file is opened.  A write failure
    leaves whatever was written in place.
    """
    path = metadata_path(directory)
    lines = [encode_header_line(h) for h in headers]
    try:
        with open(path, "wb") as f:
            for line in lines:
                f.write(line)
    except OSError as exc:
        raise FilesystemError.from_oserror(path, "write metadata file", exc) from exc
    return path


class SidecarReader:
    """Iterator over the records of an open sidecar file.

    The file is closed when iteration ends, when a record fails to decode,
    or by :meth:`close`, whichever comes first.  Also usable as a context
    manager.
    """

    def __init__(self, f: IO[bytes]):
        self._f = f
        self._lines = enumerate(f, 1)

    @property
    def closed(self) -> bool:
        return self._f.closed

    def close(self) -> None:
        self._f.close()

    def __iter__(self) -> SidecarReader:
        return self

    def __next__(self) -> Header:
        if self._f.closed:
            raise StopIteration
        try:
            line_number, line = next(self._lines)
            return decode_header_line(line, line_number)
        except Exception:
            self.close()
            raise

    def __enter__(self) -> SidecarReader:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


def read_sidecar(directory: str | os.PathLike[str]) -> SidecarReader:
    """Open the sidecar in *directory* and iterate its records in file order.

    The file is opened immediately, so a missing sidecar raises
    :class:`MissingMetadataError` here rather than on first iteration.
    """
    path = metadata_path(directory)
    try:
        f = open(path, "rb")
    except FileNotFoundError:
        raise MissingMetadataError(path) from None
    except OSError as exc:
        raise FilesystemError.from_oserror(path, "open metadata file", exc) from exc
    return SidecarReader(f)
