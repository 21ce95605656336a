"""Rebuild a tar stream from a directory and its ``.guitar`` metadata file.

Entries are written in metadata order.  A hard link can only point at a
member already in the stream, so hard links are held back and written
after every other entry.
"""

from __future__ import annotations

import os
import tarfile
from pathlib import Path
from typing import IO, Iterable

from ._paths import entry_path, resolve_base
from .exceptions import ArchiveError, FilesystemError
from .header import EntryType, Header, import_header
from .sidecar import read_sidecar

TAR_FORMATS = {
    "ustar": tarfile.USTAR_FORMAT,
    "gnu": tarfile.GNU_FORMAT,
    "pax": tarfile.PAX_FORMAT,
}


def import_from_filesystem(fileobj: IO[bytes], source: str | os.PathLike[str], *,
                           tar_format: int = tarfile.PAX_FORMAT) -> list[Header]:
    """Write a tar stream for the directory *source* to *fileobj*.

    *fileobj* is written sequentially and may be a pipe; it is not closed.
    The tar writer is always closed, but the end-of-archive marker is only
    written when every entry succeeded.  Returns the headers in the order
    they were written.
    """
    base = resolve_base(source)
    with read_sidecar(base) as records:
        try:
            tar = tarfile.open(fileobj=fileobj, mode="w|", format=tar_format)
        except tarfile.TarError as exc:
            raise ArchiveError(f"Cannot open tar stream for writing: {exc}") from exc
        with tar:
            return _write_entries(tar, base, records)


def import_to_tar(tar: tarfile.TarFile, source: str | os.PathLike[str]) -> list[Header]:
    """Add the entries described by *source*'s metadata file to an open *tar*."""
    base = resolve_base(source)
    with read_sidecar(base) as records:
        return _write_entries(tar, base, records)


def _write_entries(tar: tarfile.TarFile, base: Path, records: Iterable[Header]) -> list[Header]:
    written: list[Header] = []
    hard_links: list[tuple[Header, tarfile.TarInfo]] = []

    for header in records:
        info = import_header(header)
        if header.type == EntryType.HARDLINK:
            hard_links.append((header, info))
            continue
        if header.type == EntryType.FILE:
            _add_file(tar, info, entry_path(base, header.name))
        else:
            _add_header(tar, info)
        written.append(header)

    for header, info in hard_links:
        _add_header(tar, info)
        written.append(header)
    return written


def _add_header(tar: tarfile.TarFile, info: tarfile.TarInfo) -> None:
    try:
        tar.addfile(info)
    except (tarfile.TarError, ValueError, OSError) as exc:
        raise ArchiveError(f"Cannot write tar header for {info.name!r}: {exc}") from exc


def _add_file(tar: tarfile.TarFile, info: tarfile.TarInfo, path: Path) -> None:
    # Never read a regular file's body through a symlink.
    if path.is_symlink():
        raise FilesystemError(path, "Expected a regular file, found a symlink")
    try:
        f = open(os.open(path, os.O_RDONLY | os.O_NOFOLLOW), "rb")
    except OSError as exc:
        raise FilesystemError.from_oserror(path, "open file", exc) from exc
    with f:
        # The file may have changed since export; its size on disk wins.
        try:
            info.size = os.fstat(f.fileno()).st_size
        except OSError as exc:
            raise FilesystemError.from_oserror(path, "stat file", exc) from exc
        try:
            tar.addfile(info, f)
        except (tarfile.TarError, ValueError) as exc:
            raise ArchiveError(f"Cannot write tar header for {info.name!r}: {exc}") from exc
        except OSError as exc:
            raise FilesystemError.from_oserror(path, "copy file", exc) from exc
