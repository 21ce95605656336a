"""Export a tar stream into a directory plus a ``.guitar`` metadata file.

Regular files and directories are written to disk and symlinks are
recreated; hard links, device nodes and fifos exist only in the metadata.
Tar archives do not guarantee member order, so headers are collected,
sorted by name and written once the stream is exhausted.  The same archive
content always produces the same metadata file.
"""

from __future__ import annotations

import os
import shutil
import tarfile
from pathlib import Path
from typing import IO, Iterator

from ._paths import entry_path, resolve_base
from .exceptions import ArchiveError, FilesystemError
from .header import EntryType, Header, export_header
from .ordering import sort_headers_by_name
from .sidecar import METADATA_FILENAME, write_sidecar

DIR_MODE = 0o755


def export_from_stream(fileobj: IO[bytes], dest: str | os.PathLike[str]) -> list[Header]:
    """Read a tar stream from *fileobj* and export it into *dest*.

    The stream is read sequentially, so *fileobj* may be a pipe.
    Compression is detected by :mod:`tarfile`.
    """
    try:
        tar = tarfile.open(fileobj=fileobj, mode="r|*")
    except tarfile.TarError as exc:
        raise ArchiveError(f"Not a valid tar stream: {exc}") from exc
    with tar:
        return export_to_filesystem(tar, dest)


def export_to_filesystem(tar: tarfile.TarFile, dest: str | os.PathLike[str]) -> list[Header]:
    """Export every member of *tar* into *dest* and write its metadata file.

    *dest* and its parents are created if missing.  The first failure
    aborts the export; files already written are left in place and no
    metadata file is written.  Returns the headers sorted by name.
    """
    _make_dirs(Path(dest))
    base = resolve_base(dest)

    headers: list[Header] = []
    for member in _iter_members(tar):
        header = export_header(member)
        headers.append(header)
        _write_entry(tar, member, header, base)

    headers = sort_headers_by_name(headers)
    write_sidecar(base, headers)
    return headers


def _iter_members(tar: tarfile.TarFile) -> Iterator[tarfile.TarInfo]:
    members = iter(tar)
    while True:
        try:
            member = next(members)
        except StopIteration:
            return
        except (tarfile.TarError, EOFError) as exc:
            raise ArchiveError(f"Error reading tar stream: {exc}") from exc
        yield member


def _write_entry(tar: tarfile.TarFile, member: tarfile.TarInfo,
                 header: Header, base: Path) -> None:
    path = entry_path(base, header.name)
    if path == base / METADATA_FILENAME:
        raise FilesystemError(header.name, "Entry collides with the metadata file")

    if header.type == EntryType.DIRECTORY:
        _make_dirs(path)
    elif header.type == EntryType.FILE:
        _write_file(tar, member, path)
    elif header.type == EntryType.SYMLINK:
        _write_symlink(path, header.linkname)
    # Hard links, devices and fifos are recorded in the metadata only.


def _make_dirs(path: Path) -> None:
    try:
        os.makedirs(path, mode=DIR_MODE, exist_ok=True)
    except OSError as exc:
        raise FilesystemError.from_oserror(path, "create directory", exc) from exc


def _write_file(tar: tarfile.TarFile, member: tarfile.TarInfo, path: Path) -> None:
    _make_dirs(path.parent)
    # Never write through a link left by an earlier entry.
    if path.is_symlink():
        _unlink(path)
    try:
        f = open(path, "wb")
    except OSError as exc:
        raise FilesystemError.from_oserror(path, "create file", exc) from exc
    with f, tar.extractfile(member) as source:
        try:
            shutil.copyfileobj(source, f)
        except (tarfile.TarError, EOFError) as exc:
            raise ArchiveError(f"Error reading {member.name!r} from tar: {exc}") from exc
        except OSError as exc:
            raise FilesystemError.from_oserror(path, "write file", exc) from exc


def _write_symlink(path: Path, target: str) -> None:
    _make_dirs(path.parent)
    if path.is_symlink() or path.is_file():
        _unlink(path)
    try:
        os.symlink(target, path)
    except OSError as exc:
        raise FilesystemError.from_oserror(path, "create symlink", exc) from exc


def _unlink(path: Path) -> None:
    try:
        path.unlink()
    except OSError as exc:
        raise FilesystemError.from_oserror(path, "replace", exc) from exc
