"""Mapping archive entry names onto paths under a base directory."""

from __future__ import annotations

from pathlib import Path, PurePosixPath

from .exceptions import FilesystemError


def resolve_base(path) -> Path:
    """Return the absolute, symlink-resolved form of directory *path*."""
    try:
        base = Path(path).resolve(strict=True)
    except OSError as exc:
        raise FilesystemError.from_oserror(path, "resolve directory", exc) from exc
    if not base.is_dir():
        raise FilesystemError(base, "Not a directory")
    return base


def entry_path(base: Path, name: str) -> Path:
    """Return where entry *name* lives under the resolved directory *base*.

    Leading ``./`` components are dropped.  Absolute names, ``..``
    segments and parents that resolve outside *base* through a symlink
    raise :class:`FilesystemError`.
    """
    pure = PurePosixPath(name)
    if pure.is_absolute() or ".." in pure.parts:
        raise FilesystemError(name, "Entry path escapes the directory")
    path = base.joinpath(*pure.parts)
    if path != base and not path.parent.resolve().is_relative_to(base):
        raise FilesystemError(name, "Entry path escapes the directory")
    return path
