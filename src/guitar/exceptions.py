"""Exceptions for guitar."""

from __future__ import annotations


def _with_entry(message: str, name: str | None) -> str:
    if name is None:
        return message
    return f"{message} (entry {name!r})"


class GuitarError(Exception):
    """Base class for every error raised by an export or import pass."""


class UnrecognizedEntryType(GuitarError):
    """Raised for a tar type flag or letter code outside the known set.

    *flag* is the offending value: the raw tar type flag (``bytes``) on
    export, the letter code on import.  *name* is the entry, when known.
    """

    def __init__(self, flag, name: str | None = None):
        self.flag = flag
        self.name = name
        super().__init__(_with_entry(f"Unexpected entry type: {flag!r}", name))


class ModeConversionError(GuitarError):
    """Raised when a mode cannot be converted between octal and its digit form."""

    def __init__(self, value, reason: str, name: str | None = None):
        self.value = value
        self.reason = reason
        self.name = name
        super().__init__(_with_entry(f"Cannot convert mode {value!r}: {reason}", name))


class TimeConversionError(GuitarError):
    """Raised when a modification time falls outside the representable range."""

    def __init__(self, value, name: str | None = None):
        self.value = value
        self.name = name
        super().__init__(_with_entry(f"Cannot convert mtime {value!r}: out of range", name))


class FilesystemError(GuitarError):
    """Raised when creating, opening, stat-ing or copying a path fails."""

    def __init__(self, path, message: str):
        self.path = str(path)
        super().__init__(f"{message}: {self.path}")

    @classmethod
    def from_oserror(cls, path, action: str, exc: OSError) -> FilesystemError:
        """Wrap *exc*, e.g. ``Could not create file (Permission denied): a/b``."""
        reason = exc.strerror or str(exc)
        return cls(path, f"Could not {action} ({reason})")


class MetadataCodecError(GuitarError):
    """Raised when a sidecar line cannot be encoded or decoded.

    *line* is the 1-based line number when the record came from a file.
    """

    def __init__(self, message: str, line: int | None = None):
        self.line = line
        if line is not None:
            message = f"line {line}: {message}"
        super().__init__(message)


class MissingMetadataError(GuitarError):
    """Raised when an import finds no sidecar file in the source directory."""

    def __init__(self, path):
        self.path = str(path)
        super().__init__(f"Metadata file not found: {self.path}")


class ArchiveError(GuitarError):
    """Raised when the tar stream itself cannot be read or written."""
