from .header import EntryType, Header, decode_mode, encode_mode, export_header, import_header
from .ordering import SortKey, precedes, sort_headers, sort_headers_by_name
from .sidecar import METADATA_FILENAME, SidecarReader, read_sidecar, write_sidecar
from .export import export_from_stream, export_to_filesystem
from .importer import import_from_filesystem, import_to_tar
from .exceptions import (
    GuitarError, UnrecognizedEntryType, ModeConversionError, FilesystemError,
    TimeConversionError, MetadataCodecError, MissingMetadataError, ArchiveError,
)

__all__ = [
    "EntryType", "Header", "encode_mode", "decode_mode", "export_header", "import_header",
    "SortKey", "precedes", "sort_headers", "sort_headers_by_name",
    "METADATA_FILENAME", "SidecarReader", "read_sidecar", "write_sidecar",
    "export_from_stream", "export_to_filesystem",
    "import_from_filesystem", "import_to_tar",
    "GuitarError", "UnrecognizedEntryType", "ModeConversionError", "FilesystemError",
    "TimeConversionError", "MetadataCodecError", "MissingMetadataError", "ArchiveError",
]
