"""Archive commands: export, import."""

from __future__ import annotations

import os

import click

from ..export import export_from_stream
from ..importer import TAR_FORMATS, import_from_filesystem
from ..sidecar import METADATA_FILENAME
from ._helpers import (
    main,
    _dir_option,
    _require_dir,
    _reported_errors,
    _status,
)


# ---------------------------------------------------------------------------
# export
# ---------------------------------------------------------------------------

@main.command("export")
@_dir_option
@click.argument("archive", type=click.File("rb"), default="-")
@click.pass_context
def export_cmd(ctx, archive):
    """Export a tar archive into a directory.

    ARCHIVE is the tar file to read.  Use '-' to read from stdin (the
    default).  Compression is auto-detected.  Files and directories are
    written under --dir, symlinks are recreated, and every entry's
    metadata goes to DIR/.guitar, sorted by name.
    """
    directory = _require_dir(ctx)
    _status(ctx, "Exporting files...")
    with _reported_errors():
        headers = export_from_stream(archive, directory)
    _status(ctx, f"Exported {len(headers)} entries to {directory}")


# ---------------------------------------------------------------------------
# import
# ---------------------------------------------------------------------------

@main.command("import")
@_dir_option
@click.argument("archive", type=click.File("wb", lazy=True), default="-")
@click.option("--format", "tar_format", type=click.Choice(list(TAR_FORMATS)),
              default="pax", show_default=True, envvar="GUITAR_TAR_FORMAT",
              help="Tar header format to write (or set GUITAR_TAR_FORMAT).")
@click.pass_context
def import_cmd(ctx, archive, tar_format):
    """Build a tar archive from a directory and its .guitar file.

    ARCHIVE is the tar file to write.  Use '-' to write to stdout (the
    default).  File sizes and content come from the files on disk;
    everything else comes from DIR/.guitar.  Hard links are written last.
    """
    directory = _require_dir(ctx)
    sidecar = os.path.join(os.path.realpath(directory), METADATA_FILENAME)
    name = getattr(archive, "name", None)
    if isinstance(name, str) and os.path.realpath(name) == sidecar:
        raise click.ClickException(f"Refusing to overwrite the metadata file: {name}")
    _status(ctx, "Importing files...")
    with _reported_errors():
        headers = import_from_filesystem(archive, directory,
                                         tar_format=TAR_FORMATS[tar_format])
    _status(ctx, f"Imported {len(headers)} entries from {directory}")
