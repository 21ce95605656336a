"""Basic commands: ls."""

from __future__ import annotations

import json

import click

from ..header import EntryType
from ..sidecar import header_record, read_sidecar
from ._helpers import (
    main,
    _dir_option,
    _require_dir,
    _reported_errors,
)


def _owner(header) -> str:
    return f"{header.uid}/{header.gid}"


def _display_name(header) -> str:
    if header.type == EntryType.SYMLINK:
        return f"{header.name} -> {header.linkname}"
    if header.type == EntryType.HARDLINK:
        return f"{header.name} link to {header.linkname}"
    if header.type in (EntryType.CHAR_DEVICE, EntryType.BLOCK_DEVICE):
        return f"{header.name} ({header.devmajor},{header.devminor})"
    return header.name


# ---------------------------------------------------------------------------
# ls
# ---------------------------------------------------------------------------

@main.command()
@_dir_option
@click.option("--format", "fmt", type=click.Choice(["text", "json"]),
              default="text", help="Output format.")
@click.pass_context
def ls(ctx, fmt):
    """List the entries recorded in DIR/.guitar.

    \b
    Text output has one entry per line:
        TYPE  MODE  UID/GID  NAME
    """
    directory = _require_dir(ctx)
    with _reported_errors():
        with read_sidecar(directory) as records:
            headers = list(records)

    if fmt == "json":
        click.echo(json.dumps([header_record(h) for h in headers]))
        return

    width = max((len(_owner(h)) for h in headers), default=0)
    for h in headers:
        click.echo(f"{h.type}  {h.mode:04d}  {_owner(h):>{width}}  {_display_name(h)}")
