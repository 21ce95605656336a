"""Shared helpers, option decorators, and the main CLI group."""

from __future__ import annotations

from contextlib import contextmanager

import click

from ..exceptions import GuitarError


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _status(ctx, msg):
    """Emit a status message to stderr when verbose mode (-v) is on."""
    if ctx.obj.get("verbose"):
        click.echo(msg, err=True)


def _store_dir(ctx, param, value):
    """Click callback: store --dir value in the context."""
    ctx.ensure_object(dict)
    if value is not None:
        ctx.obj["dir"] = value
    return value


def _dir_option(f):
    """Shared --dir/-C option decorator for all commands."""
    return click.option(
        "--dir", "-C", "directory", type=click.Path(file_okay=False),
        envvar="GUITAR_DIR",
        help="Directory holding the exported files (or set GUITAR_DIR).",
        expose_value=False, callback=_store_dir, is_eager=True,
    )(f)


def _require_dir(ctx) -> str:
    """Get the directory from context, raising a clear error if missing."""
    directory = ctx.obj.get("dir")
    if not directory:
        raise click.ClickException(
            "No directory specified. Use --dir or set GUITAR_DIR."
        )
    return directory


@contextmanager
def _reported_errors():
    """Turn library errors into click errors (exit status 1)."""
    try:
        yield
    except GuitarError as exc:
        raise click.ClickException(str(exc)) from exc


# ---------------------------------------------------------------------------
# Main group
# ---------------------------------------------------------------------------

@click.group()
@click.option("--dir", "-C", "directory", type=click.Path(file_okay=False),
              envvar="GUITAR_DIR",
              help="Directory holding the exported files (or set GUITAR_DIR).",
              expose_value=False, callback=_store_dir, is_eager=True)
@click.option("-v", "--verbose", is_flag=True, help="Verbose output on stderr.")
@click.pass_context
def main(ctx, verbose):
    """guitar — keep tar archives in git.

    Export a tar archive to a plain directory whose file content git can
    track, plus a .guitar file recording what git would lose: modes,
    ownership, timestamps, links and device nodes.  Import turns the
    directory back into the same tar stream.

    \b
    Quick start:
      guitar export -C tree image.tar
      guitar ls -C tree
      guitar import -C tree rebuilt.tar

    \b
    ARCHIVE defaults to '-' (stdin for export, stdout for import).
    Set GUITAR_DIR to avoid passing --dir on every call.
    """
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
