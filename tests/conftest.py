"""Shared fixtures for guitar tests."""

import io
import tarfile

import pytest
from click.testing import CliRunner

# 2014-05-13T16:53:20Z
MTIME = 1400000000


def _member(name, type=tarfile.REGTYPE, mode=0o644, **attrs):
    info = tarfile.TarInfo(name)
    info.type = type
    info.mode = mode
    info.mtime = MTIME
    for key, value in attrs.items():
        setattr(info, key, value)
    return info


def _make_tar(entries, fmt=tarfile.PAX_FORMAT):
    """Build an uncompressed tar from ``(TarInfo, data or None)`` pairs."""
    buf = io.BytesIO()
    with tarfile.open(fileobj=buf, mode="w", format=fmt) as tf:
        for info, data in entries:
            if data is None:
                tf.addfile(info)
            else:
                info.size = len(data)
                tf.addfile(info, io.BytesIO(data))
    return buf.getvalue()


@pytest.fixture
def member():
    """Factory for tar members with a fixed mtime."""
    return _member


@pytest.fixture
def make_tar():
    return _make_tar


@pytest.fixture
def sample_entries():
    """Directory a/, file a/b.txt ("hello", 0644) and symlink a/c -> a/b.txt."""
    return [
        (_member("a", tarfile.DIRTYPE, 0o755, uid=1000, gid=1000), None),
        (_member("a/b.txt", uid=1000, gid=1000), b"hello"),
        (_member("a/c", tarfile.SYMTYPE, 0o777, uid=1000, gid=1000,
                 linkname="a/b.txt"), None),
    ]


@pytest.fixture
def sample_tar(sample_entries):
    return _make_tar(sample_entries)


@pytest.fixture
def exported(tmp_path, sample_tar):
    """Directory holding the exported sample archive."""
    from guitar import export_from_stream

    dest = tmp_path / "tree"
    export_from_stream(io.BytesIO(sample_tar), dest)
    return dest


# ---------------------------------------------------------------------------
# CLI fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def runner():
    return CliRunner()
