"""Tests for the guitar CLI — export, import, ls."""

import io
import json
import tarfile

from guitar.cli import main
from guitar.sidecar import METADATA_FILENAME


def _names(data):
    with tarfile.open(fileobj=io.BytesIO(data)) as tf:
        return tf.getnames()


class TestExport:
    def test_export_from_file(self, runner, sample_tar, tmp_path):
        archive = tmp_path / "in.tar"
        archive.write_bytes(sample_tar)
        dest = tmp_path / "tree"
        result = runner.invoke(main, ["export", "--dir", str(dest), str(archive)])
        assert result.exit_code == 0, result.output
        assert (dest / "a" / "b.txt").read_bytes() == b"hello"
        assert (dest / METADATA_FILENAME).exists()

    def test_export_from_stdin(self, runner, sample_tar, tmp_path):
        dest = tmp_path / "tree"
        result = runner.invoke(main, ["export", "-C", str(dest)], input=sample_tar)
        assert result.exit_code == 0, result.output
        assert (dest / "a").is_dir()

    def test_export_gzip(self, runner, sample_tar, tmp_path):
        import gzip
        dest = tmp_path / "tree"
        result = runner.invoke(main, ["export", "-C", str(dest)],
                               input=gzip.compress(sample_tar))
        assert result.exit_code == 0, result.output
        assert (dest / "a" / "b.txt").read_bytes() == b"hello"

    def test_dir_from_env(self, runner, sample_tar, tmp_path):
        dest = tmp_path / "tree"
        result = runner.invoke(main, ["export"], input=sample_tar,
                               env={"GUITAR_DIR": str(dest)})
        assert result.exit_code == 0, result.output
        assert (dest / METADATA_FILENAME).exists()

    def test_dir_on_group(self, runner, sample_tar, tmp_path):
        dest = tmp_path / "tree"
        result = runner.invoke(main, ["-C", str(dest), "export"], input=sample_tar)
        assert result.exit_code == 0, result.output
        assert (dest / METADATA_FILENAME).exists()

    def test_missing_dir(self, runner, sample_tar):
        result = runner.invoke(main, ["export"], input=sample_tar, env={"GUITAR_DIR": None})
        assert result.exit_code != 0
        assert "No directory specified" in result.output

    def test_unknown_type_fails(self, runner, member, make_tar, tmp_path):
        data = make_tar([(member("weird", tarfile.CONTTYPE), b"?")])
        result = runner.invoke(main, ["export", "-C", str(tmp_path / "t")], input=data)
        assert result.exit_code == 1
        assert "Unexpected entry type" in result.output

    def test_verbose(self, runner, sample_tar, tmp_path):
        result = runner.invoke(main, ["-v", "export", "-C", str(tmp_path / "t")],
                               input=sample_tar)
        assert result.exit_code == 0, result.output
        assert "Exported 3 entries" in result.output


class TestImport:
    def test_import_to_file(self, runner, exported, tmp_path):
        out = tmp_path / "out.tar"
        result = runner.invoke(main, ["import", "-C", str(exported), str(out)])
        assert result.exit_code == 0, result.output
        assert _names(out.read_bytes()) == ["a", "a/b.txt", "a/c"]

    def test_import_to_stdout(self, runner, exported, sample_tar):
        result = runner.invoke(main, ["import", "-C", str(exported)])
        assert result.exit_code == 0, result.output
        assert result.stdout_bytes == sample_tar

    def test_format_option(self, runner, exported, tmp_path):
        out = tmp_path / "out.tar"
        result = runner.invoke(main, ["import", "-C", str(exported), "--format", "gnu", str(out)])
        assert result.exit_code == 0, result.output
        with tarfile.open(out) as tf:
            assert tf.getmember("a/b.txt").size == 5

    def test_bad_format(self, runner, exported):
        result = runner.invoke(main, ["import", "-C", str(exported), "--format", "zip"])
        assert result.exit_code == 2

    def test_missing_metadata(self, runner, tmp_path):
        out = tmp_path / "out.tar"
        result = runner.invoke(main, ["import", "-C", str(tmp_path), str(out)])
        assert result.exit_code == 1
        assert "Metadata file not found" in result.output
        assert not out.exists()

    def test_refuses_to_overwrite_metadata(self, runner, exported):
        sidecar = exported / METADATA_FILENAME
        before = sidecar.read_bytes()
        result = runner.invoke(main, ["import", "-C", str(exported), str(sidecar)])
        assert result.exit_code != 0
        assert sidecar.read_bytes() == before

    def test_export_import_roundtrip(self, runner, sample_tar, tmp_path):
        dest = tmp_path / "tree"
        runner.invoke(main, ["export", "-C", str(dest)], input=sample_tar)
        out = tmp_path / "again.tar"
        result = runner.invoke(main, ["import", "-C", str(dest), str(out)])
        assert result.exit_code == 0, result.output
        assert out.read_bytes() == sample_tar


class TestLs:
    def test_text(self, runner, exported):
        result = runner.invoke(main, ["ls", "-C", str(exported)])
        assert result.exit_code == 0, result.output
        lines = result.output.splitlines()
        assert lines == [
            "D  0755  1000/1000  a",
            "F  0644  1000/1000  a/b.txt",
            "S  0777  1000/1000  a/c -> a/b.txt",
        ]

    def test_json(self, runner, exported):
        result = runner.invoke(main, ["ls", "-C", str(exported), "--format", "json"])
        assert result.exit_code == 0, result.output
        records = json.loads(result.output)
        assert [r["Name"] for r in records] == ["a", "a/b.txt", "a/c"]
        assert records[2]["Linkname"] == "a/b.txt"

    def test_missing_metadata(self, runner, tmp_path):
        result = runner.invoke(main, ["ls", "-C", str(tmp_path)])
        assert result.exit_code == 1
        assert "Metadata file not found" in result.output
