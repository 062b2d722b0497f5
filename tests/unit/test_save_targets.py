"""
Unit tests for reporting/targets.py
"""

import os

import pytest

from reportkit.reporting.enums import ExportFormat
from reportkit.reporting.schema import ExportArtifact
from reportkit.reporting.targets import DirectorySaveTarget, MemorySaveTarget


def _artifact(content="a,b\n1,2", filename="report.csv"):
    return ExportArtifact(content, filename, "text/csv", ExportFormat.CSV)


class TestDirectorySaveTarget:
    """Test file output."""

    def test_writes_file(self, tmp_path):
        location = DirectorySaveTarget(tmp_path).save(_artifact())
        assert location == str(tmp_path / "report.csv")
        assert (tmp_path / "report.csv").read_bytes() == b"a,b\n1,2"

    def test_creates_directory(self, tmp_path):
        target_dir = tmp_path / "nested" / "exports"
        DirectorySaveTarget(target_dir).save(_artifact())
        assert (target_dir / "report.csv").exists()

    def test_binary_content(self, tmp_path):
        DirectorySaveTarget(tmp_path).save(_artifact(content=b"\x00\x01", filename="x.png"))
        assert (tmp_path / "x.png").read_bytes() == b"\x00\x01"

    def test_no_temp_files_left(self, tmp_path):
        DirectorySaveTarget(tmp_path).save(_artifact())
        assert os.listdir(tmp_path) == ["report.csv"]

    def test_filename_stays_in_directory(self, tmp_path):
        (tmp_path / "inner").mkdir()
        DirectorySaveTarget(tmp_path / "inner").save(_artifact(filename="../escape.csv"))
        assert (tmp_path / "inner" / "escape.csv").exists()
        assert not (tmp_path / "escape.csv").exists()

    def test_overwrite_refused(self, tmp_path):
        target = DirectorySaveTarget(tmp_path, overwrite=False)
        target.save(_artifact())
        with pytest.raises(FileExistsError):
            target.save(_artifact())

    def test_temp_file_released_on_failure(self, tmp_path, monkeypatch):
        def fail(src, dst):
            raise OSError("disk full")

        monkeypatch.setattr("reportkit.reporting.targets.os.replace", fail)
        with pytest.raises(OSError):
            DirectorySaveTarget(tmp_path).save(_artifact())
        assert os.listdir(tmp_path) == []


class TestMemorySaveTarget:

    def test_keeps_artifacts(self):
        target = MemorySaveTarget()
        assert target.save(_artifact()) == "memory://report.csv"
        assert list(target.by_filename()) == ["report.csv"]
        target.clear()
        assert target.saved == []
