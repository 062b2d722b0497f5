"""
Unit tests for bootstrap/entrypoints.py (the reportkit CLI)
"""

import json
import logging

import pytest

from reportkit.bootstrap.entrypoints import EXIT_INVALID, EXIT_OK, EXIT_UNSUPPORTED, cli_main
from reportkit.reporting.exporters import JSONExporter


@pytest.fixture(autouse=True)
def restore_logging(monkeypatch):
    """Keep handlers installed by setup_logging from leaking between tests."""
    monkeypatch.setenv("REPORTKIT_PDF_ENGINE", "none")
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture
def report_file(tmp_path, executive_report):
    path = tmp_path / "report.json"
    path.write_text(JSONExporter().export(executive_report), encoding="utf-8")
    return path


class TestExportCommand:
    """Test `reportkit export`."""

    def test_csv(self, tmp_path, report_file, capsys):
        out_dir = tmp_path / "out"
        code = cli_main(["export", str(report_file), "--format", "csv", "--output-dir", str(out_dir)])

        assert code == EXIT_OK
        files = list(out_dir.glob("executive-overview-report-*.csv"))
        assert len(files) == 1
        assert capsys.readouterr().out.strip() == str(files[0])

    def test_raw_input(self, tmp_path, executive_report):
        path = tmp_path / "raw.json"
        path.write_text(json.dumps(executive_report.to_dict()), encoding="utf-8")
        out_dir = tmp_path / "out"

        code = cli_main(["export", str(path), "-f", "markdown", "-o", str(out_dir), "--filename", "weekly"])

        assert code == EXIT_OK
        assert (out_dir / "weekly.md").read_text(encoding="utf-8").startswith("# Executive Overview")

    def test_pdf_without_engine_writes_html(self, tmp_path, report_file):
        out_dir = tmp_path / "out"
        code = cli_main(["export", str(report_file), "-f", "pdf", "-o", str(out_dir), "--include-charts"])

        assert code == EXIT_OK
        files = list(out_dir.glob("*.html"))
        assert len(files) == 1
        assert "Trend Analysis" in files[0].read_text(encoding="utf-8")

    def test_date_range(self, tmp_path, report_file):
        out_dir = tmp_path / "out"
        code = cli_main([
            "export", str(report_file), "-f", "csv", "-o", str(out_dir),
            "--filename", "ranged", "--start", "2026-01-01", "--end", "2026-01-31",
        ])

        assert code == EXIT_OK
        assert "# Date Range: 2026-01-01 to 2026-01-31" in (out_dir / "ranged.csv").read_text(encoding="utf-8")

    def test_half_date_range(self, tmp_path, report_file):
        code = cli_main(["export", str(report_file), "-f", "csv", "-o", str(tmp_path), "--start", "2026-01-01"])
        assert code == EXIT_INVALID

    def test_png_unsupported(self, tmp_path, report_file):
        assert cli_main(["export", str(report_file), "-f", "png", "-o", str(tmp_path)]) == EXIT_UNSUPPORTED

    def test_unknown_format(self, tmp_path, report_file):
        assert cli_main(["export", str(report_file), "-f", "docx", "-o", str(tmp_path)]) == EXIT_UNSUPPORTED

    def test_missing_input(self, tmp_path):
        assert cli_main(["export", str(tmp_path / "nope.json"), "-f", "csv"]) == EXIT_INVALID

    def test_malformed_input(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text('{"templateId": "t"}', encoding="utf-8")
        assert cli_main(["export", str(path), "-f", "csv", "-o", str(tmp_path)]) == EXIT_INVALID

    def test_format_required(self, report_file):
        with pytest.raises(SystemExit) as exc:
            cli_main(["export", str(report_file)])
        assert exc.value.code == 2


class TestValidateCommand:

    def test_valid(self, report_file, capsys):
        assert cli_main(["validate", str(report_file)]) == EXIT_OK
        assert json.loads(capsys.readouterr().out) == {"valid": True, "errors": []}

    def test_invalid(self, tmp_path, capsys):
        path = tmp_path / "bad.json"
        path.write_text("[]", encoding="utf-8")

        assert cli_main(["validate", str(path)]) == EXIT_INVALID
        assert json.loads(capsys.readouterr().out)["errors"] == ["Export must be a JSON object"]


class TestMisc:

    def test_formats_json(self, capsys):
        assert cli_main(["formats", "--json"]) == EXIT_OK
        formats = json.loads(capsys.readouterr().out)
        assert [f["format"] for f in formats] == ["csv", "excel", "pdf", "markdown", "json", "png"]

    def test_formats_table(self, capsys):
        assert cli_main(["formats"]) == EXIT_OK
        assert "excel      .xlsx  Excel" in capsys.readouterr().out

    def test_no_command(self):
        assert cli_main([]) == EXIT_UNSUPPORTED

    def test_bad_config_file(self, tmp_path):
        path = tmp_path / "reportkit.json"
        path.write_text("{broken", encoding="utf-8")
        assert cli_main(["-c", str(path), "formats"]) == EXIT_UNSUPPORTED

    def test_malformed_env_number(self, monkeypatch, capsys):
        monkeypatch.setenv("REPORTKIT_EXPORT_SCALE", "big")
        assert cli_main(["formats"]) == EXIT_UNSUPPORTED
        assert "REPORTKIT_EXPORT_SCALE" in capsys.readouterr().err
