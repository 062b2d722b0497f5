"""
Unit tests for reporting/exporters/json_exporter.py

Tests wrapped/raw export modes and the re-import validator.
"""

import json

import pytest

from reportkit.errors import InputShapeError
from reportkit.reporting.exporters import (
    JSONExporter,
    parse_json_export,
    validate_json_export,
)
from reportkit.reporting.exporters.json_exporter import EXPORT_VERSION, export_stats
from reportkit.reporting.schema import DateRange, JSONExportOptions, ReportDataPoint


@pytest.fixture
def exporter(clock):
    return JSONExporter(clock=clock)


class TestJSONExport:
    """Test export modes."""

    def test_wrapped_metadata(self, exporter, executive_report):
        doc = json.loads(exporter.export(executive_report))
        metadata = doc["metadata"]
        assert metadata["exportedAt"] == "2026-01-15T10:30:00.000Z"
        assert metadata["format"] == "json"
        assert metadata["version"] == EXPORT_VERSION
        assert metadata["templateName"] == "Executive Overview"
        assert metadata["templateId"] == "tpl-exec"
        assert "dateRange" not in metadata

    def test_wrapped_stats(self, exporter, executive_report):
        stats = json.loads(exporter.export(executive_report))["metadata"]["stats"]
        assert stats["totalMetrics"] == 2
        assert stats["metricsWithTrends"] == 2
        assert stats["metricsWithChanges"] == 2
        assert stats["templateMetricCount"] == 2
        expected = sum(dp.change_percent for dp in executive_report.data_points) / 2
        assert stats["averageChange"] == pytest.approx(expected)

    def test_stats_without_changes(self, bare_report):
        stats = export_stats(bare_report)
        assert stats["averageChange"] == 0
        assert stats["metricsWithChanges"] == 0

    def test_wrapped_data_is_normalized_report(self, exporter, executive_report):
        doc = json.loads(exporter.export(executive_report))
        assert doc["data"] == executive_report.to_dict()

    def test_date_range(self, exporter, executive_report):
        options = JSONExportOptions(date_range=DateRange("2026-01-01", "2026-01-31"))
        doc = json.loads(exporter.export(executive_report, options))
        assert doc["metadata"]["dateRange"] == {"start": "2026-01-01", "end": "2026-01-31"}

    def test_raw_mode(self, exporter, executive_report):
        doc = json.loads(exporter.export(executive_report, JSONExportOptions(include_metadata=False)))
        assert doc == executive_report.to_dict()

    def test_minified(self, exporter, executive_report):
        output = exporter.export_minified(executive_report)
        assert "\n" not in output
        assert ": " not in output
        assert json.loads(output) == executive_report.to_dict()

    def test_indent(self, clock, executive_report):
        output = JSONExporter(indent=4, clock=clock).export(executive_report)
        assert output.split("\n")[1].startswith('    "metadata"')

    def test_non_ascii_kept(self, clock, report_factory):
        data = report_factory(["sessions"], [ReportDataPoint("sessions", 1)], name="Café Metrics")
        assert "Café Metrics" in JSONExporter(clock=clock).export(data)

    def test_absent_optionals_omitted(self, exporter, bare_report):
        point = json.loads(exporter.export(bare_report))["data"]["dataPoints"][0]
        assert point == {"metricId": "sessions", "value": 4200, "trend": []}

    def test_non_finite_numbers_written_as_null(self, exporter, report_factory):
        point = ReportDataPoint(
            "sessions",
            float("nan"),
            previous_value=float("inf"),
            change=float("-inf"),
            change_percent=float("nan"),
            trend=(10, float("nan"), 12),
        )
        output = exporter.export(report_factory(["sessions"], [point]))

        def reject(constant):
            raise ValueError(f"non-standard JSON constant: {constant}")

        parsed = json.loads(output, parse_constant=reject)
        assert parsed["data"]["dataPoints"][0] == {
            "metricId": "sessions",
            "value": None,
            "previousValue": None,
            "change": None,
            "changePercent": None,
            "trend": [10, None, 12],
        }
        assert parsed["metadata"]["stats"]["averageChange"] == 0


class TestValidateJSONExport:
    """Test the structural validator."""

    def test_wrapped_export_valid(self, exporter, executive_report):
        result = validate_json_export(exporter.export(executive_report))
        assert result.valid
        assert result.errors == []

    def test_raw_export_valid(self, exporter, executive_report):
        result = validate_json_export(exporter.export_minified(executive_report))
        assert result.valid

    def test_missing_metric_id_names_index(self, exporter, executive_report):
        doc = json.loads(exporter.export(executive_report))
        del doc["data"]["dataPoints"][1]["metricId"]

        result = validate_json_export(json.dumps(doc))

        assert not result.valid
        assert "dataPoints[1] missing metricId" in result.errors

    def test_non_numeric_value(self, exporter, executive_report):
        doc = json.loads(exporter.export(executive_report))
        doc["data"]["dataPoints"][0]["value"] = "128000"

        result = validate_json_export(json.dumps(doc))

        assert "dataPoints[0] value must be a number" in result.errors

    def test_missing_top_level_fields(self):
        result = validate_json_export("{}")
        assert not result.valid
        assert "Missing required field: templateId" in result.errors
        assert "Missing required field: template" in result.errors
        assert "Missing required field: dataPoints" in result.errors
        assert "Missing required field: generatedAt" in result.errors

    def test_template_fields(self, executive_report):
        raw = executive_report.to_dict()
        raw["template"] = {"metrics": None, "id": "", "name": "x"}
        result = validate_json_export(json.dumps(raw))
        assert "Missing template.id" in result.errors
        assert "Missing template.metrics" in result.errors
        assert "Missing template.name" not in result.errors

    def test_empty_metrics_list_is_present(self, executive_report):
        raw = executive_report.to_dict()
        raw["template"]["metrics"] = []
        assert "Missing template.metrics" not in validate_json_export(json.dumps(raw)).errors

    def test_non_object(self):
        result = validate_json_export("[1, 2, 3]")
        assert result.errors == ["Export must be a JSON object"]

    def test_invalid_json(self):
        result = validate_json_export("{not json")
        assert not result.valid
        assert result.errors[0].startswith("Invalid JSON")

    def test_to_dict(self):
        assert validate_json_export("[]").to_dict() == {
            "valid": False,
            "errors": ["Export must be a JSON object"],
        }


class TestParseJSONExport:
    """Test re-import."""

    def test_wrapped_round_trip(self, exporter, executive_report):
        assert parse_json_export(exporter.export(executive_report)) == executive_report

    def test_raw_round_trip(self, exporter, executive_report):
        assert parse_json_export(exporter.export_minified(executive_report)) == executive_report

    def test_invalid_json_raises(self):
        with pytest.raises(InputShapeError):
            parse_json_export("{not json")

    def test_non_object_raises(self):
        with pytest.raises(InputShapeError):
            parse_json_export("42")

    def test_missing_fields_raise(self):
        with pytest.raises(InputShapeError):
            parse_json_export('{"templateId": "t"}')
