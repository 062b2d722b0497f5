"""
Unit tests for reporting/exporters/excel.py

Workbooks are parsed back with ElementTree so the assertions read cell
values rather than raw markup.
"""

import xml.etree.ElementTree as ET

import pytest

from reportkit.reporting.exporters import ExcelExporter
from reportkit.reporting.exporters.excel import NUMBER, Cell, Sheet
from reportkit.reporting.formatting import format_raw_number
from reportkit.reporting.schema import ReportDataPoint

SS = "{urn:schemas-microsoft-com:office:spreadsheet}"


def _sheets(content: bytes):
    root = ET.fromstring(content)
    return {ws.get(f"{SS}Name"): ws for ws in root.iter(f"{SS}Worksheet")}


def _rows(worksheet):
    """Cell texts per row, header row first."""
    return [
        [(data.text or "") for data in row.iter(f"{SS}Data")]
        for row in worksheet.iter(f"{SS}Row")
    ]


@pytest.fixture
def exporter(clock):
    return ExcelExporter(clock=clock)


class TestWorkbook:
    """Test workbook envelope."""

    def test_returns_utf8_bytes(self, exporter, executive_report):
        content = exporter.export(executive_report)
        assert isinstance(content, bytes)
        assert content.startswith(b'<?xml version="1.0" encoding="UTF-8"?>')

    def test_string_variant(self, exporter, executive_report):
        assert exporter.export_string(executive_report).encode("utf-8") == exporter.export(executive_report)

    def test_four_sheets_in_order(self, exporter, executive_report):
        root = ET.fromstring(exporter.export(executive_report))
        names = [ws.get(f"{SS}Name") for ws in root.iter(f"{SS}Worksheet")]
        assert names == ["Summary", "Metrics Data", "Trends", "Template Info"]

    def test_document_properties(self, exporter, executive_report):
        text = exporter.export_string(executive_report)
        assert "<Author>reportkit</Author>" in text
        assert "<Created>2026-01-15T10:30:00.000Z</Created>" in text

    def test_custom_author_escaped(self, clock, executive_report):
        text = ExcelExporter(author="R&D", clock=clock).export_string(executive_report)
        assert "<Author>R&amp;D</Author>" in text


class TestSheets:
    """Test sheet content."""

    def test_summary_counts(self, exporter, executive_report):
        rows = _rows(_sheets(exporter.export(executive_report))["Summary"])
        values = {row[0]: row[1] for row in rows if len(row) == 2}
        assert values["Report Name"] == "Executive Overview"
        assert values["Total Metrics"] == "2"
        assert values["Metrics Improved"] == "2"
        assert values["Metrics Declined"] == "0"

    def test_metrics_data_numbers(self, exporter, executive_report):
        rows = _rows(_sheets(exporter.export(executive_report))["Metrics Data"])
        assert rows[0] == ["Metric ID", "Current Value", "Previous Value", "Change", "Change %"]
        revenue = rows[1]
        assert revenue[:4] == ["totalRevenue", "128000", "115000", "13000"]

    def test_change_percent_is_fraction(self, exporter, executive_report):
        rows = _rows(_sheets(exporter.export(executive_report))["Metrics Data"])
        expected = format_raw_number(executive_report.data_points[0].change_percent / 100)
        assert rows[1][4] == expected

    def test_change_cells_styled(self, exporter, executive_report):
        text = exporter.export_string(executive_report)
        assert 'ss:StyleID="Positive"><Data ss:Type="Number">13000</Data>' in text

    def test_missing_previous_is_empty_cell(self, exporter, bare_report):
        rows = _rows(_sheets(exporter.export(bare_report))["Metrics Data"])
        assert rows[1] == ["sessions", "4200", "", "", ""]

    def test_trend_rows_padded(self, exporter, executive_report):
        rows = _rows(_sheets(exporter.export(executive_report))["Trends"])
        assert rows[0] == ["Metric ID", "Period 1", "Period 2", "Period 3", "Period 4"]
        assert rows[1] == ["totalRevenue", "100000", "110000", "115000", "128000"]
        assert rows[2] == ["conversionRate", "3", "3.1", "3.4", ""]

    def test_no_trend_data(self, exporter, bare_report):
        rows = _rows(_sheets(exporter.export(bare_report))["Trends"])
        assert rows[0] == ["Metric ID", "No Trend Data"]
        assert rows[1] == ["No trend data available", ""]

    def test_template_info(self, exporter, executive_report):
        rows = _rows(_sheets(exporter.export(executive_report))["Template Info"])
        values = {row[0]: row[1] for row in rows if len(row) == 2}
        assert values["Is Default"] == "Yes"
        assert values["Metric Count"] == "2"
        assert values["totalRevenue"] == "Order: 0, Width: full"
        assert values["conversionRate"] == "Order: 1, Width: half"

    def test_markup_in_names_escaped(self, clock, report_factory):
        data = report_factory(["sessions"], [ReportDataPoint("sessions", 1)], name="R&D <Q1>")
        content = ExcelExporter(clock=clock).export(data)
        assert b"R&amp;D &lt;Q1&gt;" in content
        rows = _rows(_sheets(content)["Summary"])
        assert rows[1][1] == "R&D <Q1>"


class TestCellsAndColumns:
    """Test cell typing and column sizing."""

    def test_number_cell(self):
        assert Cell(2.5).to_xml() == '<Cell><Data ss:Type="Number">2.5</Data></Cell>'

    def test_non_finite_number_is_empty(self):
        assert Cell(float("nan"), NUMBER).to_xml() == '<Cell><Data ss:Type="String"></Data></Cell>'

    def test_boolean_cell(self):
        assert Cell(True).to_xml() == '<Cell><Data ss:Type="Boolean">1</Data></Cell>'

    def test_string_cell_escaped(self):
        assert Cell("a<b").to_xml() == '<Cell><Data ss:Type="String">a&lt;b</Data></Cell>'

    def test_column_width_minimum(self):
        assert Sheet("S", ["ID"], [[Cell("x")]]).column_widths() == [70]

    def test_column_width_follows_content(self):
        sheet = Sheet("S", ["ID"], [[Cell("a" * 22)]])
        assert sheet.column_widths() == [154]

    def test_column_width_capped(self):
        sheet = Sheet("S", ["ID"], [[Cell("a" * 40)]])
        assert sheet.column_widths() == [200]
