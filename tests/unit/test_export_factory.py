"""
Unit tests for reporting/exporters/factory.py

Tests the ReportExporter orchestrator: dispatch, naming, MIME types, PDF
fallback, PNG capture and save targets.
"""

import io

import pytest
from PIL import Image

from reportkit.bootstrap.config import ExportConfig
from reportkit.errors import ErrorCode, InputShapeError, UnsupportedOperationError
from reportkit.reporting.capabilities import RenderCapabilities, VisualElement
from reportkit.reporting.enums import ExportFormat
from reportkit.reporting.exporters import (
    CSVExporter,
    ReportExporter,
    get_exporter,
)
from reportkit.reporting.schema import ExportOptions, ReportDataPoint
from reportkit.reporting.targets import MemorySaveTarget


class FakeRenderer:
    name = "fake"

    def render_html_to_pdf(self, html: str) -> bytes:
        return b"%PDF-1.7 fake"


@pytest.fixture
def exporter(clock):
    return ReportExporter(clock=clock)


class TestGetExporter:

    def test_by_string(self):
        assert isinstance(get_exporter("csv"), CSVExporter)

    def test_png_has_no_data_exporter(self):
        with pytest.raises(UnsupportedOperationError):
            get_exporter("png")

    def test_unknown(self):
        with pytest.raises(UnsupportedOperationError) as exc:
            get_exporter("docx")
        assert exc.value.code == ErrorCode.UNS_FORMAT

    def test_exporters_do_not_write_files(self):
        # Files are written through save targets, which accept every artifact kind
        for format in ("csv", "excel", "pdf", "markdown", "json"):
            assert not hasattr(get_exporter(format), "export_to_file")


class TestRender:
    """Test synchronous export."""

    @pytest.mark.parametrize("format,filename,mime_type", [
        ("csv", "executive-overview-report-2026-01-15.csv", "text/csv"),
        ("excel", "executive-overview-report-2026-01-15.xlsx", "application/vnd.ms-excel"),
        ("markdown", "executive-overview-report-2026-01-15.md", "text/markdown"),
        ("json", "executive-overview-report-2026-01-15.json", "application/json"),
    ])
    def test_names_and_types(self, exporter, executive_report, format, filename, mime_type):
        artifact = exporter.render(executive_report, format)
        assert artifact.filename == filename
        assert artifact.mime_type == mime_type
        assert artifact.format == ExportFormat(format)
        assert artifact.kind is None

    def test_excel_is_bytes(self, exporter, executive_report):
        assert isinstance(exporter.render(executive_report, "excel").content, bytes)

    def test_pdf_fallback_named_html(self, exporter, executive_report):
        artifact = exporter.render(executive_report, ExportFormat.PDF)
        assert artifact.kind == "html-fallback"
        assert artifact.filename == "executive-overview-report-2026-01-15.html"
        assert artifact.mime_type == "text/html"
        assert artifact.content.startswith("<!DOCTYPE html>")

    def test_pdf_with_renderer(self, clock, executive_report):
        exporter = ReportExporter(
            capabilities=RenderCapabilities(pdf_renderer=FakeRenderer()),
            clock=clock,
        )
        artifact = exporter.render(executive_report, "pdf")
        assert artifact.kind == "pdf"
        assert artifact.filename.endswith(".pdf")
        assert artifact.mime_type == "application/pdf"
        assert artifact.content == b"%PDF-1.7 fake"

    def test_filename_override(self, exporter, executive_report):
        artifact = exporter.render(executive_report, "csv", ExportOptions(filename="q1-board"))
        assert artifact.filename == "q1-board.csv"

    def test_options_format_follows_call(self, exporter, executive_report):
        artifact = exporter.render(executive_report, "markdown", ExportOptions(format="csv"))
        assert artifact.content.startswith("# Executive Overview")

    def test_png_needs_element(self, exporter, executive_report):
        with pytest.raises(UnsupportedOperationError) as exc:
            exporter.render(executive_report, "png")
        assert exc.value.code == ErrorCode.UNS_MISSING_ELEMENT

    def test_shape_checked_first(self, exporter, executive_report, report_factory):
        broken = report_factory(["sessions"], [ReportDataPoint("refunds", 10)])
        with pytest.raises(InputShapeError):
            exporter.render(broken, "csv")

    def test_unresolved_metric_warning(self, exporter, report_factory):
        data = report_factory(["customMetric"], [ReportDataPoint("customMetric", 5)])
        artifact = exporter.render(data, "csv")
        assert len(artifact.warnings) == 1
        assert "customMetric" in artifact.warnings[0]

    def test_input_not_mutated(self, exporter, executive_report):
        before = executive_report.to_dict()
        for format in ("csv", "excel", "pdf", "markdown", "json"):
            exporter.render(executive_report, format)
        assert executive_report.to_dict() == before

    def test_deterministic(self, exporter, executive_report):
        assert exporter.render(executive_report, "markdown") == exporter.render(executive_report, "markdown")


class TestConfiguredExporter:
    """Test ExportConfig defaults flowing into exporters."""

    def test_author(self, clock, executive_report):
        exporter = ReportExporter(config=ExportConfig(author="Finance Team"), clock=clock)
        assert b"<Author>Finance Team</Author>" in exporter.render(executive_report, "excel").content

    def test_json_indent(self, clock, executive_report):
        exporter = ReportExporter(config=ExportConfig(json_indent=4), clock=clock)
        content = exporter.render(executive_report, "json").content
        assert content.split("\n")[1].startswith('    "metadata"')

    @pytest.mark.asyncio
    async def test_png_plain_options_keep_config(self, clock, executive_report):
        config = ExportConfig(scale=1.0, background_color="#000000")
        exporter = ReportExporter(config=config, clock=clock)
        artifact = await exporter.export(
            executive_report,
            "png",
            ExportOptions(format=ExportFormat.PNG, filename="chart"),
            element=VisualElement("chart", 120, 60),
        )

        with Image.open(io.BytesIO(artifact.content)) as img:
            assert img.size == (120, 60)
            assert img.convert("RGB").getpixel((0, 0)) == (0, 0, 0)
        assert artifact.filename == "chart.png"


class TestStringExport:

    @pytest.mark.parametrize("format", ["csv", "markdown", "json"])
    def test_text_formats(self, exporter, executive_report, format):
        assert isinstance(exporter.get_export_content(executive_report, format), str)

    @pytest.mark.parametrize("format", ["excel", "pdf", "png"])
    def test_other_formats_rejected(self, exporter, executive_report, format):
        with pytest.raises(UnsupportedOperationError) as exc:
            exporter.get_export_content(executive_report, format)
        assert exc.value.code == ErrorCode.UNS_STRING_EXPORT


class TestAsyncExport:
    """Test the async entry point and PNG."""

    @pytest.mark.asyncio
    async def test_text_format(self, exporter, executive_report):
        artifact = await exporter.export(executive_report, "csv")
        assert artifact.filename.endswith(".csv")

    @pytest.mark.asyncio
    async def test_png_without_element(self, exporter, executive_report):
        with pytest.raises(UnsupportedOperationError):
            await exporter.export(executive_report, "png")

    @pytest.mark.asyncio
    async def test_png_placeholder(self, clock, executive_report):
        seen = []
        exporter = ReportExporter(clock=clock, on_warning=seen.append)
        artifact = await exporter.export(
            executive_report, "png", element=VisualElement("preview", 300, 150)
        )
        assert artifact.content.startswith(b"\x89PNG")
        assert artifact.filename == "executive-overview-report-2026-01-15.png"
        assert artifact.mime_type == "image/png"
        assert len(artifact.warnings) == 1
        assert seen[0].code == ErrorCode.RND_CAPTURE_UNAVAILABLE

    @pytest.mark.asyncio
    async def test_png_several_elements(self, exporter, executive_report):
        elements = [VisualElement("a", 100, 50), VisualElement("b", 100, 50)]
        artifact = await exporter.export(executive_report, "png", element=elements)
        assert len(artifact.warnings) == 2

    @pytest.mark.asyncio
    async def test_download(self, exporter, executive_report):
        target = MemorySaveTarget()
        location = await exporter.download(executive_report, "markdown", target)
        assert location == "memory://executive-overview-report-2026-01-15.md"
        assert target.saved[0].content.startswith("# Executive Overview")


class TestFormatInfo:

    def test_list_formats(self):
        formats = ReportExporter.list_formats()
        assert [info.format for info in formats] == list(ExportFormat)

    def test_chart_formats(self):
        assert [info.format for info in ReportExporter.chart_formats()] == [
            ExportFormat.PDF,
            ExportFormat.PNG,
        ]

    def test_format_info(self):
        info = ReportExporter.get_format_info("excel")
        assert info.extension == ".xlsx"
        assert info.to_dict()["mimeType"] == "application/vnd.ms-excel"
        assert info.to_dict()["supportsCharts"] is False
