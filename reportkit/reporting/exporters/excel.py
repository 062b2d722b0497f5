"""
reporting/exporters/excel.py - Excel exporter (SpreadsheetML 2003 XML).

Four worksheets: Summary, Metrics Data, Trends, Template Info. The payload
is a single XML document that Excel, LibreOffice and Google Sheets open
directly; there is no OOXML zip packaging.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, List, Optional

from .base import BaseExporter
from ..enums import ExportFormat
from ..escaping import escape_xml
from ..formatting import format_raw_number
from ..schema import ExportOptions, ReportData, is_finite_number, is_number

STRING = "String"
NUMBER = "Number"
BOOLEAN = "Boolean"

MIN_COLUMN_CHARS = 10
PIXELS_PER_CHAR = 7
MAX_COLUMN_WIDTH = 200

_EMPTY_CELL = '<Cell><Data ss:Type="String"></Data></Cell>'

_STYLES = """  <Styles>
    <Style ss:ID="Default" ss:Name="Normal">
      <Alignment ss:Vertical="Bottom"/>
      <Font ss:FontName="Calibri" ss:Size="11"/>
    </Style>
    <Style ss:ID="HeaderStyle">
      <Font ss:FontName="Calibri" ss:Size="11" ss:Bold="1" ss:Color="#FFFFFF"/>
      <Interior ss:Color="#4472C4" ss:Pattern="Solid"/>
      <Alignment ss:Horizontal="Center" ss:Vertical="Center"/>
      <Borders>
        <Border ss:Position="Bottom" ss:LineStyle="Continuous" ss:Weight="1" ss:Color="#2F5496"/>
      </Borders>
    </Style>
    <Style ss:ID="TitleStyle">
      <Font ss:FontName="Calibri" ss:Size="14" ss:Bold="1"/>
    </Style>
    <Style ss:ID="Currency">
      <NumberFormat ss:Format="&quot;$&quot;#,##0.00"/>
    </Style>
    <Style ss:ID="Percent">
      <NumberFormat ss:Format="0.00%"/>
    </Style>
    <Style ss:ID="Positive">
      <Font ss:FontName="Calibri" ss:Size="11" ss:Color="#006400"/>
    </Style>
    <Style ss:ID="Negative">
      <Font ss:FontName="Calibri" ss:Size="11" ss:Color="#8B0000"/>
    </Style>
  </Styles>"""


@dataclass
class Cell:
    """One worksheet cell. `type` is inferred from the value when None."""
    value: Any = None
    type: Optional[str] = None
    style: Optional[str] = None

    def display_text(self) -> str:
        if self.value is None:
            return ""
        if is_number(self.value):
            return format_raw_number(self.value)
        if isinstance(self.value, bool):
            return "1" if self.value else "0"
        return str(self.value)

    def to_xml(self) -> str:
        value = self.value
        if value is None or value == "":
            return _EMPTY_CELL

        cell_type = self.type or _infer_type(value)
        if cell_type == NUMBER and not is_finite_number(value):
            return _EMPTY_CELL

        style_attr = f' ss:StyleID="{self.style}"' if self.style else ""
        if cell_type == NUMBER:
            text = format_raw_number(value)
        elif cell_type == BOOLEAN:
            text = "1" if value else "0"
        else:
            text = escape_xml(value)
        return f'<Cell{style_attr}><Data ss:Type="{cell_type}">{text}</Data></Cell>'


@dataclass
class Sheet:
    """Worksheet: a styled header row followed by data rows."""
    name: str
    headers: List[str]
    rows: List[List[Cell]] = field(default_factory=list)

    def column_widths(self) -> List[int]:
        widths = []
        for i, header in enumerate(self.headers):
            longest = max(
                (len(row[i].display_text()) for row in self.rows if i < len(row)),
                default=0,
            )
            widths.append(min(max(len(header), longest, MIN_COLUMN_CHARS) * PIXELS_PER_CHAR, MAX_COLUMN_WIDTH))
        return widths

    def to_xml(self) -> str:
        columns = "".join(f'<Column ss:Width="{w}"/>' for w in self.column_widths())
        header = "<Row>" + "".join(
            Cell(h, STRING, "HeaderStyle").to_xml() for h in self.headers
        ) + "</Row>"
        rows = "\n      ".join(
            "<Row>" + "".join(cell.to_xml() for cell in row) + "</Row>" for row in self.rows
        )
        return (
            f'  <Worksheet ss:Name="{escape_xml(self.name)}">\n'
            f"    <Table>\n"
            f"      {columns}\n"
            f"      {header}\n"
            f"      {rows}\n"
            f"    </Table>\n"
            f"  </Worksheet>"
        )


def _infer_type(value: Any) -> str:
    if isinstance(value, bool):
        return BOOLEAN
    if is_number(value):
        return NUMBER
    return STRING


def _change_style(change_percent) -> Optional[str]:
    if not is_finite_number(change_percent) or change_percent == 0:
        return None
    return "Positive" if change_percent > 0 else "Negative"


def _optional_number(value, style: Optional[str] = None) -> Cell:
    if value is None:
        return Cell("", STRING)
    return Cell(value, NUMBER, style)


class ExcelExporter(BaseExporter):
    """
    Exports report data to a SpreadsheetML workbook.

    `export()` returns UTF-8 bytes; `export_string()` returns the XML text.
    """

    format = ExportFormat.EXCEL

    def __init__(self, author: str = "reportkit", **kwargs):
        super().__init__(**kwargs)
        self.author = author

    def export(self, data: ReportData, options: Optional[ExportOptions] = None) -> bytes:
        return self.export_string(data, options).encode("utf-8")

    def export_string(self, data: ReportData, options: Optional[ExportOptions] = None) -> str:
        options = self._options(options)
        sheets = [
            self._summary_sheet(data, options),
            self._data_sheet(data),
            self._trend_sheet(data),
            self._template_sheet(data),
        ]
        return self._workbook(sheets)

    def _workbook(self, sheets: List[Sheet]) -> str:
        worksheets = "\n".join(sheet.to_xml() for sheet in sheets)
        return (
            '<?xml version="1.0" encoding="UTF-8"?>\n'
            '<?mso-application progid="Excel.Sheet"?>\n'
            '<Workbook xmlns="urn:schemas-microsoft-com:office:spreadsheet"\n'
            '  xmlns:o="urn:schemas-microsoft-com:office:office"\n'
            '  xmlns:x="urn:schemas-microsoft-com:office:excel"\n'
            '  xmlns:ss="urn:schemas-microsoft-com:office:spreadsheet">\n'
            '  <DocumentProperties xmlns="urn:schemas-microsoft-com:office:office">\n'
            "    <Title>Custom Report Export</Title>\n"
            f"    <Author>{escape_xml(self.author)}</Author>\n"
            f"    <Created>{self._timestamp()}</Created>\n"
            "  </DocumentProperties>\n"
            f"{_STYLES}\n"
            f"{worksheets}\n"
            "</Workbook>"
        )

    # =========================================================================
    # SHEETS
    # =========================================================================

    def _summary_sheet(self, data: ReportData, options: ExportOptions) -> Sheet:
        template = data.template
        rows = [
            [Cell("Report Name", style="TitleStyle"), Cell(template.name)],
            [Cell("Description"), Cell(template.description)],
            [Cell("Generated At"), Cell(data.generated_at)],
            [Cell("Template ID"), Cell(data.template_id)],
            [Cell("Created By"), Cell(template.created_by)],
        ]
        if options.date_range:
            rows.append([Cell("Date Range"), Cell(str(options.date_range))])

        improved = sum(
            1 for dp in data.data_points if is_finite_number(dp.change_percent) and dp.change_percent > 0
        )
        declined = sum(
            1 for dp in data.data_points if is_finite_number(dp.change_percent) and dp.change_percent < 0
        )

        rows.append([Cell(""), Cell("")])
        rows.append([Cell("Total Metrics", style="TitleStyle"), Cell(len(data.data_points), NUMBER)])
        rows.append([Cell("Metrics Improved"), Cell(improved, NUMBER, "Positive")])
        rows.append([Cell("Metrics Declined"), Cell(declined, NUMBER, "Negative")])

        return Sheet("Summary", ["Property", "Value"], rows)

    def _data_sheet(self, data: ReportData) -> Sheet:
        rows = []
        for dp in data.data_points:
            style = _change_style(dp.change_percent)
            percent = dp.change_percent / 100 if is_number(dp.change_percent) else None
            rows.append([
                Cell(dp.metric_id, STRING),
                Cell(dp.value, NUMBER),
                _optional_number(dp.previous_value),
                _optional_number(dp.change, style),
                _optional_number(percent, style),
            ])
        return Sheet(
            "Metrics Data",
            ["Metric ID", "Current Value", "Previous Value", "Change", "Change %"],
            rows,
        )

    def _trend_sheet(self, data: ReportData) -> Sheet:
        width = max((len(dp.trend) for dp in data.data_points), default=0)

        if width == 0:
            return Sheet(
                "Trends",
                ["Metric ID", "No Trend Data"],
                [[Cell("No trend data available"), Cell("")]],
            )

        headers = ["Metric ID"] + [f"Period {i}" for i in range(1, width + 1)]
        rows = []
        for dp in data.data_points:
            row = [Cell(dp.metric_id, STRING)]
            row.extend(Cell(sample, NUMBER) for sample in dp.trend)
            # Short trends keep their leading alignment; the tail is blank
            row.extend(Cell("", STRING) for _ in range(width - len(dp.trend)))
            rows.append(row)
        return Sheet("Trends", headers, rows)

    def _template_sheet(self, data: ReportData) -> Sheet:
        template = data.template
        rows = [
            [Cell("ID"), Cell(template.id)],
            [Cell("Name"), Cell(template.name)],
            [Cell("Description"), Cell(template.description)],
            [Cell("Created At"), Cell(template.created_at)],
            [Cell("Updated At"), Cell(template.updated_at)],
            [Cell("Created By"), Cell(template.created_by)],
            [Cell("Is Default"), Cell("Yes" if template.is_default else "No")],
            [Cell("Metric Count"), Cell(len(template.metrics), NUMBER)],
            [Cell(""), Cell("")],
            [Cell("Metrics Configuration", style="TitleStyle"), Cell("")],
        ]
        for metric in template.metrics:
            rows.append([
                Cell(metric.metric_id, STRING),
                Cell(f"Order: {metric.order}, Width: {metric.width.value}"),
            ])
        return Sheet("Template Info", ["Property", "Value"], rows)
