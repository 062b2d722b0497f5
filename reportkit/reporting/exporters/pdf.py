"""
reporting/exporters/pdf.py - PDF exporter (print-styled HTML).

The report is laid out as a self-contained A4 print document. When an
HTML-to-PDF renderer is available the document is converted to PDF;
otherwise the HTML itself is the artifact. The result says which one it is.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Tuple, Union
import logging

from .base import BaseExporter
from ..capabilities import HtmlToPdfRenderer
from ..enums import ExportFormat, OutputKind
from ...errors import ErrorCode, RenderDegradation, create_render_degradation
from ..escaping import escape_xml
from ..formatting import (
    NOT_AVAILABLE,
    format_change_percent,
    format_export_date,
    format_number,
)
from ..schema import ExportOptions, ReportData, is_finite_number

logger = logging.getLogger("reporting.exporters.pdf")

OVERVIEW_CARD_COUNT = 4
MIN_BAR_HEIGHT = 5

WarningHook = Callable[[RenderDegradation], None]


@dataclass(frozen=True)
class PdfRenderResult:
    """Tagged PDF export result: real PDF bytes or the HTML fallback."""
    kind: OutputKind
    content: Union[bytes, str]
    html: str
    warnings: Tuple[str, ...] = field(default_factory=tuple)

    @property
    def is_pdf(self) -> bool:
        return self.kind == OutputKind.PDF


def _change_class(value) -> str:
    if not is_finite_number(value) or value == 0:
        return ""
    return "positive" if value > 0 else "negative"


def _bar_heights(trend) -> List[float]:
    """Bar heights in percent of this trend's own maximum, floored at 5%."""
    samples = [v if is_finite_number(v) else 0 for v in trend]
    peak = max(samples, default=0)
    if peak <= 0:
        return [MIN_BAR_HEIGHT for _ in samples]
    return [max(v / peak * 100, MIN_BAR_HEIGHT) for v in samples]


class PDFExporter(BaseExporter):
    """
    Exports report data to PDF, falling back to printable HTML.

    A renderer that raises is logged and reported through the warning hook;
    the export then returns the HTML fallback instead of failing.
    """

    format = ExportFormat.PDF

    def __init__(
        self,
        renderer: Optional[HtmlToPdfRenderer] = None,
        on_warning: Optional[WarningHook] = None,
        **kwargs,
    ):
        super().__init__(**kwargs)
        self.renderer = renderer
        self.on_warning = on_warning

    def export(self, data: ReportData, options: Optional[ExportOptions] = None) -> PdfRenderResult:
        html = self.render_html(data, options)

        if self.renderer is None:
            logger.debug("No PDF renderer, returning HTML fallback")
            return PdfRenderResult(kind=OutputKind.HTML_FALLBACK, content=html, html=html)

        try:
            pdf_bytes = self.renderer.render_html_to_pdf(html)
        except Exception as e:
            degradation = create_render_degradation(
                "PDF rendering failed, exported printable HTML instead",
                "reporting.exporters.pdf",
                code=ErrorCode.RND_PDF_FAILED,
                detail=str(e),
            )
            logger.warning(str(degradation))
            if self.on_warning is not None:
                self.on_warning(degradation)
            return PdfRenderResult(
                kind=OutputKind.HTML_FALLBACK,
                content=html,
                html=html,
                warnings=(str(degradation),),
            )

        return PdfRenderResult(kind=OutputKind.PDF, content=pdf_bytes, html=html)

    def render_html(self, data: ReportData, options: Optional[ExportOptions] = None) -> str:
        """The print document, also usable as a preview."""
        options = self._options(options)
        template = data.template

        parts = []
        parts.append("<!DOCTYPE html>")
        parts.append('<html lang="en">')
        parts.append("<head>")
        parts.append('<meta charset="UTF-8">')
        parts.append('<meta name="viewport" content="width=device-width, initial-scale=1.0">')
        parts.append(f"<title>{escape_xml(template.name)} - Report</title>")
        parts.append(self._get_styles())
        parts.append("</head>")
        parts.append("<body>")

        parts.append("<header>")
        parts.append(f"<h1>{escape_xml(template.name)}</h1>")
        parts.append(f'<p class="subtitle">{escape_xml(template.description)}</p>')
        parts.append(f'<p class="meta">Generated: {escape_xml(format_export_date(data.generated_at))}</p>')
        parts.append("</header>")

        parts.append(self._overview_cards(data))
        parts.append(self._metrics_table(data))
        if options.include_charts:
            parts.append(self._trend_section(data))
        parts.append(self._report_info(data, options))

        parts.append("<footer>")
        parts.append("<p>Report generated by reportkit</p>")
        parts.append(f"<p>{self._timestamp()}</p>")
        parts.append("</footer>")

        parts.append("</body>")
        parts.append("</html>")

        return "\n".join(p for p in parts if p)

    # =========================================================================
    # SECTIONS
    # =========================================================================

    def _overview_cards(self, data: ReportData) -> str:
        cards = []
        for dp in data.data_points[:OVERVIEW_CARD_COUNT]:
            cards.append('<div class="summary-card">')
            cards.append(f'<span class="label">{escape_xml(dp.metric_id)}</span>')
            cards.append(f'<span class="value">{escape_xml(format_number(dp.value))}</span>')
            if is_finite_number(dp.change_percent):
                css = _change_class(dp.change_percent)
                cards.append(
                    f'<span class="change {css}">{escape_xml(format_change_percent(dp.change_percent))}</span>'
                )
            cards.append("</div>")

        return "\n".join([
            "<section>",
            "<h2>Key Metrics Overview</h2>",
            '<div class="summary-grid">',
            *cards,
            "</div>",
            "</section>",
        ])

    def _metrics_table(self, data: ReportData) -> str:
        rows = []
        for dp in data.data_points:
            rows.append((
                [
                    dp.metric_id,
                    format_number(dp.value),
                    format_number(dp.previous_value) if dp.previous_value is not None else NOT_AVAILABLE,
                    format_number(dp.change) if dp.change is not None else NOT_AVAILABLE,
                    format_change_percent(dp.change_percent),
                ],
                _change_class(dp.change_percent),
            ))

        return "\n".join([
            "<section>",
            "<h2>Detailed Metrics</h2>",
            self._table(["Metric", "Current", "Previous", "Change", "Change %"], rows),
            "</section>",
        ])

    def _trend_section(self, data: ReportData) -> str:
        with_trends = [dp for dp in data.data_points if dp.has_trend]
        if not with_trends:
            return ""

        charts = []
        for dp in with_trends:
            bars = "".join(
                f'<div class="trend-bar" style="height: {height:.1f}%"></div>'
                for height in _bar_heights(dp.trend)
            )
            charts.append(
                '<div class="trend-item">'
                f"<h3>{escape_xml(dp.metric_id)}</h3>"
                f'<div class="trend-chart">{bars}</div>'
                "</div>"
            )

        return "\n".join([
            "<section>",
            "<h2>Trend Analysis</h2>",
            '<div class="trend-grid">',
            *charts,
            "</div>",
            "</section>",
        ])

    def _report_info(self, data: ReportData, options: ExportOptions) -> str:
        rows = [
            ["Report Name", data.template.name],
            ["Template ID", data.template_id],
            ["Generated At", format_export_date(data.generated_at)],
            ["Created By", data.template.created_by],
            ["Total Metrics", str(len(data.data_points))],
        ]
        if options.date_range:
            rows.append(["Date Range", str(options.date_range)])

        return "\n".join([
            "<section>",
            "<h2>Report Information</h2>",
            self._table(["Property", "Value"], [(row, "") for row in rows]),
            "</section>",
        ])

    def _table(self, headers: List[str], rows: List[Tuple[List[str], str]]) -> str:
        """HTML table; the change class colors the last column of each row."""
        parts = ["<table>", "<thead><tr>"]
        parts.extend(f"<th>{escape_xml(h)}</th>" for h in headers)
        parts.append("</tr></thead>")
        parts.append("<tbody>")
        for cells, change_class in rows:
            parts.append("<tr>")
            last = len(cells) - 1
            for i, cell in enumerate(cells):
                if i == last and change_class:
                    parts.append(f'<td class="{change_class}">{escape_xml(cell)}</td>')
                else:
                    parts.append(f"<td>{escape_xml(cell)}</td>")
            parts.append("</tr>")
        parts.append("</tbody>")
        parts.append("</table>")
        return "".join(parts)

    def _get_styles(self) -> str:
        """Print CSS."""
        return """<style>
* { box-sizing: border-box; margin: 0; padding: 0; }
body {
    font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, 'Helvetica Neue', Arial, sans-serif;
    font-size: 11px;
    line-height: 1.5;
    color: #1a1a2e;
    padding: 40px;
    max-width: 800px;
    margin: 0 auto;
}
header { text-align: center; margin-bottom: 32px; padding-bottom: 20px; border-bottom: 3px solid #4472C4; }
header h1 { font-size: 28px; margin-bottom: 8px; }
header .subtitle { font-size: 14px; color: #666; margin-bottom: 4px; }
header .meta { font-size: 11px; color: #888; }
section { margin-bottom: 28px; page-break-inside: avoid; }
h2 { font-size: 18px; margin-bottom: 16px; padding-bottom: 8px; border-bottom: 2px solid #e0e0e0; }
h3 { font-size: 14px; color: #444; margin: 16px 0 12px; }
.summary-grid { display: grid; grid-template-columns: repeat(4, 1fr); gap: 16px; margin-bottom: 24px; }
.summary-card { background: #f8f9fa; padding: 16px; border-radius: 8px; border: 1px solid #e0e0e0; text-align: center; }
.summary-card .label { display: block; font-size: 10px; color: #666; text-transform: uppercase; letter-spacing: 0.5px; margin-bottom: 6px; }
.summary-card .value { display: block; font-size: 22px; font-weight: 700; }
.summary-card .change { display: block; font-size: 11px; margin-top: 4px; }
.positive { color: #16a34a; }
.negative { color: #dc2626; }
table { width: 100%; border-collapse: collapse; font-size: 10px; margin-bottom: 16px; }
th, td { padding: 10px 12px; text-align: left; border-bottom: 1px solid #e0e0e0; }
th { background: #4472C4; color: white; font-weight: 600; text-transform: uppercase; font-size: 9px; letter-spacing: 0.5px; }
tr:nth-child(even) { background: #f8f9fa; }
.trend-grid { display: flex; flex-wrap: wrap; gap: 24px; }
.trend-item { flex: 1; min-width: 160px; }
.trend-chart { display: flex; align-items: flex-end; gap: 2px; height: 40px; margin-top: 8px; }
.trend-bar { flex: 1; background: #4472C4; min-width: 8px; border-radius: 2px 2px 0 0; }
footer { margin-top: 40px; padding-top: 20px; border-top: 2px solid #e0e0e0; text-align: center; font-size: 10px; color: #888; }
@media print {
    body { padding: 20px; }
    .summary-grid { grid-template-columns: repeat(2, 1fr); }
}
@page { size: A4; margin: 20mm; }
</style>"""
