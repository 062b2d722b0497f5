"""
reporting/exporters/markdown.py - Markdown exporter.

Sections, in order: header, summary counts, metrics overview table,
performance highlights, per-metric detail with sparklines, trend table,
template information, footer. Sections with nothing to show are omitted.
"""

from __future__ import annotations
from typing import Dict, List, Optional, Sequence

from .base import BaseExporter, unresolved_metric_ids
from ..enums import ExportFormat
from ..escaping import escape_markdown_cell
from ..formatting import (
    NOT_AVAILABLE,
    format_change_percent,
    format_export_date,
    format_fixed,
    format_metric_value,
    format_number,
    format_signed_change,
)
from ..schema import ExportOptions, MetricDefinition, ReportData, ReportDataPoint, is_finite_number

SPARK_CHARS = [" ", "_", ".", "-", "~", "=", "^"]
HIGHLIGHT_COUNT = 3

_ALIGN_MARKERS = {"left": "---", "center": ":---:", "right": "---:"}


def table(headers: Sequence[str], rows: Sequence[Sequence[str]], alignments: Optional[Sequence[str]] = None) -> str:
    """Markdown table; cells are pipe-escaped."""
    header_row = "| " + " | ".join(escape_markdown_cell(h) for h in headers) + " |"
    separator = "| " + " | ".join(
        _ALIGN_MARKERS[alignments[i] if alignments and i < len(alignments) else "left"]
        for i in range(len(headers))
    ) + " |"
    body = ["| " + " | ".join(escape_markdown_cell(c) for c in row) + " |" for row in rows]
    return "\n".join([header_row, separator] + body)


def sparkline(values: Sequence[float]) -> str:
    """
    Seven-level character sparkline scaled to the series' own min/max.

    A flat series has range 1, so every sample maps to the lowest level.
    """
    samples = [v for v in values if is_finite_number(v)]
    if not samples:
        return ""
    low = min(samples)
    span = (max(samples) - low) or 1
    top = len(SPARK_CHARS) - 1
    out = []
    for v in values:
        if not is_finite_number(v):
            out.append(SPARK_CHARS[0])
            continue
        index = min(int((v - low) / span * top), top)
        out.append(SPARK_CHARS[index])
    return "".join(out)


def _with_change(dp: ReportDataPoint) -> bool:
    return is_finite_number(dp.change_percent)


def highlights(data_points: Sequence[ReportDataPoint]):
    """
    (top performers, needs attention) by change percent.

    Top performers: up to three largest gains, strictly positive only.
    Needs attention: up to three largest losses by magnitude, strictly negative only.
    """
    ranked = sorted(
        (dp for dp in data_points if _with_change(dp)),
        key=lambda dp: dp.change_percent,
        reverse=True,
    )
    top = [dp for dp in ranked[:HIGHLIGHT_COUNT] if dp.change_percent > 0]
    bottom = [dp for dp in reversed(ranked[-HIGHLIGHT_COUNT:]) if dp.change_percent < 0]
    return top, bottom


class MarkdownExporter(BaseExporter):
    """Exports report data to a Markdown document."""

    format = ExportFormat.MARKDOWN

    def export(self, data: ReportData, options: Optional[ExportOptions] = None) -> str:
        options = self._options(options)
        definitions = self._definitions(data)

        sections = [
            self._header(data, options),
            self._summary(data),
            self._overview(data),
            self._highlights(data),
            self._detail(data, definitions),
            self._trend_analysis(data),
            self._template_info(data),
            self._footer(),
        ]
        return "\n".join(s for s in sections if s)

    def _header(self, data: ReportData, options: ExportOptions) -> str:
        template = data.template
        lines = [f"# {template.name}", ""]
        if template.description:
            lines.extend([f"> {template.description}", ""])
        lines.extend([
            "---",
            "",
            "## Report Details",
            "",
            f"- **Generated:** {format_export_date(data.generated_at)}",
            f"- **Template:** {template.name}",
            f"- **Created By:** {template.created_by}",
        ])
        if options.date_range:
            lines.append(f"- **Date Range:** {options.date_range}")

        unresolved = unresolved_metric_ids(data, self.catalog)
        if unresolved:
            lines.append(f"- **Unresolved Metrics:** {', '.join(unresolved)}")

        lines.append("")
        return "\n".join(lines)

    def _summary(self, data: ReportData) -> str:
        total = len(data.data_points)
        improved = sum(1 for dp in data.data_points if _with_change(dp) and dp.change_percent > 0)
        declined = sum(1 for dp in data.data_points if _with_change(dp) and dp.change_percent < 0)

        return "\n".join([
            "## Summary",
            "",
            f"- **Total Metrics:** {total}",
            f"- **Improved:** {improved}",
            f"- **Declined:** {declined}",
            f"- **Unchanged:** {total - improved - declined}",
            "",
        ])

    def _overview(self, data: ReportData) -> str:
        rows = [
            [
                dp.metric_id,
                format_fixed(dp.value),
                format_fixed(dp.previous_value) if dp.previous_value is not None else NOT_AVAILABLE,
                format_signed_change(dp.change, format_fixed, zero="0"),
                format_change_percent(dp.change_percent, zero="0%"),
            ]
            for dp in data.data_points
        ]
        return "\n".join([
            "## Metrics Overview",
            "",
            table(
                ["Metric", "Value", "Previous", "Change", "Change %"],
                rows,
                ["left", "right", "right", "right", "right"],
            ),
            "",
        ])

    def _highlights(self, data: ReportData) -> str:
        top, bottom = highlights(data.data_points)
        if not top and not bottom:
            return ""

        lines = ["## Performance Highlights", ""]
        if top:
            lines.extend(["### Top Performers", ""])
            lines.extend(f"- **{dp.metric_id}:** {format_change_percent(dp.change_percent)}" for dp in top)
            lines.append("")
        if bottom:
            lines.extend(["### Needs Attention", ""])
            lines.extend(f"- **{dp.metric_id}:** {format_change_percent(dp.change_percent)}" for dp in bottom)
            lines.append("")
        return "\n".join(lines)

    def _detail(self, data: ReportData, definitions: Dict[str, MetricDefinition]) -> str:
        lines = ["## Detailed Metrics", ""]

        for dp in data.data_points:
            unit = definitions[dp.metric_id].unit
            lines.append(f"### {dp.metric_id}")
            lines.append("")
            lines.append(f"- **Current Value:** {format_metric_value(dp.value, unit)}")

            if dp.previous_value is not None:
                lines.append(f"- **Previous Value:** {format_metric_value(dp.previous_value, unit)}")
            if dp.change is not None:
                change = format_signed_change(dp.change, lambda v: format_metric_value(v, unit))
                lines.append(f"- **Change:** {change}")
            if dp.change_percent is not None:
                lines.append(f"- **Change %:** {format_change_percent(dp.change_percent, zero='0.0%')}")
            if dp.has_trend:
                lines.append(f"- **Trend:** `{sparkline(dp.trend)}`")

            lines.append("")

        return "\n".join(lines)

    def _trend_analysis(self, data: ReportData) -> str:
        with_trends = [dp for dp in data.data_points if dp.has_trend]
        if not with_trends:
            return ""

        width = max(len(dp.trend) for dp in with_trends)
        headers = ["Metric"] + [f"P{i}" for i in range(1, width + 1)]
        rows = []
        for dp in with_trends:
            row = [dp.metric_id] + [format_number(v) for v in dp.trend]
            row.extend("-" for _ in range(width - len(dp.trend)))
            rows.append(row)

        return "\n".join([
            "## Trend Analysis",
            "",
            table(headers, rows),
            "",
            "*P = Period (e.g., day, week)*",
            "",
        ])

    def _template_info(self, data: ReportData) -> str:
        template = data.template
        rows = [
            ["ID", template.id],
            ["Name", template.name],
            ["Created", format_export_date(template.created_at)],
            ["Updated", format_export_date(template.updated_at)],
            ["Created By", template.created_by],
            ["Default Template", "Yes" if template.is_default else "No"],
            ["Metrics Count", str(len(template.metrics))],
        ]
        return "\n".join([
            "## Template Information",
            "",
            table(["Property", "Value"], rows, ["left", "left"]),
            "",
        ])

    def _footer(self) -> str:
        return "\n".join([
            "---",
            "",
            f"*Report generated by reportkit on {self._timestamp()}*",
            "",
        ])
