"""
reporting/exporters/csv_exporter.py - CSV exporter.

One text document with four "##" sections (summary, per-metric detail, raw
data, export metadata) under a "#" comment header. Every cell goes through
escape_csv; the raw section keeps unformatted numbers and the trend as JSON
text so the values can be re-ingested losslessly.
"""

from __future__ import annotations
from typing import Dict, List, Optional

from .base import BaseExporter, unresolved_metric_ids
from ..enums import ExportFormat
from ..escaping import csv_row, escape_csv
from ..formatting import (
    NOT_AVAILABLE,
    format_change_percent,
    format_metric_value,
    format_raw_number,
    json_number_list,
)
from ..schema import ExportOptions, MetricDefinition, ReportData


class CSVExporter(BaseExporter):
    """Exports report data to sectioned CSV."""

    format = ExportFormat.CSV

    def export(self, data: ReportData, options: Optional[ExportOptions] = None) -> str:
        options = self._options(options)
        definitions = self._definitions(data)

        lines: List[str] = []
        lines.extend(self._header(data, options))
        lines.extend(self._summary(data, definitions))
        lines.extend(self._detail(data, definitions))
        lines.extend(self._raw_data(data))
        lines.extend(self._export_metadata(data))
        return "\n".join(lines)

    def _header(self, data: ReportData, options: ExportOptions) -> List[str]:
        lines = [
            f"# Custom Report: {escape_csv(data.template.name)}",
            f"# Description: {escape_csv(data.template.description)}",
            f"# Generated: {self._timestamp()}",
        ]
        if options.date_range:
            lines.append(f"# Date Range: {options.date_range}")

        unresolved = unresolved_metric_ids(data, self.catalog)
        if unresolved:
            lines.append(f"# Unresolved Metrics: {escape_csv('; '.join(unresolved))}")

        lines.append("")
        return lines

    def _summary(self, data: ReportData, definitions: Dict[str, MetricDefinition]) -> List[str]:
        lines = [
            "## Summary Metrics",
            "",
            csv_row(["Metric", "Value", "Previous", "Change", "Change %"]),
        ]
        for dp in data.data_points:
            definition = definitions[dp.metric_id]
            unit = definition.unit
            lines.append(csv_row([
                definition.name,
                format_metric_value(dp.value, unit),
                format_metric_value(dp.previous_value, unit),
                format_metric_value(dp.change, unit),
                format_change_percent(dp.change_percent),
            ]))
        lines.append("")
        return lines

    def _detail(self, data: ReportData, definitions: Dict[str, MetricDefinition]) -> List[str]:
        lines = ["## Detailed Metrics", ""]

        for dp in data.data_points:
            definition = definitions[dp.metric_id]
            unit = definition.unit

            lines.append(f"### {definition.name}")
            lines.append("")
            lines.append(csv_row(["Property", "Value"]))
            lines.append(csv_row(["Current Value", format_metric_value(dp.value, unit)]))

            if dp.previous_value is not None:
                lines.append(csv_row(["Previous Value", format_metric_value(dp.previous_value, unit)]))
            if dp.change is not None:
                lines.append(csv_row(["Absolute Change", format_metric_value(dp.change, unit)]))
            if dp.change_percent is not None:
                lines.append(csv_row(["Percent Change", format_change_percent(dp.change_percent, decimals=2)]))

            if dp.has_trend:
                lines.append("")
                lines.append(csv_row(["Period", "Trend Value"]))
                for i, sample in enumerate(dp.trend, start=1):
                    lines.append(csv_row([f"Period {i}", format_metric_value(sample, unit)]))

            lines.append("")

        return lines

    def _raw_data(self, data: ReportData) -> List[str]:
        lines = [
            "## Raw Data",
            "",
            csv_row(["Metric ID", "Value", "Previous Value", "Change", "Change Percent", "Trend (JSON)"]),
        ]
        for dp in data.data_points:
            lines.append(csv_row([
                dp.metric_id,
                format_raw_number(dp.value) or NOT_AVAILABLE,
                format_raw_number(dp.previous_value),
                format_raw_number(dp.change),
                format_raw_number(dp.change_percent),
                json_number_list(dp.trend),
            ]))
        lines.append("")
        return lines

    def _export_metadata(self, data: ReportData) -> List[str]:
        return [
            "## Export Metadata",
            "",
            csv_row(["Property", "Value"]),
            csv_row(["Template ID", data.template_id]),
            csv_row(["Template Name", data.template.name]),
            csv_row(["Generated At", data.generated_at]),
            csv_row(["Created By", data.template.created_by]),
            csv_row(["Total Metrics", len(data.data_points)]),
        ]
