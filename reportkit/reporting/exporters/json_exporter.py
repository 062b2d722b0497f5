"""
reporting/exporters/json_exporter.py - JSON exporter and re-import validator.

Export modes:
  - wrapped (default): {"metadata": {...}, "data": {...}} with derived stats
  - raw: the normalized ReportData only

validate_json_export() checks a previously exported document and returns a
ValidationResult; it never raises. parse_json_export() turns a document
back into ReportData.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional
import json
import logging

from .base import BaseExporter
from ..enums import ExportFormat
from ...errors import ErrorCode, create_input_shape_error
from ..schema import ExportOptions, JSONExportOptions, ReportData, is_finite_number, is_number

logger = logging.getLogger("reporting.exporters.json")

EXPORT_VERSION = "1.0.0"


@dataclass
class ValidationResult:
    """Outcome of validating a JSON export."""
    valid: bool
    errors: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {"valid": self.valid, "errors": list(self.errors)}


def export_stats(data: ReportData) -> Dict[str, Any]:
    """Derived counts for the metadata block."""
    changes = [dp.change_percent for dp in data.data_points if is_finite_number(dp.change_percent)]
    return {
        "totalMetrics": len(data.data_points),
        "metricsWithTrends": sum(1 for dp in data.data_points if dp.has_trend),
        "metricsWithChanges": len(changes),
        "averageChange": sum(changes) / len(changes) if changes else 0,
        "templateMetricCount": len(data.template.metrics),
    }


class JSONExporter(BaseExporter):
    """Exports report data to JSON."""

    format = ExportFormat.JSON

    def __init__(self, indent: int = 2, **kwargs):
        super().__init__(**kwargs)
        self.indent = indent

    def export(self, data: ReportData, options: Optional[ExportOptions] = None) -> str:
        options = self._json_options(options)
        payload = self.export_object(data, options) if options.include_metadata else data.to_dict()

        if options.pretty_print:
            return json.dumps(payload, indent=options.indent, ensure_ascii=False, allow_nan=False)
        return json.dumps(payload, separators=(",", ":"), ensure_ascii=False, allow_nan=False)

    def export_minified(self, data: ReportData) -> str:
        """Raw data, no wrapper, no whitespace."""
        return self.export(
            data,
            JSONExportOptions(pretty_print=False, include_metadata=False),
        )

    def export_object(self, data: ReportData, options: Optional[ExportOptions] = None) -> Dict[str, Any]:
        """Wrapped export as a dict (not serialized)."""
        metadata: Dict[str, Any] = {
            "exportedAt": self._timestamp(),
            "format": "json",
            "version": EXPORT_VERSION,
            "templateName": data.template.name,
            "templateId": data.template_id,
        }
        if options is not None and options.date_range:
            metadata["dateRange"] = options.date_range.to_dict()
        metadata["stats"] = export_stats(data)
        return {"metadata": metadata, "data": data.to_dict()}

    def _json_options(self, options: Optional[ExportOptions]) -> JSONExportOptions:
        if isinstance(options, JSONExportOptions):
            return options
        if options is None:
            return JSONExportOptions(indent=self.indent)
        return JSONExportOptions(
            include_charts=options.include_charts,
            date_range=options.date_range,
            filename=options.filename,
            indent=self.indent,
        )


# =============================================================================
# RE-IMPORT
# =============================================================================

def _unwrap(parsed: Dict[str, Any]) -> Any:
    return parsed["data"] if parsed.get("data") is not None else parsed


def validate_json_export(text: str) -> ValidationResult:
    """
    Check the structural contract of a JSON export (wrapped or raw).

    Errors name the offending field, and data point errors carry the index:
    "dataPoints[3] missing metricId".
    """
    errors: List[str] = []

    try:
        parsed = json.loads(text)
    except (TypeError, ValueError) as e:
        return ValidationResult(valid=False, errors=[f"Invalid JSON: {e}"])

    if not isinstance(parsed, dict):
        return ValidationResult(valid=False, errors=["Export must be a JSON object"])

    data = _unwrap(parsed)
    if not isinstance(data, dict):
        return ValidationResult(valid=False, errors=["Report data must be a JSON object"])

    if not data.get("templateId"):
        errors.append("Missing required field: templateId")

    template = data.get("template")
    if not template:
        errors.append("Missing required field: template")
    elif not isinstance(template, dict):
        errors.append("template must be an object")
    else:
        if not template.get("id"):
            errors.append("Missing template.id")
        if not template.get("name"):
            errors.append("Missing template.name")
        if template.get("metrics") is None:
            errors.append("Missing template.metrics")

    points = data.get("dataPoints")
    if points is None:
        errors.append("Missing required field: dataPoints")
    elif not isinstance(points, list):
        errors.append("dataPoints must be an array")
    else:
        for i, point in enumerate(points):
            point = point if isinstance(point, dict) else {}
            if not point.get("metricId"):
                errors.append(f"dataPoints[{i}] missing metricId")
            if not is_number(point.get("value")):
                errors.append(f"dataPoints[{i}] value must be a number")

    if not data.get("generatedAt"):
        errors.append("Missing required field: generatedAt")

    if errors:
        logger.debug(f"JSON export failed validation with {len(errors)} error(s)")
    return ValidationResult(valid=not errors, errors=errors)


def parse_json_export(text: str) -> ReportData:
    """
    Rebuild ReportData from a JSON export.

    Raises:
        InputShapeError: Invalid JSON or a document missing required fields
    """
    try:
        parsed = json.loads(text)
    except (TypeError, ValueError) as e:
        raise create_input_shape_error(
            f"Invalid JSON: {e}",
            "reporting.exporters.json",
            code=ErrorCode.INP_TYPE_MISMATCH,
        ) from e

    if not isinstance(parsed, dict):
        raise create_input_shape_error(
            "Export must be a JSON object",
            "reporting.exporters.json",
            actual=type(parsed).__name__,
            code=ErrorCode.INP_TYPE_MISMATCH,
        )

    if "metadata" in parsed and "data" in parsed:
        parsed = parsed["data"]
    return ReportData.from_dict(parsed)
