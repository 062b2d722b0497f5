"""
reporting/__init__.py - Report export framework.
"""

from .enums import (
    ExportFormat,
    MetricCategory,
    MetricUnit,
    MetricAggregation,
    MetricWidth,
    ChartType,
    OutputKind,
)
from .schema import (
    MetricDefinition,
    ReportMetric,
    ReportTemplate,
    ReportDataPoint,
    ReportData,
    DateRange,
    ExportOptions,
    JSONExportOptions,
    PNGExportOptions,
    ExportArtifact,
)
from .catalog import MetricCatalog
from .capabilities import RenderCapabilities, VisualElement, probe_capabilities
from .formatting import format_metric_value, generate_filename, slugify
from .escaping import escape_csv, escape_xml
from .targets import SaveTarget, DirectorySaveTarget, MemorySaveTarget
from .exporters import (
    CSVExporter,
    ExcelExporter,
    MarkdownExporter,
    JSONExporter,
    PDFExporter,
    PdfRenderResult,
    CaptureAdapter,
    ReportExporter,
    ValidationResult,
    validate_json_export,
    parse_json_export,
    get_exporter,
)

__all__ = [
    # Enums
    "ExportFormat",
    "MetricCategory",
    "MetricUnit",
    "MetricAggregation",
    "MetricWidth",
    "ChartType",
    "OutputKind",
    # Schema
    "MetricDefinition",
    "ReportMetric",
    "ReportTemplate",
    "ReportDataPoint",
    "ReportData",
    "DateRange",
    "ExportOptions",
    "JSONExportOptions",
    "PNGExportOptions",
    "ExportArtifact",
    # Catalog and capabilities
    "MetricCatalog",
    "RenderCapabilities",
    "VisualElement",
    "probe_capabilities",
    # Primitives
    "format_metric_value",
    "generate_filename",
    "slugify",
    "escape_csv",
    "escape_xml",
    # Targets
    "SaveTarget",
    "DirectorySaveTarget",
    "MemorySaveTarget",
    # Exporters
    "CSVExporter",
    "ExcelExporter",
    "MarkdownExporter",
    "JSONExporter",
    "PDFExporter",
    "PdfRenderResult",
    "CaptureAdapter",
    "ReportExporter",
    "ValidationResult",
    "validate_json_export",
    "parse_json_export",
    "get_exporter",
]
