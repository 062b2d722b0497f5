"""
reporting/exporters/__init__.py - Report exporter exports.
"""

from .base import BaseExporter
from .csv_exporter import CSVExporter
from .excel import ExcelExporter
from .markdown import MarkdownExporter, sparkline
from .json_exporter import (
    JSONExporter,
    ValidationResult,
    validate_json_export,
    parse_json_export,
)
from .pdf import PDFExporter, PdfRenderResult
from .png import CaptureAdapter, CaptureResult
from .factory import FORMAT_INFO, FormatInfo, ReportExporter, get_exporter

__all__ = [
    "BaseExporter",
    "CSVExporter",
    "ExcelExporter",
    "MarkdownExporter",
    "sparkline",
    "JSONExporter",
    "ValidationResult",
    "validate_json_export",
    "parse_json_export",
    "PDFExporter",
    "PdfRenderResult",
    "CaptureAdapter",
    "CaptureResult",
    "FORMAT_INFO",
    "FormatInfo",
    "ReportExporter",
    "get_exporter",
]
