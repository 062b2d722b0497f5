"""
reporting/exporters/factory.py - Exporter registry and export orchestrator.

ReportExporter is the single entry point: it validates the input shape,
dispatches to the format's exporter, names the artifact and, on request,
hands it to a save target.
"""

from __future__ import annotations
from dataclasses import dataclass, replace
from typing import TYPE_CHECKING, Any, Callable, Dict, List, Optional, Sequence, Type, Union
import logging

from .base import BaseExporter, Clock, unresolved_metric_ids, utc_now
from .csv_exporter import CSVExporter
from .excel import ExcelExporter
from .json_exporter import JSONExporter
from .markdown import MarkdownExporter
from .pdf import PDFExporter
from .png import CaptureAdapter
from ..capabilities import RenderCapabilities, VisualElement
from ..catalog import MetricCatalog
from ..enums import ExportFormat, OutputKind
from ...errors import ErrorCode, RenderDegradation, create_unsupported_error
from ..formatting import (
    FILE_EXTENSIONS,
    HTML_EXTENSION,
    HTML_MIME_TYPE,
    MIME_TYPES,
    apply_filename_override,
    generate_filename,
)
from ..schema import (
    ExportArtifact,
    ExportOptions,
    JSONExportOptions,
    PNGExportOptions,
    ReportData,
    coerce_format,
)

if TYPE_CHECKING:
    from ...bootstrap.config import ExportConfig
    from ..targets import SaveTarget

logger = logging.getLogger("reporting.exporters.factory")

WarningHook = Callable[[RenderDegradation], None]
ElementRef = Union[VisualElement, Sequence[VisualElement]]


@dataclass(frozen=True)
class FormatInfo:
    """Display metadata for an export format."""
    format: ExportFormat
    label: str
    description: str
    extension: str
    mime_type: str
    supports_charts: bool

    def to_dict(self) -> Dict[str, Any]:
        return {
            "format": self.format.value,
            "label": self.label,
            "description": self.description,
            "extension": self.extension,
            "mimeType": self.mime_type,
            "supportsCharts": self.supports_charts,
        }


def _info(format: ExportFormat, label: str, description: str, supports_charts: bool) -> FormatInfo:
    return FormatInfo(
        format=format,
        label=label,
        description=description,
        extension=FILE_EXTENSIONS[format],
        mime_type=MIME_TYPES[format],
        supports_charts=supports_charts,
    )


FORMAT_INFO: Dict[ExportFormat, FormatInfo] = {
    ExportFormat.CSV: _info(
        ExportFormat.CSV, "CSV",
        "Comma-separated values for spreadsheets and data analysis", False),
    ExportFormat.EXCEL: _info(
        ExportFormat.EXCEL, "Excel",
        "Multi-sheet workbook with formatting for Microsoft Excel", False),
    ExportFormat.PDF: _info(
        ExportFormat.PDF, "PDF",
        "Print-ready document with professional formatting", True),
    ExportFormat.MARKDOWN: _info(
        ExportFormat.MARKDOWN, "Markdown",
        "Formatted text document with tables and indicators", False),
    ExportFormat.JSON: _info(
        ExportFormat.JSON, "JSON",
        "Structured data for programmatic access and APIs", False),
    ExportFormat.PNG: _info(
        ExportFormat.PNG, "PNG Image",
        "Screenshot of charts and report preview", True),
}

# Registry of report-data exporters by format (PNG captures elements instead)
_EXPORTER_REGISTRY: Dict[ExportFormat, Type[BaseExporter]] = {
    ExportFormat.CSV: CSVExporter,
    ExportFormat.EXCEL: ExcelExporter,
    ExportFormat.PDF: PDFExporter,
    ExportFormat.MARKDOWN: MarkdownExporter,
    ExportFormat.JSON: JSONExporter,
}

STRING_FORMATS = (ExportFormat.CSV, ExportFormat.MARKDOWN, ExportFormat.JSON)


def get_exporter(format: Union[ExportFormat, str], **kwargs) -> BaseExporter:
    """
    Get exporter instance for format.

    Args:
        format: Export format
        **kwargs: Exporter-specific options

    Returns:
        BaseExporter instance

    Raises:
        UnsupportedOperationError: Unknown format, or PNG (use CaptureAdapter)
    """
    format = coerce_format(format)
    if format not in _EXPORTER_REGISTRY:
        raise create_unsupported_error(
            f"No report-data exporter for format: {format.value}",
            "reporting.exporters.factory",
            code=ErrorCode.UNS_FORMAT,
        )
    return _EXPORTER_REGISTRY[format](**kwargs)


class ReportExporter:
    """
    Unified export interface for all formats.

    Every call is an independent transform of its input; the instance only
    holds configuration.
    """

    def __init__(
        self,
        config: Optional["ExportConfig"] = None,
        capabilities: Optional[RenderCapabilities] = None,
        catalog: Optional[MetricCatalog] = None,
        clock: Optional[Clock] = None,
        on_warning: Optional[WarningHook] = None,
    ):
        self.config = config
        self.capabilities = capabilities or RenderCapabilities.none()
        self.catalog = catalog if catalog is not None else MetricCatalog.default()
        self.clock = clock or utc_now
        self.on_warning = on_warning

    # =========================================================================
    # EXPORT
    # =========================================================================

    def render(
        self,
        data: ReportData,
        format: Union[ExportFormat, str],
        options: Optional[ExportOptions] = None,
    ) -> ExportArtifact:
        """
        Export synchronously (every format except PNG).

        Raises:
            InputShapeError: Malformed report data
            UnsupportedOperationError: Unknown format, or PNG
        """
        format = coerce_format(format)
        if format == ExportFormat.PNG:
            raise create_unsupported_error(
                "PNG export requires an element reference; use export(..., element=...)",
                "reporting.exporters.factory",
                code=ErrorCode.UNS_MISSING_ELEMENT,
            )

        data.check_shape()
        options = self._resolve_options(format, options)
        warnings = self._synthetic_warnings(data)

        logger.debug(f"Exporting '{data.template.name}' as {format.value}")

        if format == ExportFormat.PDF:
            collected: List[str] = []
            exporter = PDFExporter(
                renderer=self.capabilities.pdf_renderer,
                on_warning=self._hook(collected),
                catalog=self.catalog,
                clock=self.clock,
            )
            result = exporter.export(data, options)
            filename = self._filename(data, format, options)
            if result.kind == OutputKind.HTML_FALLBACK:
                filename = filename[: -len(FILE_EXTENSIONS[format])] + HTML_EXTENSION
                mime_type = HTML_MIME_TYPE
            else:
                mime_type = MIME_TYPES[format]
            return ExportArtifact(
                content=result.content,
                filename=filename,
                mime_type=mime_type,
                format=format,
                kind=result.kind.value,
                warnings=tuple(warnings + collected),
            )

        exporter = self._exporter(format)
        content = exporter.export(data, options)
        return ExportArtifact(
            content=content,
            filename=self._filename(data, format, options),
            mime_type=MIME_TYPES[format],
            format=format,
            warnings=tuple(warnings),
        )

    async def export(
        self,
        data: ReportData,
        format: Union[ExportFormat, str],
        options: Optional[ExportOptions] = None,
        element: Optional[ElementRef] = None,
    ) -> ExportArtifact:
        """
        Export report data (or, for PNG, the given rendered element).

        Args:
            data: Report data; names the artifact for PNG
            format: Target format
            options: Export options; format defaults apply when None
            element: Element (or elements, stacked) to capture for PNG

        Returns:
            ExportArtifact with content, filename and MIME type

        Raises:
            InputShapeError: Malformed report data
            UnsupportedOperationError: Unknown format, or PNG without element
        """
        format = coerce_format(format)
        if format != ExportFormat.PNG:
            return self.render(data, format, options)

        if element is None:
            raise create_unsupported_error(
                "PNG export requires an element reference",
                "reporting.exporters.factory",
                code=ErrorCode.UNS_MISSING_ELEMENT,
            )

        data.check_shape()
        options = self._resolve_options(format, options)
        collected: List[str] = []
        adapter = CaptureAdapter(
            capturer=self.capabilities.capturer,
            on_warning=self._hook(collected),
            gap=self.config.capture_gap if self.config is not None else 20,
        )

        if isinstance(element, VisualElement):
            content = await adapter.capture(element, options)
        else:
            content = await adapter.combine(list(element), options)

        return ExportArtifact(
            content=content,
            filename=self._filename(data, format, options),
            mime_type=MIME_TYPES[format],
            format=format,
            warnings=tuple(collected),
        )

    def get_export_content(
        self,
        data: ReportData,
        format: Union[ExportFormat, str],
        options: Optional[ExportOptions] = None,
    ) -> str:
        """
        Export content as a string (csv, markdown and json only).

        Raises:
            UnsupportedOperationError: excel, pdf or png
        """
        format = coerce_format(format)
        if format not in STRING_FORMATS:
            raise create_unsupported_error(
                f"Format {format.value} does not support string export",
                "reporting.exporters.factory",
                code=ErrorCode.UNS_STRING_EXPORT,
            )
        return self.render(data, format, options).content

    async def download(
        self,
        data: ReportData,
        format: Union[ExportFormat, str],
        target: "SaveTarget",
        options: Optional[ExportOptions] = None,
        element: Optional[ElementRef] = None,
    ) -> str:
        """Export, then hand the artifact to a save target. Returns where it went."""
        artifact = await self.export(data, format, options, element=element)
        location = target.save(artifact)
        logger.info(f"Saved {artifact.format.value} export to {location}")
        return location

    # =========================================================================
    # FORMATS
    # =========================================================================

    @staticmethod
    def list_formats() -> List[FormatInfo]:
        """All export formats with display metadata."""
        return list(FORMAT_INFO.values())

    @staticmethod
    def chart_formats() -> List[FormatInfo]:
        """Formats that can carry charts or visuals."""
        return [info for info in FORMAT_INFO.values() if info.supports_charts]

    @staticmethod
    def get_format_info(format: Union[ExportFormat, str]) -> FormatInfo:
        return FORMAT_INFO[coerce_format(format)]

    # =========================================================================
    # INTERNALS
    # =========================================================================

    def _exporter(self, format: ExportFormat) -> BaseExporter:
        kwargs: Dict[str, Any] = {"catalog": self.catalog, "clock": self.clock}
        if format == ExportFormat.EXCEL and self.config is not None:
            kwargs["author"] = self.config.author
        if format == ExportFormat.JSON and self.config is not None:
            kwargs["indent"] = self.config.json_indent
        return get_exporter(format, **kwargs)

    def _resolve_options(self, format: ExportFormat, options: Optional[ExportOptions]) -> ExportOptions:
        if options is None:
            if format == ExportFormat.PNG:
                return PNGExportOptions(**self._png_defaults())
            if format == ExportFormat.JSON:
                indent = self.config.json_indent if self.config is not None else 2
                return JSONExportOptions(indent=indent)
            return ExportOptions(format=format)

        if format == ExportFormat.PNG and not isinstance(options, PNGExportOptions):
            return PNGExportOptions(
                include_charts=options.include_charts,
                date_range=options.date_range,
                filename=options.filename,
                **self._png_defaults(),
            )
        if options.format != format:
            return replace(options, format=format)
        return options

    def _png_defaults(self) -> Dict[str, Any]:
        if self.config is None:
            return {}
        return {"scale": self.config.scale, "background_color": self.config.background_color}

    def _filename(self, data: ReportData, format: ExportFormat, options: ExportOptions) -> str:
        if options.filename:
            return apply_filename_override(options.filename, format)
        return generate_filename(data.template.name, format, self.clock())

    def _synthetic_warnings(self, data: ReportData) -> List[str]:
        warnings = []
        for metric_id in unresolved_metric_ids(data, self.catalog):
            message = f"Metric '{metric_id}' has no catalog definition; rendered as a plain number"
            logger.warning(message)
            warnings.append(message)
        return warnings

    def _hook(self, collected: List[str]) -> WarningHook:
        def hook(degradation: RenderDegradation) -> None:
            collected.append(str(degradation))
            if self.on_warning is not None:
                self.on_warning(degradation)
        return hook
