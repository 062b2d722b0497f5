"""
deployment/api.py - REST API

Serves report exports over HTTP. Every request is an independent transform:
the posted report data goes in, the export artifact comes back as the
response body with an attachment filename.
"""

from typing import Any, Dict, List, Optional, TYPE_CHECKING
from datetime import datetime, timezone
from urllib.parse import quote
import logging
import unicodedata

from pydantic import BaseModel, field_validator

from ..errors import InputShapeError, UnsupportedOperationError
from ..reporting.capabilities import RenderCapabilities, VisualElement
from ..reporting.enums import ExportFormat
from ..reporting.exporters import ReportExporter, validate_json_export
from ..reporting.schema import DateRange, ExportOptions, ReportData, coerce_format

if TYPE_CHECKING:
    from ..bootstrap.config import ReportKitConfig

logger = logging.getLogger("deployment.api")

API_VERSION = "1.0.0"


def content_disposition(filename: str) -> str:
    """
    Attachment header value for a download filename.

    Quotes, backslashes and line breaks are dropped so the name cannot end
    the quoted string. Non-ASCII names go in an RFC 5987 `filename*`
    parameter, with an ASCII transliteration as `filename`.
    """
    cleaned = "".join(ch for ch in filename if ch not in "\"\\\r\n")
    if cleaned.isascii():
        return f'attachment; filename="{cleaned}"'

    fallback = unicodedata.normalize("NFKD", cleaned).encode("ascii", "ignore").decode("ascii")
    return f"attachment; filename=\"{fallback or 'export'}\"; filename*=UTF-8''{quote(cleaned)}"


# =============================================================================
# Request Models
# =============================================================================

class DateRangeModel(BaseModel):
    """Inclusive date range shown in report headers."""
    start: str
    end: str


class ElementModel(BaseModel):
    """A rendered visual region to capture for PNG export."""
    element_id: str
    width: int
    height: int
    html: Optional[str] = None
    title: str = ""

    @field_validator('width', 'height')
    @classmethod
    def validate_size(cls, v):
        if v <= 0:
            raise ValueError('element dimensions must be positive')
        return v


class ExportRequest(BaseModel):
    """Request model for exporting report data."""
    format: str
    data: Dict[str, Any]
    include_charts: bool = False
    date_range: Optional[DateRangeModel] = None
    filename: Optional[str] = None
    elements: Optional[List[ElementModel]] = None

    @field_validator('format')
    @classmethod
    def validate_format(cls, v):
        valid = [f.value for f in ExportFormat]
        if v.lower() not in valid:
            raise ValueError(f'Invalid format: {v}. Valid: {valid}')
        return v.lower()


# =============================================================================
# App Factory
# =============================================================================

def create_fastapi_app(
    config: "ReportKitConfig" = None,
    capabilities: Optional[RenderCapabilities] = None,
):
    """
    Create FastAPI application.

    Args:
        config: Application configuration (defaults apply when None)
        capabilities: Rendering capabilities; none by default

    Returns:
        FastAPI application instance
    """
    from fastapi import FastAPI, HTTPException, Request
    from fastapi.middleware.cors import CORSMiddleware
    from fastapi.responses import Response

    # Configuration
    enable_docs = True
    docs_url = "/docs"
    cors_origins = ["*"]
    export_config = None

    if config is not None:
        enable_docs = config.api.enable_docs
        docs_url = config.api.docs_url
        cors_origins = config.api.cors_origins
        export_config = config.export

    app = FastAPI(
        title="reportkit API",
        description="Multi-format report export",
        version=API_VERSION,
        docs_url=docs_url if enable_docs else None,
        redoc_url="/redoc" if enable_docs else None,
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    capabilities = capabilities or RenderCapabilities.none()
    exporter = ReportExporter(config=export_config, capabilities=capabilities)

    # =========================================================================
    # Health Endpoints
    # =========================================================================

    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        return {
            "status": "healthy",
            "version": API_VERSION,
            "capabilities": capabilities.describe(),
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }

    # =========================================================================
    # Format Endpoints
    # =========================================================================

    @app.get("/api/v1/formats")
    async def list_formats():
        """All export formats with display metadata."""
        return {"formats": [info.to_dict() for info in exporter.list_formats()]}

    @app.get("/api/v1/formats/{format}")
    async def get_format(format: str):
        try:
            return exporter.get_format_info(format).to_dict()
        except UnsupportedOperationError:
            raise HTTPException(status_code=404, detail=f"Unknown format: {format}")

    # =========================================================================
    # Report Endpoints
    # =========================================================================

    @app.post("/api/v1/reports/export")
    async def export_report(request: ExportRequest):
        """Export report data; the response body is the artifact."""
        try:
            data = ReportData.from_dict(request.data)
            options = ExportOptions(
                format=coerce_format(request.format),
                include_charts=request.include_charts,
                date_range=(
                    DateRange(start=request.date_range.start, end=request.date_range.end)
                    if request.date_range else None
                ),
                filename=request.filename,
            )

            element = None
            if request.elements:
                element = [
                    VisualElement(
                        element_id=e.element_id,
                        width=e.width,
                        height=e.height,
                        html=e.html,
                        title=e.title,
                    )
                    for e in request.elements
                ]

            artifact = await exporter.export(data, options.format, options, element=element)

        except InputShapeError as e:
            raise HTTPException(status_code=422, detail=e.to_dict())
        except UnsupportedOperationError as e:
            raise HTTPException(status_code=400, detail=e.to_dict())

        headers = {
            "Content-Disposition": content_disposition(artifact.filename),
            "X-Export-Format": artifact.format.value,
        }
        if artifact.kind:
            headers["X-Export-Kind"] = artifact.kind
        if artifact.warnings:
            headers["X-Export-Warnings"] = str(len(artifact.warnings))
            for warning in artifact.warnings:
                logger.info(f"Export warning: {warning}")

        return Response(
            content=artifact.as_bytes(),
            media_type=artifact.mime_type,
            headers=headers,
        )

    @app.post("/api/v1/reports/validate")
    async def validate_report(request: Request):
        """Validate a JSON export document posted as the raw request body."""
        body = await request.body()
        result = validate_json_export(body.decode("utf-8", errors="replace"))
        return result.to_dict()

    return app
