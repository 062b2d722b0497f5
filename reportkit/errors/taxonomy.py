"""
errors/taxonomy.py - Error classification system

Structured errors raised by the export pipeline. Input shape problems and
unsupported requests are raised; renderer degradation is reported to a
warning hook and never raised.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, Optional
from datetime import datetime, timezone
from enum import Enum
import uuid


class ErrorSeverity(Enum):
    """Error severity levels."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(Enum):
    """Error categories."""
    # Malformed report data (1xxx)
    INPUT_SHAPE = "input_shape"

    # Caller asked for something the exporter cannot do (2xxx)
    UNSUPPORTED = "unsupported"

    # Optional renderer missing or failing (3xxx)
    RENDER = "render"

    # Configuration (5xxx)
    CONFIGURATION = "configuration"


class ErrorCode(Enum):
    """Specific error codes."""

    # Input shape (1xxx)
    INP_MISSING_FIELD = 1001
    INP_TYPE_MISMATCH = 1002
    INP_UNKNOWN_METRIC = 1003
    INP_DUPLICATE_ORDER = 1004
    INP_TEMPLATE_MISMATCH = 1005

    # Unsupported operation (2xxx)
    UNS_FORMAT = 2001
    UNS_STRING_EXPORT = 2002
    UNS_MISSING_ELEMENT = 2003

    # Render (3xxx)
    RND_CAPTURE_UNAVAILABLE = 3001
    RND_CAPTURE_FAILED = 3002
    RND_PDF_FAILED = 3004

    # Configuration (5xxx)
    CFG_INVALID = 5001


class ReportKitError(Exception):
    """Base class for structured exporter errors."""

    code: ErrorCode = ErrorCode.INP_MISSING_FIELD
    category: ErrorCategory = ErrorCategory.INPUT_SHAPE
    severity: ErrorSeverity = ErrorSeverity.ERROR

    def __init__(
        self,
        message: str,
        code: Optional[ErrorCode] = None,
        source: str = "",
        path: Optional[str] = None,
        actual_value: Any = None,
    ):
        super().__init__(message)
        self.error_id = uuid.uuid4().hex[:8]
        self.message = message
        if code is not None:
            self.code = code
        self.source = source
        self.path = path
        self.actual_value = actual_value
        self.created_at = datetime.now(timezone.utc)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error_id": self.error_id,
            "code": self.code.value,
            "category": self.category.value,
            "severity": self.severity.value,
            "message": self.message,
            "source": self.source,
            "path": self.path,
        }


class InputShapeError(ReportKitError):
    """Malformed report data; the export is aborted with no artifact."""

    code = ErrorCode.INP_MISSING_FIELD
    category = ErrorCategory.INPUT_SHAPE


class UnsupportedOperationError(ReportKitError):
    """The requested export cannot be produced for this format or input."""

    code = ErrorCode.UNS_FORMAT
    category = ErrorCategory.UNSUPPORTED


class ConfigurationError(ReportKitError):
    """Invalid exporter configuration."""

    code = ErrorCode.CFG_INVALID
    category = ErrorCategory.CONFIGURATION


@dataclass
class RenderDegradation:
    """
    Notice that an optional renderer was unavailable or failed.

    Passed to the exporter's warning hook; the export itself continues on
    the placeholder or HTML path.
    """

    message: str
    code: ErrorCode = ErrorCode.RND_CAPTURE_UNAVAILABLE
    source: str = ""
    detail: str = ""
    category: ErrorCategory = ErrorCategory.RENDER
    severity: ErrorSeverity = ErrorSeverity.WARNING
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code.value,
            "category": self.category.value,
            "severity": self.severity.value,
            "message": self.message,
            "source": self.source,
            "detail": self.detail,
        }

    def __str__(self) -> str:
        if self.detail:
            return f"{self.message} ({self.detail})"
        return self.message


def create_input_shape_error(
    message: str,
    source: str,
    path: str = None,
    actual: Any = None,
    code: ErrorCode = ErrorCode.INP_MISSING_FIELD,
) -> InputShapeError:
    """Factory for input shape errors."""
    return InputShapeError(message, code=code, source=source, path=path, actual_value=actual)


def create_unsupported_error(
    message: str,
    source: str,
    code: ErrorCode = ErrorCode.UNS_FORMAT,
) -> UnsupportedOperationError:
    """Factory for unsupported operation errors."""
    return UnsupportedOperationError(message, code=code, source=source)


def create_render_degradation(
    message: str,
    source: str,
    code: ErrorCode = ErrorCode.RND_CAPTURE_UNAVAILABLE,
    detail: str = "",
) -> RenderDegradation:
    """Factory for renderer degradation notices."""
    return RenderDegradation(message=message, code=code, source=source, detail=detail)
