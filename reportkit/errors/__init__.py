"""
errors/ - Error Taxonomy

Structured error classification for the report exporter.
"""

from .taxonomy import (
    ErrorSeverity,
    ErrorCategory,
    ErrorCode,
    ReportKitError,
    InputShapeError,
    UnsupportedOperationError,
    ConfigurationError,
    RenderDegradation,
    create_input_shape_error,
    create_unsupported_error,
    create_render_degradation,
)

__all__ = [
    "ErrorSeverity",
    "ErrorCategory",
    "ErrorCode",
    "ReportKitError",
    "InputShapeError",
    "UnsupportedOperationError",
    "ConfigurationError",
    "RenderDegradation",
    "create_input_shape_error",
    "create_unsupported_error",
    "create_render_degradation",
]
