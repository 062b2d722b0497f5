"""
deployment/ - Deployment Infrastructure

REST API for serving report exports.
"""

from .api import (
    ExportRequest,
    create_fastapi_app,
)

__all__ = [
    "ExportRequest",
    "create_fastapi_app",
]
