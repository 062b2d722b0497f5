"""
reporting/capabilities.py - Optional external renderers.

Two capabilities sit behind this interface:
  - element capture: rasterize a rendered visual element to PNG bytes
  - HTML to PDF: turn the print-styled HTML document into PDF bytes

Neither is required. The default RenderCapabilities has none, and every
export still succeeds (placeholder canvas / HTML fallback). Probing happens
once, when the exporter is built, instead of at each call site.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional, Protocol
import importlib
import logging

if TYPE_CHECKING:
    from .schema import PNGExportOptions

logger = logging.getLogger("reporting.capabilities")


@dataclass(frozen=True)
class VisualElement:
    """
    Reference to a rendered visual element (a chart, a report preview).

    `width` / `height` are CSS pixels; captures are produced at
    `width * scale` by `height * scale`.
    """
    element_id: str
    width: int
    height: int
    html: Optional[str] = None
    title: str = ""


class ElementCapturer(Protocol):
    """Rasterizes a visual element. May suspend; callers own timeouts."""

    async def capture(self, element: VisualElement, options: "PNGExportOptions") -> bytes:
        ...


class HtmlToPdfRenderer(Protocol):
    """Converts a self-contained HTML document to PDF bytes."""

    name: str

    def render_html_to_pdf(self, html: str) -> bytes:
        ...


class WeasyPrintRenderer:
    """HTML to PDF through WeasyPrint."""

    name = "weasyprint"

    def __init__(self, module=None):
        self._weasyprint = module or importlib.import_module("weasyprint")

    def render_html_to_pdf(self, html: str) -> bytes:
        return self._weasyprint.HTML(string=html).write_pdf()


@dataclass(frozen=True)
class RenderCapabilities:
    """Renderers available to the exporter; absent ones are None."""
    capturer: Optional[ElementCapturer] = None
    pdf_renderer: Optional[HtmlToPdfRenderer] = None

    @classmethod
    def none(cls) -> "RenderCapabilities":
        return cls()

    @property
    def can_capture(self) -> bool:
        return self.capturer is not None

    @property
    def can_render_pdf(self) -> bool:
        return self.pdf_renderer is not None

    def describe(self) -> dict:
        return {
            "capture": type(self.capturer).__name__ if self.capturer else None,
            "pdf": getattr(self.pdf_renderer, "name", None) if self.pdf_renderer else None,
        }


def probe_capabilities(
    pdf_engine: str = "auto",
    capturer: Optional[ElementCapturer] = None,
) -> RenderCapabilities:
    """
    Detect installed renderers.

    Args:
        pdf_engine: "auto" tries WeasyPrint, "none" disables PDF rendering.
        capturer: Element capture has no installable default; pass one in
            to enable real rasterization.
    """
    pdf_renderer = None
    if pdf_engine == "auto":
        try:
            pdf_renderer = WeasyPrintRenderer()
            logger.info("PDF rendering via WeasyPrint")
        except Exception as e:
            # Missing package or missing native libraries
            logger.info(f"WeasyPrint unavailable, PDF exports fall back to HTML: {e}")
    elif pdf_engine != "none":
        logger.warning(f"Unknown PDF engine '{pdf_engine}', PDF rendering disabled")

    if capturer is None:
        logger.info("No element capturer configured, PNG exports use placeholder canvas")

    return RenderCapabilities(capturer=capturer, pdf_renderer=pdf_renderer)
