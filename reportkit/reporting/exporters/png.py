"""
reporting/exporters/png.py - PNG capture adapter.

Rasterizes rendered visual elements through the configured element
capturer. Without one, or when it fails, a placeholder canvas of the same
pixel size is painted instead and a RenderDegradation goes to the warning
hook. Captures never fail for lack of a renderer.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence
import base64
import io
import logging

from PIL import Image, ImageDraw, ImageFont

from ..capabilities import ElementCapturer, VisualElement
from ...errors import (
    ErrorCode,
    RenderDegradation,
    create_render_degradation,
    create_unsupported_error,
)
from ..schema import PNGExportOptions

logger = logging.getLogger("reporting.exporters.png")

CAPTURE_GAP = 20
PLACEHOLDER_TEXT_COLOR = "#666666"
PLACEHOLDER_LINES = (
    "Visual capture unavailable",
    "Configure an element capturer for full PNG export",
)

WarningHook = Callable[[RenderDegradation], None]


@dataclass(frozen=True)
class CaptureResult:
    """PNG bytes with their pixel dimensions."""
    content: bytes
    width: int
    height: int


def _encode(img: Image.Image) -> bytes:
    buffer = io.BytesIO()
    img.save(buffer, format="PNG")
    return buffer.getvalue()


def _decode(content: bytes) -> Image.Image:
    img = Image.open(io.BytesIO(content))
    img.load()
    return img


def _scaled(value: float, scale: float) -> int:
    return max(int(round(value * scale)), 1)


class CaptureAdapter:
    """
    Element capture with placeholder fallback.

    Usage:
        adapter = CaptureAdapter(capturer=None, on_warning=warnings.append)
        png = await adapter.capture(VisualElement("revenue-chart", 400, 200))
    """

    def __init__(
        self,
        capturer: Optional[ElementCapturer] = None,
        on_warning: Optional[WarningHook] = None,
        gap: int = CAPTURE_GAP,
    ):
        self.capturer = capturer
        self.on_warning = on_warning
        self.gap = gap

    async def capture(self, element: VisualElement, options: Optional[PNGExportOptions] = None) -> bytes:
        """Capture one element as PNG bytes, padded when options.padding > 0."""
        options = options or PNGExportOptions()
        content = await self._raw_capture(element, options)
        if options.padding > 0:
            content = self._pad(content, options)
        return content

    async def capture_with_dimensions(
        self,
        element: VisualElement,
        options: Optional[PNGExportOptions] = None,
    ) -> CaptureResult:
        """Capture plus the pixel size actually produced."""
        content = await self.capture(element, options)
        with _decode(content) as img:
            width, height = img.size
        return CaptureResult(content=content, width=width, height=height)

    async def capture_data_url(self, element: VisualElement, options: Optional[PNGExportOptions] = None) -> str:
        """Capture as a data:image/png;base64 URI."""
        content = await self.capture(element, options)
        return "data:image/png;base64," + base64.b64encode(content).decode("ascii")

    async def combine(
        self,
        elements: Sequence[VisualElement],
        options: Optional[PNGExportOptions] = None,
    ) -> bytes:
        """
        Capture several elements and stack them vertically.

        Width is the widest capture; captures are separated by gap * scale
        pixels; the background color fills gaps, margins and any
        transparent regions. A single element is returned as captured.

        Raises:
            UnsupportedOperationError: No elements given
        """
        options = options or PNGExportOptions()
        if not elements:
            raise create_unsupported_error(
                "No elements to capture",
                "reporting.exporters.png",
                code=ErrorCode.UNS_MISSING_ELEMENT,
            )

        captures: List[bytes] = []
        for element in elements:
            captures.append(await self.capture(element, options))

        if len(captures) == 1:
            return captures[0]

        images = [_decode(c).convert("RGBA") for c in captures]
        gap = int(round(self.gap * options.scale))
        width = max(img.width for img in images)
        height = sum(img.height for img in images) + gap * (len(images) - 1)

        canvas = Image.new("RGB", (width, height), options.background_color)
        y = 0
        for img in images:
            canvas.paste(img, (0, y), img)
            y += img.height + gap
            img.close()

        logger.debug(f"Combined {len(images)} captures into {width}x{height}")
        return _encode(canvas)

    # =========================================================================
    # INTERNALS
    # =========================================================================

    async def _raw_capture(self, element: VisualElement, options: PNGExportOptions) -> bytes:
        if self.capturer is None:
            self._degrade(
                create_render_degradation(
                    f"No element capturer, painted placeholder for '{element.element_id}'",
                    "reporting.exporters.png",
                    code=ErrorCode.RND_CAPTURE_UNAVAILABLE,
                )
            )
            return self.placeholder(element, options)

        try:
            return await self.capturer.capture(element, options)
        except Exception as e:
            self._degrade(
                create_render_degradation(
                    f"Capture of '{element.element_id}' failed, painted placeholder",
                    "reporting.exporters.png",
                    code=ErrorCode.RND_CAPTURE_FAILED,
                    detail=str(e),
                )
            )
            return self.placeholder(element, options)

    def placeholder(self, element: VisualElement, options: PNGExportOptions) -> bytes:
        """Background-filled canvas the size of the element, with a centred notice."""
        width = _scaled(element.width, options.scale)
        height = _scaled(element.height, options.scale)

        img = Image.new("RGB", (width, height), options.background_color)
        draw = ImageDraw.Draw(img)
        font = ImageFont.load_default()

        line_gap = int(round(10 * options.scale))
        for offset, text in zip((-line_gap, line_gap), PLACEHOLDER_LINES):
            left, top, right, bottom = draw.textbbox((0, 0), text, font=font)
            x = (width - (right - left)) // 2
            y = height // 2 + offset - (bottom - top) // 2
            draw.text((x, y), text, fill=PLACEHOLDER_TEXT_COLOR, font=font)

        return _encode(img)

    def _pad(self, content: bytes, options: PNGExportOptions) -> bytes:
        pad = int(round(options.padding * options.scale))
        with _decode(content) as captured:
            img = captured.convert("RGBA")
        canvas = Image.new("RGB", (img.width + 2 * pad, img.height + 2 * pad), options.background_color)
        canvas.paste(img, (pad, pad), img)
        return _encode(canvas)

    def _degrade(self, degradation: RenderDegradation) -> None:
        logger.warning(str(degradation))
        if self.on_warning is not None:
            self.on_warning(degradation)
