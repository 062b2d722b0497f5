"""
reporting/formatting.py - Unit-aware value formatting.

Pure functions: no locale lookups, no clock reads. Grouping is always ","
and the decimal point is always "." so identical input yields identical
output on every host.
"""

from __future__ import annotations
from datetime import datetime, timezone
from typing import Any, Callable, Optional, Union
import json
import math
import re

from .enums import ExportFormat, MetricUnit
from .schema import is_finite_number

NOT_AVAILABLE = "N/A"

FILE_EXTENSIONS = {
    ExportFormat.CSV: ".csv",
    ExportFormat.EXCEL: ".xlsx",
    ExportFormat.PDF: ".pdf",
    ExportFormat.MARKDOWN: ".md",
    ExportFormat.JSON: ".json",
    ExportFormat.PNG: ".png",
}

MIME_TYPES = {
    ExportFormat.CSV: "text/csv",
    ExportFormat.EXCEL: "application/vnd.ms-excel",
    ExportFormat.PDF: "application/pdf",
    ExportFormat.MARKDOWN: "text/markdown",
    ExportFormat.JSON: "application/json",
    ExportFormat.PNG: "image/png",
}

HTML_EXTENSION = ".html"
HTML_MIME_TYPE = "text/html"

_MONTHS = [
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
]

_SLUG_RE = re.compile(r"[^a-z0-9]+")


def _is_zero_text(text: str) -> bool:
    return not any(ch in "123456789" for ch in text)


def _signed(text: str, negative: bool) -> str:
    # "-0.00" reads as zero
    if negative and not _is_zero_text(text):
        return "-" + text
    return text


# =============================================================================
# SCALAR FORMATTERS
# =============================================================================

def format_fixed(value: float, decimals: int = 2) -> str:
    """Grouped digits with exactly `decimals` fractional digits."""
    if not is_finite_number(value):
        return NOT_AVAILABLE
    text = f"{abs(value):,.{decimals}f}"
    return _signed(text, value < 0)


def format_number(value: float, decimals: int = 2) -> str:
    """Grouped digits with at most `decimals` fractional digits."""
    if not is_finite_number(value):
        return NOT_AVAILABLE
    text = f"{abs(value):,.{decimals}f}"
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return _signed(text, value < 0)


def format_currency(value: float) -> str:
    """Dollar amount, two fractional digits: -$1,234.50."""
    if not is_finite_number(value):
        return NOT_AVAILABLE
    text = f"{abs(value):,.2f}"
    return _signed("$" + text, value < 0)


def format_percentage(value: float) -> str:
    """Value already on a 0-100 scale, one fractional digit."""
    if not is_finite_number(value):
        return NOT_AVAILABLE
    text = f"{abs(value):.1f}"
    return _signed(text, value < 0) + "%"


def format_duration(seconds: float) -> str:
    """
    Seconds as text.

    Under a minute renders with one decimal ("45.0s"). Longer durations are
    rounded to whole seconds and split into h/m/s, skipping zero components
    but always keeping at least one ("1h 1m 1s", "2m", "1h").
    """
    if not is_finite_number(seconds):
        return NOT_AVAILABLE
    if seconds < 60:
        text = f"{abs(seconds):.1f}"
        return _signed(text, seconds < 0) + "s"

    total = int(math.floor(seconds + 0.5))
    hours, remainder = divmod(total, 3600)
    minutes, secs = divmod(remainder, 60)

    parts = []
    if hours > 0:
        parts.append(f"{hours}h")
    if minutes > 0:
        parts.append(f"{minutes}m")
    if secs > 0 or not parts:
        parts.append(f"{secs}s")
    return " ".join(parts)


_UNIT_FORMATTERS = {
    MetricUnit.NUMBER: format_number,
    MetricUnit.CURRENCY: format_currency,
    MetricUnit.PERCENTAGE: format_percentage,
    MetricUnit.DURATION: format_duration,
}


def format_metric_value(value: Any, unit: Union[MetricUnit, str]) -> str:
    """
    Format a metric value for display according to its unit.

    Missing, non-numeric and non-finite values render "N/A".
    """
    if not is_finite_number(value):
        return NOT_AVAILABLE
    if not isinstance(unit, MetricUnit):
        try:
            unit = MetricUnit(unit)
        except ValueError:
            unit = MetricUnit.NUMBER
    return _UNIT_FORMATTERS[unit](value)


# =============================================================================
# CHANGE FORMATTERS
# =============================================================================

def format_signed_change(
    value: Optional[float],
    formatter: Callable[[float], str] = format_number,
    zero: Optional[str] = None,
) -> str:
    """
    Absolute change with an explicit "+" on gains.

    `zero` replaces the rendering of an exact zero change when given.
    """
    if not is_finite_number(value):
        return NOT_AVAILABLE
    if value == 0 and zero is not None:
        return zero
    text = formatter(value)
    if value > 0:
        return "+" + text
    return text


def format_change_percent(
    value: Optional[float],
    decimals: int = 1,
    zero: Optional[str] = None,
) -> str:
    """Percent change such as "+11.3%"; non-negative values carry "+"."""
    if not is_finite_number(value):
        return NOT_AVAILABLE
    if value == 0 and zero is not None:
        return zero
    text = f"{abs(value):.{decimals}f}"
    if value < 0 and not _is_zero_text(text):
        return f"-{text}%"
    return f"+{text}%"


# =============================================================================
# RAW VALUES
# =============================================================================

def format_raw_number(value: Any) -> str:
    """
    Unformatted number text matching JSON number grammar.

    Integral floats drop the trailing ".0"; None and non-finite values
    become an empty string.
    """
    if not is_finite_number(value):
        return ""
    if isinstance(value, float) and value.is_integer() and abs(value) < 1e16:
        return str(int(value))
    return repr(value) if isinstance(value, float) else str(value)


def _json_list_item(value: Any) -> Any:
    if not is_finite_number(value):
        return None
    if isinstance(value, float) and value.is_integer() and abs(value) < 1e16:
        return int(value)
    return value


def json_number_list(values) -> str:
    """Compact JSON array text: [1,2.5,3]; NaN and Infinity become null."""
    return json.dumps(
        [_json_list_item(v) for v in values],
        separators=(",", ":"),
        allow_nan=False,
    )


# =============================================================================
# DATES AND FILENAMES
# =============================================================================

def parse_timestamp(value: str) -> Optional[datetime]:
    """Parse an ISO-8601 timestamp ("Z" suffix accepted)."""
    if not value:
        return None
    text = value.strip()
    if text.endswith("Z") or text.endswith("z"):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        return None


def format_export_date(value: Union[str, datetime, None]) -> str:
    """Display date such as "January 15, 2026"; unparseable text is returned as-is."""
    if value is None or value == "":
        return ""
    parsed = value if isinstance(value, datetime) else parse_timestamp(value)
    if parsed is None:
        return str(value)
    return f"{_MONTHS[parsed.month - 1]} {parsed.day}, {parsed.year}"


def iso_timestamp(moment: datetime) -> str:
    """UTC timestamp with millisecond precision: 2026-01-15T10:30:00.000Z."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    moment = moment.astimezone(timezone.utc)
    return moment.strftime("%Y-%m-%dT%H:%M:%S.") + f"{moment.microsecond // 1000:03d}Z"


def slugify(name: str) -> str:
    """Lowercase; runs of non-alphanumerics collapse to one hyphen; edges trimmed."""
    return _SLUG_RE.sub("-", (name or "").lower()).strip("-")


def generate_filename(template_name: str, format: ExportFormat, moment: datetime) -> str:
    """<slug>-report-<YYYY-MM-DD><ext>, with "report" standing in for an empty slug."""
    slug = slugify(template_name) or "report"
    if moment.tzinfo is not None:
        moment = moment.astimezone(timezone.utc)
    return f"{slug}-report-{moment.strftime('%Y-%m-%d')}{FILE_EXTENSIONS[format]}"


def apply_filename_override(filename: str, format: ExportFormat) -> str:
    """Caller-supplied filename, with the format's extension appended when missing."""
    extension = FILE_EXTENSIONS[format]
    if filename.lower().endswith(extension):
        return filename
    return filename + extension
