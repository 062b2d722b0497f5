"""
reporting/enums.py - Reporting enumerations.

String values match the JSON interchange format.
"""

from enum import Enum


class ExportFormat(Enum):
    """Export format options."""
    CSV = "csv"
    EXCEL = "excel"
    PDF = "pdf"
    MARKDOWN = "markdown"
    JSON = "json"
    PNG = "png"


class MetricCategory(Enum):
    """Metric catalog categories."""
    TRAFFIC = "traffic"
    CONVERSIONS = "conversions"
    REVENUE = "revenue"
    ENGAGEMENT = "engagement"
    ATTRIBUTION = "attribution"
    ROI = "roi"
    UNCATEGORIZED = "uncategorized"  # synthetic definitions only


class MetricUnit(Enum):
    """Unit of measurement; selects the value formatter."""
    NUMBER = "number"
    CURRENCY = "currency"
    PERCENTAGE = "percentage"
    DURATION = "duration"


class MetricAggregation(Enum):
    """How multiple samples of a metric combine."""
    SUM = "sum"
    AVERAGE = "average"
    LATEST = "latest"
    MIN = "min"
    MAX = "max"


class MetricWidth(Enum):
    """Width class of a metric card in the report layout."""
    FULL = "full"
    HALF = "half"
    THIRD = "third"


class ChartType(Enum):
    """Chart type hint for a report metric."""
    LINE = "line"
    BAR = "bar"
    PIE = "pie"
    AREA = "area"
    TABLE = "table"


class OutputKind(Enum):
    """What the PDF path actually produced."""
    PDF = "pdf"
    HTML_FALLBACK = "html-fallback"
