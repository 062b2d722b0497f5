"""
reporting/schema.py - Report data structures.

The exporter's input model: a template snapshot plus one computed data point
per template metric. All structures are frozen; an export never mutates its
input. ``to_dict`` / ``from_dict`` use the camelCase keys of the JSON
interchange format.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple, Union
import math

from .enums import (
    ChartType,
    ExportFormat,
    MetricAggregation,
    MetricCategory,
    MetricUnit,
    MetricWidth,
)
from ..errors import (
    ErrorCode,
    create_input_shape_error,
    create_unsupported_error,
)

Number = Union[int, float]

_SOURCE = "reporting.schema"


def is_number(value: Any) -> bool:
    """True for int/float values (bool excluded)."""
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def is_finite_number(value: Any) -> bool:
    return is_number(value) and math.isfinite(value)


def json_number(value: Any) -> Optional[Number]:
    """The value itself when finite, else None (JSON has no NaN or Infinity)."""
    return value if is_finite_number(value) else None


def _require(data: Mapping[str, Any], key: str, path: str) -> Any:
    if not isinstance(data, Mapping):
        raise create_input_shape_error(
            f"Expected an object at {path or 'root'}",
            _SOURCE,
            path=path,
            actual=type(data).__name__,
            code=ErrorCode.INP_TYPE_MISMATCH,
        )
    if key not in data or data[key] is None:
        full = f"{path}.{key}" if path else key
        raise create_input_shape_error(f"Missing required field: {full}", _SOURCE, path=full)
    return data[key]


def _number(value: Any, path: str) -> Number:
    if not is_number(value):
        raise create_input_shape_error(
            f"{path} must be a number",
            _SOURCE,
            path=path,
            actual=value,
            code=ErrorCode.INP_TYPE_MISMATCH,
        )
    return value


def _optional_number(data: Mapping[str, Any], key: str, path: str) -> Optional[Number]:
    value = data.get(key)
    if value is None:
        return None
    return _number(value, f"{path}.{key}")


def _enum(enum_cls, value: Any, path: str):
    try:
        return enum_cls(value)
    except ValueError:
        raise create_input_shape_error(
            f"Invalid value for {path}: {value!r}",
            _SOURCE,
            path=path,
            actual=value,
            code=ErrorCode.INP_TYPE_MISMATCH,
        ) from None


def coerce_format(value: Union[str, ExportFormat]) -> ExportFormat:
    """Accept an ExportFormat or its string value."""
    if isinstance(value, ExportFormat):
        return value
    try:
        return ExportFormat(str(value).lower())
    except ValueError:
        raise create_unsupported_error(
            f"Unsupported export format: {value}",
            _SOURCE,
            code=ErrorCode.UNS_FORMAT,
        ) from None


# =============================================================================
# CATALOG ENTRIES
# =============================================================================

@dataclass(frozen=True)
class MetricDefinition:
    """Catalog entry describing how a metric is displayed and aggregated."""
    id: str
    name: str
    category: MetricCategory
    description: str
    unit: MetricUnit
    aggregation: MetricAggregation = MetricAggregation.SUM

    # Substituted for an id missing from the catalog
    synthetic: bool = False

    @classmethod
    def synthetic_for(cls, metric_id: str) -> "MetricDefinition":
        """Placeholder definition for an unresolved metric id."""
        return cls(
            id=metric_id,
            name=metric_id,
            category=MetricCategory.UNCATEGORIZED,
            description="",
            unit=MetricUnit.NUMBER,
            aggregation=MetricAggregation.SUM,
            synthetic=True,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "category": self.category.value,
            "description": self.description,
            "unit": self.unit.value,
            "aggregation": self.aggregation.value,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], path: str = "metric") -> "MetricDefinition":
        return cls(
            id=str(_require(data, "id", path)),
            name=str(_require(data, "name", path)),
            category=_enum(MetricCategory, _require(data, "category", path), f"{path}.category"),
            description=str(data.get("description", "")),
            unit=_enum(MetricUnit, _require(data, "unit", path), f"{path}.unit"),
            aggregation=_enum(
                MetricAggregation, data.get("aggregation", "sum"), f"{path}.aggregation"
            ),
        )


# =============================================================================
# TEMPLATE
# =============================================================================

@dataclass(frozen=True)
class ReportMetric:
    """A metric placed in a template."""
    metric_id: str
    order: int
    width: MetricWidth = MetricWidth.FULL
    chart_type: Optional[ChartType] = None

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "metricId": self.metric_id,
            "order": self.order,
            "width": self.width.value,
        }
        if self.chart_type is not None:
            out["chartType"] = self.chart_type.value
        return out

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], path: str) -> "ReportMetric":
        chart_type = data.get("chartType") if isinstance(data, Mapping) else None
        return cls(
            metric_id=str(_require(data, "metricId", path)),
            order=int(_number(_require(data, "order", path), f"{path}.order")),
            width=_enum(MetricWidth, data.get("width", "full"), f"{path}.width"),
            chart_type=_enum(ChartType, chart_type, f"{path}.chartType") if chart_type else None,
        )


@dataclass(frozen=True)
class ReportTemplate:
    """Saved report configuration (denormalized into each ReportData)."""
    id: str
    name: str
    description: str = ""
    metrics: Tuple[ReportMetric, ...] = ()
    created_at: str = ""
    updated_at: str = ""
    created_by: str = ""
    is_default: bool = False

    def __post_init__(self):
        object.__setattr__(self, "metrics", tuple(self.metrics))

    @property
    def metric_ids(self) -> List[str]:
        return [m.metric_id for m in self.metrics]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "metrics": [m.to_dict() for m in self.metrics],
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
            "createdBy": self.created_by,
            "isDefault": self.is_default,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], path: str = "template") -> "ReportTemplate":
        metrics = _require(data, "metrics", path)
        if not isinstance(metrics, (list, tuple)):
            raise create_input_shape_error(
                f"{path}.metrics must be an array",
                _SOURCE,
                path=f"{path}.metrics",
                code=ErrorCode.INP_TYPE_MISMATCH,
            )
        return cls(
            id=str(_require(data, "id", path)),
            name=str(_require(data, "name", path)),
            description=str(data.get("description") or ""),
            metrics=tuple(
                ReportMetric.from_dict(m, f"{path}.metrics[{i}]") for i, m in enumerate(metrics)
            ),
            created_at=str(data.get("createdAt") or ""),
            updated_at=str(data.get("updatedAt") or ""),
            created_by=str(data.get("createdBy") or ""),
            is_default=bool(data.get("isDefault", False)),
        )


# =============================================================================
# DATA POINTS
# =============================================================================

@dataclass(frozen=True)
class ReportDataPoint:
    """One metric's computed values for a single report generation."""
    metric_id: str
    value: Number
    previous_value: Optional[Number] = None
    change: Optional[Number] = None
    change_percent: Optional[Number] = None
    trend: Tuple[Number, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "trend", tuple(self.trend or ()))

    @classmethod
    def compare(
        cls,
        metric_id: str,
        value: Number,
        previous_value: Optional[Number] = None,
        trend: Sequence[Number] = (),
    ) -> "ReportDataPoint":
        """Build a data point, deriving change and change percent from the previous value."""
        change = None
        change_percent = None
        if previous_value is not None:
            change = value - previous_value
            if previous_value != 0:
                change_percent = change / previous_value * 100
        return cls(
            metric_id=metric_id,
            value=value,
            previous_value=previous_value,
            change=change,
            change_percent=change_percent,
            trend=tuple(trend),
        )

    @property
    def has_trend(self) -> bool:
        return len(self.trend) > 0

    def to_dict(self) -> Dict[str, Any]:
        """
        Fixed field set; absent optional values are omitted.

        NaN and Infinity are written as None so the dict always serializes
        to strict JSON.
        """
        out: Dict[str, Any] = {"metricId": self.metric_id, "value": json_number(self.value)}
        if self.previous_value is not None:
            out["previousValue"] = json_number(self.previous_value)
        if self.change is not None:
            out["change"] = json_number(self.change)
        if self.change_percent is not None:
            out["changePercent"] = json_number(self.change_percent)
        out["trend"] = [json_number(v) for v in self.trend]
        return out

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], path: str) -> "ReportDataPoint":
        trend = data.get("trend") if isinstance(data, Mapping) else None
        if trend is None:
            trend = []
        if not isinstance(trend, (list, tuple)):
            raise create_input_shape_error(
                f"{path}.trend must be an array",
                _SOURCE,
                path=f"{path}.trend",
                code=ErrorCode.INP_TYPE_MISMATCH,
            )
        return cls(
            metric_id=str(_require(data, "metricId", path)),
            value=_number(_require(data, "value", path), f"{path}.value"),
            previous_value=_optional_number(data, "previousValue", path),
            change=_optional_number(data, "change", path),
            change_percent=_optional_number(data, "changePercent", path),
            trend=tuple(_number(v, f"{path}.trend[{i}]") for i, v in enumerate(trend)),
        )


@dataclass(frozen=True)
class ReportData:
    """Complete generated report; the exporter's sole input."""
    template_id: str
    template: ReportTemplate
    data_points: Tuple[ReportDataPoint, ...] = ()
    generated_at: str = ""

    def __post_init__(self):
        object.__setattr__(self, "data_points", tuple(self.data_points))

    def check_shape(self) -> None:
        """
        Verify structural invariants.

        Raises:
            InputShapeError: Missing template, duplicate metric order,
                template id mismatch, or a data point for a metric the
                template does not contain.
        """
        if self.template is None:
            raise create_input_shape_error("Missing required field: template", _SOURCE, path="template")

        if self.template_id != self.template.id:
            raise create_input_shape_error(
                f"templateId '{self.template_id}' does not match template.id '{self.template.id}'",
                _SOURCE,
                path="templateId",
                actual=self.template_id,
                code=ErrorCode.INP_TEMPLATE_MISMATCH,
            )

        seen_orders: Dict[int, str] = {}
        for metric in self.template.metrics:
            if metric.order in seen_orders:
                raise create_input_shape_error(
                    f"Duplicate metric order {metric.order} for "
                    f"'{seen_orders[metric.order]}' and '{metric.metric_id}'",
                    _SOURCE,
                    path="template.metrics",
                    actual=metric.order,
                    code=ErrorCode.INP_DUPLICATE_ORDER,
                )
            seen_orders[metric.order] = metric.metric_id

        known = set(self.template.metric_ids)
        for i, dp in enumerate(self.data_points):
            if dp.metric_id not in known:
                raise create_input_shape_error(
                    f"dataPoints[{i}] references unknown metric '{dp.metric_id}'",
                    _SOURCE,
                    path=f"dataPoints[{i}].metricId",
                    actual=dp.metric_id,
                    code=ErrorCode.INP_UNKNOWN_METRIC,
                )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "templateId": self.template_id,
            "template": self.template.to_dict(),
            "dataPoints": [dp.to_dict() for dp in self.data_points],
            "generatedAt": self.generated_at,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ReportData":
        template = ReportTemplate.from_dict(_require(data, "template", ""), "template")
        points = _require(data, "dataPoints", "")
        if not isinstance(points, (list, tuple)):
            raise create_input_shape_error(
                "dataPoints must be an array",
                _SOURCE,
                path="dataPoints",
                code=ErrorCode.INP_TYPE_MISMATCH,
            )
        return cls(
            template_id=str(_require(data, "templateId", "")),
            template=template,
            data_points=tuple(
                ReportDataPoint.from_dict(p, f"dataPoints[{i}]") for i, p in enumerate(points)
            ),
            generated_at=str(data.get("generatedAt") or ""),
        )


# =============================================================================
# EXPORT OPTIONS
# =============================================================================

@dataclass(frozen=True)
class DateRange:
    """Inclusive ISO-8601 date range shown in report headers."""
    start: str
    end: str

    def to_dict(self) -> Dict[str, str]:
        return {"start": self.start, "end": self.end}

    def __str__(self) -> str:
        return f"{self.start} to {self.end}"


@dataclass(frozen=True)
class ExportOptions:
    """Options shared by every export format."""
    format: ExportFormat = ExportFormat.CSV
    include_charts: bool = False
    date_range: Optional[DateRange] = None
    filename: Optional[str] = None

    def __post_init__(self):
        object.__setattr__(self, "format", coerce_format(self.format))


@dataclass(frozen=True)
class JSONExportOptions(ExportOptions):
    """JSON-specific options."""
    format: ExportFormat = ExportFormat.JSON
    pretty_print: bool = True
    include_metadata: bool = True
    indent: int = 2


@dataclass(frozen=True)
class PNGExportOptions(ExportOptions):
    """Capture options for PNG export."""
    format: ExportFormat = ExportFormat.PNG
    include_charts: bool = True
    scale: float = 2.0
    background_color: str = "#ffffff"
    padding: int = 0


@dataclass(frozen=True)
class ExportArtifact:
    """A named export result ready to be saved or served."""
    content: Union[str, bytes]
    filename: str
    mime_type: str
    format: ExportFormat
    kind: Optional[str] = None
    warnings: Tuple[str, ...] = field(default_factory=tuple)

    @property
    def is_text(self) -> bool:
        return isinstance(self.content, str)

    def as_bytes(self) -> bytes:
        if isinstance(self.content, bytes):
            return self.content
        return self.content.encode("utf-8")
