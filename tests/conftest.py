"""
reportkit Test Configuration and Fixtures

Shared report data and a fixed clock so rendered timestamps and generated
filenames are stable across runs.
"""

import pytest
from datetime import datetime, timezone

from reportkit.reporting.enums import ChartType, MetricWidth
from reportkit.reporting.schema import (
    ReportData,
    ReportDataPoint,
    ReportMetric,
    ReportTemplate,
)


FIXED_MOMENT = datetime(2026, 1, 15, 10, 30, 0, tzinfo=timezone.utc)


def fixed_clock() -> datetime:
    """Clock that always reads 2026-01-15T10:30:00Z."""
    return FIXED_MOMENT


def make_report(template_metrics, data_points, name="Executive Overview", **template_fields) -> ReportData:
    """
    Build ReportData around a template with the given metrics.

    Args:
        template_metrics: Metric ids in template order
        data_points: ReportDataPoint instances
        name: Template name
        **template_fields: Extra ReportTemplate fields
    """
    template = ReportTemplate(
        id=template_fields.pop("id", "tpl-exec"),
        name=name,
        description=template_fields.pop("description", "Weekly revenue and conversion snapshot"),
        metrics=tuple(
            ReportMetric(metric_id=metric_id, order=i) for i, metric_id in enumerate(template_metrics)
        ),
        created_at=template_fields.pop("created_at", "2026-01-01T00:00:00.000Z"),
        updated_at=template_fields.pop("updated_at", "2026-01-10T00:00:00.000Z"),
        created_by=template_fields.pop("created_by", "analyst@example.com"),
        is_default=template_fields.pop("is_default", True),
    )
    return ReportData(
        template_id=template.id,
        template=template,
        data_points=tuple(data_points),
        generated_at="2026-01-15T10:30:00.000Z",
    )


@pytest.fixture
def clock():
    return fixed_clock


@pytest.fixture
def executive_report() -> ReportData:
    """Two-metric report: currency revenue and a percentage conversion rate."""
    template = ReportTemplate(
        id="tpl-exec",
        name="Executive Overview",
        description="Weekly revenue and conversion snapshot",
        metrics=(
            ReportMetric("totalRevenue", order=0, width=MetricWidth.FULL, chart_type=ChartType.LINE),
            ReportMetric("conversionRate", order=1, width=MetricWidth.HALF),
        ),
        created_at="2026-01-01T00:00:00.000Z",
        updated_at="2026-01-10T00:00:00.000Z",
        created_by="analyst@example.com",
        is_default=True,
    )
    return ReportData(
        template_id="tpl-exec",
        template=template,
        data_points=(
            ReportDataPoint.compare(
                "totalRevenue", 128000, 115000, trend=[100000, 110000, 115000, 128000]
            ),
            ReportDataPoint.compare(
                "conversionRate", 3.4, 3.1, trend=[3.0, 3.1, 3.4]
            ),
        ),
        generated_at="2026-01-15T10:30:00.000Z",
    )


@pytest.fixture
def bare_report() -> ReportData:
    """One metric with no previous value and no trend."""
    return make_report(
        ["sessions"],
        [ReportDataPoint(metric_id="sessions", value=4200)],
        name="Traffic Pulse",
    )


@pytest.fixture
def report_factory():
    """The make_report builder, for tests that need custom metric sets."""
    return make_report
