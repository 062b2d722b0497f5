"""
reporting/catalog.py - Built-in metric catalog.

Maps metric ids to their MetricDefinition. The exporter resolves every data
point through a catalog; ids the catalog does not know get a flagged
synthetic definition instead of a guessed unit.
"""

from __future__ import annotations
from typing import Dict, Iterable, List, Optional

from .enums import MetricAggregation, MetricCategory, MetricUnit
from .schema import MetricDefinition

_C = MetricCategory
_U = MetricUnit
_A = MetricAggregation

# (id, name, category, description, unit, aggregation)
_BUILTIN_METRICS = [
    # Traffic
    ("pageViews", "Page Views", _C.TRAFFIC,
     "Total number of pages viewed across all sessions", _U.NUMBER, _A.SUM),
    ("sessions", "Sessions", _C.TRAFFIC,
     "Total number of user sessions initiated", _U.NUMBER, _A.SUM),
    ("uniqueVisitors", "Unique Visitors", _C.TRAFFIC,
     "Number of distinct users who visited the site", _U.NUMBER, _A.SUM),
    ("bounceRate", "Bounce Rate", _C.TRAFFIC,
     "Percentage of single-page sessions with no interaction", _U.PERCENTAGE, _A.AVERAGE),
    ("avgSessionDuration", "Avg Session Duration", _C.TRAFFIC,
     "Average time spent per session in seconds", _U.DURATION, _A.AVERAGE),

    # Conversions
    ("totalConversions", "Total Conversions", _C.CONVERSIONS,
     "Total number of goal completions across all conversion types", _U.NUMBER, _A.SUM),
    ("conversionRate", "Conversion Rate", _C.CONVERSIONS,
     "Percentage of sessions that resulted in a conversion", _U.PERCENTAGE, _A.AVERAGE),
    ("signups", "Sign-ups", _C.CONVERSIONS,
     "Number of new user registrations", _U.NUMBER, _A.SUM),
    ("purchases", "Purchases", _C.CONVERSIONS,
     "Number of completed purchase transactions", _U.NUMBER, _A.SUM),
    ("cartAbandonment", "Cart Abandonment Rate", _C.CONVERSIONS,
     "Percentage of shopping carts abandoned before checkout", _U.PERCENTAGE, _A.AVERAGE),

    # Revenue
    ("totalRevenue", "Total Revenue", _C.REVENUE,
     "Total revenue generated from all transactions", _U.CURRENCY, _A.SUM),
    ("avgOrderValue", "Average Order Value", _C.REVENUE,
     "Average revenue per completed order", _U.CURRENCY, _A.AVERAGE),
    ("revenuePerVisitor", "Revenue Per Visitor", _C.REVENUE,
     "Average revenue generated per unique visitor", _U.CURRENCY, _A.AVERAGE),
    ("recurringRevenue", "Recurring Revenue", _C.REVENUE,
     "Revenue from subscription and repeat purchases", _U.CURRENCY, _A.SUM),
    ("refunds", "Refunds", _C.REVENUE,
     "Total value of refunded transactions", _U.CURRENCY, _A.SUM),

    # Engagement
    ("clickThroughRate", "Click-Through Rate", _C.ENGAGEMENT,
     "Percentage of impressions that resulted in clicks", _U.PERCENTAGE, _A.AVERAGE),
    ("timeOnPage", "Time on Page", _C.ENGAGEMENT,
     "Average time users spend on each page in seconds", _U.DURATION, _A.AVERAGE),
    ("scrollDepth", "Scroll Depth", _C.ENGAGEMENT,
     "Average percentage of page content scrolled through", _U.PERCENTAGE, _A.AVERAGE),
    ("socialShares", "Social Shares", _C.ENGAGEMENT,
     "Number of times content was shared on social media", _U.NUMBER, _A.SUM),
    ("comments", "Comments", _C.ENGAGEMENT,
     "Total number of user comments posted", _U.NUMBER, _A.SUM),

    # Attribution
    ("firstTouch", "First-Touch Attribution", _C.ATTRIBUTION,
     "Revenue attributed to the first channel interaction", _U.CURRENCY, _A.SUM),
    ("lastTouch", "Last-Touch Attribution", _C.ATTRIBUTION,
     "Revenue attributed to the final channel before conversion", _U.CURRENCY, _A.SUM),
    ("linearAttribution", "Linear Attribution", _C.ATTRIBUTION,
     "Revenue distributed equally across all touchpoints", _U.CURRENCY, _A.SUM),
    ("timeDecay", "Time-Decay Attribution", _C.ATTRIBUTION,
     "Revenue weighted toward more recent touchpoints", _U.CURRENCY, _A.SUM),

    # ROI
    ("overallROI", "Overall ROI", _C.ROI,
     "Return on investment across all marketing channels", _U.PERCENTAGE, _A.AVERAGE),
    ("roas", "ROAS", _C.ROI,
     "Return on ad spend (revenue / ad spend)", _U.NUMBER, _A.AVERAGE),
    ("cac", "Customer Acquisition Cost", _C.ROI,
     "Average cost to acquire a new customer", _U.CURRENCY, _A.AVERAGE),
    ("ltv", "Customer Lifetime Value", _C.ROI,
     "Predicted total revenue from a customer over their lifetime", _U.CURRENCY, _A.AVERAGE),
    ("paybackPeriod", "Payback Period", _C.ROI,
     "Days to recover customer acquisition cost", _U.NUMBER, _A.AVERAGE),
]

BUILTIN_DEFINITIONS: List[MetricDefinition] = [
    MetricDefinition(
        id=metric_id,
        name=name,
        category=category,
        description=description,
        unit=unit,
        aggregation=aggregation,
    )
    for metric_id, name, category, description, unit, aggregation in _BUILTIN_METRICS
]


class MetricCatalog:
    """
    Read-only lookup of metric definitions.

    Usage:
        catalog = MetricCatalog.default()
        definition = catalog.resolve("totalRevenue")
    """

    def __init__(self, definitions: Iterable[MetricDefinition] = ()):
        self._definitions: Dict[str, MetricDefinition] = {}
        for definition in definitions:
            self._definitions[definition.id] = definition

    @classmethod
    def default(cls) -> "MetricCatalog":
        return cls(BUILTIN_DEFINITIONS)

    def get(self, metric_id: str) -> Optional[MetricDefinition]:
        return self._definitions.get(metric_id)

    def resolve(self, metric_id: str) -> MetricDefinition:
        """Definition for an id, or a synthetic one flagged as such."""
        definition = self._definitions.get(metric_id)
        if definition is None:
            return MetricDefinition.synthetic_for(metric_id)
        return definition

    def by_category(self, category: MetricCategory) -> List[MetricDefinition]:
        return [d for d in self._definitions.values() if d.category == category]

    def with_definitions(self, definitions: Iterable[MetricDefinition]) -> "MetricCatalog":
        """New catalog with extra or replacement definitions."""
        merged = dict(self._definitions)
        for definition in definitions:
            merged[definition.id] = definition
        return MetricCatalog(merged.values())

    def __contains__(self, metric_id: str) -> bool:
        return metric_id in self._definitions

    def __len__(self) -> int:
        return len(self._definitions)

    def __iter__(self):
        return iter(self._definitions.values())
