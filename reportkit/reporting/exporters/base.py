"""
reporting/exporters/base.py - Base exporter class.

Exporters are stateless: everything a call needs arrives through the
constructor (catalog, clock) or the call arguments.
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional, Union

from ..catalog import MetricCatalog
from ..enums import ExportFormat
from ..formatting import iso_timestamp
from ..schema import ExportOptions, MetricDefinition, ReportData

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def unresolved_metric_ids(data: ReportData, catalog: MetricCatalog) -> List[str]:
    """Data point metric ids the catalog cannot resolve, in data order."""
    missing = []
    for dp in data.data_points:
        if dp.metric_id not in catalog and dp.metric_id not in missing:
            missing.append(dp.metric_id)
    return missing


class BaseExporter(ABC):
    """Abstract base class for report exporters."""

    format: ExportFormat

    def __init__(
        self,
        catalog: Optional[MetricCatalog] = None,
        clock: Optional[Clock] = None,
    ):
        self.catalog = catalog if catalog is not None else MetricCatalog.default()
        self.clock = clock or utc_now

    @abstractmethod
    def export(self, data: ReportData, options: Optional[ExportOptions] = None) -> Union[str, bytes]:
        """
        Export report data to the target format.

        Args:
            data: Report data to export
            options: Export options (format defaults apply when None)

        Returns:
            Text or encoded bytes in the target format
        """
        pass

    def _options(self, options: Optional[ExportOptions]) -> ExportOptions:
        return options if options is not None else ExportOptions(format=self.format)

    def _definitions(self, data: ReportData) -> Dict[str, MetricDefinition]:
        return {dp.metric_id: self.catalog.resolve(dp.metric_id) for dp in data.data_points}

    def _timestamp(self) -> str:
        return iso_timestamp(self.clock())
