"""Metrics port definition (record DTOs and sink/recorder interfaces)."""

from __future__ import annotations

import math
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Protocol

__all__ = [
    "HistogramValue",
    "MetricRecord",
    "MetricSinkPort",
    "MetricType",
    "ScrapeAttemptDto",
    "ScrapeMetricsPort",
    "ScrapeSnapshot",
]


class MetricType(Enum):
    """The four metric kinds a scraper may emit."""

    COUNTER = "counter"
    GAUGE = "gauge"
    HISTOGRAM = "histogram"
    UNTYPED = "untyped"


@dataclass(slots=True, frozen=True)
class HistogramValue:
    """Cumulative histogram payload.

    Attributes:
        buckets: Finite upper bound -> cumulative observation count.
        count: Total number of observations.
        sum: Sum of all observed values.
    """

    buckets: Mapping[float, int]
    count: int
    sum: float

    def __post_init__(self) -> None:
        if self.count < 0:
            raise ValueError(f"Histogram count must not be negative (got: {self.count})")
        for bound in self.buckets:
            if math.isinf(bound) or math.isnan(bound):
                raise ValueError(f"Histogram bucket bounds must be finite (got: {bound})")
        object.__setattr__(self, "buckets", MappingProxyType(dict(sorted(self.buckets.items()))))


@dataclass(slots=True, frozen=True)
class MetricRecord:
    """Immutable, typed and labeled measurement emitted by a scraper.

    Attributes:
        name: Metric family name (e.g. mysql_global_status_commands_total).
        metric_type: One of the MetricType kinds.
        value: Measurement; for histograms the total sum.
        labels: Label name -> label value.
        histogram: Bucket payload, required iff metric_type is HISTOGRAM.
        help: Human readable description, ignored by equality.
    """

    name: str
    metric_type: MetricType
    value: float
    labels: Mapping[str, str] = field(default_factory=dict)
    histogram: HistogramValue | None = None
    help: str = field(default="", compare=False)

    def __post_init__(self) -> None:
        if not isinstance(self.metric_type, MetricType):
            raise TypeError(f"Unsupported metric type: {self.metric_type!r}")
        if not self.name:
            raise ValueError("Metric name must not be empty")
        if (self.metric_type is MetricType.HISTOGRAM) != (self.histogram is not None):
            raise ValueError(
                f"Metric {self.name!r}: histogram payload must be set iff the type is histogram"
            )
        for key, label_value in self.labels.items():
            if not isinstance(key, str) or not isinstance(label_value, str):
                raise TypeError(f"Metric {self.name!r}: labels must map str to str")
        object.__setattr__(self, "value", float(self.value))
        object.__setattr__(self, "labels", MappingProxyType(dict(self.labels)))

    @classmethod
    def counter(cls, name: str, value: float, labels: Mapping[str, str] | None = None, help: str = "") -> MetricRecord:
        return cls(name, MetricType.COUNTER, value, labels or {}, help=help)

    @classmethod
    def gauge(cls, name: str, value: float, labels: Mapping[str, str] | None = None, help: str = "") -> MetricRecord:
        return cls(name, MetricType.GAUGE, value, labels or {}, help=help)

    @classmethod
    def untyped(cls, name: str, value: float, labels: Mapping[str, str] | None = None, help: str = "") -> MetricRecord:
        return cls(name, MetricType.UNTYPED, value, labels or {}, help=help)

    @classmethod
    def from_histogram(
        cls,
        name: str,
        histogram: HistogramValue,
        labels: Mapping[str, str] | None = None,
        help: str = "",
    ) -> MetricRecord:
        return cls(name, MetricType.HISTOGRAM, histogram.sum, labels or {}, histogram, help=help)


class MetricSinkPort(Protocol):
    """Interface scrapers write records into.

    Implementations preserve arrival order. Ownership of a record passes to the
    sink on put(); the producer keeps no reference to it.
    """

    async def put(self, record: MetricRecord, /) -> None:
        """Hand one record to the sink, waiting while the sink is full.

        Args:
            record: The record to emit.
        """
        ...


@dataclass(slots=True, frozen=True)
class ScrapeAttemptDto:
    """Immutable snapshot of a single scraper run.

    Attributes:
        collector: Scraper name (e.g. global_status).
        duration_sec: Wall time the scraper took.
        records: Number of records it emitted (including partial output).
        is_failed: True if the scraper raised.
    """

    collector: str
    duration_sec: float
    records: int = 0
    is_failed: bool = False


class ScrapeMetricsPort(Protocol):
    """Interface for recording scraper run metrics.

    Core calls update() after each scraper run; presentation layers call
    __str__() to render summaries.
    """

    def update(self, attempt: ScrapeAttemptDto, /) -> None:
        """Record a finished scraper run.

        Args:
            attempt: The run to record.
        """
        ...

    def __str__(self) -> str:
        """Return concise textual summary for humans.

        Returns:
            Formatted metrics string.
        """
        ...


@dataclass(slots=True, frozen=True)
class ScrapeSnapshot:
    """All records produced by one scrape cycle.

    Attributes:
        taken_at_sec: Monotonic time the cycle started.
        records: Records in emission order (scrapers in configured order).
        failed_collectors: Names of scrapers that raised during the cycle.
    """

    taken_at_sec: float
    records: tuple[MetricRecord, ...]
    failed_collectors: tuple[str, ...] = ()

    @property
    def is_failed(self) -> bool:
        return bool(self.failed_collectors)
