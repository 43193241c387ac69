"""Tests for metric record DTOs."""

import math

import pytest

from src.ports.metrics import HistogramValue, MetricRecord, MetricType, ScrapeSnapshot

__all__ = []


def test_record_is_immutable() -> None:
    """Records and their labels should not be mutable after creation."""
    labels = {"command": "select"}
    record = MetricRecord.counter("mysql_global_status_commands_total", 3, labels)
    labels["command"] = "insert"

    assert record.labels["command"] == "select"
    with pytest.raises(AttributeError):
        record.value = 4  # type: ignore[misc]
    with pytest.raises(TypeError):
        record.labels["command"] = "update"  # type: ignore[index]


def test_record_equality_ignores_help() -> None:
    """Help text is descriptive and does not affect equality."""
    first = MetricRecord.gauge("mysql_up", 1, help="one")
    second = MetricRecord.gauge("mysql_up", 1.0, help="two")

    assert first == second
    assert isinstance(first.value, float)


def test_record_rejects_unsupported_type() -> None:
    """Only the four metric kinds are allowed."""
    with pytest.raises(TypeError):
        MetricRecord("mysql_up", "summary", 1)  # type: ignore[arg-type]


def test_record_requires_histogram_payload_for_histograms() -> None:
    """A histogram payload is required exactly for histogram records."""
    histogram = HistogramValue(buckets={1.0: 2}, count=2, sum=0.5)

    with pytest.raises(ValueError):
        MetricRecord("h", MetricType.HISTOGRAM, 0.5)
    with pytest.raises(ValueError):
        MetricRecord("g", MetricType.GAUGE, 0.5, histogram=histogram)
    assert MetricRecord.from_histogram("h", histogram).value == 0.5


def test_record_rejects_non_string_labels() -> None:
    """Label names and values must be strings."""
    with pytest.raises(TypeError):
        MetricRecord.gauge("g", 1, {"port": 3306})  # type: ignore[dict-item]


def test_histogram_buckets_sorted_and_finite() -> None:
    """Buckets are stored sorted by bound; infinite bounds are rejected."""
    histogram = HistogramValue(buckets={10.0: 5, 0.1: 1}, count=5, sum=1.0)

    assert list(histogram.buckets) == [0.1, 10.0]
    with pytest.raises(ValueError):
        HistogramValue(buckets={math.inf: 5}, count=5, sum=1.0)
    with pytest.raises(ValueError):
        HistogramValue(buckets={}, count=-1, sum=0.0)


def test_snapshot_failure_flag() -> None:
    """A snapshot is failed when any collector failed."""
    assert not ScrapeSnapshot(taken_at_sec=0.0, records=()).is_failed
    assert ScrapeSnapshot(taken_at_sec=0.0, records=(), failed_collectors=("global_status",)).is_failed
