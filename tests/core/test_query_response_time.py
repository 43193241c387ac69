"""Tests for the query response time histogram scraper."""

import math

import pytest

from src.core.errors import QueryError, SchemaError
from src.core.query_response_time import (
    HistogramAccumulator,
    QueryResponseTimeScraper,
    format_bucket_bound,
)
from src.ports.metrics import MetricType

__all__ = []

ENABLED = [("query_response_time_stats", "ON")]

RESPONSE_TIME_ROWS = [
    (0.000001, 124, 0.000000),
    (0.000010, 179, 0.000797),
    (0.000100, 2859, 0.107321),
    (0.001000, 1085, 0.335395),
    (0.010000, 269, 0.522264),
    (0.100000, 11, 0.344209),
    (1.000000, 1, 0.267369),
    (10.000000, 0, 0.000000),
    (100.000000, 0, 0.000000),
    (1000.000000, 0, 0.000000),
    (10000.000000, 0, 0.000000),
    (100000.000000, 0, 0.000000),
    (1000000.000000, 0, 0.000000),
    ("TOO LONG", 0, "TOO LONG"),
]

# Percona returns TIME and TOTAL as right-aligned text.
TEXT_RESPONSE_TIME_ROWS = [
    (f"{bound:14.6f}", count, f"{total:14.6f}") for bound, count, total in RESPONSE_TIME_ROWS[:-1]
] + [("TOO LONG", 0, "TOO LONG")]

RUNNING_TOTALS = [
    0,
    0.000797,
    0.108118,
    0.443513,
    0.9657769999999999,
    1.3099859999999999,
    1.5773549999999998,
    1.5773549999999998,
    1.5773549999999998,
    1.5773549999999998,
    1.5773549999999998,
    1.5773549999999998,
    1.5773549999999998,
    1.5773549999999998,
]


@pytest.fixture
def scraper() -> QueryResponseTimeScraper:
    """Query response time scraper."""
    return QueryResponseTimeScraper()


@pytest.mark.asyncio
@pytest.mark.parametrize("rows", [RESPONSE_TIME_ROWS, TEXT_RESPONSE_TIME_ROWS], ids=["numeric", "text"])
async def test_scrape_emits_running_totals_per_bucket(fake_db, sink, scraper, rows) -> None:
    """Counters should carry the cumulative total time for each `le` bound, then +Inf."""
    fake_db.expect(scraper.check_query, ENABLED)
    fake_db.expect(scraper.query, rows)

    await scraper.scrape(fake_db, sink)

    counters = [r for r in sink.records if r.metric_type is MetricType.COUNTER]
    assert [r.labels["le"] for r in counters] == [
        "1e-06",
        "1e-05",
        "0.0001",
        "0.001",
        "0.01",
        "0.1",
        "1",
        "10",
        "100",
        "1000",
        "10000",
        "100000",
        "1e+06",
        "+Inf",
    ]
    assert [r.value for r in counters] == RUNNING_TOTALS
    assert {r.name for r in counters} == {"mysql_info_schema_query_response_time_seconds_total"}
    fake_db.assert_expectations_met()


@pytest.mark.asyncio
@pytest.mark.parametrize("rows", [RESPONSE_TIME_ROWS, TEXT_RESPONSE_TIME_ROWS], ids=["numeric", "text"])
async def test_scrape_emits_cumulative_histogram_last(fake_db, sink, scraper, rows) -> None:
    """The histogram should hold cumulative counts and skip the overflow row."""
    fake_db.expect(scraper.check_query, ENABLED)
    fake_db.expect(scraper.query, rows)

    await scraper.scrape(fake_db, sink)

    record = sink.records[-1]
    assert record.metric_type is MetricType.HISTOGRAM
    assert record.name == "mysql_info_schema_query_response_time_seconds"
    assert record.histogram.count == 4528
    assert record.histogram.sum == 1.5773549999999998
    assert record.value == record.histogram.sum
    assert dict(record.histogram.buckets) == {
        0.000001: 124,
        0.00001: 303,
        0.0001: 3162,
        0.001: 4247,
        0.01: 4516,
        0.1: 4527,
        1: 4528,
        10: 4528,
        100: 4528,
        1000: 4528,
        10000: 4528,
        100000: 4528,
        1000000: 4528,
    }
    assert len(sink.records) == 15


@pytest.mark.asyncio
@pytest.mark.parametrize("check_rows", [[], [("query_response_time_stats", "OFF")]])
async def test_scrape_is_noop_when_disabled(fake_db, sink, scraper, check_rows) -> None:
    """Missing or disabled statistics produce no records and no second query."""
    fake_db.expect(scraper.check_query, check_rows)

    await scraper.scrape(fake_db, sink)

    assert sink.records == []
    assert fake_db.executed == [" ".join(scraper.check_query.split())]
    fake_db.assert_expectations_met()


@pytest.mark.asyncio
async def test_check_accepts_numeric_flag(fake_db, scraper) -> None:
    """A flag value of 1 counts as enabled."""
    fake_db.expect(scraper.check_query, [("query_response_time_stats", 1)])

    assert await scraper.is_enabled(fake_db) is True


@pytest.mark.asyncio
async def test_check_error_is_fatal(fake_db, sink, scraper) -> None:
    """A failing check query should be reported, not treated as disabled."""
    fake_db.expect(scraper.check_query, error=QueryError(scraper.check_query, RuntimeError("denied")))

    with pytest.raises(QueryError):
        await scraper.scrape(fake_db, sink)


@pytest.mark.asyncio
async def test_check_wrong_width_is_fatal(fake_db, sink, scraper) -> None:
    """A check row without two columns is a schema error."""
    fake_db.expect(scraper.check_query, [("ON",)])

    with pytest.raises(SchemaError):
        await scraper.scrape(fake_db, sink)


@pytest.mark.asyncio
async def test_scrape_without_buckets_emits_empty_histogram(fake_db, sink, scraper) -> None:
    """An empty distribution still yields the +Inf counter and an empty histogram."""
    fake_db.expect(scraper.check_query, ENABLED)
    fake_db.expect(scraper.query, [])

    await scraper.scrape(fake_db, sink)

    assert [(r.metric_type, r.value) for r in sink.records] == [
        (MetricType.COUNTER, 0),
        (MetricType.HISTOGRAM, 0),
    ]
    assert sink.records[-1].histogram.count == 0
    assert dict(sink.records[-1].histogram.buckets) == {}


@pytest.mark.asyncio
async def test_scrape_invalid_count_is_fatal(fake_db, sink, scraper) -> None:
    """A numeric bound with a bad count should raise SchemaError."""
    fake_db.expect(scraper.check_query, ENABLED)
    fake_db.expect(scraper.query, [(0.000001, "n/a", 0.0)])

    with pytest.raises(SchemaError, match="invalid count"):
        await scraper.scrape(fake_db, sink)

    assert fake_db.open_streams == 0


@pytest.mark.parametrize(
    ("bound", "expected"),
    [
        (0.000001, "1e-06"),
        (0.00001, "1e-05"),
        (0.0001, "0.0001"),
        (0.25, "0.25"),
        (1.0, "1"),
        (10.0, "10"),
        (100000.0, "100000"),
        (1000000.0, "1e+06"),
        (1234567.0, "1.234567e+06"),
        (1.5e-7, "1.5e-07"),
        (0.0, "0"),
        (-2.5, "-2.5"),
        (math.inf, "+Inf"),
        (-math.inf, "-Inf"),
        (math.nan, "NaN"),
    ],
)
def test_format_bucket_bound(bound: float, expected: str) -> None:
    """Bounds should render in the shortest general format."""
    assert format_bucket_bound(bound) == expected


def test_accumulator_running_totals() -> None:
    """Cumulative counts and sums should grow with every bucket."""
    accumulator = HistogramAccumulator()

    accumulator.add(0.1, 2, 0.1)
    accumulator.add(1.0, 3, 1.5)

    histogram = accumulator.to_histogram()
    assert dict(histogram.buckets) == {0.1: 2, 1.0: 5}
    assert histogram.count == 5
    assert histogram.sum == pytest.approx(1.6)
