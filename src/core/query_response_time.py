"""Query response time distribution from INFORMATION_SCHEMA.QUERY_RESPONSE_TIME.

The plugin reports per-bucket sample counts and total execution times. The
scraper turns them into a cumulative `_total` counter per bucket bound plus
one histogram of sample counts.
"""

import logging
import math
from contextlib import aclosing
from dataclasses import dataclass, field
from decimal import Decimal

from src.core.errors import SchemaError
from src.core.parsing import as_text, parse_count, parse_number
from src.ports.database import DatabasePort
from src.ports.metrics import HistogramValue, MetricRecord, MetricSinkPort

__all__ = ["HistogramAccumulator", "QueryResponseTimeScraper", "format_bucket_bound"]

logger = logging.getLogger(__name__)

QUERY_RESPONSE_TIME_NAMESPACE = "mysql_info_schema_query_response_time"
# Bounds with a decimal exponent outside [-4, 6) render in exponent form.
_MIN_PLAIN_EXPONENT = -4
_MAX_PLAIN_EXPONENT = 6


def format_bucket_bound(bound: float) -> str:
    """Render a bucket bound as an `le` label value.

    Uses the shortest digits that round-trip, in %g layout:
    1e-06, 0.0001, 1, 100000, 1e+06.
    """
    if math.isnan(bound):
        return "NaN"
    if math.isinf(bound):
        return "+Inf" if bound > 0 else "-Inf"
    if bound == 0:
        return "0"

    sign = "-" if bound < 0 else ""
    shortest = Decimal(repr(abs(bound))).normalize()
    digits = "".join(str(digit) for digit in shortest.as_tuple().digits)
    exponent = shortest.adjusted()

    if exponent < _MIN_PLAIN_EXPONENT or exponent >= _MAX_PLAIN_EXPONENT:
        mantissa = digits[0] + (f".{digits[1:]}" if len(digits) > 1 else "")
        return f"{sign}{mantissa}e{'-' if exponent < 0 else '+'}{abs(exponent):02d}"
    if exponent < 0:
        return f"{sign}0.{'0' * (-exponent - 1)}{digits}"
    integer, fraction = digits[: exponent + 1].ljust(exponent + 1, "0"), digits[exponent + 1 :]
    return f"{sign}{integer}.{fraction}" if fraction else f"{sign}{integer}"


@dataclass
class HistogramAccumulator:
    """Running totals for one scrape; rows must arrive in ascending bound order.

    Attributes:
        count: Cumulative number of samples.
        total: Cumulative execution time in seconds.
        buckets: Bound -> cumulative count, in insertion order.
    """

    count: int = 0
    total: float = 0.0
    buckets: dict[float, int] = field(default_factory=dict)

    def add(self, bound: float, count: int, total: float) -> None:
        self.count += count
        self.total += total
        self.buckets[bound] = self.count

    def to_histogram(self) -> HistogramValue:
        return HistogramValue(buckets=self.buckets, count=self.count, sum=self.total)


class QueryResponseTimeScraper:
    """Collects the query response time distribution, if the server has it."""

    name = "info_schema.query_response_time"
    check_query = "SHOW GLOBAL VARIABLES LIKE 'query_response_time_stats'"
    query = """
        SELECT TIME, COUNT, TOTAL
          FROM INFORMATION_SCHEMA.QUERY_RESPONSE_TIME
        """

    async def is_enabled(self, db: DatabasePort) -> bool:
        """Check whether query_response_time_stats is present and switched on."""
        async with aclosing(db.stream(self.check_query)) as stream:
            rows = [row async for row in stream]
        if not rows:
            return False
        if len(rows[0]) != 2:
            raise SchemaError(f"query_response_time_stats check returned {len(rows[0])} columns, expected 2")
        return as_text(rows[0][1]).strip().upper() in ("ON", "1")

    async def scrape(self, db: DatabasePort, sink: MetricSinkPort) -> None:
        if not await self.is_enabled(db):
            logger.debug("query_response_time_stats is not available or OFF, skipping")
            return

        accumulator = HistogramAccumulator()
        async with aclosing(db.stream(self.query)) as rows:
            async for row in rows:
                if len(row) != 3:
                    raise SchemaError(f"QUERY_RESPONSE_TIME returned {len(row)} columns, expected 3")
                raw_bound, raw_count, raw_total = row

                bound = parse_number(raw_bound)
                if bound is None or not math.isfinite(bound):
                    # Overflow row (e.g. "TOO LONG"), not a real bucket.
                    logger.debug(f"Skipping non-numeric query response time bucket {as_text(raw_bound)!r}")
                    continue

                count = parse_count(raw_count)
                total = parse_number(raw_total)
                if count is None or total is None:
                    raise SchemaError(
                        f"Query response time bucket {as_text(raw_bound)!r} has invalid "
                        f"count {raw_count!r} or total {raw_total!r}"
                    )

                accumulator.add(bound, count, total)
                await sink.put(
                    MetricRecord.counter(
                        f"{QUERY_RESPONSE_TIME_NAMESPACE}_seconds_total",
                        accumulator.total,
                        {"le": format_bucket_bound(bound)},
                        help="Total time of queries that took up to this duration to execute.",
                    )
                )

        await sink.put(
            MetricRecord.counter(
                f"{QUERY_RESPONSE_TIME_NAMESPACE}_seconds_total",
                accumulator.total,
                {"le": "+Inf"},
                help="Total time of queries that took up to this duration to execute.",
            )
        )
        await sink.put(
            MetricRecord.from_histogram(
                f"{QUERY_RESPONSE_TIME_NAMESPACE}_seconds",
                accumulator.to_histogram(),
                help="The number of all queries by duration they took to execute.",
            )
        )
