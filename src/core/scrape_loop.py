"""Scrape coordinator and the loop that runs it periodically."""

import asyncio
import logging
from collections.abc import Awaitable, Callable, Sequence
from contextlib import aclosing

from src.core.errors import QueryError, ScrapeError
from src.core.sink import MetricSink
from src.ports.database import DatabasePort
from src.ports.metrics import MetricRecord, ScrapeAttemptDto, ScrapeMetricsPort, ScrapeSnapshot
from src.ports.scraper import ScraperPort
from src.ports.settings import SettingsPort

__all__ = ["ScrapeCoordinator", "get_now_time", "start_main_loop"]

logger = logging.getLogger(__name__)

PING_QUERY = "SELECT 1"
EXPORTER_NAMESPACE = "mysql_exporter"


def get_now_time() -> float:
    """Get current monotonic time in seconds.

    Uses event loop's monotonic clock for accurate scheduling
    without wall-clock drift.

    Returns:
        Current time in seconds (monotonic).
    """
    return asyncio.get_running_loop().time()


class ScrapeCoordinator:
    """Runs every configured scraper once per cycle.

    Each scraper gets its own bounded MetricSink and a reader task that
    drains it while the scraper is still receiving rows. A failing scraper
    is logged and flagged; the others still run and its partial output is
    kept. Queries are never retried here.
    """

    def __init__(
        self,
        db: DatabasePort,
        scrapers: Sequence[ScraperPort],
        *,
        metrics: ScrapeMetricsPort | None = None,
        sink_size: int = 256,
    ) -> None:
        """Initialize coordinator.

        Args:
            db: Query-executing handle shared by the scrapers.
            scrapers: Scrapers to run, in output order.
            metrics: Optional recorder of per-scraper outcomes.
            sink_size: Capacity of each scraper's record queue.
        """
        self._db = db
        self._scrapers = tuple(scrapers)
        self._metrics = metrics
        self._sink_size = sink_size
        self._scrapes_total = 0

    async def _is_up(self) -> bool:
        try:
            async with aclosing(self._db.stream(PING_QUERY)) as rows:
                async for _ in rows:
                    pass
        except QueryError as e:
            logger.error(f"MySQL server is unreachable: {e}")
            return False
        return True

    async def _run_scraper(self, scraper: ScraperPort) -> tuple[list[MetricRecord], ScrapeAttemptDto]:
        sink = MetricSink(maxsize=self._sink_size)
        records: list[MetricRecord] = []
        started = get_now_time()

        async def _produce() -> None:
            try:
                await scraper.scrape(self._db, sink)
            finally:
                sink.close()

        async def _consume() -> None:
            async for record in sink:
                records.append(record)

        produced, _ = await asyncio.gather(_produce(), _consume(), return_exceptions=True)

        is_failed = isinstance(produced, BaseException)
        if isinstance(produced, ScrapeError):
            logger.error(f"Scraper {scraper.name} failed: {produced}")
        elif is_failed:
            logger.error(f"Unexpected error in scraper {scraper.name}: {produced}", exc_info=produced)

        attempt = ScrapeAttemptDto(
            collector=scraper.name,
            duration_sec=get_now_time() - started,
            records=len(records),
            is_failed=is_failed,
        )
        if self._metrics is not None:
            self._metrics.update(attempt)
        return records, attempt

    async def scrape_once(self) -> ScrapeSnapshot:
        """Run one cycle and return everything it produced.

        Returns:
            Scraper records followed by exporter self-metrics.
        """
        taken_at = get_now_time()
        self._scrapes_total += 1
        records: list[MetricRecord] = []
        failed: list[str] = []

        is_up = await self._is_up()
        if is_up:
            results = await asyncio.gather(*(self._run_scraper(scraper) for scraper in self._scrapers))
            for scraper_records, attempt in results:
                records.extend(scraper_records)
                if attempt.is_failed:
                    failed.append(attempt.collector)
                records.append(
                    MetricRecord.gauge(
                        f"{EXPORTER_NAMESPACE}_collector_duration_seconds",
                        attempt.duration_sec,
                        {"collector": attempt.collector},
                        help="Collector time duration.",
                    )
                )

        records.append(MetricRecord.gauge("mysql_up", 1.0 if is_up else 0.0, help="Whether the MySQL server is up."))
        records.append(
            MetricRecord.counter(
                f"{EXPORTER_NAMESPACE}_scrapes_total",
                self._scrapes_total,
                help="Total number of times MySQL was scraped for metrics.",
            )
        )
        records.append(
            MetricRecord.gauge(
                f"{EXPORTER_NAMESPACE}_last_scrape_error",
                0.0 if is_up and not failed else 1.0,
                help="Whether the last scrape of metrics from MySQL resulted in an error (1 for error, 0 for success).",
            )
        )
        return ScrapeSnapshot(taken_at_sec=taken_at, records=tuple(records), failed_collectors=tuple(failed))


async def start_main_loop(
    settings: SettingsPort,
    stop_fn: Callable[[], bool],
    scrape_fn: Callable[[], Awaitable[ScrapeSnapshot]],
    publish_fn: Callable[[ScrapeSnapshot], None] | None = None,
) -> None:
    """Run the main scrape loop.

    Periodically:
    1. Run one scrape cycle.
    2. Hand the snapshot to publish_fn.
    3. Sleep to maintain the configured interval (based on monotonic time).
    4. Repeat until stop_fn() returns True.

    Args:
        settings: Runtime configuration (scrape interval).
        stop_fn: Callable that returns True when loop should exit.
        scrape_fn: Async function running one scrape cycle.
        publish_fn: Optional consumer of each finished snapshot.

    Notes:
        - Cycles never overlap. When a cycle overruns the interval the missed
          ticks are dropped instead of being run back to back.
        - An exception escaping a cycle is logged and the loop continues.
    """
    next_tick: float = get_now_time()

    while not stop_fn():
        try:
            snapshot = await scrape_fn()
            if publish_fn is not None:
                publish_fn(snapshot)
        except Exception as e:  # noqa: BLE001
            logger.error(f"Unexpected error in scrape cycle: {e}", exc_info=True)

        next_tick += settings.scrape_interval_sec
        now = get_now_time()
        if next_tick < now:
            logger.warning(f"Scrape cycle overran the interval by {now - next_tick:.3f}s")
            next_tick = now
        await asyncio.sleep(max(0, next_tick - now))
