"""Application entrypoint."""

import asyncio
import logging

from src.adapters.driven.config.settings import load_settings
from src.adapters.driven.database.mysql import MySQLDatabase
from src.adapters.driven.logging.logging_config import configure_logs
from src.adapters.driven.metrics.scrape_metrics import ScrapeMetrics, SnapshotStore
from src.adapters.driving.signals import make_stop_on_sigterm
from src.core.global_status import GlobalStatusScraper, StatusVariableClassifier
from src.core.query_response_time import QueryResponseTimeScraper
from src.core.scrape_loop import ScrapeCoordinator, start_main_loop
from src.core.status_variables import GENERIC_STATUS_VARIABLES
from src.core.table_stats import TableStatScraper
from src.ports.metrics import ScrapeSnapshot
from src.ports.scraper import ScraperPort
from src.ports.settings import SettingsPort

__all__ = ["build_scrapers", "main"]

logger = logging.getLogger(__name__)


def build_scrapers(settings: SettingsPort) -> list[ScraperPort]:
    """Instantiate the scrapers enabled in settings, in output order.

    Args:
        settings: Runtime settings.

    Returns:
        Enabled scrapers.
    """
    scrapers: list[ScraperPort] = []
    if settings.collect_global_status:
        classifier = StatusVariableClassifier(
            generic_variables=GENERIC_STATUS_VARIABLES | settings.extra_status_variables
        )
        scrapers.append(GlobalStatusScraper(classifier))
    if settings.collect_table_stats:
        scrapers.append(TableStatScraper())
    if settings.collect_query_response_time:
        scrapers.append(QueryResponseTimeScraper())
    return scrapers


async def main() -> None:
    """Start the MySQL exporter.

    Startup sequence:
    1. Configure logging.
    2. Load and validate configuration (environment + option file).
    3. Optionally ping the server.
    4. Run the scrape loop.
    5. Gracefully shutdown on SIGTERM.
    """
    configure_logs()
    logger.info("Starting MySQL exporter...")

    try:
        config = load_settings()
    except (RuntimeError, ValueError) as exc:
        logger.error(
            "Configuration error: %s\n"
            "Hint: check MYSQLD_EXPORTER_MY_CNF points to a readable option file with a [client] "
            "section holding user and password, and that SCRAPE_INTERVAL_IN_SECONDS is a positive integer.",
            exc,
        )
        return

    # Wrap config into port so core depends on interface (hexagonal)
    settings_port = SettingsPort(
        scrape_interval_sec=config.scrape_interval_in_sec,
        collect_global_status=config.collect_global_status,
        collect_table_stats=config.collect_table_stats,
        collect_query_response_time=config.collect_query_response_time,
        extra_status_variables=frozenset(config.extra_status_variables),
        sink_max_size=config.sink_max_size,
        startup_ping=config.startup_ping,
    )

    scrapers = build_scrapers(settings_port)
    if not scrapers:
        logger.error("No collectors enabled, nothing to scrape")
        return

    metrics = ScrapeMetrics()
    store = SnapshotStore()

    async with MySQLDatabase(config.target) as db:
        if settings_port.startup_ping and not await db.ping():
            logger.error("MySQL is unreachable, aborting startup")
            return

        coordinator = ScrapeCoordinator(db, scrapers, metrics=metrics, sink_size=settings_port.sink_max_size)

        def publish(snapshot: ScrapeSnapshot) -> None:
            store.publish(snapshot)
            if snapshot.is_failed:
                logger.warning(
                    f"Collectors failed: {', '.join(snapshot.failed_collectors)} "
                    f"(recent failures: {dict(metrics.failures_by_collector())})"
                )
            logger.info(f"Scraped {len(snapshot.records)} records | {metrics}")

        try:
            await start_main_loop(
                settings=settings_port,
                stop_fn=make_stop_on_sigterm(),
                scrape_fn=coordinator.scrape_once,
                publish_fn=publish,
            )
        except Exception as e:
            logger.error(f"Unhandled exception in main loop: {e}", exc_info=True)

        logger.info("MySQL exporter stopped.")


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        logging.getLogger(__name__).info("Shutdown requested by user (Ctrl+C).")
