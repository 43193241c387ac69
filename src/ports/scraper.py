"""Scraper port definition."""

from typing import Protocol

from src.ports.database import DatabasePort
from src.ports.metrics import MetricSinkPort

__all__ = ["ScraperPort"]


class ScraperPort(Protocol):
    """One unit of collection run by the scrape coordinator.

    Attributes:
        name: Short collector name, used as the `collector` label of
            exporter self-metrics.
    """

    name: str

    async def scrape(self, db: DatabasePort, sink: MetricSinkPort) -> None:
        """Query the server and stream the resulting records into sink.

        Records already put before an error stay in the sink.

        Args:
            db: Query-executing handle.
            sink: Destination for emitted records.

        Raises:
            ScrapeError: On query failure or malformed required data.
        """
        ...
