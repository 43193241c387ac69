"""In-memory sliding-window metrics for scraper runs, and the latest snapshot."""

from __future__ import annotations

import statistics
from collections import Counter, deque

from src.ports.metrics import ScrapeAttemptDto, ScrapeMetricsPort, ScrapeSnapshot

__all__ = ["ScrapeMetrics", "SnapshotStore"]


class ScrapeMetrics(ScrapeMetricsPort):
    """Fast, lock-free metrics for async context.

    Tracks:
    - Average scraper duration, and the slowest collector in the window.
    - Failure rate, overall and per collector.
    - Records emitted by the last run.
    - Total runs seen.

    Not thread-safe; create one instance per event loop.
    """

    def __init__(self, *, window_size: int = 100) -> None:
        """Initialize metrics collector.

        Args:
            window_size: Number of recent scraper runs to keep for statistics.
        """
        self._window: deque[ScrapeAttemptDto] = deque(maxlen=window_size)
        self._total_seen: int = 0

    def update(self, attempt: ScrapeAttemptDto) -> None:
        """Record a finished scraper run.

        Args:
            attempt: Scraper run with timing and result info.
        """
        self._window.append(attempt)
        self._total_seen += 1

    def failures_by_collector(self) -> Counter[str]:
        """Failed runs in the window, keyed by collector name."""
        return Counter(a.collector for a in self._window if a.is_failed)

    def __str__(self) -> str:
        """Return human-readable one-line summary for logging.

        Returns:
            Formatted metrics string.
        """
        if not self._window:
            return "Metrics: waiting for data …"

        n_window = len(self._window)
        failures = sum(1 for a in self._window if a.is_failed)
        fail_pct = (failures / n_window) * 100
        avg_duration_ms = statistics.fmean(a.duration_sec for a in self._window) * 1_000.0
        last = self._window[-1]
        slowest = max(self._window, key=lambda a: a.duration_sec)

        return (
            f"duration={avg_duration_ms:7.1f} ms | "
            f"last={last.collector}:{last.records} | "
            f"slowest={slowest.collector} | "
            f"fail={fail_pct:5.1f}% | "
            f"win={n_window}/{self._window.maxlen} | "
            f"total={self._total_seen}"
        )


class SnapshotStore:
    """Holds the most recent complete scrape snapshot for readers.

    This is the hand-off point for an exposition layer (an HTTP handler or a
    textfile writer): the scrape loop publishes here and the layer reads
    `latest` on its own schedule. The store swaps the whole snapshot at once,
    so a reader never sees a mix of two cycles.
    """

    def __init__(self) -> None:
        self._latest: ScrapeSnapshot | None = None

    @property
    def latest(self) -> ScrapeSnapshot | None:
        """Snapshot of the last finished cycle, or None before the first one."""
        return self._latest

    def publish(self, snapshot: ScrapeSnapshot) -> None:
        """Replace the current snapshot.

        Args:
            snapshot: Snapshot of a finished cycle.
        """
        self._latest = snapshot
