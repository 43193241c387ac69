"""Signal handling for graceful shutdown."""

import asyncio
import logging
import signal
from collections.abc import Callable

__all__ = ["make_stop_on_sigterm"]

logger = logging.getLogger(__name__)

STOP_SIGNALS = (signal.SIGTERM, signal.SIGINT)


def make_stop_on_sigterm() -> Callable[[], bool]:
    """Create SIGTERM/SIGINT-based stop flag for the scrape loop.

    Registers handlers that set an asyncio.Event, returning an is_set-style
    callable the loop polls between cycles. A cycle in progress finishes
    before the loop exits.

    Returns:
        Callable that returns True once a stop signal has been received.
    """
    stop = asyncio.Event()
    loop = asyncio.get_running_loop()

    def handle_signal(sig: signal.Signals) -> None:
        """Set the stop event; later signals are only logged."""
        if stop.is_set():
            logger.info(f"{sig.name} received again, shutdown already in progress")
            return
        logger.info(f"{sig.name} received, stopping after the current scrape cycle...")
        stop.set()

    for sig in STOP_SIGNALS:
        loop.add_signal_handler(sig, handle_signal, sig)

    return stop.is_set
