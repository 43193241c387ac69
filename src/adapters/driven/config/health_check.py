"""Container health check: configuration, and optionally server reachability."""

import asyncio
import logging
import os
import sys

from src.adapters.driven.config.mycnf import ConnectionTarget
from src.adapters.driven.config.settings import load_settings
from src.adapters.driven.database.mysql import MySQLDatabase
from src.adapters.driven.logging.logging_config import configure_logs

__all__ = ["check_connection", "main"]

logger = logging.getLogger(__name__)

PING_FLAG = "--ping"


async def check_connection(target: ConnectionTarget) -> bool:
    """Open a short-lived pool and ping the server once it is up."""
    async with MySQLDatabase(target, pool_size=1) as db:
        return await db.ping()


def main(argv: list[str] | None = None) -> int:
    """Run the exporter health check.

    Validates:
    - Environment variables parse (intervals, booleans).
    - The MySQL option file exists and resolves to a connection target.
    - With `--ping` (or HEALTHCHECK_PING=1), the server answers SELECT 1.

    Args:
        argv: Command line arguments (defaults to sys.argv[1:]).

    Returns:
        0 if healthy, 1 if unhealthy.
    """
    args = sys.argv[1:] if argv is None else argv
    should_ping = PING_FLAG in args or os.getenv("HEALTHCHECK_PING", "").strip().lower() in ("1", "true", "yes")

    configure_logs()

    try:
        settings = load_settings()
    except Exception as exc:
        logger.error(f"Exporter healthcheck FAILED: {exc}")
        return 1

    target = getattr(settings, "target", None)
    if should_ping:
        if target is None:
            logger.error("Exporter healthcheck FAILED: no connection target to ping")
            return 1
        if not asyncio.run(check_connection(target)):
            logger.error(f"Exporter healthcheck FAILED: {target.location} unreachable")
            return 1

    logger.info(f"Exporter healthcheck OK ({target.location if target else 'no target'})")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
