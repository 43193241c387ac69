"""Console logging setup for the exporter and its health check."""

import logging

__all__ = ["configure_logs"]

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s:%(lineno)d - %(message)s"
DATE_FORMAT = "%d/%m/%y %H:%M:%S"

# Database driver and event loop chatter
QUIET_LOGGERS = ("sqlalchemy", "sqlalchemy.engine", "aiomysql", "asyncio")
APP_LOGGER = "src"

_HANDLER_NAME = "mysql-exporter-console"


def configure_logs(level: int | str = logging.INFO) -> None:
    """Configure console logging.

    Safe to call more than once: the console handler is installed only once
    and the root level is updated in place.

    Sets up:
    - Root logger at the given level (INFO by default).
    - Driver loggers (sqlalchemy, aiomysql, asyncio) at WARNING level.
    - Exporter loggers (src) at DEBUG level.

    Args:
        level: Root logger level, as a number or a name such as "DEBUG".
    """
    root = logging.getLogger()
    root.setLevel(level.upper() if isinstance(level, str) else level)

    if not any(handler.get_name() == _HANDLER_NAME for handler in root.handlers):
        handler = logging.StreamHandler()
        handler.set_name(_HANDLER_NAME)
        handler.setFormatter(logging.Formatter(LOG_FORMAT, DATE_FORMAT))
        root.addHandler(handler)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logging.getLogger(APP_LOGGER).setLevel(logging.DEBUG)
