"""Configuration loading from environment variables and files."""

import logging
import os

from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator

from src.adapters.driven.config.mycnf import DEFAULT_SECTION, ConnectionTarget, load_mycnf

__all__ = ["Settings", "load_settings"]

load_dotenv()

logger = logging.getLogger(__name__)

_TRUE_VALUES = ("1", "true", "yes", "on")
_FALSE_VALUES = ("0", "false", "no", "off")


class Settings(BaseModel):
    """Runtime configuration for the exporter.

    Attributes:
        my_cnf_path: Option file holding the connection credentials.
        my_cnf_section: Section of the option file to read.
        scrape_interval_in_sec: Interval between scrape cycles (must be positive).
        collect_global_status: Collect SHOW GLOBAL STATUS.
        collect_table_stats: Collect information_schema.table_statistics.
        collect_query_response_time: Collect INFORMATION_SCHEMA.QUERY_RESPONSE_TIME.
        extra_status_variables: Additional generic status variables to export.
        sink_max_size: Capacity of each scraper's record queue.
        startup_ping: Verify the server is reachable before the first cycle.
        target: Resolved connection target (loaded from the option file).
    """

    my_cnf_path: str = Field(default="~/.my.cnf", description="Path to the MySQL option file.")
    my_cnf_section: str = Field(default=DEFAULT_SECTION, min_length=1)
    scrape_interval_in_sec: int = Field(default=15, gt=0, description="Interval between scrapes in seconds.")
    collect_global_status: bool = True
    collect_table_stats: bool = False
    collect_query_response_time: bool = False
    extra_status_variables: frozenset[str] = Field(default_factory=frozenset)
    sink_max_size: int = Field(default=256, gt=0)
    startup_ping: bool = True
    target: ConnectionTarget | None = Field(
        default=None,
        description="Connection target (populated from the option file).",
    )

    @field_validator("extra_status_variables", mode="before")
    @classmethod
    def validate_extra_status_variables(cls, v: object) -> object:
        """Accept a comma separated string of variable names.

        Args:
            v: Raw value.

        Returns:
            Lower-cased names, blanks dropped.
        """
        if isinstance(v, str):
            return frozenset(name.strip().lower() for name in v.split(",") if name.strip())
        return v

    def load_target(self) -> None:
        """Resolve the connection target from the option file.

        Raises:
            ConfigError: If the file is missing or does not resolve.
        """
        self.target = load_mycnf(self.my_cnf_path, self.my_cnf_section)
        logger.debug(f"Loaded connection target from {self.my_cnf_path}")


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        value = int(raw)
        if value <= 0:
            raise ValueError("Must be positive")
    except ValueError as e:
        raise RuntimeError(f"{name} must be a positive integer (got: {raw})") from e
    return value


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    normalized = raw.strip().lower()
    if normalized in _TRUE_VALUES:
        return True
    if normalized in _FALSE_VALUES:
        return False
    raise RuntimeError(f"{name} must be a boolean (got: {raw})")


def load_settings() -> Settings:
    """Load and validate settings from environment and files.

    Optional environment variables:
    - MYSQLD_EXPORTER_MY_CNF: Option file path (default ~/.my.cnf).
    - MYSQLD_EXPORTER_MY_CNF_SECTION: Credentials section (default client).
    - SCRAPE_INTERVAL_IN_SECONDS: Positive integer (default 15).
    - COLLECT_GLOBAL_STATUS / COLLECT_TABLE_STATS / COLLECT_QUERY_RESPONSE_TIME: Booleans.
    - EXTRA_STATUS_VARIABLES: Comma separated status variable names.
    - SINK_MAX_SIZE: Positive integer (default 256).
    - STARTUP_PING: Boolean (default true).

    Returns:
        Validated Settings object with the connection target resolved.

    Raises:
        RuntimeError: If an environment variable is invalid.
        ValueError: If configuration is invalid (including ConfigError).
    """
    settings = Settings(
        my_cnf_path=os.getenv("MYSQLD_EXPORTER_MY_CNF", "~/.my.cnf"),
        my_cnf_section=os.getenv("MYSQLD_EXPORTER_MY_CNF_SECTION", DEFAULT_SECTION),
        scrape_interval_in_sec=_env_int("SCRAPE_INTERVAL_IN_SECONDS", 15),
        collect_global_status=_env_bool("COLLECT_GLOBAL_STATUS", True),
        collect_table_stats=_env_bool("COLLECT_TABLE_STATS", False),
        collect_query_response_time=_env_bool("COLLECT_QUERY_RESPONSE_TIME", False),
        extra_status_variables=os.getenv("EXTRA_STATUS_VARIABLES", ""),
        sink_max_size=_env_int("SINK_MAX_SIZE", 256),
        startup_ping=_env_bool("STARTUP_PING", True),
    )

    # Resolve and validate the option file
    settings.load_target()

    logger.info(
        f"Exporter configured: interval={settings.scrape_interval_in_sec}s, "
        f"global_status={settings.collect_global_status}, "
        f"table_stats={settings.collect_table_stats}, "
        f"query_response_time={settings.collect_query_response_time}, "
        f"target={settings.target!r}"
    )

    return settings
