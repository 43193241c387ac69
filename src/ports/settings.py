"""Settings port definition (DTO)."""

from dataclasses import dataclass, field

__all__ = ["SettingsPort"]


@dataclass
class SettingsPort:
    """Runtime settings for the scrape loop.

    Decouples core from concrete configuration sources, enabling
    easy testing and implementation swapping.

    Attributes:
        scrape_interval_sec: Seconds between scrape cycles.
        collect_global_status: Run the SHOW GLOBAL STATUS scraper.
        collect_table_stats: Run the table_statistics scraper.
        collect_query_response_time: Run the query response time scraper.
        extra_status_variables: Additional generic status variables to export.
        sink_max_size: Capacity of each scraper's record queue.
        startup_ping: Verify the server is reachable before the first cycle.
    """

    scrape_interval_sec: float
    collect_global_status: bool = True
    collect_table_stats: bool = False
    collect_query_response_time: bool = False
    extra_status_variables: frozenset[str] = field(default_factory=frozenset)
    sink_max_size: int = 256
    startup_ping: bool = True
