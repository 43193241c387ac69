"""Error taxonomy for scrapes and configuration."""

__all__ = ["ConfigError", "QueryError", "SchemaError", "ScrapeError"]


class ScrapeError(Exception):
    """A scraper could not complete; records put so far stay in the sink."""


class QueryError(ScrapeError):
    """The server rejected or failed a statement."""

    def __init__(self, query: str, cause: BaseException) -> None:
        self.query = query
        super().__init__(f"Query failed: {query!r}: {cause}")


class SchemaError(ScrapeError):
    """A result set has an unexpected shape or an unparsable value."""


class ConfigError(ValueError):
    """Connection configuration is missing, incomplete or malformed."""
