"""Database port definition (query-executing handle)."""

from collections.abc import AsyncIterator, Sequence
from typing import Any, Protocol

__all__ = ["DatabasePort", "Row", "sanitize_query"]

Row = Sequence[Any]


def sanitize_query(query: str) -> str:
    """Collapse every run of whitespace in a SQL statement to a single space.

    Statements are compared in this form, so layout changes in the query
    constants never change what a caller expects to be executed.

    Args:
        query: Raw statement text.

    Returns:
        Whitespace-normalised statement.
    """
    return " ".join(query.split())


class DatabasePort(Protocol):
    """Handle scrapers run their diagnostic queries through.

    Decouples scrapers from the driver so they can be exercised against
    an in-memory fake.
    """

    def stream(self, query: str) -> AsyncIterator[Row]:
        """Execute a statement and yield its rows as they arrive.

        Args:
            query: SQL statement to execute.

        Yields:
            One positional row per result row, in result-set order.

        Raises:
            QueryError: If the server rejects or fails the statement.
        """
        ...
