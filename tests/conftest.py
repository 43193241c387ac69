"""Shared fixtures: in-memory database handle and record sink."""

from collections.abc import AsyncIterator, Sequence
from typing import Any

import pytest

from src.ports.database import DatabasePort, Row, sanitize_query
from src.ports.metrics import MetricRecord, MetricSinkPort


class FakeDatabase(DatabasePort):
    """DatabasePort answering expected statements with canned rows.

    Statements are compared after whitespace normalisation. By default
    they must arrive in the order they were expected.
    """

    def __init__(self, *, ordered: bool = True) -> None:
        self.ordered = ordered
        self.executed: list[str] = []
        self.open_streams = 0
        self._expected: list[tuple[str, Sequence[Row] | BaseException]] = []

    def expect(self, query: str, rows: Sequence[Sequence[Any]] = (), *, error: BaseException | None = None) -> None:
        """Register the next expected statement and its rows (or error)."""
        self._expected.append((sanitize_query(query), error if error is not None else list(rows)))

    def _take(self, query: str) -> Sequence[Row] | BaseException:
        for index, (expected_query, outcome) in enumerate(self._expected):
            if expected_query == query:
                del self._expected[index]
                return outcome
            if self.ordered:
                break
        raise AssertionError(f"Unexpected query: {query!r}; still expected: {self.pending}")

    @property
    def pending(self) -> list[str]:
        return [query for query, _ in self._expected]

    async def stream(self, query: str) -> AsyncIterator[Row]:
        sanitized = sanitize_query(query)
        self.executed.append(sanitized)
        outcome = self._take(sanitized)
        if isinstance(outcome, BaseException):
            raise outcome
        self.open_streams += 1
        try:
            for row in outcome:
                yield row
        finally:
            self.open_streams -= 1

    def assert_expectations_met(self) -> None:
        assert not self._expected, f"Unfulfilled expectations: {self.pending}"


class ListSink(MetricSinkPort):
    """Sink that keeps every record in a list."""

    def __init__(self) -> None:
        self.records: list[MetricRecord] = []

    async def put(self, record: MetricRecord) -> None:
        self.records.append(record)


@pytest.fixture
def fake_db() -> FakeDatabase:
    """Ordered fake database handle."""
    return FakeDatabase()


@pytest.fixture
def sink() -> ListSink:
    """Record-collecting sink."""
    return ListSink()


@pytest.fixture
def unordered_db() -> FakeDatabase:
    """Fake database handle for concurrently issued statements."""
    return FakeDatabase(ordered=False)
