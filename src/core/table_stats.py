"""Per-table I/O statistics from information_schema.table_statistics."""

from contextlib import aclosing
from dataclasses import dataclass

from src.core.errors import SchemaError
from src.core.parsing import as_text, parse_number
from src.ports.database import DatabasePort
from src.ports.metrics import MetricRecord, MetricSinkPort, MetricType

__all__ = ["TABLE_STAT_COLUMNS", "TableStatColumn", "TableStatScraper"]

TABLE_STATS_NAMESPACE = "mysql_info_schema_table_statistics"


@dataclass(slots=True, frozen=True)
class TableStatColumn:
    """One numeric column of the table statistics query."""

    column: str
    metric_name: str
    metric_type: MetricType
    help: str


# In the order the query selects them.
TABLE_STAT_COLUMNS: tuple[TableStatColumn, ...] = (
    TableStatColumn(
        "ROWS_READ",
        f"{TABLE_STATS_NAMESPACE}_rows_read_total",
        MetricType.COUNTER,
        "The number of rows read from the table.",
    ),
    TableStatColumn(
        "ROWS_CHANGED",
        f"{TABLE_STATS_NAMESPACE}_rows_changed_total",
        MetricType.COUNTER,
        "The number of rows changed in the table.",
    ),
    TableStatColumn(
        "ROWS_CHANGED_X_INDEXES",
        f"{TABLE_STATS_NAMESPACE}_rows_changed_x_indexes_total",
        MetricType.COUNTER,
        "The number of rows changed in the table, multiplied by the number of indexes changed.",
    ),
)


class TableStatScraper:
    """Collects per-table read/change counters.

    Emits one record per numeric column per row, in row order and then
    column order. The rows are not re-sorted.
    """

    name = "info_schema.tablestats"
    query = f"""
        SELECT
          TABLE_SCHEMA,
          TABLE_NAME,
          {", ".join(column.column for column in TABLE_STAT_COLUMNS)}
          FROM information_schema.table_statistics
        """

    async def scrape(self, db: DatabasePort, sink: MetricSinkPort) -> None:
        width = 2 + len(TABLE_STAT_COLUMNS)
        async with aclosing(db.stream(self.query)) as rows:
            async for row in rows:
                if len(row) != width:
                    raise SchemaError(f"table_statistics returned {len(row)} columns, expected {width}")
                labels = {"schema": as_text(row[0]), "table": as_text(row[1])}
                for column, raw_value in zip(TABLE_STAT_COLUMNS, row[2:]):
                    value = parse_number(raw_value)
                    if value is None:
                        raise SchemaError(
                            f"{column.column} of {labels['schema']}.{labels['table']} is not numeric: {raw_value!r}"
                        )
                    await sink.put(
                        MetricRecord(column.metric_name, column.metric_type, value, labels, help=column.help)
                    )
