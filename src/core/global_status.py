"""Classification of SHOW GLOBAL STATUS rows into typed metric records."""

import logging
import re
from collections.abc import Iterable, Iterator
from contextlib import aclosing
from dataclasses import dataclass

from src.core.errors import SchemaError
from src.core.parsing import as_text, parse_number
from src.core.status_variables import (
    BUFFER_POOL_PAGE_STATES,
    FEATURE_INDICATOR_VARIABLES,
    GENERIC_STATUS_VARIABLES,
)
from src.ports.database import DatabasePort
from src.ports.metrics import MetricRecord, MetricSinkPort, MetricType

__all__ = [
    "DEFAULT_RULES",
    "ClassificationRule",
    "GlobalStatusScraper",
    "StatusVariableClassifier",
    "parse_status_value",
]

logger = logging.getLogger(__name__)

GLOBAL_STATUS_NAMESPACE = "mysql_global_status"

_BOOLEAN_VALUES = {"on": 1.0, "yes": 1.0, "off": 0.0, "no": 0.0, "connecting": 0.0}
_INVALID_NAME_CHARS = re.compile(r"[^a-z0-9_]")


@dataclass(slots=True, frozen=True)
class ClassificationRule:
    """Maps a family of status variables onto one labeled metric.

    Attributes:
        pattern: Matched against the lower-cased variable name; group 1 is
            the label value.
        metric_name: Metric family the record belongs to.
        metric_type: Type of every record the rule produces.
        label_name: Label key carrying the extracted value.
        help: Metric description.
    """

    pattern: re.Pattern[str]
    metric_name: str
    metric_type: MetricType
    label_name: str
    help: str = ""

    def match(self, variable_name: str) -> str | None:
        """Return the label value for a matching name, None otherwise."""
        matched = self.pattern.fullmatch(variable_name)
        return matched.group(1) if matched else None


def _rule(pattern: str, suffix: str, metric_type: MetricType, label_name: str, help: str) -> ClassificationRule:
    return ClassificationRule(
        pattern=re.compile(pattern),
        metric_name=f"{GLOBAL_STATUS_NAMESPACE}_{suffix}",
        metric_type=metric_type,
        label_name=label_name,
        help=help,
    )


# First match wins.
DEFAULT_RULES: tuple[ClassificationRule, ...] = (
    _rule(r"com_(.+)", "commands_total", MetricType.COUNTER, "command", "Total number of executed MySQL commands."),
    _rule(r"handler_(.+)", "handlers_total", MetricType.COUNTER, "handler", "Total number of executed MySQL handlers."),
    _rule(
        r"connection_errors_(.+)",
        "connection_errors_total",
        MetricType.COUNTER,
        "error",
        "Total number of MySQL connection errors.",
    ),
    _rule(
        rf"innodb_buffer_pool_pages_({'|'.join(sorted(BUFFER_POOL_PAGE_STATES))})",
        "buffer_pool_pages",
        MetricType.GAUGE,
        "state",
        "Innodb buffer pool pages by state.",
    ),
    _rule(
        r"innodb_buffer_pool_pages_(.+)",
        "buffer_pool_page_changes_total",
        MetricType.COUNTER,
        "operation",
        "Innodb buffer pool page state changes.",
    ),
    _rule(
        r"innodb_rows_(.+)",
        "innodb_row_ops_total",
        MetricType.COUNTER,
        "operation",
        "Total number of MySQL InnoDB row operations.",
    ),
    _rule(
        r"performance_schema_(.+_lost)",
        "performance_schema_lost_total",
        MetricType.COUNTER,
        "instrumentation",
        "Total number of MySQL instrumentations that could not be loaded or created due to memory constraints.",
    ),
)


def parse_status_value(raw_value: str) -> float | None:
    """Parse a generic status value.

    Empty strings are 0; ON/YES are 1; OFF/NO/Connecting are 0; anything
    else must be a number.

    Returns:
        The parsed value, or None if it is none of the above.
    """
    text = raw_value.strip()
    if not text:
        return 0.0
    flag = _BOOLEAN_VALUES.get(text.lower())
    if flag is not None:
        return flag
    return parse_number(text)


class StatusVariableClassifier:
    """Turns one (name, value) pair into zero or one metric record.

    Classification is a pure function of its input: labeled families are
    tried in rule order, then the generic allow-list. Anything else is
    skipped. A matched variable whose value cannot be parsed raises
    SchemaError, since it points at an incompatible server version.
    """

    def __init__(
        self,
        rules: Iterable[ClassificationRule] = DEFAULT_RULES,
        generic_variables: Iterable[str] = GENERIC_STATUS_VARIABLES,
        feature_indicators: Iterable[str] = FEATURE_INDICATOR_VARIABLES,
    ) -> None:
        """Initialize classifier.

        Args:
            rules: Labeled families, in priority order.
            generic_variables: Variables exported as unlabeled untyped metrics.
            feature_indicators: Text variables exported as 1 when non-empty.
        """
        self._rules = tuple(rules)
        self._feature_indicators = frozenset(name.lower() for name in feature_indicators)
        self._generic_variables = frozenset(name.lower() for name in generic_variables) | self._feature_indicators

    def classify(self, variable_name: str, raw_value: str) -> MetricRecord | None:
        """Classify one status variable.

        Args:
            variable_name: Variable_name column (any case).
            raw_value: Value column as text.

        Returns:
            The record, or None if the variable is not exported.

        Raises:
            SchemaError: If a matched variable has an unparsable value.
        """
        key = variable_name.strip().lower()

        for rule in self._rules:
            label_value = rule.match(key)
            if label_value is None:
                continue
            value = parse_number(raw_value)
            if value is None:
                raise SchemaError(f"Status variable {variable_name!r} has non-numeric value {raw_value!r}")
            return MetricRecord(rule.metric_name, rule.metric_type, value, {rule.label_name: label_value}, help=rule.help)

        if key not in self._generic_variables:
            logger.debug(f"Skipping unmapped status variable {variable_name!r}")
            return None

        if key in self._feature_indicators and raw_value.strip():
            value = parse_number(raw_value)
            if value is None:
                value = 1.0
        else:
            value = parse_status_value(raw_value)
        if value is None:
            raise SchemaError(f"Status variable {variable_name!r} has unparsable value {raw_value!r}")

        return MetricRecord.untyped(
            f"{GLOBAL_STATUS_NAMESPACE}_{_INVALID_NAME_CHARS.sub('_', key)}",
            value,
            help="Generic metric from SHOW GLOBAL STATUS.",
        )

    def classify_all(self, pairs: Iterable[tuple[str, str]]) -> Iterator[MetricRecord]:
        """Lazily classify a sequence of pairs, preserving input order."""
        for variable_name, raw_value in pairs:
            record = self.classify(variable_name, raw_value)
            if record is not None:
                yield record


class GlobalStatusScraper:
    """Collects SHOW GLOBAL STATUS."""

    name = "global_status"
    query = "SHOW GLOBAL STATUS"

    def __init__(self, classifier: StatusVariableClassifier | None = None) -> None:
        self._classifier = classifier or StatusVariableClassifier()

    async def scrape(self, db: DatabasePort, sink: MetricSinkPort) -> None:
        async with aclosing(db.stream(self.query)) as rows:
            async for row in rows:
                if len(row) != 2:
                    raise SchemaError(f"SHOW GLOBAL STATUS returned {len(row)} columns, expected 2")
                variable_name, raw_value = row
                record = self._classifier.classify(as_text(variable_name), as_text(raw_value))
                if record is not None:
                    await sink.put(record)
