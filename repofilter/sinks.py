"""In-memory query sinks."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from .filters import ScalarValue


@dataclass(frozen=True, slots=True)
class PredicateCall:
    """One predicate call received by a RecordingSink."""

    method: str
    args: tuple[Any, ...]

    @property
    def field(self) -> str:
        return str(self.args[0])

    def to_dict(self) -> dict[str, Any]:
        return {"method": self.method, "field": self.field, "args": list(self.args[1:])}


@dataclass
class RecordingSink:
    """A QuerySink that records every predicate call in order.

    Useful for explaining what a filter string will do, and in tests.
    """

    calls: list[PredicateCall] = field(default_factory=list)

    def _record(self, method: str, *args: Any) -> None:
        self.calls.append(PredicateCall(method, args))

    def equals(self, field: str, value: ScalarValue) -> None:
        self._record("equals", field, value)

    def not_equals(self, field: str, value: ScalarValue) -> None:
        self._record("not_equals", field, value)

    def compare(self, field: str, comparator: str, value: ScalarValue) -> None:
        self._record("compare", field, comparator, value)

    def in_(self, field: str, values: list[ScalarValue]) -> None:
        self._record("in_", field, list(values))

    def not_in(self, field: str, values: list[ScalarValue]) -> None:
        self._record("not_in", field, list(values))

    def between(self, field: str, low: ScalarValue, high: ScalarValue) -> None:
        self._record("between", field, low, high)

    def not_between(self, field: str, low: ScalarValue, high: ScalarValue) -> None:
        self._record("not_between", field, low, high)

    def like(self, field: str, pattern: str) -> None:
        self._record("like", field, pattern)

    def not_like(self, field: str, pattern: str) -> None:
        self._record("not_like", field, pattern)

    def starts_with(self, field: str, prefix: str) -> None:
        self._record("starts_with", field, prefix)

    def ends_with(self, field: str, suffix: str) -> None:
        self._record("ends_with", field, suffix)

    def is_null(self, field: str) -> None:
        self._record("is_null", field)

    def is_not_null(self, field: str) -> None:
        self._record("is_not_null", field)

    def date_compare(self, field: str, comparator: str, value: ScalarValue) -> None:
        self._record("date_compare", field, comparator, value)

    def date_between(self, field: str, start: ScalarValue, end: ScalarValue) -> None:
        self._record("date_between", field, start, end)

    def year_equals(self, field: str, value: ScalarValue) -> None:
        self._record("year_equals", field, value)

    def month_equals(self, field: str, value: ScalarValue) -> None:
        self._record("month_equals", field, value)

    def day_equals(self, field: str, value: ScalarValue) -> None:
        self._record("day_equals", field, value)

    def json_contains(self, field: str, value: ScalarValue) -> None:
        self._record("json_contains", field, value)

    def json_length_equals(self, field: str, length: ScalarValue) -> None:
        self._record("json_length_equals", field, length)

    def matches_regex(self, field: str, pattern: ScalarValue) -> None:
        self._record("matches_regex", field, pattern)
