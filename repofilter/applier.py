"""
Applying parsed filters to a query sink.

The applier has no knowledge of any storage engine. It translates each
condition into one predicate call on a caller-supplied object implementing
``QuerySink`` (an ORM query builder adapter, a SQL WHERE builder, an
in-memory recorder, ...). Conditions are applied in order and are
AND-combined by the sink.

Example:
    from repofilter import apply, parse

    sink = MyQueryBuilderAdapter(session.query(Property))
    apply(parse(request.args.get("filters", "")), sink)
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any, Literal, Protocol, TypeVar, runtime_checkable

from .exceptions import SinkRejectedError
from .filters import FilterCondition, FilterExpression, ScalarValue
from .operators import CanonicalOperator

logger = logging.getLogger(__name__)

Comparator = Literal["gt", "gte", "lt", "lte"]


@runtime_checkable
class QuerySink(Protocol):
    """Predicates a storage backend must expose to receive filters.

    A method may mutate the sink and return None, or return a new sink object
    (for immutable query builders); ``apply`` continues with whichever it gets.
    """

    def equals(self, field: str, value: ScalarValue) -> Any: ...

    def not_equals(self, field: str, value: ScalarValue) -> Any: ...

    def compare(self, field: str, comparator: Comparator, value: ScalarValue) -> Any: ...

    def in_(self, field: str, values: list[ScalarValue]) -> Any: ...

    def not_in(self, field: str, values: list[ScalarValue]) -> Any: ...

    def between(self, field: str, low: ScalarValue, high: ScalarValue) -> Any: ...

    def not_between(self, field: str, low: ScalarValue, high: ScalarValue) -> Any: ...

    def like(self, field: str, pattern: str) -> Any: ...

    def not_like(self, field: str, pattern: str) -> Any: ...

    def starts_with(self, field: str, prefix: str) -> Any: ...

    def ends_with(self, field: str, suffix: str) -> Any: ...

    def is_null(self, field: str) -> Any: ...

    def is_not_null(self, field: str) -> Any: ...

    def date_compare(self, field: str, comparator: str, value: ScalarValue) -> Any: ...

    def date_between(self, field: str, start: ScalarValue, end: ScalarValue) -> Any: ...

    def year_equals(self, field: str, value: ScalarValue) -> Any: ...

    def month_equals(self, field: str, value: ScalarValue) -> Any: ...

    def day_equals(self, field: str, value: ScalarValue) -> Any: ...

    def json_contains(self, field: str, value: ScalarValue) -> Any: ...

    def json_length_equals(self, field: str, length: ScalarValue) -> Any: ...

    def matches_regex(self, field: str, pattern: ScalarValue) -> Any: ...


def _text(value: ScalarValue) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


# =============================================================================
# Dispatch table
# =============================================================================

# Each entry maps (field, values) to (sink method name, positional args).
# values has already passed the operator's arity check.
_Call = tuple[str, tuple[Any, ...]]
_Translator = Callable[[str, tuple[ScalarValue, ...]], _Call]

_DISPATCH: dict[CanonicalOperator, _Translator] = {
    CanonicalOperator.EQ: lambda f, v: ("equals", (f, v[0])),
    CanonicalOperator.NEQ: lambda f, v: ("not_equals", (f, v[0])),
    CanonicalOperator.GT: lambda f, v: ("compare", (f, "gt", v[0])),
    CanonicalOperator.GTE: lambda f, v: ("compare", (f, "gte", v[0])),
    CanonicalOperator.LT: lambda f, v: ("compare", (f, "lt", v[0])),
    CanonicalOperator.LTE: lambda f, v: ("compare", (f, "lte", v[0])),
    CanonicalOperator.IN: lambda f, v: ("in_", (f, list(v))),
    CanonicalOperator.NOT_IN: lambda f, v: ("not_in", (f, list(v))),
    CanonicalOperator.BETWEEN: lambda f, v: ("between", (f, v[0], v[1])),
    CanonicalOperator.NOT_BETWEEN: lambda f, v: ("not_between", (f, v[0], v[1])),
    CanonicalOperator.LIKE: lambda f, v: ("like", (f, f"%{_text(v[0])}%")),
    CanonicalOperator.NOT_LIKE: lambda f, v: ("not_like", (f, f"%{_text(v[0])}%")),
    CanonicalOperator.STARTS_WITH: lambda f, v: ("starts_with", (f, _text(v[0]))),
    CanonicalOperator.ENDS_WITH: lambda f, v: ("ends_with", (f, _text(v[0]))),
    CanonicalOperator.IS_NULL: lambda f, v: ("is_null", (f,)),
    CanonicalOperator.IS_NOT_NULL: lambda f, v: ("is_not_null", (f,)),
    CanonicalOperator.DATE_EQ: lambda f, v: ("date_compare", (f, "eq", v[0])),
    CanonicalOperator.DATE_GT: lambda f, v: ("date_compare", (f, "gt", v[0])),
    CanonicalOperator.DATE_GTE: lambda f, v: ("date_compare", (f, "gte", v[0])),
    CanonicalOperator.DATE_LT: lambda f, v: ("date_compare", (f, "lt", v[0])),
    CanonicalOperator.DATE_LTE: lambda f, v: ("date_compare", (f, "lte", v[0])),
    CanonicalOperator.DATE_BETWEEN: lambda f, v: ("date_between", (f, v[0], v[1])),
    CanonicalOperator.YEAR: lambda f, v: ("year_equals", (f, v[0])),
    CanonicalOperator.MONTH: lambda f, v: ("month_equals", (f, v[0])),
    CanonicalOperator.DAY: lambda f, v: ("day_equals", (f, v[0])),
    CanonicalOperator.JSON_CONTAINS: lambda f, v: ("json_contains", (f, v[0])),
    CanonicalOperator.JSON_LENGTH: lambda f, v: ("json_length_equals", (f, v[0])),
    CanonicalOperator.REGEX: lambda f, v: ("matches_regex", (f, v[0])),
}

_missing = set(CanonicalOperator) - set(_DISPATCH)
if _missing:  # pragma: no cover
    raise RuntimeError(
        f"No sink predicate mapped for operators: {sorted(o.value for o in _missing)}"
    )


def predicate_call(condition: FilterCondition) -> _Call | None:
    """The sink method name and arguments for a condition.

    Returns None when the condition's values do not satisfy its operator's
    arity (such conditions are skipped, not errors).
    """
    operator = condition.operator
    if not operator.arity.accepts(len(condition.values)):
        return None
    return _DISPATCH[operator](condition.field, condition.values)


S = TypeVar("S")


def apply_condition(condition: FilterCondition, sink: S) -> S:
    """Apply one condition to ``sink`` and return the (possibly new) sink.

    Raises:
        SinkRejectedError: If the sink lacks the predicate or raises while
            applying it.
    """
    call = predicate_call(condition)
    if call is None:
        logger.debug(
            f"Skipping {condition.operator.value} on {condition.field!r}: "
            f"{len(condition.values)} value(s) given"
        )
        return sink

    name, args = call
    method = getattr(sink, name, None)
    if method is None or not callable(method):
        raise SinkRejectedError(
            condition, name, f"{type(sink).__name__} does not support '{name}'"
        )
    try:
        result = method(*args)
    except Exception as exc:
        raise SinkRejectedError(condition, name, str(exc) or type(exc).__name__) from exc
    return sink if result is None else result


def apply(expression: FilterExpression | list[FilterCondition], sink: S) -> S:
    """
    Apply every condition of ``expression`` to ``sink``, in order.

    Conditions whose value count does not satisfy their operator's arity are
    skipped. Repeated fields are applied once per occurrence.

    Returns:
        The sink after all predicates (the object returned by the last
        predicate call, or the original sink if the calls returned None).

    Raises:
        SinkRejectedError: If the sink rejects a condition.
    """
    for condition in expression:
        sink = apply_condition(condition, sink)
    return sink
