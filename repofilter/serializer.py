"""
Filter string serialization (the inverse of ``parse``).

Example:
    from repofilter import serialize

    serialize([("status", "EQ", ["active"]), ("age", "BETWEEN", [25, 35])])
    # 'status:EQ(active);age:BETWEEN(25,35)'

    # Mapping form: a list is shorthand for IN, a scalar for EQ
    serialize({"role": ["admin", "moderator"], "status": "active"})
    # 'role:IN(admin,moderator);status:EQ(active)'
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Mapping
from datetime import date, datetime
from typing import Any

from .exceptions import FilterSerializationError
from .filters import (
    SEGMENT_SEPARATOR,
    VALUE_SEPARATOR,
    FilterCondition,
    is_field_name,
)
from .operators import ArityClass, CanonicalOperator, resolve_operator

# Characters that would end, split or open a quote in a bare value
_QUOTE_TRIGGERS = (",", ")", ";", "(", '"', "'")


def _escape_string(value: str) -> str:
    """Escape a value for use inside double quotes."""
    # Order matters: escape backslashes first
    result = value.replace("\\", "\\\\")
    result = result.replace('"', '\\"')
    return result


def _needs_quotes(text: str) -> bool:
    if not text or text != text.strip():
        return True
    return any(ch in text for ch in _QUOTE_TRIGGERS)


def format_value(value: Any) -> str:
    """Format a Python value as a filter string value token."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        if not math.isfinite(value):
            raise FilterSerializationError(f"Cannot serialize non-finite number: {value!r}")
        return str(value)
    if isinstance(value, int):
        try:
            return str(value)
        except ValueError as exc:
            raise FilterSerializationError(f"Integer too large to serialize: {exc}") from exc
    # Handle datetime before date (datetime is subclass of date)
    if isinstance(value, datetime):
        text = value.isoformat()
    elif isinstance(value, date):
        text = value.isoformat()
    else:
        text = value if isinstance(value, str) else str(value)
    if _needs_quotes(text):
        return f'"{_escape_string(text)}"'
    return text


def _as_values(values: Any) -> list[Any]:
    if isinstance(values, (list, tuple)):
        return list(values)
    return [values]


def serialize_condition(
    field: str, operator: str | CanonicalOperator, values: Any = ()
) -> str:
    """Render one ``field:OPERATOR(values)`` segment.

    Raises:
        FilterSerializationError: For an unknown operator, a field name that
            cannot appear in a filter string (empty, padded, containing ``:``
            or an unquoted ``;``, or opening a quote it does not close) or a
            value with no textual form.
    """
    if not isinstance(operator, (str, CanonicalOperator)):
        raise FilterSerializationError(f"Unknown filter operator: {operator!r}")
    canonical = resolve_operator(operator)
    if canonical is None:
        raise FilterSerializationError(f"Unknown filter operator: {operator!r}")
    if not is_field_name(field):
        raise FilterSerializationError(f"Invalid filter field name: {field!r}")

    if canonical.arity is ArityClass.ZERO:
        value_text = ""
    else:
        value_text = VALUE_SEPARATOR.join(format_value(v) for v in _as_values(values))
    return f"{field}:{canonical.value}({value_text})"


def _entries(conditions: Any) -> Iterable[tuple[str, Any, Any]]:
    if isinstance(conditions, Mapping):
        for field, spec in conditions.items():
            if isinstance(spec, Mapping):
                if "operator" not in spec:
                    raise FilterSerializationError(f"Condition for {field!r} has no 'operator'")
                yield field, spec["operator"], spec.get("values", ())
            elif isinstance(spec, (list, tuple)):
                yield field, CanonicalOperator.IN, spec
            else:
                yield field, CanonicalOperator.EQ, spec
        return

    if isinstance(conditions, (str, bytes)):
        raise FilterSerializationError("serialize() expects conditions, not a string")

    for item in conditions:
        if isinstance(item, FilterCondition):
            yield item.field, item.operator, item.values
        elif isinstance(item, (list, tuple)) and len(item) == 3:
            yield item[0], item[1], item[2]
        else:
            raise FilterSerializationError(
                f"Unsupported condition entry: {item!r}. "
                "Expected a FilterCondition or a (field, operator, values) tuple."
            )


def serialize(conditions: Any) -> str:
    """
    Build a filter string from structured conditions.

    Accepts a FilterExpression, an iterable of FilterCondition or
    ``(field, operator, values)`` tuples, or a mapping of field to either
    ``{"operator": ..., "values": [...]}``, a list (IN) or a scalar (EQ).

    Values containing ``,`` ``)`` ``;`` ``(`` or a quote (and empty or padded
    strings) are double-quoted with ``\\`` and ``"`` backslash-escaped.

    Raises:
        FilterSerializationError: For unknown operators, unusable field names,
            non-finite numbers or unsupported entries.
    """
    segments = [
        serialize_condition(field, operator, values)
        for field, operator, values in _entries(conditions)
    ]
    return SEGMENT_SEPARATOR.join(segments)
