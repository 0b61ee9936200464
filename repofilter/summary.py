"""Display-ready summaries of parsed filters (for "active filters" UI chips)."""

from __future__ import annotations

from collections.abc import Iterable

from .filters import FilterCondition, ScalarValue
from .models import FilterSummary, SummaryKind
from .operators import OperatorCategory


def humanize_field(field: str) -> str:
    """``rental_period`` -> ``Rental period``."""
    text = field.replace("_", " ").strip()
    return text[:1].upper() + text[1:]


def _display_value(value: ScalarValue) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def summarize_condition(condition: FilterCondition) -> FilterSummary:
    category = condition.operator.category
    shown = [_display_value(v) for v in condition.values]
    kind: SummaryKind
    if category is OperatorCategory.NULL:
        kind, display = "null", ""
    elif category is OperatorCategory.SET:
        kind, display = "list", ", ".join(shown)
    elif category is OperatorCategory.RANGE or (
        category is OperatorCategory.DATE and condition.operator.arity.min_values == 2
    ):
        kind, display = "range", " - ".join(shown[:2])
    else:
        kind, display = "single", shown[0] if shown else ""
    return FilterSummary(
        field=condition.field,
        label=humanize_field(condition.field),
        operator=condition.operator.value,
        display=display,
        kind=kind,
    )


def summarize(expression: Iterable[FilterCondition]) -> list[FilterSummary]:
    """One summary row per condition, in order."""
    return [summarize_condition(condition) for condition in expression]
