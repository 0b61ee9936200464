"""Filters from request query parameters.

Collects conditions from the parameter styles web handlers typically receive:

- ``filters=<filter string>``
- ``filter=<filter string>``
- ``filter_<field>=<value>`` (EQ) or a list of values (IN)
"""

from __future__ import annotations

import logging
import math
from collections.abc import Collection, Mapping
from typing import Any

from .filters import (
    FilterCondition,
    FilterExpression,
    ScalarValue,
    is_field_name,
    lex_scalar,
    parse,
)
from .operators import CanonicalOperator

logger = logging.getLogger(__name__)

FILTER_STRING_PARAMS = ("filters", "filter")
FIELD_PARAM_PREFIX = "filter_"


def _coerce(value: Any) -> ScalarValue:
    if isinstance(value, str):
        return lex_scalar(value)
    if isinstance(value, float) and not math.isfinite(value):
        return str(value)
    if value is None or isinstance(value, (bool, int, float)):
        return value
    return str(value)


def _is_empty(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, (str, list, tuple)):
        return len(value) == 0
    return False


def parse_request_filters(
    params: Mapping[str, Any], allowed_fields: Collection[str] | None = None
) -> FilterExpression:
    """
    Build one FilterExpression from request parameters.

    Conditions come from ``filters``, then ``filter``, then every
    ``filter_<field>`` parameter in mapping order. The allow-list (if
    non-empty) applies to all of them. Never raises for malformed input.

    Example:
        >>> expr = parse_request_filters({"filters": "status:EQ(active)", "filter_role": "admin"})
        >>> [c.field for c in expr]
        ['status', 'role']
    """
    allowed = frozenset(allowed_fields) if allowed_fields else None
    conditions: list[FilterCondition] = []

    for key in FILTER_STRING_PARAMS:
        raw = params.get(key)
        if isinstance(raw, str):
            conditions.extend(parse(raw, allowed_fields=allowed))

    for key, value in params.items():
        if not key.startswith(FIELD_PARAM_PREFIX) or _is_empty(value):
            continue
        field = key[len(FIELD_PARAM_PREFIX) :]
        if not is_field_name(field):
            logger.debug(f"Dropping request filter with unusable field name {field!r}")
            continue
        if allowed is not None and field not in allowed:
            logger.debug(f"Dropping request filter on disallowed field {field!r}")
            continue
        if isinstance(value, (list, tuple)):
            conditions.append(
                FilterCondition(field, CanonicalOperator.IN, tuple(_coerce(v) for v in value))
            )
        else:
            conditions.append(FilterCondition(field, CanonicalOperator.EQ, (_coerce(value),)))

    return FilterExpression(tuple(conditions))
