"""
repofilter: a compact filter-string language for data-access layers.

Parses strings like ``category:IN(Apartment,Bungalow);price:BETWEEN(100000,500000)``
into ordered field conditions, validates them strictly, applies them to any
query builder through a small sink protocol, and serializes conditions back
into filter strings.
"""

from __future__ import annotations

from .applier import QuerySink, apply, apply_condition
from .exceptions import FilterError, FilterSerializationError, SinkRejectedError
from .filters import (
    FilterCondition,
    FilterExpression,
    ScalarValue,
    lex_scalar,
    parse,
    parse_condition,
    split_values,
)
from .models import FilterSummary, SegmentError, ValidationResult
from .operators import (
    ArityClass,
    CanonicalOperator,
    OperatorCategory,
    list_operators,
    resolve_operator,
)
from .request_params import parse_request_filters
from .serializer import serialize, serialize_condition
from .sinks import PredicateCall, RecordingSink
from .summary import summarize
from .validation import validate

__version__ = "0.1.0"

__all__ = [
    "ArityClass",
    "CanonicalOperator",
    "FilterCondition",
    "FilterError",
    "FilterExpression",
    "FilterSerializationError",
    "FilterSummary",
    "OperatorCategory",
    "PredicateCall",
    "QuerySink",
    "RecordingSink",
    "ScalarValue",
    "SegmentError",
    "SinkRejectedError",
    "ValidationResult",
    "__version__",
    "apply",
    "apply_condition",
    "lex_scalar",
    "list_operators",
    "parse",
    "parse_condition",
    "parse_request_filters",
    "resolve_operator",
    "serialize",
    "serialize_condition",
    "split_values",
    "summarize",
    "validate",
]
