"""Error types for repofilter."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .filters import FilterCondition


class FilterError(Exception):
    """Base error for all repofilter errors."""


class FilterSerializationError(FilterError, ValueError):
    """Raised when conditions cannot be rendered as a filter string."""


class SinkRejectedError(FilterError):
    """Raised when a query sink fails to accept a condition.

    The sink's own exception (if any) is chained as ``__cause__``.
    """

    def __init__(self, condition: FilterCondition, predicate: str, reason: str) -> None:
        self.condition = condition
        self.predicate = predicate
        self.reason = reason
        super().__init__(
            f"Query sink rejected condition on '{condition.field}' "
            f"({condition.operator.value} via {predicate}): {reason}"
        )
