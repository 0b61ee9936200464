"""Operator registry for filter strings.

Defines the closed set of canonical operators, their aliases, how many values
each one takes and which category it belongs to. Lookup is case-insensitive
and resolves aliases to the canonical operator.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class ArityClass(Enum):
    """How many values an operator accepts."""

    ZERO = "zero"
    ONE = "one"
    EXACTLY_TWO = "exactly_two"
    ANY_NON_EMPTY = "any_non_empty"

    @property
    def min_values(self) -> int:
        return _MIN_VALUES[self]

    def accepts(self, count: int) -> bool:
        """Whether ``count`` values are enough to apply an operator of this arity.

        Extra values are tolerated (and ignored by the applier); ZERO operators
        never need values.
        """
        return count >= self.min_values


_MIN_VALUES: dict[ArityClass, int] = {
    ArityClass.ZERO: 0,
    ArityClass.ONE: 1,
    ArityClass.EXACTLY_TWO: 2,
    ArityClass.ANY_NON_EMPTY: 1,
}


class OperatorCategory(Enum):
    COMPARISON = "comparison"
    SET = "set"
    RANGE = "range"
    STRING = "string"
    NULL = "null"
    DATE = "date"
    JSON = "json"
    PATTERN = "pattern"


class CanonicalOperator(Enum):
    """Canonical filter operators. The value is the name used in filter strings."""

    # Comparison
    EQ = "EQ"
    NEQ = "NEQ"
    GT = "GT"
    GTE = "GTE"
    LT = "LT"
    LTE = "LTE"
    # Set membership
    IN = "IN"
    NOT_IN = "NOT_IN"
    # Range
    BETWEEN = "BETWEEN"
    NOT_BETWEEN = "NOT_BETWEEN"
    # String match
    LIKE = "LIKE"
    NOT_LIKE = "NOT_LIKE"
    STARTS_WITH = "STARTS_WITH"
    ENDS_WITH = "ENDS_WITH"
    # Null check
    IS_NULL = "IS_NULL"
    IS_NOT_NULL = "IS_NOT_NULL"
    # Date
    DATE_EQ = "DATE_EQ"
    DATE_GT = "DATE_GT"
    DATE_GTE = "DATE_GTE"
    DATE_LT = "DATE_LT"
    DATE_LTE = "DATE_LTE"
    DATE_BETWEEN = "DATE_BETWEEN"
    YEAR = "YEAR"
    MONTH = "MONTH"
    DAY = "DAY"
    # JSON
    JSON_CONTAINS = "JSON_CONTAINS"
    JSON_LENGTH = "JSON_LENGTH"
    # Pattern
    REGEX = "REGEX"

    @property
    def spec(self) -> OperatorSpec:
        return OPERATOR_SPECS[self]

    @property
    def arity(self) -> ArityClass:
        return self.spec.arity

    @property
    def category(self) -> OperatorCategory:
        return self.spec.category

    @property
    def description(self) -> str:
        return self.spec.description

    @property
    def aliases(self) -> tuple[str, ...]:
        return self.spec.aliases


@dataclass(frozen=True, slots=True)
class OperatorSpec:
    arity: ArityClass
    category: OperatorCategory
    description: str
    aliases: tuple[str, ...] = ()


_Op = CanonicalOperator
_A = ArityClass
_C = OperatorCategory

# =============================================================================
# Registry
# =============================================================================

OPERATOR_SPECS: dict[CanonicalOperator, OperatorSpec] = {
    _Op.EQ: OperatorSpec(
        _A.ONE, _C.COMPARISON, "Field value equals the provided value", ("EQUALS",)
    ),
    _Op.NEQ: OperatorSpec(
        _A.ONE,
        _C.COMPARISON,
        "Field value does not equal the provided value",
        ("NOT_EQUALS", "NOTEQUALS"),
    ),
    _Op.GT: OperatorSpec(
        _A.ONE,
        _C.COMPARISON,
        "Field value is greater than the provided value",
        ("GREATER_THAN",),
    ),
    _Op.GTE: OperatorSpec(
        _A.ONE,
        _C.COMPARISON,
        "Field value is greater than or equal to the provided value",
        ("GREATER_THAN_EQUALS",),
    ),
    _Op.LT: OperatorSpec(
        _A.ONE, _C.COMPARISON, "Field value is less than the provided value", ("LESS_THAN",)
    ),
    _Op.LTE: OperatorSpec(
        _A.ONE,
        _C.COMPARISON,
        "Field value is less than or equal to the provided value",
        ("LESS_THAN_EQUALS",),
    ),
    _Op.IN: OperatorSpec(_A.ANY_NON_EMPTY, _C.SET, "Field value is in the provided list"),
    _Op.NOT_IN: OperatorSpec(
        _A.ANY_NON_EMPTY, _C.SET, "Field value is not in the provided list", ("NOTIN",)
    ),
    _Op.BETWEEN: OperatorSpec(_A.EXACTLY_TWO, _C.RANGE, "Field value is between two values"),
    _Op.NOT_BETWEEN: OperatorSpec(
        _A.EXACTLY_TWO, _C.RANGE, "Field value is not between two values", ("NOTBETWEEN",)
    ),
    _Op.LIKE: OperatorSpec(_A.ONE, _C.STRING, "Field value contains the provided string"),
    _Op.NOT_LIKE: OperatorSpec(
        _A.ONE, _C.STRING, "Field value does not contain the provided string", ("NOTLIKE",)
    ),
    _Op.STARTS_WITH: OperatorSpec(
        _A.ONE, _C.STRING, "Field value starts with the provided string", ("STARTSWITH",)
    ),
    _Op.ENDS_WITH: OperatorSpec(
        _A.ONE, _C.STRING, "Field value ends with the provided string", ("ENDSWITH",)
    ),
    _Op.IS_NULL: OperatorSpec(_A.ZERO, _C.NULL, "Field value is null", ("ISNULL",)),
    _Op.IS_NOT_NULL: OperatorSpec(
        _A.ZERO, _C.NULL, "Field value is not null", ("ISNOTNULL", "NOT_NULL", "NOTNULL")
    ),
    _Op.DATE_EQ: OperatorSpec(
        _A.ONE, _C.DATE, "Date field equals the provided date", ("DATE_EQUALS",)
    ),
    _Op.DATE_GT: OperatorSpec(
        _A.ONE, _C.DATE, "Date field is after the provided date", ("DATE_AFTER",)
    ),
    _Op.DATE_GTE: OperatorSpec(
        _A.ONE, _C.DATE, "Date field is on or after the provided date", ("DATE_FROM",)
    ),
    _Op.DATE_LT: OperatorSpec(
        _A.ONE, _C.DATE, "Date field is before the provided date", ("DATE_BEFORE",)
    ),
    _Op.DATE_LTE: OperatorSpec(
        _A.ONE, _C.DATE, "Date field is on or before the provided date", ("DATE_TO",)
    ),
    _Op.DATE_BETWEEN: OperatorSpec(_A.EXACTLY_TWO, _C.DATE, "Date field is between two dates"),
    _Op.YEAR: OperatorSpec(_A.ONE, _C.DATE, "Year of date field equals the provided year"),
    _Op.MONTH: OperatorSpec(_A.ONE, _C.DATE, "Month of date field equals the provided month"),
    _Op.DAY: OperatorSpec(_A.ONE, _C.DATE, "Day of date field equals the provided day"),
    _Op.JSON_CONTAINS: OperatorSpec(_A.ONE, _C.JSON, "JSON field contains the provided value"),
    _Op.JSON_LENGTH: OperatorSpec(_A.ONE, _C.JSON, "JSON field has the specified length"),
    _Op.REGEX: OperatorSpec(
        _A.ONE,
        _C.PATTERN,
        "Field value matches the provided regular expression",
        ("REGEXP",),
    ),
}

# Upper-cased canonical names and aliases -> canonical operator
_LOOKUP: dict[str, CanonicalOperator] = {}
for _operator, _spec in OPERATOR_SPECS.items():
    _LOOKUP[_operator.value] = _operator
    for _alias in _spec.aliases:
        _LOOKUP[_alias] = _operator


def resolve_operator(token: str | CanonicalOperator) -> CanonicalOperator | None:
    """Resolve an operator name or alias (any case) to its canonical operator.

    Returns None for names that are not in the registry.
    """
    if isinstance(token, CanonicalOperator):
        return token
    return _LOOKUP.get(token.strip().upper())


def list_operators() -> dict[str, str]:
    """Canonical operator names mapped to a short description, in registry order."""
    return {operator.value: spec.description for operator, spec in OPERATOR_SPECS.items()}
