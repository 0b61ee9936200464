"""
Filter string parsing.

Turns a compact filter string such as a ``filters`` query parameter into an
ordered list of field conditions.

Example:
    from repofilter import parse

    expr = parse("category:IN(Apartment,Bungalow);price:BETWEEN(100000,500000)")
    for condition in expr:
        print(condition.field, condition.operator.value, condition.values)

    # Restrict which fields a caller may filter on
    expr = parse(request_filters, allowed_fields=["category", "price", "status"])

Parsing is lenient: malformed segments and disallowed fields are dropped, and
unknown operators fall back to ``EQ`` on the first value. Use
``repofilter.validate`` to get a diagnostic for untrusted input.
"""

from __future__ import annotations

import logging
import math
import re
from collections.abc import Collection, Iterator
from dataclasses import dataclass
from typing import Any, Union

from .operators import CanonicalOperator, resolve_operator

logger = logging.getLogger(__name__)

ScalarValue = Union[int, float, bool, str, None]

SEGMENT_SEPARATOR = ";"
VALUE_SEPARATOR = ","

_QUOTES = ('"', "'")
_NUMERIC_RE = re.compile(r"^[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?$", re.ASCII)


@dataclass(frozen=True, slots=True)
class FilterCondition:
    """One ``field:OPERATOR(values)`` condition."""

    field: str
    operator: CanonicalOperator
    values: tuple[ScalarValue, ...] = ()

    def to_string(self) -> str:
        from .serializer import serialize_condition

        return serialize_condition(self.field, self.operator, self.values)

    def __str__(self) -> str:
        return self.to_string()


@dataclass(frozen=True, slots=True)
class FilterExpression:
    """Ordered conditions parsed from a filter string.

    Conditions keep their textual order. Repeated fields are kept as separate
    conditions; they are all applied (AND-combined).
    """

    conditions: tuple[FilterCondition, ...] = ()

    def __iter__(self) -> Iterator[FilterCondition]:
        return iter(self.conditions)

    def __len__(self) -> int:
        return len(self.conditions)

    def __bool__(self) -> bool:
        return bool(self.conditions)

    def fields(self) -> list[str]:
        """Distinct field names in order of first appearance."""
        return list(dict.fromkeys(c.field for c in self.conditions))

    def to_string(self) -> str:
        from .serializer import serialize

        return serialize(self)

    def __str__(self) -> str:
        return self.to_string()

    def __repr__(self) -> str:
        return f"FilterExpression({self.to_string()!r})"


# =============================================================================
# Scalar lexer
# =============================================================================


def _unescape_double_quoted(inner: str) -> str:
    # Only \" and \\ are escapes; other backslashes are literal.
    result: list[str] = []
    i = 0
    while i < len(inner):
        ch = inner[i]
        if ch == "\\" and i + 1 < len(inner) and inner[i + 1] in ('"', "\\"):
            result.append(inner[i + 1])
            i += 2
        else:
            result.append(ch)
            i += 1
    return "".join(result)


def lex_scalar(token: str) -> ScalarValue:
    """
    Classify a single value token.

    Rules, in order:
    1. A token wrapped in matching ``"`` or ``'`` is text (quotes removed).
    2. An ASCII numeric literal is a float if it has a ``.`` or exponent, else
       an int. Numerals too long to convert, or too large for a finite float,
       stay text.
    3. ``true``/``false`` (any case) are booleans.
    4. ``null`` (any case) is None.
    5. Anything else is returned unchanged as text.

    Never raises.
    """
    token = token.strip()
    if len(token) >= 2 and token[0] in _QUOTES and token[-1] == token[0]:
        inner = token[1:-1]
        if token[0] == '"':
            return _unescape_double_quoted(inner)
        return inner

    if _NUMERIC_RE.match(token):
        # Classify on the text, not on a cast value
        if "." in token or "e" in token or "E" in token:
            number = float(token)
            # Overflows to inf
            return number if math.isfinite(number) else token
        try:
            return int(token)
        except ValueError:
            # Beyond the interpreter's int digit limit
            return token

    lowered = token.lower()
    if lowered == "true":
        return True
    if lowered == "false":
        return False
    if lowered == "null":
        return None
    return token


# =============================================================================
# Quote-aware scanning
# =============================================================================


class UnterminatedQuoteError(ValueError):
    pass


def _split_outside_quotes(text: str, separator: str, *, strict: bool = False) -> list[str]:
    """Split ``text`` on ``separator`` where it is not inside a quoted value.

    A quote only opens a quoted value at the start of a value token (start of
    text, or after ``(``, ``,`` or ``separator``, ignoring whitespace).
    With ``strict`` an unterminated quote raises ``UnterminatedQuoteError``;
    otherwise the rest of the text stays in the last piece.
    """
    pieces: list[str] = []
    current: list[str] = []
    quote: str | None = None
    at_token_start = True
    i = 0
    while i < len(text):
        ch = text[i]
        if quote is not None:
            current.append(ch)
            if quote == '"' and ch == "\\" and i + 1 < len(text):
                current.append(text[i + 1])
                i += 2
                continue
            if ch == quote:
                quote = None
            i += 1
            continue

        if ch == separator:
            pieces.append("".join(current))
            current = []
            at_token_start = True
        else:
            current.append(ch)
            if ch in _QUOTES and at_token_start:
                quote = ch
            elif ch in "(,":
                at_token_start = True
            elif not ch.isspace():
                at_token_start = False
        i += 1

    if quote is not None and strict:
        raise UnterminatedQuoteError(f"Unterminated quoted value in '{text}'")
    pieces.append("".join(current))
    return pieces


def has_unquoted(text: str, char: str) -> bool:
    return len(_split_outside_quotes(text, char, strict=True)) > 1


def closes_quotes(text: str) -> bool:
    """True when every quote that opens a quoted value in ``text`` is closed."""
    try:
        _split_outside_quotes(text, SEGMENT_SEPARATOR, strict=True)
    except UnterminatedQuoteError:
        return False
    return True


def is_field_name(field: Any) -> bool:
    """True when ``field`` can be written into a filter string and read back unchanged.

    Rejects non-strings, empty or padded names, ``:``, an unquoted ``;`` and a
    quote that opens without closing (it would swallow the segments after it).
    """
    if not isinstance(field, str) or not field or field != field.strip() or ":" in field:
        return False
    try:
        return not has_unquoted(field, SEGMENT_SEPARATOR)
    except UnterminatedQuoteError:
        return False


def split_values(value_text: str) -> list[str]:
    """Split the text between a segment's parentheses into trimmed value tokens.

    Empty (or whitespace-only) text yields no tokens. Commas inside quoted
    values do not split.
    """
    if not value_text.strip():
        return []
    return [piece.strip() for piece in _split_outside_quotes(value_text, VALUE_SEPARATOR)]


def split_segments(filter_string: str) -> list[str]:
    """Split a filter string on ``;`` outside quoted values (pieces are not trimmed)."""
    return _split_outside_quotes(filter_string, SEGMENT_SEPARATOR)


# =============================================================================
# Condition parser
# =============================================================================


@dataclass(frozen=True, slots=True)
class SegmentParts:
    """The raw pieces of a ``field:OPERATOR(values)`` segment."""

    field: str
    operator_token: str
    value_text: str

    @property
    def value_tokens(self) -> list[str]:
        return split_values(self.value_text)


def match_segment(segment: str) -> SegmentParts | None:
    """Break a segment into field, operator token and value text.

    Returns None when the segment is not shaped like ``field:OPERATOR(values)``
    or its field opens a quoted value without closing it.
    The field and operator token are trimmed; the field may be empty.
    """
    segment = segment.strip()
    colon = segment.find(":")
    if colon < 0:
        return None
    open_paren = segment.find("(", colon + 1)
    if open_paren < 0 or not segment.endswith(")"):
        return None

    operator_token = segment[colon + 1 : open_paren].strip()
    if not operator_token:
        return None
    field = segment[:colon].strip()
    if not closes_quotes(field):
        return None

    value_text = segment[open_paren + 1 : -1]
    try:
        if has_unquoted(value_text, ")"):
            return None
    except UnterminatedQuoteError:
        return None

    return SegmentParts(
        field=field,
        operator_token=operator_token,
        value_text=value_text,
    )


def parse_condition(segment: str) -> FilterCondition | None:
    """Parse one segment leniently.

    Returns None for malformed segments (including an empty field name).
    Unknown operators become ``EQ`` over the first value.
    """
    parts = match_segment(segment)
    if parts is None or not parts.field:
        logger.debug(f"Dropping malformed filter segment: {segment!r}")
        return None

    values = tuple(lex_scalar(token) for token in parts.value_tokens)
    operator = resolve_operator(parts.operator_token)
    if operator is None:
        logger.debug(
            f"Unknown filter operator {parts.operator_token.upper()!r} on "
            f"{parts.field!r}; treating as EQ"
        )
        return FilterCondition(parts.field, CanonicalOperator.EQ, values[:1])
    return FilterCondition(parts.field, operator, values)


# =============================================================================
# Expression tokenizer
# =============================================================================


def parse(filter_string: str, allowed_fields: Collection[str] | None = None) -> FilterExpression:
    """
    Parse a filter string into a FilterExpression.

    Args:
        filter_string: Segments separated by ``;``, e.g.
            ``"status:EQ(active);age:BETWEEN(25,35)"``
        allowed_fields: If non-empty, conditions on any other field are dropped

    Returns:
        The conditions in textual order. Empty input gives an empty expression.

    Examples:
        >>> parse("price:BETWEEN(100000,500000)").conditions[0].values
        (100000, 500000)

        >>> len(parse("age:GT(27)", allowed_fields=["name"]))
        0
    """
    if not filter_string or not filter_string.strip():
        return FilterExpression()

    allowed = frozenset(allowed_fields) if allowed_fields else None
    conditions: list[FilterCondition] = []
    for segment in split_segments(filter_string):
        if not segment.strip():
            continue
        condition = parse_condition(segment)
        if condition is None:
            continue
        if allowed is not None and condition.field not in allowed:
            logger.debug(f"Dropping filter on disallowed field {condition.field!r}")
            continue
        conditions.append(condition)
    return FilterExpression(tuple(conditions))
