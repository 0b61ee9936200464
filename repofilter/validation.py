"""Strict validation of filter strings.

Where ``parse`` silently drops anything it cannot use, ``validate`` reports
every problem it finds, segment by segment. Use it on filter strings from
untrusted sources before applying them. Field allow-lists are not checked
here.
"""

from __future__ import annotations

from .filters import (
    UnterminatedQuoteError,
    closes_quotes,
    has_unquoted,
    match_segment,
    split_segments,
)
from .models import SegmentError, ValidationResult
from .operators import ArityClass, resolve_operator


def _describe_malformed(segment: str) -> str:
    """Best-effort hint for why a segment does not match ``field:OPERATOR(values)``."""
    colon = segment.find(":")
    if colon < 0:
        return "expected 'field:OPERATOR(values)', missing ':'"
    open_paren = segment.find("(", colon + 1)
    if open_paren < 0:
        return "missing '(' after operator"
    if not segment[colon + 1 : open_paren].strip():
        return "missing operator between ':' and '('"
    if not closes_quotes(segment[:colon].strip()):
        return "unterminated quoted value in field name"
    if not segment.endswith(")"):
        return "condition must end with ')'"
    value_text = segment[open_paren + 1 : -1]
    try:
        if has_unquoted(value_text, ")"):
            return "unexpected ')' inside values; quote values containing ')'"
    except UnterminatedQuoteError:
        return "unterminated quoted value"
    return "expected 'field:OPERATOR(values)'"


def validate_segment(index: int, segment: str) -> list[SegmentError]:
    """Validate one (trimmed, non-empty) segment."""
    errors: list[SegmentError] = []

    def error(message: str) -> None:
        errors.append(SegmentError(segment_index=index, segment_text=segment, message=message))

    parts = match_segment(segment)
    if parts is None:
        error(
            f"Invalid condition format at position {index}: '{segment}' "
            f"({_describe_malformed(segment)})"
        )
        return errors

    if not parts.field:
        error(f"Empty field name in condition: '{segment}'")

    operator = resolve_operator(parts.operator_token)
    if operator is None:
        error(f"Unknown operator '{parts.operator_token.upper()}' in condition: '{segment}'")
        return errors

    count = len(parts.value_tokens)
    arity = operator.arity
    if arity is ArityClass.ZERO:
        if count:
            error(f"Operator '{operator.value}' should not have values in condition: '{segment}'")
    elif count < arity.min_values:
        noun = "value" if arity.min_values == 1 else "values"
        error(
            f"Operator '{operator.value}' requires at least {arity.min_values} {noun} "
            f"in condition: '{segment}'"
        )
    return errors


def validate(filter_string: str) -> ValidationResult:
    """
    Validate a filter string without building an expression.

    Segment indices count every ``;``-separated piece of the input (including
    empty ones), so they point back into the original text.

    Examples:
        >>> validate("status:EQ(active);role:IN(admin,user)").valid
        True

        >>> validate("status:INVALID_OP(active)").messages
        ["Unknown operator 'INVALID_OP' in condition: 'status:INVALID_OP(active)'"]
    """
    if not filter_string or not filter_string.strip():
        return ValidationResult(valid=True)

    errors: list[SegmentError] = []
    for index, raw in enumerate(split_segments(filter_string)):
        segment = raw.strip()
        if not segment:
            continue
        errors.extend(validate_segment(index, segment))
    return ValidationResult(valid=not errors, errors=errors)
