"""Tests for the scalar lexer, value splitting and lenient parsing."""

from __future__ import annotations

import pytest

from repofilter import CanonicalOperator, FilterCondition, FilterExpression, parse
from repofilter.filters import (
    lex_scalar,
    match_segment,
    parse_condition,
    split_segments,
    split_values,
)

# =============================================================================
# Scalar lexer
# =============================================================================


@pytest.mark.parametrize(
    ("token", "expected"),
    [
        ("42", 42),
        ("-7", -7),
        ("+3", 3),
        ("1.5", 1.5),
        ("1.", 1.0),
        (".5", 0.5),
        ("2e3", 2000.0),
        ("100000", 100000),
    ],
)
def test_lex_scalar_numbers(token: str, expected: int | float) -> None:
    """Numeric literals become int or float based on their text."""
    value = lex_scalar(token)
    assert value == expected
    assert type(value) is type(expected)


def test_lex_scalar_float_is_not_truncated() -> None:
    """A decimal point always produces a float, never a truncated int."""
    value = lex_scalar("3.75")
    assert isinstance(value, float)
    assert value == 3.75


def test_lex_scalar_booleans_and_null() -> None:
    """true/false/null are matched case-insensitively."""
    assert lex_scalar("true") is True
    assert lex_scalar("FALSE") is False
    assert lex_scalar("Null") is None


def test_lex_scalar_quoted_values_stay_text() -> None:
    """Quoted tokens are text with the quotes removed, no type inference."""
    assert lex_scalar("'123'") == "123"
    assert lex_scalar('"true"') == "true"
    assert lex_scalar('"null"') == "null"
    assert lex_scalar("''") == ""


def test_lex_scalar_double_quote_escapes() -> None:
    """Inside double quotes only \\" and \\\\ are unescaped."""
    assert lex_scalar(r'"say \"hi\""') == 'say "hi"'
    assert lex_scalar(r'"C:\\temp"') == "C:\\temp"
    assert lex_scalar(r'"a\nb"') == r"a\nb"


def test_lex_scalar_single_quotes_are_verbatim() -> None:
    assert lex_scalar(r"'a\"b'") == r"a\"b"


def test_lex_scalar_other_text_unchanged() -> None:
    assert lex_scalar("active") == "active"
    assert lex_scalar("2024-01-31") == "2024-01-31"
    assert lex_scalar("inf") == "inf"
    assert lex_scalar("O'Brien") == "O'Brien"
    assert lex_scalar("") == ""


def test_lex_scalar_overlong_numeral_stays_text() -> None:
    """Digit strings too long for int() come back unchanged instead of raising."""
    numeral = "9" * 5000
    assert lex_scalar(numeral) == numeral
    assert lex_scalar("-" + numeral) == "-" + numeral


def test_lex_scalar_overflowing_float_stays_text() -> None:
    assert lex_scalar("1e999") == "1e999"
    assert lex_scalar("-1e999") == "-1e999"
    assert parse("x:GT(1e999)").to_string() == "x:GT(1e999)"


def test_lex_scalar_only_ascii_digits_are_numbers() -> None:
    """Digits from other scripts are text, not numbers."""
    assert lex_scalar("\u0661\u0662") == "\u0661\u0662"
    assert lex_scalar("\uff11\uff12") == "\uff11\uff12"
    assert lex_scalar("\u0661.5") == "\u0661.5"


# =============================================================================
# Splitting
# =============================================================================


def test_split_values_trims_tokens() -> None:
    assert split_values(" a , b ,c ") == ["a", "b", "c"]


def test_split_values_empty_text_yields_nothing() -> None:
    assert split_values("") == []
    assert split_values("   ") == []


def test_split_values_keeps_empty_middle_token() -> None:
    assert split_values("a,,b") == ["a", "", "b"]


def test_split_values_respects_quotes() -> None:
    """Commas inside quoted values do not split."""
    assert split_values('"Smith, John",Doe') == ['"Smith, John"', "Doe"]
    assert split_values("'a,b', c") == ["'a,b'", "c"]


def test_split_values_quote_inside_token_is_literal() -> None:
    """A quote only opens a quoted value at the start of a token."""
    assert split_values("O'Brien,Smith") == ["O'Brien", "Smith"]


def test_split_segments_ignores_quoted_semicolons() -> None:
    assert split_segments('note:EQ("a;b");x:EQ(1)') == ['note:EQ("a;b")', "x:EQ(1)"]


def test_split_segments_keeps_empty_pieces() -> None:
    assert split_segments("a:EQ(1);;b:EQ(2);") == ["a:EQ(1)", "", "b:EQ(2)", ""]


# =============================================================================
# Segment matching
# =============================================================================


def test_match_segment_parts() -> None:
    parts = match_segment(" price : between ( 1 , 2 ) ")
    assert parts is not None
    assert parts.field == "price"
    assert parts.operator_token == "between"
    assert parts.value_tokens == ["1", "2"]


@pytest.mark.parametrize(
    "segment",
    [
        "garbage",
        "status:EQ",
        "status:EQ(active",
        "status:EQ(active)x",
        "status:(active)",
        "status:EQ(a)b)",
        'status:EQ("abc)',
        "'tag:EQ(1)",
        'f("x:EQ(1)',
    ],
)
def test_match_segment_rejects_malformed(segment: str) -> None:
    assert match_segment(segment) is None


def test_match_segment_allows_quoted_paren() -> None:
    parts = match_segment('title:EQ("Intro (draft)")')
    assert parts is not None
    assert parts.value_tokens == ['"Intro (draft)"']


def test_match_segment_keeps_quote_inside_field() -> None:
    """A quote after the first character of a field is literal."""
    parts = match_segment("ta'g:EQ(1)")
    assert parts is not None
    assert parts.field == "ta'g"
    assert match_segment("'ab':EQ(1)").field == "'ab'"


# =============================================================================
# Condition parser
# =============================================================================


def test_parse_condition_normalizes_case_and_alias() -> None:
    condition = parse_condition("name:equals(Bob)")
    assert condition == FilterCondition("name", CanonicalOperator.EQ, ("Bob",))


def test_parse_condition_unknown_operator_falls_back_to_eq() -> None:
    """Unknown operators become EQ over the first value only."""
    condition = parse_condition("status:FOO(a,b)")
    assert condition == FilterCondition("status", CanonicalOperator.EQ, ("a",))


def test_parse_condition_unknown_operator_without_values() -> None:
    condition = parse_condition("status:FOO()")
    assert condition == FilterCondition("status", CanonicalOperator.EQ, ())


def test_parse_condition_empty_field_is_dropped() -> None:
    assert parse_condition(":EQ(1)") is None
    assert parse_condition("  :EQ(1)") is None


# =============================================================================
# Expression parsing
# =============================================================================


def test_parse_empty_input() -> None:
    """Empty input and bare separators parse to an empty expression."""
    assert parse("") == FilterExpression()
    assert len(parse(";;")) == 0
    assert not parse("   ")


def test_parse_simple_equality() -> None:
    expr = parse("status:EQ(active)")
    assert expr.conditions == (FilterCondition("status", CanonicalOperator.EQ, ("active",)),)


def test_parse_between_integers() -> None:
    expr = parse("price:BETWEEN(100000,500000)")
    (condition,) = expr.conditions
    assert condition.field == "price"
    assert condition.operator is CanonicalOperator.BETWEEN
    assert condition.values == (100000, 500000)


def test_parse_mixed_type_list() -> None:
    (condition,) = parse("sbeds:IN(Studio,1,2,3)")
    assert condition.operator is CanonicalOperator.IN
    assert condition.values == ("Studio", 1, 2, 3)


def test_parse_keeps_order() -> None:
    expr = parse("category:IN(Apartment,Bungalow);price:GTE(100);status:EQ(active)")
    assert [c.field for c in expr] == ["category", "price", "status"]


def test_parse_allow_list_drops_other_fields() -> None:
    assert len(parse("age:GT(27)", allowed_fields=["name"])) == 0
    expr = parse("age:GT(27);name:EQ(Ann)", allowed_fields=["name"])
    assert expr.fields() == ["name"]


def test_parse_empty_allow_list_allows_everything() -> None:
    assert len(parse("age:GT(27)", allowed_fields=[])) == 1


def test_parse_drops_malformed_segments() -> None:
    expr = parse("garbage;status:EQ(x);age:BETWEEN;:EQ(1)")
    assert [c.field for c in expr] == ["status"]


def test_parse_trailing_and_doubled_separators() -> None:
    expr = parse(";status:EQ(a);;role:EQ(b);")
    assert [c.field for c in expr] == ["status", "role"]


def test_parse_keeps_repeated_fields() -> None:
    """The same field twice yields two conditions, in order."""
    expr = parse("status:EQ(a);status:EQ(b)")
    assert [c.values for c in expr] == [("a",), ("b",)]
    assert expr.fields() == ["status"]


def test_parse_quoted_values() -> None:
    (condition,) = parse('name:IN("Smith, John",\'Doe; Jane\')')
    assert condition.values == ("Smith, John", "Doe; Jane")


def test_parse_quoted_semicolon_does_not_split_segments() -> None:
    expr = parse('note:EQ("a;b");x:EQ(1)')
    assert [c.values for c in expr] == [("a;b",), (1,)]


def test_parse_unterminated_quote_drops_segment() -> None:
    assert len(parse('name:EQ("abc)')) == 0


def test_parse_null_check_without_values() -> None:
    (condition,) = parse("deleted_at:IS_NULL()")
    assert condition.operator is CanonicalOperator.IS_NULL
    assert condition.values == ()


def test_parse_keeps_wrong_arity_conditions() -> None:
    """Arity is enforced when applying, not when parsing."""
    (condition,) = parse("age:BETWEEN(25)")
    assert condition.values == (25,)


def test_parse_empty_middle_value() -> None:
    (condition,) = parse("tag:IN(a,,b)")
    assert condition.values == ("a", "", "b")


def test_parse_overlong_numeral_is_text() -> None:
    numeral = "9" * 5000
    first, second = parse(f"id:EQ({numeral});b:EQ(2)")
    assert first.values == (numeral,)
    assert second.values == (2,)
    assert len(parse(f"id:IN(1,{numeral})")) == 1


class TestFilterExpression:
    def test_iteration_and_len(self) -> None:
        expr = parse("a:EQ(1);b:EQ(2)")
        assert len(expr) == 2
        assert [c.field for c in expr] == ["a", "b"]
        assert bool(expr) is True

    def test_fields_distinct_in_order(self) -> None:
        expr = parse("b:EQ(1);a:EQ(2);b:EQ(3)")
        assert expr.fields() == ["b", "a"]

    def test_to_string_normalizes(self) -> None:
        expr = parse(" status : eq ( active ) ; age:between(1, 2)")
        assert expr.to_string() == "status:EQ(active);age:BETWEEN(1,2)"
        assert str(expr) == expr.to_string()

    def test_repr(self) -> None:
        assert repr(parse("a:EQ(1)")) == "FilterExpression('a:EQ(1)')"

    def test_condition_to_string(self) -> None:
        condition = FilterCondition("name", CanonicalOperator.EQ, ("Smith, John",))
        assert str(condition) == 'name:EQ("Smith, John")'

    def test_conditions_are_immutable(self) -> None:
        condition = FilterCondition("a", CanonicalOperator.EQ, (1,))
        with pytest.raises(AttributeError):
            condition.field = "b"  # type: ignore[misc]
