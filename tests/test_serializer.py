"""Tests for building filter strings from structured conditions."""

from __future__ import annotations

import itertools
from datetime import date, datetime

import pytest

from repofilter import (
    CanonicalOperator,
    FilterCondition,
    FilterError,
    FilterSerializationError,
    parse,
    serialize,
    serialize_condition,
    validate,
)
from repofilter.serializer import format_value


def test_serialize_tuples() -> None:
    text = serialize([("status", "EQ", ["active"]), ("age", "BETWEEN", [25, 35])])
    assert text == "status:EQ(active);age:BETWEEN(25,35)"


def test_serialize_empty() -> None:
    assert serialize([]) == ""
    assert serialize({}) == ""


def test_serialize_normalizes_operator_names() -> None:
    assert serialize([("x", "notin", [1, 2]), ("y", CanonicalOperator.GTE, [3])]) == (
        "x:NOT_IN(1,2);y:GTE(3)"
    )


def test_serialize_mapping_shorthand() -> None:
    """A list means IN, a scalar means EQ."""
    text = serialize({"role": ["admin", "moderator"], "status": "active"})
    assert text == "role:IN(admin,moderator);status:EQ(active)"


def test_serialize_mapping_with_operator() -> None:
    text = serialize(
        {
            "price": {"operator": "between", "values": [100, 200]},
            "n": {"operator": "gt", "values": 5},
        }
    )
    assert text == "price:BETWEEN(100,200);n:GT(5)"


def test_serialize_mapping_without_operator_fails() -> None:
    with pytest.raises(FilterSerializationError, match="no 'operator'"):
        serialize({"price": {"values": [1]}})


def test_serialize_literals() -> None:
    text = serialize(
        [("a", "EQ", [None]), ("b", "EQ", [True]), ("c", "EQ", [False]), ("d", "EQ", [1.5])]
    )
    assert text == "a:EQ(null);b:EQ(true);c:EQ(false);d:EQ(1.5)"


def test_serialize_dates_as_iso() -> None:
    assert serialize([("d", "DATE_GTE", [date(2024, 1, 31)])]) == "d:DATE_GTE(2024-01-31)"
    assert format_value(datetime(2024, 1, 31, 9, 30)) == "2024-01-31T09:30:00"


def test_serialize_null_check_has_empty_parens() -> None:
    assert serialize([("deleted_at", "IS_NULL", ["ignored"])]) == "deleted_at:IS_NULL()"


def test_serialize_conditions_and_expressions() -> None:
    expr = parse("category:IN(Apartment,Bungalow);price:LTE(5e5)")
    assert serialize(expr) == "category:IN(Apartment,Bungalow);price:LTE(500000.0)"
    assert serialize(list(expr)) == serialize(expr)


class TestQuoting:
    def test_comma_value_round_trip(self) -> None:
        text = serialize([("name", "EQ", ["Smith, John"])])
        assert text == 'name:EQ("Smith, John")'
        (condition,) = parse(text)
        assert condition.values == ("Smith, John",)

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            ("a)b", '"a)b"'),
            ("a;b", '"a;b"'),
            ("", '""'),
            (" padded ", '" padded "'),
            ("'quoted'", "\"'quoted'\""),
            ('say "hi", ok', r'"say \"hi\", ok"'),
            ("back\\slash,", r'"back\\slash,"'),
            ("O'Brien", "\"O'Brien\""),
            ("a(b", '"a(b"'),
            ("('x", "\"('x\""),
            ('f("a', r'"f(\"a"'),
            ('end"', r'"end\""'),
        ],
    )
    def test_quoted_values(self, value: str, expected: str) -> None:
        assert format_value(value) == expected

    def test_plain_values_are_bare(self) -> None:
        assert format_value("hello world") == "hello world"
        assert format_value("C:\\temp") == "C:\\temp"
        assert format_value("a:b") == "a:b"

    @pytest.mark.parametrize("value", ["('x", 'f("a', "a(b", "it's", "x'", 'a\\"b', "\\"])
    def test_value_before_another_segment(self, value: str) -> None:
        """A value never swallows the segment that follows it."""
        text = serialize([("name", "EQ", [value]), ("b", "EQ", [2])])
        assert validate(text).valid
        first, second = parse(text)
        assert first.values == (value,)
        assert second == FilterCondition("b", CanonicalOperator.EQ, (2,))

    def test_escaped_value_round_trip(self) -> None:
        value = 'C:\\dir "x", y'
        (condition,) = parse(serialize([("path", "EQ", [value])]))
        assert condition.values == (value,)

    @pytest.mark.parametrize("field", ["ta'g", "a(b", "x'", "'ab'", '"a;b"', "first name"])
    def test_unusual_fields_read_back(self, field: str) -> None:
        """Fields whose quotes stay literal or closed are written as they are."""
        text = serialize([(field, "EQ", [1]), ("b", "EQ", [2])])
        assert validate(text).valid
        assert [c.field for c in parse(text)] == [field, "b"]


class TestErrors:
    def test_unknown_operator(self) -> None:
        with pytest.raises(FilterSerializationError, match="Unknown filter operator"):
            serialize([("a", "NOPE", [1])])

    @pytest.mark.parametrize(
        "field",
        ["", "  ", "a:b", "a;b", "'tag", '"tag', "a,'b", 'f("x', '"a:b"', " name", "name "],
    )
    def test_invalid_field(self, field: str) -> None:
        with pytest.raises(FilterSerializationError, match="Invalid filter field name"):
            serialize_condition(field, "EQ", [1])

    def test_quoted_field_does_not_hide_later_segments(self) -> None:
        with pytest.raises(FilterSerializationError):
            serialize([("'tag", "EQ", [1]), ("b", "EQ", [2])])

    @pytest.mark.parametrize("field", [5, None, ("a",)])
    def test_non_string_field(self, field: object) -> None:
        with pytest.raises(FilterSerializationError, match="Invalid filter field name"):
            serialize([(field, "EQ", [1])])

    @pytest.mark.parametrize("operator", [5, None, ["EQ"]])
    def test_non_string_operator(self, operator: object) -> None:
        with pytest.raises(FilterSerializationError, match="Unknown filter operator"):
            serialize([("a", operator, [1])])

    @pytest.mark.parametrize("value", [float("inf"), float("-inf"), float("nan")])
    def test_non_finite_numbers(self, value: float) -> None:
        with pytest.raises(FilterSerializationError, match="non-finite"):
            serialize([("price", "GT", [value])])

    def test_integer_too_large(self) -> None:
        with pytest.raises(FilterSerializationError, match="too large"):
            format_value(10**5000)

    def test_string_input_rejected(self) -> None:
        with pytest.raises(FilterSerializationError):
            serialize("status:EQ(active)")

    def test_unsupported_entry(self) -> None:
        with pytest.raises(FilterSerializationError, match="Unsupported condition entry"):
            serialize([("a", "EQ")])

    def test_error_hierarchy(self) -> None:
        with pytest.raises(ValueError):
            serialize([("a", "NOPE", [1])])
        assert issubclass(FilterSerializationError, FilterError)


_ROUND_TRIP = [
    FilterCondition("status", CanonicalOperator.EQ, ("active",)),
    FilterCondition("status", CanonicalOperator.NEQ, ("Smith, John",)),
    FilterCondition("price", CanonicalOperator.GT, (1.25,)),
    FilterCondition("sbeds", CanonicalOperator.IN, ("Studio", 1, 2, "")),
    FilterCondition("x", CanonicalOperator.NOT_IN, ("a)b", "c;d")),
    FilterCondition("price", CanonicalOperator.BETWEEN, (100000, 500000)),
    FilterCondition("name", CanonicalOperator.LIKE, (" spaced ",)),
    FilterCondition("flag", CanonicalOperator.EQ, (True,)),
    FilterCondition("owner", CanonicalOperator.EQ, (None,)),
    FilterCondition("deleted_at", CanonicalOperator.IS_NULL, ()),
    FilterCondition("created", CanonicalOperator.DATE_BETWEEN, ("2024-01-01", "2024-12-31")),
    FilterCondition("ref", CanonicalOperator.REGEX, ('^"x"$',)),
    FilterCondition("name", CanonicalOperator.EQ, ("('x",)),
    FilterCondition("call", CanonicalOperator.STARTS_WITH, ('f("a',)),
    FilterCondition("name", CanonicalOperator.IN, ("O'Brien", "it's", "a(b")),
    FilterCondition("path", CanonicalOperator.ENDS_WITH, ("dir\\",)),
    FilterCondition("ref", CanonicalOperator.NEQ, ('\\"', "'")),
]


@pytest.mark.parametrize("condition", _ROUND_TRIP, ids=lambda c: c.operator.value)
def test_parse_inverts_serialize(condition: FilterCondition) -> None:
    assert parse(serialize([condition])).conditions == (condition,)


# Every string of up to three characters built from the grammar's special
# characters, a letter and a space.
_AWKWARD_ALPHABET = "(),;'\"\\ a:"
_AWKWARD_VALUES = [
    "".join(chars)
    for length in range(1, 4)
    for chars in itertools.product(_AWKWARD_ALPHABET, repeat=length)
]


def test_awkward_values_survive_round_trip() -> None:
    """Each value comes back unchanged and the following segment stays intact."""
    failures = []
    for value in _AWKWARD_VALUES:
        text = serialize([("v", "IN", [value, "z"]), ("b", "EQ", [2])])
        expr = parse(text)
        ok = validate(text).valid and expr.conditions == (
            FilterCondition("v", CanonicalOperator.IN, (value, "z")),
            FilterCondition("b", CanonicalOperator.EQ, (2,)),
        )
        if not ok:
            failures.append((value, text))
    assert failures == []


def test_text_numbers_are_retyped() -> None:
    """Numeric-looking text comes back as a number."""
    (condition,) = parse(serialize([("n", "EQ", ["5"])]))
    assert condition.values == (5,)
