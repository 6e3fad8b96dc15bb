"""Tests for typed values and their accessors."""

from datetime import timedelta

import pytest

from ctxshell.errors import MissingValueError
from ctxshell.values import (
    Value,
    ValueKind,
    ValueSet,
    format_duration,
    parse_bool,
    parse_duration,
    parse_int,
)


class TestLiterals:
    """Test literal parsing helpers."""

    @pytest.mark.parametrize("text", ["1", "t", "T", "true", "TRUE", "True"])
    def test_parse_bool_true_literals(self, text):
        """Test the accepted true literals."""
        assert parse_bool(text) is True

    @pytest.mark.parametrize("text", ["0", "f", "F", "false", "FALSE", "False"])
    def test_parse_bool_false_literals(self, text):
        """Test the accepted false literals."""
        assert parse_bool(text) is False

    def test_parse_bool_rejects_other_words(self):
        """Test that other words are not booleans."""
        with pytest.raises(ValueError):
            parse_bool("yes")

    def test_parse_int_accepts_sign(self):
        """Test signed integers."""
        assert parse_int("-12") == -12
        assert parse_int("+7") == 7

    def test_parse_int_rejects_float_text(self):
        """Test that float text is not an int."""
        with pytest.raises(ValueError):
            parse_int("1.5")


class TestDurations:
    """Test duration literal grammar."""

    def test_milliseconds(self):
        """Test a millisecond duration."""
        assert parse_duration("1500ms") == timedelta(milliseconds=1500)

    def test_hours(self):
        """Test an hour duration."""
        assert parse_duration("2h") == timedelta(hours=2)

    def test_compound_negative(self):
        """Test a signed compound duration."""
        assert parse_duration("-1h30m") == -timedelta(hours=1, minutes=30)

    def test_fractional_unit(self):
        """Test a fractional unit."""
        assert parse_duration("1.5h") == timedelta(minutes=90)

    def test_bare_zero(self):
        """Test the bare zero duration."""
        assert parse_duration("0") == timedelta(0)

    @pytest.mark.parametrize("text", ["", "5", "h", "1x", "1h 2m"])
    def test_invalid_literals(self, text):
        """Test that malformed durations are rejected."""
        with pytest.raises(ValueError):
            parse_duration(text)

    def test_out_of_range_is_value_error(self):
        """Test that durations too large for timedelta raise ValueError."""
        with pytest.raises(ValueError, match="duration out of range"):
            parse_duration("99999999999999999h")

    def test_format_duration_shapes(self):
        """Test duration formatting."""
        assert format_duration(timedelta(0)) == "0s"
        assert format_duration(timedelta(microseconds=250)) == "250us"
        assert format_duration(timedelta(microseconds=2500)) == "2.5ms"
        assert format_duration(timedelta(milliseconds=1500)) == "1.5s"
        assert format_duration(timedelta(hours=1, minutes=30)) == "1h30m0s"

    def test_format_duration_reads_back(self):
        """Test that formatted durations parse back."""
        value = timedelta(hours=3, seconds=4, microseconds=5)
        assert parse_duration(format_duration(value)) == value


class TestValue:
    """Test Value variant construction."""

    def test_of_infers_kinds(self):
        """Test kind inference from Python values."""
        assert Value.of(True).kind is ValueKind.BOOL
        assert Value.of(3).kind is ValueKind.INT
        assert Value.of(2.5).kind is ValueKind.FLOAT
        assert Value.of("x").kind is ValueKind.STRING
        assert Value.of(timedelta(seconds=1)).kind is ValueKind.DURATION
        assert Value.of({"a": 1}).kind is ValueKind.JSON

    def test_of_wraps_lists_elementwise(self):
        """Test that lists wrap each element."""
        value = Value.of(["a", 1])
        assert value.kind is ValueKind.LIST
        assert value.payload == (Value(ValueKind.STRING, "a"), Value(ValueKind.INT, 1))

    def test_to_python_copies_json(self):
        """Test that JSON payloads are copied out."""
        doc = {"a": [1, 2]}
        value = Value(ValueKind.JSON, doc)
        copy = value.to_python()
        copy["a"].append(3)
        assert doc == {"a": [1, 2]}


class TestValueSet:
    """Test ValueSet access and coercion rules."""

    def test_missing_item_raises_missing_value_error(self):
        """Test that missing items raise MissingValueError."""
        values = ValueSet()
        with pytest.raises(MissingValueError):
            values["nope"]
        with pytest.raises(KeyError):
            values["nope"]

    def test_raw_reports_absence(self):
        """Test that raw returns None for absent names."""
        values = ValueSet.from_python({"a": 1})
        assert values.raw("a") == Value(ValueKind.INT, 1)
        assert values.raw("b") is None

    def test_string_coercion(self):
        """Test string accessor coercion."""
        values = ValueSet.from_python(
            {"i": 3, "f": 2.5, "b": True, "d": timedelta(minutes=1), "l": ["x", "y"], "j": {"k": 1}}
        )
        assert values.string("i") == "3"
        assert values.string("f") == "2.5"
        assert values.string("b") == "true"
        assert values.string("d") == "1m0s"
        assert values.string("l") == "x y"
        assert values.string("j") == '{"k":1}'
        assert values.string("missing") == ""

    def test_strings_wraps_scalars(self):
        """Test that strings wraps a scalar in a list."""
        values = ValueSet.from_python({"tags": ["a", "b"], "one": "c"})
        assert values.strings("tags") == ["a", "b"]
        assert values.strings("one") == ["c"]
        assert values.strings("none") == []

    def test_int_coercion(self):
        """Test int accessor coercion."""
        values = ValueSet.from_python({"s": "42", "f": 3.9, "b": True, "bad": "x"})
        assert values.int("s") == 42
        assert values.int("f") == 3
        assert values.int("b") == 1
        assert values.int("bad") == 0
        assert values.int("missing") == 0

    def test_float_coercion(self):
        """Test float accessor coercion."""
        values = ValueSet.from_python({"i": 2, "d": timedelta(milliseconds=500), "s": "1.25"})
        assert values.float("i") == 2.0
        assert values.float("d") == 0.5
        assert values.float("s") == 1.25

    def test_bool_coercion(self):
        """Test bool accessor coercion."""
        values = ValueSet.from_python({"s": "false", "n": 2, "z": 0, "bad": "maybe"})
        assert values.bool("s") is False
        assert values.bool("n") is True
        assert values.bool("z") is False
        assert values.bool("bad") is False

    def test_duration_coercion(self):
        """Test duration accessor coercion."""
        values = ValueSet.from_python({"n": 90, "s": "1m", "bad": "soon"})
        assert values.duration("n") == timedelta(seconds=90)
        assert values.duration("s") == timedelta(minutes=1)
        assert values.duration("bad") == timedelta(0)

    def test_decode_json(self):
        """Test decoding JSON values."""
        values = ValueSet.from_python({"doc": {"a": 1}, "text": '[1, 2]'})
        assert values.decode_json("doc") == {"a": 1}
        assert values.decode_json("text") == [1, 2]
        with pytest.raises(MissingValueError):
            values.decode_json("missing")

    def test_to_dict_and_flag_tokens(self):
        """Test conversion to dict and to flag tokens."""
        values = ValueSet.from_python({"count": 3, "verbose": True})
        assert values.to_dict() == {"count": 3, "verbose": True}
        assert values.as_flag_tokens() == ["--count=3", "--verbose=true"]

    def test_is_immutable_mapping(self):
        """Test that value sets cannot be changed."""
        values = ValueSet.from_python({"a": 1})
        with pytest.raises(TypeError):
            values["a"] = Value.of(2)  # type: ignore[index]
