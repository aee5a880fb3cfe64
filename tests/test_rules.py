"""Tests for the built-in rules and value helpers."""

from dataclasses import dataclass
from datetime import date, datetime, timezone
from decimal import Decimal

import pytest

from structvault import ConfigurationError
from structvault.rules import (
    BUILT_IN_VALIDATIONS,
    has_value,
    is_supported,
    validate_email,
    validate_max,
    validate_min,
    validate_required,
)


@dataclass
class Point:
    x: int = 0
    y: int = 0


class TestHasValue:
    """Type-aware emptiness."""

    @pytest.mark.parametrize("value", [None, "", b"", 0, 0.0, Decimal(0), False, [], {}, ()])
    def test_empty(self, value):
        assert not has_value(value)

    @pytest.mark.parametrize(
        "value", ["a", 1, -1, 0.5, True, [0], {"a": None}, datetime(1, 1, 1), date(2020, 1, 1)]
    )
    def test_non_empty(self, value):
        assert has_value(value)

    def test_records(self):
        assert not has_value(Point())
        assert has_value(Point(x=1))


class TestIsSupported:
    def test_unsupported(self):
        def gen():
            yield 1

        assert not is_supported(lambda: None)
        assert not is_supported(gen())
        assert not is_supported(iter([1]))

    def test_supported(self):
        for value in ("a", 1, None, [1], {"a": 1}, Point(), datetime.now()):
            assert is_supported(value)


class TestIndividualValidations:
    """Mirrors the rule table used by the walker."""

    @pytest.mark.parametrize(
        "rule,value,param,expected",
        [
            ("required", "test", "", True),
            ("required", "", "", False),
            ("min", "test", "3", True),
            ("min", "te", "3", False),
            ("max", "test", "5", True),
            ("max", "testing", "5", False),
            ("email", "test@example.com", "", True),
            ("email", "not-an-email", "", False),
            ("min", 20, "18", True),
            ("min", 17, "18", False),
            ("max", 100, "120", True),
            ("max", 121, "120", False),
        ],
    )
    def test_rule(self, rule, value, param, expected):
        validation = BUILT_IN_VALIDATIONS[rule]
        assert validation(None, "test", value, param) is expected

    def test_method_scoped_required(self):
        for name in ("required_create", "required_update", "required_validate"):
            assert BUILT_IN_VALIDATIONS[name] is validate_required


class TestMinMax:
    def test_bounds_are_inclusive(self):
        assert validate_min(None, "f", "abc", "3")
        assert validate_max(None, "f", "abc", "3")

    def test_collections_compare_length(self):
        assert validate_min(None, "f", ["a"], "1")
        assert not validate_max(None, "f", {"a": 1, "b": 2}, "1")
        assert validate_max(None, "f", ("a", "b"), "0x2")

    def test_numbers(self):
        assert validate_min(None, "f", 2.5, "2.5")
        assert not validate_max(None, "f", 2.51, "2.5")
        assert validate_max(None, "f", Decimal("9.99"), "10")
        assert not validate_min(None, "f", -1, "0")

    def test_int_in_float_field_takes_fractional_bound(self):
        assert validate_min(None, "price", 10, "0.5")
        assert not validate_max(None, "price", 10, "9.5")
        assert not validate_min(None, "price", 0, "0.5")

    def test_leading_zero_param_is_octal(self):
        assert validate_min(None, "f", 8, "010")
        assert not validate_min(None, "f", 7, "010")
        assert validate_max(None, "f", ["a"] * 8, "010")
        assert validate_min(None, "f", -8, "-010")

    def test_times(self):
        value = datetime(2024, 6, 1, tzinfo=timezone.utc)
        assert validate_min(None, "f", value, "2024-01-01T00:00:00+00:00")
        assert not validate_max(None, "f", value, "2024-01-01T00:00:00+00:00")
        assert validate_max(None, "f", date(2024, 6, 1), "2024-06-01")

    def test_missing_param(self):
        with pytest.raises(ConfigurationError, match="provide a min param - age"):
            validate_min(None, "age", 3, "")
        with pytest.raises(ConfigurationError, match="provide a max param"):
            validate_max(None, "age", 3, "")

    def test_bad_param(self):
        with pytest.raises(ConfigurationError, match="invalid integer param"):
            validate_min(None, "age", 3, "three")
        with pytest.raises(ConfigurationError, match="invalid integer param"):
            validate_min(None, "tags", ["a"], "0.5")
        with pytest.raises(ConfigurationError, match="invalid ISO-8601 param"):
            validate_min(None, "at", datetime.now(), "yesterday")

    def test_naive_vs_aware_time(self):
        with pytest.raises(ConfigurationError, match="cannot compare"):
            validate_min(None, "at", datetime(2024, 1, 1), "2024-01-01T00:00:00+00:00")

    def test_unsupported_kind(self):
        with pytest.raises(ConfigurationError, match="invalid field type"):
            validate_min(None, "flag", True, "1")
        with pytest.raises(ConfigurationError, match="invalid field type"):
            validate_max(None, "point", Point(1, 1), "1")


class TestEmail:
    @pytest.mark.parametrize(
        "value",
        ["john@x.com", "first.last+tag@sub.example.org", '"quoted name"@example.com', "ü@exämple.de"],
    )
    def test_valid(self, value):
        assert validate_email(None, "email", value, "")

    @pytest.mark.parametrize(
        "value", ["not-an-email", "a@b", "@example.com", "a@.com", "a b@example.com", 42]
    )
    def test_invalid(self, value):
        assert not validate_email(None, "email", value, "")
