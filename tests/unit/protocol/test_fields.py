"""Tests for FieldReader."""

from __future__ import annotations

import math

import pytest

from ibwire.errors import MalformedFieldError
from ibwire.protocol.constants import INFINITY_STR, UNSET_DOUBLE, UNSET_INTEGER
from ibwire.protocol.fields import FieldReader


class TestRequiredReads:
    """Tests for required field reads."""

    def test_reads_in_order_after_tag(self) -> None:
        r = FieldReader(("1", "abc", "7", "2.5", "1"))
        assert r.read_str() == "abc"
        assert r.read_int() == 7
        assert r.read_float() == 2.5
        assert r.read_bool() is True
        assert r.remaining == 0

    def test_empty_numeric_reads_as_zero(self) -> None:
        r = FieldReader(("1", "", ""))
        assert r.read_int() == 0
        assert r.read_float() == 0.0

    def test_infinity(self) -> None:
        r = FieldReader(("1", INFINITY_STR))
        assert math.isinf(r.read_float())

    def test_bool_text(self) -> None:
        r = FieldReader(("1", "true", "false", "0", ""))
        assert [r.read_bool() for _ in range(4)] == [True, False, False, False]

    def test_skip(self) -> None:
        r = FieldReader(("1", "a", "b", "c"))
        r.skip(2)
        assert r.read_str() == "c"


class TestUnsetReads:
    """Unset sentinels are distinguishable from zero."""

    def test_int_unset(self) -> None:
        r = FieldReader(("1", str(UNSET_INTEGER), "", "0"))
        assert r.read_int_unset() is None
        assert r.read_int_unset() is None
        assert r.read_int_unset() == 0

    def test_float_unset(self) -> None:
        r = FieldReader(("1", repr(UNSET_DOUBLE), "", "0.0"))
        assert r.read_float_unset() is None
        assert r.read_float_unset() is None
        assert r.read_float_unset() == 0.0


class TestMalformed:
    """Tests for malformed and missing fields."""

    def test_missing_field(self) -> None:
        r = FieldReader(("9", "1"))
        r.skip()
        with pytest.raises(MalformedFieldError) as exc_info:
            r.read_int()
        assert exc_info.value.value is None
        assert exc_info.value.index == 2

    def test_bad_int(self) -> None:
        r = FieldReader(("9", "x"))
        with pytest.raises(MalformedFieldError) as exc_info:
            r.read_int()
        assert exc_info.value.value == "x"
        assert exc_info.value.expected == "int"
        assert exc_info.value.index == 1

    def test_bad_float(self) -> None:
        r = FieldReader(("1", "1.2.3"))
        with pytest.raises(MalformedFieldError):
            r.read_float()

    def test_bad_bool(self) -> None:
        r = FieldReader(("1", "maybe"))
        with pytest.raises(MalformedFieldError):
            r.read_bool()
