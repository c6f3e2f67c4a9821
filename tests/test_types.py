"""Tests for the static type set and assignability."""

import pytest

from plc.errors import AnalysisError, PlcError
from plc.types import (
    ANY,
    BOOLEAN,
    CHARACTER,
    COMPARABLE,
    DECIMAL,
    INTEGER,
    NIL,
    STRING,
    TYPES,
    get_type,
    is_assignable,
    require_assignable,
)

ALL_TYPES = [ANY, NIL, COMPARABLE, BOOLEAN, INTEGER, DECIMAL, CHARACTER, STRING]


def test_type_names():
    assert sorted(TYPES) == [
        "Any",
        "Boolean",
        "Character",
        "Comparable",
        "Decimal",
        "Integer",
        "Nil",
        "String",
    ]
    for t in ALL_TYPES:
        assert get_type(t.name) is t


def test_unknown_type():
    with pytest.raises(AnalysisError, match="unknown type 'integer'"):
        get_type("integer")


@pytest.mark.parametrize("actual", ALL_TYPES)
def test_everything_is_assignable_to_any(actual):
    assert is_assignable(ANY, actual)


@pytest.mark.parametrize("actual", [INTEGER, DECIMAL, CHARACTER, STRING, COMPARABLE])
def test_comparable_members(actual):
    assert is_assignable(COMPARABLE, actual)


@pytest.mark.parametrize("actual", [ANY, NIL, BOOLEAN])
def test_comparable_non_members(actual):
    assert not is_assignable(COMPARABLE, actual)


def test_concrete_types_need_exact_match():
    assert is_assignable(INTEGER, INTEGER)
    assert not is_assignable(INTEGER, DECIMAL)
    assert not is_assignable(STRING, CHARACTER)
    assert not is_assignable(INTEGER, ANY)
    assert not is_assignable(NIL, INTEGER)
    assert is_assignable(NIL, NIL)


def test_require_assignable_message():
    with pytest.raises(AnalysisError) as exc:
        require_assignable(BOOLEAN, INTEGER)
    assert exc.value.msg == "type mismatch: expected Boolean, got Integer"
    assert isinstance(exc.value, PlcError)
