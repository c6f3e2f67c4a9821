"""Tests for chained lexical scopes."""

import pytest

from plc.errors import AnalysisError, PlcError, RuntimeFault
from plc.scope import Scope


def test_lookup_walks_parents():
    root: Scope[int, str] = Scope(None)
    root.define_variable("x", 1)
    child = root.child()
    grandchild = child.child()
    assert grandchild.lookup_variable("x").value == 1
    assert grandchild.parent is child


def test_shadowing_in_child():
    root: Scope[int, str] = Scope(None)
    root.define_variable("x", 1)
    child = root.child()
    child.define_variable("x", 2)
    assert child.lookup_variable("x").value == 2
    assert root.lookup_variable("x").value == 1


def test_redefinition_in_same_scope():
    scope: Scope[int, str] = Scope(None)
    scope.define_variable("x", 1)
    with pytest.raises(PlcError, match="variable 'x' is already defined in this scope"):
        scope.define_variable("x", 2)


def test_missing_variable():
    scope: Scope[int, str] = Scope(None)
    assert scope.get_variable("x") is None
    with pytest.raises(PlcError, match="undefined variable 'x'"):
        scope.lookup_variable("x")


def test_variable_binding_is_shared():
    root: Scope[int, str] = Scope(None)
    variable = root.define_variable("x", 1, mutable=False)
    root.child().lookup_variable("x").value = 5
    assert variable.value == 5
    assert not variable.mutable


def test_functions_keyed_by_name_and_arity():
    root: Scope[int, str] = Scope(None)
    root.define_function("f", 0, "zero")
    root.define_function("f", 1, "one")
    child = root.child()
    assert child.lookup_function("f", 0).target == "zero"
    assert child.lookup_function("f", 1).target == "one"
    assert child.get_function("f", 2) is None
    with pytest.raises(PlcError, match="undefined function 'f/2'"):
        child.lookup_function("f", 2)
    with pytest.raises(PlcError, match="function 'f/1' is already defined"):
        root.define_function("f", 1, "again")


def test_variables_and_functions_are_separate():
    scope: Scope[int, str] = Scope(None)
    scope.define_variable("f", 1)
    scope.define_function("f", 0, "fn")
    assert scope.lookup_variable("f").value == 1


@pytest.mark.parametrize("error", [AnalysisError, RuntimeFault])
def test_error_kind_is_inherited(error):
    scope: Scope[int, str] = Scope(None, error)
    with pytest.raises(error):
        scope.child().lookup_variable("missing")
