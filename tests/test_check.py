"""Tests for the static analyzer."""

from decimal import Decimal

import pytest

from plc import analyze as analyze_text
from plc.ast import (
    Access,
    Call,
    Case,
    DeclarationStmt,
    ExprStmt,
    Function,
    IntLiteral,
    ReturnStmt,
    Source,
    StringLiteral,
    SwitchStmt,
)
from plc.check import Analyzer, analyze, new_static_scope
from plc.errors import AnalysisError
from plc.parse import parse
from plc.types import ANY, DECIMAL, INTEGER, NIL, STRING


def _main(*body) -> Function:
    return Function("main", [], [], "Integer", [*body, ReturnStmt(IntLiteral(0))])


def test_root_scope_has_print():
    print_fn = new_static_scope().lookup_function("print", 1)
    assert print_fn.target.parameter_types == [ANY]
    assert print_fn.target.return_type == NIL


def test_annotations_are_filled_in():
    source = analyze_text(
        "VAR total: Decimal = 1.5;\n"
        "FUN twice(n: Integer): Integer DO RETURN n * 2; END\n"
        "FUN main(): Integer DO LET s = \"x\" + twice(2); RETURN 0; END\n"
    )
    glob = source.globals[0]
    assert glob.variable is not None
    assert glob.variable.value == DECIMAL
    twice, main = source.functions
    assert twice.function is not None
    assert twice.function.target.parameter_types == [INTEGER]
    assert twice.function.target.return_type == INTEGER
    decl = main.body[0]
    assert isinstance(decl, DeclarationStmt)
    assert decl.variable is not None
    assert decl.variable.value == STRING
    assert decl.value is not None
    assert decl.value.type == STRING


def test_call_is_bound_to_declaration():
    source = analyze_text(
        "FUN f(): Integer DO RETURN 1; END\nFUN main(): Integer DO RETURN f(); END"
    )
    ret = source.functions[1].body[0]
    assert isinstance(ret, ReturnStmt)
    assert isinstance(ret.value, Call)
    assert ret.value.function is source.functions[0].function


def test_access_is_bound_to_declaration():
    source = analyze_text("VAL x: Integer = 1;\nFUN main(): Integer DO RETURN x; END")
    ret = source.functions[0].body[0]
    assert isinstance(ret, ReturnStmt)
    assert isinstance(ret.value, Access)
    assert ret.value.variable is source.globals[0].variable


def test_analyze_returns_same_source():
    source = parse("FUN main(): Integer DO RETURN 0; END")
    assert analyze(source) is source


def test_decimal_literal_out_of_range():
    huge = "1" + "0" * 400 + ".0"
    with pytest.raises(AnalysisError, match="out of 64-bit range"):
        analyze_text("FUN main(): Integer DO LET d = " + huge + "; RETURN 0; END")


def test_large_decimal_within_range():
    big = "1" + "0" * 300 + ".5"
    analyze_text("FUN main(): Integer DO LET d = " + big + "; RETURN 0; END")


def test_default_must_be_last():
    switch = SwitchStmt(
        IntLiteral(1),
        [
            Case(None, [ExprStmt(Call("print", [IntLiteral(1)]))]),
            Case(IntLiteral(1), []),
        ],
    )
    with pytest.raises(AnalysisError, match="DEFAULT must be the last case"):
        analyze(Source([], [_main(switch)]))


def test_switch_needs_default():
    switch = SwitchStmt(IntLiteral(1), [Case(IntLiteral(1), [])])
    with pytest.raises(AnalysisError, match="last case of a SWITCH must be DEFAULT"):
        analyze(Source([], [_main(switch)]))


def test_switch_needs_cases():
    with pytest.raises(AnalysisError, match="SWITCH requires a DEFAULT case"):
        analyze(Source([], [_main(SwitchStmt(IntLiteral(1), []))]))


def test_shared_scope_sees_earlier_definitions():
    scope = new_static_scope()
    scope.define_variable("limit", INTEGER)
    source = parse("FUN main(): Integer DO RETURN limit; END")
    Analyzer(scope).analyze_source(source)


def test_return_checks_inferred_declaration_type():
    body = [
        DeclarationStmt("s", None, StringLiteral("x")),
        ReturnStmt(Access(None, "s")),
    ]
    with pytest.raises(AnalysisError, match="expected Integer, got String"):
        analyze(Source([], [Function("main", [], [], "Integer", body)]))


def test_integer_literal_bounds():
    analyze(Source([], [_main(ExprStmt(Call("print", [IntLiteral(2**31 - 1)])))]))
    with pytest.raises(AnalysisError, match="out of 32-bit range"):
        analyze(Source([], [_main(ExprStmt(Call("print", [IntLiteral(2**31)])))]))


def test_decimal_value_is_not_rounded():
    source = analyze_text("FUN main(): Integer DO LET d = 0.1; RETURN 0; END")
    decl = source.functions[0].body[0]
    assert isinstance(decl, DeclarationStmt)
    assert decl.value is not None
    assert decl.value.type == DECIMAL
    assert getattr(decl.value, "value") == Decimal("0.1")
