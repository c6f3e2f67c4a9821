"""Runtime values and the tree-walking interpreter for an analyzed Source."""

from __future__ import annotations

import logging
import sys
from dataclasses import dataclass, field
from decimal import Decimal
from fractions import Fraction
from typing import Callable, cast

from .ast import (
    Access,
    AssignmentStmt,
    Binary,
    BoolLiteral,
    Call,
    Case,
    CharLiteral,
    DecimalLiteral,
    DeclarationStmt,
    Expr,
    ExprStmt,
    Function,
    Global,
    Group,
    IfStmt,
    IntLiteral,
    ListLiteral,
    NilLiteral,
    ReturnStmt,
    Source,
    Stmt,
    StringLiteral,
    SwitchStmt,
    WhileStmt,
)
from .errors import RuntimeFault
from .scope import Scope

logger = logging.getLogger(__name__)

# User call nesting allowed before a run faults
MAX_CALL_DEPTH: int = 1500

# Python frame limit while a program runs; each user call spends several frames
RECURSION_LIMIT: int = 15000


# ============================================================
# Values
# ============================================================


class Value:
    """A boxed runtime value; the concrete subclass is its dynamic type."""

    def to_string(self) -> str:
        raise NotImplementedError


@dataclass(frozen=True)
class VNil(Value):
    def to_string(self) -> str:
        return "NIL"


@dataclass(frozen=True)
class VBool(Value):
    value: bool

    def to_string(self) -> str:
        return "true" if self.value else "false"


@dataclass(frozen=True)
class VInt(Value):
    value: int

    def to_string(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class VDecimal(Value):
    value: Decimal

    def to_string(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class VChar(Value):
    value: str

    def to_string(self) -> str:
        return self.value


@dataclass(frozen=True)
class VString(Value):
    value: str

    def to_string(self) -> str:
        return self.value


@dataclass(eq=False)
class VList(Value):
    elements: list[Value] = field(default_factory=list)

    def to_string(self) -> str:
        return "[" + ", ".join(v.to_string() for v in self.elements) + "]"


NIL: VNil = VNil()

NativeFunction = Callable[[list[Value]], Value]
RuntimeScope = Scope[Value, NativeFunction]


# ============================================================
# Control flow
# ============================================================


@dataclass
class _Return:
    """Result of a block that executed a RETURN."""

    value: Value


# ============================================================
# Arithmetic helpers
# ============================================================


def _value_eq(a: Value, b: Value) -> bool:
    if type(a) is not type(b):
        return False
    if isinstance(a, VNil):
        return True
    if isinstance(a, VDecimal):
        # Scale is part of a decimal's identity: 1.0 != 1.00
        other_value = cast(VDecimal, b).value
        return a.value == other_value and _exponent(a.value) == _exponent(other_value)
    if isinstance(a, VList):
        other = cast(VList, b)
        if len(a.elements) != len(other.elements):
            return False
        return all(_value_eq(x, y) for x, y in zip(a.elements, other.elements))
    return a == b


def _int_div_trunc(a: int, b: int) -> int:
    if b == 0:
        raise ZeroDivisionError
    q = abs(a) // abs(b)
    if (a < 0) != (b < 0):
        q = -q
    return q


def _exponent(d: Decimal) -> int:
    return cast(int, d.as_tuple().exponent)


def _decimal_from(coefficient: int, exponent: int) -> Decimal:
    sign = 0 if coefficient >= 0 else 1
    digits = tuple(int(d) for d in str(abs(coefficient)))
    return Decimal((sign, digits, exponent))


# ============================================================
# Interpreter
# ============================================================


def _print_line(text: str) -> None:
    print(text)


class Interpreter:
    """Evaluates an analyzed Source against a runtime scope chain."""

    def __init__(self, output: Callable[[str], None] | None = None) -> None:
        self.output: Callable[[str], None] = output if output is not None else _print_line
        self.scope: RuntimeScope = Scope(None, RuntimeFault)
        self.scope.define_function("print", 1, self._print)
        self.depth: int = 0

    def _print(self, args: list[Value]) -> Value:
        self.output(args[0].to_string())
        return NIL

    # ── Source ───────────────────────────────────────────────

    def run(self, source: Source) -> Value:
        for glob in source.globals:
            self.define_global(glob)
        for fn in source.functions:
            self.define_function(fn, self.scope)
        main = self.scope.lookup_function("main", 0)
        logger.debug("invoking main")
        limit = sys.getrecursionlimit()
        sys.setrecursionlimit(max(limit, RECURSION_LIMIT))
        try:
            return main.target([])
        finally:
            sys.setrecursionlimit(limit)

    def define_global(self, glob: Global) -> None:
        if glob.variable is None:
            raise RuntimeFault("global '" + glob.name + "' has not been analyzed")
        value: Value = NIL
        if glob.value is not None:
            value = self.evaluate(glob.value, self.scope)
        self.scope.define_variable(glob.name, value, glob.mutable)

    def define_function(self, fn: Function, scope: RuntimeScope) -> None:
        if fn.function is None:
            raise RuntimeFault("function '" + fn.name + "' has not been analyzed")

        def invoke(args: list[Value]) -> Value:
            if self.depth >= MAX_CALL_DEPTH:
                raise RuntimeFault("call stack exhausted")
            frame = scope.child()
            for name, value in zip(fn.parameters, args):
                frame.define_variable(name, value)
            self.depth += 1
            try:
                result = self.execute_block(fn.body, frame)
            except RecursionError:
                raise RuntimeFault("call stack exhausted") from None
            finally:
                self.depth -= 1
            if result is None:
                return NIL
            return result.value

        scope.define_function(fn.name, len(fn.parameters), invoke)

    # ── Statements ───────────────────────────────────────────

    def execute_block(self, stmts: list[Stmt], scope: RuntimeScope) -> _Return | None:
        for stmt in stmts:
            result = self.execute(stmt, scope)
            if result is not None:
                return result
        return None

    def execute(self, stmt: Stmt, scope: RuntimeScope) -> _Return | None:
        if isinstance(stmt, ExprStmt):
            self.evaluate(stmt.expr, scope)
            return None
        if isinstance(stmt, DeclarationStmt):
            if stmt.variable is None:
                raise RuntimeFault("declaration '" + stmt.name + "' has not been analyzed")
            value: Value = NIL
            if stmt.value is not None:
                value = self.evaluate(stmt.value, scope)
            scope.define_variable(stmt.name, value)
            return None
        if isinstance(stmt, AssignmentStmt):
            self.assign(stmt, scope)
            return None
        if isinstance(stmt, IfStmt):
            if self.require_bool(self.evaluate(stmt.condition, scope)):
                return self.execute_block(stmt.then_body, scope.child())
            return self.execute_block(stmt.else_body, scope.child())
        if isinstance(stmt, SwitchStmt):
            return self.execute_switch(stmt, scope)
        if isinstance(stmt, WhileStmt):
            while self.require_bool(self.evaluate(stmt.condition, scope)):
                result = self.execute_block(stmt.body, scope.child())
                if result is not None:
                    return result
            return None
        if isinstance(stmt, ReturnStmt):
            return _Return(self.evaluate(stmt.value, scope))
        raise RuntimeFault("unknown statement " + type(stmt).__name__)

    def assign(self, stmt: AssignmentStmt, scope: RuntimeScope) -> None:
        receiver = stmt.receiver
        if not isinstance(receiver, Access):
            raise RuntimeFault("assignment receiver must be a variable access")
        variable = scope.lookup_variable(receiver.name)
        if not variable.mutable:
            raise RuntimeFault("cannot assign to immutable variable '" + receiver.name + "'")
        if receiver.offset is None:
            variable.value = self.evaluate(stmt.value, scope)
            return
        elements = self.require_list(variable.value, receiver.name)
        index = self.require_index(self.evaluate(receiver.offset, scope), elements)
        elements[index] = self.evaluate(stmt.value, scope)

    def execute_switch(self, stmt: SwitchStmt, scope: RuntimeScope) -> _Return | None:
        condition = self.evaluate(stmt.condition, scope)
        default: Case | None = None
        for case in stmt.cases:
            if case.value is None:
                default = case
                continue
            if _value_eq(self.evaluate(case.value, scope), condition):
                return self.execute_block(case.body, scope.child())
        if default is None:
            raise RuntimeFault("no SWITCH case matched and there is no DEFAULT")
        return self.execute_block(default.body, scope.child())

    # ── Expressions ──────────────────────────────────────────

    def evaluate(self, expr: Expr, scope: RuntimeScope) -> Value:
        if expr.type is None:
            raise RuntimeFault(type(expr).__name__ + " has not been analyzed")
        if isinstance(expr, NilLiteral):
            return NIL
        if isinstance(expr, BoolLiteral):
            return VBool(expr.value)
        if isinstance(expr, IntLiteral):
            return VInt(expr.value)
        if isinstance(expr, DecimalLiteral):
            return VDecimal(expr.value)
        if isinstance(expr, CharLiteral):
            return VChar(expr.value)
        if isinstance(expr, StringLiteral):
            return VString(expr.value)
        if isinstance(expr, Group):
            return self.evaluate(expr.expr, scope)
        if isinstance(expr, Binary):
            return self.evaluate_binary(expr, scope)
        if isinstance(expr, Access):
            if expr.variable is None:
                raise RuntimeFault("access to '" + expr.name + "' has not been analyzed")
            value = scope.lookup_variable(expr.name).value
            if expr.offset is None:
                return value
            elements = self.require_list(value, expr.name)
            index = self.require_index(self.evaluate(expr.offset, scope), elements)
            return elements[index]
        if isinstance(expr, Call):
            if expr.function is None:
                raise RuntimeFault("call to '" + expr.name + "' has not been analyzed")
            args = [self.evaluate(arg, scope) for arg in expr.arguments]
            function = scope.lookup_function(expr.name, len(args))
            return function.target(list(args))
        if isinstance(expr, ListLiteral):
            return VList([self.evaluate(e, scope) for e in expr.elements])
        raise RuntimeFault("unknown expression " + type(expr).__name__)

    def evaluate_binary(self, expr: Binary, scope: RuntimeScope) -> Value:
        op = expr.op
        left = self.evaluate(expr.left, scope)
        if op == "&&":
            if not self.require_bool(left):
                return VBool(False)
            return VBool(self.require_bool(self.evaluate(expr.right, scope)))
        if op == "||":
            if self.require_bool(left):
                return VBool(True)
            return VBool(self.require_bool(self.evaluate(expr.right, scope)))
        right = self.evaluate(expr.right, scope)
        if op == "==":
            return VBool(_value_eq(left, right))
        if op == "!=":
            return VBool(not _value_eq(left, right))
        if op == "<" or op == ">":
            return VBool(_compare(op, left, right))
        if op == "+" and (isinstance(left, VString) or isinstance(right, VString)):
            return VString(left.to_string() + right.to_string())
        if isinstance(left, VInt):
            if not isinstance(right, VInt):
                raise RuntimeFault("right operand of '" + op + "' must be Integer")
            return VInt(_int_op(op, left.value, right.value))
        if isinstance(left, VDecimal):
            if not isinstance(right, VDecimal):
                raise RuntimeFault("right operand of '" + op + "' must be Decimal")
            return VDecimal(_decimal_op(op, left.value, right.value))
        raise RuntimeFault("invalid operands for '" + op + "'")

    # ── Checks ───────────────────────────────────────────────

    def require_bool(self, value: Value) -> bool:
        if not isinstance(value, VBool):
            raise RuntimeFault("expected Boolean, got " + value.to_string())
        return value.value

    def require_list(self, value: Value, name: str) -> list[Value]:
        if not isinstance(value, VList):
            raise RuntimeFault("variable '" + name + "' does not hold a list")
        return value.elements

    def require_index(self, value: Value, elements: list[Value]) -> int:
        if not isinstance(value, VInt):
            raise RuntimeFault("list index must be Integer")
        if value.value < 0 or value.value >= len(elements):
            raise RuntimeFault(
                "index "
                + str(value.value)
                + " out of bounds for list of length "
                + str(len(elements))
            )
        return value.value


def _compare(op: str, left: Value, right: Value) -> bool:
    if isinstance(left, VInt) and isinstance(right, VInt):
        return _cmp(op, left.value, right.value)
    if isinstance(left, VDecimal) and isinstance(right, VDecimal):
        return _cmp(op, left.value, right.value)
    if isinstance(left, VChar) and isinstance(right, VChar):
        return _cmp(op, left.value, right.value)
    if isinstance(left, VString) and isinstance(right, VString):
        return _cmp(op, left.value, right.value)
    raise RuntimeFault("invalid operands for '" + op + "'")


def _cmp(op: str, a: object, b: object) -> bool:
    if op == "<":
        return a < b  # type: ignore[operator]
    return a > b  # type: ignore[operator]


def _int_op(op: str, a: int, b: int) -> int:
    if op == "+":
        return a + b
    if op == "-":
        return a - b
    if op == "*":
        return a * b
    if op == "/":
        try:
            return _int_div_trunc(a, b)
        except ZeroDivisionError:
            raise RuntimeFault("division by zero") from None
    if op == "^":
        if b < 0:
            raise RuntimeFault("negative exponent " + str(b))
        return a**b
    raise RuntimeFault("unknown operator '" + op + "'")


def _decimal_op(op: str, a: Decimal, b: Decimal) -> Decimal:
    """Exact + - *, and / at the dividend's scale rounded half to even."""
    if op == "+":
        exact = Fraction(a) + Fraction(b)
        exponent = min(_exponent(a), _exponent(b))
    elif op == "-":
        exact = Fraction(a) - Fraction(b)
        exponent = min(_exponent(a), _exponent(b))
    elif op == "*":
        exact = Fraction(a) * Fraction(b)
        exponent = _exponent(a) + _exponent(b)
    elif op == "/":
        if b == 0:
            raise RuntimeFault("division by zero")
        exact = Fraction(a) / Fraction(b)
        exponent = _exponent(a)
    else:
        raise RuntimeFault("unknown operator '" + op + "' for Decimal")
    # round() on a Fraction rounds half to even
    return _decimal_from(round(exact / Fraction(10) ** exponent), exponent)


def run(source: Source, output: Callable[[str], None] | None = None) -> Value:
    """Run an analyzed Source and return the value produced by `main`."""
    return Interpreter(output).run(source)
