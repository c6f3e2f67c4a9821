"""Static analyzer that resolves names and assigns a type to every expression."""

from __future__ import annotations

import logging
import math

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
from .errors import AnalysisError
from .scope import Scope, Signature
from .types import (
    ANY,
    BOOLEAN,
    CHARACTER,
    COMPARABLE,
    DECIMAL,
    INTEGER,
    NIL,
    STRING,
    Type,
    get_type,
    require_assignable,
)

logger = logging.getLogger(__name__)

StaticScope = Scope[Type, Signature]

INT_MIN: int = -(2**31)
INT_MAX: int = 2**31 - 1


def new_static_scope() -> StaticScope:
    """Root scope with the `print` built-in registered."""
    scope: StaticScope = Scope(None, AnalysisError)
    scope.define_function("print", 1, Signature([ANY], NIL, "System.out.println"))
    return scope


class Analyzer:
    def __init__(self, scope: StaticScope | None = None) -> None:
        self.scope: StaticScope = scope if scope is not None else new_static_scope()
        self.return_type: Type | None = None

    def error(self, msg: str) -> AnalysisError:
        return AnalysisError(msg)

    # ============================================================
    # SOURCE
    # ============================================================

    def analyze_source(self, source: Source) -> Source:
        for glob in source.globals:
            self.analyze_global(glob)
        # All signatures go in before any body so calls can refer forward.
        for fn in source.functions:
            self.declare_function(fn)
        for fn in source.functions:
            self.analyze_function(fn)
        main = self.scope.get_function("main", 0)
        if main is None or main.target.return_type != INTEGER:
            raise self.error("missing function 'main' with no parameters returning Integer")
        return source

    def analyze_global(self, glob: Global) -> None:
        declared = get_type(glob.type_name)
        if glob.value is not None:
            if isinstance(glob.value, ListLiteral):
                glob.value.type = declared
            self.check_expr(glob.value, self.scope)
            require_assignable(declared, self.type_of(glob.value))
        glob.variable = self.scope.define_variable(glob.name, declared, glob.mutable)

    def declare_function(self, fn: Function) -> None:
        parameter_types = [get_type(name) for name in fn.parameter_type_names]
        return_type = NIL
        if fn.return_type_name is not None:
            return_type = get_type(fn.return_type_name)
        fn.function = self.scope.define_function(
            fn.name, len(fn.parameters), Signature(parameter_types, return_type, fn.name)
        )

    def analyze_function(self, fn: Function) -> None:
        assert fn.function is not None
        signature = fn.function.target
        scope = self.scope.child()
        for name, typ in zip(fn.parameters, signature.parameter_types):
            scope.define_variable(name, typ)
        self.return_type = signature.return_type
        try:
            for stmt in fn.body:
                self.check_stmt(stmt, scope)
                if isinstance(stmt, ReturnStmt):
                    break
        finally:
            self.return_type = None

    # ============================================================
    # STATEMENTS
    # ============================================================

    def check_block(self, stmts: list[Stmt], scope: StaticScope) -> None:
        for stmt in stmts:
            self.check_stmt(stmt, scope)

    def check_stmt(self, stmt: Stmt, scope: StaticScope) -> None:
        if isinstance(stmt, ExprStmt):
            if not isinstance(stmt.expr, Call):
                raise self.error("expression statement must be a function call")
            self.check_expr(stmt.expr, scope)
        elif isinstance(stmt, DeclarationStmt):
            self.check_declaration(stmt, scope)
        elif isinstance(stmt, AssignmentStmt):
            if not isinstance(stmt.receiver, Access):
                raise self.error("assignment receiver must be a variable access")
            self.check_expr(stmt.receiver, scope)
            self.check_expr(stmt.value, scope)
            require_assignable(self.type_of(stmt.receiver), self.type_of(stmt.value))
        elif isinstance(stmt, IfStmt):
            self.require_condition(stmt.condition, scope, "IF")
            if not stmt.then_body:
                raise self.error("IF requires at least one statement in its then-block")
            self.check_block(stmt.then_body, scope.child())
            self.check_block(stmt.else_body, scope.child())
        elif isinstance(stmt, SwitchStmt):
            self.check_switch(stmt, scope)
        elif isinstance(stmt, WhileStmt):
            self.require_condition(stmt.condition, scope, "WHILE")
            self.check_block(stmt.body, scope.child())
        elif isinstance(stmt, ReturnStmt):
            self.check_expr(stmt.value, scope)
            if self.return_type is None:
                raise self.error("RETURN outside of a function")
            require_assignable(self.return_type, self.type_of(stmt.value))
        else:
            raise self.error("unknown statement " + type(stmt).__name__)

    def check_declaration(self, stmt: DeclarationStmt, scope: StaticScope) -> None:
        if stmt.type_name is None and stmt.value is None:
            raise self.error("declaration of '" + stmt.name + "' needs a type or a value")
        declared: Type | None = None
        if stmt.type_name is not None:
            declared = get_type(stmt.type_name)
        if stmt.value is not None:
            self.check_expr(stmt.value, scope)
            actual = self.type_of(stmt.value)
            if declared is None:
                declared = actual
            require_assignable(declared, actual)
        assert declared is not None
        stmt.variable = scope.define_variable(stmt.name, declared)

    def require_condition(self, cond: Expr, scope: StaticScope, keyword: str) -> None:
        self.check_expr(cond, scope)
        if self.type_of(cond) != BOOLEAN:
            raise self.error(
                keyword + " condition must be Boolean, got " + self.type_of(cond).name
            )

    def check_switch(self, stmt: SwitchStmt, scope: StaticScope) -> None:
        self.check_expr(stmt.condition, scope)
        cond_type = self.type_of(stmt.condition)
        if not stmt.cases:
            raise self.error("SWITCH requires a DEFAULT case")
        for case in stmt.cases[:-1]:
            if case.value is None:
                raise self.error("DEFAULT must be the last case of a SWITCH")
            self.check_expr(case.value, scope)
            if self.type_of(case.value) != cond_type:
                raise self.error(
                    "CASE value must be "
                    + cond_type.name
                    + ", got "
                    + self.type_of(case.value).name
                )
        if stmt.cases[-1].value is not None:
            raise self.error("last case of a SWITCH must be DEFAULT")
        for case in stmt.cases:
            self.check_case(case, scope.child())

    def check_case(self, case: Case, scope: StaticScope) -> None:
        self.check_block(case.body, scope)

    # ============================================================
    # EXPRESSIONS
    # ============================================================

    def type_of(self, expr: Expr) -> Type:
        assert expr.type is not None
        return expr.type

    def check_expr(self, expr: Expr, scope: StaticScope) -> None:
        if isinstance(expr, NilLiteral):
            expr.type = NIL
        elif isinstance(expr, BoolLiteral):
            expr.type = BOOLEAN
        elif isinstance(expr, IntLiteral):
            if expr.value < INT_MIN or expr.value > INT_MAX:
                raise self.error("integer literal " + str(expr.value) + " out of 32-bit range")
            expr.type = INTEGER
        elif isinstance(expr, DecimalLiteral):
            if math.isinf(float(expr.value)):
                raise self.error("decimal literal " + str(expr.value) + " out of 64-bit range")
            expr.type = DECIMAL
        elif isinstance(expr, CharLiteral):
            expr.type = CHARACTER
        elif isinstance(expr, StringLiteral):
            expr.type = STRING
        elif isinstance(expr, Group):
            if not isinstance(expr.expr, Binary):
                raise self.error("grouped expression must be a binary expression")
            self.check_expr(expr.expr, scope)
            expr.type = self.type_of(expr.expr)
        elif isinstance(expr, Binary):
            self.check_expr(expr.left, scope)
            self.check_expr(expr.right, scope)
            expr.type = self.binary_type(
                expr.op, self.type_of(expr.left), self.type_of(expr.right)
            )
        elif isinstance(expr, Access):
            if expr.offset is not None:
                self.check_expr(expr.offset, scope)
                if self.type_of(expr.offset) != INTEGER:
                    raise self.error(
                        "list index must be Integer, got " + self.type_of(expr.offset).name
                    )
            expr.variable = scope.lookup_variable(expr.name)
            expr.type = expr.variable.value
        elif isinstance(expr, Call):
            expr.function = scope.lookup_function(expr.name, len(expr.arguments))
            signature = expr.function.target
            for arg, param_type in zip(expr.arguments, signature.parameter_types):
                self.check_expr(arg, scope)
                require_assignable(param_type, self.type_of(arg))
            expr.type = signature.return_type
        elif isinstance(expr, ListLiteral):
            if expr.type is None:
                raise self.error("list literal needs a declared element type")
            for element in expr.elements:
                self.check_expr(element, scope)
                require_assignable(expr.type, self.type_of(element))
        else:
            raise self.error("unknown expression " + type(expr).__name__)

    def binary_type(self, op: str, left: Type, right: Type) -> Type:
        if op == "&&" or op == "||":
            require_assignable(BOOLEAN, left)
            require_assignable(BOOLEAN, right)
            return BOOLEAN
        if op in ("<", ">", "==", "!="):
            require_assignable(COMPARABLE, left)
            require_assignable(COMPARABLE, right)
            if left != right:
                raise self.error(
                    "operands of '" + op + "' must have the same type, got "
                    + left.name + " and " + right.name
                )
            return BOOLEAN
        if op == "+" and (left == STRING or right == STRING):
            return STRING
        if op in ("+", "-", "*", "/"):
            if left == INTEGER and right == INTEGER:
                return INTEGER
            if left == DECIMAL and right == DECIMAL:
                return DECIMAL
            raise self.error(
                "operands of '" + op + "' must both be Integer or both Decimal, got "
                + left.name + " and " + right.name
            )
        if op == "^":
            if left == INTEGER and right == INTEGER:
                return INTEGER
            raise self.error(
                "operands of '^' must be Integer, got " + left.name + " and " + right.name
            )
        raise self.error("unknown operator '" + op + "'")


def analyze(source: Source, scope: StaticScope | None = None) -> Source:
    """Analyze a parsed Source in place. Raises AnalysisError on the first violation."""
    analyzer = Analyzer(scope)
    analyzer.analyze_source(source)
    logger.debug("analyzed %d functions", len(source.functions))
    return source
