"""AST node definitions, with slots for the annotations the analyzer fills in."""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .scope import Function as FunctionBinding, Variable
    from .types import Type


# ============================================================
# EXPRESSIONS
# ============================================================


@dataclass
class Expr:
    """Base for all expression nodes. `type` is filled by the analyzer."""

    type: Type | None = field(default=None, init=False, compare=False, repr=False)


@dataclass
class Literal(Expr):
    """Base for literal nodes."""


@dataclass
class NilLiteral(Literal):
    pass


@dataclass
class BoolLiteral(Literal):
    value: bool


@dataclass
class IntLiteral(Literal):
    value: int


@dataclass
class DecimalLiteral(Literal):
    value: Decimal


@dataclass
class CharLiteral(Literal):
    value: str


@dataclass
class StringLiteral(Literal):
    value: str


@dataclass
class Group(Expr):
    """( Binary )"""

    expr: Expr


@dataclass
class Binary(Expr):
    op: str
    left: Expr
    right: Expr


@dataclass
class Access(Expr):
    """name or name[offset]."""

    offset: Expr | None
    name: str
    variable: Variable | None = field(
        default=None, init=False, compare=False, repr=False
    )


@dataclass
class Call(Expr):
    name: str
    arguments: list[Expr]
    function: FunctionBinding | None = field(
        default=None, init=False, compare=False, repr=False
    )


@dataclass
class ListLiteral(Expr):
    """[a, b, ...]; the element type comes from the enclosing declaration."""

    elements: list[Expr]


# ============================================================
# STATEMENTS
# ============================================================


@dataclass
class Stmt:
    """Base for all statement nodes."""


@dataclass
class ExprStmt(Stmt):
    expr: Expr


@dataclass
class DeclarationStmt(Stmt):
    """LET name [: Type] [= value];"""

    name: str
    type_name: str | None
    value: Expr | None
    variable: Variable | None = field(
        default=None, init=False, compare=False, repr=False
    )


@dataclass
class AssignmentStmt(Stmt):
    receiver: Expr
    value: Expr


@dataclass
class IfStmt(Stmt):
    condition: Expr
    then_body: list[Stmt]
    else_body: list[Stmt]


@dataclass
class Case:
    """CASE value: body, or DEFAULT: body when value is None."""

    value: Expr | None
    body: list[Stmt]


@dataclass
class SwitchStmt(Stmt):
    condition: Expr
    cases: list[Case]


@dataclass
class WhileStmt(Stmt):
    condition: Expr
    body: list[Stmt]


@dataclass
class ReturnStmt(Stmt):
    value: Expr


# ============================================================
# TOP LEVEL
# ============================================================


@dataclass
class Global:
    """LIST, VAR or VAL declaration at source level."""

    name: str
    type_name: str
    mutable: bool
    value: Expr | None
    variable: Variable | None = field(
        default=None, init=False, compare=False, repr=False
    )


@dataclass
class Function:
    name: str
    parameters: list[str]
    parameter_type_names: list[str]
    return_type_name: str | None
    body: list[Stmt]
    function: FunctionBinding | None = field(
        default=None, init=False, compare=False, repr=False
    )


@dataclass
class Source:
    globals: list[Global]
    functions: list[Function]
