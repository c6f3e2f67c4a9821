"""Java emitter. Renders an analyzed Source as a Java `Main` class.

Reads the type and binding annotations left by the analyzer and never
mutates the tree.
"""

from __future__ import annotations

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
from .errors import PlcError
from .types import NIL

_JAVA_ESCAPES: dict[str, str] = {
    "\b": "\\b",
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
    "\\": "\\\\",
}


def to_java(source: Source) -> str:
    """Render an analyzed Source as Java source text."""
    return _Emitter().emit_source(source)


class _Emitter:
    _INDENT: str = "    "

    def __init__(self) -> None:
        self._lines: list[str] = []
        self._indent_level: int = 0

    # ── Public ──────────────────────────────────────────────

    def emit_source(self, source: Source) -> str:
        self._lines = ["public class Main {"]
        self._indent_level = 1
        if source.globals:
            self._lines.append("")
            for glob in source.globals:
                self._emit_global(glob)
        self._lines.append("")
        self._emit_line("public static void main(String[] args) {")
        self._indent_level += 1
        self._emit_line("System.exit(new Main().main());")
        self._indent_level -= 1
        self._emit_line("}")
        self._lines.append("")
        for fn in source.functions:
            self._emit_function(fn)
            self._lines.append("")
        self._indent_level = 0
        self._emit_line("}")
        return "\n".join(self._lines) + "\n"

    # ── Helpers ─────────────────────────────────────────────

    def _emit_line(self, line: str) -> None:
        self._lines.append(self._INDENT * self._indent_level + line)

    def _emit_stmt_block(self, stmts: list[Stmt]) -> None:
        self._indent_level += 1
        for stmt in stmts:
            self._emit_stmt(stmt)
        self._indent_level -= 1

    # ── Declarations ────────────────────────────────────────

    def _emit_global(self, glob: Global) -> None:
        if glob.variable is None:
            raise PlcError("global '" + glob.name + "' has not been analyzed")
        line = "" if glob.mutable else "final "
        line += glob.variable.value.jvm_name
        if isinstance(glob.value, ListLiteral):
            line += "[]"
        line += " " + glob.name
        if glob.value is not None:
            line += " = " + self._render_expr(glob.value)
        self._emit_line(line + ";")

    def _emit_function(self, fn: Function) -> None:
        if fn.function is None:
            raise PlcError("function '" + fn.name + "' has not been analyzed")
        signature = fn.function.target
        ret = signature.return_type
        ret_name = "void" if ret == NIL else ret.jvm_name
        params = ", ".join(
            t.jvm_name + " " + name
            for t, name in zip(signature.parameter_types, fn.parameters)
        )
        header = ret_name + " " + fn.name + "(" + params + ") {"
        if not fn.body:
            self._emit_line(header + "}")
            return
        self._emit_line(header)
        self._emit_stmt_block(fn.body)
        self._emit_line("}")

    # ── Statements ──────────────────────────────────────────

    def _emit_stmt(self, stmt: Stmt) -> None:
        if isinstance(stmt, ExprStmt):
            self._emit_line(self._render_expr(stmt.expr) + ";")
        elif isinstance(stmt, DeclarationStmt):
            if stmt.variable is None:
                raise PlcError("declaration '" + stmt.name + "' has not been analyzed")
            line = stmt.variable.value.jvm_name + " " + stmt.name
            if stmt.value is not None:
                line += " = " + self._render_expr(stmt.value)
            self._emit_line(line + ";")
        elif isinstance(stmt, AssignmentStmt):
            self._emit_line(
                self._render_expr(stmt.receiver) + " = " + self._render_expr(stmt.value) + ";"
            )
        elif isinstance(stmt, IfStmt):
            self._emit_line("if (" + self._render_expr(stmt.condition) + ") {")
            self._emit_stmt_block(stmt.then_body)
            if stmt.else_body:
                self._emit_line("} else {")
                self._emit_stmt_block(stmt.else_body)
            self._emit_line("}")
        elif isinstance(stmt, SwitchStmt):
            self._emit_line("switch (" + self._render_expr(stmt.condition) + ") {")
            self._indent_level += 1
            for case in stmt.cases:
                self._emit_case(case)
            self._indent_level -= 1
            self._emit_line("}")
        elif isinstance(stmt, WhileStmt):
            header = "while (" + self._render_expr(stmt.condition) + ") {"
            if not stmt.body:
                self._emit_line(header + "}")
                return
            self._emit_line(header)
            self._emit_stmt_block(stmt.body)
            self._emit_line("}")
        elif isinstance(stmt, ReturnStmt):
            self._emit_line("return " + self._render_expr(stmt.value) + ";")
        else:
            raise PlcError("cannot emit " + type(stmt).__name__)

    def _emit_case(self, case: Case) -> None:
        if case.value is None:
            self._emit_line("default:")
            self._emit_stmt_block(case.body)
            return
        self._emit_line("case " + self._render_expr(case.value) + ":")
        self._emit_stmt_block(case.body)
        self._indent_level += 1
        self._emit_line("break;")
        self._indent_level -= 1

    # ── Expressions ─────────────────────────────────────────

    def _render_expr(self, expr: Expr) -> str:
        if expr.type is None:
            raise PlcError(type(expr).__name__ + " has not been analyzed")
        if isinstance(expr, NilLiteral):
            return "null"
        if isinstance(expr, BoolLiteral):
            return "true" if expr.value else "false"
        if isinstance(expr, IntLiteral):
            return str(expr.value)
        if isinstance(expr, DecimalLiteral):
            return str(expr.value)
        if isinstance(expr, CharLiteral):
            return "'" + self._escape_text(expr.value, "'") + "'"
        if isinstance(expr, StringLiteral):
            return '"' + self._escape_text(expr.value, '"') + '"'
        if isinstance(expr, Group):
            return "(" + self._render_expr(expr.expr) + ")"
        if isinstance(expr, Binary):
            left = self._render_expr(expr.left)
            right = self._render_expr(expr.right)
            if expr.op == "^":
                return "Math.pow(" + left + ", " + right + ")"
            return left + " " + expr.op + " " + right
        if isinstance(expr, Access):
            if expr.offset is None:
                return expr.name
            return expr.name + "[" + self._render_expr(expr.offset) + "]"
        if isinstance(expr, Call):
            if expr.function is None:
                raise PlcError("call to '" + expr.name + "' has not been analyzed")
            args = ", ".join(self._render_expr(a) for a in expr.arguments)
            return expr.function.target.jvm_name + "(" + args + ")"
        if isinstance(expr, ListLiteral):
            return "{" + ", ".join(self._render_expr(e) for e in expr.elements) + "}"
        raise PlcError("cannot emit " + type(expr).__name__)

    def _escape_text(self, s: str, quote: str) -> str:
        out = ""
        for c in s:
            if c == quote:
                out += "\\" + c
            elif c in _JAVA_ESCAPES:
                out += _JAVA_ESCAPES[c]
            else:
                out += c
        return out
