"""Recursive descent parser, one method per grammar production."""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Callable

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
from .errors import ParseError
from .tokens import (
    TK_CHARACTER,
    TK_DECIMAL,
    TK_IDENTIFIER,
    TK_INTEGER,
    TK_STRING,
    Cursor,
    Token,
    decode_literal,
    tokenize,
)

logger = logging.getLogger(__name__)

GLOBAL_KEYWORDS: set[str] = {"LIST", "VAR", "VAL"}

# Keywords that close a block
BLOCK_END: set[str] = {"END", "ELSE", "CASE", "DEFAULT"}

LOGICAL_OPS: set[str] = {"&&", "||"}
COMPARE_OPS: set[str] = {"<", ">", "==", "!="}
ADDITIVE_OPS: set[str] = {"+", "-"}
MULTIPLICATIVE_OPS: set[str] = {"*", "/", "^"}


class Parser:
    """Recursive descent parser over a token list."""

    def __init__(self, tokens: list[Token]):
        self.tokens: Cursor[Token] = Cursor(tokens)

    # ── Helpers ──────────────────────────────────────────────

    def at_end(self) -> bool:
        return not self.tokens.has(0)

    def current(self) -> Token | None:
        if self.at_end():
            return None
        return self.tokens.get(0)

    def advance(self) -> Token:
        return self.tokens.advance()

    def at(self, value: str) -> bool:
        tok = self.current()
        return tok is not None and tok.literal == value

    def at_any(self, values: set[str]) -> bool:
        tok = self.current()
        return tok is not None and tok.literal in values

    def at_type(self, kind: str) -> bool:
        tok = self.current()
        return tok is not None and tok.kind == kind

    def expect(self, value: str) -> Token:
        if not self.at(value):
            raise self.error("expected '" + value + "'")
        return self.advance()

    def expect_ident(self) -> Token:
        if not self.at_type(TK_IDENTIFIER):
            raise self.error("expected identifier")
        return self.advance()

    def offset(self) -> int:
        """Offset of the current token, or just past the last one at end of input."""
        tok = self.current()
        if tok is not None:
            return tok.index
        if self.tokens.index == 0:
            return 0
        last = self.tokens.get(-1)
        return last.index + len(last.literal)

    def error(self, msg: str) -> ParseError:
        tok = self.current()
        if tok is None:
            return ParseError(msg + ", got end of input", self.offset())
        return ParseError(msg + ", got '" + tok.literal + "'", self.offset())

    # ── Top Level ────────────────────────────────────────────

    def parse_source(self) -> Source:
        """Source = Global* Function+"""
        globals_: list[Global] = []
        functions: list[Function] = []
        while self.at_any(GLOBAL_KEYWORDS):
            globals_.append(self.parse_global())
        while self.at("FUN"):
            functions.append(self.parse_function())
        if not functions or not self.at_end():
            raise self.error("expected 'FUN'")
        return Source(globals_, functions)

    def parse_global(self) -> Global:
        """Global = ( List | Mutable | Immutable ) ';'"""
        if self.at("LIST"):
            result = self.parse_list()
        elif self.at("VAR"):
            result = self.parse_mutable()
        else:
            result = self.parse_immutable()
        self.expect(";")
        return result

    def parse_list(self) -> Global:
        """List = 'LIST' Ident ':' Ident '=' '[' Expr ( ',' Expr )* ']'"""
        self.expect("LIST")
        name = self.expect_ident().literal
        self.expect(":")
        type_name = self.expect_ident().literal
        self.expect("=")
        self.expect("[")
        elements = [self.parse_expr()]
        while self.at(","):
            self.advance()
            elements.append(self.parse_expr())
        self.expect("]")
        return Global(name, type_name, True, ListLiteral(elements))

    def parse_mutable(self) -> Global:
        """Mutable = 'VAR' Ident ':' Ident ( '=' Expr )?"""
        self.expect("VAR")
        name = self.expect_ident().literal
        self.expect(":")
        type_name = self.expect_ident().literal
        value: Expr | None = None
        if self.at("="):
            self.advance()
            value = self.parse_expr()
        return Global(name, type_name, True, value)

    def parse_immutable(self) -> Global:
        """Immutable = 'VAL' Ident ':' Ident '=' Expr"""
        self.expect("VAL")
        name = self.expect_ident().literal
        self.expect(":")
        type_name = self.expect_ident().literal
        self.expect("=")
        return Global(name, type_name, False, self.parse_expr())

    def parse_function(self) -> Function:
        """Function = 'FUN' Ident '(' Params? ')' ( ':' Ident )? 'DO' Block 'END'"""
        self.expect("FUN")
        name = self.expect_ident().literal
        self.expect("(")
        parameters: list[str] = []
        parameter_type_names: list[str] = []
        if not self.at(")"):
            self.parse_param(parameters, parameter_type_names)
            while self.at(","):
                self.advance()
                self.parse_param(parameters, parameter_type_names)
        self.expect(")")
        return_type_name: str | None = None
        if self.at(":"):
            self.advance()
            return_type_name = self.expect_ident().literal
        self.expect("DO")
        body = self.parse_block()
        self.expect("END")
        return Function(name, parameters, parameter_type_names, return_type_name, body)

    def parse_param(self, names: list[str], type_names: list[str]) -> None:
        """Param = Ident ':' Ident"""
        names.append(self.expect_ident().literal)
        self.expect(":")
        type_names.append(self.expect_ident().literal)

    def parse_block(self) -> list[Stmt]:
        stmts: list[Stmt] = []
        while not self.at_end() and not self.at_any(BLOCK_END):
            stmts.append(self.parse_stmt())
        return stmts

    # ── Statements ───────────────────────────────────────────

    def parse_stmt(self) -> Stmt:
        if self.at("LET"):
            return self.parse_declaration_stmt()
        if self.at("SWITCH"):
            return self.parse_switch_stmt()
        if self.at("IF"):
            return self.parse_if_stmt()
        if self.at("WHILE"):
            return self.parse_while_stmt()
        if self.at("RETURN"):
            return self.parse_return_stmt()
        return self.parse_expr_stmt()

    def parse_expr_stmt(self) -> Stmt:
        """ExprStmt = Expr ( '=' Expr )? ';'"""
        expr = self.parse_expr()
        stmt: Stmt
        if self.at("="):
            self.advance()
            stmt = AssignmentStmt(expr, self.parse_expr())
        else:
            stmt = ExprStmt(expr)
        self.expect(";")
        return stmt

    def parse_declaration_stmt(self) -> DeclarationStmt:
        """Declaration = 'LET' Ident ( ':' Ident )? ( '=' Expr )? ';'"""
        self.expect("LET")
        name = self.expect_ident().literal
        type_name: str | None = None
        if self.at(":"):
            self.advance()
            type_name = self.expect_ident().literal
        value: Expr | None = None
        if self.at("="):
            self.advance()
            value = self.parse_expr()
        self.expect(";")
        return DeclarationStmt(name, type_name, value)

    def parse_if_stmt(self) -> IfStmt:
        """If = 'IF' Expr 'DO' Block ( 'ELSE' Block )? 'END'"""
        self.expect("IF")
        condition = self.parse_expr()
        self.expect("DO")
        then_body = self.parse_block()
        else_body: list[Stmt] = []
        if self.at("ELSE"):
            self.advance()
            else_body = self.parse_block()
        self.expect("END")
        return IfStmt(condition, then_body, else_body)

    def parse_switch_stmt(self) -> SwitchStmt:
        """Switch = 'SWITCH' Expr Case* Default 'END'"""
        self.expect("SWITCH")
        condition = self.parse_expr()
        cases: list[Case] = []
        while self.at("CASE"):
            cases.append(self.parse_case())
        cases.append(self.parse_default())
        self.expect("END")
        return SwitchStmt(condition, cases)

    def parse_case(self) -> Case:
        """Case = 'CASE' Expr ':' Block"""
        self.expect("CASE")
        value = self.parse_expr()
        self.expect(":")
        return Case(value, self.parse_block())

    def parse_default(self) -> Case:
        """Default = 'DEFAULT' ':'? Block"""
        self.expect("DEFAULT")
        if self.at(":"):
            self.advance()
        return Case(None, self.parse_block())

    def parse_while_stmt(self) -> WhileStmt:
        """While = 'WHILE' Expr 'DO' Block 'END'"""
        self.expect("WHILE")
        condition = self.parse_expr()
        self.expect("DO")
        body = self.parse_block()
        self.expect("END")
        return WhileStmt(condition, body)

    def parse_return_stmt(self) -> ReturnStmt:
        """Return = 'RETURN' Expr ';'"""
        self.expect("RETURN")
        value = self.parse_expr()
        self.expect(";")
        return ReturnStmt(value)

    # ── Expressions ──────────────────────────────────────────

    def parse_expr(self) -> Expr:
        return self.parse_logical()

    def _parse_level(self, ops: set[str], operand: Callable[[], Expr]) -> Expr:
        left = operand()
        while self.at_any(ops):
            op = self.advance().literal
            right = operand()
            left = Binary(op, left, right)
        return left

    def parse_logical(self) -> Expr:
        """Logical = Comparison ( ( '&&' | '||' ) Comparison )*"""
        return self._parse_level(LOGICAL_OPS, self.parse_comparison)

    def parse_comparison(self) -> Expr:
        """Comparison = Additive ( ( '<' | '>' | '==' | '!=' ) Additive )*"""
        return self._parse_level(COMPARE_OPS, self.parse_additive)

    def parse_additive(self) -> Expr:
        """Additive = Multiplicative ( ( '+' | '-' ) Multiplicative )*"""
        return self._parse_level(ADDITIVE_OPS, self.parse_multiplicative)

    def parse_multiplicative(self) -> Expr:
        """Multiplicative = Primary ( ( '*' | '/' | '^' ) Primary )*"""
        return self._parse_level(MULTIPLICATIVE_OPS, self.parse_primary)

    def parse_primary(self) -> Expr:
        tok = self.current()
        if tok is None:
            raise self.error("expected expression")
        if tok.literal == "NIL":
            self.advance()
            return NilLiteral()
        if tok.literal == "TRUE":
            self.advance()
            return BoolLiteral(True)
        if tok.literal == "FALSE":
            self.advance()
            return BoolLiteral(False)
        if tok.kind == TK_INTEGER:
            self.advance()
            return IntLiteral(int(tok.literal))
        if tok.kind == TK_DECIMAL:
            self.advance()
            value = Decimal(tok.literal)
            if value.is_zero():
                # No negative zero: -0.0 reads as 0.0
                value = value.copy_abs()
            return DecimalLiteral(value)
        if tok.kind == TK_CHARACTER:
            self.advance()
            return CharLiteral(decode_literal(tok.literal))
        if tok.kind == TK_STRING:
            self.advance()
            return StringLiteral(decode_literal(tok.literal))
        if tok.literal == "(":
            return self.parse_group()
        if tok.kind == TK_IDENTIFIER:
            return self.parse_identifier()
        raise self.error("expected expression")

    def parse_group(self) -> Group:
        """Group = '(' Binary ')'"""
        self.expect("(")
        start = self.offset()
        inner = self.parse_expr()
        if not isinstance(inner, Binary):
            raise ParseError("grouped expression must be a binary expression", start)
        self.expect(")")
        return Group(inner)

    def parse_identifier(self) -> Expr:
        """Ident ( '(' Args? ')' | '[' Expr ']' )?"""
        name = self.advance().literal
        if self.at("("):
            self.advance()
            arguments: list[Expr] = []
            if not self.at(")"):
                arguments.append(self.parse_expr())
                while self.at(","):
                    self.advance()
                    arguments.append(self.parse_expr())
            self.expect(")")
            return Call(name, arguments)
        if self.at("["):
            self.advance()
            offset = self.parse_expr()
            self.expect("]")
            return Access(offset, name)
        return Access(None, name)


def parse_tokens(tokens: list[Token]) -> Source:
    """Parse a token list into a Source AST."""
    source = Parser(tokens).parse_source()
    logger.debug(
        "parsed %d globals, %d functions", len(source.globals), len(source.functions)
    )
    return source


def parse(text: str) -> Source:
    """Tokenize and parse source text."""
    return parse_tokens(tokenize(text))
