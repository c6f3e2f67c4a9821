"""Tokenizer that lexes source text into a flat token list."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Generic, Sequence, TypeVar

from .errors import ParseError

logger = logging.getLogger(__name__)

# Token kind constants
TK_IDENTIFIER = "IDENTIFIER"
TK_INTEGER = "INTEGER"
TK_DECIMAL = "DECIMAL"
TK_CHARACTER = "CHARACTER"
TK_STRING = "STRING"
TK_OPERATOR = "OPERATOR"

WHITESPACE: str = " \b\n\r\t"

# Checked before falling back to a single-character operator
MULTI_OPS: list[str] = ["!=", "==", "&&", "||"]

ESCAPE_MAP: dict[str, str] = {
    "b": "\b",
    "n": "\n",
    "r": "\r",
    "t": "\t",
    "'": "'",
    '"': '"',
    "\\": "\\",
}


@dataclass(frozen=True)
class Token:
    """A token with kind, verbatim literal text, and start offset."""

    kind: str
    literal: str
    index: int


T = TypeVar("T")


class Cursor(Generic[T]):
    """Position over an ordered sequence of characters or tokens."""

    def __init__(self, items: Sequence[T]):
        self.items: Sequence[T] = items
        self.index: int = 0

    def has(self, offset: int) -> bool:
        return self.index + offset < len(self.items)

    def get(self, offset: int) -> T:
        return self.items[self.index + offset]

    def advance(self) -> T:
        item = self.items[self.index]
        self.index += 1
        return item


def _is_digit(c: str) -> bool:
    return c >= "0" and c <= "9"


def _is_nonzero_digit(c: str) -> bool:
    return c >= "1" and c <= "9"


def _is_alpha(c: str) -> bool:
    return (c >= "a" and c <= "z") or (c >= "A" and c <= "Z")


def _is_identifier_start(c: str) -> bool:
    return _is_alpha(c) or c == "@"


def _is_identifier_part(c: str) -> bool:
    return _is_alpha(c) or _is_digit(c) or c == "_" or c == "-"


def _is_escape_char(c: str) -> bool:
    return c in ESCAPE_MAP


def _is_line_break(c: str) -> bool:
    return c == "\n" or c == "\r"


class Lexer:
    """Single-pass lexer with short fixed lookahead."""

    def __init__(self, text: str):
        self.text: str = text
        self.chars: Cursor[str] = Cursor(text)
        self.start: int = 0

    # ── Helpers ──────────────────────────────────────────────

    def peek(self, *patterns: str | Callable[[str], bool]) -> bool:
        for offset, pattern in enumerate(patterns):
            if not self.chars.has(offset):
                return False
            c = self.chars.get(offset)
            if isinstance(pattern, str):
                if c != pattern:
                    return False
            elif not pattern(c):
                return False
        return True

    def match(self, *patterns: str | Callable[[str], bool]) -> bool:
        if not self.peek(*patterns):
            return False
        for _ in patterns:
            self.chars.advance()
        return True

    def emit(self, kind: str) -> Token:
        return Token(kind, self.text[self.start : self.chars.index], self.start)

    def error(self, msg: str) -> ParseError:
        return ParseError(msg, self.chars.index)

    # ── Tokens ───────────────────────────────────────────────

    def lex(self) -> list[Token]:
        tokens: list[Token] = []
        while self.chars.has(0):
            if self.chars.get(0) in WHITESPACE:
                self.chars.advance()
                continue
            self.start = self.chars.index
            tokens.append(self.lex_token())
        return tokens

    def lex_token(self) -> Token:
        if self.peek(_is_identifier_start):
            return self.lex_identifier()
        if (
            self.peek(_is_digit)
            or self.peek("-", _is_nonzero_digit)
            or self.peek("-", "0", ".", _is_digit)
        ):
            return self.lex_number()
        if self.peek("'"):
            return self.lex_character()
        if self.peek('"'):
            return self.lex_string()
        return self.lex_operator()

    def lex_identifier(self) -> Token:
        """Identifier = ( '@' | Letter ) ( Letter | Digit | '_' | '-' )*"""
        self.chars.advance()
        while self.match(_is_identifier_part):
            pass
        return self.emit(TK_IDENTIFIER)

    def lex_number(self) -> Token:
        """Number = '-'? ( '0' | NonZero Digit* ) ( '.' Digit+ )?"""
        self.match("-")
        if not self.match("0"):
            while self.match(_is_digit):
                pass
        if self.match(".", _is_digit):
            while self.match(_is_digit):
                pass
            return self.emit(TK_DECIMAL)
        return self.emit(TK_INTEGER)

    def lex_character(self) -> Token:
        self.chars.advance()
        if self.peek("\\"):
            self.lex_escape()
        elif self.peek(lambda c: c != "'" and c != "\\" and not _is_line_break(c)):
            self.chars.advance()
        else:
            raise self.error("invalid character literal")
        if not self.match("'"):
            raise self.error("unterminated character literal")
        return self.emit(TK_CHARACTER)

    def lex_string(self) -> Token:
        self.chars.advance()
        while self.chars.has(0) and not self.peek('"'):
            if self.peek("\\"):
                self.lex_escape()
            elif self.peek(_is_line_break):
                raise self.error("unescaped line break in string literal")
            else:
                self.chars.advance()
        if not self.match('"'):
            raise self.error("unterminated string literal")
        return self.emit(TK_STRING)

    def lex_escape(self) -> None:
        self.chars.advance()
        if not self.match(_is_escape_char):
            raise self.error("invalid escape sequence")

    def lex_operator(self) -> Token:
        for op in MULTI_OPS:
            if self.match(*op):
                return self.emit(TK_OPERATOR)
        self.chars.advance()
        return self.emit(TK_OPERATOR)


def tokenize(text: str) -> list[Token]:
    """Tokenize source text into an ordered token list."""
    tokens = Lexer(text).lex()
    logger.debug("lexed %d tokens", len(tokens))
    return tokens


def decode_literal(literal: str) -> str:
    """Strip the delimiters from a character/string literal and resolve escapes."""
    body = literal[1:-1]
    chars: list[str] = []
    i = 0
    while i < len(body):
        c = body[i]
        if c == "\\" and i + 1 < len(body):
            chars.append(ESCAPE_MAP[body[i + 1]])
            i += 2
        else:
            chars.append(c)
            i += 1
    return "".join(chars)
