"""Tests for the tokenizer."""

import pytest

from plc.ast import IntLiteral, ReturnStmt
from plc.errors import ParseError
from plc.parse import parse
from plc.tokens import (
    TK_DECIMAL,
    TK_IDENTIFIER,
    TK_INTEGER,
    TK_OPERATOR,
    TK_STRING,
    Cursor,
    Token,
    decode_literal,
    tokenize,
)


def _kinds(text: str) -> list[str]:
    return [t.kind for t in tokenize(text)]


def test_declaration_tokens():
    assert tokenize("LET x = 5;") == [
        Token(TK_IDENTIFIER, "LET", 0),
        Token(TK_IDENTIFIER, "x", 4),
        Token(TK_OPERATOR, "=", 6),
        Token(TK_INTEGER, "5", 8),
        Token(TK_OPERATOR, ";", 9),
    ]


def test_whitespace_set():
    tokens = tokenize("a\tb\r\nc\bd")
    assert [t.literal for t in tokens] == ["a", "b", "c", "d"]
    assert [t.index for t in tokens] == [0, 2, 5, 7]


def test_numbers():
    assert _kinds("1..0") == [TK_INTEGER, TK_OPERATOR, TK_OPERATOR, TK_INTEGER]
    assert _kinds("-0.5") == [TK_DECIMAL]
    assert _kinds("-0") == [TK_OPERATOR, TK_INTEGER]
    assert _kinds("007") == [TK_INTEGER, TK_INTEGER, TK_INTEGER]


def test_method_call_shape():
    tokens = tokenize("1.toString()")
    assert [t.literal for t in tokens] == ["1", ".", "toString", "(", ")"]
    assert [t.index for t in tokens] == [0, 1, 2, 10, 11]


def test_string_literal_is_verbatim():
    (tok,) = tokenize('"a\\nb"')
    assert tok.kind == TK_STRING
    assert tok.literal == '"a\\nb"'


def test_unterminated_string_offset():
    with pytest.raises(ParseError) as exc:
        tokenize('"unterminated')
    assert exc.value.msg == "unterminated string literal"
    assert exc.value.index == 13
    assert str(exc.value) == "unterminated string literal at index 13"


@pytest.mark.parametrize(
    "text,msg,index",
    [
        ("''", "invalid character literal", 1),
        ("'ab'", "unterminated character literal", 2),
        ('"a\\z"', "invalid escape sequence", 3),
        ('"a\rb"', "unescaped line break in string literal", 2),
    ],
)
def test_lex_errors(text: str, msg: str, index: int):
    with pytest.raises(ParseError) as exc:
        tokenize(text)
    assert exc.value.msg == msg
    assert exc.value.index == index


def test_decode_literal():
    assert decode_literal("'c'") == "c"
    assert decode_literal("'\\''") == "'"
    assert decode_literal('"a\\tb\\\\c"') == "a\tb\\c"
    assert decode_literal('"\\b\\n\\r\\""') == '\b\n\r"'
    assert decode_literal('""') == ""


def test_cursor():
    cursor = Cursor("abc")
    assert cursor.has(2)
    assert not cursor.has(3)
    assert cursor.advance() == "a"
    assert cursor.get(0) == "b"
    assert cursor.get(-1) == "a"
    assert cursor.index == 1


@pytest.mark.parametrize(
    "text", ["0", "7", "-12", "2147483647", "-2147483648", "123456789012345"]
)
def test_integer_text_survives_lex_and_parse(text: str):
    assert tokenize(text) == [Token(TK_INTEGER, text, 0)]
    source = parse("FUN main(): Integer DO RETURN " + text + "; END")
    stmt = source.functions[0].body[0]
    assert isinstance(stmt, ReturnStmt)
    assert isinstance(stmt.value, IntLiteral)
    assert str(stmt.value.value) == text
