"""Lexer, parser, static analyzer and interpreter: the public API."""

from __future__ import annotations

from dataclasses import dataclass, field

from .ast import Source
from .check import analyze as analyze_source
from .emit import to_java
from .errors import (
    AnalysisError as AnalysisError,
    ParseError as ParseError,
    PlcError as PlcError,
    RuntimeFault as RuntimeFault,
)
from .parse import parse as parse
from .runtime import Value, run as run
from .tokens import Token as Token, tokenize as tokenize


@dataclass
class RunResult:
    value: Value
    output: list[str] = field(default_factory=list)


def analyze(text: str) -> Source:
    """Parse and analyze source text. Returns the annotated Source."""
    return analyze_source(parse(text))


def evaluate(text: str) -> RunResult:
    """Parse, analyze and run source text, capturing printed lines."""
    output: list[str] = []
    value = run(analyze(text), output.append)
    return RunResult(value, output)


def emit(text: str) -> str:
    """Parse and analyze source text, then render it as Java."""
    return to_java(analyze(text))
