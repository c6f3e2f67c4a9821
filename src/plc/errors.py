"""Error kinds raised by the pipeline stages."""

from __future__ import annotations


class ParseError(Exception):
    """Lexical or grammar error at an absolute character offset."""

    def __init__(self, msg: str, index: int):
        self.msg: str = msg
        self.index: int = index
        super().__init__(msg + " at index " + str(index))


class PlcError(Exception):
    """Base error for analysis and evaluation."""

    def __init__(self, msg: str):
        super().__init__(msg)
        self.msg = msg


class AnalysisError(PlcError):
    """Static type or binding violation."""


class RuntimeFault(PlcError):
    """Failure while evaluating a checked program."""
