"""Chained lexical scopes shared by the analyzer and the interpreter.

The analyzer instantiates `Scope` with static payloads (a `Type` per
variable, a `Signature` per function); the interpreter instantiates it with
runtime values and callables. Both go through the same lookup and shadowing
rules below.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeVar

from .errors import PlcError
from .types import Type

V = TypeVar("V")
F = TypeVar("F")


@dataclass
class Variable(Generic[V]):
    name: str
    value: V
    mutable: bool = True


@dataclass
class Function(Generic[F]):
    """A callable binding, keyed by (name, arity)."""

    name: str
    arity: int
    target: F


@dataclass
class Signature:
    """Static payload of a function binding."""

    parameter_types: list[Type]
    return_type: Type
    jvm_name: str


class Scope(Generic[V, F]):
    def __init__(
        self, parent: Scope[V, F] | None, error: type[PlcError] = PlcError
    ) -> None:
        self.parent: Scope[V, F] | None = parent
        self.error: type[PlcError] = error
        self.variables: dict[str, Variable[V]] = {}
        self.functions: dict[tuple[str, int], Function[F]] = {}

    def child(self) -> Scope[V, F]:
        return Scope(self, self.error)

    # ── Variables ────────────────────────────────────────────

    def define_variable(self, name: str, value: V, mutable: bool = True) -> Variable[V]:
        if name in self.variables:
            raise self.error("variable '" + name + "' is already defined in this scope")
        variable = Variable(name, value, mutable)
        self.variables[name] = variable
        return variable

    def get_variable(self, name: str) -> Variable[V] | None:
        scope: Scope[V, F] | None = self
        while scope is not None:
            if name in scope.variables:
                return scope.variables[name]
            scope = scope.parent
        return None

    def lookup_variable(self, name: str) -> Variable[V]:
        variable = self.get_variable(name)
        if variable is None:
            raise self.error("undefined variable '" + name + "'")
        return variable

    # ── Functions ────────────────────────────────────────────

    def define_function(self, name: str, arity: int, target: F) -> Function[F]:
        key = (name, arity)
        if key in self.functions:
            raise self.error(
                "function '" + name + "/" + str(arity) + "' is already defined in this scope"
            )
        function = Function(name, arity, target)
        self.functions[key] = function
        return function

    def get_function(self, name: str, arity: int) -> Function[F] | None:
        scope: Scope[V, F] | None = self
        while scope is not None:
            if (name, arity) in scope.functions:
                return scope.functions[(name, arity)]
            scope = scope.parent
        return None

    def lookup_function(self, name: str, arity: int) -> Function[F]:
        function = self.get_function(name, arity)
        if function is None:
            raise self.error("undefined function '" + name + "/" + str(arity) + "'")
        return function
