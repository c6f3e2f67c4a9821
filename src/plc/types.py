"""Static types: the closed type set and the assignability relation."""

from __future__ import annotations

from dataclasses import dataclass

from .errors import AnalysisError


@dataclass(frozen=True)
class Type:
    """A static type: source name plus the JVM name used by the emitter."""

    name: str
    jvm_name: str


# Singletons
ANY: Type = Type("Any", "Object")
NIL: Type = Type("Nil", "Void")
COMPARABLE: Type = Type("Comparable", "Comparable")
BOOLEAN: Type = Type("Boolean", "boolean")
INTEGER: Type = Type("Integer", "int")
DECIMAL: Type = Type("Decimal", "double")
CHARACTER: Type = Type("Character", "char")
STRING: Type = Type("String", "String")

TYPES: dict[str, Type] = {
    t.name: t
    for t in (ANY, NIL, COMPARABLE, BOOLEAN, INTEGER, DECIMAL, CHARACTER, STRING)
}

# Types that satisfy COMPARABLE. COMPARABLE itself is never a value's exact type.
COMPARABLE_TYPES: frozenset[Type] = frozenset(
    {INTEGER, DECIMAL, CHARACTER, STRING, COMPARABLE}
)


def get_type(name: str) -> Type:
    """Resolve a source type name."""
    if name not in TYPES:
        raise AnalysisError("unknown type '" + name + "'")
    return TYPES[name]


def is_assignable(target: Type, actual: Type) -> bool:
    if target == actual or target == ANY:
        return True
    if target == COMPARABLE:
        return actual in COMPARABLE_TYPES
    return False


def require_assignable(target: Type, actual: Type) -> None:
    if not is_assignable(target, actual):
        raise AnalysisError(
            "type mismatch: expected " + target.name + ", got " + actual.name
        )
