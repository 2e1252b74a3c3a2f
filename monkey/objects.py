"""Monkey runtime values.

``ReturnValue`` and ``Error`` are control-flow carriers: the evaluator passes
them up through block evaluation as ordinary return values, and a user
program can never bind or inspect one.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from monkey.ast_nodes import Identifier, Statement

if TYPE_CHECKING:
    from monkey.environment import Environment


class Object:
    """Base class for every runtime value."""

    type_name = "OBJECT"


@dataclass(frozen=True)
class Integer(Object):
    value: int
    type_name = "INTEGER"

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class Boolean(Object):
    value: bool
    type_name = "BOOLEAN"

    def __str__(self) -> str:
        return "true" if self.value else "false"


@dataclass(frozen=True)
class Null(Object):
    type_name = "NULL"

    def __str__(self) -> str:
        return "null"


@dataclass(eq=False)
class Function(Object):
    """A function literal closed over the environment it was evaluated in.

    ``env`` is shared, not copied: later ``let`` bindings in that scope are
    visible to the function.
    """
    params: list[Identifier]
    body: list[Statement]
    env: Environment = field(repr=False)
    type_name = "FUNCTION"

    def __str__(self) -> str:
        params = ", ".join(p.name for p in self.params)
        return f"fn({params}) {{ ... }}"


@dataclass(frozen=True)
class ReturnValue(Object):
    value: Object
    type_name = "RETURN_VALUE"

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class Error(Object):
    message: str
    type_name = "ERROR"

    def __str__(self) -> str:
        return self.message


NULL = Null()
TRUE = Boolean(True)
FALSE = Boolean(False)


def native_bool(value: bool) -> Boolean:
    return TRUE if value else FALSE


def is_truthy(obj: Object) -> bool:
    """Only null and false are falsy; ``0`` is truthy."""
    if isinstance(obj, Null):
        return False
    if isinstance(obj, Boolean):
        return obj.value
    return True


def is_signal(obj: object) -> bool:
    """True for the values that stop a block: a return or an error."""
    return isinstance(obj, (ReturnValue, Error))
