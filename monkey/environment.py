"""Lexical scopes for the evaluator.

An Environment maps names to values and may point at an enclosing scope.
Scopes are shared by reference between closures and call frames, so a ``let``
in one scope is seen by every function that captured it. Links only ever
point outward, so the chain has no cycles.
"""

from __future__ import annotations

from typing import Optional

from monkey.objects import Object


class Environment:

    def __init__(self, outer: Optional[Environment] = None):
        self.store: dict[str, Object] = {}
        self.outer = outer

    @classmethod
    def enclosed(cls, outer: Environment) -> Environment:
        """A new scope nested inside ``outer`` (used for call frames)."""
        return cls(outer)

    def get(self, name: str) -> Optional[Object]:
        scope: Optional[Environment] = self
        while scope is not None:
            if name in scope.store:
                return scope.store[name]
            scope = scope.outer
        return None

    def set(self, name: str, value: Object) -> Object:
        """Bind ``name`` in this scope only; outer scopes are never touched."""
        self.store[name] = value
        return value

    def __contains__(self, name: str) -> bool:
        return self.get(name) is not None

    def __repr__(self) -> str:
        depth = 0
        scope = self.outer
        while scope is not None:
            depth += 1
            scope = scope.outer
        return f"Environment(names={sorted(self.store)}, depth={depth})"
