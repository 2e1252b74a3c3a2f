"""Monkey AST Node definitions.

Expressions, statements and the top-level Program. Nodes own their children
as a plain tree. Every node renders back to canonical source with ``str()``;
prefix and infix expressions are fully parenthesised so the rendered text
shows how precedence was resolved.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Optional

from monkey.errors import SourceLocation


# ---------------------------------------------------------------------------
# Expressions
# ---------------------------------------------------------------------------

@dataclass
class Expr:
    location: Optional[SourceLocation] = field(
        default=None, compare=False, repr=False, kw_only=True,
    )


@dataclass
class Identifier(Expr):
    name: str = ""

    def __str__(self) -> str:
        return self.name


@dataclass
class IntLiteral(Expr):
    value: int = 0

    def __str__(self) -> str:
        return str(self.value)


@dataclass
class BoolLiteral(Expr):
    value: bool = False

    def __str__(self) -> str:
        return "true" if self.value else "false"


@dataclass
class PrefixExpr(Expr):
    """``!x`` or ``-x``."""
    op: str = ""
    operand: Expr = field(default_factory=Expr)

    def __str__(self) -> str:
        return f"({self.op}{self.operand})"


@dataclass
class InfixExpr(Expr):
    op: str = ""
    left: Expr = field(default_factory=Expr)
    right: Expr = field(default_factory=Expr)

    def __str__(self) -> str:
        return f"({self.left} {self.op} {self.right})"


@dataclass
class IfExpr(Expr):
    """if (condition) { consequence } else { alternative }

    ``alternative`` is None when there is no else branch, which is not the
    same thing as an empty else block.
    """
    condition: Expr = field(default_factory=Expr)
    consequence: list[Statement] = field(default_factory=list)
    alternative: Optional[list[Statement]] = None

    def __str__(self) -> str:
        text = f"if ({self.condition}) {render_block(self.consequence)}"
        if self.alternative is not None:
            text += f" else {render_block(self.alternative)}"
        return text


@dataclass
class FunctionLiteral(Expr):
    params: list[Identifier] = field(default_factory=list)
    body: list[Statement] = field(default_factory=list)

    def __str__(self) -> str:
        params = ", ".join(str(p) for p in self.params)
        return f"fn({params}) {render_block(self.body)}"


@dataclass
class CallExpr(Expr):
    callee: Expr = field(default_factory=Expr)
    args: list[Expr] = field(default_factory=list)

    def __str__(self) -> str:
        args = ", ".join(str(a) for a in self.args)
        return f"{self.callee}({args})"


# ---------------------------------------------------------------------------
# Statements
# ---------------------------------------------------------------------------

@dataclass
class Statement:
    location: Optional[SourceLocation] = field(
        default=None, compare=False, repr=False, kw_only=True,
    )


@dataclass
class LetStmt(Statement):
    name: Identifier = field(default_factory=Identifier)
    value: Expr = field(default_factory=Expr)

    def __str__(self) -> str:
        return f"let {self.name} = {self.value};"


@dataclass
class ReturnStmt(Statement):
    value: Expr = field(default_factory=Expr)

    def __str__(self) -> str:
        return f"return {self.value};"


@dataclass
class ExprStmt(Statement):
    expr: Expr = field(default_factory=Expr)

    def __str__(self) -> str:
        return str(self.expr)


def render_block(statements: list[Statement]) -> str:
    if not statements:
        return "{ }"
    return "{ " + " ".join(str(s) for s in statements) + " }"


# ---------------------------------------------------------------------------
# Program
# ---------------------------------------------------------------------------

@dataclass
class Program:
    statements: list[Statement] = field(default_factory=list)
    filename: str = field(default="<stdin>", compare=False)

    def __str__(self) -> str:
        return "\n".join(str(s) for s in self.statements)

    def __len__(self) -> int:
        return len(self.statements)

    def __iter__(self):
        return iter(self.statements)

    def to_dict(self) -> dict[str, Any]:
        return {
            "filename": self.filename,
            "statements": [node_to_dict(s) for s in self.statements],
        }

    def to_json(self, indent: int = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent)


def node_to_dict(node: Any) -> Any:
    """Machine-readable form of a node: ``{"node": <class name>, ...fields}``."""
    if isinstance(node, list):
        return [node_to_dict(n) for n in node]
    if not isinstance(node, (Expr, Statement)):
        return node

    d: dict[str, Any] = {"node": type(node).__name__}
    for name, value in vars(node).items():
        if name == "location":
            continue
        d[name] = node_to_dict(value)
    if node.location is not None:
        d["location"] = {"line": node.location.line, "column": node.location.column}
    return d
