"""Monkey Evaluator — tree-walking interpreter.

Walks the AST against one active Environment. Early return and runtime
errors are values (``ReturnValue`` / ``Error``) handed back up the recursion:
a block stops at the first one it sees and passes it through untouched, and
only the program level unwraps a ``ReturnValue``. Evaluating a node may also
produce no value at all (``None``), e.g. a ``let`` or an ``if`` whose
condition fails with no ``else``.
"""

from __future__ import annotations

import logging
from typing import Optional

from monkey.ast_nodes import (
    Program, Statement, LetStmt, ReturnStmt, ExprStmt,
    Expr, Identifier, IntLiteral, BoolLiteral, PrefixExpr, InfixExpr,
    IfExpr, FunctionLiteral, CallExpr,
)
from monkey.environment import Environment
from monkey.lexer import INT64_MAX, INT64_MIN
from monkey.objects import (
    Object, Integer, Boolean, Function, ReturnValue, Error,
    NULL, native_bool, is_truthy, is_signal,
)

logger = logging.getLogger(__name__)

DEFAULT_MAX_CALL_DEPTH = 1000


def _fits_int64(value: int) -> bool:
    return INT64_MIN <= value <= INT64_MAX


def _truncating_div(left: int, right: int) -> int:
    quotient = abs(left) // abs(right)
    return -quotient if (left < 0) != (right < 0) else quotient


class Evaluator:
    """Evaluates Programs against a persistent top-level Environment."""

    def __init__(
        self,
        environment: Optional[Environment] = None,
        max_call_depth: int = DEFAULT_MAX_CALL_DEPTH,
    ):
        self.env = environment if environment is not None else Environment()
        self.max_call_depth = max_call_depth
        self.depth = 0

    # -------------------------------------------------------------------
    # Program / statements
    # -------------------------------------------------------------------

    def eval(self, program: Program) -> Optional[Object]:
        """Evaluate a whole program; a top-level ``return`` is unwrapped here."""
        try:
            result = self._eval_statements(program.statements)
        except RecursionError:
            self.depth = 0
            return Error(f"maximum call depth exceeded: {self.max_call_depth}")
        if isinstance(result, ReturnValue):
            return result.value
        return result

    def eval_block(self, statements: list[Statement]) -> Optional[Object]:
        """Evaluate a nested block; a ``ReturnValue`` is passed on still wrapped."""
        return self._eval_statements(statements)

    def _eval_statements(self, statements: list[Statement]) -> Optional[Object]:
        result: Optional[Object] = None
        for stmt in statements:
            result = self.eval_statement(stmt)
            if is_signal(result):
                return result
        return result

    def eval_statement(self, stmt: Statement) -> Optional[Object]:
        if isinstance(stmt, LetStmt):
            value = self.eval_expression(stmt.value)
            if value is None or is_signal(value):
                return value
            self.env.set(stmt.name.name, value)
            return None
        if isinstance(stmt, ReturnStmt):
            value = self.eval_expression(stmt.value)
            if value is None or is_signal(value):
                return value
            return ReturnValue(value)
        if isinstance(stmt, ExprStmt):
            return self.eval_expression(stmt.expr)
        raise TypeError(f"unknown statement node: {type(stmt).__name__}")

    # -------------------------------------------------------------------
    # Expressions
    # -------------------------------------------------------------------

    def eval_expression(self, expr: Expr) -> Optional[Object]:
        if isinstance(expr, IntLiteral):
            return Integer(expr.value)
        if isinstance(expr, BoolLiteral):
            return native_bool(expr.value)
        if isinstance(expr, Identifier):
            return self._eval_identifier(expr)
        if isinstance(expr, PrefixExpr):
            operand = self.eval_expression(expr.operand)
            if operand is None or is_signal(operand):
                return operand
            return self._eval_prefix(expr.op, operand)
        if isinstance(expr, InfixExpr):
            left = self.eval_expression(expr.left)
            if left is None or is_signal(left):
                return left
            right = self.eval_expression(expr.right)
            if right is None or is_signal(right):
                return right
            return self._eval_infix(expr.op, left, right)
        if isinstance(expr, IfExpr):
            return self._eval_if(expr)
        if isinstance(expr, FunctionLiteral):
            return Function(expr.params, expr.body, self.env)
        if isinstance(expr, CallExpr):
            return self._eval_call(expr)
        raise TypeError(f"unknown expression node: {type(expr).__name__}")

    def _eval_identifier(self, ident: Identifier) -> Object:
        value = self.env.get(ident.name)
        if value is None:
            return Error(f"identifier not found: {ident.name}")
        return value

    def _eval_prefix(self, op: str, operand: Object) -> Object:
        if op == "!":
            return native_bool(not is_truthy(operand))
        if op == "-":
            if not isinstance(operand, Integer):
                return Error(f"unknown operator: -{operand}")
            if not _fits_int64(-operand.value):
                return Error(f"integer overflow: -{operand}")
            return Integer(-operand.value)
        return Error(f"unknown operator: {op}{operand}")

    def _eval_infix(self, op: str, left: Object, right: Object) -> Object:
        if isinstance(left, Integer) and isinstance(right, Integer):
            return self._eval_integer_infix(op, left, right)
        if isinstance(left, Boolean) and isinstance(right, Boolean):
            if op == "==":
                return native_bool(left.value == right.value)
            if op == "!=":
                return native_bool(left.value != right.value)
            return Error(f"unknown operator: {left} {op} {right}")
        return Error(f"type mismatch: {left} {op} {right}")

    def _eval_integer_infix(self, op: str, left: Integer, right: Integer) -> Object:
        lv, rv = left.value, right.value
        if op == "+":
            result = lv + rv
        elif op == "-":
            result = lv - rv
        elif op == "*":
            result = lv * rv
        elif op == "/":
            if rv == 0:
                return Error(f"division by zero: {left} / {right}")
            result = _truncating_div(lv, rv)
        elif op == "<":
            return native_bool(lv < rv)
        elif op == "<=":
            return native_bool(lv <= rv)
        elif op == ">":
            return native_bool(lv > rv)
        elif op == ">=":
            return native_bool(lv >= rv)
        elif op == "==":
            return native_bool(lv == rv)
        elif op == "!=":
            return native_bool(lv != rv)
        else:
            return Error(f"unknown operator: {left} {op} {right}")

        if not _fits_int64(result):
            return Error(f"integer overflow: {left} {op} {right}")
        return Integer(result)

    def _eval_if(self, expr: IfExpr) -> Optional[Object]:
        condition = self.eval_expression(expr.condition)
        if condition is None or is_signal(condition):
            return condition
        if is_truthy(condition):
            return self.eval_block(expr.consequence)
        if expr.alternative is not None:
            return self.eval_block(expr.alternative)
        return None

    # -------------------------------------------------------------------
    # Calls
    # -------------------------------------------------------------------

    def _eval_call(self, expr: CallExpr) -> Object:
        args: list[Object] = []
        for arg_expr in expr.args:
            arg = self.eval_expression(arg_expr)
            if is_signal(arg):
                return arg
            args.append(arg if arg is not None else NULL)

        callee = self.eval_expression(expr.callee)
        if is_signal(callee):
            return callee
        if callee is None:
            return NULL
        if not isinstance(callee, Function):
            return Error(f"{callee} is not valid function")

        if len(callee.params) != len(args):
            return Error(
                f"wrong number of arguments: {len(callee.params)} expected "
                f"but {len(args)} given"
            )
        if self.depth >= self.max_call_depth:
            return Error(f"maximum call depth exceeded: {self.max_call_depth}")

        frame = Environment.enclosed(callee.env)
        for param, arg in zip(callee.params, args):
            frame.set(param.name, arg)

        logger.debug("call %s depth=%d", callee, self.depth + 1)
        saved = self.env
        self.env = frame
        self.depth += 1
        try:
            result = self.eval_block(callee.body)
        finally:
            self.depth -= 1
            self.env = saved

        if isinstance(result, ReturnValue):
            return result.value
        if result is None:
            return NULL
        return result
