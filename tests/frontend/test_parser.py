"""Monkey parser tests — statements, precedence, error recovery."""

import json

import pytest

from monkey.ast_nodes import (
    Program, LetStmt, ReturnStmt, ExprStmt,
    Identifier, IntLiteral, BoolLiteral, PrefixExpr, InfixExpr,
    IfExpr, FunctionLiteral, CallExpr,
)
from monkey.errors import ParseErrorKind, ParseFailure
from monkey.lexer import Lexer
from monkey.parser import Parser, Precedence, parse


def parse_ok(source):
    program, errors = parse(source)
    assert errors == [], [str(e) for e in errors]
    return program


def single_expr(source):
    program = parse_ok(source)
    assert len(program.statements) == 1
    stmt = program.statements[0]
    assert isinstance(stmt, ExprStmt)
    return stmt.expr


class TestStatements:

    def test_let_statements(self):
        program = parse_ok("let x = 5; let y = true; let foo = y;")
        assert program.statements == [
            LetStmt(Identifier("x"), IntLiteral(5)),
            LetStmt(Identifier("y"), BoolLiteral(True)),
            LetStmt(Identifier("foo"), Identifier("y")),
        ]

    def test_let_without_semicolon(self):
        program = parse_ok("let x = 1 + 2")
        assert program.statements == [
            LetStmt(Identifier("x"), InfixExpr("+", IntLiteral(1), IntLiteral(2))),
        ]

    def test_return_statements(self):
        program = parse_ok("return 5; return x + 1;")
        assert program.statements == [
            ReturnStmt(IntLiteral(5)),
            ReturnStmt(InfixExpr("+", Identifier("x"), IntLiteral(1))),
        ]

    def test_expression_statements(self):
        program = parse_ok("foo; 5; true")
        assert [type(s) for s in program.statements] == [ExprStmt] * 3

    def test_statement_location(self):
        program = parse_ok("\n  let x = 1;")
        loc = program.statements[0].location
        assert (loc.line, loc.column) == (2, 3)


class TestExpressions:

    def test_identifier(self):
        assert single_expr("foobar;") == Identifier("foobar")

    @pytest.mark.parametrize("source, op, value", [
        ("!5;", "!", IntLiteral(5)),
        ("-15;", "-", IntLiteral(15)),
        ("!true;", "!", BoolLiteral(True)),
    ])
    def test_prefix(self, source, op, value):
        assert single_expr(source) == PrefixExpr(op, value)

    @pytest.mark.parametrize("op", ["+", "-", "*", "/", "<", "<=", ">", ">=", "==", "!="])
    def test_infix(self, op):
        assert single_expr(f"5 {op} 6") == InfixExpr(op, IntLiteral(5), IntLiteral(6))

    def test_if(self):
        expr = single_expr("if (x < y) { x }")
        assert expr == IfExpr(
            InfixExpr("<", Identifier("x"), Identifier("y")),
            [ExprStmt(Identifier("x"))],
            None,
        )

    def test_if_else(self):
        expr = single_expr("if (x < y) { x } else { y }")
        assert expr.alternative == [ExprStmt(Identifier("y"))]

    def test_empty_else_is_not_missing_else(self):
        expr = single_expr("if (x) { } else { }")
        assert expr.consequence == []
        assert expr.alternative == []

    def test_function_literal(self):
        expr = single_expr("fn(x, y) { x + y; }")
        assert expr == FunctionLiteral(
            [Identifier("x"), Identifier("y")],
            [ExprStmt(InfixExpr("+", Identifier("x"), Identifier("y")))],
        )

    @pytest.mark.parametrize("source, names", [
        ("fn() {};", []),
        ("fn(x) {};", ["x"]),
        ("fn(x, y, z) {};", ["x", "y", "z"]),
    ])
    def test_function_params(self, source, names):
        assert [p.name for p in single_expr(source).params] == names

    def test_call(self):
        expr = single_expr("add(1, 2 * 3, 4 + 5);")
        assert expr == CallExpr(Identifier("add"), [
            IntLiteral(1),
            InfixExpr("*", IntLiteral(2), IntLiteral(3)),
            InfixExpr("+", IntLiteral(4), IntLiteral(5)),
        ])

    def test_zero_argument_call(self):
        assert single_expr("f()") == CallExpr(Identifier("f"), [])

    def test_immediately_invoked_function(self):
        expr = single_expr("fn(x) { x; }(5)")
        assert isinstance(expr, CallExpr)
        assert isinstance(expr.callee, FunctionLiteral)


class TestPrecedence:
    """Rendered output is fully parenthesised, so it shows the tree shape."""

    @pytest.mark.parametrize("source, expected", [
        ("-a * b", "((-a) * b)"),
        ("!-a", "(!(-a))"),
        ("a + b + c", "((a + b) + c)"),
        ("a + b - c", "((a + b) - c)"),
        ("a * b * c", "((a * b) * c)"),
        ("a * b / c", "((a * b) / c)"),
        ("a + b / c", "(a + (b / c))"),
        ("a + b * c + d / e - f", "(((a + (b * c)) + (d / e)) - f)"),
        ("5 > 4 == 3 < 4", "((5 > 4) == (3 < 4))"),
        ("5 <= 4 != 3 >= 4", "((5 <= 4) != (3 >= 4))"),
        ("3 + 4 * 5 == 3 * 1 + 4 * 5", "((3 + (4 * 5)) == ((3 * 1) + (4 * 5)))"),
        ("true != false == true", "((true != false) == true)"),
        ("1 + (2 + 3) + 4", "((1 + (2 + 3)) + 4)"),
        ("(5 + 5) * 2", "((5 + 5) * 2)"),
        ("-(5 + 5)", "(-(5 + 5))"),
        ("!(true == true)", "(!(true == true))"),
        ("a + add(b * c) + d", "((a + add((b * c))) + d)"),
        ("add(a, b, 1, 2 * 3, 4 + 5, add(6, 7 * 8))",
         "add(a, b, 1, (2 * 3), (4 + 5), add(6, (7 * 8)))"),
        ("add(a + b + c * d / f + g)", "add((((a + b) + ((c * d) / f)) + g))"),
    ])
    def test_rendering(self, source, expected):
        assert str(parse_ok(source)) == expected

    def test_left_associative_subtraction_tree(self):
        expr = single_expr("a + b - c")
        assert expr == InfixExpr(
            "-",
            InfixExpr("+", Identifier("a"), Identifier("b")),
            Identifier("c"),
        )

    def test_precedence_order(self):
        assert (Precedence.LOWEST < Precedence.EQUALS < Precedence.LESS_GREATER
                < Precedence.SUM < Precedence.PRODUCT < Precedence.PREFIX
                < Precedence.CALL)

    def test_semicolon_stops_expression(self):
        program = parse_ok("1; -2")
        assert program.statements == [
            ExprStmt(IntLiteral(1)),
            ExprStmt(PrefixExpr("-", IntLiteral(2))),
        ]


class TestErrors:

    def test_let_missing_assign(self):
        program, errors = parse("let x 5;")
        assert len(errors) == 1
        error = errors[0]
        assert error.kind == ParseErrorKind.UNEXPECTED_TOKEN
        assert error.message == "expected next token to be Assign, got Int(5) instead"
        assert str(error) == (
            "Unexpected Token: expected next token to be Assign, got Int(5) instead"
        )
        assert not any(isinstance(s, LetStmt) for s in program.statements)

    def test_let_missing_identifier(self):
        _, errors = parse("let = 10;")
        assert errors[0].message == "expected next token to be Ident, got Assign instead"

    def test_missing_closing_paren(self):
        _, errors = parse("(1 + 2")
        assert [e.message for e in errors] == [
            "expected next token to be Rparen, got Eof instead",
        ]

    def test_if_requires_paren(self):
        _, errors = parse("if x { 1 }")
        assert errors[0].message == 'expected next token to be Lparen, got Ident("x") instead'

    def test_function_params_must_be_identifiers(self):
        _, errors = parse("fn(1) { }")
        assert errors[0].message == "expected next token to be Ident, got Int(1) instead"

    def test_expected_identifier_has_no_payload(self):
        _, errors = parse("let 1;")
        assert str(errors[0]) == (
            "Unexpected Token: expected next token to be Ident, got Int(1) instead"
        )

    def test_deep_nesting_is_reported_not_raised(self):
        depth = 50000
        program, errors = parse("(" * depth + "1" + ")" * depth)
        assert program.statements == []
        assert [e.kind for e in errors] == [ParseErrorKind.NESTING_TOO_DEEP]
        assert str(errors[0]) == "Nesting Too Deep: expression nested too deeply to parse"

    def test_error_location_is_observed_token(self):
        _, errors = parse("let x 5;")
        assert (errors[0].location.line, errors[0].location.column) == (1, 7)

    def test_error_to_dict(self):
        _, errors = parse("let x 5;")
        d = errors[0].to_dict()
        assert d["kind"] == "unexpected_token"
        assert d["location"]["column"] == 7
        assert json.loads(errors[0].to_json())["message"] == d["message"]

    def test_recovery_keeps_parsing(self):
        program, errors = parse("let x 5; let y = 2;")
        assert len(errors) == 1
        assert LetStmt(Identifier("y"), IntLiteral(2)) in program.statements

    def test_each_failure_recorded(self):
        _, errors = parse("let 1; let 2;")
        assert len(errors) == 2

    def test_unterminated_block_accepted(self):
        program, errors = parse("if (true) { 1")
        assert errors == []
        assert program.statements[0].expr.consequence == [ExprStmt(IntLiteral(1))]

    def test_no_prefix_rule_is_silent(self):
        program, errors = parse(")")
        assert errors == []
        assert program.statements == []


class TestParserObject:

    def test_current_and_peek_after_construction(self):
        parser = Parser(Lexer("let x"))
        assert parser.current.describe() == "Let"
        assert parser.peek.describe() == 'Ident("x")'

    def test_program_json(self):
        program = parse_ok("let x = 1;")
        data = json.loads(program.to_json())
        stmt = data["statements"][0]
        assert stmt["node"] == "LetStmt"
        assert stmt["name"]["name"] == "x"
        assert stmt["value"] == {
            "node": "IntLiteral", "value": 1,
            "location": {"line": 1, "column": 9},
        }

    def test_program_filename(self):
        program, _ = parse("1", filename="prog.mk")
        assert isinstance(program, Program)
        assert program.filename == "prog.mk"


class TestParseFailure:

    def test_wraps_errors(self):
        _, errors = parse("let 1; let 2;")
        failure = ParseFailure(errors)
        assert failure.errors == errors
        assert str(failure).count("Unexpected Token") == 2
        assert len(json.loads(failure.to_json())) == 2

    def test_single_error(self):
        _, errors = parse("let x 5;")
        assert ParseFailure(errors[0]).errors == errors
