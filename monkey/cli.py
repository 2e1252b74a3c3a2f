"""Monkey CLI — Command-line interface for the Monkey interpreter.

Commands:
  monkey repl                        — Interactive shell (default)
  monkey run <file> | -c <code>      — Parse and evaluate a program
  monkey tokens <file> | -c <code>   — Print the token stream
  monkey ast <file> | -c <code>      — Print the parsed program
"""

from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from typing import Optional

from monkey import __version__
from monkey.config import load_config
from monkey.errors import ConfigError, ParseFailure
from monkey.lexer import Lexer
from monkey.objects import Error
from monkey.parser import parse
from monkey.repl import Session, Shell

logger = logging.getLogger(__name__)


def _read_source(args: argparse.Namespace) -> tuple[Optional[str], str]:
    """Return ``(source, filename)``; source is None when the file is missing."""
    if getattr(args, "code", None) is not None:
        return args.code, "<string>"
    source_path = args.file
    if not os.path.exists(source_path):
        return None, source_path
    with open(source_path, "r") as f:
        return f.read(), source_path


def _missing_file(path: str, fmt: str) -> int:
    if fmt == "json":
        print(json.dumps({"error": f"File not found: {path}"}))
    else:
        print(f"error: file not found: {path}", file=sys.stderr)
    return 1


def _print_parse_failure(failure: ParseFailure, fmt: str) -> None:
    if fmt == "json":
        print(json.dumps({"errors": [e.to_dict() for e in failure.errors]}, indent=2))
    else:
        for error in failure.errors:
            print(error)


def cmd_repl(args: argparse.Namespace) -> int:
    """Start the interactive shell."""
    shell = Shell(Session(args.config))
    shell.run()
    return 0


def cmd_run(args: argparse.Namespace) -> int:
    """Parse a whole program and evaluate it."""
    fmt = args.format or args.config.format
    source, filename = _read_source(args)
    if source is None:
        return _missing_file(filename, fmt)

    session = Session(args.config)
    outcome = session.execute(source, filename)
    if not outcome.ok:
        _print_parse_failure(ParseFailure(outcome.errors), fmt)
        return 1

    value = outcome.value
    failed = isinstance(value, Error)
    if fmt == "json":
        result = {
            "ok": not failed,
            "type": value.type_name if value is not None else None,
            "value": str(value) if value is not None else None,
        }
        print(json.dumps(result, indent=2))
    elif value is not None:
        print(value)
    return 1 if failed else 0


def cmd_tokens(args: argparse.Namespace) -> int:
    """Print the token stream, one token per line."""
    fmt = args.config.format
    source, filename = _read_source(args)
    if source is None:
        return _missing_file(filename, fmt)

    for tok in Lexer(source, filename):
        print(f"{tok.location}\t{tok.describe()}")
    return 0


def cmd_ast(args: argparse.Namespace) -> int:
    """Print the parsed program as canonical source or JSON."""
    fmt = args.format or args.config.format
    source, filename = _read_source(args)
    if source is None:
        return _missing_file(filename, fmt)

    program, errors = parse(source, filename)
    if errors:
        _print_parse_failure(ParseFailure(errors), fmt)
        return 1

    if fmt == "json":
        print(program.to_json())
    else:
        print(program)
    return 0


def _add_source_args(p: argparse.ArgumentParser) -> None:
    group = p.add_mutually_exclusive_group(required=True)
    group.add_argument("file", nargs="?", help="Monkey source file (.mk)")
    group.add_argument("-c", "--code", help="Program passed in as a string")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="monkey",
        description="Monkey — a small interpreted language",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--config", dest="config_path", default=None,
                        help="Config file (default: nearest .monkeyrc.yml)")
    parser.add_argument("--log-level", dest="log_level", default=None,
                        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
                        help="Logging level (overrides config)")
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # repl
    p_repl = subparsers.add_parser("repl", help="Start the interactive shell")
    p_repl.set_defaults(func=cmd_repl)

    # run
    p_run = subparsers.add_parser("run", help="Evaluate a Monkey program")
    _add_source_args(p_run)
    p_run.add_argument("--format", choices=["text", "json"], default=None, help="Output format")
    p_run.set_defaults(func=cmd_run)

    # tokens
    p_tokens = subparsers.add_parser("tokens", help="Print the token stream")
    _add_source_args(p_tokens)
    p_tokens.set_defaults(func=cmd_tokens)

    # ast
    p_ast = subparsers.add_parser("ast", help="Print the parsed program")
    _add_source_args(p_ast)
    p_ast.add_argument("--format", choices=["text", "json"], default=None, help="Output format")
    p_ast.set_defaults(func=cmd_ast)

    return parser


def main(argv: Optional[list[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config = load_config(args.config_path)
    except ConfigError as e:
        print(f"error: {e}", file=sys.stderr)
        return 1
    args.config = config

    logging.basicConfig(
        level=args.log_level or config.log_level,
        format="%(levelname)s %(name)s: %(message)s",
    )
    logger.debug("command=%s config=%s", args.command or "repl", config)

    if not args.command:
        return cmd_repl(args)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
