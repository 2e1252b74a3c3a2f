"""Structured error objects for the Monkey front end.

Parse errors are collected on the parser, never raised. Runtime errors are
values (see ``monkey.objects.Error``), not exceptions. The exception classes
here are for callers and the host boundary only.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional


class ParseErrorKind(Enum):
    UNEXPECTED_TOKEN = "Unexpected Token"
    NESTING_TOO_DEEP = "Nesting Too Deep"

    def __str__(self) -> str:
        return self.value


@dataclass
class SourceLocation:
    line: int
    column: int
    file: str = "<stdin>"

    def __str__(self) -> str:
        return f"{self.file}:{self.line}:{self.column}"


@dataclass
class ParseError:
    kind: ParseErrorKind
    message: str
    location: Optional[SourceLocation] = None

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {
            "kind": self.kind.name.lower(),
            "message": self.message,
        }
        if self.location:
            d["location"] = {
                "file": self.location.file,
                "line": self.location.line,
                "column": self.location.column,
            }
        return d

    def to_json(self, indent: int = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent)

    def __str__(self) -> str:
        return f"{self.kind}: {self.message}"


def unexpected_token(
    expected: str,
    actual: str,
    location: Optional[SourceLocation] = None,
) -> ParseError:
    return ParseError(
        kind=ParseErrorKind.UNEXPECTED_TOKEN,
        message=f"expected next token to be {expected}, got {actual} instead",
        location=location,
    )


def nesting_too_deep(location: Optional[SourceLocation] = None) -> ParseError:
    return ParseError(
        kind=ParseErrorKind.NESTING_TOO_DEEP,
        message="expression nested too deeply to parse",
        location=location,
    )


class ParseFailure(Exception):
    """Exception wrapping the ParseErrors of one source text."""

    def __init__(self, errors: list[ParseError] | ParseError):
        if isinstance(errors, ParseError):
            errors = [errors]
        self.errors = errors
        super().__init__(self._format())

    def _format(self) -> str:
        return "\n".join(str(e) for e in self.errors)

    def to_json(self, indent: int = 2) -> str:
        return json.dumps([e.to_dict() for e in self.errors], indent=indent)


class ConfigError(Exception):
    """Raised when a configuration file exists but cannot be used."""

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"{path}: {reason}")
