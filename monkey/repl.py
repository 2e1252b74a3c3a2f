"""Interactive front end for Monkey. Uses cmd as backend.

A Session keeps one top-level Environment alive across inputs, so names bound
with ``let`` survive from one line to the next. Each input gets a fresh lexer
and parser; an input with parse errors is reported and never evaluated.
"""

from __future__ import annotations

import cmd
import logging
import sys
from dataclasses import dataclass, field
from typing import Optional

from monkey.config import MonkeyConfig
from monkey.environment import Environment
from monkey.errors import ParseError
from monkey.evaluator import Evaluator
from monkey.lexer import Lexer
from monkey.objects import Object
from monkey.parser import Parser

logger = logging.getLogger(__name__)

BANNER = (
    "Hello! This is the Monkey programming language!\n"
    "Feel free to type in commands\n"
)
GOODBYE = "Bye :)"


@dataclass
class Outcome:
    """Result of one input: parse errors, or the value it evaluated to."""
    errors: list[ParseError] = field(default_factory=list)
    value: Optional[Object] = None

    @property
    def ok(self) -> bool:
        return not self.errors


def ensure_recursion_limit(limit: int) -> None:
    """Raise the host recursion limit to ``limit``; never lower it."""
    if sys.getrecursionlimit() < limit:
        sys.setrecursionlimit(limit)


class Session:
    """Persistent evaluation state shared by every input of one REPL run."""

    def __init__(self, config: Optional[MonkeyConfig] = None):
        self.config = config or MonkeyConfig()
        ensure_recursion_limit(self.config.recursion_limit)
        self.env = Environment()
        self.evaluator = Evaluator(self.env, max_call_depth=self.config.max_call_depth)

    def execute(self, source: str, filename: str = "<stdin>") -> Outcome:
        parser = Parser(Lexer(source, filename))
        program = parser.parse_program()
        if parser.errors:
            logger.debug("discarding input with %d parse error(s)", len(parser.errors))
            return Outcome(errors=list(parser.errors))
        return Outcome(value=self.evaluator.eval(program))


class Shell(cmd.Cmd):
    """Monkey interpreter shell."""
    intro = BANNER
    prompt = ">> "

    def __init__(self, session: Session, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.session = session
        self.prompt = session.config.prompt
        if not session.config.banner:
            self.intro = None

    def onecmd(self, line):
        """Only the bare words ``exit`` and ``EOF`` are commands.

        Anything else, including lines that begin with an identifier named
        ``help`` or ``exit``, is Monkey source.
        """
        stripped = line.strip()
        if not stripped:
            return self.emptyline()
        if stripped == "exit":
            return self.do_exit("")
        if stripped == "EOF":
            return self.do_EOF("")
        return self.default(line)

    def default(self, line):
        """Evaluates one line of Monkey."""
        outcome = self.session.execute(line)
        for error in outcome.errors:
            print(error, file=self.stdout)
        if outcome.value is not None:
            print(f"{outcome.value}\n", file=self.stdout)

    def emptyline(self):
        """Do not repeat previous command on empty line."""
        return False

    def do_EOF(self, arg):
        """Exits interpreter."""
        print(file=self.stdout)
        return True

    def do_exit(self, arg):
        """Exits interpreter."""
        print(GOODBYE, file=self.stdout)
        return True

    def run(self) -> None:
        try:
            self.cmdloop()
        except KeyboardInterrupt:
            print(f"\n{GOODBYE}", file=self.stdout)
