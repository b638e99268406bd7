"""
Error types for linebased parsing and expansion.

Provides:
- ScriptSyntaxError: grammar violation reported by the tokenizer
- DefinitionError / InvocationError / IncludeError: expansion rule violations
- ExpressionError: any failure paired with the expression it happened at
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .expression import Expanded


def quote(value: str) -> str:
    """Double-quote a value for error messages (escapes control characters)."""
    return json.dumps(value, ensure_ascii=False)


class LinebasedError(Exception):
    """Base class for every error raised by this package."""


@dataclass(eq=False)
class ScriptSyntaxError(LinebasedError):
    """Malformed input. The stream that produced it cannot be read further."""

    line: int
    message: str

    def __str__(self) -> str:
        return f"{self.line}: {self.message}"


class DefinitionError(LinebasedError):
    """Invalid or duplicate `define`."""


class InvocationError(LinebasedError):
    """Invalid template call: arity, unknown parameter, nested define, recursion."""


class IncludeError(LinebasedError):
    """Invalid `include` path or include cycle."""


@dataclass(eq=False)
class ExpressionError(LinebasedError):
    """An error located at the expression where it occurred."""

    expr: Expanded
    err: BaseException

    def __post_init__(self) -> None:
        self.__cause__ = self.err

    @property
    def message(self) -> str:
        """The cause's message without any location of its own."""
        if isinstance(self.err, ScriptSyntaxError):
            return self.err.message
        return str(self.err)

    def __str__(self) -> str:
        return f"{self.expr.location_for_error()}: {self.message}"
