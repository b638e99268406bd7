"""
Expression records produced by the tokenizer and the expansion engine.

An Expression is one command (or blank line) with its leading comments.
An Expanded is an Expression plus the file it came from and the template
call chain that produced it.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

_SPACE_RE = re.compile(r"\s+")


def cut_field(s: str) -> tuple[str, str]:
    """Slice s around its first run of whitespace.

    Leading whitespace is skipped; the returned tail starts at the first
    non-whitespace character after the run.
    """
    s = s.lstrip()
    m = _SPACE_RE.search(s)
    if m is None:
        return s, ""
    return s[: m.start()], s[m.end() :]


class Args(list[str]):
    """Arguments split from an expression body."""

    def at(self, i: int) -> str:
        """Return the i-th argument without its trailing newline, or "" if out of range."""
        if i < 0 or i >= len(self):
            return ""
        return self[i].removesuffix("\n")


def parse_args(s: str, n: int) -> Args:
    """Split s into at most n whitespace-separated arguments.

    The final argument holds the remaining text verbatim. A negative n
    splits without limit; zero, or whitespace-only text, returns no
    arguments.
    """
    args = Args()
    if n == 0 or not s.strip():
        return args
    unlimited = n < 0
    while s:
        if n == 1 and not unlimited:
            args.append(s)
            break
        arg, s = cut_field(s)
        args.append(arg)
        n -= 1
    return args


def parse_args2(s: str) -> tuple[str, str]:
    args = parse_args(s, 2)
    return args.at(0), args.at(1)


def parse_args3(s: str) -> tuple[str, str, str]:
    args = parse_args(s, 3)
    return args.at(0), args.at(1), args.at(2)


@dataclass(frozen=True, slots=True)
class Expression:
    """One parsed command or blank line."""

    line: int = 0  # 1-indexed line of the command, not of its comments
    comment: str = ""
    name: str = ""
    body: str = ""

    def parse_args(self, n: int) -> Args:
        return parse_args(self.body, n)

    def string(self) -> str:
        """Format the expression as parseable source text.

        Whitespace between name and an inline tail collapses to one space.
        Every later body line is written back as a tab continuation line.
        """
        first, *rest = self.body.removesuffix("\n").split("\n")
        first = first.lstrip()
        parts = [f"{self.name} {first}" if first else self.name]
        parts += [f"\t{line}" for line in rest]
        return "\n".join(parts) + "\n"

    def __str__(self) -> str:
        return self.string()


@dataclass(frozen=True, slots=True)
class Expanded(Expression):
    """An expression with its source file and template call chain."""

    file: str = ""
    # Active template calls, outermost first. Empty at top level.
    stack: tuple[Expanded, ...] = ()

    @classmethod
    def wrap(cls, expr: Expression, file: str) -> Expanded:
        return cls(line=expr.line, comment=expr.comment, name=expr.name, body=expr.body, file=file)

    def caller(self) -> Expanded:
        """Return the immediate template call, or an empty Expanded at top level."""
        if self.stack:
            return self.stack[-1]
        return Expanded()

    def where(self) -> str:
        """Return "file:line: template@localline".

        line is the outermost call site, template the immediate caller and
        localline the line within that template's body. Top-level expressions
        report "main" as the template.
        """
        file = self.file or "<unknown>"
        if self.stack:
            bottom, caller = self.stack[0], self.stack[-1]
            return f"{file}:{bottom.line}: {caller.name}@{self.line}"
        return f"{file}:{self.line}: main@{self.line}"

    def location_for_error(self) -> str:
        if not self.stack:
            file = self.file or "<unknown>"
            if self.line == 0:
                return file
            return f"{file}:{self.line}"
        return self.where()
