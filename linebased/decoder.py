"""
Tokenizer for linebased scripts.

Reads a text stream line by line and produces Expression records:

    # comment lines attach to the next expression
    name the rest of the line is the body
    	continuation lines start with one tab (stripped)

A line starting with a space, or a tab that does not continue a command,
is a syntax error and ends the stream.
"""

from __future__ import annotations

import io
import re
from collections.abc import Iterator
from typing import TextIO

from .errors import ScriptSyntaxError
from .expression import Expression

_NAME_END_RE = re.compile(r"[ \t\n]")


def _parse_body(body: str) -> tuple[str, str]:
    m = _NAME_END_RE.search(body)
    if m is None:
        return body.strip(), ""
    return body[: m.start()].strip(), body[m.start() :].lstrip(" \t")


def _make_expr(line: int, comment: str, body: str) -> Expression:
    name, tail = _parse_body(body)
    return Expression(line=line, comment=comment, name=name, body=tail)


class Decoder:
    """Reads expressions from a text stream (or a string)."""

    def __init__(self, reader: TextIO | str) -> None:
        if isinstance(reader, str):
            reader = io.StringIO(reader)
        self._reader = reader
        self._line = 0
        self._lookahead: str | None = None
        self._err: ScriptSyntaxError | None = None

    @property
    def line(self) -> int:
        """Number of lines read so far."""
        return self._line

    def _read_line(self) -> str:
        self._line += 1
        if self._lookahead is not None:
            line, self._lookahead = self._lookahead, None
            return line
        return self._reader.readline()

    def _peek(self) -> str:
        """Return the first character of the next line without consuming it."""
        if self._lookahead is None:
            self._lookahead = self._reader.readline()
        return self._lookahead[:1]

    def decode(self) -> Expression:
        """Return the next expression.

        Raises EOFError at end of input and ScriptSyntaxError on malformed
        input; after a syntax error every call raises the same error.
        """
        if self._err is not None:
            raise self._err

        comments: list[str] = []
        while True:
            line = self._read_line()
            if not line:
                if comments:
                    # Trailing comments surface as a final blank expression.
                    comment = "".join(comments)
                    line_no = self._line if comment.endswith("\n") else self._line - 1
                    return _make_expr(line_no, comment, "")
                raise EOFError

            first = line[0]
            if first == "\n":
                return Expression(line=self._line, comment="".join(comments))
            if first == "#":
                comments.append(line)
                continue
            if first in " \t":
                self._err = ScriptSyntaxError(line=self._line, message="unexpected whitespace at start of line")
                raise self._err

            start = self._line
            body = [line]
            while self._peek() == "\t":
                body.append(self._read_line()[1:])
            return _make_expr(start, "".join(comments), "".join(body))

    def __iter__(self) -> Iterator[Expression]:
        while True:
            try:
                expr = self.decode()
            except EOFError:
                return
            yield expr

    def close(self) -> None:
        close = getattr(self._reader, "close", None)
        if close is not None:
            close()


def iter_expressions(text: str) -> Iterator[Expression]:
    """Yield the raw expressions of a script held in memory."""
    yield from Decoder(text)
