"""
Template and include expansion for linebased scripts.

ExpandingDecoder reads expressions from an entry file, consumes `define`
and `include` directives, expands template calls and returns a flat stream
of Expanded values. It stops at the first error: once decode() has raised
an ExpressionError it raises the same error on every later call.
"""

from __future__ import annotations

import enum
import io
import logging
import posixpath
from collections.abc import Iterator
from dataclasses import replace
from typing import TextIO

from .config import ExpandConfig
from .decoder import Decoder
from .errors import DefinitionError, ExpressionError, IncludeError, InvocationError, ScriptSyntaxError, quote
from .expression import Expanded, parse_args
from .fs import FileSystem
from .params import ParamSubstitution
from .stacks import CallStack, DecoderFrame, DecoderStack, IncludeStack, PendingQueue
from .template import Template, TemplateRegistry, make_template

logger = logging.getLogger("linebased.expander")

__all__ = [
    "DecoderState",
    "ExpandingDecoder",
    "expand",
    "expand_pairs",
    "write_stack",
]


class DecoderState(enum.Enum):
    RUNNING = "running"
    POISONED = "poisoned"
    FINISHED = "finished"


def write_stack(out: TextIO, prefix: str, frames: tuple[Expanded, ...] | list[Expanded]) -> None:
    """Write one "<prefix><where>> <source>" line per frame."""
    for frame in frames:
        out.write(f"{prefix}{frame.where()}> {frame.string()}")


class ExpandingDecoder:
    """Pull-based decoder that expands templates and includes.

    Include paths are opened from fsys directly, with the configured
    extension appended; there is no path resolution relative to the
    including file.
    """

    def __init__(self, name: str, fsys: FileSystem, *, config: ExpandConfig | None = None) -> None:
        self.config = config or ExpandConfig()
        self.templates = TemplateRegistry()
        self.state = DecoderState.RUNNING
        self._fsys = fsys
        self._root = self.config.root
        self._decoders = DecoderStack()
        self._includes = IncludeStack()
        self._calls = CallStack()
        self._pending = PendingQueue()
        self._err: ExpressionError | None = None

        try:
            handle = fsys.open(name)
        except (OSError, UnicodeDecodeError) as exc:
            self._poison(ExpressionError(Expanded(line=1, file=name), exc))
            return
        self._decoders.push(DecoderFrame(decoder=Decoder(handle), file=name, handle=handle))
        self._includes.push(name)

    @property
    def error(self) -> ExpressionError | None:
        return self._err

    def set_root(self, root: str) -> None:
        """Set a prefix for file names in locations. Files are still opened from fsys."""
        self._root = root

    def _file_path(self, name: str) -> str:
        if not self._root:
            return name
        return posixpath.normpath(posixpath.join(self._root, name))

    def _poison(self, err: ExpressionError) -> ExpressionError:
        self.state = DecoderState.POISONED
        self._err = err
        self._decoders.close()
        logger.debug("expansion stopped: %s", err)
        return err

    def decode(self) -> Expanded:
        """Return the next expanded expression.

        Raises EOFError when the input is exhausted and ExpressionError on
        failure.
        """
        if self._err is not None:
            raise self._err
        if self.state is DecoderState.FINISHED:
            raise EOFError

        while True:
            if self._pending:
                return self._pending.popleft()

            if not self._decoders:
                self.state = DecoderState.FINISHED
                raise EOFError

            frame = self._decoders.top()
            file = self._file_path(frame.file)
            try:
                raw = frame.decoder.decode()
            except EOFError:
                self._decoders.pop()
                self._includes.pop()
                continue
            except ScriptSyntaxError as exc:
                raise self._poison(ExpressionError(Expanded(line=exc.line, file=file), exc))
            except (OSError, UnicodeDecodeError) as exc:
                raise self._poison(ExpressionError(Expanded(line=frame.decoder.line, file=file), exc))

            expr = Expanded.wrap(raw, file)
            try:
                results = self._classify(expr, nested=False)
            except ExpressionError as exc:
                raise self._poison(exc)
            except Exception as exc:
                raise self._poison(ExpressionError(expr, exc))
            if results:
                self._pending.extend(results[1:])
                return results[0]
            # define/include or an empty expansion: read on.

    def __iter__(self) -> Iterator[Expanded]:
        while True:
            try:
                expr = self.decode()
            except EOFError:
                return
            yield expr

    def close(self) -> None:
        self._decoders.close()

    def __enter__(self) -> ExpandingDecoder:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def _classify(self, expr: Expanded, *, nested: bool) -> list[Expanded]:
        """Handle one expression; return what it expands to, in order.

        Directives are only recognised at file level. Inside a template body
        `include` is an ordinary name and `define` is rejected by the caller.
        """
        if not nested:
            if expr.name == "define":
                self._define(expr)
                return []
            if expr.name == "include":
                self._include(expr)
                return []

        if expr.name == "":
            return [expr]

        template = self.templates.get(expr.name)
        if template is None or not template.body:
            return [replace(expr, stack=self._calls.frames())]
        return self._expand_template(template, expr)

    def _define(self, expr: Expanded) -> None:
        try:
            self.templates.define(make_template(expr))
        except DefinitionError as exc:
            raise ExpressionError(expr, exc)

    def _include(self, expr: Expanded) -> None:
        ext = self.config.extension
        args = parse_args(expr.body, -1)
        if not args:
            raise ExpressionError(expr, IncludeError("include: missing filename"))
        if len(args) > 1:
            raise ExpressionError(expr, IncludeError(f"include: expects 1 argument, got {len(args)}"))
        path = args.at(0)
        if "/" in path:
            raise ExpressionError(
                expr, IncludeError(f"include: path {quote(path)} contains '/'; only root-level includes are allowed")
            )
        if ext and path.endswith(ext):
            raise ExpressionError(
                expr,
                IncludeError(
                    f"include: path {quote(path)} has {ext} extension; "
                    "the extension is not required and will be added automatically"
                ),
            )
        path += ext

        if not self._includes.push(path):
            raise ExpressionError(expr, IncludeError(f"include cycle detected: {self._includes.cycle(path)}"))

        try:
            handle = self._fsys.open(path)
        except (OSError, UnicodeDecodeError) as exc:
            self._includes.pop()
            raise ExpressionError(expr, exc)

        self._decoders.push(DecoderFrame(decoder=Decoder(handle), file=path, handle=handle))
        logger.debug("%s: include %s", expr.location_for_error(), path)

    def _recursion_message(self, callsite: Expanded) -> str:
        buf = io.StringIO()
        buf.write(f"recursion detected in template {callsite.name}:\n")
        write_stack(buf, "    ", self._calls.frames())
        return buf.getvalue().removesuffix("\n")

    def _expand_template(self, template: Template, callsite: Expanded) -> list[Expanded]:
        # Record the chain before the recursion check so the report shows it.
        callsite = replace(callsite, stack=self._calls.frames())

        with self._calls.entered(callsite) as initial:
            if not initial:
                raise ExpressionError(callsite, InvocationError(self._recursion_message(callsite)))

            args = parse_args(callsite.body, len(template.params))
            if len(args) != len(template.params):
                raise ExpressionError(
                    callsite,
                    InvocationError(
                        f"template {quote(template.name)} expects {len(template.params)} arguments, got {len(args)}"
                    ),
                )

            logger.debug("%s: expand %s%s", callsite.where(), template.name, list(args))
            results: list[Expanded] = []
            body = Decoder(template.body)
            while True:
                try:
                    raw = body.decode()
                except EOFError:
                    break
                except ScriptSyntaxError as exc:
                    raise ExpressionError(Expanded(line=exc.line, file=template.file), exc)

                subst = ParamSubstitution(template.params, args)
                expr = Expanded(
                    line=raw.line,
                    comment=raw.comment,
                    name=subst.apply(raw.name),
                    body=subst.apply(raw.body),
                    file=template.file,
                )
                if subst.missing is not None:
                    raise ExpressionError(
                        template.source, InvocationError(f"unknown parameter reference: {quote(subst.missing)}")
                    )
                if expr.name == "define":
                    raise ExpressionError(
                        callsite,
                        InvocationError(
                            f"expansion of {quote(template.name)} contains illegal nested define: "
                            f"{quote(expr.string())}"
                        ),
                    )

                for result in self._classify(expr, nested=True):
                    # Nested expansions already carry their deeper chain.
                    if not result.stack:
                        result = replace(result, stack=self._calls.frames())
                    results.append(result)
            return results


def expand(
    name: str,
    fsys: FileSystem,
    *,
    root: str = "",
    config: ExpandConfig | None = None,
) -> Iterator[Expanded]:
    """Yield the expanded expressions of the named script.

    Raises ExpressionError at the first failure.
    """
    with ExpandingDecoder(name, fsys, config=config) as dec:
        if root:
            dec.set_root(root)
        yield from dec


def expand_pairs(
    name: str,
    fsys: FileSystem,
    *,
    root: str = "",
    config: ExpandConfig | None = None,
) -> Iterator[tuple[Expanded | None, ExpressionError | None]]:
    """Yield (expr, None) pairs, then a final (None, err) pair on failure."""
    try:
        for expr in expand(name, fsys, root=root, config=config):
            yield expr, None
    except ExpressionError as exc:
        yield None, exc
