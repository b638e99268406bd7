"""Positional parameter substitution for template bodies.

Supported references:
- Bare: `$name` (name = letters, digits, underscore)
- Braced: `${name}`, needed when the value is followed by identifier characters

This is a single left-to-right scan, not a template language: no nesting,
no escaping, no defaults. A `$` that does not start a reference is kept.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Sequence

_PARAM_RE = re.compile(r"\$(?:\{([^}]*)\}|([A-Za-z0-9_]+))")


def expand_refs(text: str, mapping: Callable[[str], str]) -> str:
    """Replace every reference in text with mapping(name)."""
    if "$" not in text:
        return text

    def _repl(match: re.Match[str]) -> str:
        braced, bare = match.group(1), match.group(2)
        name = braced if braced is not None else bare
        if not name:
            # "${}" has no name; drop it.
            return ""
        return mapping(name)

    return _PARAM_RE.sub(_repl, text)


def references(text: str) -> list[str]:
    """Return the parameter names referenced in text, in order of appearance."""
    out: list[str] = []
    for match in _PARAM_RE.finditer(text):
        name = match.group(1) if match.group(1) is not None else match.group(2)
        if name:
            out.append(name)
    return out


class ParamSubstitution:
    """Binds call arguments to template parameters by position.

    Unknown references expand to "" and the first one is kept in `missing`
    so the caller can report it after the scan.
    """

    def __init__(self, params: Sequence[str], args: Sequence[str]) -> None:
        self._params = list(params)
        self._args = list(args)
        self.missing: str | None = None

    def lookup(self, name: str) -> str:
        try:
            i = self._params.index(name)
        except ValueError:
            if self.missing is None:
                self.missing = name
            return ""
        return self._args[i].removesuffix("\n")

    def apply(self, text: str) -> str:
        return expand_refs(text, self.lookup)
