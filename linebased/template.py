"""
Template definitions and the per-engine registry that holds them.

    define greet name
    	echo Hello, $name!

The header names the template and its positional parameters; the
continuation lines are the raw, unexpanded body.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from .errors import DefinitionError, quote
from .expression import Expanded, cut_field
from .params import references

logger = logging.getLogger("linebased.template")


@dataclass(frozen=True, slots=True)
class Template:
    name: str
    params: tuple[str, ...]
    body: str
    source: Expanded  # the `define` expression

    @property
    def file(self) -> str:
        return self.source.file

    @property
    def line(self) -> int:
        return self.source.line


def _valid_name(name: str) -> bool:
    return not any(ch.isspace() or not ch.isprintable() for ch in name)


def make_template(decl: Expanded) -> Template:
    """Parse a `define` expression into a Template."""
    if decl.name != "define":
        raise ValueError(f"internal error: expected 'define', got {quote(decl.name)}")

    head, _, body = decl.body.partition("\n")
    name, rest = cut_field(head)
    if not name:
        raise DefinitionError("define: missing name argument")
    if not _valid_name(name):
        raise DefinitionError(f"define: name contains invalid characters: {quote(name)}")

    params = tuple(rest.split())
    if len(set(params)) != len(params):
        logger.warning("%s: template %s declares duplicate parameter names %s", decl.location_for_error(), name, params)
    unknown = sorted({ref for ref in references(body) if ref not in params})
    if unknown:
        logger.debug("%s: template %s references undeclared parameters %s", decl.location_for_error(), name, unknown)
    return Template(name=name, params=params, body=body, source=decl)


class TemplateRegistry:
    """Append-only name -> Template map owned by one expansion engine."""

    def __init__(self) -> None:
        self._templates: dict[str, Template] = {}

    def __contains__(self, name: object) -> bool:
        return name in self._templates

    def __len__(self) -> int:
        return len(self._templates)

    def get(self, name: str) -> Template | None:
        return self._templates.get(name)

    def names(self) -> list[str]:
        return list(self._templates)

    def define(self, template: Template) -> None:
        """Store template; a second definition of the same name is rejected."""
        prev = self._templates.get(template.name)
        if prev is not None:
            raise DefinitionError(
                f"template {quote(template.name)} redefined; previous define: {prev.file}:{prev.line}"
            )
        self._templates[template.name] = template
        logger.debug(
            "defined template %s%s at %s:%d", template.name, list(template.params), template.file, template.line
        )
