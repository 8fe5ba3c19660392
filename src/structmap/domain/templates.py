"""Type templates and the sandboxed code-template evaluator.

Templates use named placeholders only: ``{{ .Source }}``, ``{{ .Dest }}``,
``{{ .Error }}`` and indexed import placeholders ``{{ .Import0 }}``. The
leading dot (Go template style) is optional. Rendering runs in a Jinja2
sandbox with strict undefined variables, so a typo in a placeholder is a
:class:`TemplateError` instead of silently empty output.
"""

from __future__ import annotations

import functools
import re
from collections.abc import Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING

from jinja2 import StrictUndefined, Template
from jinja2 import TemplateError as JinjaTemplateError
from jinja2.sandbox import SandboxedEnvironment

from structmap.domain.errors import TemplateError

if TYPE_CHECKING:
    from structmap.domain.imports import ImportAliasManager

# "{{ .Name" / "{{- .Name" → "{{ Name" (Jinja has no leading-dot syntax).
_GO_STYLE_REFERENCE = re.compile(r"(\{\{-?\s*)\.(?=[A-Za-z_])")
_IMPORT_QUALIFIER = re.compile(r"\{\{-?\s*\.?Import(\d+)\s*-?\}\}\.")

_ENV = SandboxedEnvironment(undefined=StrictUndefined, autoescape=False)


def import_placeholder(index: int) -> str:
    """The placeholder text for the *index*-th import of a template."""
    return f"{{{{ .Import{index} }}}}"


@functools.lru_cache(maxsize=1024)
def compile_template(source: str, kind: str = "template") -> Template:
    """Compile *source* into a sandboxed template.

    Raises:
        TemplateError: if the template does not parse.
    """
    try:
        return _ENV.from_string(_GO_STYLE_REFERENCE.sub(r"\1", source))
    except JinjaTemplateError as exc:
        msg = f"malformed {kind} template {source!r}: {exc}"
        raise TemplateError(msg, template=source, kind=kind) from exc


def render_template(source: str, data: Mapping[str, str], kind: str = "template") -> str:
    """Render *source* with *data* as the only visible names.

    Raises:
        TemplateError: if the template does not parse or references a
            name missing from *data*.
    """
    template = compile_template(source, kind)
    try:
        return template.render(**data)
    except JinjaTemplateError as exc:
        msg = f"failed to render {kind} template {source!r}: {exc}"
        raise TemplateError(msg, template=source, kind=kind) from exc


def import_data(imports: tuple[str, ...], aliases: ImportAliasManager) -> dict[str, str]:
    """Bind ``ImportN`` names to the qualifiers of *imports*."""
    return {f"Import{idx}": aliases.qualifier_for(path) for idx, path in enumerate(imports)}


@dataclass(frozen=True)
class TypeTemplate:
    """A Go type expression whose package qualifiers are placeholders.

    ``TypeTemplate("[]{{ .Import0 }}.User", ("example.com/app/models",))``
    renders to ``[]ref1.User`` once the path is bound to ``ref1``.
    """

    template: str
    imports: tuple[str, ...] = ()

    @property
    def package_path(self) -> str:
        """Package the template's named type lives in (first import)."""
        return self.imports[0] if self.imports else ""

    def render(self, aliases: ImportAliasManager) -> str:
        return render_template(self.template, import_data(self.imports, aliases), "type")

    def unaliased(self) -> str:
        """The type text with every in-range import qualifier removed."""

        def strip(match: re.Match[str]) -> str:
            return "" if int(match.group(1)) < len(self.imports) else match.group(0)

        return _IMPORT_QUALIFIER.sub(strip, self.template)

    def equals(self, other: TypeTemplate, aliases: ImportAliasManager) -> bool:
        """Rendered-text equality under the current alias bindings."""
        return self.render(aliases) == other.render(aliases)
