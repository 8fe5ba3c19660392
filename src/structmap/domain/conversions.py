"""Conversion resolution — pick the rule that converts one type to another.

Mapping-local rules are searched before global rules. Within each list,
declaration order decides, and for every rule a forward match is tried
before a reverse match. A reverse match is only eligible when the rule
declares a reverse template. There is no scoring.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING

from structmap.domain.templates import TypeTemplate, import_data, render_template

if TYPE_CHECKING:
    from structmap.config.models import Conversion
    from structmap.domain.imports import ImportAliasManager

SOURCE_VAR = "Source"
DEST_VAR = "Dest"
ERROR_VAR = "Error"


@dataclass(frozen=True)
class ConversionMatch:
    """A matched rule and the direction it applies in."""

    rule: Conversion
    reverse: bool = False

    def render(
        self,
        source_expr: str,
        dest_expr: str,
        error_expr: str,
        aliases: ImportAliasManager,
    ) -> tuple[str, bool]:
        """Render the matched template; returns ``(code, fallible)``."""
        if self.reverse:
            return render_reverse(self.rule, source_expr, dest_expr, error_expr, aliases)
        return render_forward(self.rule, source_expr, dest_expr, error_expr, aliases)


def _template_data(
    rule: Conversion, source_expr: str, dest_expr: str, error_expr: str, aliases: ImportAliasManager
) -> dict[str, str]:
    data = import_data(tuple(rule.imports), aliases)
    data[SOURCE_VAR] = source_expr
    data[DEST_VAR] = dest_expr
    data[ERROR_VAR] = error_expr
    return data


def render_forward(
    rule: Conversion, source_expr: str, dest_expr: str, error_expr: str, aliases: ImportAliasManager
) -> tuple[str, bool]:
    data = _template_data(rule, source_expr, dest_expr, error_expr, aliases)
    code = render_template(rule.conversion.tmpl, data, "conversion")
    return code, rule.conversion.error


def render_reverse(
    rule: Conversion, source_expr: str, dest_expr: str, error_expr: str, aliases: ImportAliasManager
) -> tuple[str, bool]:
    """Render the reverse template, or a bare assignment when there is none."""
    reverse = rule.reverse_conversion
    if reverse is None or not reverse.tmpl:
        return f"{dest_expr} = {source_expr}", False
    data = _template_data(rule, source_expr, dest_expr, error_expr, aliases)
    return render_template(reverse.tmpl, data, "reverse_conversion"), reverse.error


def _forward_matches(
    rule: Conversion, source: TypeTemplate, dest: TypeTemplate, aliases: ImportAliasManager
) -> bool:
    return rule.source_template().equals(source, aliases) and rule.dest_template().equals(
        dest, aliases
    )


def _reverse_matches(
    rule: Conversion, source: TypeTemplate, dest: TypeTemplate, aliases: ImportAliasManager
) -> bool:
    if not rule.has_reverse:
        return False
    return rule.dest_template().equals(source, aliases) and rule.source_template().equals(
        dest, aliases
    )


def resolve_conversion(
    source: TypeTemplate,
    dest: TypeTemplate,
    local_rules: Sequence[Conversion],
    global_rules: Sequence[Conversion],
    aliases: ImportAliasManager,
) -> ConversionMatch | None:
    """Find the first rule converting *source* into *dest*, or None."""
    for rules in (local_rules, global_rules):
        for rule in rules:
            if _forward_matches(rule, source, dest, aliases):
                return ConversionMatch(rule)
            if _reverse_matches(rule, source, dest, aliases):
                return ConversionMatch(rule, reverse=True)
    return None
