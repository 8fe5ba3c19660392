"""Field matching — which source field feeds a destination field.

Precedence, first hit wins:

1. Custom field mappings: name-based rules first, then tag-based rules,
   each in declaration order.
2. Exact name equality (last-declared source field wins).
3. Tag equality on the mapping's tag key (last-declared wins).
4. No match — the assembler emits an explanatory comment instead.

Injected additional arguments pre-empt all of this and are checked by the
assembler before the matcher runs.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING

from structmap.domain.fields import FieldDescriptor, index_by_name, index_by_tag
from structmap.domain.tags import DEFAULT_TAG_KEY

if TYPE_CHECKING:
    from structmap.config.models import AdditionalArg, FieldOverride


class FieldMatcher:
    """Matches destination fields against one source field list.

    Name and tag lookup maps are built once per source type by iterating
    the ordered field list, so duplicate keys resolve to the last
    declaration.
    """

    def __init__(
        self,
        source_fields: tuple[FieldDescriptor, ...],
        overrides: Sequence[FieldOverride] = (),
        tag_key: str = DEFAULT_TAG_KEY,
    ) -> None:
        self._fields = source_fields
        self._overrides = tuple(overrides)
        self._tag_key = tag_key or DEFAULT_TAG_KEY
        self._by_name = index_by_name(source_fields)
        self._by_tag = index_by_tag(source_fields, self._tag_key)

    def match(self, dest: FieldDescriptor) -> FieldDescriptor | None:
        """Return the source field for *dest*, or None when unmapped."""
        found = self._match_override(dest)
        if found is not None:
            return found

        if dest.name in self._by_name:
            return self._by_name[dest.name]

        value = dest.tag_value(self._tag_key)
        if value:
            return self._by_tag.get(value)
        return None

    def _match_override(self, dest: FieldDescriptor) -> FieldDescriptor | None:
        for rule in self._overrides:
            if rule.dest_field and rule.dest_field == dest.name and rule.source_field:
                field = self._by_name.get(rule.source_field)
                if field is not None:
                    return field

        for rule in self._overrides:
            if not rule.dest_tag or not rule.source_tag:
                continue
            key = rule.tag or self._tag_key
            if dest.tag_value(key) != rule.dest_tag:
                continue
            for field in self._fields:
                if field.tag_value(key) == rule.source_tag:
                    return field
        return None


def match_source_field(
    dest: FieldDescriptor,
    source_fields: tuple[FieldDescriptor, ...],
    overrides: Sequence[FieldOverride] = (),
    tag_key: str = DEFAULT_TAG_KEY,
) -> FieldDescriptor | None:
    """One-shot form of :meth:`FieldMatcher.match`."""
    return FieldMatcher(source_fields, overrides, tag_key).match(dest)


def find_additional_arg(
    args: Sequence[AdditionalArg], dest: FieldDescriptor
) -> AdditionalArg | None:
    """First injected argument bound to *dest* by name."""
    for arg in args:
        if arg.dest_field == dest.name:
            return arg
    return None
