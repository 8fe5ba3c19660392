"""Field descriptors and the type descriptor store.

The store maps a qualified type key (``<package path>.<TypeName>``) to
its flattened, declaration-ordered field list. Lookup maps built from a
field list iterate it in order, so later declarations overwrite earlier
ones ("last write wins") while the ordered tuple keeps every entry.
"""

from __future__ import annotations

from dataclasses import dataclass

from structmap.domain.tags import tag_value
from structmap.domain.templates import TypeTemplate


@dataclass(frozen=True)
class FieldDescriptor:
    """A named struct member with its tag and placeholder-qualified type."""

    name: str
    tag: str
    type: TypeTemplate

    def tag_value(self, key: str) -> str:
        return tag_value(self.tag, key)

    def to_dict(self) -> dict[str, object]:
        return {
            "name": self.name,
            "tag": self.tag,
            "type": self.type.template,
            "imports": list(self.type.imports),
        }


def qualified_key(package_path: str, type_name: str) -> str:
    """Store key for *type_name* declared in *package_path*."""
    return f"{package_path}.{type_name}"


def index_by_name(fields: tuple[FieldDescriptor, ...]) -> dict[str, FieldDescriptor]:
    """Name → field, later duplicates shadowing earlier ones."""
    return {field.name: field for field in fields}


def index_by_tag(fields: tuple[FieldDescriptor, ...], key: str) -> dict[str, FieldDescriptor]:
    """Tag value → field for tag *key*; untagged and ``-`` fields are skipped."""
    result: dict[str, FieldDescriptor] = {}
    for field in fields:
        value = field.tag_value(key)
        if value:
            result[value] = field
    return result


class TypeDescriptorStore:
    """In-memory cache of resolved types for one generation run."""

    def __init__(self) -> None:
        self._types: dict[str, tuple[FieldDescriptor, ...]] = {}

    def add(self, key: str, fields: tuple[FieldDescriptor, ...]) -> None:
        self._types[key] = tuple(fields)

    def get(self, key: str) -> tuple[FieldDescriptor, ...] | None:
        return self._types.get(key)

    def __contains__(self, key: object) -> bool:
        return key in self._types

    def __len__(self) -> int:
        return len(self._types)

    def keys(self) -> list[str]:
        return list(self._types)
