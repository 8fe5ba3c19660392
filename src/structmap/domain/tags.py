"""Struct tag parsing — Go ``reflect.StructTag`` conventions.

A tag is a sequence of ``key:"value"`` pairs separated by spaces, e.g.
``json:"first_name,omitempty" db:"first_name"``. Pure functions, no
infrastructure dependencies.
"""

from __future__ import annotations

import json

DEFAULT_TAG_KEY = "json"
IGNORED_TAG_VALUE = "-"


def _unquote(quoted: str) -> str:
    """Unquote a double-quoted tag value, tolerating Go-only escapes."""
    try:
        value = json.loads(quoted)
    except ValueError:
        return quoted[1:-1]
    return value if isinstance(value, str) else quoted[1:-1]


def lookup_tag(tag: str, key: str) -> str | None:
    """Return the raw value stored under *key* in *tag*, or None if absent.

    Mirrors ``reflect.StructTag.Lookup``: parsing stops at the first
    malformed pair, so anything after it is invisible.
    """
    rest = tag
    while rest:
        rest = rest.lstrip(" ")
        if not rest:
            break

        i = 0
        while i < len(rest) and rest[i] > " " and rest[i] not in ':"' and rest[i] != "\x7f":
            i += 1
        if i == 0 or i + 1 >= len(rest) or rest[i] != ":" or rest[i + 1] != '"':
            break
        name = rest[:i]
        rest = rest[i + 1 :]

        i = 1
        while i < len(rest) and rest[i] != '"':
            if rest[i] == "\\":
                i += 1
            i += 1
        if i >= len(rest):
            break
        quoted = rest[: i + 1]
        rest = rest[i + 1 :]

        if name == key:
            return _unquote(quoted)
    return None


def tag_value(tag: str, key: str) -> str:
    """Return the name part of the *key* tag, or ``""`` when it never matches.

    The name is everything before the first comma. An absent tag and the
    ``-`` (skip) marker both yield ``""``.

    Examples:
        >>> tag_value('json:"first_name,omitempty"', "json")
        'first_name'
        >>> tag_value('json:"-"', "json")
        ''
    """
    if not tag:
        return ""
    raw = lookup_tag(tag, key)
    if not raw:
        return ""
    name = raw.split(",", 1)[0]
    if name == IGNORED_TAG_VALUE:
        return ""
    return name
