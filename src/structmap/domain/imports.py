"""Import alias management for generated Go source.

Every distinct package path seen during a run gets a deterministic alias
(``ref1``, ``ref2``, ... in first-seen order). Registration happens
everywhere; emission happens once at the end and keeps only the aliases
the final text actually references, so the generated file never carries
unused imports while alias numbering stays independent of usage.
"""

from __future__ import annotations

import re

ALIAS_PREFIX = "ref"

# Standard-library style paths without a separator ("time", "strconv").
_BARE_PATH = re.compile(r"^[a-z][a-z0-9_]*$")


def normalize_path(path: str) -> str:
    """Strip surrounding whitespace and quotes from an import path."""
    return path.strip().strip('"').strip()


def _referenced(name: str, text: str) -> bool:
    """Whether ``name.`` appears in *text* as a standalone qualifier."""
    return re.search(rf"(?<![\w.]){re.escape(name)}\.", text) is not None


class ImportAliasManager:
    """Path → alias table for one generation run.

    Paths without a ``/`` are not real third-party imports and never get
    an alias. Standard-library names among them are remembered as bare
    imports: they render under their own name and are emitted unaliased
    when referenced.
    """

    def __init__(self) -> None:
        self._aliases: dict[str, str] = {}
        self._bare: set[str] = set()
        self._counter = 1

    def register(self, path: str) -> None:
        """Bind the next alias to *path* on first sight. Idempotent."""
        path = normalize_path(path)
        if not path:
            return
        if "/" not in path:
            if _BARE_PATH.match(path):
                self._bare.add(path)
            return
        if path in self._aliases:
            return
        self._aliases[path] = f"{ALIAS_PREFIX}{self._counter}"
        self._counter += 1

    def alias_of(self, path: str) -> str:
        """Return the alias bound to *path*, or ``""`` if unregistered."""
        return self._aliases.get(normalize_path(path), "")

    def qualifier_for(self, path: str) -> str:
        """Return the identifier generated code uses to refer to *path*.

        The bound alias for registered paths, the package's own name for
        bare standard-library paths, otherwise ``""``.
        """
        path = normalize_path(path)
        alias = self._aliases.get(path)
        if alias:
            return alias
        if path in self._bare:
            return path
        return ""

    @property
    def registered(self) -> dict[str, str]:
        """Snapshot of the path → alias table in alias order."""
        return dict(self._aliases)

    def render(self, body: str) -> str:
        """Render the import block for *body*, dropping unreferenced paths.

        Returns ``""`` when nothing in *body* needs an import.
        """
        bare = [f'\t"{path}"' for path in sorted(self._bare) if _referenced(path, body)]
        aliased = [
            f'\t{alias} "{path}"'
            for path, alias in self._aliases.items()
            if _referenced(alias, body)
        ]
        if not bare and not aliased:
            return ""
        groups = [group for group in (bare, aliased) if group]
        lines = "\n\n".join("\n".join(group) for group in groups)
        return f"import (\n{lines}\n)"
