"""Minimal ``go.mod`` reader: module path, requirements and replacements.

Only the directives the package loader needs to map an import path to a
directory are understood; everything else is ignored.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import Path

GOMOD_FILENAME = "go.mod"

_COMMENT = re.compile(r"//.*$")
_BLOCK_START = re.compile(r"^(require|replace|exclude|retract|tool|godebug)\s*\($")
_UPPER = re.compile(r"[A-Z]")


@dataclass(frozen=True)
class Replacement:
    """``replace old [v] => new [v]``; ``new_version`` is None for local paths."""

    old_path: str
    new_path: str
    new_version: str | None = None

    @property
    def is_local(self) -> bool:
        return self.new_version is None and self.new_path.startswith((".", "/"))


@dataclass(frozen=True)
class GoMod:
    path: Path
    module: str
    requires: dict[str, str] = field(default_factory=dict)
    replaces: tuple[Replacement, ...] = ()

    @property
    def root(self) -> Path:
        return self.path.parent


def _unquote(token: str) -> str:
    return token[1:-1] if token.startswith('"') and token.endswith('"') else token


def _apply(
    directive: str,
    args: list[str],
    requires: dict[str, str],
    replaces: list[Replacement],
) -> str | None:
    """Record one directive line; returns the module path for ``module``."""
    args = [_unquote(a) for a in args]
    if directive == "module" and args:
        return args[0]
    if directive == "require" and len(args) >= 2:
        requires[args[0]] = args[1]
    elif directive == "replace" and "=>" in args:
        idx = args.index("=>")
        target = args[idx + 1 :]
        if args[:idx] and target:
            replaces.append(
                Replacement(
                    old_path=args[0],
                    new_path=target[0],
                    new_version=target[1] if len(target) > 1 else None,
                )
            )
    return None


def parse_gomod(text: str, path: Path) -> GoMod:
    """Parse go.mod *text* read from *path*."""
    module = ""
    requires: dict[str, str] = {}
    replaces: list[Replacement] = []
    block: str | None = None

    for raw_line in text.splitlines():
        line = _COMMENT.sub("", raw_line).strip()
        if not line:
            continue
        if block is not None:
            if line == ")":
                block = None
                continue
            _apply(block, line.split(), requires, replaces)
            continue
        start = _BLOCK_START.match(line)
        if start:
            block = start.group(1)
            continue
        directive, *args = line.split()
        found = _apply(directive, args, requires, replaces)
        if found:
            module = found

    return GoMod(path=path, module=module, requires=requires, replaces=tuple(replaces))


def find_gomod(start: Path) -> Path | None:
    """Walk up from *start* looking for go.mod, like the go command does."""
    current = start.resolve()
    while True:
        candidate = current / GOMOD_FILENAME
        if candidate.is_file():
            return candidate
        parent = current.parent
        if parent == current:
            return None
        current = parent


def load_gomod(path: Path) -> GoMod:
    return parse_gomod(path.read_text(encoding="utf-8"), path)


def escape_module_path(path: str) -> str:
    """Module cache case-encoding: ``github.com/Azure/x`` → ``github.com/!azure/x``."""
    return _UPPER.sub(lambda m: "!" + m.group(0).lower(), path)
