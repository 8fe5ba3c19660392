"""Package loading — import path → parsed :class:`GoPackage`.

The resolver only depends on the :class:`PackageSource` protocol, so tests
can substitute synthetic packages. :class:`GoPackageLoader` is the
filesystem implementation and mirrors where the go command looks:

1. ``""`` / ``"."`` — the package in the work directory
2. the main module (``module`` directive of the nearest go.mod)
3. local ``replace`` directives
4. ``vendor/``
5. ``$GOROOT/src`` (standard library)
6. the module cache, using the version from ``require``

Loaded packages and load failures are both cached for the loader's lifetime.
"""

from __future__ import annotations

import logging
import os
import re
import shutil
from pathlib import Path
from typing import Protocol

from structmap.domain.errors import PackageNotFoundError
from structmap.infrastructure.golang.ast import GoFile, GoPackage
from structmap.infrastructure.golang.gomod import (
    GoMod,
    escape_module_path,
    find_gomod,
    load_gomod,
)
from structmap.infrastructure.golang.parser import GoSyntaxError, is_build_ignored, parse_go_source

logger = logging.getLogger(__name__)

_MAJOR_VERSION = re.compile(r"^v\d+$")


class PackageSource(Protocol):
    """Anything that can turn an import path into a parsed package."""

    def load(self, path: str) -> GoPackage: ...


def guess_package_name(path: str) -> str:
    """Conventional package name for an import path that cannot be loaded.

    Uses the last path element, skipping a ``/vN`` major-version suffix and
    trimming ``go-`` / ``.go`` decorations, the same heuristic goimports uses.

    Examples:
        >>> guess_package_name("github.com/google/uuid")
        'uuid'
        >>> guess_package_name("gopkg.in/yaml.v3")
        'yaml'
        >>> guess_package_name("github.com/jackc/pgx/v5")
        'pgx'
    """
    parts = [p for p in path.split("/") if p]
    if not parts:
        return ""
    name = parts[-1]
    if _MAJOR_VERSION.match(name) and len(parts) > 1:
        name = parts[-2]
    name = name.removeprefix("go-").removesuffix(".go")
    name = re.sub(r"\.v\d+$", "", name)
    return re.sub(r"\W", "_", name)


def detect_goroot(explicit: str | None = None) -> Path | None:
    """GOROOT from settings, the environment, or the ``go`` binary location."""
    candidate = explicit or os.environ.get("GOROOT")
    if candidate:
        return Path(candidate).expanduser()
    go_binary = shutil.which("go")
    if go_binary is None:
        return None
    root = Path(go_binary).resolve().parent.parent
    return root if (root / "src").is_dir() else None


def detect_gomodcache(explicit: str | None = None) -> Path:
    """GOMODCACHE from settings, the environment, or ``$GOPATH/pkg/mod``."""
    candidate = explicit or os.environ.get("GOMODCACHE")
    if candidate:
        return Path(candidate).expanduser()
    gopath = os.environ.get("GOPATH", "").split(os.pathsep)[0]
    base = Path(gopath).expanduser() if gopath else Path.home() / "go"
    return base / "pkg" / "mod"


def _is_source_file(path: Path) -> bool:
    return path.suffix == ".go" and not path.name.endswith("_test.go") and path.is_file()


class GoPackageLoader:
    """Filesystem :class:`PackageSource` rooted at a work directory."""

    def __init__(
        self,
        work_dir: Path | None = None,
        *,
        goroot: str | None = None,
        gomodcache: str | None = None,
    ) -> None:
        self._work_dir = (work_dir or Path.cwd()).resolve()
        gomod_path = find_gomod(self._work_dir)
        self._gomod: GoMod | None = load_gomod(gomod_path) if gomod_path else None
        self._goroot = detect_goroot(goroot)
        self._gomodcache = detect_gomodcache(gomodcache)
        self._cache: dict[str, GoPackage | PackageNotFoundError] = {}

    @property
    def work_dir(self) -> Path:
        return self._work_dir

    @property
    def module(self) -> str:
        """Main module path, or ``""`` outside a module."""
        return self._gomod.module if self._gomod else ""

    def load(self, path: str) -> GoPackage:
        """Load and parse the package at import *path*.

        Raises:
            PackageNotFoundError: if the path cannot be located, has no Go
                files, or a file's package clause / imports do not parse.
        """
        key = path.strip().strip('"')
        cached = self._cache.get(key)
        if isinstance(cached, PackageNotFoundError):
            raise cached
        if cached is not None:
            return cached
        try:
            package = self._load(key)
        except PackageNotFoundError as exc:
            self._cache[key] = exc
            raise
        self._cache[key] = package
        return package

    def locate(self, path: str) -> tuple[str, Path]:
        """Return ``(import path, directory)`` for *path*.

        Raises:
            PackageNotFoundError: if no candidate directory exists.
        """
        if path in ("", "."):
            return self._work_dir_import_path(), self._work_dir

        for candidate in self._candidates(path):
            if candidate.is_dir():
                return path, candidate
        msg = (
            f"failed to load package {path}: "
            "cannot find it in the module, vendor, GOROOT or module cache"
        )
        raise PackageNotFoundError(msg, package=path)

    def _candidates(self, path: str) -> list[Path]:
        candidates: list[Path] = []
        gomod = self._gomod
        if gomod is not None:
            if gomod.module and (path == gomod.module or path.startswith(gomod.module + "/")):
                candidates.append(gomod.root / path[len(gomod.module) :].lstrip("/"))
            for replacement in gomod.replaces:
                old = replacement.old_path
                if replacement.is_local and (path == old or path.startswith(old + "/")):
                    rest = path[len(old) :].lstrip("/")
                    candidates.append((gomod.root / replacement.new_path / rest).resolve())
            candidates.append(gomod.root / "vendor" / path)
        if self._goroot is not None:
            candidates.append(self._goroot / "src" / path)
        cached = self._module_cache_dir(path)
        if cached is not None:
            candidates.append(cached)
        return candidates

    def _module_cache_dir(self, path: str) -> Path | None:
        if self._gomod is None:
            return None
        versions = dict(self._gomod.requires)
        for replacement in self._gomod.replaces:
            if replacement.new_version is not None:
                versions[replacement.old_path] = replacement.new_version
        owners = [m for m in versions if path == m or path.startswith(m + "/")]
        if not owners:
            return None
        module = max(owners, key=len)
        real = module
        for replacement in self._gomod.replaces:
            if replacement.old_path == module and replacement.new_version is not None:
                real = replacement.new_path
        rest = path[len(module) :].lstrip("/")
        return self._gomodcache / f"{escape_module_path(real)}@{versions[module]}" / rest

    def _work_dir_import_path(self) -> str:
        gomod = self._gomod
        if gomod is None or not gomod.module:
            return ""
        rel = self._work_dir.relative_to(gomod.root.resolve()).as_posix()
        return gomod.module if rel == "." else f"{gomod.module}/{rel}"

    def _load(self, path: str) -> GoPackage:
        import_path, directory = self.locate(path)
        files: list[GoFile] = []
        for file_path in sorted(p for p in directory.iterdir() if _is_source_file(p)):
            source = file_path.read_text(encoding="utf-8")
            if is_build_ignored(source):
                continue
            try:
                files.append(parse_go_source(source, filename=str(file_path)))
            except GoSyntaxError as exc:
                msg = f"failed to load package {path or import_path}: {exc}"
                raise PackageNotFoundError(msg, package=path) from exc
        if not files:
            msg = f"failed to load package {path or import_path}: no Go files in {directory}"
            raise PackageNotFoundError(msg, package=path)

        logger.debug("Loaded package %s from %s (%d files)", import_path, directory, len(files))
        return GoPackage(
            name=files[0].package,
            path=import_path,
            directory=str(directory),
            files=tuple(files),
        )
