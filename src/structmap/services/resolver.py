"""TypeResolver — (package path, type name) → flattened field list.

Resolution walks the parsed declarations of a package:

* a struct yields one descriptor per named member, with embedded members
  expanded in place (depth-first, at the embedding position);
* ``type A B`` / ``type A = B`` and their ``pkg.B`` forms follow the
  target, in the same package or through the declaring file's imports;
* anything else is an unsupported declaration.

The visited set is carried per branch, so two siblings embedding the same
type are fine while a type reaching itself is a circular reference.
"""

from __future__ import annotations

import logging
import re

from structmap.domain.errors import (
    CircularReferenceError,
    PackageNotFoundError,
    ResolutionError,
    TypeNotFoundError,
    UnsupportedDeclarationError,
)
from structmap.domain.fields import FieldDescriptor, qualified_key
from structmap.domain.imports import normalize_path
from structmap.domain.templates import TypeTemplate, import_placeholder
from structmap.infrastructure.golang.ast import (
    GoFile,
    GoPackage,
    Ident,
    Interface,
    Pointer,
    Qualified,
    Struct,
    StructField,
    TypeExpr,
    TypeSpec,
)
from structmap.infrastructure.golang.packages import guess_package_name
from structmap.services.context import GenerationContext

logger = logging.getLogger(__name__)

Visited = frozenset[tuple[str, str]]

# Embedding these contributes no fields.
_PREDECLARED_EMBEDS = frozenset({"error", "any", "comparable"})

_PREDECLARED_TYPES = frozenset(
    {
        "bool",
        "byte",
        "complex64",
        "complex128",
        "error",
        "float32",
        "float64",
        "int",
        "int8",
        "int16",
        "int32",
        "int64",
        "rune",
        "string",
        "uint",
        "uint8",
        "uint16",
        "uint32",
        "uint64",
        "uintptr",
        "any",
        "comparable",
    }
)


class TypeResolver:
    """Resolve Go struct types into field descriptors for one run."""

    def __init__(self, context: GenerationContext) -> None:
        self._ctx = context
        self._package_names: dict[str, str] = {}

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def resolve(
        self,
        package_path: str,
        type_name: str,
        visited: Visited = frozenset(),
    ) -> tuple[FieldDescriptor, ...]:
        """Return the flattened fields of *type_name* in *package_path*.

        Results are cached in the context's store under the qualified key.

        Raises:
            ResolutionError: package not loadable, type not found, an
                unsupported alias or embedded member, or a cycle.
        """
        package_path = normalize_path(package_path)
        key = qualified_key(package_path, type_name)
        cached = self._ctx.store.get(key)
        if cached is not None:
            return cached

        if (package_path, type_name) in visited:
            msg = f"circular alias: {key} refers back to itself"
            raise CircularReferenceError(msg, type=key)

        package = self._ctx.packages.load(package_path)
        go_file, spec = self._find(package, type_name)
        visited = visited | {(package_path, type_name)}
        fields = self._resolve_spec(package_path, go_file, spec, visited)

        self._ctx.store.add(key, fields)
        logger.debug("Resolved %s (%d fields)", key, len(fields))
        return fields

    def resolve_template(self, template: TypeTemplate) -> tuple[FieldDescriptor, ...]:
        """Resolve a mapping's ``from``/``to`` type: first import + bare name."""
        return self.resolve(template.package_path, template.unaliased())

    def type_template(self, go_file: GoFile, type_expr: TypeExpr) -> TypeTemplate:
        """Render *type_expr* with its qualifiers replaced by placeholders.

        Every import path the expression references is registered with the
        alias manager.
        """
        paths: list[str] = []
        placeholders: dict[str, str] = {}
        for qualifier in type_expr.qualifiers():
            path = self._import_path(go_file, qualifier)
            placeholders[qualifier] = import_placeholder(len(paths))
            paths.append(path)
            self._ctx.imports.register(path)
        return TypeTemplate(type_expr.render(placeholders.__getitem__), tuple(paths))

    # ------------------------------------------------------------------
    # Declarations
    # ------------------------------------------------------------------

    def _find(self, package: GoPackage, type_name: str) -> tuple[GoFile, TypeSpec]:
        found = package.find_type(type_name)
        if found is not None:
            return found

        pattern = re.compile(rf"\s*(?:type\s+)?{re.escape(type_name)}\b")
        for decl in package.skipped:
            if pattern.match(decl.source):
                msg = (
                    f"type {type_name} in package {package.path or package.name} "
                    f"could not be parsed: {decl.error}"
                )
                raise UnsupportedDeclarationError(msg, package=package.path, type=type_name)
        msg = f"type {type_name} not found in package {package.path or package.name}"
        raise TypeNotFoundError(msg, package=package.path, type=type_name)

    def _resolve_spec(
        self,
        package_path: str,
        go_file: GoFile,
        spec: TypeSpec,
        visited: Visited,
    ) -> tuple[FieldDescriptor, ...]:
        target = spec.type
        if isinstance(target, Struct):
            return self._struct_fields(package_path, go_file, target, visited)
        if isinstance(target, Ident) and target.name not in _PREDECLARED_TYPES:
            return self.resolve(package_path, target.name, visited)
        if isinstance(target, Qualified):
            path = self._import_path(go_file, target.package)
            self._ctx.imports.register(path)
            return self.resolve(path, target.name, visited)

        kind = "alias" if spec.alias else "type definition"
        msg = f"unsupported aliasing pattern for {spec.name}: {kind} of {target}"
        raise UnsupportedDeclarationError(msg, package=package_path, type=spec.name)

    def _struct_fields(
        self,
        package_path: str,
        go_file: GoFile,
        struct: Struct,
        visited: Visited,
    ) -> tuple[FieldDescriptor, ...]:
        fields: list[FieldDescriptor] = []
        for member in struct.fields:
            if member.embedded:
                fields.extend(self._embedded_fields(package_path, go_file, member, visited))
                continue
            type_template = self.type_template(go_file, member.type)
            fields.extend(FieldDescriptor(name, member.tag, type_template) for name in member.names)
        return tuple(fields)

    def _embedded_fields(
        self,
        package_path: str,
        go_file: GoFile,
        member: StructField,
        visited: Visited,
    ) -> tuple[FieldDescriptor, ...]:
        target = member.type.elem if isinstance(member.type, Pointer) else member.type

        if isinstance(target, Ident):
            if target.name in _PREDECLARED_EMBEDS:
                return ()
            path, name = package_path, target.name
        elif isinstance(target, Qualified):
            path, name = self._import_path(go_file, target.package), target.name
            self._ctx.imports.register(path)
        else:
            msg = f"unsupported embedded member {member.type} in {go_file.filename}"
            raise UnsupportedDeclarationError(msg, package=package_path, member=str(member.type))

        if self._is_interface(path, name):
            return ()
        return self.resolve(path, name, visited)

    def _is_interface(self, package_path: str, type_name: str) -> bool:
        found = self._ctx.packages.load(package_path).find_type(type_name)
        return found is not None and isinstance(found[1].type, Interface)

    # ------------------------------------------------------------------
    # Imports
    # ------------------------------------------------------------------

    def _import_path(self, go_file: GoFile, qualifier: str) -> str:
        """Import path bound to *qualifier* in *go_file*."""
        unnamed: list[str] = []
        for spec in go_file.imports:
            if spec.name in ("_", "."):
                continue
            if spec.name == qualifier:
                return spec.path
            if spec.name is None:
                unnamed.append(spec.path)

        for path in unnamed:
            if self._package_name(path) == qualifier:
                return path

        msg = f"{go_file.filename}: no import provides package qualifier {qualifier!r}"
        raise ResolutionError(msg, qualifier=qualifier, file=go_file.filename)

    def _package_name(self, path: str) -> str:
        """``package`` clause name of *path*, guessed when it cannot be loaded."""
        if path in self._package_names:
            return self._package_names[path]
        if "/" not in path:
            name = path
        else:
            try:
                name = self._ctx.packages.load(path).name
            except PackageNotFoundError:
                name = guess_package_name(path)
        self._package_names[path] = name
        return name
