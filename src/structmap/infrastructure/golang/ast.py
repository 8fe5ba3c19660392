"""Frozen AST for the subset of Go the resolver needs.

Type expressions render back to source text the way ``go/printer`` prints
them. Rendering takes an optional ``qualify`` callback that rewrites each
package qualifier, which is how field types become placeholder templates.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from dataclasses import dataclass, field

Qualify = Callable[[str], str]


def _same(name: str) -> str:
    return name


class TypeExpr:
    """Base class for type expressions."""

    def render(self, qualify: Qualify = _same) -> str:
        raise NotImplementedError

    def children(self) -> Iterator[TypeExpr]:
        return iter(())

    def qualifiers(self) -> list[str]:
        """Package qualifiers in order of first appearance, deduplicated."""
        seen: list[str] = []
        stack: list[TypeExpr] = [self]
        while stack:
            node = stack.pop()
            if isinstance(node, Qualified) and node.package not in seen:
                seen.append(node.package)
            stack.extend(reversed(list(node.children())))
        return seen

    def __str__(self) -> str:
        return self.render()


@dataclass(frozen=True)
class Ident(TypeExpr):
    name: str

    def render(self, qualify: Qualify = _same) -> str:
        return self.name


@dataclass(frozen=True)
class Qualified(TypeExpr):
    package: str
    name: str

    def render(self, qualify: Qualify = _same) -> str:
        return f"{qualify(self.package)}.{self.name}"


@dataclass(frozen=True)
class Pointer(TypeExpr):
    elem: TypeExpr

    def render(self, qualify: Qualify = _same) -> str:
        return f"*{self.elem.render(qualify)}"

    def children(self) -> Iterator[TypeExpr]:
        yield self.elem


@dataclass(frozen=True)
class Slice(TypeExpr):
    elem: TypeExpr

    def render(self, qualify: Qualify = _same) -> str:
        return f"[]{self.elem.render(qualify)}"

    def children(self) -> Iterator[TypeExpr]:
        yield self.elem


@dataclass(frozen=True)
class Array(TypeExpr):
    length: str
    elem: TypeExpr

    def render(self, qualify: Qualify = _same) -> str:
        return f"[{self.length}]{self.elem.render(qualify)}"

    def children(self) -> Iterator[TypeExpr]:
        yield self.elem


@dataclass(frozen=True)
class Map(TypeExpr):
    key: TypeExpr
    value: TypeExpr

    def render(self, qualify: Qualify = _same) -> str:
        return f"map[{self.key.render(qualify)}]{self.value.render(qualify)}"

    def children(self) -> Iterator[TypeExpr]:
        yield self.key
        yield self.value


@dataclass(frozen=True)
class Chan(TypeExpr):
    elem: TypeExpr
    direction: str = "both"  # "both", "send" (chan<-), "recv" (<-chan)

    def render(self, qualify: Qualify = _same) -> str:
        elem = self.elem.render(qualify)
        if self.direction == "send":
            return f"chan<- {elem}"
        if self.direction == "recv":
            return f"<-chan {elem}"
        return f"chan {elem}"

    def children(self) -> Iterator[TypeExpr]:
        yield self.elem


@dataclass(frozen=True)
class Param:
    """One parameter group: ``a, b int`` or ``...string`` or just ``error``."""

    names: tuple[str, ...]
    type: TypeExpr
    variadic: bool = False

    def render(self, qualify: Qualify = _same) -> str:
        text = ("..." if self.variadic else "") + self.type.render(qualify)
        if self.names:
            return f"{', '.join(self.names)} {text}"
        return text


@dataclass(frozen=True)
class Func(TypeExpr):
    params: tuple[Param, ...] = ()
    results: tuple[Param, ...] = ()

    def render_signature(self, qualify: Qualify = _same) -> str:
        text = f"({', '.join(p.render(qualify) for p in self.params)})"
        if len(self.results) == 1 and not self.results[0].names:
            return f"{text} {self.results[0].render(qualify)}"
        if self.results:
            return f"{text} ({', '.join(p.render(qualify) for p in self.results)})"
        return text

    def render(self, qualify: Qualify = _same) -> str:
        return f"func{self.render_signature(qualify)}"

    def children(self) -> Iterator[TypeExpr]:
        for param in (*self.params, *self.results):
            yield param.type


@dataclass(frozen=True)
class StructField:
    """A struct member. ``names`` is empty for embedded members."""

    names: tuple[str, ...]
    type: TypeExpr
    tag: str = ""

    @property
    def embedded(self) -> bool:
        return not self.names

    def render(self, qualify: Qualify = _same) -> str:
        text = self.type.render(qualify)
        if self.names:
            text = f"{', '.join(self.names)} {text}"
        if self.tag:
            text = f"{text} `{self.tag}`"
        return text


@dataclass(frozen=True)
class Struct(TypeExpr):
    fields: tuple[StructField, ...] = ()

    def render(self, qualify: Qualify = _same) -> str:
        if not self.fields:
            return "struct{}"
        return "struct{ " + "; ".join(f.render(qualify) for f in self.fields) + " }"

    def children(self) -> Iterator[TypeExpr]:
        for member in self.fields:
            yield member.type


@dataclass(frozen=True)
class Method:
    name: str
    signature: Func

    def render(self, qualify: Qualify = _same) -> str:
        return f"{self.name}{self.signature.render_signature(qualify)}"

    def types(self) -> Iterator[TypeExpr]:
        yield self.signature


@dataclass(frozen=True)
class Union:
    """A type-set element: ``~int | ~string`` or a single embedded interface."""

    terms: tuple[tuple[bool, TypeExpr], ...]

    def render(self, qualify: Qualify = _same) -> str:
        return " | ".join(("~" if tilde else "") + t.render(qualify) for tilde, t in self.terms)

    def types(self) -> Iterator[TypeExpr]:
        for _, term in self.terms:
            yield term


@dataclass(frozen=True)
class Interface(TypeExpr):
    elements: tuple[Method | Union, ...] = ()

    def render(self, qualify: Qualify = _same) -> str:
        if not self.elements:
            return "interface{}"
        return "interface{ " + "; ".join(e.render(qualify) for e in self.elements) + " }"

    def children(self) -> Iterator[TypeExpr]:
        for element in self.elements:
            yield from element.types()


@dataclass(frozen=True)
class Generic(TypeExpr):
    """An instantiated generic type, ``List[int]`` or ``pkg.Set[string]``."""

    base: Ident | Qualified
    args: tuple[TypeExpr, ...]

    def render(self, qualify: Qualify = _same) -> str:
        args = ", ".join(a.render(qualify) for a in self.args)
        return f"{self.base.render(qualify)}[{args}]"

    def children(self) -> Iterator[TypeExpr]:
        yield self.base
        yield from self.args


@dataclass(frozen=True)
class Paren(TypeExpr):
    inner: TypeExpr

    def render(self, qualify: Qualify = _same) -> str:
        return f"({self.inner.render(qualify)})"

    def children(self) -> Iterator[TypeExpr]:
        yield self.inner


# --- Declarations ---


@dataclass(frozen=True)
class ImportSpec:
    """``import name "path"``; ``name`` is None for a plain import."""

    path: str
    name: str | None = None


@dataclass(frozen=True)
class TypeSpec:
    """``type Name T`` (defined) or ``type Name = T`` (alias)."""

    name: str
    type: TypeExpr
    alias: bool = False


@dataclass(frozen=True)
class SkippedDecl:
    """A type declaration the parser could not handle, kept for diagnostics."""

    source: str
    error: str


@dataclass(frozen=True)
class GoFile:
    filename: str
    package: str
    imports: tuple[ImportSpec, ...] = ()
    type_specs: tuple[TypeSpec, ...] = ()
    skipped: tuple[SkippedDecl, ...] = ()

    def find_type(self, name: str) -> TypeSpec | None:
        for spec in self.type_specs:
            if spec.name == name:
                return spec
        return None


@dataclass(frozen=True)
class GoPackage:
    """A parsed Go package: its files in name order."""

    name: str
    path: str
    directory: str
    files: tuple[GoFile, ...] = field(default_factory=tuple)

    def find_type(self, name: str) -> tuple[GoFile, TypeSpec] | None:
        """First declaration of *name*, scanning files in order."""
        for go_file in self.files:
            spec = go_file.find_type(name)
            if spec is not None:
                return go_file, spec
        return None

    @property
    def skipped(self) -> list[SkippedDecl]:
        return [decl for go_file in self.files for decl in go_file.skipped]
