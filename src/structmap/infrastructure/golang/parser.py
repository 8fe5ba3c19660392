"""Go source parsing for struct resolution.

A file is first split into top-level declarations by a small scanner that
understands comments, string literals and bracket depth. Only ``package``,
``import`` and ``type`` declarations are handed to the lark grammar;
``func``, ``var`` and ``const`` are skipped without parsing their bodies.

A ``type`` declaration the grammar cannot handle (type parameters, for
instance) does not sink the whole file: it is kept as a
:class:`SkippedDecl` so a later lookup can explain why a name is missing.
When one member of a grouped ``type ( ... )`` fails, the other members are
parsed on their own and only the failing one is skipped.
"""

from __future__ import annotations

import json
import re
from collections.abc import Iterator
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from lark import Lark, Token, Transformer, v_args
from lark.exceptions import LarkError

from structmap.infrastructure.golang.ast import (
    Array,
    Chan,
    Func,
    GoFile,
    Generic,
    Ident,
    ImportSpec,
    Interface,
    Map,
    Method,
    Param,
    Paren,
    Pointer,
    Qualified,
    SkippedDecl,
    Slice,
    Struct,
    StructField,
    TypeExpr,
    TypeSpec,
    Union,
)

_GRAMMAR_PATH = Path(__file__).with_name("grammar.lark")

_DECL_KEYWORDS = frozenset({"package", "import", "type", "func", "var", "const"})
_PARSED_KEYWORDS = frozenset({"package", "import", "type"})
_WORD = re.compile(r"[^\W\d]\w*")
_BUILD_IGNORE = re.compile(r"^//go:build\s+ignore\b", re.MULTILINE)
_PACKAGE_CLAUSE = re.compile(r"^package\s", re.MULTILINE)

# Tokens after which a newline ends the statement (automatic semicolon insertion).
_TERMINATING_TYPES = frozenset({"NAME", "INT", "STRING", "RAW_STRING"})
_TERMINATING_VALUES = frozenset({")", "]", "}"})


class GoSyntaxError(ValueError):
    """A package clause or import declaration could not be parsed."""


class GoSemicolonInserter:
    """lark post-lexer implementing Go's automatic semicolon insertion."""

    always_accept = ("NEWLINE",)

    def process(self, stream: Iterator[Token]) -> Iterator[Token]:
        last: Token | None = None
        for token in stream:
            if token.type == "NEWLINE":
                if last is not None and self._terminates(last):
                    yield Token.new_borrow_pos("_SEMI", ";", token)
                last = None
                continue
            yield token
            last = token
        if last is not None and self._terminates(last):
            yield Token.new_borrow_pos("_SEMI", ";", last)

    @staticmethod
    def _terminates(token: Token) -> bool:
        return token.type in _TERMINATING_TYPES or token.value in _TERMINATING_VALUES


@dataclass(frozen=True)
class _Tag:
    value: str


def _decode_string(token: Token) -> str:
    """Decode a Go string literal token (raw or interpreted)."""
    text = str(token)
    if text.startswith("`"):
        return text[1:-1]
    try:
        value = json.loads(text)
    except ValueError:
        return text[1:-1]
    return value if isinstance(value, str) else text[1:-1]


def _names(children: tuple[Any, ...]) -> tuple[str, ...]:
    return tuple(str(c) for c in children if isinstance(c, Token) and c.type == "NAME")


def _variadic(children: tuple[Any, ...]) -> bool:
    return any(isinstance(c, Token) and c.type == "VARIADIC" for c in children)


def _type_of(children: tuple[Any, ...]) -> TypeExpr:
    return next(c for c in children if isinstance(c, TypeExpr))


@v_args(inline=True)
class _GoTransformer(Transformer):
    """Turn lark parse trees into :mod:`structmap.infrastructure.golang.ast` nodes."""

    # --- declarations ---

    def package_clause(self, name: Token) -> str:
        return str(name)

    def import_decl(self, *specs: ImportSpec) -> list[ImportSpec]:
        return list(specs)

    def import_spec(self, *children: Token) -> ImportSpec:
        if len(children) == 2:
            return ImportSpec(path=_decode_string(children[1]), name=str(children[0]))
        return ImportSpec(path=_decode_string(children[0]))

    def dot_import(self, path: Token) -> ImportSpec:
        return ImportSpec(path=_decode_string(path), name=".")

    def type_decl(self, *specs: TypeSpec) -> list[TypeSpec]:
        return list(specs)

    def defined_type(self, name: Token, type_: TypeExpr) -> TypeSpec:
        return TypeSpec(name=str(name), type=type_)

    def alias_type(self, name: Token, type_: TypeExpr) -> TypeSpec:
        return TypeSpec(name=str(name), type=type_, alias=True)

    # --- types ---

    def ident(self, name: Token) -> Ident:
        return Ident(str(name))

    def qualified(self, package: Token, name: Token) -> Qualified:
        return Qualified(str(package), str(name))

    def generic(self, base: Ident | Qualified, args: tuple[TypeExpr, ...]) -> Generic:
        return Generic(base, args)

    def type_args(self, *args: TypeExpr) -> tuple[TypeExpr, ...]:
        return args

    def pointer(self, elem: TypeExpr) -> Pointer:
        return Pointer(elem)

    def slice(self, elem: TypeExpr) -> Slice:
        return Slice(elem)

    def array(self, length: str, elem: TypeExpr) -> Array:
        return Array(length, elem)

    def array_len(self, *tokens: Token) -> str:
        return ".".join(str(t) for t in tokens)

    def map(self, key: TypeExpr, value: TypeExpr) -> Map:
        return Map(key, value)

    def chan(self, elem: TypeExpr) -> Chan:
        return Chan(elem)

    def send_chan(self, elem: TypeExpr) -> Chan:
        return Chan(elem, "send")

    def recv_chan(self, elem: TypeExpr) -> Chan:
        return Chan(elem, "recv")

    def paren(self, inner: TypeExpr) -> Paren:
        return Paren(inner)

    # --- functions ---

    def func(self, signature: Func) -> Func:
        return signature

    def signature(
        self, params: tuple[Param, ...] | None, results: tuple[Param, ...] | None
    ) -> Func:
        return Func(params or (), results or ())

    def type_result(self, type_: TypeExpr) -> tuple[Param, ...]:
        return (Param((), type_),)

    def tuple_result(self, params: tuple[Param, ...] | None) -> tuple[Param, ...]:
        return params or ()

    def params(self, *params: Param) -> tuple[Param, ...]:
        return params

    def named_param(self, *children: Any) -> Param:
        return Param(_names(children), _type_of(children), _variadic(children))

    def unnamed_param(self, *children: Any) -> Param:
        return Param((), _type_of(children), _variadic(children))

    # --- structs ---

    def struct(self, fields: tuple[StructField, ...]) -> Struct:
        return Struct(fields)

    def field_decls(self, *fields: StructField) -> tuple[StructField, ...]:
        return fields

    def named_field(self, *children: Any) -> StructField:
        tag = next((c.value for c in children if isinstance(c, _Tag)), "")
        return StructField(_names(children), _type_of(children), tag)

    def embedded_field(self, type_: TypeExpr, tag: _Tag | None = None) -> StructField:
        return StructField((), type_, tag.value if tag else "")

    def tag(self, token: Token) -> _Tag:
        return _Tag(_decode_string(token))

    # --- interfaces ---

    def interface(self, elements: tuple[Method | Union, ...]) -> Interface:
        return Interface(elements)

    def iface_elems(self, *elements: Method | Union) -> tuple[Method | Union, ...]:
        return elements

    def method_elem(self, name: Token, signature: Func) -> Method:
        return Method(str(name), signature)

    def union_elem(self, *terms: tuple[bool, TypeExpr]) -> Union:
        return Union(terms)

    def union_term(self, *children: Any) -> tuple[bool, TypeExpr]:
        tilde = any(isinstance(c, Token) and c.type == "TILDE" for c in children)
        return tilde, _type_of(children)


_PARSER = Lark(
    _GRAMMAR_PATH.read_text(encoding="utf-8"),
    parser="earley",
    lexer="basic",
    start=["package_clause", "import_decl", "type_decl"],
    postlex=GoSemicolonInserter(),
)
_TRANSFORMER = _GoTransformer()


def _parse(text: str, start: str) -> Any:
    return _TRANSFORMER.transform(_PARSER.parse(text, start=start))


def parse_type_expr(text: str) -> TypeExpr:
    """Parse a standalone type expression, e.g. ``map[string]*pkg.T``."""
    try:
        specs: list[TypeSpec] = _parse(f"type _ {text}", "type_decl")
    except LarkError as exc:
        msg = f"invalid type expression {text!r}: {exc}"
        raise GoSyntaxError(msg) from exc
    return specs[0].type


# ---------------------------------------------------------------------------
# Top-level scanner
# ---------------------------------------------------------------------------


def _skip_quoted(source: str, i: int, quote: str) -> int:
    j = i + 1
    while j < len(source) and source[j] != quote and source[j] != "\n":
        if source[j] == "\\":
            j += 1
        j += 1
    return j + 1


def split_declarations(source: str) -> list[tuple[str, str]]:
    """Split Go *source* into ``(keyword, text)`` top-level declarations.

    A declaration starts at a column-0 ``package``/``import``/``type``/
    ``func``/``var``/``const`` keyword outside brackets, comments and
    string literals, and runs until the next one.
    """
    starts: list[tuple[int, str]] = []
    depth = 0
    i = 0
    n = len(source)
    while i < n:
        ch = source[i]
        if source.startswith("//", i):
            j = source.find("\n", i)
            i = n if j < 0 else j
            continue
        if source.startswith("/*", i):
            j = source.find("*/", i + 2)
            i = n if j < 0 else j + 2
            continue
        if ch in "\"'":
            i = _skip_quoted(source, i, ch)
            continue
        if ch == "`":
            j = source.find("`", i + 1)
            i = n if j < 0 else j + 1
            continue
        if ch in "([{":
            depth += 1
        elif ch in ")]}":
            depth = max(depth - 1, 0)
        elif depth == 0 and (i == 0 or source[i - 1] == "\n"):
            match = _WORD.match(source, i)
            if match:
                if match.group(0) in _DECL_KEYWORDS:
                    starts.append((i, match.group(0)))
                i = match.end()
                continue
        i += 1

    ends = [start for start, _ in starts[1:]] + [n]
    return [(kind, source[start:end]) for (start, kind), end in zip(starts, ends, strict=True)]


def split_type_group(text: str) -> list[str]:
    """Split a grouped ``type ( ... )`` declaration into its member specs.

    Members end at a newline or ``;`` outside nested brackets. Returns an
    empty list when *text* is not a grouped declaration.
    """
    head = re.match(r"type\s*\(", text)
    if head is None:
        return []
    members: list[str] = []
    depth = 0
    start = i = head.end()
    content = False
    n = len(text)
    while i < n:
        ch = text[i]
        if text.startswith("//", i):
            j = text.find("\n", i)
            i = n if j < 0 else j
            continue
        if text.startswith("/*", i):
            j = text.find("*/", i + 2)
            i = n if j < 0 else j + 2
            continue
        if ch in "\"'`":
            j = text.find("`", i + 1) + 1 if ch == "`" else _skip_quoted(text, i, ch)
            i = n if j <= 0 else j
            content = True
            continue
        if depth == 0 and ch in "\n;)":
            if content:
                members.append(text[start:i].strip())
            if ch == ")":
                break
            start = i + 1
            content = False
        elif ch in "([{":
            depth += 1
            content = True
        elif ch in ")]}":
            depth -= 1
        elif not ch.isspace():
            content = True
        i += 1
    return members


def is_build_ignored(source: str) -> bool:
    """Whether the file header carries a ``//go:build ignore`` constraint."""
    clause = _PACKAGE_CLAUSE.search(source)
    header = source[: clause.start()] if clause else source
    return _BUILD_IGNORE.search(header) is not None


def parse_go_source(source: str, filename: str = "<memory>") -> GoFile:
    """Parse the declarations of one Go file.

    Raises:
        GoSyntaxError: if the package clause is missing or the package
            clause / an import declaration does not parse.
    """
    source = source.lstrip("\ufeff")
    package: str | None = None
    imports: list[ImportSpec] = []
    specs: list[TypeSpec] = []
    skipped: list[SkippedDecl] = []

    for kind, text in split_declarations(source):
        if kind not in _PARSED_KEYWORDS:
            continue
        if kind == "type":
            try:
                specs.extend(_parse(text, "type_decl"))
            except LarkError as exc:
                members = split_type_group(text)
                if not members:
                    skipped.append(SkippedDecl(source=text.strip(), error=str(exc).strip()))
                for member in members:
                    try:
                        specs.extend(_parse(f"type {member}\n", "type_decl"))
                    except LarkError as member_exc:
                        error = str(member_exc).strip()
                        skipped.append(SkippedDecl(source=member, error=error))
            continue
        try:
            if kind == "package":
                package = _parse(text, "package_clause")
            else:
                imports.extend(_parse(text, "import_decl"))
        except LarkError as exc:
            msg = f"{filename}: cannot parse {kind} declaration: {exc}"
            raise GoSyntaxError(msg) from exc

    if package is None:
        msg = f"{filename}: missing package clause"
        raise GoSyntaxError(msg)
    return GoFile(
        filename=filename,
        package=package,
        imports=tuple(imports),
        type_specs=tuple(specs),
        skipped=tuple(skipped),
    )
