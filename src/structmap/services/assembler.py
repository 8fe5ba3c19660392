"""CodeAssembler — mapping entries → Go functions → one Go source file.

For each destination field, in declaration order:

1. an injected argument bound to the field by name,
2. otherwise the source field chosen by :class:`FieldMatcher`,
3. otherwise an explanatory comment (the field is reported as unmapped).

A matched value is copied through the first applicable conversion rule,
or assigned directly when none applies. Any fallible conversion switches
the function's results to ``(dst T, err error)``.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass

import structlog

from structmap.config.models import Conversion, Mapping, MappingConfig
from structmap.domain.conversions import resolve_conversion
from structmap.domain.errors import GenerationError, StructmapError
from structmap.domain.fields import FieldDescriptor
from structmap.domain.matching import FieldMatcher, find_additional_arg
from structmap.services.context import GenerationContext
from structmap.services.resolver import TypeResolver

logger = logging.getLogger(__name__)

HEADER = "// Code generated by structmap; DO NOT EDIT."
SOURCE_PARAM = "src"
DEST_RESULT = "dst"
ERROR_RESULT = "err"

UNMAPPED_COMMENT = (
    "// no matching source found for field: {name}, "
    "consider adding an additional arg or aligning the fields"
)


@dataclass(frozen=True)
class GeneratedFunction:
    """One rendered mapping function."""

    name: str
    doc: str
    signature: str
    body: tuple[str, ...]
    returns_error: bool = False
    unmapped: tuple[str, ...] = ()

    def render(self) -> str:
        lines = [self.doc, f"{self.signature} {{"]
        lines.extend(f"\t{line}" if line else "" for line in self.body)
        lines.append("\treturn")
        lines.append("}")
        return "\n".join(lines)


@dataclass(frozen=True)
class GeneratedFile:
    """The assembled document before formatting."""

    package: str
    imports: str
    functions: tuple[GeneratedFunction, ...]

    @property
    def unmapped(self) -> dict[str, tuple[str, ...]]:
        """Function name → unmapped destination fields, for functions that have any."""
        return {fn.name: fn.unmapped for fn in self.functions if fn.unmapped}

    def render(self) -> str:
        parts = [f"{HEADER}\npackage {self.package}"]
        if self.imports:
            parts.append(self.imports)
        parts.extend(fn.render() for fn in self.functions)
        return "\n\n".join(parts) + "\n"


class CodeAssembler:
    """Assemble mapping functions against one :class:`GenerationContext`.

    *conversions* are the global rules; each mapping's
    ``custom_conversions`` are searched before them.
    """

    def __init__(
        self,
        context: GenerationContext,
        conversions: Sequence[Conversion] = (),
        *,
        resolver: TypeResolver | None = None,
        debug: bool = False,
    ) -> None:
        self._ctx = context
        self._conversions = tuple(conversions)
        self._resolver = resolver or TypeResolver(context)
        self._debug = debug
        self._log = structlog.get_logger("structmap.assembler")

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def generate(self, config: MappingConfig) -> str:
        """Assemble every mapping of *config* into one Go source document."""
        return self.generate_file(config).render()

    def generate_file(self, config: MappingConfig) -> GeneratedFile:
        """Like :meth:`generate` but returns the structured result.

        Raises:
            GenerationError: wrapping the first resolution or template
                failure, with the failing mapping's context attached.
        """
        for rule in self._conversions:
            self._register(rule.imports)

        functions: list[GeneratedFunction] = []
        for index, mapping in enumerate(config.mappings):
            functions.append(self.assemble(mapping, index=index))

        body = "\n\n".join(fn.render() for fn in functions)
        return GeneratedFile(
            package=config.out_package_name,
            imports=self._ctx.imports.render(body),
            functions=tuple(functions),
        )

    def assemble(self, mapping: Mapping, *, index: int = 0) -> GeneratedFunction:
        """Build the function for one mapping entry.

        Raises:
            GenerationError: if a type cannot be resolved or a template
                fails to render.
        """
        try:
            self._register_mapping(mapping)
            source_fields = self._resolver.resolve_template(mapping.source.type_template())
            dest_fields = self._resolver.resolve_template(mapping.dest.type_template())
            return self._build(mapping, source_fields, dest_fields)
        except StructmapError as exc:
            raise self._wrap(exc, mapping, index) from exc

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _register(self, paths: Sequence[str]) -> None:
        for path in paths:
            self._ctx.imports.register(path)

    def _register_mapping(self, mapping: Mapping) -> None:
        for rule in mapping.custom_conversions:
            self._register(rule.imports)
        for arg in mapping.func_additional_args:
            self._register(arg.imports)
        self._register(mapping.source.imports)
        self._register(mapping.dest.imports)

    def _wrap(self, exc: StructmapError, mapping: Mapping, index: int) -> GenerationError:
        source = mapping.source.type_template()
        dest = mapping.dest.type_template()
        if isinstance(exc, GenerationError):
            return exc
        msg = f"mapping #{index} ({source.unaliased()} → {dest.unaliased()}): {exc.message}"
        return GenerationError(
            msg,
            cause=exc,
            mapping=index,
            source=source.unaliased(),
            dest=dest.unaliased(),
            **exc.detail,
        )

    def _build(
        self,
        mapping: Mapping,
        source_fields: tuple[FieldDescriptor, ...],
        dest_fields: tuple[FieldDescriptor, ...],
    ) -> GeneratedFunction:
        aliases = self._ctx.imports
        source = mapping.source.type_template()
        dest = mapping.dest.type_template()

        if self._debug:
            self._log.debug(
                "mapping_fields",
                source=source.unaliased(),
                source_fields=[f.to_dict() for f in source_fields],
                dest=dest.unaliased(),
                dest_fields=[f.to_dict() for f in dest_fields],
            )

        matcher = FieldMatcher(source_fields, mapping.custom_field_mappings, mapping.tag_key)
        body: list[str] = []
        unmapped: list[str] = []
        returns_error = False

        for dest_field in dest_fields:
            arg = find_additional_arg(mapping.func_additional_args, dest_field)
            if arg is not None:
                source_expr, source_type = arg.name, arg.type_template()
            else:
                match = matcher.match(dest_field)
                if match is None:
                    body.append(UNMAPPED_COMMENT.format(name=dest_field.name))
                    unmapped.append(dest_field.name)
                    continue
                source_expr, source_type = f"{SOURCE_PARAM}.{match.name}", match.type

            dest_expr = f"{DEST_RESULT}.{dest_field.name}"
            conversion = resolve_conversion(
                source_type, dest_field.type, mapping.custom_conversions, self._conversions, aliases
            )
            if conversion is None:
                body.append(f"{dest_expr} = {source_expr}")
                continue
            code, fallible = conversion.render(source_expr, dest_expr, ERROR_RESULT, aliases)
            body.extend(code.strip("\n").splitlines())
            returns_error = returns_error or fallible

        name = mapping.func_name or f"Map{source.unaliased()}To{dest.unaliased()}"
        params = [f"{SOURCE_PARAM} {source.render(aliases)}"]
        params.extend(arg.render_parameter(aliases) for arg in mapping.func_additional_args)
        results = f"{DEST_RESULT} {dest.render(aliases)}"
        if returns_error:
            results = f"{results}, {ERROR_RESULT} error"

        if unmapped:
            logger.info("%s: unmapped destination fields %s", name, ", ".join(unmapped))
        return GeneratedFunction(
            name=name,
            doc=f"// {name} copies {source.unaliased()} → {dest.unaliased()}",
            signature=f"func {name}({', '.join(params)}) ({results})",
            body=tuple(body),
            returns_error=returns_error,
            unmapped=tuple(unmapped),
        )
