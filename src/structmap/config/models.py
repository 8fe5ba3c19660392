"""Pydantic models for the mapping and conversions documents and tool settings.

The YAML keys match the documents users already write::

    out_package_name: mappers
    mappings:
      - from: {type: "{{ .Import0 }}.User", imports: [example.com/app/models1]}
        to: {type: "{{ .Import0 }}.UserDTO", imports: [example.com/app/models2]}
        tag: json

All models are frozen. Code templates are compiled during validation so a
malformed template fails at load time, before any package is parsed.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import BaseModel, Field, ValidationInfo, field_validator

from structmap.domain.errors import TemplateError
from structmap.domain.tags import DEFAULT_TAG_KEY
from structmap.domain.templates import TypeTemplate, compile_template

if TYPE_CHECKING:
    from structmap.domain.imports import ImportAliasManager


def _check_template(source: str, kind: str) -> str:
    try:
        compile_template(source, kind)
    except TemplateError as exc:
        raise ValueError(exc.message) from exc
    return source


# --- Mapping document ---


class TypeRef(BaseModel):
    """A type template plus the package paths its ``ImportN`` slots bind to."""

    model_config = {"frozen": True}

    type: str
    imports: tuple[str, ...] = ()

    @field_validator("type")
    @classmethod
    def _compile_type(cls, value: str) -> str:
        return _check_template(value, "type")

    def type_template(self) -> TypeTemplate:
        return TypeTemplate(self.type, self.imports)


class AdditionalArg(TypeRef):
    """An extra function parameter feeding exactly one destination field."""

    name: str
    dest_field: str

    def render_parameter(self, aliases: ImportAliasManager) -> str:
        return f"{self.name} {self.type_template().render(aliases)}"


class FieldOverride(BaseModel):
    """One ``custom_field_mappings`` entry (name-based and/or tag-based)."""

    model_config = {"frozen": True}

    source_field: str = ""
    dest_field: str = ""
    source_tag: str = ""
    dest_tag: str = ""
    tag: str = ""


class ConversionTemplate(BaseModel):
    """A code template; ``error`` marks it as able to fail."""

    model_config = {"frozen": True}

    tmpl: str = ""
    error: bool = False

    @field_validator("tmpl")
    @classmethod
    def _compile_tmpl(cls, value: str) -> str:
        return _check_template(value, "conversion") if value else value


class Conversion(BaseModel):
    """A declared transformation between two concrete types."""

    model_config = {"frozen": True}

    source_type: str
    dest_type: str
    conversion: ConversionTemplate
    reverse_conversion: ConversionTemplate | None = None
    imports: tuple[str, ...] = ()

    @field_validator("source_type", "dest_type")
    @classmethod
    def _compile_types(cls, value: str) -> str:
        return _check_template(value, "type")

    @field_validator("conversion")
    @classmethod
    def _require_forward(cls, value: ConversionTemplate) -> ConversionTemplate:
        if not value.tmpl:
            raise ValueError("conversion.tmpl is required")
        return value

    @property
    def has_reverse(self) -> bool:
        return self.reverse_conversion is not None and bool(self.reverse_conversion.tmpl)

    def source_template(self) -> TypeTemplate:
        return TypeTemplate(self.source_type, self.imports)

    def dest_template(self) -> TypeTemplate:
        return TypeTemplate(self.dest_type, self.imports)


class Mapping(BaseModel):
    """One mapping entry — produces exactly one generated function."""

    model_config = {"frozen": True, "populate_by_name": True}

    source: TypeRef = Field(alias="from")
    dest: TypeRef = Field(alias="to")
    func_name: str = ""
    func_additional_args: tuple[AdditionalArg, ...] = ()
    custom_field_mappings: tuple[FieldOverride, ...] = ()
    custom_conversions: tuple[Conversion, ...] = ()
    tag: str = ""

    @property
    def tag_key(self) -> str:
        return self.tag or DEFAULT_TAG_KEY


class MappingConfig(BaseModel):
    """Root of the mapping document."""

    model_config = {"frozen": True}

    out_package_name: str
    out_file_name: str = "structmap.gen.go"
    out_file_path: str = "."
    mappings: tuple[Mapping, ...] = ()
    debug: bool = False

    @field_validator("out_file_name", "out_file_path", mode="before")
    @classmethod
    def _blank_is_default(cls, value: object, info: ValidationInfo) -> object:
        if value is None or value == "":
            return cls.model_fields[info.field_name].default
        return value


class ConversionsConfig(BaseModel):
    """Root of the conversions document."""

    model_config = {"frozen": True}

    conversions: tuple[Conversion, ...] = ()


# --- structmap.toml sections ---


class GoConfig(BaseModel):
    """[go] section."""

    model_config = {"frozen": True}

    module_root: str | None = None
    goroot: str | None = None
    gomodcache: str | None = None


class OutputConfig(BaseModel):
    """[output] section."""

    model_config = {"frozen": True}

    gofmt: bool = True
    gofmt_binary: str = "gofmt"


class StructmapConfig(BaseModel):
    """Root of ``structmap.toml``."""

    model_config = {"frozen": True}

    go: GoConfig = Field(default_factory=GoConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
