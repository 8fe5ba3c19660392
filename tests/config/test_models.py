"""Tests for config models — document schemas, defaults and validation."""

import pytest
from pydantic import ValidationError

from structmap.config.models import (
    AdditionalArg,
    Conversion,
    Mapping,
    MappingConfig,
    StructmapConfig,
    TypeRef,
)
from structmap.domain.imports import ImportAliasManager
from structmap.domain.templates import TypeTemplate
from tests.conftest import MODELS1, MODELS2, mapping_config, type_ref, user_mapping


class TestMappingConfig:
    def test_defaults(self) -> None:
        cfg = MappingConfig(out_package_name="mappers")
        assert cfg.out_file_name == "structmap.gen.go"
        assert cfg.out_file_path == "."
        assert cfg.mappings == ()
        assert cfg.debug is False

    def test_blank_output_fields_use_defaults(self) -> None:
        cfg = MappingConfig.model_validate(
            {"out_package_name": "mappers", "out_file_name": "", "out_file_path": None}
        )
        assert cfg.out_file_name == "structmap.gen.go"
        assert cfg.out_file_path == "."

    def test_package_name_required(self) -> None:
        with pytest.raises(ValidationError):
            MappingConfig.model_validate({"mappings": []})

    def test_frozen(self) -> None:
        cfg = MappingConfig(out_package_name="mappers")
        with pytest.raises(ValidationError):
            cfg.debug = True  # type: ignore[misc]


class TestMapping:
    def test_from_and_to_aliases(self) -> None:
        mapping = Mapping.model_validate(user_mapping())
        assert mapping.source.type_template() == TypeTemplate("{{ .Import0 }}.User", (MODELS1,))
        assert mapping.dest.imports == (MODELS2,)
        assert mapping.func_name == ""

    def test_tag_key_defaults_to_json(self) -> None:
        assert Mapping.model_validate(user_mapping()).tag_key == "json"
        assert Mapping.model_validate(user_mapping(tag="db")).tag_key == "db"

    def test_malformed_type_template_rejected(self) -> None:
        with pytest.raises(ValidationError, match="malformed type template"):
            mapping_config(
                {"from": {"type": "{{ .Import0 .User"}, "to": type_ref("UserDTO", MODELS2)}
            )

    def test_overrides_parsed(self) -> None:
        mapping = Mapping.model_validate(
            user_mapping(
                custom_field_mappings=[{"source_field": "FirstName", "dest_field": "Name"}]
            )
        )
        (rule,) = mapping.custom_field_mappings
        assert rule.source_field == "FirstName"
        assert rule.dest_tag == ""


class TestAdditionalArg:
    def test_render_parameter(self) -> None:
        arg = AdditionalArg(
            name="owner", type="*{{ .Import0 }}.User", imports=(MODELS1,), dest_field="Owner"
        )
        aliases = ImportAliasManager()
        aliases.register(MODELS1)
        assert arg.render_parameter(aliases) == "owner *ref1.User"

    def test_type_ref_without_imports(self) -> None:
        assert TypeRef(type="string").type_template() == TypeTemplate("string")


class TestConversion:
    def test_forward_template_required(self) -> None:
        with pytest.raises(ValidationError, match="conversion.tmpl is required"):
            Conversion.model_validate(
                {"source_type": "int", "dest_type": "string", "conversion": {}}
            )

    def test_malformed_conversion_template(self) -> None:
        with pytest.raises(ValidationError, match="malformed conversion template"):
            Conversion.model_validate(
                {"source_type": "int", "dest_type": "string", "conversion": {"tmpl": "{{ .Dest "}}
            )

    def test_has_reverse(self) -> None:
        base = {
            "source_type": "int",
            "dest_type": "*int",
            "conversion": {"tmpl": "{{ .Dest }} = &{{ .Source }}"},
        }
        assert not Conversion.model_validate(base).has_reverse
        assert not Conversion.model_validate({**base, "reverse_conversion": {}}).has_reverse
        both = Conversion.model_validate(
            {**base, "reverse_conversion": {"tmpl": "{{ .Dest }} = *{{ .Source }}"}}
        )
        assert both.has_reverse

    def test_templates_share_imports(self) -> None:
        rule = Conversion.model_validate(
            {
                "source_type": "{{ .Import0 }}.UUID",
                "dest_type": "string",
                "imports": ["github.com/google/uuid"],
                "conversion": {"tmpl": "{{ .Dest }} = {{ .Source }}.String()"},
            }
        )
        assert rule.source_template().package_path == "github.com/google/uuid"
        assert rule.dest_template().imports == ("github.com/google/uuid",)


class TestStructmapConfig:
    def test_defaults(self) -> None:
        cfg = StructmapConfig()
        assert cfg.go.module_root is None
        assert cfg.go.goroot is None
        assert cfg.output.gofmt is True
        assert cfg.output.gofmt_binary == "gofmt"

    def test_sparse_override(self) -> None:
        cfg = StructmapConfig.model_validate({"output": {"gofmt": False}})
        assert cfg.output.gofmt is False
        assert cfg.output.gofmt_binary == "gofmt"
