"""Tests for loading the mapping and conversions documents."""

from pathlib import Path

import pytest

from structmap.config.loader import load_conversions, load_mapping_config
from structmap.domain.errors import ConfigError
from tests.conftest import CONVERSIONS_YAML, MAPPING_YAML, MODELS1


class TestLoadMappingConfig:
    def test_loads_document(self, tmp_path: Path) -> None:
        path = tmp_path / "mapping.yaml"
        path.write_text(MAPPING_YAML, encoding="utf-8")
        cfg = load_mapping_config(path)
        assert cfg.out_package_name == "mappers"
        assert cfg.out_file_path == "./mappers"
        (mapping,) = cfg.mappings
        assert mapping.source.imports == (MODELS1,)
        assert len(mapping.custom_field_mappings) == 2
        assert mapping.custom_field_mappings[1].tag == "structmap"

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError, match="Cannot read"):
            load_mapping_config(tmp_path / "absent.yaml")

    def test_invalid_yaml(self, tmp_path: Path) -> None:
        path = tmp_path / "mapping.yaml"
        path.write_text("out_package_name: [unclosed\n", encoding="utf-8")
        with pytest.raises(ConfigError, match="Invalid YAML"):
            load_mapping_config(path)

    def test_top_level_must_be_mapping(self, tmp_path: Path) -> None:
        path = tmp_path / "mapping.yaml"
        path.write_text("- a\n- b\n", encoding="utf-8")
        with pytest.raises(ConfigError, match="Expected a mapping"):
            load_mapping_config(path)

    def test_schema_errors_listed(self, tmp_path: Path) -> None:
        path = tmp_path / "mapping.yaml"
        path.write_text("mappings: []\n", encoding="utf-8")
        with pytest.raises(ConfigError) as exc_info:
            load_mapping_config(path)
        assert exc_info.value.detail["path"] == str(path)
        assert exc_info.value.detail["errors"][0]["loc"] == ("out_package_name",)

    def test_empty_document(self, tmp_path: Path) -> None:
        path = tmp_path / "mapping.yaml"
        path.write_text("", encoding="utf-8")
        with pytest.raises(ConfigError, match="out_package_name"):
            load_mapping_config(path)


class TestLoadConversions:
    def test_none_means_no_conversions(self) -> None:
        assert load_conversions(None).conversions == ()

    def test_loads_rules_in_order(self, tmp_path: Path) -> None:
        path = tmp_path / "conversions.yaml"
        path.write_text(CONVERSIONS_YAML, encoding="utf-8")
        rules = load_conversions(path).conversions
        assert [r.dest_type for r in rules] == ["string", "*string", "*int"]
        assert rules[0].has_reverse
        assert rules[0].reverse_conversion is not None
        assert rules[0].reverse_conversion.error is True

    def test_malformed_template_names_file(self, tmp_path: Path) -> None:
        path = tmp_path / "conversions.yaml"
        path.write_text(
            "conversions:\n  - source_type: int\n    dest_type: string\n"
            "    conversion:\n      tmpl: \"{{ .Dest = \"\n",
            encoding="utf-8",
        )
        with pytest.raises(ConfigError, match="conversions.yaml"):
            load_conversions(path)
