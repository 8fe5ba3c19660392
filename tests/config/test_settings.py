"""Tests for StructmapSettings — unified settings with TOML source."""

from pathlib import Path

import pytest

from structmap.config.discovery import CONFIG_FILENAME
from structmap.config.settings import StructmapSettings


@pytest.fixture(autouse=True)
def _no_env_config(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("STRUCTMAP_CONFIG", raising=False)
    monkeypatch.delenv("STRUCTMAP_GO__GOROOT", raising=False)


class TestStructmapSettingsDefaults:
    def test_all_defaults(self, tmp_path: Path) -> None:
        """With no TOML and no env vars, all fields use code defaults."""
        settings = StructmapSettings.from_cli(start=tmp_path, work_dir=tmp_path)
        assert settings.work_dir == tmp_path
        assert settings.config_path is None
        assert settings.json_output is False
        assert settings.quiet is False
        assert settings.verbose is False
        assert settings.go.module_root is None
        assert settings.output.gofmt is True
        assert settings.output.gofmt_binary == "gofmt"

    def test_frozen(self, tmp_path: Path) -> None:
        settings = StructmapSettings.from_cli(start=tmp_path, work_dir=tmp_path)
        with pytest.raises(Exception):
            settings.quiet = True  # type: ignore[misc]


class TestTomlSource:
    def test_loads_from_toml(self, tmp_path: Path) -> None:
        toml = tmp_path / CONFIG_FILENAME
        toml.write_text('[go]\ngoroot = "/opt/go"\n[output]\ngofmt = false\n')
        settings = StructmapSettings.from_cli(start=tmp_path, work_dir=tmp_path)
        assert settings.go.goroot == "/opt/go"
        assert settings.output.gofmt is False
        assert settings.output.gofmt_binary == "gofmt"  # default preserved
        assert settings.config_path == toml

    def test_discovered_from_subdirectory(self, tmp_path: Path) -> None:
        (tmp_path / CONFIG_FILENAME).write_text('[output]\ngofmt_binary = "gofumpt"\n')
        child = tmp_path / "a" / "b"
        child.mkdir(parents=True)
        settings = StructmapSettings.from_cli(start=child, work_dir=child)
        assert settings.output.gofmt_binary == "gofumpt"

    def test_explicit_config_path(self, tmp_path: Path) -> None:
        custom = tmp_path / "custom" / "my.toml"
        custom.parent.mkdir(parents=True)
        custom.write_text('[go]\ngomodcache = "/cache"\n')
        settings = StructmapSettings.from_cli(config_path=str(custom), work_dir=tmp_path)
        assert settings.go.gomodcache == "/cache"
        assert settings.config_path == custom

    def test_missing_explicit_path_is_ignored(self, tmp_path: Path) -> None:
        settings = StructmapSettings.from_cli(
            config_path=str(tmp_path / "absent.toml"), work_dir=tmp_path
        )
        assert settings.config_path is None


class TestPriority:
    def test_cli_flags_override(self, tmp_path: Path) -> None:
        settings = StructmapSettings.from_cli(
            start=tmp_path,
            work_dir=tmp_path,
            json_output=True,
            quiet=True,
            verbose=True,
        )
        assert settings.json_output is True
        assert settings.quiet is True
        assert settings.verbose is True

    def test_env_overrides_toml(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        (tmp_path / CONFIG_FILENAME).write_text('[go]\ngoroot = "/from/toml"\n')
        monkeypatch.setenv("STRUCTMAP_GO__GOROOT", "/from/env")
        settings = StructmapSettings.from_cli(start=tmp_path, work_dir=tmp_path)
        assert settings.go.goroot == "/from/env"


class TestResolveWorkDir:
    def test_override_wins(self, tmp_path: Path) -> None:
        settings = StructmapSettings.from_cli(start=tmp_path, work_dir=tmp_path)
        target = tmp_path / "other"
        assert settings.resolve_work_dir(str(target)) == target.resolve()

    def test_module_root_relative_to_settings_file(self, tmp_path: Path) -> None:
        (tmp_path / CONFIG_FILENAME).write_text('[go]\nmodule_root = "backend"\n')
        elsewhere = tmp_path / "elsewhere"
        elsewhere.mkdir()
        settings = StructmapSettings.from_cli(start=tmp_path, work_dir=elsewhere)
        assert settings.resolve_work_dir() == (tmp_path / "backend").resolve()

    def test_defaults_to_work_dir(self, tmp_path: Path) -> None:
        settings = StructmapSettings.from_cli(start=tmp_path, work_dir=tmp_path)
        assert settings.resolve_work_dir() == tmp_path.resolve()
