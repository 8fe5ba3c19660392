"""Unified settings — CLI flags, env vars, and TOML config in one object.

Priority chain (highest to lowest):
  1. Init kwargs  — CLI flags passed by Click
  2. Env vars     — ``STRUCTMAP_*`` prefix (``STRUCTMAP_GO__GOROOT=...``)
  3. TOML file    — ``structmap.toml`` discovered via walk-up
  4. Code defaults — baked into the section models

Uses Pydantic Settings v2 with a :class:`TomlSettingsSource` that reuses
the walk-up discovery from :mod:`structmap.config.discovery`.
"""

from __future__ import annotations

import threading
from pathlib import Path
from typing import Any

from pydantic import Field
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource

from structmap.config.discovery import find_config, read_toml
from structmap.config.models import GoConfig, OutputConfig


class TomlSettingsSource(PydanticBaseSettingsSource):
    """Read settings from a ``structmap.toml`` file."""

    def __init__(self, settings_cls: type[BaseSettings], toml_path: Path | None) -> None:
        super().__init__(settings_cls)
        self._data: dict[str, Any] = {}
        if toml_path and toml_path.is_file():
            self._data = read_toml(toml_path)

    def get_field_value(self, field: Any, field_name: str) -> tuple[Any, str, bool]:
        """Return ``(value, field_name, value_is_complex)``."""
        val = self._data.get(field_name)
        return val, field_name, field_name in self._data

    def __call__(self) -> dict[str, Any]:
        return self._data


# TOML path handed to settings_customise_sources during construction.
_tls = threading.local()


class StructmapSettings(BaseSettings):
    """Settings for the structmap CLI, stored on the AppContext.

    Attributes:
        work_dir: Directory Go packages are resolved from (``--work-dir``,
            else ``[go] module_root``, else the current directory).
        config_path: The structmap.toml in effect, or None.
    """

    model_config = {
        "frozen": True,
        "env_prefix": "STRUCTMAP_",
        "env_nested_delimiter": "__",
    }

    work_dir: Path = Field(default_factory=Path.cwd)
    config_path: Path | None = None

    # --- CLI flags ---
    json_output: bool = False
    quiet: bool = False
    verbose: bool = False
    log_json: bool = False

    # --- TOML sections ---
    go: GoConfig = Field(default_factory=GoConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Insert the TOML source between env vars and defaults."""
        toml_path = getattr(_tls, "toml_path", None)
        return (
            init_settings,
            env_settings,
            TomlSettingsSource(settings_cls, toml_path),
        )

    @classmethod
    def from_cli(
        cls,
        *,
        config_path: str | None = None,
        start: Path | None = None,
        **cli_flags: Any,
    ) -> StructmapSettings:
        """Construct settings from a CLI invocation.

        Discovers ``structmap.toml`` via walk-up from *start* (or uses the
        explicit *config_path*) and merges CLI flags as highest-priority
        overrides.
        """
        toml_path: Path | None = None
        if config_path:
            p = Path(config_path)
            if p.is_file():
                toml_path = p
        else:
            toml_path = find_config(start)

        _tls.toml_path = toml_path
        try:
            return cls(config_path=toml_path, **cli_flags)
        finally:
            _tls.toml_path = None

    def resolve_work_dir(self, override: str | None = None) -> Path:
        """Work directory for package loading.

        A ``--work-dir`` *override* wins; otherwise ``[go] module_root``
        (relative to the settings file) and finally :attr:`work_dir`.
        """
        if override:
            return Path(override).expanduser().resolve()
        if self.go.module_root:
            root = Path(self.go.module_root).expanduser()
            if not root.is_absolute() and self.config_path is not None:
                root = self.config_path.parent / root
            return root.resolve()
        return self.work_dir.resolve()
