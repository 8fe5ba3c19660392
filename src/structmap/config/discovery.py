"""Settings file discovery and loading.

Walk-up finder locates structmap.toml, the way the go command finds
go.mod. Supports the STRUCTMAP_CONFIG env var and the --settings CLI flag.
"""

from __future__ import annotations

import os
import tomllib
from pathlib import Path
from typing import Any

from structmap.config.models import StructmapConfig
from structmap.domain.errors import ConfigError

CONFIG_FILENAME = "structmap.toml"
CONFIG_ENV_VAR = "STRUCTMAP_CONFIG"


def find_config(start: Path | None = None) -> Path | None:
    """Walk up from *start* (default: cwd) looking for structmap.toml.

    Returns the path to the settings file, or None if not found.
    Checks STRUCTMAP_CONFIG env var first.
    """
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        p = Path(env_path)
        return p if p.is_file() else None

    current = (start or Path.cwd()).resolve()
    while True:
        candidate = current / CONFIG_FILENAME
        if candidate.is_file():
            return candidate
        parent = current.parent
        if parent == current:
            return None
        current = parent


def read_toml(path: Path) -> dict[str, Any]:
    """Parse *path* as TOML.

    Raises:
        ConfigError: if the file cannot be read or is not valid TOML.
    """
    try:
        return tomllib.loads(path.read_text(encoding="utf-8"))
    except (OSError, tomllib.TOMLDecodeError) as exc:
        msg = f"Invalid TOML in {path}: {exc}"
        raise ConfigError(msg, path=str(path)) from exc


def load_config(path: Path | None = None, cwd: Path | None = None) -> StructmapConfig:
    """Load and validate structmap.toml.

    If *path* is None, uses find_config(*cwd*) to discover the file.
    Returns the default StructmapConfig if no file is found.
    """
    if path is None:
        path = find_config(cwd)
    if path is None:
        return StructmapConfig()
    return StructmapConfig.model_validate(read_toml(path))
