"""Load the mapping and conversions YAML documents.

Both documents are parsed with ruamel.yaml's safe loader and validated
into the frozen models from :mod:`structmap.config.models`. Every failure
(missing file, bad YAML, schema violation, malformed template) surfaces
as a :class:`ConfigError` naming the offending file.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from pydantic import BaseModel, ValidationError
from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from structmap.config.models import ConversionsConfig, MappingConfig
from structmap.domain.errors import ConfigError


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        raw = path.read_text(encoding="utf-8")
    except (OSError, UnicodeError) as exc:
        msg = f"Cannot read {path}: {exc}"
        raise ConfigError(msg, path=str(path)) from exc
    try:
        data = YAML(typ="safe").load(raw)
    except YAMLError as exc:
        msg = f"Invalid YAML in {path}: {exc}"
        raise ConfigError(msg, path=str(path)) from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        msg = f"Expected a mapping at the top of {path}, got {type(data).__name__}"
        raise ConfigError(msg, path=str(path))
    return data


def _validate[M: BaseModel](model: type[M], data: dict[str, Any], path: Path) -> M:
    try:
        return model.model_validate(data)
    except ValidationError as exc:
        msg = f"Invalid {path.name}: {exc}"
        errors = exc.errors(include_url=False, include_context=False, include_input=False)
        raise ConfigError(msg, path=str(path), errors=errors) from exc


def load_mapping_config(path: Path) -> MappingConfig:
    """Load the mapping document (``out_package_name`` + ``mappings``)."""
    return _validate(MappingConfig, _read_yaml(path), path)


def load_conversions(path: Path | None) -> ConversionsConfig:
    """Load the global conversions document; None yields no conversions."""
    if path is None:
        return ConversionsConfig()
    return _validate(ConversionsConfig, _read_yaml(path), path)
