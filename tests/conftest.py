"""Shared pytest fixtures and test helpers for structmap tests."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest
from click.testing import CliRunner

from structmap.config.models import Conversion, MappingConfig
from structmap.domain.errors import PackageNotFoundError
from structmap.infrastructure.golang.ast import GoPackage
from structmap.infrastructure.golang.parser import parse_go_source
from structmap.services.context import GenerationContext

MODELS1 = "example.com/app/models1"
MODELS2 = "example.com/app/models2"
UUID = "github.com/google/uuid"

MODELS1_SOURCE = """\
package models1

import "github.com/google/uuid"

type Description struct {
\tHobbies   []string `json:"hobby"`
\tInterests []string `json:"interests"`
}

type User struct {
\tDescription
\tID                   uuid.UUID              `json:"id"`
\tFirstName            string                 `json:"first_name"`
\tAge                  int                    `json:"age"`
\tUserHeight           int                    `structmap:"user_height"`
\tAdditionalProperties map[string]interface{} `json:"additional_properties"`
}
"""

MODELS2_SOURCE = """\
package models2

type DescriptionDTO struct {
\tHobbies   []string `json:"hobby"`
\tInterests []string `json:"interests"`
}

type UserDTO struct {
\tDescriptionDTO
\tID                   string         `json:"id"`
\tName                 *string        `json:"name"`
\tLastName             string         `json:"last_name"`
\tAge                  int            `json:"age"`
\tHeight               *int           `structmap:"user_dto_height"`
\tAbout                *string        `json:"about"`
\tAdditionalProperties map[string]any `json:"additional_properties"`
}
"""

UUID_SOURCE = """\
package uuid

type UUID [16]byte
"""


class InMemoryPackages:
    """PackageSource over Go source strings: ``{path: {filename: source}}``."""

    def __init__(self, packages: dict[str, dict[str, str]]) -> None:
        self._packages = packages
        self.loads: list[str] = []

    def load(self, path: str) -> GoPackage:
        self.loads.append(path)
        files = self._packages.get(path)
        if files is None:
            msg = f"failed to load package {path}: not found"
            raise PackageNotFoundError(msg, package=path)
        parsed = tuple(
            parse_go_source(source, filename=name) for name, source in sorted(files.items())
        )
        return GoPackage(name=parsed[0].package, path=path, directory=path, files=parsed)


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def example_packages() -> InMemoryPackages:
    """The models1/models2 example packages plus a stub uuid package."""
    return InMemoryPackages(
        {
            MODELS1: {"model1.go": MODELS1_SOURCE},
            MODELS2: {"model2.go": MODELS2_SOURCE},
            UUID: {"uuid.go": UUID_SOURCE},
        }
    )


@pytest.fixture
def example_context(example_packages: InMemoryPackages) -> GenerationContext:
    return GenerationContext(packages=example_packages)


@pytest.fixture
def go_module(tmp_path: Path) -> Path:
    """A Go module on disk: ``example.com/app`` with models1 and models2.

    The uuid dependency is served through a local ``replace`` directive.
    """
    write_go_module(
        tmp_path / "app",
        "example.com/app",
        {
            "models1/model1.go": MODELS1_SOURCE,
            "models2/model2.go": MODELS2_SOURCE,
        },
        extra_gomod="require github.com/google/uuid v1.6.0\n\n"
        "replace github.com/google/uuid => ../uuid\n",
    )
    (tmp_path / "uuid").mkdir()
    (tmp_path / "uuid" / "uuid.go").write_text(UUID_SOURCE, encoding="utf-8")
    return tmp_path / "app"


# ---------------------------------------------------------------------------
# Shared test helpers
# ---------------------------------------------------------------------------


def write_go_module(root: Path, module: str, files: dict[str, str], extra_gomod: str = "") -> Path:
    """Write go.mod plus *files* (relative path → source) under *root*."""
    root.mkdir(parents=True, exist_ok=True)
    (root / "go.mod").write_text(f"module {module}\n\ngo 1.22\n\n{extra_gomod}", encoding="utf-8")
    for rel, source in files.items():
        target = root / rel
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(source, encoding="utf-8")
    return root


def type_ref(type_name: str, *imports: str) -> dict[str, Any]:
    """``from``/``to`` entry for *type_name* in the first import."""
    return {"type": f"{{{{ .Import0 }}}}.{type_name}", "imports": list(imports)}


def user_mapping(**overrides: Any) -> dict[str, Any]:
    """The User → UserDTO mapping entry, with optional extra keys."""
    return {
        "from": type_ref("User", MODELS1),
        "to": type_ref("UserDTO", MODELS2),
        **overrides,
    }


def mapping_config(*mappings: dict[str, Any], **kwargs: Any) -> MappingConfig:
    return MappingConfig.model_validate(
        {"out_package_name": "mappers", "mappings": list(mappings), **kwargs}
    )


def conversion(**data: Any) -> Conversion:
    return Conversion.model_validate(data)


MAPPING_YAML = f"""\
out_package_name: mappers
out_file_path: ./mappers
mappings:
  - from:
      type: "{{{{ .Import0 }}}}.User"
      imports: ["{MODELS1}"]
    to:
      type: "{{{{ .Import0 }}}}.UserDTO"
      imports: ["{MODELS2}"]
    custom_field_mappings:
      - source_field: FirstName
        dest_field: Name
      - source_tag: user_height
        dest_tag: user_dto_height
        tag: structmap
"""

CONVERSIONS_YAML = f"""\
conversions:
  - source_type: "{{{{ .Import0 }}}}.UUID"
    dest_type: string
    imports: ["{UUID}"]
    conversion:
      tmpl: "{{{{ .Dest }}}} = {{{{ .Source }}}}.String()"
    reverse_conversion:
      tmpl: "{{{{ .Dest }}}}, {{{{ .Error }}}} = {{{{ .Import0 }}}}.Parse({{{{ .Source }}}})"
      error: true
  - source_type: string
    dest_type: "*string"
    conversion:
      tmpl: "{{{{ .Dest }}}} = &{{{{ .Source }}}}"
  - source_type: int
    dest_type: "*int"
    conversion:
      tmpl: "{{{{ .Dest }}}} = &{{{{ .Source }}}}"
"""
