"""Command: generate Go mapping functions from a mapping document."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import click

if TYPE_CHECKING:
    from structmap.commands._context import AppContext


@click.command()
@click.option(
    "-c",
    "--config",
    "mapping_path",
    required=True,
    type=click.Path(dir_okay=False, path_type=Path),
    help="Mapping YAML document.",
)
@click.option(
    "-x",
    "--conversions",
    "conversions_path",
    default=None,
    type=click.Path(dir_okay=False, path_type=Path),
    help="Global conversions YAML document.",
)
@click.option("--stdout", "to_stdout", is_flag=True, help="Print the source instead of writing it.")
@click.option("--no-format", is_flag=True, help="Skip gofmt.")
@click.option("--work-dir", default=None, help="Directory Go packages are resolved from.")
@click.pass_obj
def generate(
    app: AppContext,
    mapping_path: Path,
    conversions_path: Path | None,
    to_stdout: bool,
    no_format: bool,
    work_dir: str | None,
) -> None:
    """Generate mapping functions for every entry of a mapping document."""
    svc = app.generate_service(work_dir)
    app.emit(
        svc.generate(
            mapping_path,
            conversions_path,
            write=not to_stdout,
            gofmt=False if no_format else None,
        )
    )
