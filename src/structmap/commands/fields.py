"""Command: show the flattened field list of one Go struct type."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

if TYPE_CHECKING:
    from structmap.commands._context import AppContext


@click.command()
@click.argument("package")
@click.argument("type_name", metavar="TYPE")
@click.option("--work-dir", default=None, help="Directory Go packages are resolved from.")
@click.pass_obj
def fields(app: AppContext, package: str, type_name: str, work_dir: str | None) -> None:
    """Resolve TYPE in PACKAGE, expanding embedded structs and aliases."""
    app.emit(app.generate_service(work_dir).inspect_type(package, type_name))
