"""AppContext — shared Click context for all commands.

Created once by the root CLI group and passed to subcommands via
``@click.pass_obj``. Owns logging setup, service construction and
result emission (stdout/stderr routing + exit codes).
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from structmap.output.formatters import OutputSettings, format_result

if TYPE_CHECKING:
    from structmap.config.settings import StructmapSettings
    from structmap.services.generate import GenerateService
    from structmap.services.result import ServiceResult


class AppContext:
    """Shared context flowing through Click's command hierarchy."""

    def __init__(self, settings: StructmapSettings) -> None:
        self.settings = settings

        from structmap.config.logging import configure_logging

        configure_logging(verbose=settings.verbose, log_json=settings.log_json)

    def generate_service(self, work_dir: str | None = None) -> GenerateService:
        """A GenerateService rooted at ``--work-dir`` or the configured module root."""
        from structmap.services.generate import GenerateService

        return GenerateService(
            self.settings.resolve_work_dir(work_dir),
            go=self.settings.go,
            output=self.settings.output,
        )

    def emit(self, result: ServiceResult) -> None:
        """Format and output a ServiceResult with correct exit semantics.

        * Success (``result.ok``): writes to stdout, returns normally.
          Warnings go to stderr so they don't pollute piped output.
        * Failure: writes to stderr, exits with code 1.
        """
        settings = OutputSettings(
            json_output=self.settings.json_output,
            quiet=self.settings.quiet,
            verbose=self.settings.verbose,
        )
        output = format_result(result, settings=settings)
        if result.ok:
            click.echo(output)
            if not settings.json_output:
                for warning in result.warnings:
                    click.echo(f"WARNING: {warning}", err=True)
        else:
            click.echo(output, err=True)
            raise SystemExit(1)
