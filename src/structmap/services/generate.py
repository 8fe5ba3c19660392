"""GenerateService — the entry points the CLI calls.

``generate`` runs the whole pipeline (load documents, resolve, assemble,
format, write) and ``inspect_type`` resolves a single type. Both return a
:class:`ServiceResult`; every :class:`StructmapError` is converted into a
failed result, and nothing is written when generation fails.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any

from structmap.config.loader import load_conversions, load_mapping_config
from structmap.config.logging import enable_debug_logging, restore_logging_level
from structmap.config.models import GoConfig, OutputConfig
from structmap.domain.errors import GenerationError, StructmapError
from structmap.domain.fields import qualified_key
from structmap.infrastructure.gofmt import format_source
from structmap.infrastructure.golang.packages import GoPackageLoader
from structmap.services.assembler import CodeAssembler
from structmap.services.context import GenerationContext
from structmap.services.resolver import TypeResolver
from structmap.services.result import ServiceResult

if TYPE_CHECKING:
    from structmap.infrastructure.golang.packages import PackageSource

logger = logging.getLogger(__name__)


def _import_lines(block: str) -> list[str]:
    """``ref1 "path"`` entries of a rendered import block."""
    return [line.strip() for line in block.splitlines() if line.startswith("\t")]


class GenerateService:
    """Run structmap against one work directory.

    *packages* replaces the filesystem loader (tests pass an in-memory
    source); otherwise a :class:`GoPackageLoader` rooted at *work_dir* is
    created per call.
    """

    def __init__(
        self,
        work_dir: Path | None = None,
        *,
        go: GoConfig | None = None,
        output: OutputConfig | None = None,
        packages: PackageSource | None = None,
    ) -> None:
        self._work_dir = (work_dir or Path.cwd()).resolve()
        self._go = go or GoConfig()
        self._output = output or OutputConfig()
        self._packages = packages

    def _context(self) -> GenerationContext:
        packages = self._packages or GoPackageLoader(
            self._work_dir,
            goroot=self._go.goroot,
            gomodcache=self._go.gomodcache,
        )
        return GenerationContext(packages=packages)

    def generate(
        self,
        mapping_path: Path,
        conversions_path: Path | None = None,
        *,
        write: bool = True,
        gofmt: bool | None = None,
    ) -> ServiceResult:
        """Generate the mapping file described by *mapping_path*.

        Args:
            mapping_path: The mapping document.
            conversions_path: Optional global conversions document.
            write: Write ``out_file_path/out_file_name``; when False the
                source is only returned in ``data["source"]``.
            gofmt: Override ``[output] gofmt``.
        """
        op = "generate"
        warnings: list[str] = []
        previous_level: int | None = None
        try:
            config = load_mapping_config(mapping_path)
            conversions = load_conversions(conversions_path)
            if config.debug:
                previous_level = enable_debug_logging()

            assembler = CodeAssembler(
                self._context(), conversions.conversions, debug=config.debug
            )
            generated = assembler.generate_file(config)
            source = generated.render()
            logger.debug("Generated code:\n%s", source)

            use_gofmt = self._output.gofmt if gofmt is None else gofmt
            if use_gofmt:
                source, fmt_warnings = format_source(source, self._output.gofmt_binary)
                warnings.extend(fmt_warnings)

            for func_name, fields in generated.unmapped.items():
                warnings.extend(
                    f"{func_name}: no matching source found for field {name}" for name in fields
                )

            data: dict[str, Any] = {
                "package": config.out_package_name,
                "functions": [fn.name for fn in generated.functions],
                "imports": _import_lines(generated.imports),
            }
            if write:
                data["path"] = str(self._write(source, config.out_file_path, config.out_file_name))
            else:
                data["source"] = source
        except StructmapError as exc:
            logger.debug("generate failed: %s", exc.message)
            return ServiceResult.failure(op, exc, warnings)
        finally:
            if previous_level is not None:
                restore_logging_level(previous_level)

        return ServiceResult(
            ok=True,
            op=op,
            data=data,
            warnings=warnings,
            meta={"mappings": len(config.mappings), "conversions": len(conversions.conversions)},
        )

    def inspect_type(self, package_path: str, type_name: str) -> ServiceResult:
        """Resolve one type and return its flattened field list."""
        op = "fields"
        context = self._context()
        try:
            fields = TypeResolver(context).resolve(package_path, type_name)
        except StructmapError as exc:
            return ServiceResult.failure(op, exc)

        return ServiceResult(
            ok=True,
            op=op,
            data={
                "type": qualified_key(package_path, type_name),
                "fields": [f.to_dict() for f in fields],
                "count": len(fields),
                "imports": context.imports.registered,
            },
        )

    def _write(self, source: str, out_file_path: str, out_file_name: str) -> Path:
        directory = Path(out_file_path).expanduser()
        if not directory.is_absolute():
            directory = self._work_dir / directory
        target = directory / out_file_name
        try:
            directory.mkdir(parents=True, exist_ok=True)
            target.write_text(source, encoding="utf-8")
        except OSError as exc:
            msg = f"Cannot write {target}: {exc}"
            raise GenerationError(msg, path=str(target)) from exc
        logger.debug("Wrote %s", target)
        return target
