"""GenerationContext — the mutable state of one generation run.

One context is created per run and threaded through the resolver and the
assembler. Nothing in it outlives the run.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from structmap.domain.fields import TypeDescriptorStore
from structmap.domain.imports import ImportAliasManager

if TYPE_CHECKING:
    from structmap.infrastructure.golang.packages import PackageSource


@dataclass
class GenerationContext:
    """Package source plus the per-run type store and alias table."""

    packages: PackageSource
    store: TypeDescriptorStore = field(default_factory=TypeDescriptorStore)
    imports: ImportAliasManager = field(default_factory=ImportAliasManager)
