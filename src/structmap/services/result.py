"""ServiceResult and ServiceError — what every service entry point returns.

The CLI consumes this type; services never print or exit themselves.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from structmap.domain.errors import StructmapError


class ServiceError(BaseModel):
    """Structured error payload within a ServiceResult."""

    model_config = {"frozen": True}

    code: str
    message: str
    detail: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_exception(cls, exc: StructmapError) -> ServiceError:
        return cls(code=exc.code, message=exc.message, detail=dict(exc.detail))


class ServiceResult(BaseModel):
    """Universal return type for service operations.

    Attributes:
        ok: Whether the operation succeeded.
        op: Name of the operation (``"generate"``, ``"fields"``).
        data: Operation-specific payload on success.
        warnings: Non-fatal issues, e.g. unmapped destination fields.
        error: Structured error if ``ok`` is False.
        meta: Optional metadata (counts, timing).
    """

    model_config = {"frozen": True}

    ok: bool
    op: str
    data: dict[str, Any] = Field(default_factory=dict)
    warnings: list[str] = Field(default_factory=list)
    error: ServiceError | None = None
    meta: dict[str, Any] | None = None

    @classmethod
    def failure(
        cls, op: str, exc: StructmapError, warnings: list[str] | None = None
    ) -> ServiceResult:
        return cls(
            ok=False,
            op=op,
            error=ServiceError.from_exception(exc),
            warnings=warnings or [],
        )
