"""Exception hierarchy for the generation engine.

Every error carries a stable ``code`` so the service layer can turn it
into a :class:`~structmap.services.result.ServiceError` without string
matching. Two classes are fatal for the whole run: resolution errors and
malformed-template errors.
"""

from __future__ import annotations

from typing import Any


class StructmapError(Exception):
    """Base class for all structmap errors."""

    code = "STRUCTMAP_ERROR"

    def __init__(self, message: str, **detail: Any) -> None:
        super().__init__(message)
        self.message = message
        self.detail = detail


# --- Resolution ---


class ResolutionError(StructmapError):
    """A type reference could not be resolved to a field list."""

    code = "RESOLUTION_ERROR"


class PackageNotFoundError(ResolutionError):
    """A Go package path could not be located or parsed."""

    code = "PACKAGE_NOT_FOUND"


class TypeNotFoundError(ResolutionError):
    """No top-level type declaration with the requested name."""

    code = "TYPE_NOT_FOUND"


class UnsupportedDeclarationError(ResolutionError):
    """An alias or embedded member uses a shape the resolver cannot follow."""

    code = "UNSUPPORTED_DECLARATION"


class CircularReferenceError(ResolutionError):
    """An alias or embedding chain revisits a type already on the path."""

    code = "CIRCULAR_REFERENCE"


# --- Templates & configuration ---


class TemplateError(StructmapError):
    """A type or conversion template failed to compile or render."""

    code = "TEMPLATE_ERROR"


class ConfigError(StructmapError):
    """A mapping or conversions document is unreadable or invalid."""

    code = "CONFIG_ERROR"


class GenerationError(StructmapError):
    """Generation of a mapping function failed.

    Wraps the underlying error with the mapping context that triggered it.
    """

    code = "GENERATION_ERROR"

    def __init__(self, message: str, *, cause: StructmapError | None = None, **detail: Any) -> None:
        super().__init__(message, **detail)
        self.cause = cause
        if cause is not None:
            self.code = cause.code
