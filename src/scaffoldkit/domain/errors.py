"""Error taxonomy for the scaffold pipeline.

Every fatal failure raised by the pipeline derives from :class:`ScaffoldError`
and carries the process exit code the CLI reports for it.
"""

from __future__ import annotations


class ScaffoldError(RuntimeError):
    """Base class for fatal pipeline failures."""

    exit_code = 1


class CatalogError(ScaffoldError):
    """Raised when the template catalog is unreachable, malformed or empty."""

    exit_code = 3


class CacheError(ScaffoldError):
    """Raised when a template package cannot be installed or updated."""

    exit_code = 4


class MaterializeError(ScaffoldError):
    """Raised when copying or rendering the template into the target fails."""

    exit_code = 5


class PostProcessError(ScaffoldError):
    """Raised when dependency install or a custom generator fails."""

    exit_code = 6


class TemplateConfigError(ScaffoldError):
    """Raised when a template descriptor or manifest is not usable."""

    exit_code = 7


__all__ = [
    "ScaffoldError",
    "CatalogError",
    "CacheError",
    "MaterializeError",
    "PostProcessError",
    "TemplateConfigError",
]
