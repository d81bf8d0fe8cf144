"""Validation package for liberation packs."""

from .base import (
    PackValidationError,
    PackValidationResult,
    UnresolvedImport,
    ValidationIssue,
    ValidationStats,
)
from .brackets import validate_bracket_balance
from .imports import EXTERNAL_PACKAGES, find_imports, resolve_import, validate_imports
from .pack import detect_missing_polyfills, ensure_valid, validate_pack
from .syntax import validate_syntax

__all__ = [
    "EXTERNAL_PACKAGES",
    "PackValidationError",
    "PackValidationResult",
    "UnresolvedImport",
    "ValidationIssue",
    "ValidationStats",
    "detect_missing_polyfills",
    "ensure_valid",
    "find_imports",
    "resolve_import",
    "validate_bracket_balance",
    "validate_imports",
    "validate_pack",
    "validate_syntax",
]
