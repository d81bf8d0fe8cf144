"""Whole-pack validation: brackets, syntax smells, imports and polyfills."""

from __future__ import annotations

from fnmatch import fnmatchcase
from typing import Dict, List, Mapping, Optional, Sequence

from ..logging import get_logger
from ..polyfills import missing_polyfills
from ..scoring import clamp
from .base import PackValidationError, PackValidationResult, ValidationStats
from .brackets import validate_bracket_balance
from .imports import EXTERNAL_PACKAGES, validate_imports
from .syntax import validate_syntax

VALIDATED_SUFFIXES = (".ts", ".tsx", ".js", ".jsx")
EXCLUDED_TOP_LEVEL = frozenset(
    {"backend", "auth", "auth-service", "scripts", "supabase", "database", "docker", "tooling", "tools"}
)
EXCLUDED_GLOBS: Sequence[str] = ("*.config.*", "*.test.*", "*.spec.*")

ERROR_PENALTY = 10
WARNING_PENALTY = 2
POLYFILL_PENALTY = 5

_logger = get_logger("validators")


def subtree(files: Mapping[str, str], root: str = "") -> Dict[str, str]:
    """Return the files under ``root`` with the prefix stripped."""
    prefix = root.strip("/")
    if not prefix:
        return dict(files)
    prefix = f"{prefix}/"
    return {path[len(prefix) :]: content for path, content in files.items() if path.startswith(prefix)}


def is_validated(path: str) -> bool:
    """True for frontend JS/TS sources that end up in the static bundle."""
    if not path.endswith(VALIDATED_SUFFIXES) or path.endswith(".d.ts"):
        return False
    parts = path.split("/")
    if "node_modules" in parts or "__tests__" in parts:
        return False
    if len(parts) > 1 and parts[0] in EXCLUDED_TOP_LEVEL:
        return False
    filename = parts[-1]
    return not any(fnmatchcase(filename, pattern) for pattern in EXCLUDED_GLOBS)


def detect_missing_polyfills(files: Mapping[str, str]) -> List[str]:
    """Aliases of polyfills the sources use but the pack does not contain."""
    return [polyfill.alias for polyfill in missing_polyfills(files)]


def validate_pack(
    files: Mapping[str, str],
    root: str = "",
    external_packages: Optional[Sequence[str]] = None,
) -> PackValidationResult:
    """Validate the frontend part of ``files`` and score it."""
    scoped = subtree(files, root)
    externals = tuple(external_packages) if external_packages is not None else EXTERNAL_PACKAGES
    result = PackValidationResult(is_valid=True, score=100)
    stats = ValidationStats()

    for path, content in scoped.items():
        if not is_validated(path):
            continue
        stats.total_files += 1
        errors = validate_bracket_balance(content, path) + validate_syntax(content, path)
        warnings, unresolved = validate_imports(content, path, scoped, externals)
        result.critical_errors.extend(errors)
        result.warnings.extend(warnings)
        result.unresolved_imports.extend(unresolved)
        if errors:
            stats.files_with_errors += 1
        elif warnings:
            stats.files_with_warnings += 1
        else:
            stats.valid_files += 1

    result.missing_polyfills = detect_missing_polyfills(scoped)
    result.stats = stats
    result.suggestions = _suggestions(result)
    result.score = clamp(
        100
        - ERROR_PENALTY * len(result.critical_errors)
        - WARNING_PENALTY * len(result.warnings)
        - POLYFILL_PENALTY * len(result.missing_polyfills)
    )
    result.is_valid = not result.critical_errors
    _logger.info(
        "Validated %d files: %d error(s), %d warning(s), score %d",
        stats.total_files,
        len(result.critical_errors),
        len(result.warnings),
        result.score,
    )
    return result


def _suggestions(result: PackValidationResult) -> List[str]:
    suggestions: List[str] = []
    if result.missing_polyfills:
        suggestions.append(f"Missing polyfills: {', '.join(result.missing_polyfills)}")
    if result.critical_errors:
        suggestions.append("Fix critical errors before generating the pack")
    if len(result.unresolved_imports) > 5:
        suggestions.append("Many unresolved imports detected; make sure every dependency is included")
    return suggestions


def ensure_valid(result: PackValidationResult) -> None:
    """Raise :class:`PackValidationError` when ``result`` carries errors."""
    if result.is_valid:
        return
    raise PackValidationError(
        f"Pack validation failed with {len(result.critical_errors)} error(s)", result.critical_errors
    )


__all__ = [
    "detect_missing_polyfills",
    "ensure_valid",
    "is_validated",
    "subtree",
    "validate_pack",
]
