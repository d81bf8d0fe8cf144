"""Validation records shared by the pack validators."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Sequence

ERROR = "error"
WARNING = "warning"


@dataclass(frozen=True)
class ValidationIssue:
    """A single diagnostic produced while validating a liberation pack."""

    file: str
    line: int
    column: int
    message: str
    severity: str
    code: str

    @property
    def is_error(self) -> bool:
        return self.severity == ERROR

    def to_dict(self) -> Dict[str, object]:
        return {
            "file": self.file,
            "line": self.line,
            "column": self.column,
            "message": self.message,
            "severity": self.severity,
            "code": self.code,
        }


@dataclass(frozen=True)
class UnresolvedImport:
    file: str
    import_path: str


@dataclass
class ValidationStats:
    total_files: int = 0
    valid_files: int = 0
    files_with_errors: int = 0
    files_with_warnings: int = 0


@dataclass
class PackValidationResult:
    """Aggregated validation outcome for a file set."""

    is_valid: bool
    score: int
    critical_errors: List[ValidationIssue] = field(default_factory=list)
    warnings: List[ValidationIssue] = field(default_factory=list)
    suggestions: List[str] = field(default_factory=list)
    missing_polyfills: List[str] = field(default_factory=list)
    unresolved_imports: List[UnresolvedImport] = field(default_factory=list)
    stats: ValidationStats = field(default_factory=ValidationStats)

    @classmethod
    def empty(cls) -> "PackValidationResult":
        return cls(is_valid=False, score=0)

    def to_dict(self) -> Dict[str, object]:
        return {
            "is_valid": self.is_valid,
            "score": self.score,
            "critical_errors": [issue.to_dict() for issue in self.critical_errors],
            "warnings": [issue.to_dict() for issue in self.warnings],
            "suggestions": list(self.suggestions),
            "missing_polyfills": list(self.missing_polyfills),
            "unresolved_imports": [
                {"file": item.file, "import_path": item.import_path} for item in self.unresolved_imports
            ],
            "stats": {
                "total_files": self.stats.total_files,
                "valid_files": self.stats.valid_files,
                "files_with_errors": self.stats.files_with_errors,
                "files_with_warnings": self.stats.files_with_warnings,
            },
        }


class PackValidationError(RuntimeError):
    """Raised when a pack is required to be valid but is not."""

    def __init__(self, message: str, issues: Sequence[ValidationIssue]) -> None:
        super().__init__(message)
        self.issues = list(issues)


__all__ = [
    "ERROR",
    "PackValidationError",
    "PackValidationResult",
    "UnresolvedImport",
    "ValidationIssue",
    "ValidationStats",
    "WARNING",
]
