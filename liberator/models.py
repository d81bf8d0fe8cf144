"""Core data models shared across liberator components."""

from dataclasses import dataclass, field
from enum import Enum
from re import Match, Pattern
from typing import Callable, Dict, Iterator, List, Optional, Sequence, Union

FileSet = Dict[str, str]
"""Ordered mapping of relative path to UTF-8 file content."""

RewriteFn = Callable[[str, Sequence[Optional[str]]], str]


class Severity(str, Enum):
    """Severity of a detected pattern; drives scoring weight and grouping."""

    CRITICAL = "critical"
    MAJOR = "major"
    MINOR = "minor"


class Category(str, Enum):
    """Concern a rule belongs to; drives grouping in reports."""

    IMPORT = "import"
    API = "api"
    PATTERN = "pattern"
    TELEMETRY = "telemetry"
    NETWORK = "network"
    ATTRIBUTE = "attribute"
    COMMENT = "comment"
    ENVIRONMENT = "environment"
    SECRET = "secret"
    DEPENDENCY = "dependency"


class ChangeKind(str, Enum):
    REMOVED = "removed"
    REPLACED = "replaced"
    ADDED = "added"


@dataclass(frozen=True)
class PatternRule:
    """A detector regex plus the metadata describing one sanitization concern."""

    id: str
    detector: Pattern[str]
    severity: Severity
    category: Category
    message: str
    suggestion: str
    auto_fixable: bool = True
    rewrite: Union[str, RewriteFn, None] = None
    sensitive: bool = False

    @property
    def detection_only(self) -> bool:
        return self.rewrite is None

    def matcher(self, text: str) -> Iterator[Match[str]]:
        """Return a fresh iterator over all non-overlapping matches in ``text``."""
        return self.detector.finditer(text)

    def replacement_for(self, match: Match[str]) -> str:
        if self.rewrite is None:
            return match.group(0)
        if callable(self.rewrite):
            return self.rewrite(match.group(0), match.groups())
        return self.rewrite

    def apply(self, text: str) -> str:
        """Substitute every match of this rule in ``text``."""
        if self.rewrite is None:
            return text
        return self.detector.sub(self.replacement_for, text)


@dataclass(frozen=True)
class Issue:
    """One concrete match of a rule at a file location."""

    rule_id: str
    file: str
    line: int
    column: int
    matched_text: str
    severity: Severity
    category: Category
    suggestion: str
    auto_fixable: bool

    def to_dict(self) -> Dict[str, object]:
        return {
            "rule_id": self.rule_id,
            "file": self.file,
            "line": self.line,
            "column": self.column,
            "matched_text": self.matched_text,
            "severity": self.severity.value,
            "category": self.category.value,
            "suggestion": self.suggestion,
            "auto_fixable": self.auto_fixable,
        }


@dataclass
class ScanReport:
    """Deterministic summary of a scan over a file set."""

    total_files: int
    files_scanned: int
    files_with_issues: int
    issues: List[Issue]
    severity_counts: Dict[Severity, int]
    score: int
    grade: str

    @classmethod
    def empty(cls) -> "ScanReport":
        return cls(
            total_files=0,
            files_scanned=0,
            files_with_issues=0,
            issues=[],
            severity_counts={severity: 0 for severity in Severity},
            score=0,
            grade="F",
        )

    def by_severity(self) -> Dict[Severity, List[Issue]]:
        grouped: Dict[Severity, List[Issue]] = {severity: [] for severity in Severity}
        for issue in self.issues:
            grouped[issue.severity].append(issue)
        return grouped

    def by_category(self) -> Dict[Category, List[Issue]]:
        grouped: Dict[Category, List[Issue]] = {}
        for issue in self.issues:
            grouped.setdefault(issue.category, []).append(issue)
        return grouped

    def to_dict(self) -> Dict[str, object]:
        return {
            "total_files": self.total_files,
            "files_scanned": self.files_scanned,
            "files_with_issues": self.files_with_issues,
            "issues": [issue.to_dict() for issue in self.issues],
            "severity_counts": {severity.value: count for severity, count in self.severity_counts.items()},
            "score": self.score,
            "grade": self.grade,
        }


@dataclass(frozen=True)
class Change:
    """Informational record of one edit made while cleaning a file."""

    kind: ChangeKind
    line: int
    description: str


@dataclass(frozen=True)
class Kept:
    """File survives cleaning with the given content."""

    content: str


@dataclass(frozen=True)
class Removed:
    """File is dropped from the output set entirely."""

    reason: str


FileOutcome = Union[Kept, Removed]


@dataclass
class CleaningResult:
    """Per-file outcome of the cleaning pass."""

    path: str
    outcome: FileOutcome
    changes: List[Change] = field(default_factory=list)

    @property
    def removed(self) -> bool:
        return isinstance(self.outcome, Removed)

    @property
    def cleaned_content(self) -> str:
        if isinstance(self.outcome, Kept):
            return self.outcome.content
        return ""
