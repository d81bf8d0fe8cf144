"""Refactor pass: ordered regex rewrites towards self-hosted equivalents."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional

from .logging import get_logger
from .models import PatternRule, Severity
from .patterns.base import PatternCatalog, locate
from .patterns.cleaning import mask_secrets
from .patterns.refactor import default_refactor_catalog

REFACTORABLE_SUFFIXES = (".ts", ".tsx", ".js", ".jsx", ".mjs", ".cjs")

_EXCESS_BLANK_LINES = re.compile(r"\n{4,}")
_TRAILING_WHITESPACE = re.compile(r"[ \t]+$", re.MULTILINE)


@dataclass(frozen=True)
class RefactorChange:
    """One rule match replaced during a refactor."""

    rule_id: str
    line: int
    column: int
    original: str
    replacement: str
    severity: Severity
    description: str

    def to_dict(self) -> Dict[str, object]:
        return {
            "rule_id": self.rule_id,
            "line": self.line,
            "column": self.column,
            "original": self.original,
            "replacement": self.replacement,
            "severity": self.severity.value,
            "description": self.description,
        }


@dataclass
class RefactorStats:
    total_patterns: int = 0
    applied_patterns: int = 0
    lines_changed: int = 0
    bytes_changed: int = 0

    def to_dict(self) -> Dict[str, int]:
        return {
            "total_patterns": self.total_patterns,
            "applied_patterns": self.applied_patterns,
            "lines_changed": self.lines_changed,
            "bytes_changed": self.bytes_changed,
        }


@dataclass
class RefactorResult:
    """Outcome of refactoring one file."""

    original_code: str
    refactored_code: str
    changes: List[RefactorChange] = field(default_factory=list)
    stats: RefactorStats = field(default_factory=RefactorStats)
    path: Optional[str] = None

    @property
    def has_changes(self) -> bool:
        return bool(self.changes)


def is_refactorable(path: str) -> bool:
    return path.endswith(REFACTORABLE_SUFFIXES) and not path.endswith(".d.ts")


def _postprocess(code: str) -> str:
    code = _EXCESS_BLANK_LINES.sub("\n\n\n", code)
    return _TRAILING_WHITESPACE.sub("", code)


class Refactorer:
    """Applies the refactor catalog rule by rule against the evolving source."""

    def __init__(self, patterns: Optional[PatternCatalog] = None) -> None:
        self.catalog = patterns.copy() if patterns is not None else default_refactor_catalog()
        self.logger = get_logger("refactorer")

    def add_pattern(self, rule: PatternRule) -> None:
        self.catalog.add_pattern(rule)

    def remove_pattern(self, rule_id: str) -> bool:
        return self.catalog.remove_pattern(rule_id)

    def get_patterns(self) -> List[PatternRule]:
        return self.catalog.get_patterns()

    def refactor(self, content: str, path: Optional[str] = None) -> RefactorResult:
        """Rewrite ``content``; positions are reported against the text each rule saw."""
        code = content
        changes: List[RefactorChange] = []
        applied = 0

        for rule in self.catalog.rewrite_rules():
            matches = [match for match in rule.matcher(code) if match.group(0)]
            if not matches:
                continue
            applied += 1
            for match in matches:
                line, column = locate(code, match.start())
                changes.append(
                    RefactorChange(
                        rule_id=rule.id,
                        line=line,
                        column=column,
                        original=mask_secrets(match.group(0)),
                        replacement=mask_secrets(rule.replacement_for(match)),
                        severity=rule.severity,
                        description=rule.message,
                    )
                )
            code = rule.apply(code)

        code = _postprocess(code)
        stats = RefactorStats(
            total_patterns=len(self.catalog),
            applied_patterns=applied,
            lines_changed=abs(len(content.split("\n")) - len(code.split("\n"))) + len(changes),
            bytes_changed=abs(len(content) - len(code)),
        )
        if changes:
            self.logger.debug("%s: %d refactor change(s)", path or "<source>", len(changes))
        return RefactorResult(original_code=content, refactored_code=code, changes=changes, stats=stats, path=path)

    def refactor_batch(self, files: Mapping[str, str]) -> Dict[str, RefactorResult]:
        """Refactor every JS/TS file in ``files``; other files are not included."""
        results: Dict[str, RefactorResult] = {}
        for path, content in files.items():
            if is_refactorable(path):
                results[path] = self.refactor(content, path)
        changed = sum(1 for result in results.values() if result.has_changes)
        self.logger.info("Refactored %d/%d source files", changed, len(results))
        return results

    def apply_batch(self, files: Mapping[str, str]) -> Dict[str, str]:
        """Return ``files`` with refactorable entries replaced by their rewritten code."""
        results = self.refactor_batch(files)
        return {
            path: results[path].refactored_code if path in results else content
            for path, content in files.items()
        }

    def needs_refactoring(self, code: str) -> bool:
        return any(rule.detector.search(code) for rule in self.catalog.rewrite_rules())

    def count_issues(self, code: str) -> Dict[str, int]:
        counts = {severity.value: 0 for severity in Severity}
        for rule in self.catalog.rewrite_rules():
            counts[rule.severity.value] += sum(1 for match in rule.matcher(code) if match.group(0))
        counts["total"] = sum(counts.values())
        return counts


def refactor_code(code: str, path: Optional[str] = None) -> RefactorResult:
    return Refactorer().refactor(code, path)


__all__ = [
    "RefactorChange",
    "RefactorResult",
    "RefactorStats",
    "Refactorer",
    "is_refactorable",
    "refactor_code",
]
