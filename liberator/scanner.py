"""Pattern scanner producing issues, a sovereignty score and a grade."""

from __future__ import annotations

import json
from fnmatch import fnmatchcase
from typing import Dict, Iterable, List, Mapping, Optional, Sequence

from .logging import get_logger
from .models import Category, Issue, ScanReport, Severity
from .patterns.base import PatternCatalog, locate, redact
from .patterns.cleaning import SUSPICIOUS_PACKAGES, default_cleaning_catalog, is_suspicious_package, mask_secrets
from .scoring import compute_score, count_by_severity, grade_for

EXCLUDED_SEGMENTS = frozenset(
    {"node_modules", ".git", "dist", "build", ".next", ".nuxt", "coverage", ".cache"}
)
EXCLUDED_SUFFIXES = (".min.js", ".min.css", ".map")
SOURCE_EXTENSIONS = (
    ".ts",
    ".tsx",
    ".js",
    ".jsx",
    ".mjs",
    ".cjs",
    ".vue",
    ".svelte",
    ".astro",
    ".json",
    ".yaml",
    ".yml",
    ".toml",
    ".html",
    ".htm",
    ".css",
    ".scss",
    ".less",
    ".md",
    ".mdx",
)
DEPENDENCY_SECTIONS = ("dependencies", "devDependencies", "peerDependencies")
SUSPICIOUS_PACKAGE_RULE = "suspicious-package"


def is_excluded(path: str, extra_patterns: Sequence[str] = ()) -> bool:
    """Return True for build artifacts, vendored trees and configured excludes."""
    normalized = path.replace("\\", "/")
    parts = normalized.split("/")
    if any(part in EXCLUDED_SEGMENTS for part in parts[:-1]):
        return True
    if normalized.endswith(EXCLUDED_SUFFIXES):
        return True
    return any(fnmatchcase(normalized, pattern) for pattern in extra_patterns)


def is_package_manifest(path: str) -> bool:
    return path.replace("\\", "/").rsplit("/", 1)[-1] == "package.json"


class Scanner:
    """Runs a pattern catalog over a file set and aggregates a :class:`ScanReport`."""

    def __init__(
        self,
        catalog: Optional[PatternCatalog] = None,
        suspicious_packages: Optional[Iterable[str]] = None,
        exclude_paths: Sequence[str] = (),
    ) -> None:
        self.catalog = catalog.copy() if catalog is not None else default_cleaning_catalog()
        self.suspicious_packages = (
            tuple(suspicious_packages) if suspicious_packages is not None else SUSPICIOUS_PACKAGES
        )
        self.exclude_paths = list(exclude_paths)
        self.logger = get_logger("scanner")

    def should_scan(self, path: str) -> bool:
        if is_excluded(path, self.exclude_paths):
            return False
        if is_package_manifest(path):
            return True
        return path.lower().endswith(SOURCE_EXTENSIONS)

    def scan(self, files: Mapping[str, str]) -> ScanReport:
        """Scan every eligible file and return the aggregated report."""
        issues: List[Issue] = []
        files_scanned = 0
        files_with_issues = 0

        for path, content in files.items():
            if not self.should_scan(path):
                self.logger.debug("Skipping %s", path)
                continue
            files_scanned += 1
            file_issues = self.scan_file(path, content)
            if file_issues:
                files_with_issues += 1
                issues.extend(file_issues)
                self.logger.debug("%s: %d issue(s)", path, len(file_issues))

        severity_counts = count_by_severity(issues)
        score = compute_score(severity_counts)
        report = ScanReport(
            total_files=len(files),
            files_scanned=files_scanned,
            files_with_issues=files_with_issues,
            issues=issues,
            severity_counts=severity_counts,
            score=score,
            grade=grade_for(score),
        )
        self.logger.info(
            "Scanned %d/%d files: %d issue(s), score %d (%s)",
            files_scanned,
            len(files),
            len(issues),
            report.score,
            report.grade,
        )
        return report

    def scan_file(self, path: str, content: str) -> List[Issue]:
        if is_package_manifest(path):
            return self._scan_package_manifest(path, content)

        issues: List[Issue] = []
        for rule in self.catalog:
            for match in rule.matcher(content):
                matched = match.group(0)
                if not matched:
                    continue
                line, column = locate(content, match.start())
                issues.append(
                    Issue(
                        rule_id=rule.id,
                        file=path,
                        line=line,
                        column=column,
                        matched_text=redact(matched) if rule.sensitive else mask_secrets(matched),
                        severity=rule.severity,
                        category=rule.category,
                        suggestion=rule.suggestion,
                        auto_fixable=rule.auto_fixable,
                    )
                )
        issues.sort(key=lambda issue: (issue.line, issue.column))
        return issues

    def _scan_package_manifest(self, path: str, content: str) -> List[Issue]:
        try:
            payload = json.loads(content)
        except json.JSONDecodeError:
            self.logger.debug("Skipping malformed manifest %s", path)
            return []
        if not isinstance(payload, dict):
            return []

        issues: List[Issue] = []
        seen: Dict[str, bool] = {}
        for section in DEPENDENCY_SECTIONS:
            deps = payload.get(section)
            if not isinstance(deps, dict):
                continue
            for name in deps:
                if name in seen or not is_suspicious_package(name, self.suspicious_packages):
                    continue
                seen[name] = True
                issues.append(
                    Issue(
                        rule_id=SUSPICIOUS_PACKAGE_RULE,
                        file=path,
                        line=_manifest_line(content, name),
                        column=1,
                        matched_text=name,
                        severity=Severity.MAJOR,
                        category=Category.DEPENDENCY,
                        suggestion=f"Remove '{name}' from {section}",
                        auto_fixable=True,
                    )
                )
        return issues


def _manifest_line(content: str, name: str) -> int:
    needle = f'"{name}"'
    for index, line in enumerate(content.splitlines(), start=1):
        if needle in line:
            return index
    return 1


__all__ = ["Scanner", "is_excluded", "is_package_manifest", "SOURCE_EXTENSIONS"]
