"""Cleaning pass: drop platform files and imports, neutralize telemetry, redact secrets."""

from __future__ import annotations

import json
import re
from collections import Counter
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterator, List, Mapping, Optional, Sequence, Tuple

from .logging import get_logger
from .models import Change, ChangeKind, CleaningResult, FileSet, Kept, Removed
from .patterns.base import locate
from .patterns.cleaning import (
    COSMETIC_REMOVALS,
    IMPORT_REMOVAL_PATTERNS,
    PLATFORM_SCRIPT_TAG,
    PROPRIETARY_FILES,
    PROPRIETARY_SCRIPT_MARKER,
    SECRET_RULES,
    SECRET_TYPES,
    SUSPICIOUS_PACKAGES,
    TAGGER_PLUGIN_PATTERNS,
    TELEMETRY_DOMAINS,
    TELEMETRY_PLACEHOLDER_HOST,
    is_proprietary_file,
    is_suspicious_package,
)
from .polyfills import Polyfill, needed_polyfills
from .scanner import is_package_manifest

_IMPORT_BLOCK_START = re.compile(r"^\s*(?:import|export)\b[^'\"]*\{[^}]*$")
_IMPORT_BLOCK_END = re.compile(r"\}\s*from\s*['\"][^'\"]*['\"]")
_MAX_IMPORT_BLOCK_LINES = 200
_DEPENDENCY_SECTIONS = ("dependencies", "devDependencies", "peerDependencies", "optionalDependencies")


@dataclass
class CleaningOptions:
    """Toggles for the cleaning pass; every edit is on by default except ``dry_run``."""

    remove_proprietary_imports: bool = True
    remove_proprietary_files: bool = True
    remove_telemetry: bool = True
    replace_suspicious_packages: bool = True
    preserve_comments: bool = False
    dry_run: bool = False
    proprietary_files: Sequence[str] = PROPRIETARY_FILES
    suspicious_packages: Sequence[str] = SUSPICIOUS_PACKAGES
    telemetry_domains: Sequence[str] = TELEMETRY_DOMAINS


@dataclass
class CleaningReport:
    """Per-file cleaning results plus aggregate counters."""

    results: Dict[str, CleaningResult] = field(default_factory=dict)
    imports_removed: int = 0
    secrets_redacted: int = 0
    telemetry_neutralized: int = 0
    packages_removed: int = 0

    def __getitem__(self, path: str) -> CleaningResult:
        return self.results[path]

    def __iter__(self) -> Iterator[str]:
        return iter(self.results)

    def __len__(self) -> int:
        return len(self.results)

    def __contains__(self, path: object) -> bool:
        return path in self.results

    @property
    def files_removed(self) -> int:
        return sum(1 for result in self.results.values() if result.removed)

    @property
    def files_modified(self) -> int:
        return sum(1 for result in self.results.values() if not result.removed and result.changes)

    @property
    def files_unchanged(self) -> int:
        return sum(1 for result in self.results.values() if not result.removed and not result.changes)

    @property
    def total_changes(self) -> int:
        return sum(len(result.changes) for result in self.results.values())

    def removed_paths(self) -> List[str]:
        return [path for path, result in self.results.items() if result.removed]

    def cleaned_files(self) -> FileSet:
        """Return the kept files, in input order, with their cleaned content."""
        return {
            path: result.cleaned_content for path, result in self.results.items() if not result.removed
        }

    def to_dict(self) -> Dict[str, object]:
        return {
            "files_modified": self.files_modified,
            "files_removed": self.files_removed,
            "files_unchanged": self.files_unchanged,
            "total_changes": self.total_changes,
            "imports_removed": self.imports_removed,
            "secrets_redacted": self.secrets_redacted,
            "telemetry_neutralized": self.telemetry_neutralized,
            "packages_removed": self.packages_removed,
            "removed_files": self.removed_paths(),
        }


def _secret_redactors() -> List[Tuple[re.Pattern[str], str]]:
    redactors: List[Tuple[re.Pattern[str], str]] = []
    for secret_rule in SECRET_RULES:
        label = SECRET_TYPES.get(secret_rule.id, "Secret")
        # the enclosing quotes go too when the secret is the whole literal
        pattern = re.compile(rf"(['\"`]?)(?:{secret_rule.detector.pattern})\1", secret_rule.detector.flags)
        redactors.append((pattern, label))
    return redactors


def _telemetry_pattern(domains: Sequence[str]) -> Optional[re.Pattern[str]]:
    if not domains:
        return None
    ordered = sorted(domains, key=len, reverse=True)
    alternation = "|".join(re.escape(domain) for domain in ordered)
    return re.compile(rf"(?<![\w.-])(?:[\w-]+\.)*(?:{alternation})(?![\w-])", re.IGNORECASE)


class _Edits:
    """Collects changes and counters for one file."""

    def __init__(self) -> None:
        self.changes: List[Change] = []
        self.counters: Counter[str] = Counter()

    def add(self, kind: ChangeKind, line: int, description: str, counter: Optional[str] = None) -> None:
        self.changes.append(Change(kind=kind, line=line, description=description))
        if counter:
            self.counters[counter] += 1


class Cleaner:
    """Removal and neutralization pass over a file set."""

    def __init__(self, options: Optional[CleaningOptions] = None) -> None:
        self.options = options or CleaningOptions()
        self.logger = get_logger("cleaner")
        self._redactors = _secret_redactors()
        self._telemetry = _telemetry_pattern(self.options.telemetry_domains)

    def clean(self, files: Mapping[str, str]) -> CleaningReport:
        """Clean every file and return the per-path results in input order."""
        report = CleaningReport()
        for path, content in files.items():
            result, counters = self._clean(path, content)
            report.results[path] = result
            report.imports_removed += counters["imports_removed"]
            report.secrets_redacted += counters["secrets_redacted"]
            report.telemetry_neutralized += counters["telemetry_neutralized"]
            report.packages_removed += counters["packages_removed"]
            if result.removed:
                self.logger.debug("Removed %s", path)
            elif result.changes:
                self.logger.debug("%s: %d change(s)", path, len(result.changes))

        self.logger.info(
            "Cleaned %d files: %d modified, %d removed, %d change(s)%s",
            len(report),
            report.files_modified,
            report.files_removed,
            report.total_changes,
            " (dry run)" if self.options.dry_run else "",
        )
        return report

    def clean_file(self, path: str, content: str) -> CleaningResult:
        result, _ = self._clean(path, content)
        return result

    def _clean(self, path: str, content: str) -> Tuple[CleaningResult, Counter[str]]:
        options = self.options
        edits = _Edits()

        if options.remove_proprietary_files and is_proprietary_file(path, options.proprietary_files):
            edits.add(ChangeKind.REMOVED, 0, "Removed proprietary platform file")
            outcome = Removed("proprietary platform file")
            return CleaningResult(path=path, outcome=outcome, changes=edits.changes), edits.counters

        cleaned = content
        if is_package_manifest(path) and options.replace_suspicious_packages:
            cleaned = self._clean_package_manifest(path, cleaned, edits)

        filename = path.rsplit("/", 1)[-1]
        if options.remove_proprietary_imports and filename.startswith("vite.config."):
            cleaned = self._substitute(cleaned, TAGGER_PLUGIN_PATTERNS, edits, "Removed component tagger plugin")
        if options.remove_telemetry and filename.lower().endswith((".html", ".htm")):
            cleaned = self._substitute(
                cleaned, (PLATFORM_SCRIPT_TAG,), edits, "Removed platform script tag", "telemetry_neutralized"
            )
        if not options.preserve_comments:
            cleaned = self._substitute(cleaned, COSMETIC_REMOVALS, edits, "Removed platform annotation")

        cleaned = self._clean_lines(cleaned, edits)

        outcome = Kept(content if options.dry_run else cleaned)
        return CleaningResult(path=path, outcome=outcome, changes=edits.changes), edits.counters

    def _clean_lines(self, content: str, edits: _Edits) -> str:
        lines = content.split("\n")
        output: List[str] = []
        index = 0
        while index < len(lines):
            line = lines[index]
            if self.options.remove_proprietary_imports:
                end = _import_block_end(lines, index)
                statement = " ".join(part.strip() for part in lines[index : end + 1])
                if _is_proprietary_import(statement):
                    span = end - index + 1
                    suffix = f" ({span} lines)" if span > 1 else ""
                    edits.add(ChangeKind.REMOVED, index + 1, f"Removed proprietary import{suffix}", "imports_removed")
                    index = end + 1
                    continue

            line_number = index + 1
            if self.options.remove_telemetry and self._telemetry is not None:
                line, count = self._telemetry.subn(TELEMETRY_PLACEHOLDER_HOST, line)
                if count:
                    edits.add(
                        ChangeKind.REPLACED,
                        line_number,
                        f"Neutralized {count} telemetry host(s)",
                        "telemetry_neutralized",
                    )

            for pattern, label in self._redactors:
                line, count = pattern.subn(f"/* {label} REMOVED */", line)
                if count:
                    for _ in range(count):
                        edits.add(ChangeKind.REPLACED, line_number, f"Redacted {label}", "secrets_redacted")

            output.append(line)
            index += 1
        return "\n".join(output)

    def _substitute(
        self,
        content: str,
        patterns: Sequence[re.Pattern[str]],
        edits: _Edits,
        description: str,
        counter: Optional[str] = None,
    ) -> str:
        for pattern in patterns:
            content = pattern.sub(_recording(content, edits, description, counter), content)
        return content

    def _clean_package_manifest(self, path: str, content: str, edits: _Edits) -> str:
        try:
            payload = json.loads(content)
        except json.JSONDecodeError:
            self.logger.warning("Leaving malformed %s unchanged", path)
            return content
        if not isinstance(payload, dict):
            return content

        changed = False
        for section in _DEPENDENCY_SECTIONS:
            deps = payload.get(section)
            if not isinstance(deps, dict):
                continue
            for name in list(deps):
                if is_suspicious_package(name, self.options.suspicious_packages):
                    del deps[name]
                    changed = True
                    edits.add(ChangeKind.REMOVED, 0, f"Removed {name} from {section}", "packages_removed")

        scripts = payload.get("scripts")
        if isinstance(scripts, dict):
            for name, command in list(scripts.items()):
                if isinstance(command, str) and PROPRIETARY_SCRIPT_MARKER.search(command):
                    del scripts[name]
                    changed = True
                    edits.add(ChangeKind.REMOVED, 0, f"Removed script '{name}'")

        if not changed:
            return content
        return json.dumps(payload, indent=2, ensure_ascii=False) + "\n"


def _recording(
    content: str, edits: _Edits, description: str, counter: Optional[str]
) -> Callable[[re.Match[str]], str]:
    def _replace(match: re.Match[str]) -> str:
        line, _ = locate(content, match.start())
        edits.add(ChangeKind.REMOVED, line, description, counter)
        return ""

    return _replace


def _import_block_end(lines: Sequence[str], start: int) -> int:
    """Index of the last line of a multi-line ``import { ... } from`` block starting at ``start``."""
    if not _IMPORT_BLOCK_START.match(lines[start]):
        return start
    limit = min(len(lines), start + _MAX_IMPORT_BLOCK_LINES)
    for index in range(start + 1, limit):
        if _IMPORT_BLOCK_END.search(lines[index]):
            return index
        if "}" in lines[index]:
            break
    return start


def _is_proprietary_import(statement: str) -> bool:
    return any(pattern.search(statement) for pattern in IMPORT_REMOVAL_PATTERNS)


def detect_needed_polyfills(files: Mapping[str, str]) -> List[Polyfill]:
    """Return the local replacement modules the cleaned project refers to."""
    return needed_polyfills(files)


__all__ = ["Cleaner", "CleaningOptions", "CleaningReport", "detect_needed_polyfills"]
