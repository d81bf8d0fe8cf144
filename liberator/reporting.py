"""Human-readable and JSON renderings of pipeline results."""

from __future__ import annotations

import json
from typing import Dict, List, Mapping

from .models import ScanReport, Severity
from .orchestrator import LiberationResult
from .rebuilder import RebuildStats
from .refactorer import RefactorResult
from .validators import PackValidationResult

_RULE = "=" * 64
_THIN_RULE = "-" * 64
_MATCH_PREVIEW = 50


def _preview(text: str) -> str:
    flat = text.replace("\n", "\\n")
    if len(flat) > _MATCH_PREVIEW:
        return flat[:_MATCH_PREVIEW] + "..."
    return flat


def format_scan_report(report: ScanReport) -> str:
    """Render ``report`` grouped by severity with suggestions and fix status."""
    counts = report.severity_counts
    lines: List[str] = [
        _RULE,
        "LIBERATOR SCAN REPORT",
        _RULE,
        "",
        f"Score: {report.score}/100 (grade {report.grade})",
        f"Files scanned: {report.files_scanned}/{report.total_files}",
        f"Files with issues: {report.files_with_issues}",
        "",
        f"Critical: {counts.get(Severity.CRITICAL, 0)}",
        f"Major:    {counts.get(Severity.MAJOR, 0)}",
        f"Minor:    {counts.get(Severity.MINOR, 0)}",
        "",
    ]
    if not report.issues:
        lines.append("No platform patterns detected.")
        return "\n".join(lines) + "\n"

    lines.append(_THIN_RULE)
    for severity, issues in report.by_severity().items():
        if not issues:
            continue
        lines.append(f"{severity.value.upper()} ({len(issues)})")
        lines.append("")
        for issue in issues:
            lines.append(f"  {issue.file}:{issue.line}:{issue.column}")
            lines.append(f"    Rule: {issue.rule_id}")
            lines.append(f'    Match: "{_preview(issue.matched_text)}"')
            lines.append(f"    Suggestion: {issue.suggestion}")
            lines.append("    Auto-fixable" if issue.auto_fixable else "    Manual fix required")
            lines.append("")
    return "\n".join(lines)


def scan_report_json(report: ScanReport) -> str:
    return json.dumps(report.to_dict(), indent=2)


def format_refactor_diff(result: RefactorResult) -> str:
    """Per-change ``-``/``+`` listing grouped by severity."""
    if not result.has_changes:
        return "// No changes needed\n"
    lines: List[str] = [
        f"// Refactor report{f' for {result.path}' if result.path else ''}",
        f"// Patterns applied: {result.stats.applied_patterns}",
        f"// Changes: {len(result.changes)}",
        f"// Lines changed: {result.stats.lines_changed}",
        f"// Bytes changed: {result.stats.bytes_changed}",
        "",
    ]
    for severity in Severity:
        changes = [change for change in result.changes if change.severity == severity]
        if not changes:
            continue
        lines.append(f"// {severity.value.upper()} CHANGES")
        for change in changes:
            lines.append(f"//   L{change.line}: {change.rule_id}")
            lines.append(f"//     - {_preview(change.original)}")
            lines.append(f"//     + {_preview(change.replacement)}")
        lines.append("")
    return "\n".join(lines)


def format_validation_summary(result: PackValidationResult) -> str:
    stats = result.stats
    lines = [
        f"Validation {'passed' if result.is_valid else 'failed'}: score {result.score}/100",
        f"Files: {stats.total_files} checked, {stats.valid_files} clean, "
        f"{stats.files_with_warnings} with warnings, {stats.files_with_errors} with errors",
    ]
    for issue in result.critical_errors:
        lines.append(f"  error   {issue.file}:{issue.line}:{issue.column} [{issue.code}] {issue.message}")
    for issue in result.warnings:
        lines.append(f"  warning {issue.file}:{issue.line}:{issue.column} [{issue.code}] {issue.message}")
    for suggestion in result.suggestions:
        lines.append(f"  hint    {suggestion}")
    return "\n".join(lines) + "\n"


def format_rebuild_stats(stats: RebuildStats) -> str:
    return (
        f"Generated {stats.total_files} files ({stats.generated_bytes} bytes): "
        f"frontend {stats.frontend_files}, backend {stats.backend_files}, docker {stats.docker_files}, "
        f"scripts {stats.script_files}, database {stats.database_files}, auth {stats.auth_files}"
    )


def liberation_report(result: LiberationResult) -> Dict[str, object]:
    """Summary payload for a liberation run; contains no file contents."""
    refactor_changes = sum(len(item.changes) for item in result.refactor_results.values())
    rebuild = result.rebuilt_project.stats
    return {
        "success": result.success,
        "timestamp": result.stats.timestamp,
        "project_name": result.rebuilt_project.manifest.name,
        "scan": {
            "files_scanned": result.scan_report.files_scanned,
            "issues_found": len(result.scan_report.issues),
            "score": result.scan_report.score,
            "grade": result.scan_report.grade,
        },
        "cleaning": {
            "files_modified": result.cleaning_report.files_modified,
            "files_removed": result.cleaning_report.files_removed,
            "imports_removed": result.cleaning_report.imports_removed,
            "secrets_redacted": result.cleaning_report.secrets_redacted,
            "telemetry_neutralized": result.cleaning_report.telemetry_neutralized,
            "packages_removed": result.cleaning_report.packages_removed,
        },
        "refactoring": {
            "files_refactored": result.stats.files_refactored,
            "total_changes": refactor_changes,
        },
        "rebuild": {
            "total_files": rebuild.total_files,
            "frontend_files": rebuild.frontend_files,
            "backend_files": rebuild.backend_files,
            "docker_files": rebuild.docker_files,
            "steps": list(result.rebuilt_project.steps),
        },
        "validation": {
            "is_valid": result.validation.is_valid,
            "score": result.validation.score,
            "missing_polyfills": list(result.validation.missing_polyfills),
        },
        "stats": result.stats.to_dict(),
        "errors": list(result.errors),
        "warnings": list(result.warnings),
    }


def liberation_report_json(result: LiberationResult) -> str:
    return json.dumps(liberation_report(result), indent=2)


def severity_summary(counts: Mapping[Severity, int]) -> str:
    return ", ".join(f"{counts.get(severity, 0)} {severity.value}" for severity in Severity)


__all__ = [
    "format_rebuild_stats",
    "format_refactor_diff",
    "format_scan_report",
    "format_validation_summary",
    "liberation_report",
    "liberation_report_json",
    "scan_report_json",
    "severity_summary",
]
