"""Tests for liberator.reporting."""

from __future__ import annotations

import json

from liberator.orchestrator import LiberationOptions, Orchestrator
from liberator.refactorer import Refactorer
from liberator.reporting import (
    format_rebuild_stats,
    format_refactor_diff,
    format_scan_report,
    format_validation_summary,
    liberation_report,
    liberation_report_json,
    scan_report_json,
    severity_summary,
)
from liberator.scanner import Scanner
from liberator.validators import validate_pack
from tests._fixtures.project_builder import platform_project

SECRET_FILES = {"src/a.ts": "import x from '@proprietary/core';\nconst sk = 'sk-AAAAAAAAAAAAAAAAAAAA';\n"}


def test_scan_report_groups_by_severity_without_leaking_secrets() -> None:
    text = format_scan_report(Scanner().scan(SECRET_FILES))

    assert "Score: 70/100 (grade C)" in text
    assert "CRITICAL (2)" in text
    assert "src/a.ts:2:13" in text
    assert "AAAAAAAAAAAAAAAAAAAA" not in text


def test_clean_scan_report() -> None:
    text = format_scan_report(Scanner().scan({"src/ok.ts": "export {};\n"}))
    assert "No platform patterns detected." in text


def test_scan_report_json_is_machine_readable() -> None:
    payload = json.loads(scan_report_json(Scanner().scan(SECRET_FILES)))

    assert payload["severity_counts"] == {"critical": 2, "major": 0, "minor": 0}
    assert [issue["rule_id"] for issue in payload["issues"]] == ["proprietary-import", "secret-openai"]
    assert "AAAAAAAAAAAAAAAAAAAA" not in json.dumps(payload)


def test_validation_summary_lists_errors_and_hints() -> None:
    result = validate_pack({"src/a.ts": 'import { cn } from "@/lib/utils";\nconst a = (1;\n'})

    text = format_validation_summary(result)

    assert text.startswith("Validation failed: score ")
    assert "[UNCLOSED_BRACKET]" in text
    assert "hint    Missing polyfills: @/lib/utils" in text


def test_liberation_report_summarizes_without_file_contents(fixed_clock) -> None:
    result = Orchestrator(clock=fixed_clock).liberate(platform_project(), LiberationOptions(project_name="demo"))

    report = liberation_report(result)
    serialized = liberation_report_json(result)

    assert report["success"] is True
    assert report["project_name"] == "demo"
    assert report["scan"] == {"files_scanned": 8, "issues_found": 13, "score": 25, "grade": "F"}
    assert report["cleaning"]["secrets_redacted"] == 1
    assert report["rebuild"]["steps"][0] == "frontend-copy"
    assert report["stats"]["score_after"] == 100
    assert "sk-AAAA" not in serialized
    assert "createRoot" not in serialized
    assert format_rebuild_stats(result.rebuilt_project.stats).startswith("Generated ")


def test_severity_summary() -> None:
    report = Scanner().scan(SECRET_FILES)
    assert severity_summary(report.severity_counts) == "2 critical, 0 major, 0 minor"


OPENAI_KEY = "sk-" + "Z" * 26
GITHUB_TOKEN = "ghp_" + "Q" * 36
TELEMETRY_SOURCE = (
    f'fetch("https://api.lovable.dev/e?key={OPENAI_KEY}");\n'
    f'navigator.sendBeacon("https://x.lovable.app", "{GITHUB_TOKEN}");\n'
)


def test_secrets_inside_telemetry_calls_stay_redacted() -> None:
    report = Scanner().scan({"src/t.ts": TELEMETRY_SOURCE})

    rule_ids = {issue.rule_id for issue in report.issues}
    assert {"telemetry-fetch", "telemetry-beacon", "secret-openai", "secret-github"} <= rule_ids
    for output in (scan_report_json(report), format_scan_report(report)):
        assert OPENAI_KEY not in output
        assert GITHUB_TOKEN not in output
    fetch_issue = next(issue for issue in report.issues if issue.rule_id == "telemetry-fetch")
    assert "api.lovable.dev" in fetch_issue.matched_text


def test_refactor_changes_do_not_record_secrets() -> None:
    result = Refactorer().refactor(TELEMETRY_SOURCE, "src/t.ts")

    assert {change.rule_id for change in result.changes} >= {"drop-telemetry-fetch", "drop-telemetry-beacon"}
    serialized = json.dumps([change.to_dict() for change in result.changes])
    assert OPENAI_KEY not in serialized
    assert GITHUB_TOKEN not in serialized
    assert OPENAI_KEY not in format_refactor_diff(result)
