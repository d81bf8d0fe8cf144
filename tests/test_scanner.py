"""Tests for liberator.scanner."""

from __future__ import annotations

from liberator.models import Severity
from liberator.scanner import Scanner, is_excluded
from tests._fixtures.project_builder import platform_project


def test_scan_reports_import_and_redacted_secret() -> None:
    files = {"src/a.ts": "import x from '@proprietary/core';\nconst sk = 'sk-AAAAAAAAAAAAAAAAAAAA';\n"}

    report = Scanner().scan(files)

    assert [issue.rule_id for issue in report.issues] == ["proprietary-import", "secret-openai"]
    first, second = report.issues
    assert (first.line, first.column) == (1, 10)
    assert second.line == 2
    assert second.matched_text.startswith("sk-A")
    assert "AAAAAAAAAAAAAAAAAAAA" not in second.matched_text
    assert set(second.matched_text[4:]) == {"*"}
    assert report.severity_counts[Severity.CRITICAL] == 2
    assert report.score == 70
    assert report.grade == "C"


def test_scan_platform_project_counts_and_score() -> None:
    report = Scanner().scan(platform_project())

    assert report.total_files == 8
    assert report.files_scanned == 8
    assert report.files_with_issues == 5
    assert report.severity_counts == {Severity.CRITICAL: 3, Severity.MAJOR: 5, Severity.MINOR: 5}
    assert report.score == 25
    assert report.grade == "F"


def test_issues_are_ordered_by_position_within_a_file() -> None:
    report = Scanner().scan({"src/App.tsx": platform_project()["src/App.tsx"]})
    positions = [(issue.line, issue.column) for issue in report.issues]
    assert positions == sorted(positions)
    assert {issue.rule_id for issue in report.issues} == {
        "integration-import",
        "annotation-comment",
        "platform-generate",
        "data-attribute",
    }


def test_package_manifest_reports_dependency_lines() -> None:
    report = Scanner().scan({"package.json": platform_project()["package.json"]})

    by_name = {issue.matched_text: issue for issue in report.issues}
    assert set(by_name) == {"@lovable/core", "lovable-tagger"}
    assert by_name["@lovable/core"].line == 14
    assert by_name["lovable-tagger"].line == 17
    assert all(issue.severity is Severity.MAJOR for issue in report.issues)


def test_malformed_manifest_is_skipped() -> None:
    report = Scanner().scan({"package.json": '{"dependencies": {"lovable-tagger": '})
    assert report.issues == []
    assert report.files_scanned == 1


def test_excluded_and_unsupported_files_are_not_scanned() -> None:
    files = {
        "node_modules/pkg/index.js": "lovable.generate(",
        "dist/app.min.js": "lovable.generate(",
        "assets/logo.png": "lovable.generate(",
        "src/ok.ts": "export const ok = true;\n",
    }
    report = Scanner().scan(files)
    assert report.total_files == 4
    assert report.files_scanned == 1
    assert report.score == 100


def test_configured_exclude_patterns_apply() -> None:
    scanner = Scanner(exclude_paths=["legacy/*"])
    report = scanner.scan({"legacy/old.ts": "lovable.generate({})", "src/new.ts": "lovable.generate({})"})
    assert [issue.file for issue in report.issues] == ["src/new.ts"]
    assert is_excluded("a/.next/chunk.js")


def test_repeated_scans_do_not_share_match_state() -> None:
    scanner = Scanner()
    files = {"src/a.ts": "lovable.generate({});\nlovable.generate({});\n"}
    first = scanner.scan(files)
    second = scanner.scan(files)
    assert len(first.issues) == len(second.issues) == 2
    assert first.to_dict() == second.to_dict()


def test_match_at_end_of_one_file_does_not_leak_into_the_next() -> None:
    scanner = Scanner()
    files = {
        "src/a.ts": "const a = 1;\nlovable.generate(",
        "src/b.ts": "lovable.generate({});\n",
    }

    report = scanner.scan(files)
    hits = {
        issue.file: (issue.line, issue.column) for issue in report.issues if issue.rule_id == "platform-generate"
    }

    assert hits == {"src/a.ts": (2, 1), "src/b.ts": (1, 1)}
    alone = scanner.scan({"src/b.ts": files["src/b.ts"]})
    assert [issue.to_dict() for issue in alone.issues] == [
        issue.to_dict() for issue in report.issues if issue.file == "src/b.ts"
    ]


def test_empty_file_set_scores_full_marks() -> None:
    report = Scanner().scan({})
    assert report.files_scanned == 0
    assert report.score == 100
    assert report.grade == "A"
