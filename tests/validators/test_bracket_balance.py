"""Tests for liberator.validators.brackets."""

from __future__ import annotations

from liberator.validators import validate_bracket_balance


def test_balanced_source_has_no_issues() -> None:
    assert validate_bracket_balance("function a() { return [1, (2)]; }\n", "a.ts") == []


def test_unclosed_bracket_reports_opening_position() -> None:
    issues = validate_bracket_balance("function a() {\n  return 1;\n", "a.ts")
    assert [(issue.code, issue.line, issue.column) for issue in issues] == [("UNCLOSED_BRACKET", 1, 14)]
    assert issues[0].is_error


def test_mismatched_bracket() -> None:
    issues = validate_bracket_balance("const a = [1, 2);\n", "a.ts")
    assert len(issues) == 1
    assert issues[0].code == "BRACKET_MISMATCH"
    assert issues[0].message == "Mismatched bracket: expected ']' but found ')'"


def test_unexpected_closing_bracket() -> None:
    issues = validate_bracket_balance("const a = 1; }\n", "a.ts")
    assert [issue.message for issue in issues] == ["Unexpected closing bracket '}'"]


def test_brackets_inside_strings_and_comments_are_ignored() -> None:
    content = (
        'const s = "(";\n'
        "// )\n"
        "/* ] */\n"
        "const t = '\\'{';\n"
        "const u = `}`;\n"
    )
    assert validate_bracket_balance(content, "a.ts") == []
