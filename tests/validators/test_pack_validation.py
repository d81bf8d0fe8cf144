"""Tests for liberator.validators.pack."""

from __future__ import annotations

import pytest

from liberator.validators import PackValidationError, ensure_valid, validate_pack


def test_valid_frontend_under_root_scores_full_marks() -> None:
    files = {
        "frontend/src/a.ts": "import x from './b';\nexport default x;\n",
        "frontend/src/b.ts": "export default 1;\n",
        "backend/src/index.ts": "broken {",
    }

    result = validate_pack(files, root="frontend")

    assert result.is_valid
    assert result.score == 100
    assert result.stats.total_files == 2
    assert result.stats.valid_files == 2


def test_tooling_tests_and_configs_are_not_validated() -> None:
    files = {
        "backend/src/index.ts": "{",
        "scripts/build.js": "{",
        "src/app.test.ts": "{",
        "vite.config.ts": "{",
        "src/types.d.ts": "{",
        "src/a.ts": "export const a = 1;\n",
    }

    result = validate_pack(files)

    assert result.stats.total_files == 1
    assert result.is_valid


def test_score_combines_errors_warnings_and_missing_polyfills() -> None:
    files = {"src/a.ts": 'import { cn } from "@/lib/utils";\nimport { x } from "./missing";\nconst a = (1;\n'}

    result = validate_pack(files)

    assert len(result.critical_errors) == 1
    assert len(result.warnings) == 2
    assert result.missing_polyfills == ["@/lib/utils"]
    assert result.score == 100 - 10 - 2 * 2 - 5
    assert not result.is_valid
    assert result.stats.files_with_errors == 1
    assert result.suggestions == [
        "Missing polyfills: @/lib/utils",
        "Fix critical errors before generating the pack",
    ]


def test_syntax_smells_are_errors() -> None:
    files = {"src/a.ts": 'type $1 = string;\nimport {} from "x";\n'}

    result = validate_pack(files)

    assert [issue.code for issue in result.critical_errors] == ["INVALID_TYPE_PLACEHOLDER", "EMPTY_IMPORT"]


def test_ensure_valid_raises_with_issues() -> None:
    result = validate_pack({"src/a.ts": "const a = [1;\n"})

    with pytest.raises(PackValidationError) as excinfo:
        ensure_valid(result)

    assert excinfo.value.issues == result.critical_errors
    ensure_valid(validate_pack({"src/a.ts": "export const a = [1];\n"}))
