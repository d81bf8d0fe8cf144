"""Tests for liberator.refactorer."""

from __future__ import annotations

from liberator.models import Category, Severity
from liberator.patterns import rule
from liberator.refactorer import Refactorer, refactor_code
from liberator.reporting import format_refactor_diff


def test_proprietary_import_is_remapped_to_local_module() -> None:
    result = refactor_code('import { x } from "@lovable/core";\n')
    assert result.refactored_code == 'import { x } from "@/lib/sovereign";\n'
    assert result.changes[0].rule_id == "remap-proprietary-import"


def test_integration_imports_are_renamed() -> None:
    code = (
        'import { supabase } from "@/integrations/supabase/client";\n'
        'import type { Database } from "../integrations/supabase/types";\n'
    )
    result = refactor_code(code)
    assert result.refactored_code == (
        'import { supabase } from "@/lib/supabase";\n'
        'import type { Database } from "@/types/database";\n'
    )


def test_platform_calls_are_rewritten() -> None:
    code = (
        "const answer = await lovable.generate({ prompt });\n"
        'const items = await lovableApi.get("/items");\n'
        "const view = Pattern.Template(render);\n"
        "const schema = EventSchema.object({});\n"
        "const key = import.meta.env.VITE_LOVABLE_KEY;\n"
    )
    refactored = refactor_code(code).refactored_code
    assert refactored == (
        "const answer = await sovereignAIAdapter.generateCompletion({ prompt });\n"
        'const items = await api.get("/items");\n'
        "const view = SovereignPatterns.Template(render);\n"
        "const schema = z.object({});\n"
        "const key = import.meta.env.VITE_APP_KEY;\n"
    )


def test_platform_websocket_and_telemetry_are_localized() -> None:
    code = (
        'const socket = new WebSocket("wss://realtime.lovable.dev/socket");\n'
        'await fetch("https://api.lovable.dev/e", { method: "POST", body: "x" });\n'
    )
    refactored = refactor_code(code).refactored_code
    assert 'new WebSocket(import.meta.env.VITE_WS_URL || "ws://localhost:3001");' in refactored
    assert "await Promise.resolve(null);" in refactored


def test_change_positions_are_reported() -> None:
    result = refactor_code("const a = 1;\nlovable.generate({});\n")
    change = result.changes[0]
    assert (change.line, change.column) == (2, 1)
    assert change.original == "lovable.generate("
    assert change.severity is Severity.CRITICAL


def test_refactoring_is_idempotent() -> None:
    code = 'import { x } from "@lovable/core";\nlovable.generate({}); // @lovable note\n'
    once = refactor_code(code).refactored_code
    again = refactor_code(once)
    assert again.refactored_code == once
    assert not again.has_changes


def test_clean_code_reports_no_changes() -> None:
    result = refactor_code("export const ok = true;\n")
    assert not result.has_changes
    assert format_refactor_diff(result) == "// No changes needed\n"


def test_batch_only_touches_script_sources() -> None:
    files = {"README.md": "lovable.generate(", "src/a.ts": "lovable.generate({});\n"}
    refactorer = Refactorer()

    results = refactorer.refactor_batch(files)
    applied = refactorer.apply_batch(files)

    assert list(results) == ["src/a.ts"]
    assert applied["README.md"] == "lovable.generate("
    assert applied["src/a.ts"] == "sovereignAIAdapter.generateCompletion({});\n"


def test_count_issues_by_severity() -> None:
    counts = Refactorer().count_issues("lovable.generate(); // @lovable x")
    assert counts == {"critical": 1, "major": 0, "minor": 1, "total": 2}
    assert Refactorer().needs_refactoring("lovableApi.post()")


def test_catalog_can_be_extended_per_instance() -> None:
    refactorer = Refactorer()
    refactorer.add_pattern(
        rule("rename-legacy", r"\blegacyFetch\(", Severity.MINOR, Category.API, "Legacy", "Use fetch", rewrite="fetch(")
    )
    refactorer.remove_pattern("rename-generate")

    refactored = refactorer.refactor("legacyFetch(url); lovable.generate({});").refactored_code

    assert refactored == "fetch(url); lovable.generate({});"
    assert "rename-legacy" not in [item.id for item in Refactorer().get_patterns()]
