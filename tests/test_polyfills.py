"""Tests for liberator.polyfills."""

from __future__ import annotations

from liberator.cleaner import detect_needed_polyfills
from liberator.polyfills import missing_polyfills, needed_polyfills, polyfill_for


def test_needed_polyfills_follow_table_order() -> None:
    files = {"src/App.tsx": 'import { cn } from "@/lib/utils";\nsovereignAIAdapter.run(a, b);\n'}
    assert [polyfill.alias for polyfill in needed_polyfills(files)] == ["@/lib/sovereign", "@/lib/utils"]


def test_present_polyfills_are_not_missing() -> None:
    files = {
        "src/App.tsx": 'import { cn } from "@/lib/utils";\nimport { supabase } from "@/lib/supabase";\n',
        "src/lib/utils.ts": "export function cn() {}\n",
    }
    assert [polyfill.alias for polyfill in missing_polyfills(files)] == ["@/lib/supabase"]


def test_polyfill_does_not_require_itself() -> None:
    files = {"src/lib/sovereign.ts": "export const x = sovereignAIAdapter.run;\n"}
    assert needed_polyfills(files) == []


def test_dynamic_imports_and_declarations() -> None:
    files = {
        "src/a.ts": 'const mod = await import("@/hooks/use-toast");\n',
        "src/env.d.ts": 'import { cn } from "@/lib/utils";\n',
    }
    assert [polyfill.name for polyfill in detect_needed_polyfills(files)] == ["use-toast"]


def test_polyfill_lookup_by_alias() -> None:
    polyfill = polyfill_for("@/hooks/use-mobile")
    assert polyfill is not None
    assert polyfill.path == "src/hooks/use-mobile.tsx"
    assert polyfill_for("@/lib/unknown") is None
