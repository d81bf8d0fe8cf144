"""Tests for liberator.validators.imports."""

from __future__ import annotations

from liberator.validators import find_imports, resolve_import, validate_imports


def test_find_imports_reports_lines() -> None:
    content = 'import a from "./a";\nimport type { B } from "@/b";\nimport "./side-effect.css";\n'
    assert find_imports(content) == [("./a", 1), ("@/b", 2)]


def test_relative_import_resolves_with_extension() -> None:
    files = {"src/components/Button.tsx": ""}
    assert resolve_import("./Button", "src/components/App.tsx", files) == "src/components/Button.tsx"
    assert resolve_import("../components/Button", "src/pages/Home.tsx", files) == "src/components/Button.tsx"


def test_alias_import_resolves_index_file() -> None:
    files = {"src/lib/utils/index.ts": ""}
    assert resolve_import("@/lib/utils", "src/a.ts", files) == "src/lib/utils/index.ts"


def test_import_escaping_the_root_is_unresolved() -> None:
    assert resolve_import("../outside", "a.ts", {"outside.ts": ""}) is None


def test_validate_imports_warns_only_for_missing_local_modules() -> None:
    content = (
        'import React from "react";\n'
        'import { Dialog } from "@radix-ui/react-dialog";\n'
        'import lodash from "lodash";\n'
        'import { helper } from "./missing";\n'
    )

    issues, unresolved = validate_imports(content, "src/a.ts", {"src/a.ts": content})

    assert [(issue.code, issue.line, issue.severity) for issue in issues] == [("UNRESOLVED_IMPORT", 4, "warning")]
    assert [item.import_path for item in unresolved] == ["./missing"]


def test_custom_external_packages() -> None:
    content = 'import thing from "@acme/thing";\n'
    issues, _ = validate_imports(content, "src/a.ts", {}, external_packages=("@acme/",))
    assert issues == []
