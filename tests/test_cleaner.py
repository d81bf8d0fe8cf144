"""Tests for liberator.cleaner."""

from __future__ import annotations

import json

from liberator.cleaner import Cleaner, CleaningOptions
from liberator.models import Kept, Removed
from liberator.scanner import Scanner
from tests._fixtures.project_builder import platform_project


def test_cleaner_drops_import_and_redacts_secret() -> None:
    files = {"src/a.ts": "import x from '@proprietary/core';\nconst sk = 'sk-AAAAAAAAAAAAAAAAAAAA';"}

    report = Cleaner().clean(files)
    cleaned = report.cleaned_files()

    assert cleaned["src/a.ts"] == "const sk = /* OpenAI API Key REMOVED */;"
    assert report.imports_removed == 1
    assert report.secrets_redacted == 1
    rescan = Scanner().scan(cleaned)
    assert rescan.issues == []
    assert rescan.score == 100


def test_github_token_never_survives_cleaning() -> None:
    token = "ghp_" + "a1B2" * 9
    files = {"src/config.ts": f'export const token = "{token}";\nexport const backup = `{token}`;\n'}

    cleaned = Cleaner().clean(files).cleaned_files()["src/config.ts"]

    assert token not in cleaned
    assert cleaned.count("/* GitHub Token REMOVED */") == 2


def test_proprietary_files_are_removed_not_emptied() -> None:
    report = Cleaner().clean(platform_project())

    result = report[".lovable/config.json"]
    assert isinstance(result.outcome, Removed)
    assert report.removed_paths() == [".lovable/config.json"]
    assert ".lovable/config.json" not in report.cleaned_files()
    assert isinstance(report["src/main.tsx"].outcome, Kept)


def test_platform_project_counters() -> None:
    report = Cleaner().clean(platform_project())

    assert report.files_removed == 1
    assert report.files_modified == 5
    assert report.imports_removed == 1
    assert report.secrets_redacted == 1
    assert report.telemetry_neutralized == 3
    assert report.packages_removed == 2
    assert list(report) == list(platform_project())


def test_package_manifest_loses_platform_packages_and_scripts() -> None:
    cleaned = Cleaner().clean(platform_project()).cleaned_files()

    manifest = json.loads(cleaned["package.json"])
    assert "@lovable/core" not in manifest["dependencies"]
    assert "lovable-tagger" not in manifest["devDependencies"]
    assert "sync" not in manifest["scripts"]
    assert manifest["dependencies"]["react"] == "^18.3.1"
    assert manifest["scripts"]["build"] == "vite build"


def test_vite_config_loses_tagger_plugin_and_import() -> None:
    cleaned = Cleaner().clean(platform_project()).cleaned_files()["vite.config.ts"]

    assert "componentTagger" not in cleaned
    assert "lovable-tagger" not in cleaned
    assert "plugins: [react()].filter(Boolean)," in cleaned


def test_html_platform_script_and_hosts_are_neutralized() -> None:
    cleaned = Cleaner().clean(platform_project()).cleaned_files()["index.html"]

    assert "gpteng" not in cleaned
    assert "https://removed.invalid/opengraph-image.png" in cleaned
    assert '<script type="module" src="/src/main.tsx"></script>' in cleaned


def test_editor_attributes_and_annotations_are_removed() -> None:
    cleaned = Cleaner().clean(platform_project()).cleaned_files()["src/App.tsx"]

    assert "data-lov-id" not in cleaned
    assert "@lovable" not in cleaned
    assert '<div className={cn("app")}>' in cleaned


def test_telemetry_hosts_become_placeholder() -> None:
    cleaned = Cleaner().clean(platform_project()).cleaned_files()["src/lib/api.ts"]

    assert "lovable.dev" not in cleaned
    assert 'fetch("https://removed.invalid/track"' in cleaned
    assert cleaned.startswith("const OPENAI_KEY = /* OpenAI API Key REMOVED */;")


def test_multi_line_import_block_is_removed_whole() -> None:
    content = 'import {\n  Foo,\n  Bar,\n} from "@lovable/ui";\nimport { useState } from "react";\n'

    result = Cleaner().clean_file("src/a.tsx", content)

    assert result.cleaned_content == 'import { useState } from "react";\n'
    assert result.changes[0].description == "Removed proprietary import (4 lines)"


def test_require_of_platform_module_is_removed() -> None:
    content = 'const core = require("@lovable/core");\nmodule.exports = core;\n'
    assert Cleaner().clean_file("src/a.js", content).cleaned_content == "module.exports = core;\n"


def test_dry_run_reports_without_editing() -> None:
    files = platform_project()

    report = Cleaner(CleaningOptions(dry_run=True)).clean(files)

    assert report["src/lib/api.ts"].cleaned_content == files["src/lib/api.ts"]
    assert report["src/lib/api.ts"].changes
    assert report.total_changes > 0


def test_disabled_toggles_leave_content_alone() -> None:
    options = CleaningOptions(remove_telemetry=False, preserve_comments=True, remove_proprietary_files=False)
    report = Cleaner(options).clean(platform_project())

    assert report.files_removed == 0
    assert "api.lovable.dev" in report["src/lib/api.ts"].cleaned_content
    assert "// @lovable component-root" in report["src/App.tsx"].cleaned_content
    assert report.telemetry_neutralized == 0


def test_extra_suspicious_packages_are_honoured() -> None:
    manifest = json.dumps({"dependencies": {"left-pad": "1.0.0", "react": "18.0.0"}})
    options = CleaningOptions(suspicious_packages=("left-pad",))

    cleaned = Cleaner(options).clean({"package.json": manifest}).cleaned_files()["package.json"]

    assert json.loads(cleaned) == {"dependencies": {"react": "18.0.0"}}


def test_cleaning_is_idempotent() -> None:
    first = Cleaner().clean(platform_project()).cleaned_files()

    second = Cleaner().clean(first)

    assert second.total_changes == 0
    assert second.cleaned_files() == first
