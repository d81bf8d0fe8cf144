"""Refactor catalog: call-site and import renames towards local equivalents."""

from __future__ import annotations

import re
from typing import Optional, Sequence, Tuple

from ..models import Category, PatternRule, Severity
from .base import PatternCatalog, rule
from .cleaning import PROPRIETARY_MODULE

_LOCAL_MODULES = {
    "core": "sovereign",
    "ai": "sovereign",
    "api": "sovereign",
    "patterns": "sovereign",
    "sdk": "sovereign",
    "utils": "utils",
    "supabase": "supabase",
}

REMOVED_IMPORT_MARKER = "// [REMOVED] platform import"


def _remap_module(_match: str, groups: Sequence[Optional[str]]) -> str:
    prefix, quote, package = groups[0], groups[1], groups[2]
    target = _LOCAL_MODULES.get(package or "", package or "sovereign")
    return f"{prefix}{quote}@/lib/{target}{quote}"


def _rename_integration(_match: str, groups: Sequence[Optional[str]]) -> str:
    quote, subpath = groups[0], groups[1] or ""
    target = "@/types/database" if subpath.split("/")[0] == "types" else "@/lib/supabase"
    return f"{quote}{target}{quote}"


def _local_websocket(_match: str, groups: Sequence[Optional[str]]) -> str:
    prefix, quote = groups[0], groups[1]
    return f"{prefix}import.meta.env.VITE_WS_URL || {quote}ws://localhost:3001{quote}"


def _rename_env(_match: str, groups: Sequence[Optional[str]]) -> str:
    return f"VITE_APP_{groups[0]}"


def _pattern_factory(_match: str, groups: Sequence[Optional[str]]) -> str:
    return f"SovereignPatterns.{groups[0]}"


REFACTOR_RULES: Tuple[PatternRule, ...] = (
    rule(
        "remap-proprietary-import",
        r"(\bfrom\s*)(['\"])(?:@lovable|@gptengineer|@proprietary)/([\w-]+)(?:/[^'\"\n]*)?\2",
        Severity.CRITICAL,
        Category.IMPORT,
        "Proprietary module import",
        "Import the local replacement module instead",
        rewrite=_remap_module,
    ),
    rule(
        "neutralize-platform-import",
        rf"^[ \t]*import\b[^;'\"]*?['\"]{PROPRIETARY_MODULE}['\"][ \t]*;?",
        Severity.CRITICAL,
        Category.IMPORT,
        "Platform-only import",
        "Import removed; the module has no self-hosted counterpart",
        rewrite=REMOVED_IMPORT_MARKER,
        flags=re.MULTILINE,
    ),
    rule(
        "neutralize-platform-require",
        rf"^[ \t]*(?:(?:const|let|var)\s+[^\n=]+=\s*)?require\s*\(\s*['\"]{PROPRIETARY_MODULE}['\"]\s*\)[ \t]*;?",
        Severity.CRITICAL,
        Category.IMPORT,
        "Platform-only require()",
        "require() removed; the module has no self-hosted counterpart",
        rewrite="// [REMOVED] platform require",
        flags=re.MULTILINE,
    ),
    rule(
        "rename-integration-import",
        r"(['\"])(?:@/|(?:\.\.?/)+)integrations/supabase/([^'\"\n]+)\1",
        Severity.MAJOR,
        Category.IMPORT,
        "Auto-generated backend integration import",
        "Use @/lib/supabase and @/types/database",
        rewrite=_rename_integration,
    ),
    rule(
        "remove-tagger-plugin",
        r",\s*(?:mode\s*===\s*['\"]development['\"]\s*&&\s*)?componentTagger\s*\(\s*\)(?=\s*[\]\)])"
        r"|(?:mode\s*===\s*['\"]development['\"]\s*&&\s*)?componentTagger\s*\(\s*\)[ \t]*,?",
        Severity.MAJOR,
        Category.IMPORT,
        "Platform component tagger plugin",
        "Plugin removed from the build configuration",
        rewrite="",
    ),
    rule(
        "rename-generate",
        r"\blovable\.generate\s*\(",
        Severity.CRITICAL,
        Category.API,
        "Platform AI generation call",
        "Calls sovereignAIAdapter.generateCompletion()",
        rewrite="sovereignAIAdapter.generateCompletion(",
    ),
    rule(
        "rename-api-client",
        r"\blovableApi\s*\.",
        Severity.CRITICAL,
        Category.API,
        "Platform API client",
        "Uses the local api helper",
        rewrite="api.",
    ),
    rule(
        "rename-ai-assistant",
        r"\bgetAIAssistant\s*\(",
        Severity.CRITICAL,
        Category.API,
        "Platform AI assistant initialization",
        "Calls sovereignAIAdapter.createAssistant()",
        rewrite="sovereignAIAdapter.createAssistant(",
    ),
    rule(
        "rename-run-assistant",
        r"\brunAssistant\s*\(",
        Severity.CRITICAL,
        Category.API,
        "Platform AI assistant execution",
        "Calls sovereignAIAdapter.run()",
        rewrite="sovereignAIAdapter.run(",
    ),
    rule(
        "local-websocket",
        r"(\bnew\s+WebSocket\s*\(\s*)(['\"`])wss?://[^'\"`\n]*(?:lovable|gptengineer)[^'\"`\n]*\2",
        Severity.CRITICAL,
        Category.NETWORK,
        "WebSocket connection to the platform",
        "Connects to VITE_WS_URL or a local server",
        rewrite=_local_websocket,
        flags=re.IGNORECASE,
    ),
    rule(
        "pattern-factory",
        r"\bPattern\.(Template|State|Router|Form|Modal|Toast)\b",
        Severity.MAJOR,
        Category.PATTERN,
        "Platform Pattern.* idiom",
        "Uses SovereignPatterns from @/lib/sovereign",
        rewrite=_pattern_factory,
    ),
    rule(
        "event-schema-to-zod",
        r"\bEventSchema\.",
        Severity.MAJOR,
        Category.PATTERN,
        "Platform EventSchema usage",
        "Uses the zod namespace; make sure z is imported from 'zod'",
        rewrite="z.",
    ),
    rule(
        "drop-telemetry-fetch",
        r"\bfetch\s*\(\s*(['\"`])[^'\"`\n]*(?:lovable|gptengineer)[^'\"`\n]*\1\s*"
        r"(?:,\s*\{(?:[^{}]|\{[^{}]*\})*\}\s*)?\)",
        Severity.MAJOR,
        Category.TELEMETRY,
        "Telemetry request to the platform",
        "Request replaced by a resolved promise",
        rewrite="Promise.resolve(null)",
        flags=re.IGNORECASE,
    ),
    rule(
        "drop-telemetry-beacon",
        r"\bnavigator\.sendBeacon\s*\([^)\n]*(?:lovable|gptengineer)[^)\n]*\)",
        Severity.MAJOR,
        Category.TELEMETRY,
        "Telemetry beacon to the platform",
        "Beacon replaced by false",
        rewrite="false",
        flags=re.IGNORECASE,
    ),
    rule(
        "rename-env-var",
        r"\bVITE_(?:LOVABLE|GPT)_([A-Z0-9_]+)",
        Severity.MAJOR,
        Category.ENVIRONMENT,
        "Platform-specific environment variable",
        "Renamed to VITE_APP_*",
        rewrite=_rename_env,
    ),
    rule(
        "drop-data-attribute",
        r"\s*(?<![\w-])data-(?:lov|lovable)-[a-z-]+=\"[^\"]*\"",
        Severity.MINOR,
        Category.ATTRIBUTE,
        "Platform editor data attribute",
        "Attribute removed",
        rewrite="",
    ),
    rule(
        "drop-annotation-comment",
        r"[ \t]*//[ \t]*@(?:lovable|gptengineer|bolt|v0)\b[^\n]*",
        Severity.MINOR,
        Category.COMMENT,
        "Platform annotation comment",
        "Comment removed",
        rewrite="",
    ),
    rule(
        "drop-annotation-block",
        r"/\*\s*(?:@lovable|@gptengineer|lovable:)[\s\S]*?\*/",
        Severity.MINOR,
        Category.COMMENT,
        "Platform annotation block comment",
        "Comment removed",
        rewrite="",
    ),
    rule(
        "drop-generated-comment",
        r"[ \t]*//[^\n]*\bgenerated\s+by\s+(?:lovable|gpt[\s-]?engineer)[^\n]*",
        Severity.MINOR,
        Category.COMMENT,
        "Platform generation banner",
        "Comment removed",
        rewrite="",
        flags=re.IGNORECASE,
    ),
)


def default_refactor_catalog() -> PatternCatalog:
    return PatternCatalog("refactor", REFACTOR_RULES)


__all__ = ["REFACTOR_RULES", "REMOVED_IMPORT_MARKER", "default_refactor_catalog"]
