"""Cleaning catalog: detection rules and data lists for removal and neutralization."""

from __future__ import annotations

import re
from typing import Iterable, Tuple

from ..models import Category, PatternRule, Severity
from .base import PatternCatalog, redact, rule

PROPRIETARY_SCOPES: Tuple[str, ...] = (
    "@proprietary",
    "@lovable",
    "@gptengineer",
    "@agent",
    "@bolt",
    "@v0",
    "@cursor",
    "@replit",
)

_SCOPE_ALT = "|".join(re.escape(scope) for scope in PROPRIETARY_SCOPES)

# Module specifiers owned by the platforms: scoped packages plus a few bare names.
PROPRIETARY_MODULE = (
    rf"(?:(?:{_SCOPE_ALT})/[^'\"`\n]+"
    r"|lovable-[\w-]+|gptengineer[\w-]*|gpt-engineer[\w-]*|v0-[\w-]+|cursor-sdk|replit-[\w-]+)"
)

PROPRIETARY_FILES: Tuple[str, ...] = (
    ".lovable",
    ".gptengineer",
    ".gpteng",
    ".bolt",
    ".v0",
    ".cursor",
    ".cursorrc",
    ".replit",
    ".agent",
    "lovable.config",
    "lovable.json",
    "lovable-lock",
    "gptengineer.config",
    "bolt.config",
    "v0.config",
    "v0-manifest.json",
    "cursor.config",
    "replit.nix",
    "agent.config",
    "__lovable__",
)

# Hostname suffixes used by platform telemetry, analytics and asset beacons.
TELEMETRY_DOMAINS: Tuple[str, ...] = (
    "lovableproject.com",
    "lovable.app",
    "lovable.dev",
    "gptengineer.app",
    "gptengineer.run",
    "gpteng.co",
    "v0.dev",
    "bolt.new",
)

TELEMETRY_PLACEHOLDER_HOST = "removed.invalid"

SUSPICIOUS_PACKAGES: Tuple[str, ...] = (
    "lovable-tagger",
    "lovable-core",
    "lovable-analytics",
    "gpt-engineer",
    "gpt-engineer-tracker",
    "gptengineer-core",
    "bolt-core",
    "v0-tagger",
    "v0-sdk",
    "cursor-runtime",
    "replit-sdk",
    # scope prefixes match every package published under them
    "@proprietary/",
    "@lovable/",
    "@gptengineer/",
    "@agent/",
    "@bolt/",
    "@v0/",
    "@cursor/",
    "@replit/",
)

PROPRIETARY_SCRIPT_MARKER = re.compile(
    r"\b(?:lovable|gpteng\w*|gpt-engineer|bolt|cursor|replit)\b", re.IGNORECASE
)

SECRET_TYPES = {
    "secret-openai": "OpenAI API Key",
    "secret-anthropic": "Anthropic API Key",
    "secret-github": "GitHub Token",
    "secret-slack": "Slack Bot Token",
    "secret-stripe": "Stripe Live Key",
    "secret-aws": "AWS Access Key",
}

_TELEMETRY_HOST = (
    r"(?<![\w.-])(?:[\w-]+\.)*(?:"
    + "|".join(re.escape(domain) for domain in TELEMETRY_DOMAINS)
    + r")(?![\w-])"
)

IMPORT_RULES: Tuple[PatternRule, ...] = (
    rule(
        "proprietary-import",
        rf"(?:\bfrom\s*|\bimport\s*)['\"]{PROPRIETARY_MODULE}['\"]",
        Severity.CRITICAL,
        Category.IMPORT,
        "Proprietary platform module import",
        "Remove the import and implement the behaviour locally or with an open-source package",
    ),
    rule(
        "proprietary-require",
        rf"\brequire\s*\(\s*['\"]{PROPRIETARY_MODULE}['\"]\s*\)",
        Severity.CRITICAL,
        Category.IMPORT,
        "Proprietary platform module require()",
        "Remove the require() call and implement the behaviour locally",
    ),
    rule(
        "integration-import",
        r"\bfrom\s+['\"](?:@/|(?:\.\.?/)+)integrations/supabase/[^'\"\n]+['\"]",
        Severity.MAJOR,
        Category.IMPORT,
        "Auto-generated backend integration import",
        "Import the client from @/lib/supabase and types from @/types/database",
    ),
    rule(
        "tagger-plugin",
        r"\bcomponentTagger\s*\(\s*\)",
        Severity.MAJOR,
        Category.IMPORT,
        "Platform component tagger build plugin",
        "Remove the plugin from the build configuration; it is only used by the hosted editor",
    ),
)

API_RULES: Tuple[PatternRule, ...] = (
    rule(
        "platform-generate",
        r"\blovable\.generate\s*\(",
        Severity.CRITICAL,
        Category.API,
        "Platform AI generation call",
        "Replace with sovereignAIAdapter.generateCompletion() from @/lib/sovereign",
    ),
    rule(
        "platform-api-client",
        r"\blovableApi\s*\.",
        Severity.CRITICAL,
        Category.API,
        "Platform API client usage",
        "Replace with the local api helper from @/lib/sovereign",
    ),
    rule(
        "ai-assistant",
        r"\bgetAIAssistant\s*\(",
        Severity.CRITICAL,
        Category.API,
        "Platform AI assistant initialization",
        "Replace with sovereignAIAdapter.createAssistant()",
    ),
    rule(
        "run-assistant",
        r"\brunAssistant\s*\(",
        Severity.CRITICAL,
        Category.API,
        "Platform AI assistant execution",
        "Replace with sovereignAIAdapter.run()",
    ),
)

STRUCTURE_RULES: Tuple[PatternRule, ...] = (
    rule(
        "event-schema",
        r"\bEventSchema\.",
        Severity.MAJOR,
        Category.PATTERN,
        "Platform EventSchema usage",
        "Replace with a zod schema (z.*)",
    ),
    rule(
        "pattern-idiom",
        r"\bPattern\.(?:Template|State|Router|Form|Modal|Toast)\b",
        Severity.MAJOR,
        Category.PATTERN,
        "Platform Pattern.* idiom",
        "Replace with the matching factory from @/lib/sovereign",
    ),
)

TELEMETRY_RULES: Tuple[PatternRule, ...] = (
    rule(
        "telemetry-fetch",
        r"\bfetch\s*\(\s*['\"`][^'\"`\n]*(?:lovable|gptengineer)[^'\"`\n]*['\"`]",
        Severity.MAJOR,
        Category.TELEMETRY,
        "Telemetry request to the platform",
        "Remove the telemetry call",
        flags=re.IGNORECASE,
    ),
    rule(
        "telemetry-beacon",
        r"\bnavigator\.sendBeacon\s*\([^)\n]*(?:lovable|gptengineer)[^)\n]*\)",
        Severity.MAJOR,
        Category.TELEMETRY,
        "Telemetry beacon to the platform",
        "Remove the beacon call",
        flags=re.IGNORECASE,
    ),
    rule(
        "telemetry-host",
        _TELEMETRY_HOST,
        Severity.MINOR,
        Category.TELEMETRY,
        "Reference to a platform telemetry host",
        "Point the URL at a self-hosted endpoint or drop it",
        flags=re.IGNORECASE,
    ),
    rule(
        "platform-websocket",
        r"\bnew\s+WebSocket\s*\([^)\n]*(?:lovable|gptengineer)[^)\n]*\)",
        Severity.CRITICAL,
        Category.NETWORK,
        "WebSocket connection to the platform",
        "Replace with a self-hosted WebSocket server",
        auto_fixable=False,
        flags=re.IGNORECASE,
    ),
    rule(
        "platform-service-worker",
        r"\bnavigator\.serviceWorker\.register\s*\([^)\n]*lovable[^)\n]*\)",
        Severity.CRITICAL,
        Category.NETWORK,
        "Platform service worker registration",
        "Ship and register your own service worker",
        auto_fixable=False,
        flags=re.IGNORECASE,
    ),
    rule(
        "platform-env-var",
        r"\bVITE_(?:LOVABLE|GPT)_[A-Z0-9_]+",
        Severity.MAJOR,
        Category.ENVIRONMENT,
        "Platform-specific environment variable",
        "Rename to a generic VITE_APP_* variable",
    ),
)

COSMETIC_RULES: Tuple[PatternRule, ...] = (
    rule(
        "data-attribute",
        r"(?<![\w-])data-(?:lov|lovable)-[a-z-]+=\"[^\"]*\"",
        Severity.MINOR,
        Category.ATTRIBUTE,
        "Platform editor data attribute",
        "Remove the data attribute",
    ),
    rule(
        "annotation-comment",
        r"//[ \t]*@(?:lovable|gptengineer|bolt|v0)\b[^\n]*",
        Severity.MINOR,
        Category.COMMENT,
        "Platform annotation comment",
        "Remove the comment",
    ),
    rule(
        "annotation-block",
        r"/\*\s*(?:@lovable|@gptengineer|lovable:)[\s\S]*?\*/",
        Severity.MINOR,
        Category.COMMENT,
        "Platform annotation block comment",
        "Remove the comment",
    ),
    rule(
        "generated-comment",
        r"//[^\n]*\bgenerated\s+by\s+(?:lovable|gpt[\s-]?engineer)[^\n]*",
        Severity.MINOR,
        Category.COMMENT,
        "Platform generation banner",
        "Remove the comment",
        flags=re.IGNORECASE,
    ),
)

SECRET_RULES: Tuple[PatternRule, ...] = (
    rule(
        "secret-openai",
        r"(?<![\w-])sk-[A-Za-z0-9]{20,}",
        Severity.CRITICAL,
        Category.SECRET,
        "OpenAI API key embedded in source",
        "Revoke the key and read it from an environment variable",
        sensitive=True,
    ),
    rule(
        "secret-anthropic",
        r"(?<![\w-])sk-ant-[A-Za-z0-9_-]{20,}",
        Severity.CRITICAL,
        Category.SECRET,
        "Anthropic API key embedded in source",
        "Revoke the key and read it from an environment variable",
        sensitive=True,
    ),
    rule(
        "secret-github",
        r"\bghp_[A-Za-z0-9]{36}\b",
        Severity.CRITICAL,
        Category.SECRET,
        "GitHub personal access token embedded in source",
        "Revoke the token and read it from an environment variable",
        sensitive=True,
    ),
    rule(
        "secret-slack",
        r"\bxoxb-[A-Za-z0-9-]{10,}",
        Severity.CRITICAL,
        Category.SECRET,
        "Slack bot token embedded in source",
        "Revoke the token and read it from an environment variable",
        sensitive=True,
    ),
    rule(
        "secret-stripe",
        r"\bsk_live_[A-Za-z0-9]{10,}",
        Severity.CRITICAL,
        Category.SECRET,
        "Stripe live secret key embedded in source",
        "Roll the key and read it from an environment variable",
        sensitive=True,
    ),
    rule(
        "secret-aws",
        r"\bAKIA[A-Z0-9]{16}\b",
        Severity.CRITICAL,
        Category.SECRET,
        "AWS access key id embedded in source",
        "Deactivate the key and use an IAM role or environment variable",
        sensitive=True,
    ),
)

CLEANING_RULES: Tuple[PatternRule, ...] = (
    IMPORT_RULES + API_RULES + STRUCTURE_RULES + TELEMETRY_RULES + COSMETIC_RULES + SECRET_RULES
)

# Line-level matchers for statements the cleaner drops outright.
IMPORT_REMOVAL_PATTERNS: Tuple[re.Pattern[str], ...] = (
    re.compile(rf"^\s*import\b[^\n]*?['\"]{PROPRIETARY_MODULE}['\"]"),
    re.compile(rf"^\s*export\b[^\n]*?\bfrom\s*['\"]{PROPRIETARY_MODULE}['\"]"),
    re.compile(
        rf"^\s*(?:const|let|var)\s+[^\n=]+=\s*require\s*\(\s*['\"]{PROPRIETARY_MODULE}['\"]\s*\)"
    ),
    re.compile(rf"^\s*require\s*\(\s*['\"]{PROPRIETARY_MODULE}['\"]\s*\)\s*;?\s*$"),
)

TAGGER_PLUGIN_PATTERNS: Tuple[re.Pattern[str], ...] = (
    re.compile(
        r",\s*(?:mode\s*===\s*['\"]development['\"]\s*&&\s*)?componentTagger\s*\(\s*\)(?=\s*[\]\)])"
    ),
    re.compile(r"(?:mode\s*===\s*['\"]development['\"]\s*&&\s*)?componentTagger\s*\(\s*\)\s*,?[ \t]*"),
)

PLATFORM_SCRIPT_TAG = re.compile(
    r"[ \t]*<script\b[^>]*(?:lovable|gptengineer|gpteng)[^>]*>[\s\S]*?</script>[ \t]*\n?",
    re.IGNORECASE,
)

COSMETIC_REMOVALS: Tuple[re.Pattern[str], ...] = (
    re.compile(r"\s*(?<![\w-])data-(?:lov|lovable)-[a-z-]+=\"[^\"]*\""),
    re.compile(r"[ \t]*//[ \t]*@(?:lovable|gptengineer|bolt|v0)\b[^\n]*"),
    re.compile(r"/\*\s*(?:@lovable|@gptengineer|lovable:)[\s\S]*?\*/"),
    re.compile(r"[ \t]*//[^\n]*\bgenerated\s+by\s+(?:lovable|gpt[\s-]?engineer)[^\n]*", re.IGNORECASE),
)


def mask_secrets(text: str) -> str:
    """Redact every secret-shaped token inside ``text``, whatever rule matched it."""
    for secret_rule in SECRET_RULES:
        text = secret_rule.detector.sub(lambda match: redact(match.group(0)), text)
    return text


def is_suspicious_package(name: str, packages: Iterable[str] = SUSPICIOUS_PACKAGES) -> bool:
    """Exact-name lookup, with entries ending in ``/`` matching a whole scope."""
    for entry in packages:
        if entry.endswith("/"):
            if name.startswith(entry):
                return True
        elif name == entry:
            return True
    return False


def is_proprietary_file(path: str, names: Iterable[str] = PROPRIETARY_FILES) -> bool:
    """Return True when the file (or a directory on its path) belongs to a platform."""
    parts = path.replace("\\", "/").split("/")
    filename = parts[-1].lower()
    directories = {part.lower() for part in parts[:-1]}
    for entry in names:
        lowered = entry.lower()
        if filename == lowered or filename.startswith(f"{lowered}."):
            return True
        if lowered in directories:
            return True
    return False


def default_cleaning_catalog() -> PatternCatalog:
    return PatternCatalog("cleaning", CLEANING_RULES)


__all__ = [
    "CLEANING_RULES",
    "IMPORT_REMOVAL_PATTERNS",
    "PROPRIETARY_FILES",
    "PROPRIETARY_MODULE",
    "SECRET_RULES",
    "SECRET_TYPES",
    "SUSPICIOUS_PACKAGES",
    "TELEMETRY_DOMAINS",
    "default_cleaning_catalog",
    "is_proprietary_file",
    "is_suspicious_package",
    "mask_secrets",
]
