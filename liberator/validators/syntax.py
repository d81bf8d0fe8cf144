"""Line heuristics for artifacts left behind by broken rewrites."""

from __future__ import annotations

import re
from typing import List, Tuple

from .base import ERROR, ValidationIssue

SYNTAX_SMELLS: Tuple[Tuple[re.Pattern[str], str, str], ...] = (
    (
        re.compile(r"\btype\s+\$\d+\s*="),
        "Invalid type name (unexpanded placeholder)",
        "INVALID_TYPE_PLACEHOLDER",
    ),
    (
        re.compile(r"\bfrom\s+['\"](?:@/|(?:\.\.?/)+)integrations/supabase"),
        "Auto-generated backend integration import left in the pack",
        "PROPRIETARY_IMPORT",
    ),
    (
        re.compile(r"\bimport\s+(?:type\s+)?\{\s*\}\s*from\b"),
        "Empty import braces",
        "EMPTY_IMPORT",
    ),
    (
        re.compile(
            r"\bconst\s+(supabase|createClient)\s*=.*createClient\s*\([^)]*\)\s*;?\s*const\s+\1\b"
        ),
        "Client declared twice on the same line",
        "DUPLICATE_DECLARATION",
    ),
    (
        re.compile(
            r"//\s*(?:Types Supabase - remplacer|replace with generated types|\.\.\.\s*(?:rest of|remaining|existing) code)",
            re.IGNORECASE,
        ),
        "Template placeholder comment left in the pack",
        "PLACEHOLDER_COMMENT",
    ),
)


def validate_syntax(content: str, path: str) -> List[ValidationIssue]:
    issues: List[ValidationIssue] = []
    for number, line in enumerate(content.split("\n"), start=1):
        for pattern, message, code in SYNTAX_SMELLS:
            if pattern.search(line):
                issues.append(ValidationIssue(path, number, 1, message, ERROR, code))
    return issues


__all__ = ["SYNTAX_SMELLS", "validate_syntax"]
