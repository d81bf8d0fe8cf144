"""Import resolution against the in-memory file set."""

from __future__ import annotations

import posixpath
import re
from typing import List, Mapping, Optional, Sequence, Tuple

from ..polyfills import polyfill_for, resolve_path
from .base import WARNING, UnresolvedImport, ValidationIssue

EXTERNAL_PACKAGES: Tuple[str, ...] = (
    "react",
    "react-dom",
    "react-router-dom",
    "@supabase/supabase-js",
    "sonner",
    "lucide-react",
    "framer-motion",
    "date-fns",
    "zod",
    "clsx",
    "tailwind-merge",
    "@radix-ui/",
    "@tanstack/",
    "class-variance-authority",
    "recharts",
    "jszip",
    "react-dropzone",
    "react-hook-form",
    "@hookform/resolvers",
    "next-themes",
    "cmdk",
    "embla-carousel-react",
    "vaul",
    "input-otp",
    "react-day-picker",
    "qrcode.react",
    "react-resizable-panels",
    "react-hot-toast",
    "i18next",
    "react-i18next",
)

_IMPORT_FROM = re.compile(r"\bimport\s+(?:type\s+)?[^'\";]*?\bfrom\s*['\"]([^'\"\n]+)['\"]")


def _is_external(specifier: str, external_packages: Sequence[str]) -> bool:
    for package in external_packages:
        if package.endswith("/"):
            if specifier.startswith(package):
                return True
        elif specifier == package or specifier.startswith(f"{package}/"):
            return True
    return False


def resolve_import(specifier: str, importer: str, files: Mapping[str, str]) -> Optional[str]:
    """Return the file a local specifier resolves to, or None."""
    if specifier.startswith("@/"):
        polyfill = polyfill_for(specifier)
        if polyfill is not None and polyfill.path in files:
            return polyfill.path
        return resolve_path(files, "src/" + specifier[2:])
    directory = posixpath.dirname(importer)
    target = posixpath.normpath(posixpath.join(directory, specifier))
    if target.startswith("../"):
        return None
    if target == ".":
        target = ""
    return resolve_path(files, target)


def find_imports(content: str) -> List[Tuple[str, int]]:
    """Return ``(specifier, line)`` pairs for every ``import ... from`` statement."""
    found: List[Tuple[str, int]] = []
    for match in _IMPORT_FROM.finditer(content):
        line = content.count("\n", 0, match.start(1)) + 1
        found.append((match.group(1), line))
    return found


def validate_imports(
    content: str,
    path: str,
    files: Mapping[str, str],
    external_packages: Optional[Sequence[str]] = None,
) -> Tuple[List[ValidationIssue], List[UnresolvedImport]]:
    """Warn about local imports that resolve to no file in ``files``."""
    externals = tuple(external_packages) if external_packages is not None else EXTERNAL_PACKAGES
    issues: List[ValidationIssue] = []
    unresolved: List[UnresolvedImport] = []
    for specifier, line in find_imports(content):
        if _is_external(specifier, externals):
            continue
        if not specifier.startswith((".", "@/")):
            continue
        if resolve_import(specifier, path, files) is not None:
            continue
        unresolved.append(UnresolvedImport(file=path, import_path=specifier))
        issues.append(
            ValidationIssue(path, line, 1, f"Cannot resolve import '{specifier}'", WARNING, "UNRESOLVED_IMPORT")
        )
    return issues, unresolved


__all__ = [
    "EXTERNAL_PACKAGES",
    "find_imports",
    "resolve_import",
    "validate_imports",
]
