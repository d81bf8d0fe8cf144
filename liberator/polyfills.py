"""Local replacement modules that liberated frontends may import."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable, List, Mapping, Optional, Tuple

RESOLUTION_SUFFIXES: Tuple[str, ...] = ("", ".ts", ".tsx", "/index.ts", "/index.tsx")
CODE_SUFFIXES: Tuple[str, ...] = (".ts", ".tsx", ".js", ".jsx")


@dataclass(frozen=True)
class Polyfill:
    """A module the rebuilder can generate when the project uses but lacks it."""

    alias: str
    path: str
    template: str
    usage: re.Pattern[str]

    @property
    def name(self) -> str:
        return self.alias.rsplit("/", 1)[-1]


def _usage(alias: str, *extra: str) -> re.Pattern[str]:
    parts = [rf"\bfrom\s+['\"]{re.escape(alias)}['\"]", rf"\bimport\s*\(\s*['\"]{re.escape(alias)}['\"]"]
    parts.extend(extra)
    return re.compile("|".join(parts))


POLYFILLS: Tuple[Polyfill, ...] = (
    Polyfill("@/lib/supabase", "src/lib/supabase.ts", "polyfills/supabase.ts.j2", _usage("@/lib/supabase")),
    Polyfill("@/types/database", "src/types/database.ts", "polyfills/database.ts.j2", _usage("@/types/database")),
    Polyfill(
        "@/lib/sovereign",
        "src/lib/sovereign.ts",
        "polyfills/sovereign.ts.j2",
        _usage("@/lib/sovereign", r"\bsovereignAIAdapter\.", r"\bSovereignPatterns\."),
    ),
    Polyfill("@/lib/utils", "src/lib/utils.ts", "polyfills/utils.ts.j2", _usage("@/lib/utils")),
    Polyfill(
        "@/hooks/use-mobile",
        "src/hooks/use-mobile.tsx",
        "polyfills/use-mobile.tsx.j2",
        _usage("@/hooks/use-mobile"),
    ),
    Polyfill("@/hooks/use-toast", "src/hooks/use-toast.ts", "polyfills/use-toast.ts.j2", _usage("@/hooks/use-toast")),
)

_BY_ALIAS = {polyfill.alias: polyfill for polyfill in POLYFILLS}


def polyfill_for(alias: str) -> Optional[Polyfill]:
    return _BY_ALIAS.get(alias)


def resolve_path(files: Mapping[str, str], base: str) -> Optional[str]:
    """Return the first existing path for ``base`` under the standard suffixes."""
    for suffix in RESOLUTION_SUFFIXES:
        candidate = f"{base}{suffix}"
        if candidate in files:
            return candidate
    return None


def _strip_suffix(path: str) -> str:
    for suffix in (".tsx", ".ts"):
        if path.endswith(suffix):
            return path[: -len(suffix)]
    return path


def is_present(files: Mapping[str, str], polyfill: Polyfill) -> bool:
    return resolve_path(files, _strip_suffix(polyfill.path)) is not None


def _code_files(files: Mapping[str, str]) -> Iterable[Tuple[str, str]]:
    for path, content in files.items():
        if path.endswith(CODE_SUFFIXES) and not path.endswith(".d.ts"):
            yield path, content


def needed_polyfills(files: Mapping[str, str]) -> List[Polyfill]:
    """Polyfills referenced by at least one code file, in table order."""
    needed: List[Polyfill] = []
    for polyfill in POLYFILLS:
        for path, content in _code_files(files):
            if path == polyfill.path:
                continue
            if polyfill.usage.search(content):
                needed.append(polyfill)
                break
    return needed


def missing_polyfills(files: Mapping[str, str]) -> List[Polyfill]:
    """Polyfills the code relies on that are not part of ``files``."""
    return [polyfill for polyfill in needed_polyfills(files) if not is_present(files, polyfill)]


__all__ = [
    "CODE_SUFFIXES",
    "POLYFILLS",
    "Polyfill",
    "RESOLUTION_SUFFIXES",
    "is_present",
    "missing_polyfills",
    "needed_polyfills",
    "polyfill_for",
    "resolve_path",
]
