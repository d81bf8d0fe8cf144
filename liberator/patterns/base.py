"""Pattern catalog container and matching helpers."""

from __future__ import annotations

import re
from typing import Iterable, Iterator, List, Optional, Tuple

from ..models import Category, PatternRule, Severity


class PatternCatalog:
    """Ordered, per-instance collection of rules forming one rewrite or detection pass.

    Default catalogs are module-level tuples; a catalog always copies them so that
    ``add_pattern``/``remove_pattern`` on one instance never leak into another.
    """

    def __init__(self, name: str, rules: Iterable[PatternRule] = ()) -> None:
        self.name = name
        self._rules: List[PatternRule] = []
        for rule in rules:
            self.add_pattern(rule)

    def __iter__(self) -> Iterator[PatternRule]:
        return iter(list(self._rules))

    def __len__(self) -> int:
        return len(self._rules)

    def __contains__(self, rule_id: object) -> bool:
        return any(rule.id == rule_id for rule in self._rules)

    def get(self, rule_id: str) -> Optional[PatternRule]:
        for rule in self._rules:
            if rule.id == rule_id:
                return rule
        return None

    def add_pattern(self, rule: PatternRule) -> None:
        if rule.id in self:
            raise ValueError(f"Pattern '{rule.id}' already registered in catalog '{self.name}'")
        self._rules.append(rule)

    def remove_pattern(self, rule_id: str) -> bool:
        before = len(self._rules)
        self._rules = [rule for rule in self._rules if rule.id != rule_id]
        return len(self._rules) != before

    def get_patterns(self) -> List[PatternRule]:
        return list(self._rules)

    def copy(self, name: str | None = None) -> "PatternCatalog":
        return PatternCatalog(name or self.name, self._rules)

    def rewrite_rules(self) -> List[PatternRule]:
        return [rule for rule in self._rules if not rule.detection_only]


def rule(
    rule_id: str,
    pattern: str,
    severity: Severity,
    category: Category,
    message: str,
    suggestion: str,
    *,
    auto_fixable: bool = True,
    rewrite=None,
    sensitive: bool = False,
    flags: int = 0,
) -> PatternRule:
    """Compile ``pattern`` and build a :class:`PatternRule`."""
    return PatternRule(
        id=rule_id,
        detector=re.compile(pattern, flags),
        severity=severity,
        category=category,
        message=message,
        suggestion=suggestion,
        auto_fixable=auto_fixable,
        rewrite=rewrite,
        sensitive=sensitive,
    )


def locate(content: str, offset: int) -> Tuple[int, int]:
    """Return the 1-based (line, column) of ``offset`` within ``content``."""
    line = content.count("\n", 0, offset) + 1
    last_newline = content.rfind("\n", 0, offset)
    column = offset - last_newline
    return line, column


def redact(text: str, keep: int = 4) -> str:
    """Mask a sensitive match so that it can be reported without leaking it."""
    if len(text) <= keep:
        return "*" * len(text)
    return text[:keep] + "*" * (len(text) - keep)


__all__ = ["PatternCatalog", "locate", "redact", "rule"]
