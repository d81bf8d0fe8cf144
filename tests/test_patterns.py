"""Tests for liberator.patterns."""

from __future__ import annotations

import re

import pytest

from liberator.models import Category, Severity
from liberator.patterns import (
    PatternCatalog,
    default_cleaning_catalog,
    default_refactor_catalog,
    is_proprietary_file,
    is_suspicious_package,
    locate,
    redact,
    rule,
)


def _rule(rule_id: str = "custom", pattern: str = r"\bfoo\b", rewrite=None):
    return rule(rule_id, pattern, Severity.MINOR, Category.PATTERN, "Custom", "Remove foo", rewrite=rewrite)


def test_add_pattern_rejects_duplicate_id() -> None:
    catalog = PatternCatalog("test", [_rule()])
    with pytest.raises(ValueError):
        catalog.add_pattern(_rule())


def test_remove_pattern_reports_whether_anything_was_removed() -> None:
    catalog = PatternCatalog("test", [_rule()])
    assert catalog.remove_pattern("custom") is True
    assert catalog.remove_pattern("custom") is False
    assert len(catalog) == 0


def test_catalog_mutation_does_not_leak_between_instances() -> None:
    first = default_cleaning_catalog()
    second = default_cleaning_catalog()
    first.remove_pattern("secret-openai")
    first.add_pattern(_rule())

    assert "secret-openai" not in first
    assert "secret-openai" in second
    assert "custom" not in second


def test_rewrite_rules_exclude_detection_only_entries() -> None:
    catalog = PatternCatalog("test", [_rule("detect"), _rule("rewrite", rewrite="bar")])
    assert [item.id for item in catalog.rewrite_rules()] == ["rewrite"]
    assert len(catalog.get_patterns()) == 2


def test_matcher_returns_fresh_iterators() -> None:
    item = _rule()
    text = "foo and foo"
    assert len(list(item.matcher(text))) == 2
    assert len(list(item.matcher(text))) == 2


def test_callable_rewrite_receives_groups() -> None:
    item = _rule("upper", r"\b(foo)\b", rewrite=lambda _match, groups: groups[0].upper())
    assert item.apply("a foo b") == "a FOO b"


def test_every_default_rule_id_is_unique() -> None:
    for catalog in (default_cleaning_catalog(), default_refactor_catalog()):
        ids = [item.id for item in catalog]
        assert len(ids) == len(set(ids))


def test_refactor_catalog_only_holds_rewrite_rules() -> None:
    catalog = default_refactor_catalog()
    assert len(catalog.rewrite_rules()) == len(catalog)


def test_locate_is_one_based() -> None:
    content = "first\nsecond line\n"
    assert locate(content, 0) == (1, 1)
    assert locate(content, content.index("line")) == (2, 8)


def test_redact_keeps_prefix_only() -> None:
    assert redact("sk-AAAAAAAA") == "sk-A*******"
    assert redact("abc") == "***"


@pytest.mark.parametrize(
    ("name", "expected"),
    [
        ("lovable-tagger", True),
        ("@lovable/core", True),
        ("@proprietary/anything", True),
        ("lovable-taggers", False),
        ("react", False),
    ],
)
def test_is_suspicious_package(name: str, expected: bool) -> None:
    assert is_suspicious_package(name) is expected


@pytest.mark.parametrize(
    ("path", "expected"),
    [
        (".lovable/config.json", True),
        ("lovable.config.ts", True),
        ("replit.nix", True),
        ("nested/.gptengineer/state.json", True),
        ("src/lovable-helpers.ts", False),
        ("src/App.tsx", False),
    ],
)
def test_is_proprietary_file(path: str, expected: bool) -> None:
    assert is_proprietary_file(path) is expected


def test_secret_rules_are_sensitive() -> None:
    catalog = default_cleaning_catalog()
    secrets = [item for item in catalog if item.category == Category.SECRET]
    assert secrets
    assert all(item.sensitive for item in secrets)
    assert all(isinstance(item.detector, re.Pattern) for item in secrets)
