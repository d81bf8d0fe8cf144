"""Tests for liberator.scoring."""

from __future__ import annotations

import pytest

from liberator.models import Severity
from liberator.scoring import compute_score, grade_for


def _counts(critical: int = 0, major: int = 0, minor: int = 0):
    return {Severity.CRITICAL: critical, Severity.MAJOR: major, Severity.MINOR: minor}


def test_clean_project_scores_full_marks() -> None:
    assert compute_score(_counts()) == 100
    assert grade_for(100) == "A"


def test_score_applies_severity_weights() -> None:
    assert compute_score(_counts(critical=1, major=2, minor=3)) == 100 - 15 - 10 - 3


def test_score_is_clamped_at_zero() -> None:
    assert compute_score(_counts(critical=10)) == 0


def test_score_never_increases_with_more_issues() -> None:
    previous = compute_score(_counts())
    for critical in range(1, 8):
        current = compute_score(_counts(critical=critical, minor=critical))
        assert current <= previous
        previous = current


@pytest.mark.parametrize(
    ("score", "grade"),
    [(90, "A"), (89, "B"), (80, "B"), (79, "C"), (70, "C"), (60, "D"), (59, "F"), (0, "F")],
)
def test_grade_boundaries(score: int, grade: str) -> None:
    assert grade_for(score) == grade
