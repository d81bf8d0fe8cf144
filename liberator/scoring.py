"""Sovereignty score and letter grade shared by every report."""

from __future__ import annotations

from typing import Dict, Iterable, Mapping, Tuple

from .models import Issue, Severity

SEVERITY_WEIGHTS: Dict[Severity, int] = {
    Severity.CRITICAL: 15,
    Severity.MAJOR: 5,
    Severity.MINOR: 1,
}

GRADE_THRESHOLDS: Tuple[Tuple[int, str], ...] = (
    (90, "A"),
    (80, "B"),
    (70, "C"),
    (60, "D"),
)


def clamp(value: int, low: int = 0, high: int = 100) -> int:
    return max(low, min(high, value))


def count_by_severity(issues: Iterable[Issue]) -> Dict[Severity, int]:
    counts = {severity: 0 for severity in Severity}
    for issue in issues:
        counts[issue.severity] += 1
    return counts


def compute_score(severity_counts: Mapping[Severity, int]) -> int:
    """Return ``100`` minus the weighted issue counts, clamped to ``[0, 100]``."""
    penalty = sum(SEVERITY_WEIGHTS[severity] * severity_counts.get(severity, 0) for severity in Severity)
    return clamp(100 - penalty)


def grade_for(score: int) -> str:
    for threshold, grade in GRADE_THRESHOLDS:
        if score >= threshold:
            return grade
    return "F"


__all__ = ["GRADE_THRESHOLDS", "SEVERITY_WEIGHTS", "clamp", "compute_score", "count_by_severity", "grade_for"]
