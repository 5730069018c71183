"""Complexity tier classification from size, table fan-out and anti-pattern severity."""

from __future__ import annotations

from sprocforensic.analyzers.anti_pattern_analyzer import AntiPatternProfile

COMPLEXITY_TIERS = ("trivial", "simple", "moderate", "complex", "very-complex")


def classify_complexity(line_count: int, table_count: int, profile: AntiPatternProfile) -> str:
    """Return the complexity tier; thresholds are checked from the top down.

    Args:
        line_count: Number of body lines.
        table_count: Number of distinct referenced tables.
        profile: Anti-pattern profile of the same body.
    """
    if line_count >= 500 or (table_count >= 8 and profile.severity_count >= 2):
        return "very-complex"
    if line_count >= 150 or table_count >= 5 or profile.has_cursor or profile.has_dynamic_sql:
        return "complex"
    if line_count >= 50 or table_count >= 3:
        return "moderate"
    if line_count >= 20 or table_count >= 2:
        return "simple"
    return "trivial"
