"""Output formatting helpers for SprocForensic."""

from __future__ import annotations

import re

_SLUG_RE = re.compile(r"[^A-Za-z0-9_-]+")


def format_count(count: int | None) -> str:
    """Format a count with human-readable suffixes.

    Args:
        count: Number to format, or None.

    Returns:
        Formatted string like '2.4M', '150.0K', or '1,234'.
    """
    if count is None:
        return "N/A"
    if count >= 1_000_000:
        return f"{count / 1_000_000:.1f}M"
    if count >= 10_000:
        return f"{count / 1_000:.1f}K"
    return f"{count:,}"


def complexity_color(tier: str) -> str:
    """Return Rich color name for a complexity tier."""
    colors = {
        "very-complex": "bold red",
        "complex": "red",
        "moderate": "yellow",
        "simple": "cyan",
        "trivial": "dim",
    }
    return colors.get(tier, "white")


def crud_color(crud_type: str) -> str:
    """Return Rich color name for a CRUD type."""
    colors = {
        "get": "green",
        "insert": "blue",
        "update": "yellow",
        "delete": "red",
        "report": "magenta",
        "mixed": "white",
    }
    return colors.get(crud_type, "white")


def module_slug(prefix: str) -> str:
    """File-system safe name for a module prefix.

    >>> module_slug("(uncategorized)")
    'uncategorized'
    """
    return _SLUG_RE.sub("_", prefix).strip("_") or "uncategorized"


def truncate(text: str, max_length: int = 80) -> str:
    """Truncate text with ellipsis if longer than max_length."""
    if len(text) <= max_length:
        return text
    return text[: max_length - 3] + "..."


def flag_list(flags: dict[str, bool | int]) -> str:
    """Comma-separated names of the anti-pattern flags that are set.

    Counts (``nolockCount``) are skipped; only boolean flags are listed.
    """
    return ", ".join(name for name, value in flags.items() if value is True)
