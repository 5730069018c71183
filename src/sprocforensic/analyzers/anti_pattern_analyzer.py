"""Anti-pattern detector — nine independent structural risk indicators."""

from __future__ import annotations

import re
from dataclasses import dataclass

from sprocforensic.utils.sql_patterns import (
    CURSOR_PATTERN,
    DYNAMIC_SQL_PATTERN,
    NOLOCK_PATTERN,
    SELECT_STAR_PATTERN,
    SET_NOCOUNT_ON_PATTERN,
    TABLE_VARIABLE_PATTERN,
    TEMP_TABLE_PATTERN,
    TRY_BLOCK_PATTERN,
    WHILE_PATTERN,
)

_CURSOR_RE = re.compile(CURSOR_PATTERN, re.IGNORECASE)
_SELECT_STAR_RE = re.compile(SELECT_STAR_PATTERN, re.IGNORECASE)
_DYNAMIC_SQL_RE = re.compile(DYNAMIC_SQL_PATTERN, re.IGNORECASE)
_NOLOCK_RE = re.compile(NOLOCK_PATTERN, re.IGNORECASE)
_NOCOUNT_RE = re.compile(SET_NOCOUNT_ON_PATTERN, re.IGNORECASE)
_TABLE_VARIABLE_RE = re.compile(TABLE_VARIABLE_PATTERN, re.IGNORECASE)
_TEMP_TABLE_RE = re.compile(TEMP_TABLE_PATTERN, re.IGNORECASE)
_WHILE_RE = re.compile(WHILE_PATTERN, re.IGNORECASE)
_TRY_RE = re.compile(TRY_BLOCK_PATTERN, re.IGNORECASE)


@dataclass
class AntiPatternProfile:
    """Anti-pattern flags for one procedure body.

    Every field is derived independently from the same comment-stripped
    body; none excludes another.
    """

    has_cursor: bool = False
    has_select_star: bool = False
    has_dynamic_sql: bool = False
    has_nolock: bool = False
    nolock_count: int = 0
    missing_set_nocount_on: bool = False
    has_table_variable: bool = False
    has_temp_table: bool = False
    has_while_loop: bool = False
    has_no_try_catch: bool = False

    # Flags that count toward the complexity severity signal
    SEVERITY_FLAGS = (
        "has_cursor",
        "has_select_star",
        "has_dynamic_sql",
        "has_nolock",
        "has_temp_table",
        "has_while_loop",
    )

    @property
    def severity_count(self) -> int:
        """Number of severity-subset anti-patterns present."""
        return sum(1 for flag in self.SEVERITY_FLAGS if getattr(self, flag))

    def to_dict(self) -> dict[str, bool | int]:
        """Return the profile keyed by the output field names."""
        return {
            "hasCursor": self.has_cursor,
            "hasSelectStar": self.has_select_star,
            "hasDynamicSql": self.has_dynamic_sql,
            "hasNolock": self.has_nolock,
            "nolockCount": self.nolock_count,
            "missingSetNocountOn": self.missing_set_nocount_on,
            "hasTableVariable": self.has_table_variable,
            "hasTempTable": self.has_temp_table,
            "hasWhileLoop": self.has_while_loop,
            "hasNoTryCatch": self.has_no_try_catch,
        }


class AntiPatternDetector:
    """Scan a comment-stripped procedure body for structural risk patterns.

    Detected patterns:
    - Cursor declarations and ``FETCH NEXT``
    - ``SELECT *``
    - Dynamic SQL (``EXEC(...)``, ``sp_executesql``)
    - ``WITH (NOLOCK)`` hints (counted)
    - Missing ``SET NOCOUNT ON``
    - Table variables and ``#temp`` tables
    - ``WHILE`` loops
    - Missing ``BEGIN TRY`` error handling
    """

    def detect(self, stripped_body: str) -> AntiPatternProfile:
        """Evaluate all detectors against an already comment-stripped body."""
        nolock_count = len(_NOLOCK_RE.findall(stripped_body))
        return AntiPatternProfile(
            has_cursor=bool(_CURSOR_RE.search(stripped_body)),
            has_select_star=bool(_SELECT_STAR_RE.search(stripped_body)),
            has_dynamic_sql=bool(_DYNAMIC_SQL_RE.search(stripped_body)),
            has_nolock=nolock_count > 0,
            nolock_count=nolock_count,
            missing_set_nocount_on=not _NOCOUNT_RE.search(stripped_body),
            has_table_variable=bool(_TABLE_VARIABLE_RE.search(stripped_body)),
            has_temp_table=bool(_TEMP_TABLE_RE.search(stripped_body)),
            has_while_loop=bool(_WHILE_RE.search(stripped_body)),
            has_no_try_catch=not _TRY_RE.search(stripped_body),
        )
