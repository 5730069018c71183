"""Reference extractor — tables read/written and procedures invoked by a body."""

from __future__ import annotations

import re
from typing import AbstractSet

from sprocforensic.utils.sql_patterns import (
    PROC_CALL_PATTERN,
    SYSTEM_PROC_PATTERN,
    TABLE_REF_PATTERN,
)
from sprocforensic.utils.sql_text import split_object_name

_TABLE_REF_RE = re.compile(TABLE_REF_PATTERN, re.IGNORECASE)
_PROC_CALL_RE = re.compile(PROC_CALL_PATTERN, re.IGNORECASE)
_SYSTEM_PROC_RE = re.compile(SYSTEM_PROC_PATTERN, re.IGNORECASE)

# Words that can follow FROM/JOIN/INTO/EXEC but never name a table or procedure.
# Not exhaustive: unqualified matches are also gated by the known-table set.
SQL_KEYWORDS = frozenset(
    {
        "select",
        "from",
        "where",
        "insert",
        "into",
        "update",
        "delete",
        "merge",
        "using",
        "join",
        "inner",
        "outer",
        "left",
        "right",
        "full",
        "cross",
        "apply",
        "on",
        "and",
        "or",
        "not",
        "in",
        "exists",
        "between",
        "like",
        "is",
        "null",
        "set",
        "values",
        "as",
        "begin",
        "end",
        "if",
        "else",
        "while",
        "return",
        "declare",
        "exec",
        "execute",
        "create",
        "alter",
        "drop",
        "table",
        "procedure",
        "function",
        "view",
        "index",
        "trigger",
        "grant",
        "revoke",
        "commit",
        "rollback",
        "transaction",
        "tran",
        "group",
        "order",
        "by",
        "having",
        "union",
        "all",
        "distinct",
        "top",
        "offset",
        "fetch",
        "next",
        "rows",
        "only",
        "case",
        "when",
        "then",
        "cast",
        "convert",
        "coalesce",
        "with",
        "output",
        "default",
        "openquery",
        "openrowset",
        "statistics",
    }
)


def is_sql_keyword(token: str) -> bool:
    """Check if a token is a SQL keyword rather than an object name."""
    return token.lower() in SQL_KEYWORDS


class ReferenceExtractor:
    """Recover referenced tables and called procedures from a procedure body.

    Schema-qualified table references are always accepted. Unqualified ones
    are accepted only when present in the known-table-name set and not a
    keyword; without a known-table set, unqualified references are dropped.
    """

    def __init__(self, known_tables: AbstractSet[str] | None = None) -> None:
        self._known: dict[str, str] = {}
        for table in known_tables or ():
            self._known.setdefault(table.lower(), table)

    @property
    def has_known_tables(self) -> bool:
        return bool(self._known)

    def extract_tables(self, stripped_body: str) -> list[str]:
        """Extract table names referenced in a comment-stripped body.

        Returns:
            Sorted, deduplicated bare table names.
        """
        tables: set[str] = set()

        for match in _TABLE_REF_RE.finditer(stripped_body):
            parts = split_object_name(match.group("ref"))
            if not parts:
                continue
            table = parts[-1]
            if not table or table.startswith(("#", "@")):
                continue

            if len(parts) > 1:
                tables.add(table)
                continue

            if is_sql_keyword(table):
                continue
            known = self._known.get(table.lower())
            if known is not None:
                tables.add(known)

        return sorted(tables)

    def extract_procedure_calls(self, stripped_body: str, own_name: str = "") -> list[str]:
        """Extract procedures invoked with EXEC/EXECUTE.

        System procedures (``sp_``/``xp_``), ``sp_executesql``, keywords such as
        ``EXECUTE AS`` and calls to ``own_name`` are excluded.

        Returns:
            Sorted, deduplicated bare procedure names.
        """
        own = own_name.lower()
        procs: set[str] = set()

        for match in _PROC_CALL_RE.finditer(stripped_body):
            parts = split_object_name(match.group("ref"))
            if not parts:
                continue
            proc = parts[-1]
            if not proc or is_sql_keyword(proc):
                continue
            if _SYSTEM_PROC_RE.match(proc):
                continue
            if proc.lower() == own:
                continue
            procs.add(proc)

        return sorted(procs)
