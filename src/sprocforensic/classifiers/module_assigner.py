"""Module assignment — prefix detection, cross-reference hint, table majority vote."""

from __future__ import annotations

from typing import Mapping, NamedTuple

from sprocforensic.config import UNCATEGORIZED, ModuleRules


class Assignment(NamedTuple):
    """Chosen module and the strategy that chose it."""

    module: str
    strategy: str


def detect_prefix(name: str, schema: str = "", rules: ModuleRules | None = None) -> str | None:
    """Detect the module code encoded in an object name.

    Soft-deleted names and mapped schemas are checked first, then known
    prefixes longest-first (a prefix only counts when followed by ``_``).

    Returns:
        Canonical module code, or None if nothing matched.
    """
    rules = rules or ModuleRules()
    if rules.deleted_marker and name.startswith(rules.deleted_marker):
        return rules.deleted_marker
    if schema in rules.schema_modules:
        return rules.schema_modules[schema]

    for prefix in rules.ordered_prefixes:
        if name.startswith(prefix + "_"):
            return rules.canonical(prefix)
    return None


class ModuleAssigner:
    """Choose the logical module of a procedure; the first successful strategy wins.

    Strategies, in order:
    1. ``prefix`` — prefix detection on the procedure name
    2. ``cross-reference`` — module hint from the code cross-reference
    3. ``table-majority`` — most common prefix among referenced tables
    4. ``uncategorized`` — sentinel module
    """

    def __init__(
        self,
        rules: ModuleRules | None = None,
        hints: Mapping[str, str] | None = None,
    ) -> None:
        self.rules = rules or ModuleRules()
        # Keys are lowercased procedure names
        self.hints = {k.lower(): v for k, v in (hints or {}).items()}

    def assign(self, name: str, schema: str, tables_referenced: list[str]) -> Assignment:
        module = detect_prefix(name, schema, self.rules)
        if module is not None:
            return Assignment(module, "prefix")

        module = self._from_hint(name)
        if module is not None:
            return Assignment(module, "cross-reference")

        module = self._from_tables(tables_referenced)
        if module is not None:
            return Assignment(module, "table-majority")

        return Assignment(UNCATEGORIZED, "uncategorized")

    def _from_hint(self, name: str) -> str | None:
        hint = self.hints.get(name.lower())
        if not hint or hint == UNCATEGORIZED:
            return None
        return self.rules.canonical(hint)

    def _from_tables(self, tables: list[str]) -> str | None:
        """Majority vote over table prefixes.

        Ties go to the module seen first while walking ``tables`` in order
        (callers pass the sorted reference list, so this is deterministic).
        """
        counts: dict[str, int] = {}
        for table in tables:
            module = detect_prefix(table, "", self.rules)
            if module is not None:
                counts[module] = counts.get(module, 0) + 1
        if not counts:
            return None

        best = max(counts.values())
        # dicts keep insertion order: first-encountered module among the tied ones
        return next(module for module, count in counts.items() if count == best)
