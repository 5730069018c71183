"""Catalog builder — merges callers, groups procedures into modules and computes stats."""

from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass, field
from datetime import date
from typing import Any

from sprocforensic.analyzers.call_graph_analyzer import CallGraphAnalyzer
from sprocforensic.analyzers.sp_analyzer import AnalysisResult, ClassifiedProcedure
from sprocforensic.classifiers.complexity import COMPLEXITY_TIERS
from sprocforensic.classifiers.crud_classifier import CRUD_TYPES
from sprocforensic.config import ModuleRules
from sprocforensic.sources.collaborators import CrossReferenceEntry
from sprocforensic.utils.sql_patterns import FILE_DATE_PATTERN

logger = logging.getLogger(__name__)

_FILE_DATE_RE = re.compile(FILE_DATE_PATTERN)


@dataclass
class Module:
    """A logical module and the procedures assigned to it."""

    prefix: str
    display_name: str
    procedures: list[ClassifiedProcedure] = field(default_factory=list)

    @property
    def procedure_count(self) -> int:
        return len(self.procedures)


@dataclass
class ProcedureCatalog:
    """Everything the output documents are rendered from."""

    source: str = ""
    export_date: str = ""
    total_batches: int = 0
    candidate_blocks: int = 0
    parse_failures: int = 0
    modules: list[Module] = field(default_factory=list)
    stats: dict[str, Any] = field(default_factory=dict)
    call_graph: dict[str, Any] = field(default_factory=dict)

    @property
    def procedures(self) -> list[ClassifiedProcedure]:
        return [proc for module in self.modules for proc in module.procedures]

    @property
    def total_procedures(self) -> int:
        return sum(module.procedure_count for module in self.modules)

    def find(self, name: str) -> list[ClassifiedProcedure]:
        """Look up procedures by bare or schema-qualified name, case-insensitively."""
        wanted = name.strip().lower()
        return [
            proc
            for proc in self.procedures
            if proc.name.lower() == wanted or proc.full_name.lower() == wanted
        ]

    def module(self, prefix: str) -> Module | None:
        for module in self.modules:
            if module.prefix.lower() == prefix.lower():
                return module
        return None


def resolve_export_date(explicit: str = "", source_path: str = "", today: date | None = None) -> str:
    """Pick the export date: explicit value, a YYYYMMDD stamp in the file name, or today.

    Returns:
        ISO date string (``YYYY-MM-DD``).
    """
    if explicit:
        return explicit
    match = _FILE_DATE_RE.search(os.path.basename(source_path or ""))
    if match:
        year, month, day = (int(g) for g in match.groups())
        try:
            return date(year, month, day).isoformat()
        except ValueError:
            logger.debug("Ignoring invalid date stamp in file name: %s", match.group(0))
    return (today or date.today()).isoformat()


class CatalogBuilder:
    """Reduce analyzed procedures into the module-grouped catalog.

    Building is a pure function of its inputs: running it twice over the
    same analysis result produces the same catalog.
    """

    def __init__(
        self,
        rules: ModuleRules | None = None,
        cross_reference: dict[str, CrossReferenceEntry] | None = None,
        hotspot_limit: int = 10,
    ) -> None:
        self.rules = rules or ModuleRules()
        self.cross_reference = cross_reference or {}
        self.hotspot_limit = hotspot_limit

    def build(
        self,
        result: AnalysisResult,
        source: str = "",
        export_date: str = "",
        total_batches: int = 0,
    ) -> ProcedureCatalog:
        procedures = result.procedures
        logger.info("Building catalog for %d procedures", len(procedures))

        for proc in procedures:
            proc.called_from_code = self._callers_of(proc)

        call_graph = CallGraphAnalyzer(procedures, hotspot_limit=self.hotspot_limit).analyze()

        catalog = ProcedureCatalog(
            source=source,
            export_date=export_date,
            total_batches=total_batches,
            candidate_blocks=result.blocks,
            parse_failures=result.parse_failures,
            modules=self._group(procedures),
            stats=compute_stats(procedures),
            call_graph=call_graph,
        )

        logger.info(
            "Catalog complete: %d procedures in %d modules, %d parse failures",
            catalog.total_procedures,
            len(catalog.modules),
            catalog.parse_failures,
        )
        return catalog

    def _callers_of(self, proc: ClassifiedProcedure) -> list[str]:
        entry = self.cross_reference.get(proc.name.lower())
        if entry is None:
            return []
        return sorted({caller.label() for caller in entry.callers})

    def _group(self, procedures: list[ClassifiedProcedure]) -> list[Module]:
        buckets: dict[str, list[ClassifiedProcedure]] = {}
        for proc in procedures:
            buckets.setdefault(proc.module, []).append(proc)

        return [
            Module(
                prefix=prefix,
                display_name=self.rules.display_name(prefix),
                procedures=sorted(buckets[prefix], key=lambda p: p.sort_key),
            )
            for prefix in sorted(buckets)
        ]


# Output key -> profile attribute for the per-flag procedure counts
_FLAG_KEYS = {
    "hasCursor": "has_cursor",
    "hasSelectStar": "has_select_star",
    "hasDynamicSql": "has_dynamic_sql",
    "hasNolock": "has_nolock",
    "missingSetNocountOn": "missing_set_nocount_on",
    "hasTableVariable": "has_table_variable",
    "hasTempTable": "has_temp_table",
    "hasWhileLoop": "has_while_loop",
    "hasNoTryCatch": "has_no_try_catch",
}


def compute_stats(procedures: list[ClassifiedProcedure]) -> dict[str, Any]:
    """Aggregate counts by schema, CRUD type, complexity tier and anti-pattern.

    CRUD and complexity categories are always present, zero-filled.
    """
    by_schema: dict[str, int] = {}
    by_crud = dict.fromkeys(CRUD_TYPES, 0)
    by_complexity = dict.fromkeys(COMPLEXITY_TIERS, 0)
    anti_patterns = dict.fromkeys(_FLAG_KEYS, 0)
    nolock_occurrences = 0

    for proc in procedures:
        by_schema[proc.schema] = by_schema.get(proc.schema, 0) + 1
        by_crud[proc.crud_type] = by_crud.get(proc.crud_type, 0) + 1
        by_complexity[proc.complexity] = by_complexity.get(proc.complexity, 0) + 1
        for key, attr in _FLAG_KEYS.items():
            if getattr(proc.anti_patterns, attr):
                anti_patterns[key] += 1
        nolock_occurrences += proc.anti_patterns.nolock_count

    anti_patterns["nolockOccurrences"] = nolock_occurrences
    return {
        "bySchema": dict(sorted(by_schema.items())),
        "byCrudType": by_crud,
        "byComplexity": by_complexity,
        "antiPatternCounts": anti_patterns,
    }
