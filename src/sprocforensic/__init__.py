"""SprocForensic — stored procedure catalog builder for T-SQL DDL dumps.

Reads a scripted SQL Server database dump, isolates every CREATE PROCEDURE,
parses its signature, flags anti-patterns, extracts table and procedure
references, classifies CRUD intent and complexity, assigns a logical module
and writes a machine-readable catalog.
"""

from __future__ import annotations

__version__ = "1.0.0"

import logging
import os
from typing import TYPE_CHECKING, Iterable

from sprocforensic.builders.catalog_builder import (
    Module,
    ProcedureCatalog,
    resolve_export_date,
)
from sprocforensic.config import AnalysisConfig, ModuleRules, SourceConfig, load_module_rules
from sprocforensic.sources.collaborators import (
    CrossReferenceEntry,
    load_cross_reference,
    load_known_tables,
)

if TYPE_CHECKING:
    from sprocforensic.parsers.block_splitter import RawBlock

logger = logging.getLogger(__name__)


class SprocForensic:
    """Main entry point for the SprocForensic library API.

    Example:
        >>> forensic = SprocForensic(
        ...     input_path="exports/DatabaseObjects_20250114.sql",
        ...     tables_path="generated/tables.json",
        ...     cross_reference_path="generated/sproc-xref.json",
        ... )
        >>> catalog = forensic.analyze()
        >>> print(f"{catalog.total_procedures} procedures in {len(catalog.modules)} modules")
    """

    def __init__(
        self,
        input_path: str = "",
        encoding: str = "utf-16",
        tables_path: str = "",
        cross_reference_path: str = "",
        module_rules: ModuleRules | str | None = None,
        export_date: str = "",
        workers: int = 1,
        preview_lines: int = 20,
        hotspot_limit: int = 10,
    ) -> None:
        self.source_config = SourceConfig(
            input_path=input_path,
            encoding=encoding,
            tables_path=tables_path,
            cross_reference_path=cross_reference_path,
            export_date=export_date,
        )
        self.analysis_config = AnalysisConfig(
            preview_lines=preview_lines,
            workers=workers,
            hotspot_limit=hotspot_limit,
        )
        if isinstance(module_rules, str):
            module_rules = load_module_rules(module_rules)
        self.rules = module_rules or ModuleRules()
        self._known_tables: frozenset[str] | None = None
        self._cross_reference: dict[str, CrossReferenceEntry] | None = None
        self._collaborators_loaded = False

    def _load_collaborators(self) -> None:
        if self._collaborators_loaded:
            return
        self._known_tables = load_known_tables(self.source_config.tables_path)
        self._cross_reference = load_cross_reference(self.source_config.cross_reference_path)
        self._collaborators_loaded = True

    def analyze(self) -> ProcedureCatalog:
        """Stream the dump file through the full pipeline.

        Raises:
            FileNotFoundError: If the input dump does not exist.
            ValueError: If the analysis settings are invalid.
            OSError: If the dump cannot be read.
        """
        from sprocforensic.parsers.block_splitter import BlockSplitter
        from sprocforensic.sources.dump_file import DumpFileSource

        path = self.source_config.input_path
        if not path or not os.path.isfile(path):
            raise FileNotFoundError(f"Input file not found: {path}")

        splitter = BlockSplitter()
        with DumpFileSource(path, encoding=self.source_config.encoding) as source:
            # Only candidate blocks are retained; other batches are dropped while streaming
            blocks = list(splitter.split_lines(source.iter_lines()))

        return self._run(blocks, splitter.batches_seen, os.path.basename(path), path)

    def analyze_text(self, text: str, source: str = "<text>") -> ProcedureCatalog:
        """Run the pipeline over script text already held in memory."""
        from sprocforensic.parsers.block_splitter import BlockSplitter

        splitter = BlockSplitter()
        blocks = splitter.split(text)
        return self._run(blocks, splitter.batches_seen, source, source)

    def _run(
        self,
        blocks: Iterable[RawBlock],
        total_batches: int,
        source_name: str,
        source_path: str,
    ) -> ProcedureCatalog:
        from sprocforensic.analyzers.sp_analyzer import SPAnalyzer
        from sprocforensic.builders.catalog_builder import CatalogBuilder
        from sprocforensic.sources.collaborators import module_hints

        errors = self.analysis_config.validate()
        if errors:
            raise ValueError("; ".join(errors))

        self._load_collaborators()

        analyzer = SPAnalyzer(
            known_tables=self._known_tables,
            rules=self.rules,
            module_hints=module_hints(self._cross_reference),
            config=self.analysis_config,
        )
        result = analyzer.analyze(blocks)

        builder = CatalogBuilder(
            rules=self.rules,
            cross_reference=self._cross_reference,
            hotspot_limit=self.analysis_config.hotspot_limit,
        )
        return builder.build(
            result,
            source=source_name,
            export_date=resolve_export_date(self.source_config.export_date, source_path),
            total_batches=total_batches,
        )

    def export_json(self, output_dir: str, catalog: ProcedureCatalog | None = None) -> list[str]:
        """Write the aggregate catalog and per-module body files.

        Runs a full analysis first unless a catalog is passed in.

        Returns:
            Paths of all files written.
        """
        from sprocforensic.reporters.json_reporter import JSONReporter

        if catalog is None:
            catalog = self.analyze()
        return JSONReporter(catalog).export(output_dir)


__all__ = [
    "SprocForensic",
    "ProcedureCatalog",
    "Module",
    "SourceConfig",
    "AnalysisConfig",
    "ModuleRules",
    "__version__",
]
