"""JSON catalog exporter."""

from __future__ import annotations

import json
import logging
import os
from typing import TYPE_CHECKING, Any

from sprocforensic.utils.formatting import module_slug

if TYPE_CHECKING:
    from sprocforensic.analyzers.sp_analyzer import ClassifiedProcedure
    from sprocforensic.builders.catalog_builder import Module, ProcedureCatalog

logger = logging.getLogger(__name__)

CATALOG_FILENAME = "stored-procedures-full.json"
BODIES_DIRNAME = "sp-bodies"


def procedure_summary(proc: ClassifiedProcedure) -> dict[str, Any]:
    """Serialize one procedure for the aggregate catalog (body preview only)."""
    return {
        "name": proc.name,
        "schema": proc.schema,
        "parameters": [
            {
                "name": p.name,
                "dataType": p.data_type,
                "direction": p.direction,
                "defaultValue": p.default_value,
            }
            for p in proc.parameters
        ],
        "lineCount": proc.line_count,
        "bodyPreview": proc.body_preview,
        "tablesReferenced": proc.tables_referenced,
        "sprocsCalledFromBody": proc.sprocs_called,
        "calledBySprocs": proc.called_by_sprocs,
        "crudType": proc.crud_type,
        "antiPatterns": proc.anti_patterns.to_dict(),
        "calledFromCode": proc.called_from_code,
        "complexity": proc.complexity,
        "moduleStrategy": proc.module_strategy,
    }


def procedure_body(proc: ClassifiedProcedure) -> dict[str, Any]:
    """Serialize one procedure for its module's body file (full body)."""
    return {
        "name": proc.name,
        "schema": proc.schema,
        "lineCount": proc.line_count,
        "crudType": proc.crud_type,
        "complexity": proc.complexity,
        "tablesReferenced": proc.tables_referenced,
        "sprocsCalledFromBody": proc.sprocs_called,
        "body": proc.body,
    }


class JSONReporter:
    """Export the procedure catalog as machine-readable JSON.

    Writes two kinds of document into the output directory:

    - ``stored-procedures-full.json``: every procedure with metadata and a
      body preview, grouped by module, plus aggregate stats
    - ``sp-bodies/<module>.json``: full bodies, one file per module
    """

    def __init__(self, catalog: ProcedureCatalog) -> None:
        self.catalog = catalog

    def to_dict(self) -> dict[str, Any]:
        """Build the aggregate catalog document."""
        catalog = self.catalog
        return {
            "exportDate": catalog.export_date,
            "source": catalog.source,
            "totalProcedures": catalog.total_procedures,
            "totalBlocks": catalog.candidate_blocks,
            "parseFailures": catalog.parse_failures,
            "stats": catalog.stats,
            "callGraph": catalog.call_graph,
            "modules": [
                {
                    "prefix": module.prefix,
                    "displayName": module.display_name,
                    "procedureCount": module.procedure_count,
                    "procedures": [procedure_summary(p) for p in module.procedures],
                }
                for module in catalog.modules
            ],
        }

    @staticmethod
    def module_bodies(module: Module) -> dict[str, Any]:
        """Build the body document for one module."""
        return {
            "module": module.prefix,
            "displayName": module.display_name,
            "procedureCount": module.procedure_count,
            "procedures": [procedure_body(p) for p in module.procedures],
        }

    def export(self, output_dir: str) -> list[str]:
        """Write the catalog and body files.

        Args:
            output_dir: Directory to write into; created if missing.

        Returns:
            Paths of all files written, catalog first.
        """
        bodies_dir = os.path.join(output_dir, BODIES_DIRNAME)
        os.makedirs(bodies_dir, exist_ok=True)

        catalog_path = os.path.join(output_dir, CATALOG_FILENAME)
        _write_json(catalog_path, self.to_dict())
        written = [catalog_path]

        for module in self.catalog.modules:
            path = os.path.join(bodies_dir, f"{module_slug(module.prefix)}.json")
            _write_json(path, self.module_bodies(module))
            written.append(path)

        logger.info("Wrote %d JSON files to %s", len(written), output_dir)
        return written


def _write_json(path: str, data: dict[str, Any]) -> None:
    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2, ensure_ascii=False)
