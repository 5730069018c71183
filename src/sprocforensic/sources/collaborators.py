"""Loaders for the external collaborator files.

- Known-table-name set, produced by the table-schema extractor.
- Caller cross-reference, produced by the application code scanner.

Both are optional: a missing or malformed file logs a warning and the
pipeline continues in degraded mode.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field
from typing import Any

from sprocforensic.config import UNCATEGORIZED

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CallerReference:
    """One application code location that invokes a procedure."""

    file_path: str
    method: str = ""

    def label(self) -> str:
        """Render as ``file::method`` for the calledFromCode list."""
        return f"{self.file_path}::{self.method}" if self.method else self.file_path


@dataclass
class CrossReferenceEntry:
    """Callers and optional module hint for one procedure name."""

    procedure: str
    callers: list[CallerReference] = field(default_factory=list)
    module_hint: str | None = None


def _read_json(path: str, what: str) -> Any | None:
    if not path:
        return None
    if not os.path.isfile(path):
        logger.warning("%s file not found: %s", what, path)
        return None
    try:
        with open(path, encoding="utf-8") as f:
            return json.load(f)
    except (OSError, ValueError):
        logger.warning("Could not read %s file %s", what, path, exc_info=True)
        return None


def load_known_tables(path: str) -> frozenset[str]:
    """Load bare table names from the schema extractor's output.

    Accepted shapes:
    - ``{"modules": [{"tables": [{"name": ...}, ...]}, ...]}``
    - ``{"tables": [...]}``
    - ``[...]`` of names or ``{"name": ...}`` objects

    Returns:
        Set of table names; empty when the file is missing or unusable.
    """
    data = _read_json(path, "Known-tables")
    if data is None:
        if path:
            logger.warning("Table validation disabled: unqualified table references will be ignored")
        return frozenset()

    entries: list[Any] = []
    if isinstance(data, dict):
        for module in data.get("modules", []) or []:
            if isinstance(module, dict):
                entries.extend(module.get("tables", []) or [])
        entries.extend(data.get("tables", []) or [])
    elif isinstance(data, list):
        entries = data

    names: set[str] = set()
    for entry in entries:
        if isinstance(entry, str):
            name = entry
        elif isinstance(entry, dict):
            name = entry.get("name") or entry.get("TABLE_NAME") or ""
        else:
            continue
        # Accept "schema.table" too; only the bare name is used for matching
        name = name.rsplit(".", 1)[-1].strip("[]")
        if name:
            names.add(name)

    logger.info("Loaded %d known table names from %s", len(names), path)
    return frozenset(names)


def _parse_callers(entry: dict[str, Any]) -> list[CallerReference]:
    callers: list[CallerReference] = []
    for raw in entry.get("callers") or entry.get("calledBy") or []:
        if not isinstance(raw, dict):
            continue
        file_path = raw.get("filePath") or raw.get("file") or ""
        if not file_path:
            continue
        callers.append(
            CallerReference(
                file_path=file_path,
                method=raw.get("methodName") or raw.get("method") or "",
            )
        )
    if not callers:
        for file_path in entry.get("calledFromFiles") or []:
            if isinstance(file_path, str) and file_path:
                callers.append(CallerReference(file_path=file_path))
    return callers


def load_cross_reference(path: str) -> dict[str, CrossReferenceEntry] | None:
    """Load the caller cross-reference.

    Expected shape::

        {"crossReference": [
            {"sprocName": "...", "module": "SEC",
             "callers": [{"filePath": "...", "methodName": "..."}]}
        ]}

    ``calledBy`` (code scanner shape) and ``calledFromFiles`` are accepted in
    place of ``callers``. A bare list of entries is accepted too.

    Returns:
        Mapping of lowercased procedure name to entry, or None when the file
        is missing or unusable.
    """
    data = _read_json(path, "Cross-reference")
    if data is None:
        if path:
            logger.warning("Cross-reference unavailable: calledFromCode will be empty")
        return None

    if isinstance(data, dict):
        raw_entries = data.get("crossReference") or data.get("procedures") or []
    elif isinstance(data, list):
        raw_entries = data
    else:
        raw_entries = []

    result: dict[str, CrossReferenceEntry] = {}
    for raw in raw_entries:
        if not isinstance(raw, dict):
            continue
        name = raw.get("sprocName") or raw.get("procedureName") or raw.get("name") or ""
        # Code-side names may carry a schema: dbo.usp_X
        name = name.rsplit(".", 1)[-1].strip("[]")
        if not name:
            continue

        module = raw.get("module")
        if not module or module == UNCATEGORIZED:
            module = None

        key = name.lower()
        existing = result.get(key)
        if existing is None:
            result[key] = CrossReferenceEntry(
                procedure=name, callers=_parse_callers(raw), module_hint=module
            )
        else:
            existing.callers.extend(_parse_callers(raw))
            existing.module_hint = existing.module_hint or module

    logger.info("Loaded cross-reference for %d procedures from %s", len(result), path)
    return result


def module_hints(cross_reference: dict[str, CrossReferenceEntry] | None) -> dict[str, str]:
    """Extract the procedure -> module hint mapping used by module assignment."""
    if not cross_reference:
        return {}
    return {
        key: entry.module_hint
        for key, entry in cross_reference.items()
        if entry.module_hint is not None
    }
