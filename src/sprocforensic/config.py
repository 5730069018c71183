"""Configuration classes for sprocforensic inputs, analysis settings and module rules."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping

UNCATEGORIZED = "(uncategorized)"


@dataclass
class SourceConfig:
    """Input locations for one pipeline run.

    Attributes:
        input_path: Path to the T-SQL object-creation script.
        encoding: Text encoding of the script (exports are usually UTF-16).
        tables_path: Known-table-name collaborator file (optional).
        cross_reference_path: Code caller cross-reference file (optional).
        export_date: Export date to stamp into the output (ISO date). When
            empty, a YYYYMMDD stamp in the input file name is used, else today.
    """

    input_path: str = ""
    encoding: str = "utf-16"
    tables_path: str = ""
    cross_reference_path: str = ""
    export_date: str = ""

    def validate(self) -> list[str]:
        """Validate configuration and return list of errors."""
        errors: list[str] = []
        if not self.input_path:
            errors.append("Input file is required")
        elif not os.path.isfile(self.input_path):
            errors.append(f"Input file not found: {self.input_path}")
        elif not os.access(self.input_path, os.R_OK):
            errors.append(f"Input file is not readable: {self.input_path}")
        try:
            "".encode(self.encoding)
        except LookupError:
            errors.append(f"Unknown encoding: {self.encoding}")
        return errors


@dataclass
class AnalysisConfig:
    """Configuration for analysis behavior.

    Attributes:
        preview_lines: Number of body lines kept in the aggregate output.
        workers: Worker processes for per-block analysis (1 = in-process).
        chunk_size: Blocks handed to a worker at a time (0 = automatic).
        hotspot_limit: Number of most-called procedures reported by the call graph.
    """

    preview_lines: int = 20
    workers: int = 1
    chunk_size: int = 0
    hotspot_limit: int = 10

    def validate(self) -> list[str]:
        errors: list[str] = []
        if self.preview_lines < 0:
            errors.append(f"preview_lines must be >= 0, got {self.preview_lines}")
        if self.workers < 1:
            errors.append(f"workers must be >= 1, got {self.workers}")
        if self.chunk_size < 0:
            errors.append(f"chunk_size must be >= 0, got {self.chunk_size}")
        return errors


DEFAULT_PREFIXES: tuple[str, ...] = (
    "MYEVAL",
    "MYEval",
    "MyEvals",
    "MyEval",
    "MyGME",
    "MyGme",
    "MYGME",
    "ACGME",
    "EVAL",
    "Eval",
    "eval",
    "SEC",
    "Sec",
    "sec",
    "DH",
    "PRC",
    "prc",
    "Prc",
    "APE2",
    "APE",
    "BSN",
    "ACT",
    "PF",
    "OBC",
    "CME",
    "Prep",
    "PTL",
    "ptl",
    "RPT",
    "QUIZ",
    "Quiz",
    "SCHE",
    "SYS",
    "POST",
    "LA",
)

DEFAULT_ALIASES: dict[str, str] = {
    "Eval": "EVAL",
    "eval": "EVAL",
    "Sec": "SEC",
    "sec": "SEC",
    "prc": "PRC",
    "Prc": "PRC",
    "MYEval": "MYEVAL",
    "MyEval": "MYEVAL",
    "MyEvals": "MYEVAL",
    "MyGme": "MyGME",
    "MYGME": "MyGME",
    "Quiz": "QUIZ",
    "ptl": "PTL",
}

DEFAULT_DISPLAY_NAMES: dict[str, str] = {
    "SEC": "Security",
    "EVAL": "Evaluations",
    "DH": "Duty Hours",
    "PRC": "Procedures",
    "APE": "Annual Program Evaluation",
    "APE2": "APE v2",
    "BSN": "Nursing",
    "ACT": "Activity Logs",
    "PF": "Portfolio",
    "OBC": "Clinical Assessment",
    "CME": "CME Credits",
    "Prep": "Prep/Onboarding",
    "PTL": "Patient Logs",
    "RPT": "Reports",
    "QUIZ": "Quizzes",
    "SCHE": "Scheduling",
    "SYS": "System",
    "MYEVAL": "MyEval Platform",
    "POST": "Post-Graduation",
    "MyGME": "MyGME Integration",
    "LA": "Learning Activities",
    "ACGME": "ACGME",
    "_DEL_": "Soft-Deleted",
    "perf": "Performance Schema",
    UNCATEGORIZED: "Uncategorized",
}


@dataclass(frozen=True)
class ModuleRules:
    """Immutable lookup tables driving module assignment.

    Attributes:
        prefixes: Known name prefixes. Matching is longest-first, so the
            declared order only matters between prefixes of equal length.
        aliases: Spelling variant -> canonical module code.
        display_names: Canonical module code -> human display name.
        deleted_marker: Name prefix marking soft-deleted objects.
        schema_modules: Schema name -> module code, checked before prefixes.
    """

    prefixes: tuple[str, ...] = DEFAULT_PREFIXES
    aliases: Mapping[str, str] = field(default_factory=lambda: MappingProxyType(DEFAULT_ALIASES))
    display_names: Mapping[str, str] = field(
        default_factory=lambda: MappingProxyType(DEFAULT_DISPLAY_NAMES)
    )
    deleted_marker: str = "_DEL_"
    schema_modules: Mapping[str, str] = field(
        default_factory=lambda: MappingProxyType({"perf": "perf"})
    )

    def __reduce__(self) -> tuple[Any, ...]:
        # MappingProxyType cannot be pickled; rebuild from plain dicts in workers
        return (
            ModuleRules.from_dict,
            (
                {
                    "prefixes": list(self.prefixes),
                    "aliases": dict(self.aliases),
                    "display_names": dict(self.display_names),
                    "deleted_marker": self.deleted_marker,
                    "schema_modules": dict(self.schema_modules),
                },
            ),
        )

    @property
    def ordered_prefixes(self) -> tuple[str, ...]:
        """Prefixes sorted longest first (stable for equal lengths)."""
        return tuple(sorted(self.prefixes, key=len, reverse=True))

    def canonical(self, prefix: str) -> str:
        """Normalize a matched prefix through the alias table."""
        return self.aliases.get(prefix, prefix)

    def display_name(self, module: str) -> str:
        return self.display_names.get(module, module)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ModuleRules:
        """Build rules from a plain dict, falling back to defaults per key.

        Keys: ``prefixes`` (list), ``aliases`` (dict), ``display_names`` (dict,
        merged over the defaults), ``deleted_marker`` (str), ``schema_modules`` (dict).
        """
        display = dict(DEFAULT_DISPLAY_NAMES)
        display.update(data.get("display_names", {}))
        return cls(
            prefixes=tuple(data.get("prefixes", DEFAULT_PREFIXES)),
            aliases=MappingProxyType(dict(data.get("aliases", DEFAULT_ALIASES))),
            display_names=MappingProxyType(display),
            deleted_marker=data.get("deleted_marker", "_DEL_"),
            schema_modules=MappingProxyType(dict(data.get("schema_modules", {"perf": "perf"}))),
        )


def load_module_rules(path: str) -> ModuleRules:
    """Load module rules from a JSON file.

    Raises:
        OSError: If the file cannot be read.
        ValueError: If the file is not a JSON object.
    """
    with open(path, encoding="utf-8") as f:
        data = json.load(f)
    if not isinstance(data, dict):
        raise ValueError(f"Module rules file must contain a JSON object: {path}")
    return ModuleRules.from_dict(data)
