"""Tests for SourceConfig, AnalysisConfig and ModuleRules."""

from __future__ import annotations

import json
import os
import pickle

import pytest

from sprocforensic.config import (
    DEFAULT_PREFIXES,
    AnalysisConfig,
    ModuleRules,
    SourceConfig,
    load_module_rules,
)


class TestSourceConfig:
    """Tests for input validation."""

    def test_valid_config_returns_no_errors(self, dump_path: str) -> None:
        assert SourceConfig(input_path=dump_path).validate() == []

    def test_missing_input_returns_error(self) -> None:
        errors = SourceConfig().validate()
        assert any("required" in e for e in errors)

    def test_nonexistent_input_returns_error(self, workdir: str) -> None:
        errors = SourceConfig(input_path=os.path.join(workdir, "nope.sql")).validate()
        assert any("not found" in e for e in errors)

    def test_unknown_encoding_returns_error(self, dump_path: str) -> None:
        errors = SourceConfig(input_path=dump_path, encoding="not-a-codec").validate()
        assert any("encoding" in e for e in errors)

    def test_defaults(self) -> None:
        config = SourceConfig()
        assert config.encoding == "utf-16"
        assert config.tables_path == ""
        assert config.export_date == ""


class TestAnalysisConfig:
    def test_defaults_are_valid(self) -> None:
        config = AnalysisConfig()

        assert config.validate() == []
        assert config.preview_lines == 20
        assert config.workers == 1

    def test_invalid_values(self) -> None:
        errors = AnalysisConfig(preview_lines=-1, workers=0, chunk_size=-5).validate()
        assert len(errors) == 3


class TestModuleRules:
    """Tests for the immutable module lookup tables."""

    def test_ordered_prefixes_longest_first(self) -> None:
        ordered = ModuleRules().ordered_prefixes

        assert ordered.index("APE2") < ordered.index("APE")
        assert ordered.index("MYEVAL") < ordered.index("EVAL")
        assert set(ordered) == set(DEFAULT_PREFIXES)

    def test_display_names(self) -> None:
        rules = ModuleRules()

        assert rules.display_name("SEC") == "Security"
        assert rules.display_name("(uncategorized)") == "Uncategorized"
        assert rules.display_name("ZZZ") == "ZZZ"

    def test_tables_are_read_only(self) -> None:
        rules = ModuleRules()
        with pytest.raises(TypeError):
            rules.aliases["Foo"] = "BAR"  # type: ignore[index]

    def test_from_dict_merges_display_names(self) -> None:
        rules = ModuleRules.from_dict({"display_names": {"HR": "Human Resources"}})

        assert rules.display_name("HR") == "Human Resources"
        assert rules.display_name("SEC") == "Security"
        assert rules.prefixes == DEFAULT_PREFIXES

    def test_rules_survive_pickling(self) -> None:
        rules = ModuleRules.from_dict({"prefixes": ["HR"], "aliases": {"hr": "HR"}})
        restored = pickle.loads(pickle.dumps(rules))

        assert restored.prefixes == ("HR",)
        assert restored.canonical("hr") == "HR"

    def test_load_module_rules(self, workdir: str) -> None:
        path = os.path.join(workdir, "rules.json")
        with open(path, "w", encoding="utf-8") as f:
            json.dump({"prefixes": ["FIN", "HR"], "schema_modules": {}}, f)

        rules = load_module_rules(path)

        assert rules.prefixes == ("FIN", "HR")
        assert dict(rules.schema_modules) == {}

    def test_load_module_rules_rejects_non_object(self, workdir: str) -> None:
        path = os.path.join(workdir, "rules.json")
        with open(path, "w", encoding="utf-8") as f:
            json.dump(["FIN"], f)

        with pytest.raises(ValueError):
            load_module_rules(path)
