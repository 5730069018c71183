"""Tests for ModuleAssigner — prefix, cross-reference and table-majority strategies."""

from __future__ import annotations

from sprocforensic.classifiers.module_assigner import Assignment, ModuleAssigner, detect_prefix
from sprocforensic.config import UNCATEGORIZED, ModuleRules


class TestDetectPrefix:
    """Tests for prefix detection on object names."""

    def test_simple_prefix(self) -> None:
        assert detect_prefix("SEC_GetUser") == "SEC"

    def test_longest_prefix_wins(self) -> None:
        assert detect_prefix("APE2_LoadStep") == "APE2"
        assert detect_prefix("APE_LoadStep") == "APE"
        assert detect_prefix("MyEvals_List") == "MYEVAL"

    def test_aliases_are_normalized(self) -> None:
        assert detect_prefix("Eval_GetForm") == "EVAL"
        assert detect_prefix("sec_GetUser") == "SEC"
        assert detect_prefix("MyGme_Sync") == "MyGME"

    def test_prefix_requires_underscore(self) -> None:
        assert detect_prefix("SECURITY_Check") is None
        assert detect_prefix("Security") is None

    def test_soft_deleted_names(self) -> None:
        assert detect_prefix("_DEL_SEC_OldUser") == "_DEL_"

    def test_schema_module(self) -> None:
        assert detect_prefix("usp_WaitStats", schema="perf") == "perf"
        assert detect_prefix("usp_WaitStats", schema="dbo") is None

    def test_custom_rules(self) -> None:
        rules = ModuleRules.from_dict({"prefixes": ["HR", "HRX"], "aliases": {"HRX": "HR"}})

        assert detect_prefix("HRX_Hire", rules=rules) == "HR"
        assert detect_prefix("SEC_GetUser", rules=rules) is None


class TestModuleAssigner:
    """Tests for the strategy chain."""

    def test_prefix_strategy(self) -> None:
        result = ModuleAssigner().assign("SEC_GetUser", "dbo", ["EVAL_Forms"])
        assert result == Assignment("SEC", "prefix")

    def test_cross_reference_hint(self) -> None:
        assigner = ModuleAssigner(hints={"usp_ProcessQueue": "SCHE"})
        result = assigner.assign("USP_PROCESSQUEUE", "dbo", ["SEC_Users"])

        assert result == Assignment("SCHE", "cross-reference")

    def test_hint_is_canonicalized(self) -> None:
        assigner = ModuleAssigner(hints={"usp_x": "Eval"})
        assert assigner.assign("usp_x", "dbo", []).module == "EVAL"

    def test_uncategorized_hint_is_ignored(self) -> None:
        assigner = ModuleAssigner(hints={"usp_x": UNCATEGORIZED})
        assert assigner.assign("usp_x", "dbo", ["SEC_Users"]) == Assignment("SEC", "table-majority")

    def test_table_majority_fallback(self) -> None:
        """Three SEC tables outvote one EVAL table."""
        tables = ["EVAL_Forms", "SEC_Roles", "SEC_UserRoles", "SEC_Users"]
        result = ModuleAssigner().assign("Xyz_DoThing", "dbo", tables)

        assert result == Assignment("SEC", "table-majority")

    def test_table_majority_tie_goes_to_first_seen(self) -> None:
        tables = ["EVAL_Forms", "SEC_Users"]
        assert ModuleAssigner().assign("usp_x", "dbo", tables).module == "EVAL"

    def test_tables_without_prefix_are_ignored(self) -> None:
        tables = ["Lookup", "Settings", "DH_Shifts"]
        assert ModuleAssigner().assign("usp_x", "dbo", tables).module == "DH"

    def test_uncategorized(self) -> None:
        result = ModuleAssigner().assign("usp_x", "dbo", ["Lookup"])
        assert result == Assignment(UNCATEGORIZED, "uncategorized")
