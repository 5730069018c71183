"""Tests for AntiPatternDetector — nine independent detectors over stripped bodies."""

from __future__ import annotations

from sprocforensic.analyzers.anti_pattern_analyzer import AntiPatternDetector, AntiPatternProfile
from sprocforensic.utils.sql_text import strip_comments


def _detect(body: str) -> AntiPatternProfile:
    return AntiPatternDetector().detect(strip_comments(body))


class TestAntiPatternDetector:
    """Tests for each detector and their independence."""

    def test_clean_body(self) -> None:
        profile = _detect(
            "SET NOCOUNT ON;\nBEGIN TRY\n  SELECT Id FROM dbo.Users\nEND TRY\n"
            "BEGIN CATCH\n  THROW;\nEND CATCH"
        )

        assert profile == AntiPatternProfile()
        assert profile.severity_count == 0

    def test_cursor_declaration(self) -> None:
        profile = _detect("DECLARE c CURSOR FOR SELECT Id FROM T")
        assert profile.has_cursor

    def test_cursor_fetch_next(self) -> None:
        assert _detect("FETCH NEXT FROM c INTO @Id").has_cursor

    def test_select_star(self) -> None:
        assert _detect("SELECT * FROM dbo.Users").has_select_star
        assert _detect("SELECT TOP 10 * FROM dbo.Users").has_select_star
        assert not _detect("SELECT COUNT(*) FROM dbo.Users").has_select_star

    def test_dynamic_sql(self) -> None:
        assert _detect("EXEC(@sql)").has_dynamic_sql
        assert _detect("EXECUTE (@sql)").has_dynamic_sql
        assert _detect("EXEC sp_executesql @sql, N'@Id int', @Id").has_dynamic_sql
        assert not _detect("EXEC dbo.usp_Other @Id").has_dynamic_sql

    def test_nolock_counted(self) -> None:
        profile = _detect(
            "SELECT * FROM A WITH (NOLOCK) JOIN B with(nolock) ON 1=1 JOIN C WITH ( NOLOCK ) ON 1=1"
        )

        assert profile.has_nolock
        assert profile.nolock_count == 3

    def test_single_nolock(self) -> None:
        profile = _detect("SELECT Id FROM A WITH (NOLOCK)")

        assert profile.nolock_count == 1
        assert profile.has_nolock

    def test_nolock_only_in_comments_is_ignored(self) -> None:
        profile = _detect(
            "-- SELECT Id FROM A WITH (NOLOCK)\n/* JOIN B WITH (NOLOCK) */\nSELECT Id FROM A"
        )

        assert profile.nolock_count == 0
        assert not profile.has_nolock

    def test_missing_set_nocount_on(self) -> None:
        assert _detect("SELECT 1").missing_set_nocount_on
        assert not _detect("set nocount on; SELECT 1").missing_set_nocount_on
        assert _detect("SET NOCOUNT OFF; SELECT 1").missing_set_nocount_on

    def test_commented_out_nocount_counts_as_missing(self) -> None:
        assert _detect("-- SET NOCOUNT ON\nSELECT 1").missing_set_nocount_on

    def test_table_variable(self) -> None:
        assert _detect("DECLARE @Ids TABLE (Id int)").has_table_variable
        assert not _detect("DECLARE @Id int").has_table_variable

    def test_temp_table(self) -> None:
        assert _detect("CREATE TABLE #Work (Id int)").has_temp_table
        assert _detect("SELECT Id INTO #Work FROM T").has_temp_table
        assert not _detect("SELECT Id FROM #Work").has_temp_table

    def test_while_loop(self) -> None:
        assert _detect("WHILE @i < 10 SET @i = @i + 1").has_while_loop

    def test_try_catch(self) -> None:
        assert _detect("SELECT 1").has_no_try_catch
        assert not _detect("BEGIN TRY SELECT 1 END TRY BEGIN CATCH END CATCH").has_no_try_catch

    def test_detectors_are_independent(self) -> None:
        """A body can trigger every detector at once."""
        profile = _detect(
            "DECLARE @T TABLE (Id int)\n"
            "DECLARE c CURSOR FOR SELECT * FROM A WITH (NOLOCK)\n"
            "CREATE TABLE #X (Id int)\n"
            "WHILE 1 = 1 EXEC(@sql)"
        )

        assert profile.has_cursor
        assert profile.has_select_star
        assert profile.has_dynamic_sql
        assert profile.has_nolock
        assert profile.missing_set_nocount_on
        assert profile.has_table_variable
        assert profile.has_temp_table
        assert profile.has_while_loop
        assert profile.has_no_try_catch
        assert profile.severity_count == 6


class TestAntiPatternProfile:
    """Tests for profile serialization."""

    def test_to_dict_uses_output_keys(self) -> None:
        data = AntiPatternProfile(has_nolock=True, nolock_count=2).to_dict()

        assert list(data) == [
            "hasCursor",
            "hasSelectStar",
            "hasDynamicSql",
            "hasNolock",
            "nolockCount",
            "missingSetNocountOn",
            "hasTableVariable",
            "hasTempTable",
            "hasWhileLoop",
            "hasNoTryCatch",
        ]
        assert data["hasNolock"] is True
        assert data["nolockCount"] == 2

    def test_severity_excludes_style_flags(self) -> None:
        profile = AntiPatternProfile(
            missing_set_nocount_on=True, has_table_variable=True, has_no_try_catch=True
        )
        assert profile.severity_count == 0
