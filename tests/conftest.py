"""Shared test fixtures with a scripted dump for a fictional residency-management DB."""

from __future__ import annotations

import json
import os
import tempfile
from typing import Iterator

import pytest

from sprocforensic.analyzers.sp_analyzer import AnalysisResult, SPAnalyzer
from sprocforensic.builders.catalog_builder import CatalogBuilder, ProcedureCatalog
from sprocforensic.parsers.block_splitter import BlockSplitter
from sprocforensic.sources.collaborators import CrossReferenceEntry, load_cross_reference

SAMPLE_DUMP = """\
/****** Object:  Table [dbo].[SEC_Users]    Script Date: 1/14/2025 ******/
SET ANSI_NULLS ON
GO
CREATE TABLE [dbo].[SEC_Users](
    [UserId] [int] IDENTITY(1,1) NOT NULL,
    [UserName] [nvarchar](100) NOT NULL
) ON [PRIMARY]
GO
/****** Object:  View [dbo].[SEC_ActiveUsers]    Script Date: 1/14/2025 ******/
CREATE VIEW [dbo].[SEC_ActiveUsers] AS SELECT * FROM dbo.SEC_Users
GO
/****** Object:  StoredProcedure [dbo].[SEC_GetUserById]    Script Date: 1/14/2025 ******/
SET ANSI_NULLS ON
GO
SET QUOTED_IDENTIFIER ON
GO
CREATE PROCEDURE [dbo].[SEC_GetUserById]
    @UserId int
AS
BEGIN
    SET NOCOUNT ON;
    SELECT UserId, UserName FROM SEC_Users WITH (NOLOCK) WHERE UserId = @UserId
END
GO
CREATE PROCEDURE dbo.SEC_SaveUser
(
    @UserId int,
    @UserName nvarchar(100),
    @IsActive bit = 1
)
AS
BEGIN
    SET NOCOUNT ON;
    BEGIN TRY
        IF @UserId = 0
            INSERT INTO dbo.SEC_Users (UserName, IsActive) VALUES (@UserName, @IsActive)
        ELSE
            UPDATE dbo.SEC_Users SET UserName = @UserName WHERE UserId = @UserId
        EXEC dbo.SEC_GetUserById @UserId = @UserId
    END TRY
    BEGIN CATCH
        THROW;
    END CATCH
END
GO
CREATE PROCEDURE [dbo].[EVAL_ListEvaluations] @FormId int = NULL, @Status varchar(20) = 'open,pending'
AS
-- Old version read WITH (NOLOCK) here
SELECT e.EvaluationId, f.FormName
FROM dbo.EVAL_Evaluations e
JOIN EVAL_Forms f ON f.FormId = e.FormId
WHERE (@FormId IS NULL OR e.FormId = @FormId)
GO
CREATE PROCEDURE dbo.Xyz_DoThing
AS
SET NOCOUNT ON
SELECT u.UserId
FROM dbo.SEC_Users u
JOIN dbo.SEC_UserRoles ur ON ur.UserId = u.UserId
JOIN dbo.SEC_Roles r ON r.RoleId = ur.RoleId
LEFT JOIN dbo.EVAL_Forms f ON f.OwnerId = u.UserId
GO
CREATE PROCEDURE dbo.usp_ProcessQueue
AS
BEGIN
    DECLARE @Id int
    DECLARE queue_cursor CURSOR FOR SELECT ItemId FROM #Queue
    OPEN queue_cursor
    FETCH NEXT FROM queue_cursor INTO @Id
    WHILE @@FETCH_STATUS = 0
    BEGIN
        EXEC dbo.usp_ProcessItem @Id
        FETCH NEXT FROM queue_cursor INTO @Id
    END
    CLOSE queue_cursor
    DEALLOCATE queue_cursor
END
GO
CREATE PROCEDURE dbo.usp_ProcessItem
    @ItemId int
AS
BEGIN
    DELETE FROM dbo.SEC_UserRoles WHERE RoleId = @ItemId
    IF @@ROWCOUNT > 0
        EXEC usp_ProcessQueue
END
GO
CREATE PROCEDURE BrokenNoSchema
AS
SELECT 1
GO
"""

KNOWN_TABLES = frozenset(
    {"SEC_Users", "SEC_Roles", "SEC_UserRoles", "EVAL_Forms", "EVAL_Evaluations"}
)

CROSS_REFERENCE = {
    "crossReference": [
        {
            "sprocName": "SEC_GetUserById",
            "module": "SEC",
            "callers": [
                {
                    "filePath": "Business.Security/UserManager.cs",
                    "methodName": "GetUser",
                },
                {
                    "filePath": "Web.Admin/Controllers/UserController.cs",
                    "methodName": "Details",
                },
            ],
        },
        {
            "sprocName": "dbo.usp_ProcessQueue",
            "module": "SCHE",
            "calledFromFiles": ["Jobs.Scheduler/QueueJob.cs"],
        },
    ]
}

TABLES_DOCUMENT = {
    "totalTables": 5,
    "modules": [
        {
            "prefix": "SEC",
            "displayName": "Security",
            "tableCount": 3,
            "tables": [
                {"name": "SEC_Users", "schema": "dbo", "fullName": "dbo.SEC_Users"},
                {"name": "SEC_Roles", "schema": "dbo", "fullName": "dbo.SEC_Roles"},
                {"name": "SEC_UserRoles", "schema": "dbo", "fullName": "dbo.SEC_UserRoles"},
            ],
        },
        {
            "prefix": "EVAL",
            "displayName": "Evaluations",
            "tableCount": 2,
            "tables": [
                {"name": "EVAL_Forms", "schema": "dbo", "fullName": "dbo.EVAL_Forms"},
                {"name": "EVAL_Evaluations", "schema": "dbo", "fullName": "dbo.EVAL_Evaluations"},
            ],
        },
    ],
}


@pytest.fixture
def sample_dump() -> str:
    """Dump text with six procedures, one unparseable procedure and other objects."""
    return SAMPLE_DUMP


@pytest.fixture
def known_tables() -> frozenset[str]:
    return KNOWN_TABLES


@pytest.fixture
def workdir() -> Iterator[str]:
    """Temporary directory removed after the test."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield tmpdir


@pytest.fixture
def dump_path(workdir: str) -> str:
    """SAMPLE_DUMP written as UTF-16, the way SSMS scripts it."""
    path = os.path.join(workdir, "DatabaseObjects_20250114.sql")
    with open(path, "w", encoding="utf-16") as f:
        f.write(SAMPLE_DUMP)
    return path


@pytest.fixture
def tables_path(workdir: str) -> str:
    path = os.path.join(workdir, "tables.json")
    with open(path, "w", encoding="utf-8") as f:
        json.dump(TABLES_DOCUMENT, f)
    return path


@pytest.fixture
def xref_path(workdir: str) -> str:
    path = os.path.join(workdir, "sproc-xref.json")
    with open(path, "w", encoding="utf-8") as f:
        json.dump(CROSS_REFERENCE, f)
    return path


@pytest.fixture
def cross_reference(xref_path: str) -> dict[str, CrossReferenceEntry]:
    result = load_cross_reference(xref_path)
    assert result is not None
    return result


@pytest.fixture
def analysis_result() -> AnalysisResult:
    """SAMPLE_DUMP analyzed in-process with the known tables and no cross-reference."""
    blocks = BlockSplitter().split(SAMPLE_DUMP)
    return SPAnalyzer(known_tables=KNOWN_TABLES).analyze(blocks)


@pytest.fixture
def sample_catalog(analysis_result: AnalysisResult) -> ProcedureCatalog:
    """Catalog built from SAMPLE_DUMP without a cross-reference."""
    return CatalogBuilder().build(
        analysis_result,
        source="DatabaseObjects_20250114.sql",
        export_date="2025-01-14",
        total_batches=12,
    )
