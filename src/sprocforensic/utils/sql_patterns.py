"""Regex patterns for T-SQL procedure analysis.

All patterns are stored as raw strings for use with re.compile/re.findall/
re.search. Unless noted, they are meant to be used with re.IGNORECASE.
"""

from __future__ import annotations

# Batch terminator: GO alone on its own line (trailing whitespace / CR tolerated)
BATCH_TERMINATOR_PATTERN = r"^GO[ \t\r]*$"

# Start of a procedure batch: optional leading comment block, optional
# SET <option> <value> lines, then CREATE [OR ALTER] PROC[EDURE]
PROCEDURE_ANCHOR_PATTERN = (
    r"^(?:/\*[\s\S]*?\*/\s*)?"
    r"(?:SET\s+\w+\s+\w+\s*\r?\n)*\s*"
    r"CREATE\s+(?:OR\s+ALTER\s+)?PROC(?:EDURE)?\s"
)

# CREATE PROC[EDURE] [schema].[name]
PROCEDURE_NAME_PATTERN = (
    r"CREATE\s+(?:OR\s+ALTER\s+)?PROC(?:EDURE)?\s+\[?(\w+)\]?\s*\.\s*\[?(\w+)\]?"
)

# Parameter list / body boundary candidates, in order of strictness
AS_OWN_LINE_PATTERN = r"\n[ \t]*AS[ \t]*\r?\n"
AS_AFTER_PAREN_PATTERN = r"\)\s*AS\b"  # only at the ")" closing a leading parameter list
AS_END_OF_LINE_PATTERN = r"\bAS[ \t]*\r?\n"
AS_LINE_START_PATTERN = r"^[ \t]*AS\b"
AS_ANYWHERE_PATTERN = r"\sAS\b"

# Procedure options trailing the parameter list
PROCEDURE_OPTIONS_PATTERN = (
    r"(?:\s+WITH\s+(?:RECOMPILE|ENCRYPTION|NATIVE_COMPILATION|SCHEMABINDING"
    r"|EXEC(?:UTE)?\s+AS\s+(?:'[^']*'|\w+))"
    r"(?:\s*,\s*(?:RECOMPILE|ENCRYPTION|NATIVE_COMPILATION|SCHEMABINDING"
    r"|EXEC(?:UTE)?\s+AS\s+(?:'[^']*'|\w+)))*"
    r"|\s+FOR\s+REPLICATION)+\s*$"
)

# One parameter declaration (after top-level comma split)
PARAMETER_PATTERN = (
    r"^(?P<name>@[\w@#$]+)\s+(?:AS\s+)?"
    r"(?P<type>(?:\[[^\]]+\]|[\w$#]+)(?:\s*\.\s*(?:\[[^\]]+\]|[\w$#]+))*"
    r"(?:\s*\([^()]*\))?)"
    r"(?:\s*=\s*(?P<default>.*?))?"
    r"(?:\s+(?P<direction>OUTPUT|OUT))?"
    r"(?:\s+(?P<readonly>READONLY))?\s*$"
)

# Comments
BLOCK_COMMENT_PATTERN = r"/\*[\s\S]*?\*/"
LINE_COMMENT_PATTERN = r"--[^\n]*"

# Cursor declaration or FETCH NEXT
CURSOR_PATTERN = (
    r"\bDECLARE\s+@?\w+\s+(?:INSENSITIVE\s+|SCROLL\s+)*CURSOR\b|\bFETCH\s+NEXT\b"
)

# SELECT * anti-pattern (DISTINCT / TOP n tolerated)
SELECT_STAR_PATTERN = (
    r"\bSELECT\s+(?:DISTINCT\s+)?(?:TOP\s*\(?\s*\d+\s*\)?\s+(?:PERCENT\s+)?)?\*"
)

# EXEC(...) or the system dynamic-execution procedure
DYNAMIC_SQL_PATTERN = r"\bEXEC(?:UTE)?\s*\(|\bsp_executesql\b"

# WITH (NOLOCK) table hint
NOLOCK_PATTERN = r"\bWITH\s*\(\s*NOLOCK\s*\)"

SET_NOCOUNT_ON_PATTERN = r"\bSET\s+NOCOUNT\s+ON\b"

TABLE_VARIABLE_PATTERN = r"\bDECLARE\s+@\w+\s+(?:AS\s+)?TABLE\b"

# #temp table created or selected into
TEMP_TABLE_PATTERN = r"\bCREATE\s+TABLE\s+#|\bINTO\s+#"

WHILE_PATTERN = r"\bWHILE\b"

TRY_BLOCK_PATTERN = r"\bBEGIN\s+TRY\b"

# Identifier segment: [bracketed name] or plain word
_IDENT = r"(?:\[[^\]\r\n]+\]|[A-Za-z_][\w$#@]*)"

# Dotted object name with up to four parts (server.db.schema.object)
OBJECT_NAME_PATTERN = rf"{_IDENT}(?:\s*\.\s*{_IDENT}){{0,3}}"

# Table references following a DML/DDL keyword
TABLE_REF_PATTERN = (
    r"\b(?:FROM|JOIN|INSERT(?:\s+INTO)?|UPDATE|DELETE(?:\s+FROM)?"
    r"|MERGE(?:\s+INTO)?|TRUNCATE\s+TABLE)\s+"
    rf"(?P<ref>{OBJECT_NAME_PATTERN})(?![\w$#@\]]|\s*\.)"
)

# EXEC[UTE] [@rc =] procedure
PROC_CALL_PATTERN = (
    r"\bEXEC(?:UTE)?\s+(?:@\w+\s*=\s*)?"
    rf"(?P<ref>{OBJECT_NAME_PATTERN})(?![\w$#@\]]|\s*\.)"
)

# System procedures never reported as calls
SYSTEM_PROC_PATTERN = r"^(?:sp|xp)_"

# Body-based CRUD detection
SELECT_FROM_PATTERN = r"\bSELECT\b[\s\S]*?\bFROM\b"
INSERT_PATTERN = r"\bINSERT\s+(?:INTO\s+)?(?!INTO\b)[\[A-Za-z_]"
UPDATE_PATTERN = r"\bUPDATE\s+(?!STATISTICS\b|OF\b)[\[A-Za-z_]"
DELETE_PATTERN = r"\bDELETE\s+(?:FROM\s+)?(?!FROM\b)[\[A-Za-z_]"
MERGE_PATTERN = r"\bMERGE\s+(?:INTO\s+)?[\[A-Za-z_]"
GROUP_BY_PATTERN = r"\bGROUP\s+BY\b"

# Export stamp embedded in dump file names, e.g. Schema_20260226.sql
FILE_DATE_PATTERN = r"(?<!\d)(20\d{2})(\d{2})(\d{2})(?!\d)"
