"""
SprocForensic -- Demo Analysis Script

This script demonstrates how to use SprocForensic as a Python library to
catalog the stored procedures of a scripted SQL Server database. It covers
the API surface: pointing at a dump, running the pipeline, reading the
catalog, and exporting the JSON documents.

NOTE: This is a demonstration script. It needs a real DDL dump (the output
of "Generate Scripts" in SSMS, usually UTF-16). Replace the placeholder paths
with your own before executing.
"""

from sprocforensic import ModuleRules, ProcedureCatalog, SprocForensic

# ---------------------------------------------------------------------------
# 1. Create a SprocForensic instance
# ---------------------------------------------------------------------------
# Only the dump is required. The known-tables file sharpens table detection
# (unqualified names are only trusted when they are known tables) and the
# cross-reference file fills in which application code calls each procedure.

forensic = SprocForensic(
    input_path="exports/DatabaseObjects_20250114.sql",
    encoding="utf-16",
    tables_path="generated/tables.json",
    cross_reference_path="generated/sproc-xref.json",
)

# Custom module prefixes can be supplied as a ModuleRules object or a JSON
# file path (uncomment to use):
# forensic = SprocForensic(
#     input_path="exports/DatabaseObjects_20250114.sql",
#     module_rules=ModuleRules(prefixes=("HR", "FIN", "OPS")),
#     workers=4,
# )


# ---------------------------------------------------------------------------
# 2. Run the pipeline
# ---------------------------------------------------------------------------
# analyze() streams the dump, splits it on GO, parses every CREATE PROCEDURE
# block and returns a ProcedureCatalog grouped by module.

catalog: ProcedureCatalog = forensic.analyze()


# ---------------------------------------------------------------------------
# 3. Access results programmatically
# ---------------------------------------------------------------------------

print(f"Export date: {catalog.export_date}")
print(f"Procedures: {catalog.total_procedures} (parse failures: {catalog.parse_failures})")

for module in catalog.modules:
    print(f"  {module.prefix:<16} {module.display_name:<28} {module.procedure_count}")

print(f"\nBy CRUD type: {catalog.stats['byCrudType']}")
print(f"By complexity: {catalog.stats['byComplexity']}")
print(f"Anti-patterns: {catalog.stats['antiPatternCounts']}")

# The heaviest procedures are the first candidates for refactoring
heavy = [p for p in catalog.procedures if p.complexity == "very-complex"]
for proc in sorted(heavy, key=lambda p: -p.line_count)[:10]:
    print(f"  {proc.full_name}: {proc.line_count} lines, {len(proc.tables_referenced)} tables")


# ---------------------------------------------------------------------------
# 4. Call graph
# ---------------------------------------------------------------------------

for cycle in catalog.call_graph["cycles"]:
    print("Recursive chain: " + " -> ".join(cycle))

for hotspot in catalog.call_graph["hotspots"]:
    print(f"{hotspot['name']} is called by {hotspot['callerCount']} procedures")

for proc in catalog.find("SEC_GetUserById"):
    print(f"{proc.full_name} called from: {proc.called_from_code}")


# ---------------------------------------------------------------------------
# 5. Export
# ---------------------------------------------------------------------------
# Writes generated/stored-procedures-full.json and generated/sp-bodies/*.json.
# Passing the catalog avoids running the pipeline a second time.

written = forensic.export_json("generated", catalog=catalog)
print(f"\nWrote {len(written)} files")
