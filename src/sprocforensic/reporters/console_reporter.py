"""Console reporter — Rich terminal output for the procedure catalog."""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from sprocforensic.classifiers.complexity import COMPLEXITY_TIERS
from sprocforensic.utils.formatting import (
    complexity_color,
    crud_color,
    flag_list,
    format_count,
    truncate,
)

if TYPE_CHECKING:
    from sprocforensic.analyzers.sp_analyzer import ClassifiedProcedure
    from sprocforensic.builders.catalog_builder import ProcedureCatalog

_TIER_RANK = {tier: rank for rank, tier in enumerate(COMPLEXITY_TIERS)}


class ConsoleReporter:
    """Render the catalog to the terminal using Rich.

    Produces the scan summary plus the module, procedure, detail and call
    graph views used by the CLI commands.
    """

    def __init__(self, catalog: ProcedureCatalog, console: Console | None = None) -> None:
        self.catalog = catalog
        self.console = console or Console()

    def print_report(self) -> None:
        """Print the scan summary."""
        self._print_header()
        self._print_totals()
        self.print_modules()
        self._print_distribution()
        self._print_anti_patterns()
        self._print_hotspots()

    def _print_header(self) -> None:
        self.console.print(
            Panel(
                f"[bold white]SprocForensic Catalog[/]\n"
                f"Source: {self.catalog.source}\n"
                f"Export date: {self.catalog.export_date}",
                style="bold blue",
            )
        )

    def _print_totals(self) -> None:
        table = Table(title="Extraction Summary")
        table.add_column("Metric", style="bold")
        table.add_column("Count", justify="right")

        table.add_row("Batches", format_count(self.catalog.total_batches))
        table.add_row("Procedure blocks", format_count(self.catalog.candidate_blocks))
        table.add_row("Parsed procedures", format_count(self.catalog.total_procedures))
        failures = self.catalog.parse_failures
        table.add_row(
            "Parse failures",
            f"[red]{failures}[/]" if failures else "0",
        )
        table.add_row("Modules", str(len(self.catalog.modules)))
        self.console.print(table)

    def print_modules(self) -> None:
        """Print one row per module with its CRUD and complexity mix."""
        table = Table(title=f"Modules ({len(self.catalog.modules)})")
        table.add_column("Prefix")
        table.add_column("Module")
        table.add_column("Procedures", justify="right")
        table.add_column("Complex+", justify="right")
        table.add_column("Lines", justify="right")

        for module in self.catalog.modules:
            heavy = sum(1 for p in module.procedures if p.complexity in ("complex", "very-complex"))
            lines = sum(p.line_count for p in module.procedures)
            table.add_row(
                module.prefix,
                module.display_name,
                str(module.procedure_count),
                f"[red]{heavy}[/]" if heavy else "0",
                format_count(lines),
            )

        self.console.print(table)

    def _print_distribution(self) -> None:
        stats = self.catalog.stats
        table = Table(title="Distribution")
        table.add_column("CRUD Type")
        table.add_column("Count", justify="right")
        table.add_column("Complexity")
        table.add_column("Count", justify="right")

        crud_rows = list(stats.get("byCrudType", {}).items())
        tier_rows = list(stats.get("byComplexity", {}).items())
        for i in range(max(len(crud_rows), len(tier_rows))):
            crud, crud_count = crud_rows[i] if i < len(crud_rows) else ("", "")
            tier, tier_count = tier_rows[i] if i < len(tier_rows) else ("", "")
            table.add_row(
                f"[{crud_color(crud)}]{crud}[/]" if crud else "",
                str(crud_count),
                f"[{complexity_color(tier)}]{tier}[/]" if tier else "",
                str(tier_count),
            )

        self.console.print(table)

    def _print_anti_patterns(self) -> None:
        counts = self.catalog.stats.get("antiPatternCounts", {})
        if not counts:
            return

        table = Table(title="Anti-Patterns")
        table.add_column("Pattern")
        table.add_column("Procedures", justify="right")
        for name, count in counts.items():
            table.add_row(name, format_count(count))
        self.console.print(table)

    def _print_hotspots(self) -> None:
        hotspots = self.catalog.call_graph.get("hotspots", [])
        if not hotspots:
            return

        table = Table(title="Most Called Procedures")
        table.add_column("Procedure")
        table.add_column("Callers", justify="right")
        table.add_column("Transitive", justify="right")
        for hs in hotspots:
            table.add_row(
                f"{hs['schema']}.{hs['name']}",
                str(hs["callerCount"]),
                str(hs["transitiveCallerCount"]),
            )
        self.console.print(table)

    def print_procedures(
        self,
        module: str | None = None,
        complexity: str | None = None,
        limit: int = 30,
    ) -> None:
        """Print the most complex procedures, optionally filtered."""
        procs = self.catalog.procedures
        if module:
            procs = [p for p in procs if p.module.lower() == module.lower()]
        if complexity:
            procs = [p for p in procs if p.complexity == complexity]
        procs = sorted(procs, key=lambda p: (-_TIER_RANK.get(p.complexity, 0), -p.line_count))

        table = Table(title=f"Stored Procedures ({len(procs)})")
        table.add_column("Name")
        table.add_column("Module")
        table.add_column("CRUD")
        table.add_column("Complexity")
        table.add_column("Lines", justify="right")
        table.add_column("Tables", justify="right")
        table.add_column("Anti-Patterns")

        for proc in procs[:limit]:
            table.add_row(
                proc.full_name,
                proc.module,
                f"[{crud_color(proc.crud_type)}]{proc.crud_type}[/]",
                f"[{complexity_color(proc.complexity)}]{proc.complexity}[/]",
                str(proc.line_count),
                str(len(proc.tables_referenced)),
                truncate(flag_list(proc.anti_patterns.to_dict()), 60),
            )

        self.console.print(table)

    def print_procedure(self, proc: ClassifiedProcedure, show_body: bool = False) -> None:
        """Print every derived fact for one procedure."""
        self.console.print(
            Panel(
                f"[bold]{proc.full_name}[/bold]\n"
                f"Module: {proc.module} ({proc.module_strategy})\n"
                f"CRUD: [{crud_color(proc.crud_type)}]{proc.crud_type}[/]\n"
                f"Complexity: [{complexity_color(proc.complexity)}]{proc.complexity}[/]\n"
                f"Lines: {proc.line_count} (starts at line {proc.start_line})",
                title="Procedure",
            )
        )

        if proc.parameters:
            table = Table(title="Parameters")
            table.add_column("Name")
            table.add_column("Type")
            table.add_column("Direction")
            table.add_column("Default")
            for param in proc.parameters:
                table.add_row(
                    param.name,
                    param.data_type + (" READONLY" if param.is_readonly else ""),
                    param.direction,
                    param.default_value or "",
                )
            self.console.print(table)

        flags = flag_list(proc.anti_patterns.to_dict())
        self.console.print(f"\n[bold]Anti-patterns:[/bold] {flags or 'none'}")
        if proc.anti_patterns.nolock_count:
            self.console.print(f"[bold]NOLOCK hints:[/bold] {proc.anti_patterns.nolock_count}")
        self._print_list("Tables", proc.tables_referenced)
        self._print_list("Calls", proc.sprocs_called)
        self._print_list("Called by procedures", proc.called_by_sprocs)
        self._print_list("Called from code", proc.called_from_code)

        if show_body:
            self.console.print(Panel(Text(proc.body), title="Body"))

    def _print_list(self, label: str, items: list[str]) -> None:
        if items:
            self.console.print(f"[bold]{label}:[/bold] {', '.join(items)}")

    def print_call_graph(self) -> None:
        """Print recursive cycles, hotspots and unresolved calls."""
        graph = self.catalog.call_graph
        self.console.print(
            Panel(
                f"[bold]Call edges:[/bold] {graph.get('edgeCount', 0)}\n"
                f"[bold]Cycles:[/bold] {len(graph.get('cycles', []))}\n"
                f"[bold]Unresolved calls:[/bold] {len(graph.get('unresolvedCalls', []))}",
                title="Call Graph",
            )
        )

        cycles = graph.get("cycles", [])
        if cycles:
            table = Table(title=f"Recursive Call Cycles ({len(cycles)})")
            table.add_column("Cycle")
            for cycle in cycles:
                table.add_row(" -> ".join(cycle + cycle[:1]))
            self.console.print(table)

        self._print_hotspots()

        unresolved = graph.get("unresolvedCalls", [])
        if unresolved:
            self.console.print(
                f"\n[bold]Not in dump:[/bold] {truncate(', '.join(unresolved), 200)}"
            )
