"""CLI entry point for SprocForensic using Click."""

from __future__ import annotations

import logging
import sys
from typing import Any

import click
from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn

from sprocforensic import SprocForensic, __version__
from sprocforensic.builders.catalog_builder import ProcedureCatalog
from sprocforensic.classifiers.complexity import COMPLEXITY_TIERS
from sprocforensic.config import AnalysisConfig, ModuleRules, SourceConfig, load_module_rules
from sprocforensic.reporters.console_reporter import ConsoleReporter

console = Console()


def _build_forensic(params: dict[str, Any]) -> SprocForensic:
    """Build a SprocForensic instance from command options, exiting on bad input."""
    source = SourceConfig(
        input_path=params.get("input_path") or "",
        encoding=params.get("encoding") or "utf-16",
        tables_path=params.get("tables") or "",
        cross_reference_path=params.get("cross_reference") or "",
        export_date=params.get("export_date") or "",
    )
    analysis = AnalysisConfig(
        preview_lines=params.get("preview_lines", 20),
        workers=params.get("workers", 1),
    )
    errors = source.validate() + analysis.validate()

    rules: ModuleRules | None = None
    rules_path = params.get("module_rules")
    if rules_path:
        try:
            rules = load_module_rules(rules_path)
        except (OSError, ValueError) as exc:
            errors.append(f"Could not load module rules: {exc}")

    if errors:
        for err in errors:
            console.print(f"[red]Error:[/red] {err}")
        sys.exit(1)

    return SprocForensic(
        input_path=source.input_path,
        encoding=source.encoding,
        tables_path=source.tables_path,
        cross_reference_path=source.cross_reference_path,
        module_rules=rules,
        export_date=source.export_date,
        workers=analysis.workers,
        preview_lines=analysis.preview_lines,
    )


def _run_analysis(params: dict[str, Any]) -> ProcedureCatalog:
    _configure_logging(params.get("verbose", False))
    forensic = _build_forensic(params)

    with Progress(
        SpinnerColumn(),
        TextColumn("[bold blue]{task.description}"),
        console=console,
    ) as progress:
        task = progress.add_task("Analyzing stored procedures...", total=None)
        try:
            catalog = forensic.analyze()
        except (OSError, UnicodeError) as exc:
            progress.stop()
            console.print(
                f"[red]Error:[/red] Could not read {forensic.source_config.input_path}: {exc}"
            )
            sys.exit(1)
        progress.update(task, description="Analysis complete!")

    return catalog


# Common source options
def source_options(func: Any) -> Any:
    """Decorator that adds the dump and collaborator options to a command."""
    func = click.option(
        "--input",
        "-i",
        "input_path",
        required=True,
        help="T-SQL object-creation script (DDL dump)",
    )(func)
    func = click.option(
        "--encoding", "-e", default="utf-16", show_default=True, help="Dump file encoding"
    )(func)
    func = click.option("--tables", "-t", default="", help="Known-tables JSON file")(func)
    func = click.option(
        "--cross-reference", "-x", default="", help="Code caller cross-reference JSON file"
    )(func)
    func = click.option("--module-rules", "-m", default="", help="Module rules JSON file")(func)
    func = click.option(
        "--workers", "-w", type=int, default=1, show_default=True, help="Worker processes"
    )(func)
    func = click.option(
        "--preview-lines",
        type=int,
        default=20,
        show_default=True,
        help="Body lines kept in the catalog preview",
    )(func)
    func = click.option("--export-date", default="", help="Export date (YYYY-MM-DD)")(func)
    func = click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging")(func)
    return func


@click.group()
@click.version_option(version=__version__, prog_name="sprocforensic")
def main() -> None:
    """SprocForensic — stored procedure catalog builder.

    Extracts every stored procedure from a scripted SQL Server dump,
    classifies it and writes a machine-readable catalog grouped by module.
    """


@main.command()
@source_options
@click.option(
    "--output", "-o", default="generated", show_default=True, help="Output directory"
)
@click.option("--quiet", "-q", is_flag=True, help="Skip the console summary")
def scan(**kwargs: Any) -> None:
    """Run the full pipeline and write the JSON catalog."""
    from sprocforensic.reporters.json_reporter import JSONReporter

    catalog = _run_analysis(kwargs)
    written = JSONReporter(catalog).export(kwargs["output"])

    if not kwargs.get("quiet"):
        ConsoleReporter(catalog, console).print_report()

    console.print(f"\n[green]Catalog saved to:[/green] {written[0]}")
    console.print(f"[green]Module body files:[/green] {len(written) - 1}")


@main.command()
@source_options
def modules(**kwargs: Any) -> None:
    """List modules with procedure counts."""
    catalog = _run_analysis(kwargs)
    ConsoleReporter(catalog, console).print_modules()


@main.command()
@source_options
@click.option("--module", "module_prefix", default=None, help="Only this module prefix")
@click.option(
    "--complexity",
    "-c",
    default=None,
    type=click.Choice(COMPLEXITY_TIERS),
    help="Only this complexity tier",
)
@click.option("--limit", "-n", type=int, default=30, show_default=True, help="Rows to show")
def procedures(**kwargs: Any) -> None:
    """List procedures, most complex first."""
    catalog = _run_analysis(kwargs)
    ConsoleReporter(catalog, console).print_procedures(
        module=kwargs.get("module_prefix"),
        complexity=kwargs.get("complexity"),
        limit=kwargs["limit"],
    )


@main.command()
@source_options
@click.option("--name", "-n", required=True, help="Procedure name (bare or schema-qualified)")
@click.option("--body", "show_body", is_flag=True, help="Print the full body")
def show(**kwargs: Any) -> None:
    """Show everything known about one procedure."""
    catalog = _run_analysis(kwargs)
    matches = catalog.find(kwargs["name"])
    if not matches:
        console.print(f"[red]Error:[/red] Procedure not found: {kwargs['name']}")
        sys.exit(1)

    reporter = ConsoleReporter(catalog, console)
    for proc in matches:
        reporter.print_procedure(proc, show_body=kwargs.get("show_body", False))


@main.command()
@source_options
def callgraph(**kwargs: Any) -> None:
    """Show recursive call cycles and the most called procedures."""
    catalog = _run_analysis(kwargs)
    ConsoleReporter(catalog, console).print_call_graph()


def _configure_logging(verbose: bool) -> None:
    """Configure logging level."""
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


if __name__ == "__main__":
    main()
