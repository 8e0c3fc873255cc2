"""
dotviz CLI

Command-line interface for the .NET dependency graph generator.
Provides commands for graphing solution/project references and
dependency-injection registrations.

Commands:
    dotviz graph [INPUTS]...   Build a DOT (and optionally Mermaid/SVG) graph
    dotviz services <file>     Graph DI registrations listed in a JSON file

Usage:
    $ dotviz graph MySolution.sln --packages --edge-label
    $ dotviz graph --folder ./src --per-project --mermaid
    $ dotviz services registrations.json --svg
"""

import json
import logging
from pathlib import Path
from typing import Optional

import typer
from rich import box
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.panel import Panel
from rich.progress import BarColumn, Progress, SpinnerColumn, TaskProgressColumn, TextColumn
from rich.table import Table

from dotviz import __version__
from dotviz.config import determine_output_path, make_config
from dotviz.errors import DotvizError, InvalidConfigurationError, ProjectLoadError
from dotviz.graph import GraphBuilder, build_service_graph, extract_per_root
from dotviz.models import Graph, ServiceFact, ServiceLifetime
from dotviz.msbuild import discover_projects, load_projects, root_ids
from dotviz.render import render_image, write_dot, write_mermaid

# Initialize Typer app and Rich console
app = typer.Typer(
    name="dotviz",
    help="dotviz: .NET dependency graph generator",
    add_completion=False,
)
console = Console()


def _fail(error: Exception) -> None:
    console.print(f"[bold red]Error:[/bold red] {escape(str(error))}")
    raise typer.Exit(1)


@app.command()
def graph(
    inputs: Optional[list[Path]] = typer.Argument(
        None,
        help="One or more .sln / .csproj paths. If omitted, --folder must be supplied.",
    ),
    folder: Optional[Path] = typer.Option(
        None,
        "--folder",
        help="Scan folder recursively for project files",
        file_okay=False,
        dir_okay=True,
    ),
    output: Optional[Path] = typer.Option(
        None,
        "--output",
        "-o",
        help="Output .dot file (defaults to <input>.dot); directory of the graphs with --per-project",
    ),
    packages: bool = typer.Option(False, "--packages", help="Include NuGet packages"),
    package_scope: str = typer.Option(
        "direct",
        "--package-scope",
        help="direct (only <PackageReference/>) | all (transitive). Ignored without --packages.",
    ),
    edge_label: bool = typer.Option(
        False, "--edge-label", help="Write 'PackageReference' or 'Reference' labels on edges."
    ),
    exclude: Optional[str] = typer.Option(
        None,
        "--exclude",
        help="Comma-separated glob patterns. Matching projects or packages are omitted.",
    ),
    collapse_matching: bool = typer.Option(
        False,
        "--collapse-matching",
        help="Draw a package named like a project as a coloured project => project edge.",
    ),
    self_ref: str = typer.Option("Hide", "--self-ref", help="Hide | Show | Highlight"),
    per_project: bool = typer.Option(
        False, "--per-project", help="Emit one graph per project instead of one combined graph."
    ),
    mermaid: bool = typer.Option(
        False, "--mermaid", help="Generate a Mermaid .mmd file instead of DOT"
    ),
    svg: bool = typer.Option(False, "--svg", help="Render an image via Graphviz"),
    image_format: str = typer.Option("svg", "--image-format", help="Graphviz output format"),
) -> None:
    """
    Build a dependency graph for solutions and projects.

    This command:
    1. Resolves every project reachable from the inputs
    2. Reads lock files when packages are requested
    3. Applies exclusion, self-reference and collapsing policy
    4. Writes DOT and/or Mermaid text, optionally rendering an image
    """
    try:
        config = make_config(
            include_packages=packages,
            package_scope=package_scope,
            edge_labels=edge_label,
            exclude=exclude,
            collapse_matching=collapse_matching,
            self_reference=self_ref,
        )
        roots = list(inputs or [])
        if folder is not None:
            roots = discover_projects(folder) + roots
        if not roots:
            raise InvalidConfigurationError("Nothing to analyse: supply paths or --folder.")

        if per_project:
            _run_per_project(roots, config, output, folder, mermaid, svg, image_format)
        else:
            _run_single(roots, config, output, folder, inputs or [], mermaid, svg, image_format)
    except (DotvizError, OSError) as e:
        _fail(e)


def _run_single(roots, config, output, folder, inputs, mermaid, svg, image_format) -> None:
    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=console,
    ) as progress:
        task = progress.add_task("Building dependency graph...", total=None)

        facts = load_projects(roots, with_packages=config.include_packages)
        result = GraphBuilder(config).build(facts)

        progress.update(task, description="Writing files...")
        dot_file = determine_output_path(output, inputs, folder)
        written = _write_outputs(result, dot_file, mermaid, svg, image_format)

        progress.update(task, description="Done!")

    console.print()
    _print_graph_summary(len(facts), result, written)


def _run_per_project(roots, config, output, folder, mermaid, svg, image_format) -> None:
    console.print("Building dependency graph...")

    facts = load_projects(roots, with_packages=config.include_packages)
    full = GraphBuilder(config).build(facts)
    subgraphs = extract_per_root(full, root_ids(roots))

    if output is not None:
        out_dir = output.parent if output.suffix else output
    elif folder is not None:
        out_dir = folder
    else:
        out_dir = Path.cwd()

    written: list[Path] = []
    with Progress(
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        TaskProgressColumn(),
        SpinnerColumn(),
        console=console,
    ) as progress:
        task = progress.add_task("Writing graphs", total=len(subgraphs))
        for name, subgraph in subgraphs:
            written.extend(
                _write_outputs(subgraph, out_dir / f"{name}.dot", mermaid, svg, image_format)
            )
            progress.advance(task)

    console.print()
    _print_graph_summary(len(facts), full, written)


def _write_outputs(result: Graph, dot_file: Path, mermaid: bool, svg: bool, image_format: str) -> list[Path]:
    """Write the DOT file unless Mermaid replaces it, then the .mmd and image."""
    written = []
    if not mermaid or svg:
        written.append(write_dot(result, dot_file))
    if mermaid:
        written.append(write_mermaid(result, dot_file.with_suffix(".mmd")))
    if svg:
        written.append(render_image(dot_file, dot_file.with_suffix(f".{image_format}"), image_format))
    return written


@app.command()
def services(
    path: Path = typer.Argument(
        ...,
        help="JSON file with a list of {service, implementation, lifetime} registrations",
        exists=True,
        file_okay=True,
        dir_okay=False,
        resolve_path=True,
    ),
    output: Optional[Path] = typer.Option(
        None,
        "--output",
        "-o",
        help="Output .dot file (defaults to <file>.dot)",
    ),
    svg: bool = typer.Option(False, "--svg", help="Render an SVG via Graphviz"),
) -> None:
    """
    Graph dependency-injection registrations.

    Implementations are colored by lifetime: singleton, scoped, transient.
    """
    try:
        registrations = _load_services(path)
        result = build_service_graph(registrations)
        dot_file = output or path.with_suffix(".dot")
        written = _write_outputs(result, dot_file, mermaid=False, svg=svg, image_format="svg")
    except (DotvizError, OSError) as e:
        _fail(e)

    _print_graph_summary(len(registrations), result, written, label="Registrations")


def _load_services(path: Path) -> list[ServiceFact]:
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except ValueError as e:
        raise ProjectLoadError(f"Cannot parse {path}: {e}") from e
    if not isinstance(raw, list):
        raise ProjectLoadError(f"{path} must contain a JSON list of registrations")

    registrations = []
    for entry in raw:
        try:
            lifetime = ServiceLifetime(str(entry.get("lifetime", "Transient")).capitalize())
            registrations.append(
                ServiceFact(
                    service=entry["service"],
                    implementation=entry.get("implementation"),
                    lifetime=lifetime,
                )
            )
        except (KeyError, ValueError, AttributeError) as e:
            raise ProjectLoadError(f"Invalid registration {entry!r} in {path}: {e}") from e
    return registrations


# Helper functions for output formatting

def _print_graph_summary(inputs: int, result: Graph, written: list[Path], label: str = "Projects") -> None:
    """Print a summary panel after writing graphs."""
    table = Table(box=box.SIMPLE, show_header=False)
    table.add_column("Label", style="dim")
    table.add_column("Value", style="bold")

    table.add_row(label, str(inputs))
    table.add_row("Nodes", str(result.node_count))
    table.add_row("Edges", str(result.edge_count))
    for path in written:
        table.add_row("Written", str(path))

    panel = Panel(table, title="[bold green]✔ Graph Complete[/bold green]", border_style="green")
    console.print(panel)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


# Version command
@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    version: bool = typer.Option(
        False,
        "--version",
        "-v",
        help="Show version and exit",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        help="Log every skipped project and package",
    ),
) -> None:
    """
    dotviz: .NET dependency graph generator.
    """
    _configure_logging(verbose)
    if version:
        console.print(f"[bold]dotviz[/bold] version {__version__}")
        raise typer.Exit()
    if ctx.invoked_subcommand is None:
        console.print(ctx.get_help())
        raise typer.Exit()


if __name__ == "__main__":
    app()
