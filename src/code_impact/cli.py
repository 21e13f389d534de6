"""Command-line interface for code-impact."""

import json
import logging
import os
from pathlib import Path
from typing import Dict, List, Optional

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table
from rich.traceback import install

from .analyzers import DependencyTracker, ImpactResult, build_graph, compute_impact
from .core import load_graph, save_graph
from .core.diff_parser import DEFAULT_RANGE, get_changed_files, get_changed_ranges
from .core.graph import SNAPSHOT_DIR
from .exceptions import CodeImpactError

# Set up rich error handling
install()
console = Console()
err_console = Console(stderr=True)

TYPE_STYLES = {'pkg': 'cyan', 'style': 'magenta', 'asset': 'yellow', 'code': 'green'}


def _parse_list(ctx, param, value: Optional[str]) -> Optional[List[str]]:
    if not value:
        return None
    return [v.strip() for v in value.split(',') if v.strip()]


def _filter_targets(paths: List[str]) -> List[str]:
    """Drop the tool's own output files from a change set."""
    kept = []
    for p in paths:
        norm = p.replace('\\', '/')
        if f'/{SNAPSHOT_DIR}/' in norm or norm.startswith(f'{SNAPSHOT_DIR}/'):
            continue
        if norm.endswith('impact.mmd'):
            continue
        kept.append(p)
    return kept


def to_mermaid(result: ImpactResult) -> str:
    """Render an impact result as a Mermaid flowchart."""
    ids: List[str] = []
    for node_id in sorted(result.seeds) + [r.id for r in result.results]:
        if node_id not in ids:
            ids.append(node_id)
    for edge in result.edges:
        for node_id in (edge.source, edge.target):
            if node_id not in ids:
                ids.append(node_id)

    aliases: Dict[str, str] = {node_id: f"n{i}" for i, node_id in enumerate(ids)}
    lines = ['graph LR']
    for node_id in ids:
        label = node_id.replace('"', '\\"')
        lines.append(f'  {aliases[node_id]}["{label}"]')
    for edge in result.edges:
        label = '|dynamic|' if edge.dynamic else ''
        lines.append(f'  {aliases[edge.source]} -->{label} {aliases[edge.target]}')

    seed_ids = [aliases[s] for s in sorted(result.seeds)]
    impact_ids = [aliases[r.id] for r in result.results]
    lines.append('  classDef seed fill:#ffd166,stroke:#d49b00,stroke-width:1.5px;')
    lines.append('  classDef impact fill:#ef476f,color:#fff;')
    if seed_ids:
        lines.append(f"  class {','.join(seed_ids)} seed;")
    if impact_ids:
        lines.append(f"  class {','.join(impact_ids)} impact;")
    return '\n'.join(lines)


def _display_impact_table(result: ImpactResult, tracker: Optional[DependencyTracker] = None,
                          include_dynamic: bool = True) -> None:
    table = Table(title="Impacted files")
    table.add_column("Distance", justify="right")
    table.add_column("Type")
    table.add_column("Path / package", overflow="fold")
    if tracker:
        table.add_column("Import chain", overflow="fold", style="dim")
    for r in result.results:
        style = TYPE_STYLES.get(r.type, 'green')
        row = [str(r.distance), f"[{style}]{r.type}[/{style}]", r.id]
        if tracker:
            chain = tracker.explain_impact(r.id, result.seeds, include_dynamic=include_dynamic)
            row.append(" → ".join(chain) if chain else "")
        table.add_row(*row)
    console.print(table)


def _display_summary(graph) -> None:
    metrics = DependencyTracker(graph).calculate_metrics()
    table = Table(title="Dependency graph")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right")
    table.add_row("Nodes", str(metrics.total_nodes))
    for node_type, count in sorted(metrics.nodes_by_type.items()):
        table.add_row(f"  {node_type}", str(count))
    table.add_row("Edges", str(metrics.total_edges))
    for kind, count in sorted(metrics.edges_by_kind.items()):
        table.add_row(f"  {kind}", str(count))
    table.add_row("Dynamic edges", str(metrics.dynamic_edges))
    table.add_row("Import cycles", str(metrics.circular_dependencies))
    table.add_row("Errors", str(metrics.parse_errors))
    console.print(table)

    if metrics.most_imported:
        top = Table(title="Most imported")
        top.add_column("Node", style="green", overflow="fold")
        top.add_column("Dependents", justify="right")
        for node_id, count in metrics.most_imported:
            top.add_row(node_id, str(count))
        console.print(top)


@click.group()
@click.option('--verbose', '-v', is_flag=True, help='Enable debug logging')
def cli(verbose):
    """code-impact - dependency graph and change impact analysis for front-end projects.

    USAGE:
        code-impact build-graph                     # Scan src/ and packages/*/src
        code-impact impact --files src/a.ts         # What depends on src/a.ts?
        code-impact impact --git-diff HEAD~3..HEAD  # Impact of the last three commits
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True
    )


@cli.command('build-graph')
@click.option('--project-root', type=click.Path(exists=True, file_okay=False), default='.',
              help='Project root (default: current directory)')
@click.option('--root', 'roots', callback=_parse_list, help='Comma separated source roots')
@click.option('--webpack-config', help='Path to the webpack config (default: webpack.config.*)')
@click.option('--summary/--no-summary', default=True, help='Print graph statistics')
def build_graph_command(project_root, roots, webpack_config, summary):
    """Scan sources and write the dependency graph snapshot."""
    try:
        graph = build_graph(project_root, roots=roots, bundler_config=webpack_config)
        out = save_graph(graph, project_root)
    except CodeImpactError as e:
        err_console.print(f"[red]Build failed:[/red] {e}")
        raise click.Abort()

    console.print(f"[green]Dependency graph written to {out}[/green]")
    if summary:
        _display_summary(graph)
    if graph.errors:
        console.print(f"[yellow]{len(graph.errors)} files could not be analyzed; "
                      f"see the errors field of the snapshot[/yellow]")


@cli.command()
@click.option('--project-root', type=click.Path(exists=True, file_okay=False), default='.',
              help='Project root (default: current directory)')
@click.option('--files', callback=_parse_list, help='Comma separated list of changed files')
@click.option('--git-diff', 'git_range', default=DEFAULT_RANGE, show_default=True,
              help='Revision range used when --files is not given')
@click.option('--depth', type=click.IntRange(min=0), default=None, help='Maximum distance (default: unbounded)')
@click.option('--format', '-f', 'output_format', type=click.Choice(['table', 'json', 'mermaid']),
              default='table', help='Output format')
@click.option('--include-dynamic', is_flag=True, help='Follow dynamic import() edges')
@click.option('--output', '-o', type=click.Path(dir_okay=False), help='Write the output to a file')
@click.option('--explain', is_flag=True, help='Show the import chain that leads to each impacted file (table format)')
def impact(project_root, files, git_range, depth, output_format, include_dynamic, output, explain):
    """Show what is affected by a set of changed files."""
    # Progress messages go to stderr so json/mermaid output stays clean
    status = console if output_format == 'table' else err_console
    root = os.path.abspath(project_root)

    if files:
        targets = [os.path.join(root, f) for f in files]
    else:
        targets = get_changed_files(root, git_range)
        if not targets:
            status.print("[yellow]git diff found no changed files[/yellow]")
            return
        status.print(f"[cyan]Using git diff range {git_range}: {len(targets)} changed files[/cyan]")

    targets = _filter_targets(targets)
    if not targets:
        status.print(f"[yellow]No changed files left after ignoring {SNAPSHOT_DIR} and impact.mmd[/yellow]")
        return

    try:
        graph = load_graph(project_root)
        result = compute_impact(graph, targets, include_dynamic=include_dynamic, depth=depth,
                                project_root=root)
    except CodeImpactError as e:
        err_console.print(f"[red]Analysis failed:[/red] {e}")
        raise click.Abort()

    if output_format == 'table':
        tracker = DependencyTracker(graph) if explain else None
        _display_impact_table(result, tracker, include_dynamic)
        return

    text = json.dumps(result.to_dict(), indent=2) if output_format == 'json' else to_mermaid(result)
    if output:
        Path(output).write_text(text + '\n', encoding='utf-8')
        status.print(f"📄 Results saved to {output}")
    else:
        click.echo(text)


@cli.command('changed-lines')
@click.option('--project-root', type=click.Path(exists=True, file_okay=False), default='.',
              help='Project root (default: current directory)')
@click.option('--git-diff', 'git_range', default=DEFAULT_RANGE, show_default=True, help='Revision range')
@click.option('--files', callback=_parse_list, help='Comma separated list of files to restrict the diff to')
def changed_lines(project_root, git_range, files):
    """Print changed line ranges per file as JSON."""
    ranges = get_changed_ranges(project_root, git_range, files or [])
    data = {path: [r.to_dict() for r in hunks] for path, hunks in sorted(ranges.items())}
    click.echo(json.dumps(data, indent=2))


@cli.command()
@click.option('--project-root', type=click.Path(exists=True, file_okay=False), default='.',
              help='Project root (default: current directory)')
@click.option('--json', 'as_json', is_flag=True, help='Output JSON')
def summary(project_root, as_json):
    """Show statistics of the saved dependency graph."""
    try:
        graph = load_graph(project_root)
    except CodeImpactError as e:
        err_console.print(f"[red]{e}[/red]")
        raise click.Abort()

    if as_json:
        metrics = DependencyTracker(graph).calculate_metrics()
        click.echo(json.dumps(metrics.to_dict(), indent=2))
    else:
        _display_summary(graph)


if __name__ == '__main__':
    cli()
