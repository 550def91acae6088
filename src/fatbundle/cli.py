"""fatbundle CLI entry point."""

import json
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from fatbundle import __version__
from fatbundle.config import (
    FatBundleConfig,
    get_config_path,
    get_default_config,
    load_config,
    save_config,
)
from fatbundle.errors import FatBundleError, InspectionError
from fatbundle.pipeline import RunSummary, discover, tool_from_config, validate_roots
from fatbundle.pipeline import run as run_pipeline
from fatbundle.utils.logging import setup_logging

console = Console()

EXIT_FAILURES = 1
EXIT_FATAL = 2

TREE_PATH = click.Path(exists=True, file_okay=False, path_type=Path)


def print_success(message: str) -> None:
    """Print success message."""
    console.print(f"[green]✓[/green] {message}")


def print_error(message: str, detail: str | None = None) -> None:
    """Print error message."""
    console.print(f"[red]✗[/red] {message}")
    if detail:
        console.print(f"  [dim]{escape(detail)}[/dim]")


def print_warning(message: str) -> None:
    """Print warning message."""
    console.print(f"[yellow]⚠[/yellow] {message}")


def _load(
    config_path: Path | None,
    verbose: bool,
    log_file: Path | None = None,
    quiet: bool = False,
) -> FatBundleConfig:
    config = load_config(config_path)
    # JSON output owns the terminal
    setup_logging("DEBUG" if verbose else config.log_level, log_file=log_file, console=not quiet)
    return config


def print_summary(summary: RunSummary) -> None:
    """Print the result panel of a fuse run."""
    fusion = summary.fusion
    title = "DRY RUN" if summary.dry_run else "FUSION COMPLETE"
    color = "green" if summary.ok else "red"

    lines = [
        f"[bold {color}]{title}[/bold {color}]",
        "",
        f"  Primary: {summary.primary}",
        f"  Secondary: {summary.secondary}",
        f"  Pairs found: {len(summary.pairs):,}",
        f"  Already fat: {len(summary.already_fat):,}",
    ]
    if fusion is not None:
        if summary.dry_run:
            lines.append(f"  Planned: {len(fusion.planned):,}")
        else:
            lines.append(f"  Fused: {len(fusion.fused):,}")
        lines.append(f"  Errors: {len(fusion.failures)}")
    copied = sum(len(r.copied) for r in summary.copy_back)
    if summary.copy_back:
        lines.append(f"  Copied back: {copied}")
    if summary.signing is not None:
        lines.append(f"  Signed: {summary.signing.bundle.name}")

    console.print(Panel.fit("\n".join(lines), border_style=color))

    if fusion is not None and fusion.failures:
        console.print("\n[red]Errors:[/red]")
        for failure in fusion.failures:
            console.print(f"  [dim]{failure.message}[/dim]")
    for result in summary.copy_back:
        for err in result.errors:
            console.print(f"  [dim]{err}[/dim]")
    if summary.signing_error:
        print_error("Signing failed", summary.signing_error)


@click.group()
@click.version_option(version=__version__, prog_name="fatbundle")
def main() -> None:
    """fatbundle: fuse an arm64 and an x86_64 app build into one universal bundle.

    The primary tree is rewritten in place; the secondary tree is only read.
    """
    pass


@main.command()
@click.option("--primary", "--arm", "primary", required=True, type=TREE_PATH,
              help="Primary build tree (fused in place)")
@click.option("--secondary", "--intel", "secondary", required=True, type=TREE_PATH,
              help="Secondary build tree (read only)")
@click.option("--dry-run", "--preview", "dry_run", is_flag=True,
              help="Show what would change without writing anything")
@click.option("--sign", "identity", default=None,
              help="Codesign identity for the final bundle ('-' for ad-hoc)")
@click.option("--config", "config_path", type=click.Path(dir_okay=False, path_type=Path),
              help="Configuration file")
@click.option("--no-copy-back", is_flag=True, help="Skip copying files back from the secondary tree")
@click.option("--strict", is_flag=True, help="Abort when a candidate cannot be inspected")
@click.option("--log-file", type=click.Path(dir_okay=False, path_type=Path), help="Also log to this file")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.option("--verbose", "-v", is_flag=True, help="Debug logging")
def fuse(
    primary: Path,
    secondary: Path,
    dry_run: bool,
    identity: str | None,
    config_path: Path | None,
    no_copy_back: bool,
    strict: bool,
    log_file: Path | None,
    as_json: bool,
    verbose: bool,
) -> None:
    """Fuse the secondary build into the primary build."""
    try:
        config = _load(config_path, verbose, log_file, quiet=as_json)
        if strict:
            config.fusion.strict_inspection = True
        summary = run_pipeline(
            primary,
            secondary,
            config=config,
            tool=tool_from_config(config),
            dry_run=dry_run,
            identity=identity,
            copy_back=not no_copy_back,
        )
    except FatBundleError as e:
        print_error("Run aborted", str(e))
        sys.exit(EXIT_FATAL)

    if as_json:
        click.echo(json.dumps(summary.to_dict(), indent=2))
    else:
        print_summary(summary)

    if not summary.ok:
        sys.exit(EXIT_FAILURES)


@main.command()
@click.option("--primary", "--arm", "primary", required=True, type=TREE_PATH,
              help="Primary build tree")
@click.option("--secondary", "--intel", "secondary", required=True, type=TREE_PATH,
              help="Secondary build tree")
@click.option("--config", "config_path", type=click.Path(dir_okay=False, path_type=Path),
              help="Configuration file")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.option("--verbose", "-v", is_flag=True, help="Debug logging")
def scan(primary: Path, secondary: Path, config_path: Path | None, as_json: bool, verbose: bool) -> None:
    """List the binaries that would be fused, without fusing."""
    try:
        config = _load(config_path, verbose, quiet=as_json)
        primary, secondary = validate_roots(primary, secondary)
        collector = discover(primary, secondary, config, tool_from_config(config))
    except FatBundleError as e:
        print_error("Scan aborted", str(e))
        sys.exit(EXIT_FATAL)

    pairs = collector.pairs
    if as_json:
        click.echo(json.dumps({
            "pairs": [p.to_dict() for p in pairs],
            "already_fat": [str(p) for p in collector.already_fat],
            "skipped": dict(collector.skipped),
        }, indent=2))
        return

    if not pairs:
        print_warning("No single-architecture binaries found")
        return

    table = Table(title=f"Pairs ({len(pairs)})")
    table.add_column("#", justify="right", style="dim")
    table.add_column("Binary", style="cyan")
    table.add_column("Counterpart", justify="center")

    for i, pair in enumerate(pairs, 1):
        found = "[green]✓[/green]" if pair.secondary_path.is_file() else "[red]missing[/red]"
        table.add_row(str(i), str(pair.relative_path), found)

    console.print(table)
    if collector.already_fat:
        console.print(f"[dim]{len(collector.already_fat)} already fat[/dim]")


@main.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--config", "config_path", type=click.Path(dir_okay=False, path_type=Path),
              help="Configuration file")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def inspect(file: Path, config_path: Path | None, as_json: bool) -> None:
    """Show the architectures contained in FILE."""
    try:
        info = tool_from_config(load_config(config_path)).inspect(file)
    except InspectionError as e:
        print_error("Cannot inspect file", str(e))
        sys.exit(EXIT_FAILURES)
    except FatBundleError as e:
        print_error("Inspection tool failed", str(e))
        sys.exit(EXIT_FATAL)

    if as_json:
        click.echo(json.dumps(info.to_dict(), indent=2))
        return

    kind = "[green]fat[/green]" if info.is_fat else "[yellow]non-fat[/yellow]"
    console.print(f"{file.name}: {kind} ({', '.join(info.architectures) or 'unknown'})")


@main.command()
@click.option("--path", "config_path", type=click.Path(dir_okay=False, path_type=Path),
              help="Where to write the configuration")
@click.option("--force", is_flag=True, help="Overwrite an existing file")
def init(config_path: Path | None, force: bool) -> None:
    """Write the default configuration file."""
    config_path = config_path or get_config_path()

    if config_path.exists() and not force:
        print_warning(f"Config already exists: {config_path}")
        console.print("Use [cyan]--force[/cyan] to overwrite")
        return

    save_config(get_default_config(), config_path)
    print_success(f"Configuration initialized: {config_path}")


if __name__ == "__main__":
    main()
