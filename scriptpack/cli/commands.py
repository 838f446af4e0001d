"""CLI commands for scriptpack."""

import sys
from pathlib import Path

import typer
from loguru import logger
from rich.console import Console
from rich.table import Table

from scriptpack import __logo__, __version__
from scriptpack.errors import PackagingError

app = typer.Typer(
    name="scriptpack",
    help=f"{__logo__} scriptpack - Package userscripts as browser extensions",
    no_args_is_help=False,
    invoke_without_command=True,
)

console = Console()


def _configure_logging(verbose: bool) -> None:
    logger.remove()
    # Resolve stderr per message so redirected streams (tests, pipes) are honored.
    logger.add(lambda message: sys.stderr.write(message), level="DEBUG" if verbose else "INFO")


def version_callback(value: bool):
    if value:
        console.print(f"{__logo__} scriptpack v{__version__}")
        raise typer.Exit()


def _run_build(
    config_path: Path | None,
    source_dir: Path | None,
    targets: list[str] | None,
    verbose: bool,
) -> None:
    from scriptpack.config.loader import load_config
    from scriptpack.pipeline import run_build

    _configure_logging(verbose)
    try:
        config = load_config(config_path)
        results = run_build(config, source_dir=source_dir, targets=targets or None)
    except PackagingError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    table = Table(title="Packages")
    table.add_column("Target", style="cyan")
    table.add_column("Archive", style="green")
    table.add_column("Size", justify="right")
    for r in results:
        table.add_row(r.target, str(r.archive), f"{r.archive.stat().st_size:,} bytes")
    console.print(table)
    console.print(f"[green]✓[/green] Built {len(results)} package(s)")


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    version: bool = typer.Option(
        None, "--version", "-V", callback=version_callback, is_eager=True
    ),
):
    """scriptpack - Package userscripts as browser extensions."""
    if ctx.invoked_subcommand is not None:
        return

    # No subcommand: run the whole pipeline with the default configuration.
    _run_build(None, None, None, verbose=False)


@app.command()
def build(
    config_path: Path | None = typer.Option(
        None, "--config", "-c", help="Config file (default: ./scriptpack.json)"
    ),
    source_dir: Path | None = typer.Option(
        None, "--source-dir", "-s", help="Use a local checkout instead of cloning"
    ),
    target: list[str] = typer.Option(
        [], "--target", "-t", help="Build only this target (repeatable)"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
):
    """Clone, assemble and archive every configured target."""
    _run_build(config_path, source_dir, target, verbose)


@app.command()
def metadata(
    script: Path = typer.Argument(..., help="Path to the userscript"),
):
    """Show the header metadata extracted from a userscript."""
    from scriptpack.metadata import extract_metadata

    _configure_logging(False)
    try:
        meta = extract_metadata(script)
    except PackagingError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    table = Table(title=f"Metadata: {script.name}")
    table.add_column("Tag", style="cyan")
    table.add_column("Value")
    for tag in ("name", "version", "author", "description"):
        value = getattr(meta, tag)
        table.add_row(f"@{tag}", value or "[red]missing[/red]")
    console.print(table)

    if not meta.is_complete:
        raise typer.Exit(1)


@app.command()
def manifest(
    script: Path = typer.Argument(..., help="Path to the userscript"),
    variant: str = typer.Option("v3", "--variant", help="Manifest version: v2 or v3"),
    gecko_id: str | None = typer.Option(
        None, "--gecko-id", help="Add a Firefox browser_specific_settings.gecko block"
    ),
    extra: str = typer.Option(
        "", "--extra", help="Raw JSON fragment of extra top-level keys"
    ),
    config_path: Path | None = typer.Option(None, "--config", "-c", help="Config file"),
):
    """Print the manifest.json generated for a userscript."""
    from scriptpack.config.loader import load_config
    from scriptpack.config.schema import GeckoSettings, ManifestVariant
    from scriptpack.manifest import build_manifest_text, gecko_properties, parse_additional_properties
    from scriptpack.metadata import extract_metadata

    _configure_logging(False)
    try:
        mv = ManifestVariant(variant.strip().lower())
    except ValueError:
        console.print(f"[red]Unknown variant '{variant}' (expected v2 or v3)[/red]")
        raise typer.Exit(1)

    try:
        config = load_config(config_path)
        meta = extract_metadata(script)
        props = gecko_properties(GeckoSettings(id=gecko_id)) if gecko_id is not None else {}
        props.update(parse_additional_properties(extra))
        text = build_manifest_text(
            meta,
            mv,
            settings=config.manifest,
            additional_properties=props,
            content_script=config.manifest.content_script or script.name,
        )
    except PackagingError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    typer.echo(text)


@app.command()
def init(
    force: bool = typer.Option(False, "--force", "-f", help="Overwrite an existing config"),
):
    """Write a default scriptpack.json to the current directory."""
    from scriptpack.config.loader import get_config_path, save_config
    from scriptpack.config.schema import Config

    config_path = get_config_path()
    if config_path.exists() and not force:
        console.print(f"[yellow]Config already exists at {config_path}[/yellow]")
        console.print("Use --force to overwrite.")
        raise typer.Exit(1)

    save_config(Config(), config_path)
    console.print(f"[green]✓[/green] Created config at {config_path}")
    console.print("\nNext steps:")
    console.print("  1. Set [cyan]source.repoUrl[/cyan] and [cyan]source.scriptFile[/cyan]")
    console.print("  2. Put the icons in [cyan]assets/[/cyan]")
    console.print("  3. Build: [cyan]scriptpack build[/cyan]")


if __name__ == "__main__":
    app()
