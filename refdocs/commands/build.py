"""
Build command for refdocs.

Generates documentation for every matching git reference and assembles
a browsable, version-indexed output tree.
"""

import click
import sys
from pathlib import Path
from typing import Optional

from ..config import load_config, configure_logging, logger
from ..exit_codes import RefdocsError, describe_error, get_exit_code_for_exception
from ..services.build_service import BuildService, BuildOptions
from ..render import render_index_summary


@click.command('build')
@click.option('--repo', 'repo', required=True, type=click.Path(exists=True, file_okay=False),
              help='Path to the git repository')
@click.option('--output-dir', 'output_dir', required=True, type=click.Path(),
              help='Output directory (must not exist yet)')
@click.option('--refs', 'refs', required=True, multiple=True,
              help='Regular expression selecting references by full name (repeatable)')
@click.option('--config-ref', default=None,
              help='Reference to read the generator configuration from [default: master]')
@click.option('--doxyfile', default=None, type=click.Path(dir_okay=False),
              help='Generator configuration file [default: <repo>/Doxyfile]')
@click.option('--restore-ref', default=None,
              help='Reference to check out once the run is over [default: master]')
@click.option('--reverse/--no-reverse', default=None,
              help='Process references in reverse listing order')
@click.option('--pretty', is_flag=True, help='Show progress with rich formatting')
@click.option('--debug', is_flag=True, help='Enable debug logging')
def build_handler(
    repo: str,
    output_dir: str,
    refs: tuple,
    config_ref: Optional[str],
    doxyfile: Optional[str],
    restore_ref: Optional[str],
    reverse: Optional[bool],
    pretty: bool,
    debug: bool,
):
    """
    Build documentation for every matching git reference.

    Each selected reference is checked out in turn and documented into
    OUTPUT_DIR/<slug>/. Afterwards index.html, versions.json and the
    version menu script are written to OUTPUT_DIR.

    \b
    Examples:
        # All release tags
        refdocs build --repo ~/src/zydis --output-dir /srv/docs --refs '^refs/tags/v'
        # Tags plus master, newest first
        refdocs build --repo . --output-dir site --refs '^refs/tags/' --refs 'heads/master$' --reverse
        # Configuration from another branch
        refdocs build --repo . --output-dir site --refs tags --config-ref develop
    """
    try:
        config = load_config()
        configure_logging(config, debug=debug)

        service = BuildService(config=config)
        options = BuildOptions(
            repo=Path(repo),
            output_dir=Path(output_dir),
            patterns=list(refs),
            config_ref=config_ref,
            config_file=Path(doxyfile) if doxyfile else None,
            restore_ref=restore_ref,
            reverse=reverse,
        )

        if pretty:
            _build_pretty(service, options)
        else:
            _build_simple(service, options)
    except RefdocsError as e:
        logger.debug("Build failed", exc_info=True)
        click.echo(f"Error: {describe_error(e)}", err=True)
        sys.exit(e.exit_code)
    except KeyboardInterrupt as e:
        click.echo("Interrupted", err=True)
        sys.exit(get_exit_code_for_exception(e))


def _build_simple(service: BuildService, options: BuildOptions):
    """Simple text output for build."""
    for progress in service.build(options):
        print(progress, file=sys.stderr)

    result = service.last_result
    if result:
        print(f"\nBuilt {len(result.built)} reference(s) into {result.output_dir}", file=sys.stderr)
        if result.injection.skipped:
            print(f"  {len(result.injection.skipped)} page(s) without </title> left unpatched",
                  file=sys.stderr)


def _build_pretty(service: BuildService, options: BuildOptions):
    """Rich formatted output for build."""
    from rich.console import Console
    from rich.progress import Progress, SpinnerColumn, TextColumn

    console = Console(stderr=True)
    console.print(f"\n[bold]Building into:[/bold] {options.output_dir}\n")

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=console,
    ) as progress:
        task = progress.add_task("Starting build...", total=None)

        for message in service.build(options):
            progress.update(task, description=message)
            if message.startswith("Generating"):
                console.print(message, markup=False)

    result = service.last_result
    render_index_summary(result.index)
    if result.injection.skipped:
        console.print(f"[yellow]{len(result.injection.skipped)} page(s) without </title> left unpatched[/yellow]")
    console.print(f"\n[bold green]✓[/bold green] Build complete: {result.output_dir}")
