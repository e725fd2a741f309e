import click
import json
import sys

from refdocs.config import load_config, get_config_path, get_default_config, save_config
from refdocs.exit_codes import ConfigurationError, describe_error


@click.group("config")
def config_cmd():
    """Settings management commands."""
    pass


@config_cmd.command("generate")
@click.option("--force", is_flag=True, help="Overwrite an existing settings file")
def generate_config(force):
    """Write the default settings to the settings file."""
    config_path = get_config_path()
    if config_path.exists() and not force:
        click.echo(f"Settings already exist at {config_path} (use --force to overwrite)", err=True)
        return
    try:
        written = save_config(get_default_config())
    except (OSError, ConfigurationError) as e:
        click.echo(f"Error: {describe_error(e)}", err=True)
        sys.exit(getattr(e, 'exit_code', 1))
    click.echo(f"Default settings written to {written}")


@config_cmd.command("show")
@click.option("--pretty", is_flag=True, help="Display as formatted JSON instead of single-line JSONL")
@click.option("--path", is_flag=True, help="Show the settings file path being used")
def show_config(pretty, path):
    """Show the current settings with all merges applied.

    By default, outputs single-line JSON (JSONL format).
    Use --pretty for human-readable formatted output.
    Use --path to see which settings file is being used.
    """
    if path:
        print(json.dumps({"config_path": str(get_config_path())}))
        return

    try:
        config = load_config()
    except ConfigurationError as e:
        click.echo(f"Error: {describe_error(e)}", err=True)
        sys.exit(e.exit_code)

    if pretty:
        print(json.dumps(config, indent=2, ensure_ascii=False))
    else:
        print(json.dumps(config, ensure_ascii=False))
