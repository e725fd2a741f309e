"""
Flatten command for refdocs: print a generator configuration with all
@INCLUDE directives inlined, exactly as a build would feed it.
"""

import click
import sys
from pathlib import Path
from typing import Optional

from ..exit_codes import ConfigurationError, describe_error
from ..services.config_resolver import load_flattened_config, compose_build_config


@click.command('flatten')
@click.argument('config_file', type=click.Path(dir_okay=False))
@click.option('--output-dir', default=None,
              help='Also append the output-directory override a build would add')
@click.option('--output-key', default='OUTPUT_DIRECTORY', show_default=True,
              help='Configuration key of the output-directory override')
def flatten_handler(config_file: str, output_dir: Optional[str], output_key: str):
    """
    Print CONFIG_FILE with every @INCLUDE resolved.

    \b
    Examples:
        refdocs flatten Doxyfile
        refdocs flatten Doxyfile --output-dir /tmp/out
    """
    try:
        text = load_flattened_config(Path(config_file))
    except ConfigurationError as e:
        click.echo(f"Error: {describe_error(e)}", err=True)
        sys.exit(e.exit_code)

    if output_dir:
        text = compose_build_config(text, output_dir, output_key) + "\n"
    click.echo(text, nl=False)
