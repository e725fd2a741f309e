#!/usr/bin/env python3

import click

from refdocs import __version__

from refdocs.commands.build import build_handler
from refdocs.commands.refs import refs_handler
from refdocs.commands.flatten import flatten_handler
from refdocs.commands.config import config_cmd


@click.group()
@click.version_option(version=__version__, prog_name="refdocs")
def cli():
    """refdocs - Version-indexed documentation for git repositories.

    Generates documentation for every selected branch and tag and
    assembles the results into one browsable site with a version index.
    """
    pass


cli.add_command(build_handler, name='build')
cli.add_command(refs_handler, name='refs')
cli.add_command(flatten_handler, name='flatten')
cli.add_command(config_cmd)


def main():
    cli()

if __name__ == "__main__":
    main()
