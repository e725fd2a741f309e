"""
Reference listing command for refdocs.

Shows every reference of a repository the way a build run would see it:
short name, slug, kind, major-version token and whether the filters
select it. Nothing is checked out.
"""

import click
import sys
from pathlib import Path

from ..config import load_config
from ..exit_codes import RefdocsError, describe_error
from ..output import emit, emit_error
from ..services.build_service import BuildService


@click.command('refs')
@click.option('--repo', 'repo', required=True, type=click.Path(exists=True, file_okay=False),
              help='Path to the git repository')
@click.option('--refs', 'refs', multiple=True,
              help='Regular expression selecting references by full name (repeatable)')
@click.option('--matched', 'only_matched', is_flag=True, help='Only list selected references')
@click.option('--pretty', is_flag=True, help='Display as formatted table')
def refs_handler(repo: str, refs: tuple, only_matched: bool, pretty: bool):
    """
    List repository references and how a build would treat them.

    Outputs JSONL by default, one reference per line. Slug collisions
    between selected references are reported in a 'collides_with' field.

    \b
    Examples:
        refdocs refs --repo ~/src/zydis
        refdocs refs --repo . --refs '^refs/tags/' --matched --pretty
    """
    try:
        service = BuildService(config=load_config())
        planned = service.plan(Path(repo), list(refs))
    except RefdocsError as e:
        if pretty:
            click.echo(f"Error: {describe_error(e)}", err=True)
        else:
            emit_error(describe_error(e), type=e.__class__.__name__, context={'repo': repo})
        sys.exit(e.exit_code)

    if only_matched:
        planned = [p for p in planned if p.matched]

    emit(planned, pretty=pretty)

    collisions = [p for p in planned if p.collides_with]
    if collisions and pretty:
        for p in collisions:
            click.echo(
                f"Warning: '{p.reference.name}' collides with '{p.collides_with}' "
                f"on slug '{p.reference.slug}'",
                err=True
            )
