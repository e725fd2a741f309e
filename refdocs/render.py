"""
Rendering functions for refdocs output.

- index.html: the navigable version index, rendered from a Jinja2 template
- versions.json: the same index serialized for the client-side version menu
- console summaries: Rich tables for the CLI
"""

import json
from typing import Optional

import jinja2
from jinja2 import Environment, PackageLoader, StrictUndefined, select_autoescape
from rich.table import Table
from rich.console import Console
from rich import box

from .domain.version_index import VersionIndex
from .exit_codes import TemplateError, SerializationError

console = Console()

INDEX_TEMPLATE = "index.html"


def _build_environment() -> Environment:
    """Jinja2 environment for the packaged templates; undefined names are errors."""
    return Environment(
        loader=PackageLoader("refdocs", "templates"),
        undefined=StrictUndefined,
        autoescape=select_autoescape(["html"]),
        trim_blocks=True,
        lstrip_blocks=True,
    )


def render_index_html(
    index: VersionIndex,
    title: str = "Documentation",
    entry_page: str = "html/index.html",
    environment: Optional[Environment] = None
) -> str:
    """
    Render the version index as an HTML page.

    Args:
        index: Finalized version index
        title: Page title
        entry_page: Landing page inside each reference's output directory
        environment: Template environment (packaged templates if None)

    Raises:
        TemplateError: the template is missing, malformed or references
            names that are not bound
    """
    try:
        env = environment or _build_environment()
        template = env.get_template(INDEX_TEMPLATE)
        return template.render(index=index, title=title, entry_page=entry_page)
    except jinja2.TemplateError as e:
        raise TemplateError(f"failed to render {INDEX_TEMPLATE}") from e


def render_versions_json(index: VersionIndex) -> str:
    """
    Serialize the version index for client-side consumption.

    Raises:
        SerializationError: the index holds values JSON cannot represent
    """
    try:
        return json.dumps(index.to_dict(), indent=2, ensure_ascii=False) + "\n"
    except (TypeError, ValueError) as e:
        raise SerializationError("failed to serialize version index") from e


def render_index_summary(index: VersionIndex) -> None:
    """
    Render what a build put into the version index.

    Args:
        index: Version index of a finished build
    """
    if not len(index):
        console.print("[yellow]No references were built.[/yellow]")
        return

    table = Table(
        title="Built References",
        box=box.ROUNDED,
        show_header=True,
        header_style="bold magenta"
    )
    table.add_column("Group", style="cyan")
    table.add_column("Reference", style="green")
    table.add_column("Directory", style="dim")

    for bucket in index.tags:
        for entry in bucket.subversions:
            table.add_row(f"tags {bucket.major}", entry.short_ref, entry.dir)
    for entry in index.branches:
        table.add_row("branches", entry.short_ref, entry.dir)
    for entry in index.misc_refs:
        table.add_row("misc", entry.git_ref, entry.dir)

    console.print(table)
    console.print(
        f"[bold]{len(index)}[/bold] reference(s): "
        f"{sum(len(b.subversions) for b in index.tags)} tag(s) in {len(index.tags)} major version(s), "
        f"{len(index.branches)} branch(es), {len(index.misc_refs)} other"
    )
