"""
refdocs - Version-indexed documentation for git repositories.

refdocs checks out every selected branch and tag of a repository in
turn, runs a documentation generator (Doxygen by default) for each, and
assembles the results into one site with a navigable version index.

Quick Start:
    from pathlib import Path
    from refdocs import BuildService, BuildOptions

    service = BuildService()
    options = BuildOptions(
        repo=Path("~/src/project"),
        output_dir=Path("/srv/docs"),
        patterns=[r"^refs/tags/v", r"^refs/heads/master$"],
    )
    for message in service.build(options):
        print(message)

    index = service.last_result.index
    for bucket in index.tags:
        print(bucket.major, [e.short_ref for e in bucket.subversions])

Output tree:
    <output>/<slug>/...        generator output per reference
    <output>/index.html        version index
    <output>/versions.json     version index for the client-side menu
    <output>/version-menu.js   version selector injected into every page
"""

__version__ = "0.3.0"

# Domain objects
from .domain import (
    Reference,
    RefKind,
    IndexEntry,
    MajorVersionBucket,
    VersionIndex,
)

# Services
from .services import (
    BuildService,
    BuildOptions,
    BuildResult,
    BuildDriver,
    load_flattened_config,
)

# Errors
from .exit_codes import (
    RefdocsError,
    VCSError,
    ConfigurationError,
    BuildError,
    FilesystemError,
    TemplateError,
    SerializationError,
)

# Configuration
from .config import load_config, save_config

__all__ = [
    "__version__",
    # Domain objects
    "Reference",
    "RefKind",
    "IndexEntry",
    "MajorVersionBucket",
    "VersionIndex",
    # Services
    "BuildService",
    "BuildOptions",
    "BuildResult",
    "BuildDriver",
    "load_flattened_config",
    # Errors
    "RefdocsError",
    "VCSError",
    "ConfigurationError",
    "BuildError",
    "FilesystemError",
    "TemplateError",
    "SerializationError",
    # Configuration
    "load_config",
    "save_config",
]
