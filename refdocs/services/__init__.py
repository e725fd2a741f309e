"""
Service layer for refdocs.

Contains the logic that orchestrates domain objects and infrastructure:
- config_resolver: Flattens generator configuration files (@INCLUDE)
- BuildDriver: Runs the documentation generator for one reference
- postprocess: Static assets and version-menu injection
- BuildService: The multi-reference build run

Services are the primary API for commands to use.
"""

from .config_resolver import load_flattened_config, compose_build_config
from .build_driver import BuildDriver
from .postprocess import InjectionReport, copy_assets, inject_snippet, inject_version_menu
from .build_service import BuildService, BuildOptions, BuildResult, PlannedReference

__all__ = [
    'load_flattened_config',
    'compose_build_config',
    'BuildDriver',
    'InjectionReport',
    'copy_assets',
    'inject_snippet',
    'inject_version_menu',
    'BuildService',
    'BuildOptions',
    'BuildResult',
    'PlannedReference',
]
