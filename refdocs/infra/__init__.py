"""
Infrastructure layer for refdocs.

Contains abstractions for external systems:
- GitClient: Git command execution
- WorkingTree: The shared working tree handle a build run owns

These provide clean interfaces that can be mocked for testing.
"""

from .git_client import GitClient, GitResult, WorkingTree

__all__ = [
    'GitClient',
    'GitResult',
    'WorkingTree',
]
