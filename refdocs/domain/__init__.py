"""
Domain layer for refdocs.

Contains pure domain objects with no I/O or side effects:
- Reference: A git reference with its short name, slug and kind
- IndexEntry: One built reference as listed in the index
- MajorVersionBucket: Tags grouped by major-version token
- VersionIndex: Everything that was built, grouped for display

These objects provide to_dict() for JSON output.
"""

from .reference import (
    Reference,
    RefKind,
    short_ref_name,
    slugify,
    classify,
    major_version,
)
from .version_index import IndexEntry, MajorVersionBucket, VersionIndex

__all__ = [
    'Reference',
    'RefKind',
    'short_ref_name',
    'slugify',
    'classify',
    'major_version',
    'IndexEntry',
    'MajorVersionBucket',
    'VersionIndex',
]
