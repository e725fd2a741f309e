"""
Version index domain objects for refdocs.

The version index records every reference that was built successfully,
grouped for display:

- tags:      major-version buckets, each holding its subversions
- branches:  flat list
- misc_refs: flat list (remote branches, notes, anything else)

Buckets and entries keep encounter order. ``to_dict()`` is the exact
shape written to ``versions.json``.
"""

from dataclasses import dataclass, field
from typing import Dict, Any, Iterator, List, Optional

from .reference import Reference, RefKind


@dataclass(frozen=True)
class IndexEntry:
    """One built reference as shown in the index."""
    short_ref: str
    git_ref: str
    dir: str  # relative to the output root, '/'-separated

    @classmethod
    def for_reference(cls, reference: Reference, rel_dir: str) -> 'IndexEntry':
        return cls(short_ref=reference.short_name, git_ref=reference.name, dir=rel_dir)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'short_ref': self.short_ref,
            'git_ref': self.git_ref,
            'dir': self.dir,
        }


@dataclass
class MajorVersionBucket:
    """All tags sharing one major-version token."""
    major: str
    subversions: List[IndexEntry] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'major': self.major,
            'subversions': [entry.to_dict() for entry in self.subversions],
        }


@dataclass
class VersionIndex:
    """
    Aggregate of every successfully built reference.

    Example:
        index = VersionIndex()
        ref = Reference.parse("refs/tags/v1.2.0")
        index.add(ref, IndexEntry.for_reference(ref, ref.slug))
        index.tags[0].major  # "v1"
    """
    tags: List[MajorVersionBucket] = field(default_factory=list)
    branches: List[IndexEntry] = field(default_factory=list)
    misc_refs: List[IndexEntry] = field(default_factory=list)

    def bucket(self, major: str) -> Optional[MajorVersionBucket]:
        for bucket in self.tags:
            if bucket.major == major:
                return bucket
        return None

    def _bucket_for(self, major: str) -> MajorVersionBucket:
        bucket = self.bucket(major)
        if bucket is None:
            bucket = MajorVersionBucket(major=major)
            self.tags.append(bucket)
        return bucket

    def add(self, reference: Reference, entry: IndexEntry) -> List[IndexEntry]:
        """
        Classify a built reference and append its entry.

        Returns:
            The list the entry was appended to
        """
        if reference.kind is RefKind.TAG:
            target = self._bucket_for(reference.major).subversions
        elif reference.kind is RefKind.BRANCH:
            target = self.branches
        else:
            target = self.misc_refs
        target.append(entry)
        return target

    def entries(self) -> Iterator[IndexEntry]:
        for bucket in self.tags:
            yield from bucket.subversions
        yield from self.branches
        yield from self.misc_refs

    def __len__(self) -> int:
        return sum(1 for _ in self.entries())

    def to_dict(self) -> Dict[str, Any]:
        return {
            'tags': [bucket.to_dict() for bucket in self.tags],
            'branches': [entry.to_dict() for entry in self.branches],
            'misc_refs': [entry.to_dict() for entry in self.misc_refs],
        }
