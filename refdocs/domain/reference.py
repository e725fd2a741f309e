"""
Reference domain object for refdocs.

A reference is a fully-qualified git ref name such as
``refs/heads/master`` or ``refs/tags/v4.1.2``. Everything the build
needs to know about one is derived from the name alone:

- short name:  "refs/tags/v4.1.2"     -> "v4.1.2"
- slug:        "refs/heads/feature/x" -> "feature-x"
- kind:        tag, branch or anything else
- major token: "v4.1.2" -> "v4", "nightly" -> "nightly"
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Any

TAG_NAMESPACE = "refs/tags"
BRANCH_NAMESPACE = "refs/heads"

DEFAULT_SLUG_SEPARATOR = "-"


class RefKind(Enum):
    """Which part of the version index a reference belongs to."""
    TAG = "tag"
    BRANCH = "branch"
    MISC = "misc"


def short_ref_name(name: str) -> str:
    """Strip at most one each of the ``refs/``, ``heads/`` and ``tags/`` prefixes."""
    for prefix in ("refs/", "heads/", "tags/"):
        if name.startswith(prefix):
            name = name[len(prefix):]
    return name


def slugify(short_name: str, separator: str = DEFAULT_SLUG_SEPARATOR) -> str:
    """Make a short ref name usable as a single directory name."""
    return short_name.replace("/", separator)


def classify(name: str) -> RefKind:
    """Classify a full ref name; tags take precedence over branches."""
    if name.startswith(TAG_NAMESPACE):
        return RefKind.TAG
    if name.startswith(BRANCH_NAMESPACE):
        return RefKind.BRANCH
    return RefKind.MISC


def major_version(short_name: str) -> str:
    """Return the part of a short name before the first dot."""
    return short_name.split(".", 1)[0]


@dataclass(frozen=True)
class Reference:
    """
    A git reference selected for (or considered for) a documentation build.

    Attributes:
        name: Full ref name, unique within the repository
        short_name: Name with the namespace prefixes stripped
        slug: Filesystem-safe directory name for this reference's output
        kind: Tag, branch or miscellaneous
    """

    name: str
    short_name: str
    slug: str
    kind: RefKind

    @classmethod
    def parse(cls, name: str, separator: str = DEFAULT_SLUG_SEPARATOR) -> 'Reference':
        short_name = short_ref_name(name)
        return cls(
            name=name,
            short_name=short_name,
            slug=slugify(short_name, separator),
            kind=classify(name),
        )

    @property
    def major(self) -> str:
        return major_version(self.short_name)

    @property
    def is_tag(self) -> bool:
        return self.kind is RefKind.TAG

    def to_dict(self) -> Dict[str, Any]:
        return {
            'name': self.name,
            'short_ref': self.short_name,
            'slug': self.slug,
            'kind': self.kind.value,
            'major': self.major,
        }

    def __str__(self) -> str:
        return self.name
