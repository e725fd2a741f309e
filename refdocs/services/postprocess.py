"""
Post-processing of a finished output tree.

- Copies the packaged static assets into the output root
- Injects the version-menu script reference into every generated page
  right after its ``</title>`` tag

Pages are patched as whole strings; generated documentation pages are
small enough for that.
"""

import html
import logging
import shutil
from dataclasses import dataclass, field
from importlib import resources
from pathlib import Path
from typing import List, Optional

from ..exit_codes import FilesystemError

logger = logging.getLogger(__name__)

ASSETS = ("version-menu.js",)
TITLE_CLOSE = "</title>"


def version_menu_snippet(site_root: str = "/", entry_page: str = "html/index.html") -> str:
    """Script tag loading the version menu from the site root."""
    if not site_root.endswith("/"):
        site_root += "/"
    return (
        f'<script defer src="{html.escape(site_root)}version-menu.js" '
        f'data-entry-page="{html.escape(entry_page)}"></script>'
    )


@dataclass
class InjectionReport:
    """Which pages received the snippet and which had no title to anchor it."""
    patched: List[Path] = field(default_factory=list)
    skipped: List[Path] = field(default_factory=list)

    def to_dict(self):
        return {
            'patched': len(self.patched),
            'skipped': [str(p) for p in self.skipped],
        }


def copy_assets(output_root: Path) -> List[Path]:
    """Copy every packaged asset verbatim into the output root."""
    package_assets = resources.files("refdocs") / "assets"
    copied = []
    for name in ASSETS:
        target = output_root / name
        try:
            with resources.as_file(package_assets / name) as source:
                shutil.copyfile(source, target)
        except OSError as e:
            raise FilesystemError(f"failed to copy asset {name} to {output_root}") from e
        copied.append(target)
    return copied


def inject_snippet(text: str, snippet: str) -> Optional[str]:
    """
    Insert ``snippet`` right after the first ``</title>``.

    Returns:
        The patched text, or None when the page has no ``</title>``
    """
    pos = text.find(TITLE_CLOSE)
    if pos == -1:
        return None
    pos += len(TITLE_CLOSE)
    return text[:pos] + snippet + text[pos:]


def inject_file(path: Path, snippet: str) -> bool:
    """Patch one page in place; returns False when it was left untouched."""
    # newline="" keeps line endings byte-identical on rewrite
    with open(path, "r", encoding="utf-8", errors="surrogateescape", newline="") as f:
        text = f.read()
    patched = inject_snippet(text, snippet)
    if patched is None:
        return False
    with open(path, "w", encoding="utf-8", errors="surrogateescape", newline="") as f:
        f.write(patched)
    return True


def inject_version_menu(output_root: Path, snippet: str) -> InjectionReport:
    """
    Patch every ``.html`` file below each immediate subdirectory of the
    output root. Files directly in the root are not touched.
    """
    report = InjectionReport()
    try:
        pages = [
            page
            for version_dir in sorted(p for p in output_root.iterdir() if p.is_dir())
            for page in sorted(version_dir.rglob("*.html"))
            if page.is_file()
        ]
    except OSError as e:
        raise FilesystemError(f"failed to walk output tree {output_root}") from e

    for page in pages:
        try:
            injected = inject_file(page, snippet)
        except OSError as e:
            raise FilesystemError(f"failed to patch {page}") from e
        if injected:
            report.patched.append(page)
        else:
            logger.warning(f"No </title> in {page}, version menu not injected")
            report.skipped.append(page)
    return report
