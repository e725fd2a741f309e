"""
Multi-reference documentation build for refdocs.

Walks one shared working tree through every selected reference,
generates documentation for each into its own output subdirectory, and
assembles the results into a browsable output tree:

    <output>/<slug>/...        generator output per reference
    <output>/index.html        navigable version index
    <output>/versions.json     the same index for the version menu
    <output>/version-menu.js   client-side version selector

Runs are strictly sequential (every reference shares the working tree)
and every failure is fatal.
"""

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Any, Generator, List, Optional, Pattern, Sequence, Tuple

from ..config import load_config
from ..domain.reference import Reference
from ..domain.version_index import IndexEntry, VersionIndex
from ..exit_codes import ConfigurationError, FilesystemError
from ..infra.git_client import GitClient, WorkingTree
from .. import render
from .build_driver import BuildDriver
from .config_resolver import load_flattened_config
from .postprocess import InjectionReport, copy_assets, inject_version_menu, version_menu_snippet

logger = logging.getLogger(__name__)


@dataclass
class BuildOptions:
    """Options for one build run."""
    repo: Path
    output_dir: Path
    patterns: Sequence[str] = ()
    config_ref: Optional[str] = None    # None = settings git.config_ref
    config_file: Optional[Path] = None  # None = <repo>/<generator.config_file>
    restore_ref: Optional[str] = None   # None = settings git.restore_ref
    reverse: Optional[bool] = None      # None = settings build.reverse


@dataclass
class BuildResult:
    """Result of a build run."""
    output_dir: Optional[Path] = None
    built: List[Tuple[Reference, IndexEntry]] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)
    index: VersionIndex = field(default_factory=VersionIndex)
    injection: InjectionReport = field(default_factory=InjectionReport)
    restored: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            'output_dir': str(self.output_dir) if self.output_dir else None,
            'built': [ref.name for ref, _ in self.built],
            'skipped': len(self.skipped),
            'restored': self.restored,
            'injection': self.injection.to_dict(),
        }


@dataclass
class PlannedReference:
    """A reference as a build run would treat it."""
    reference: Reference
    matched: bool
    collides_with: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        result = self.reference.to_dict()
        result['matched'] = self.matched
        if self.collides_with:
            result['collides_with'] = self.collides_with
        return result


def compile_patterns(patterns: Sequence[str]) -> List[Pattern]:
    """Compile reference filters; at least one is required."""
    if not patterns:
        raise ConfigurationError("at least one reference pattern is required")
    compiled = []
    for pattern in patterns:
        try:
            compiled.append(re.compile(pattern))
        except re.error as e:
            raise ConfigurationError(f"invalid reference pattern '{pattern}'") from e
    return compiled


def matches_any(name: str, patterns: Sequence[Pattern]) -> bool:
    return any(p.search(name) for p in patterns)


class BuildService:
    """
    Service for building documentation across git references.

    Example:
        service = BuildService()
        options = BuildOptions(
            repo=Path("~/src/project"),
            output_dir=Path("/srv/docs"),
            patterns=[r"^refs/tags/v"],
        )

        for progress in service.build(options):
            print(progress)  # "Generating documentation for reference 'refs/tags/v1.0.0'"

        result = service.last_result
        print(f"Built {len(result.built)} references")
    """

    def __init__(
        self,
        config: Optional[Dict[str, Any]] = None,
        git_client: Optional[GitClient] = None,
        driver: Optional[BuildDriver] = None
    ):
        """
        Initialize BuildService.

        Args:
            config: Configuration dict (loads default if None)
            git_client: GitClient instance (creates new if None)
            driver: BuildDriver instance (built from config if None)
        """
        self.config = config or load_config()
        git_settings = self.config.get('git', {})
        generator = self.config.get('generator', {})
        self.git = git_client or GitClient(timeout=git_settings.get('timeout_seconds', 60))
        self.driver = driver or BuildDriver(
            command=generator.get('command'),
            output_key=generator.get('output_key', 'OUTPUT_DIRECTORY'),
            timeout=generator.get('timeout_seconds')
        )
        self.last_result: Optional[BuildResult] = None

    def _setting(self, section: str, key: str, default):
        return self.config.get(section, {}).get(key, default)

    def _parse(self, name: str) -> Reference:
        return Reference.parse(name, self._setting('build', 'slug_separator', '-'))

    def _select(self, names: Sequence[str], patterns: Sequence[Pattern],
                reverse: bool) -> Tuple[List[Reference], List[str]]:
        selected, skipped = [], []
        for name in names:
            if matches_any(name, patterns):
                selected.append(self._parse(name))
            else:
                skipped.append(name)
        if reverse:
            selected.reverse()
        return selected, skipped

    def plan(self, repo: Path, patterns: Sequence[str] = ()) -> List[PlannedReference]:
        """
        Describe what a build with ``patterns`` would do, without checking
        anything out. Slug collisions among matching references are flagged.
        """
        compiled = compile_patterns(patterns) if patterns else []
        tree = WorkingTree(path=Path(repo).expanduser(), git=self.git)
        planned = []
        seen: Dict[str, str] = {}
        for name in tree.references():
            ref = self._parse(name)
            matched = matches_any(name, compiled) if compiled else True
            item = PlannedReference(reference=ref, matched=matched)
            if matched:
                if ref.slug in seen:
                    item.collides_with = seen[ref.slug]
                else:
                    seen[ref.slug] = name
            planned.append(item)
        return planned

    def build(self, options: BuildOptions) -> Generator[str, None, BuildResult]:
        """
        Build documentation for every reference matching the options.

        Yields progress messages, returns BuildResult.

        Args:
            options: Build options

        Yields:
            Progress messages

        Returns:
            BuildResult with the output root and version index

        Raises:
            RefdocsError: any failure; the run stops at the first one
        """
        result = BuildResult()
        self.last_result = result

        patterns = compile_patterns(options.patterns)
        repo = Path(options.repo).expanduser()
        config_ref = options.config_ref or self._setting('git', 'config_ref', 'master')
        restore_ref = options.restore_ref or self._setting('git', 'restore_ref', 'master')
        reverse = options.reverse if options.reverse is not None else self._setting('build', 'reverse', False)

        output_dir = Path(options.output_dir).expanduser()
        if output_dir.exists():
            raise FilesystemError(f"output directory {output_dir} already exists")
        try:
            output_dir.mkdir(parents=True)
            output_dir = output_dir.resolve()
        except OSError as e:
            raise FilesystemError(f"failed to create output directory {output_dir}") from e
        result.output_dir = output_dir

        tree = WorkingTree(path=repo, git=self.git)
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(f"{repo} is at {tree.head()} before the run")
        try:
            yield from self._build_references(tree, options, config_ref, patterns, reverse, result)
        except BaseException:
            self._restore_best_effort(tree, restore_ref)
            raise

        yield f"Restoring '{restore_ref}'"
        tree.checkout(restore_ref)
        result.restored = True

        yield "Writing index.html"
        site = self.config.get('site', {})
        index_html = render.render_index_html(
            result.index,
            title=site.get('title', 'Documentation'),
            entry_page=site.get('entry_page', 'html/index.html')
        )
        versions_json = render.render_versions_json(result.index)
        try:
            (output_dir / 'index.html').write_text(index_html, encoding='utf-8')
            (output_dir / 'versions.json').write_text(versions_json, encoding='utf-8')
        except OSError as e:
            raise FilesystemError(f"failed to write index files to {output_dir}") from e

        yield "Copying static assets"
        copy_assets(output_dir)

        yield "Injecting version menu"
        snippet = version_menu_snippet(
            site.get('root', '/'),
            site.get('entry_page', 'html/index.html')
        )
        result.injection = inject_version_menu(output_dir, snippet)

        return result

    def _build_references(
        self,
        tree: WorkingTree,
        options: BuildOptions,
        config_ref: str,
        patterns: Sequence[Pattern],
        reverse: bool,
        result: BuildResult
    ) -> Generator[str, None, None]:
        """Checkout, build and classify every selected reference."""
        yield f"Reading build configuration from '{config_ref}'"
        tree.checkout(config_ref)
        config_file = options.config_file
        if config_file is None:
            config_file = tree.path / self._setting('generator', 'config_file', 'Doxyfile')
        base_config = load_flattened_config(Path(config_file).expanduser())

        references, result.skipped = self._select(tree.references(), patterns, reverse)
        logger.debug(f"{len(references)} reference(s) selected, {len(result.skipped)} skipped")

        for ref in references:
            yield f"Generating documentation for reference '{ref.name}'"
            tree.checkout(ref.name)
            out_dir = self.driver.build(ref.slug, tree, result.output_dir, base_config)
            entry = IndexEntry.for_reference(
                ref, out_dir.relative_to(result.output_dir).as_posix()
            )
            result.index.add(ref, entry)
            result.built.append((ref, entry))

    def _restore_best_effort(self, tree: WorkingTree, restore_ref: str) -> None:
        """
        Return the tree to ``restore_ref`` after a failure without masking it.

        Checkouts are not transactional, so once a reference checkout has
        been started the tree is restored even if it still reports being on
        ``restore_ref``.
        """
        started_reference = tree.attempts > 1
        moved_away = tree.current_ref is not None and tree.current_ref != restore_ref
        if not (started_reference or moved_away):
            return
        try:
            tree.checkout(restore_ref)
        except Exception as e:
            logger.warning(f"Could not restore '{restore_ref}' after failure: {e}")
