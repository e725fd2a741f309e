"""Shared fixtures: a stand-in documentation generator and throwaway git repositories."""

import subprocess
import sys
import textwrap
from pathlib import Path

import pytest


GENERATOR_SOURCE = textwrap.dedent('''
    import os
    import pathlib
    import sys

    config = sys.stdin.read()
    out = None
    for line in config.splitlines():
        key, sep, value = line.partition("=")
        if sep and key.strip() == "OUTPUT_DIRECTORY":
            out = value.strip()

    if os.path.exists("FAIL"):
        sys.stderr.write("generator: refusing to build, FAIL marker present\\n")
        sys.exit(1)
    if out is None:
        sys.stderr.write("generator: no OUTPUT_DIRECTORY\\n")
        sys.exit(2)

    version = "unknown"
    if os.path.exists("VERSION"):
        version = pathlib.Path("VERSION").read_text().strip()

    root = pathlib.Path(out)
    html = root / "html"
    (html / "search").mkdir(parents=True, exist_ok=True)
    (html / "index.html").write_text(
        "<html><head><title>" + version + "</title></head><body>" + version + "</body></html>"
    )
    (html / "search" / "search.html").write_text("<html><head><title>Search</title></head></html>")
    (html / "fragment.html").write_text("<div>no title here</div>")
    (root / "config.txt").write_text(config)
    print("generated", version)
''')


@pytest.fixture
def generator_command(tmp_path):
    """Command line of a small generator that mimics `doxygen -`."""
    script = tmp_path / "fake_generator.py"
    script.write_text(GENERATOR_SOURCE)
    return [sys.executable, str(script)]


def git(repo: Path, *args: str) -> str:
    result = subprocess.run(
        ["git", "-c", "user.name=refdocs", "-c", "user.email=refdocs@example.com",
         "-c", "commit.gpgsign=false", "-c", "tag.gpgsign=false", *args],
        cwd=repo,
        check=True,
        capture_output=True,
        text=True,
    )
    return result.stdout.strip()


def commit_files(repo: Path, message: str, files=None, remove=()):
    for name, content in (files or {}).items():
        path = repo / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content)
        git(repo, "add", name)
    for name in remove:
        git(repo, "rm", "-q", name)
    git(repo, "commit", "-q", "-m", message)


@pytest.fixture
def make_repo(tmp_path):
    """
    Factory for a git repository on branch master.

    ``make_repo(tags={"v1.0.0": {...files}}, fail_tags=[...])`` commits
    once per tag, in order, and tags each commit. Tags listed in
    ``fail_tags`` carry a FAIL marker that makes the generator exit 1.
    """
    def _make(tags=(), fail_tags=()):
        repo = tmp_path / "repo"
        repo.mkdir()
        git(repo, "init", "-q")
        git(repo, "symbolic-ref", "HEAD", "refs/heads/master")
        commit_files(repo, "initial", {
            "Doxyfile": "PROJECT_NAME = demo\n@INCLUDE = config/common.cfg\nOUTPUT_DIRECTORY = ignored\n",
            "config/common.cfg": "GENERATE_HTML = YES\n",
            "VERSION": "initial\n",
        })
        failing = False
        for tag in tags:
            files = {"VERSION": tag + "\n"}
            remove = []
            if tag in fail_tags:
                files["FAIL"] = "1\n"
                failing = True
            elif failing:
                remove.append("FAIL")
                failing = False
            commit_files(repo, f"release {tag}", files, remove)
            git(repo, "tag", tag)
        if failing:
            commit_files(repo, "clear failure marker", remove=["FAIL"])
        commit_files(repo, "work on master", {"VERSION": "master\n"})
        return repo

    return _make


@pytest.fixture
def run_git():
    """The git helper, for assertions against a repository's state."""
    return git
