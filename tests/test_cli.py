"""
CLI tests for refdocs.

Commands run through click's CliRunner against temporary settings files
and throwaway git repositories. Assertions are on observable behavior:
exit codes, output and files written.
"""

import json
import shutil

import pytest
import yaml
from click.testing import CliRunner

from refdocs import __version__
from refdocs.cli import cli
from refdocs.exit_codes import (
    BUILD_ERROR,
    CONFIG_ERROR,
    FILESYSTEM_ERROR,
    SUCCESS,
    USAGE_ERROR,
    VCS_ERROR,
)

requires_git = pytest.mark.skipif(shutil.which("git") is None, reason="git is not installed")


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def settings(tmp_path, monkeypatch, generator_command):
    """Point refdocs at a YAML settings file that uses the stand-in generator."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    path = tmp_path / "settings.yaml"
    with open(path, "w") as f:
        yaml.safe_dump({"generator": {"command": generator_command},
                        "site": {"title": "demo docs"}}, f)
    monkeypatch.setenv("REFDOCS_CONFIG", str(path))
    return path


class TestTopLevel:

    def test_version(self, runner):
        result = runner.invoke(cli, ["--version"])
        assert result.exit_code == SUCCESS
        assert __version__ in result.output

    def test_help_lists_commands(self, runner):
        result = runner.invoke(cli, ["--help"])
        assert result.exit_code == SUCCESS
        for name in ("build", "refs", "flatten", "config"):
            assert name in result.output


@requires_git
class TestBuildCommand:
    """Tests for `refdocs build`."""

    def test_success(self, runner, settings, make_repo, tmp_path):
        repo = make_repo(tags=["1.0.0", "2.0.0"])
        site = tmp_path / "site"

        result = runner.invoke(cli, ["build", "--repo", str(repo), "--output-dir", str(site),
                                     "--refs", "^refs/tags/"])

        assert result.exit_code == SUCCESS, result.output
        assert "Generating documentation for reference 'refs/tags/1.0.0'" in result.output
        assert "Built 2 reference(s)" in result.output
        assert "<title>demo docs</title>" in (site / "index.html").read_text()
        assert (site / "2.0.0" / "html" / "index.html").exists()

    def test_pretty(self, runner, settings, make_repo, tmp_path):
        repo = make_repo(tags=["1.0.0"])

        result = runner.invoke(cli, ["build", "--repo", str(repo), "--output-dir",
                                     str(tmp_path / "site"), "--refs", "tags", "--pretty"])

        assert result.exit_code == SUCCESS, result.output
        assert "Build complete" in result.output

    def test_reverse_flag(self, runner, settings, make_repo, tmp_path):
        repo = make_repo(tags=["1.0.0", "2.0.0"])
        site = tmp_path / "site"

        result = runner.invoke(cli, ["build", "--repo", str(repo), "--output-dir", str(site),
                                     "--refs", "tags", "--reverse"])

        assert result.exit_code == SUCCESS, result.output
        versions = json.loads((site / "versions.json").read_text())
        assert [t['major'] for t in versions['tags']] == ["2", "1"]

    def test_generator_failure(self, runner, settings, make_repo, tmp_path, run_git):
        repo = make_repo(tags=["1.0.0", "1.1.0", "2.0.0"], fail_tags=["1.1.0"])

        result = runner.invoke(cli, ["build", "--repo", str(repo), "--output-dir",
                                     str(tmp_path / "site"), "--refs", "^refs/tags/"])

        assert result.exit_code == BUILD_ERROR
        assert "Error:" in result.output
        assert "FAIL marker present" in result.output
        assert not (tmp_path / "site" / "index.html").exists()
        assert run_git(repo, "rev-parse", "--abbrev-ref", "HEAD") == "master"

    def test_existing_output_dir(self, runner, settings, make_repo, tmp_path):
        repo = make_repo(tags=["1.0.0"])
        site = tmp_path / "site"
        site.mkdir()

        result = runner.invoke(cli, ["build", "--repo", str(repo), "--output-dir", str(site),
                                     "--refs", "tags"])

        assert result.exit_code == FILESYSTEM_ERROR
        assert "already exists" in result.output

    def test_unknown_config_ref(self, runner, settings, make_repo, tmp_path):
        repo = make_repo(tags=["1.0.0"])

        result = runner.invoke(cli, ["build", "--repo", str(repo), "--output-dir",
                                     str(tmp_path / "site"), "--refs", "tags",
                                     "--config-ref", "no-such-branch"])

        assert result.exit_code == VCS_ERROR
        assert "no-such-branch" in result.output

    def test_invalid_pattern(self, runner, settings, tmp_path):
        result = runner.invoke(cli, ["build", "--repo", str(tmp_path), "--output-dir",
                                     str(tmp_path / "site"), "--refs", "("])

        assert result.exit_code == CONFIG_ERROR
        assert not (tmp_path / "site").exists()

    def test_refs_required(self, runner, tmp_path):
        result = runner.invoke(cli, ["build", "--repo", str(tmp_path), "--output-dir",
                                     str(tmp_path / "site")])
        assert result.exit_code == USAGE_ERROR

    def test_broken_settings_file(self, runner, settings, tmp_path):
        settings.write_text("generator: [unclosed\n")

        result = runner.invoke(cli, ["build", "--repo", str(tmp_path), "--output-dir",
                                     str(tmp_path / "site"), "--refs", "tags"])

        assert result.exit_code == CONFIG_ERROR
        assert "failed to load settings" in result.output


@requires_git
class TestRefsCommand:
    """Tests for `refdocs refs`."""

    def test_jsonl(self, runner, settings, make_repo):
        repo = make_repo(tags=["v1.0"])

        result = runner.invoke(cli, ["refs", "--repo", str(repo), "--refs", "tags"])

        assert result.exit_code == SUCCESS, result.output
        rows = [json.loads(line) for line in result.output.splitlines() if line.strip()]
        assert rows == [
            {"name": "refs/heads/master", "short_ref": "master", "slug": "master",
             "kind": "branch", "major": "master", "matched": False},
            {"name": "refs/tags/v1.0", "short_ref": "v1.0", "slug": "v1.0",
             "kind": "tag", "major": "v1", "matched": True},
        ]

    def test_matched_only(self, runner, settings, make_repo):
        repo = make_repo(tags=["v1.0"])

        result = runner.invoke(cli, ["refs", "--repo", str(repo), "--refs", "tags", "--matched"])

        rows = [json.loads(line) for line in result.output.splitlines() if line.strip()]
        assert [r['name'] for r in rows] == ["refs/tags/v1.0"]

    def test_not_a_repository(self, runner, settings, tmp_path):
        plain = tmp_path / "plain"
        plain.mkdir()

        result = runner.invoke(cli, ["refs", "--repo", str(plain)])

        assert result.exit_code == VCS_ERROR


class TestFlattenCommand:

    def test_flatten(self, runner, tmp_path):
        (tmp_path / "common.cfg").write_text("C = 3\n")
        doxyfile = tmp_path / "Doxyfile"
        doxyfile.write_text("A = 1\n@INCLUDE = common.cfg\n")

        result = runner.invoke(cli, ["flatten", str(doxyfile)])

        assert result.exit_code == SUCCESS
        assert result.output == "A = 1\nC = 3\n\n"

    def test_with_output_dir(self, runner, tmp_path):
        doxyfile = tmp_path / "Doxyfile"
        doxyfile.write_text("A = 1\n")

        result = runner.invoke(cli, ["flatten", str(doxyfile), "--output-dir", "/tmp/out"])

        assert result.output.splitlines()[-1] == "OUTPUT_DIRECTORY = /tmp/out"

    def test_cycle(self, runner, tmp_path):
        doxyfile = tmp_path / "Doxyfile"
        doxyfile.write_text("@INCLUDE = Doxyfile\n")

        result = runner.invoke(cli, ["flatten", str(doxyfile)])

        assert result.exit_code == CONFIG_ERROR
        assert "include cycle" in result.output


class TestConfigCommand:

    def test_show(self, runner, settings, generator_command):
        result = runner.invoke(cli, ["config", "show"])

        assert result.exit_code == SUCCESS
        config = json.loads(result.output)
        assert config['generator']['command'] == generator_command
        assert config['git']['restore_ref'] == "master"

    def test_show_path(self, runner, settings):
        result = runner.invoke(cli, ["config", "show", "--path"])
        assert json.loads(result.output) == {"config_path": str(settings)}

    def test_generate(self, runner, tmp_path, monkeypatch):
        monkeypatch.setenv("HOME", str(tmp_path))
        monkeypatch.delenv("REFDOCS_CONFIG", raising=False)

        result = runner.invoke(cli, ["config", "generate"])

        assert result.exit_code == SUCCESS
        written = json.loads((tmp_path / ".refdocs" / "config.json").read_text())
        assert written['generator']['command'] == ["doxygen", "-"]

        again = runner.invoke(cli, ["config", "generate"])
        assert "already exist" in again.output
