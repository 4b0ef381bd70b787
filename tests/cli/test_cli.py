"""Tests for the repo-analyzer command line."""

import json

import pytest
from typer.testing import CliRunner

from repo_analyzer import __version__
from repo_analyzer.cli import app
from repo_analyzer.cli._common import git_runner
from repo_analyzer.config import AnalyzerConfig

runner = CliRunner()

SAMPLE_DIFF = """\
diff --git a/src/app.js b/src/app.js
index 1111111..2222222 100644
--- a/src/app.js
+++ b/src/app.js
@@ -1,2 +1,2 @@
 const a = 1;
-var b = 2;
+let b = 2;
"""


@pytest.fixture
def in_tmp(tmp_path, monkeypatch):
    """Run from an empty directory so no project config is picked up."""
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture
def local_config(in_tmp):
    path = in_tmp / "local.toml"
    path.write_text("allowed_hosts = []\nrequire_https = false\n")
    return path


class TestVersion:
    def test_version(self):
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert f"version {__version__}" in result.output


class TestChanges:
    def test_table_output(self, in_tmp):
        diff = in_tmp / "fix.patch"
        diff.write_text(SAMPLE_DIFF)
        result = runner.invoke(app, ["changes", str(diff)])
        assert result.exit_code == 0
        assert "src/app.js" in result.output
        assert "let b = 2;" in result.output

    def test_json_from_stdin(self):
        result = runner.invoke(app, ["changes", "-", "--json", "--no-hints"], input=SAMPLE_DIFF)
        assert result.exit_code == 0
        [entry] = json.loads(result.output)
        assert entry["file"] == "src/app.js"
        assert [(c["type"], c["line_number"], c["content"]) for c in entry["changes"]] == [
            ("remove", 2, "var b = 2;"),
            ("add", 2, "let b = 2;"),
        ]
        assert all(c["suggestion"] is None for c in entry["changes"])

    def test_hints_attached(self):
        result = runner.invoke(app, ["changes", "-", "--json"], input=SAMPLE_DIFF)
        removed = json.loads(result.output)[0]["changes"][0]
        assert "var" in removed["suggestion"]

    def test_empty_diff(self):
        result = runner.invoke(app, ["changes", "-"], input="")
        assert result.exit_code == 0
        assert "No added or removed lines" in result.output

    def test_missing_file(self, in_tmp):
        result = runner.invoke(app, ["changes", str(in_tmp / "missing.patch")])
        assert result.exit_code == 2


class TestScan:
    def test_scan_writes_report(self, local_repo, in_tmp):
        out = in_tmp / "report.html"
        result = runner.invoke(app, ["scan", str(local_repo), "-o", str(out), "--no-open"])
        assert result.exit_code == 0, result.output
        assert out.exists()
        assert "Report:" in result.output

    def test_scan_non_repository(self, in_tmp, git_env):
        plain = in_tmp / "plain"
        plain.mkdir()
        result = runner.invoke(app, ["scan", str(plain), "--no-open", "-o", "r.html"])
        assert result.exit_code == 1
        assert "Analysis failed" in result.output


class TestAnalyze:
    def test_invalid_url(self, in_tmp):
        result = runner.invoke(app, ["analyze", "http://example.com/octo/demo", "--no-open"])
        assert result.exit_code == 2
        assert "Invalid repository URL" in result.output

    def test_clone_and_report(self, remote, local_config, in_tmp):
        workspace = in_tmp / "workspace"
        workspace.mkdir()
        out = in_tmp / "analysis.html"

        result = runner.invoke(
            app,
            [
                "analyze", remote.url,
                "-c", str(local_config),
                "--workspace", str(workspace),
                "-o", str(out),
                "--no-open",
            ],
        )

        assert result.exit_code == 0, result.output
        assert (workspace / "project" / "src" / "app.js").exists()
        html = out.read_text(encoding="utf-8")
        assert "Recent Changes" in html
        assert "src/app.js" in html

    def test_cancel_exits_cleanly(self, remote, local_config, in_tmp):
        workspace = in_tmp / "workspace"
        workspace.mkdir()
        result = runner.invoke(
            app,
            [
                "analyze", remote.url,
                "-c", str(local_config),
                "--workspace", str(workspace),
                "--clone-location", "cancel",
                "--no-open",
            ],
        )
        assert result.exit_code == 0
        assert not (workspace / "project").exists()

    def test_new_window_restarts_in_clone(self, remote, local_config, in_tmp):
        workspace = in_tmp / "workspace"
        workspace.mkdir()
        out = in_tmp / "analysis.html"
        result = runner.invoke(
            app,
            [
                "analyze", remote.url,
                "-c", str(local_config),
                "--workspace", str(workspace),
                "--workspace-mode", "new-window",
                "-o", str(out),
                "--no-open",
            ],
        )
        assert result.exit_code == 0, result.output
        assert "Switched workspace to" in result.output
        assert out.exists()

    def test_clone_failure_exits_1(self, local_config, in_tmp, git_env):
        result = runner.invoke(
            app,
            [
                "analyze", str(in_tmp / "nowhere" / "repo.git"),
                "-c", str(local_config),
                "--workspace", str(in_tmp),
                "--no-open",
            ],
        )
        assert result.exit_code == 1
        assert "Analysis failed" in result.output


class TestScanFailures:
    def test_unexpected_error_is_reported(self, local_repo, in_tmp, monkeypatch):
        def broken(result, output):
            raise RuntimeError("disk on fire")

        monkeypatch.setattr("repo_analyzer.cli.scan.write_report", broken)
        result = runner.invoke(app, ["scan", str(local_repo), "--no-open", "-o", "r.html"])
        assert result.exit_code == 1
        assert "Analysis failed" in result.output
        assert "disk on fire" in result.output

    def test_interrupt_exits_130(self, local_repo, in_tmp, monkeypatch):
        def interrupted(result, output):
            raise KeyboardInterrupt

        monkeypatch.setattr("repo_analyzer.cli.scan.write_report", interrupted)
        result = runner.invoke(app, ["scan", str(local_repo), "--no-open", "-o", "r.html"])
        assert result.exit_code == 130
        assert "Analysis interrupted" in result.output


class TestGitRunnerSettings:
    def test_runner_follows_config(self):
        settings = AnalyzerConfig(git_binary="/opt/git/bin/git", git_timeout_seconds=15)
        runner = git_runner(settings)
        assert runner.git_binary == "/opt/git/bin/git"
        assert runner.timeout == 15
