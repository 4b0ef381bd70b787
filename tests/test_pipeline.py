"""End-to-end tests for RepositoryAnalysis against local repositories."""

import pytest

from repo_analyzer import RepositoryAnalysis
from repo_analyzer.config import AnalyzerConfig
from repo_analyzer.exceptions import AnalysisError, InvalidRepositoryUrlError
from repo_analyzer.host import CloneLocation, Host, Workspace, WorkspaceMode
from repo_analyzer.models import ChangeType
from repo_analyzer.report import render_report

LOCAL_CONFIG = AnalyzerConfig(allowed_hosts=[], require_https=False, workers=2)


class AutoHost(Host):
    def __init__(self):
        self.documents = []

    def choose_clone_location(self):
        return CloneLocation.CURRENT

    def select_directory(self, default):
        return None

    def choose_workspace_mode(self):
        return WorkspaceMode.KEEP

    def show_document(self, path):
        self.documents.append(path)


@pytest.fixture
def workspace_dir(tmp_path):
    path = tmp_path / "workspace"
    path.mkdir()
    return path


class TestEndToEnd:
    def test_pulled_change_is_reported(self, remote, workspace_dir):
        first = RepositoryAnalysis(AutoHost(), Workspace([workspace_dir]), LOCAL_CONFIG)
        clone = first.run(remote.url).repo_path

        remote.push_commit("src/app.js", "const a = 1;\nconst b = 2;\n", "append line")

        analysis = RepositoryAnalysis(AutoHost(), Workspace([clone]), LOCAL_CONFIG)
        sync = analysis.sync(remote.url)
        assert sync.head_changed

        result = analysis.analyze_path(sync.path)
        assert result.mode == "incremental"
        [difference] = result.differences
        assert difference.file == "src/app.js"
        [change] = difference.changes
        assert change.type == ChangeType.ADD
        assert change.line_number == 2
        assert change.content == "const b = 2;"

        html = render_report(result)
        changes = html[html.index('<section id="changes">'):]
        assert "src/app.js" in changes
        assert "+const b = 2;" in changes

    def test_replaced_line_yields_remove_and_add(self, remote, workspace_dir):
        analysis = RepositoryAnalysis(AutoHost(), Workspace([workspace_dir]), LOCAL_CONFIG)
        clone = analysis.run(remote.url).repo_path
        remote.push_commit("src/app.js", "const a = 42;\n", "change value")

        analysis = RepositoryAnalysis(AutoHost(), Workspace([clone]), LOCAL_CONFIG)
        result = analysis.analyze_path(analysis.sync(remote.url).path)

        [difference] = result.differences
        assert [(c.type, c.line_number, c.content) for c in difference.changes] == [
            (ChangeType.REMOVE, 1, "const a = 1;"),
            (ChangeType.ADD, 1, "const a = 42;"),
        ]

    def test_run_fills_repository_info(self, remote, workspace_dir, repo_helper):
        analysis = RepositoryAnalysis(AutoHost(), Workspace([workspace_dir]), LOCAL_CONFIG)
        result = analysis.run(remote.url)

        info = result.repo_info
        assert info.current_branch == "main"
        assert info.last_commit == repo_helper.head(remote.seed)
        assert info.branches == ["main"]
        assert info.remote_url == remote.url
        assert info.modified_files == []

    def test_invalid_url_rejected_before_sync(self, workspace_dir):
        host = AutoHost()
        analysis = RepositoryAnalysis(host, Workspace([workspace_dir]))
        with pytest.raises(InvalidRepositoryUrlError):
            analysis.run("http://example.com/octo/demo")
        assert list(workspace_dir.iterdir()) == []


class TestAnalyzePath:
    def test_not_a_working_copy(self, tmp_path, git_env):
        with pytest.raises(AnalysisError):
            RepositoryAnalysis(AutoHost(), config=LOCAL_CONFIG).analyze_path(tmp_path)

    def test_single_commit_is_incremental(self, local_repo):
        result = RepositoryAnalysis(AutoHost(), config=LOCAL_CONFIG).analyze_path(local_repo)
        assert result.mode == "incremental"
        assert [d.file for d in result.differences] == ["README.md"]

    def test_empty_latest_commit_falls_back_to_full_scan(self, local_repo, repo_helper):
        repo_helper.commit(local_repo, "src/app.js", "var x = eval(input);\n", "add app")
        repo_helper.commit(local_repo, "notes.txt", "eval(x)\n", "notes")
        repo_helper.git(local_repo, "commit", "--quiet", "--allow-empty", "-m", "empty")

        result = RepositoryAnalysis(AutoHost(), config=LOCAL_CONFIG).analyze_path(local_repo)

        assert result.mode == "full"
        assert result.differences == []
        assert [r.file for r in result.security] == ["src/app.js"]

    def test_incremental_scans_only_changed_files(self, local_repo, repo_helper):
        repo_helper.commit(local_repo, "old.js", "eval(a);\n", "old")
        repo_helper.commit(local_repo, "new.js", "eval(b);\n", "new")

        result = RepositoryAnalysis(AutoHost(), config=LOCAL_CONFIG).analyze_path(local_repo)

        assert [r.file for r in result.security] == ["new.js"]

    def test_non_ascii_file_name_is_scanned(self, local_repo, repo_helper):
        repo_helper.commit(local_repo, "naïve.js", 'const apiKey = "abc123";\n', "add naive")

        result = RepositoryAnalysis(AutoHost(), config=LOCAL_CONFIG).analyze_path(local_repo)

        assert [d.file for d in result.differences] == ["naïve.js"]
        [file_result] = result.security
        assert file_result.file == "naïve.js"
        assert any(i.severity.value == "critical" for i in file_result.issues)

    def test_working_copy_changes_listed(self, local_repo):
        (local_repo / "README.md").write_text("# changed\n")
        (local_repo / "extra.txt").write_text("new\n")

        result = RepositoryAnalysis(AutoHost(), config=LOCAL_CONFIG).analyze_path(local_repo)

        assert sorted(result.repo_info.modified_files) == ["README.md", "extra.txt"]


class TestDiscoveryAndScan:
    def test_discover_prunes_excluded_directories(self, tmp_path):
        (tmp_path / "src").mkdir()
        (tmp_path / "src" / "a.ts").write_text("")
        (tmp_path / "src" / "notes.md").write_text("")
        (tmp_path / "node_modules" / "lib").mkdir(parents=True)
        (tmp_path / "node_modules" / "lib" / "index.js").write_text("")
        (tmp_path / "main.PY").write_text("")

        files = RepositoryAnalysis(AutoHost()).discover_source_files(tmp_path)

        assert [f.relative_to(tmp_path).as_posix() for f in files] == ["main.PY", "src/a.ts"]

    def test_scan_results_sorted_by_path(self, tmp_path):
        for name in ("zeta.js", "alpha.js", "mid.js"):
            (tmp_path / name).write_text("var token = eval(userInput);\n")
        (tmp_path / "clean.js").write_text("const ok = 1;\n")

        analysis = RepositoryAnalysis(AutoHost(), config=LOCAL_CONFIG)
        security, optimization = analysis.scan_files(tmp_path, sorted(tmp_path.iterdir()))

        assert [r.file for r in security] == ["alpha.js", "mid.js", "zeta.js"]
        assert [r.file for r in optimization] == ["alpha.js", "mid.js", "zeta.js"]

    def test_oversized_files_skipped(self, tmp_path):
        big = tmp_path / "big.js"
        big.write_text("eval(x);\n" + "x" * (2 * 1024 * 1024))
        config = AnalyzerConfig(max_file_size_mb=1)

        security, _ = RepositoryAnalysis(AutoHost(), config=config).scan_files(tmp_path, [big])

        assert security == []

    def test_unreadable_file_does_not_stop_scan(self, tmp_path):
        good = tmp_path / "good.js"
        good.write_text("eval(x);\n")
        missing = tmp_path / "missing.js"

        security, _ = RepositoryAnalysis(AutoHost(), config=LOCAL_CONFIG).scan_files(
            tmp_path, [missing, good]
        )

        assert [r.file for r in security] == ["good.js"]
