"""Shared fixtures: isolated git environment and throwaway repositories."""

import shutil
import subprocess
from pathlib import Path

import pytest


def _git(cwd, *args) -> str:
    result = subprocess.run(
        ["git", *args], cwd=str(cwd), capture_output=True, text=True, check=True
    )
    return result.stdout


class RepoHelper:
    """Small command set for building repositories in tests."""

    def git(self, cwd, *args) -> str:
        return _git(cwd, *args)

    def init(self, path: Path, bare: bool = False) -> Path:
        path.mkdir(parents=True, exist_ok=True)
        _git(path, "init", "--quiet", *(["--bare"] if bare else []))
        _git(path, "symbolic-ref", "HEAD", "refs/heads/main")
        return path

    def commit(self, repo: Path, name: str, content: str, message: str = "update") -> str:
        target = repo / name
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(content, encoding="utf-8")
        _git(repo, "add", name)
        _git(repo, "commit", "--quiet", "-m", message)
        return self.head(repo)

    def head(self, repo: Path) -> str:
        return _git(repo, "rev-parse", "HEAD").strip()


class Remote:
    """A bare repository plus a seed working copy that pushes to it."""

    def __init__(self, helper: RepoHelper, root: Path):
        self.helper = helper
        self.bare = helper.init(root / "upstream" / "project.git", bare=True)
        self.seed = helper.init(root / "seed")
        helper.git(self.seed, "remote", "add", "origin", str(self.bare))

    @property
    def url(self) -> str:
        return str(self.bare)

    def push_commit(self, name: str, content: str, message: str = "update") -> str:
        sha = self.helper.commit(self.seed, name, content, message)
        self.helper.git(self.seed, "push", "--quiet", "origin", "main")
        return sha


@pytest.fixture
def git_env(tmp_path, monkeypatch):
    """Identity and HOME isolated from the developer's git configuration."""
    if shutil.which("git") is None:
        pytest.skip("git not found")
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("GIT_CONFIG_NOSYSTEM", "1")
    monkeypatch.setenv("GIT_AUTHOR_NAME", "Test")
    monkeypatch.setenv("GIT_AUTHOR_EMAIL", "test@test.com")
    monkeypatch.setenv("GIT_COMMITTER_NAME", "Test")
    monkeypatch.setenv("GIT_COMMITTER_EMAIL", "test@test.com")
    monkeypatch.delenv("GIT_DIR", raising=False)
    monkeypatch.delenv("GIT_WORK_TREE", raising=False)
    return home


@pytest.fixture
def repo_helper(git_env) -> RepoHelper:
    return RepoHelper()


@pytest.fixture
def remote(tmp_path, repo_helper) -> Remote:
    """Upstream with two commits on ``main``."""
    upstream = Remote(repo_helper, tmp_path)
    upstream.push_commit("README.md", "# project\n", "initial")
    upstream.push_commit("src/app.js", "const a = 1;\n", "add app")
    return upstream


@pytest.fixture
def local_repo(tmp_path, repo_helper) -> Path:
    """Standalone repository with one commit and no remote."""
    repo = repo_helper.init(tmp_path / "local")
    repo_helper.commit(repo, "README.md", "# local\n", "initial")
    return repo


@pytest.fixture
def empty_remote(tmp_path, repo_helper) -> Remote:
    """Upstream without commits; tests push what they need."""
    return Remote(repo_helper, tmp_path / "bare-only")
