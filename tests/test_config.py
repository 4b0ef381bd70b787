"""Tests for configuration loading and validation."""

import os

import pytest

from repo_analyzer.config import AnalyzerConfig, ScanThresholds, load_config
from repo_analyzer.exceptions import ConfigurationError, InvalidConfigError


@pytest.fixture(autouse=True)
def isolated(tmp_path, monkeypatch):
    """No global or project config files and no env overrides."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.chdir(tmp_path)
    for key in list(os.environ):
        if key.startswith("REPO_ANALYZER_"):
            monkeypatch.delenv(key)
    return home


class TestDefaults:
    def test_defaults(self):
        config = load_config()
        assert config.allowed_hosts == ["github.com", "gitlab.com"]
        assert config.require_https is True
        assert config.remote_name == "origin"
        assert config.reports_dir == "diff_reports"
        assert ".ts" in config.source_extensions
        assert "node_modules" in config.exclude_dirs
        assert config.thresholds == ScanThresholds()
        assert config.verbosity == "normal"

    def test_max_file_size_bytes(self):
        assert AnalyzerConfig(max_file_size_mb=0.5).max_file_size_bytes == 512 * 1024


class TestValidation:
    @pytest.mark.parametrize(
        "kwargs",
        [
            {"workers": 0},
            {"git_timeout_seconds": 0},
            {"max_file_size_mb": 0},
            {"remote_name": ""},
            {"reports_dir": ".hidden"},
            {"reports_dir": "a/b"},
            {"source_extensions": ["py"]},
            {"verbosity": "loud"},
        ],
    )
    def test_rejects_invalid_values(self, kwargs):
        with pytest.raises(ValueError):
            AnalyzerConfig(**kwargs)

    def test_rejects_invalid_thresholds(self):
        with pytest.raises(ValueError):
            ScanThresholds(long_function_lines=0)


class TestSources:
    def test_project_config_file(self, tmp_path):
        (tmp_path / "repo-analyzer.toml").write_text(
            'allowed_hosts = ["git.example.com"]\nworkers = 3\n'
        )
        config = load_config()
        assert config.allowed_hosts == ["git.example.com"]
        assert config.workers == 3

    def test_global_config_is_overridden_by_project(self, tmp_path, isolated):
        (isolated / ".repo-analyzer.toml").write_text("workers = 2\nremote_name = 'up'\n")
        (tmp_path / "repo-analyzer.toml").write_text("workers = 5\n")
        config = load_config()
        assert config.workers == 5
        assert config.remote_name == "up"

    def test_explicit_file_and_thresholds_section(self, tmp_path):
        path = tmp_path / "custom.toml"
        path.write_text("[thresholds]\nlong_function_lines = 10\nmax_nesting_depth = 2\n")
        config = load_config(path)
        assert config.thresholds.long_function_lines == 10
        assert config.thresholds.max_nesting_depth == 2
        assert config.thresholds.duplicate_min_length == 30

    def test_missing_explicit_file(self, tmp_path):
        with pytest.raises(ConfigurationError, match="Config file not found"):
            load_config(tmp_path / "nope.toml")

    def test_unknown_key(self, tmp_path):
        path = tmp_path / "bad.toml"
        path.write_text("colour = 'blue'\n")
        with pytest.raises(ConfigurationError, match="Invalid configuration"):
            load_config(path)

    def test_invalid_threshold_value(self, tmp_path):
        path = tmp_path / "bad.toml"
        path.write_text("[thresholds]\nmax_nesting_depth = 0\n")
        with pytest.raises(InvalidConfigError):
            load_config(path)

    def test_malformed_toml(self, tmp_path):
        path = tmp_path / "broken.toml"
        path.write_text("workers = \n")
        with pytest.raises(ConfigurationError, match="Invalid config file"):
            load_config(path)

    def test_env_vars(self, monkeypatch):
        monkeypatch.setenv("REPO_ANALYZER_REQUIRE_HTTPS", "false")
        monkeypatch.setenv("REPO_ANALYZER_WORKERS", "4")
        monkeypatch.setenv("REPO_ANALYZER_MAX_FILE_SIZE_MB", "2.5")
        config = load_config()
        assert config.require_https is False
        assert config.workers == 4
        assert config.max_file_size_mb == 2.5

    def test_bad_env_bool(self, monkeypatch):
        monkeypatch.setenv("REPO_ANALYZER_REQUIRE_HTTPS", "maybe")
        with pytest.raises(InvalidConfigError):
            load_config()

    def test_overrides_win_and_none_is_ignored(self, tmp_path, monkeypatch):
        (tmp_path / "repo-analyzer.toml").write_text("workers = 3\n")
        monkeypatch.setenv("REPO_ANALYZER_VERBOSITY", "quiet")
        config = load_config(workers=None, verbose=True)
        assert config.workers == 3
        assert config.verbosity == "verbose"

    def test_quiet_flag(self):
        assert load_config(quiet=True).verbosity == "quiet"
