"""Configuration loading and management for Repo Analyzer.

Configuration sources are merged in priority order:
    1. Defaults (defined in AnalyzerConfig)
    2. Global config (~/.repo-analyzer.toml)
    3. Project config (./repo-analyzer.toml)
    4. Explicit config file
    5. Environment variables (REPO_ANALYZER_* prefix)
    6. CLI overrides (passed as kwargs)

Example:
    >>> config = load_config(verbose=True, workers=2)
    >>> config.verbosity
    'verbose'
    >>> config.workers
    2
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Literal, Optional, get_type_hints

from .exceptions import ConfigurationError, InvalidConfigError

Verbosity = Literal["quiet", "normal", "verbose"]

ENV_PREFIX = "REPO_ANALYZER_"


@dataclass(frozen=True)
class ScanThresholds:
    """Tuning knobs for the textual heuristics.

    Attributes:
        long_function_lines: Functions with more body lines than this are flagged
        max_nesting_depth: Brace nesting above this is flagged as excessive
        duplicate_min_length: Only trimmed lines longer than this count as duplicates
    """

    long_function_lines: int = 30
    max_nesting_depth: int = 4
    duplicate_min_length: int = 30

    def __post_init__(self) -> None:
        if self.long_function_lines < 1:
            raise ValueError("long_function_lines must be at least 1")
        if self.max_nesting_depth < 1:
            raise ValueError("max_nesting_depth must be at least 1")
        if self.duplicate_min_length < 0:
            raise ValueError("duplicate_min_length must be non-negative")


@dataclass(frozen=True)
class AnalyzerConfig:
    """Configuration for a sync-and-analyze run.

    All fields have sensible defaults. Users typically override only a few
    fields via CLI flags or a config file.

    Attributes:
        Repository input:
            allowed_hosts: Hosting domains a repository URL must reference
                (empty = any host)
            require_https: Reject URLs that do not start with https://

        Git:
            git_binary: Executable used for all version-control operations
            remote_name: Remote pulled from and compared against
            git_timeout_seconds: Per-command timeout (None = wait forever)
            reports_dir: Directory inside the working copy for diff reports

        File discovery:
            source_extensions: Extensions scanned during a full analysis
            exclude_dirs: Directory names never descended into
            max_file_size_mb: Larger files are skipped

        Performance:
            workers: Parallel scan workers (None = auto-detect)

        Output:
            verbosity: Logging verbosity level
    """

    allowed_hosts: list[str] = field(default_factory=lambda: ["github.com", "gitlab.com"])
    require_https: bool = True

    git_binary: str = "git"
    remote_name: str = "origin"
    git_timeout_seconds: Optional[int] = None
    reports_dir: str = "diff_reports"

    source_extensions: list[str] = field(
        default_factory=lambda: [
            ".ts",
            ".js",
            ".jsx",
            ".tsx",
            ".py",
            ".java",
            ".cpp",
            ".cs",
        ]
    )
    exclude_dirs: list[str] = field(
        default_factory=lambda: ["node_modules", "dist", "build", ".git"]
    )
    max_file_size_mb: float = 10.0

    workers: Optional[int] = None

    verbosity: Verbosity = "normal"

    thresholds: ScanThresholds = field(default_factory=ScanThresholds)

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        if self.workers is not None and self.workers < 1:
            raise ValueError("workers must be at least 1")
        if self.git_timeout_seconds is not None and self.git_timeout_seconds < 1:
            raise ValueError("git_timeout_seconds must be at least 1")
        if self.max_file_size_mb <= 0:
            raise ValueError("max_file_size_mb must be positive")
        if not self.remote_name:
            raise ValueError("remote_name must not be empty")
        if not self.reports_dir or "/" in self.reports_dir or self.reports_dir.startswith("."):
            raise ValueError("reports_dir must be a plain, non-hidden directory name")
        for ext in self.source_extensions:
            if not ext.startswith("."):
                raise ValueError(f"source extension must start with '.': {ext}")
        if self.verbosity not in ("quiet", "normal", "verbose"):
            raise ValueError("verbosity must be one of quiet, normal, verbose")

    @property
    def max_file_size_bytes(self) -> int:
        """Get max file size in bytes."""
        return int(self.max_file_size_mb * 1024 * 1024)


def load_config(config_file: Optional[Path] = None, **overrides) -> AnalyzerConfig:
    """Load configuration with auto-discovery and merging.

    Args:
        config_file: Optional explicit config file path
        **overrides: Direct overrides (typically from CLI flags). ``None``
            values are ignored so unset CLI options keep file/env values.

    Returns:
        Validated AnalyzerConfig instance

    Raises:
        ConfigurationError: If a config file is missing or unreadable
        InvalidConfigError: If a value fails validation
    """
    merged: dict = {}

    global_config = Path.home() / ".repo-analyzer.toml"
    if global_config.exists():
        try:
            merged.update(_load_toml_file(global_config))
        except ConfigurationError:
            raise
        except Exception as e:
            raise ConfigurationError(f"Invalid global config '{global_config}': {e}")

    project_config = Path.cwd() / "repo-analyzer.toml"
    if project_config.exists():
        try:
            merged.update(_load_toml_file(project_config))
        except ConfigurationError:
            raise
        except Exception as e:
            raise ConfigurationError(f"Invalid project config '{project_config}': {e}")

    if config_file is not None:
        if not config_file.exists():
            raise ConfigurationError(f"Config file not found: {config_file}")
        try:
            merged.update(_load_toml_file(config_file))
        except ConfigurationError:
            raise
        except Exception as e:
            raise ConfigurationError(f"Invalid config file '{config_file}': {e}")

    merged.update(_load_env_vars())

    # Convert verbosity boolean flags to string
    overrides = {k: v for k, v in overrides.items() if v is not None}
    if "verbose" in overrides:
        if overrides["verbose"]:
            overrides["verbosity"] = "verbose"
        del overrides["verbose"]
    if "quiet" in overrides:
        if overrides["quiet"]:
            overrides["verbosity"] = "quiet"
        del overrides["quiet"]

    merged.update(overrides)

    # [thresholds] section from TOML
    thresholds = merged.pop("thresholds", None)
    if isinstance(thresholds, dict):
        try:
            merged["thresholds"] = ScanThresholds(**thresholds)
        except TypeError as e:
            raise ConfigurationError(f"Invalid [thresholds] config: {e}")
        except ValueError as e:
            raise InvalidConfigError("thresholds", thresholds, str(e))
    elif isinstance(thresholds, ScanThresholds):
        merged["thresholds"] = thresholds

    try:
        return AnalyzerConfig(**merged)
    except TypeError as e:
        # Unknown field in config
        raise ConfigurationError(f"Invalid configuration: {e}")
    except ValueError as e:
        raise InvalidConfigError("config", merged, str(e))


def _load_env_vars() -> dict[str, Any]:
    """Load configuration from REPO_ANALYZER_* environment variables.

    Supported environment variables:
        REPO_ANALYZER_REQUIRE_HTTPS: bool (true/false/1/0)
        REPO_ANALYZER_GIT_BINARY: str
        REPO_ANALYZER_REMOTE_NAME: str
        REPO_ANALYZER_GIT_TIMEOUT_SECONDS: int
        REPO_ANALYZER_REPORTS_DIR: str
        REPO_ANALYZER_MAX_FILE_SIZE_MB: float
        REPO_ANALYZER_WORKERS: int
        REPO_ANALYZER_VERBOSITY: quiet/normal/verbose

    List fields are only configurable through TOML.
    """
    type_hints = get_type_hints(AnalyzerConfig)

    result: dict[str, Any] = {}

    for field_name in AnalyzerConfig.__dataclass_fields__:
        env_key = f"{ENV_PREFIX}{field_name.upper()}"
        env_value = os.environ.get(env_key)

        if env_value is None:
            continue

        type_hint = type_hints.get(field_name)
        if type_hint is None:
            continue

        try:
            parsed = _parse_env_value(env_value, type_hint)
            if parsed is not None:
                result[field_name] = parsed
        except ValueError as e:
            raise InvalidConfigError(env_key, env_value, str(e))

    return result


def _parse_env_value(value: str, type_hint: Any) -> Any:
    """Parse environment variable string to the correct type.

    Returns None for types that cannot be expressed as a single string.
    """
    origin = getattr(type_hint, "__origin__", None)

    # Optional[X] is Union[X, None]
    args = getattr(type_hint, "__args__", ())
    if type(None) in args:
        non_none_types = [t for t in args if t is not type(None)]
        if non_none_types:
            type_hint = non_none_types[0]
            origin = getattr(type_hint, "__origin__", None)

    if origin is list or type_hint is list:
        return None

    if type_hint is bool:
        lower = value.lower()
        if lower in ("true", "1", "yes", "on"):
            return True
        elif lower in ("false", "0", "no", "off"):
            return False
        else:
            raise ValueError(f"expected true/false, got '{value}'")

    if type_hint is int:
        return int(value)

    if type_hint is float:
        return float(value)

    if type_hint is str or origin is Literal:
        return value

    return None


def _load_toml_file(path: Path) -> dict:
    """Load TOML file and return parsed dict."""
    try:
        # Python 3.11+ has tomllib in stdlib
        import tomllib
    except ModuleNotFoundError:
        try:
            import tomli as tomllib  # type: ignore
        except ImportError:
            raise ConfigurationError(
                "TOML support requires Python 3.11+ or 'tomli' package. "
                "Install with: pip install tomli"
            )

    with open(path, "rb") as f:
        return tomllib.load(f)
