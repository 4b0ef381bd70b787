"""Run git via subprocess."""

import subprocess
from pathlib import Path
from typing import Optional, Union

from ..exceptions import GitCommandError
from ..logging_config import get_logger

logger = get_logger(__name__)

PathLike = Union[str, Path]


class GitRunner:
    """Executes git commands inside one directory.

    Every call is synchronous. When ``timeout`` is None a hanging git process
    hangs the caller; that matches how the rest of the pipeline treats git.
    """

    def __init__(
        self,
        cwd: Optional[PathLike] = None,
        git_binary: str = "git",
        timeout: Optional[int] = None,
    ):
        self.cwd = str(Path(cwd).resolve()) if cwd is not None else None
        self.git_binary = git_binary
        self.timeout = timeout

    def at(self, cwd: PathLike) -> "GitRunner":
        """Return a runner bound to another directory with the same settings."""
        return GitRunner(cwd, git_binary=self.git_binary, timeout=self.timeout)

    def run(self, *args: str) -> str:
        """Run ``git <args>`` and return stdout.

        Raises:
            GitCommandError: On non-zero exit, missing binary or timeout
        """
        cmd = [self.git_binary, *args]
        logger.debug("$ %s (cwd=%s)", " ".join(cmd), self.cwd)
        try:
            result = subprocess.run(
                cmd,
                cwd=self.cwd,
                capture_output=True,
                text=True,
                timeout=self.timeout,
            )
        except FileNotFoundError as e:
            raise GitCommandError(cmd, 127, str(e))
        except subprocess.TimeoutExpired as e:
            raise GitCommandError(cmd, -1, f"timed out after {e.timeout}s")

        if result.returncode != 0:
            logger.debug("git failed (%d): %s", result.returncode, result.stderr.strip())
            raise GitCommandError(cmd, result.returncode, result.stderr)
        return result.stdout

    def succeeds(self, *args: str) -> bool:
        """Run a command only for its exit status."""
        try:
            self.run(*args)
            return True
        except GitCommandError:
            return False
