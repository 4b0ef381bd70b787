"""
Logging configuration for Repo Analyzer.

Progress from the synchronizer and analyzers goes to stderr through a rich
handler, so stdout stays free for reports and ``--json`` output. Every git
subprocess is logged at DEBUG by ``repo_analyzer.git.runner``; that trace is
kept out of ``--verbose`` unless explicitly requested.
"""

import logging
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

ROOT_LOGGER_NAME = "repo_analyzer"
GIT_TRACE_LOGGER_NAME = f"{ROOT_LOGGER_NAME}.git.runner"


def setup_logging(
    verbose: bool = False,
    quiet: bool = False,
    log_file: Optional[str] = None,
    trace_git: bool = False,
) -> logging.Logger:
    """
    Route repo_analyzer logs to a rich stderr handler.

    Args:
        verbose: DEBUG for the analyzer's own loggers
        quiet: Only errors
        log_file: Also append plain-text records to this file
        trace_git: Log every git command line and failure (DEBUG)

    Returns:
        The repo_analyzer root logger
    """
    if quiet:
        level = logging.ERROR
    elif verbose:
        level = logging.DEBUG
    else:
        level = logging.WARNING

    handlers: list[logging.Handler] = [
        RichHandler(
            console=Console(stderr=True),
            rich_tracebacks=True,
            tracebacks_show_locals=verbose,
            markup=False,
            show_time=True,
            show_path=verbose,
        )
    ]

    if log_file:
        file_handler = logging.FileHandler(log_file, mode="a")
        file_handler.setFormatter(
            logging.Formatter(
                "%(asctime)s - %(name)s - %(levelname)s - %(message)s", datefmt="%Y-%m-%d %H:%M:%S"
            )
        )
        handlers.append(file_handler)

    # force=True: one process may run several CLI invocations (CliRunner)
    logging.basicConfig(
        level=level, format="%(message)s", datefmt="[%X]", handlers=handlers, force=True
    )

    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.setLevel(level)

    git_level = logging.DEBUG if trace_git else max(level, logging.INFO)
    logging.getLogger(GIT_TRACE_LOGGER_NAME).setLevel(git_level)

    return logger


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Logger under the repo_analyzer namespace (``__name__`` already is)."""
    if name is None:
        return logging.getLogger(ROOT_LOGGER_NAME)

    if not name.startswith(ROOT_LOGGER_NAME):
        name = f"{ROOT_LOGGER_NAME}.{name}"

    return logging.getLogger(name)
