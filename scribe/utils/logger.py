"""
Session logging for export runs.

One log directory per CLI invocation holds a full DEBUG trace of that session;
the console only shows warnings unless asked to be verbose, and goes to stderr
so command output on stdout stays clean. Every session starts with a provenance
header recording what produced the artifacts (command, scribe and renderer
library versions, plus caller-supplied fields such as record and backend).

Context-specific wrappers live in contexts/{context}/logger.py; library code
logs through those and never configures sinks itself.
"""

import os
import sys
from importlib.metadata import PackageNotFoundError, version
from pathlib import Path
from typing import Dict, Optional

from dotenv import load_dotenv
from loguru import logger

load_dotenv()
CONSOLE_LEVEL = os.getenv("SCRIBE_CONSOLE_LOG_LEVEL", "WARNING")

FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <7} | {elapsed} | {message}"
CONSOLE_FORMAT = "<level>{level: <7}</level> | <level>{message}</level>"

# Distributions whose versions change how an export looks
RENDER_STACK = ("scribe", "PyMuPDF", "reportlab", "Jinja2", "PyPDF2")


def _distribution_version(name: str) -> str:
    try:
        return version(name)
    except PackageNotFoundError:
        return "not installed"


def setup_logger(
    context_name: str,
    log_dir: Path,
    extra_provenance: Optional[Dict] = None,
    verbose: bool = False,
) -> Path:
    """
    Replace loguru's sinks with a session log file and a quiet stderr console.

    Args:
        context_name: Names the log file ("export" -> export.log)
        log_dir: Directory for this session, created if missing
        extra_provenance: Additional key-value pairs for the provenance header
        verbose: Show DEBUG on the console instead of SCRIBE_CONSOLE_LOG_LEVEL

    Returns:
        Path to the log file
    """
    log_dir.mkdir(exist_ok=True, parents=True)
    log_file = log_dir / f"{context_name}.log"

    logger.remove()
    logger.add(log_file, format=FILE_FORMAT, level="DEBUG", encoding="utf-8")
    logger.add(
        sys.stderr,
        format=CONSOLE_FORMAT,
        level="DEBUG" if verbose else CONSOLE_LEVEL,
        colorize=True,
    )

    log_provenance(extra_provenance)
    return log_file


def reset_logger() -> None:
    """Drop session sinks and go back to loguru's default stderr sink."""
    logger.remove()
    logger.add(sys.stderr)


def log_provenance(extra_context: Optional[Dict] = None) -> None:
    """
    Log what produced this session: command, working directory, interpreter and
    render stack versions, then any extra key-value pairs.
    """
    logger.info("=" * 80)
    logger.info(f"Command: {' '.join(sys.argv)}")
    logger.info(f"Working directory: {Path.cwd()}")
    logger.info(f"Python: {sys.version.split()[0]}")
    logger.info(
        "Render stack: "
        + ", ".join(f"{name} {_distribution_version(name)}" for name in RENDER_STACK)
    )

    for key, value in (extra_context or {}).items():
        logger.info(f"{key}: {value}")

    logger.info("=" * 80)
