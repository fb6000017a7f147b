"""
Composition context logger.

Provides logging interface for the composition context with automatic [layout] prefix.
All composition modules should import from this module, not from loguru directly.
"""

from typing import List

from loguru import logger

CONTEXT_PREFIX = "[layout]"


def _log_info(message: str) -> None:
    """Log info message with [layout] prefix."""
    logger.info(f"{CONTEXT_PREFIX} {message}")


def _log_warning(message: str) -> None:
    """Log warning message with [layout] prefix."""
    logger.warning(f"{CONTEXT_PREFIX} {message}")


def _log_debug(message: str) -> None:
    """Log debug message with [layout] prefix."""
    logger.debug(f"{CONTEXT_PREFIX} {message}")


def log_pagination_summary(pages: List, usable_height: float, diagnostics=None) -> None:
    """
    Log the page plan with per-page fill and any diagnostic findings.

    Args:
        pages: Page plan from the paginator
        usable_height: Page height minus margins
        diagnostics: Optional DocumentDiagnostics for the plan
    """
    _log_info(f"Paginated into {len(pages)} page(s)")
    for page in pages:
        fill = page.content_height / usable_height * 100 if usable_height else 0.0
        _log_debug(f"  Page {page.number}: {len(page.placements)} blocks, {fill:.0f}% filled")

    if diagnostics is not None:
        for note in diagnostics.get_notes():
            _log_warning(note)
        for issue in diagnostics.get_inherited_issues():
            _log_warning(issue)
