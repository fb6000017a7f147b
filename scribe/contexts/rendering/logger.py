"""
Rendering context logger.

Provides logging interface for rendering context with automatic [render] prefix.
All rendering modules should import from this module, not from loguru directly.
"""

from loguru import logger

CONTEXT_PREFIX = "[render]"


def _log_info(message: str) -> None:
    """Log info message with [render] prefix."""
    logger.info(f"{CONTEXT_PREFIX} {message}")


def _log_success(message: str) -> None:
    """Log success message with [render] prefix."""
    logger.success(f"{CONTEXT_PREFIX} {message}")


def _log_error(message: str) -> None:
    """Log error message with [render] prefix."""
    logger.error(f"{CONTEXT_PREFIX} {message}")


def _log_warning(message: str) -> None:
    """Log warning message with [render] prefix."""
    logger.warning(f"{CONTEXT_PREFIX} {message}")


def _log_debug(message: str) -> None:
    """Log debug message with [render] prefix."""
    logger.debug(f"{CONTEXT_PREFIX} {message}")


def log_render_start(backend: str, detail: str = "") -> None:
    """Log start of a backend render."""
    _log_info(f"Rendering with {backend} backend" + (f" ({detail})" if detail else ""))


def log_render_done(backend: str, size_bytes: int, page_count=None) -> None:
    """Log completion of a backend render."""
    pages = f", {page_count} page(s)" if page_count is not None else ""
    _log_debug(f"  {backend}: {size_bytes} bytes{pages}")


def log_font_fallback(font_name: str, reason: str) -> None:
    """Log that a configured font could not be used and the fallback applies."""
    _log_warning(f"Font '{font_name}' unavailable, using fallback: {reason}")
