"""
Export context logger.

Provides logging interface for the export context with automatic [export] prefix.
All export modules should import from this module, not from loguru directly.
"""

from loguru import logger

CONTEXT_PREFIX = "[export]"


def _log_info(message: str) -> None:
    """Log info message with [export] prefix."""
    logger.info(f"{CONTEXT_PREFIX} {message}")


def _log_success(message: str) -> None:
    """Log success message with [export] prefix."""
    logger.success(f"{CONTEXT_PREFIX} {message}")


def _log_error(message: str) -> None:
    """Log error message with [export] prefix."""
    logger.error(f"{CONTEXT_PREFIX} {message}")


def _log_warning(message: str) -> None:
    """Log warning message with [export] prefix."""
    logger.warning(f"{CONTEXT_PREFIX} {message}")


def _log_debug(message: str) -> None:
    """Log debug message with [export] prefix."""
    logger.debug(f"{CONTEXT_PREFIX} {message}")


def log_export_start(backend: str, filename: str) -> None:
    """Log start of an export."""
    _log_info(f"Exporting {filename} with {backend} backend...")


def log_export_result(result) -> None:
    """
    Log the outcome of an export.

    Args:
        result: ExportResult from export_document()
    """
    if result.success:
        artifact = result.artifact
        where = f" -> {artifact.path}" if artifact.path else ""
        pages = f", {artifact.page_count} page(s)" if artifact.page_count is not None else ""
        _log_success(
            f"Exported {artifact.filename} in {result.duration_s:.2f}s{pages}{where}"
        )
    else:
        _log_error(f"Export failed ({result.error.kind}): {result.error.message}")
        if result.error.original_error is not None:
            _log_debug(f"  Caused by: {result.error.original_error!r}")
