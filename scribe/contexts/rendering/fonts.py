"""
Font resolution with bounded waits.

Remote font assets are optional. Every network fetch uses a timeout, and any
failure is raised as ResourceError and absorbed here: a warning is logged and
the caller gets None, meaning "use the built-in fallback font". An unreachable
font server therefore degrades typography but never fails or hangs an export.

Sources may be http(s) URLs (downloaded once into a cache directory), file://
URLs, or plain local paths.
"""

import hashlib
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional, TypeVar
from urllib.parse import urlparse

import requests

from scribe.contexts.rendering.config import FontConfig
from scribe.contexts.rendering.exceptions import ResourceError
from scribe.contexts.rendering.logger import _log_debug, log_font_fallback

T = TypeVar("T")


@dataclass(frozen=True)
class ResolvedFonts:
    """Local font files for the regular and bold faces (None = built-in fallback)."""

    regular: Optional[Path] = None
    bold: Optional[Path] = None


def fetch_bytes(url: str, timeout_s: float) -> bytes:
    """
    Download a remote asset with a bounded wait.

    Raises:
        ResourceError: On timeout, connection failure or non-2xx response
    """
    try:
        response = requests.get(url, timeout=timeout_s)
        response.raise_for_status()
    except requests.RequestException as e:
        raise ResourceError(f"Could not fetch {url}", original_error=e) from e
    return response.content


def _local_path(source: str) -> Optional[Path]:
    """Return a Path for file:// URLs and plain paths, None for remote URLs."""
    parsed = urlparse(source)
    if parsed.scheme in ("http", "https"):
        return None
    if parsed.scheme == "file":
        return Path(parsed.path)
    return Path(source)


def _cache_path(url: str, cache_dir: Path) -> Path:
    digest = hashlib.sha1(url.encode("utf-8")).hexdigest()[:16]
    suffix = Path(urlparse(url).path).suffix or ".ttf"
    return cache_dir / f"{digest}{suffix}"


def _resolve_font_file(source: str, cache_dir: Path, timeout_s: float) -> Path:
    local = _local_path(source)
    if local is not None:
        if not local.exists():
            raise ResourceError(f"Font file not found: {local}")
        return local

    cached = _cache_path(source, cache_dir)
    if cached.exists():
        _log_debug(f"Using cached font {cached}")
        return cached

    content = fetch_bytes(source, timeout_s)
    try:
        cache_dir.mkdir(parents=True, exist_ok=True)
        cached.write_bytes(content)
    except OSError as e:
        raise ResourceError(f"Could not cache font to {cached}", original_error=e) from e
    _log_debug(f"Downloaded font {source} -> {cached}")
    return cached


def with_fallback(load: Callable[[], T], fallback: T, font_name: str) -> T:
    """
    Run a font loader, absorbing ResourceError into the fallback value.

    Args:
        load: Loader that raises ResourceError on failure
        fallback: Value returned when the loader fails
        font_name: Name used in the warning

    Returns:
        Loader result, or fallback
    """
    try:
        return load()
    except ResourceError as e:
        log_font_fallback(font_name, e.message)
        return fallback


def resolve_font_file(
    source: Optional[str], cache_dir: Path, timeout_s: float
) -> Optional[Path]:
    """Local path of a configured font, or None to use the built-in fallback."""
    if not source:
        return None
    return with_fallback(lambda: _resolve_font_file(source, Path(cache_dir), timeout_s), None, source)


def resolve_fonts(font_config: FontConfig) -> ResolvedFonts:
    """Resolve the regular and bold font files of a FontConfig."""
    cache_dir = Path(font_config.cache_dir)
    return ResolvedFonts(
        regular=resolve_font_file(font_config.regular_url, cache_dir, font_config.timeout_s),
        bold=resolve_font_file(font_config.bold_url, cache_dir, font_config.timeout_s),
    )


def fetch_stylesheet(url: Optional[str], timeout_s: float) -> Optional[str]:
    """Fetch a web-font stylesheet for inlining, or None when unavailable."""
    if not url:
        return None

    def load() -> str:
        return fetch_bytes(url, timeout_s).decode("utf-8", errors="replace")

    return with_fallback(load, None, url)
