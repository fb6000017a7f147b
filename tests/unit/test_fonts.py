"""Unit tests for bounded-wait font resolution and fallback."""

import pytest
import requests

from scribe.contexts.rendering import fonts
from scribe.contexts.rendering.config import FontConfig
from scribe.contexts.rendering.exceptions import ResourceError


class _Response:
    def __init__(self, content=b"", status=200):
        self.content = content
        self.status = status

    def raise_for_status(self):
        if self.status >= 400:
            raise requests.HTTPError(f"{self.status} error")


@pytest.mark.unit
def test_fetch_bytes_passes_timeout(monkeypatch):
    """Test remote fetches use the configured timeout."""
    calls = {}

    def fake_get(url, timeout):
        calls["timeout"] = timeout
        return _Response(b"font-bytes")

    monkeypatch.setattr(fonts.requests, "get", fake_get)

    assert fonts.fetch_bytes("https://fonts.example/a.ttf", 2.5) == b"font-bytes"
    assert calls["timeout"] == 2.5


@pytest.mark.unit
@pytest.mark.parametrize(
    "failure",
    [requests.Timeout("slow"), requests.ConnectionError("down")],
)
def test_fetch_bytes_wraps_network_errors(monkeypatch, failure):
    """Test network errors become ResourceError."""
    def fake_get(url, timeout):
        raise failure

    monkeypatch.setattr(fonts.requests, "get", fake_get)

    with pytest.raises(ResourceError) as exc_info:
        fonts.fetch_bytes("https://fonts.example/a.ttf", 1.0)
    assert exc_info.value.original_error is failure


@pytest.mark.unit
def test_fetch_bytes_http_error(monkeypatch):
    """Test HTTP error statuses become ResourceError."""
    monkeypatch.setattr(fonts.requests, "get", lambda url, timeout: _Response(status=404))
    with pytest.raises(ResourceError):
        fonts.fetch_bytes("https://fonts.example/a.ttf", 1.0)


@pytest.mark.unit
def test_remote_font_downloaded_once_into_cache(monkeypatch, tmp_path):
    """Test a remote font is downloaded once and cached."""
    calls = []

    def fake_get(url, timeout):
        calls.append(url)
        return _Response(b"ttf")

    monkeypatch.setattr(fonts.requests, "get", fake_get)
    url = "https://fonts.example/Inter-Regular.ttf"

    first = fonts.resolve_font_file(url, tmp_path, 1.0)
    second = fonts.resolve_font_file(url, tmp_path, 1.0)

    assert first == second
    assert first.read_bytes() == b"ttf"
    assert first.suffix == ".ttf"
    assert calls == [url]


@pytest.mark.unit
def test_unreachable_font_falls_back_to_none(monkeypatch, tmp_path):
    """Test an unreachable font resolves to the built-in."""
    def fake_get(url, timeout):
        raise requests.Timeout("slow")

    monkeypatch.setattr(fonts.requests, "get", fake_get)
    assert fonts.resolve_font_file("https://fonts.example/x.ttf", tmp_path, 0.1) is None


@pytest.mark.unit
def test_local_font_paths(tmp_path):
    """Test local font paths are used directly."""
    font_file = tmp_path / "Local.ttf"
    font_file.write_bytes(b"ttf")

    assert fonts.resolve_font_file(str(font_file), tmp_path, 1.0) == font_file
    assert fonts.resolve_font_file(font_file.as_uri(), tmp_path, 1.0) == font_file
    assert fonts.resolve_font_file(str(tmp_path / "missing.ttf"), tmp_path, 1.0) is None
    assert fonts.resolve_font_file(None, tmp_path, 1.0) is None


@pytest.mark.unit
def test_resolve_fonts_defaults_to_builtin(tmp_path):
    """Test no font sources means built-in fonts."""
    resolved = fonts.resolve_fonts(FontConfig(cache_dir=str(tmp_path)))
    assert resolved.regular is None
    assert resolved.bold is None


@pytest.mark.unit
def test_with_fallback_only_absorbs_resource_errors():
    """Test with_fallback only absorbs ResourceError."""
    def failing():
        raise ResourceError("gone")

    assert fonts.with_fallback(failing, "fallback", "Inter") == "fallback"

    def broken():
        raise KeyError("bug")

    with pytest.raises(KeyError):
        fonts.with_fallback(broken, "fallback", "Inter")


@pytest.mark.unit
def test_fetch_stylesheet(monkeypatch):
    """Test stylesheet fetching and its fallback."""
    monkeypatch.setattr(fonts.requests, "get", lambda url, timeout: _Response(b"@font-face {}"))
    assert fonts.fetch_stylesheet("https://fonts.example/css", 1.0) == "@font-face {}"
    assert fonts.fetch_stylesheet(None, 1.0) is None

    def fake_get(url, timeout):
        raise requests.ConnectionError("down")

    monkeypatch.setattr(fonts.requests, "get", fake_get)
    assert fonts.fetch_stylesheet("https://fonts.example/css", 1.0) is None
