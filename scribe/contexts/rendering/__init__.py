"""
Rendering Context

Responsibilities:
- Serializes documents through interchangeable backends (raster, print view, vector)
- Measures blocks off-screen for the raster paginator
- Resolves fonts with bounded waits and falls back to built-in fonts
- Wraps library failures in typed export errors

Owns: Backend serialization contracts, render settings, font resources
Never: Decides section order or presence (composition does), names or saves artifacts
"""

from scribe.contexts.rendering.backend import RenderBackend, RenderedDocument
from scribe.contexts.rendering.config import RenderConfig, load_render_config
from scribe.contexts.rendering.exceptions import ExportError, InputError, RenderError, ResourceError
from scribe.contexts.rendering.print_view import PrintViewBackend
from scribe.contexts.rendering.raster import RasterBackend, RasterSurface
from scribe.contexts.rendering.vector import VectorBackend

__all__ = [
    # Backends
    "RenderBackend",
    "RenderedDocument",
    "RasterBackend",
    "RasterSurface",
    "PrintViewBackend",
    "VectorBackend",
    # Configuration
    "RenderConfig",
    "load_render_config",
    # Errors
    "ExportError",
    "InputError",
    "RenderError",
    "ResourceError",
]
