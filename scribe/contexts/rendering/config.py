"""
Render Configuration

Typed render settings (page box, typography, colours, fonts, raster options)
resolved through OmegaConf: structured defaults, optionally merged with a YAML
override file and explicit overrides.

Examples:
    # Defaults (A4, 15 mm margins, paginate mode, raster backend)
    >>> config = load_render_config()

    # YAML override file (unknown keys are rejected)
    >>> config = load_render_config(Path("render.yaml"))

    # Explicit dotted overrides
    >>> config = load_render_config(overrides={"mode": "shrink_to_fit", "page": {"margin_mm": 10}})
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

from dotenv import load_dotenv
from omegaconf import OmegaConf

from scribe.contexts.composition.paginator import MM_TO_PT, PageBox, PaginationMode

load_dotenv()
RENDER_CONFIG_PATH = os.getenv("SCRIBE_RENDER_CONFIG")
FONT_CACHE_PATH = os.getenv("SCRIBE_FONT_CACHE", "outs/fonts")

DEFAULT_WEB_FONT_URL = (
    "https://fonts.googleapis.com/css2?family=Inter:wght@400;600;700&display=swap"
)


@dataclass
class PageConfig:
    """Physical page in millimetres (A4 portrait by default)."""

    width_mm: float = 210.0
    height_mm: float = 297.0
    margin_mm: float = 15.0

    @property
    def box(self) -> PageBox:
        """Page box in points."""
        return PageBox(width=self.width_mm * MM_TO_PT, height=self.height_mm * MM_TO_PT)

    @property
    def margin(self) -> float:
        """Margin in points."""
        return self.margin_mm * MM_TO_PT


@dataclass
class TypographyConfig:
    """Font sizes and vertical rhythm, in points."""

    name_size: float = 22.0
    contact_size: float = 9.0
    heading_size: float = 13.0
    title_size: float = 11.0
    meta_size: float = 9.0
    body_size: float = 9.5
    tag_size: float = 8.5
    line_spacing: float = 1.3
    section_gap: float = 10.0
    item_gap: float = 8.0


@dataclass
class ColorConfig:
    """Hex colours shared by all backends."""

    primary: str = "#1F3A5F"
    text: str = "#222222"
    muted: str = "#666666"
    chip: str = "#E8ECF1"


@dataclass
class FontConfig:
    """
    Font sources.

    Remote TTF URLs are optional; when unset or unreachable the built-in
    Helvetica family is used. The web stylesheet applies to the print view only.
    """

    regular_url: Optional[str] = None
    bold_url: Optional[str] = None
    web_stylesheet_url: Optional[str] = DEFAULT_WEB_FONT_URL
    web_family: str = "Inter"
    inline_web_stylesheet: bool = False
    timeout_s: float = 5.0
    cache_dir: str = FONT_CACHE_PATH


@dataclass
class RasterConfig:
    oversample: float = 2.0


@dataclass
class RenderConfig:
    page: PageConfig = field(default_factory=PageConfig)
    typography: TypographyConfig = field(default_factory=TypographyConfig)
    colors: ColorConfig = field(default_factory=ColorConfig)
    fonts: FontConfig = field(default_factory=FontConfig)
    raster: RasterConfig = field(default_factory=RasterConfig)
    mode: PaginationMode = PaginationMode.PAGINATE
    default_backend: str = "raster"


def hex_to_rgb(value: str) -> Tuple[float, float, float]:
    """Convert "#RRGGBB" to an (r, g, b) tuple of floats in 0-1."""
    value = value.lstrip("#")
    if len(value) != 6:
        raise ValueError(f"Expected #RRGGBB colour, got '#{value}'")
    return tuple(int(value[i : i + 2], 16) / 255.0 for i in (0, 2, 4))


def load_render_config(
    config_path: Optional[Path] = None,
    overrides: Optional[Dict[str, Any]] = None,
) -> RenderConfig:
    """
    Resolve render settings.

    Merge order (later wins): structured defaults, YAML file, explicit overrides.

    Args:
        config_path: Optional YAML override file (defaults to SCRIBE_RENDER_CONFIG env variable)
        overrides: Optional nested dict of overrides

    Returns:
        RenderConfig instance

    Raises:
        FileNotFoundError: If config_path does not exist
        omegaconf.errors.ConfigKeyError: If an override names an unknown key
        omegaconf.errors.ValidationError: If an override has the wrong type
    """
    merged = OmegaConf.structured(RenderConfig)

    if config_path is None and RENDER_CONFIG_PATH:
        config_path = Path(RENDER_CONFIG_PATH)

    if config_path is not None:
        config_path = Path(config_path)
        if not config_path.exists():
            raise FileNotFoundError(f"Render config not found: {config_path}")
        merged = OmegaConf.merge(merged, OmegaConf.load(config_path))

    if overrides:
        merged = OmegaConf.merge(merged, OmegaConf.create(overrides))

    return OmegaConf.to_object(merged)
