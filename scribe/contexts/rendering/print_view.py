"""
Print View Backend

Renders the layout tree as a standalone, print-ready HTML document. The page
box, margins and keep-together rules are expressed as print CSS (@page size,
break-inside: avoid on items, break-after: avoid on headings), so pagination is
left to the browser's print engine and the user produces the PDF with the
browser's own print dialog. A print button triggers window.print() and is
hidden in print output.

Web fonts are referenced with a <link> by default, or inlined when
fonts.inline_web_stylesheet is set (fetched with a bounded wait; on failure the
fallback font stack applies and the render still succeeds).
"""

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from jinja2 import Environment, FileSystemLoader, StrictUndefined, TemplateError, select_autoescape

from scribe.contexts.composition.layout_tree import LayoutTree
from scribe.contexts.rendering.backend import RenderedDocument
from scribe.contexts.rendering.config import RenderConfig, load_render_config
from scribe.contexts.rendering.exceptions import RenderError
from scribe.contexts.rendering.fonts import fetch_stylesheet
from scribe.contexts.rendering.logger import log_render_done, log_render_start

TEMPLATES_PATH = Path(__file__).parent / "templates"
TEMPLATE_NAME = "print_view.html.jinja"

FALLBACK_FONT_STACK = '"Helvetica Neue", Helvetica, Arial, sans-serif'

_UNSAFE_CSS = re.compile(r"[<>{};]")


@dataclass
class WebFonts:
    """Font settings handed to the template."""

    family_stack: str
    link_url: Optional[str] = None
    inline_css: Optional[str] = None


def font_family_stack(family: Optional[str]) -> str:
    """CSS font-family value with the configured family first, then the fallback stack."""
    family = _UNSAFE_CSS.sub("", family or "").strip().strip("\"'")
    if not family:
        return FALLBACK_FONT_STACK
    return f'"{family}", {FALLBACK_FONT_STACK}'


def document_title(tree: LayoutTree) -> str:
    return f"{tree.header.name} - Resume" if tree.header.name else "Resume"


class PrintViewBackend:
    """
    Print-ready markup backend.

    Example:
        >>> document = PrintViewBackend().render(compose(record))
        >>> document.extension
        'html'
    """

    name = "print_view"
    source = "layout"
    media_type = "text/html"
    extension = "html"

    def __init__(self, config: Optional[RenderConfig] = None, templates_path: Path = TEMPLATES_PATH):
        self.config = config or load_render_config()
        self.env = Environment(
            loader=FileSystemLoader(str(templates_path)),
            autoescape=select_autoescape(["html", "jinja"]),
            undefined=StrictUndefined,
            trim_blocks=True,
            lstrip_blocks=True,
        )

    def web_fonts(self) -> WebFonts:
        fonts = self.config.fonts
        stack = font_family_stack(fonts.web_family)
        if not fonts.web_stylesheet_url:
            return WebFonts(family_stack=stack)

        if fonts.inline_web_stylesheet:
            css = fetch_stylesheet(fonts.web_stylesheet_url, fonts.timeout_s)
            if css is None:
                return WebFonts(family_stack=FALLBACK_FONT_STACK)
            # Closing tags inside an inlined stylesheet would end the <style> element
            return WebFonts(family_stack=stack, inline_css=css.replace("</", "<\\/"))

        return WebFonts(family_stack=stack, link_url=fonts.web_stylesheet_url)

    def render(self, tree: LayoutTree) -> RenderedDocument:
        """
        Render a layout tree to print-ready HTML.

        Raises:
            RenderError: If the template is missing or fails to render
        """
        log_render_start(self.name)
        try:
            template = self.env.get_template(TEMPLATE_NAME)
            markup = template.render(
                tree=tree,
                title=document_title(tree),
                page=self.config.page,
                type=self.config.typography,
                colors=self.config.colors,
                fonts=self.web_fonts(),
            )
        except TemplateError as e:
            raise RenderError(f"Print view template failed: {e}", self.name, e) from e

        document = RenderedDocument(
            content=markup,
            media_type=self.media_type,
            extension=self.extension,
        )
        log_render_done(self.name, document.size_bytes)
        return document
