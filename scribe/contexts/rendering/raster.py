"""
Raster Backend

Renders the layout tree off-screen at full natural height with PyMuPDF, measures
every block from that render, paginates with those measurements, then snapshots
each page's strip of the off-screen surface into a bitmap (oversampled for
sharp text) and embeds it as a single image per A4 output page.

Flow:
    LayoutTree ──> RasterSurface (typeset + draw once, natural height)
               ──> layout_pages(measure=surface.measure)
               ──> snapshot strip per page (zoom ≥ 2) ──> insert_image on A4 page

Scale rules:
- paginate: strip drawn at page width; only an oversized strip is shrunk
  (uniformly) to fit the usable height, never truncated
- shrink_to_fit: the whole surface is shrunk by
  min(page_w / content_w, page_h / content_h), centered, on exactly one page
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

import fitz  # PyMuPDF

from scribe.contexts.composition.diagnostics import analyze_pages
from scribe.contexts.composition.layout_tree import (
    Block,
    BodyKind,
    HeaderBlock,
    ItemBlock,
    LayoutTree,
    SectionBlock,
)
from scribe.contexts.composition.logger import log_pagination_summary
from scribe.contexts.composition.paginator import (
    Page,
    PageBox,
    PaginationMode,
    layout_pages,
    shrink_ratio,
)
from scribe.contexts.rendering.backend import RenderedDocument
from scribe.contexts.rendering.config import RenderConfig, hex_to_rgb, load_render_config
from scribe.contexts.rendering.exceptions import RenderError, ResourceError
from scribe.contexts.rendering.fonts import resolve_fonts, with_fallback
from scribe.contexts.rendering.logger import _log_debug, _log_warning, log_render_done, log_render_start
from scribe.utils.pdf_processing import page_count
from scribe.utils.text_processing import wrap_words


def _fitz_errors() -> tuple:
    """Exception types PyMuPDF raises (RuntimeError in older releases, FzErrorBase in newer ones)."""
    errors = [RuntimeError, ValueError]
    for owner in (fitz, getattr(fitz, "mupdf", None)):
        base = getattr(owner, "FzErrorBase", None)
        if isinstance(base, type) and base not in errors:
            errors.append(base)
    return tuple(errors)


FITZ_ERRORS = _fitz_errors()

MIN_OVERSAMPLE = 2.0

BUILTIN_REGULAR = "helv"
BUILTIN_BOLD = "hebo"

CONTACT_SEPARATOR = "  |  "
BULLET = "•"
BULLET_INDENT = 10.0
TITLE_DATE_GAP = 8.0
CHIP_PADDING_X = 4.0
CHIP_PADDING_Y = 2.0
CHIP_GAP = 4.0
HEADER_RULE_WIDTH = 1.5
HEADING_RULE_WIDTH = 0.5


@dataclass
class DrawOp:
    """
    One drawing primitive, positioned relative to its block's top edge.

    kind "text": x, y is the baseline origin
    kind "rule": horizontal line from (x, y) with the given width
    kind "rect": filled rectangle with top-left (x, y)
    """

    kind: str
    x: float
    y: float
    text: str = ""
    bold: bool = False
    size: float = 0.0
    color: Tuple[float, float, float] = (0.0, 0.0, 0.0)
    width: float = 0.0
    height: float = 0.0
    stroke: float = 0.0


@dataclass
class BlockLayout:
    height: float
    ops: List[DrawOp] = field(default_factory=list)


class RasterTypesetter:
    """
    Lays out individual blocks with PyMuPDF font metrics.

    Produces BlockLayouts whose heights are the measurements the paginator uses
    and whose ops are what the surface draws, so measurement and drawing cannot
    disagree.
    """

    def __init__(self, config: RenderConfig, regular: fitz.Font, bold: fitz.Font):
        self.config = config
        self.type = config.typography
        self.regular = regular
        self.bold = bold
        self.left = config.page.margin
        self.width = config.page.box.width - 2 * config.page.margin

        self.primary = hex_to_rgb(config.colors.primary)
        self.text_color = hex_to_rgb(config.colors.text)
        self.muted = hex_to_rgb(config.colors.muted)
        self.chip_fill = hex_to_rgb(config.colors.chip)

    # -------------------------------------------------------------------------
    # Primitives
    # -------------------------------------------------------------------------

    def text_width(self, text: str, size: float, bold: bool = False) -> float:
        font = self.bold if bold else self.regular
        return font.text_length(text, fontsize=size)

    def line_height(self, size: float) -> float:
        return size * self.type.line_spacing

    def _baseline(self, top: float, size: float) -> float:
        return top + (self.line_height(size) - size) / 2 + size * 0.8

    def _paragraph(
        self,
        ops: List[DrawOp],
        text: str,
        y: float,
        size: float,
        color,
        bold: bool = False,
        x: Optional[float] = None,
        width: Optional[float] = None,
    ) -> float:
        """Append wrapped text lines; return the y below the last line."""
        x = self.left if x is None else x
        width = self.width if width is None else width
        for line in wrap_words(text, width, lambda s: self.text_width(s, size, bold)):
            ops.append(
                DrawOp("text", x, self._baseline(y, size), text=line, bold=bold, size=size, color=color)
            )
            y += self.line_height(size)
        return y

    def _chip(self, ops: List[DrawOp], label: str, x: float, y: float, size: float) -> Tuple[float, float]:
        """Append one tag chip at (x, y); return its (width, height)."""
        max_text = self.width - 2 * CHIP_PADDING_X
        lines = wrap_words(label, max_text, lambda s: self.text_width(s, size)) or [""]
        text_w = max(self.text_width(line, size) for line in lines)
        chip_w = text_w + 2 * CHIP_PADDING_X
        chip_h = len(lines) * self.line_height(size) + 2 * CHIP_PADDING_Y

        ops.append(DrawOp("rect", x, y, color=self.chip_fill, width=chip_w, height=chip_h))
        line_y = y + CHIP_PADDING_Y
        for line in lines:
            ops.append(
                DrawOp(
                    "text",
                    x + CHIP_PADDING_X,
                    self._baseline(line_y, size),
                    text=line,
                    size=size,
                    color=self.text_color,
                )
            )
            line_y += self.line_height(size)
        return chip_w, chip_h

    def _tag_row(self, ops: List[DrawOp], tags, y: float) -> float:
        """Flow chips left to right, wrapping at the content width."""
        size = self.type.tag_size
        x = self.left
        row_h = 0.0
        for tag in tags:
            chip_w = self.text_width(tag, size) + 2 * CHIP_PADDING_X
            if x > self.left and x + chip_w > self.left + self.width:
                y += row_h + CHIP_GAP / 2
                x = self.left
                row_h = 0.0
            w, h = self._chip(ops, tag, x, y, size)
            x += w + CHIP_GAP
            row_h = max(row_h, h)
        return y + row_h

    # -------------------------------------------------------------------------
    # Blocks
    # -------------------------------------------------------------------------

    def layout(self, block: Block) -> BlockLayout:
        if isinstance(block, HeaderBlock):
            return self._layout_header(block)
        if isinstance(block, SectionBlock):
            return self._layout_heading(block)
        return self._layout_item(block)

    def _layout_header(self, block: HeaderBlock) -> BlockLayout:
        ops: List[DrawOp] = []
        y = 0.0
        if block.name:
            y = self._paragraph(ops, block.name, y, self.type.name_size, self.primary, bold=True)
        if block.contacts:
            y += 2.0
            y = self._paragraph(
                ops, CONTACT_SEPARATOR.join(block.contacts), y, self.type.contact_size, self.text_color
            )
        y += 4.0
        ops.append(
            DrawOp("rule", self.left, y, color=self.primary, width=self.width, stroke=HEADER_RULE_WIDTH)
        )
        return BlockLayout(height=y + HEADER_RULE_WIDTH + self.type.section_gap / 2, ops=ops)

    def _layout_heading(self, block: SectionBlock) -> BlockLayout:
        ops: List[DrawOp] = []
        y = self.type.section_gap
        y = self._paragraph(ops, block.title, y, self.type.heading_size, self.primary, bold=True)
        ops.append(
            DrawOp("rule", self.left, y, color=self.muted, width=self.width, stroke=HEADING_RULE_WIDTH)
        )
        return BlockLayout(height=y + 5.0, ops=ops)

    def _layout_item(self, block: ItemBlock) -> BlockLayout:
        ops: List[DrawOp] = []
        y = 0.0

        if block.chip:
            _, chip_h = self._chip(ops, block.title, self.left, y, self.type.tag_size)
            return BlockLayout(height=chip_h + CHIP_GAP, ops=ops)

        if block.title or block.date_text:
            y = self._title_row(ops, block, y)

        if block.subtitle:
            y = self._paragraph(ops, block.subtitle, y, self.type.meta_size, self.muted)

        for body in block.bodies:
            y += 1.5
            if body.kind == BodyKind.PARAGRAPH:
                for text in body.items:
                    y = self._paragraph(ops, text, y, self.type.body_size, self.text_color)
            elif body.kind == BodyKind.BULLETS:
                for text in body.items:
                    ops.append(
                        DrawOp(
                            "text",
                            self.left + 2.0,
                            self._baseline(y, self.type.body_size),
                            text=BULLET,
                            size=self.type.body_size,
                            color=self.text_color,
                        )
                    )
                    y = self._paragraph(
                        ops,
                        text,
                        y,
                        self.type.body_size,
                        self.text_color,
                        x=self.left + BULLET_INDENT,
                        width=self.width - BULLET_INDENT,
                    )
            elif body.kind == BodyKind.TAGS:
                y = self._tag_row(ops, body.items, y + 1.0)

        return BlockLayout(height=y + self.type.item_gap, ops=ops)

    def _title_row(self, ops: List[DrawOp], block: ItemBlock, y: float) -> float:
        date_w = 0.0
        if block.date_text:
            date_w = self.text_width(block.date_text, self.type.meta_size)
            ops.append(
                DrawOp(
                    "text",
                    self.left + self.width - date_w,
                    self._baseline(y, self.type.title_size),
                    text=block.date_text,
                    size=self.type.meta_size,
                    color=self.muted,
                )
            )
        title_width = self.width - (date_w + TITLE_DATE_GAP if date_w else 0.0)
        end = self._paragraph(
            ops, block.title, y, self.type.title_size, self.text_color, bold=True, width=title_width
        )
        return max(end, y + self.line_height(self.type.title_size))


class RasterSurface:
    """
    Off-screen render of a whole layout tree at natural height.

    Scoped resource: the PyMuPDF document is opened on enter and closed on exit,
    whether the export succeeds or fails.

    Example:
        >>> with RasterSurface(tree, typesetter, page_box, margin) as surface:
        ...     height = surface.measure(tree.header)
        ...     pixmap = surface.snapshot(0, 200, zoom=2)
    """

    def __init__(self, tree: LayoutTree, typesetter: RasterTypesetter, page_box: PageBox, margin: float):
        self.tree = tree
        self.typesetter = typesetter
        self.page_box = page_box
        self.margin = margin
        self.height = 0.0
        self._layouts: Dict[int, BlockLayout] = {}
        self._tops: Dict[int, float] = {}
        self._doc = None
        self._page = None

    def __enter__(self) -> "RasterSurface":
        top = self.margin
        for block in self.tree.blocks():
            layout = self.typesetter.layout(block)
            self._layouts[id(block)] = layout
            self._tops[id(block)] = top
            top += layout.height
        self.height = top + self.margin

        self._doc = fitz.open()
        try:
            self._page = self._doc.new_page(width=self.page_box.width, height=self.height)
            for block in self.tree.blocks():
                self._draw(self._layouts[id(block)], self._tops[id(block)])
        except BaseException:
            self._doc.close()
            raise
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if self._doc is not None:
            self._doc.close()
            self._doc = None
            self._page = None

    def _draw(self, layout: BlockLayout, top: float) -> None:
        page = self._page
        for op in layout.ops:
            if op.kind == "text":
                font = self.typesetter.bold if op.bold else self.typesetter.regular
                writer = fitz.TextWriter(page.rect)
                writer.append(fitz.Point(op.x, top + op.y), op.text, font=font, fontsize=op.size)
                writer.write_text(page, color=op.color)
            elif op.kind == "rule":
                page.draw_line(
                    fitz.Point(op.x, top + op.y),
                    fitz.Point(op.x + op.width, top + op.y),
                    color=op.color,
                    width=op.stroke,
                )
            elif op.kind == "rect":
                rect = fitz.Rect(op.x, top + op.y, op.x + op.width, top + op.y + op.height)
                page.draw_rect(rect, color=None, fill=op.color)

    def measure(self, block: Block) -> float:
        """Natural height of a block (including its trailing spacing)."""
        return self._layouts[id(block)].height

    def top_of(self, block: Block) -> float:
        """Natural top edge of a block on the surface."""
        return self._tops[id(block)]

    def snapshot(self, top: float, bottom: float, zoom: float) -> "fitz.Pixmap":
        """Rasterize the horizontal strip [top, bottom) at zoom× resolution."""
        clip = fitz.Rect(0, top, self.page_box.width, bottom)
        return self._page.get_pixmap(matrix=fitz.Matrix(zoom, zoom), clip=clip, alpha=False)


class RasterBackend:
    """
    Bitmap-per-page PDF backend.

    Args:
        config: Render settings (default: load_render_config())
        mode: Pagination mode override (default: config.mode)

    Example:
        >>> backend = RasterBackend(mode=PaginationMode.SHRINK_TO_FIT)
        >>> document = backend.render(compose(record))
        >>> document.page_count
        1
    """

    name = "raster"
    source = "layout"
    media_type = "application/pdf"
    extension = "pdf"

    def __init__(self, config: Optional[RenderConfig] = None, mode: Optional[PaginationMode] = None):
        self.config = config or load_render_config()
        self.mode = PaginationMode(mode or self.config.mode)
        self.zoom = self.config.raster.oversample
        if self.zoom < MIN_OVERSAMPLE:
            _log_warning(f"Oversample {self.zoom} below {MIN_OVERSAMPLE}, using {MIN_OVERSAMPLE}")
            self.zoom = MIN_OVERSAMPLE

    @property
    def page_box(self) -> PageBox:
        return self.config.page.box

    @property
    def margin(self) -> float:
        return self.config.page.margin

    def _load_font(self, path, builtin: str) -> fitz.Font:
        if path is None:
            return fitz.Font(builtin)

        def load() -> fitz.Font:
            try:
                return fitz.Font(fontfile=str(path))
            except FITZ_ERRORS as e:
                raise ResourceError(f"Unreadable font file {path}", self.name, e) from e

        return with_fallback(load, fitz.Font(builtin), str(path))

    def typesetter(self) -> RasterTypesetter:
        """Build a typesetter with fonts resolved for this render."""
        fonts = resolve_fonts(self.config.fonts)
        return RasterTypesetter(
            self.config,
            regular=self._load_font(fonts.regular, BUILTIN_REGULAR),
            bold=self._load_font(fonts.bold, BUILTIN_BOLD),
        )

    def open_surface(self, tree: LayoutTree) -> RasterSurface:
        """Off-screen surface for a tree; use as a context manager."""
        return RasterSurface(tree, self.typesetter(), self.page_box, self.margin)

    def paginate(self, tree: LayoutTree, surface: RasterSurface) -> List[Page]:
        """Page plan for a tree using the surface's measurements."""
        return layout_pages(tree, self.page_box, self.margin, surface.measure, self.mode)

    def _placement_rect(self, strip_height: float) -> "fitz.Rect":
        box = self.page_box
        if self.mode == PaginationMode.SHRINK_TO_FIT:
            ratio = shrink_ratio(box.width, strip_height, box.width, box.height)
            width, height = box.width * ratio, strip_height * ratio
            x0, y0 = (box.width - width) / 2, (box.height - height) / 2
        else:
            usable = box.usable_height(self.margin)
            ratio = shrink_ratio(box.width, strip_height, box.width, usable)
            width, height = box.width * ratio, strip_height * ratio
            x0, y0 = (box.width - width) / 2, self.margin
        return fitz.Rect(x0, y0, x0 + width, y0 + height)

    def render_pages(self, pages: List[Page], surface: RasterSurface) -> bytes:
        """
        Snapshot each page's strip and embed it as one image per output page.

        Args:
            pages: Page plan (one page in shrink-to-fit mode)
            surface: Entered RasterSurface the plan was measured on

        Returns:
            PDF bytes with len(pages) pages
        """
        output = fitz.open()
        try:
            for page in pages:
                if self.mode == PaginationMode.SHRINK_TO_FIT:
                    top, bottom = 0.0, surface.height
                else:
                    first, last = page.placements[0], page.placements[-1]
                    top = surface.top_of(first.block)
                    bottom = surface.top_of(last.block) + last.height

                pixmap = surface.snapshot(top, bottom, self.zoom)
                out_page = output.new_page(width=self.page_box.width, height=self.page_box.height)
                out_page.insert_image(self._placement_rect(bottom - top), pixmap=pixmap)
                _log_debug(f"  Page {page.number}: strip {top:.1f}-{bottom:.1f}pt at {self.zoom}x")

            return output.tobytes(garbage=3, deflate=True)
        finally:
            output.close()

    def render(self, tree: LayoutTree) -> RenderedDocument:
        """
        Measure, paginate and rasterize a layout tree into a PDF.

        Raises:
            RenderError: If PyMuPDF fails while drawing, snapshotting or encoding
        """
        log_render_start(self.name, f"{self.mode.value}, {self.zoom}x oversampling")
        try:
            with self.open_surface(tree) as surface:
                pages = self.paginate(tree, surface)
                content = self.render_pages(pages, surface)
        except FITZ_ERRORS as e:
            raise RenderError("Raster snapshot failed", self.name, e) from e

        actual = page_count(content)
        diagnostics = None
        if self.mode == PaginationMode.PAGINATE:
            diagnostics = analyze_pages(pages, self.page_box.usable_height(self.margin), actual)
            log_pagination_summary(pages, self.page_box.usable_height(self.margin), diagnostics)

        log_render_done(self.name, len(content), actual)
        return RenderedDocument(
            content=content,
            media_type=self.media_type,
            extension=self.extension,
            page_count=actual,
            diagnostics=diagnostics,
        )
