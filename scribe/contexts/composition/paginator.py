"""
Paginator

Splits a composed LayoutTree into fixed-height pages.

Algorithm (paginate mode):
    Walk the flattened block sequence in tree order, accumulating measured
    heights. When the next unit would overflow the usable height of the current
    page, start a new page at offset 0. A unit is a single block, except that a
    section heading and its first item always travel together so a heading is
    never the last block on a page.

Guarantees:
- Blocks are never split across pages (ItemBlock is the minimum unit)
- Placed heights on a page never exceed usable height, unless the page holds a
  single unit that is taller than the usable height on its own (oversized page;
  placed anyway, never truncated)
- At least one page is always produced (the header is always present)

Shrink-to-fit mode places everything on one page and reports the uniform scale
ratio needed to fit it; scaling itself is a rendering concern.

Measurement is delegated to the caller because text height depends on the
backend's font metrics.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, List

from scribe.contexts.composition.layout_tree import Block, ItemBlock, LayoutTree, SectionBlock

MM_TO_PT = 72.0 / 25.4

A4_WIDTH_MM = 210.0
A4_HEIGHT_MM = 297.0

Measure = Callable[[Block], float]


class PaginationMode(str, Enum):
    PAGINATE = "paginate"
    SHRINK_TO_FIT = "shrink_to_fit"


@dataclass(frozen=True)
class PageBox:
    """Physical page dimensions (any consistent unit; backends use points)."""

    width: float
    height: float

    @classmethod
    def a4_points(cls) -> "PageBox":
        return cls(width=A4_WIDTH_MM * MM_TO_PT, height=A4_HEIGHT_MM * MM_TO_PT)

    def usable_height(self, margin: float) -> float:
        return self.height - 2 * margin


@dataclass(frozen=True)
class Placement:
    """A block placed on a page at a vertical offset from the top of the usable area."""

    block: Block
    offset: float
    height: float

    @property
    def bottom(self) -> float:
        return self.offset + self.height


@dataclass
class Page:
    """
    One output page.

    Attributes:
        number: Page number (1-indexed)
        placements: Placed blocks, in tree order
    """

    number: int
    placements: List[Placement] = field(default_factory=list)

    @property
    def content_height(self) -> float:
        return self.placements[-1].bottom if self.placements else 0.0

    @property
    def blocks(self) -> List[Block]:
        return [placement.block for placement in self.placements]

    def is_oversized(self, usable_height: float) -> bool:
        return self.content_height > usable_height


def _units(blocks: List[Block]) -> List[List[Block]]:
    """Group the flat block sequence into indivisible units (heading + first item)."""
    units: List[List[Block]] = []
    i = 0
    while i < len(blocks):
        block = blocks[i]
        if (
            isinstance(block, SectionBlock)
            and i + 1 < len(blocks)
            and isinstance(blocks[i + 1], ItemBlock)
        ):
            units.append([block, blocks[i + 1]])
            i += 2
        else:
            units.append([block])
            i += 1
    return units


def paginate(
    tree: LayoutTree,
    page_box: PageBox,
    margin: float,
    measure: Measure,
) -> List[Page]:
    """
    Split a layout tree into pages using a height-budgeted walk.

    Args:
        tree: Composed layout tree
        page_box: Page dimensions
        margin: Margin applied to top and bottom (same unit as page_box)
        measure: Returns a block's rendered height including its trailing spacing

    Returns:
        One or more pages
    """
    usable = page_box.usable_height(margin)
    if usable <= 0:
        raise ValueError(f"Margin {margin} leaves no usable height on a {page_box.height} page")

    pages: List[Page] = [Page(number=1)]
    offset = 0.0

    for unit in _units(tree.blocks()):
        heights = [measure(block) for block in unit]
        unit_height = sum(heights)

        current = pages[-1]
        if current.placements and offset + unit_height > usable:
            current = Page(number=len(pages) + 1)
            pages.append(current)
            offset = 0.0

        for block, height in zip(unit, heights):
            current.placements.append(Placement(block=block, offset=offset, height=height))
            offset += height

    return pages


def single_page(tree: LayoutTree, measure: Measure) -> Page:
    """Place every block on one page at its natural offset (shrink-to-fit input)."""
    page = Page(number=1)
    offset = 0.0
    for block in tree.blocks():
        height = measure(block)
        page.placements.append(Placement(block=block, offset=offset, height=height))
        offset += height
    return page


def shrink_ratio(
    content_width: float, content_height: float, page_width: float, page_height: float
) -> float:
    """
    Uniform scale factor that fits content inside a page box.

    ratio = min(page_width / content_width, page_height / content_height), capped
    at 1.0 so content that already fits is never enlarged.
    """
    if content_width <= 0 or content_height <= 0:
        return 1.0
    return min(1.0, page_width / content_width, page_height / content_height)


def layout_pages(
    tree: LayoutTree,
    page_box: PageBox,
    margin: float,
    measure: Measure,
    mode: PaginationMode = PaginationMode.PAGINATE,
) -> List[Page]:
    """Dispatch on pagination mode: N pages (paginate) or exactly one (shrink-to-fit)."""
    if PaginationMode(mode) == PaginationMode.SHRINK_TO_FIT:
        return [single_page(tree, measure)]
    return paginate(tree, page_box, margin, measure)
