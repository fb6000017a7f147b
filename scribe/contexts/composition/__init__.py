"""
Composition Context

Responsibilities:
- Composes a resume record into a render-agnostic layout tree
- Formats dates and subtitles consistently for every backend
- Splits a measured layout tree into fixed-height pages
- Diagnoses page plans (oversized pages, orphaned headings, page-count mismatch)

Owns: Section order, presence rules, page-fitting arithmetic
Never: Measures text or serializes documents
"""

from scribe.contexts.composition.composer import compose, format_date_range, format_month
from scribe.contexts.composition.diagnostics import DocumentDiagnostics, analyze_pages
from scribe.contexts.composition.layout_tree import (
    SECTION_TITLES,
    Body,
    BodyKind,
    HeaderBlock,
    ItemBlock,
    LayoutTree,
    SectionBlock,
    SectionKind,
)
from scribe.contexts.composition.paginator import (
    Page,
    PageBox,
    PaginationMode,
    Placement,
    layout_pages,
    paginate,
    shrink_ratio,
    single_page,
)

__all__ = [
    # Composer
    "compose",
    "format_month",
    "format_date_range",
    # Layout tree
    "LayoutTree",
    "HeaderBlock",
    "SectionBlock",
    "ItemBlock",
    "Body",
    "BodyKind",
    "SectionKind",
    "SECTION_TITLES",
    # Paginator
    "Page",
    "PageBox",
    "Placement",
    "PaginationMode",
    "paginate",
    "single_page",
    "layout_pages",
    "shrink_ratio",
    # Diagnostics
    "DocumentDiagnostics",
    "analyze_pages",
]
