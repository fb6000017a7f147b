"""
Layout diagnostics for paginated resumes.

Checks a page plan (and optionally the rendered page count) against the
pagination guarantees and reports human-readable issues.

Detection capabilities:
- Oversized pages: a single unit taller than the usable height (permitted, but reported)
- Overfilled pages: several units exceeding the usable height (a pagination bug)
- Orphaned headings: a section heading as the last block on a page
- Page count mismatch: rendered document pages differ from the page plan
"""

from dataclasses import dataclass, field
from typing import List, Optional

from scribe.contexts.composition.layout_tree import ItemBlock, SectionBlock
from scribe.contexts.composition.paginator import Page

# Heights are floats; ignore rounding noise when comparing against the budget
HEIGHT_TOLERANCE = 0.01


class IssueTemplates:
    """Centralized issue message templates (f-string style)."""

    # Document-level
    PAGE_COUNT_MISMATCH = "Page count mismatch: {actual} (expected {intended})"

    # Page-level
    OVERSIZED_PAGE = "Page {page}: content {height:.1f} exceeds usable height {usable:.1f} (single oversized block)"
    OVERFILLED_PAGE = "Page {page}: {blocks} blocks stacked to {height:.1f}, over usable height {usable:.1f}"
    ORPHANED_HEADING = "Page {page}: section heading '{section}' has no item following it"


# =============================================================================
# Diagnostics Hierarchy
# =============================================================================


@dataclass
class Diagnostics:
    """Base class for hierarchical diagnostics."""

    components: List["Diagnostics"] = field(default_factory=list)

    def get_issues(self) -> List[str]:
        """Generate issues for this level based on field values. Override in subclasses."""
        return []

    def get_notes(self) -> List[str]:
        """Informational findings that are not failures. Override in subclasses."""
        return []

    def get_inherited_issues(self) -> List[str]:
        """Collect issues from this level and all descendants."""
        all_issues = list(self.get_issues())
        for component in self.components:
            all_issues.extend(component.get_inherited_issues())
        return all_issues

    @property
    def is_valid(self) -> bool:
        """True if no issues at this level or any descendant."""
        return len(self.get_inherited_issues()) == 0


@dataclass
class PageDiagnostics(Diagnostics):
    """Diagnostics for a single page of the plan."""

    page_number: int = 0
    content_height: float = 0.0
    usable_height: float = 0.0
    unit_count: int = 0
    block_count: int = 0
    orphaned_heading: Optional[str] = None

    @property
    def overflows(self) -> bool:
        return self.content_height > self.usable_height + HEIGHT_TOLERANCE

    @property
    def oversized(self) -> bool:
        """Overflow caused by one unit (heading + first item counts as one)."""
        return self.overflows and self.unit_count <= 1

    def get_issues(self) -> List[str]:
        issues = []
        if self.overflows and not self.oversized:
            issues.append(
                IssueTemplates.OVERFILLED_PAGE.format(
                    page=self.page_number,
                    blocks=self.block_count,
                    height=self.content_height,
                    usable=self.usable_height,
                )
            )
        if self.orphaned_heading is not None:
            issues.append(
                IssueTemplates.ORPHANED_HEADING.format(
                    page=self.page_number, section=self.orphaned_heading
                )
            )
        return issues

    def get_notes(self) -> List[str]:
        """Informational findings that are not failures."""
        if self.oversized:
            return [
                IssueTemplates.OVERSIZED_PAGE.format(
                    page=self.page_number, height=self.content_height, usable=self.usable_height
                )
            ]
        return []


@dataclass
class DocumentDiagnostics(Diagnostics):
    """Top-level diagnostics for the entire document."""

    intended_page_count: int = 0
    actual_page_count: Optional[int] = None  # None when the backend has no page count

    def get_issues(self) -> List[str]:
        issues = []
        if self.actual_page_count is not None and self.actual_page_count != self.intended_page_count:
            issues.append(
                IssueTemplates.PAGE_COUNT_MISMATCH.format(
                    actual=self.actual_page_count,
                    intended=self.intended_page_count,
                )
            )
        return issues

    def get_notes(self) -> List[str]:
        notes = []
        for component in self.components:
            notes.extend(component.get_notes())
        return notes


# =============================================================================
# Main Analysis Function
# =============================================================================


def _analyze_page(page: Page, usable_height: float) -> PageDiagnostics:
    blocks = page.blocks
    # A heading moved together with its first item is one unit; count items
    # that are not the first item after a heading.
    units = 0
    for i, block in enumerate(blocks):
        if isinstance(block, ItemBlock) and i > 0 and isinstance(blocks[i - 1], SectionBlock):
            continue
        units += 1

    orphan = None
    if blocks and isinstance(blocks[-1], SectionBlock):
        orphan = blocks[-1].title

    return PageDiagnostics(
        page_number=page.number,
        content_height=page.content_height,
        usable_height=usable_height,
        unit_count=units,
        block_count=len(blocks),
        orphaned_heading=orphan,
    )


def analyze_pages(
    pages: List[Page],
    usable_height: float,
    actual_page_count: Optional[int] = None,
) -> DocumentDiagnostics:
    """
    Analyze a page plan against the pagination guarantees.

    Args:
        pages: Page plan from the paginator
        usable_height: Page height minus top and bottom margins
        actual_page_count: Pages in the rendered document, if known

    Returns:
        DocumentDiagnostics tree. Call .get_inherited_issues() for all issues,
        or .is_valid to check if the plan passes validation.
    """
    document_diagnostics = DocumentDiagnostics(
        intended_page_count=len(pages),
        actual_page_count=actual_page_count,
    )
    for page in pages:
        document_diagnostics.components.append(_analyze_page(page, usable_height))
    return document_diagnostics
