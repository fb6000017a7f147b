"""
PDF processing utilities for inspecting exported documents.

Main class:
    PDFDocument: Parsed PDF with line-based text extraction and search.

Helper functions:
    page_count: Quick page count without full extraction.
    page_sizes: Page dimensions in points.
    normalize_for_matching: Text normalization for fuzzy matching.
    cluster_by_y_tolerance: Y-coordinate clustering for line detection.
"""

import io
from pathlib import Path
from typing import Dict, List, Optional, Tuple, Union

import pdfplumber
from PyPDF2 import PdfReader
from PyPDF2.errors import PdfReadError

PDFSource = Union[str, Path, bytes]


def _as_stream(source: PDFSource):
    """Return something both PyPDF2 and pdfplumber can open."""
    if isinstance(source, bytes):
        return io.BytesIO(source)
    return str(source)


def page_count(source: PDFSource) -> Optional[int]:
    """Get page count from a PDF path or PDF bytes, or None if unreadable."""
    try:
        reader = PdfReader(_as_stream(source))
        return len(reader.pages)
    except (PdfReadError, OSError, ValueError):
        return None


def page_sizes(source: PDFSource) -> List[Tuple[float, float]]:
    """Get (width, height) in points for every page of a PDF."""
    reader = PdfReader(_as_stream(source))
    return [(float(page.mediabox.width), float(page.mediabox.height)) for page in reader.pages]


def normalize_for_matching(text: str) -> str:
    """Keep only lowercase alphanumeric characters for fuzzy text matching."""
    return "".join(c for c in text.lower() if c.isalnum())


def cluster_by_y_tolerance(chars: List, tolerance: float = 3.0) -> List[List]:
    """
    Group characters into lines by Y-coordinate proximity.

    Handles baseline shifts between bold/regular text that would otherwise split lines.
    """
    if not chars:
        return []

    sorted_chars = sorted(chars, key=lambda c: c["top"])

    lines = []
    current_line = [sorted_chars[0]]
    current_y = sorted_chars[0]["top"]

    for char in sorted_chars[1:]:
        if abs(char["top"] - current_y) <= tolerance:
            current_line.append(char)
        else:
            lines.append(current_line)
            current_line = [char]
            current_y = char["top"]

    if current_line:
        lines.append(current_line)

    return lines


class PDFDocument:
    """
    Parsed PDF with line-based text extraction.

    Vector exports carry real text and can be inspected line by line; raster
    exports carry one image per page and extract to no lines at all, which is
    itself a useful check.

    Page data is lazily loaded and cached on first access.

    Args:
        source: Path to a PDF file or the PDF bytes
        y_tolerance: Max Y-distance (points) to group characters as same line.

    Example:
        >>> pdf = PDFDocument(Path("Ada_Lovelace_Resume.pdf"))
        >>> for line in pdf.get_lines(page=1):
        ...     print(line)
    """

    def __init__(self, source: PDFSource, y_tolerance: float = 3.0):
        if not isinstance(source, bytes):
            source = Path(source)
            if not source.exists():
                raise FileNotFoundError(f"PDF not found: {source}")

        self.source = source
        self.y_tolerance = y_tolerance
        self._pages_cache: Optional[Dict[int, List[str]]] = None
        self._page_count: Optional[int] = None

    @property
    def page_count(self) -> int:
        if self._page_count is None:
            self._page_count = page_count(self.source) or 0
        return self._page_count

    def _extract_pages(self) -> Dict[int, List[str]]:
        """Extract text lines from every page, keyed by 1-indexed page number."""
        pages_data: Dict[int, List[str]] = {}

        with pdfplumber.open(_as_stream(self.source)) as pdf:
            for page_num, page in enumerate(pdf.pages, start=1):
                pages_data[page_num] = self._chars_to_lines(page.chars)

        return pages_data

    def _chars_to_lines(self, chars: List) -> List[str]:
        """Convert character list to text lines with Y-clustering."""
        text_lines = []
        for char_objs in cluster_by_y_tolerance(chars, tolerance=self.y_tolerance):
            char_objs.sort(key=lambda c: c["x0"])
            text_lines.append("".join(c["text"] for c in char_objs))
        return text_lines

    def _ensure_loaded(self) -> None:
        if self._pages_cache is None:
            self._pages_cache = self._extract_pages()

    def get_lines(self, page: int) -> List[str]:
        """
        Get text lines for a specific page.

        Args:
            page: Page number (1-indexed)

        Returns:
            List of text lines, top-to-bottom order. Empty list if the page doesn't exist.
        """
        self._ensure_loaded()
        return self._pages_cache.get(page, [])

    def get_text(self) -> str:
        """All extracted lines of the document joined with newlines."""
        self._ensure_loaded()
        return "\n".join(
            line for page_num in sorted(self._pages_cache) for line in self._pages_cache[page_num]
        )

    def find(self, text: str, whole_line: bool = False) -> Optional[Tuple[int, int]]:
        """
        Find first occurrence of text in the document.

        Args:
            text: Text to search for (normalized: lowercase, alphanumeric only)
            whole_line: If True, text must match entire line. If False, substring match.

        Returns:
            Tuple of (page, line_index) for first match, or None.
        """
        self._ensure_loaded()
        text_norm = normalize_for_matching(text)

        for page_num in sorted(self._pages_cache):
            for line_idx, line in enumerate(self._pages_cache[page_num]):
                line_norm = normalize_for_matching(line)
                match = (text_norm == line_norm) if whole_line else (text_norm in line_norm)
                if match:
                    return page_num, line_idx

        return None
