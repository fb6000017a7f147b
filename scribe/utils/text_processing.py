"""
Text processing utilities for layout and display.
"""

from typing import Callable, List


def _split_long_word(word: str, max_width: float, measure: Callable[[str], float]) -> List[str]:
    """Break a single word that is wider than max_width into width-bounded chunks."""
    chunks = []
    current = ""
    for char in word:
        if current and measure(current + char) > max_width:
            chunks.append(current)
            current = char
        else:
            current += char
    if current:
        chunks.append(current)
    return chunks


def wrap_words(text: str, max_width: float, measure: Callable[[str], float]) -> List[str]:
    """
    Greedy word wrap against an arbitrary width function.

    Paragraph breaks in the input (newlines) are preserved as line breaks; other
    whitespace is collapsed. Words wider than max_width are broken by character
    so that no returned line exceeds max_width (unless a single character does).

    Args:
        text: Text to wrap
        max_width: Maximum line width, in the same unit measure() returns
        measure: Function returning the rendered width of a string

    Returns:
        Wrapped lines. Empty list for blank text.

    Example:
        >>> wrap_words("aaa bbb ccc", 7, len)
        ['aaa bbb', 'ccc']
    """
    lines: List[str] = []

    for paragraph in (text or "").split("\n"):
        words = paragraph.split()
        if not words:
            continue

        current = ""
        for word in words:
            candidate = f"{current} {word}" if current else word
            if measure(candidate) <= max_width:
                current = candidate
                continue

            if current:
                lines.append(current)
                current = ""

            if measure(word) <= max_width:
                current = word
            else:
                pieces = _split_long_word(word, max_width, measure)
                lines.extend(pieces[:-1])
                current = pieces[-1]

        if current:
            lines.append(current)

    return lines
