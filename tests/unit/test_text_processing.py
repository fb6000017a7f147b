"""Unit tests for text wrapping helpers."""

import pytest

from scribe.utils.text_processing import wrap_words


@pytest.mark.unit
def test_wrap_greedy():
    """Test greedy word wrapping."""
    assert wrap_words("aaa bbb ccc", 7, len) == ["aaa bbb", "ccc"]
    assert wrap_words("aaa bbb ccc", 11, len) == ["aaa bbb ccc"]


@pytest.mark.unit
def test_wrap_preserves_newlines_and_skips_blank_paragraphs():
    """Test newlines are kept and blank paragraphs skipped."""
    assert wrap_words("one\n\ntwo three", 20, len) == ["one", "two three"]


@pytest.mark.unit
def test_wrap_splits_long_words():
    """Test words wider than a line are split."""
    lines = wrap_words("ab abcdefghij", 4, len)
    assert lines == ["ab", "abcd", "efgh", "ij"]
    assert all(len(line) <= 4 for line in lines)


@pytest.mark.unit
def test_wrap_blank_text():
    """Test blank text wraps to no lines."""
    assert wrap_words("", 10, len) == []
    assert wrap_words("   \n ", 10, len) == []
