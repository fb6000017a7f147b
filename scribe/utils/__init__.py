"""
Shared utilities for SCRIBE.

Common functionality used across contexts:
- Logger setup
- Text wrapping
- PDF inspection
- Timestamps
"""

from scribe.utils.timestamp import now, now_exact

__all__ = ["now", "now_exact"]
