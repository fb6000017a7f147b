"""Custom exceptions for the record context."""

from typing import Optional


class InvalidRecordError(ValueError):
    """
    Exception raised when resume record input is malformed.

    Covers unknown field names, unknown section keys, skill levels outside 1-5
    and record files whose root is not a mapping.

    Attributes:
        message: Error description
        section: Section key the error relates to, if any
        field_name: Offending field name, if any
    """

    def __init__(
        self,
        message: str,
        section: Optional[str] = None,
        field_name: Optional[str] = None,
    ):
        self.message = message
        self.section = section
        self.field_name = field_name

        parts = [message]
        if section:
            parts.append(f"Section: {section}")
        if field_name:
            parts.append(f"Field: {field_name}")

        super().__init__("\n".join(parts))
