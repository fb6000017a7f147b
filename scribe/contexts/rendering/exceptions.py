"""Custom exceptions for document export with backend references."""

from typing import Optional


class ExportError(Exception):
    """
    Base class for export failures.

    Attributes:
        message: Human-readable reason
        backend: Name of the backend involved, if any
        original_error: The underlying library error, if any
    """

    kind = "export"

    def __init__(
        self,
        message: str,
        backend: Optional[str] = None,
        original_error: Optional[Exception] = None,
    ):
        self.message = message
        self.backend = backend
        self.original_error = original_error

        parts = [message]

        if backend:
            parts.append(f"Backend: {backend}")

        if original_error:
            parts.append(f"Original error: {original_error}")

        super().__init__("\n".join(parts))


class InputError(ExportError):
    """
    The record handed to the export is missing or unusable.

    Non-retryable until the caller fixes its state; no artifact is produced.
    """

    kind = "input"


class RenderError(ExportError):
    """
    The chosen backend failed mid-render (snapshot, encoding, view blocked by host).

    No partial artifact is ever exposed.
    """

    kind = "render"


class ResourceError(ExportError):
    """
    An external asset (e.g. a remote font) could not be loaded.

    Never fatal: raised and caught inside font resolution, which falls back to a
    built-in font.
    """

    kind = "resource"
