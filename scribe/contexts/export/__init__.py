"""
Export Context

Responsibilities:
- Validates the record and selects a backend
- Drives composition and rendering off the event loop, with an optional time bound
- Names artifacts deterministically and writes them atomically
- Opens print views and notifies callers of export progress

Owns: Export lifecycle, artifact naming, progress events
Never: Lays out or serializes documents itself
"""

from scribe.contexts.export.events import ExportEvent, ExportEventType, emit_event, get_recent_events
from scribe.contexts.export.orchestrator import (
    BACKENDS,
    Artifact,
    ExportResult,
    artifact_name,
    export_document,
    get_backend,
    write_atomic,
)

__all__ = [
    # Orchestration
    "export_document",
    "ExportResult",
    "Artifact",
    "artifact_name",
    "get_backend",
    "write_atomic",
    "BACKENDS",
    # Events
    "ExportEvent",
    "ExportEventType",
    "emit_event",
    "get_recent_events",
]
