"""
Export progress events.

Every export emits exactly three kinds of events over its life: started, then
succeeded or failed(reason). Events are delivered to an optional caller
callback, logged with the [export] prefix, and appended to a JSON Lines event
log when SCRIBE_EVENTS_FILE is set (one JSON object per line, for streaming and
easy filtering by event_type or filename). Errors raised by the callback or the
log write are logged as warnings and never reach the export.

Usage:
    from scribe.contexts.export.events import ExportEventType, emit_event

    emit_event(ExportEventType.STARTED, backend="raster", filename="Ada_Lovelace_Resume.pdf")

    # Read back the log
    events = get_recent_events(5, event_type="failed")
"""

import json
import os
from dataclasses import asdict, dataclass, field
from enum import Enum
from pathlib import Path
from typing import Callable, Dict, List, Optional

from dotenv import load_dotenv

from scribe.contexts.export.logger import _log_debug, _log_warning
from scribe.utils.timestamp import now_exact

load_dotenv()
EVENTS_FILE = os.getenv("SCRIBE_EVENTS_FILE")


class ExportEventType(str, Enum):
    STARTED = "started"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass
class ExportEvent:
    """
    One progress notification.

    Attributes:
        event_type: started, succeeded or failed
        backend: Backend name
        filename: Artifact filename the export is producing
        timestamp: ISO timestamp
        reason: Failure reason (failed events only)
        details: Extra event fields (error kind, page count, path)
    """

    event_type: ExportEventType
    backend: str
    filename: str
    timestamp: str = field(default_factory=now_exact)
    reason: Optional[str] = None
    details: Dict = field(default_factory=dict)

    def to_dict(self) -> Dict:
        data = asdict(self)
        data["event_type"] = self.event_type.value
        return data


EventCallback = Callable[[ExportEvent], None]


def append_event(event: ExportEvent, events_file: Path) -> None:
    """Append an event to a JSON Lines log."""
    events_file = Path(events_file)
    events_file.parent.mkdir(parents=True, exist_ok=True)
    with open(events_file, "a", encoding="utf-8") as f:
        f.write(json.dumps(event.to_dict(), default=str) + "\n")


def emit_event(
    event_type: ExportEventType,
    backend: str,
    filename: str,
    reason: Optional[str] = None,
    on_event: Optional[EventCallback] = None,
    events_file: Optional[Path] = None,
    **details,
) -> ExportEvent:
    """
    Build an event and deliver it to every configured sink.

    Args:
        event_type: started, succeeded or failed
        backend: Backend name
        filename: Artifact filename
        reason: Failure reason (failed events)
        on_event: Optional caller callback
        events_file: JSON Lines log (defaults to SCRIBE_EVENTS_FILE, skipped when unset)
        **details: Extra event-specific fields

    Returns:
        The emitted ExportEvent
    """
    event = ExportEvent(
        event_type=ExportEventType(event_type),
        backend=backend,
        filename=filename,
        reason=reason,
        details=details,
    )
    _log_debug(f"Event {event.event_type.value}: {filename} ({backend})")

    if events_file is None and EVENTS_FILE:
        events_file = Path(EVENTS_FILE)
    if events_file is not None:
        try:
            append_event(event, events_file)
        except OSError as e:
            _log_warning(f"Could not append event to {events_file}: {e}")

    # A faulty caller callback must not abort the export it is observing
    if on_event is not None:
        try:
            on_event(event)
        except Exception as e:
            _log_warning(f"Event callback failed on {event.event_type.value}: {e!r}")
    return event


def get_recent_events(
    n: int = 10,
    event_type: Optional[str] = None,
    events_file: Optional[Path] = None,
) -> List[Dict]:
    """
    Get the last n events from the event log, optionally filtered by type.

    Args:
        n: Number of recent events to return (default: 10)
        event_type: Filter to only events of this type (optional)
        events_file: JSON Lines log (defaults to SCRIBE_EVENTS_FILE)

    Returns:
        List of event dicts (most recent last); empty if no log exists
    """
    if events_file is None:
        if not EVENTS_FILE:
            return []
        events_file = Path(EVENTS_FILE)
    events_file = Path(events_file)
    if not events_file.exists():
        return []

    events = []
    with open(events_file, "r", encoding="utf-8") as f:
        for line in f:
            try:
                events.append(json.loads(line.strip()))
            except json.JSONDecodeError:
                # Skip malformed lines
                continue

    if event_type:
        events = [e for e in events if e.get("event_type") == event_type]

    return events[-n:] if len(events) > n else events
