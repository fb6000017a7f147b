"""
Export Orchestrator

Chooses a backend, drives it to completion, handles failure and delivers a
deterministically named artifact.

Flow (strictly ordered within one export):
    validate record ─> Compose ─> (Measure ─>) Paginate ─> Render ─> Package
                       └─ skipped for record-source backends (vector)

The blocking render runs in a worker thread so the caller's event loop keeps
serving other work. Concurrent exports share no mutable state: each works on
its own deep copy of the record and each raster render owns its off-screen
surface.

Failures never escape as exceptions: InputError and RenderError are returned in
a failed ExportResult, a failed event is emitted, and no artifact file is left
behind (files are written to a temporary name and atomically renamed, and any
file already written is removed when a later step such as opening the view fails).
"""

import asyncio
import copy
import os
import re
import tempfile
import time
import webbrowser
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Union

from scribe.contexts.composition.composer import compose
from scribe.contexts.composition.diagnostics import DocumentDiagnostics, IssueTemplates
from scribe.contexts.composition.paginator import PaginationMode
from scribe.contexts.export.events import EventCallback, ExportEventType, emit_event
from scribe.contexts.export.logger import _log_debug, _log_info, log_export_result, log_export_start
from scribe.contexts.record.resume_record import PersonalInfo, ResumeRecord
from scribe.contexts.rendering.backend import RenderBackend, RenderedDocument
from scribe.contexts.rendering.config import RenderConfig
from scribe.contexts.rendering.exceptions import ExportError, InputError, RenderError
from scribe.contexts.rendering.print_view import PrintViewBackend
from scribe.contexts.rendering.raster import RasterBackend
from scribe.contexts.rendering.vector import VectorBackend

BACKENDS = {
    "raster": RasterBackend,
    "print_view": PrintViewBackend,
    "vector": VectorBackend,
}

# Characters that cannot appear in a filename segment on common filesystems
_UNSAFE_FILENAME_CHARS = re.compile(r'[\\/:*?"<>|\x00-\x1f]+')


@dataclass
class Artifact:
    """
    Final exported output.

    Attributes:
        filename: "{first}_{last}_Resume.<ext>"
        content: PDF bytes or print-view markup
        media_type: MIME type of content
        page_count: Physical pages (None for the print view)
        path: Where the artifact was written, if it was written
    """

    filename: str
    content: Union[bytes, str]
    media_type: str
    page_count: Optional[int] = None
    path: Optional[Path] = None

    @property
    def size_bytes(self) -> int:
        if isinstance(self.content, str):
            return len(self.content.encode("utf-8"))
        return len(self.content)


@dataclass
class ExportResult:
    """
    Outcome of export_document().

    Exactly one of artifact (success) or error (failure) is set.
    """

    success: bool
    backend: str
    artifact: Optional[Artifact] = None
    error: Optional[ExportError] = None
    duration_s: float = 0.0
    diagnostics: Optional[DocumentDiagnostics] = None


def _filename_segment(value: Optional[str]) -> str:
    return _UNSAFE_FILENAME_CHARS.sub("-", (value or "").strip())


def artifact_name(personal: PersonalInfo, extension: str) -> str:
    """
    Deterministic artifact filename.

    Blank name components collapse to an empty segment rather than an error.

    Example:
        >>> artifact_name(PersonalInfo(first_name="Ada", last_name="Lovelace"), "pdf")
        'Ada_Lovelace_Resume.pdf'
        >>> artifact_name(PersonalInfo(), "pdf")
        '__Resume.pdf'
    """
    first = _filename_segment(personal.first_name)
    last = _filename_segment(personal.last_name)
    return f"{first}_{last}_Resume.{extension}"


def get_backend(
    name: str,
    config: Optional[RenderConfig] = None,
    mode: Optional[PaginationMode] = None,
) -> RenderBackend:
    """
    Instantiate a backend by name.

    Raises:
        InputError: If the name is not a known backend
    """
    if name not in BACKENDS:
        raise InputError(f"Unknown backend '{name}'. Available: {', '.join(BACKENDS)}", name)
    if name == "raster":
        return RasterBackend(config, mode=mode)
    return BACKENDS[name](config)


def write_atomic(path: Path, content: Union[bytes, str]) -> Path:
    """
    Write content so the target path only ever holds a complete file.

    Raises:
        RenderError: If the file cannot be written
    """
    path = Path(path)
    data = content.encode("utf-8") if isinstance(content, str) else content
    tmp_name = None
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
        with os.fdopen(fd, "wb") as f:
            f.write(data)
        os.replace(tmp_name, path)
    except OSError as e:
        if tmp_name is not None and os.path.exists(tmp_name):
            os.remove(tmp_name)
        raise RenderError(f"Could not write artifact {path}", original_error=e) from e
    return path


def open_in_view(path: Path, backend: Optional[str] = None) -> None:
    """
    Open an artifact in a new browser view.

    Raises:
        RenderError: If the host refuses to open a view
    """
    uri = Path(path).resolve().as_uri()
    try:
        opened = webbrowser.open(uri, new=2)
    except webbrowser.Error as e:
        raise RenderError("View blocked: no browser available", backend, e) from e
    if not opened:
        raise RenderError(f"View blocked: could not open {uri}", backend)
    _log_info(f"Opened {uri}")


def _render(backend: RenderBackend, record: ResumeRecord) -> RenderedDocument:
    """Compose (layout-source backends only) and render; runs in a worker thread."""
    if backend.source == "record":
        return backend.render(record)
    tree = compose(record)
    _log_debug(f"Composed {len(tree.sections)} section(s)")
    return backend.render(tree)


def _check_page_count(backend: RenderBackend, document: RenderedDocument) -> None:
    """A paginating backend must produce exactly the pages it planned."""
    diagnostics = document.diagnostics
    if diagnostics is None:
        return
    if document.page_count is None:
        raise RenderError("Rendered PDF could not be read back", backend.name)
    if document.page_count != diagnostics.intended_page_count:
        raise RenderError(
            IssueTemplates.PAGE_COUNT_MISMATCH.format(
                actual=document.page_count, intended=diagnostics.intended_page_count
            ),
            backend.name,
        )


async def _run_render(
    backend: RenderBackend, record: ResumeRecord, timeout_s: Optional[float]
) -> RenderedDocument:
    work = asyncio.to_thread(_render, backend, record)
    if timeout_s is None:
        return await work
    try:
        return await asyncio.wait_for(work, timeout_s)
    except asyncio.TimeoutError as e:
        raise RenderError(f"Render timed out after {timeout_s}s", backend.name, e) from e


def _discard(paths: List[Path]) -> None:
    """Remove files (and temporary view directories) written by a failed export, newest first."""
    for path in reversed(paths):
        if path.is_dir():
            path.rmdir()
        elif path.exists():
            path.unlink()
        _log_debug(f"Discarded {path}")


def _planned_filename(record, backend: RenderBackend) -> str:
    if not isinstance(record, ResumeRecord) or backend is None:
        return ""
    return artifact_name(record.personal_info, backend.extension)


async def export_document(
    record: Optional[ResumeRecord],
    backend: Union[str, RenderBackend] = "raster",
    *,
    config: Optional[RenderConfig] = None,
    mode: Optional[PaginationMode] = None,
    output_dir: Optional[Path] = None,
    open_view: bool = False,
    on_event: Optional[EventCallback] = None,
    timeout_s: Optional[float] = None,
    events_file: Optional[Path] = None,
) -> ExportResult:
    """
    Export a resume record through one backend.

    Args:
        record: Finished resume record (read only; a deep copy is rendered)
        backend: Backend name ("raster", "print_view", "vector") or instance
        config: Render settings for a backend created by name
        mode: Pagination mode for the raster backend (default: config.mode)
        output_dir: Directory to write the artifact into (atomically)
        open_view: Open the artifact in a browser view (print view: temporary file when no output_dir)
        on_event: Callback receiving started / succeeded / failed events
        timeout_s: Optional bound on the render
        events_file: JSON Lines event log (default: SCRIBE_EVENTS_FILE)

    Returns:
        ExportResult; failures are reported in it, never raised

    Example:
        >>> result = asyncio.run(export_document(record, "vector", output_dir=Path("outs/exports")))
        >>> result.artifact.filename
        'Ada_Lovelace_Resume.pdf'
    """
    start = time.perf_counter()
    backend_name = backend if isinstance(backend, str) else backend.name

    instance: Optional[RenderBackend] = None
    if not isinstance(backend, str):
        instance = backend
    elif backend in BACKENDS:
        instance = get_backend(backend, config, mode)

    filename = _planned_filename(record, instance)
    log_export_start(backend_name, filename or "<unnamed>")
    emit_event(ExportEventType.STARTED, backend_name, filename, on_event=on_event, events_file=events_file)

    written: List[Path] = []
    try:
        if record is None:
            raise InputError("No resume record to export", backend_name)
        if not isinstance(record, ResumeRecord):
            raise InputError(
                f"Expected ResumeRecord, got {type(record).__name__}", backend_name
            )
        if instance is None:
            instance = get_backend(backend_name, config, mode)

        document = await _run_render(instance, copy.deepcopy(record), timeout_s)
        _check_page_count(instance, document)

        artifact = Artifact(
            filename=filename,
            content=document.content,
            media_type=document.media_type,
            page_count=document.page_count,
        )
        if output_dir is not None:
            artifact.path = write_atomic(Path(output_dir) / filename, document.content)
            written.append(artifact.path)
        if open_view:
            if artifact.path is None:
                view_dir = Path(tempfile.mkdtemp(prefix="scribe-view-"))
                written.append(view_dir)
                artifact.path = write_atomic(view_dir / filename, document.content)
                written.append(artifact.path)
            open_in_view(artifact.path, backend_name)

    except ExportError as e:
        _discard(written)
        result = ExportResult(
            success=False,
            backend=backend_name,
            error=e,
            duration_s=time.perf_counter() - start,
        )
        emit_event(
            ExportEventType.FAILED,
            backend_name,
            filename,
            reason=e.message,
            on_event=on_event,
            events_file=events_file,
            error_kind=e.kind,
        )
        log_export_result(result)
        return result

    result = ExportResult(
        success=True,
        backend=backend_name,
        artifact=artifact,
        duration_s=time.perf_counter() - start,
        diagnostics=document.diagnostics,
    )
    emit_event(
        ExportEventType.SUCCEEDED,
        backend_name,
        filename,
        on_event=on_event,
        events_file=events_file,
        page_count=artifact.page_count,
        size_bytes=artifact.size_bytes,
        path=str(artifact.path) if artifact.path else None,
    )
    log_export_result(result)
    return result
