"""
Render backend capability.

Every backend satisfies the same small protocol and is otherwise independent:
the raster, print-view and vector backends hold different internal layout
representations (bitmap strips, markup, page-description flowables), so they
share this interface rather than a base class.
"""

from dataclasses import dataclass
from typing import Any, Optional, Union

from typing_extensions import Literal, Protocol, runtime_checkable

from scribe.contexts.composition.diagnostics import DocumentDiagnostics

# What a backend consumes: the composed layout tree, or the raw record
BackendSource = Literal["layout", "record"]


@dataclass
class RenderedDocument:
    """
    Output of one backend render.

    Attributes:
        content: PDF bytes or markup text
        media_type: MIME type of content
        extension: File extension without dot ("pdf", "html")
        page_count: Physical pages, None when pagination is left to the viewer
        diagnostics: Page-plan diagnostics, when the backend paginates itself
    """

    content: Union[bytes, str]
    media_type: str
    extension: str
    page_count: Optional[int] = None
    diagnostics: Optional[DocumentDiagnostics] = None

    @property
    def size_bytes(self) -> int:
        if isinstance(self.content, str):
            return len(self.content.encode("utf-8"))
        return len(self.content)


@runtime_checkable
class RenderBackend(Protocol):
    """
    Capability implemented by every backend.

    Attributes:
        name: Backend identifier ("raster", "print_view", "vector")
        source: Whether render() takes a LayoutTree ("layout") or a ResumeRecord ("record")
        media_type: MIME type of rendered content
        extension: Artifact file extension without dot
    """

    name: str
    source: BackendSource
    media_type: str
    extension: str

    def render(self, document: Any) -> RenderedDocument:
        """Render a LayoutTree or ResumeRecord (per `source`) to a document."""
        ...
