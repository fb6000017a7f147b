"""
Vector Backend

Re-emits the resume record as native text and graphics with ReportLab platypus,
delegating pagination to ReportLab's frame engine. Text stays selectable and
crisp at any zoom, and output is far smaller than the raster backend's.

This backend reads the ResumeRecord directly rather than the LayoutTree, so it
restates the composer's ordering and presence rules:
- Header contacts in fixed order (email, phone, linkedin, github, website), blanks omitted
- Summary first, then education, experience, projects, skills, positions,
  achievements, activities, hobbies; a section appears iff it has entries
- Date line omitted when both dates are blank; achievement shows a single date
- Subtitles comma-join organization and location, skipping blanks

Keep-together rules map to KeepTogether: every entry is one unit, and a section
heading travels with its first entry.

The integration tests compare this backend's section order against compose()
to catch drift between the two.
"""

import io
from typing import Callable, Dict, List, Optional, Tuple
from xml.sax.saxutils import escape

from reportlab.lib.colors import HexColor
from reportlab.lib.enums import TA_RIGHT
from reportlab.lib.styles import ParagraphStyle
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfbase.ttfonts import TTFont, TTFError
from reportlab.platypus import (
    HRFlowable,
    KeepTogether,
    Paragraph,
    SimpleDocTemplate,
    Spacer,
    Table,
    TableStyle,
)
from reportlab.platypus.doctemplate import LayoutError

from scribe.contexts.composition.composer import format_date_range, format_month
from scribe.contexts.record.resume_record import PersonalInfo, ResumeRecord
from scribe.contexts.rendering.backend import RenderedDocument
from scribe.contexts.rendering.config import RenderConfig, load_render_config
from scribe.contexts.rendering.exceptions import RenderError, ResourceError
from scribe.contexts.rendering.fonts import resolve_fonts, with_fallback
from scribe.contexts.rendering.logger import log_render_done, log_render_start
from scribe.utils.pdf_processing import page_count

BUILTIN_REGULAR = "Helvetica"
BUILTIN_BOLD = "Helvetica-Bold"
CUSTOM_REGULAR = "ScribeSans"
CUSTOM_BOLD = "ScribeSans-Bold"

CONTACT_ORDER = ("email", "phone", "linkedin", "github", "website")
CONTACT_JOINER = "  |  "

Flowables = List


def _clean(value: Optional[str]) -> str:
    return (value or "").strip()


def _esc(value: Optional[str]) -> str:
    """Escape text for ReportLab paragraph markup."""
    return escape(_clean(value))


def _comma_join(*parts: Optional[str]) -> str:
    return ", ".join(_clean(p) for p in parts if _clean(p))


class VectorBackend:
    """
    Native text/graphics PDF backend.

    Example:
        >>> document = VectorBackend().render(record)
        >>> document.media_type
        'application/pdf'
    """

    name = "vector"
    source = "record"
    media_type = "application/pdf"
    extension = "pdf"

    def __init__(self, config: Optional[RenderConfig] = None):
        self.config = config or load_render_config()
        self.content_width = self.config.page.box.width - 2 * self.config.page.margin

    # -------------------------------------------------------------------------
    # Fonts and styles
    # -------------------------------------------------------------------------

    def _register_font(self, path, registered_name: str, builtin: str) -> str:
        if path is None:
            return builtin

        def load() -> str:
            try:
                pdfmetrics.registerFont(TTFont(registered_name, str(path)))
            except (TTFError, OSError) as e:
                raise ResourceError(f"Unreadable font file {path}", self.name, e) from e
            return registered_name

        return with_fallback(load, builtin, str(path))

    def font_names(self) -> Tuple[str, str]:
        """Registered (regular, bold) font names, falling back to Helvetica."""
        fonts = resolve_fonts(self.config.fonts)
        return (
            self._register_font(fonts.regular, CUSTOM_REGULAR, BUILTIN_REGULAR),
            self._register_font(fonts.bold, CUSTOM_BOLD, BUILTIN_BOLD),
        )

    def build_styles(self) -> Dict[str, ParagraphStyle]:
        """Build the ParagraphStyles used in the document."""
        regular, bold = self.font_names()
        t = self.config.typography
        colors = self.config.colors
        primary = HexColor(colors.primary)
        text = HexColor(colors.text)
        muted = HexColor(colors.muted)

        def leading(size: float) -> float:
            return size * t.line_spacing

        return {
            "name": ParagraphStyle(
                "name", fontName=bold, fontSize=t.name_size, leading=leading(t.name_size), textColor=primary
            ),
            "contact": ParagraphStyle(
                "contact", fontName=regular, fontSize=t.contact_size, leading=leading(t.contact_size),
                textColor=text, spaceBefore=2,
            ),
            "heading": ParagraphStyle(
                "heading", fontName=bold, fontSize=t.heading_size, leading=leading(t.heading_size),
                textColor=primary, spaceBefore=t.section_gap,
            ),
            "title": ParagraphStyle(
                "title", fontName=bold, fontSize=t.title_size, leading=leading(t.title_size), textColor=text
            ),
            "date": ParagraphStyle(
                "date", fontName=regular, fontSize=t.meta_size, leading=leading(t.title_size),
                textColor=muted, alignment=TA_RIGHT,
            ),
            "subtitle": ParagraphStyle(
                "subtitle", fontName=regular, fontSize=t.meta_size, leading=leading(t.meta_size), textColor=muted
            ),
            "body": ParagraphStyle(
                "body", fontName=regular, fontSize=t.body_size, leading=leading(t.body_size),
                textColor=text, spaceBefore=1.5,
            ),
            "bullet": ParagraphStyle(
                "bullet", fontName=regular, fontSize=t.body_size, leading=leading(t.body_size),
                textColor=text, leftIndent=10, bulletIndent=2,
            ),
            "tags": ParagraphStyle(
                "tags", fontName=regular, fontSize=t.tag_size, leading=leading(t.tag_size) + 3,
                textColor=text, spaceBefore=2,
            ),
        }

    # -------------------------------------------------------------------------
    # Flowable builders
    # -------------------------------------------------------------------------

    def _chips(self, labels: List[str], styles) -> Paragraph:
        chip = self.config.colors.chip
        markup = " ".join(
            f'<font backColor="{chip}">&nbsp;{escape(label)}&nbsp;</font>' for label in labels
        )
        return Paragraph(markup, styles["tags"])

    def _title_row(self, title: str, date_text: Optional[str], styles) -> Flowables:
        if not title and not date_text:
            return []
        if not date_text:
            return [Paragraph(escape(title), styles["title"])]
        row = Table(
            [[Paragraph(escape(title), styles["title"]), Paragraph(escape(date_text), styles["date"])]],
            colWidths=[self.content_width * 0.72, self.content_width * 0.28],
        )
        row.setStyle(
            TableStyle(
                [
                    ("VALIGN", (0, 0), (-1, -1), "TOP"),
                    ("LEFTPADDING", (0, 0), (-1, -1), 0),
                    ("RIGHTPADDING", (0, 0), (-1, -1), 0),
                    ("TOPPADDING", (0, 0), (-1, -1), 0),
                    ("BOTTOMPADDING", (0, 0), (-1, -1), 0),
                ]
            )
        )
        return [row]

    def _entry(
        self,
        styles,
        title: Optional[str],
        date_text: Optional[str] = None,
        subtitle: str = "",
        paragraphs: Tuple[str, ...] = (),
        bullets: Tuple[str, ...] = (),
        tags: Tuple[str, ...] = (),
        trailing: Tuple[str, ...] = (),
    ) -> Flowables:
        """Flowables for one entry; blank parts are skipped."""
        flow = self._title_row(_clean(title), date_text, styles)
        if subtitle:
            flow.append(Paragraph(escape(subtitle), styles["subtitle"]))
        for text in paragraphs:
            if _clean(text):
                flow.append(Paragraph(_esc(text), styles["body"]))
        for text in bullets:
            if _clean(text):
                flow.append(Paragraph(_esc(text), styles["bullet"], bulletText="•"))
        present_tags = [_clean(tag) for tag in tags if _clean(tag)]
        if present_tags:
            flow.append(self._chips(present_tags, styles))
        for text in trailing:
            if _clean(text):
                flow.append(Paragraph(_esc(text), styles["body"]))
        flow.append(Spacer(1, self.config.typography.item_gap))
        return flow

    def _header(self, personal: PersonalInfo, styles) -> Flowables:
        flow: Flowables = []
        name = " ".join(part for part in (_clean(personal.first_name), _clean(personal.last_name)) if part)
        if name:
            flow.append(Paragraph(escape(name), styles["name"]))
        contacts = [_esc(getattr(personal, field)) for field in CONTACT_ORDER if _clean(getattr(personal, field))]
        if contacts:
            flow.append(Paragraph(CONTACT_JOINER.join(contacts), styles["contact"]))
        flow.append(
            HRFlowable(
                width="100%",
                thickness=1.5,
                color=HexColor(self.config.colors.primary),
                spaceBefore=4,
                spaceAfter=self.config.typography.section_gap / 2,
            )
        )
        return flow

    def _sections(self, record: ResumeRecord, styles) -> List[Tuple[str, List[Flowables]]]:
        """(heading, entry flowables) for every non-empty section, in document order."""
        entry = self._entry
        sections: List[Tuple[str, List[Flowables]]] = []

        summary = _clean(record.personal_info.summary)
        if summary:
            sections.append(("Professional Summary", [entry(styles, "", paragraphs=(summary,))]))

        builders: List[Tuple[str, list, Callable]] = [
            ("Education", record.education, lambda e: entry(
                styles, e.degree, format_date_range(e.start_date, e.end_date),
                _comma_join(e.institution, e.location),
                paragraphs=(f"Grade: {_clean(e.grade)}" if _clean(e.grade) else "",),
            )),
            ("Experience", record.experience, lambda e: entry(
                styles, e.title, format_date_range(e.start_date, e.end_date),
                _comma_join(e.company, e.location),
                bullets=tuple(e.description), tags=tuple(e.technologies),
            )),
            ("Projects", record.projects, lambda e: entry(
                styles, e.title, format_date_range(e.start_date, e.end_date),
                paragraphs=(e.description,), tags=tuple(e.technologies),
                trailing=(f"Link: {_clean(e.link)}" if _clean(e.link) else "",),
            )),
            ("Skills", record.skills, lambda e: [self._chips([_clean(e.name)], styles), Spacer(1, 2)]),
            ("Positions of Responsibility", record.positions, lambda e: entry(
                styles, e.title, format_date_range(e.start_date, e.end_date),
                _comma_join(e.organization), paragraphs=(e.description,),
            )),
            ("Achievements", record.achievements, lambda e: entry(
                styles, e.title, format_month(e.date) or None, paragraphs=(e.description,),
            )),
            ("Extracurricular Activities", record.activities, lambda e: entry(
                styles, e.title, format_date_range(e.start_date, e.end_date),
                _comma_join(e.organization), paragraphs=(e.description,),
            )),
            ("Hobbies & Interests", record.hobbies, lambda e: entry(styles, e.name)),
        ]
        for title, entries, build in builders:
            if entries:
                sections.append((title, [build(e) for e in entries]))
        return sections

    def build_story(self, record: ResumeRecord) -> Flowables:
        """Platypus story for a record."""
        styles = self.build_styles()
        story = self._header(record.personal_info, styles)
        muted = HexColor(self.config.colors.muted)

        for title, entries in self._sections(record, styles):
            heading = [
                Paragraph(escape(title), styles["heading"]),
                HRFlowable(width="100%", thickness=0.5, color=muted, spaceBefore=1, spaceAfter=4),
            ]
            story.append(KeepTogether(heading + entries[0]))
            story.extend(KeepTogether(flow) for flow in entries[1:])
        return story

    def render(self, record: ResumeRecord) -> RenderedDocument:
        """
        Lay out a record with ReportLab and return PDF bytes.

        Raises:
            RenderError: If ReportLab cannot lay out or encode the document
        """
        log_render_start(self.name)
        page = self.config.page
        buffer = io.BytesIO()
        doc = SimpleDocTemplate(
            buffer,
            pagesize=(page.box.width, page.box.height),
            leftMargin=page.margin,
            rightMargin=page.margin,
            topMargin=page.margin,
            bottomMargin=page.margin,
            title=f"{record.personal_info.full_name} - Resume" if record.personal_info.full_name else "Resume",
            author=record.personal_info.full_name,
        )
        try:
            doc.build(self.build_story(record))
        except (LayoutError, ValueError, OSError) as e:
            raise RenderError("Vector layout failed", self.name, e) from e

        content = buffer.getvalue()
        document = RenderedDocument(
            content=content,
            media_type=self.media_type,
            extension=self.extension,
            page_count=page_count(content),
        )
        log_render_done(self.name, document.size_bytes, document.page_count)
        return document
