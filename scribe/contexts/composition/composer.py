"""
Layout Composer

Projects a ResumeRecord onto a LayoutTree: a header block followed by one
section block per non-empty section, in canonical order.

Presence rules:
- Header contacts appear in fixed order (email, phone, linkedin, github, website),
  blank fields omitted
- A section appears iff its collection is non-empty (summary: iff non-blank)
- An item's date line is omitted when both dates are blank
- Subtitles join organization and location with ", ", skipping blanks

Pure function of its input: the record is never mutated.
"""

import re
from typing import Callable, Dict, List, Optional

from scribe.contexts.composition.layout_tree import (
    SECTION_TITLES,
    Body,
    BodyKind,
    HeaderBlock,
    ItemBlock,
    LayoutTree,
    SectionBlock,
    SectionKind,
)
from scribe.contexts.record.resume_record import (
    Achievement,
    Activity,
    Education,
    Experience,
    Hobby,
    PersonalInfo,
    Position,
    Project,
    ResumeRecord,
    Skill,
)

CONTACT_FIELDS = ["email", "phone", "linkedin", "github", "website"]

DATE_SEPARATOR = " – "  # en dash
PRESENT = "Present"

# Locale-independent month abbreviations
MONTH_ABBREVIATIONS = [
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
]

_YEAR_MONTH = re.compile(r"^(?P<year>\d{4})-(?P<month>\d{1,2})(?:-\d{1,2})?$")


def _text(value: Optional[str]) -> str:
    return (value or "").strip()


def format_month(value: Optional[str]) -> str:
    """
    Format a "YYYY-MM" date as "Mon YYYY".

    Full "YYYY-MM-DD" dates are accepted (day ignored). Anything else that is
    non-blank is returned as typed so user input is never lost.

    Examples:
        >>> format_month("2020-01")
        'Jan 2020'
        >>> format_month("")
        ''
    """
    value = _text(value)
    match = _YEAR_MONTH.match(value)
    if not match:
        return value

    month = int(match.group("month"))
    if not 1 <= month <= 12:
        return value
    return f"{MONTH_ABBREVIATIONS[month - 1]} {match.group('year')}"


def format_date_range(start_date: Optional[str], end_date: Optional[str]) -> Optional[str]:
    """
    Format a start/end pair for an item's date line.

    Returns:
        "Mon YYYY – Mon YYYY"; "Mon YYYY – Present" when only the start is set;
        the end date alone when only the end is set; None when both are blank.
    """
    start = format_month(start_date)
    end = format_month(end_date)

    if not start and not end:
        return None
    if not end:
        return f"{start}{DATE_SEPARATOR}{PRESENT}"
    if not start:
        return end
    return f"{start}{DATE_SEPARATOR}{end}"


def join_subtitle(*parts: Optional[str]) -> Optional[str]:
    """Comma-join the non-blank parts, or None when all are blank."""
    present = [_text(part) for part in parts if _text(part)]
    return ", ".join(present) if present else None


def _paragraph(text: Optional[str]) -> List[Body]:
    text = _text(text)
    return [Body(BodyKind.PARAGRAPH, (text,))] if text else []


def _tags(values: List[str]) -> List[Body]:
    values = [_text(v) for v in values if _text(v)]
    return [Body(BodyKind.TAGS, tuple(values))] if values else []


# =============================================================================
# Header and per-section item builders
# =============================================================================


def compose_header(personal: PersonalInfo) -> HeaderBlock:
    contacts = tuple(
        _text(getattr(personal, name)) for name in CONTACT_FIELDS if _text(getattr(personal, name))
    )
    return HeaderBlock(name=personal.full_name, contacts=contacts)


def _education_item(entry: Education) -> ItemBlock:
    grade = _text(entry.grade)
    return ItemBlock(
        entry_id=entry.id,
        title=_text(entry.degree),
        date_text=format_date_range(entry.start_date, entry.end_date),
        subtitle=join_subtitle(entry.institution, entry.location),
        bodies=tuple(_paragraph(f"Grade: {grade}" if grade else "")),
    )


def _experience_item(entry: Experience) -> ItemBlock:
    bullets = tuple(_text(b) for b in entry.description if _text(b))
    bodies = [Body(BodyKind.BULLETS, bullets)] if bullets else []
    bodies.extend(_tags(entry.technologies))
    return ItemBlock(
        entry_id=entry.id,
        title=_text(entry.title),
        date_text=format_date_range(entry.start_date, entry.end_date),
        subtitle=join_subtitle(entry.company, entry.location),
        bodies=tuple(bodies),
    )


def _project_item(entry: Project) -> ItemBlock:
    link = _text(entry.link)
    bodies = _paragraph(entry.description) + _tags(entry.technologies)
    bodies += _paragraph(f"Link: {link}" if link else "")
    return ItemBlock(
        entry_id=entry.id,
        title=_text(entry.title),
        date_text=format_date_range(entry.start_date, entry.end_date),
        bodies=tuple(bodies),
    )


def _skill_item(entry: Skill) -> ItemBlock:
    return ItemBlock(entry_id=entry.id, title=_text(entry.name), chip=True)


def _position_item(entry: Position) -> ItemBlock:
    return ItemBlock(
        entry_id=entry.id,
        title=_text(entry.title),
        date_text=format_date_range(entry.start_date, entry.end_date),
        subtitle=join_subtitle(entry.organization),
        bodies=tuple(_paragraph(entry.description)),
    )


def _achievement_item(entry: Achievement) -> ItemBlock:
    return ItemBlock(
        entry_id=entry.id,
        title=_text(entry.title),
        date_text=format_month(entry.date) or None,
        bodies=tuple(_paragraph(entry.description)),
    )


def _activity_item(entry: Activity) -> ItemBlock:
    return ItemBlock(
        entry_id=entry.id,
        title=_text(entry.title),
        date_text=format_date_range(entry.start_date, entry.end_date),
        subtitle=join_subtitle(entry.organization),
        bodies=tuple(_paragraph(entry.description)),
    )


def _hobby_item(entry: Hobby) -> ItemBlock:
    return ItemBlock(entry_id=entry.id, title=_text(entry.name))


# Section kind -> (collection accessor, item builder), in canonical order
SECTION_BUILDERS: Dict[SectionKind, tuple] = {
    SectionKind.EDUCATION: (lambda r: r.education, _education_item),
    SectionKind.EXPERIENCE: (lambda r: r.experience, _experience_item),
    SectionKind.PROJECTS: (lambda r: r.projects, _project_item),
    SectionKind.SKILLS: (lambda r: r.skills, _skill_item),
    SectionKind.POSITIONS: (lambda r: r.positions, _position_item),
    SectionKind.ACHIEVEMENTS: (lambda r: r.achievements, _achievement_item),
    SectionKind.ACTIVITIES: (lambda r: r.activities, _activity_item),
    SectionKind.HOBBIES: (lambda r: r.hobbies, _hobby_item),
}


def _compose_summary(personal: PersonalInfo) -> Optional[SectionBlock]:
    summary = _text(personal.summary)
    if not summary:
        return None
    item = ItemBlock(entry_id="", title="", bodies=(Body(BodyKind.PARAGRAPH, (summary,)),))
    return SectionBlock(SectionKind.SUMMARY, SECTION_TITLES[SectionKind.SUMMARY], (item,))


def _compose_section(
    kind: SectionKind, entries: list, build_item: Callable[..., ItemBlock]
) -> Optional[SectionBlock]:
    if not entries:
        return None
    items = tuple(build_item(entry) for entry in entries)
    return SectionBlock(kind, SECTION_TITLES[kind], items)


def compose(record: ResumeRecord) -> LayoutTree:
    """
    Compose a record into a LayoutTree.

    A record with blank personal info and empty collections yields a header-only
    tree; that is valid output.

    Args:
        record: Resume record (read only)

    Returns:
        LayoutTree with header and non-empty sections in canonical order
    """
    sections: List[SectionBlock] = []

    summary = _compose_summary(record.personal_info)
    if summary is not None:
        sections.append(summary)

    for kind, (accessor, build_item) in SECTION_BUILDERS.items():
        section = _compose_section(kind, accessor(record), build_item)
        if section is not None:
            sections.append(section)

    return LayoutTree(header=compose_header(record.personal_info), sections=tuple(sections))
