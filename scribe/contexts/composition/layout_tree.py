"""
Layout Tree

Render-agnostic hierarchy of blocks composed from a resume record:

    LayoutTree
    ├── HeaderBlock                (name + contact line)
    └── SectionBlock*              (heading, canonical order, present iff non-empty)
        └── ItemBlock*             (one per collection entry, insertion order)
            └── Body*              (paragraph | bullets | tags)

All blocks are frozen so a tree can be shared between concurrent renders and
used as a lookup key by measuring backends.
"""

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Tuple, Union


class BodyKind(str, Enum):
    PARAGRAPH = "paragraph"
    BULLETS = "bullets"
    TAGS = "tags"


class SectionKind(str, Enum):
    """Document sections in canonical render order."""

    SUMMARY = "summary"
    EDUCATION = "education"
    EXPERIENCE = "experience"
    PROJECTS = "projects"
    SKILLS = "skills"
    POSITIONS = "positions"
    ACHIEVEMENTS = "achievements"
    ACTIVITIES = "activities"
    HOBBIES = "hobbies"


SECTION_TITLES = {
    SectionKind.SUMMARY: "Professional Summary",
    SectionKind.EDUCATION: "Education",
    SectionKind.EXPERIENCE: "Experience",
    SectionKind.PROJECTS: "Projects",
    SectionKind.SKILLS: "Skills",
    SectionKind.POSITIONS: "Positions of Responsibility",
    SectionKind.ACHIEVEMENTS: "Achievements",
    SectionKind.ACTIVITIES: "Extracurricular Activities",
    SectionKind.HOBBIES: "Hobbies & Interests",
}


@dataclass(frozen=True)
class Body:
    """
    Body content of an item.

    Attributes:
        kind: How items are laid out (paragraph text, bulleted list, inline tag chips)
        items: Paragraph texts, bullet texts or tag labels
    """

    kind: BodyKind
    items: Tuple[str, ...]


@dataclass(frozen=True)
class HeaderBlock:
    """
    Document header.

    Attributes:
        name: Full name (may be empty)
        contacts: Present contact fields in fixed order (email, phone, linkedin, github, website)
    """

    name: str
    contacts: Tuple[str, ...] = ()


@dataclass(frozen=True)
class ItemBlock:
    """
    One entry of a section. The minimum unit the paginator will not split.

    Attributes:
        entry_id: Identifier of the source entry ("" for synthesized items such as the summary)
        title: Title line (may be empty)
        date_text: Right-aligned date line, None when the entry has no dates
        subtitle: Secondary line (organization, location), None when blank
        bodies: Body parts in display order
        chip: Render the title as a single tag chip (skills)
    """

    entry_id: str
    title: str
    date_text: Optional[str] = None
    subtitle: Optional[str] = None
    bodies: Tuple[Body, ...] = ()
    chip: bool = False


@dataclass(frozen=True)
class SectionBlock:
    """
    A document section. In a flattened block sequence it stands for its heading.

    Attributes:
        kind: Section kind
        title: Heading text
        items: Item blocks in collection insertion order (never empty)
    """

    kind: SectionKind
    title: str
    items: Tuple[ItemBlock, ...]


Block = Union[HeaderBlock, SectionBlock, ItemBlock]


@dataclass(frozen=True)
class LayoutTree:
    """Composed document: header followed by sections in canonical order."""

    header: HeaderBlock
    sections: Tuple[SectionBlock, ...] = ()

    def blocks(self) -> List[Block]:
        """
        Flatten to the sequence the paginator walks.

        Order: header, then for each section its SectionBlock (heading) followed
        by its item blocks.
        """
        flat: List[Block] = [self.header]
        for section in self.sections:
            flat.append(section)
            flat.extend(section.items)
        return flat

    def section(self, kind: Union[SectionKind, str]) -> Optional[SectionBlock]:
        kind = SectionKind(kind)
        for section in self.sections:
            if section.kind == kind:
                return section
        return None

    @property
    def section_kinds(self) -> List[SectionKind]:
        return [section.kind for section in self.sections]
