"""
Resume Record Structure

Defines the structured resume record collected by the wizard: personal info plus
eight ordered collections of section entries. The record is the sole input of
the composition and rendering contexts, which only ever read it.

Record owns:
- Field names and defaults of every entry type
- Entry identifiers (opaque, unique within a collection)
- Normalization rules applied when entries are built (technologies, bullets, skill level)
"""

import uuid
from dataclasses import asdict, dataclass, field, fields
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Set, Union

from omegaconf import OmegaConf

from scribe.contexts.record.exceptions import InvalidRecordError

MIN_SKILL_LEVEL = 1
MAX_SKILL_LEVEL = 5
DEFAULT_SKILL_LEVEL = 3

ID_LENGTH = 8


@dataclass
class PersonalInfo:
    """
    Personal and contact details shown in the document header.

    The entry form requires first_name, last_name, email and phone, but the
    pipeline tolerates every field being blank.
    """

    first_name: str = ""
    last_name: str = ""
    email: str = ""
    phone: str = ""
    address: str = ""
    city: str = ""
    state: str = ""
    pincode: str = ""
    linkedin: str = ""
    github: str = ""
    website: str = ""
    summary: str = ""

    @property
    def full_name(self) -> str:
        return f"{self.first_name.strip()} {self.last_name.strip()}".strip()


@dataclass
class Education:
    id: str = ""
    degree: str = ""
    institution: str = ""
    location: str = ""
    start_date: str = ""  # YYYY-MM or empty
    end_date: str = ""
    grade: str = ""


@dataclass
class Experience:
    id: str = ""
    title: str = ""
    company: str = ""
    location: str = ""
    start_date: str = ""
    end_date: str = ""
    description: List[str] = field(default_factory=list)  # bullets
    technologies: List[str] = field(default_factory=list)


@dataclass
class Project:
    id: str = ""
    title: str = ""
    description: str = ""
    technologies: List[str] = field(default_factory=list)
    link: str = ""
    start_date: str = ""
    end_date: str = ""


@dataclass
class Skill:
    id: str = ""
    name: str = ""
    level: int = DEFAULT_SKILL_LEVEL


@dataclass
class Position:
    id: str = ""
    title: str = ""
    organization: str = ""
    start_date: str = ""
    end_date: str = ""
    description: str = ""


@dataclass
class Achievement:
    id: str = ""
    title: str = ""
    date: str = ""
    description: str = ""


@dataclass
class Activity:
    id: str = ""
    title: str = ""
    organization: str = ""
    start_date: str = ""
    end_date: str = ""
    description: str = ""


@dataclass
class Hobby:
    id: str = ""
    name: str = ""


Entry = Union[Education, Experience, Project, Skill, Position, Achievement, Activity, Hobby]


class SectionKey(str, Enum):
    """Collection names of a ResumeRecord (values match the attribute names)."""

    EDUCATION = "education"
    EXPERIENCE = "experience"
    PROJECTS = "projects"
    SKILLS = "skills"
    POSITIONS = "positions"
    ACHIEVEMENTS = "achievements"
    ACTIVITIES = "activities"
    HOBBIES = "hobbies"


ENTRY_TYPES = {
    SectionKey.EDUCATION: Education,
    SectionKey.EXPERIENCE: Experience,
    SectionKey.PROJECTS: Project,
    SectionKey.SKILLS: Skill,
    SectionKey.POSITIONS: Position,
    SectionKey.ACHIEVEMENTS: Achievement,
    SectionKey.ACTIVITIES: Activity,
    SectionKey.HOBBIES: Hobby,
}

# Entry types that carry a technologies tag list
TECHNOLOGY_SECTIONS = {SectionKey.EXPERIENCE, SectionKey.PROJECTS}


@dataclass
class ResumeRecord:
    """
    Complete structured dataset for one resume document.

    Collection order is insertion order and determines render order within a
    section.
    """

    personal_info: PersonalInfo = field(default_factory=PersonalInfo)
    education: List[Education] = field(default_factory=list)
    experience: List[Experience] = field(default_factory=list)
    projects: List[Project] = field(default_factory=list)
    skills: List[Skill] = field(default_factory=list)
    positions: List[Position] = field(default_factory=list)
    achievements: List[Achievement] = field(default_factory=list)
    activities: List[Activity] = field(default_factory=list)
    hobbies: List[Hobby] = field(default_factory=list)

    def entries(self, section: Union[SectionKey, str]) -> List[Entry]:
        """Return the (live) collection for a section key."""
        return getattr(self, to_section_key(section).value)

    @property
    def is_empty(self) -> bool:
        """True when every collection is empty (personal info is not considered)."""
        return all(not self.entries(key) for key in SectionKey)


# =============================================================================
# Normalization helpers
# =============================================================================


def to_section_key(section: Union[SectionKey, str]) -> SectionKey:
    """Coerce a string to a SectionKey, raising InvalidRecordError for unknown names."""
    try:
        return SectionKey(section)
    except ValueError:
        valid = [key.value for key in SectionKey]
        raise InvalidRecordError(f"Unknown section '{section}'. Valid sections: {valid}") from None


def _as_list(values: Union[str, Iterable[str], None]) -> List:
    """A single string is one value, not a sequence of characters."""
    if values is None:
        return []
    if isinstance(values, str):
        return [values]
    return list(values)


def normalize_technologies(values: Union[str, Iterable[str], None]) -> List[str]:
    """
    Trim technology names and drop blanks and duplicates (case-sensitive).

    First occurrence wins, so order is preserved. A bare string counts as one name.
    """
    result: List[str] = []
    for value in _as_list(values):
        value = str(value).strip()
        if value and value not in result:
            result.append(value)
    return result


def clean_bullets(values: Union[str, Iterable[str], None]) -> List[str]:
    """Drop blank description bullets, keeping the rest as typed. A bare string is one bullet."""
    return [str(value) for value in _as_list(values) if str(value).strip()]


def validate_skill_level(level: Any) -> int:
    """Return level as int, raising InvalidRecordError unless it is within 1-5."""
    if isinstance(level, bool) or not isinstance(level, (int, float, str)):
        raise InvalidRecordError(f"Skill level must be an integer, got {level!r}", "skills", "level")
    try:
        as_int = int(level)
    except ValueError:
        raise InvalidRecordError(
            f"Skill level must be an integer, got {level!r}", "skills", "level"
        ) from None
    if as_int != float(level) or not MIN_SKILL_LEVEL <= as_int <= MAX_SKILL_LEVEL:
        raise InvalidRecordError(
            f"Skill level must be between {MIN_SKILL_LEVEL} and {MAX_SKILL_LEVEL}, got {level!r}",
            "skills",
            "level",
        )
    return as_int


def generate_id(existing_ids: Set[str]) -> str:
    """Generate a short opaque identifier not present in existing_ids."""
    while True:
        candidate = uuid.uuid4().hex[:ID_LENGTH]
        if candidate not in existing_ids:
            return candidate


def field_names(entry_type: type) -> Set[str]:
    return {f.name for f in fields(entry_type)}


def normalize_fields(section: SectionKey, values: Dict[str, Any]) -> Dict[str, Any]:
    """
    Validate field names for a section and apply its normalization rules.

    Args:
        section: Target section
        values: Field values (may be partial)

    Returns:
        New dict with normalized values

    Raises:
        InvalidRecordError: Unknown field name or invalid skill level
    """
    allowed = field_names(ENTRY_TYPES[section])
    normalized: Dict[str, Any] = {}

    for name, value in values.items():
        if name not in allowed:
            raise InvalidRecordError(
                f"Unknown field '{name}' for {section.value} entries", section.value, name
            )
        if name == "technologies":
            value = normalize_technologies(value)
        elif name == "description" and section == SectionKey.EXPERIENCE:
            value = clean_bullets(value)
        elif name == "level":
            value = validate_skill_level(value)
        elif value is None:
            value = ""
        normalized[name] = value

    return normalized


def build_entry(section: Union[SectionKey, str], values: Dict[str, Any], existing_ids: Set[str]) -> Entry:
    """
    Build a new entry for a section, generating an id when none is supplied.

    Raises:
        InvalidRecordError: Unknown field, invalid value, or duplicate id
    """
    section = to_section_key(section)
    values = normalize_fields(section, values)

    entry_id = str(values.pop("id", "") or "")
    if not entry_id:
        entry_id = generate_id(existing_ids)
    elif entry_id in existing_ids:
        raise InvalidRecordError(f"Duplicate entry id '{entry_id}'", section.value, "id")

    return ENTRY_TYPES[section](id=entry_id, **values)


# =============================================================================
# Conversion
# =============================================================================


def from_dict(data: Dict[str, Any]) -> ResumeRecord:
    """
    Build a ResumeRecord from a plain mapping with snake_case keys.

    Expected shape:
        {"personal_info": {...}, "education": [{...}, ...], ...}

    Missing sections default to empty; entries without an id get one.

    Raises:
        InvalidRecordError: Unknown keys, invalid values or duplicate ids
    """
    if not isinstance(data, dict):
        raise InvalidRecordError(f"Resume record must be a mapping, got {type(data).__name__}")

    unknown = set(data) - {"personal_info"} - {key.value for key in SectionKey}
    if unknown:
        raise InvalidRecordError(f"Unknown top-level keys: {sorted(unknown)}")

    personal = data.get("personal_info") or {}
    unknown_personal = set(personal) - field_names(PersonalInfo)
    if unknown_personal:
        raise InvalidRecordError(
            f"Unknown personal_info fields: {sorted(unknown_personal)}", "personal_info"
        )
    record = ResumeRecord(
        personal_info=PersonalInfo(**{k: "" if v is None else str(v) for k, v in personal.items()})
    )

    for key in SectionKey:
        collection = record.entries(key)
        ids: Set[str] = set()
        for raw_entry in data.get(key.value) or []:
            entry = build_entry(key, dict(raw_entry), ids)
            ids.add(entry.id)
            collection.append(entry)

    return record


def to_dict(record: ResumeRecord) -> Dict[str, Any]:
    """Convert a ResumeRecord to plain nested dicts/lists (inverse of from_dict)."""
    return asdict(record)


def load_record(path: Union[str, Path]) -> ResumeRecord:
    """
    Load a ResumeRecord from a YAML (or JSON) file.

    Args:
        path: Path to the record file

    Returns:
        Parsed ResumeRecord
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Resume record not found: {path}")

    data = OmegaConf.to_container(OmegaConf.load(path), resolve=True)
    return from_dict(data)
