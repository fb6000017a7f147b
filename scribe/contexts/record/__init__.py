"""
Record Context

Responsibilities:
- Defines the resume record data model (personal info + eight section collections)
- Owns entry identity and normalization rules (technologies, bullets, skill levels)
- Provides the explicit session container that mutates the record during data entry
- Loads records from YAML/JSON files

Owns: Resume record structure and its mutation rules
Never: Decides layout or rendering
"""

from scribe.contexts.record.exceptions import InvalidRecordError
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
    SectionKey,
    Skill,
    from_dict,
    load_record,
    to_dict,
)
from scribe.contexts.record.session import WIZARD_STEPS, ResumeSession

__all__ = [
    # Data model
    "PersonalInfo",
    "Education",
    "Experience",
    "Project",
    "Skill",
    "Position",
    "Achievement",
    "Activity",
    "Hobby",
    "ResumeRecord",
    "SectionKey",
    # Conversion
    "from_dict",
    "to_dict",
    "load_record",
    # State container
    "ResumeSession",
    "WIZARD_STEPS",
    "InvalidRecordError",
]
