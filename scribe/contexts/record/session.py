"""
Resume Session

Explicit state container owning the resume record and the wizard's current step.
One session is constructed at application start and passed to whatever needs
to read or mutate the record; there is no module-level current record.

Mutation semantics:
- add() appends, preserving insertion order, and returns the generated id
- update() replaces only the supplied fields; unknown ids are a no-op
- remove() drops the entry; unknown ids are a no-op
- ids are never changed by update() and are unique within a collection
"""

import copy
from dataclasses import replace
from typing import Any, Callable, List, Optional, Set, Union

from scribe.contexts.record.exceptions import InvalidRecordError
from scribe.contexts.record.resume_record import (
    TECHNOLOGY_SECTIONS,
    Entry,
    PersonalInfo,
    ResumeRecord,
    SectionKey,
    build_entry,
    field_names,
    generate_id,
    normalize_fields,
    to_section_key,
)

# Wizard steps, in navigation order
WIZARD_STEPS = [
    "personal_info",
    "education",
    "experience",
    "skills",
    "projects",
    "positions",
    "achievements",
    "activities",
    "hobbies",
    "generate",
]


class ResumeSession:
    """
    Owner of one resume record and the wizard step pointer.

    Args:
        record: Initial record (default: empty record)
        id_factory: Callable producing a new id given the ids already in use.
                    Defaults to short random hex ids.

    Example:
        >>> session = ResumeSession()
        >>> edu_id = session.add("education", degree="B.Sc.", institution="X U")
        >>> session.update("education", edu_id, grade="9.0")
        >>> session.remove("education", "missing")  # no-op
    """

    def __init__(
        self,
        record: Optional[ResumeRecord] = None,
        id_factory: Optional[Callable[[Set[str]], str]] = None,
    ):
        self._record = record if record is not None else ResumeRecord()
        self._id_factory = id_factory or generate_id
        self._current_step = 0

    @property
    def record(self) -> ResumeRecord:
        """The live record. Treat as read-only; mutate through session methods."""
        return self._record

    def snapshot(self) -> ResumeRecord:
        """Deep copy of the record, safe to hand to an export running concurrently."""
        return copy.deepcopy(self._record)

    # -------------------------------------------------------------------------
    # Wizard step navigation
    # -------------------------------------------------------------------------

    @property
    def current_step(self) -> int:
        return self._current_step

    @property
    def current_step_name(self) -> str:
        return WIZARD_STEPS[self._current_step]

    def go_to_step(self, step: int) -> int:
        """Move to a step, clamped to the valid range. Returns the new step."""
        self._current_step = max(0, min(len(WIZARD_STEPS) - 1, step))
        return self._current_step

    def next_step(self) -> int:
        return self.go_to_step(self._current_step + 1)

    def previous_step(self) -> int:
        return self.go_to_step(self._current_step - 1)

    # -------------------------------------------------------------------------
    # Personal info
    # -------------------------------------------------------------------------

    def update_personal_info(self, **values: Any) -> PersonalInfo:
        """Merge the supplied personal info fields into the record."""
        unknown = set(values) - field_names(PersonalInfo)
        if unknown:
            raise InvalidRecordError(
                f"Unknown personal_info fields: {sorted(unknown)}", "personal_info"
            )
        cleaned = {name: "" if value is None else str(value) for name, value in values.items()}
        self._record.personal_info = replace(self._record.personal_info, **cleaned)
        return self._record.personal_info

    # -------------------------------------------------------------------------
    # Collection entries
    # -------------------------------------------------------------------------

    def _ids(self, section: SectionKey) -> Set[str]:
        return {entry.id for entry in self._record.entries(section)}

    def _index_of(self, section: SectionKey, entry_id: str) -> Optional[int]:
        for i, entry in enumerate(self._record.entries(section)):
            if entry.id == entry_id:
                return i
        return None

    def entries(self, section: Union[SectionKey, str]) -> List[Entry]:
        """Entries of a section in insertion order (a new list)."""
        return list(self._record.entries(section))

    def get(self, section: Union[SectionKey, str], entry_id: str) -> Optional[Entry]:
        section = to_section_key(section)
        index = self._index_of(section, entry_id)
        return None if index is None else self._record.entries(section)[index]

    def add(self, section: Union[SectionKey, str], **values: Any) -> str:
        """
        Append a new entry to a section.

        Any supplied id is ignored; a fresh id unique within the section is generated.

        Returns:
            The new entry's id
        """
        section = to_section_key(section)
        values.pop("id", None)
        ids = self._ids(section)
        entry = build_entry(section, {"id": self._id_factory(ids), **values}, ids)
        self._record.entries(section).append(entry)
        return entry.id

    def update(self, section: Union[SectionKey, str], entry_id: str, **values: Any) -> bool:
        """
        Replace the supplied fields of an entry, keeping all others.

        Returns:
            True if the entry existed, False if the call was a no-op
        """
        section = to_section_key(section)
        values.pop("id", None)
        index = self._index_of(section, entry_id)
        if index is None:
            return False

        normalized = normalize_fields(section, values)

        collection = self._record.entries(section)
        collection[index] = replace(collection[index], **normalized)
        return True

    def remove(self, section: Union[SectionKey, str], entry_id: str) -> bool:
        """
        Remove an entry by id.

        Returns:
            True if an entry was removed, False if the id was unknown
        """
        section = to_section_key(section)
        index = self._index_of(section, entry_id)
        if index is None:
            return False
        del self._record.entries(section)[index]
        return True

    # -------------------------------------------------------------------------
    # Technologies tag lists (experience and projects)
    # -------------------------------------------------------------------------

    def _technology_entry(self, section: Union[SectionKey, str], entry_id: str):
        section = to_section_key(section)
        if section not in TECHNOLOGY_SECTIONS:
            raise InvalidRecordError(
                f"{section.value} entries have no technologies", section.value, "technologies"
            )
        return self.get(section, entry_id)

    def add_technology(self, section: Union[SectionKey, str], entry_id: str, technology: str) -> bool:
        """
        Append a technology to an entry's tag list.

        Blank values, duplicates (after trimming) and unknown ids are no-ops.

        Returns:
            True if the list changed
        """
        entry = self._technology_entry(section, entry_id)
        value = (technology or "").strip()
        if entry is None or not value or value in entry.technologies:
            return False
        entry.technologies.append(value)
        return True

    def remove_technology(self, section: Union[SectionKey, str], entry_id: str, technology: str) -> bool:
        """Remove a technology from an entry's tag list. Returns True if the list changed."""
        entry = self._technology_entry(section, entry_id)
        value = (technology or "").strip()
        if entry is None or value not in entry.technologies:
            return False
        entry.technologies.remove(value)
        return True
