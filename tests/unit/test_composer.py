"""Unit tests for the layout composer: section order, presence rules and date lines."""

import copy

import pytest

from scribe.contexts.composition import (
    SECTION_TITLES,
    BodyKind,
    SectionKind,
    compose,
    format_date_range,
    format_month,
)
from scribe.contexts.record.resume_record import Education, Experience, Hobby, PersonalInfo, ResumeRecord


@pytest.mark.unit
@pytest.mark.parametrize(
    "value, expected",
    [
        ("2020-01", "Jan 2020"),
        ("2019-12", "Dec 2019"),
        ("2021-3", "Mar 2021"),
        ("2018-07-15", "Jul 2018"),
        ("Summer 2019", "Summer 2019"),
        ("2020-13", "2020-13"),
        ("", ""),
        (None, ""),
    ],
)
def test_format_month(value, expected):
    """Test YYYY-MM formatting and pass-through of other text."""
    assert format_month(value) == expected


@pytest.mark.unit
def test_format_date_range_cases():
    """Test date range formatting for each combination of dates."""
    assert format_date_range("2020-01", "2021-06") == "Jan 2020 – Jun 2021"
    assert format_date_range("2020-01", "") == "Jan 2020 – Present"
    assert format_date_range("", "2021-06") == "Jun 2021"
    assert format_date_range("", "") is None
    assert format_date_range(None, "  ") is None


@pytest.mark.unit
def test_empty_record_composes_header_only(empty_record):
    """Test an empty record composes to a header only."""
    tree = compose(empty_record)

    assert tree.header.name == ""
    assert tree.header.contacts == ()
    assert tree.sections == ()
    assert tree.blocks() == [tree.header]


@pytest.mark.unit
def test_sections_in_canonical_order(sample_record):
    """Test sections follow the fixed document order."""
    tree = compose(sample_record)
    assert tree.section_kinds == list(SectionKind)
    assert [s.title for s in tree.sections] == [SECTION_TITLES[k] for k in SectionKind]


@pytest.mark.unit
def test_section_present_iff_non_empty(sample_record):
    """Test a section appears only when it has entries."""
    sample_record.projects = []
    sample_record.hobbies = []
    sample_record.personal_info.summary = "   "

    tree = compose(sample_record)

    assert SectionKind.PROJECTS not in tree.section_kinds
    assert SectionKind.HOBBIES not in tree.section_kinds
    assert SectionKind.SUMMARY not in tree.section_kinds
    assert all(section.items for section in tree.sections)


@pytest.mark.unit
def test_order_does_not_depend_on_insertion_sequence():
    """Test section order ignores the order sections were filled."""
    record = ResumeRecord(
        hobbies=[Hobby(id="h", name="Chess")],
        education=[Education(id="e", degree="BSc")],
    )
    assert compose(record).section_kinds == [SectionKind.EDUCATION, SectionKind.HOBBIES]


@pytest.mark.unit
def test_items_follow_collection_order(sample_record):
    """Test items keep their collection order."""
    sample_record.experience.append(Experience(id="exp2", title="Second"))
    sample_record.experience.insert(0, Experience(id="exp0", title="Zeroth"))

    section = compose(sample_record).section(SectionKind.EXPERIENCE)
    assert [item.entry_id for item in section.items] == ["exp0", "exp1", "exp2"]


@pytest.mark.unit
def test_header_contacts_fixed_order_and_blanks_omitted():
    """Test header contacts are ordered and blanks dropped."""
    personal = PersonalInfo(
        first_name="Ada",
        website="ada.dev",
        email="ada@example.com",
        github="  ",
        phone="123",
    )
    tree = compose(ResumeRecord(personal_info=personal))
    assert tree.header.name == "Ada"
    assert tree.header.contacts == ("ada@example.com", "123", "ada.dev")


@pytest.mark.unit
def test_experience_item(sample_record):
    """Test the experience item's title, dates, subtitle and bodies."""
    item = compose(sample_record).section(SectionKind.EXPERIENCE).items[0]

    assert item.title == "Analyst"
    assert item.date_text == "Sep 1842 – Present"
    assert item.subtitle == "Analytical Engine Project, London"
    assert [body.kind for body in item.bodies] == [BodyKind.BULLETS, BodyKind.TAGS]
    assert item.bodies[0].items == ("Translated Menabrea's memoir", "Wrote Note G")
    assert item.bodies[1].items == ("Punched cards", "Difference Engine")


@pytest.mark.unit
def test_date_line_omitted_when_both_dates_blank(sample_record):
    """Test no date line when both dates are blank."""
    item = compose(sample_record).section(SectionKind.POSITIONS).items[0]
    assert item.date_text is None
    assert item.subtitle == "Royal Society circle"


@pytest.mark.unit
def test_end_only_date_shows_end_alone(sample_record):
    """Test an end-only range shows just the end date."""
    item = compose(sample_record).section(SectionKind.ACTIVITIES).items[0]
    assert item.date_text == "May 1840"
    assert item.subtitle is None


@pytest.mark.unit
def test_education_grade_and_subtitle(sample_record):
    """Test the education subtitle and grade paragraph."""
    item = compose(sample_record).section(SectionKind.EDUCATION).items[0]
    assert item.subtitle == "Private tutoring, London"
    assert item.bodies[0].kind == BodyKind.PARAGRAPH
    assert item.bodies[0].items == ("Grade: Distinction",)


@pytest.mark.unit
def test_project_bodies_order(sample_record):
    """Test project bodies are description, tags, then link."""
    item = compose(sample_record).section(SectionKind.PROJECTS).items[0]
    assert [body.kind for body in item.bodies] == [BodyKind.PARAGRAPH, BodyKind.TAGS, BodyKind.PARAGRAPH]
    assert item.bodies[-1].items == ("Link: example.org/note-g",)


@pytest.mark.unit
def test_skills_are_chips_and_achievement_single_date(sample_record):
    """Test skill chips and single achievement dates."""
    tree = compose(sample_record)

    skills = tree.section(SectionKind.SKILLS).items
    assert [s.title for s in skills] == ["Mathematics", "Poetical science"]
    assert all(s.chip for s in skills)

    achievement = tree.section(SectionKind.ACHIEVEMENTS).items[0]
    assert achievement.date_text == "Sep 1843"


@pytest.mark.unit
def test_summary_section(sample_record):
    """Test the summary becomes an untitled paragraph item."""
    summary = compose(sample_record).sections[0]
    assert summary.kind == SectionKind.SUMMARY
    assert summary.title == "Professional Summary"
    assert len(summary.items) == 1
    assert summary.items[0].title == ""
    assert summary.items[0].bodies[0].items == (sample_record.personal_info.summary,)


@pytest.mark.unit
def test_compose_is_pure(sample_record):
    """Test compose leaves the record unchanged and is repeatable."""
    before = copy.deepcopy(sample_record)
    first = compose(sample_record)
    second = compose(sample_record)

    assert sample_record == before
    assert first == second


@pytest.mark.unit
def test_blocks_flatten_heading_before_items(sample_record):
    """Test blocks() yields each heading before its items."""
    tree = compose(sample_record)
    blocks = tree.blocks()

    assert blocks[0] is tree.header
    expected = 1 + sum(1 + len(section.items) for section in tree.sections)
    assert len(blocks) == expected
    assert blocks[1] is tree.sections[0]
    assert blocks[2] is tree.sections[0].items[0]
