"""Shared fixtures: resume records of different shapes and a fixed-height measurer."""

import copy
from pathlib import Path

import pytest

from scribe.contexts.composition.layout_tree import HeaderBlock, ItemBlock, SectionBlock
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

FIXTURES_PATH = Path(__file__).parent / "fixtures"


@pytest.fixture(autouse=True)
def no_event_log(monkeypatch):
    """Keep tests from appending to a developer's SCRIBE_EVENTS_FILE."""
    monkeypatch.setattr("scribe.contexts.export.events.EVENTS_FILE", None)


@pytest.fixture
def sample_resume_path() -> Path:
    return FIXTURES_PATH / "sample_resume.yaml"


@pytest.fixture
def sample_record() -> ResumeRecord:
    """A one-page record touching every section."""
    return ResumeRecord(
        personal_info=PersonalInfo(
            first_name="Ada",
            last_name="Lovelace",
            email="ada@example.com",
            phone="+44 20 7946 0000",
            linkedin="linkedin.com/in/ada",
            github="",
            website="ada.dev",
            summary="Analyst of engines and author of the first published algorithm.",
        ),
        education=[
            Education(
                id="edu1",
                degree="Mathematics",
                institution="Private tutoring",
                location="London",
                start_date="1830-01",
                end_date="1835-06",
                grade="Distinction",
            )
        ],
        experience=[
            Experience(
                id="exp1",
                title="Analyst",
                company="Analytical Engine Project",
                location="London",
                start_date="1842-09",
                end_date="",
                description=["Translated Menabrea's memoir", "Wrote Note G"],
                technologies=["Punched cards", "Difference Engine"],
            )
        ],
        projects=[
            Project(
                id="proj1",
                title="Bernoulli numbers program",
                description="First algorithm intended for a machine.",
                technologies=["Analytical Engine"],
                link="example.org/note-g",
                start_date="1843-01",
                end_date="1843-09",
            )
        ],
        skills=[Skill(id="sk1", name="Mathematics", level=5), Skill(id="sk2", name="Poetical science", level=4)],
        positions=[Position(id="pos1", title="Correspondent", organization="Royal Society circle")],
        achievements=[Achievement(id="ach1", title="Note G published", date="1843-09")],
        activities=[
            Activity(id="act1", title="Horse riding", organization="", start_date="", end_date="1840-05")
        ],
        hobbies=[Hobby(id="hob1", name="Music")],
    )


@pytest.fixture
def empty_record() -> ResumeRecord:
    return ResumeRecord()


@pytest.fixture
def long_record(sample_record) -> ResumeRecord:
    """A record whose experience section spans several A4 pages."""
    bullets = [
        "Designed and documented a sequence of operations for computing values of a function "
        "with careful attention to the storage of intermediate results."
    ] * 4
    record = copy.deepcopy(sample_record)
    record.experience = [
        Experience(
            id=f"exp{i}",
            title=f"Role {i}",
            company="Engine Works",
            start_date="1840-01",
            end_date="1841-01",
            description=list(bullets),
            technologies=["Cards", "Gears"],
        )
        for i in range(30)
    ]
    return record


HEADER_HEIGHT = 50.0
HEADING_HEIGHT = 20.0
ITEM_HEIGHT = 40.0


def fixed_measure(block) -> float:
    """Deterministic block heights for paginator tests."""
    if isinstance(block, HeaderBlock):
        return HEADER_HEIGHT
    if isinstance(block, SectionBlock):
        return HEADING_HEIGHT
    if isinstance(block, ItemBlock):
        return ITEM_HEIGHT
    raise TypeError(block)


@pytest.fixture
def measure():
    return fixed_measure
