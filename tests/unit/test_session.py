"""Unit tests for ResumeSession: entry mutation, technologies and wizard navigation."""

import itertools

import pytest

from scribe.contexts.record import WIZARD_STEPS, InvalidRecordError, ResumeSession


@pytest.fixture
def session():
    counter = itertools.count(1)
    return ResumeSession(id_factory=lambda existing: f"id{next(counter)}")


@pytest.mark.unit
def test_add_preserves_insertion_order(session):
    """Test added entries keep insertion order."""
    first = session.add("education", degree="BSc")
    second = session.add("education", degree="MSc")

    assert [e.id for e in session.entries("education")] == [first, second]
    assert [e.degree for e in session.entries("education")] == ["BSc", "MSc"]


@pytest.mark.unit
def test_add_ignores_supplied_id(session):
    """Test add assigns its own id."""
    new_id = session.add("hobbies", id="chosen", name="Chess")
    assert new_id == "id1"
    assert session.get("hobbies", "chosen") is None


@pytest.mark.unit
def test_ids_unique_with_default_factory():
    """Test default ids are unique."""
    session = ResumeSession()
    ids = {session.add("skills", name=f"Skill {i}") for i in range(50)}
    assert len(ids) == 50


@pytest.mark.unit
def test_update_is_partial(session):
    """Test update changes only the supplied fields."""
    entry_id = session.add("education", degree="BSc", institution="MIT", grade="A")
    assert session.update("education", entry_id, grade="A+") is True

    entry = session.get("education", entry_id)
    assert entry.degree == "BSc"
    assert entry.institution == "MIT"
    assert entry.grade == "A+"
    assert entry.id == entry_id


@pytest.mark.unit
def test_update_never_changes_id(session):
    """Test update never changes an entry's id."""
    entry_id = session.add("hobbies", name="Chess")
    session.update("hobbies", entry_id, id="other", name="Go")
    assert session.get("hobbies", entry_id).name == "Go"
    assert session.get("hobbies", "other") is None


@pytest.mark.unit
def test_update_unknown_id_is_noop(session):
    """Test updating an unknown id is a no-op."""
    session.add("hobbies", name="Chess")
    before = session.snapshot()
    assert session.update("hobbies", "missing", name="Go") is False
    assert session.record == before


@pytest.mark.unit
def test_update_unknown_id_skips_validation(session):
    """Invalid values for an unknown id are a no-op, not an error."""
    session.add("skills", name="Rust")
    before = session.snapshot()
    assert session.update("skills", "missing", level=9) is False
    assert session.update("skills", "missing", colour="red") is False
    assert session.record == before


@pytest.mark.unit
def test_update_validates_fields(session):
    """Test update validates the supplied fields."""
    entry_id = session.add("skills", name="Rust")
    with pytest.raises(InvalidRecordError):
        session.update("skills", entry_id, level=9)
    with pytest.raises(InvalidRecordError):
        session.update("skills", entry_id, colour="red")


@pytest.mark.unit
def test_remove(session):
    """Test removing entries by id."""
    keep = session.add("hobbies", name="Chess")
    drop = session.add("hobbies", name="Go")

    assert session.remove("hobbies", drop) is True
    assert [e.id for e in session.entries("hobbies")] == [keep]
    assert session.remove("hobbies", drop) is False


@pytest.mark.unit
def test_experience_bullets_filtered_on_add(session):
    """Test blank experience bullets are dropped on add."""
    entry_id = session.add("experience", title="Dev", description=["Built X", "  ", "Shipped Y"])
    assert session.get("experience", entry_id).description == ["Built X", "Shipped Y"]


@pytest.mark.unit
def test_technology_tags(session):
    """Test adding and removing technology tags."""
    entry_id = session.add("projects", title="Compiler", technologies=["C"])

    assert session.add_technology("projects", entry_id, " Python ") is True
    assert session.add_technology("projects", entry_id, "Python") is False
    assert session.add_technology("projects", entry_id, "   ") is False
    assert session.add_technology("projects", "missing", "Go") is False
    assert session.get("projects", entry_id).technologies == ["C", "Python"]

    assert session.remove_technology("projects", entry_id, "C") is True
    assert session.remove_technology("projects", entry_id, "C") is False
    assert session.get("projects", entry_id).technologies == ["Python"]


@pytest.mark.unit
def test_technologies_only_on_experience_and_projects(session):
    """Test technologies exist only on experience and projects."""
    entry_id = session.add("skills", name="Rust")
    with pytest.raises(InvalidRecordError, match="no technologies"):
        session.add_technology("skills", entry_id, "Cargo")


@pytest.mark.unit
def test_update_personal_info_merges(session):
    """Test personal info updates merge."""
    session.update_personal_info(first_name="Ada", last_name="Lovelace")
    session.update_personal_info(email="ada@example.com")

    info = session.record.personal_info
    assert info.full_name == "Ada Lovelace"
    assert info.email == "ada@example.com"

    with pytest.raises(InvalidRecordError):
        session.update_personal_info(nickname="Countess")


@pytest.mark.unit
def test_snapshot_is_detached(session):
    """Test snapshots are independent of the session."""
    entry_id = session.add("experience", title="Dev", technologies=["Go"])
    snapshot = session.snapshot()

    session.add_technology("experience", entry_id, "Rust")
    session.remove("experience", entry_id)

    assert snapshot.experience[0].technologies == ["Go"]


@pytest.mark.unit
def test_wizard_navigation_clamps(session):
    """Test wizard navigation stays within the step range."""
    assert session.current_step == 0
    assert session.current_step_name == "personal_info"
    assert session.previous_step() == 0

    session.go_to_step(100)
    assert session.current_step == len(WIZARD_STEPS) - 1
    assert session.current_step_name == "generate"
    assert session.next_step() == len(WIZARD_STEPS) - 1

    assert session.go_to_step(-3) == 0
    assert session.next_step() == 1
    assert session.current_step_name == "education"
