from datetime import date

import pytest

from roster.database import Database, NotFoundError, load_sample_data
from roster.models import Roster, ShiftAssignment

SAMPLE_ROSTER_ID = "9c1f6a4e-2b7d-4f0e-a3c5-5d8e1b2f7a90"


@pytest.fixture
def db() -> Database:
    db = Database()
    load_sample_data(db)
    return db


def make_assignment(officer_id: str, day: date) -> ShiftAssignment:
    return ShiftAssignment(
        shift_id="shift1", officer_id=officer_id, date=day, position="Patrol"
    )


def test_index_is_reused_between_calls(db: Database) -> None:
    index = db.assignment_index(SAMPLE_ROSTER_ID)
    assert db.assignment_index(SAMPLE_ROSTER_ID) is index
    assert len(index) == 4
    assert index.has("2413", date(2024, 1, 10))


def test_add_assignment_updates_index(db: Database) -> None:
    index = db.assignment_index(SAMPLE_ROSTER_ID)
    roster = db.add_assignment(
        SAMPLE_ROSTER_ID, make_assignment("2577", date(2024, 1, 12))
    )
    assert index.has("2577", date(2024, 1, 12))
    assert len(roster.assignments) == len(index) == 5


def test_remove_assignment_updates_index(db: Database) -> None:
    index = db.assignment_index(SAMPLE_ROSTER_ID)
    roster = db.remove_assignment(SAMPLE_ROSTER_ID, "2413", date(2024, 1, 10))
    assert not index.has("2413", date(2024, 1, 10))
    assert roster.assignments == list(index)
    assert len(roster.assignments) == 3

    with pytest.raises(NotFoundError):
        db.remove_assignment(SAMPLE_ROSTER_ID, "2413", date(2024, 1, 10))


def test_replacing_a_roster_drops_its_index(db: Database) -> None:
    stale = db.assignment_index(SAMPLE_ROSTER_ID)
    roster = db.require_roster(SAMPLE_ROSTER_ID)
    db.put_roster(roster.model_copy(update={"assignments": []}))

    fresh = db.assignment_index(SAMPLE_ROSTER_ID)
    assert fresh is not stale
    assert len(fresh) == 0


def test_index_for_unknown_roster(db: Database) -> None:
    with pytest.raises(NotFoundError):
        db.assignment_index("nonexistent")


def test_delete_roster_drops_index(db: Database) -> None:
    db.assignment_index(SAMPLE_ROSTER_ID)
    db.delete_roster(SAMPLE_ROSTER_ID)
    db.put_roster(
        Roster(
            id=SAMPLE_ROSTER_ID,
            name="Rebuilt",
            start_date=date(2024, 1, 1),
            end_date=date(2024, 1, 31),
        )
    )
    assert len(db.assignment_index(SAMPLE_ROSTER_ID)) == 0


def test_remove_training_day(db: Database) -> None:
    roster = db.remove_training_day(SAMPLE_ROSTER_ID, date(2024, 1, 17))
    assert roster.training_days == []


def test_remove_unknown_training_day(db: Database) -> None:
    with pytest.raises(NotFoundError) as excinfo:
        db.remove_training_day(SAMPLE_ROSTER_ID, date(2024, 1, 2))
    assert str(excinfo.value) == "Training day 2024-01-02 not found"
    assert len(db.require_roster(SAMPLE_ROSTER_ID).training_days) == 1
