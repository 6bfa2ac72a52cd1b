from __future__ import annotations

import json
import logging
import uuid
from collections.abc import Iterator, MutableMapping
from datetime import date
from pathlib import Path
from typing import Generic, TypeVar

from roster.assignments import AssignmentIndex
from roster.config import DEFAULT_SAMPLE_DATA_PATH
from roster.models import (
    Officer,
    Roster,
    Session,
    ShiftAssignment,
    TrainingDay,
)

K = TypeVar("K")
V = TypeVar("V")

logger = logging.getLogger(__name__)


class NotFoundError(KeyError):
    """Raised when a record id is not in the store."""

    def __init__(self, kind: str, record_id: str) -> None:
        super().__init__(record_id)
        self.kind = kind
        self.record_id = record_id

    def __str__(self) -> str:
        return f"{self.kind} {self.record_id} not found"


class InMemoryKeyValueDatabase(Generic[K, V]):
    """
    Simple in-memory key/value database.
    """

    def __init__(self) -> None:
        self._store: MutableMapping[K, V] = {}

    def put(self, key: K, value: V) -> None:
        self._store[key] = value

    def get(self, key: K) -> V | None:
        return self._store.get(key)

    def delete(self, key: K) -> None:
        self._store.pop(key, None)

    def all(self) -> list[V]:
        return list(self._store.values())

    def clear(self) -> None:
        self._store.clear()

    def __contains__(self, key: object) -> bool:
        return key in self._store

    def __iter__(self) -> Iterator[V]:
        return iter(self._store.values())

    def __len__(self) -> int:
        return len(self._store)


def new_id() -> str:
    return str(uuid.uuid4())


class Database:
    """Container for all database instances."""

    def __init__(self) -> None:
        self.officers: InMemoryKeyValueDatabase[str, Officer] = (
            InMemoryKeyValueDatabase()
        )
        self.rosters: InMemoryKeyValueDatabase[str, Roster] = (
            InMemoryKeyValueDatabase()
        )
        self.sessions: InMemoryKeyValueDatabase[str, Session] = (
            InMemoryKeyValueDatabase()
        )
        self._indexes: dict[str, AssignmentIndex] = {}

    def get_officers_by_district(self, district: str) -> list[Officer]:
        """Get all officers whose sector mentions the district."""
        return [
            officer
            for officer in self.officers.all()
            if district in officer.sector
        ]

    def get_command_staff(self) -> list[Officer]:
        return [
            officer
            for officer in self.officers.all()
            if "Chief" in officer.rank or "Captain" in officer.rank
        ]

    def require_officer(self, officer_id: str) -> Officer:
        officer = self.officers.get(officer_id)
        if officer is None:
            raise NotFoundError("Officer", officer_id)
        return officer

    def require_roster(self, roster_id: str) -> Roster:
        roster = self.rosters.get(roster_id)
        if roster is None:
            raise NotFoundError("Roster", roster_id)
        return roster

    def put_roster(self, roster: Roster) -> None:
        """Store a roster, replacing any index built for an earlier version."""
        self.rosters.put(roster.id, roster)
        self._indexes.pop(roster.id, None)

    def assignment_index(self, roster_id: str) -> AssignmentIndex:
        """
        Get the date index over a roster's assignments. It is built on first
        use and kept in step by add_assignment and remove_assignment.
        """
        index = self._indexes.get(roster_id)
        if index is None:
            roster = self.require_roster(roster_id)
            index = AssignmentIndex.from_assignments(roster.assignments)
            self._indexes[roster_id] = index
        return index

    def delete_officer(self, officer_id: str) -> None:
        self.require_officer(officer_id)
        self.officers.delete(officer_id)
        logger.info("Deleted officer %s", officer_id)

    def delete_roster(self, roster_id: str) -> None:
        self.require_roster(roster_id)
        self.rosters.delete(roster_id)
        self._indexes.pop(roster_id, None)
        logger.info("Deleted roster %s", roster_id)

    def add_assignment(
        self, roster_id: str, assignment: ShiftAssignment
    ) -> Roster:
        roster = self.require_roster(roster_id)
        index = self.assignment_index(roster_id)
        index.add(assignment)
        roster.assignments = [*roster.assignments, assignment]
        self.rosters.put(roster_id, roster)
        logger.info(
            "Assigned officer %s to shift %s on %s in roster %s (%d assignments)",
            assignment.officer_id,
            assignment.shift_id,
            assignment.date,
            roster_id,
            len(index),
        )
        return roster

    def remove_assignment(
        self, roster_id: str, officer_id: str, day: date
    ) -> Roster:
        roster = self.require_roster(roster_id)
        index = self.assignment_index(roster_id)
        if index.remove(officer_id, day) is None:
            raise NotFoundError("Assignment", f"{officer_id}@{day}")
        roster.assignments = list(index)
        self.rosters.put(roster_id, roster)
        logger.info(
            "Removed assignment for officer %s on %s from roster %s",
            officer_id,
            day,
            roster_id,
        )
        return roster

    def add_training_day(
        self, roster_id: str, training_day: TrainingDay
    ) -> Roster:
        roster = self.require_roster(roster_id)
        roster.training_days = [*roster.training_days, training_day]
        self.rosters.put(roster_id, roster)
        return roster

    def remove_training_day(self, roster_id: str, day: date) -> Roster:
        roster = self.require_roster(roster_id)
        remaining = [td for td in roster.training_days if td.date != day]
        if len(remaining) == len(roster.training_days):
            raise NotFoundError("Training day", day.isoformat())
        roster.training_days = remaining
        self.rosters.put(roster_id, roster)
        return roster

    def clear(self) -> None:
        self.officers.clear()
        self.rosters.clear()
        self.sessions.clear()
        self._indexes.clear()


_db: Database | None = None


def get_db() -> Database:
    """Get the global database instance."""
    global _db
    if _db is None:
        _db = Database()
    return _db


def load_sample_data(
    db: Database | None = None, path: str | Path | None = None
) -> None:
    """Load sample data from sample_data.json into the database."""
    if db is None:
        db = get_db()

    if path is None:
        path = DEFAULT_SAMPLE_DATA_PATH
    with open(path) as f:
        data = json.load(f)

    officers = [Officer(**officer_data) for officer_data in data["officers"]]
    for officer in officers:
        db.officers.put(officer.id, officer)

    for roster_data in data["rosters"]:
        roster = Roster(**roster_data)
        if not roster.officers:
            # Rosters built from the directory take a copy of every officer
            roster.officers = [o.model_copy(deep=True) for o in officers]
        db.put_roster(roster)

    logger.info(
        "Loaded %d officers and %d rosters from %s",
        len(db.officers),
        len(db.rosters),
        path,
    )
