from __future__ import annotations

import bisect
from collections import defaultdict
from collections.abc import Iterable, Iterator
from datetime import date, timedelta

from roster.models import ShiftAssignment


class AssignmentIndex:
    """
    Per-officer, date-ordered view over a roster's assignments.

    Keeps a sorted list of assigned dates for every officer so the
    double-booking, consecutive-day and rest checks are lookups rather than
    scans over the whole assignment list.
    """

    def __init__(self) -> None:
        self._dates: defaultdict[str, list[date]] = defaultdict(list)
        self._by_key: dict[tuple[str, date], ShiftAssignment] = {}

    @classmethod
    def from_assignments(
        cls, assignments: Iterable[ShiftAssignment]
    ) -> AssignmentIndex:
        index = cls()
        for assignment in assignments:
            index.add(assignment)
        return index

    def add(self, assignment: ShiftAssignment) -> None:
        key = (assignment.officer_id, assignment.date)
        # First assignment for an officer on a date wins lookups
        if key in self._by_key:
            return
        self._by_key[key] = assignment
        bisect.insort(self._dates[assignment.officer_id], assignment.date)

    def remove(self, officer_id: str, day: date) -> ShiftAssignment | None:
        assignment = self._by_key.pop((officer_id, day), None)
        if assignment is None:
            return None
        dates = self._dates[officer_id]
        dates.pop(bisect.bisect_left(dates, day))
        return assignment

    def get(self, officer_id: str, day: date) -> ShiftAssignment | None:
        return self._by_key.get((officer_id, day))

    def has(self, officer_id: str, day: date) -> bool:
        dates = self._dates.get(officer_id)
        if not dates:
            return False
        pos = bisect.bisect_left(dates, day)
        return pos < len(dates) and dates[pos] == day

    def run_length(self, officer_id: str, day: date, step: int) -> int:
        """
        Count consecutive assigned days next to ``day`` walking in the
        direction of ``step`` (-1 backward, 1 forward). ``day`` itself is
        not counted.
        """
        count = 0
        current = day + timedelta(days=step)
        while self.has(officer_id, current):
            count += 1
            current += timedelta(days=step)
        return count

    def __iter__(self) -> Iterator[ShiftAssignment]:
        return iter(self._by_key.values())

    def __len__(self) -> int:
        return len(self._by_key)
