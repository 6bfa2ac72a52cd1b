"""
Form and assignment validation.

Every validator returns a list of FieldError findings; an empty list means
the data may be saved.
"""

import logging
import re
from collections.abc import Iterable, Sequence
from datetime import date, timedelta

from roster.assignments import AssignmentIndex
from roster.models import (
    AssignmentCandidate,
    FieldError,
    Officer,
    OfficerForm,
    OfficerStatus,
    Roster,
    RosterForm,
    Shift,
    ShiftAssignment,
)

logger = logging.getLogger(__name__)

MAX_CONSECUTIVE_DAYS = 7
MIN_REST_HOURS = 8

ASSIGNABLE_STATUSES = frozenset({OfficerStatus.ACTIVE, OfficerStatus.TRAINING})

COMMAND_RANKS = frozenset(
    {
        "Sergeant",
        "Senior Sergeant",
        "Lieutenant",
        "Senior Lieutenant",
        "Captain",
        "Major",
        "Lieutenant Colonel",
        "Colonel",
    }
)

_BADGE_NUMBER = re.compile(r"^\d{1,6}$")
_TIME_OF_DAY = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")
_EMAIL = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
_PHONE = re.compile(r"^\+?[\d\s\-()]{10,}$")


def _missing(value: object) -> bool:
    return value is None or value == ""


def is_command_rank(rank: str) -> bool:
    return rank in COMMAND_RANKS


def is_assignable(status: OfficerStatus) -> bool:
    """Whether an officer with this status may be given new shifts."""
    return status in ASSIGNABLE_STATUSES


def assignable_officers(officers: Iterable[Officer]) -> list[Officer]:
    return [officer for officer in officers if is_assignable(officer.status)]


def _status_label(status: OfficerStatus) -> str:
    if status == OfficerStatus.ADMIN_LEAVE:
        return "on Admin Leave"
    return status.value.upper()


def calculate_rest_hours(end_time: str, start_time: str) -> float:
    """
    Hours between one shift's end and the next shift's start, assuming the
    gap lies within a single 24 hour wrap.
    """
    end_hour, end_minute = (int(part) for part in end_time.split(":"))
    start_hour, start_minute = (int(part) for part in start_time.split(":"))

    hours = start_hour - end_hour
    if hours < 0:
        hours += 24

    minutes = start_minute - end_minute
    if minutes < 0:
        hours -= 1
        minutes += 60

    return hours + minutes / 60


def get_consecutive_work_days(
    officer_id: str, day: date, index: AssignmentIndex
) -> int:
    """Length of the officer's unbroken run of work days through ``day``."""
    before = index.run_length(officer_id, day, -1)
    after = index.run_length(officer_id, day, 1)
    return before + 1 + after


def _find_shift(roster: Roster, shift_id: str) -> Shift | None:
    return next((s for s in roster.shifts if s.id == shift_id), None)


def _find_officer(roster: Roster, officer_id: str) -> Officer | None:
    return next((o for o in roster.officers if o.id == officer_id), None)


def validate_shift_assignment(
    candidate: AssignmentCandidate,
    roster: Roster,
    existing_assignments: Sequence[ShiftAssignment],
    index: AssignmentIndex | None = None,
) -> list[FieldError]:
    """
    Check a proposed assignment against the roster and the assignments it
    already holds.

    ``index`` may be passed when the caller already keeps one over
    ``existing_assignments``; otherwise one is built for this call.

    A missing date stops validation immediately. Otherwise every check runs
    and all findings are returned together.
    """
    if candidate.date is None:
        return [FieldError(field="date", message="Date is required")]

    errors: list[FieldError] = []

    if _missing(candidate.shift_id):
        errors.append(
            FieldError(field="shift_id", message="Shift selection is required")
        )
    if _missing(candidate.officer_id):
        errors.append(
            FieldError(field="officer_id", message="Officer selection is required")
        )
    if _missing(candidate.position):
        errors.append(FieldError(field="position", message="Position is required"))

    if not roster.start_date <= candidate.date <= roster.end_date:
        errors.append(
            FieldError(
                field="date",
                message="Assignment date must be within roster date range",
            )
        )

    if _missing(candidate.officer_id) or _missing(candidate.shift_id):
        return errors

    officer_id = candidate.officer_id
    if index is None:
        index = AssignmentIndex.from_assignments(existing_assignments)

    officer = _find_officer(roster, officer_id)
    if officer is not None and not is_assignable(officer.status):
        errors.append(
            FieldError(
                field="officer_id",
                message=f"Cannot assign officer who is {_status_label(officer.status)}",
            )
        )

    if index.has(officer_id, candidate.date):
        errors.append(
            FieldError(
                field="officer_id",
                message="Officer is already assigned to a shift on this date",
            )
        )

    if (
        get_consecutive_work_days(officer_id, candidate.date, index)
        >= MAX_CONSECUTIVE_DAYS
    ):
        errors.append(
            FieldError(
                field="date",
                message=f"Officer cannot work more than {MAX_CONSECUTIVE_DAYS} consecutive days",
            )
        )

    previous = index.get(officer_id, candidate.date - timedelta(days=1))
    if previous is not None:
        previous_shift = _find_shift(roster, previous.shift_id)
        new_shift = _find_shift(roster, candidate.shift_id)
        if previous_shift is not None and new_shift is not None:
            rest_hours = calculate_rest_hours(
                previous_shift.end_time, new_shift.start_time
            )
            if rest_hours < MIN_REST_HOURS:
                errors.append(
                    FieldError(
                        field="shift_id",
                        message=f"Minimum {MIN_REST_HOURS} hours rest required between shifts",
                    )
                )

    if errors:
        logger.debug(
            "Assignment for officer %s on %s rejected: %s",
            officer_id,
            candidate.date,
            format_validation_errors(errors),
        )
    return errors


def validate_officer(data: OfficerForm) -> list[FieldError]:
    errors: list[FieldError] = []

    if data.badge_number is None or not _BADGE_NUMBER.match(data.badge_number):
        errors.append(
            FieldError(field="badge_number", message="Badge number must be 1-6 digits")
        )
    if data.first_name is None or len(data.first_name) < 2:
        errors.append(
            FieldError(
                field="first_name",
                message="First name must be at least 2 characters",
            )
        )
    if data.last_name is None or len(data.last_name) < 2:
        errors.append(
            FieldError(
                field="last_name", message="Last name must be at least 2 characters"
            )
        )
    if _missing(data.rank):
        errors.append(FieldError(field="rank", message="Rank is required"))
    if data.status is None:
        errors.append(FieldError(field="status", message="Status is required"))

    if data.rank and is_command_rank(data.rank) and data.is_on_desk is None:
        errors.append(
            FieldError(
                field="is_on_desk",
                message="Desk duty assignment is required for command ranks",
            )
        )

    if data.email and not _EMAIL.match(data.email):
        errors.append(FieldError(field="email", message="Invalid email format"))
    if data.phone and not _PHONE.match(data.phone):
        errors.append(FieldError(field="phone", message="Invalid phone format"))

    return errors


def validate_shift(shift: Shift) -> list[FieldError]:
    """
    Check a shift definition. Shifts may run past midnight, so the end time
    only has to differ from the start time.
    """
    errors: list[FieldError] = []
    if _missing(shift.name):
        errors.append(FieldError(field="name", message="Shift name is required"))

    for field in ("start_time", "end_time"):
        value = getattr(shift, field)
        label = "Start time" if field == "start_time" else "End time"
        if _missing(value):
            errors.append(FieldError(field=field, message=f"{label} is required"))
        elif not _TIME_OF_DAY.match(value):
            errors.append(
                FieldError(field=field, message=f"{label} must be in HH:MM format")
            )

    if not errors and shift.start_time == shift.end_time:
        errors.append(
            FieldError(field="end_time", message="End time must differ from start time")
        )

    return errors


def validate_roster(data: RosterForm) -> list[FieldError]:
    errors: list[FieldError] = []
    if _missing(data.name):
        errors.append(FieldError(field="name", message="Roster name is required"))
    if data.start_date is None:
        errors.append(FieldError(field="start_date", message="Start date is required"))
    if data.end_date is None:
        errors.append(FieldError(field="end_date", message="End date is required"))

    if data.start_date and data.end_date and data.end_date <= data.start_date:
        errors.append(
            FieldError(field="end_date", message="End date must be after start date")
        )

    seen: set[str] = set()
    for position, shift in enumerate(data.shifts):
        for error in validate_shift(shift):
            errors.append(
                FieldError(field=f"shifts.{position}.{error.field}", message=error.message)
            )
        if shift.id in seen:
            errors.append(
                FieldError(
                    field=f"shifts.{position}.id", message="Shift ids must be unique"
                )
            )
        seen.add(shift.id)

    return errors


def format_validation_errors(errors: Iterable[FieldError]) -> str:
    return "\n".join(error.message for error in errors)
