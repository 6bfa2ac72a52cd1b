"""
Month grid for the roster calendar.
"""

from datetime import date, timedelta

from roster.models import CalendarAssignment, CalendarDay, Roster, Shift
from roster.rotation import get_shift_info

GRID_DAYS = 42  # Six full weeks


def _grid_start(year: int, month: int) -> date:
    first = date(year, month, 1)
    # Weeks start on Sunday; date.weekday() has Monday == 0
    return first - timedelta(days=(first.weekday() + 1) % 7)


def _shift_label(shift: Shift | None) -> str | None:
    if shift is None:
        return None
    return f"{shift.name} {format_time(shift.start_time)}-{format_time(shift.end_time)}"


def get_calendar_days(
    year: int, month: int, roster: Roster, today: date | None = None
) -> list[CalendarDay]:
    """
    Build the 6-week grid shown for a month, padded with days from the
    neighbouring months. Each day carries its assignments with the officer
    and shift expanded, its rotation info and any training day.
    """
    if today is None:
        today = date.today()

    officers = {officer.id: officer for officer in roster.officers}
    shifts = {shift.id: shift for shift in roster.shifts}
    training = {td.date: td for td in roster.training_days}

    start = _grid_start(year, month)
    days: list[CalendarDay] = []
    for offset in range(GRID_DAYS):
        current = start + timedelta(days=offset)
        training_day = training.get(current)
        days.append(
            CalendarDay(
                date=current,
                assignments=[
                    CalendarAssignment(
                        **assignment.model_dump(),
                        officer=officers.get(assignment.officer_id),
                        shift=shifts.get(assignment.shift_id),
                        shift_label=_shift_label(shifts.get(assignment.shift_id)),
                    )
                    for assignment in roster.assignments
                    if assignment.date == current
                ],
                is_current_month=current.month == month,
                is_today=current == today,
                shift_info=get_shift_info(current),
                is_training_day=training_day is not None,
                training_description=(
                    training_day.description if training_day else None
                ),
            )
        )
    return days


def format_time(time_string: str) -> str:
    """
    Render "HH:MM" on a 12 hour clock, dropping ":00".

    >>> format_time("13:00")
    '1PM'
    >>> format_time("09:30")
    '9:30AM'
    """
    hours, minutes = time_string.split(":")
    hour = int(hours)
    suffix = "PM" if hour >= 12 else "AM"
    hour12 = hour % 12 or 12
    if minutes == "00":
        return f"{hour12}{suffix}"
    return f"{hour12}:{minutes}{suffix}"


def get_month_name(day: date) -> str:
    return day.strftime("%B")
