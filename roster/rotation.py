"""
Police shift rotation.

The department works a fixed 32-day cycle counted from a reference date:
four nights on, a break, four more nights, then two four-day blocks of day
shifts, with the remaining days off.
"""

import calendar
from datetime import date, datetime, timedelta

from roster.models import ShiftInfo, ShiftType

# Day 0 of the cycle (first night shift)
BASE_REFERENCE_DATE = date(2023, 12, 13)

ROTATION_CYCLE_DAYS = 32
SHIFT_DAYS = 4  # Consecutive work days per block
SHIFT_BREAK = 5  # Days between the first and second night block

OFF_DAY = ShiftInfo(is_work_day=False, shift_type=ShiftType.OFF, week_number=None)


def _as_date(day: date | datetime) -> date:
    if isinstance(day, datetime):
        return day.date()
    return day


def get_shift_info(day: date | datetime) -> ShiftInfo:
    """
    Get rotation details for a calendar date. Any time-of-day component is
    ignored.
    """
    day = _as_date(day)

    days_since_reference = abs((day - BASE_REFERENCE_DATE).days)

    # Dates before the reference are folded back into the cycle. This is not
    # the inverse of the forward mapping; calendars only show current dates.
    if day < BASE_REFERENCE_DATE:
        days_since_reference = ROTATION_CYCLE_DAYS - (
            days_since_reference % ROTATION_CYCLE_DAYS
        )

    day_in_cycle = days_since_reference % ROTATION_CYCLE_DAYS

    if day_in_cycle < SHIFT_DAYS:
        return ShiftInfo(
            is_work_day=True, shift_type=ShiftType.NIGHT, week_number=1
        )

    second_nights = SHIFT_DAYS + SHIFT_BREAK
    if second_nights <= day_in_cycle < second_nights + SHIFT_DAYS:
        return ShiftInfo(
            is_work_day=True, shift_type=ShiftType.NIGHT, week_number=2
        )

    if 16 <= day_in_cycle < 16 + SHIFT_DAYS:
        return ShiftInfo(
            is_work_day=True, shift_type=ShiftType.DAY, week_number=1
        )

    if 24 <= day_in_cycle < 24 + SHIFT_DAYS:
        return ShiftInfo(
            is_work_day=True, shift_type=ShiftType.DAY, week_number=2
        )

    return OFF_DAY.model_copy()


def get_next_work_day(day: date | datetime) -> date:
    """
    Find the first work day strictly after the given date.

    Raises OverflowError when no work day remains before ``date.max``.
    """
    next_day = _as_date(day) + timedelta(days=1)
    while not get_shift_info(next_day).is_work_day:
        next_day += timedelta(days=1)
    return next_day


def get_work_days_in_month(year: int, month: int) -> list[date]:
    """All work days in a month (1-12), in calendar order."""
    _, days_in_month = calendar.monthrange(year, month)
    return [
        day
        for day in (date(year, month, n) for n in range(1, days_in_month + 1))
        if get_shift_info(day).is_work_day
    ]
