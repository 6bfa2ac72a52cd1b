from datetime import date

import pytest

from roster.calendar_view import format_time, get_calendar_days, get_month_name
from roster.database import Database, load_sample_data
from roster.models import ShiftType
from roster.reports import generate_monthly_report

SAMPLE_ROSTER_ID = "9c1f6a4e-2b7d-4f0e-a3c5-5d8e1b2f7a90"


@pytest.fixture
def sample_roster():
    db = Database()
    load_sample_data(db)
    return db.rosters.get(SAMPLE_ROSTER_ID)


def test_grid_is_six_weeks_from_sunday(sample_roster) -> None:
    days = get_calendar_days(2024, 1, sample_roster, today=date(2024, 1, 10))
    assert len(days) == 42
    # 1 January 2024 is a Monday, so the grid opens on 31 December
    assert days[0].date == date(2023, 12, 31)
    assert days[0].date.weekday() == 6
    assert days[-1].date == date(2024, 2, 10)
    assert not days[0].is_current_month
    assert days[1].is_current_month
    assert sum(day.is_current_month for day in days) == 31


def test_grid_starts_on_the_first_when_it_is_a_sunday(sample_roster) -> None:
    days = get_calendar_days(2023, 10, sample_roster)
    assert days[0].date == date(2023, 10, 1)


def test_days_carry_expanded_assignments(sample_roster) -> None:
    days = {d.date: d for d in get_calendar_days(2024, 1, sample_roster, today=date(2024, 1, 10))}

    tenth = days[date(2024, 1, 10)]
    assert tenth.is_today
    assert {a.officer_id for a in tenth.assignments} == {"2413", "2936"}
    commander = next(a for a in tenth.assignments if a.officer_id == "2413")
    assert commander.officer is not None
    assert commander.officer.first_name == "ZEISSIG"
    assert commander.shift is not None
    assert commander.shift.name == "Late Shift"
    assert commander.shift_label == "Late Shift 7PM-6:15AM"

    assert days[date(2024, 1, 12)].assignments == []


def test_days_carry_rotation_and_training(sample_roster) -> None:
    days = {d.date: d for d in get_calendar_days(2024, 1, sample_roster)}

    assert days[date(2024, 1, 14)].shift_info.shift_type == ShiftType.NIGHT
    assert days[date(2024, 1, 12)].shift_info.shift_type == ShiftType.OFF

    training = days[date(2024, 1, 17)]
    assert training.is_training_day
    assert training.training_description == "Annual Firearms Qualification"
    assert not days[date(2024, 1, 18)].is_training_day


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("13:00", "1PM"),
        ("09:30", "9:30AM"),
        ("00:00", "12AM"),
        ("12:00", "12PM"),
        ("03:15", "3:15AM"),
    ],
)
def test_format_time(value, expected) -> None:
    assert format_time(value) == expected


def test_month_name() -> None:
    assert get_month_name(date(2024, 1, 5)) == "January"


def test_monthly_report(sample_roster) -> None:
    report = generate_monthly_report(sample_roster, 2024, 1)
    assert report.total_assignments == 4
    assert report.month_name == "January"
    assert report.officer_workload == {"2413": 1, "2936": 1, "2752": 1, "2718": 1}
    assert report.shift_distribution == {"Late Shift": 2, "Early Shift": 2}
    assert report.position_coverage["K9-1"] == 1


def test_monthly_report_skips_unknown_references(sample_roster) -> None:
    sample_roster.assignments[0].officer_id = "ghost"
    sample_roster.assignments[0].shift_id = "ghost-shift"
    report = generate_monthly_report(sample_roster, 2024, 1)
    assert report.total_assignments == 4
    assert "ghost" not in report.officer_workload
    assert sum(report.shift_distribution.values()) == 3
    assert sum(report.position_coverage.values()) == 4


def test_monthly_report_other_month_is_empty(sample_roster) -> None:
    report = generate_monthly_report(sample_roster, 2024, 2)
    assert report.total_assignments == 0
    assert report.officer_workload == {}
