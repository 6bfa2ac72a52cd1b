import calendar
from collections import Counter
from datetime import date

from roster.calendar_view import get_month_name
from roster.models import MonthlyReport, Roster


def generate_monthly_report(roster: Roster, year: int, month: int) -> MonthlyReport:
    """Summarise a roster's assignments for one month (1-12)."""
    _, days_in_month = calendar.monthrange(year, month)
    first, last = date(year, month, 1), date(year, month, days_in_month)

    officer_ids = {officer.id for officer in roster.officers}
    shift_names = {shift.id: shift.name for shift in roster.shifts}

    monthly = [a for a in roster.assignments if first <= a.date <= last]

    workload: Counter[str] = Counter()
    distribution: Counter[str] = Counter()
    coverage: Counter[str] = Counter()
    for assignment in monthly:
        if assignment.officer_id in officer_ids:
            workload[assignment.officer_id] += 1
        if assignment.shift_id in shift_names:
            distribution[shift_names[assignment.shift_id]] += 1
        coverage[assignment.position] += 1

    return MonthlyReport(
        year=year,
        month=month,
        month_name=get_month_name(first),
        total_assignments=len(monthly),
        officer_workload=dict(workload),
        shift_distribution=dict(distribution),
        position_coverage=dict(coverage),
    )
