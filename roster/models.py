"""
Domain models for officers, rosters and shift assignments.
"""

import datetime as dt
from datetime import date, datetime
from enum import StrEnum
from typing import Literal

from pydantic import BaseModel, Field


class ShiftType(StrEnum):
    DAY = "day"
    NIGHT = "night"
    OFF = "off"


class ShiftInfo(BaseModel):
    """Where a calendar date falls in the 32-day rotation."""

    is_work_day: bool
    shift_type: ShiftType
    week_number: Literal[1, 2] | None = None  # Only set on work days


class OfficerStatus(StrEnum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    LEAVE = "leave"
    TRAINING = "training"
    DEPLOYED = "deployed"
    FMLA = "fmla"
    TDY = "tdy"
    RETIRED = "retired"
    ADMIN_LEAVE = "admin_leave"
    SICK = "sick"
    INJURY = "injury"


class Officer(BaseModel):
    id: str
    first_name: str = ""
    last_name: str = ""
    badge_number: str = ""
    rank: str = ""
    zone: str = ""
    sector: str = ""
    status: OfficerStatus = OfficerStatus.ACTIVE
    is_on_desk: bool = False
    special_assignment: str | None = None  # e.g., "Squad Commander", "K9-1"
    email: str | None = None
    phone: str | None = None
    notes: str | None = None
    special_assignments: list[str] = []  # e.g., ["SWAT", "CIT"]
    is_active: bool = True


class OfficerForm(BaseModel):
    """Officer fields as submitted from the create/edit form."""

    first_name: str | None = None
    last_name: str | None = None
    badge_number: str | None = None
    rank: str | None = None
    zone: str = ""
    sector: str = ""
    status: OfficerStatus | None = None
    is_on_desk: bool | None = None
    special_assignment: str | None = None
    email: str | None = None
    phone: str | None = None
    notes: str | None = None
    special_assignments: list[str] = []
    is_active: bool = True


class Shift(BaseModel):
    id: str
    name: str  # e.g., "Early Shift"
    start_time: str  # "HH:MM", 24h
    end_time: str  # "HH:MM", may be earlier than start_time (overnight)


class ShiftAssignment(BaseModel):
    shift_id: str
    officer_id: str
    date: date
    position: str  # e.g., "Patrol", "Supervisor", "Sector 12A1"


class AssignmentCandidate(BaseModel):
    """A proposed assignment; any field may still be missing."""

    shift_id: str | None = None
    officer_id: str | None = None
    date: dt.date | None = None
    position: str | None = None


class TrainingDay(BaseModel):
    date: date
    description: str | None = None


class Roster(BaseModel):
    id: str
    name: str
    start_date: date  # Inclusive
    end_date: date  # Inclusive
    shifts: list[Shift] = []
    officers: list[Officer] = []  # Snapshot taken when the roster was built
    assignments: list[ShiftAssignment] = []
    training_days: list[TrainingDay] = []


class RosterForm(BaseModel):
    name: str | None = None
    start_date: date | None = None
    end_date: date | None = None
    shifts: list[Shift] = []
    officers: list[Officer] = []


class FieldError(BaseModel):
    """A single validation finding tied to a form field."""

    field: str
    message: str


class Squad(StrEnum):
    A = "A"
    B = "B"
    C = "C"
    D = "D"


class User(BaseModel):
    username: str
    role: Literal["admin"] = "admin"
    squad: Squad
    last_login: datetime


class LoginCredentials(BaseModel):
    username: str
    password: str


class Session(BaseModel):
    token: str
    user: User
    created_at: datetime


class CalendarAssignment(BaseModel):
    shift_id: str
    officer_id: str
    date: date
    position: str
    officer: Officer | None = None
    shift: Shift | None = None
    shift_label: str | None = None  # e.g., "Late Shift 7PM-6:15AM"


class CalendarDay(BaseModel):
    date: date
    assignments: list[CalendarAssignment] = []
    is_current_month: bool
    is_today: bool
    shift_info: ShiftInfo
    is_training_day: bool = False
    training_description: str | None = None


class MonthlyReport(BaseModel):
    year: int
    month: int
    month_name: str
    total_assignments: int = 0
    officer_workload: dict[str, int] = Field(default_factory=dict)
    shift_distribution: dict[str, int] = Field(default_factory=dict)
    position_coverage: dict[str, int] = Field(default_factory=dict)
