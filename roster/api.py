import asyncio
import logging
from datetime import date

from fastapi import APIRouter, Depends, FastAPI, HTTPException, Query, status

from roster.auth import InvalidCredentials, login, logout, require_session
from roster.calendar_view import get_calendar_days
from roster.config import configure_logging, get_settings
from roster.database import NotFoundError, get_db, load_sample_data, new_id
from roster.models import (
    AssignmentCandidate,
    CalendarDay,
    FieldError,
    LoginCredentials,
    MonthlyReport,
    Officer,
    OfficerForm,
    Roster,
    RosterForm,
    Session,
    ShiftAssignment,
    ShiftInfo,
    TrainingDay,
    User,
)
from roster.reports import generate_monthly_report
from roster.rotation import get_next_work_day, get_shift_info, get_work_days_in_month
from roster.validation import (
    assignable_officers,
    validate_officer,
    validate_roster,
    validate_shift_assignment,
)

logger = logging.getLogger(__name__)

router = APIRouter()
protected = APIRouter(dependencies=[Depends(require_session)])

_roster_locks: dict[str, asyncio.Lock] = {}
_locks_lock = asyncio.Lock()


async def _get_roster_lock(roster_id: str) -> asyncio.Lock:
    """Get or create the lock serialising assignment writes for a roster."""
    async with _locks_lock:
        if roster_id not in _roster_locks:
            _roster_locks[roster_id] = asyncio.Lock()
        return _roster_locks[roster_id]


def clear_roster_locks() -> None:
    _roster_locks.clear()


def _not_found(error: NotFoundError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(error))


def _invalid(errors: list[FieldError]) -> HTTPException:
    return HTTPException(
        status_code=422,
        detail=[error.model_dump() for error in errors],
    )


def _require_roster(roster_id: str) -> Roster:
    try:
        return get_db().require_roster(roster_id)
    except NotFoundError as e:
        raise _not_found(e) from e


@router.get("/health")
async def health_check() -> dict[str, str]:
    return {"status": "ok"}


@router.post("/auth/login")
async def login_admin(credentials: LoginCredentials) -> Session:
    try:
        return login(credentials)
    except InvalidCredentials as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail=str(e)
        ) from e


@router.post("/auth/logout")
async def logout_admin(
    session: Session = Depends(require_session),
) -> dict[str, str]:
    logout(session.token)
    return {"status": "logged_out"}


@router.get("/auth/me")
async def current_user(session: Session = Depends(require_session)) -> User:
    return session.user


@router.get("/rotation/{day}")
async def rotation_for_day(day: date) -> ShiftInfo:
    return get_shift_info(day)


@router.get("/rotation/next/{day}")
async def next_work_day(day: date) -> dict[str, date]:
    try:
        return {"date": get_next_work_day(day)}
    except OverflowError as e:
        raise HTTPException(
            status_code=422,
            detail="No work day follows this date in the supported calendar",
        ) from e


@router.get("/rotation/month/{year}/{month}")
async def work_days_in_month(year: int, month: int) -> list[date]:
    """Work days of a month numbered 1-12, as in `datetime`."""
    if not 1 <= month <= 12:
        raise HTTPException(
            status_code=422,
            detail="Month must be between 1 and 12",
        )
    return get_work_days_in_month(year, month)


@protected.get("/officers")
async def list_officers(district: str | None = None) -> list[Officer]:
    db = get_db()
    if district is not None:
        return db.get_officers_by_district(district)
    return db.officers.all()


@protected.get("/officers/command-staff")
async def list_command_staff() -> list[Officer]:
    return get_db().get_command_staff()


@protected.post("/officers", status_code=status.HTTP_201_CREATED)
async def create_officer(form: OfficerForm) -> Officer:
    errors = validate_officer(form)
    if errors:
        raise _invalid(errors)

    officer = Officer(id=new_id(), **form.model_dump(exclude_none=True))
    get_db().officers.put(officer.id, officer)
    logger.info("Created officer %s (badge %s)", officer.id, officer.badge_number)
    return officer


@protected.get("/officers/{officer_id}")
async def get_officer(officer_id: str) -> Officer:
    try:
        return get_db().require_officer(officer_id)
    except NotFoundError as e:
        raise _not_found(e) from e


@protected.put("/officers/{officer_id}")
async def update_officer(officer_id: str, form: OfficerForm) -> Officer:
    db = get_db()
    try:
        existing = db.require_officer(officer_id)
    except NotFoundError as e:
        raise _not_found(e) from e

    errors = validate_officer(form)
    if errors:
        raise _invalid(errors)

    officer = existing.model_copy(update=form.model_dump(exclude_none=True))
    db.officers.put(officer_id, officer)
    logger.info("Updated officer %s", officer_id)
    return officer


@protected.delete("/officers/{officer_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_officer(officer_id: str) -> None:
    try:
        get_db().delete_officer(officer_id)
    except NotFoundError as e:
        raise _not_found(e) from e


@protected.get("/rosters")
async def list_rosters() -> list[Roster]:
    return get_db().rosters.all()


@protected.post("/rosters", status_code=status.HTTP_201_CREATED)
async def create_roster(form: RosterForm) -> Roster:
    errors = validate_roster(form)
    if errors:
        raise _invalid(errors)

    db = get_db()
    officers = form.officers or [o.model_copy(deep=True) for o in db.officers.all()]
    roster = Roster(
        id=new_id(),
        name=form.name,
        start_date=form.start_date,
        end_date=form.end_date,
        shifts=form.shifts,
        officers=officers,
    )
    db.put_roster(roster)
    logger.info(
        "Created roster %s (%s to %s)", roster.id, roster.start_date, roster.end_date
    )
    return roster


@protected.get("/rosters/{roster_id}")
async def get_roster(roster_id: str) -> Roster:
    return _require_roster(roster_id)


@protected.delete("/rosters/{roster_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_roster(roster_id: str) -> None:
    lock = await _get_roster_lock(roster_id)
    async with lock:
        try:
            get_db().delete_roster(roster_id)
        except NotFoundError as e:
            raise _not_found(e) from e


@protected.get("/rosters/{roster_id}/assignments")
async def list_assignments(roster_id: str) -> list[ShiftAssignment]:
    return _require_roster(roster_id).assignments


@protected.post("/rosters/{roster_id}/assignments/validate")
async def check_assignment(
    roster_id: str, candidate: AssignmentCandidate
) -> list[FieldError]:
    """
    Dry run: report what would stop this assignment being saved.

    Findings use the snake_case request field names (`shift_id`,
    `officer_id`, `date`, `position`) as their `field`.
    """
    roster = _require_roster(roster_id)
    return validate_shift_assignment(
        candidate, roster, roster.assignments, get_db().assignment_index(roster_id)
    )


@protected.post(
    "/rosters/{roster_id}/assignments", status_code=status.HTTP_201_CREATED
)
async def create_assignment(
    roster_id: str, candidate: AssignmentCandidate
) -> ShiftAssignment:
    """
    Validate and save an assignment. The roster is re-read under its lock so
    the checks run against the assignments actually stored.

    On failure the 422 `detail` is a list of `{field, message}` objects keyed
    by the snake_case request fields, as returned by the validate route.
    """
    lock = await _get_roster_lock(roster_id)
    async with lock:
        db = get_db()
        roster = _require_roster(roster_id)
        errors = validate_shift_assignment(
            candidate, roster, roster.assignments, db.assignment_index(roster_id)
        )
        if errors:
            logger.info(
                "Rejected assignment in roster %s: %s",
                roster_id,
                "; ".join(error.message for error in errors),
            )
            raise _invalid(errors)

        assignment = ShiftAssignment(**candidate.model_dump())
        db.add_assignment(roster_id, assignment)
    return assignment


@protected.delete(
    "/rosters/{roster_id}/assignments", status_code=status.HTTP_204_NO_CONTENT
)
async def delete_assignment(
    roster_id: str, officer_id: str = Query(), day: date = Query(alias="date")
) -> None:
    lock = await _get_roster_lock(roster_id)
    async with lock:
        try:
            get_db().remove_assignment(roster_id, officer_id, day)
        except NotFoundError as e:
            raise _not_found(e) from e


@protected.get("/rosters/{roster_id}/assignable-officers")
async def list_assignable_officers(roster_id: str) -> list[Officer]:
    return assignable_officers(_require_roster(roster_id).officers)


@protected.post(
    "/rosters/{roster_id}/training-days", status_code=status.HTTP_201_CREATED
)
async def add_training_day(roster_id: str, training_day: TrainingDay) -> Roster:
    try:
        return get_db().add_training_day(roster_id, training_day)
    except NotFoundError as e:
        raise _not_found(e) from e


@protected.delete("/rosters/{roster_id}/training-days/{day}")
async def remove_training_day(roster_id: str, day: date) -> Roster:
    try:
        return get_db().remove_training_day(roster_id, day)
    except NotFoundError as e:
        raise _not_found(e) from e


@protected.get("/rosters/{roster_id}/calendar")
async def roster_calendar(
    roster_id: str,
    year: int = Query(),
    month: int = Query(ge=1, le=12),
) -> list[CalendarDay]:
    return get_calendar_days(year, month, _require_roster(roster_id))


@protected.get("/rosters/{roster_id}/reports/monthly")
async def monthly_report(
    roster_id: str,
    year: int = Query(),
    month: int = Query(ge=1, le=12),
) -> MonthlyReport:
    return generate_monthly_report(_require_roster(roster_id), year, month)


def create_app(load_data: bool | None = None) -> FastAPI:
    settings = get_settings()
    configure_logging(settings)

    if load_data is None:
        load_data = settings.load_sample_data
    if load_data:
        load_sample_data(path=settings.sample_data_path)

    app = FastAPI(title="Roster Admin")
    app.include_router(router)
    app.include_router(protected)
    return app
