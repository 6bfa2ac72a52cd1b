"""
Admin login and session lookup.
"""

import logging
import secrets
from datetime import UTC, datetime

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from roster.config import Settings, get_settings
from roster.database import Database, get_db
from roster.models import LoginCredentials, Session, User

logger = logging.getLogger(__name__)

_bearer = HTTPBearer(auto_error=False)


class InvalidCredentials(Exception):
    pass


def login(
    credentials: LoginCredentials,
    db: Database | None = None,
    settings: Settings | None = None,
) -> Session:
    """Check credentials against the configured admins and open a session."""
    if db is None:
        db = get_db()
    if settings is None:
        settings = get_settings()

    account = settings.admins.get(credentials.username)
    if account is None or not secrets.compare_digest(
        account.password.encode(), credentials.password.encode()
    ):
        logger.warning("Failed login for %r", credentials.username)
        raise InvalidCredentials("Invalid credentials")

    now = datetime.now(UTC)
    session = Session(
        token=secrets.token_urlsafe(32),
        user=User(username=credentials.username, squad=account.squad, last_login=now),
        created_at=now,
    )
    db.sessions.put(session.token, session)
    logger.info("Admin %s (squad %s) logged in", credentials.username, account.squad)
    return session


def logout(token: str, db: Database | None = None) -> None:
    if db is None:
        db = get_db()
    db.sessions.delete(token)


async def require_session(
    credentials: HTTPAuthorizationCredentials | None = Depends(_bearer),
) -> Session:
    """Resolve the bearer token to a live session or reject the request."""
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )

    session = get_db().sessions.get(credentials.credentials)
    if session is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Session expired or invalid",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return session
