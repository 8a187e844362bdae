from datetime import datetime
from typing import Optional
import pytz
from fastapi import Depends, HTTPException, status

from app.api.auth import get_current_user
from app.models.user import User
from app.services.errors import (
    ConflictError, InvalidStateError, NotFoundError, ServiceError, UpstreamUnavailableError,
)

ERROR_STATUS = {
    NotFoundError: status.HTTP_404_NOT_FOUND,
    ConflictError: status.HTTP_409_CONFLICT,
    InvalidStateError: status.HTTP_400_BAD_REQUEST,
    UpstreamUnavailableError: status.HTTP_503_SERVICE_UNAVAILABLE,
}


def to_http_exception(error: Exception) -> HTTPException:
    """Maps a service failure (or a plain ValueError) onto an HTTP error."""
    if isinstance(error, ServiceError):
        for kind, code in ERROR_STATUS.items():
            if isinstance(error, kind):
                return HTTPException(status_code=code, detail=error.message)
        return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=error.message)
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(error))


def get_user_timezone(user: User):
    """The user's pytz timezone; UTC when unset or unknown."""
    tz_name = getattr(user.profile, 'timezone', None) or 'UTC'
    try:
        return pytz.timezone(tz_name)
    except pytz.UnknownTimeZoneError:
        return pytz.UTC


def get_user_local_time(user: User) -> datetime:
    """
    Returns the current datetime in the user's timezone (naive).
    Defaults to UTC if timezone is invalid or not set.
    """
    server_now = datetime.now(pytz.UTC)
    user_now = server_now.astimezone(get_user_timezone(user))
    return user_now.replace(tzinfo=None)


def to_user_local(value: Optional[datetime], user: User) -> Optional[datetime]:
    """Converts an aware client timestamp to the user's naive local time."""
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(get_user_timezone(user)).replace(tzinfo=None)


def get_now(current_user: User = Depends(get_current_user)) -> datetime:
    """FastAPI dependency: the caller's local "now"."""
    return get_user_local_time(current_user)
