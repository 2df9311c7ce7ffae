"""
dependencies.py — FastAPI dependencies shared by the routers
Per-request services built from the DB session and clock, the application
edit lock, and the mapping from domain errors to HTTP errors.
"""

import threading

from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.orm import Session

from database import get_db
from exceptions import (
    ConfigurationError,
    ConsistencyError,
    HabitTrackerError,
    NotFoundError,
    ValidationError,
)
from services.challenge_setup import ChallengeSetup
from services.clock import get_clock
from services.edit_coordinator import EditCoordinator


def get_edit_lock(request: Request) -> threading.Lock:
    """Serializes every mutating request; the cascade assumes one edit at a time."""
    return request.app.state.edit_lock


def get_coordinator(db: Session = Depends(get_db), clock=Depends(get_clock)) -> EditCoordinator:
    try:
        return EditCoordinator.from_settings(db, clock)
    except ConfigurationError as e:
        raise http_error(e)


def get_setup(db: Session = Depends(get_db), clock=Depends(get_clock)) -> ChallengeSetup:
    return ChallengeSetup(db, clock)


def http_error(e: HabitTrackerError) -> HTTPException:
    if isinstance(e, NotFoundError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    if isinstance(e, ValidationError):
        return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    if isinstance(e, (ConsistencyError, ConfigurationError)):
        return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))
