"""Shared fixtures: in-memory database, fixed clock, challenge builders."""

# pylint: disable=redefined-outer-name

import os

# Must be set before the backend modules read their configuration
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["TIMEZONE"] = "UTC"

from datetime import date, timedelta

import pytest

import models  # noqa: F401  registers the tables
from database import Base, SessionLocal, engine
from services.challenge_config import ChallengeConfig
from services.challenge_setup import ChallengeSetup
from services.clock import FixedClock
from services.day_log import DayLog
from services.edit_coordinator import EditCoordinator

FIRST_DAY = date(2024, 1, 1)
TODAY = date(2024, 1, 10)


def day(n: int) -> date:
    """n-th day of the challenge, 1-based."""
    return FIRST_DAY + timedelta(days=n - 1)


@pytest.fixture
def db():
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(TODAY)


@pytest.fixture
def config() -> ChallengeConfig:
    return ChallengeConfig(
        boost_interval_days=7,
        default_buffer_per_habit=1,
        first_challenge_date=FIRST_DAY,
        habit_count=2,
        habits=("Read", "Run"),
    )


@pytest.fixture
def day_log(db, config) -> DayLog:
    return DayLog(db, config)


@pytest.fixture
def coordinator(db, clock) -> EditCoordinator:
    ChallengeSetup(db, clock).start(["Read", "Run"], first_challenge_date=FIRST_DAY, boost_interval_days=7)
    return EditCoordinator.from_settings(db, clock)


def snapshot(coordinator: EditCoordinator) -> list[dict]:
    first = coordinator.day_log.get_first_record()
    last = coordinator.day_log.get_last_record()
    return [r.to_dict() for r in coordinator.day_log.records_between(first.date, last.date)]
