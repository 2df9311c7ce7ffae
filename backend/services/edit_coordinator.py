"""
edit_coordinator.py — Completion edit transaction
validate -> ensure record -> persist completion -> propagate forward -> return.
The completion write commits before propagation reads it, and the batched
propagation commits before the record is handed back.
"""

import logging
from datetime import date
from enum import Enum

from sqlalchemy.orm import Session

from exceptions import ConfigurationError, ConsistencyError, DataCorruptionError, ValidationError
from models.day_record import DayRecord
from services.challenge_config import ChallengeConfig
from services.day_log import DayLog, parse_day
from services.entry_factory import EntryFactory
from services.propagation import PropagationEngine, PropagationResult
from services.settings_store import SettingsStore

logger = logging.getLogger(__name__)


class EditState(str, Enum):
    IDLE = "idle"
    VALIDATING = "validating"
    PERSISTING = "persisting"
    PROPAGATING = "propagating"
    REJECTED = "rejected"
    FAULTED = "faulted"


class EditCoordinator:
    def __init__(self, db: Session, config: ChallengeConfig, clock):
        self.db = db
        self.config = config
        self.clock = clock
        self.day_log = DayLog(db, config)
        self.engine = PropagationEngine(config, self.day_log)
        self.factory = EntryFactory(self.day_log, config, self.engine)
        self.state = EditState.IDLE
        self.last_result: PropagationResult | None = None
        # non-fatal corruption reports from the last operation
        self.warnings: list[DataCorruptionError] = []

    def _ensure(self, day: date):
        self.factory.ensure_record(day)
        self.warnings.extend(self.factory.errors)

    @classmethod
    def from_settings(cls, db: Session, clock) -> "EditCoordinator":
        return cls(db, ChallengeConfig.load(SettingsStore(db)), clock)

    # ------------------------------------------------------------------
    def validate_date(self, day) -> date:
        """Parsed date, which must fall within [first challenge day, today]."""
        day = parse_day(day)
        first = self.config.first_challenge_date
        today = self.clock.today()
        if day < first or day > today:
            raise ValidationError(
                f"{day.isoformat()} is outside the challenge range "
                f"{first.isoformat()}..{today.isoformat()}"
            )
        return day

    def validate_completion(self, completion) -> list:
        if not isinstance(completion, (list, tuple)):
            raise ValidationError("Completion must be a list")
        if len(completion) != self.config.habit_count:
            raise ValidationError(
                f"Expected {self.config.habit_count} completion values, got {len(completion)}"
            )
        if any(v is not None and not isinstance(v, bool) for v in completion):
            raise ValidationError("Completion values must be true, false or null")
        return list(completion)

    # ------------------------------------------------------------------
    def get_record_for_date(self, day) -> DayRecord:
        """Stored record for ``day``; never materializes a missing one."""
        return self.day_log.get_record(parse_day(day))

    def ensure_date_visible(self, day) -> DayRecord:
        self.warnings = []
        day = self.validate_date(day)
        self._ensure(day)
        return self.day_log.get_record(day)

    def record_completion_edit(self, day, completion) -> DayRecord:
        """Store ``completion`` for ``day`` and bring every later day up to date."""
        self.warnings = []
        self.state = EditState.VALIDATING
        try:
            day = self.validate_date(day)
            completion = self.validate_completion(completion)
        except ValidationError:
            self.state = EditState.REJECTED
            raise

        try:
            self.state = EditState.PERSISTING
            self._ensure(day)
            self.day_log.set_completion(day, completion)

            self.state = EditState.PROPAGATING
            self.last_result = self.engine.propagate_from(day)
            self.warnings.extend(self.last_result.errors)
        except (ConsistencyError, ConfigurationError):
            self.state = EditState.FAULTED
            logger.error(f"Edit of {day.isoformat()} faulted; the day log may need a recompute")
            raise

        self.state = EditState.IDLE
        logger.info(f"Recorded completion for {day.isoformat()}: {completion}")
        return self.day_log.get_record(day)

    def recompute_all(self) -> PropagationResult:
        """Re-derive the whole log from the first challenge day (manual repair).

        The first record is reset to the seed buffer and streaks, so a damaged
        first day cannot leak into the rest of the log.
        """
        self.warnings = []
        first = self.day_log.get_first_record()
        if first is None:
            self._ensure(self.config.first_challenge_date)
            first = self.day_log.get_first_record()
        if first.date != self.config.first_challenge_date:
            raise ConsistencyError(
                f"Day log starts on {first.date.isoformat()}, "
                f"challenge starts on {self.config.first_challenge_date.isoformat()}"
            )
        self.last_result = self.engine.propagate_from(first.date, reseed=True)
        self.warnings.extend(self.last_result.errors)
        return self.last_result
