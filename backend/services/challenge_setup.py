"""
challenge_setup.py — Starting a challenge
Writes the challenge settings and seeds the first day. A setup that was
restarted on the same day leaves a single stray record behind; that record is
discarded, any longer history is kept and blocks a new setup.
"""

import logging
from datetime import date

from sqlalchemy.orm import Session

from config import DEFAULT_BOOST_INTERVAL_DAYS, DEFAULT_BUFFER_PER_HABIT
from exceptions import ConfigurationError, ConsistencyError, ValidationError
from services.challenge_config import ChallengeConfig
from services.day_log import DayLog, parse_day
from services.entry_factory import EntryFactory
from services.propagation import PropagationEngine
from services.settings_store import SettingsStore

logger = logging.getLogger(__name__)


class ChallengeSetup:
    def __init__(self, db: Session, clock):
        self.db = db
        self.clock = clock
        self.store = SettingsStore(db)

    def current(self) -> ChallengeConfig:
        return ChallengeConfig.load(self.store)

    @staticmethod
    def _discard_stray(day_log: DayLog, today: date):
        first = day_log.get_first_record()
        if first is None:
            return
        if day_log.count() == 1 and first.date == today:
            day_log.remove_record(today)
            logger.info(f"Discarded stray day record {today.isoformat()} from an earlier setup")
            return
        raise ConsistencyError("A challenge with recorded history already exists")

    def start(
        self,
        habits: list[str],
        first_challenge_date=None,
        boost_interval_days: int | None = None,
        default_buffer_per_habit: int | None = None,
    ) -> ChallengeConfig:
        today = self.clock.today()
        names = [str(h).strip() for h in habits or []]
        if not names or any(not n for n in names):
            raise ValidationError("At least one named habit is required")
        if len(set(names)) != len(names):
            raise ValidationError("Habit names must be unique")

        first = parse_day(first_challenge_date) if first_challenge_date is not None else today
        if first > today:
            raise ValidationError("A challenge cannot start in the future")

        try:
            config = ChallengeConfig(
                boost_interval_days=DEFAULT_BOOST_INTERVAL_DAYS if boost_interval_days is None else boost_interval_days,
                default_buffer_per_habit=DEFAULT_BUFFER_PER_HABIT if default_buffer_per_habit is None else default_buffer_per_habit,
                first_challenge_date=first,
                habit_count=len(names),
                habits=tuple(names),
            )
        except ConfigurationError as e:
            raise ValidationError(str(e)) from e

        day_log = DayLog(self.db, config)
        self._discard_stray(day_log, today)
        # settings and the seed record commit together
        try:
            self.store.set_many(config.to_settings(), commit=False)
            EntryFactory(day_log, config, PropagationEngine(config, day_log)).ensure_record(first)
        except Exception:
            self.db.rollback()
            raise
        logger.info(f"Started challenge on {first.isoformat()} with {len(names)} habit(s)")
        return config
