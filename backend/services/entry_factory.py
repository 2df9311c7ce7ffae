"""
entry_factory.py — Extends the day log forward
Seeds the first challenge day on an empty log and derives every missing day
up to a target date from its predecessor.
"""

import logging

from exceptions import DataCorruptionError, ValidationError
from models.day_record import DayRecord
from services.challenge_config import ChallengeConfig
from services.day_log import DayLog, encode_array, parse_day
from services.propagation import DayState, PropagationEngine

logger = logging.getLogger(__name__)


class EntryFactory:
    def __init__(self, day_log: DayLog, config: ChallengeConfig, engine: PropagationEngine):
        self.day_log = day_log
        self.config = config
        self.engine = engine
        # corruption found in the predecessor during the last ensure_record call
        self.errors: list[DataCorruptionError] = []

    @staticmethod
    def _to_record(state: DayState) -> DayRecord:
        return DayRecord(
            date=state.day,
            completion=encode_array(state.completion),
            buffer=encode_array(state.buffer),
            current_streak=state.current_streak,
            highest_streak=state.highest_streak,
        )

    def ensure_record(self, day) -> bool:
        """Make sure ``day`` has a record, creating it and any gap before it.

        Returns True once the record exists, whether it was created here or
        already stored. Unreadable fields on the predecessor are replaced by
        defaults, written back with the new records and listed in ``errors``.
        """
        self.errors = []
        day = parse_day(day)
        first = self.config.first_challenge_date
        if day < first:
            raise ValidationError(
                f"{day.isoformat()} is before the challenge start {first.isoformat()}"
            )

        last = self.day_log.get_last_record()
        if last is not None and day <= last.date:
            return True

        new_states = []
        repairs = []
        if last is None:
            prev = self.engine.seed_state(first)
            new_states.append(prev)
        else:
            prev, fixed, errors = self.engine.load_state(last)
            if fixed:
                repairs.append({"id": last.id, **fixed})
            self.errors = errors

        while prev.day < day:
            prev = self.engine.next_state(prev)
            new_states.append(prev)

        self.day_log.append_records([self._to_record(s) for s in new_states], repairs=repairs)
        logger.info(f"Created {len(new_states)} day record(s) up to {day.isoformat()}")
        return True
