"""
propagation.py — Buffer & streak recurrence
Derives a day's buffer/streak state from the previous day and re-walks the
log forward after an edit, writing every change back in one batch.

Recurrence for the transition prev -> next:
  * prev failed (some habit unmet with buffer < 1): streak resets to 0,
    highest streak is kept and every habit's buffer goes back to the default.
  * otherwise: streak + 1, highest = max, every habit gets +1 on boost days
    (streak a positive multiple of the boost interval) and -1 if it was
    unmet on prev. Buffers are clamped at zero.
"""

import logging
from dataclasses import dataclass, field
from datetime import date, timedelta

from exceptions import DataCorruptionError
from models.day_record import DayRecord
from services.challenge_config import ChallengeConfig
from services.day_log import DayLog, decode_buffer, decode_completion, encode_array

logger = logging.getLogger(__name__)


@dataclass
class DayState:
    day: date
    completion: list
    buffer: list[int]
    current_streak: int = 0
    highest_streak: int = 0

    def to_dict(self) -> dict:
        return {
            "date": self.day.isoformat(),
            "completion": list(self.completion),
            "buffer": list(self.buffer),
            "current_streak": self.current_streak,
            "highest_streak": self.highest_streak,
        }


@dataclass
class PropagationResult:
    start: date
    walked: int = 0
    updated: int = 0
    last_state: DayState | None = None
    errors: list[DataCorruptionError] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "start": self.start.isoformat(),
            "walked": self.walked,
            "updated": self.updated,
            "last": self.last_state.to_dict() if self.last_state else None,
            "warnings": [e.to_dict() for e in self.errors],
        }


def is_met(value) -> bool:
    # unset counts as a miss
    return value is True


class PropagationEngine:
    def __init__(self, config: ChallengeConfig, day_log: DayLog | None = None):
        self.config = config
        self.day_log = day_log

    # ------------------------------------------------------------------
    # Single transition
    # ------------------------------------------------------------------
    def seed_state(self, day: date) -> DayState:
        return DayState(
            day=day,
            completion=self.config.default_completion(),
            buffer=self.config.default_buffer(),
        )

    @staticmethod
    def is_failed(state: DayState) -> bool:
        return any(
            not is_met(done) and buf < 1
            for done, buf in zip(state.completion, state.buffer)
        )

    def next_state(self, prev: DayState, completion: list | None = None) -> DayState:
        """State of the day after ``prev``.

        ``completion`` is the next day's stored snapshot (recompute mode);
        None means the day is being created and starts all-unset.
        """
        next_completion = list(completion) if completion is not None else self.config.default_completion()
        next_day = prev.day + timedelta(days=1)

        if self.is_failed(prev):
            return DayState(
                day=next_day,
                completion=next_completion,
                buffer=self.config.default_buffer(),
                current_streak=0,
                highest_streak=prev.highest_streak,
            )

        streak = prev.current_streak + 1
        boost = 1 if streak % self.config.boost_interval_days == 0 else 0
        buffer = [
            max(0, buf + boost - (0 if is_met(done) else 1))
            for done, buf in zip(prev.completion, prev.buffer)
        ]
        return DayState(
            day=next_day,
            completion=next_completion,
            buffer=buffer,
            current_streak=streak,
            highest_streak=max(streak, prev.highest_streak),
        )

    # ------------------------------------------------------------------
    # Reading stored records
    # ------------------------------------------------------------------
    def load_state(self, record: DayRecord) -> tuple[DayState, dict, list[DataCorruptionError]]:
        """Stored record as a DayState, substituting defaults for unreadable fields.

        Returns the state, the repaired columns (encoded, ready to write back)
        and the corruption reports.
        """
        width = self.config.habit_count
        repairs = {}
        errors = []

        try:
            completion = decode_completion(record, width)
        except DataCorruptionError as e:
            logger.warning(f"{e}; using an all-unset day instead")
            completion = self.config.default_completion()
            repairs["completion"] = encode_array(completion)
            errors.append(e)

        try:
            buffer = decode_buffer(record, width)
        except DataCorruptionError as e:
            logger.warning(f"{e}; using the default buffer instead")
            buffer = self.config.default_buffer()
            repairs["buffer"] = encode_array(buffer)
            errors.append(e)

        state = DayState(
            day=record.date,
            completion=completion,
            buffer=buffer,
            current_streak=record.current_streak or 0,
            highest_streak=record.highest_streak or 0,
        )
        return state, repairs, errors

    # ------------------------------------------------------------------
    # Range propagation
    # ------------------------------------------------------------------
    def propagate_from(self, start: date, reseed: bool = False) -> PropagationResult:
        """Recompute every record after ``start`` from ``start``'s stored state.

        With ``reseed`` the start record is treated as the first challenge day:
        its buffer and streaks are reset to the seed values (its completion is
        kept) before walking forward. Unchanged rows are skipped; the rest are
        written in a single batch.
        """
        start_record = self.day_log.get_record(start)
        prev, repairs, errors = self.load_state(start_record)
        if reseed:
            seed = self.seed_state(start)
            seed.completion = prev.completion
            prev = seed
            buffer = encode_array(seed.buffer)
            if start_record.buffer != buffer:
                repairs["buffer"] = buffer
            if start_record.current_streak != 0:
                repairs["current_streak"] = 0
            if start_record.highest_streak != 0:
                repairs["highest_streak"] = 0
        records = self.day_log.records_after(start)

        mappings = []
        if repairs:
            mappings.append({"id": start_record.id, **repairs})

        for record in records:
            changes = {}
            try:
                completion = decode_completion(record, self.config.habit_count)
            except DataCorruptionError as e:
                logger.warning(f"{e}; using an all-unset day instead")
                errors.append(e)
                completion = self.config.default_completion()
                changes["completion"] = encode_array(completion)

            state = self.next_state(prev, completion)

            buffer = encode_array(state.buffer)
            if record.buffer != buffer:
                changes["buffer"] = buffer
            if record.current_streak != state.current_streak:
                changes["current_streak"] = state.current_streak
            if record.highest_streak != state.highest_streak:
                changes["highest_streak"] = state.highest_streak
            if changes:
                mappings.append({"id": record.id, **changes})
            prev = state

        self.day_log.bulk_update(mappings)

        result = PropagationResult(
            start=start,
            walked=len(records),
            updated=len(mappings),
            last_state=prev,
            errors=errors,
        )
        logger.info(
            f"Propagated from {start.isoformat()}: walked {result.walked} day(s), "
            f"updated {result.updated}, {len(errors)} corruption warning(s)"
        )
        return result
