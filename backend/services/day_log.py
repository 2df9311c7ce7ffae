"""
day_log.py — Contiguous, date-ordered storage of DayRecords
Direct date-keyed lookup through the unique date index; ordered queries are
only used for range walks, and every walk checks that no day is skipped.
"""

import json
import logging
from datetime import date, datetime, timedelta

from sqlalchemy.orm import Session

from exceptions import ConsistencyError, DataCorruptionError, NotFoundError, ValidationError
from models.day_record import DayRecord
from services.challenge_config import ChallengeConfig

logger = logging.getLogger(__name__)

ONE_DAY = timedelta(days=1)


# ----------------------------------------------------------------------
# Stored value codec
# ----------------------------------------------------------------------
def encode_array(values: list) -> str:
    return json.dumps(list(values))


def decode_completion(record: DayRecord, width: int) -> list:
    """Stored completion as a list of True/False/None, or DataCorruptionError."""
    try:
        values = json.loads(record.completion)
    except (TypeError, ValueError):
        raise DataCorruptionError(record.date, "completion", record.completion)
    if not isinstance(values, list) or len(values) != width:
        raise DataCorruptionError(record.date, "completion", record.completion)
    if any(v is not None and not isinstance(v, bool) for v in values):
        raise DataCorruptionError(record.date, "completion", record.completion)
    return values


def decode_buffer(record: DayRecord, width: int) -> list[int]:
    """Stored buffer as a list of ints, or DataCorruptionError."""
    try:
        values = json.loads(record.buffer)
    except (TypeError, ValueError):
        raise DataCorruptionError(record.date, "buffer", record.buffer)
    if not isinstance(values, list) or len(values) != width:
        raise DataCorruptionError(record.date, "buffer", record.buffer)
    # bool is an int subclass, reject it explicitly
    if any(isinstance(v, bool) or not isinstance(v, int) for v in values):
        raise DataCorruptionError(record.date, "buffer", record.buffer)
    return values


def parse_day(value) -> date:
    """Accept a date, datetime or ISO-8601 string; anything else is a ValidationError."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value))
    except ValueError:
        raise ValidationError(f"Not a valid calendar date: {value!r}")


class DayLog:
    def __init__(self, db: Session, config: ChallengeConfig):
        self.db = db
        self.config = config

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------
    def find_record(self, day: date) -> DayRecord | None:
        return self.db.query(DayRecord).filter(DayRecord.date == day).first()

    def get_record(self, day: date) -> DayRecord:
        record = self.find_record(day)
        if record is None:
            raise NotFoundError(day)
        return record

    def get_first_record(self) -> DayRecord | None:
        return self.db.query(DayRecord).order_by(DayRecord.date.asc()).first()

    def get_last_record(self) -> DayRecord | None:
        return self.db.query(DayRecord).order_by(DayRecord.date.desc()).first()

    def count(self) -> int:
        return self.db.query(DayRecord).count()

    def is_empty(self) -> bool:
        return self.get_last_record() is None

    # ------------------------------------------------------------------
    # Range walks
    # ------------------------------------------------------------------
    def records_after(self, day: date) -> list[DayRecord]:
        """Every record strictly after ``day``, ascending; the run must start at day + 1."""
        records = (
            self.db.query(DayRecord)
            .filter(DayRecord.date > day)
            .order_by(DayRecord.date.asc())
            .all()
        )
        self._check_contiguous(records, expected_first=day + ONE_DAY)
        return records

    def records_between(self, start: date, end: date) -> list[DayRecord]:
        """Records in [start, end], ascending."""
        if end < start:
            raise ValidationError(f"Range end {end.isoformat()} is before start {start.isoformat()}")
        records = (
            self.db.query(DayRecord)
            .filter(DayRecord.date >= start, DayRecord.date <= end)
            .order_by(DayRecord.date.asc())
            .all()
        )
        self._check_contiguous(records)
        return records

    @staticmethod
    def _check_contiguous(records: list[DayRecord], expected_first: date | None = None):
        expected = expected_first
        for record in records:
            if expected is not None and record.date != expected:
                logger.error(f"Day log gap: expected {expected.isoformat()}, found {record.date.isoformat()}")
                raise ConsistencyError(
                    f"Day log is not contiguous: expected {expected.isoformat()}, found {record.date.isoformat()}"
                )
            expected = record.date + ONE_DAY

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------
    def _validate_width(self, record: DayRecord):
        try:
            decode_completion(record, self.config.habit_count)
            decode_buffer(record, self.config.habit_count)
        except DataCorruptionError as e:
            raise ValidationError(
                f"Record for {record.date.isoformat()} does not hold {self.config.habit_count} habit slots"
            ) from e

    def append_record(self, record: DayRecord) -> DayRecord:
        self.append_records([record])
        return record

    def append_records(self, records: list[DayRecord], repairs: list[dict] | None = None):
        """Append a contiguous run after the current last record, in one commit.

        ``repairs`` are update mappings (row ``id`` plus columns) for existing
        rows, written in the same transaction as the new records.
        """
        if not records:
            return
        last = self.get_last_record()
        expected = last.date + ONE_DAY if last else self.config.first_challenge_date
        for record in records:
            if record.date != expected:
                raise ConsistencyError(
                    f"Cannot append {record.date.isoformat()}: next day in the log is {expected.isoformat()}"
                )
            self._validate_width(record)
            expected = record.date + ONE_DAY
        try:
            if repairs:
                self.db.bulk_update_mappings(DayRecord, repairs)
            self.db.add_all(records)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        logger.debug(f"Appended {len(records)} day record(s) ending {records[-1].date.isoformat()}")

    def set_completion(self, day: date, completion: list) -> DayRecord:
        """Store a new completion snapshot; derived fields are left untouched."""
        if len(completion) != self.config.habit_count:
            raise ValidationError(
                f"Expected {self.config.habit_count} completion values, got {len(completion)}"
            )
        record = self.get_record(day)
        try:
            record.completion = encode_array(completion)
            self.db.commit()
            self.db.refresh(record)
        except Exception:
            self.db.rollback()
            raise
        return record

    def bulk_update(self, mappings: list[dict]):
        """Write many rows' fields in a single batched, all-or-nothing commit.

        Each mapping must carry the row ``id`` plus the columns to overwrite.
        """
        if not mappings:
            return
        try:
            self.db.bulk_update_mappings(DayRecord, mappings)
            self.db.commit()
        except Exception:
            self.db.rollback()
            logger.error(f"Batched update of {len(mappings)} day record(s) rolled back")
            raise
        # bulk writes bypass the identity map
        self.db.expire_all()

    def remove_record(self, day: date):
        """Drop the latest record; removing any other day would open a gap."""
        record = self.get_record(day)
        last = self.get_last_record()
        if last.date != day:
            raise ConsistencyError(f"Only the latest record can be removed, not {day.isoformat()}")
        try:
            self.db.delete(record)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        logger.info(f"Removed day record {day.isoformat()}")
