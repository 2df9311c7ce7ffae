"""
exceptions.py — Error taxonomy for the habit log.
ValidationError and NotFoundError are rejected without mutating anything,
DataCorruptionError is recovered from during propagation, ConsistencyError
and ConfigurationError are fatal for the current operation.
"""

from datetime import date


class HabitTrackerError(Exception):
    """Base class for all habit log errors."""


class ValidationError(HabitTrackerError):
    """Bad input: malformed or out-of-range date, array width mismatch."""


class NotFoundError(HabitTrackerError):
    """No record stored for the requested date."""

    def __init__(self, day: date):
        super().__init__(f"No record for {day.isoformat()}")
        self.day = day


class DataCorruptionError(HabitTrackerError):
    """A stored completion/buffer value could not be parsed."""

    def __init__(self, day: date, field: str, raw):
        super().__init__(f"Unreadable {field} on {day.isoformat()}: {raw!r}")
        self.day = day
        self.field = field
        self.raw = raw

    def to_dict(self) -> dict:
        return {"date": self.day.isoformat(), "field": self.field, "message": str(self)}


class ConsistencyError(HabitTrackerError):
    """The log is no longer contiguous or conflicts with the requested change."""


class ConfigurationError(HabitTrackerError):
    """Challenge settings are missing or invalid."""
