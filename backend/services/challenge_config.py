"""
challenge_config.py — Static challenge settings
Boost interval, default per-habit buffer, start date and habit count,
loaded from the settings store.
"""

from dataclasses import dataclass, field
from datetime import date

from exceptions import ConfigurationError
from services.settings_store import SettingsStore

KEY_BOOST_INTERVAL = "boost_interval_days"
KEY_DEFAULT_BUFFER = "default_buffer_per_habit"
KEY_FIRST_DATE = "first_challenge_date"
KEY_HABIT_COUNT = "habit_count"
KEY_HABITS = "habits"


@dataclass(frozen=True)
class ChallengeConfig:
    boost_interval_days: int
    default_buffer_per_habit: int
    first_challenge_date: date
    habit_count: int
    habits: tuple[str, ...] = field(default=())

    def __post_init__(self):
        if self.boost_interval_days < 1:
            raise ConfigurationError("boost_interval_days must be >= 1")
        if self.default_buffer_per_habit < 0:
            raise ConfigurationError("default_buffer_per_habit must be >= 0")
        if self.habit_count < 0:
            raise ConfigurationError("habit_count must be >= 0")
        if self.habits and len(self.habits) != self.habit_count:
            raise ConfigurationError(
                f"{len(self.habits)} habit names configured for habit_count={self.habit_count}"
            )

    @classmethod
    def load(cls, store: SettingsStore) -> "ChallengeConfig":
        """Build from the settings store; any missing or malformed key is fatal."""
        values = store.get_all()
        missing = [k for k in (KEY_BOOST_INTERVAL, KEY_FIRST_DATE, KEY_HABIT_COUNT) if k not in values]
        if missing:
            raise ConfigurationError(f"Challenge is not configured, missing: {', '.join(missing)}")
        try:
            return cls(
                boost_interval_days=int(values[KEY_BOOST_INTERVAL]),
                default_buffer_per_habit=int(values.get(KEY_DEFAULT_BUFFER, 1)),
                first_challenge_date=date.fromisoformat(values[KEY_FIRST_DATE]),
                habit_count=int(values[KEY_HABIT_COUNT]),
                habits=tuple(values.get(KEY_HABITS) or ()),
            )
        except (TypeError, ValueError) as e:
            raise ConfigurationError(f"Invalid challenge settings: {e}") from e

    def to_settings(self) -> dict:
        return {
            KEY_BOOST_INTERVAL: self.boost_interval_days,
            KEY_DEFAULT_BUFFER: self.default_buffer_per_habit,
            KEY_FIRST_DATE: self.first_challenge_date.isoformat(),
            KEY_HABIT_COUNT: self.habit_count,
            KEY_HABITS: list(self.habits),
        }

    def to_dict(self) -> dict:
        return self.to_settings()

    def default_completion(self) -> list:
        return [None] * self.habit_count

    def default_buffer(self) -> list[int]:
        return [self.default_buffer_per_habit] * self.habit_count
