"""
stats_service.py — Streak & buffer summary
Today's streak standing plus per-habit completion rates over the whole log.
"""

from sqlalchemy.orm import Session

from exceptions import DataCorruptionError
from models.day_record import DayRecord
from services.day_log import decode_completion
from services.edit_coordinator import EditCoordinator


class StatsService:
    def __init__(self, db: Session, coordinator: EditCoordinator):
        self.db = db
        self.coordinator = coordinator
        self.config = coordinator.config

    def completion_rates(self) -> list[float | None]:
        """Share of answered days each habit was met; None until a day is answered."""
        met = [0] * self.config.habit_count
        answered = [0] * self.config.habit_count
        for record in self.db.query(DayRecord).order_by(DayRecord.date.asc()).yield_per(500):
            try:
                values = decode_completion(record, self.config.habit_count)
            except DataCorruptionError:
                continue
            for i, v in enumerate(values):
                if v is None:
                    continue
                answered[i] += 1
                if v:
                    met[i] += 1
        return [round(m / a, 4) if a else None for m, a in zip(met, answered)]

    def summary(self) -> dict:
        today = self.coordinator.clock.today()
        record = self.coordinator.ensure_date_visible(today)
        state, _, _ = self.coordinator.engine.load_state(record)
        names = list(self.config.habits) or [f"habit_{i + 1}" for i in range(self.config.habit_count)]
        rates = self.completion_rates()

        return {
            "date": today.isoformat(),
            "current_streak": state.current_streak,
            "highest_streak": state.highest_streak,
            "days_tracked": self.coordinator.day_log.count(),
            "failing": self.coordinator.engine.is_failed(state),
            "habits": [
                {"name": name, "buffer": buf, "completed": done, "completion_rate": rate}
                for name, buf, done, rate in zip(names, state.buffer, state.completion, rates)
            ],
        }
