import json

from sqlalchemy import Column, Integer, Text, Date, UniqueConstraint
from database import Base


class DayRecord(Base):
    __tablename__ = "day_records"

    id = Column(Integer, primary_key=True, autoincrement=True)
    date = Column(Date, nullable=False, index=True)
    completion = Column(Text, nullable=False)  # JSON array of true/false/null, one per habit
    buffer = Column(Text, nullable=False)  # JSON array of ints, parallel to completion
    current_streak = Column(Integer, nullable=False, default=0)
    highest_streak = Column(Integer, nullable=False, default=0)

    __table_args__ = (
        UniqueConstraint("date", name="uq_day_record_date"),
    )

    def to_dict(self) -> dict:
        def _load(raw):
            try:
                return json.loads(raw)
            except (TypeError, ValueError):
                return None

        return {
            "date": self.date.isoformat(),
            "completion": _load(self.completion),
            "buffer": _load(self.buffer),
            "current_streak": self.current_streak,
            "highest_streak": self.highest_streak,
        }
