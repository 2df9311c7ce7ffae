# Import all models so they register with SQLAlchemy Base.metadata
# This ensures Base.metadata.create_all() creates all tables

from models.day_record import DayRecord
from models.setting import Setting

__all__ = [
    "DayRecord",
    "Setting",
]
