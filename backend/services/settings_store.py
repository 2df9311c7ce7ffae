"""
settings_store.py — Key-value settings persistence
Thin JSON-valued key/value layer over the settings table.
"""

import json

from sqlalchemy.orm import Session

from models.setting import Setting


class SettingsStore:
    def __init__(self, db: Session):
        self.db = db

    def get_all(self) -> dict:
        return {row.key: json.loads(row.value) for row in self.db.query(Setting).all() if row.value is not None}

    def set_many(self, values: dict, commit: bool = True):
        """Upsert several keys; commits once unless the caller owns the transaction."""
        try:
            for key, value in values.items():
                row = self.db.get(Setting, key)
                if row is None:
                    row = Setting(key=key)
                    self.db.add(row)
                row.value = json.dumps(value)
            if commit:
                self.db.commit()
        except Exception:
            self.db.rollback()
            raise
