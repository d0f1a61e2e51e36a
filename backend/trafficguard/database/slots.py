"""
Named Storage Slots

Key-value persistence over the ``storage_slots`` table. Reads degrade to
a default on missing or corrupt data; writes raise PersistenceError so
the caller can report the failure while keeping its in-memory state.
"""

import json
from typing import Any, Optional

from sqlalchemy.exc import SQLAlchemyError

from trafficguard.errors import PersistenceError

from .database import SessionLocal
from .models import StorageSlot


class SlotStorage:
    """
    JSON documents stored under string keys

    Usage:
        storage = SlotStorage()
        storage.save_json('traffic_guard_user', {...})
        user = storage.load_json('traffic_guard_user', default=None)
    """

    def __init__(self, session_factory=None):
        """
        Args:
            session_factory: SQLAlchemy session factory (default: SessionLocal)
        """
        self.session_factory = session_factory or SessionLocal

    def load(self, key: str) -> Optional[str]:
        """Raw slot text, or None if the slot is empty"""
        db = self.session_factory()
        try:
            slot = db.query(StorageSlot).filter(StorageSlot.key == key).first()
            return slot.value if slot else None
        except SQLAlchemyError as e:
            raise PersistenceError(f"Could not read '{key}': {e}") from e
        finally:
            db.close()

    def save(self, key: str, value: str):
        """Insert or replace slot text"""
        db = self.session_factory()
        try:
            slot = db.query(StorageSlot).filter(StorageSlot.key == key).first()
            if slot:
                slot.value = value
            else:
                db.add(StorageSlot(key=key, value=value))
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            raise PersistenceError(f"Could not save '{key}': {e}") from e
        finally:
            db.close()

    def remove(self, key: str):
        """Delete a slot; missing slots are ignored"""
        db = self.session_factory()
        try:
            db.query(StorageSlot).filter(StorageSlot.key == key).delete()
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            raise PersistenceError(f"Could not remove '{key}': {e}") from e
        finally:
            db.close()

    def load_json(self, key: str, default: Any = None) -> Any:
        """Parsed slot value; missing, corrupt or unreadable data gives ``default``"""
        try:
            raw = self.load(key)
        except PersistenceError as e:
            print(f"[STORAGE] {e}; using default")
            return default

        if raw is None:
            return default
        try:
            return json.loads(raw)
        except ValueError:
            print(f"[STORAGE] Corrupt data in '{key}'; using default")
            return default

    def save_json(self, key: str, value: Any):
        try:
            text = json.dumps(value)
        except (TypeError, ValueError) as e:
            raise PersistenceError(f"Could not serialize '{key}': {e}") from e
        self.save(key, text)
