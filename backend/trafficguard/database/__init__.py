"""
Database Package

SQLAlchemy engine, session factory, the storage slot model and the
key-value slot storage built on it.
"""

from .database import Base, SessionLocal, engine, init_db
from .slots import SlotStorage

__all__ = [
    "Base",
    "SessionLocal",
    "engine",
    "init_db",
    "SlotStorage",
]
