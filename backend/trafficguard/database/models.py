"""
SQLAlchemy ORM Models

Local persistence is a small key-value store: each named slot holds one
JSON document (the signed-in officer, the scan history list).
"""

from sqlalchemy import Column, String, Text, DateTime
from sqlalchemy.sql import func
from .database import Base


class StorageSlot(Base):
    """
    Named JSON slot

    Mirrors browser local storage: the value is serialized structured
    text and is reloaded at startup.
    """
    __tablename__ = "storage_slots"

    key = Column(String, primary_key=True)
    value = Column(Text, nullable=False)

    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())
