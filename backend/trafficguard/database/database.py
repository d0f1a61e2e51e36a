"""
Database engine for durable device storage

SQLite file under backend/data by default; DATABASE_URL overrides it.
The only table is the key-value slot table used for scan history and
the signed-in officer.
"""

import os
from pathlib import Path
from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

DATA_DIR = Path(__file__).parent.parent.parent / "data"

DATABASE_URL = os.getenv(
    "DATABASE_URL",
    f"sqlite:///{DATA_DIR}/trafficguard.db"
)

if DATABASE_URL.startswith("sqlite:///") and ":memory:" not in DATABASE_URL:
    DATA_DIR.mkdir(exist_ok=True)

engine = create_engine(
    DATABASE_URL,
    connect_args={"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {},
    echo=False
)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def init_db(bind=None):
    """Create the slot table if it does not exist (startup)"""
    from trafficguard.database import models  # noqa: F401

    Base.metadata.create_all(bind=bind or engine)

    print(f"[OK] Database initialized at: {DATABASE_URL if bind is None else bind.url}")
