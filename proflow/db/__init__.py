"""Database module."""

from proflow.db.database import SessionLocal, engine, get_db, init_db
from proflow.db.models import Base, Preference, Stage, WorkItem

__all__ = [
    "SessionLocal",
    "engine",
    "get_db",
    "init_db",
    "Base",
    "Preference",
    "Stage",
    "WorkItem",
]
