"""
Database configuration, models and the scenario store.
"""

from bizcalc.db.database import engine, SessionLocal, get_db
from bizcalc.db.models import Base
from bizcalc.db.store import ScenarioStore

__all__ = ["engine", "SessionLocal", "get_db", "Base", "ScenarioStore"]
