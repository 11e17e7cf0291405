"""
Database connection, session management, and table creation.
Uses SQLAlchemy; PostgreSQL in production, SQLite for local development.
All models are auto-imported here so create_tables() creates every table in one call.
"""

from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker
from fleet_ledger.config import settings


def _engine_options(database_url: str) -> dict:
    if database_url.startswith("sqlite"):
        return {"connect_args": {"check_same_thread": False}}
    return {
        "pool_pre_ping": True,       # Auto-reconnect if DB connection drops
        "pool_size": 10,
        "max_overflow": 20,
        "connect_args": {"connect_timeout": 10},
    }


engine = create_engine(settings.DATABASE_URL, echo=False, **_engine_options(settings.DATABASE_URL))

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db():
    """FastAPI dependency — yields a DB session and closes it after request."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def create_tables(bind=None):
    """
    Creates all DB tables. Safe to call multiple times.
    Import all models here so SQLAlchemy knows about them.
    """
    from fleet_ledger.models.vehicle import Vehicle          # noqa
    from fleet_ledger.models.trip import Trip                # noqa
    from fleet_ledger.models.expense import Expense          # noqa
    from fleet_ledger.models.toll import Toll, TollRecord    # noqa
    from fleet_ledger.models.audit_log import AuditLog       # noqa

    Base.metadata.create_all(bind=bind or engine)
