"""
Database configuration and session management.
"""

import logging
from sqlalchemy import create_engine, event
from sqlalchemy.orm import declarative_base, sessionmaker
from app.config import settings

logger = logging.getLogger("menualloc.database")

# Create SQLAlchemy Base
Base = declarative_base()


def _make_engine(url: str, echo: bool = False):
    if url.startswith("sqlite"):
        eng = create_engine(url, echo=echo, future=True, connect_args={"check_same_thread": False})

        # SQLite leaves foreign keys off unless asked per connection
        @event.listens_for(eng, "connect")
        def _set_sqlite_pragma(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

        return eng
    return create_engine(url, echo=echo, future=True, pool_pre_ping=True)


# Create engine
engine = _make_engine(settings.database_url, echo=settings.db_echo)

# Create session factory
SessionLocal = sessionmaker(bind=engine, autoflush=False, future=True)


def init_database():
    """Initialize database schema"""
    # Import models so they are registered on Base.metadata
    from domain.models import school, menu  # noqa: F401

    with engine.begin() as conn:
        Base.metadata.create_all(bind=conn)
        logger.info("Database tables created successfully")


def get_db_session():
    """Get database session (for FastAPI dependency injection)"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
