"""Database connection, session management and settings."""
from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker, Session
from sqlalchemy.pool import StaticPool
from typing import Optional
from pathlib import Path
from dotenv import load_dotenv
import os
import logging

logger = logging.getLogger(__name__)

# Load .env file if it exists
env_path = Path(__file__).parent.parent.parent / '.env'
if env_path.exists():
    load_dotenv(dotenv_path=env_path)

Base = declarative_base()

# Settings from environment or defaults
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./multistop.db")
MAX_HISTORY_ITEMS = int(os.getenv("MAX_HISTORY_ITEMS", "100"))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

engine = None
SessionLocal = None


def init_db(database_url: Optional[str] = None):
    """Initialize database connection and create tables.

    Args:
        database_url: SQLAlchemy connection string (optional)
    """
    global engine, SessionLocal
    # Registers the ORM models on Base
    from multistop.persistence import models  # noqa: F401

    url = database_url or DATABASE_URL
    kwargs = {}
    if url.startswith("sqlite"):
        kwargs["connect_args"] = {"check_same_thread": False}
        if ":memory:" in url:
            # One shared connection, otherwise every session sees an empty database
            kwargs["poolclass"] = StaticPool
    engine = create_engine(url, echo=False, **kwargs)
    SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    Base.metadata.create_all(bind=engine)
    logger.info(f"Database initialized: {engine.url.render_as_string(hide_password=True)}")


def get_db() -> Session:
    """Get database session.

    Returns:
        Database session
    """
    if SessionLocal is None:
        init_db()

    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def close_db():
    """Close database connection."""
    global engine, SessionLocal
    if engine:
        engine.dispose()
    engine = None
    SessionLocal = None
