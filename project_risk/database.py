"""
Project Risk Engine - Database Engine.

============================================================
PURPOSE
============================================================
SQLAlchemy engine and session management for the threshold
settings store. Only the store touches the database; scoring
never does.

Configuration:
- RISK_DATABASE_URL: SQLAlchemy URL
  (default: sqlite:///risk_settings.db)

============================================================
"""

import logging
import os
from contextlib import contextmanager
from typing import Generator, Optional

from dotenv import load_dotenv
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, declarative_base, sessionmaker

# Load environment variables
load_dotenv()

logger = logging.getLogger(__name__)

DEFAULT_DATABASE_URL = "sqlite:///risk_settings.db"


# =============================================================
# DECLARATIVE BASE
# =============================================================

Base = declarative_base()


# =============================================================
# DATABASE ENGINE
# =============================================================


def get_database_url() -> str:
    """Get database URL from environment."""
    url = os.getenv("RISK_DATABASE_URL")
    if not url:
        url = DEFAULT_DATABASE_URL
        logger.debug(f"RISK_DATABASE_URL not set, using default: {url}")
    return url


def create_database_engine(url: Optional[str] = None, echo: bool = False) -> Engine:
    """
    Create a SQLAlchemy engine and make sure the schema exists.

    Args:
        url: Database URL (defaults to RISK_DATABASE_URL)
        echo: Log SQL statements

    Returns:
        SQLAlchemy Engine
    """
    database_url = url or get_database_url()
    logger.info(f"Creating database engine for: {database_url.split('@')[-1]}")

    engine = create_engine(database_url, echo=echo, future=True)

    # Registers the ORM tables on Base.metadata
    from . import models  # noqa: F401

    Base.metadata.create_all(engine)
    return engine


def create_session_factory(engine: Engine) -> sessionmaker:
    """Session factory bound to an engine."""
    return sessionmaker(
        bind=engine,
        autocommit=False,
        autoflush=False,
        expire_on_commit=False,
    )


# =============================================================
# SESSION MANAGEMENT
# =============================================================


@contextmanager
def transaction_scope(session_factory: sessionmaker) -> Generator[Session, None, None]:
    """
    Context manager for explicit transaction boundaries.

    Commits only if no exception occurs.
    Rolls back on ANY exception and re-raises it.

    Usage:
        with transaction_scope(factory) as session:
            session.add(record)
    """
    session = session_factory()
    try:
        yield session
        session.commit()
    except SQLAlchemyError as e:
        logger.error(f"Database error, rolling back: {e}")
        session.rollback()
        raise
    except Exception as e:
        logger.error(f"Unexpected error, rolling back: {e}")
        session.rollback()
        raise
    finally:
        session.close()
