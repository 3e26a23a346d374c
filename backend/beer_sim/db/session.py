import logging
from pathlib import Path
from typing import Generator, Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from beer_sim.core.config import settings
from beer_sim.models.base import Base

logger = logging.getLogger(__name__)


def build_engine(database_uri: Optional[str] = None, *, echo: Optional[bool] = None) -> Engine:
    """Create a synchronous engine for ``database_uri`` (defaults to settings)."""
    raw_database_uri = database_uri or settings.SQLALCHEMY_DATABASE_URI
    db_url = make_url(raw_database_uri)
    echo = settings.SQLALCHEMY_ECHO if echo is None else echo

    if db_url.get_backend_name().startswith("sqlite"):
        if db_url.database and db_url.database != ":memory:":
            Path(db_url.database).parent.mkdir(parents=True, exist_ok=True)
            return create_engine(
                raw_database_uri,
                echo=echo,
                connect_args={"check_same_thread": False},
            )
        # In-memory databases live on a single shared connection
        return create_engine(
            raw_database_uri,
            echo=echo,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )

    return create_engine(
        raw_database_uri,
        echo=echo,
        pool_pre_ping=True,
        pool_recycle=300,
        pool_size=5,
        max_overflow=10,
    )


def build_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(
        bind=engine,
        autocommit=False,
        autoflush=False,
        expire_on_commit=False,
    )


def init_db(engine: Engine) -> None:
    """Create all tables that do not exist yet."""
    logger.info("Ensuring tables exist on %s", engine.url.render_as_string(hide_password=True))
    Base.metadata.create_all(bind=engine)


engine = build_engine()
SessionLocal = build_session_factory(engine)


def get_db() -> Generator[Session, None, None]:
    """
    Dependency function that yields database sessions.

    Handles session lifecycle including proper cleanup.
    """
    db = SessionLocal()
    try:
        yield db
        db.commit()
    except Exception as e:
        db.rollback()
        logger.error(f"Database error: {e}")
        raise
    finally:
        db.close()
