import logging
from contextlib import contextmanager

from sqlalchemy import create_engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from app.core.config import get_database_url

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    pass


def create_engine_from_url(database_url: str):
    """SQLite gets cross-thread access, everything else a pre-pinged pool."""
    if database_url.startswith("sqlite"):
        logger.info("Using SQLite engine")
        return create_engine(database_url, connect_args={"check_same_thread": False})
    return create_engine(database_url, pool_pre_ping=True, pool_size=5, max_overflow=10)


engine = create_engine_from_url(get_database_url())
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def transaction(db: Session):
    """Commit everything done in the block as one unit, or roll it all back."""
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
