"""Database connection, session management and the unit of work."""
import threading
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker, declarative_base

from credit_engine.config import settings


def build_engine(database_url: str) -> Engine:
    """Create an engine, adding pool sizing for server databases."""
    if database_url.startswith("sqlite"):
        return create_engine(
            database_url,
            connect_args={"check_same_thread": False},
        )
    return create_engine(
        database_url,
        pool_pre_ping=True,  # Enable connection health checks
        pool_size=5,
        max_overflow=10,
    )


engine = build_engine(settings.database_url)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()

# Serializes every mutating operation in this process
_write_lock = threading.RLock()


def get_db():
    """Dependency that provides a database session."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def atomic(db: Session) -> Iterator[Session]:
    """
    Run a block as one serialized, all-or-nothing unit.

    The block's writes are committed together when it exits normally and
    rolled back when it raises. Units never interleave within a process.
    Do not nest: the inner unit would commit the outer one's writes early.
    """
    with _write_lock:
        try:
            yield db
            db.commit()
        except Exception:
            db.rollback()
            raise
