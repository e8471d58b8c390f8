"""Database initialization for ScanHub."""

from pathlib import Path

from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import sessionmaker

from scanhub.db.models import Base


def create_db_engine(db_path: Path) -> Engine:
    """Create a SQLite engine usable from worker threads."""
    return create_engine(
        f"sqlite:///{db_path}",
        echo=False,
        connect_args={"check_same_thread": False},
    )


def init_db(db_path: Path) -> Engine:
    """Initialize the SQLite database with all tables."""
    # Ensure parent directory exists
    db_path.parent.mkdir(parents=True, exist_ok=True)

    engine = create_db_engine(db_path)
    Base.metadata.create_all(engine)
    return engine


def get_session_factory(engine: Engine) -> sessionmaker:
    """Return a session factory bound to an engine."""
    return sessionmaker(bind=engine, expire_on_commit=False)
