"""Database initialization for RedFox."""

from pathlib import Path

from sqlalchemy import create_engine

from redfox.db.models import Base

DB_FILENAME = "redfox.db"


def init_db(db_path: Path) -> None:
    """Initialize the SQLite database with all tables."""
    db_path.parent.mkdir(parents=True, exist_ok=True)
    engine = create_engine(f"sqlite:///{db_path}", echo=False)
    Base.metadata.create_all(engine)
    engine.dispose()
