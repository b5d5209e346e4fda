"""Database factory functions for creating database instances."""

import os
from pathlib import Path
from typing import Optional

from hisab.database.sqlalchemy_db import SQLAlchemyDatabase


def create_sqlite_database(database_path: Optional[str] = None) -> SQLAlchemyDatabase:
    """Create a SQLite database instance.

    Args:
        database_path: Path to SQLite database file. If None, checks HISAB_DB_PATH
            environment variable, then defaults to ~/.hisab/hisab.db

    Returns:
        SQLAlchemyDatabase instance configured for SQLite
    """
    if database_path is None:
        # Check environment variable
        database_path = os.environ.get("HISAB_DB_PATH")

    if database_path is None:
        # Default to ~/.hisab/hisab.db
        home = Path.home()
        db_dir = home / ".hisab"
        db_dir.mkdir(exist_ok=True)
        database_path = str(db_dir / "hisab.db")

    database_url = f"sqlite:///{database_path}"
    return SQLAlchemyDatabase(database_url)
