"""SQLite database engine and schema via SQLAlchemy Core."""

from docnum.infrastructure.database.engine import create_db_engine, init_database
from docnum.infrastructure.database.schema import metadata, numbering_state

__all__ = [
    "create_db_engine",
    "init_database",
    "metadata",
    "numbering_state",
]
