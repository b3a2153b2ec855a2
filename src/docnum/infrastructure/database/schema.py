"""SQLAlchemy Core table definitions for the docnum database.

All numbering state lives in one key-value table. Keys follow the
``config:{type}`` / ``counter:{type}`` / ``used:{type}`` layout and
values are JSON documents.
"""

from __future__ import annotations

from sqlalchemy import Column, Index, MetaData, Table, Text

metadata = MetaData()

numbering_state = Table(
    "numbering_state",
    metadata,
    Column("key", Text, primary_key=True),
    Column("value", Text, nullable=False),  # JSON
    Column("updated", Text, nullable=False),  # ISO 8601 UTC
)

Index("ix_numbering_state_updated", numbering_state.c.updated)
