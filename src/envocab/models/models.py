"""Database models for snapshot storage."""
from sqlalchemy import Column, String, Text

from envocab.models.base import Base, TimestampMixin


class SnapshotEntry(Base, TimestampMixin):
    """Serialized progress snapshot stored under a key."""

    __tablename__ = "snapshots"

    key = Column(String, primary_key=True)
    payload = Column(Text, nullable=False)
