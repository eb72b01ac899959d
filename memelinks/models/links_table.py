# memelinks/models/links_table.py
# Submitted links and their processing status

from enum import Enum

from sqlalchemy import Table, Column, Integer, Text, String, TIMESTAMP, Index

from memelinks.db.base import metadata


class LinkStatus(str, Enum):
    """Single-character status flag stored in links.status."""
    NEW = "N"
    COMPLETE = "C"
    FAILED = "F"

    @property
    def is_terminal(self) -> bool:
        return self is not LinkStatus.NEW


links = Table(
    'links',
    metadata,
    Column('id', Integer, primary_key=True, autoincrement=True),
    Column('url', Text, nullable=False),
    Column('submitted_at', TIMESTAMP(timezone=True), nullable=False),
    Column('status', String(1), nullable=False),
    Column('hash', Text, nullable=False),
    Index('ix_links_hash', 'hash', unique=True),
    Index('ix_links_status', 'status'),
)
