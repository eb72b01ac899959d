# memelinks/repositories/link_repository.py
# Repository for submitted links: dedup insert, lookups, status transitions

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Mapping

from sqlalchemy import select, text, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from memelinks.constants import MAX_RECORD_ID
from memelinks.db.base import get_session
from memelinks.middleware.error_handler import StorageError
from memelinks.models.links_table import LinkStatus, links

logger = logging.getLogger(__name__)


class DuplicateLinkError(Exception):
    """The unique index on links.hash rejected an insert."""

    def __init__(self, content_hash: str):
        super().__init__(f"Link with hash {content_hash} already exists")
        self.content_hash = content_hash


@dataclass(frozen=True)
class LinkRecord:
    id: int
    url: str
    submitted_at: datetime
    status: LinkStatus
    hash: str

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "LinkRecord":
        submitted_at = row["submitted_at"]
        # SQLite hands back naive datetimes; everything is stored as UTC
        if submitted_at.tzinfo is None:
            submitted_at = submitted_at.replace(tzinfo=timezone.utc)
        return cls(
            id=row["id"],
            url=row["url"],
            submitted_at=submitted_at,
            status=LinkStatus(row["status"]),
            hash=row["hash"],
        )


class LinkRepository:
    """Data access for the links table.

    Races are settled by the database: the unique index on ``hash`` decides
    which of two concurrent inserts wins, and ``transition`` only updates a
    row whose status still matches the expected one.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    async def find_by_hash(self, content_hash: str) -> LinkRecord | None:
        stmt = select(links).where(links.c.hash == content_hash)
        return await self._fetch_one(stmt, "find_by_hash")

    async def find_by_id(self, record_id: int) -> LinkRecord | None:
        # Out-of-range ids overflow the driver's integer binding
        if not 1 <= record_id <= MAX_RECORD_ID:
            return None
        stmt = select(links).where(links.c.id == record_id)
        return await self._fetch_one(stmt, "find_by_id")

    async def insert(self, url: str, content_hash: str) -> LinkRecord:
        """Insert a NEW record; raises DuplicateLinkError if the hash exists."""
        now = datetime.now(timezone.utc)
        values = {
            "url": url,
            "submitted_at": now,
            "status": LinkStatus.NEW.value,
            "hash": content_hash,
        }
        try:
            async with get_session(self._session_factory) as session:
                result = await session.execute(links.insert().values(**values))
                await session.commit()
        except IntegrityError as e:
            # Only the unique hash index makes this a duplicate; any other
            # constraint failure is a storage fault
            if await self.find_by_hash(content_hash) is not None:
                raise DuplicateLinkError(content_hash) from e
            logger.exception("insert violated a constraint", extra={"hash": content_hash})
            raise StorageError("Error saving link") from e
        except SQLAlchemyError as e:
            logger.exception("insert failed", extra={"hash": content_hash})
            raise StorageError("Error saving link") from e

        return LinkRecord(
            id=result.inserted_primary_key[0],
            url=url,
            submitted_at=now,
            status=LinkStatus.NEW,
            hash=content_hash,
        )

    async def list_by_status(self, status: LinkStatus) -> list[LinkRecord]:
        """Records with the given status in submission order."""
        stmt = select(links).where(links.c.status == status.value).order_by(links.c.id.asc())
        try:
            async with get_session(self._session_factory) as session:
                result = await session.execute(stmt)
                rows = result.mappings().all()
        except SQLAlchemyError as e:
            logger.exception("list_by_status failed", extra={"status": status.value})
            raise StorageError("Error fetching records") from e
        return [LinkRecord.from_row(r) for r in rows]

    async def transition(
        self,
        record_id: int,
        from_status: LinkStatus,
        to_status: LinkStatus,
        clear_url: bool = False,
    ) -> int:
        """Conditionally move a record between statuses.

        Returns the number of rows changed: 0 when the record is missing or
        its status is no longer ``from_status``.
        """
        new_values: dict[str, Any] = {"status": to_status.value}
        if clear_url:
            new_values["url"] = ""
        stmt = (
            update(links)
            .where(links.c.id == record_id, links.c.status == from_status.value)
            .values(**new_values)
        )
        try:
            async with get_session(self._session_factory) as session:
                result = await session.execute(stmt)
                await session.commit()
        except SQLAlchemyError as e:
            logger.exception("transition failed", extra={"record_id": record_id})
            raise StorageError("Error updating record") from e
        return result.rowcount

    async def ping(self) -> bool:
        async with get_session(self._session_factory) as session:
            result = await session.execute(text("SELECT 1"))
            return result.scalar() == 1

    async def _fetch_one(self, stmt, operation: str) -> LinkRecord | None:
        try:
            async with get_session(self._session_factory) as session:
                result = await session.execute(stmt)
                row = result.mappings().first()
        except SQLAlchemyError as e:
            logger.exception(f"{operation} failed")
            raise StorageError("Error looking up link") from e
        return LinkRecord.from_row(row) if row else None
