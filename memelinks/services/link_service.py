# memelinks/services/link_service.py

import logging
from typing import Optional

from memelinks.middleware.error_handler import (
    ConflictError,
    NotFoundError,
    StateMismatchError,
    StorageError,
    ValidationError,
)
from memelinks.models.links_table import LinkStatus
from memelinks.repositories.link_repository import DuplicateLinkError, LinkRecord, LinkRepository
from memelinks.utils.urls import InvalidURLError, content_hash, normalize_url

logger = logging.getLogger(__name__)


class LinkService:
    """Submission and claim rules for links."""

    def __init__(
        self,
        repository: LinkRepository,
        max_url_length: int = 2048,
        clear_url_on_complete: bool = True,
    ):
        self._repo = repository
        self.max_url_length = max_url_length
        self.clear_url_on_complete = clear_url_on_complete

    def _prepare(self, raw_url: Optional[str]) -> tuple[str, str]:
        """Validate a submitted URL and return (normalized_url, hash)."""
        if not raw_url:
            raise ValidationError("URL is required")
        if len(raw_url) > self.max_url_length:
            raise ValidationError(
                f"URL is too long. Maximum length is {self.max_url_length} characters."
            )
        try:
            normalized = normalize_url(raw_url)
        except InvalidURLError as e:
            raise ValidationError("Invalid URL", details={"reason": str(e)}) from e
        return normalized, content_hash(normalized)

    async def is_duplicate(self, raw_url: Optional[str]) -> bool:
        _, digest = self._prepare(raw_url)
        return await self._repo.find_by_hash(digest) is not None

    async def submit(self, raw_url: Optional[str]) -> LinkRecord:
        normalized, digest = self._prepare(raw_url)
        try:
            record = await self._repo.insert(normalized, digest)
        except DuplicateLinkError as e:
            raise ConflictError("Duplicate link", details={"isDuplicate": True}) from e
        logger.info("link saved", extra={"record_id": record.id, "hash": digest})
        return record

    async def list_new(self) -> list[LinkRecord]:
        return await self._repo.list_by_status(LinkStatus.NEW)

    async def mark_complete(self, record_id: Optional[int], expected_hash: Optional[str]) -> None:
        await self._finish(record_id, expected_hash, LinkStatus.COMPLETE)

    async def mark_failed(self, record_id: Optional[int], expected_hash: Optional[str]) -> None:
        await self._finish(record_id, expected_hash, LinkStatus.FAILED)

    async def _finish(
        self,
        record_id: Optional[int],
        expected_hash: Optional[str],
        target: LinkStatus,
    ) -> None:
        # The worker echoes back the hash it was given for this id, so a
        # stale or wrong id cannot close somebody else's record.
        if not record_id or not expected_hash:
            raise ValidationError("Both id and hash are required")

        record = await self._repo.find_by_id(record_id)
        if record is None:
            raise NotFoundError("Record not found")
        if record.hash != expected_hash:
            raise StateMismatchError("ID and hash do not match")
        if record.status.is_terminal:
            raise StateMismatchError("Record is not new")

        clear_url = target is LinkStatus.COMPLETE and self.clear_url_on_complete
        changed = await self._repo.transition(record_id, LinkStatus.NEW, target, clear_url=clear_url)
        if changed == 0:
            # Lost a race with another worker between the read and the update
            raise StorageError("Failed to update record")
        logger.info("record finished", extra={"record_id": record_id, "status": target.name})
