# tests/unit/test_link_service.py
# LinkService rules against an in-memory stand-in for the repository

from datetime import datetime, timezone

import pytest

from memelinks.middleware.error_handler import (
    ConflictError,
    NotFoundError,
    StateMismatchError,
    StorageError,
    ValidationError,
)
from memelinks.models.links_table import LinkStatus
from memelinks.repositories.link_repository import DuplicateLinkError, LinkRecord
from memelinks.services.link_service import LinkService
from memelinks.utils.urls import content_hash


class InMemoryLinks:
    """Mimics LinkRepository semantics, including the unique hash."""

    def __init__(self):
        self.records = {}
        self.stale_transitions = False

    async def find_by_hash(self, digest):
        return next((r for r in self.records.values() if r.hash == digest), None)

    async def find_by_id(self, record_id):
        return self.records.get(record_id)

    async def insert(self, url, digest):
        if await self.find_by_hash(digest):
            raise DuplicateLinkError(digest)
        record = LinkRecord(
            id=len(self.records) + 1,
            url=url,
            submitted_at=datetime.now(timezone.utc),
            status=LinkStatus.NEW,
            hash=digest,
        )
        self.records[record.id] = record
        return record

    async def list_by_status(self, status):
        return [r for r in self.records.values() if r.status is status]

    async def transition(self, record_id, from_status, to_status, clear_url=False):
        record = self.records.get(record_id)
        if self.stale_transitions or record is None or record.status is not from_status:
            return 0
        self.records[record_id] = LinkRecord(
            id=record.id,
            url="" if clear_url else record.url,
            submitted_at=record.submitted_at,
            status=to_status,
            hash=record.hash,
        )
        return 1


@pytest.fixture
def repo():
    return InMemoryLinks()


@pytest.fixture
def service(repo):
    return LinkService(repo, max_url_length=64)


@pytest.mark.asyncio
async def test_submit_stores_normalized_url_and_hash(service, repo):
    record = await service.submit("http://example.com/meme?x=1")
    assert record.url == "http://example.com/meme"
    assert record.hash == content_hash("http://example.com/meme")
    assert record.status is LinkStatus.NEW


@pytest.mark.asyncio
async def test_second_submit_of_equivalent_url_conflicts(service):
    await service.submit("http://example.com/meme?x=1")
    with pytest.raises(ConflictError) as exc:
        await service.submit("http://example.com/meme?x=2")
    assert exc.value.details == {"isDuplicate": True}


@pytest.mark.asyncio
@pytest.mark.parametrize("raw, message", [
    (None, "URL is required"),
    ("", "URL is required"),
    ("http://example.com/" + "a" * 64, "URL is too long. Maximum length is 64 characters."),
    ("ftp://example.com/", "Invalid URL"),
    ("<b>", "Invalid URL"),
])
async def test_bad_input_is_a_validation_error(service, raw, message):
    with pytest.raises(ValidationError) as exc:
        await service.submit(raw)
    assert exc.value.message == message


@pytest.mark.asyncio
async def test_is_duplicate(service):
    assert not await service.is_duplicate("https://example.com/a")
    await service.submit("https://example.com/a")
    assert await service.is_duplicate("https://example.com/a#again")


@pytest.mark.asyncio
async def test_mark_complete_blanks_url_by_default(service, repo):
    record = await service.submit("https://example.com/a")
    await service.mark_complete(record.id, record.hash)
    stored = repo.records[record.id]
    assert stored.status is LinkStatus.COMPLETE
    assert stored.url == ""
    assert await service.list_new() == []


@pytest.mark.asyncio
async def test_mark_complete_keeps_url_when_policy_disabled(repo):
    service = LinkService(repo, clear_url_on_complete=False)
    record = await service.submit("https://example.com/a")
    await service.mark_complete(record.id, record.hash)
    assert repo.records[record.id].url == "https://example.com/a"


@pytest.mark.asyncio
async def test_mark_failed_keeps_url(service, repo):
    record = await service.submit("https://example.com/a")
    await service.mark_failed(record.id, record.hash)
    stored = repo.records[record.id]
    assert stored.status is LinkStatus.FAILED
    assert stored.url == "https://example.com/a"


@pytest.mark.asyncio
async def test_mark_requires_id_and_hash(service):
    with pytest.raises(ValidationError):
        await service.mark_complete(None, "abc")
    with pytest.raises(ValidationError):
        await service.mark_complete(1, None)


@pytest.mark.asyncio
async def test_mark_unknown_id_is_not_found(service):
    with pytest.raises(NotFoundError):
        await service.mark_complete(42, "abc")


@pytest.mark.asyncio
async def test_mark_with_wrong_hash_leaves_record_untouched(service, repo):
    record = await service.submit("https://example.com/a")
    with pytest.raises(StateMismatchError) as exc:
        await service.mark_complete(record.id, "0" * 64)
    assert exc.value.message == "ID and hash do not match"
    assert repo.records[record.id].status is LinkStatus.NEW


@pytest.mark.asyncio
async def test_terminal_record_cannot_be_finished_again(service):
    record = await service.submit("https://example.com/a")
    await service.mark_failed(record.id, record.hash)
    for finish in (service.mark_complete, service.mark_failed):
        with pytest.raises(StateMismatchError) as exc:
            await finish(record.id, record.hash)
        assert exc.value.message == "Record is not new"


@pytest.mark.asyncio
async def test_lost_race_on_update_is_a_storage_error(service, repo):
    record = await service.submit("https://example.com/a")
    repo.stale_transitions = True
    with pytest.raises(StorageError) as exc:
        await service.mark_complete(record.id, record.hash)
    assert exc.value.status_code == 500
