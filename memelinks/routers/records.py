# memelinks/routers/records.py
# Worker-facing polling API, gated by the shared API key

from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from memelinks.repositories.link_repository import LinkRecord
from memelinks.routers.deps import get_api_key_gate, get_link_service, parse_body, require_worker_body
from memelinks.schemas.links import RecordActionRequest, RecordOut, StatusResponse
from memelinks.services.api_key import ApiKeyGate
from memelinks.services.link_service import LinkService

router = APIRouter(tags=["Records"])


def _to_out(record: LinkRecord) -> RecordOut:
    return RecordOut(
        id=record.id,
        url=record.url,
        submitted_at=record.submitted_at,
        hash=record.hash,
    )


@router.get("/new-records", response_model=List[RecordOut])
async def list_new_records(
    api_key: Optional[str] = Query(None, alias="apiKey"),
    gate: ApiKeyGate = Depends(get_api_key_gate),
    service: LinkService = Depends(get_link_service),
) -> List[RecordOut]:
    gate.require(api_key)
    return [_to_out(r) for r in await service.list_new()]


@router.post(
    "/new-records",
    response_model=List[RecordOut],
    dependencies=[Depends(require_worker_body)],
)
async def list_new_records_post(
    service: LinkService = Depends(get_link_service),
) -> List[RecordOut]:
    """Same as the GET form, with the key in the JSON body."""
    return [_to_out(r) for r in await service.list_new()]


@router.post("/mark-complete", response_model=StatusResponse)
async def mark_complete(
    body: dict = Depends(require_worker_body),
    service: LinkService = Depends(get_link_service),
) -> StatusResponse:
    payload = parse_body(RecordActionRequest, body)
    await service.mark_complete(payload.id, payload.hash)
    return StatusResponse(success=True, message="Record marked as complete")


@router.post("/mark-failed", response_model=StatusResponse)
async def mark_failed(
    body: dict = Depends(require_worker_body),
    service: LinkService = Depends(get_link_service),
) -> StatusResponse:
    payload = parse_body(RecordActionRequest, body)
    await service.mark_failed(payload.id, payload.hash)
    return StatusResponse(success=True, message="Record marked as failed")
