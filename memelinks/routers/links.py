# memelinks/routers/links.py
# Browser-facing API used by the submission form

from typing import Optional

from fastapi import APIRouter, Depends, Query, Request

from memelinks.routers.deps import get_link_service, parse_body, read_json_body, require_session
from memelinks.schemas.links import DuplicateCheckResponse, StatusResponse, SubmitLinkRequest
from memelinks.services.link_service import LinkService

router = APIRouter(tags=["Links"], dependencies=[Depends(require_session)])


@router.get("/check-duplicate", response_model=DuplicateCheckResponse)
async def check_duplicate(
    url: Optional[str] = Query(None),
    service: LinkService = Depends(get_link_service),
) -> DuplicateCheckResponse:
    """Tell the form whether this link was already submitted."""
    is_duplicate = await service.is_duplicate(url)
    return DuplicateCheckResponse(is_duplicate=is_duplicate)


@router.post("/submit-link", response_model=StatusResponse)
async def submit_link(
    request: Request,
    service: LinkService = Depends(get_link_service),
) -> StatusResponse:
    # The session dependency has already run; only now is the body read
    payload = parse_body(SubmitLinkRequest, await read_json_body(request))
    await service.submit(payload.url)
    return StatusResponse(success=True, message="Link saved successfully")
