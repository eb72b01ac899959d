# memelinks/routers/pages.py
# The submission form; loading it is what grants a browser session

from fastapi import APIRouter, Depends, Request
from fastapi.responses import FileResponse, Response

from memelinks import config
from memelinks.constants import SESSION_COOKIE_NAME
from memelinks.routers.deps import get_session_registry
from memelinks.services.session_registry import SessionRegistry

router = APIRouter(tags=["Pages"])


@router.get("/", include_in_schema=False)
async def index(request: Request, sessions: SessionRegistry = Depends(get_session_registry)):
    token = sessions.issue()
    response = FileResponse(config.INDEX_PAGE, media_type="text/html")
    response.set_cookie(
        SESSION_COOKIE_NAME,
        token,
        max_age=int(sessions.ttl_seconds),
        httponly=True,
        samesite="strict",
        secure=request.app.state.settings.COOKIE_SECURE,
    )
    return response


@router.get("/favicon.ico", include_in_schema=False)
async def favicon():
    """Return empty response for favicon to prevent 404 errors."""
    return Response(status_code=204)
