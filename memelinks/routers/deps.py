# memelinks/routers/deps.py
# Request-scoped access to the objects owned by the app lifespan

import json
from typing import Optional, Type, TypeVar

import pydantic
from fastapi import Cookie, Depends, Request

from memelinks.constants import SESSION_COOKIE_NAME
from memelinks.middleware.error_handler import AuthError, ValidationError
from memelinks.repositories.link_repository import LinkRepository
from memelinks.services.api_key import ApiKeyGate
from memelinks.services.link_service import LinkService
from memelinks.services.session_registry import SessionRegistry

ModelT = TypeVar("ModelT", bound=pydantic.BaseModel)


def get_link_service(request: Request) -> LinkService:
    return request.app.state.link_service


def get_repository(request: Request) -> LinkRepository:
    return request.app.state.repository


def get_session_registry(request: Request) -> SessionRegistry:
    return request.app.state.sessions


def get_api_key_gate(request: Request) -> ApiKeyGate:
    return request.app.state.api_key_gate


def require_session(
    request: Request,
    session_token: Optional[str] = Cookie(None, alias=SESSION_COOKIE_NAME),
) -> str:
    """Reject browser API calls that did not come from a served page."""
    if not get_session_registry(request).is_valid(session_token):
        raise AuthError("Invalid session")
    return session_token


async def read_json_body(request: Request) -> dict:
    """Decode the request body as a JSON object; an empty body reads as {}.

    Bodies are decoded here rather than by FastAPI so that the guards run
    before anything in the body is looked at.
    """
    raw = await request.body()
    if not raw.strip():
        return {}
    try:
        body = json.loads(raw)
    except ValueError as e:
        raise ValidationError("Invalid JSON body") from e
    if not isinstance(body, dict):
        raise ValidationError("Request body must be a JSON object")
    return body


async def require_worker_body(
    request: Request,
    gate: ApiKeyGate = Depends(get_api_key_gate),
) -> dict:
    """Check the ``apiKey`` field of a worker call and return the decoded body."""
    try:
        body = await read_json_body(request)
    except ValidationError as e:
        # No readable body means no key
        raise AuthError("Invalid API key") from e
    api_key = body.get("apiKey")
    gate.require(api_key if isinstance(api_key, str) else None)
    return body


def parse_body(model: Type[ModelT], body: dict) -> ModelT:
    try:
        return model.model_validate(body)
    except pydantic.ValidationError as e:
        fields = [".".join(str(p) for p in err.get("loc", ())) for err in e.errors()]
        raise ValidationError("Invalid request", details={"fields": fields}) from e
