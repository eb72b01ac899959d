from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, StrictInt

from memelinks.constants import MAX_RECORD_ID


class StatusResponse(BaseModel):
    success: bool
    message: str


class DuplicateCheckResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    is_duplicate: bool = Field(alias="isDuplicate")


class SubmitLinkRequest(BaseModel):
    url: Optional[str] = None


class WorkerRequest(BaseModel):
    """Body of every worker call: carries the shared secret."""
    model_config = ConfigDict(populate_by_name=True)

    api_key: Optional[str] = Field(None, alias="apiKey")


class RecordActionRequest(WorkerRequest):
    # Strict so that JSON true is not read as id 1
    id: Optional[StrictInt] = Field(None, ge=1, le=MAX_RECORD_ID)
    hash: Optional[str] = None


class RecordOut(BaseModel):
    """Record as handed to the worker."""
    model_config = ConfigDict(populate_by_name=True)

    id: int
    url: str
    submitted_at: datetime = Field(alias="datetime")
    hash: str
