"""Revision request/response schemas."""

import json
from datetime import datetime
from typing import Any, Dict, Literal, Optional

from pydantic import AliasChoices, Field, UUID4, field_validator

from keybuilder.schemas.base import CamelModel
from keybuilder.schemas.content import ContentDocument, RevisionMedia


class RevisionCreate(CamelModel):
    key_id: UUID4
    content: Optional[ContentDocument] = None
    media: Optional[RevisionMedia] = None
    note: Optional[str] = None
    mode: Optional[int] = Field(default=None, ge=1, le=2)

    @field_validator("content", "media", mode="before")
    @classmethod
    def parse_json_string(cls, value):
        # the editor posts both documents as serialized JSON
        if isinstance(value, str):
            return json.loads(value)
        return value


class RevisionStatusUpdate(CamelModel):
    key_id: UUID4
    status: Literal["DRAFT", "REVIEW", "ACCEPTED"]


class RevisionModeUpdate(CamelModel):
    key_id: UUID4
    mode: int = Field(ge=1, le=2)


class RevisionOut(CamelModel):
    id: str = Field(validation_alias=AliasChoices("revision_id", "id"))
    content: Dict[str, Any]
    media: Dict[str, Any]
    note: Optional[str] = None
    status: str
    mode: int
    created_at: Optional[datetime] = None


class RevisionDetailOut(RevisionOut):
    key_id: str


class RevisionListItemOut(RevisionOut):
    # True when the session user created the revision
    created_by: bool
