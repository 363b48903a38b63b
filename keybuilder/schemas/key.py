"""Key request/response schemas."""

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import Field, UUID4

from keybuilder.schemas.base import CamelModel, TitledInput
from keybuilder.schemas.media import MediaOut


class KeyCreate(TitledInput):
    group_id: Optional[int] = None
    collections: Optional[List[int]] = None
    workgroup_id: Optional[int] = None
    languages: List[str]


class KeyUpdate(TitledInput):
    version: Optional[str] = None
    status: Literal["PRIVATE", "BETA", "PUBLISHED"]
    group_id: Optional[int] = None
    collections: Optional[List[int]] = None
    workgroup_id: Optional[int] = None
    license_url: Optional[str] = None
    revision_id: UUID4
    languages: List[str]
    creators: List[str]
    contributors: List[str]
    publishers: List[int]


class KeyInfoOut(CamelModel):
    language_code: str
    title: str
    description: Optional[str] = None


class KeyOut(CamelModel):
    id: str = Field(validation_alias="key_id")
    status: str
    version: Optional[str] = None
    creators: Optional[List[str]] = None
    contributors: Optional[List[str]] = None
    license_url: Optional[str] = None
    workgroup_id: Optional[int] = None
    group_id: Optional[int] = None
    revision_id: Optional[str] = None
    created_at: Optional[datetime] = None
    key_info: List[KeyInfoOut] = Field(default_factory=list, validation_alias="infos")
    media: List[MediaOut] = Field(default_factory=list)


class KeyDetailOut(KeyOut):
    # True when the session user created the key
    created_by: bool
    is_editor: bool
    creator_name: Optional[str] = None
    workgroup_name: Optional[str] = None
    languages: List[str] = Field(default_factory=list)
    publishers: List[int] = Field(default_factory=list)
    collections: List[int] = Field(default_factory=list)
