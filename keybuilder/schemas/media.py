"""Media request/response schemas."""

import json
from typing import List, Optional, Union

from pydantic import Field, UUID4, field_validator, model_validator

from keybuilder.schemas.base import CamelModel


class MediaTitleOut(CamelModel):
    language_code: str
    title: str


class MediaOut(CamelModel):
    media_id: int
    file_name: Optional[str] = None
    thumbnail_name: Optional[str] = None
    media_type: str
    license_url: Optional[str] = None
    creators: Optional[List[str]] = None
    infos: List[MediaTitleOut] = Field(default_factory=list)


class MediaListItemOut(CamelModel):
    media_id: int
    file_name: Optional[str] = None
    creators: Optional[List[str]] = None
    license_url: Optional[str] = None


class MediaInfoInput(CamelModel):
    title_no: Optional[str] = None
    title_en: Optional[str] = None
    creators: Optional[List[str]] = None
    license_url: Optional[str] = None

    @model_validator(mode="after")
    def require_change(self):
        if not (self.title_no or self.title_en or self.creators is not None or self.license_url):
            raise ValueError("Nothing to update")
        return self


class MediaUpdate(MediaInfoInput):
    pass


class RevisionMediaUpdate(MediaInfoInput):
    media_id: int
    key_id: UUID4


class FileInfo(CamelModel):
    """Per-file metadata sent alongside an upload, matched on the original file name."""

    file_name: str
    title_no: Optional[str] = None
    title_en: Optional[str] = None
    creators: Optional[List[str]] = None
    license_url: Optional[str] = None


def parse_file_infos(raw: Optional[str]) -> List[FileInfo]:
    if not raw:
        return []
    return [FileInfo.model_validate(item) for item in json.loads(raw) if item]


class MediaReference(CamelModel):
    id: int


class MediaLinkRemoval(CamelModel):
    media: List[MediaReference]


class EntityMediaRemoval(CamelModel):
    key_id: UUID4
    revision_id: UUID4
    entity_id: str = Field(min_length=1)
    state_id: Optional[str] = None
    media: List[Union[int, str]]

    @field_validator("entity_id", "state_id", mode="before")
    @classmethod
    def as_string(cls, value):
        return str(value) if isinstance(value, int) else value
