"""Key group and collection schemas."""

from typing import List, Optional

from pydantic import Field, UUID4, model_validator

from keybuilder.schemas.base import CamelModel
from keybuilder.schemas.media import MediaOut


class NamedInput(CamelModel):
    name_no: Optional[str] = None
    name_en: Optional[str] = None
    description_no: Optional[str] = None
    description_en: Optional[str] = None

    def names(self):
        """(language, name, description) per language that has a name."""
        return [
            (language, name, description)
            for language, name, description in (
                ("no", self.name_no, self.description_no),
                ("en", self.name_en, self.description_en),
            )
            if name
        ]


class GroupCreate(NamedInput):
    name_no: str = Field(min_length=1)
    name_en: str = Field(min_length=1)
    parent_id: Optional[int] = None


class GroupUpdate(NamedInput):
    # 0 removes the parent
    parent_id: Optional[int] = None

    @model_validator(mode="after")
    def require_name(self):
        if not self.name_no and not self.name_en:
            raise ValueError("nameNo or nameEn is required")
        return self


class NameInfoOut(CamelModel):
    language_code: str
    name: str
    description: Optional[str] = None


class GroupOut(CamelModel):
    id: int = Field(validation_alias="key_group_id")
    parent_id: Optional[int] = None
    group_info: List[NameInfoOut] = Field(default_factory=list, validation_alias="infos")
    media: List[MediaOut] = Field(default_factory=list)


class CollectionCreate(NamedInput):
    workgroup_id: int

    @model_validator(mode="after")
    def require_name(self):
        if not self.name_no and not self.name_en:
            raise ValueError("nameNo or nameEn is required")
        return self


class CollectionUpdate(CollectionCreate):
    pass


class CollectionOut(CamelModel):
    id: int = Field(validation_alias="collection_id")
    workgroup_id: int
    collection_info: List[NameInfoOut] = Field(default_factory=list, validation_alias="infos")
    media: List[MediaOut] = Field(default_factory=list)


class CollectionKeyAdd(CamelModel):
    key_id: UUID4
    collection_id: int


class CollectionKeyRemoval(CamelModel):
    collection_id: int
