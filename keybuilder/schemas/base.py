"""Shared pydantic base for request/response schemas (camelCase on the wire)."""

from typing import Optional

from pydantic import BaseModel, ConfigDict, model_validator
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class TitledInput(CamelModel):
    """Bilingual title/description input; at least one title is required."""

    title_no: Optional[str] = None
    title_en: Optional[str] = None
    description_no: Optional[str] = None
    description_en: Optional[str] = None

    @model_validator(mode="after")
    def require_title(self):
        if not self.title_no and not self.title_en:
            raise ValueError("titleNo or titleEn is required")
        return self

    def label(self) -> str:
        return self.title_en or self.title_no
