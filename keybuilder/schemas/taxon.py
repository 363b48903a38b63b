"""Taxon request/response schemas."""

from typing import Optional

from pydantic import Field, UUID4

from keybuilder.schemas.base import CamelModel


class TaxonInput(CamelModel):
    key_id: UUID4
    revision_id: UUID4
    scientific_name: str = Field(min_length=1)
    vernacular_name_no: Optional[str] = None
    vernacular_name_en: Optional[str] = None
    description_no: Optional[str] = None
    description_en: Optional[str] = None
    # 0 places the taxon at the top level
    parent_id: Optional[int] = None


class TaxonCreate(TaxonInput):
    pass


class TaxonUpdate(TaxonInput):
    pass


class TaxonDelete(CamelModel):
    key_id: UUID4
    revision_id: UUID4


class TaxonCreatedOut(CamelModel):
    revision_id: str
    taxon_id: str
