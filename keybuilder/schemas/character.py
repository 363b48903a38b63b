"""Character and state request/response schemas."""

from typing import List, Optional, Union

from pydantic import UUID4

from keybuilder.schemas.base import CamelModel, TitledInput
from keybuilder.schemas.content import LocalizedText, PremiseClause


class Alternative(CamelModel):
    id: Union[int, str]
    title: Optional[LocalizedText] = None
    description: Optional[LocalizedText] = None
    media: Optional[List[Union[int, str]]] = None


class CharacterInput(TitledInput):
    key_id: UUID4
    revision_id: UUID4
    type: str
    alternatives: Optional[List[Alternative]] = None
    unit_no: Optional[str] = None
    unit_en: Optional[str] = None
    min: Optional[float] = None
    max: Optional[float] = None
    step_size: Optional[float] = None

    @property
    def is_numerical(self) -> bool:
        return self.type.upper() == "NUMERICAL"


class CharacterCreate(CharacterInput):
    pass


class CharacterUpdate(CharacterInput):
    pass


class CharacterDelete(CamelModel):
    key_id: UUID4
    revision_id: UUID4


class PremiseUpdate(CamelModel):
    key_id: UUID4
    revision_id: UUID4
    logical_premise: List[List[PremiseClause]]


class PremiseStatesRemoval(CamelModel):
    key_id: UUID4
    states: List[Union[int, str]]


class StateCreate(CamelModel):
    key_id: UUID4
    character_id: Optional[int] = None


class CharacterCreatedOut(CamelModel):
    revision_id: str
    character_id: str
