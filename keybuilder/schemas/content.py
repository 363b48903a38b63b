"""Typed view of the revision content and media JSON documents.

Documents are stored verbatim in JSON columns with camelCase keys and string
ids. ``ContentDocument.from_json`` / ``to_json`` are the only places where the
raw JSON is touched; everything else works on these models. Unknown keys are
kept so that fields written by the editor front end survive a round trip.
"""

import copy
from typing import Any, Dict, Iterator, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ContentModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
        coerce_numbers_to_str=True,
    )


class LocalizedText(ContentModel):
    no: Optional[str] = None
    en: Optional[str] = None

    def is_empty(self) -> bool:
        return not self.no and not self.en

    @classmethod
    def from_pair(cls, no: Optional[str], en: Optional[str]) -> Optional["LocalizedText"]:
        """Build a text from two optional values, or None when both are blank."""
        if not no and not en:
            return None
        return cls(no=no or None, en=en or None)


class Taxon(ContentModel):
    id: str
    scientific_name: str
    vernacular_name: Optional[LocalizedText] = None
    description: Optional[LocalizedText] = None
    media: Optional[List[str]] = None
    children: Optional[List["Taxon"]] = None


class State(ContentModel):
    id: str
    title: Optional[LocalizedText] = None
    description: Optional[LocalizedText] = None
    media: Optional[List[str]] = None


class NumericalState(ContentModel):
    id: str
    unit: Optional[LocalizedText] = None
    min: Union[int, float]
    max: Union[int, float]
    step_size: Union[int, float]


class PremiseClause(ContentModel):
    character_id: str
    state_id: Optional[str] = None


CharacterType = Literal["exclusive", "multistate", "numerical"]


class Character(ContentModel):
    id: str
    title: LocalizedText = Field(default_factory=LocalizedText)
    description: Optional[LocalizedText] = None
    type: CharacterType
    states: Union[List[State], NumericalState]
    media: Optional[List[str]] = None
    logical_premise: Optional[List[List[PremiseClause]]] = None

    @property
    def is_numerical(self) -> bool:
        return isinstance(self.states, NumericalState)

    def find_state(self, state_id: str) -> Optional[State]:
        if self.is_numerical:
            return None
        return next((state for state in self.states if state.id == state_id), None)

    def label(self) -> str:
        return self.title.en or self.title.no or self.id


class Statement(ContentModel):
    id: Optional[str] = None
    taxon_id: Optional[str] = None
    character_id: Optional[str] = None
    state: Optional[str] = None


class ContentDocument(ContentModel):
    taxa: List[Taxon] = Field(default_factory=list)
    characters: List[Character] = Field(default_factory=list)
    statements: Optional[List[Statement]] = None

    @classmethod
    def from_json(cls, value: Optional[Dict[str, Any]]) -> "ContentDocument":
        # Deep copy so nested extras never alias the stored document.
        return cls.model_validate(copy.deepcopy(value or {}))

    def to_json(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")

    def find_character(self, character_id: str) -> Optional[Character]:
        return next((char for char in self.characters if char.id == character_id), None)

    def iter_taxa(self) -> Iterator[Taxon]:
        stack = list(reversed(self.taxa))
        while stack:
            node = stack.pop()
            yield node
            if node.children:
                stack.extend(reversed(node.children))


class Person(ContentModel):
    id: str
    name: str


class MediaElement(ContentModel):
    id: str
    title: Optional[LocalizedText] = None
    license: Optional[str] = None
    creators: Optional[List[str]] = None


class RevisionMedia(ContentModel):
    media_elements: List[MediaElement] = Field(default_factory=list)
    persons: List[Person] = Field(default_factory=list)

    @classmethod
    def from_json(cls, value: Optional[Dict[str, Any]]) -> "RevisionMedia":
        return cls.model_validate(copy.deepcopy(value or {}))

    def to_json(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")

    def find_element(self, media_id: str) -> Optional[MediaElement]:
        return next((element for element in self.media_elements if element.id == media_id), None)
