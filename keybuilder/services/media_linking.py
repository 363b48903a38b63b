"""Links between media rows and a revision's content and media documents."""

import re
from typing import Iterable, List, Optional, Union

from keybuilder.schemas.content import (
    Character,
    ContentDocument,
    LocalizedText,
    MediaElement,
    Person,
    RevisionMedia,
    State,
    Taxon,
)
from keybuilder.services.taxon_tree import find_by_id

ENTITY_TAXON = "taxon"
ENTITY_CHARACTER = "character"
ENTITY_STATE = "state"
ENTITY_KINDS = (ENTITY_TAXON, ENTITY_CHARACTER, ENTITY_STATE)

MediaEntity = Union[Taxon, Character, State]


def creator_id(name: str) -> str:
    """Person id for a creator name: whitespace removed, lowercased."""
    return re.sub(r"\s+", "", name).lower()


def upsert_persons(media: RevisionMedia, names: Iterable[str]) -> List[str]:
    """Make sure every creator has a person record and return their ids in order."""
    ids = []
    for name in names:
        person_id = creator_id(name)
        if not any(person.id == person_id for person in media.persons):
            media.persons.append(Person(id=person_id, name=name))
        ids.append(person_id)
    return ids


def find_media_entity(
    content: ContentDocument,
    kind: str,
    entity_id: str,
    state_id: Optional[str] = None,
) -> Optional[MediaEntity]:
    """Resolve the taxon, character or state that owns a media list.

    For states, ``entity_id`` names the owning character.
    """
    if kind == ENTITY_TAXON:
        return find_by_id(content.taxa, entity_id)
    character = content.find_character(str(entity_id))
    if kind == ENTITY_CHARACTER or character is None:
        return character
    if state_id is None:
        return None
    return character.find_state(str(state_id))


def attach_media(
    entity: MediaEntity,
    media: RevisionMedia,
    media_id: Union[int, str],
    title_no: Optional[str] = None,
    title_en: Optional[str] = None,
    license_url: Optional[str] = None,
    creators: Optional[List[str]] = None,
) -> MediaElement:
    media_id = str(media_id)
    if entity.media is None:
        entity.media = []
    entity.media.append(media_id)
    person_ids = upsert_persons(media, creators or [])
    element = MediaElement(
        id=media_id,
        title=LocalizedText.from_pair(title_no, title_en),
        license=license_url or None,
        creators=person_ids or None,
    )
    media.media_elements.append(element)
    return element


def detach_media(entity: MediaEntity, media: RevisionMedia, media_ids: Iterable[Union[int, str]]) -> None:
    """Remove exactly ``media_ids`` from the entity and from the media elements.

    Person records are left alone even when no element references them anymore.
    """
    removed = {str(media_id) for media_id in media_ids}
    entity.media = [media_id for media_id in (entity.media or []) if media_id not in removed]
    media.media_elements = [element for element in media.media_elements if element.id not in removed]


def update_media_element(
    element: MediaElement,
    media: RevisionMedia,
    title_no: Optional[str] = None,
    title_en: Optional[str] = None,
    license_url: Optional[str] = None,
    creators: Optional[List[str]] = None,
) -> MediaElement:
    if title_no or title_en:
        if element.title is None:
            element.title = LocalizedText()
        if title_no:
            element.title.no = title_no
        if title_en:
            element.title.en = title_en
    if license_url:
        element.license = license_url
    if creators is not None:
        element.creators = upsert_persons(media, creators)
    return element
