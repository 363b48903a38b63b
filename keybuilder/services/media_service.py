"""Media storage, thumbnails and the links between media rows and keys, groups,
collections and revision content."""

import logging
import os
from typing import Dict, List, Optional, Tuple

from fastapi import UploadFile
from PIL import Image
from sqlalchemy.orm import Session

from keybuilder.config import settings
from keybuilder.exceptions import ConflictError, KeyBuilderError, NotFoundError, ValidationFailedError
from keybuilder.models.entity import Character as CharacterRow
from keybuilder.models.entity import CharacterState
from keybuilder.models.entity import Taxon as TaxonRow
from keybuilder.models.group import Collection, KeyGroup
from keybuilder.models.key import Key
from keybuilder.models.media import CollectionMedia, GroupMedia, KeyMedia, Media, MediaInfo
from keybuilder.models.user import User
from keybuilder.schemas.media import (
    EntityMediaRemoval,
    FileInfo,
    MediaOut,
    MediaUpdate,
    RevisionMediaUpdate,
    parse_file_infos,
)
from keybuilder.services import media_linking, revision_service
from keybuilder.utils.helpers import media_folder, read_upload, remove_files, save_file

logger = logging.getLogger(__name__)

LINK_TABLES = {
    "key": (KeyMedia, KeyMedia.key_id),
    "group": (GroupMedia, GroupMedia.group_id),
    "collection": (CollectionMedia, CollectionMedia.collection_id),
}


# ---------------------------------------------------------------------------
# Queries
# ---------------------------------------------------------------------------

def to_media_out(media: Media, language: Optional[str] = None) -> MediaOut:
    out = MediaOut.model_validate(media)
    if language:
        out.infos = [info for info in out.infos if info.language_code == language]
    return out


def linked_media(db: Session, owner: str, owner_id, language: Optional[str] = None) -> List[MediaOut]:
    link_model, owner_column = LINK_TABLES[owner]
    rows = (
        db.query(Media)
        .join(link_model, link_model.media_id == Media.media_id)
        .filter(owner_column == owner_id)
        .order_by(Media.media_id)
        .all()
    )
    return [to_media_out(media, language) for media in rows]


def get_media(db: Session, media_id: int) -> Media:
    media = db.query(Media).filter(Media.media_id == media_id).first()
    if not media:
        raise NotFoundError("Media not found")
    return media


def get_media_path(db: Session, media_id: int, thumbnail: bool = False) -> str:
    media = get_media(db, media_id)
    path = media.thumbnail_path if thumbnail else media.file_path
    if not path:
        raise NotFoundError("Media has no file")
    if not os.path.exists(path):
        raise KeyBuilderError(f"File path does not exist: {path}")
    return os.path.abspath(path)


def list_media(db: Session, media_ids: List[int]) -> List[Media]:
    if not media_ids:
        return []
    return db.query(Media).filter(Media.media_id.in_(media_ids)).order_by(Media.media_id).all()


# ---------------------------------------------------------------------------
# Metadata
# ---------------------------------------------------------------------------

def _set_titles(db: Session, media: Media, title_no: Optional[str], title_en: Optional[str]) -> None:
    """Create, update or delete the per-language title rows."""
    existing: Dict[str, MediaInfo] = {info.language_code: info for info in media.infos}
    for language, title in (("no", title_no), ("en", title_en)):
        info = existing.get(language)
        if title:
            if info:
                info.title = title
            else:
                db.add(MediaInfo(media_id=media.media_id, language_code=language, title=title))
        elif info:
            db.delete(info)


def update_media_info(db: Session, media_id: int, data: MediaUpdate) -> Media:
    media = get_media(db, media_id)
    if data.creators is not None:
        media.creators = data.creators
    if data.license_url is not None:
        media.license_url = data.license_url or None
    _set_titles(db, media, data.title_no, data.title_en)
    db.commit()
    db.refresh(media)
    return media


def update_revision_media(db: Session, revision_id: str, data: RevisionMediaUpdate, user: User) -> str:
    revision, key = revision_service.find_revision_for_key(db, revision_id, data.key_id)
    content, media = revision_service.load_documents(revision)
    element = media.find_element(str(data.media_id))
    if element is None:
        raise NotFoundError("Media element not found in revision")
    media_linking.update_media_element(
        element,
        media,
        title_no=data.title_no,
        title_en=data.title_en,
        license_url=data.license_url,
        creators=data.creators,
    )
    return revision_service.save_in_place_or_branch(
        db, key, revision, content, media, user, f"Updated media {data.media_id}"
    )


# ---------------------------------------------------------------------------
# Upload
# ---------------------------------------------------------------------------

def _create_media_row(db: Session, file: UploadFile, info: Optional[FileInfo], folder: str, user: User) -> Media:
    media = Media(
        media_type=file.content_type,
        creators=info.creators if info and info.creators else None,
        license_url=info.license_url if info and info.license_url else None,
        created_by=user.user_id,
    )
    db.add(media)
    db.flush()
    media.file_name = f"{media.media_id}.{file.content_type.split('/')[1]}"
    media.file_path = f"{folder}/{media.file_name}"
    if info:
        _set_titles(db, media, info.title_no, info.title_en)
    return media


def create_thumbnail(media: Media) -> None:
    """Write a fixed-size derivative next to the original and record it on the row."""
    name, ext = os.path.splitext(media.file_name)
    thumbnail_name = f"{name}-{settings.THUMBNAIL_SUFFIX}{ext}"
    thumbnail_path = f"{os.path.dirname(media.file_path)}/{thumbnail_name}"
    size = (settings.THUMBNAIL_WIDTH, settings.THUMBNAIL_HEIGHT)
    with Image.open(media.file_path) as image:
        resized = image.resize(size)
        if media.media_type == "image/jpeg":
            resized.convert("RGB").save(thumbnail_path, "JPEG", quality=settings.THUMBNAIL_QUALITY)
        else:
            resized.save(thumbnail_path, "PNG", optimize=True)
    media.thumbnail_name = thumbnail_name
    media.thumbnail_path = thumbnail_path


def _link_row(kind: str, entity_id: str, media_id: int):
    if kind == "key":
        return KeyMedia(key_id=str(entity_id), media_id=media_id)
    if kind == "group":
        return GroupMedia(group_id=int(entity_id), media_id=media_id)
    return CollectionMedia(collection_id=int(entity_id), media_id=media_id)


def _resolve_owner(db: Session, kind: str, entity_id: str, key_id: Optional[str], state_id: Optional[str]) -> str:
    """Validate the upload target and return its folder below the media root."""
    if kind != "key" and not str(entity_id).isdigit():
        raise ValidationFailedError("entityId must be numeric")
    if kind == "key":
        if not db.query(Key).filter(Key.key_id == str(entity_id)).first():
            raise NotFoundError("Key not found")
        return media_folder("keys", entity_id)
    if kind == "group":
        if not db.query(KeyGroup).filter(KeyGroup.key_group_id == int(entity_id)).first():
            raise NotFoundError("Group not found")
        return media_folder("groups", entity_id)
    if kind == "collection":
        if not db.query(Collection).filter(Collection.collection_id == int(entity_id)).first():
            raise NotFoundError("Collection not found")
        return media_folder("collections", entity_id)
    if kind == media_linking.ENTITY_TAXON:
        row = db.query(TaxonRow).filter(TaxonRow.taxon_id == int(entity_id), TaxonRow.key_id == key_id).first()
        if not row:
            raise NotFoundError("Taxon not found")
        return media_folder("keys", key_id, "taxa", entity_id)
    character = (
        db.query(CharacterRow)
        .filter(CharacterRow.character_id == int(entity_id), CharacterRow.key_id == key_id)
        .first()
    )
    if not character:
        raise NotFoundError("Character not found")
    if kind == media_linking.ENTITY_CHARACTER:
        return media_folder("keys", key_id, "characters", entity_id)
    state = None
    if state_id and str(state_id).isdigit():
        state = db.query(CharacterState).filter(CharacterState.state_id == int(state_id)).first()
    if not state or state.character_id != character.character_id:
        raise NotFoundError("State not found")
    return media_folder("keys", key_id, "characters", entity_id, "states", state_id)


async def upload_media(
    db: Session,
    kind: str,
    files: List[UploadFile],
    user: User,
    entity_id: str,
    key_id: Optional[str] = None,
    revision_id: Optional[str] = None,
    state_id: Optional[str] = None,
    file_info: Optional[str] = None,
) -> dict:
    """Store uploaded images for a key, group, collection or revision entity.

    Files are written before the rows are committed. Thumbnails are made
    afterwards; a failed resize leaves the committed media row without one.
    """
    if not files:
        raise ValidationFailedError("No files")
    if kind in media_linking.ENTITY_KINDS and not (key_id and revision_id):
        raise ValidationFailedError("Missing key and/or revision ID")
    if kind == media_linking.ENTITY_STATE and not state_id:
        raise ValidationFailedError("Missing state ID")
    try:
        infos = {info.file_name: info for info in parse_file_infos(file_info)}
    except ValueError:
        raise ValidationFailedError("Invalid fileInfo")

    payloads: List[Tuple[UploadFile, bytes]] = [(file, await read_upload(file)) for file in files]
    folder = _resolve_owner(db, kind, entity_id, key_id, state_id)

    entity = content = revision_media = revision = key = None
    if kind in media_linking.ENTITY_KINDS:
        revision, key = revision_service.find_revision_for_key(db, revision_id, key_id)
        content, revision_media = revision_service.load_documents(revision)
        entity = media_linking.find_media_entity(content, kind, entity_id, state_id)
        if entity is None:
            raise NotFoundError(f"{kind} is not part of this revision")

    created: List[Media] = []
    for file, payload in payloads:
        info = infos.get(file.filename)
        media = _create_media_row(db, file, info, folder, user)
        save_file(folder, media.file_name, payload)
        created.append(media)
        if kind in LINK_TABLES:
            db.add(_link_row(kind, entity_id, media.media_id))
        else:
            media_linking.attach_media(
                entity,
                revision_media,
                media.media_id,
                title_no=info.title_no if info else None,
                title_en=info.title_en if info else None,
                license_url=info.license_url if info else None,
                creators=info.creators if info else None,
            )

    result = {"fileNames": [media.file_name for media in created]}
    if entity is not None:
        result["revisionId"] = revision_service.save_in_place_or_branch(
            db, key, revision, content, revision_media, user,
            f"Added media to {kind} {entity_id}",
        )
    else:
        db.commit()

    for media in created:
        try:
            create_thumbnail(media)
        except (OSError, ValueError) as exc:
            logger.warning("[media] thumbnail failed for media %s: %s", media.media_id, exc)
    db.commit()
    logger.info("[media] stored %d file(s) for %s %s", len(created), kind, entity_id)
    return result


# ---------------------------------------------------------------------------
# Deletion
# ---------------------------------------------------------------------------

def delete_linked_media(db: Session, owner: str, owner_id, media_ids: List[int], commit: bool = True) -> None:
    """Unlink media from a key, group or collection and delete them; every id must be linked.

    Files go first. When that fails with anything but a missing file no row
    has been touched and the error propagates. The link, info and media rows
    are then removed together in one commit.
    """
    link_model, owner_column = LINK_TABLES[owner]
    links = (
        db.query(link_model)
        .filter(owner_column == owner_id, link_model.media_id.in_(media_ids))
        .all()
    )
    if len(links) != len(media_ids):
        raise ConflictError(f"Only {len(links)} of {len(media_ids)} media are linked to {owner} {owner_id}")
    media_rows = db.query(Media).filter(Media.media_id.in_(media_ids)).all()
    remove_files([
        path for media in media_rows for path in (media.file_path, media.thumbnail_path) if path
    ])
    for link in links:
        db.delete(link)
    db.flush()
    for media in media_rows:
        db.delete(media)
    if commit:
        db.commit()
    logger.info("[media] deleted media %s from %s %s", media_ids, owner, owner_id)


def delete_all_linked_media(db: Session, owner: str, owner_id) -> None:
    """Delete every media linked to an owner without committing; the caller commits."""
    link_model, owner_column = LINK_TABLES[owner]
    media_ids = [row.media_id for row in db.query(link_model).filter(owner_column == owner_id).all()]
    if media_ids:
        delete_linked_media(db, owner, owner_id, media_ids, commit=False)


def remove_entity_media(db: Session, kind: str, data: EntityMediaRemoval, user: User) -> str:
    revision, key = revision_service.find_revision_for_key(db, data.revision_id, data.key_id)
    content, media = revision_service.load_documents(revision)
    entity = media_linking.find_media_entity(content, kind, data.entity_id, data.state_id)
    if entity is None:
        raise NotFoundError(f"{kind} is not part of this revision")
    if entity.media:
        media_linking.detach_media(entity, media, data.media)
    return revision_service.save_in_place_or_branch(
        db, key, revision, content, media, user, f"Removed media from {kind} {data.entity_id}"
    )
