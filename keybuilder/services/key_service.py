"""Key metadata: listing, creation, updates and hiding."""

import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from keybuilder.exceptions import ConflictError, ForbiddenError, NotFoundError
from keybuilder.models.group import KeyCollection
from keybuilder.models.key import Editor, Key, KeyInfo, KeyLanguage, KeyPublisher, KeyRevision, Revision
from keybuilder.models.user import User
from keybuilder.schemas.key import KeyCreate, KeyDetailOut, KeyOut, KeyUpdate
from keybuilder.services import media_service, revision_service
from keybuilder.utils.permissions import PUBLISH_KEY, PermissionContext

logger = logging.getLogger(__name__)

PRIVATE = "PRIVATE"
HIDDEN = "HIDDEN"


def _visible(query):
    return query.filter(Key.status != HIDDEN)


def _to_key_out(db: Session, key: Key, language: Optional[str]) -> KeyOut:
    out = KeyOut.model_validate(key)
    if language:
        out.key_info = [info for info in out.key_info if info.language_code == language]
    out.media = media_service.linked_media(db, "key", key.key_id, language)
    return out


def list_keys(db: Session, user: User, language: Optional[str] = None, personal: bool = False) -> List[KeyOut]:
    """All visible keys, or only the ones created by ``user`` when ``personal``."""
    query = _visible(db.query(Key))
    if personal:
        query = query.filter(Key.created_by == user.user_id)
    keys = query.order_by(Key.created_at.desc()).all()
    return [_to_key_out(db, key, language) for key in keys]


def get_visible_key(db: Session, key_id: str) -> Key:
    key = _visible(db.query(Key)).filter(Key.key_id == str(key_id)).first()
    if not key:
        raise NotFoundError("Key not found")
    return key


def get_key_detail(db: Session, key_id: str, user: User, language: Optional[str] = None) -> KeyDetailOut:
    key = get_visible_key(db, key_id)
    base = _to_key_out(db, key, language)
    is_editor = (
        db.query(Editor).filter(Editor.key_id == key.key_id, Editor.user_id == user.user_id).first() is not None
    )
    return KeyDetailOut(
        **base.model_dump(),
        created_by=key.created_by == user.user_id,
        is_editor=is_editor,
        creator_name=key.creator.name if key.creator else None,
        workgroup_name=key.workgroup.name if key.workgroup else None,
        languages=[row.language_code for row in db.query(KeyLanguage).filter(KeyLanguage.key_id == key.key_id)],
        publishers=[row.organization_id for row in db.query(KeyPublisher).filter(KeyPublisher.key_id == key.key_id)],
        collections=[row.collection_id for row in db.query(KeyCollection).filter(KeyCollection.key_id == key.key_id)],
    )


def list_group_keys(db: Session, group_id: int, language: Optional[str] = None) -> List[KeyOut]:
    keys = _visible(db.query(Key)).filter(Key.group_id == group_id).order_by(Key.created_at.desc()).all()
    return [_to_key_out(db, key, language) for key in keys]


def list_collection_keys(db: Session, collection_id: int, language: Optional[str] = None) -> List[KeyOut]:
    keys = (
        _visible(db.query(Key))
        .join(KeyCollection, KeyCollection.key_id == Key.key_id)
        .filter(KeyCollection.collection_id == collection_id)
        .all()
    )
    return [_to_key_out(db, key, language) for key in keys]


def _set_infos(db: Session, key: Key, data) -> None:
    """Create or update the no/en info rows; an info row without title or description is removed."""
    existing = {info.language_code: info for info in key.infos}
    for language, title, description in (
        ("no", data.title_no, data.description_no),
        ("en", data.title_en, data.description_en),
    ):
        info = existing.get(language)
        if title:
            if info:
                info.title = title
                info.description = description
            else:
                key.infos.append(KeyInfo(language_code=language, title=title, description=description))
        elif info and not description:
            key.infos.remove(info)


def _sync_rows(db: Session, model, key_id: str, column: str, values: List) -> None:
    rows = db.query(model).filter(model.key_id == key_id).all()
    current = {getattr(row, column) for row in rows}
    for row in rows:
        if getattr(row, column) not in values:
            db.delete(row)
    for value in dict.fromkeys(values):
        if value not in current:
            db.add(model(key_id=key_id, **{column: value}))


def create_key(db: Session, data: KeyCreate, user: User, context: PermissionContext) -> str:
    if data.workgroup_id and data.workgroup_id not in context.workgroups:
        raise ForbiddenError("Not a member of the workgroup")
    key = Key(
        group_id=data.group_id,
        workgroup_id=data.workgroup_id or None,
        created_by=user.user_id,
        status=PRIVATE,
    )
    db.add(key)
    db.flush()
    _set_infos(db, key, data)
    _sync_rows(db, KeyLanguage, key.key_id, "language_code", data.languages)
    _sync_rows(db, KeyCollection, key.key_id, "collection_id", data.collections or [])
    db.commit()
    logger.info("[key] created %s by user %s", key.key_id, user.user_id)
    return key.key_id


def update_key(db: Session, key_id: str, data: KeyUpdate, context: PermissionContext) -> None:
    """Update key metadata and move its pointer to an accepted revision.

    Only callers holding PUBLISH_KEY may set a key to PRIVATE.
    """
    if data.status == PRIVATE and not context.has(PUBLISH_KEY):
        raise ForbiddenError("Requires PUBLISH_KEY to make the key private")
    key = get_visible_key(db, key_id)
    revision_id = str(data.revision_id)
    linked = (
        db.query(KeyRevision)
        .filter(KeyRevision.key_id == key.key_id, KeyRevision.revision_id == revision_id)
        .first()
    )
    revision = db.query(Revision).filter(Revision.revision_id == revision_id).first()
    if not linked or not revision:
        raise NotFoundError("Revision does not belong to key")
    if revision.status != revision_service.ACCEPTED:
        raise ConflictError("Only an accepted revision can become the key's current revision")

    key.version = data.version
    key.status = data.status
    key.creators = data.creators
    key.contributors = data.contributors
    key.license_url = data.license_url
    key.group_id = data.group_id or None
    key.workgroup_id = data.workgroup_id or None
    key.revision_id = revision.revision_id
    _set_infos(db, key, data)
    _sync_rows(db, KeyLanguage, key.key_id, "language_code", data.languages)
    _sync_rows(db, KeyPublisher, key.key_id, "organization_id", data.publishers)
    if data.collections is not None:
        _sync_rows(db, KeyCollection, key.key_id, "collection_id", data.collections)
    db.commit()
    logger.info("[key] updated %s, current revision %s", key.key_id, key.revision_id)


def hide_key(db: Session, key_id: str, user: User) -> None:
    """Soft-delete a key. Only its creator can hide it; other keys are left alone."""
    db.query(Key).filter(Key.key_id == str(key_id), Key.created_by == user.user_id).update(
        {Key.status: HIDDEN}, synchronize_session=False
    )
    db.commit()
