"""Collections: workgroup-owned sets of keys."""

import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from keybuilder.exceptions import ConflictError, ForbiddenError, NotFoundError
from keybuilder.models.group import Collection, CollectionInfo, KeyCollection
from keybuilder.models.key import Key
from keybuilder.models.user import User
from keybuilder.schemas.group import (
    CollectionCreate,
    CollectionKeyAdd,
    CollectionKeyRemoval,
    CollectionOut,
    CollectionUpdate,
    NamedInput,
)
from keybuilder.services import media_service
from keybuilder.utils.permissions import PermissionContext, is_workgroup_member

logger = logging.getLogger(__name__)


def _to_collection_out(db: Session, collection: Collection, language: Optional[str]) -> CollectionOut:
    out = CollectionOut.model_validate(collection)
    if language:
        out.collection_info = [info for info in out.collection_info if info.language_code == language]
    out.media = media_service.linked_media(db, "collection", collection.collection_id, language)
    return out


def _get_collection(db: Session, collection_id: int) -> Collection:
    collection = db.query(Collection).filter(Collection.collection_id == collection_id).first()
    if not collection:
        raise NotFoundError("Collection not found")
    return collection


def _get_own_collection(db: Session, collection_id: int, context: PermissionContext) -> Collection:
    """A collection owned by one of the caller's workgroups; anything else reads as missing."""
    collection = _get_collection(db, collection_id)
    if collection.workgroup_id not in context.workgroups:
        raise NotFoundError("Collection not found")
    return collection


def _ensure_unique_names(db: Session, data: NamedInput, exclude_id: Optional[int] = None) -> None:
    for language, name, _ in data.names():
        query = db.query(CollectionInfo).filter(CollectionInfo.language_code == language, CollectionInfo.name == name)
        if exclude_id is not None:
            query = query.filter(CollectionInfo.collection_id != exclude_id)
        if query.first():
            raise ConflictError(f"Collection name '{name}' already exists")


def _set_infos(collection: Collection, data: NamedInput) -> None:
    existing = {info.language_code: info for info in collection.infos}
    for language, name, description in data.names():
        info = existing.get(language)
        if info:
            info.name = name
            info.description = description
        else:
            collection.infos.append(CollectionInfo(language_code=language, name=name, description=description))


def list_collections(db: Session, language: Optional[str] = None) -> List[CollectionOut]:
    collections = db.query(Collection).order_by(Collection.collection_id).all()
    return [_to_collection_out(db, collection, language) for collection in collections]


def get_collection(db: Session, collection_id: int, language: Optional[str] = None) -> CollectionOut:
    return _to_collection_out(db, _get_collection(db, collection_id), language)


def create_collection(db: Session, data: CollectionCreate, user: User) -> int:
    if not is_workgroup_member(db, user, data.workgroup_id):
        raise ForbiddenError("Not a member of the workgroup")
    _ensure_unique_names(db, data)
    collection = Collection(workgroup_id=data.workgroup_id, created_by=user.user_id)
    _set_infos(collection, data)
    db.add(collection)
    db.commit()
    logger.info("[collection] created %s in workgroup %s", collection.collection_id, data.workgroup_id)
    return collection.collection_id


def update_collection(db: Session, collection_id: int, data: CollectionUpdate, context: PermissionContext) -> None:
    collection = _get_own_collection(db, collection_id, context)
    _ensure_unique_names(db, data, exclude_id=collection_id)
    if data.workgroup_id != collection.workgroup_id:
        if data.workgroup_id not in context.workgroups:
            raise ForbiddenError("Not a member of the workgroup")
        collection.workgroup_id = data.workgroup_id
    _set_infos(collection, data)
    db.commit()


def add_key(db: Session, data: CollectionKeyAdd, context: PermissionContext) -> int:
    collection = _get_collection(db, data.collection_id)
    if collection.workgroup_id not in context.workgroups:
        raise ForbiddenError("Not a member of the collection's workgroup")
    key_id = str(data.key_id)
    if not db.query(Key).filter(Key.key_id == key_id).first():
        raise NotFoundError("Key not found")
    link = (
        db.query(KeyCollection)
        .filter(KeyCollection.key_id == key_id, KeyCollection.collection_id == collection.collection_id)
        .first()
    )
    if not link:
        link = KeyCollection(key_id=key_id, collection_id=collection.collection_id)
        db.add(link)
        db.commit()
    return link.collections_id


def remove_key(db: Session, collections_id: int, data: CollectionKeyRemoval) -> None:
    destroyed = (
        db.query(KeyCollection)
        .filter(KeyCollection.collections_id == collections_id, KeyCollection.collection_id == data.collection_id)
        .delete(synchronize_session=False)
    )
    if not destroyed:
        db.rollback()
        raise NotFoundError("Key is not in the collection")
    db.commit()


def delete_collection(db: Session, collection_id: int, context: PermissionContext) -> None:
    collection = _get_own_collection(db, collection_id, context)
    media_service.delete_all_linked_media(db, "collection", collection_id)
    db.query(KeyCollection).filter(KeyCollection.collection_id == collection_id).delete(synchronize_session=False)
    db.delete(collection)
    db.commit()
    logger.info("[collection] deleted %s", collection_id)
