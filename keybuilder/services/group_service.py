"""Key groups: a tree of named groups that keys can be filed under."""

import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from keybuilder.exceptions import ConflictError, NotFoundError
from keybuilder.models.group import GroupInfo, GroupParent, KeyGroup
from keybuilder.models.key import Key
from keybuilder.models.user import User
from keybuilder.schemas.group import GroupCreate, GroupOut, GroupUpdate, NamedInput
from keybuilder.services import media_service

logger = logging.getLogger(__name__)


def _to_group_out(db: Session, group: KeyGroup, language: Optional[str]) -> GroupOut:
    out = GroupOut.model_validate(group)
    if language:
        out.group_info = [info for info in out.group_info if info.language_code == language]
    parent = db.query(GroupParent).filter(GroupParent.group_id == group.key_group_id).first()
    out.parent_id = parent.parent_id if parent else None
    out.media = media_service.linked_media(db, "group", group.key_group_id, language)
    return out


def _get_group(db: Session, group_id: int) -> KeyGroup:
    group = db.query(KeyGroup).filter(KeyGroup.key_group_id == group_id).first()
    if not group:
        raise NotFoundError("Group not found")
    return group


def _ensure_unique_names(db: Session, data: NamedInput, exclude_id: Optional[int] = None) -> None:
    for language, name, _ in data.names():
        query = db.query(GroupInfo).filter(GroupInfo.language_code == language, GroupInfo.name == name)
        if exclude_id is not None:
            query = query.filter(GroupInfo.group_id != exclude_id)
        if query.first():
            raise ConflictError(f"Group name '{name}' already exists")


def list_groups(db: Session, language: Optional[str] = None) -> List[GroupOut]:
    groups = db.query(KeyGroup).order_by(KeyGroup.key_group_id).all()
    return [_to_group_out(db, group, language) for group in groups]


def get_group(db: Session, group_id: int, language: Optional[str] = None) -> GroupOut:
    return _to_group_out(db, _get_group(db, group_id), language)


def _set_parent(db: Session, group_id: int, parent_id: Optional[int]) -> None:
    row = db.query(GroupParent).filter(GroupParent.group_id == group_id).first()
    if parent_id == 0:
        if row:
            db.delete(row)
        return
    if parent_id is None:
        return
    if parent_id == group_id:
        raise ConflictError("A group cannot be its own parent")
    _get_group(db, parent_id)
    if row:
        row.parent_id = parent_id
    else:
        db.add(GroupParent(group_id=group_id, parent_id=parent_id))


def create_group(db: Session, data: GroupCreate, user: User) -> int:
    _ensure_unique_names(db, data)
    group = KeyGroup(created_by=user.user_id)
    for language, name, description in data.names():
        group.infos.append(GroupInfo(language_code=language, name=name, description=description))
    db.add(group)
    db.flush()
    if data.parent_id:
        _set_parent(db, group.key_group_id, data.parent_id)
    db.commit()
    logger.info("[group] created %s by user %s", group.key_group_id, user.user_id)
    return group.key_group_id


def update_group(db: Session, group_id: int, data: GroupUpdate) -> None:
    group = _get_group(db, group_id)
    _ensure_unique_names(db, data, exclude_id=group_id)
    existing = {info.language_code: info for info in group.infos}
    for language, name, description in data.names():
        info = existing.get(language)
        if info:
            info.name = name
            info.description = description
        else:
            group.infos.append(GroupInfo(language_code=language, name=name, description=description))
    _set_parent(db, group_id, data.parent_id)
    db.commit()


def delete_group(db: Session, group_id: int) -> None:
    """Delete a group with its names, parent links and media. Keys filed under it are detached."""
    group = _get_group(db, group_id)
    media_service.delete_all_linked_media(db, "group", group_id)
    db.query(GroupParent).filter(
        (GroupParent.group_id == group_id) | (GroupParent.parent_id == group_id)
    ).delete(synchronize_session=False)
    db.query(Key).filter(Key.group_id == group_id).update({Key.group_id: None}, synchronize_session=False)
    db.delete(group)
    db.commit()
    logger.info("[group] deleted %s", group_id)
