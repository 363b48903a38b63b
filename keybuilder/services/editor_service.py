"""Key editors: users granted EDIT_KEY on a single key."""

from typing import List

from sqlalchemy import func
from sqlalchemy.orm import Session

from keybuilder.exceptions import NotFoundError
from keybuilder.models.key import Editor
from keybuilder.models.user import User
from keybuilder.schemas.organization import EditorAdd, EditorOut


def list_editors(db: Session, key_id: str, user: User) -> List[EditorOut]:
    editors = (
        db.query(Editor)
        .filter(Editor.key_id == str(key_id), Editor.user_id != user.user_id)
        .order_by(Editor.editors_id)
        .all()
    )
    return [
        EditorOut(
            id=editor.editors_id,
            key_id=editor.key_id,
            name=editor.user.name,
            role_id=editor.user.role_id,
            organization_id=editor.user.organization_id,
        )
        for editor in editors
    ]


def add_editor(db: Session, data: EditorAdd, user: User) -> int:
    target = db.query(User).filter(func.lower(User.email) == data.email.lower()).first()
    if not target or target.user_id == user.user_id:
        raise NotFoundError("User not found")
    key_id = str(data.key_id)
    editor = db.query(Editor).filter(Editor.key_id == key_id, Editor.user_id == target.user_id).first()
    if not editor:
        editor = Editor(key_id=key_id, user_id=target.user_id)
        db.add(editor)
        db.commit()
    return editor.editors_id


def remove_editor(db: Session, editors_id: int, key_id: str) -> None:
    destroyed = (
        db.query(Editor)
        .filter(Editor.editors_id == editors_id, Editor.key_id == str(key_id))
        .delete(synchronize_session=False)
    )
    if not destroyed:
        db.rollback()
        raise NotFoundError("Editor not found")
    db.commit()
