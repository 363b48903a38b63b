from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from keybuilder.database import get_db
from keybuilder.middleware.auth_middleware import get_current_user
from keybuilder.models.user import User
from keybuilder.schemas.organization import EditorAdd, EditorOut, EditorRemoval
from keybuilder.services import editor_service
from keybuilder.utils.permissions import SHARE_KEY, ensure_key_permission

router = APIRouter(prefix="/api/editors", tags=["editors"])


@router.get("/key/{key_id}", response_model=List[EditorOut])
def list_editors(key_id: str, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    ensure_key_permission(db, current_user, key_id, SHARE_KEY)
    return editor_service.list_editors(db, key_id, current_user)


@router.post("")
def add_editor(data: EditorAdd, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    ensure_key_permission(db, current_user, str(data.key_id), SHARE_KEY)
    return editor_service.add_editor(db, data, current_user)


@router.delete("/{editors_id}")
def remove_editor(
    editors_id: int,
    data: EditorRemoval,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    ensure_key_permission(db, current_user, str(data.key_id), SHARE_KEY)
    editor_service.remove_editor(db, editors_id, str(data.key_id))
    return {"message": "Editor removed"}
