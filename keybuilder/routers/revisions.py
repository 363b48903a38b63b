from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from keybuilder.database import get_db
from keybuilder.middleware.auth_middleware import get_current_user, require_permissions
from keybuilder.models.user import User
from keybuilder.schemas.revision import (
    RevisionCreate,
    RevisionDetailOut,
    RevisionListItemOut,
    RevisionModeUpdate,
    RevisionStatusUpdate,
)
from keybuilder.services import key_service, revision_service
from keybuilder.utils.permissions import BROWSE_KEYS, EDIT_KEY, PUBLISH_KEY, PermissionContext, ensure_key_permission

router = APIRouter(prefix="/api/revisions", tags=["revisions"])


@router.get("/key/{key_id}", response_model=List[RevisionListItemOut])
def list_revisions(key_id: str, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    ensure_key_permission(db, current_user, key_id, EDIT_KEY)
    return [
        RevisionListItemOut(
            id=revision.revision_id,
            content=revision.content,
            media=revision.media,
            note=revision.note,
            status=revision.status,
            mode=revision.mode,
            created_at=revision.created_at,
            created_by=revision.created_by == current_user.user_id,
        )
        for revision in revision_service.list_revisions(db, key_id)
    ]


@router.get("/{revision_id}", response_model=RevisionDetailOut)
def get_revision(
    revision_id: str,
    db: Session = Depends(get_db),
    _context: PermissionContext = Depends(require_permissions(BROWSE_KEYS)),
):
    revision, key_id = revision_service.get_revision(db, revision_id)
    return RevisionDetailOut(
        id=revision.revision_id,
        key_id=key_id,
        content=revision.content,
        media=revision.media,
        note=revision.note,
        status=revision.status,
        mode=revision.mode,
        created_at=revision.created_at,
    )


@router.post("")
def create_revision(data: RevisionCreate, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    ensure_key_permission(db, current_user, str(data.key_id), EDIT_KEY)
    key = key_service.get_visible_key(db, str(data.key_id))
    revision = revision_service.create_revision(
        db,
        key,
        data.content.to_json() if data.content is not None else None,
        data.media.to_json() if data.media is not None else None,
        current_user.user_id,
        note=data.note,
        mode=data.mode,
    )
    return revision.revision_id


@router.put("/status/{revision_id}")
def update_status(
    revision_id: str,
    data: RevisionStatusUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    ensure_key_permission(db, current_user, str(data.key_id), PUBLISH_KEY)
    revision_service.update_status(db, revision_id, str(data.key_id), data.status)
    return {"message": "Status updated"}


@router.put("/mode/{revision_id}")
def change_mode(
    revision_id: str,
    data: RevisionModeUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    ensure_key_permission(db, current_user, str(data.key_id), EDIT_KEY)
    return revision_service.change_mode(db, revision_id, str(data.key_id), data.mode, current_user)
