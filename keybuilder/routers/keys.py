from typing import List, Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from keybuilder.database import get_db
from keybuilder.middleware.auth_middleware import get_current_user, require_permissions
from keybuilder.models.user import User
from keybuilder.schemas.key import KeyCreate, KeyDetailOut, KeyOut, KeyUpdate
from keybuilder.services import key_service
from keybuilder.utils.permissions import (
    BROWSE_COLLECTIONS,
    BROWSE_GROUPS,
    BROWSE_KEYS,
    CREATE_KEY,
    EDIT_KEY_INFO,
    PUBLISH_KEY,
    PermissionContext,
    ensure_key_permission,
)

router = APIRouter(prefix="/api/keys", tags=["keys"])


@router.get("", response_model=List[KeyOut])
def list_keys(
    language: Optional[str] = None,
    db: Session = Depends(get_db),
    context: PermissionContext = Depends(require_permissions(BROWSE_KEYS)),
):
    return key_service.list_keys(db, context.user, language)


@router.get("/user/session", response_model=List[KeyOut])
def list_own_keys(
    language: Optional[str] = None,
    db: Session = Depends(get_db),
    context: PermissionContext = Depends(require_permissions(BROWSE_KEYS)),
):
    return key_service.list_keys(db, context.user, language, personal=True)


@router.get("/group/{group_id}", response_model=List[KeyOut])
def list_group_keys(
    group_id: int,
    language: Optional[str] = None,
    db: Session = Depends(get_db),
    _context: PermissionContext = Depends(require_permissions(BROWSE_GROUPS)),
):
    return key_service.list_group_keys(db, group_id, language)


@router.get("/collection/{collection_id}", response_model=List[KeyOut])
def list_collection_keys(
    collection_id: int,
    language: Optional[str] = None,
    db: Session = Depends(get_db),
    _context: PermissionContext = Depends(require_permissions(BROWSE_COLLECTIONS)),
):
    return key_service.list_collection_keys(db, collection_id, language)


@router.get("/{key_id}", response_model=KeyDetailOut)
def get_key(
    key_id: str,
    language: Optional[str] = None,
    db: Session = Depends(get_db),
    context: PermissionContext = Depends(require_permissions(BROWSE_KEYS)),
):
    return key_service.get_key_detail(db, key_id, context.user, language)


@router.post("")
def create_key(
    data: KeyCreate,
    db: Session = Depends(get_db),
    context: PermissionContext = Depends(require_permissions(CREATE_KEY)),
):
    return key_service.create_key(db, data, context.user, context)


@router.put("/hide/{key_id}")
def hide_key(key_id: str, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    ensure_key_permission(db, current_user, key_id, EDIT_KEY_INFO)
    key_service.hide_key(db, key_id, current_user)
    return {"message": "Key hidden"}


@router.put("/{key_id}")
def update_key(
    key_id: str,
    data: KeyUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    context = ensure_key_permission(db, current_user, key_id, EDIT_KEY_INFO, PUBLISH_KEY)
    key_service.update_key(db, key_id, data, context)
    return {"message": "Key updated"}
