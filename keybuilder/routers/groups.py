from typing import List, Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from keybuilder.database import get_db
from keybuilder.middleware.auth_middleware import require_permissions
from keybuilder.schemas.group import GroupCreate, GroupOut, GroupUpdate
from keybuilder.services import group_service
from keybuilder.utils.permissions import BROWSE_GROUPS, CREATE_GROUP, EDIT_GROUP, PermissionContext

router = APIRouter(prefix="/api/groups", tags=["groups"])


@router.get("", response_model=List[GroupOut])
def list_groups(
    language: Optional[str] = None,
    db: Session = Depends(get_db),
    _context: PermissionContext = Depends(require_permissions(BROWSE_GROUPS)),
):
    return group_service.list_groups(db, language)


@router.get("/{group_id}", response_model=GroupOut)
def get_group(
    group_id: int,
    language: Optional[str] = None,
    db: Session = Depends(get_db),
    _context: PermissionContext = Depends(require_permissions(BROWSE_GROUPS)),
):
    return group_service.get_group(db, group_id, language)


@router.post("")
def create_group(
    data: GroupCreate,
    db: Session = Depends(get_db),
    context: PermissionContext = Depends(require_permissions(CREATE_GROUP)),
):
    return group_service.create_group(db, data, context.user)


@router.put("/{group_id}")
def update_group(
    group_id: int,
    data: GroupUpdate,
    db: Session = Depends(get_db),
    _context: PermissionContext = Depends(require_permissions(EDIT_GROUP)),
):
    group_service.update_group(db, group_id, data)
    return {"message": "Group updated"}


@router.delete("/{group_id}")
def delete_group(
    group_id: int,
    db: Session = Depends(get_db),
    _context: PermissionContext = Depends(require_permissions(CREATE_GROUP)),
):
    group_service.delete_group(db, group_id)
    return {"message": "Group deleted"}
