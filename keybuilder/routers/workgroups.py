from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from keybuilder.database import get_db
from keybuilder.middleware.auth_middleware import require_permissions
from keybuilder.schemas.organization import MemberAdd, MemberOut, WorkgroupInput, WorkgroupOut
from keybuilder.services import workgroup_service
from keybuilder.utils.permissions import BROWSE_WORKGROUPS, CREATE_WORKGROUP, EDIT_WORKGROUP, PermissionContext

router = APIRouter(prefix="/api/workgroups", tags=["workgroups"])


@router.get("", response_model=List[WorkgroupOut])
def list_workgroups(
    db: Session = Depends(get_db),
    context: PermissionContext = Depends(require_permissions(BROWSE_WORKGROUPS)),
):
    return workgroup_service.list_for_organization(db, context.user)


@router.get("/user/session", response_model=List[WorkgroupOut])
def list_own_workgroups(
    db: Session = Depends(get_db),
    context: PermissionContext = Depends(require_permissions(BROWSE_WORKGROUPS)),
):
    return workgroup_service.list_for_user(db, context.user)


@router.get("/users/{workgroup_id}", response_model=List[MemberOut])
def list_members(
    workgroup_id: int,
    db: Session = Depends(get_db),
    context: PermissionContext = Depends(require_permissions(EDIT_WORKGROUP)),
):
    return workgroup_service.list_members(db, workgroup_id, context.user)


@router.post("/users")
def add_member(
    data: MemberAdd,
    db: Session = Depends(get_db),
    context: PermissionContext = Depends(require_permissions(EDIT_WORKGROUP)),
):
    return workgroup_service.add_member(db, data, context.user)


@router.post("")
def create_workgroup(
    data: WorkgroupInput,
    db: Session = Depends(get_db),
    context: PermissionContext = Depends(require_permissions(CREATE_WORKGROUP)),
):
    return workgroup_service.create_workgroup(db, data, context.user)


@router.put("/{workgroup_id}")
def rename_workgroup(
    workgroup_id: int,
    data: WorkgroupInput,
    db: Session = Depends(get_db),
    context: PermissionContext = Depends(require_permissions(EDIT_WORKGROUP)),
):
    workgroup_service.rename_workgroup(db, workgroup_id, data, context.user)
    return {"message": "Workgroup updated"}


@router.delete("/user/session/{user_workgroups_id}")
def leave_workgroup(
    user_workgroups_id: int,
    db: Session = Depends(get_db),
    context: PermissionContext = Depends(require_permissions(BROWSE_WORKGROUPS)),
):
    workgroup_service.leave_workgroup(db, user_workgroups_id, context.user)
    return {"message": "Left workgroup"}


@router.delete("/users/{user_workgroups_id}")
def remove_member(
    user_workgroups_id: int,
    db: Session = Depends(get_db),
    context: PermissionContext = Depends(require_permissions(EDIT_WORKGROUP)),
):
    workgroup_service.remove_member(db, user_workgroups_id, context.user)
    return {"message": "Member removed"}


@router.delete("/{workgroup_id}")
def delete_workgroup(
    workgroup_id: int,
    db: Session = Depends(get_db),
    context: PermissionContext = Depends(require_permissions(CREATE_WORKGROUP)),
):
    workgroup_service.delete_workgroup(db, workgroup_id, context.user)
    return {"message": "Workgroup deleted"}
