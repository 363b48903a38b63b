"""Workgroups and their members.

A workgroup belongs to one organization. Members are added by email and
must belong to the same organization as the workgroup.
"""

import logging
from typing import List

from sqlalchemy import func
from sqlalchemy.orm import Session

from keybuilder.exceptions import ConflictError, ForbiddenError, NotFoundError
from keybuilder.models.organization import UserWorkgroup, Workgroup
from keybuilder.models.user import User
from keybuilder.schemas.organization import MemberAdd, MemberOut, WorkgroupInput
from keybuilder.utils.permissions import is_workgroup_member

logger = logging.getLogger(__name__)


def list_for_organization(db: Session, user: User) -> List[Workgroup]:
    return (
        db.query(Workgroup)
        .filter(Workgroup.organization_id == user.organization_id)
        .order_by(Workgroup.name)
        .all()
    )


def list_for_user(db: Session, user: User) -> List[Workgroup]:
    return (
        db.query(Workgroup)
        .join(UserWorkgroup, UserWorkgroup.workgroup_id == Workgroup.workgroup_id)
        .filter(UserWorkgroup.user_id == user.user_id)
        .order_by(Workgroup.name)
        .all()
    )


def list_members(db: Session, workgroup_id: int, user: User) -> List[MemberOut]:
    """Members other than the caller, who must be a member."""
    if not is_workgroup_member(db, user, workgroup_id):
        raise ForbiddenError("Not a member of the workgroup")
    rows = (
        db.query(UserWorkgroup)
        .filter(UserWorkgroup.workgroup_id == workgroup_id, UserWorkgroup.user_id != user.user_id)
        .all()
    )
    return [
        MemberOut(id=row.user.user_id, name=row.user.name, email=row.user.email, link_id=row.user_workgroups_id)
        for row in rows
    ]


def _ensure_unique_name(db: Session, name: str) -> None:
    if db.query(Workgroup).filter(Workgroup.name == name).first():
        raise ConflictError(f"Workgroup '{name}' already exists")


def create_workgroup(db: Session, data: WorkgroupInput, user: User) -> int:
    if user.organization_id is None:
        raise ForbiddenError("User has no organization")
    _ensure_unique_name(db, data.name)
    workgroup = Workgroup(name=data.name, organization_id=user.organization_id, created_by=user.user_id)
    workgroup.members.append(UserWorkgroup(user_id=user.user_id))
    db.add(workgroup)
    db.commit()
    logger.info("[workgroup] created %s in organization %s", workgroup.workgroup_id, user.organization_id)
    return workgroup.workgroup_id


def rename_workgroup(db: Session, workgroup_id: int, data: WorkgroupInput, user: User) -> None:
    workgroup = db.query(Workgroup).filter(Workgroup.workgroup_id == workgroup_id).first()
    if not workgroup:
        raise NotFoundError("Workgroup not found")
    if not is_workgroup_member(db, user, workgroup_id):
        raise ForbiddenError("Not a member of the workgroup")
    if workgroup.name != data.name:
        _ensure_unique_name(db, data.name)
    workgroup.name = data.name
    db.commit()


def add_member(db: Session, data: MemberAdd, user: User) -> int:
    target = db.query(User).filter(func.lower(User.email) == data.email.lower()).first()
    if not target or target.user_id == user.user_id:
        raise NotFoundError("User not found")
    workgroup = (
        db.query(Workgroup)
        .filter(Workgroup.workgroup_id == data.workgroup_id, Workgroup.organization_id == target.organization_id)
        .first()
    )
    if not workgroup:
        raise NotFoundError("Workgroup not found in the user's organization")
    if not is_workgroup_member(db, user, workgroup.workgroup_id):
        raise ForbiddenError("Not a member of the workgroup")
    if is_workgroup_member(db, target, workgroup.workgroup_id):
        raise ConflictError("User is already a member")
    link = UserWorkgroup(workgroup_id=workgroup.workgroup_id, user_id=target.user_id)
    db.add(link)
    db.commit()
    return link.user_workgroups_id


def delete_workgroup(db: Session, workgroup_id: int, user: User) -> None:
    workgroup = (
        db.query(Workgroup)
        .filter(Workgroup.workgroup_id == workgroup_id, Workgroup.organization_id == user.organization_id)
        .first()
    )
    if not workgroup:
        raise NotFoundError("Workgroup not found")
    db.delete(workgroup)
    db.commit()
    logger.info("[workgroup] deleted %s", workgroup_id)


def leave_workgroup(db: Session, user_workgroups_id: int, user: User) -> None:
    destroyed = (
        db.query(UserWorkgroup)
        .filter(UserWorkgroup.user_workgroups_id == user_workgroups_id, UserWorkgroup.user_id == user.user_id)
        .delete(synchronize_session=False)
    )
    if not destroyed:
        db.rollback()
        raise NotFoundError("Membership not found")
    db.commit()


def remove_member(db: Session, user_workgroups_id: int, user: User) -> None:
    link = db.query(UserWorkgroup).filter(UserWorkgroup.user_workgroups_id == user_workgroups_id).first()
    if not link:
        raise NotFoundError("Membership not found")
    if not is_workgroup_member(db, user, link.workgroup_id):
        raise ForbiddenError("Not a member of the workgroup")
    db.delete(link)
    db.commit()
