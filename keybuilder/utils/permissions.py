"""Permission lookups for users, organizations, workgroups and keys."""

from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Set

from sqlalchemy.orm import Session

from keybuilder.exceptions import ForbiddenError
from keybuilder.models.key import Editor, Key
from keybuilder.models.organization import UserWorkgroup
from keybuilder.models.user import RolePermission, User

BROWSE_KEYS = "BROWSE_KEYS"
CREATE_KEY = "CREATE_KEY"
EDIT_KEY = "EDIT_KEY"
EDIT_KEY_INFO = "EDIT_KEY_INFO"
PUBLISH_KEY = "PUBLISH_KEY"
SHARE_KEY = "SHARE_KEY"
BROWSE_GROUPS = "BROWSE_GROUPS"
CREATE_GROUP = "CREATE_GROUP"
EDIT_GROUP = "EDIT_GROUP"
BROWSE_COLLECTIONS = "BROWSE_COLLECTIONS"
CREATE_COLLECTION = "CREATE_COLLECTION"
EDIT_COLLECTION = "EDIT_COLLECTION"
BROWSE_WORKGROUPS = "BROWSE_WORKGROUPS"
CREATE_WORKGROUP = "CREATE_WORKGROUP"
EDIT_WORKGROUP = "EDIT_WORKGROUP"

CREATOR_KEY_PERMISSIONS = (PUBLISH_KEY, SHARE_KEY, EDIT_KEY, EDIT_KEY_INFO)


@dataclass
class PermissionContext:
    user: User
    permissions: Set[str] = field(default_factory=set)
    organization_id: Optional[int] = None
    workgroups: List[int] = field(default_factory=list)

    def has(self, permission: str) -> bool:
        return permission in self.permissions


def get_user_permissions(db: Session, user: User, names: Iterable[str]) -> PermissionContext:
    """Subset of ``names`` granted to the user's role, plus organization and workgroups."""
    names = list(names)
    context = PermissionContext(user=user, organization_id=user.organization_id)
    if user.role_id is None or not names:
        return context
    rows = (
        db.query(RolePermission.permission_name, UserWorkgroup.workgroup_id)
        .select_from(User)
        .join(RolePermission, RolePermission.role_id == User.role_id)
        .outerjoin(UserWorkgroup, UserWorkgroup.user_id == User.user_id)
        .filter(User.user_id == user.user_id, RolePermission.permission_name.in_(names))
        .all()
    )
    for permission_name, workgroup_id in rows:
        context.permissions.add(permission_name)
        if workgroup_id is not None and workgroup_id not in context.workgroups:
            context.workgroups.append(workgroup_id)
    return context


def require_any(db: Session, user: User, names: Iterable[str]) -> PermissionContext:
    context = get_user_permissions(db, user, names)
    if not context.permissions:
        raise ForbiddenError("Missing permission")
    return context


def get_key_permissions(db: Session, user: User, key_id: str, *permissions: str) -> PermissionContext:
    """Effective permissions of ``user`` on one key.

    The creator always gets the key editing permissions. Anyone else keeps
    their role permissions only when the key belongs to one of their
    workgroups. Listed editors can always edit content.
    """
    context = get_user_permissions(db, user, permissions)
    key = db.query(Key).filter(Key.key_id == str(key_id)).first()
    if key is None:
        context.permissions.clear()
    elif key.created_by == user.user_id:
        context.permissions.update(CREATOR_KEY_PERMISSIONS)
    elif key.workgroup_id is None or key.workgroup_id not in context.workgroups:
        context.permissions.clear()
    is_editor = (
        db.query(Editor)
        .filter(Editor.key_id == str(key_id), Editor.user_id == user.user_id)
        .first()
        is not None
    )
    if is_editor:
        context.permissions.add(EDIT_KEY)
    return context


def ensure_key_permission(db: Session, user: User, key_id: str, permission: str, *extra: str) -> PermissionContext:
    context = get_key_permissions(db, user, key_id, permission, *extra)
    if not context.has(permission):
        raise ForbiddenError(f"Requires {permission} on key")
    return context


def is_workgroup_member(db: Session, user: User, workgroup_id: int) -> bool:
    return (
        db.query(UserWorkgroup)
        .filter(UserWorkgroup.workgroup_id == workgroup_id, UserWorkgroup.user_id == user.user_id)
        .first()
        is not None
    )
