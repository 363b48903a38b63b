"""Application tokens, the login state token and the user record kept in sync with the IdP."""

import logging
import secrets
import time
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional

from jose import JWTError, jwt
from sqlalchemy.orm import Session

from keybuilder.config import settings
from keybuilder.exceptions import ForbiddenError
from keybuilder.models.organization import Organization, UserWorkgroup
from keybuilder.models.user import RolePermission, User
from keybuilder.schemas.auth import ProfileOut
from keybuilder.services import oidc_client

logger = logging.getLogger(__name__)

ALGORITHM = "HS256"


def create_access_token(user_id: int) -> str:
    expire = datetime.utcnow() + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    payload = {"sub": str(user_id), "exp": expire, "typ": "access"}
    return jwt.encode(payload, settings.SECRET_KEY, algorithm=ALGORITHM)


def create_state_token() -> str:
    expire = datetime.utcnow() + timedelta(minutes=settings.STATE_TOKEN_EXPIRE_MINUTES)
    payload = {"nonce": secrets.token_urlsafe(16), "exp": expire, "typ": "state"}
    return jwt.encode(payload, settings.SECRET_KEY, algorithm=ALGORITHM)


def verify_state_token(state: str) -> None:
    try:
        payload = jwt.decode(state, settings.SECRET_KEY, algorithms=[ALGORITHM])
    except JWTError:
        raise ForbiddenError("Invalid login state")
    if payload.get("typ") != "state":
        raise ForbiddenError("Invalid login state")


def resolve_organization_id(db: Session, group_ids: List[str]) -> Optional[int]:
    """First organization, in IdP group order, that is registered locally."""
    if not group_ids:
        return None
    organizations = {
        organization.idp_id: organization.organization_id
        for organization in db.query(Organization).filter(Organization.idp_id.in_(group_ids))
    }
    for group_id in group_ids:
        if group_id in organizations:
            return organizations[group_id]
    return None


def upsert_user(db: Session, token_set: Dict[str, Any], userinfo: Dict[str, Any], organization_id: Optional[int]) -> User:
    """Create the user on first login, or refresh the stored IdP details.

    An existing user keeps their role while their organization stays the
    same, is moved to the external role when it changes, and loses their
    role when no organization can be resolved.
    """
    expires_in = token_set.get("expires_in")
    expires_at = int(time.time()) + int(expires_in) if expires_in else None
    user = db.query(User).filter(User.idp_id == userinfo["sub"]).first()
    if user is None:
        user = User(idp_id=userinfo["sub"], role_id=settings.DEFAULT_ROLE_ID)
        db.add(user)
        logger.info("[auth] new user %s", userinfo["sub"])
    elif organization_id is None:
        user.role_id = None
    elif organization_id != user.organization_id:
        user.role_id = settings.EXTERNAL_ROLE_ID
    user.name = userinfo.get("name") or userinfo["sub"]
    user.email = userinfo.get("email")
    user.organization_id = organization_id
    user.expires_at = expires_at
    user.scope = settings.OIDC_SCOPE
    db.commit()
    db.refresh(user)
    return user


def complete_login(db: Session, code: str, state: str) -> str:
    """Finish the authorization-code flow and return an application access token."""
    verify_state_token(state)
    token_set = oidc_client.exchange_code(code)
    oidc_client.verify_id_token(token_set["id_token"], token_set["access_token"])
    userinfo = oidc_client.fetch_userinfo(token_set["access_token"])
    organization_id = resolve_organization_id(db, oidc_client.fetch_organization_groups(token_set["access_token"]))
    user = upsert_user(db, token_set, userinfo, organization_id)
    return create_access_token(user.user_id)


def get_profile(db: Session, user: User) -> ProfileOut:
    permissions = []
    if user.role_id is not None:
        permissions = [
            row.permission_name
            for row in db.query(RolePermission).filter(RolePermission.role_id == user.role_id)
        ]
    workgroups = [
        row.workgroup_id for row in db.query(UserWorkgroup).filter(UserWorkgroup.user_id == user.user_id)
    ]
    return ProfileOut(
        name=user.name,
        organization_id=user.organization_id,
        role_id=user.role_id,
        workgroups=workgroups,
        permissions=permissions,
    )
