from typing import List, Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from keybuilder.database import get_db
from keybuilder.middleware.auth_middleware import get_current_user, require_permissions
from keybuilder.models.user import User
from keybuilder.schemas.organization import OrganizationOut, RoleOut
from keybuilder.services import organization_service
from keybuilder.utils.permissions import CREATE_KEY, EDIT_KEY, PermissionContext

router = APIRouter(prefix="/api/organizations", tags=["organizations"])


@router.get("", response_model=List[OrganizationOut])
def list_organizations(
    language: Optional[str] = None,
    db: Session = Depends(get_db),
    _context: PermissionContext = Depends(require_permissions(CREATE_KEY, EDIT_KEY)),
):
    return organization_service.list_organizations(db, language)


@router.get("/roles/{role_id}", response_model=RoleOut)
def get_role(
    role_id: int,
    language: Optional[str] = None,
    db: Session = Depends(get_db),
    _current_user: User = Depends(get_current_user),
):
    return organization_service.get_role(db, role_id, language)


@router.get("/{organization_id}", response_model=OrganizationOut)
def get_organization(
    organization_id: int,
    language: Optional[str] = None,
    db: Session = Depends(get_db),
    _current_user: User = Depends(get_current_user),
):
    return organization_service.get_organization(db, organization_id, language)
