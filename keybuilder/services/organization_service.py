"""Organizations and roles (read-only; both are provisioned outside the API)."""

from typing import List, Optional

from sqlalchemy.orm import Session

from keybuilder.exceptions import NotFoundError
from keybuilder.models.organization import Organization, OrganizationInfo
from keybuilder.models.user import RoleInfo
from keybuilder.schemas.organization import OrganizationOut, RoleOut

ACTIVE = "ACTIVE"


def _pick(infos: list, language: Optional[str]):
    for info in infos:
        if language is None or info.language_code == language:
            return info
    return None


def _to_organization_out(organization: Organization, language: Optional[str]) -> OrganizationOut:
    info: Optional[OrganizationInfo] = _pick(organization.infos, language)
    return OrganizationOut(
        id=organization.organization_id,
        full_name=info.full_name if info else None,
        short_name=info.short_name if info else None,
        description=info.description if info else None,
        url=info.home_url if info else None,
    )


def list_organizations(db: Session, language: Optional[str] = None) -> List[OrganizationOut]:
    organizations = (
        db.query(Organization)
        .filter(Organization.status == ACTIVE)
        .order_by(Organization.organization_id)
        .all()
    )
    return [_to_organization_out(organization, language) for organization in organizations]


def get_organization(db: Session, organization_id: int, language: Optional[str] = None) -> OrganizationOut:
    organization = db.query(Organization).filter(Organization.organization_id == organization_id).first()
    if not organization:
        raise NotFoundError("Organization not found")
    return _to_organization_out(organization, language)


def get_role(db: Session, role_id: int, language: Optional[str] = None) -> RoleOut:
    query = db.query(RoleInfo).filter(RoleInfo.role_id == role_id)
    if language:
        query = query.filter(RoleInfo.language_code == language)
    info = query.first()
    if not info:
        raise NotFoundError("Role not found")
    return RoleOut(id=role_id, name=info.name, description=info.description)
