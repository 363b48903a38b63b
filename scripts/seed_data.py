"""Seed roles, permissions and a demo organization."""
import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from keybuilder.database import SessionLocal, engine, Base
import keybuilder.models  # noqa: F401

from keybuilder.models.organization import Organization, OrganizationInfo
from keybuilder.models.user import Role, RoleInfo, RolePermission
from keybuilder.utils import permissions as p

BROWSE = [p.BROWSE_KEYS, p.BROWSE_GROUPS, p.BROWSE_COLLECTIONS, p.BROWSE_WORKGROUPS]

# role_id -> (no, en, permissions)
ROLES = {
    1: ("Medlem", "Member", BROWSE + [
        p.CREATE_KEY, p.EDIT_KEY, p.EDIT_KEY_INFO, p.SHARE_KEY,
        p.CREATE_COLLECTION, p.EDIT_COLLECTION, p.CREATE_WORKGROUP, p.EDIT_WORKGROUP,
    ]),
    2: ("Administrator", "Administrator", BROWSE + [
        p.CREATE_KEY, p.EDIT_KEY, p.EDIT_KEY_INFO, p.PUBLISH_KEY, p.SHARE_KEY,
        p.CREATE_GROUP, p.EDIT_GROUP, p.CREATE_COLLECTION, p.EDIT_COLLECTION,
        p.CREATE_WORKGROUP, p.EDIT_WORKGROUP,
    ]),
    3: ("Ekstern", "External", BROWSE),
}


def seed():
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        if db.query(Role).count() > 0:
            print("Database already seeded. Skipping.")
            return

        for role_id, (name_no, name_en, names) in ROLES.items():
            role = Role(role_id=role_id)
            role.infos = [
                RoleInfo(language_code="no", name=name_no),
                RoleInfo(language_code="en", name=name_en),
            ]
            role.permissions = [RolePermission(permission_name=name) for name in names]
            db.add(role)

        organization = Organization(idp_id="fc:org:example.org", status="ACTIVE")
        organization.infos = [
            OrganizationInfo(language_code="no", full_name="Eksempelorganisasjonen", short_name="EKS"),
            OrganizationInfo(language_code="en", full_name="Example Organization", short_name="EX"),
        ]
        db.add(organization)
        db.commit()
        print("Seed data created successfully.")
    finally:
        db.close()


if __name__ == "__main__":
    seed()
