from keybuilder.models.organization import Organization
from keybuilder.models.user import Role, RolePermission
from keybuilder.utils import permissions as p
from scripts import seed_data
from tests.conftest import TestingSession, engine


def test_seed_creates_roles_once(monkeypatch, db):
    monkeypatch.setattr(seed_data, "SessionLocal", TestingSession)
    monkeypatch.setattr(seed_data, "engine", engine)

    seed_data.seed()
    seed_data.seed()

    assert db.query(Role).count() == 3
    assert db.query(Organization).count() == 1
    admin = {row.permission_name for row in db.query(RolePermission).filter(RolePermission.role_id == 2)}
    external = {row.permission_name for row in db.query(RolePermission).filter(RolePermission.role_id == 3)}
    assert p.PUBLISH_KEY in admin
    assert p.CREATE_KEY not in external
