import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from keybuilder.config import settings
from keybuilder.database import Base, get_db
from keybuilder.main import app
from keybuilder.models.entity import Character as CharacterRow
from keybuilder.models.entity import CharacterState
from keybuilder.models.entity import Taxon as TaxonRow
from keybuilder.models.key import Key, KeyInfo
from keybuilder.models.organization import Organization, OrganizationInfo, UserWorkgroup, Workgroup
from keybuilder.models.user import Role, RoleInfo, RolePermission, User
from keybuilder.services.auth_service import create_access_token
from keybuilder.services.revision_service import create_revision
from keybuilder.utils import permissions as p

TEST_DB_URL = "sqlite:///./test_keybuilder.db"

engine = create_engine(TEST_DB_URL, connect_args={"check_same_thread": False})
TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def override_get_db():
    db = TestingSession()
    try:
        yield db
    finally:
        db.close()


app.dependency_overrides[get_db] = override_get_db

MEMBER_PERMISSIONS = [
    p.BROWSE_KEYS, p.CREATE_KEY, p.EDIT_KEY, p.EDIT_KEY_INFO, p.SHARE_KEY,
    p.BROWSE_GROUPS, p.BROWSE_COLLECTIONS, p.CREATE_COLLECTION, p.EDIT_COLLECTION,
    p.BROWSE_WORKGROUPS, p.CREATE_WORKGROUP, p.EDIT_WORKGROUP,
]
ADMIN_PERMISSIONS = MEMBER_PERMISSIONS + [p.PUBLISH_KEY, p.CREATE_GROUP, p.EDIT_GROUP]
EXTERNAL_PERMISSIONS = [p.BROWSE_KEYS, p.BROWSE_GROUPS, p.BROWSE_COLLECTIONS, p.BROWSE_WORKGROUPS]


@pytest.fixture(autouse=True)
def setup_db(tmp_path, monkeypatch):
    monkeypatch.setattr(settings, "MEDIA_PATH", str(tmp_path / "media"))
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db():
    db = TestingSession()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def seed_roles(db):
    roles = {}
    for role_id, name, names in (
        (1, "Member", MEMBER_PERMISSIONS),
        (2, "Administrator", ADMIN_PERMISSIONS),
        (3, "External", EXTERNAL_PERMISSIONS),
    ):
        role = Role(role_id=role_id)
        role.infos = [RoleInfo(language_code="en", name=name), RoleInfo(language_code="no", name=name)]
        role.permissions = [RolePermission(permission_name=n) for n in names]
        db.add(role)
        roles[name.lower()] = role
    db.commit()
    return roles


@pytest.fixture
def seed_org(db):
    org = Organization(idp_id="fc:org:museum.example", status="ACTIVE")
    org.infos = [
        OrganizationInfo(language_code="en", full_name="Natural History Museum", short_name="NHM"),
        OrganizationInfo(language_code="no", full_name="Naturhistorisk museum", short_name="NHM"),
    ]
    other = Organization(idp_id="fc:org:other.example", status="ACTIVE")
    other.infos = [OrganizationInfo(language_code="en", full_name="Other Institute", short_name="OI")]
    inactive = Organization(idp_id="fc:org:closed.example", status="INACTIVE")
    inactive.infos = [OrganizationInfo(language_code="en", full_name="Closed Institute")]
    db.add_all([org, other, inactive])
    db.commit()
    db.refresh(org)
    db.refresh(other)
    return {"main": org, "other": other}


@pytest.fixture
def seed_users(db, seed_roles, seed_org):
    org_id = seed_org["main"].organization_id
    users = {
        "member": User(idp_id="sub-member", name="Mona Member", email="mona@museum.example",
                       organization_id=org_id, role_id=1),
        "colleague": User(idp_id="sub-colleague", name="Carl Colleague", email="Carl@Museum.example",
                          organization_id=org_id, role_id=1),
        "admin": User(idp_id="sub-admin", name="Ada Admin", email="ada@museum.example",
                      organization_id=org_id, role_id=2),
        "external": User(idp_id="sub-external", name="Eli External", email="eli@other.example",
                         organization_id=seed_org["other"].organization_id, role_id=3),
    }
    for u in users.values():
        db.add(u)
    db.commit()
    for u in users.values():
        db.refresh(u)
    return users


@pytest.fixture
def seed_workgroup(db, seed_users, seed_org):
    workgroup = Workgroup(name="Beetles", organization_id=seed_org["main"].organization_id,
                          created_by=seed_users["member"].user_id)
    workgroup.members = [
        UserWorkgroup(user_id=seed_users["member"].user_id),
        UserWorkgroup(user_id=seed_users["admin"].user_id),
    ]
    db.add(workgroup)
    db.commit()
    db.refresh(workgroup)
    return workgroup


@pytest.fixture
def seed_key(db, seed_users, seed_workgroup):
    """A key owned by the member, shared with the Beetles workgroup, with an accepted first revision."""
    key = Key(created_by=seed_users["member"].user_id, workgroup_id=seed_workgroup.workgroup_id, status="BETA")
    key.infos = [KeyInfo(language_code="en", title="Beetles of Norway", description="Key to beetles")]
    db.add(key)
    db.commit()
    db.refresh(key)
    # id rows backing the entities in sample_content()
    db.add_all([TaxonRow(taxon_id=taxon_id, key_id=key.key_id) for taxon_id in (1, 2, 3, 4)])
    db.add_all([
        CharacterRow(character_id=10, key_id=key.key_id, type="EXCLUSIVE"),
        CharacterRow(character_id=20, key_id=key.key_id, type="NUMERICAL"),
        CharacterRow(character_id=30, key_id=key.key_id, type="EXCLUSIVE"),
    ])
    db.flush()
    db.add_all([
        CharacterState(state_id=100, character_id=10),
        CharacterState(state_id=101, character_id=10),
        CharacterState(state_id=200, character_id=20),
        CharacterState(state_id=300, character_id=30),
        CharacterState(state_id=301, character_id=30),
    ])
    db.commit()
    create_revision(db, key, sample_content(), sample_media(), seed_users["member"].user_id, note="initial")
    db.refresh(key)
    return key


def sample_content() -> dict:
    return {
        "taxa": [
            {
                "id": "1",
                "scientificName": "Coleoptera",
                "vernacularName": {"en": "Beetles"},
                "children": [
                    {"id": "2", "scientificName": "Carabidae", "children": [
                        {"id": "4", "scientificName": "Carabus"},
                    ]},
                    {"id": "3", "scientificName": "Coccinellidae", "media": ["11"]},
                ],
            },
        ],
        "characters": [
            {
                "id": "10",
                "title": {"en": "Colour"},
                "type": "exclusive",
                "states": [
                    {"id": "100", "title": {"en": "Red"}},
                    {"id": "101", "title": {"en": "Black"}},
                ],
            },
            {
                "id": "20",
                "title": {"en": "Length"},
                "type": "numerical",
                "states": {"id": "200", "unit": {"en": "mm"}, "min": 1, "max": 30, "stepSize": 1},
            },
            {
                "id": "30",
                "title": {"en": "Spots"},
                "type": "exclusive",
                "states": [{"id": "300", "title": {"en": "Present"}}, {"id": "301", "title": {"en": "Absent"}}],
                "logicalPremise": [
                    [{"characterId": "10", "stateId": "100"}, {"characterId": "20"}],
                    [{"characterId": "10", "stateId": "101"}, {"characterId": "20"}],
                ],
            },
        ],
        "statements": [
            {"id": "s1", "taxonId": "2", "characterId": "10", "state": "101"},
            {"id": "s2", "taxonId": "3", "characterId": "10", "state": "100"},
            {"id": "s3", "taxonId": "4", "characterId": "20", "state": "200"},
        ],
    }


def sample_media() -> dict:
    return {
        "mediaElements": [{"id": "11", "title": {"en": "Ladybird"}, "creators": ["olanordmann"]}],
        "persons": [{"id": "olanordmann", "name": "Ola Nordmann"}],
    }


def auth_headers(user: User) -> dict:
    return {"Authorization": f"Bearer {create_access_token(user.user_id)}"}
