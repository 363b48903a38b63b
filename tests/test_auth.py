from urllib.parse import parse_qs, urlparse

import pytest

from keybuilder.config import settings
from keybuilder.exceptions import ForbiddenError
from keybuilder.models.user import User
from keybuilder.services import auth_service, oidc_client
from tests.conftest import auth_headers

DISCOVERY = {
    "authorization_endpoint": "https://idp.example/oauth/authorization",
    "token_endpoint": "https://idp.example/oauth/token",
    "userinfo_endpoint": "https://idp.example/userinfo",
    "jwks_uri": "https://idp.example/openid/jwks",
    "end_session_endpoint": "https://idp.example/logout",
}


@pytest.fixture
def fake_discovery(monkeypatch):
    oidc_client.discover.cache_clear()
    monkeypatch.setattr(oidc_client, "discover", lambda: DISCOVERY)


@pytest.fixture
def fake_idp(monkeypatch, fake_discovery):
    """Stub every provider round trip of the authorization-code flow."""
    calls = {}

    def exchange_code(code):
        calls["code"] = code
        return {"id_token": "id-token", "access_token": "access-token", "expires_in": 3600}

    monkeypatch.setattr(oidc_client, "exchange_code", exchange_code)
    monkeypatch.setattr(oidc_client, "verify_id_token", lambda id_token, access_token: {"sub": "sub-new"})
    monkeypatch.setattr(
        oidc_client,
        "fetch_userinfo",
        lambda access_token: {"sub": "sub-new", "name": "Nina New", "email": "nina@museum.example"},
    )
    monkeypatch.setattr(oidc_client, "fetch_organization_groups", lambda access_token: ["fc:org:museum.example"])
    return calls


def test_login_redirects_to_provider_with_state(client, fake_discovery):
    resp = client.get("/api/auth/oidc", follow_redirects=False)
    assert resp.status_code == 307
    location = urlparse(resp.headers["location"])
    assert location.netloc == "idp.example"
    query = parse_qs(location.query)
    assert query["response_type"] == ["code"]
    auth_service.verify_state_token(query["state"][0])


def test_callback_creates_user_and_returns_token(client, db, seed_org, seed_roles, fake_idp):
    state = auth_service.create_state_token()
    resp = client.get("/api/auth/oidc/callback", params={"code": "abc", "state": state}, follow_redirects=False)
    assert resp.status_code == 307
    location = resp.headers["location"]
    assert location.startswith(f"{settings.BUILDER_URL_BASE}/signin/callback#access_token=")
    assert fake_idp["code"] == "abc"

    user = db.query(User).filter(User.idp_id == "sub-new").first()
    assert user.name == "Nina New"
    assert user.role_id == settings.DEFAULT_ROLE_ID
    assert user.organization_id == seed_org["main"].organization_id

    token = location.split("#access_token=", 1)[1]
    profile = client.get("/api/auth/profile", headers={"Authorization": f"Bearer {token}"})
    assert profile.status_code == 200
    assert profile.json()["user"]["name"] == "Nina New"


def test_callback_with_forged_state_redirects_to_error(client, fake_idp):
    resp = client.get(
        "/api/auth/oidc/callback", params={"code": "abc", "state": "forged"}, follow_redirects=False
    )
    assert resp.headers["location"] == f"{settings.BUILDER_URL_BASE}/signin/error"
    assert "code" not in fake_idp


def test_state_token_is_not_an_access_token(client, seed_users):
    resp = client.get(
        "/api/auth/profile", headers={"Authorization": f"Bearer {auth_service.create_state_token()}"}
    )
    assert resp.status_code == 401


def test_access_token_is_not_a_state_token(seed_users):
    with pytest.raises(ForbiddenError):
        auth_service.verify_state_token(auth_service.create_access_token(seed_users["member"].user_id))


def test_profile_lists_permissions_and_workgroups(client, seed_users, seed_workgroup):
    resp = client.get("/api/auth/profile", headers=auth_headers(seed_users["member"]))
    assert resp.status_code == 200
    user = resp.json()["user"]
    assert user["roleId"] == 1
    assert user["workgroups"] == [seed_workgroup.workgroup_id]
    assert "CREATE_KEY" in user["permissions"]
    assert "PUBLISH_KEY" not in user["permissions"]


def test_logout_url(client, seed_users, fake_discovery):
    resp = client.get("/api/auth/logout/url", headers=auth_headers(seed_users["member"]))
    assert resp.status_code == 200
    url = urlparse(resp.json()["logoutUrl"])
    assert f"{url.scheme}://{url.netloc}{url.path}" == DISCOVERY["end_session_endpoint"]
    assert parse_qs(url.query)["post_logout_redirect_uri"] == [settings.OIDC_LOGOUT_URI]


def test_resolve_organization_uses_first_known_group(db, seed_org):
    groups = ["fc:org:unknown.example", "fc:org:other.example", "fc:org:museum.example"]
    assert auth_service.resolve_organization_id(db, groups) == seed_org["other"].organization_id
    assert auth_service.resolve_organization_id(db, []) is None


class TestUpsertUser:
    def test_existing_user_keeps_role_in_same_organization(self, db, seed_users, seed_org):
        admin = seed_users["admin"]
        user = auth_service.upsert_user(
            db, {}, {"sub": "sub-admin", "name": "Ada A."}, seed_org["main"].organization_id
        )
        assert user.user_id == admin.user_id
        assert user.role_id == 2
        assert user.name == "Ada A."

    def test_organization_change_moves_user_to_external_role(self, db, seed_users, seed_org):
        user = auth_service.upsert_user(
            db, {}, {"sub": "sub-admin", "name": "Ada Admin"}, seed_org["other"].organization_id
        )
        assert user.role_id == settings.EXTERNAL_ROLE_ID
        assert user.organization_id == seed_org["other"].organization_id

    def test_no_organization_removes_role(self, db, seed_users):
        user = auth_service.upsert_user(db, {"expires_in": 60}, {"sub": "sub-member", "name": "Mona"}, None)
        assert user.role_id is None
        assert user.organization_id is None
        assert user.expires_at is not None
