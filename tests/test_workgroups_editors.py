from keybuilder.models.key import Editor
from keybuilder.models.organization import UserWorkgroup, Workgroup
from tests.conftest import auth_headers


def _membership(db, workgroup, user):
    return (
        db.query(UserWorkgroup)
        .filter(UserWorkgroup.workgroup_id == workgroup.workgroup_id, UserWorkgroup.user_id == user.user_id)
        .first()
    )


class TestWorkgroups:
    def test_create_adds_creator_as_member(self, client, db, seed_users):
        member = seed_users["member"]
        resp = client.post("/api/workgroups", json={"name": "Moths"}, headers=auth_headers(member))
        assert resp.status_code == 200
        workgroup = db.query(Workgroup).filter(Workgroup.workgroup_id == resp.json()).first()
        assert workgroup.organization_id == member.organization_id
        assert _membership(db, workgroup, member) is not None

    def test_duplicate_name_conflicts(self, client, seed_workgroup, seed_users):
        resp = client.post("/api/workgroups", json={"name": "Beetles"}, headers=auth_headers(seed_users["member"]))
        assert resp.status_code == 409

    def test_lists(self, client, seed_workgroup, seed_users):
        colleague = auth_headers(seed_users["colleague"])
        org_groups = client.get("/api/workgroups", headers=colleague)
        own_groups = client.get("/api/workgroups/user/session", headers=colleague)
        assert [w["name"] for w in org_groups.json()] == ["Beetles"]
        assert own_groups.json() == []

        external = client.get("/api/workgroups", headers=auth_headers(seed_users["external"]))
        assert external.json() == []

    def test_members_exclude_caller(self, client, seed_workgroup, seed_users):
        resp = client.get(
            f"/api/workgroups/users/{seed_workgroup.workgroup_id}", headers=auth_headers(seed_users["member"])
        )
        assert resp.status_code == 200
        assert [m["name"] for m in resp.json()] == ["Ada Admin"]
        assert "linkId" in resp.json()[0]

    def test_add_member_by_email_ignores_case(self, client, db, seed_workgroup, seed_users):
        body = {"email": "carl@museum.example", "workgroupId": seed_workgroup.workgroup_id}
        resp = client.post("/api/workgroups/users", json=body, headers=auth_headers(seed_users["member"]))
        assert resp.status_code == 200
        assert _membership(db, seed_workgroup, seed_users["colleague"]).user_workgroups_id == resp.json()

        again = client.post("/api/workgroups/users", json=body, headers=auth_headers(seed_users["member"]))
        assert again.status_code == 409

    def test_add_member_rejections(self, client, seed_workgroup, seed_users):
        member = auth_headers(seed_users["member"])
        workgroup_id = seed_workgroup.workgroup_id
        unknown = client.post(
            "/api/workgroups/users", json={"email": "nobody@example.org", "workgroupId": workgroup_id}, headers=member
        )
        other_org = client.post(
            "/api/workgroups/users", json={"email": "eli@other.example", "workgroupId": workgroup_id}, headers=member
        )
        not_member = client.post(
            "/api/workgroups/users",
            json={"email": "mona@museum.example", "workgroupId": workgroup_id},
            headers=auth_headers(seed_users["colleague"]),
        )
        assert unknown.status_code == 404
        assert other_org.status_code == 404
        assert not_member.status_code == 403

    def test_rename_requires_membership(self, client, db, seed_workgroup, seed_users):
        url = f"/api/workgroups/{seed_workgroup.workgroup_id}"
        outsider = client.put(url, json={"name": "Weevils"}, headers=auth_headers(seed_users["colleague"]))
        assert outsider.status_code == 403
        resp = client.put(url, json={"name": "Weevils"}, headers=auth_headers(seed_users["member"]))
        assert resp.status_code == 200
        db.expire_all()
        assert db.query(Workgroup).first().name == "Weevils"

    def test_leave_workgroup(self, client, db, seed_workgroup, seed_users):
        admin = seed_users["admin"]
        link_id = _membership(db, seed_workgroup, admin).user_workgroups_id
        someone_else = client.delete(f"/api/workgroups/user/session/{link_id}", headers=auth_headers(seed_users["member"]))
        assert someone_else.status_code == 404
        resp = client.delete(f"/api/workgroups/user/session/{link_id}", headers=auth_headers(admin))
        assert resp.status_code == 200
        db.expire_all()
        assert _membership(db, seed_workgroup, admin) is None

    def test_remove_member(self, client, db, seed_workgroup, seed_users):
        link_id = _membership(db, seed_workgroup, seed_users["admin"]).user_workgroups_id
        outsider = client.delete(f"/api/workgroups/users/{link_id}", headers=auth_headers(seed_users["colleague"]))
        assert outsider.status_code == 403
        resp = client.delete(f"/api/workgroups/users/{link_id}", headers=auth_headers(seed_users["member"]))
        assert resp.status_code == 200

    def test_delete_workgroup_removes_memberships(self, client, db, seed_workgroup, seed_users):
        workgroup_id = seed_workgroup.workgroup_id
        resp = client.delete(f"/api/workgroups/{workgroup_id}", headers=auth_headers(seed_users["member"]))
        assert resp.status_code == 200
        db.expire_all()
        assert db.query(Workgroup).count() == 0
        assert db.query(UserWorkgroup).count() == 0

        gone = client.delete(f"/api/workgroups/{workgroup_id}", headers=auth_headers(seed_users["member"]))
        assert gone.status_code == 404

    def test_delete_workgroup_of_other_organization_is_not_found(self, client, db, seed_org, seed_users):
        foreign = Workgroup(name="Moths", organization_id=seed_org["other"].organization_id,
                            created_by=seed_users["external"].user_id)
        db.add(foreign)
        db.commit()
        resp = client.delete(f"/api/workgroups/{foreign.workgroup_id}", headers=auth_headers(seed_users["member"]))
        assert resp.status_code == 404
        db.expire_all()
        assert db.query(Workgroup).count() == 1


class TestEditors:
    def test_add_list_and_remove(self, client, db, seed_key, seed_users):
        headers = auth_headers(seed_users["member"])
        resp = client.post(
            "/api/editors", json={"email": "ELI@other.example", "keyId": seed_key.key_id}, headers=headers
        )
        assert resp.status_code == 200
        editors_id = resp.json()

        again = client.post(
            "/api/editors", json={"email": "eli@other.example", "keyId": seed_key.key_id}, headers=headers
        )
        assert again.json() == editors_id

        listed = client.get(f"/api/editors/key/{seed_key.key_id}", headers=headers)
        assert [(e["id"], e["name"]) for e in listed.json()] == [(editors_id, "Eli External")]

        removed = client.request("DELETE", f"/api/editors/{editors_id}", json={"keyId": seed_key.key_id}, headers=headers)
        assert removed.status_code == 200
        assert db.query(Editor).count() == 0

    def test_editor_can_save_revisions(self, client, seed_key, seed_users):
        client.post(
            "/api/editors",
            json={"email": "eli@other.example", "keyId": seed_key.key_id},
            headers=auth_headers(seed_users["member"]),
        )
        resp = client.post(
            "/api/revisions",
            json={"keyId": seed_key.key_id, "content": {"taxa": []}, "media": {}},
            headers=auth_headers(seed_users["external"]),
        )
        assert resp.status_code == 200

    def test_adding_self_or_unknown_is_not_found(self, client, seed_key, seed_users):
        headers = auth_headers(seed_users["member"])
        for email in ("mona@museum.example", "ghost@example.org"):
            resp = client.post("/api/editors", json={"email": email, "keyId": seed_key.key_id}, headers=headers)
            assert resp.status_code == 404

    def test_sharing_requires_share_permission_on_key(self, client, seed_key, seed_users):
        resp = client.post(
            "/api/editors",
            json={"email": "eli@other.example", "keyId": seed_key.key_id},
            headers=auth_headers(seed_users["colleague"]),
        )
        assert resp.status_code == 403

    def test_remove_unknown_editor(self, client, seed_key, seed_users):
        resp = client.request(
            "DELETE", "/api/editors/999", json={"keyId": seed_key.key_id}, headers=auth_headers(seed_users["member"])
        )
        assert resp.status_code == 404


class TestOrganizations:
    def test_list_only_active(self, client, seed_users, seed_org):
        resp = client.get("/api/organizations", params={"language": "en"}, headers=auth_headers(seed_users["member"]))
        assert resp.status_code == 200
        assert [o["fullName"] for o in resp.json()] == ["Natural History Museum", "Other Institute"]

    def test_get_organization_and_role(self, client, seed_users, seed_org):
        headers = auth_headers(seed_users["external"])
        org = client.get(f"/api/organizations/{seed_org['main'].organization_id}?language=no", headers=headers)
        assert org.json()["fullName"] == "Naturhistorisk museum"
        role = client.get("/api/organizations/roles/2?language=en", headers=headers)
        assert role.json()["name"] == "Administrator"
        assert client.get("/api/organizations/roles/9", headers=headers).status_code == 404
        assert client.get("/api/organizations/999", headers=headers).status_code == 404
