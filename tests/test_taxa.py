from keybuilder.models.key import Revision
from keybuilder.schemas.content import ContentDocument
from keybuilder.services import taxon_tree
from tests.conftest import auth_headers


def _content(db, revision_id) -> ContentDocument:
    db.expire_all()
    revision = db.query(Revision).filter(Revision.revision_id == revision_id).first()
    return ContentDocument.from_json(revision.content)


def _body(key, **extra):
    body = {"keyId": key.key_id, "revisionId": key.revision_id}
    body.update(extra)
    return body


def test_create_taxon_under_parent(client, db, seed_key, seed_users):
    resp = client.post(
        "/api/taxa",
        json=_body(seed_key, scientificName="Cicindela", vernacularNameEn="Tiger beetle", parentId=2),
        headers=auth_headers(seed_users["member"]),
    )
    assert resp.status_code == 200, resp.text
    data = resp.json()
    assert data["revisionId"] != seed_key.revision_id
    content = _content(db, data["revisionId"])
    parent = taxon_tree.find_by_id(content.taxa, "2")
    assert [child.id for child in parent.children] == ["4", data["taxonId"]]
    assert parent.children[1].vernacular_name.en == "Tiger beetle"


def test_create_taxon_with_duplicate_name_conflicts(client, seed_key, seed_users):
    resp = client.post(
        "/api/taxa",
        json=_body(seed_key, scientificName="carabus"),
        headers=auth_headers(seed_users["member"]),
    )
    assert resp.status_code == 409


def test_create_taxon_with_missing_parent(client, seed_key, seed_users):
    resp = client.post(
        "/api/taxa",
        json=_body(seed_key, scientificName="Cicindela", parentId=999),
        headers=auth_headers(seed_users["member"]),
    )
    assert resp.status_code == 404


def test_update_taxon_moves_it_and_drops_its_statements(client, db, seed_key, seed_users):
    resp = client.put(
        "/api/taxa/4",
        json=_body(seed_key, scientificName="Carabus", parentId=3),
        headers=auth_headers(seed_users["member"]),
    )
    assert resp.status_code == 200, resp.text
    content = _content(db, resp.json())
    assert [child.id for child in taxon_tree.find_by_id(content.taxa, "3").children] == ["4"]
    assert not taxon_tree.find_by_id(content.taxa, "2").children
    assert [s.id for s in content.statements] == ["s1", "s2"]


def test_update_taxon_below_its_own_descendant_conflicts(client, seed_key, seed_users):
    resp = client.put(
        "/api/taxa/2",
        json=_body(seed_key, scientificName="Carabidae", parentId=4),
        headers=auth_headers(seed_users["member"]),
    )
    assert resp.status_code == 409


def test_rename_to_existing_name_conflicts(client, seed_key, seed_users):
    resp = client.put(
        "/api/taxa/4",
        json=_body(seed_key, scientificName="Coleoptera"),
        headers=auth_headers(seed_users["member"]),
    )
    assert resp.status_code == 409


def test_update_without_move_keeps_statements(client, db, seed_key, seed_users):
    resp = client.put(
        "/api/taxa/4",
        json=_body(seed_key, scientificName="Carabus", vernacularNameNo="Løpebille", parentId=2),
        headers=auth_headers(seed_users["member"]),
    )
    assert resp.status_code == 200
    content = _content(db, resp.json())
    assert taxon_tree.find_by_id(content.taxa, "4").vernacular_name.no == "Løpebille"
    assert len(content.statements) == 3


def test_delete_taxon_removes_subtree_and_statements(client, db, seed_key, seed_users):
    resp = client.request(
        "DELETE", "/api/taxa/2", json=_body(seed_key), headers=auth_headers(seed_users["member"])
    )
    assert resp.status_code == 200
    content = _content(db, resp.json())
    assert [taxon.id for taxon in content.iter_taxa()] == ["1", "3"]
    assert [s.id for s in content.statements] == ["s2"]


def test_taxon_edit_requires_key_permission(client, seed_key, seed_users):
    resp = client.post(
        "/api/taxa",
        json=_body(seed_key, scientificName="Cicindela"),
        headers=auth_headers(seed_users["colleague"]),
    )
    assert resp.status_code == 403


def test_vernacular_name_lookup(client, seed_users, monkeypatch):
    class FakeResponse:
        def __init__(self, payload):
            self._payload = payload

        def raise_for_status(self):
            return None

        def json(self):
            return self._payload

    def fake_get(url, params=None, timeout=None):
        if url.endswith("/Taxon/ScientificName"):
            return FakeResponse([{"taxonID": 42}] if params["Scientificname"] == "Carabus" else [])
        return FakeResponse({"PreferredVernacularName": {"vernacularName": "løpebiller"}})

    monkeypatch.setattr("httpx.get", fake_get)
    headers = auth_headers(seed_users["member"])
    found = client.get("/api/taxa/scientificname/vernacularname", params={"scientificname": "Carabus"}, headers=headers)
    assert found.status_code == 200
    assert found.json() == "løpebiller"
    missing = client.get("/api/taxa/scientificname/vernacularname", params={"scientificname": "Nope"}, headers=headers)
    assert missing.status_code == 404
