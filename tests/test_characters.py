from keybuilder.models.entity import Character as CharacterRow
from keybuilder.models.entity import CharacterState
from keybuilder.models.key import Revision
from keybuilder.schemas.content import ContentDocument
from tests.conftest import auth_headers


def _content(db, revision_id) -> ContentDocument:
    db.expire_all()
    revision = db.query(Revision).filter(Revision.revision_id == revision_id).first()
    return ContentDocument.from_json(revision.content)


def _body(key, **extra):
    body = {"keyId": key.key_id, "revisionId": key.revision_id}
    body.update(extra)
    return body


def _new_state(client, key, user) -> int:
    resp = client.post("/api/characters/state", json={"keyId": key.key_id}, headers=auth_headers(user))
    assert resp.status_code == 200, resp.text
    return resp.json()


def test_create_multistate_character_claims_state_rows(client, db, seed_key, seed_users):
    user = seed_users["member"]
    first, second = _new_state(client, seed_key, user), _new_state(client, seed_key, user)
    resp = client.post(
        "/api/characters",
        json=_body(
            seed_key,
            titleEn="Antenna shape",
            type="multistate",
            alternatives=[
                {"id": first, "title": {"en": "Clubbed"}},
                {"id": second, "title": {"en": "Threadlike"}, "media": [5]},
            ],
        ),
        headers=auth_headers(user),
    )
    assert resp.status_code == 200, resp.text
    data = resp.json()
    character = _content(db, data["revisionId"]).find_character(data["characterId"])
    assert character.type == "multistate"
    assert character.title.en == "Antenna shape"
    assert [state.id for state in character.states] == [str(first), str(second)]
    assert character.states[1].media is None
    row = db.query(CharacterRow).filter(CharacterRow.character_id == int(data["characterId"])).first()
    assert row.type == "MULTISTATE"
    state_row = db.query(CharacterState).filter(CharacterState.state_id == first).first()
    assert state_row.character_id == row.character_id


def test_create_numerical_character(client, db, seed_key, seed_users):
    resp = client.post(
        "/api/characters",
        json=_body(seed_key, titleNo="Bredde", type="numerical", unitNo="mm", min=0.5, max=12, stepSize=0.5),
        headers=auth_headers(seed_users["member"]),
    )
    assert resp.status_code == 200, resp.text
    data = resp.json()
    character = _content(db, data["revisionId"]).find_character(data["characterId"])
    assert character.is_numerical
    assert character.states.max == 12
    assert character.states.unit.no == "mm"


def test_invalid_character_input_is_rejected(client, seed_key, seed_users):
    headers = auth_headers(seed_users["member"])
    missing_unit = _body(seed_key, titleEn="Width", type="numerical", min=1, max=2, stepSize=1)
    inverted = _body(seed_key, titleEn="Width", type="numerical", unitEn="mm", min=5, max=2, stepSize=1)
    single = _body(seed_key, titleEn="Colour", type="exclusive", alternatives=[{"id": 100}])
    for body in (missing_unit, inverted, single):
        assert client.post("/api/characters", json=body, headers=headers).status_code == 400
    no_title = _body(seed_key, type="exclusive", alternatives=[{"id": 100}, {"id": 101}])
    assert client.post("/api/characters", json=no_title, headers=headers).status_code == 422


def test_update_removes_statements_of_dropped_states(client, db, seed_key, seed_users):
    resp = client.put(
        "/api/characters/10",
        json=_body(seed_key, titleEn="Colour", type="exclusive", alternatives=[
            {"id": 101, "title": {"en": "Black"}},
            {"id": _new_state(client, seed_key, seed_users["member"]), "title": {"en": "Green"}},
        ]),
        headers=auth_headers(seed_users["member"]),
    )
    assert resp.status_code == 200, resp.text
    content = _content(db, resp.json())
    assert [state.title.en for state in content.find_character("10").states] == ["Black", "Green"]
    assert [s.id for s in content.statements] == ["s1", "s3"]


def test_unknown_alternative_is_not_found_and_claims_nothing(client, db, seed_key, seed_users):
    user = seed_users["member"]
    spare = _new_state(client, seed_key, user)
    revisions = db.query(Revision).count()
    characters = db.query(CharacterRow).count()

    created = client.post(
        "/api/characters",
        json=_body(seed_key, titleEn="Elytra", type="exclusive", alternatives=[{"id": spare}, {"id": 9999}]),
        headers=auth_headers(user),
    )
    updated = client.put(
        "/api/characters/30",
        json=_body(seed_key, titleEn="Spots", type="exclusive", alternatives=[{"id": spare}, {"id": 9999}]),
        headers=auth_headers(user),
    )
    assert created.status_code == 404
    assert updated.status_code == 404
    db.expire_all()
    assert db.query(CharacterState).filter(CharacterState.state_id == spare).first().character_id is None
    assert db.query(Revision).count() == revisions
    assert db.query(CharacterRow).count() == characters


def test_narrowing_numerical_range_purges_premises(client, db, seed_key, seed_users):
    resp = client.put(
        "/api/characters/20",
        json=_body(seed_key, titleEn="Length", type="numerical", unitEn="mm", min=1, max=20, stepSize=1),
        headers=auth_headers(seed_users["member"]),
    )
    assert resp.status_code == 200, resp.text
    content = _content(db, resp.json())
    assert content.find_character("20").states.id == "200"
    assert content.find_character("30").logical_premise == []


def test_widening_numerical_range_keeps_premises(client, db, seed_key, seed_users):
    resp = client.put(
        "/api/characters/20",
        json=_body(seed_key, titleEn="Length", type="numerical", unitEn="mm", min=0, max=50, stepSize=1),
        headers=auth_headers(seed_users["member"]),
    )
    assert resp.status_code == 200
    assert len(_content(db, resp.json()).find_character("30").logical_premise) == 2


def test_delete_character_cleans_premises_and_statements(client, db, seed_key, seed_users):
    resp = client.request(
        "DELETE", "/api/characters/10", json=_body(seed_key), headers=auth_headers(seed_users["member"])
    )
    assert resp.status_code == 200
    content = _content(db, resp.json())
    assert content.find_character("10") is None
    assert content.find_character("30").logical_premise == []
    assert [s.id for s in content.statements] == ["s3"]


def test_set_premise(client, db, seed_key, seed_users):
    resp = client.put(
        "/api/characters/premise/10",
        json=_body(seed_key, logicalPremise=[[{"characterId": "30", "stateId": "300"}]]),
        headers=auth_headers(seed_users["member"]),
    )
    assert resp.status_code == 200
    premise = _content(db, resp.json()).find_character("10").logical_premise
    assert premise[0][0].state_id == "300"


def test_removing_states_from_accepted_revision_creates_new_revision(client, db, seed_key, seed_users):
    resp = client.put(
        f"/api/characters/states/revision/{seed_key.revision_id}",
        json={"keyId": seed_key.key_id, "states": [100]},
        headers=auth_headers(seed_users["member"]),
    )
    assert resp.status_code == 200
    new_id = resp.json()
    assert new_id != seed_key.revision_id
    assert _content(db, new_id).find_character("30").logical_premise is None
    assert _content(db, seed_key.revision_id).find_character("30").logical_premise is not None


def test_unknown_character_is_not_found(client, seed_key, seed_users):
    resp = client.put(
        "/api/characters/premise/999",
        json=_body(seed_key, logicalPremise=[]),
        headers=auth_headers(seed_users["member"]),
    )
    assert resp.status_code == 404
