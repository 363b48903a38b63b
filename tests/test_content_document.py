from keybuilder.schemas.content import ContentDocument, NumericalState, RevisionMedia
from tests.conftest import sample_content, sample_media


def test_content_document_preserves_shape_and_unknown_fields():
    raw = sample_content()
    raw["editorVersion"] = 3
    raw["taxa"][0]["customField"] = {"a": 1}
    document = ContentDocument.from_json(raw)
    dumped = document.to_json()
    assert dumped["editorVersion"] == 3
    assert dumped["taxa"][0]["customField"] == {"a": 1}
    assert dumped["characters"][1]["states"]["stepSize"] == 1
    assert dumped["characters"][2]["logicalPremise"][0][0] == {"characterId": "10", "stateId": "100"}


def test_from_json_does_not_alias_the_stored_value():
    raw = sample_content()
    document = ContentDocument.from_json(raw)
    document.taxa[0].scientific_name = "Changed"
    assert raw["taxa"][0]["scientificName"] == "Coleoptera"


def test_numeric_ids_become_strings():
    document = ContentDocument.from_json({"taxa": [{"id": 7, "scientificName": "Apis"}], "characters": []})
    assert document.taxa[0].id == "7"


def test_numerical_states_are_typed():
    document = ContentDocument.from_json(sample_content())
    length = document.find_character("20")
    assert length.is_numerical
    assert isinstance(length.states, NumericalState)
    assert length.find_state("200") is None
    assert document.find_character("10").find_state("101").title.en == "Black"


def test_iter_taxa_is_pre_order():
    document = ContentDocument.from_json(sample_content())
    assert [taxon.id for taxon in document.iter_taxa()] == ["1", "2", "4", "3"]


def test_empty_documents():
    assert ContentDocument.from_json(None).to_json() == {"taxa": [], "characters": []}
    assert RevisionMedia.from_json({}).to_json() == {"mediaElements": [], "persons": []}
    assert RevisionMedia.from_json(sample_media()).find_element("11").title.en == "Ladybird"
