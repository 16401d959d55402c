import json

import pytest

from ploegwissel.core.document import DEFAULT_COMPANY_NAME, Document, TriState
from ploegwissel.core.mutation import set_field, toggle_map_entry
from ploegwissel.modules.export import export_snapshot, load_snapshot


@pytest.fixture
def filled(doc):
    doc = set_field(doc, "meta.shift", "Nacht")
    doc = set_field(doc, "prod.stable", TriState.NO)
    doc = set_field(doc, "safe.incidentNotes", "Gladde vloer bij zeef")
    return toggle_map_entry(doc, "plan.items", "Onderhoud gepland")


def test_filename_uses_document_date_and_shift(filled):
    _, filename = export_snapshot(filled, DEFAULT_COMPANY_NAME)
    assert filename == "ploegwissel_2026-10-18_Nacht.json"
    assert export_snapshot(filled, "Ander bedrijf")[1] == filename


def test_payload_shape_and_round_trip(filled):
    data, _ = export_snapshot(filled, DEFAULT_COMPANY_NAME)
    payload = json.loads(data.decode("utf-8"))
    assert list(payload) == ["companyName", "data"]
    assert payload["companyName"] == DEFAULT_COMPANY_NAME
    assert payload["data"]["prod"]["stable"] is False
    assert payload["data"]["tech"]["hasIssue"] is None
    assert Document.from_dict(payload["data"]) == filled


def test_export_is_pretty_printed_utf8(filled):
    data, _ = export_snapshot(filled, DEFAULT_COMPANY_NAME)
    assert data.startswith(b'{\n  "companyName"')
    assert "–".encode("utf-8") in data


def test_export_is_deterministic(filled):
    assert export_snapshot(filled, "X") == export_snapshot(filled.copy(), "X")


def test_load_snapshot(filled):
    data, _ = export_snapshot(filled, "Melkpoeder BV")
    company, doc = load_snapshot(data)
    assert company == "Melkpoeder BV"
    assert doc == filled


def test_load_snapshot_rejects_other_json():
    with pytest.raises(ValueError):
        load_snapshot(b'{"meta": {}}')
