"""
Tests for input validation and canonicalization.
"""

import pytest

from building_risk.records import InvalidInputError, normalize_document, validate_document


@pytest.mark.parametrize("document", [
    None,
    [],
    "raw",
    {},
    {"generated_at": "2024-01-01"},
])
def test_structurally_invalid_documents(document):
    with pytest.raises(InvalidInputError):
        validate_document(document)


def test_collection_must_be_a_list():
    with pytest.raises(InvalidInputError, match="footprints"):
        validate_document({"footprints": {"bin": "1"}})


def test_missing_and_null_collections_are_empty():
    collections = validate_document({"footprints": [], "hpd_violations": None})

    assert collections["hpd_violations"] == []
    assert collections["evictions"] == []
    assert collections["dob_violations"] == []


def test_camel_case_aliases():
    collections = validate_document({
        "structuralViolations": [{"bin": "1"}],
        "maintenanceViolations": [],
        "complaints": [{"bbl": "1"}],
        "footprints": [],
        "ownershipLandUse": [],
        "registrationLinks": [],
        "registrationContacts": [],
    })

    assert collections["dob_violations"] == [{"bin": "1"}]
    assert collections["three_one_one"] == [{"bbl": "1"}]


def test_normalize_builds_hpd_bbl_from_fragments(raw_document):
    hpd = normalize_document(raw_document)["hpd_violations"]

    assert [v["bbl"] for v in hpd] == ["1000050023"] * 4 + [None]


def test_normalize_does_not_modify_source(raw_document):
    source = raw_document["pluto_data"][0]

    pluto = normalize_document(raw_document)["pluto_data"][0]

    assert pluto["bbl"] == "1000050023"
    assert source["bbl"] == "1000050023.00000000"
    assert pluto is not source


def test_normalize_drops_non_object_entries():
    collections = normalize_document({"footprints": [{"bin": "1000001"}, "junk", 3]})

    assert len(collections["footprints"]) == 1
    assert collections["footprints"][0]["base_bbl"] is None


def test_normalize_canonicalizes_ids():
    collections = normalize_document({
        "dob_violations": [{"bin": 1000001}, {"bin": "0000000"}],
        "hpd_registrations": [{"bin": "1000001", "registrationid": 555}],
        "hpd_contacts": [{"registrationid": " 555 "}],
    })

    assert [v["bin"] for v in collections["dob_violations"]] == ["1000001", None]
    assert collections["hpd_registrations"][0]["registrationid"] == "555"
    assert collections["hpd_contacts"][0]["registrationid"] == "555"
