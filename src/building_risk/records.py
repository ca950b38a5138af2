"""
Ingestion boundary for the raw download document.

The raw document holds one list per source dataset. This module validates
its shape and returns canonical copies of every record with identifiers
normalized to strings (see keys.py). Source records are never modified.
"""

import logging
from typing import Any, Mapping

from .keys import build_bbl, canonical_bbl, canonical_bin, canonical_id

logger = logging.getLogger(__name__)

# Canonical collection name -> accepted aliases in the input document
COLLECTION_ALIASES = {
    "dob_violations": ("dob_violations", "structuralViolations"),
    "hpd_violations": ("hpd_violations", "maintenanceViolations"),
    "three_one_one": ("three_one_one", "complaints"),
    "footprints": ("footprints",),
    "pluto_data": ("pluto_data", "ownershipLandUse"),
    "hpd_registrations": ("hpd_registrations", "registrationLinks"),
    "hpd_contacts": ("hpd_contacts", "registrationContacts"),
    "evictions": ("evictions",),
}

OPTIONAL_COLLECTIONS = ("evictions",)


class InvalidInputError(ValueError):
    """The input document does not have the expected collections."""


def _canonical_dob(record: dict) -> dict:
    return {**record, "bin": canonical_bin(record.get("bin"))}


def _canonical_hpd(record: dict) -> dict:
    # HPD rarely carries a BIN; its lot key is rebuilt from its own fragments
    return {**record, "bbl": build_bbl(record.get("boroid"), record.get("block"), record.get("lot"))}


def _canonical_complaint(record: dict) -> dict:
    return {**record, "bbl": canonical_bbl(record.get("bbl"))}


def _canonical_footprint(record: dict) -> dict:
    return {
        **record,
        "bin": canonical_bin(record.get("bin")),
        "base_bbl": canonical_bbl(record.get("base_bbl")),
    }


def _canonical_pluto(record: dict) -> dict:
    return {**record, "bbl": canonical_bbl(record.get("bbl"))}


def _canonical_registration(record: dict) -> dict:
    return {
        **record,
        "bin": canonical_bin(record.get("bin")),
        "registrationid": canonical_id(record.get("registrationid")),
    }


def _canonical_contact(record: dict) -> dict:
    return {**record, "registrationid": canonical_id(record.get("registrationid"))}


def _canonical_eviction(record: dict) -> dict:
    return {
        **record,
        "bin": canonical_bin(record.get("bin")),
        "bbl": canonical_bbl(record.get("bbl")),
    }


CANONICALIZERS = {
    "dob_violations": _canonical_dob,
    "hpd_violations": _canonical_hpd,
    "three_one_one": _canonical_complaint,
    "footprints": _canonical_footprint,
    "pluto_data": _canonical_pluto,
    "hpd_registrations": _canonical_registration,
    "hpd_contacts": _canonical_contact,
    "evictions": _canonical_eviction,
}


def _find_collection(document: Mapping[str, Any], name: str):
    """Return (found, value) for the first alias of name present in document."""
    for alias in COLLECTION_ALIASES[name]:
        if alias in document:
            return True, document[alias]
    return False, None


def validate_document(document: Any) -> dict[str, list]:
    """
    Check the document shape and pick out its collections.

    A missing or null collection is treated as empty; that is how a partial
    upstream download shows up. The document itself is invalid when it is
    not a mapping, when a collection is present but not a list, or when it
    contains none of the known collections at all.

    Raises:
        InvalidInputError: If the document is structurally invalid
    """
    if not isinstance(document, Mapping):
        raise InvalidInputError(
            f"Input document must be a JSON object, got {type(document).__name__}"
        )

    collections = {}
    found_any = False
    for name in COLLECTION_ALIASES:
        found, value = _find_collection(document, name)
        if not found or value is None:
            if name not in OPTIONAL_COLLECTIONS:
                logger.warning(f"Collection '{name}' missing from input, treating as empty")
            collections[name] = []
            continue
        if not isinstance(value, list):
            raise InvalidInputError(
                f"Collection '{name}' must be a list, got {type(value).__name__}"
            )
        found_any = True
        collections[name] = value

    if not found_any:
        raise InvalidInputError(
            "Input document contains none of the expected collections: "
            + ", ".join(COLLECTION_ALIASES)
        )
    return collections


def normalize_document(document: Any) -> dict[str, tuple]:
    """
    Validate the document and canonicalize every record.

    Returns:
        Mapping of canonical collection name -> tuple of canonical records.
        Entries that are not JSON objects are dropped and counted.
    """
    collections = validate_document(document)
    normalized = {}
    for name, records in collections.items():
        canonicalize = CANONICALIZERS[name]
        kept = tuple(canonicalize(r) for r in records if isinstance(r, Mapping))
        dropped = len(records) - len(kept)
        if dropped:
            logger.warning(f"Dropped {dropped:,} non-object entries from '{name}'")
        normalized[name] = kept
    return normalized
