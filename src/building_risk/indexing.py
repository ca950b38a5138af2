"""
Hash indices over the canonical record collections.

Each index maps a canonical key (BIN, BBL or registration id) to the records
sharing it, in the order the records arrived. Indices are built once per run
and only read afterwards.
"""

import logging
from collections import defaultdict
from typing import Callable, Iterable, Mapping, Optional

logger = logging.getLogger(__name__)

Index = Mapping[str, tuple]


def build_index(
    records: Iterable[dict],
    key_func: Callable[[dict], Optional[str]],
    name: str = "index",
) -> dict[str, tuple]:
    """
    Group records by key.

    Args:
        records: Records to index
        key_func: Returns the record's key, or None when the record has none
        name: Label used in log messages

    Returns:
        Mapping of key -> tuple of records, arrival order preserved
    """
    grouped = defaultdict(list)
    skipped = 0
    for record in records:
        key = key_func(record)
        if key is None:
            skipped += 1
            continue
        grouped[key].append(record)

    logger.debug(f"Built {name}: {len(grouped):,} keys, {skipped:,} records without a key")
    return {key: tuple(group) for key, group in grouped.items()}


def lookup(index: Index, key: Optional[str]) -> tuple:
    """Return the records stored under key; an absent or None key yields ()."""
    if key is None:
        return ()
    return index.get(key, ())


def first(index: Index, key: Optional[str]) -> Optional[dict]:
    """Return the first record stored under key, or None."""
    matches = lookup(index, key)
    return matches[0] if matches else None


def build_dataset_indices(collections: Mapping[str, tuple]) -> dict[str, dict[str, tuple]]:
    """
    Build every join index from canonical collections.

    Expects the collection names and canonical fields produced by
    records.normalize_document().
    """
    indices = {
        "dob_by_bin": build_index(collections["dob_violations"], lambda r: r.get("bin"), "DOB by BIN"),
        "hpd_by_bbl": build_index(collections["hpd_violations"], lambda r: r.get("bbl"), "HPD by BBL"),
        "complaints_by_bbl": build_index(collections["three_one_one"], lambda r: r.get("bbl"), "311 by BBL"),
        "pluto_by_bbl": build_index(collections["pluto_data"], lambda r: r.get("bbl"), "PLUTO by BBL"),
        "registrations_by_bin": build_index(
            collections["hpd_registrations"], lambda r: r.get("bin"), "registrations by BIN"
        ),
        "contacts_by_registration": build_index(
            collections["hpd_contacts"], lambda r: r.get("registrationid"), "contacts by registration"
        ),
        "evictions_by_bin": build_index(collections["evictions"], lambda r: r.get("bin"), "evictions by BIN"),
        # Evictions lacking a BIN can still match on their lot
        "evictions_by_bbl": build_index(
            collections["evictions"],
            lambda r: r.get("bbl") if r.get("bin") is None else None,
            "evictions by BBL",
        ),
    }
    for name, index in indices.items():
        logger.info(f"  {name}: {len(index):,} keys")
    return indices
