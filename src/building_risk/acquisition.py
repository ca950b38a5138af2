"""
Download the raw NYC Open Data collections for the risk map.

All datasets come from the Socrata API at data.cityofnewyork.us. Footprints,
PLUTO, registrations and contacts are fetched by id in chunks ("bin IN
(...)"), each chunk producing its own immutable batch; the batches are then
chained into one collection. A chunk that fails is logged and contributes an
empty batch, so the raw document may be partial but is always written.
"""

import logging
from datetime import datetime
from itertools import chain
from typing import Iterable, Mapping, Optional

from tqdm import tqdm

from .keys import canonical_bbl, canonical_bin, canonical_id

logger = logging.getLogger(__name__)

DOMAIN = "data.cityofnewyork.us"

DATASETS = {
    "dob_violations": "3h2n-5cm9",
    "hpd_violations": "wvxf-dwi5",
    "footprints": "5zhs-2jue",
    "three_one_one": "erm2-nwe9",
    "pluto_data": "64uk-42ks",
    "hpd_registrations": "tesw-yqqr",
    "hpd_contacts": "feu5-w2e2",
    "evictions": "6z8x-wfk4",
}

PAGE_SIZE = 50000  # Socrata max per request
ID_CHUNK_SIZE = 200  # Keeps "IN (...)" URLs under length limits
FOOTPRINT_CHUNK_SIZE = 100

# Manhattan, Bronx, Brooklyn
BOROUGH_CODES = ("1", "2", "3")
BOROUGH_NAMES = ("MANHATTAN", "BRONX", "BROOKLYN")

HPD_LIMIT = 15000
DOB_LIMITS = {"1": 4000, "2": 12000, "3": 6000}
COMPLAINT_LIMIT = 15000
EVICTION_LIMIT = 5000
ACTIVITY_START = "2023-01-01T00:00:00.000"

# Footprints requested per BIN prefix, to balance boroughs on the map
FOOTPRINT_BIN_LIMITS = {"1": 2000, "2": 4500, "3": 2000}

COMPLAINT_TYPES = (
    "HEAT/HOT WATER",
    "PAINT/PLASTER",
    "PLUMBING",
    "UNSANITARY CONDITION",
    "WATER LEAK",
)

BIN_LENGTH = 7


def source_url(dataset_id: str) -> str:
    return f"https://{DOMAIN}/resource/{dataset_id}.json"


def _quoted(values: Iterable[str]) -> str:
    return ",".join(f"'{v}'" for v in values)


def chunked(values: list, size: int) -> list[tuple]:
    return [tuple(values[i:i + size]) for i in range(0, len(values), size)]


def fetch_chunk(
    client,
    dataset_id: str,
    field: str,
    chunk: tuple,
    select: Optional[str] = None,
) -> tuple:
    """
    Fetch all rows whose field is in chunk.

    Returns:
        Tuple of rows; empty when the request failed
    """
    params = {"where": f"{field} IN ({_quoted(chunk)})", "limit": PAGE_SIZE}
    if select:
        params["select"] = select
    try:
        rows = client.get(dataset_id, **params)
    except Exception as e:
        logger.error(f"Error fetching {dataset_id} chunk of {len(chunk)} ids: {e}")
        return ()
    if not isinstance(rows, list):
        logger.error(f"Unexpected response for {dataset_id} chunk: {type(rows).__name__}")
        return ()
    return tuple(rows)


def fetch_batches(
    client,
    dataset_id: str,
    field: str,
    values: Iterable[str],
    chunk_size: int = ID_CHUNK_SIZE,
    select: Optional[str] = None,
    desc: Optional[str] = None,
) -> list[dict]:
    """
    Fetch rows matching a list of ids, chunk by chunk.

    Args:
        client: sodapy.Socrata client
        dataset_id: Socrata dataset id
        field: Column to match (e.g. 'bin')
        values: Ids to request; duplicates and empty values are dropped
        chunk_size: Ids per request
        select: Optional $select clause
        desc: Progress bar label

    Returns:
        All fetched rows, in chunk order
    """
    unique_values = list(dict.fromkeys(v for v in values if v))
    chunks = chunked(unique_values, chunk_size)
    logger.info(f"Fetching {dataset_id} for {len(unique_values):,} ids in {len(chunks):,} chunks...")

    batches = [
        fetch_chunk(client, dataset_id, field, chunk, select=select)
        for chunk in tqdm(chunks, desc=desc or dataset_id)
    ]
    failed = sum(1 for batch in batches if not batch)
    if failed:
        logger.warning(f"  {failed:,} of {len(chunks):,} chunks returned no rows")

    rows = list(chain.from_iterable(batches))
    logger.info(f"  Retrieved {len(rows):,} rows from {dataset_id}")
    return rows


def fetch_paginated(
    client,
    dataset_id: str,
    where: str,
    order: str,
    limit: int,
    page_size: int = PAGE_SIZE,
    desc: Optional[str] = None,
) -> list[dict]:
    """
    Download up to `limit` rows matching a filter, one page at a time.

    A failed page ends the download; the pages already received are kept.
    """
    pages = []
    offset = 0
    with tqdm(total=limit, desc=desc or dataset_id) as pbar:
        while offset < limit:
            size = min(page_size, limit - offset)
            try:
                page = client.get(dataset_id, where=where, order=order, limit=size, offset=offset)
            except Exception as e:
                logger.error(f"Error fetching {dataset_id} page at offset {offset:,}: {e}")
                break
            if not isinstance(page, list) or not page:
                break

            pages.append(tuple(page))
            pbar.update(len(page))
            offset += len(page)
            if len(page) < size:
                break

    rows = list(chain.from_iterable(pages))
    logger.info(f"  Retrieved {len(rows):,} rows from {dataset_id}")
    return rows


def select_target_bins(bins: Iterable, limits: Mapping[str, int] = FOOTPRINT_BIN_LIMITS) -> list[str]:
    """
    Pick unique 7-digit BINs, capped per borough prefix.

    Boroughs appear in the order of `limits`; within a borough, BINs keep
    their first-seen order.
    """
    unique_bins = list(dict.fromkeys(
        b for b in (canonical_bin(v) for v in bins) if b and len(b) == BIN_LENGTH
    ))
    targets = []
    for prefix, limit in limits.items():
        targets.extend([b for b in unique_bins if b.startswith(prefix)][:limit])
    return targets


def fetch_dob_violations(client) -> list[dict]:
    per_borough = [
        fetch_paginated(
            client,
            DATASETS["dob_violations"],
            where=f"boro = '{boro}' AND violation_category IS NOT NULL AND bin != '0000000'",
            order="issue_date DESC",
            limit=DOB_LIMITS[boro],
            desc=f"DOB violations (boro {boro})",
        )
        for boro in BOROUGH_CODES
    ]
    return list(chain.from_iterable(per_borough))


def fetch_hpd_violations(client) -> list[dict]:
    return fetch_paginated(
        client,
        DATASETS["hpd_violations"],
        where=f"boroid IN ({_quoted(BOROUGH_CODES)}) AND currentstatus != 'VIOLATION CLOSED'",
        order="novissueddate DESC",
        limit=HPD_LIMIT,
        desc="HPD violations",
    )


def fetch_complaints(client) -> list[dict]:
    return fetch_paginated(
        client,
        DATASETS["three_one_one"],
        where=(
            f"borough IN ({_quoted(BOROUGH_NAMES)}) "
            f"AND created_date > '{ACTIVITY_START}' "
            f"AND complaint_type IN ({_quoted(COMPLAINT_TYPES)})"
        ),
        order="created_date DESC",
        limit=COMPLAINT_LIMIT,
        desc="311 complaints",
    )


def fetch_evictions(client) -> list[dict]:
    return fetch_paginated(
        client,
        DATASETS["evictions"],
        where=(
            f"executed_date > '{ACTIVITY_START}' "
            "AND residential_commercial_ind = 'Residential' "
            f"AND borough IN ({_quoted(BOROUGH_NAMES)})"
        ),
        order="executed_date DESC",
        limit=EVICTION_LIMIT,
        desc="Evictions",
    )


def fetch_raw_document(client) -> dict:
    """
    Download every collection the risk map needs.

    Footprints are requested for BINs seen in DOB violations; PLUTO for the
    footprints' BBLs; registrations for the footprints' BINs; contacts for
    the registrations found.
    """
    hpd_violations = fetch_hpd_violations(client)
    dob_violations = fetch_dob_violations(client)
    complaints = fetch_complaints(client)

    target_bins = select_target_bins(v.get("bin") for v in dob_violations)
    logger.info(f"Selected {len(target_bins):,} BINs for footprint lookup")
    footprints = fetch_batches(
        client, DATASETS["footprints"], "bin", target_bins,
        chunk_size=FOOTPRINT_CHUNK_SIZE, desc="Footprints",
    )

    footprint_bbls = (canonical_bbl(f.get("base_bbl")) for f in footprints)
    pluto_data = fetch_batches(
        client, DATASETS["pluto_data"], "bbl", footprint_bbls,
        select="bbl,ownername,zipcode,borocode", desc="PLUTO",
    )

    footprint_bins = (
        b for b in (canonical_bin(f.get("bin")) for f in footprints) if b and len(b) == BIN_LENGTH
    )
    registrations = fetch_batches(
        client, DATASETS["hpd_registrations"], "bin", footprint_bins,
        select="bin,registrationid", desc="HPD registrations",
    )

    registration_ids = (canonical_id(r.get("registrationid")) for r in registrations)
    contacts = fetch_batches(
        client, DATASETS["hpd_contacts"], "registrationid", registration_ids,
        desc="HPD contacts",
    )

    evictions = fetch_evictions(client)

    return {
        "dob_violations": dob_violations,
        "hpd_violations": hpd_violations,
        "three_one_one": complaints,
        "footprints": footprints,
        "pluto_data": pluto_data,
        "hpd_registrations": registrations,
        "hpd_contacts": contacts,
        "evictions": evictions,
        "generated_at": datetime.now().isoformat(),
    }
