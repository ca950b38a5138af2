"""
Join violations, complaints and enrichment data onto building footprints.

DOB violations match on BIN. HPD violations and 311 complaints match on
BBL, so a footprint without a BBL simply gets none of them.
"""

import math
from typing import Mapping, Optional

from .indexing import first, lookup
from .keys import as_digits

BORO_MAP = {
    "1": "New York",
    "2": "Bronx",
    "3": "Brooklyn",
    "4": "Queens",
    "5": "Staten Island",
}

DEFAULT_HEIGHT = 10.0
UNKNOWN_ADDRESS = "Unknown Address"
RESIDENTIAL = "residential"


def _text(value) -> str:
    if value is None:
        return ""
    return str(value).strip()


def join_building(footprint: Mapping, indices: Mapping[str, Mapping]) -> dict[str, tuple]:
    """
    Collect the records that belong to one footprint.

    Returns:
        Dict with 'dob', 'hpd', 'complaints' and 'evictions' tuples
    """
    bin_ = footprint.get("bin")
    bbl = footprint.get("base_bbl")

    evictions = lookup(indices["evictions_by_bin"], bin_) + lookup(indices["evictions_by_bbl"], bbl)
    return {
        "dob": lookup(indices["dob_by_bin"], bin_),
        "hpd": lookup(indices["hpd_by_bbl"], bbl),
        "complaints": lookup(indices["complaints_by_bbl"], bbl),
        "evictions": evictions,
    }


def count_residential_evictions(evictions) -> int:
    """Evictions flagged Residential; records without the flag were filtered upstream."""
    count = 0
    for eviction in evictions:
        flag = _text(eviction.get("residential_commercial_ind")).lower()
        if not flag or flag == RESIDENTIAL:
            count += 1
    return count


def resolve_address(bin_: Optional[str], bbl: Optional[str], dob_violations, complaints) -> str:
    """
    Best street address for a building.

    DOB violations carry the cleanest house number / street pair; 311
    incident addresses come next; otherwise fall back to the lot or
    building id, and to UNKNOWN_ADDRESS when there is neither.
    """
    for violation in dob_violations:
        house_number = _text(violation.get("house_number"))
        street = _text(violation.get("street"))
        if house_number and street:
            return f"{house_number} {street}"

    for complaint in complaints:
        incident_address = _text(complaint.get("incident_address"))
        if incident_address:
            return incident_address

    if bbl:
        return f"BBL: {bbl}"
    if bin_:
        return f"BIN: {bin_}"
    return UNKNOWN_ADDRESS


def resolve_borough(pluto: Optional[Mapping], dob_violations) -> str:
    """Borough name from PLUTO's borocode, else from the first DOB violation."""
    if pluto is not None:
        borough = BORO_MAP.get(as_digits(pluto.get("borocode")) or "")
        if borough:
            return borough
    if dob_violations:
        return BORO_MAP.get(as_digits(dob_violations[0].get("boro")) or "", "")
    return ""


def resolve_zipcode(pluto: Optional[Mapping]) -> str:
    if pluto is None:
        return ""
    return _text(pluto.get("zipcode"))


def lookup_land_use(footprint: Mapping, indices: Mapping[str, Mapping]) -> Optional[dict]:
    return first(indices["pluto_by_bbl"], footprint.get("base_bbl"))


def parse_height(value) -> float:
    """Roof height in feet; DEFAULT_HEIGHT when missing or unparsable."""
    try:
        height = float(value)
    except (TypeError, ValueError):
        return DEFAULT_HEIGHT
    if not math.isfinite(height):
        return DEFAULT_HEIGHT
    return height


def parse_year(value) -> int:
    """Construction year as an int; 0 when missing or unparsable."""
    digits = as_digits(value)
    return int(digits) if digits else 0
