"""
Shared fixtures: a small raw document covering every collection.
"""

import copy

import pytest


def square(x0=0.0, y0=0.0, size=2.0):
    """Closed square ring as a MultiPolygon, the way Socrata serves footprints."""
    ring = [[x0, y0], [x0 + size, y0], [x0 + size, y0 + size], [x0, y0 + size], [x0, y0]]
    return {"type": "MultiPolygon", "coordinates": [[ring]]}


RAW_DOCUMENT = {
    "footprints": [
        {
            "bin": "1000001",
            "base_bbl": "1000050023",
            "the_geom": square(),
            "heightroof": "55.5",
            "cnstrct_yr": "1920",
        },
        {
            # No BBL: joins DOB only
            "bin": "2000002",
            "the_geom": square(10.0, 10.0),
            "heightroof": None,
            "cnstrct_yr": "0",
        },
        {
            # No geometry: dropped from both outputs
            "bin": "3000003",
            "base_bbl": "3000010001",
            "heightroof": "20",
            "cnstrct_yr": "1950",
        },
    ],
    "dob_violations": [
        {
            "bin": "1000001",
            "boro": "1",
            "house_number": " 12 ",
            "street": "MAIN STREET ",
            "issue_date": "20240105",
            "violation_type_code": "C",
            "description": "(12) FAILURE TO MAINTAIN BUILDING",
        },
        {
            "bin": "2000002",
            "boro": "2",
            "house_number": "",
            "street": "",
            "issue_date": "20230301",
            "violation_type_code": "E",
            "description": "ELEVATOR INSPECTION OVERDUE",
        },
    ],
    "hpd_violations": [
        {"boroid": "1", "block": "5", "lot": "23", "class": "C",
         "novissueddate": "2024-02-01T00:00:00.000",
         "novdescription": "§ 27-2017 ADM CODE: ABATE THE NUISANCE CONSISTING OF MOLD"},
        {"boroid": "1", "block": "00005", "lot": "0023", "class": "C",
         "novissueddate": "2023-12-01T00:00:00.000",
         "novdescription": "REPAIR THE BROKEN PLASTER"},
        {"boroid": "1", "block": 5, "lot": 23, "class": "b",
         "novissueddate": "2023-06-01T00:00:00.000",
         "novdescription": "PROVIDE HOT WATER"},
        {"boroid": "1", "block": "5", "lot": "23", "class": None,
         "novissueddate": None,
         "novdescription": "ORDER TO CORRECT"},
        {"boroid": "2", "block": None, "lot": "1", "class": "A",
         "novissueddate": "2024-01-01T00:00:00.000",
         "novdescription": "NO KEY"},
    ],
    "three_one_one": [
        {"bbl": "1000050023", "created_date": "2024-01-10T08:00:00.000",
         "complaint_type": "HEAT/HOT WATER", "descriptor": "ENTIRE BUILDING",
         "incident_address": "12 MAIN STREET"},
        {"bbl": 1000050023, "created_date": "2023-11-10T08:00:00.000",
         "complaint_type": "PLUMBING", "descriptor": "LEAK",
         "incident_address": "12 MAIN STREET"},
        {"bbl": None, "created_date": "2024-01-10T08:00:00.000",
         "complaint_type": "PLUMBING", "descriptor": "LEAK"},
    ],
    "pluto_data": [
        {"bbl": "1000050023.00000000", "ownername": "MAIN STREET HOLDINGS LLC",
         "zipcode": "10001", "borocode": "1"},
    ],
    "hpd_registrations": [
        {"bin": "1000001", "registrationid": "555"},
    ],
    "hpd_contacts": [
        {"registrationid": "555", "type": "CorporateOwner", "corporationname": "ACME REALTY CORP"},
        {"registrationid": "555", "type": "IndividualOwner", "firstname": "JANE", "lastname": "DOE"},
    ],
    "evictions": [
        {"bin": "1000001", "residential_commercial_ind": "Residential"},
        {"bin": "1000001", "residential_commercial_ind": "Commercial"},
    ],
}


@pytest.fixture
def raw_document():
    """A fresh deep copy of the sample raw document."""
    return copy.deepcopy(RAW_DOCUMENT)
