"""
End-to-end tests for the reconciliation pipeline.
"""

import json

import pytest

from building_risk.reconcile import build_building_records, reconcile, run, summarize_buildings
from building_risk.records import InvalidInputError

YEAR = 2024


def _by_bin(buildings):
    return {f["properties"]["bin"]: f for f in buildings["features"]}


def test_full_building_record(raw_document):
    buildings, _ = reconcile(raw_document, current_year=YEAR)
    props = _by_bin(buildings)["1000001"]["properties"]

    assert props["id"] == "1000001"
    assert props["bbl"] == "1000050023"
    assert props["dob_violation_count"] == 1
    assert props["hpd_violation_count"] == 4
    assert props["complaint_311_count"] == 2
    assert (props["hpd_class_a"], props["hpd_class_b"], props["hpd_class_c"], props["hpd_class_i"]) == (0, 1, 2, 1)
    # 3*2 + 2*1 + 5*1 + 0.5*2 = 14, +5 for a 104 year old building
    assert props["risk_score"] == 19
    assert props["owner_name"] == "JANE DOE (Reg)"
    assert props["address"] == "12 MAIN STREET"
    assert props["borough"] == "New York"
    assert props["zipcode"] == "10001"
    assert props["height"] == 55.5
    assert props["construct_year"] == 1920
    assert props["eviction_count"] == 1


def test_recent_activity_feed(raw_document):
    buildings, _ = reconcile(raw_document, current_year=YEAR)
    feed = _by_bin(buildings)["1000001"]["properties"]["recent_violations"]

    assert [(e["source"], e["date"]) for e in feed] == [
        ("HPD", "2024-02-01"),
        ("311", "2024-01-10"),
        ("DOB", "2024-01-05"),
        ("HPD", "2023-12-01"),
        ("311", "2023-11-10"),
        ("HPD", "2023-06-01"),
    ]
    assert feed[0]["description"] == "ABATE THE NUISANCE CONSISTING OF MOLD"
    assert feed[2]["description"] == "FAILURE TO MAINTAIN BUILDING"


def test_footprint_without_bbl_is_kept(raw_document):
    buildings, _ = reconcile(raw_document, current_year=YEAR)
    props = _by_bin(buildings)["2000002"]["properties"]

    assert props["bbl"] is None
    assert props["hpd_violation_count"] == 0
    assert props["complaint_311_count"] == 0
    assert props["risk_score"] == 5
    assert props["address"] == "BIN: 2000002"
    assert props["borough"] == "Bronx"
    assert props["owner_name"] == "Unknown Owner"
    assert props["height"] == 10.0
    assert props["construct_year"] == 0


def test_footprint_without_any_id_gets_unknown_address():
    document = {"footprints": [{"bin": "0000000", "the_geom": {"type": "Polygon", "coordinates": [[[0, 0], [1, 0], [1, 1]]]}}]}

    buildings, _ = reconcile(document, current_year=YEAR)
    props = buildings["features"][0]["properties"]

    assert props["address"] == "Unknown Address"
    assert props["id"] is None


def test_footprint_id_falls_back_to_bbl():
    document = {"footprints": [{"base_bbl": "1000050023", "the_geom": {"type": "Polygon", "coordinates": [[[0, 0], [1, 0], [1, 1]]]}}]}

    buildings, _ = reconcile(document, current_year=YEAR)
    props = buildings["features"][0]["properties"]

    assert props["id"] == "1000050023"
    assert props["address"] == "BBL: 1000050023"


def test_footprint_without_geometry_is_excluded(raw_document):
    buildings, points = reconcile(raw_document, current_year=YEAR)

    assert "3000003" not in _by_bin(buildings)
    assert len(buildings["features"]) == len(points["features"]) == 2


def test_points_follow_buildings(raw_document):
    buildings, points = reconcile(raw_document, current_year=YEAR)

    for building, point in zip(buildings["features"], points["features"]):
        score = building["properties"]["risk_score"]
        assert point["properties"] == {"risk_score": score, "weight": score / 100}
    assert points["features"][1]["geometry"]["coordinates"] == pytest.approx([10.8, 10.8])


def test_scores_are_bounded_integers(raw_document):
    raw_document["dob_violations"] *= 40

    for record in build_building_records(raw_document, current_year=YEAR):
        assert isinstance(record["risk_score"], int)
        assert 0 <= record["risk_score"] <= 100


def test_building_without_activity_scores_zero(raw_document):
    for name in ("dob_violations", "hpd_violations", "three_one_one"):
        raw_document[name] = []

    records = build_building_records(raw_document, current_year=YEAR)

    assert [r["risk_score"] for r in records] == [0, 0]
    assert all(r["recent_violations"] == [] for r in records)


def test_only_footprints_present():
    document = {"footprints": [{"bin": "1000001", "the_geom": {"type": "Polygon", "coordinates": [[[0, 0], [1, 0], [1, 1]]]}}]}

    buildings, points = reconcile(document, current_year=YEAR)

    assert len(buildings["features"]) == 1
    assert buildings["features"][0]["properties"]["owner_name"] == "Unknown Owner"


def test_repeated_runs_are_identical(raw_document):
    first = json.dumps(reconcile(raw_document, current_year=YEAR))
    second = json.dumps(reconcile(raw_document, current_year=YEAR))

    assert first == second


def test_run_writes_both_outputs(raw_document, tmp_path):
    input_path = tmp_path / "raw_data.json"
    input_path.write_text(json.dumps(raw_document))
    output_dir = tmp_path / "out"

    run(input_path, output_dir, current_year=YEAR)

    buildings = json.loads((output_dir / "buildings.geojson").read_text())
    points = json.loads((output_dir / "risk_points.geojson").read_text())
    assert len(buildings["features"]) == 2
    assert len(points["features"]) == 2


def test_run_writes_nothing_on_invalid_input(tmp_path):
    input_path = tmp_path / "raw_data.json"
    input_path.write_text(json.dumps({"unexpected": True}))
    output_dir = tmp_path / "out"

    with pytest.raises(InvalidInputError):
        run(input_path, output_dir, current_year=YEAR)

    assert not output_dir.exists()


def test_run_missing_input(tmp_path):
    with pytest.raises(FileNotFoundError):
        run(tmp_path / "nope.json", tmp_path / "out")


def test_summarize_buildings(raw_document):
    buildings, _ = reconcile(raw_document, current_year=YEAR)

    df = summarize_buildings(buildings)

    assert len(df) == 2
    assert "recent_violations" not in df.columns
    assert sorted(df["risk_score"]) == [5, 19]
