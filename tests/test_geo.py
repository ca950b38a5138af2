"""
Tests for the GeoJSON emitter.
"""

import pytest

from building_risk.geo import (
    building_feature,
    emit_geojson,
    has_valid_geometry,
    outer_ring,
    ring_centroid,
    risk_point_feature,
)

from conftest import square


def test_centroid_is_vertex_mean_of_square():
    ring = outer_ring(square(0.0, 0.0, 2.0))

    # (0+2+2+0+0)/5, (0+0+2+2+0)/5 with the closing vertex counted
    assert ring_centroid(ring) == pytest.approx([0.8, 0.8])


def test_centroid_uses_first_ring_only():
    outer = [[0, 0], [4, 0], [4, 4], [0, 4]]
    hole = [[1, 1], [2, 1], [2, 2]]
    geometry = {"type": "MultiPolygon", "coordinates": [[outer, hole], [[[100, 100], [101, 100], [101, 101]]]]}

    assert ring_centroid(outer_ring(geometry)) == pytest.approx([2.0, 2.0])


def test_plain_polygon_supported():
    geometry = {"type": "Polygon", "coordinates": [[[0, 0], [3, 0], [0, 3]]]}

    assert ring_centroid(outer_ring(geometry)) == pytest.approx([1.0, 1.0])


@pytest.mark.parametrize("geometry", [
    None,
    {},
    {"type": "Point", "coordinates": [1, 2]},
    {"type": "MultiPolygon", "coordinates": []},
    {"type": "MultiPolygon", "coordinates": [[[[0, 0], [1, 1]]]]},
    {"type": "Polygon", "coordinates": [[[0, 0], [1, "x"], [1, 1]]]},
    {"type": "Polygon"},
])
def test_invalid_geometry(geometry):
    assert not has_valid_geometry(geometry)


def test_building_feature_passes_geometry_through():
    geometry = square()
    record = {"id": "1000001", "risk_score": 42, "geometry": geometry}

    feature = building_feature(record)

    assert feature["type"] == "Feature"
    assert feature["geometry"] is geometry
    assert feature["properties"] == {"id": "1000001", "risk_score": 42}


def test_risk_point_weight():
    feature = risk_point_feature({"risk_score": 42, "geometry": square()})

    assert feature["properties"] == {"risk_score": 42, "weight": 0.42}
    assert feature["geometry"]["type"] == "Point"
    assert len(feature["geometry"]["coordinates"]) == 2


def test_emit_geojson_one_point_per_building():
    records = [{"risk_score": s, "geometry": square(s, s)} for s in (0, 50, 100)]

    buildings, points = emit_geojson(records)

    assert buildings["type"] == points["type"] == "FeatureCollection"
    assert len(buildings["features"]) == len(points["features"]) == 3
    assert [f["properties"]["weight"] for f in points["features"]] == [0.0, 0.5, 1.0]
