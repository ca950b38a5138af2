"""
GeoJSON output for the risk map.

Two FeatureCollections are produced: building polygons carrying every
scored property, and one point per building for the heatmap layer.

The heatmap point is the plain average of the outer ring's vertices
(first ring of the first polygon, holes and extra parts ignored). That is
not the area centroid and drifts for concave footprints; it is only meant
for density rendering.
"""

import math
from typing import Iterable, Mapping, Optional

import numpy as np

POLYGON_TYPES = ("Polygon", "MultiPolygon")
MIN_RING_VERTICES = 3


def _is_position(value) -> bool:
    if not isinstance(value, (list, tuple)) or len(value) < 2:
        return False
    return all(
        isinstance(c, (int, float)) and not isinstance(c, bool) and math.isfinite(c)
        for c in value[:2]
    )


def outer_ring(geometry: Optional[Mapping]) -> Optional[list]:
    """
    Return the first ring of a Polygon / MultiPolygon, or None if the
    geometry has no usable outer ring.
    """
    if not isinstance(geometry, Mapping) or geometry.get("type") not in POLYGON_TYPES:
        return None
    coordinates = geometry.get("coordinates")
    try:
        if geometry["type"] == "MultiPolygon":
            ring = coordinates[0][0]
        else:
            ring = coordinates[0]
    except (IndexError, KeyError, TypeError):
        return None
    if not isinstance(ring, (list, tuple)) or len(ring) < MIN_RING_VERTICES:
        return None
    if not all(_is_position(p) for p in ring):
        return None
    return list(ring)


def has_valid_geometry(geometry: Optional[Mapping]) -> bool:
    return outer_ring(geometry) is not None


def ring_centroid(ring) -> list[float]:
    """Arithmetic mean of the ring's vertex coordinates."""
    vertices = np.asarray([p[:2] for p in ring], dtype=float)
    center = vertices.mean(axis=0)
    return [float(center[0]), float(center[1])]


def building_feature(record: Mapping) -> dict:
    """Polygon feature for one building record; geometry passed through as is."""
    properties = {k: v for k, v in record.items() if k != "geometry"}
    return {
        "type": "Feature",
        "properties": properties,
        "geometry": record["geometry"],
    }


def risk_point_feature(record: Mapping) -> dict:
    """Heatmap point for one building record, weighted by risk_score / 100."""
    risk_score = record["risk_score"]
    return {
        "type": "Feature",
        "properties": {
            "risk_score": risk_score,
            "weight": risk_score / 100,
        },
        "geometry": {
            "type": "Point",
            "coordinates": ring_centroid(outer_ring(record["geometry"])),
        },
    }


def feature_collection(features: Iterable[dict]) -> dict:
    return {"type": "FeatureCollection", "features": list(features)}


def emit_geojson(records) -> tuple[dict, dict]:
    """
    Build the building polygon and risk point collections.

    Records must already have passed the geometry check.
    """
    buildings = feature_collection(building_feature(r) for r in records)
    points = feature_collection(risk_point_feature(r) for r in records)
    return buildings, points
