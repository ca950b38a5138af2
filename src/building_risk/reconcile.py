"""
Reconcile the raw NYC datasets into scored building records.

Pipeline, per run:
1. Validate and canonicalize the raw document (records.py)
2. Build join indices once (indexing.py)
3. For every footprint with a usable polygon: join violations and
   complaints, resolve owner / address / borough, score, build the
   activity feed
4. Emit the building polygon and risk point FeatureCollections

Each building depends only on its own footprint and the read-only indices,
so the per-footprint step can be split across workers by partitioning the
footprint list.
"""

import logging
from datetime import date
from pathlib import Path
from typing import Any, Mapping, Optional

import pandas as pd

from .activity import aggregate_recent_activity
from .geo import emit_geojson, has_valid_geometry
from .indexing import build_dataset_indices
from .io_utils import read_json, write_geojson
from .joining import (
    count_residential_evictions,
    join_building,
    lookup_land_use,
    parse_height,
    parse_year,
    resolve_address,
    resolve_borough,
    resolve_zipcode,
)
from .logging_utils import log_collection_counts, log_step_complete, log_step_start
from .owners import resolve_owner
from .paths import BUILDINGS_FILENAME, PUBLIC_DATA_DIR, RISK_POINTS_FILENAME, get_raw_data_path
from .records import normalize_document
from .scoring import building_age, calculate_risk_score, count_hpd_classes

logger = logging.getLogger(__name__)

SCORE_BANDS = [0, 1, 25, 50, 75, 101]
SCORE_BAND_LABELS = ["0", "1-24", "25-49", "50-74", "75-100"]


def footprint_geometry(footprint: Mapping) -> Optional[dict]:
    """Socrata serves footprint shapes as the_geom; plain GeoJSON uses geometry."""
    return footprint.get("the_geom") or footprint.get("geometry")


def build_building_record(
    footprint: Mapping,
    indices: Mapping[str, Mapping],
    current_year: int,
) -> Optional[dict]:
    """
    Build the scored record for one footprint.

    Returns:
        Record dict (properties plus 'geometry'), or None when the footprint
        has no usable polygon
    """
    geometry = footprint_geometry(footprint)
    if not has_valid_geometry(geometry):
        return None

    bin_ = footprint.get("bin")
    bbl = footprint.get("base_bbl")
    joined = join_building(footprint, indices)
    dob, hpd, complaints = joined["dob"], joined["hpd"], joined["complaints"]

    pluto = lookup_land_use(footprint, indices)
    construct_year = parse_year(footprint.get("cnstrct_yr"))
    class_counts = count_hpd_classes(hpd)
    risk_score = calculate_risk_score(
        class_counts,
        dob_count=len(dob),
        complaint_count=len(complaints),
        age=building_age(construct_year, current_year),
    )

    return {
        "id": bin_ or bbl,
        "bin": bin_,
        "risk_score": risk_score,
        "dob_violation_count": len(dob),
        "hpd_violation_count": len(hpd),
        "complaint_311_count": len(complaints),
        "eviction_count": count_residential_evictions(joined["evictions"]),
        "height": parse_height(footprint.get("heightroof")),
        "construct_year": construct_year,
        "address": resolve_address(bin_, bbl, dob, complaints),
        "owner_name": resolve_owner(
            bin_,
            bbl,
            indices["pluto_by_bbl"],
            indices["registrations_by_bin"],
            indices["contacts_by_registration"],
        ),
        "zipcode": resolve_zipcode(pluto),
        "borough": resolve_borough(pluto, dob),
        "bbl": bbl,
        "hpd_class_a": class_counts["A"],
        "hpd_class_b": class_counts["B"],
        "hpd_class_c": class_counts["C"],
        "hpd_class_i": class_counts["I"],
        "recent_violations": aggregate_recent_activity(dob, hpd, complaints),
        "geometry": geometry,
    }


def build_building_records(document: Any, current_year: Optional[int] = None) -> list[dict]:
    """
    Canonicalize, index and score every footprint in the raw document.

    Raises:
        InvalidInputError: If the document is structurally invalid
    """
    if current_year is None:
        current_year = date.today().year

    collections = normalize_document(document)
    log_collection_counts(logger, collections)

    logger.info("Building join indices...")
    indices = build_dataset_indices(collections)

    records = []
    skipped = 0
    for footprint in collections["footprints"]:
        record = build_building_record(footprint, indices, current_year)
        if record is None:
            skipped += 1
            continue
        records.append(record)

    logger.info(f"Scored {len(records):,} buildings")
    if skipped:
        logger.warning(f"Skipped {skipped:,} footprints without usable polygon geometry")
    return records


def reconcile(document: Any, current_year: Optional[int] = None) -> tuple[dict, dict]:
    """
    Turn the raw document into (building polygons, risk points) FeatureCollections.

    Args:
        document: Parsed raw_data.json
        current_year: Reference year for building age (default: this year)
    """
    records = build_building_records(document, current_year=current_year)
    return emit_geojson(records)


def summarize_buildings(buildings: Mapping) -> pd.DataFrame:
    """Flat table of building properties, without geometry or activity feed."""
    rows = [f["properties"] for f in buildings["features"]]
    df = pd.DataFrame.from_records(rows)
    if df.empty:
        return df
    return df.drop(columns=["recent_violations"], errors="ignore")


def log_summary(df: pd.DataFrame) -> None:
    """Log score distribution and borough breakdown for a run."""
    logger.info("=" * 60)
    logger.info("RISK MAP SUMMARY")
    logger.info("=" * 60)
    if df.empty:
        logger.info("No buildings scored.")
        return

    logger.info(f"Buildings: {len(df):,}")
    logger.info(f"Risk score: mean={df['risk_score'].mean():.1f}, max={df['risk_score'].max()}")

    bands = pd.cut(df["risk_score"], bins=SCORE_BANDS, labels=SCORE_BAND_LABELS, right=False)
    logger.info("Score bands:")
    for band, count in bands.value_counts(sort=False).items():
        logger.info(f"  {band}: {count:,}")

    logger.info("Buildings by borough:")
    borough_counts = df["borough"].replace("", "Unknown").value_counts()
    for borough, count in borough_counts.items():
        logger.info(f"  {borough}: {count:,}")


def run(
    input_path: Optional[Path] = None,
    output_dir: Optional[Path] = None,
    current_year: Optional[int] = None,
) -> tuple[dict, dict]:
    """
    Read raw_data.json, reconcile, write buildings.geojson and risk_points.geojson.

    Nothing is written unless reconciliation succeeds for the whole document.
    """
    input_path = Path(input_path) if input_path else get_raw_data_path()
    output_dir = Path(output_dir) if output_dir else PUBLIC_DATA_DIR

    log_step_start(logger, "Build Risk Map")
    logger.info(f"Loading raw data from {input_path}")
    document = read_json(input_path)

    buildings, points = reconcile(document, current_year=current_year)

    buildings_path = output_dir / BUILDINGS_FILENAME
    points_path = output_dir / RISK_POINTS_FILENAME
    write_geojson(buildings, buildings_path)
    write_geojson(points, points_path)
    logger.info(f"Saved {len(buildings['features']):,} buildings to {buildings_path}")
    logger.info(f"Saved {len(points['features']):,} risk points to {points_path}")

    log_summary(summarize_buildings(buildings))
    log_step_complete(logger, "Build Risk Map")
    return buildings, points
