"""
Build the building risk map layers from the raw NYC data download.

This script:
1. Loads public/data/raw_data.json
2. Joins DOB/HPD violations, 311 complaints, PLUTO and HPD registrations
   onto each building footprint
3. Resolves owner, address and borough, and scores each building 0-100
4. Saves the building polygons and heatmap points as GeoJSON
5. Saves a flat per-building score table

Input: public/data/raw_data.json
Output:
  - public/data/buildings.geojson
  - public/data/risk_points.geojson
  - data/processed/building_scores.csv
"""

import sys
from pathlib import Path

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).resolve().parent.parent.parent / "src"))

from building_risk.paths import PROCESSED_DIR, ensure_dirs_exist
from building_risk.io_utils import write_csv
from building_risk.logging_utils import (
    setup_logger,
    get_timestamped_log_filename,
    log_dataframe_info,
)
from building_risk.reconcile import run, summarize_buildings


def build_risk_map():
    """Reconcile the raw data into the map layers."""

    log_file = get_timestamped_log_filename("build_risk_map")
    logger = setup_logger("building_risk", log_file=log_file)

    ensure_dirs_exist()

    buildings, points = run()

    scores = summarize_buildings(buildings)
    if not scores.empty:
        log_dataframe_info(logger, scores, "Building scores")
        output_file = PROCESSED_DIR / "building_scores.csv"
        logger.info(f"Saving score table to {output_file}...")
        write_csv(scores, output_file)

    return buildings, points


if __name__ == "__main__":
    buildings, points = build_risk_map()
    print(f"\n✅ Saved {len(buildings['features']):,} buildings and {len(points['features']):,} risk points!")
