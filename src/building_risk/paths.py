"""
Path configuration for the NYC Building Risk Map project.

This module provides standardized paths to the raw download, the published
GeoJSON outputs and the log directory, so scripts and the pipeline agree on
where files live.
"""

from pathlib import Path

# Project root directory (parent of src/)
PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent

# Data directories
DATA_DIR = PROJECT_ROOT / "data"
RAW_DIR = DATA_DIR / "raw"
PROCESSED_DIR = DATA_DIR / "processed"

# Published outputs consumed by the map front end
PUBLIC_DIR = PROJECT_ROOT / "public"
PUBLIC_DATA_DIR = PUBLIC_DIR / "data"

# Logs
LOGS_DIR = PROJECT_ROOT / "logs"

# Output file names
RAW_DATA_FILENAME = "raw_data.json"
BUILDINGS_FILENAME = "buildings.geojson"
RISK_POINTS_FILENAME = "risk_points.geojson"


def ensure_dirs_exist() -> None:
    """Create all project directories if they don't exist."""
    dirs = [
        RAW_DIR,
        PROCESSED_DIR,
        PUBLIC_DATA_DIR,
        LOGS_DIR,
    ]
    for d in dirs:
        d.mkdir(parents=True, exist_ok=True)


def get_raw_data_path() -> Path:
    """Return path to the combined raw download document."""
    return PUBLIC_DATA_DIR / RAW_DATA_FILENAME


def get_raw_manifest_path() -> Path:
    """Return path to the raw data manifest file."""
    return RAW_DIR / "manifest.json"


if __name__ == "__main__":
    # Print all paths for verification
    print(f"PROJECT_ROOT: {PROJECT_ROOT}")
    print(f"DATA_DIR: {DATA_DIR}")
    print(f"RAW_DIR: {RAW_DIR}")
    print(f"PROCESSED_DIR: {PROCESSED_DIR}")
    print(f"PUBLIC_DATA_DIR: {PUBLIC_DATA_DIR}")
    print(f"LOGS_DIR: {LOGS_DIR}")
