"""
Download the raw NYC Open Data collections for the building risk map.

Datasets (all from data.cityofnewyork.us via the Socrata API):
- DOB Violations (3h2n-5cm9)
- HPD Housing Maintenance Code Violations (wvxf-dwi5)
- 311 Service Requests (erm2-nwe9)
- Building Footprints (5zhs-2jue)
- MapPLUTO (64uk-42ks)
- HPD Registrations (tesw-yqqr) and Registration Contacts (feu5-w2e2)
- Evictions (6z8x-wfk4)

Output: public/data/raw_data.json
"""

import os
import sys
from pathlib import Path

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).resolve().parent.parent.parent / "src"))

from dotenv import load_dotenv
from sodapy import Socrata

from building_risk.acquisition import DATASETS, DOMAIN, fetch_raw_document, source_url
from building_risk.paths import get_raw_data_path, ensure_dirs_exist
from building_risk.io_utils import write_json, update_manifest, calculate_file_hash
from building_risk.logging_utils import (
    setup_logger,
    get_timestamped_log_filename,
    log_collection_counts,
    log_step_start,
    log_step_complete,
)


def fetch_nyc_data():
    """Download all raw collections and save them as one document."""

    # Load environment variables
    load_dotenv()
    app_token = os.getenv("SOCRATA_APP_TOKEN")

    # Setup logging for the script and the library modules
    log_file = get_timestamped_log_filename("fetch_nyc_data")
    logger = setup_logger("building_risk", log_file=log_file)

    log_step_start(logger, "Fetch NYC Open Data")

    ensure_dirs_exist()

    logger.info(f"Connecting to NYC Open Data (token: {'set' if app_token else 'not set'})")
    client = Socrata(DOMAIN, app_token, timeout=300)
    try:
        document = fetch_raw_document(client)
    finally:
        client.close()

    log_collection_counts(logger, document, "Fetched")

    filepath = get_raw_data_path()
    logger.info(f"Saving to {filepath}...")
    write_json(document, filepath)

    file_hash = calculate_file_hash(filepath)
    file_size_mb = filepath.stat().st_size / 1_000_000
    for name, dataset_id in DATASETS.items():
        update_manifest(
            filename=filepath.name,
            source_url=source_url(dataset_id),
            row_count=len(document[name]),
            file_hash=file_hash,
            notes=f"Collection '{name}'. File size: {file_size_mb:.1f}MB",
        )

    log_step_complete(logger, "Fetch NYC Open Data")
    return document


if __name__ == "__main__":
    document = fetch_nyc_data()
    print(f"\n✅ Downloaded {len(document['footprints']):,} building footprints!")
    print(f"   DOB violations: {len(document['dob_violations']):,}")
    print(f"   HPD violations: {len(document['hpd_violations']):,}")
    print(f"   311 complaints: {len(document['three_one_one']):,}")
