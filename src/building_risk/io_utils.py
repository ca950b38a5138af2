"""
I/O utilities for the NYC Building Risk Map project.

This module provides standardized functions for reading and writing the raw
download document, the GeoJSON outputs and tabular summaries, plus the raw
download manifest.
"""

import json
import hashlib
from datetime import datetime
from pathlib import Path
from typing import Any, Optional

import pandas as pd

from .paths import get_raw_manifest_path


def read_json(filepath: Path) -> Any:
    """
    Read a JSON document.
    
    Args:
        filepath: Path to JSON file
    
    Returns:
        Parsed document
    
    Raises:
        FileNotFoundError: If the file does not exist
    """
    filepath = Path(filepath)
    if not filepath.exists():
        raise FileNotFoundError(f"No input document found at {filepath}")
    with open(filepath, "r", encoding="utf-8") as f:
        return json.load(f)


def write_json(data: Any, filepath: Path, indent: Optional[int] = 2) -> None:
    """
    Write a JSON document, creating parent directories as needed.
    
    Args:
        data: JSON-serializable object
        filepath: Output path
        indent: Indentation (default 2, None for compact output)
    """
    filepath = Path(filepath)
    filepath.parent.mkdir(parents=True, exist_ok=True)
    with open(filepath, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=indent, ensure_ascii=False)


def write_geojson(feature_collection: dict, filepath: Path) -> None:
    """
    Write a GeoJSON FeatureCollection.
    
    Nested properties (lists of activity entries) are kept as JSON arrays,
    which is why this writes the mapping directly instead of going through a
    GIS driver.
    
    Args:
        feature_collection: Mapping with type 'FeatureCollection' and a features list
        filepath: Output path
    """
    if feature_collection.get("type") != "FeatureCollection":
        raise ValueError("write_geojson expects a FeatureCollection")
    write_json(feature_collection, filepath)


def write_csv(df: pd.DataFrame, filepath: Path, index: bool = False, **kwargs) -> None:
    """
    Write a DataFrame to CSV with standard settings.
    
    Args:
        df: DataFrame to write
        filepath: Output path
        index: Whether to include index (default False)
        **kwargs: Additional arguments passed to df.to_csv
    """
    filepath = Path(filepath)
    filepath.parent.mkdir(parents=True, exist_ok=True)
    df.to_csv(filepath, index=index, **kwargs)


def calculate_file_hash(filepath: Path, algorithm: str = "md5") -> str:
    """
    Calculate hash of a file for verification.
    
    Args:
        filepath: Path to file
        algorithm: Hash algorithm (default 'md5')
    
    Returns:
        Hex digest of file hash
    """
    hash_func = hashlib.new(algorithm)
    with open(filepath, "rb") as f:
        for chunk in iter(lambda: f.read(8192), b""):
            hash_func.update(chunk)
    return hash_func.hexdigest()


def update_manifest(
    filename: str,
    source_url: str,
    row_count: int,
    file_hash: Optional[str] = None,
    notes: Optional[str] = None,
    manifest_path: Optional[Path] = None,
) -> None:
    """
    Update the raw data manifest with download information.
    
    Args:
        filename: Name of downloaded file
        source_url: URL data was downloaded from
        row_count: Number of records
        file_hash: MD5 hash of file (optional)
        notes: Additional notes (optional)
        manifest_path: Override for the manifest location (optional)
    """
    manifest_path = Path(manifest_path) if manifest_path else get_raw_manifest_path()
    manifest = read_manifest(manifest_path)
    
    entry = {
        "filename": filename,
        "source_url": source_url,
        "download_date": datetime.now().isoformat(),
        "row_count": row_count,
    }
    if file_hash:
        entry["file_hash"] = file_hash
    if notes:
        entry["notes"] = notes
    
    manifest["downloads"].append(entry)
    manifest["last_updated"] = datetime.now().isoformat()
    
    write_json(manifest, manifest_path)


def read_manifest(manifest_path: Optional[Path] = None) -> dict[str, Any]:
    """
    Read the raw data manifest.
    
    Returns:
        Manifest dictionary, with an empty downloads list if none exists yet
    """
    manifest_path = Path(manifest_path) if manifest_path else get_raw_manifest_path()
    if manifest_path.exists():
        with open(manifest_path, "r") as f:
            return json.load(f)
    return {"downloads": []}
