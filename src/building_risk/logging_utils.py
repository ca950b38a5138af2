"""
Logging utilities for the NYC Building Risk Map project.

Scripts call setup_logger() once; library modules only ask for
logging.getLogger(__name__) and inherit whatever the script configured.
"""

import logging
import sys
from datetime import datetime
from typing import Optional

from .paths import LOGS_DIR

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logger(
    name: str,
    log_file: Optional[str] = None,
    level: int = logging.INFO,
    console_output: bool = True,
) -> logging.Logger:
    """
    Set up a logger with file and console handlers.
    
    Args:
        name: Logger name. Pass the package name ('building_risk') to also
              capture messages from the library modules.
        log_file: Name of log file (will be placed in logs/ directory)
                 If None, only console output is configured
        level: Logging level (default INFO)
        console_output: Whether to also log to console (default True)
    
    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)
    logger.setLevel(level)
    
    # Clear existing handlers to avoid duplicates
    logger.handlers.clear()
    
    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=LOG_DATE_FORMAT)
    
    if console_output:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(level)
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)
    
    if log_file:
        LOGS_DIR.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(LOGS_DIR / log_file)
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)
    
    return logger


def get_timestamped_log_filename(base_name: str) -> str:
    """
    Generate a log filename with timestamp.
    
    Args:
        base_name: Base name for the log file (e.g., 'build_risk_map')
    
    Returns:
        Log filename with timestamp (e.g., 'build_risk_map_2025-01-15_143022.log')
    """
    timestamp = datetime.now().strftime("%Y-%m-%d_%H%M%S")
    return f"{base_name}_{timestamp}.log"


def log_dataframe_info(logger: logging.Logger, df, name: str = "DataFrame") -> None:
    """Log row/column counts and memory footprint of a DataFrame."""
    logger.info(f"{name}: {len(df):,} rows, {len(df.columns)} columns")
    logger.info(f"{name} columns: {list(df.columns)}")
    memory_mb = df.memory_usage(deep=True).sum() / 1_000_000
    logger.info(f"{name} memory usage: {memory_mb:.2f} MB")


def log_collection_counts(logger: logging.Logger, document: dict, name: str = "Input") -> None:
    """Log the record count of every list-valued collection in a document."""
    for key, value in document.items():
        if isinstance(value, (list, tuple)):
            logger.info(f"  {name} {key}: {len(value):,} records")


def log_step_start(logger: logging.Logger, step_name: str) -> None:
    """Log the start of a processing step."""
    logger.info("=" * 60)
    logger.info(f"STARTING: {step_name}")
    logger.info("=" * 60)


def log_step_complete(logger: logging.Logger, step_name: str) -> None:
    """Log the completion of a processing step."""
    logger.info("-" * 60)
    logger.info(f"COMPLETED: {step_name}")
    logger.info("-" * 60)
