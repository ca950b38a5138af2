"""
Identifier handling for NYC building datasets.

Buildings are identified two ways across the source datasets:

- BIN: the 7-digit DOB Building Identification Number (footprints, DOB
  violations, HPD registrations, evictions).
- BBL: the 10-character Borough-Block-Lot tax lot id, built as one borough
  digit + 5-digit zero-padded block + 4-digit zero-padded lot (footprints,
  PLUTO, 311, and HPD violations via their boroid/block/lot fragments).

Every identifier is canonicalized to a string here, once, at ingestion.
Downstream code only ever compares canonical strings.
"""

import math
import re
from typing import Optional

BOROUGH_CODES = ("1", "2", "3", "4", "5")
BLOCK_WIDTH = 5
LOT_WIDTH = 4
BBL_LENGTH = 1 + BLOCK_WIDTH + LOT_WIDTH

# DOB uses an all-zero BIN as a placeholder for "no building"
PLACEHOLDER_BIN = "0000000"

_DIGITS = re.compile(r"[0-9]+")
_ZERO_FRACTION = re.compile(r"0*")


def as_digits(value) -> Optional[str]:
    """
    Coerce an identifier fragment to a string of ASCII digits.

    Accepts non-negative ints, integral floats (ids that went through a
    pandas float column) and digit strings, optionally with surrounding
    whitespace or an all-zero decimal part ("1000050023.00000000").
    Anything else, including NaN and negative numbers, returns None.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return str(value) if value >= 0 else None
    if isinstance(value, float):
        if not math.isfinite(value) or value < 0 or not value.is_integer():
            return None
        return str(int(value))

    text = str(value).strip()
    if "." in text:
        whole, fraction = text.split(".", 1)
        if not _ZERO_FRACTION.fullmatch(fraction):
            return None
        text = whole
    if not _DIGITS.fullmatch(text):
        return None
    return text


def build_bbl(borough, block, lot) -> Optional[str]:
    """
    Build the 10-character BBL from borough, block and lot fragments.

    Returns None when any fragment is missing, non-numeric, or too wide for
    its slot. A fragment is never truncated to fit.

    >>> build_bbl(1, 5, 23)
    '1000050023'
    """
    boro = as_digits(borough)
    block_digits = as_digits(block)
    lot_digits = as_digits(lot)
    if boro is None or block_digits is None or lot_digits is None:
        return None
    if boro not in BOROUGH_CODES:
        return None
    if len(block_digits) > BLOCK_WIDTH or len(lot_digits) > LOT_WIDTH:
        return None
    return f"{boro}{block_digits.zfill(BLOCK_WIDTH)}{lot_digits.zfill(LOT_WIDTH)}"


def canonical_bbl(value) -> Optional[str]:
    """Canonicalize an already-composed BBL (string or number) to 10 digits."""
    digits = as_digits(value)
    if digits is None or len(digits) != BBL_LENGTH or digits[0] not in BOROUGH_CODES:
        return None
    return digits


def canonical_bin(value) -> Optional[str]:
    """Canonicalize a BIN to its digit string; placeholders become None."""
    digits = as_digits(value)
    if not digits or set(digits) == {"0"}:
        return None
    return digits


def canonical_id(value) -> Optional[str]:
    """Canonicalize an opaque id (e.g. an HPD registration id) to a trimmed string."""
    digits = as_digits(value)
    if digits is not None:
        return digits
    if value is None or isinstance(value, float):
        return None
    text = str(value).strip()
    return text or None
