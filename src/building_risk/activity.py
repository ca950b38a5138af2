"""
Recent activity feed per building.

The feed merges the latest DOB violations, HPD violations and 311 complaints
into one list of {source, date, description} entries, newest first.
"""

import re
from itertools import chain
from typing import Iterable, Mapping

PER_SOURCE_LIMIT = 3
FEED_LIMIT = 8
DEDUP_PREFIX_LENGTH = 20

NO_DATE = "N/A"
DEFAULT_VIOLATION_DESCRIPTION = "Violation"
DEFAULT_COMPLAINT_DESCRIPTION = "Complaint"

SOURCE_DOB = "DOB"
SOURCE_HPD = "HPD"
SOURCE_311 = "311"

# "(12) ..." numbering in DOB descriptions
DOB_CODE_PREFIX = re.compile(r"^\(\d+\)")
# "§ 27-2005 ADM CODE:" / "§ 27-2017.1 HMC:" citations in HPD descriptions
HPD_CITATION = re.compile(r"§\s*[\d.-]+(\s*ADM CODE)?(\s*HMC)?:\s*", re.IGNORECASE)
COMPACT_DATE = re.compile(r"(\d{4})(\d{2})(\d{2})")
ISO_DATE = re.compile(r"\d{4}-\d{2}-\d{2}")


def _text(value) -> str:
    if value is None:
        return ""
    return str(value).strip()


def _iso_date(value) -> str:
    """
    Date part of an ISO timestamp ('2024-03-01T00:00:00.000' -> '2024-03-01').

    Anything that is not a YYYY-MM-DD date becomes NO_DATE.
    """
    date = _text(value).split("T")[0]
    return date if ISO_DATE.fullmatch(date) else NO_DATE


def dob_date(value) -> str:
    """DOB issue dates are YYYYMMDD; ISO timestamps are accepted too."""
    text = _text(value)
    match = COMPACT_DATE.fullmatch(text)
    if match:
        return "-".join(match.groups())
    return _iso_date(text)


def clean_dob_description(value) -> str:
    text = DOB_CODE_PREFIX.sub("", _text(value)).strip()
    return text or DEFAULT_VIOLATION_DESCRIPTION


def clean_hpd_description(value) -> str:
    text = HPD_CITATION.sub("", _text(value), count=1).strip()
    return text or DEFAULT_VIOLATION_DESCRIPTION


def complaint_description(record: Mapping) -> str:
    parts = [_text(record.get("complaint_type")), _text(record.get("descriptor"))]
    text = ": ".join(p for p in parts if p)
    return text or DEFAULT_COMPLAINT_DESCRIPTION


def _latest(records: Iterable[Mapping], date_field: str, parse_date, limit: int) -> list:
    # Ranked on the parsed date, so missing or unparsable dates sort last
    ordered = sorted(
        records,
        key=lambda r: _sort_key_for(parse_date(r.get(date_field))),
        reverse=True,
    )
    return ordered[:limit]


def recent_dob(violations, limit: int = PER_SOURCE_LIMIT) -> list[dict]:
    return [
        {
            "source": SOURCE_DOB,
            "date": dob_date(v.get("issue_date")),
            "description": clean_dob_description(v.get("description")),
        }
        for v in _latest(violations, "issue_date", dob_date, limit)
    ]


def recent_hpd(violations, limit: int = PER_SOURCE_LIMIT) -> list[dict]:
    return [
        {
            "source": SOURCE_HPD,
            "date": _iso_date(v.get("novissueddate")),
            "description": clean_hpd_description(v.get("novdescription")),
        }
        for v in _latest(violations, "novissueddate", _iso_date, limit)
    ]


def recent_complaints(complaints, limit: int = PER_SOURCE_LIMIT) -> list[dict]:
    return [
        {
            "source": SOURCE_311,
            "date": _iso_date(c.get("created_date")),
            "description": complaint_description(c),
        }
        for c in _latest(complaints, "created_date", _iso_date, limit)
    ]


def _sort_key_for(date: str) -> str:
    return "" if date == NO_DATE else date


def _sort_date(entry: Mapping) -> str:
    return _sort_key_for(entry["date"])


def dedupe_activity(entries: Iterable[Mapping], limit: int = FEED_LIMIT) -> list[dict]:
    """
    Sort entries newest first, drop repeats, keep at most `limit`.

    Two entries are repeats when they share a date and the first 20
    characters of their description; the earlier one wins. The sort is
    stable, so entries on the same date keep their incoming order.
    Applying this to its own output returns the same list.
    """
    ordered = sorted(entries, key=_sort_date, reverse=True)
    seen = set()
    feed = []
    for entry in ordered:
        key = (entry["date"], entry["description"][:DEDUP_PREFIX_LENGTH])
        if key in seen:
            continue
        seen.add(key)
        feed.append(dict(entry))
    return feed[:limit]


def aggregate_recent_activity(dob_violations, hpd_violations, complaints) -> list[dict]:
    """Build the recent activity feed for one building."""
    merged = chain(
        recent_dob(dob_violations),
        recent_hpd(hpd_violations),
        recent_complaints(complaints),
    )
    return dedupe_activity(merged)
