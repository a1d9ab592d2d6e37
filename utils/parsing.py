"""Tolerant parsing helpers for tags, keys and timestamps read from requests and storage."""

import pandas as pd


# Split comma separated tags ("cozy, Story,cozy") into a clean list
def parse_tags(raw):
    """Parse a comma separated tag string into lower-cased, deduplicated tags."""
    if raw is None:
        return []
    if isinstance(raw, (list, tuple, set)):
        return normalize_keys(raw)
    return normalize_keys(str(raw).split(","))


def normalize_keys(values):
    """Trim, lower-case and deduplicate keys while keeping first-seen order."""
    seen = set()
    keys = []
    for value in values or []:
        if value is None:
            continue
        key = str(value).strip().lower()
        if not key or key in seen:
            continue
        seen.add(key)
        keys.append(key)
    return keys


def parse_timestamp(value):
    """Return a UTC pandas Timestamp, or None when the value can't be parsed."""
    if value is None or value == "":
        return None
    try:
        ts = pd.to_datetime(value, utc=True, errors="coerce")
    except (TypeError, ValueError):
        return None
    if ts is None or pd.isna(ts):
        return None
    return ts


def parse_bool(value, default=False):
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in {"1", "true", "yes", "on"}
