from datetime import datetime, timezone


def utc_now():
    return datetime.now(timezone.utc)


def normalize_ts(ts):
    """
    Ensure datetime is timezone-aware and in UTC.
    Naive values are taken to be UTC already.
    """
    if ts is None:
        return None
    if ts.tzinfo is None:
        return ts.replace(tzinfo=timezone.utc)
    return ts.astimezone(timezone.utc)


def isoformat(ts):
    ts = normalize_ts(ts)
    return ts.isoformat() if ts is not None else None
