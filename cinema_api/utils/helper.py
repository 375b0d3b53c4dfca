import datetime


def to_utc(dt: datetime.datetime) -> datetime.datetime:
    # If dt is None, return as-is
    if dt is None:
        return dt
    # If dt is naive, attach UTC offset
    if dt.tzinfo is None:
        return dt.replace(tzinfo=datetime.timezone.utc)
    return dt.astimezone(datetime.timezone.utc)


def to_naive_utc(dt: datetime.datetime) -> datetime.datetime:
    """Columns store naive UTC; aware inputs are converted, naive ones are taken as UTC."""
    if dt is None:
        return dt
    return to_utc(dt).replace(tzinfo=None)


def utcnow() -> datetime.datetime:
    return datetime.datetime.now(datetime.timezone.utc).replace(tzinfo=None)
