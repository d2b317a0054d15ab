import datetime as dt


def utcnow() -> dt.datetime:
    """Datetime naive en UTC, igual a como se guarda en la base."""
    return dt.datetime.now(dt.timezone.utc).replace(tzinfo=None)
