import datetime


def to_date(value) -> datetime.date:
    """Calendar date of a date or datetime (aware datetimes are read in UTC)."""
    if isinstance(value, datetime.datetime):
        if value.tzinfo is not None:
            value = value.astimezone(datetime.timezone.utc)
        return value.date()
    return value


def naive_utc(value: datetime.datetime) -> datetime.datetime:
    """Timestamps are stored without tzinfo, in UTC."""
    if type(value) is datetime.date:
        return datetime.datetime.combine(value, datetime.time())
    if value.tzinfo is not None:
        value = value.astimezone(datetime.timezone.utc).replace(tzinfo=None)
    return value


def add_days(day: datetime.date, days: int) -> datetime.date:
    return day + datetime.timedelta(days=days)
