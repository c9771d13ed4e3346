from datetime import date, datetime, time, timezone
from typing import Optional, Union


def utcnow() -> datetime:
    """Current UTC time as a naive datetime, the form every timestamp column stores"""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_naive_utc(value: datetime) -> datetime:
    if value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def start_of_day(value: Union[date, datetime]) -> datetime:
    if isinstance(value, datetime):
        return to_naive_utc(value)
    return datetime.combine(value, time.min)


def end_of_day(value: Union[date, datetime]) -> datetime:
    """Inclusive upper bound; a plain date covers the whole day"""
    if isinstance(value, datetime):
        return to_naive_utc(value)
    return datetime.combine(value, time.max)


def iso_day(value: Optional[Union[str, date, datetime]]) -> Optional[str]:
    """Normalize a day bucket returned by the database to YYYY-MM-DD"""
    if value is None:
        return None
    if isinstance(value, (date, datetime)):
        return value.strftime("%Y-%m-%d")
    return str(value)[:10]
