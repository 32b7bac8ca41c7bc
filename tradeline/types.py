"""Shared helpers for marketplace records."""

import uuid
from datetime import datetime, timezone
from typing import Optional, Union

from dateutil.parser import parse


def utc_now() -> datetime:
    """Get current UTC timestamp."""
    return datetime.now(timezone.utc)


def new_id() -> str:
    return str(uuid.uuid4())


def parse_datetime(value: Union[str, datetime, None]) -> Optional[datetime]:
    """Parse a timestamp as Postgres/Supabase returns it.

    Datetimes pass through unchanged; naive values are assumed UTC.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        dt = value
    else:
        try:
            dt = parse(str(value))
        except (TypeError, ValueError, OverflowError) as exc:
            raise ValueError(f"Invalid datetime: {value!r}") from exc
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def format_datetime(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None
