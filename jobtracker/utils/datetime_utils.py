from datetime import datetime, timezone


def get_now_utc() -> datetime:
    """Get current datetime in UTC"""
    return datetime.now(timezone.utc)


def format_iso_utc(dt: datetime) -> str:
    """Format datetime as ISO string in UTC with millisecond precision and a 'Z' suffix"""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def now_iso() -> str:
    """Current UTC timestamp as used for createdAt/updatedAt"""
    return format_iso_utc(get_now_utc())


def today_iso() -> str:
    """Current UTC calendar date (YYYY-MM-DD)"""
    return get_now_utc().date().isoformat()
