from datetime import datetime, timezone
from typing import Optional

def iso(dt: Optional[datetime]) -> Optional[str]:
    """JSON-safe datetime (naive DB values are UTC)."""
    if not dt:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.isoformat()

def parse_datetime(raw) -> Optional[datetime]:
    """
    Parse an ISO string or a browser datetime-local value ("2025-03-01T18:30")
    into a naive UTC datetime. Blank input clears the value.

    Raises ValueError on anything else.
    """
    if raw is None:
        return None
    value = str(raw).strip()
    if not value:
        return None

    if value.endswith("Z"):
        value = value[:-1] + "+00:00"

    dt = datetime.fromisoformat(value)

    # Treat naive input as UTC, store naive UTC like the rest of the DB
    if dt.tzinfo is not None:
        dt = dt.astimezone(timezone.utc).replace(tzinfo=None)
    return dt
