import time
from datetime import datetime

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


def now_timestamp() -> int:
    """Current time as whole seconds since the epoch (UTC)."""
    return int(time.time())


def format_timestamp_local(timestamp: int) -> str:
    """Render an epoch timestamp in the local timezone for display."""
    try:
        return datetime.fromtimestamp(timestamp).strftime(TIMESTAMP_FORMAT)
    except (OverflowError, OSError, ValueError):
        return f"Invalid timestamp: {timestamp}"
