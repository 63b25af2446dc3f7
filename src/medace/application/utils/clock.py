"""Time helpers. All engine timestamps are epoch milliseconds."""

import time
from datetime import date, datetime, timezone


def now_ms() -> int:
    return int(time.time() * 1000)


def utc_date(epoch_ms: int) -> date:
    """Calendar date (UTC) of an epoch-millisecond timestamp."""
    return datetime.fromtimestamp(epoch_ms / 1000, tz=timezone.utc).date()
