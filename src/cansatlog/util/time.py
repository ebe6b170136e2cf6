from __future__ import annotations

import time
from datetime import datetime, timezone


def format_timestamp(t_unix: float | None = None) -> str:
    """HH:MM:SS (UTC) for `t_unix`, or for now when omitted."""
    if t_unix is None:
        t_unix = time.time()
    dt = datetime.fromtimestamp(t_unix, tz=timezone.utc)
    return dt.strftime("%H:%M:%S")
