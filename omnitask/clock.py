from __future__ import annotations

from datetime import datetime


def local_now() -> datetime:
    """Naive wall-clock time in the process' local zone (honours ``TZ``)."""
    return datetime.now()
