from __future__ import annotations

from datetime import datetime, timezone
from typing import Iterable

from autodown.core.workload import Condition

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def _normalize(ts: datetime | None) -> datetime | None:
    if ts is None:
        return None
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    # zero-valued timestamps (epoch or earlier) count as unset
    if ts <= _EPOCH:
        return None
    return ts


def resolve_activity(conditions: Iterable[Condition]) -> datetime | None:
    """Latest non-zero transition or update time across all conditions.

    Returns None when no condition carries a usable timestamp; callers treat
    that as "activity unknown", not as expired.
    """
    latest: datetime | None = None
    for cond in conditions:
        for raw in (cond.last_transition_time, cond.last_update_time):
            ts = _normalize(raw)
            if ts is not None and (latest is None or ts > latest):
                latest = ts
    return latest
