"""Lease evaluation: turn a workload snapshot into a scale decision."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum

from autodown.core.activity import resolve_activity
from autodown.core.workload import Workload

REASON_NO_ANNOTATIONS = "no annotations"
REASON_NO_LEASE = "no lease declared"
REASON_DISABLED = "disabled"
REASON_INVALID_LEASE = "invalid lease value"
REASON_ALREADY_ZERO = "already at zero"
REASON_ACTIVITY_UNKNOWN = "activity unknown"
REASON_NOT_EXPIRED = "lease not expired"
REASON_EXPIRED = "lease expired"
REASON_SCALE_FAILED = "scale to 0 failed"


class Outcome(str, Enum):
    SKIP = "SKIP"
    ACT = "ACT"
    ERROR = "ERROR"


@dataclass(frozen=True)
class Decision:
    outcome: Outcome
    reason: str
    detail: str | None = None
    activity_at: datetime | None = None
    idle_seconds: float | None = None

    @classmethod
    def skip(cls, reason: str, **kwargs) -> "Decision":
        return cls(outcome=Outcome.SKIP, reason=reason, **kwargs)

    @classmethod
    def error(cls, reason: str, detail: str | None = None) -> "Decision":
        return cls(outcome=Outcome.ERROR, reason=reason, detail=detail)

    def to_dict(self) -> dict:
        return {
            "outcome": self.outcome.value,
            "reason": self.reason,
            "detail": self.detail,
            "activity_at": self.activity_at.isoformat(timespec="seconds") if self.activity_at else None,
            "idle_seconds": self.idle_seconds,
        }


def evaluate(workload: Workload, now: datetime) -> Decision:
    """Decide whether ``workload`` should be scaled to zero at ``now``.

    Rules are checked in a fixed order and the first match wins:

    1. no annotations at all -> skip
    2. no lease annotation -> skip
    3. disabled annotation truthy -> skip
    4. lease annotation unparseable -> error (recorded, scan continues)
    5. already at zero replicas -> skip
    6. no activity timestamp -> skip (never treated as expired)
    7. idle for less than the lease -> skip
    8. otherwise -> act

    The expiry comparison is half-open: an idle time exactly equal to the lease
    is eligible.
    """
    policy = workload.policy
    if not workload.annotations:
        return Decision.skip(REASON_NO_ANNOTATIONS)
    if not policy.declared:
        return Decision.skip(REASON_NO_LEASE)
    if policy.disabled:
        return Decision.skip(REASON_DISABLED)
    if policy.lease is None:
        return Decision.error(REASON_INVALID_LEASE, detail=policy.lease_error)
    if workload.replicas == 0:
        return Decision.skip(REASON_ALREADY_ZERO)

    activity_at = resolve_activity(workload.conditions)
    if activity_at is None:
        return Decision.skip(REASON_ACTIVITY_UNKNOWN)

    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    elapsed = now - activity_at
    idle_seconds = elapsed.total_seconds()
    if elapsed < policy.lease:
        return Decision.skip(REASON_NOT_EXPIRED, activity_at=activity_at, idle_seconds=idle_seconds)
    return Decision(
        outcome=Outcome.ACT,
        reason=REASON_EXPIRED,
        activity_at=activity_at,
        idle_seconds=idle_seconds,
    )
