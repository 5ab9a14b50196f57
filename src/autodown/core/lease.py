"""Lease policy parsing.

Annotations are parsed once, when a workload snapshot is built, into a typed
``LeasePolicy``. Parse failures are kept on the policy instead of being raised,
so the evaluator can report them as a per-workload error without aborting the
scan.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import timedelta
from decimal import Decimal, InvalidOperation
from typing import Mapping

from autodown.errors import LeaseParseError

ANNOTATION_LEASE = "net.guoyk.autodown/lease"
ANNOTATION_DISABLED = "net.guoyk.autodown/disabled"

_DURATION_PART_RE = re.compile(r"(?P<number>\d+(?:\.\d*)?|\.\d+)(?P<unit>ns|us|µs|μs|ms|s|m|h)")

_UNIT_MICROSECONDS = {
    "ns": Decimal("0.001"),
    "us": Decimal(1),
    "µs": Decimal(1),
    "μs": Decimal(1),
    "ms": Decimal(1_000),
    "s": Decimal(1_000_000),
    "m": Decimal(60_000_000),
    "h": Decimal(3_600_000_000),
}

_TRUE_VALUES = {"1", "t", "T", "TRUE", "true", "True"}
_FALSE_VALUES = {"0", "f", "F", "FALSE", "false", "False"}


def parse_duration(value: str) -> timedelta:
    """Parse a duration such as ``30m``, ``2h``, ``1h30m`` or ``1.5h``.

    Surrounding whitespace is not trimmed; `` 10m `` is invalid.
    """
    if not value:
        raise LeaseParseError(f"invalid duration: '{value}' (use e.g. 30m or 2h)")
    if value == "0":
        return timedelta(0)

    total = Decimal(0)
    pos = 0
    while pos < len(value):
        match = _DURATION_PART_RE.match(value, pos)
        if match is None:
            raise LeaseParseError(f"invalid duration: '{value}' (use e.g. 30m or 2h)")
        try:
            number = Decimal(match.group("number"))
        except InvalidOperation as exc:
            raise LeaseParseError(f"invalid duration: '{value}' (use e.g. 30m or 2h)") from exc
        total += number * _UNIT_MICROSECONDS[match.group("unit")]
        pos = match.end()

    try:
        return timedelta(microseconds=int(total.to_integral_value()))
    except OverflowError as exc:
        raise LeaseParseError(f"invalid duration: '{value}' (out of range)") from exc


def parse_bool(value: str) -> bool | None:
    """Return the boolean spelled by ``value``, or None when it is not one."""
    text = value.strip()
    if text in _TRUE_VALUES:
        return True
    if text in _FALSE_VALUES:
        return False
    return None


@dataclass(frozen=True)
class LeasePolicy:
    raw_lease: str = ""
    lease: timedelta | None = None
    lease_error: str | None = None
    disabled: bool = False

    @property
    def declared(self) -> bool:
        return bool(self.raw_lease)


def parse_lease_policy(annotations: Mapping[str, str] | None) -> LeasePolicy:
    if not annotations:
        return LeasePolicy()

    # only an absent or empty value means "no lease"; whitespace is an invalid lease
    raw_lease = str(annotations.get(ANNOTATION_LEASE) or "")
    disabled = parse_bool(str(annotations.get(ANNOTATION_DISABLED) or "")) is True

    lease: timedelta | None = None
    lease_error: str | None = None
    if raw_lease:
        try:
            lease = parse_duration(raw_lease)
        except LeaseParseError as exc:
            lease_error = str(exc)

    return LeasePolicy(
        raw_lease=raw_lease,
        lease=lease,
        lease_error=lease_error,
        disabled=disabled,
    )
