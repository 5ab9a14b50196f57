from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from types import MappingProxyType
from typing import Mapping

from autodown.core.lease import LeasePolicy, parse_lease_policy


@dataclass(frozen=True)
class WorkloadKind:
    """A scalable workload kind: API kind, kubectl resource name and trace label."""

    kind: str
    resource: str
    label: str


DEPLOYMENT = WorkloadKind(kind="Deployment", resource="deployments", label="deployment")
STATEFULSET = WorkloadKind(kind="StatefulSet", resource="statefulsets", label="statefulset")

SUPPORTED_KINDS: tuple[WorkloadKind, ...] = (DEPLOYMENT, STATEFULSET)


def kind_by_name(name: str) -> WorkloadKind:
    key = name.strip().lower()
    for kind in SUPPORTED_KINDS:
        if key in {kind.kind.lower(), kind.resource, kind.label}:
            return kind
    raise ValueError(f"unsupported workload kind: '{name}'")


@dataclass(frozen=True)
class Condition:
    type: str
    status: str = ""
    last_transition_time: datetime | None = None
    last_update_time: datetime | None = None


@dataclass(frozen=True)
class Workload:
    kind: WorkloadKind
    namespace: str
    name: str
    annotations: Mapping[str, str] = field(default_factory=dict)
    conditions: tuple[Condition, ...] = ()
    replicas: int = 1
    policy: LeasePolicy = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "annotations", MappingProxyType(dict(self.annotations or {})))
        object.__setattr__(self, "conditions", tuple(self.conditions))
        object.__setattr__(self, "policy", parse_lease_policy(self.annotations))

    @property
    def ref(self) -> str:
        return f"{self.kind.resource}/{self.name}"


def parse_k8s_timestamp(value: object) -> datetime | None:
    """Parse an RFC 3339 timestamp as written by the API server; None when unset."""
    if value is None:
        return None
    s = str(value).strip()
    if not s:
        return None
    if s.endswith("Z"):
        s = s[:-1] + "+00:00"
    try:
        dt = datetime.fromisoformat(s)
    except ValueError:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def _parse_replicas(spec: dict) -> int:
    raw = spec.get("replicas")
    if raw is None:
        # the API server defaults an omitted replica count to 1
        return 1
    try:
        replicas = int(raw)
    except (TypeError, ValueError):
        return 1
    return max(replicas, 0)


def _parse_conditions(status: dict) -> tuple[Condition, ...]:
    conditions: list[Condition] = []
    for item in status.get("conditions") or []:
        if not isinstance(item, dict):
            continue
        conditions.append(
            Condition(
                type=str(item.get("type") or ""),
                status=str(item.get("status") or ""),
                last_transition_time=parse_k8s_timestamp(item.get("lastTransitionTime")),
                last_update_time=parse_k8s_timestamp(item.get("lastUpdateTime")),
            )
        )
    return tuple(conditions)


def workload_from_manifest(kind: WorkloadKind, item: dict, namespace: str | None = None) -> Workload:
    """Build a snapshot from one item of ``kubectl get <resource> -o json``."""
    metadata = item.get("metadata")
    if not isinstance(metadata, dict):
        metadata = {}
    spec = item.get("spec")
    if not isinstance(spec, dict):
        spec = {}
    status = item.get("status")
    if not isinstance(status, dict):
        status = {}
    annotations = metadata.get("annotations")
    if not isinstance(annotations, dict):
        annotations = {}

    return Workload(
        kind=kind,
        namespace=str(metadata.get("namespace") or namespace or ""),
        name=str(metadata.get("name") or ""),
        annotations={str(k): str(v) for k, v in annotations.items() if v is not None},
        conditions=_parse_conditions(status),
        replicas=_parse_replicas(spec),
    )
