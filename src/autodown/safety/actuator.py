from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from autodown.core.workload import Workload, WorkloadKind


class ScaleClient(Protocol):
    def scale_to_zero(self, kind: WorkloadKind, namespace: str, name: str) -> None: ...


@dataclass
class ApplyResult:
    workload: Workload
    applied: bool
    dry_run: bool

    def to_dict(self) -> dict:
        return {
            "kind": self.workload.kind.kind,
            "namespace": self.workload.namespace,
            "name": self.workload.name,
            "applied": self.applied,
            "dry_run": self.dry_run,
        }


@dataclass
class ScaleActuator:
    """Scales eligible workloads to zero replicas.

    In dry-run mode no request reaches the cluster but the result still reports
    the workload as scaled, so traces of dry and live runs line up. Errors from
    the client (``ActuationError``) propagate unchanged and end the run.
    """

    client: ScaleClient
    dry_run: bool = False

    def apply(self, workload: Workload) -> ApplyResult:
        if not self.dry_run:
            self.client.scale_to_zero(workload.kind, workload.namespace, workload.name)
        return ApplyResult(workload=workload, applied=True, dry_run=self.dry_run)
