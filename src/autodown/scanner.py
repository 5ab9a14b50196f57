from __future__ import annotations

from datetime import datetime, timezone
from typing import Protocol

from autodown.audit.reporter import RunReporter
from autodown.config import RunConfig
from autodown.core.decision import REASON_SCALE_FAILED, Decision, Outcome, evaluate
from autodown.core.workload import Workload, WorkloadKind
from autodown.errors import ActuationError, AutodownError
from autodown.safety.actuator import ScaleActuator


class ClusterClient(Protocol):
    def list_namespaces(self) -> list[str]: ...

    def list_workloads(self, kind: WorkloadKind, namespace: str) -> list[Workload]: ...

    def scale_to_zero(self, kind: WorkloadKind, namespace: str, name: str) -> None: ...


def scan(
    client: ClusterClient,
    now: datetime,
    config: RunConfig,
    reporter: RunReporter,
) -> dict:
    """Evaluate every workload of every supported kind in every namespace.

    ``now`` is sampled once by the caller so all decisions in a run agree.
    Listing and scaling failures raise and stop the scan; a failed scale is
    recorded as an ERROR entry first. Workloads scaled before the failure
    stay scaled. Invalid lease values are recorded as ERROR decisions and
    the scan moves on.
    """
    actuator = ScaleActuator(client=client, dry_run=config.dry_run)
    allowed = set(config.namespaces)

    for namespace in client.list_namespaces():
        if allowed and namespace not in allowed:
            continue
        reporter.namespace(namespace)
        for kind in config.kinds:
            for workload in client.list_workloads(kind, namespace):
                decision = evaluate(workload, now)
                if decision.outcome is Outcome.ACT:
                    try:
                        result = actuator.apply(workload)
                    except ActuationError as exc:
                        reporter.record(workload, Decision.error(REASON_SCALE_FAILED, detail=str(exc)))
                        raise
                    reporter.applied(result)
                reporter.record(workload, decision)

    return reporter.report()


def run_once(
    client: ClusterClient,
    config: RunConfig,
    *,
    now: datetime | None = None,
    reporter: RunReporter | None = None,
) -> int:
    """One full pass; returns the process exit code."""
    if now is None:
        now = datetime.now(timezone.utc)
    if reporter is None:
        reporter = RunReporter(
            prefix=config.prefix,
            dry_run=config.dry_run,
            out_dir=config.out_dir,
            started_at=now,
        )
    if config.dry_run:
        reporter.log("dry run: no workloads will be modified")
    try:
        scan(client, now, config, reporter)
    except AutodownError as exc:
        reporter.fail(exc)
    return reporter.finish()
