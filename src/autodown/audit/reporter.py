"""Run reporting: human trace lines, JSONL decision events and the run report."""

from __future__ import annotations

import json
import sys
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import TextIO

from autodown.audit.decision_trace import DEFAULT_FILENAME, DecisionTraceWriter
from autodown.core.decision import REASON_INVALID_LEASE, Decision, Outcome
from autodown.core.workload import Workload
from autodown.errors import ReportError
from autodown.safety.actuator import ApplyResult

REPORT_SCHEMA = "autodown_run.v0"
REPORT_LATEST_NAME = "autodown_latest.json"


def format_decision_line(workload: Workload, decision: Decision) -> str:
    head = f"{workload.kind.label}: {workload.name}"
    if decision.outcome is Outcome.ACT:
        return f"{head}, scaled to 0"
    if decision.outcome is Outcome.ERROR:
        text = f"{head}, {decision.reason}"
        if decision.reason == REASON_INVALID_LEASE:
            text = f"{text} '{workload.policy.raw_lease}'"
        if decision.detail:
            text = f"{text}: {decision.detail}"
        return text
    return f"{head}, {decision.reason}"


def _write_json_report(path: Path, payload: dict) -> None:
    path.write_text(
        json.dumps(payload, indent=2, ensure_ascii=False, sort_keys=True) + "\n",
        encoding="utf-8",
    )


@dataclass
class RunReporter:
    """Collects per-workload outcomes and decides the process exit status.

    Every trace line is printed with ``prefix``. When ``out_dir`` is set, each
    decision is also appended to a JSONL decision trace and ``finish`` writes a
    JSON run report next to it. Failures writing either file raise
    ``ReportError``, which ends the run like any other fatal error.
    """

    prefix: str = "[autodown] "
    dry_run: bool = False
    out_dir: Path | None = None
    started_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    stream: TextIO | None = None
    entries: list[dict] = field(default_factory=list)
    actions: list[dict] = field(default_factory=list)
    namespaces: list[str] = field(default_factory=list)
    fatal_error: str | None = None
    _trace: DecisionTraceWriter | None = field(default=None, init=False, repr=False)
    _trace_started: bool = field(default=False, init=False, repr=False)

    def __post_init__(self) -> None:
        if self.out_dir is not None:
            self.out_dir = Path(self.out_dir)
            self._trace = DecisionTraceWriter(self.out_dir / DEFAULT_FILENAME)

    def log(self, line: str) -> None:
        print(f"{self.prefix}{line}", file=self.stream if self.stream is not None else sys.stdout)

    def namespace(self, name: str) -> None:
        self.namespaces.append(name)
        self.log(f"-- namespace: {name}")

    def _emit_trace(self, entry: dict) -> None:
        if self._trace is None:
            return
        try:
            if not self._trace_started:
                self._trace.reset()
                self._trace_started = True
            self._trace.emit(entry)
        except OSError as exc:
            raise ReportError(f"cannot write decision trace {self._trace.path}: {exc}") from exc

    def record(self, workload: Workload, decision: Decision) -> dict:
        line = format_decision_line(workload, decision)
        entry = {
            "kind": workload.kind.kind,
            "namespace": workload.namespace,
            "name": workload.name,
            "line": line,
            **decision.to_dict(),
        }
        self.entries.append(entry)
        self.log(line)
        self._emit_trace(entry)
        return entry

    def applied(self, result: ApplyResult) -> None:
        self.actions.append(result.to_dict())

    def fail(self, exc: BaseException) -> None:
        self.fatal_error = str(exc) or exc.__class__.__name__

    def counts(self) -> dict[str, int]:
        counts = {outcome.value: 0 for outcome in Outcome}
        for entry in self.entries:
            counts[entry["outcome"]] += 1
        return counts

    def report(self) -> dict:
        return {
            "schema": REPORT_SCHEMA,
            "started_at": self.started_at.isoformat(timespec="seconds"),
            "dry_run": self.dry_run,
            "namespaces": list(self.namespaces),
            "counts": self.counts(),
            "ok": self.fatal_error is None,
            "error": self.fatal_error,
            "decisions": list(self.entries),
            "actions": list(self.actions),
        }

    def _write_report(self) -> None:
        if self.out_dir is None:
            return
        try:
            self.out_dir.mkdir(parents=True, exist_ok=True)
            payload = self.report()
            ts = self.started_at.strftime("%Y%m%d_%H%M%S")
            _write_json_report(self.out_dir / f"autodown_{ts}.json", payload)
            _write_json_report(self.out_dir / REPORT_LATEST_NAME, payload)
        except OSError as exc:
            raise ReportError(f"cannot write run report in {self.out_dir}: {exc}") from exc

    def finish(self) -> int:
        try:
            self._write_report()
        except ReportError as exc:
            # an earlier fatal error stays the one reported
            if self.fatal_error is None:
                self.fail(exc)
        if self.fatal_error is not None:
            self.log(f"exited with error: {self.fatal_error}")
            return 1
        self.log("exited")
        return 0
