# --- test import path bootstrap (src/ layout) ---
import sys as _sys
from pathlib import Path as _Path

_SRC = _Path(__file__).resolve().parents[1] / "src"
if _SRC.is_dir():
    _p = str(_SRC)
    if _p not in _sys.path:
        _sys.path.insert(0, _p)
# --- end bootstrap ---

import sys
import tempfile
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

from autodown.core.lease import ANNOTATION_DISABLED, ANNOTATION_LEASE
from autodown.core.workload import DEPLOYMENT, Condition, Workload, WorkloadKind
from autodown.errors import ActuationError, EnumerationError

NOW = datetime(2024, 5, 1, 12, 0, 0, tzinfo=timezone.utc)


class FakeCluster:
    """In-memory cluster client that records every call made against it."""

    def __init__(self, workloads=None, namespaces=None):
        self.workloads = list(workloads or [])
        if namespaces is None:
            namespaces = list(dict.fromkeys(w.namespace for w in self.workloads))
        self.namespaces = list(namespaces)
        self.calls = []
        self.scaled = []
        self.fail_list_namespaces = False
        self.fail_list_workloads = set()
        self.fail_scale = set()

    def list_namespaces(self):
        self.calls.append(("list_namespaces",))
        if self.fail_list_namespaces:
            raise EnumerationError("kubectl get namespaces -o json failed (rc=1): connection refused", rc=1)
        return list(self.namespaces)

    def list_workloads(self, kind: WorkloadKind, namespace: str):
        self.calls.append(("list_workloads", kind.kind, namespace))
        if (kind.kind, namespace) in self.fail_list_workloads:
            raise EnumerationError(
                f"kubectl -n {namespace} get {kind.resource} -o json failed (rc=1): connection refused",
                rc=1,
            )
        return [w for w in self.workloads if w.kind == kind and w.namespace == namespace]

    def scale_to_zero(self, kind: WorkloadKind, namespace: str, name: str):
        self.calls.append(("scale_to_zero", kind.kind, namespace, name))
        if name in self.fail_scale:
            raise ActuationError(f"kubectl -n {namespace} patch {kind.resource}/{name} failed (rc=1): forbidden", rc=1)
        self.scaled.append((kind.kind, namespace, name))


def make_workload(
    name: str = "api",
    *,
    kind: WorkloadKind = DEPLOYMENT,
    namespace: str = "default",
    lease: str | None = "1h",
    disabled: str | None = None,
    idle: timedelta | None = timedelta(hours=2),
    replicas: int = 3,
    annotations: dict | None = None,
) -> Workload:
    if annotations is None:
        annotations = {}
        if lease is not None:
            annotations[ANNOTATION_LEASE] = lease
        if disabled is not None:
            annotations[ANNOTATION_DISABLED] = disabled
    conditions = ()
    if idle is not None:
        conditions = (
            Condition(
                type="Available",
                status="True",
                last_transition_time=NOW - idle - timedelta(days=1),
                last_update_time=NOW - idle,
            ),
            Condition(type="Progressing", status="True", last_transition_time=NOW - idle - timedelta(hours=3)),
        )
    return Workload(
        kind=kind,
        namespace=namespace,
        name=name,
        annotations=annotations,
        conditions=conditions,
        replicas=replicas,
    )


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def workload_factory():
    return make_workload


@pytest.fixture
def fake_cluster():
    return FakeCluster


@pytest.fixture
def autodown_path() -> Path:
    repo_root = Path(__file__).resolve().parents[1]
    local = repo_root / ".venv" / "bin" / "autodown"
    if local.exists():
        return local

    # Use a repo-local shim when local venv entrypoint is unavailable.
    shim_dir = Path(tempfile.mkdtemp(prefix="autodown-shim-"))
    shim = shim_dir / "autodown"
    shim.write_text(
        f"""#!/usr/bin/env bash
set -Eeuo pipefail
export PYTHONPATH=\"{repo_root}/src${{PYTHONPATH:+:${{PYTHONPATH}}}}\"
exec \"{sys.executable}\" -c 'import sys; from autodown.cli import main; raise SystemExit(main())' \"$@\"
""",
        encoding="utf-8",
    )
    shim.chmod(0o755)
    return shim
