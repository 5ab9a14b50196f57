"""Cluster resource client backed by the kubectl binary."""

from __future__ import annotations

import json
import subprocess

from autodown.core.workload import Workload, WorkloadKind, workload_from_manifest
from autodown.errors import ActuationError, EnumerationError
from autodown.k8s.rbac_diagnostics import forbidden_hint

SCALE_TO_ZERO_PATCH = json.dumps({"spec": {"replicas": 0}}, separators=(",", ":"))


def _run_cmd(argv: list[str], timeout_s: float = 60.0) -> dict:
    """Run command capturing stdout/stderr. Never raises; returns a dict."""
    try:
        cp = subprocess.run(argv, capture_output=True, text=True, timeout=timeout_s)
        return {
            "argv": argv,
            "ok": cp.returncode == 0,
            "rc": cp.returncode,
            "stdout": cp.stdout,
            "stderr": cp.stderr,
            "error": None,
        }
    except FileNotFoundError as e:
        return {
            "argv": argv,
            "ok": False,
            "rc": 127,
            "stdout": "",
            "stderr": str(e),
            "error": "not_found",
        }
    except subprocess.TimeoutExpired as e:
        return {
            "argv": argv,
            "ok": False,
            "rc": 124,
            "stdout": e.stdout or "",
            "stderr": e.stderr or "",
            "error": "timeout",
        }


def _failure_message(res: dict) -> str:
    argv = res.get("argv") or []
    command = " ".join(str(a) for a in argv[1:])
    if res.get("error") == "not_found":
        return f"kubectl not found: {argv[0] if argv else 'kubectl'}"
    if res.get("error") == "timeout":
        return f"kubectl {command} timed out"
    stderr = str(res.get("stderr") or "").strip()
    lines = stderr.splitlines()
    detail = lines[0] if lines else "no output"
    message = f"kubectl {command} failed (rc={res.get('rc')}): {detail}"
    hint = forbidden_hint(stderr)
    if hint:
        message = f"{message}; hint: {hint}"
    return message


class KubectlClient:
    def __init__(self, kubectl: str = "kubectl", timeout_s: float = 60.0) -> None:
        self.kubectl = kubectl
        self.timeout_s = timeout_s

    def _run(self, args: list[str]) -> dict:
        return _run_cmd([self.kubectl, *args], timeout_s=self.timeout_s)

    def _get_json(self, args: list[str]) -> dict:
        res = self._run(args)
        if not res["ok"]:
            raise EnumerationError(
                _failure_message(res),
                argv=res["argv"],
                rc=res["rc"],
                stderr=res["stderr"],
            )
        try:
            payload = json.loads(res["stdout"] or "{}")
        except json.JSONDecodeError as exc:
            raise EnumerationError(
                f"kubectl {' '.join(args)} returned invalid JSON: {exc}",
                argv=res["argv"],
                rc=res["rc"],
            ) from exc
        if not isinstance(payload, dict):
            raise EnumerationError(
                f"kubectl {' '.join(args)} returned a non-object payload",
                argv=res["argv"],
                rc=res["rc"],
            )
        return payload

    def list_namespaces(self) -> list[str]:
        payload = self._get_json(["get", "namespaces", "-o", "json"])
        namespaces: list[str] = []
        for item in payload.get("items") or []:
            if not isinstance(item, dict):
                continue
            metadata = item.get("metadata")
            if not isinstance(metadata, dict):
                continue
            name = metadata.get("name")
            if isinstance(name, str) and name.strip():
                namespaces.append(name.strip())
        return namespaces

    def list_workloads(self, kind: WorkloadKind, namespace: str) -> list[Workload]:
        payload = self._get_json(["-n", namespace, "get", kind.resource, "-o", "json"])
        return [
            workload_from_manifest(kind, item, namespace=namespace)
            for item in payload.get("items") or []
            if isinstance(item, dict)
        ]

    def scale_to_zero(self, kind: WorkloadKind, namespace: str, name: str) -> None:
        res = self._run(
            [
                "-n",
                namespace,
                "patch",
                f"{kind.resource}/{name}",
                "--type",
                "merge",
                "-p",
                SCALE_TO_ZERO_PATCH,
            ]
        )
        if not res["ok"]:
            raise ActuationError(
                _failure_message(res),
                argv=res["argv"],
                rc=res["rc"],
                stderr=res["stderr"],
            )
