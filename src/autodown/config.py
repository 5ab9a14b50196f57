"""Process configuration.

Settings come from the environment first and may be overridden by CLI flags;
the result is passed explicitly to the scanner and actuator.

``AUTODOWN_DRY_RUN``
    boolean; unset or unparseable means live mode.
``AUTODOWN_NAMESPACES``
    optional comma-separated namespace allow-list; a value naming no
    namespace is rejected.
``KUBECTL``
    kubectl binary to run (default ``kubectl``).
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping

from autodown.core.lease import parse_bool
from autodown.core.workload import SUPPORTED_KINDS, WorkloadKind
from autodown.errors import ConfigError

ENV_DRY_RUN = "AUTODOWN_DRY_RUN"
ENV_NAMESPACES = "AUTODOWN_NAMESPACES"
ENV_KUBECTL = "KUBECTL"

DEFAULT_PREFIX = "[autodown] "


@dataclass(frozen=True)
class RunConfig:
    dry_run: bool = False
    kubectl: str = "kubectl"
    prefix: str = DEFAULT_PREFIX
    out_dir: Path | None = None
    namespaces: tuple[str, ...] = ()
    kinds: tuple[WorkloadKind, ...] = SUPPORTED_KINDS


def _parse_csv(value: str | None) -> tuple[str, ...]:
    if not value:
        return ()
    seen: set[str] = set()
    items: list[str] = []
    for raw in value.split(","):
        item = raw.strip()
        if not item or item in seen:
            continue
        seen.add(item)
        items.append(item)
    return tuple(items)


def env_dry_run(environ: Mapping[str, str]) -> bool:
    return parse_bool(environ.get(ENV_DRY_RUN, "")) is True


def load_config(environ: Mapping[str, str] | None = None) -> RunConfig:
    env = os.environ if environ is None else environ
    kubectl = (env.get(ENV_KUBECTL) or "").strip() or "kubectl"
    raw_namespaces = env.get(ENV_NAMESPACES)
    namespaces = _parse_csv(raw_namespaces)
    if raw_namespaces and not namespaces:
        # an allow-list of blanks must not widen the scan to every namespace
        raise ConfigError(f"{ENV_NAMESPACES}='{raw_namespaces}' names no namespace")
    return RunConfig(
        dry_run=env_dry_run(env),
        kubectl=kubectl,
        namespaces=namespaces,
    )
