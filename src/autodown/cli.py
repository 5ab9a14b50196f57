"""Command-line interface for autodown."""

from __future__ import annotations

import argparse
from dataclasses import replace
from pathlib import Path

from autodown import __version__ as AUTODOWN_VERSION
from autodown.adapters.kubernetes import KubectlClient
from autodown.config import RunConfig, load_config
from autodown.core.workload import SUPPORTED_KINDS, WorkloadKind, kind_by_name
from autodown.errors import ConfigError
from autodown.scanner import run_once


def _parse_kind(value: str) -> WorkloadKind:
    try:
        return kind_by_name(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(str(exc)) from exc


def _parse_namespace(value: str) -> str:
    name = value.strip()
    if not name:
        raise argparse.ArgumentTypeError("namespace must not be blank")
    return name


def _resolve_config(args: argparse.Namespace) -> RunConfig:
    config = load_config()
    overrides: dict = {}
    if args.dry_run:
        overrides["dry_run"] = True
    if args.namespace:
        overrides["namespaces"] = tuple(dict.fromkeys(args.namespace))
    if args.kind:
        overrides["kinds"] = tuple(dict.fromkeys(args.kind))
    if args.out:
        overrides["out_dir"] = Path(args.out)
    return replace(config, **overrides) if overrides else config


def cmd_run(args: argparse.Namespace) -> int:
    config = _resolve_config(args)
    client = KubectlClient(kubectl=config.kubectl)
    return run_once(client, config)


def _add_run_arguments(parser: argparse.ArgumentParser, *, nested: bool = False) -> None:
    # flags given before the subcommand must survive the subparser defaults
    default = argparse.SUPPRESS if nested else None
    parser.add_argument(
        "--dry-run",
        action="store_true",
        default=default,
        help="Report decisions without scaling anything (default: AUTODOWN_DRY_RUN)",
    )
    parser.add_argument(
        "--namespace",
        action="append",
        type=_parse_namespace,
        default=default,
        help="Only scan this namespace; repeatable (default: AUTODOWN_NAMESPACES, else all)",
    )
    parser.add_argument(
        "--kind",
        action="append",
        type=_parse_kind,
        default=default,
        help=f"Only scan this workload kind; repeatable (default: {', '.join(k.kind for k in SUPPORTED_KINDS)})",
    )
    parser.add_argument(
        "--out",
        default=default,
        help="Directory for decision_trace_latest.jsonl and autodown_latest.json",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="autodown",
        description="Scale idle Deployments and StatefulSets down to zero replicas.",
    )
    parser.add_argument("--version", action="version", version=f"autodown {AUTODOWN_VERSION}")
    _add_run_arguments(parser)
    parser.set_defaults(func=cmd_run)

    sub = parser.add_subparsers(dest="command")
    run = sub.add_parser("run", help="Run one scan over all namespaces (default command)")
    _add_run_arguments(run, nested=True)
    run.set_defaults(func=cmd_run)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        return args.func(args)
    except ConfigError as exc:
        parser.error(str(exc))


if __name__ == "__main__":
    raise SystemExit(main())
