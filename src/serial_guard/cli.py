"""Command-line entrypoint: on-demand checks, inspection, watching and status."""

from __future__ import annotations

import argparse
import json
import sys
import time
from dataclasses import asdict
from pathlib import Path
from typing import TextIO

from serial_guard.app import SerialGuard, create_guard
from serial_guard.config import CliOverrides

DEFAULT_POLL_INTERVAL_MS = 500


def build_arg_parser() -> argparse.ArgumentParser:
    """Build argument parser for guard configuration and subcommands."""
    parser = argparse.ArgumentParser(prog="serial-guard")
    parser.add_argument("--repo-root", required=False, default=".")
    parser.add_argument("--data-dir", required=False, default=None)
    parser.add_argument("--cooldown-ms", type=int, required=False, default=None)
    parser.add_argument("--quiet-period-ms", type=int, required=False, default=None)
    subparsers = parser.add_subparsers(dest="command", required=True)

    check = subparsers.add_parser("check", help="check every class of the given files")
    check.add_argument("paths", nargs="+")

    inspect = subparsers.add_parser("inspect", help="list qualifying classes")
    inspect.add_argument("paths", nargs="*")

    watch = subparsers.add_parser("watch", help="poll for edits and notify")
    watch.add_argument(
        "--interval-ms", type=int, required=False, default=DEFAULT_POLL_INTERVAL_MS
    )
    watch.add_argument("--iterations", type=int, required=False, default=None)
    watch.add_argument(
        "--notifications", choices=("true", "false"), required=False, default=None
    )

    subparsers.add_parser("status", help="print effective configuration and counters")
    return parser


def main(argv: list[str] | None = None, out_stream: TextIO | None = None) -> int:
    """Entrypoint for the serial-guard command."""
    parser = build_arg_parser()
    args = parser.parse_args(argv)
    out = out_stream if out_stream is not None else sys.stdout
    notifications_enabled: bool | None = None
    if getattr(args, "notifications", None) == "true":
        notifications_enabled = True
    if getattr(args, "notifications", None) == "false":
        notifications_enabled = False
    overrides = CliOverrides(
        data_dir=Path(args.data_dir).resolve() if args.data_dir is not None else None,
        notifications_enabled=notifications_enabled,
        cooldown_ms=args.cooldown_ms,
        quiet_period_ms=args.quiet_period_ms,
    )
    guard = create_guard(repo_root=args.repo_root, cli_overrides=overrides)
    try:
        for warning in guard.config.warnings:
            sys.stderr.write(f"warning: {warning}\n")
        if args.command == "check":
            return _run_check(guard, args.paths, out)
        if args.command == "inspect":
            return _run_inspect(guard, args.paths, out)
        if args.command == "watch":
            return _run_watch(guard, args.interval_ms, args.iterations, out)
        guard.prime()
        _emit(out, guard.status())
        return 0
    finally:
        guard.close()


def _run_check(guard: SerialGuard, paths: list[str], out: TextIO) -> int:
    guard.prime()
    exit_code = 0
    for path in paths:
        reports = guard.check(path)
        if reports is None:
            exit_code = 1
            _emit(out, {"path": path, "ok": False, "classes": []})
            continue
        _emit(out, {"path": path, "ok": True, "classes": [asdict(report) for report in reports]})
    return exit_code


def _run_inspect(guard: SerialGuard, paths: list[str], out: TextIO) -> int:
    guard.prime()
    for warning in guard.inspect(paths or None):
        _emit(out, asdict(warning))
    return 0


def _run_watch(
    guard: SerialGuard, interval_ms: int, iterations: int | None, out: TextIO
) -> int:
    if interval_ms < 1:
        raise SystemExit("--interval-ms must be >= 1")
    guard.prime()
    completed = 0
    try:
        while iterations is None or completed < iterations:
            time.sleep(interval_ms / 1000.0)
            for event in guard.poll():
                _emit(out, {"event": event.kind.value, "path": event.path})
            completed += 1
    except KeyboardInterrupt:
        pass
    _emit(out, guard.status())
    return 0


def _emit(out: TextIO, payload: dict[str, object]) -> None:
    out.write(f"{json.dumps(payload, sort_keys=True)}\n")
    out.flush()


if __name__ == "__main__":
    raise SystemExit(main())
