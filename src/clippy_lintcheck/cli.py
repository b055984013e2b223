#!/usr/bin/env python
from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Any

from clippy_lintcheck.errors import ArtifactError, LintcheckError
from clippy_lintcheck.modes import MODE_CHOICES, Mode, parse_mode
from clippy_lintcheck.process import CommandRunner, SubprocessRunner
from clippy_lintcheck.runner import RunOutcome, execute
from clippy_lintcheck.settings import DEFAULT_BASE_REF, load_settings


def _enable_console_backslashreplace(stream: Any) -> None:
    reconfigure = getattr(stream, "reconfigure", None)
    if not callable(reconfigure):
        return
    try:
        if str(getattr(stream, "errors", "")).lower() == "backslashreplace":
            return
        reconfigure(errors="backslashreplace")
    except Exception:
        return


def _configure_console_output() -> None:
    _enable_console_backslashreplace(sys.stdout)
    _enable_console_backslashreplace(sys.stderr)


def _mode_arg(value: str) -> Mode:
    try:
        return parse_mode(value)
    except LintcheckError as e:
        raise argparse.ArgumentTypeError(str(e)) from e


def _write_json(path: Path, obj: object) -> None:
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(obj, indent=2, ensure_ascii=False) + "\n", encoding="utf-8")
    except OSError as e:
        raise ArtifactError(
            f"couldn't write summary {path}: {e}", details={"path": str(path)}
        ) from e


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="clippy-lintcheck",
        description="Run the clippy-lintcheck tool on the configurations.",
    )
    parser.add_argument(
        "--mode",
        required=True,
        type=_mode_arg,
        metavar="{" + ",".join(MODE_CHOICES) + "}",
        help='Check all configuration files. Available options: "all", "passes", '
        '"integration", "ci".',
    )
    parser.add_argument(
        "--repo-root",
        type=Path,
        default=None,
        help="Directory holding rust-clippy/, config/ and logs/ (default: current directory).",
    )
    parser.add_argument(
        "--settings",
        type=Path,
        default=None,
        help="Optional YAML settings file (default: <repo_root>/lintcheck.yaml if present).",
    )
    parser.add_argument("--clippy-dir", type=Path, help="rust-clippy checkout to run lintcheck in.")
    parser.add_argument("--config-dir", type=Path, help="Directory with passes.toml/integration.toml.")
    parser.add_argument("--logs-dir", type=Path, help="Where copied lintcheck logs are written.")
    parser.add_argument(
        "--base-ref",
        help=f"Reference the ci mode diffs configs against (default: {DEFAULT_BASE_REF}).",
    )
    parser.add_argument(
        "--summary-json",
        type=Path,
        default=None,
        help="Optional path to write a JSON summary of the run.",
    )
    return parser


def _report(outcome: RunOutcome) -> int:
    for result in outcome.results:
        print(
            f"==> {result.label}: lint findings={result.lint_findings} "
            f"ice_free={result.ice_free} log={result.log_path}"
        )
    if outcome.error is None:
        print(f"==> lintcheck {outcome.mode.value}: OK")
        return 0
    print(f"ERROR [{outcome.error.kind}]: {outcome.error}", file=sys.stderr)
    return outcome.error.exit_code


def main(argv: list[str] | None = None, *, runner: CommandRunner | None = None) -> int:
    _configure_console_output()
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        settings = load_settings(
            repo_root=args.repo_root,
            settings_path=args.settings,
            clippy_dir=args.clippy_dir,
            config_dir=args.config_dir,
            logs_dir=args.logs_dir,
            base_ref=args.base_ref,
        )
    except LintcheckError as e:
        print(f"ERROR [{e.kind}]: {e}", file=sys.stderr)
        return e.exit_code

    outcome = execute(args.mode, settings, runner=runner or SubprocessRunner())
    exit_code = _report(outcome)
    if args.summary_json is not None:
        try:
            _write_json(args.summary_json, outcome.to_dict())
        except LintcheckError as e:
            print(f"ERROR [{e.kind}]: {e}", file=sys.stderr)
            return exit_code or e.exit_code
    return exit_code


if __name__ == "__main__":
    raise SystemExit(main())
