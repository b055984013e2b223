from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from clippy_lintcheck.checker import (
    ICE_TERMINATOR,
    LINT_MARKER,
    count_lint_findings,
    invoke_checker,
    is_ice_free,
    read_log,
)
from clippy_lintcheck.diffconfig import temp_config
from clippy_lintcheck.errors import LintcheckError, LogAssertionError
from clippy_lintcheck.modes import Mode
from clippy_lintcheck.process import CommandRunner
from clippy_lintcheck.settings import RunnerSettings

PASSES = "passes"
INTEGRATION = "integration"
CI_PREFIX = "ci_"


@dataclass(frozen=True)
class CheckResult:
    label: str
    config_path: Path
    log_path: Path
    lint_findings: int
    ice_free: bool
    lints_allowed: bool

    def to_dict(self) -> dict[str, Any]:
        return {
            "label": self.label,
            "config_path": str(self.config_path),
            "log_path": str(self.log_path),
            "lint_findings": self.lint_findings,
            "ice_free": self.ice_free,
            "lints_allowed": self.lints_allowed,
        }


@dataclass
class RunOutcome:
    mode: Mode
    results: list[CheckResult] = field(default_factory=list)
    error: LintcheckError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def to_dict(self) -> dict[str, Any]:
        error: dict[str, Any] | None = None
        if self.error is not None:
            error = {
                "kind": self.error.kind,
                "exit_code": self.error.exit_code,
                "message": str(self.error),
            }
        return {
            "schema_version": 1,
            "mode": self.mode.value,
            "ok": self.ok,
            "results": [r.to_dict() for r in self.results],
            "error": error,
        }


def _assert_log(
    *,
    label: str,
    config: Path,
    log_path: Path,
    lints_allowed: bool,
) -> CheckResult:
    log = read_log(log_path)
    findings = count_lint_findings(log)
    ice_free = is_ice_free(log)

    violations: list[str] = []
    if not lints_allowed and findings:
        violations.append(f"found {findings} unexpected lint finding(s) ({LINT_MARKER!r})")
    if not ice_free:
        violations.append(f"log does not end with {ICE_TERMINATOR!r} (ICE or truncated log)")
    if violations:
        raise LogAssertionError(
            f"{label}: " + "; ".join(violations) + f"\nlog: {log_path}",
            details={
                "label": label,
                "log": str(log_path),
                "lint_findings": findings,
                "ice_free": ice_free,
            },
        )

    result = CheckResult(
        label=label,
        config_path=config,
        log_path=log_path,
        lint_findings=findings,
        ice_free=ice_free,
        lints_allowed=lints_allowed,
    )
    print(f"    OK: {label} (lint findings: {findings}, ICE-free: {ice_free})")
    return result


def _check(
    settings: RunnerSettings,
    config: Path,
    *,
    runner: CommandRunner,
    lints_allowed: bool,
    output: str | None = None,
) -> CheckResult:
    log_path = invoke_checker(settings, config, output, runner=runner)
    return _assert_log(
        label=output or config.stem,
        config=config,
        log_path=log_path,
        lints_allowed=lints_allowed,
    )


def check_passes(settings: RunnerSettings, *, runner: CommandRunner) -> CheckResult:
    return _check(settings, settings.config_path(PASSES), runner=runner, lints_allowed=False)


def check_integration(settings: RunnerSettings, *, runner: CommandRunner) -> CheckResult:
    return _check(settings, settings.config_path(INTEGRATION), runner=runner, lints_allowed=True)


def _check_ci_into(
    results: list[CheckResult],
    settings: RunnerSettings,
    *,
    runner: CommandRunner,
) -> None:
    for name, lints_allowed in ((PASSES, False), (INTEGRATION, True)):
        with temp_config(settings, name, runner=runner) as config:
            results.append(
                _check(
                    settings,
                    config,
                    runner=runner,
                    lints_allowed=lints_allowed,
                    output=f"{CI_PREFIX}{name}",
                )
            )


def check_ci(settings: RunnerSettings, *, runner: CommandRunner) -> list[CheckResult]:
    """Lint-check only the crates added to the passes/integration configs since ``base_ref``."""

    results: list[CheckResult] = []
    _check_ci_into(results, settings, runner=runner)
    return results


def _dispatch(
    results: list[CheckResult],
    mode: Mode,
    settings: RunnerSettings,
    *,
    runner: CommandRunner,
) -> None:
    if mode is Mode.ALL:
        results.append(check_integration(settings, runner=runner))
        results.append(check_passes(settings, runner=runner))
    elif mode is Mode.PASSES:
        results.append(check_passes(settings, runner=runner))
    elif mode is Mode.INTEGRATION:
        results.append(check_integration(settings, runner=runner))
    elif mode is Mode.CI:
        _check_ci_into(results, settings, runner=runner)
    else:
        raise ValueError(f"Unhandled mode: {mode!r}")


def run_mode(mode: Mode, settings: RunnerSettings, *, runner: CommandRunner) -> list[CheckResult]:
    results: list[CheckResult] = []
    _dispatch(results, mode, settings, runner=runner)
    return results


def execute(mode: Mode, settings: RunnerSettings, *, runner: CommandRunner) -> RunOutcome:
    """Like :func:`run_mode`, but report failures on the returned outcome instead of raising."""

    outcome = RunOutcome(mode=mode)
    try:
        _dispatch(outcome.results, mode, settings, runner=runner)
    except LintcheckError as e:
        outcome.error = e
    return outcome
