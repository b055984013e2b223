from clippy_lintcheck.checker import ICE_TERMINATOR, LINT_MARKER, invoke_checker
from clippy_lintcheck.diffconfig import added_crate_lines, render_crates_config, temp_config
from clippy_lintcheck.errors import (
    ArtifactError,
    ConfigError,
    LintcheckError,
    LogAssertionError,
    ProcessError,
)
from clippy_lintcheck.modes import Mode, ModeError, parse_mode
from clippy_lintcheck.process import CommandResult, CommandRunner, SubprocessRunner
from clippy_lintcheck.runner import (
    CheckResult,
    RunOutcome,
    check_ci,
    check_integration,
    check_passes,
    execute,
    run_mode,
)
from clippy_lintcheck.settings import RunnerSettings, load_settings

__all__ = [
    "ArtifactError",
    "CheckResult",
    "CommandResult",
    "CommandRunner",
    "ConfigError",
    "ICE_TERMINATOR",
    "LINT_MARKER",
    "LintcheckError",
    "LogAssertionError",
    "Mode",
    "ModeError",
    "ProcessError",
    "RunOutcome",
    "RunnerSettings",
    "SubprocessRunner",
    "added_crate_lines",
    "check_ci",
    "check_integration",
    "check_passes",
    "execute",
    "invoke_checker",
    "load_settings",
    "parse_mode",
    "render_crates_config",
    "run_mode",
    "temp_config",
]
