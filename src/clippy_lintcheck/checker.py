from __future__ import annotations

import shutil
from pathlib import Path

from clippy_lintcheck.errors import ArtifactError, ConfigError
from clippy_lintcheck.process import CommandRunner, require_success
from clippy_lintcheck.settings import RunnerSettings

LINT_MARKER = "clippy::"
ICE_TERMINATOR = "ICEs:\n"


def invoke_checker(
    settings: RunnerSettings,
    config: Path,
    output: str | None = None,
    *,
    runner: CommandRunner,
) -> Path:
    """Run the lintcheck tool on ``config`` and copy its log into ``settings.logs_dir``.

    Returns the path of the copied log (``<output or config stem>_logs.txt``).
    """

    if not config.is_file():
        raise ConfigError(
            f"Configuration file not found: {config}", details={"config": str(config)}
        )

    print(f"==> lintcheck: {output or config.stem} ({config})")
    result = require_success(
        runner.run(
            list(settings.lintcheck_command),
            cwd=settings.clippy_dir,
            env={settings.config_env_var: str(config)},
        )
    )
    print(f"lintcheck stdout: {result.stdout}")

    source = settings.tool_log_path(config)
    dest = settings.local_log_path(output or config.stem)
    if not source.is_file():
        raise ArtifactError(
            f"couldn't copy log file: lintcheck log not found at {source}",
            details={"source": str(source), "dest": str(dest)},
        )
    try:
        dest.parent.mkdir(parents=True, exist_ok=True)
        shutil.copyfile(source, dest)
    except OSError as e:
        raise ArtifactError(
            f"couldn't copy log file {source} -> {dest}: {e}",
            details={"source": str(source), "dest": str(dest)},
        ) from e
    print(f"    log: {dest}")
    return dest


def read_log(path: Path) -> str:
    try:
        with path.open("r", encoding="utf-8", errors="replace", newline="") as f:
            return f.read()
    except OSError as e:
        raise ArtifactError(f"couldn't read log file {path}: {e}", details={"log": str(path)}) from e


def count_lint_findings(log: str) -> int:
    return log.count(LINT_MARKER)


def is_ice_free(log: str) -> bool:
    return log.endswith(ICE_TERMINATOR)
