from __future__ import annotations

import os
import re
import tempfile
from collections.abc import Iterable, Iterator
from contextlib import contextmanager
from pathlib import Path

from clippy_lintcheck.errors import ArtifactError, ConfigError
from clippy_lintcheck.process import CommandRunner, require_success
from clippy_lintcheck.settings import RunnerSettings

CRATES_HEADER = "[crates]"

# Lines the diff added whose first character after the marker starts a word.
# Excludes the "+++ b/<path>" header and removed/context lines.
_ADDED_ENTRY_RE = re.compile(r"^\+\w+")


def _git_pathspec(settings: RunnerSettings, name: str) -> str:
    config = settings.config_path(name)
    try:
        return config.relative_to(settings.repo_root).as_posix()
    except ValueError as e:
        raise ConfigError(
            f"ci mode needs config_dir inside the git checkout: {config} is not under "
            f"{settings.repo_root}",
            details={"config": str(config), "repo_root": str(settings.repo_root)},
        ) from e


def git_diff(settings: RunnerSettings, name: str, *, runner: CommandRunner) -> str:
    argv = ["git", "diff", settings.base_ref, "--", _git_pathspec(settings, name)]
    result = require_success(runner.run(argv, cwd=settings.repo_root))
    return result.stdout


def added_crate_lines(diff_text: str | Iterable[str]) -> list[str]:
    lines = diff_text.splitlines() if isinstance(diff_text, str) else diff_text
    return [line[1:].rstrip("\r\n") for line in lines if _ADDED_ENTRY_RE.match(line)]


def render_crates_config(lines: Iterable[str]) -> str:
    out = [CRATES_HEADER]
    out.extend(lines)
    return "\n".join(out) + "\n"


@contextmanager
def temp_config(
    settings: RunnerSettings,
    name: str,
    *,
    runner: CommandRunner,
) -> Iterator[Path]:
    """Yield a temporary crates config holding only the entries added since ``base_ref``.

    The file lives for the duration of the ``with`` block and is removed afterwards.
    """

    text = render_crates_config(added_crate_lines(git_diff(settings, name, runner=runner)))
    try:
        fd, raw_path = tempfile.mkstemp(prefix=f"{name}-", suffix=".toml")
    except OSError as e:
        raise ArtifactError(f"failed to create tempfile: {e}") from e
    path = Path(raw_path)
    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="\n") as f:
            f.write(text)
    except OSError as e:
        path.unlink(missing_ok=True)
        raise ArtifactError(f"couldn't write to tempfile {path}: {e}") from e

    try:
        yield path
    finally:
        path.unlink(missing_ok=True)
