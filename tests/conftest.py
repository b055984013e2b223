from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from pathlib import Path

import pytest

from clippy_lintcheck.process import CommandResult
from clippy_lintcheck.settings import RunnerSettings

CLEAN_LOG = "clippy 0.1.52\n\n\n\nStats:\n\n\nICEs:\n"
LINTS_LOG = (
    "clippy 0.1.52\n\n"
    'target/lintcheck/sources/regex-1.3.2/src/lib.rs:12:1 clippy::needless_return "unneeded return"\n'
    "\n\nStats:\nclippy::needless_return 1\n\n\nICEs:\n"
)
ICE_LOG = "clippy 0.1.52\n\n\n\nStats:\n\n\nICEs:\nregex-1.3.2: thread 'rustc' panicked\n"

PASSES_TOML = "[crates]\nregex = {name = \"regex\", versions = ['1.3.2']}\n"
INTEGRATION_TOML = "[crates]\nserde = {name = \"serde\", versions = ['1.0.110']}\n"


@dataclass
class LintcheckCall:
    argv: list[str]
    cwd: Path
    config: Path
    config_text: str


@dataclass
class FakeRunner:
    """CommandRunner double for the lintcheck tool and ``git diff``.

    Lintcheck calls write ``log_for(config)`` to where the real tool would put its log.
    Git calls answer from ``diffs`` keyed by config name ("passes", "integration").
    """

    settings: RunnerSettings
    log_for: Callable[[Path], str] = lambda _config: CLEAN_LOG
    diffs: dict[str, str] = field(default_factory=dict)
    lintcheck_returncode: int = 0
    lintcheck_stderr: str = ""
    write_log: bool = True
    calls: list[list[str]] = field(default_factory=list)
    lintcheck_calls: list[LintcheckCall] = field(default_factory=list)

    def run(
        self,
        argv: Sequence[str],
        *,
        cwd: Path,
        env: Mapping[str, str] | None = None,
    ) -> CommandResult:
        argv_list = list(argv)
        self.calls.append(argv_list)

        if argv_list[:2] == ["git", "diff"]:
            name = Path(argv_list[-1]).stem
            return CommandResult(argv_list, 0, self.diffs.get(name, ""), "")

        if tuple(argv_list) == self.settings.lintcheck_command:
            assert env is not None
            config = Path(env[self.settings.config_env_var])
            self.lintcheck_calls.append(
                LintcheckCall(
                    argv=argv_list,
                    cwd=cwd,
                    config=config,
                    config_text=config.read_text(encoding="utf-8"),
                )
            )
            if self.lintcheck_returncode != 0:
                return CommandResult(
                    argv_list, self.lintcheck_returncode, "", self.lintcheck_stderr
                )
            if self.write_log:
                log_path = self.settings.tool_log_path(config)
                log_path.parent.mkdir(parents=True, exist_ok=True)
                log_path.write_text(self.log_for(config), encoding="utf-8", newline="")
            return CommandResult(argv_list, 0, f"checked {config.stem}\n", "")

        raise AssertionError(f"unexpected invocation: {argv_list!r}")


@pytest.fixture
def settings(tmp_path: Path) -> RunnerSettings:
    repo = tmp_path / "repo"
    (repo / "rust-clippy").mkdir(parents=True)
    (repo / "config").mkdir()
    (repo / "config" / "passes.toml").write_text(PASSES_TOML, encoding="utf-8")
    (repo / "config" / "integration.toml").write_text(INTEGRATION_TOML, encoding="utf-8")
    return RunnerSettings.for_repo(repo)


@pytest.fixture
def fake_runner(settings: RunnerSettings) -> FakeRunner:
    return FakeRunner(settings=settings)
