from __future__ import annotations

import os
import subprocess
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol, runtime_checkable

from clippy_lintcheck.errors import ProcessError


@dataclass(frozen=True)
class CommandResult:
    argv: list[str]
    returncode: int
    stdout: str
    stderr: str

    @property
    def ok(self) -> bool:
        return self.returncode == 0


@runtime_checkable
class CommandRunner(Protocol):
    """External process interface.

    The runner only ever needs "launch, wait, give me the captured output". Test doubles
    implement this to simulate the lintcheck tool and git without spawning anything.
    """

    def run(
        self,
        argv: Sequence[str],
        *,
        cwd: Path,
        env: Mapping[str, str] | None = None,
    ) -> CommandResult:  # pragma: no cover
        raise NotImplementedError


class SubprocessRunner:
    def run(
        self,
        argv: Sequence[str],
        *,
        cwd: Path,
        env: Mapping[str, str] | None = None,
    ) -> CommandResult:
        argv_list = [str(a) for a in argv]
        full_env: dict[str, str] | None = None
        if env:
            full_env = dict(os.environ)
            full_env.update(env)
        try:
            proc = subprocess.run(
                argv_list,
                cwd=str(cwd),
                env=full_env,
                capture_output=True,
                text=True,
                encoding="utf-8",
                errors="replace",
                check=False,
            )
        except FileNotFoundError as e:
            raise ProcessError(
                f"couldn't execute {argv_list[0]!r}: {e.strerror or e}.\n"
                f"Ensure `{argv_list[0]}` is installed and available on PATH, "
                f"and that {cwd} exists.",
                details={"argv": argv_list, "cwd": str(cwd)},
            ) from e
        except OSError as e:
            raise ProcessError(
                f"couldn't execute {' '.join(argv_list)}: {e}",
                details={"argv": argv_list, "cwd": str(cwd)},
            ) from e
        return CommandResult(
            argv=argv_list,
            returncode=proc.returncode,
            stdout=proc.stdout,
            stderr=proc.stderr,
        )


def require_success(result: CommandResult) -> CommandResult:
    if result.ok:
        return result
    raise ProcessError(
        f"{' '.join(result.argv)} exited with {result.returncode}\n"
        f"stderr:\n{result.stderr.rstrip()}",
        details={
            "argv": result.argv,
            "returncode": result.returncode,
            "stderr": result.stderr,
        },
    )
