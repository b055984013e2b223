from __future__ import annotations

from typing import Any, ClassVar, Literal

ErrorKind = Literal["config", "process", "filesystem", "assertion"]


class LintcheckError(RuntimeError):
    kind: ClassVar[ErrorKind]
    exit_code: ClassVar[int]

    def __init__(self, message: str, *, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.details = details or {}


class ConfigError(LintcheckError):
    kind = "config"
    exit_code = 2


class ProcessError(LintcheckError):
    kind = "process"
    exit_code = 3


class ArtifactError(LintcheckError):
    kind = "filesystem"
    exit_code = 4


class LogAssertionError(LintcheckError):
    kind = "assertion"
    exit_code = 1
