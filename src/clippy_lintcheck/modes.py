from __future__ import annotations

from enum import Enum

from clippy_lintcheck.errors import ConfigError


class Mode(Enum):
    ALL = "all"
    PASSES = "passes"
    INTEGRATION = "integration"
    CI = "ci"


class ModeError(ConfigError):
    pass


def parse_mode(token: str) -> Mode:
    try:
        return Mode(token)
    except ValueError as e:
        raise ModeError(f"Invalid option {token}", details={"token": token}) from e


MODE_CHOICES: tuple[str, ...] = tuple(mode.value for mode in Mode)
