from __future__ import annotations

from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any

import yaml

from clippy_lintcheck.errors import ConfigError

DEFAULT_BASE_REF = "origin/main"
DEFAULT_LINTCHECK_COMMAND: tuple[str, ...] = ("cargo", "dev-lintcheck")
DEFAULT_CONFIG_ENV_VAR = "LINTCHECK_TOML"
DEFAULT_SETTINGS_FILENAME = "lintcheck.yaml"

_PATH_KEYS: frozenset[str] = frozenset({"clippy_dir", "config_dir", "logs_dir"})
_STR_KEYS: frozenset[str] = frozenset({"base_ref", "config_env_var"})
_ALLOWED_KEYS: frozenset[str] = _PATH_KEYS | _STR_KEYS | {"lintcheck_command"}


@dataclass(frozen=True)
class RunnerSettings:
    repo_root: Path
    clippy_dir: Path
    config_dir: Path
    logs_dir: Path
    base_ref: str = DEFAULT_BASE_REF
    lintcheck_command: tuple[str, ...] = DEFAULT_LINTCHECK_COMMAND
    config_env_var: str = DEFAULT_CONFIG_ENV_VAR
    tool_logs_subdir: str = "lintcheck-logs"

    @classmethod
    def for_repo(cls, repo_root: Path) -> RunnerSettings:
        root = _resolve(repo_root)
        return cls(
            repo_root=root,
            clippy_dir=root / "rust-clippy",
            config_dir=root / "config",
            logs_dir=root / "logs",
        )

    def config_path(self, name: str) -> Path:
        return self.config_dir / f"{name}.toml"

    def tool_log_path(self, config: Path) -> Path:
        return self.clippy_dir / self.tool_logs_subdir / f"{config.stem}_logs.txt"

    def local_log_path(self, label: str) -> Path:
        return self.logs_dir / f"{label}_logs.txt"


def _resolve(path: Path) -> Path:
    try:
        return path.expanduser().resolve(strict=False)
    except OSError:
        return path


def _load_yaml_mapping(path: Path) -> dict[str, Any]:
    try:
        raw = yaml.safe_load(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise ConfigError(f"Failed to read {path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"Failed to parse YAML in {path}: {e}") from e

    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise ConfigError(f"Expected a YAML mapping in {path}, got {type(raw).__name__}.")
    return raw


def _ensure_no_unknown_keys(*, data: dict[str, Any], path: Path) -> None:
    unknown = set(data) - _ALLOWED_KEYS
    if not unknown:
        return
    unknown_list = ", ".join(sorted(str(k) for k in unknown))
    allowed_list = ", ".join(sorted(_ALLOWED_KEYS))
    raise ConfigError(f"Unknown keys in {path}: {unknown_list}. Allowed: {allowed_list}.")


def _parse_rel_path(value: Any, *, root: Path, path: Path, field: str) -> Path:
    if not isinstance(value, str) or not value.strip():
        raise ConfigError(f"Expected non-empty string for {field} in {path}.")
    raw = Path(value)
    return _resolve(raw if raw.is_absolute() else (root / raw))


def _parse_command(value: Any, *, path: Path) -> tuple[str, ...]:
    if not isinstance(value, list) or not value:
        raise ConfigError(f"Expected non-empty list for lintcheck_command in {path}.")
    out: list[str] = []
    for idx, item in enumerate(value):
        if not isinstance(item, str) or not item.strip():
            raise ConfigError(
                f"Expected non-empty string for lintcheck_command[{idx}] in {path}."
            )
        out.append(item)
    return tuple(out)


def apply_settings_file(settings: RunnerSettings, path: Path) -> RunnerSettings:
    data = _load_yaml_mapping(path)
    _ensure_no_unknown_keys(data=data, path=path)

    updates: dict[str, Any] = {}
    for key in sorted(_PATH_KEYS & set(data)):
        updates[key] = _parse_rel_path(data[key], root=settings.repo_root, path=path, field=key)
    for key in sorted(_STR_KEYS & set(data)):
        value = data[key]
        if not isinstance(value, str) or not value.strip():
            raise ConfigError(f"Expected non-empty string for {key} in {path}.")
        updates[key] = value.strip()
    if "lintcheck_command" in data:
        updates["lintcheck_command"] = _parse_command(data["lintcheck_command"], path=path)
    return replace(settings, **updates)


def load_settings(
    *,
    repo_root: Path | None = None,
    settings_path: Path | None = None,
    clippy_dir: Path | None = None,
    config_dir: Path | None = None,
    logs_dir: Path | None = None,
    base_ref: str | None = None,
) -> RunnerSettings:
    """Resolve runner settings: defaults, then the YAML settings file, then explicit overrides.

    When ``settings_path`` is None, ``<repo_root>/lintcheck.yaml`` is used if it exists.
    """

    settings = RunnerSettings.for_repo(repo_root if repo_root is not None else Path.cwd())

    if settings_path is not None:
        if not settings_path.is_file():
            raise ConfigError(f"Settings file not found: {settings_path}")
        settings = apply_settings_file(settings, settings_path)
    else:
        default_path = settings.repo_root / DEFAULT_SETTINGS_FILENAME
        if default_path.is_file():
            settings = apply_settings_file(settings, default_path)

    # Relative overrides resolve against repo_root, like paths in the settings file.
    overrides: dict[str, Any] = {}
    path_overrides = (
        ("clippy_dir", clippy_dir),
        ("config_dir", config_dir),
        ("logs_dir", logs_dir),
    )
    for key, value in path_overrides:
        if value is None:
            continue
        value = value.expanduser()
        overrides[key] = _resolve(value if value.is_absolute() else settings.repo_root / value)
    if base_ref is not None:
        if not base_ref.strip():
            raise ConfigError("--base-ref must be non-empty")
        overrides["base_ref"] = base_ref.strip()
    return replace(settings, **overrides) if overrides else settings
