from __future__ import annotations

import json
import subprocess
import sys
from pathlib import Path

import pytest
from conftest import ICE_LOG, FakeRunner

from clippy_lintcheck.cli import build_parser, main
from clippy_lintcheck.modes import Mode
from clippy_lintcheck.settings import RunnerSettings


def test_parser_smoke() -> None:
    args = build_parser().parse_args(["--mode", "ci"])
    assert args.mode is Mode.CI
    assert args.base_ref is None
    assert args.summary_json is None


def test_parser_requires_mode(capsys: pytest.CaptureFixture[str]) -> None:
    with pytest.raises(SystemExit) as excinfo:
        build_parser().parse_args([])
    assert excinfo.value.code == 2
    assert "--mode" in capsys.readouterr().err


def test_invalid_mode_exits_before_any_subprocess(
    settings: RunnerSettings, fake_runner: FakeRunner, capsys: pytest.CaptureFixture[str]
) -> None:
    with pytest.raises(SystemExit) as excinfo:
        main(["--mode", "everything", "--repo-root", str(settings.repo_root)], runner=fake_runner)
    assert excinfo.value.code == 2
    assert "Invalid option everything" in capsys.readouterr().err
    assert fake_runner.calls == []


def test_main_success_writes_logs_and_summary(
    settings: RunnerSettings, fake_runner: FakeRunner, tmp_path: Path
) -> None:
    summary = tmp_path / "summary.json"
    code = main(
        [
            "--mode",
            "all",
            "--repo-root",
            str(settings.repo_root),
            "--summary-json",
            str(summary),
        ],
        runner=fake_runner,
    )
    assert code == 0
    assert (settings.logs_dir / "integration_logs.txt").is_file()
    assert (settings.logs_dir / "passes_logs.txt").is_file()
    payload = json.loads(summary.read_text(encoding="utf-8"))
    assert payload["mode"] == "all"
    assert payload["ok"] is True
    assert [r["label"] for r in payload["results"]] == ["integration", "passes"]


def test_main_assertion_failure_exit_code(
    settings: RunnerSettings, capsys: pytest.CaptureFixture[str]
) -> None:
    runner = FakeRunner(settings=settings, log_for=lambda _config: ICE_LOG)
    code = main(["--mode", "integration", "--repo-root", str(settings.repo_root)], runner=runner)
    assert code == 1
    assert "ERROR [assertion]" in capsys.readouterr().err


def test_main_process_failure_exit_code(settings: RunnerSettings) -> None:
    runner = FakeRunner(settings=settings, lintcheck_returncode=101, lintcheck_stderr="nope")
    code = main(["--mode", "passes", "--repo-root", str(settings.repo_root)], runner=runner)
    assert code == 3


def test_main_bad_settings_file_exit_code(
    settings: RunnerSettings, fake_runner: FakeRunner
) -> None:
    (settings.repo_root / "lintcheck.yaml").write_text("nope: 1\n", encoding="utf-8")
    code = main(["--mode", "passes", "--repo-root", str(settings.repo_root)], runner=fake_runner)
    assert code == 2
    assert fake_runner.calls == []


def test_help_smoke() -> None:
    proc = subprocess.run(
        [sys.executable, "-m", "clippy_lintcheck", "--help"],
        capture_output=True,
        text=True,
        check=False,
    )
    assert proc.returncode == 0
    assert "clippy-lintcheck" in proc.stdout


def test_main_unwritable_summary_is_a_filesystem_error(
    settings: RunnerSettings, fake_runner: FakeRunner, capsys: pytest.CaptureFixture[str]
) -> None:
    code = main(
        [
            "--mode",
            "passes",
            "--repo-root",
            str(settings.repo_root),
            "--summary-json",
            str(settings.repo_root),
        ],
        runner=fake_runner,
    )
    assert code == 4
    assert "ERROR [filesystem]" in capsys.readouterr().err
    assert (settings.logs_dir / "passes_logs.txt").is_file()


def test_main_unwritable_summary_keeps_the_run_failure_code(settings: RunnerSettings) -> None:
    runner = FakeRunner(settings=settings, log_for=lambda _config: ICE_LOG)
    code = main(
        [
            "--mode",
            "integration",
            "--repo-root",
            str(settings.repo_root),
            "--summary-json",
            str(settings.repo_root),
        ],
        runner=runner,
    )
    assert code == 1
