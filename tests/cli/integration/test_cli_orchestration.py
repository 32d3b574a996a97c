"""CLI orchestration integration tests.

Scripts are Python programs named `*.groovy` and run with the current interpreter, so the
whole discovery, execution and history flow runs for real.
"""

from __future__ import annotations

import sys
from pathlib import Path

import yaml
from aecu.cli import cli, main
from aecu.history_reporting import HISTORY_SHEET_NAME, RESULTS_SHEET_NAME
from click.testing import CliRunner
from openpyxl import load_workbook


def _write_content(tmp_path: Path) -> Path:
    upgrades = tmp_path / "content" / "apps" / "upgrades"
    (upgrades / "env.author").mkdir(parents=True)
    (upgrades / "env.publish").mkdir()
    (upgrades / "a.groovy").write_text('print("a done")\n', encoding="utf-8")
    (upgrades / "notes.txt").write_text("not a script\n", encoding="utf-8")
    (upgrades / "env.author" / "b.groovy").write_text(
        'print("starting b")\nraise SystemExit("b failed")\n', encoding="utf-8"
    )
    (upgrades / "env.author" / "b.fallback.groovy").write_text(
        'print("b recovered")\n', encoding="utf-8"
    )
    (upgrades / "env.publish" / "c.groovy").write_text('print("c done")\n', encoding="utf-8")
    return tmp_path / "content"


def _write_config(tmp_path: Path) -> Path:
    content_root = _write_content(tmp_path)
    config = {
        "repository": {"type": "filesystem", "root": str(content_root)},
        "history": {"root": "/var/aecu"},
        "run_modes": ["author"],
        "interpreter": {"command": [sys.executable]},
    }
    path = tmp_path / "aecu.yaml"
    path.write_text(yaml.safe_dump(config), encoding="utf-8")
    return path


def test_files_command_lists_candidates_for_configured_run_modes(tmp_path: Path) -> None:
    config_path = _write_config(tmp_path)
    runner = CliRunner()

    result = runner.invoke(cli, ["files", "--config", str(config_path), "/apps/upgrades"])

    assert result.exit_code == 0
    assert result.output.splitlines() == [
        "/apps/upgrades/a.groovy",
        "/apps/upgrades/env.author/b.groovy",
    ]


def test_run_mode_option_replaces_configured_run_modes(tmp_path: Path) -> None:
    config_path = _write_config(tmp_path)
    runner = CliRunner()

    result = runner.invoke(
        cli,
        ["files", "--config", str(config_path), "--run-mode", "publish", "/apps/upgrades"],
    )

    assert result.exit_code == 0
    assert result.output.splitlines() == [
        "/apps/upgrades/a.groovy",
        "/apps/upgrades/env.publish/c.groovy",
    ]


def test_execute_command_prints_status_and_output(tmp_path: Path) -> None:
    config_path = _write_config(tmp_path)
    runner = CliRunner()

    result = runner.invoke(
        cli, ["execute", "--config", str(config_path), "/apps/upgrades/a.groovy"]
    )

    assert result.exit_code == 0
    assert result.output.startswith("OK      /apps/upgrades/a.groovy")
    assert "a done" in result.output


def test_run_records_history_and_exports_workbook(tmp_path: Path) -> None:
    config_path = _write_config(tmp_path)
    runner = CliRunner()

    run_result = runner.invoke(cli, ["run", "--config", str(config_path), "/apps/upgrades"])

    assert run_result.exit_code == 0
    lines = run_result.output.splitlines()
    assert lines[0].startswith("OK      /apps/upgrades/a.groovy")
    assert lines[1].startswith("FAILED  /apps/upgrades/env.author/b.groovy")
    assert lines[2].startswith("  fallback OK /apps/upgrades/env.author/b.fallback.groovy")
    assert lines[3].startswith("history: /var/aecu/")
    assert lines[3].endswith("(failure)")
    assert (tmp_path / "content" / "var" / "aecu").is_dir()

    history_result = runner.invoke(cli, ["history", "--config", str(config_path)])
    assert history_result.exit_code == 0
    (history_line,) = history_result.output.splitlines()
    assert "finished" in history_line
    assert "2 script(s)" in history_line

    output_path = tmp_path / "history.xlsx"
    export_result = runner.invoke(
        cli,
        ["export-history", "--config", str(config_path), "--output", str(output_path)],
    )
    assert export_result.exit_code == 0
    workbook = load_workbook(output_path)
    assert workbook[HISTORY_SHEET_NAME].max_row == 2
    results_rows = list(workbook[RESULTS_SHEET_NAME].iter_rows(min_row=2, values_only=True))
    assert [row[2] for row in results_rows] == [
        "/apps/upgrades/a.groovy",
        "/apps/upgrades/env.author/b.groovy",
        "/apps/upgrades/env.author/b.fallback.groovy",
    ]
    assert "b failed" in results_rows[1][7]


def test_run_with_fail_on_error_returns_non_zero_exit_code(tmp_path: Path, capsys) -> None:
    config_path = _write_config(tmp_path)

    exit_code = main(["run", "--config", str(config_path), "--fail-on-error", "/apps/upgrades"])
    captured = capsys.readouterr()

    assert exit_code == 1
    assert "One or more scripts failed" in captured.err


def test_generate_config_writes_scaffold(tmp_path: Path) -> None:
    output_path = tmp_path / "aecu.yaml"
    runner = CliRunner()

    result = runner.invoke(cli, ["generate-config", "--output", str(output_path)])

    assert result.exit_code == 0
    assert output_path.exists()
    assert str(output_path.resolve()) in result.output
