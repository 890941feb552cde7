from __future__ import annotations

import json
from pathlib import Path

import pytest
import yaml
from typer.testing import CliRunner

from mape.cli import app
from mape.planning import dump_plan
from mape.planning.files import load_plan


@pytest.fixture()
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture()
def config_path(tmp_path: Path) -> Path:
    return tmp_path / "mape.yaml"


def _invoke(runner: CliRunner, *args: str):
    return runner.invoke(app, list(args), catch_exceptions=False)


def test_templates_lists_builtin(runner: CliRunner, config_path: Path) -> None:
    result = _invoke(runner, "templates", "--config", str(config_path))

    assert result.exit_code == 0, result.output
    assert "- general_project [general] General Project Delivery v1.0.0: 3 agent(s), 5 task(s)" in result.output


def test_templates_include_configured_files(runner: CliRunner, tmp_path: Path, config_path: Path) -> None:
    extra = tmp_path / "tiny.yaml"
    extra.write_text(
        yaml.safe_dump(
            {
                "name": "Tiny",
                "team_roster": [{"id": "solo", "role": "Solo"}],
                "task_breakdown": [{"id": "only", "name": "Only", "owner": "solo"}],
            }
        ),
        encoding="utf-8",
    )
    config_path.write_text("templates:\n  paths:\n    - tiny.yaml\n    - missing.yaml\n", encoding="utf-8")

    result = _invoke(runner, "templates", "--config", str(config_path))

    assert result.exit_code == 0, result.output
    assert "- tiny [custom] Tiny v1.0.0: 1 agent(s), 1 task(s)" in result.output


def test_create_writes_plan_file(runner: CliRunner, tmp_path: Path, config_path: Path) -> None:
    target = tmp_path / "out" / "plan.yaml"

    result = _invoke(
        runner,
        "create",
        "general_project",
        "--output",
        str(target),
        "--name",
        "Launch",
        "--config",
        str(config_path),
    )

    assert result.exit_code == 0, result.output
    plan = load_plan(target)
    assert plan.name == "Launch"
    assert f"Created plan {plan.id} from template 'general_project'." in result.output
    assert f"Wrote {target.as_posix()}" in result.output


def test_create_rejects_unknown_template(runner: CliRunner, config_path: Path) -> None:
    result = runner.invoke(app, ["create", "nope", "--config", str(config_path)])

    assert result.exit_code == 2


def test_validate_valid_plan(runner: CliRunner, plan_file: Path, default_plan, config_path: Path) -> None:
    result = _invoke(runner, "validate", str(plan_file), "--config", str(config_path))

    assert result.exit_code == 0, result.output
    assert f"Plan {default_plan.id} is valid." in result.output
    assert "Warnings:" not in result.output


def test_validate_invalid_plan_exits_nonzero(
    runner: CliRunner, tmp_path: Path, build_plan, make_task, config_path: Path
) -> None:
    path = dump_plan(build_plan([make_task("a", "b"), make_task("b", "a")]), tmp_path / "cyclic.json")

    result = _invoke(runner, "validate", str(path), "--config", str(config_path))

    assert result.exit_code == 1
    assert "Plan plan-test is invalid (1 error(s)):" in result.output
    assert "Circular dependency detected: a → b → a" in result.output


def test_validate_reports_unreadable_file(runner: CliRunner, tmp_path: Path, config_path: Path) -> None:
    path = tmp_path / "plan.json"
    path.write_text(json.dumps(["not", "a", "plan"]), encoding="utf-8")

    result = _invoke(runner, "validate", str(path), "--config", str(config_path))

    assert result.exit_code == 1
    assert "Failed to load plan:" in result.output


def test_validate_reports_non_utf8_file(runner: CliRunner, tmp_path: Path, config_path: Path) -> None:
    path = tmp_path / "plan.json"
    path.write_bytes(b'{"id": "\xff\xfe"}')

    result = _invoke(runner, "validate", str(path), "--config", str(config_path))

    assert result.exit_code == 1
    assert "Failed to load plan:" in result.output
    assert "unable to read" in result.output


def test_invalid_config_exits_nonzero(runner: CliRunner, plan_file: Path, config_path: Path) -> None:
    config_path.write_text("engine:\n  max_concurrency: 0\n", encoding="utf-8")

    result = _invoke(runner, "validate", str(plan_file), "--config", str(config_path))

    assert result.exit_code == 1
    assert "Invalid configuration" in result.output


def test_ready_progresses_with_completed_tasks(runner: CliRunner, plan_file: Path, config_path: Path) -> None:
    initial = _invoke(runner, "ready", str(plan_file), "--config", str(config_path))
    later = _invoke(
        runner,
        "ready",
        str(plan_file),
        "--completed",
        "task1",
        "--completed",
        "task2",
        "--completed",
        "bogus",
        "--config",
        str(config_path),
    )

    assert initial.exit_code == 0, initial.output
    assert "Ready tasks:" in initial.output
    assert "- task1:" in initial.output
    assert "- task2:" not in initial.output
    assert "Warning: ignoring unknown task id(s): bogus" in later.output
    assert "- task3:" in later.output
    assert "- task4:" in later.output


def test_ready_reports_completion(runner: CliRunner, plan_file: Path, config_path: Path) -> None:
    args = ["ready", str(plan_file), "--config", str(config_path)]
    for task_id in ("task1", "task2", "task3", "task4", "task5"):
        args.extend(["--completed", task_id])

    result = _invoke(runner, *args)

    assert result.exit_code == 0
    assert "All tasks completed." in result.output


def test_critical_path_command(runner: CliRunner, plan_file: Path, config_path: Path) -> None:
    result = _invoke(runner, "critical-path", str(plan_file), "--config", str(config_path))

    assert result.exit_code == 0, result.output
    assert "Critical path: task1 -> task2 -> task3 -> task5" in result.output
    assert "Duration: 1200 seconds" in result.output


def test_critical_path_uses_configured_default_timeout(
    runner: CliRunner, tmp_path: Path, build_plan, make_task, config_path: Path
) -> None:
    path = dump_plan(build_plan([make_task("a", timeout=None), make_task("b", "a", timeout=None)]), tmp_path / "p.json")
    config_path.write_text("engine:\n  default_task_timeout: 30\n", encoding="utf-8")

    result = _invoke(runner, "critical-path", str(path), "--config", str(config_path))

    assert "Duration: 60 seconds" in result.output


def test_waves_command(runner: CliRunner, plan_file: Path, config_path: Path) -> None:
    result = _invoke(runner, "waves", str(plan_file), "--max-concurrency", "1", "--config", str(config_path))

    assert result.exit_code == 0, result.output
    assert "Wave 3: task3" in result.output
    assert "Wave 4: task4" in result.output


def test_waves_flags_blocked_tasks(
    runner: CliRunner, tmp_path: Path, build_plan, make_task, config_path: Path
) -> None:
    path = dump_plan(build_plan([make_task("a"), make_task("b", "c"), make_task("c", "b")]), tmp_path / "p.json")

    result = _invoke(runner, "waves", str(path), "--config", str(config_path))

    assert result.exit_code == 1
    assert "Wave 1: a" in result.output
    assert "Blocked: b, c" in result.output


def test_export_to_file(runner: CliRunner, plan_file: Path, tmp_path: Path, config_path: Path) -> None:
    target = tmp_path / "report.md"

    result = _invoke(runner, "export", str(plan_file), "--output", str(target), "--config", str(config_path))

    assert result.exit_code == 0, result.output
    assert target.read_text(encoding="utf-8").startswith("# General Project Delivery")


def test_export_to_stdout(runner: CliRunner, plan_file: Path, config_path: Path) -> None:
    result = _invoke(runner, "export", str(plan_file), "--config", str(config_path))

    assert result.exit_code == 0
    assert "## 6) Risks & Recovery" in result.output
