from __future__ import annotations

import json
from pathlib import Path

import pytest
import yaml

from mape.errors import PlanFileError
from mape.planning.files import dump_plan, load_plan, load_template_file, plan_to_dict
from mape.planning.graph import derive_dependency_edges


def test_json_round_trip_preserves_plan(plan_file: Path, default_plan) -> None:
    loaded = load_plan(plan_file)

    assert loaded == default_plan


def test_yaml_round_trip_preserves_plan(tmp_path: Path, default_plan) -> None:
    target = dump_plan(default_plan, tmp_path / "nested" / "plan.yaml")

    assert target.exists()
    assert load_plan(target) == default_plan


def test_serialised_keys_are_camel_case(plan_file: Path) -> None:
    payload = json.loads(plan_file.read_text(encoding="utf-8"))

    assert "teamRoster" in payload
    assert "taskBreakdown" in payload
    assert "createdAt" in payload
    assert "timeoutSeconds" in payload["taskBreakdown"][0]
    edge = payload["dependenciesAndDataFlow"]["dependencyGraph"][0]
    assert set(edge) >= {"from", "to", "artifact"}


def test_unset_optionals_are_omitted(build_plan, make_task) -> None:
    payload = plan_to_dict(build_plan([make_task("a", timeout=None)]))

    assert "timeoutSeconds" not in payload["taskBreakdown"][0]


def test_snake_case_files_are_accepted(tmp_path: Path) -> None:
    path = tmp_path / "plan.yaml"
    path.write_text(
        yaml.safe_dump(
            {
                "id": "p1",
                "name": "Snake",
                "team_roster": [{"id": "lead", "role": "Lead"}],
                "task_breakdown": [{"id": "a", "name": "A", "owner": "lead", "timeout_seconds": 5}],
            }
        ),
        encoding="utf-8",
    )

    plan = load_plan(path)

    assert plan.task_breakdown[0].timeout_seconds == 5


def test_missing_file_raises(tmp_path: Path) -> None:
    with pytest.raises(PlanFileError) as excinfo:
        load_plan(tmp_path / "absent.json")

    assert excinfo.value.reason == "file not found"


def test_unparsable_file_raises(tmp_path: Path) -> None:
    path = tmp_path / "broken.json"
    path.write_text("{not json", encoding="utf-8")

    with pytest.raises(PlanFileError, match="unable to parse"):
        load_plan(path)


def test_non_mapping_file_raises(tmp_path: Path) -> None:
    path = tmp_path / "list.yaml"
    path.write_text("- a\n- b\n", encoding="utf-8")

    with pytest.raises(PlanFileError, match="mapping"):
        load_plan(path)


def test_non_utf8_file_raises(tmp_path: Path) -> None:
    path = tmp_path / "plan.json"
    path.write_bytes(b'{"id": "\xff\xfe"}')

    with pytest.raises(PlanFileError, match="unable to read"):
        load_plan(path)


def test_directory_path_raises(tmp_path: Path) -> None:
    folder = tmp_path / "plan.json"
    folder.mkdir()

    with pytest.raises(PlanFileError, match="unable to read"):
        load_plan(folder)


def test_schema_violations_are_wrapped(tmp_path: Path) -> None:
    path = tmp_path / "plan.json"
    path.write_text(json.dumps({"name": "No id"}), encoding="utf-8")

    with pytest.raises(PlanFileError, match="schema error"):
        load_plan(path)


def test_plan_file_loads_as_template(plan_file: Path, default_plan) -> None:
    template = load_template_file(plan_file)

    assert template.name == default_plan.name
    assert not hasattr(template, "id")
    assert len(template.task_breakdown) == 5


def test_derived_edges_follow_task_inputs(default_plan) -> None:
    edges = derive_dependency_edges(default_plan.task_breakdown)

    assert all(edge.to_task in {task.id for task in default_plan.task_breakdown} for edge in edges)
    assert all(edge.from_task != edge.to_task for edge in edges)
    assert edges
