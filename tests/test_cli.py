from __future__ import annotations

import json
from pathlib import Path

import pytest

from nodebucket.cli import build_parser, main
from nodebucket.storage import TaskStore, YamlDocumentStore


def test_seed_default_employees(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["--data-dir", str(tmp_path), "seed"]) == 0
    out = json.loads(capsys.readouterr().out)
    assert out["inserted"] == [1007, 1008, 1009, 1010, 1011, 1012]

    assert main(["--data-dir", str(tmp_path), "seed"]) == 0
    out = json.loads(capsys.readouterr().out)
    assert out["inserted"] == []
    assert len(out["skipped"]) == 6

    lists = TaskStore(YamlDocumentStore(tmp_path)).get_lists(1008)
    assert lists.todo == [] and lists.done == []


def test_seed_from_file(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    employees = tmp_path / "employees.yaml"
    employees.write_text(
        "employees:\n  - empId: 2001\n    firstName: Ada\n    lastName: Byron\n",
        encoding="utf-8",
    )
    assert main(["--data-dir", str(tmp_path / "data"), "seed", "--file", str(employees)]) == 0
    assert json.loads(capsys.readouterr().out)["inserted"] == [2001]


def test_seed_rejects_bad_file(tmp_path: Path) -> None:
    employees = tmp_path / "employees.yaml"
    employees.write_text("people: []\n", encoding="utf-8")
    assert main(["--data-dir", str(tmp_path), "seed", "--file", str(employees)]) == 1


@pytest.mark.parametrize(
    "entry, message",
    [
        ("  - firstName: Ada\n", "employees[0] has no empId"),
        ("  - empId: abc\n", "employees[0].empId: Employee ID must be a number"),
    ],
)
def test_seed_reports_bad_employee_entries(
    tmp_path: Path, capsys: pytest.CaptureFixture[str], entry: str, message: str
) -> None:
    employees = tmp_path / "employees.yaml"
    employees.write_text("employees:\n" + entry, encoding="utf-8")
    assert main(["--data-dir", str(tmp_path / "data"), "seed", "--file", str(employees)]) == 1
    captured = capsys.readouterr()
    assert message in captured.err
    assert captured.out == ""
    assert not (tmp_path / "data" / "employees").exists()


def test_board_move_arguments() -> None:
    args = build_parser().parse_args(["board", "--emp-id", "1008", "move", "todo", "0", "done", "1"])
    assert (args.source, args.from_index, args.target, args.to_index) == ("todo", 0, "done", 1)
    with pytest.raises(SystemExit):
        build_parser().parse_args(["board", "--emp-id", "1008", "move", "later", "0", "done", "1"])
