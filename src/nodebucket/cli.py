from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Any, Optional

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .client import BoardController, SignInError, TaskBoardClient, sign_in
from .client.board import DragState, describe
from .config import Settings, load_settings
from .constants import DEFAULT_EMPLOYEES, DONE_LIST, TASK_LISTS, TODO_LIST
from .errors import InvalidArgument, StoreUnavailable
from .io_utils import load_optional_yaml
from .logging_utils import configure_logging
from .service import parse_emp_id
from .storage import YamlDocumentStore


def _settings(args: argparse.Namespace) -> Settings:
    settings = load_settings()
    if args.data_dir:
        settings.data_dir = Path(args.data_dir).expanduser().resolve()
    if args.log_level:
        settings.log_level = args.log_level.upper()
    configure_logging(settings.log_level)
    return settings


def _serve(args: argparse.Namespace) -> int:
    import uvicorn

    from .server import create_app

    settings = _settings(args)
    if args.host:
        settings.host = args.host
    if args.port:
        settings.port = args.port
    app = create_app(settings)
    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())
    return 0


def _load_employees(path: Optional[str]) -> list[dict[str, Any]]:
    if not path:
        return [dict(emp) for emp in DEFAULT_EMPLOYEES]
    data, err = load_optional_yaml(Path(path))
    if err:
        raise ValueError(err)
    employees = data.get("employees")
    if not isinstance(employees, list):
        raise ValueError(f"{path}: expected an 'employees' list")
    records: list[dict[str, Any]] = []
    for idx, emp in enumerate(employees):
        if not isinstance(emp, dict):
            continue
        if "empId" not in emp:
            raise ValueError(f"{path}: employees[{idx}] has no empId")
        try:
            emp_id = parse_emp_id(emp["empId"])
        except InvalidArgument as exc:
            raise ValueError(f"{path}: employees[{idx}].empId: {exc.message}") from None
        records.append({**emp, "empId": emp_id})
    return records


def _seed(args: argparse.Namespace) -> int:
    settings = _settings(args)
    try:
        employees = _load_employees(args.file)
    except ValueError as exc:
        sys.stderr.write(f"{exc}\n")
        return 1
    store = YamlDocumentStore(settings.data_dir)
    inserted: list[int] = []
    skipped: list[int] = []
    try:
        with store.connect() as session:
            for emp in employees:
                emp_id = emp["empId"]
                document = dict(emp)
                document.setdefault(TODO_LIST, [])
                document.setdefault(DONE_LIST, [])
                (inserted if session.insert_one(document) else skipped).append(emp_id)
    except StoreUnavailable as exc:
        sys.stderr.write(f"{exc.message}\n")
        return 1
    sys.stdout.write(json.dumps({"inserted": inserted, "skipped": skipped}) + "\n")
    return 0


def _render_board(controller: BoardController, title: str) -> None:
    table = Table(title=title)
    table.add_column("#", justify="right", style="dim")
    table.add_column("To Do")
    table.add_column("Done", style="green")
    todo, done = controller.todo, controller.done
    for idx in range(max(len(todo), len(done))):
        left = f"{escape(todo[idx].text)} [dim]({todo[idx].id})[/dim]" if idx < len(todo) else ""
        right = f"{escape(done[idx].text)} [dim]({done[idx].id})[/dim]" if idx < len(done) else ""
        table.add_row(str(idx), left, right)
    Console().print(table)


def _board(args: argparse.Namespace) -> int:
    settings = _settings(args)
    url = args.url or f"http://{settings.host}:{settings.port}"
    with TaskBoardClient(url) as api:
        try:
            user = sign_in(api, args.emp_id)
        except SignInError as exc:
            sys.stderr.write(f"{exc.message}\n")
            return 1
        with BoardController(api, user.emp_id) as controller:
            if not controller.load():
                sys.stderr.write(f"{controller.last_error}\n")
                return 1
            rc = 0
            if args.board_cmd == "add":
                future = controller.create(args.text)
                rc = 0 if future is not None and future.result() is not None else 1
            elif args.board_cmd == "rm":
                confirm = None if args.yes else _confirm_delete
                future = controller.remove(args.task_id, confirm=confirm)
                rc = 0 if future is None or future.result() else 1
            elif args.board_cmd == "move":
                try:
                    interaction = controller.move(args.source, args.from_index, args.target, args.to_index)
                except IndexError as exc:
                    sys.stderr.write(f"{exc}\n")
                    return 1
                if interaction.future is not None:
                    interaction.future.result()
                sys.stdout.write(json.dumps(describe(interaction)) + "\n")
                rc = 1 if interaction.state == DragState.FAILED else 0
            _render_board(controller, f"{user.display_name} ({user.emp_id})")
            return rc


def _confirm_delete() -> bool:
    answer = input("Are you sure you want to delete this task? [y/N] ")
    return answer.strip().lower() in {"y", "yes"}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Nodebucket employee task board")
    parser.add_argument("--data-dir", default=None, help="Document store directory (default: ./.nodebucket)")
    parser.add_argument("--log-level", default=None, help="Log level (default: INFO)")
    subparsers = parser.add_subparsers(dest="command", required=True)

    serve = subparsers.add_parser("serve", help="Start the API server")
    serve.add_argument("--host", default=None)
    serve.add_argument("--port", default=None, type=int)
    serve.set_defaults(func=_serve)

    seed = subparsers.add_parser("seed", help="Provision employee documents")
    seed.add_argument("--file", default=None, help="YAML file with an 'employees' list")
    seed.set_defaults(func=_seed)

    board = subparsers.add_parser("board", help="Work with an employee's board through the API")
    board.add_argument("--url", default=None, help="API root (default: http://HOST:PORT from settings)")
    board.add_argument("--emp-id", required=True)
    board_sub = board.add_subparsers(dest="board_cmd", required=True)
    board_sub.add_parser("show", help="Show both lists")
    badd = board_sub.add_parser("add", help="Create a task at the end of To Do")
    badd.add_argument("text")
    brm = board_sub.add_parser("rm", help="Delete a task")
    brm.add_argument("task_id")
    brm.add_argument("--yes", action="store_true", help="Skip the confirmation prompt")
    bmove = board_sub.add_parser("move", help="Drag a task to a position in either list")
    bmove.add_argument("source", choices=TASK_LISTS)
    bmove.add_argument("from_index", type=int)
    bmove.add_argument("target", choices=TASK_LISTS)
    bmove.add_argument("to_index", type=int)
    board.set_defaults(func=_board)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    handler = getattr(args, "func", None)
    if handler is None:
        parser.print_help()
        return 1
    return int(handler(args) or 0)


if __name__ == "__main__":
    raise SystemExit(main())
