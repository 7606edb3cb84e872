"""Per-employee task list operations on top of a :class:`DocumentStore`.

Every public method opens its own session, performs exactly one atomic
document action and releases the session before returning, including when the
action raises. :class:`~nodebucket.errors.StoreUnavailable` from the document
store propagates unchanged; there is no retry here.
"""

from __future__ import annotations

from typing import Any

from loguru import logger

from ..constants import DONE_LIST, TODO_LIST
from ..domain.models import Task, TaskLists, tasks_to_raw
from ..errors import NotFound
from .interfaces import Document, DocumentStore


def _employee_not_found(emp_id: int) -> NotFound:
    return NotFound(f"Employee {emp_id} not found")


class TaskStore:
    """Atomic read/replace/append/remove on one document per employee."""

    def __init__(self, documents: DocumentStore) -> None:
        self._documents = documents

    def find_employee(self, emp_id: int) -> Document:
        with self._documents.connect() as session:
            document = session.find_one(emp_id)
        if document is None:
            raise _employee_not_found(emp_id)
        return document

    def get_lists(self, emp_id: int) -> TaskLists:
        document = self.find_employee(emp_id)
        return TaskLists.from_document({**document, "empId": emp_id})

    def replace_lists(self, emp_id: int, todo: list[Task], done: list[Task]) -> None:
        raw_todo = tasks_to_raw(todo)
        raw_done = tasks_to_raw(done)

        def _replace(document: Document) -> None:
            document[TODO_LIST] = raw_todo
            document[DONE_LIST] = raw_done

        self._update(emp_id, _replace)
        logger.debug(f"Replaced lists for {emp_id}: todo={len(raw_todo)} done={len(raw_done)}")

    def append_todo(self, emp_id: int, task: Task) -> None:
        def _append(document: Document) -> None:
            current = document.get(TODO_LIST)
            document[TODO_LIST] = (list(current) if isinstance(current, list) else []) + [task.to_dict()]

        self._update(emp_id, _append)

    def remove_by_id(self, emp_id: int, task_id: str) -> None:
        def _pull(document: Document) -> None:
            for name in (TODO_LIST, DONE_LIST):
                items = document.get(name)
                if not isinstance(items, list):
                    document[name] = []
                    continue
                document[name] = [item for item in items if not _has_id(item, task_id)]

        self._update(emp_id, _pull)

    def _update(self, emp_id: int, mutate: Any) -> None:
        with self._documents.connect() as session:
            matched = session.update_one(emp_id, mutate)
        if not matched:
            raise _employee_not_found(emp_id)


def _has_id(item: Any, task_id: str) -> bool:
    if not isinstance(item, dict):
        return False
    return str(item.get("id", item.get("_id"))) == task_id
