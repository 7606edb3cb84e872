"""Task service: validation, existence checks and store orchestration.

All collaborators (task store, compiled schemas, id generator) are passed in at
construction; nothing here reaches for module-level state.
"""

from __future__ import annotations

import re
import uuid
from typing import Any, Optional, Protocol

from loguru import logger

from .domain.models import Task, TaskLists
from .errors import InvalidArgument
from .logging_utils import preview
from .storage.task_store import TaskStore
from .validation import TaskSchemas, build_task_schemas, validate

_EMP_ID_RE = re.compile(r"[+-]?\d+")


class TaskIdGenerator(Protocol):
    def __call__(self) -> str: ...


def uuid_task_id() -> str:
    """Opaque task id independent of the storage engine."""
    return uuid.uuid4().hex


def parse_emp_id(raw: Any) -> int:
    """Parse a path-embedded employee id.

    Accepts an ``int`` or a string of decimal digits with an optional sign;
    anything else raises :class:`InvalidArgument` without touching storage.
    """
    if isinstance(raw, bool):
        raise InvalidArgument("Employee ID must be a number")
    if isinstance(raw, int):
        return raw
    text = str(raw).strip() if raw is not None else ""
    if not _EMP_ID_RE.fullmatch(text):
        raise InvalidArgument("Employee ID must be a number")
    try:
        return int(text)
    except ValueError:
        # digit count beyond the interpreter's int conversion limit
        raise InvalidArgument("Employee ID is too long") from None


class TaskService:
    """The four task operations exposed by the API.

    Parameters
    ----------
    store:
        Per-employee task store.
    schemas:
        Compiled payload schemas, built once and shared across requests.
    id_generator:
        Callable returning a fresh unique task id.
    """

    def __init__(
        self,
        store: TaskStore,
        schemas: Optional[TaskSchemas] = None,
        id_generator: TaskIdGenerator = uuid_task_id,
    ) -> None:
        self._store = store
        self._schemas = schemas or build_task_schemas()
        self._new_id = id_generator

    def get(self, emp_id: int) -> TaskLists:
        lists = self._store.get_lists(emp_id)
        logger.debug(f"Loaded tasks for {emp_id}: todo={len(lists.todo)} done={len(lists.done)}")
        return lists

    def create(self, emp_id: int, payload: Any) -> str:
        """Append a new task to the tail of ``todo`` and return its id."""
        result = validate(self._schemas.create, payload)
        if not result.ok:
            logger.info(f"Rejected task for {emp_id}: {len(result.errors)} violation(s)")
            raise InvalidArgument("Invalid task payload", result.errors)
        text = result.value.text
        task = Task(id=self._new_id(), text=text)
        self._store.append_todo(emp_id, task)
        logger.info(f"Created task {task.id} for {emp_id}: {preview(text)!r}")
        return task.id

    def replace_all(self, emp_id: int, payload: Any) -> None:
        """Overwrite both lists with the caller's complete snapshot.

        This is not a merge: items missing from the payload are gone afterwards.
        Concurrent calls for one employee are last-write-wins.
        """
        result = validate(self._schemas.replace, payload)
        if not result.ok:
            logger.info(f"Rejected task lists for {emp_id}: {len(result.errors)} violation(s)")
            raise InvalidArgument("Invalid task lists", result.errors)
        todo = [Task(id=item.id, text=item.text) for item in result.value.todo]
        done = [Task(id=item.id, text=item.text) for item in result.value.done]
        self._store.replace_lists(emp_id, todo, done)
        logger.info(f"Replaced tasks for {emp_id}: todo={len(todo)} done={len(done)}")

    def remove(self, emp_id: int, task_id: str) -> str:
        """Remove *task_id* from whichever list holds it.

        Absence is not an error: the id is returned whether or not a task was
        removed, as long as the employee exists.
        """
        self._store.remove_by_id(emp_id, task_id)
        logger.info(f"Removed task {task_id} for {emp_id}")
        return task_id


class EmployeeDirectory:
    """Read-only employee lookup used to confirm an id at sign-in."""

    def __init__(self, store: TaskStore) -> None:
        self._store = store

    def find(self, emp_id: int) -> dict[str, Any]:
        document = dict(self._store.find_employee(emp_id))
        document["empId"] = emp_id
        return document
