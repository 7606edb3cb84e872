"""Client-side board controller.

The controller keeps a local mirror of an employee's ``todo`` and ``done``
lists and issues the matching remote call for every edit:

* create waits for the server-assigned id, then appends to the mirror;
* remove filters the mirror at once, then deletes remotely;
* a drag/drop repositions the item locally, then sends the whole snapshot of
  both lists as one replace call.

Remote calls run on a thread pool and return a ``Future``. Failures are logged
and recorded in :attr:`BoardController.last_error`; the mirror is never rolled
back, so local and remote state can diverge. Drops are not coalesced and
in-flight requests are never cancelled: whichever replace reaches the server
last decides the stored order.
"""

from __future__ import annotations

import threading
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Optional, TypeVar

import httpx
from loguru import logger

from ..constants import DEFAULT_CLIENT_WORKERS, TASK_LISTS, TODO_LIST
from ..domain.models import Task, TaskLists
from ..logging_utils import preview
from .api_client import RemoteError, TaskBoardClient

T = TypeVar("T")

REMOTE_ERRORS = (RemoteError, httpx.HTTPError)


class DragState(str, Enum):
    IDLE = "idle"
    DRAGGING = "dragging"
    DROPPED = "dropped"
    PERSISTING = "persisting"
    SYNCED = "synced"
    FAILED = "failed"


class DropKind(str, Enum):
    SAME_LIST = "same-list"
    CROSS_LIST = "cross-list"


DRAG_TRANSITIONS: dict[DragState, set[DragState]] = {
    DragState.IDLE: {DragState.DRAGGING},
    DragState.DRAGGING: {DragState.DROPPED, DragState.IDLE},
    DragState.DROPPED: {DragState.PERSISTING},
    DragState.PERSISTING: {DragState.SYNCED, DragState.FAILED},
    DragState.SYNCED: set(),
    DragState.FAILED: set(),
}

REST_STATES = {DragState.IDLE, DragState.SYNCED, DragState.FAILED}


def _clamp(value: int, maximum: int) -> int:
    return max(0, min(maximum, value))


def move_item_in_list(items: list[T], from_index: int, to_index: int) -> None:
    """Move an item to another index in place; out-of-range indices are clamped."""
    if not items:
        return
    src = _clamp(from_index, len(items) - 1)
    dst = _clamp(to_index, len(items) - 1)
    if src == dst:
        return
    items.insert(dst, items.pop(src))


def transfer_list_item(source: list[T], target: list[T], from_index: int, to_index: int) -> None:
    """Move an item from *source* into *target* at *to_index*, in place."""
    if not source:
        return
    src = _clamp(from_index, len(source) - 1)
    dst = _clamp(to_index, len(target))
    target.insert(dst, source.pop(src))


@dataclass
class DragInteraction:
    """One drag/drop gesture and where it is in its lifecycle."""

    source: str
    source_index: int
    task: Task
    state: DragState = DragState.IDLE
    target: Optional[str] = None
    target_index: Optional[int] = None
    kind: Optional[DropKind] = None
    future: Optional["Future[bool]"] = None
    error: Optional[BaseException] = None

    @property
    def at_rest(self) -> bool:
        return self.state in REST_STATES

    def advance(self, new_state: DragState) -> None:
        if new_state not in DRAG_TRANSITIONS[self.state]:
            raise ValueError(f"Invalid drag transition: {self.state.value} -> {new_state.value}")
        self.state = new_state


def _check_list(name: str) -> str:
    if name not in TASK_LISTS:
        raise ValueError(f"Unknown list {name!r}; expected one of {TASK_LISTS}")
    return name


class BoardController:
    """Local mirror of one employee's board plus the remote edit protocol.

    Parameters
    ----------
    api:
        Task board API client.
    emp_id:
        Employee whose board is mirrored; confirmed at sign-in.
    executor:
        Pool for remote calls. One is created (and owned) when omitted.
    on_error:
        Optional hook called with ``(operation, exc)`` after a remote failure,
        for UIs that want to surface it; failures are always logged.
    """

    def __init__(
        self,
        api: TaskBoardClient,
        emp_id: int,
        *,
        executor: Optional[ThreadPoolExecutor] = None,
        on_error: Optional[Callable[[str, BaseException], None]] = None,
    ) -> None:
        self.api = api
        self.emp_id = emp_id
        self._owns_executor = executor is None
        self._executor = executor or ThreadPoolExecutor(
            max_workers=DEFAULT_CLIENT_WORKERS, thread_name_prefix="nodebucket-board"
        )
        self._on_error = on_error
        self._lock = threading.RLock()
        self._todo: list[Task] = []
        self._done: list[Task] = []
        self.last_error: Optional[str] = None

    # -- lifecycle ----------------------------------------------------------

    def close(self) -> None:
        if self._owns_executor:
            self._executor.shutdown(wait=True)

    def __enter__(self) -> "BoardController":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    # -- mirror -------------------------------------------------------------

    @property
    def todo(self) -> list[Task]:
        with self._lock:
            return list(self._todo)

    @property
    def done(self) -> list[Task]:
        with self._lock:
            return list(self._done)

    def snapshot(self) -> TaskLists:
        with self._lock:
            return TaskLists(emp_id=self.emp_id, todo=list(self._todo), done=list(self._done))

    def _list(self, name: str) -> list[Task]:
        return self._todo if _check_list(name) == TODO_LIST else self._done

    def _record_failure(self, operation: str, exc: BaseException) -> None:
        self.last_error = f"Unable to {operation} for employee {self.emp_id}: {exc}"
        logger.error(self.last_error)
        if self._on_error is not None:
            self._on_error(operation, exc)

    def _submit(self, job: Callable[[], T]) -> "Future[T]":
        return self._executor.submit(job)

    # -- operations ---------------------------------------------------------

    def load(self) -> bool:
        """Fetch both lists and replace the mirror; on failure keep it as is."""
        try:
            lists = self.api.get_tasks(self.emp_id)
        except REMOTE_ERRORS as exc:
            self._record_failure("get employee data", exc)
            return False
        with self._lock:
            self._todo = list(lists.todo)
            self._done = list(lists.done)
        logger.debug(f"Loaded board for {self.emp_id}: todo={len(lists.todo)} done={len(lists.done)}")
        return True

    def create(self, text: str) -> Optional["Future[Optional[Task]]"]:
        """Create a task remotely; the mirror gains it only once the server answers.

        Blank text is rejected locally and returns ``None`` without a request.
        """
        if not isinstance(text, str) or not text.strip():
            logger.warning("Ignoring blank task text")
            return None

        def _job() -> Optional[Task]:
            try:
                task_id = self.api.create_task(self.emp_id, text)
            except REMOTE_ERRORS as exc:
                self._record_failure("create task", exc)
                return None
            task = Task(id=task_id, text=text)
            with self._lock:
                self._todo.append(task)
            logger.info(f"Created task {task_id}: {preview(text)!r}")
            return task

        return self._submit(_job)

    def remove(
        self,
        task_id: str,
        confirm: Optional[Callable[[], bool]] = None,
    ) -> Optional["Future[bool]"]:
        """Drop *task_id* from the mirror now and delete it remotely.

        When *confirm* is given and returns ``False`` nothing happens and
        ``None`` is returned. A remote failure is logged; the task stays gone
        locally.
        """
        if confirm is not None and not confirm():
            return None
        with self._lock:
            self._todo = [t for t in self._todo if t.id != task_id]
            self._done = [t for t in self._done if t.id != task_id]

        def _job() -> bool:
            try:
                self.api.delete_task(self.emp_id, task_id)
            except REMOTE_ERRORS as exc:
                self._record_failure("delete task", exc)
                return False
            logger.info(f"Task deleted with id {task_id}")
            return True

        return self._submit(_job)

    # -- drag and drop ------------------------------------------------------

    def start_drag(self, source: str, index: int) -> DragInteraction:
        with self._lock:
            items = self._list(source)
            if not 0 <= index < len(items):
                raise IndexError(f"No task at {source}[{index}]")
            interaction = DragInteraction(source=source, source_index=index, task=items[index])
        interaction.advance(DragState.DRAGGING)
        return interaction

    def cancel_drag(self, interaction: DragInteraction) -> DragInteraction:
        interaction.advance(DragState.IDLE)
        return interaction

    def drop(self, interaction: DragInteraction, target: str, index: int) -> DragInteraction:
        """Reposition the dragged task locally, then persist both lists.

        The snapshot sent to the server is taken synchronously at drop time.
        If the task left the mirror while being dragged the gesture returns to
        ``IDLE`` without a request.
        """
        _check_list(target)
        with self._lock:
            source_items = self._list(interaction.source)
            current = next(
                (i for i, t in enumerate(source_items) if t.id == interaction.task.id),
                None,
            )
            if current is None:
                logger.warning(f"Dragged task {interaction.task.id} is no longer on the board")
                interaction.advance(DragState.IDLE)
                return interaction

            interaction.advance(DragState.DROPPED)
            interaction.target = target
            interaction.target_index = index
            if target == interaction.source:
                interaction.kind = DropKind.SAME_LIST
                move_item_in_list(source_items, current, index)
            else:
                interaction.kind = DropKind.CROSS_LIST
                transfer_list_item(source_items, self._list(target), current, index)
            todo = list(self._todo)
            done = list(self._done)
            logger.debug(f"Moved item in {target}: {[t.id for t in self._list(target)]}")

        interaction.advance(DragState.PERSISTING)
        interaction.future = self._submit(lambda: self._persist(interaction, todo, done))
        return interaction

    def move(self, source: str, from_index: int, target: str, to_index: int) -> DragInteraction:
        """A complete drag/drop in one call."""
        return self.drop(self.start_drag(source, from_index), target, to_index)

    def _persist(self, interaction: DragInteraction, todo: list[Task], done: list[Task]) -> bool:
        try:
            self.api.replace_tasks(self.emp_id, todo, done)
        except REMOTE_ERRORS as exc:
            interaction.error = exc
            interaction.advance(DragState.FAILED)
            self._record_failure("update task lists", exc)
            return False
        interaction.advance(DragState.SYNCED)
        logger.debug("Task lists updated successfully")
        return True


def describe(interaction: DragInteraction) -> dict[str, Any]:
    """JSON-friendly summary of a drag interaction for logs and the CLI."""
    return {
        "task": interaction.task.id,
        "from": f"{interaction.source}[{interaction.source_index}]",
        "to": f"{interaction.target}[{interaction.target_index}]" if interaction.target else None,
        "kind": interaction.kind.value if interaction.kind else None,
        "state": interaction.state.value,
    }
