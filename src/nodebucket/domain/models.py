"""Task and task-list records shared by the store, service and board client."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable

from ..constants import DONE_LIST, TODO_LIST


@dataclass
class Task:
    """One unit of work on an employee's board."""

    id: str
    text: str

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "text": self.text}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Task":
        # Documents written by the earlier Mongo-backed service keyed tasks by `_id`.
        task_id = data.get("id", data.get("_id"))
        return cls(id=str(task_id), text=str(data.get("text", "")))


def tasks_from_raw(items: Any) -> list[Task]:
    if not isinstance(items, list):
        return []
    return [Task.from_dict(item) for item in items if isinstance(item, dict)]


def tasks_to_raw(tasks: Iterable[Task]) -> list[dict[str, Any]]:
    return [t.to_dict() for t in tasks]


@dataclass
class TaskLists:
    """The two ordered lists owned by one employee."""

    emp_id: int
    todo: list[Task] = field(default_factory=list)
    done: list[Task] = field(default_factory=list)

    def all_ids(self) -> list[str]:
        return [t.id for t in self.todo] + [t.id for t in self.done]

    def to_dict(self) -> dict[str, Any]:
        return {
            "empId": self.emp_id,
            TODO_LIST: tasks_to_raw(self.todo),
            DONE_LIST: tasks_to_raw(self.done),
        }

    @classmethod
    def from_document(cls, document: dict[str, Any]) -> "TaskLists":
        return cls(
            emp_id=int(document["empId"]),
            todo=tasks_from_raw(document.get(TODO_LIST)),
            done=tasks_from_raw(document.get(DONE_LIST)),
        )
