"""Synchronous HTTP client for the task board API (httpx)."""

from __future__ import annotations

from typing import Any, Optional
from urllib.parse import quote, unquote

import httpx

from ..constants import API_PREFIX, DEFAULT_CLIENT_TIMEOUT_SECONDS, TASK_ID_HEADER
from ..domain.models import Task, TaskLists, tasks_to_raw
from ..errors import FieldError


class RemoteError(Exception):
    """The API answered with an error status."""

    def __init__(
        self,
        status: int,
        message: str,
        violations: Optional[list[FieldError]] = None,
    ) -> None:
        super().__init__(f"{status}: {message}")
        self.status = status
        self.message = message
        self.violations = list(violations or [])


def _raise_for_error(response: httpx.Response) -> None:
    if response.is_success:
        return
    message = response.reason_phrase or "Request failed"
    violations: list[FieldError] = []
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict):
        message = str(body.get("message") or message)
        for item in body.get("violations") or []:
            if isinstance(item, dict):
                violations.append(FieldError(field=str(item.get("field")), message=str(item.get("message"))))
    raise RemoteError(response.status_code, message, violations)


class TaskBoardClient:
    """Thin wrapper over the task board endpoints.

    Parameters
    ----------
    base_url:
        Server root, e.g. ``http://127.0.0.1:3000``.
    http:
        Pre-built ``httpx.Client`` (tests pass a ``TestClient`` or one with a
        ``MockTransport``). When omitted a client is created and owned here.
    timeout:
        Transport timeout for an owned client.
    """

    def __init__(
        self,
        base_url: str = "http://127.0.0.1:3000",
        *,
        http: Optional[httpx.Client] = None,
        timeout: float = DEFAULT_CLIENT_TIMEOUT_SECONDS,
    ) -> None:
        self._owns_http = http is None
        self._http = http or httpx.Client(base_url=base_url, timeout=timeout)

    def close(self) -> None:
        if self._owns_http:
            self._http.close()

    def __enter__(self) -> "TaskBoardClient":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def _url(self, emp_id: int, *parts: str) -> str:
        return "/".join([f"{API_PREFIX}/employees/{emp_id}", *parts])

    def find_employee(self, emp_id: int | str) -> dict[str, Any]:
        response = self._http.get(f"{API_PREFIX}/employees/{emp_id}")
        _raise_for_error(response)
        return response.json()

    def get_tasks(self, emp_id: int) -> TaskLists:
        response = self._http.get(self._url(emp_id, "tasks"))
        _raise_for_error(response)
        data = response.json()
        return TaskLists.from_document({**data, "empId": data.get("empId", emp_id)})

    def create_task(self, emp_id: int, text: str) -> str:
        response = self._http.post(self._url(emp_id, "tasks"), json={"text": text})
        _raise_for_error(response)
        return str(response.json()["id"])

    def replace_tasks(self, emp_id: int, todo: list[Task], done: list[Task]) -> None:
        response = self._http.put(
            self._url(emp_id, "tasks"),
            json={"todo": tasks_to_raw(todo), "done": tasks_to_raw(done)},
        )
        _raise_for_error(response)

    def delete_task(self, emp_id: int, task_id: str) -> str:
        response = self._http.delete(self._url(emp_id, "tasks", quote(task_id, safe="")))
        _raise_for_error(response)
        echoed = response.headers.get(TASK_ID_HEADER)
        return unquote(echoed) if echoed is not None else task_id
