"""Task endpoints for one employee's board.

Mounted under ``/api`` by :func:`~nodebucket.server.api.create_app`. Handlers
are plain ``def`` so blocking store I/O runs in the threadpool and requests for
different employees proceed independently.
"""

from __future__ import annotations

from typing import Any, Callable
from urllib.parse import quote

from fastapi import APIRouter, Body, Response, status
from fastapi.responses import JSONResponse

from ..constants import TASK_ID_HEADER
from ..service import TaskService, parse_emp_id
from .models import ERROR_RESPONSES, CreatedTaskResponse, TaskListsResponse


def create_task_router(get_service: Callable[[], TaskService]) -> APIRouter:
    """Create the task router.

    Parameters
    ----------
    get_service:
        Zero-argument callable returning the app's :class:`TaskService`.
    """
    router = APIRouter(prefix="/employees/{emp_id}/tasks", tags=["tasks"], responses=ERROR_RESPONSES)

    @router.get("", response_model=TaskListsResponse)
    def get_tasks(emp_id: str) -> dict[str, Any]:
        """Return the employee's ``todo`` and ``done`` lists."""
        emp = parse_emp_id(emp_id)
        return get_service().get(emp).to_dict()

    @router.post("", response_model=CreatedTaskResponse, status_code=status.HTTP_201_CREATED)
    def create_task(emp_id: str, payload: Any = Body(None)) -> JSONResponse:
        """Append a task to the tail of ``todo``; body is ``{"text": str}``."""
        emp = parse_emp_id(emp_id)
        task_id = get_service().create(emp, payload)
        return JSONResponse({"id": task_id}, status_code=status.HTTP_201_CREATED)

    @router.put("", status_code=status.HTTP_204_NO_CONTENT)
    def replace_tasks(emp_id: str, payload: Any = Body(None)) -> Response:
        """Overwrite both lists; the body must hold the complete desired state."""
        emp = parse_emp_id(emp_id)
        get_service().replace_all(emp, payload)
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    @router.delete("/{task_id}", status_code=status.HTTP_204_NO_CONTENT)
    def delete_task(emp_id: str, task_id: str) -> Response:
        """Remove a task from either list; succeeds even if it was never there.

        The removed id is echoed percent-encoded in the ``X-Task-Id`` header.
        """
        emp = parse_emp_id(emp_id)
        removed = get_service().remove(emp, task_id)
        return Response(
            status_code=status.HTTP_204_NO_CONTENT,
            headers={TASK_ID_HEADER: quote(removed, safe="")},
        )

    return router
