"""Employee lookup used by sign-in to confirm an id exists."""

from __future__ import annotations

from typing import Any, Callable

from fastapi import APIRouter

from ..service import EmployeeDirectory, parse_emp_id
from .models import ERROR_RESPONSES, EmployeeResponse


def create_employee_router(get_directory: Callable[[], EmployeeDirectory]) -> APIRouter:
    router = APIRouter(prefix="/employees", tags=["employees"], responses=ERROR_RESPONSES)

    @router.get("/{emp_id}", response_model=EmployeeResponse)
    def find_employee(emp_id: str) -> dict[str, Any]:
        emp = parse_emp_id(emp_id)
        return get_directory().find(emp)

    return router
