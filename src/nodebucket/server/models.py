"""Pydantic models for API responses."""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class TaskOut(BaseModel):
    """One task as returned to clients."""

    id: str
    text: str


class TaskListsResponse(BaseModel):
    """Both task lists of an employee."""

    empId: int
    todo: list[TaskOut] = Field(default_factory=list)
    done: list[TaskOut] = Field(default_factory=list)


class CreatedTaskResponse(BaseModel):
    id: str


class EmployeeResponse(BaseModel):
    """Employee document; profile fields pass through untouched."""

    model_config = ConfigDict(extra="allow")

    empId: int
    firstName: Optional[str] = None
    lastName: Optional[str] = None


class Violation(BaseModel):
    field: str
    message: str


class ErrorResponse(BaseModel):
    type: str = "error"
    status: int
    message: str
    violations: Optional[list[Violation]] = None
    detail: Optional[str] = None
    stack: Optional[str] = None


class HealthResponse(BaseModel):
    status: str
    version: str
    environment: str


ERROR_RESPONSES: dict[int | str, dict[str, Any]] = {
    400: {"model": ErrorResponse, "description": "Invalid employee id or payload"},
    404: {"model": ErrorResponse, "description": "Employee not found"},
    500: {"model": ErrorResponse, "description": "Store unavailable"},
}
