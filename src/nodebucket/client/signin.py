"""Sign-in: confirm an employee id before a board controller starts."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any

import httpx
from loguru import logger

from .api_client import RemoteError, TaskBoardClient

INVALID_EMP_ID_MESSAGE = "The employee ID is invalid, please try again."

_DIGITS_RE = re.compile(r"\d+")


class SignInError(Exception):
    """Sign-in failed; ``message`` is suitable for display."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


@dataclass
class SessionUser:
    emp_id: int
    first_name: str = ""
    last_name: str = ""

    @property
    def display_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip() or str(self.emp_id)

    @classmethod
    def from_employee(cls, employee: dict[str, Any]) -> "SessionUser":
        return cls(
            emp_id=int(employee["empId"]),
            first_name=str(employee.get("firstName") or ""),
            last_name=str(employee.get("lastName") or ""),
        )


def sign_in(api: TaskBoardClient, raw_emp_id: Any) -> SessionUser:
    """Validate *raw_emp_id* locally, then look the employee up.

    Raises:
        SignInError: The id is not numeric, the employee does not exist, or the
            server could not be reached.
    """
    text = str(raw_emp_id).strip() if raw_emp_id is not None else ""
    if not _DIGITS_RE.fullmatch(text):
        raise SignInError(INVALID_EMP_ID_MESSAGE)
    try:
        employee = api.find_employee(int(text))
    except RemoteError as exc:
        logger.warning(f"Sign-in rejected for {text}: {exc.message}")
        raise SignInError(exc.message) from exc
    except httpx.HTTPError as exc:
        logger.error(f"Sign-in failed for {text}: {exc}")
        raise SignInError(str(exc)) from exc
    user = SessionUser.from_employee({**employee, "empId": employee.get("empId", int(text))})
    logger.info(f"Signed in {user.display_name} ({user.emp_id})")
    return user
