"""Error taxonomy shared by the store, the service and the HTTP boundary."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Optional


@dataclass(frozen=True)
class FieldError:
    """One field-level schema violation."""

    field: str
    message: str

    def to_dict(self) -> dict[str, str]:
        return asdict(self)


class TaskBoardError(Exception):
    """Base class for every error the API reports to callers."""

    status: int = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict[str, Any]:
        return {"type": "error", "status": self.status, "message": self.message}


class InvalidArgument(TaskBoardError):
    """Malformed identifier or payload failing schema validation."""

    status = 400

    def __init__(self, message: str, violations: Optional[list[FieldError]] = None) -> None:
        super().__init__(message)
        self.violations = list(violations or [])

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        if self.violations:
            data["violations"] = [v.to_dict() for v in self.violations]
        return data


class NotFound(TaskBoardError):
    """No employee document exists for the given id."""

    status = 404


class StoreUnavailable(TaskBoardError):
    """Transient persistence or connectivity failure."""

    status = 500
