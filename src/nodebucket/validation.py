"""Request payload schemas and the reusable `validate` function.

Schemas are compiled once (pydantic ``TypeAdapter``) by :func:`build_task_schemas`
and shared by every request; :func:`validate` never raises for a bad payload and instead
reports every field-level violation it finds.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from typing import Annotated, Any, Callable, Generic, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field, StrictStr, TypeAdapter, ValidationError

from .constants import DONE_LIST, TODO_LIST
from .errors import FieldError

T = TypeVar("T")

NonEmptyStr = Annotated[StrictStr, Field(min_length=1)]


class _Payload(BaseModel):
    model_config = ConfigDict(extra="forbid")


class CreateTaskPayload(_Payload):
    text: NonEmptyStr


class TaskItem(_Payload):
    id: NonEmptyStr
    text: NonEmptyStr


class ReplaceTasksPayload(_Payload):
    todo: list[TaskItem]
    done: list[TaskItem]


Check = Callable[[Any], list[FieldError]]


class Schema(Generic[T]):
    """A named payload shape plus optional cross-field checks."""

    def __init__(self, name: str, model: type[T], checks: tuple[Check, ...] = ()) -> None:
        self.name = name
        self.model = model
        self.checks = checks
        self._adapter: TypeAdapter[T] = TypeAdapter(model)

    def __repr__(self) -> str:
        return f"Schema({self.name!r})"


@dataclass
class ValidationResult(Generic[T]):
    value: Optional[T] = None
    errors: list[FieldError] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors


def _format_loc(loc: tuple[Any, ...]) -> str:
    if not loc:
        return "body"
    out = ""
    for part in loc:
        if isinstance(part, int):
            out += f"[{part}]"
        else:
            out += f".{part}" if out else str(part)
    return out


def validate(schema: Schema[T], payload: Any) -> ValidationResult[T]:
    """Check *payload* against *schema*.

    Returns:
        A result whose ``value`` is the parsed payload when ``ok``; otherwise
        ``errors`` lists every violation as ``FieldError(field, message)``.
    """
    try:
        value = schema._adapter.validate_python(payload)
    except ValidationError as exc:
        violations = [
            FieldError(field=_format_loc(tuple(err["loc"])), message=err["msg"])
            for err in exc.errors()
        ]
        return ValidationResult(errors=violations)
    errors: list[FieldError] = []
    for check in schema.checks:
        errors.extend(check(value))
    if errors:
        return ValidationResult(errors=errors)
    return ValidationResult(value=value)


def unique_task_ids(payload: ReplaceTasksPayload) -> list[FieldError]:
    """A task id may appear only once across both lists."""
    counts = Counter(item.id for item in payload.todo + payload.done)
    errors: list[FieldError] = []
    for name, items in ((TODO_LIST, payload.todo), (DONE_LIST, payload.done)):
        for idx, item in enumerate(items):
            if counts[item.id] > 1:
                errors.append(
                    FieldError(field=f"{name}[{idx}].id", message=f"Duplicate task id {item.id!r}")
                )
    return errors


@dataclass(frozen=True)
class TaskSchemas:
    """The compiled schemas the task service validates against."""

    create: Schema[CreateTaskPayload]
    replace: Schema[ReplaceTasksPayload]


def build_task_schemas() -> TaskSchemas:
    """Compile the task payload schemas; build once per app and share."""
    return TaskSchemas(
        create=Schema("create-task", CreateTaskPayload),
        replace=Schema("replace-tasks", ReplaceTasksPayload, checks=(unique_task_ids,)),
    )
