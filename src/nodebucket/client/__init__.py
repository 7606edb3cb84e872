"""Python client for the task board: HTTP wrapper, sign-in and board controller."""

from .api_client import RemoteError, TaskBoardClient
from .board import BoardController, DragInteraction, DragState, DropKind
from .signin import SessionUser, SignInError, sign_in

__all__ = [
    "BoardController",
    "DragInteraction",
    "DragState",
    "DropKind",
    "RemoteError",
    "SessionUser",
    "SignInError",
    "TaskBoardClient",
    "sign_in",
]
