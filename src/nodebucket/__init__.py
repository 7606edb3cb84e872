"""Provide the public `nodebucket` package exports."""

from __future__ import annotations

from .service import TaskService

__version__ = "1.0.0"

__all__ = ["TaskService", "__version__"]
