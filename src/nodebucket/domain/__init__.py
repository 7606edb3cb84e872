from .models import Task, TaskLists

__all__ = ["Task", "TaskLists"]
