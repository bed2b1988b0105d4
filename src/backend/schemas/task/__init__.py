"""Task schemas package."""
from .task import TaskCreate, TaskRead, TaskUpdate

__all__ = [
    "TaskCreate",
    "TaskUpdate",
    "TaskRead",
]
