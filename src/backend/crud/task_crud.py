"""
Task CRUD for database operations.
"""
from crud.base_repository import BaseCRUD
from db import Task


class TaskCRUD(BaseCRUD[Task]):
    """CRUD for Task database operations."""

    model = Task
    entity_name = "task"
