"""
Technician CRUD for database operations.
"""
from crud.base_repository import BaseCRUD
from db import Technician


class TechnicianCRUD(BaseCRUD[Technician]):
    """CRUD for Technician database operations."""

    model = Technician
    entity_name = "technician"
