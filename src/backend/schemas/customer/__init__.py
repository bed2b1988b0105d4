"""Customer schemas package."""
from .customer import CustomerListItem, CustomerRead

__all__ = [
    "CustomerRead",
    "CustomerListItem",
]
