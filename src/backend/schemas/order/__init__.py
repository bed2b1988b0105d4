"""Order schemas package."""
from .order import OrderCompletionRequest, OrderCreate, OrderRead, OrderUpdate

__all__ = [
    "OrderCompletionRequest",
    "OrderCreate",
    "OrderUpdate",
    "OrderRead",
]
