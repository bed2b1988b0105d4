"""
Centralized error handling decorators for store operations.
Wraps database calls so that any driver or SQLAlchemy failure leaves the
session usable (rolled back) and surfaces as a StoreError naming the
entity and the attempted operation.
"""
import functools
import inspect
import logging
from typing import Any, Callable, Optional
from uuid import UUID

from sqlalchemy.exc import (
    DisconnectionError,
    IntegrityError,
    OperationalError,
    SQLAlchemyError,
    StatementError,
    TimeoutError,
)
from sqlalchemy.ext.asyncio import AsyncSession

from core.exceptions import StoreError, WorkflowError


logger = logging.getLogger(__name__)


class DatabaseErrorHandler:
    """Centralized database error handling utilities."""

    DATABASE_EXCEPTIONS = (
        SQLAlchemyError,
        ConnectionError,
    )

    @staticmethod
    def handle_database_error(
        exc: Exception,
        operation: str,
        context: Optional[dict] = None
    ) -> tuple[bool, str]:
        """
        Classify a database error and log it.

        Args:
            exc: The exception that occurred
            operation: Description of the database operation
            context: Additional context information

        Returns:
            Tuple of (is_recoverable, error_message)
        """
        context_str = f" | Context: {context}" if context else ""

        if isinstance(exc, IntegrityError):
            error_msg = f"Database integrity error during {operation}: {exc}{context_str}"
            logger.warning(error_msg)
            return False, error_msg

        elif isinstance(exc, (ConnectionError, DisconnectionError)):
            error_msg = f"Database connection error during {operation}: {exc}{context_str}"
            logger.error(error_msg)
            return True, error_msg

        elif isinstance(exc, TimeoutError):
            error_msg = f"Database timeout during {operation}: {exc}{context_str}"
            logger.warning(error_msg)
            return True, error_msg

        elif isinstance(exc, OperationalError):
            error_msg = f"Database operational error during {operation}: {exc}{context_str}"
            logger.error(error_msg)
            return True, error_msg

        elif isinstance(exc, StatementError):
            error_msg = f"Database statement error during {operation}: {exc}{context_str}"
            logger.warning(error_msg)
            return False, error_msg

        error_msg = f"Unexpected database error during {operation}: {type(exc).__name__}: {exc}{context_str}"
        logger.exception(error_msg)
        return False, error_msg


def _find_session(args: tuple, kwargs: dict) -> Optional[AsyncSession]:
    for value in (*args, *kwargs.values()):
        if isinstance(value, AsyncSession):
            return value
    return None


def _find_entity_id(args: tuple, kwargs: dict) -> Optional[UUID]:
    for value in (*args, *kwargs.values()):
        if isinstance(value, UUID):
            return value
    return None


def handle_database_exceptions(operation_name: Optional[str] = None) -> Callable:
    """
    Decorator translating database failures of an async store call into StoreError.

    The session found in the call arguments is rolled back before the error
    is raised. WorkflowError subclasses (NotFoundError,
    ConcurrentModificationError, ...) pass through untouched.

    The entity name is taken from the `entity_name` attribute of the first
    positional argument (the CRUD class) when present.

    Args:
        operation_name: Name of the operation for logging (defaults to function name)
    """
    def decorator(func: Callable) -> Callable:
        is_async = inspect.iscoroutinefunction(func) or inspect.iscoroutinefunction(
            getattr(func, "__wrapped__", None)
        )
        if not is_async:
            raise TypeError(f"handle_database_exceptions requires an async function, got {func!r}")

        @functools.wraps(func)
        async def async_wrapper(*args, **kwargs) -> Any:
            operation = operation_name or getattr(func, "__name__", "unknown")
            entity = getattr(args[0], "entity_name", None) if args else None

            try:
                result = await func(*args, **kwargs)
                logger.debug(f"Successfully completed {operation}")
                return result

            except WorkflowError:
                raise

            except DatabaseErrorHandler.DATABASE_EXCEPTIONS as exc:
                entity_id = _find_entity_id(args, kwargs)
                _, error_msg = DatabaseErrorHandler.handle_database_error(
                    exc, operation, {"entity": entity, "entity_id": entity_id}
                )

                db_session = _find_session(args, kwargs)
                if db_session is not None:
                    try:
                        await db_session.rollback()
                    except SQLAlchemyError as rollback_exc:
                        logger.error(f"Failed to rollback session after {operation}: {rollback_exc}")

                raise StoreError(
                    error_msg,
                    operation=operation,
                    entity=entity,
                    entity_id=entity_id,
                ) from exc

        return async_wrapper

    return decorator


def log_database_operation(
    operation: str,
    level: str = "debug"
) -> Callable:
    """
    Decorator to log the start, end and failure of a service operation.

    Args:
        operation: Description of the operation
        level: Logging level ('debug', 'info', 'warning', 'error')
    """
    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        async def async_wrapper(*args, **kwargs) -> Any:
            logger_method = getattr(logger, level)
            func_name = getattr(func, "__name__", "unknown")
            logger_method(f"Starting {operation} via {func_name}")

            try:
                result = await func(*args, **kwargs)
                logger_method(f"Completed {operation} via {func_name}")
                return result
            except Exception as exc:
                logger_method(f"Failed {operation} via {func_name}: {exc}")
                raise

        return async_wrapper

    return decorator
