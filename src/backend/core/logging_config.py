"""
Logging configuration for the operations console.
Provides structured logging with different levels and formats.

- Uses QueueHandler so log writes never block the event loop
- QueueListener handles file I/O in a separate thread
"""

import atexit
import logging
import logging.handlers
import queue
import sys
from pathlib import Path
from typing import Optional
from uuid import UUID

from pydantic import BaseModel

from core.middleware.correlation import CorrelationIdFilter


# Global queue listener for cleanup
_queue_listener: Optional[logging.handlers.QueueListener] = None
_atexit_registered = False


class LogConfig(BaseModel):
    """Logging configuration settings."""

    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    date_format: str = "%Y-%m-%d %H:%M:%S"
    enable_file_logging: bool = True
    log_dir: str = "logs"
    max_file_size: int = 10 * 1024 * 1024  # 10MB
    backup_count: int = 5
    enable_console: bool = True


class ColoredFormatter(logging.Formatter):
    """Custom formatter with colors for console output."""

    grey = "\x1b[38;21m"
    yellow = "\x1b[33;21m"
    red = "\x1b[31;21m"
    bold_red = "\x1b[31;1m"
    blue = "\x1b[34;21m"
    reset = "\x1b[0m"

    COLORS = {
        logging.DEBUG: grey,
        logging.INFO: blue,
        logging.WARNING: yellow,
        logging.ERROR: red,
        logging.CRITICAL: bold_red,
    }

    def format(self, record):
        color = self.COLORS.get(record.levelno, self.grey)
        original_levelname = record.levelname
        record.levelname = f"{color}{record.levelname}{self.reset}"
        try:
            formatted = super().format(record)
        finally:
            # Other handlers share the record
            record.levelname = original_levelname
        return f"{formatted}{self.reset}"


def _rotating_handler(config: LogConfig, filename: str, formatter: logging.Formatter) -> logging.Handler:
    handler = logging.handlers.RotatingFileHandler(
        Path(config.log_dir) / filename,
        maxBytes=config.max_file_size,
        backupCount=config.backup_count,
        encoding="utf-8",
    )
    handler.setLevel(getattr(logging, config.level.upper()))
    handler.setFormatter(formatter)
    return handler


def setup_logging(config: Optional[LogConfig] = None) -> None:
    """Setup application logging with configuration.

    - Console handler is attached directly (stdout is non-blocking)
    - File handlers sit behind a QueueListener thread
    - The workflow log only receives records from the "workflow" logger tree
    """
    global _queue_listener, _atexit_registered

    if config is None:
        config = LogConfig()

    if _queue_listener:
        _queue_listener.stop()
        _queue_listener = None

    if config.enable_file_logging:
        Path(config.log_dir).mkdir(exist_ok=True)

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, config.level.upper()))
    root_logger.handlers.clear()

    if config.enable_console:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(getattr(logging, config.level.upper()))
        console_handler.setFormatter(
            ColoredFormatter(
                fmt="%(asctime)s | %(correlation_id)s | %(name)s | %(levelname)s | %(message)s",
                datefmt=config.date_format,
            )
        )
        console_handler.addFilter(CorrelationIdFilter())
        root_logger.addHandler(console_handler)

    file_handlers = []

    if config.enable_file_logging:
        file_formatter = logging.Formatter(
            fmt="%(asctime)s | %(correlation_id)s | %(name)s | %(levelname)s | %(funcName)s:%(lineno)d | %(message)s",
            datefmt=config.date_format,
        )

        file_handlers.append(_rotating_handler(config, "app.log", file_formatter))

        workflow_handler = _rotating_handler(config, "workflow.log", file_formatter)
        workflow_handler.addFilter(logging.Filter("workflow"))
        file_handlers.append(workflow_handler)

    if file_handlers:
        log_queue = queue.Queue(-1)
        queue_handler = logging.handlers.QueueHandler(log_queue)
        queue_handler.addFilter(CorrelationIdFilter())
        root_logger.addHandler(queue_handler)

        _queue_listener = logging.handlers.QueueListener(
            log_queue,
            *file_handlers,
            respect_handler_level=True,
        )
        _queue_listener.start()
        if not _atexit_registered:
            atexit.register(stop_queue_listener)
            _atexit_registered = True

    from .config import settings

    sqlalchemy_logger = logging.getLogger("sqlalchemy.engine")
    if settings.logging.enable_query_logging:
        sqlalchemy_logger.setLevel(getattr(logging, config.level.upper()))
    else:
        sqlalchemy_logger.setLevel(logging.WARNING)


def stop_queue_listener() -> None:
    """Stop the queue listener gracefully.

    Called automatically on exit via atexit.
    Can also be called manually during shutdown.
    """
    global _queue_listener

    if _queue_listener:
        _queue_listener.stop()
        _queue_listener = None


class WorkflowLogger:
    """Structured logger for facility, order, task and customer workflows."""

    def __init__(self, name: str = "core"):
        self.logger = logging.getLogger(f"workflow.{name}")

    @staticmethod
    def _actor(actor_id: Optional[UUID]) -> str:
        return f"Actor: {actor_id}" if actor_id else "Actor: system"

    def flag_changed(
        self,
        facility_id: UUID,
        category: str,
        complete: bool,
        summary_label: str,
        actor_id: Optional[UUID] = None,
    ) -> None:
        """Log a completion flag write."""
        self.logger.info(
            f"Completion flag changed | Facility ID: {facility_id} | "
            f"Category: {category} | Complete: {complete} | {summary_label} | "
            f"{self._actor(actor_id)}"
        )

    def order_completed(
        self,
        order_id: UUID,
        already_invoiced: bool,
        revision: int,
        actor_id: Optional[UUID] = None,
    ) -> None:
        """Log when an order is closed."""
        self.logger.info(
            f"Order completed | Order ID: {order_id} | "
            f"Already invoiced: {already_invoiced} | Revision: {revision} | "
            f"{self._actor(actor_id)}"
        )

    def invoice_task_created(
        self, order_id: UUID, task_id: UUID, technician_id: UUID
    ) -> None:
        """Log when the billing follow-up task is created."""
        self.logger.info(
            f"Invoice task created | Order ID: {order_id} | Task ID: {task_id} | "
            f"Assignee: {technician_id}"
        )

    def order_invoiced(self, order_id: UUID, task_id: UUID) -> None:
        """Log when a done invoice task moves its order to invoiced."""
        self.logger.info(
            f"Order invoiced | Order ID: {order_id} | Triggered by task: {task_id}"
        )

    def cascade_step_failed(
        self,
        customer_id: UUID,
        step: str,
        entity: str,
        entity_id: Optional[UUID],
        error: str,
    ) -> None:
        """Log a single failed write inside the deactivation cascade."""
        self.logger.warning(
            f"Cascade step failed | Customer ID: {customer_id} | Step: {step} | "
            f"{entity}: {entity_id} | Error: {error}"
        )

    def customer_deactivated(
        self,
        customer_id: UUID,
        succeeded: int,
        failed: int,
        preserved: int,
        actor_id: Optional[UUID] = None,
    ) -> None:
        """Log the outcome of a deactivation cascade."""
        log = self.logger.warning if failed else self.logger.info
        log(
            f"Customer deactivation finished | Customer ID: {customer_id} | "
            f"Succeeded: {succeeded} | Failed: {failed} | Preserved: {preserved} | "
            f"{self._actor(actor_id)}"
        )

    def orphan_detected(self, customer_id: UUID, facility_id: UUID) -> None:
        """Log when a facility edit leaves its previous owner without dependents."""
        self.logger.info(
            f"Customer left without dependents | Customer ID: {customer_id} | "
            f"After moving facility: {facility_id}"
        )

    def error_occurred(
        self,
        operation: str,
        entity: Optional[str] = None,
        entity_id: Optional[UUID] = None,
        error: str = "",
    ) -> None:
        """Log errors with context."""
        context_str = f"{entity}: {entity_id}" if entity else "No context"
        self.logger.error(
            f"Workflow error | Operation: {operation} | {context_str} | Error: {error}"
        )
