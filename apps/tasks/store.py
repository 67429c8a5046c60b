"""
TaskStore - Storage abstraction for Tasks.

The store is the only component allowed to change persisted state. It owns
transaction boundaries and the schema lifecycle; the service above it only
forwards calls.

Usage:
    from apps.tasks.store import get_store

    store = get_store(settings)
    store.open(settings.connection_parameters)
    store.prepare('up', settings.migration_location)

Environment Configuration:
    TASK_STORE_BACKEND=django  # Relational store via the Django ORM (production)
    TASK_STORE_BACKEND=memory  # In-process store (development/testing)
"""
import logging
from abc import ABC, abstractmethod
from typing import List, Optional

from config.service import ServiceSettings
from .cancellation import CancellationToken
from .dtos import Task
from .exceptions import TaskValidationError

logger = logging.getLogger(__name__)

PREPARE_OPTIONS = ('up', 'down', 'drop')


class TaskStoreInterface(ABC):
    """
    Abstract interface for Task persistence.

    Implementations:
    - DjangoTaskStore: PostgreSQL/SQLite through the Django ORM
    - MemoryTaskStore: In-process dictionary for development/testing

    Every data operation accepts an optional CancellationToken and runs in
    its own transaction.
    """

    @abstractmethod
    def open(self, options: str) -> None:
        """Connect using a connection-parameters string and verify it works."""

    @abstractmethod
    def close(self) -> None:
        """Release the connection. Raises StoreConnectionError if never opened."""

    @abstractmethod
    def prepare(self, option: str, location: str) -> None:
        """
        Run a schema lifecycle step.

        Args:
            option: 'up' (apply pending), 'down' (revert latest) or 'drop' (erase all)
            location: Where the ordered schema changes live
        """

    @abstractmethod
    def version(self, location: str) -> Optional[str]:
        """Latest applied schema change, or None when nothing is applied."""

    @abstractmethod
    def insert(self, task: Task, token: Optional[CancellationToken] = None) -> None:
        """Persist a new task, assigning id and created_at in place."""

    @abstractmethod
    def update(self, task: Task, token: Optional[CancellationToken] = None) -> None:
        """Overwrite an existing task, stamping updated_at in place."""

    @abstractmethod
    def read(self, task_id: int, token: Optional[CancellationToken] = None) -> Task:
        pass

    @abstractmethod
    def delete(self, task_id: int, token: Optional[CancellationToken] = None) -> Task:
        """Remove a task and return its final persisted state."""

    @abstractmethod
    def list(self, limit: int, offset: int, token: Optional[CancellationToken] = None) -> List[Task]:
        """Up to `limit` tasks ordered by id, skipping the first `offset`."""


def get_store(settings: ServiceSettings) -> TaskStoreInterface:
    """Get the configured store backend based on ServiceSettings.store_backend."""
    backend = settings.store_backend
    logger.debug(f"Using task store backend: {backend}")

    if backend == 'django':
        from apps.tasks.backends.django_backend import DjangoTaskStore
        return DjangoTaskStore()
    elif backend == 'memory':
        from apps.tasks.backends.memory_backend import MemoryTaskStore
        return MemoryTaskStore()
    else:
        raise ValueError(f"Unknown TASK_STORE_BACKEND: {backend}")


def check_page(limit: int, offset: int) -> None:
    """Reject pagination values no backend can honour."""
    if limit < 0:
        raise TaskValidationError('limit', f"Limit '{limit}' may not be negative")
    if offset < 0:
        raise TaskValidationError('offset', f"Offset '{offset}' may not be negative")
