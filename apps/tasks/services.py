"""
Services for Tasks app.
This is the public API for handlers and other apps to work with tasks.

Usage:
    from apps.tasks.services import new_service
    from apps.tasks.middleware import new_logging_middleware

    service = new_service([new_logging_middleware(logger)], store)
    service.create(task)
    service.shutdown()

Every layer (core service and each middleware) implements
TaskServiceInterface, so callers never know how many wrappers there are.
"""
from abc import ABC, abstractmethod
from typing import Callable, List, Optional, Sequence

from .cancellation import CancellationToken
from .dtos import Task
from .store import TaskStoreInterface


class TaskServiceInterface(ABC):
    """
    Abstract interface for the task service.

    Implementations:
    - TaskService: Innermost layer, forwards to a TaskStoreInterface
    - LoggingMiddleware: Logs every call made to the layer it wraps
    """

    @abstractmethod
    def create(self, task: Task, token: Optional[CancellationToken] = None) -> None:
        """Persist a new task; id and created_at are filled in place."""

    @abstractmethod
    def update(self, task: Task, token: Optional[CancellationToken] = None) -> None:
        """Overwrite an existing task; updated_at is filled in place."""

    @abstractmethod
    def read(self, task_id: int, token: Optional[CancellationToken] = None) -> Task:
        pass

    @abstractmethod
    def delete(self, task_id: int, token: Optional[CancellationToken] = None) -> Task:
        pass

    @abstractmethod
    def list(self, limit: int, offset: int, token: Optional[CancellationToken] = None) -> List[Task]:
        pass

    @abstractmethod
    def shutdown(self) -> None:
        """Release the underlying storage connection."""


Middleware = Callable[[TaskServiceInterface], TaskServiceInterface]


class TaskService(TaskServiceInterface):
    """Core service: hands every call to the store, errors included."""

    def __init__(self, store: TaskStoreInterface):
        self.store = store

    def create(self, task, token=None):
        self.store.insert(task, token)

    def update(self, task, token=None):
        self.store.update(task, token)

    def read(self, task_id, token=None):
        return self.store.read(task_id, token)

    def delete(self, task_id, token=None):
        return self.store.delete(task_id, token)

    def list(self, limit, offset, token=None):
        return self.store.list(limit, offset, token)

    def shutdown(self):
        self.store.close()


def compose(middlewares: Sequence[Middleware], base: TaskServiceInterface) -> TaskServiceInterface:
    """
    Wrap base in middlewares so the first one listed is outermost.

    compose([m1, m2], base) == m1(m2(base))
    """
    service = base
    for middleware in reversed(middlewares):
        service = middleware(service)
    return service


def new_service(middlewares: Sequence[Middleware], store: TaskStoreInterface) -> TaskServiceInterface:
    """Build the core service on an opened store and wrap it in middlewares."""
    return compose(middlewares, TaskService(store))
