"""
Memory Task Backend - In-process storage for development.

Keeps tasks in a dictionary owned by the store instance. Behaves like the
relational backend (sanitize/validate, ill-advised inserts, not-found
errors, id ordering, pagination) so services can be exercised without a
database.

Usage:
    Set TASK_STORE_BACKEND=memory in your .env file.
    The connection parameters are ignored.
"""
import copy
import logging
from typing import Dict, List, Optional

from django.utils import timezone

from apps.tasks.cancellation import CancellationToken
from apps.tasks.dtos import Task
from apps.tasks.exceptions import (
    IllAdvisedInsertError,
    SchemaError,
    StoreConnectionError,
    TaskNotFoundError,
)
from apps.tasks.store import PREPARE_OPTIONS, TaskStoreInterface, check_page

logger = logging.getLogger(__name__)

SCHEMA_VERSION = 'memory_initial'


class MemoryTaskStore(TaskStoreInterface):
    """
    Store tasks in memory for the lifetime of the instance.

    Note: Nothing survives the process, and two instances never see each
    other's data. Only use for development and tests.
    """

    def __init__(self):
        self._rows: Optional[Dict[int, Task]] = None
        self._next_id = 1
        self._opened = False

    def open(self, options: str) -> None:
        if self._opened:
            raise StoreConnectionError("store is already open")
        self._opened = True
        logger.info("[MEMORY] Store opened")

    def close(self) -> None:
        if not self._opened:
            raise StoreConnectionError("database was not initialized or in a connected state")
        self._opened = False
        logger.info("[MEMORY] Store closed")

    def prepare(self, option: str, location: str) -> None:
        self._check_open()
        if option not in PREPARE_OPTIONS:
            raise SchemaError("no valid option provided, unable to prepare")

        if option == 'up':
            if self._rows is None:
                self._rows = {}
        else:
            # A single schema change: reverting it and erasing everything are the same
            self._rows = None
            self._next_id = 1
        logger.info(f"[MEMORY] Schema {option} complete")

    def version(self, location: str) -> Optional[str]:
        self._check_open()
        return SCHEMA_VERSION if self._rows is not None else None

    def insert(self, task: Task, token: Optional[CancellationToken] = None) -> None:
        if task.id != 0:
            raise IllAdvisedInsertError(task.id)

        task.sanitize()
        task.validate()

        rows = self._table(token)
        timestamp = timezone.now()

        stored = copy.deepcopy(task)
        stored.id = self._next_id
        stored.created_at = timestamp
        stored.updated_at = None

        # Nothing is written until the token has been checked one last time
        self._check_token(token)
        rows[stored.id] = stored
        self._next_id += 1

        task.id = stored.id
        task.created_at = timestamp
        task.updated_at = None

    def update(self, task: Task, token: Optional[CancellationToken] = None) -> None:
        task.sanitize()
        task.validate()

        rows = self._table(token)
        existing = rows.get(task.id)
        if existing is None:
            raise TaskNotFoundError(task.id)

        timestamp = timezone.now()
        stored = Task(
            id=existing.id,
            name=task.name,
            details=task.details,
            resolved_at=task.resolved_at,
            created_at=existing.created_at,
            updated_at=timestamp,
        )

        self._check_token(token)
        rows[task.id] = stored
        task.updated_at = timestamp

    def read(self, task_id: int, token: Optional[CancellationToken] = None) -> Task:
        rows = self._table(token)
        if task_id not in rows:
            raise TaskNotFoundError(task_id)
        return copy.deepcopy(rows[task_id])

    def delete(self, task_id: int, token: Optional[CancellationToken] = None) -> Task:
        rows = self._table(token)
        if task_id not in rows:
            raise TaskNotFoundError(task_id)

        self._check_token(token)
        return rows.pop(task_id)

    def list(self, limit: int, offset: int, token: Optional[CancellationToken] = None) -> List[Task]:
        check_page(limit, offset)
        rows = self._table(token)
        page = []
        for task_id in sorted(rows)[offset:offset + limit]:
            self._check_token(token)
            page.append(copy.deepcopy(rows[task_id]))
        return page

    def _check_open(self) -> None:
        if not self._opened:
            raise StoreConnectionError("database was not initialized or in a connected state")

    @staticmethod
    def _check_token(token: Optional[CancellationToken]) -> None:
        if token is not None:
            token.raise_if_cancelled()

    def _table(self, token: Optional[CancellationToken]) -> Dict[int, Task]:
        self._check_open()
        self._check_token(token)
        if self._rows is None:
            raise SchemaError("tasks table does not exist; run prepare('up') first")
        return self._rows
