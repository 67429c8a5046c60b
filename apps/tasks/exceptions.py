"""
Exceptions raised by the task service.

Storage raises them, the service and middleware let them through
untouched, and lambda_handlers maps them onto HTTP status codes.
"""
from typing import Optional


class TaskError(Exception):
    """Base class for every task service failure."""


class MalformedInputError(TaskError):
    """Payload or path parameter could not be parsed into a Task."""


class TaskValidationError(TaskError):
    """A sanitized Task violates a field constraint."""

    def __init__(self, field: str, message: str):
        self.field = field
        self.message = message
        super().__init__(f"validation - {message}")


class IllAdvisedInsertError(TaskError):
    """Insert attempted with a pre-assigned ID."""

    def __init__(self, task_id: int):
        self.task_id = task_id
        super().__init__(
            "inserting a Task with non-zero ID is inadvisable; either pass a clean "
            "Task or do an update if this is an existing record"
        )


class TaskNotFoundError(TaskError):
    def __init__(self, task_id: int):
        self.task_id = task_id
        super().__init__(f"task {task_id} not found")


class TransactionRollbackError(TaskError):
    """
    A statement failed and rolling back the transaction failed too.

    Both failures are kept: `original` is what broke the transaction,
    `rollback_error` is what broke the rollback.
    """

    def __init__(self, original: BaseException, rollback_error: BaseException):
        self.original = original
        self.rollback_error = rollback_error
        super().__init__(
            f"an unrecoverable exception has occurred rolling back the transaction "
            f"({original}) -> ({rollback_error})"
        )


class StoreConnectionError(TaskError):
    """Store could not be opened, or was closed/used without being opened."""


class SchemaError(TaskError):
    """Schema lifecycle request could not be carried out."""


class OperationCancelled(TaskError):
    DEADLINE_EXCEEDED = "deadline exceeded"

    def __init__(self, reason: Optional[str] = None):
        self.reason = reason or "operation cancelled"
        super().__init__(self.reason)

    @property
    def deadline_exceeded(self) -> bool:
        return self.reason == self.DEADLINE_EXCEEDED
