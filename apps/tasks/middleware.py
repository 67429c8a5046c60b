import uuid
import logging
from typing import Any, Callable, Optional

from .services import Middleware, TaskServiceInterface

LOG_FORMAT = "request_id=%s function=%s parameters=%s response=%s error=%s"


class LoggingMiddleware(TaskServiceInterface):
    """
    Logs one line per call made to the wrapped service.

    Each line carries a fresh request ID, the operation, its parameters,
    the result and the error. Logging happens after the wrapped call
    returns or raises; results and exceptions pass through untouched.
    """

    def __init__(self, next_service: TaskServiceInterface, logger: logging.Logger):
        self.next = next_service
        self.logger = logger

    def create(self, task, token=None):
        parameters = str(task)
        self._observe('task create', parameters, lambda: self.next.create(task, token), lambda _: task)

    def update(self, task, token=None):
        parameters = str(task)
        self._observe('task update', parameters, lambda: self.next.update(task, token), lambda _: task)

    def read(self, task_id, token=None):
        return self._observe('task read', str(task_id), lambda: self.next.read(task_id, token))

    def delete(self, task_id, token=None):
        return self._observe('task delete', str(task_id), lambda: self.next.delete(task_id, token))

    def list(self, limit, offset, token=None):
        parameters = f"{{Limit: {limit}, Offset: {offset}}}"
        return self._observe(
            'task list',
            parameters,
            lambda: self.next.list(limit, offset, token),
            lambda tasks: '[' + ', '.join(str(t) for t in tasks) + ']' if tasks is not None else None,
        )

    def shutdown(self):
        self._observe('task shutdown', '', self.next.shutdown, lambda _: '')

    def _observe(
        self,
        operation: str,
        parameters: str,
        call: Callable[[], Any],
        render: Optional[Callable[[Any], Any]] = None,
    ) -> Any:
        request_id = uuid.uuid4()
        result = None
        error = None
        try:
            result = call()
            return result
        except Exception as e:
            error = e
            raise
        finally:
            response = render(result) if render else result
            self.logger.info(LOG_FORMAT, request_id, operation, parameters, response, error)


def new_logging_middleware(logger: logging.Logger) -> Middleware:
    """Returns a Middleware that wraps a service in LoggingMiddleware."""
    def middleware(next_service: TaskServiceInterface) -> TaskServiceInterface:
        return LoggingMiddleware(next_service, logger)
    return middleware
