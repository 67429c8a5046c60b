"""
API Gateway proxy responses for the task handlers.

Errors are rendered as JSON:API error documents:
    {"errors": [{"status": "404", "title": "Not Found", "detail": "...", "meta": {"error": "..."}}]}
"""
import json
import logging
from http import HTTPStatus
from typing import Any, Dict

from .exceptions import (
    IllAdvisedInsertError,
    MalformedInputError,
    OperationCancelled,
    TaskNotFoundError,
    TaskValidationError,
)

logger = logging.getLogger(__name__)

WARMUP_BODY = 'Ignoring warm up invocation'

# (status, detail) per exception type, most specific first
ERROR_STATUS = [
    (MalformedInputError, HTTPStatus.BAD_REQUEST, 'Request parameter was invalid or unable to parse/process'),
    (TaskValidationError, HTTPStatus.UNPROCESSABLE_ENTITY, 'Request parameter was invalid or unable to parse/process'),
    (IllAdvisedInsertError, HTTPStatus.UNPROCESSABLE_ENTITY, 'Request parameter was invalid or unable to parse/process'),
    (TaskNotFoundError, HTTPStatus.NOT_FOUND, 'Record not found'),
]


def is_scheduled_warmup_event(event: Dict[str, Any]) -> bool:
    """Scheduled warm-up pings arrive without an API Gateway resource."""
    return not event.get('resource')


def warmup_response() -> dict:
    return {
        'statusCode': int(HTTPStatus.OK),
        'body': WARMUP_BODY,
    }


def json_response(payload: Any, status: int = HTTPStatus.OK) -> dict:
    return {
        'statusCode': int(status),
        'headers': {'Content-Type': 'application/json'},
        'body': json.dumps(payload),
    }


def status_for(error: Exception) -> HTTPStatus:
    for error_type, status, _ in ERROR_STATUS:
        if isinstance(error, error_type):
            return status
    if isinstance(error, OperationCancelled) and error.deadline_exceeded:
        return HTTPStatus.GATEWAY_TIMEOUT
    return HTTPStatus.INTERNAL_SERVER_ERROR


def error_response(error: Exception) -> dict:
    """Map an exception onto an API Gateway error response."""
    status = status_for(error)
    detail = next(
        (d for error_type, _, d in ERROR_STATUS if isinstance(error, error_type)),
        'an unrecoverable error has occurred',
    )

    if status >= HTTPStatus.INTERNAL_SERVER_ERROR:
        logger.error(f"Request failed with {int(status)}: {error!r}")

    return json_response(
        {
            'errors': [
                {
                    'status': str(int(status)),
                    'title': status.phrase,
                    'detail': detail,
                    'meta': {'error': str(error)},
                }
            ]
        },
        status,
    )
