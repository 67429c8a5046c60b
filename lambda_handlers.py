"""
Lambda Handlers - Entry points for AWS Lambda functions.

Each handler is deployed as its own function behind API Gateway:
1. create_handler  - POST   /tasks          body: {"name", "details", "resolved_at"}
2. read_handler    - GET    /tasks/{id}
3. update_handler  - PUT    /tasks/{id}     body: {"name", "details", "resolved_at"}
4. delete_handler  - DELETE /tasks/{id}
5. index_handler   - GET    /tasks          body: {"limit", "offset"}
6. migrate_handler - Invoked directly to apply schema changes

Every invocation opens its own store connection and closes it before
returning. The handlers use Django's setup to access models and services.
"""

import os
import sys
import json
import time
import base64
import logging
from contextlib import contextmanager

# Ensure the project root is in the path for Lambda
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

# Configure Django before importing any models
os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'config.settings')

import django
django.setup()

from pydantic import ValidationError

from config.service import build_service_logger, get_service_settings
from apps.tasks.cancellation import CancellationToken
from apps.tasks.dtos import ListQueryIn, MigrateIn, TaskIn, TaskListOut, TaskOut
from apps.tasks.exceptions import MalformedInputError, TaskError
from apps.tasks.middleware import new_logging_middleware
from apps.tasks.responses import error_response, is_scheduled_warmup_event, json_response, warmup_response
from apps.tasks.services import new_service
from apps.tasks.store import get_store

logger = logging.getLogger(__name__)
logger.setLevel(logging.INFO)


# =============================================================================
# Shared plumbing
# =============================================================================

def _body(event) -> str:
    body = event.get('body') or '{}'
    if event.get('isBase64Encoded'):
        body = base64.b64decode(body).decode('utf-8')
    return body


def _parse_body(event, schema):
    try:
        payload = json.loads(_body(event))
    except ValueError as e:
        raise MalformedInputError(f"Request body is not valid JSON: {e}") from e
    if not isinstance(payload, dict):
        raise MalformedInputError("Request body must be a JSON object")
    try:
        return schema.model_validate(payload)
    except ValidationError as e:
        raise MalformedInputError(str(e)) from e


def _parse_id(event) -> int:
    raw = (event.get('pathParameters') or {}).get('id')
    try:
        task_id = int(raw)
    except (TypeError, ValueError):
        raise MalformedInputError(f"Path parameter id '{raw}' is not an unsigned integer") from None
    if task_id < 0:
        raise MalformedInputError(f"Path parameter id '{raw}' is not an unsigned integer")
    return task_id


@contextmanager
def _opened_store(settings):
    store = get_store(settings)
    store.open(settings.connection_parameters)
    try:
        yield store
    finally:
        try:
            store.close()
        except TaskError as e:
            logger.error(f"an unrecoverable error has occurred while trying to close the store: {e}")


@contextmanager
def _task_service(settings):
    store = get_store(settings)
    store.open(settings.connection_parameters)
    service = new_service([new_logging_middleware(build_service_logger(settings))], store)
    try:
        yield service
    finally:
        try:
            service.shutdown()
        except TaskError as e:
            logger.error(f"an unrecoverable error has occurred while trying to shutdown the service: {e}")


def _handle(event, context, parse, action):
    """
    Run one task service request.

    parse(event) turns the API Gateway event into request values;
    action(service, request, token) performs the call and returns a
    Schema to render.
    """
    if is_scheduled_warmup_event(event):
        logger.info("Warmup event detected...ignoring...")
        return warmup_response()

    start = time.monotonic()
    try:
        request = parse(event)
        logger.info(f"Event parsed: {time.monotonic() - start:.3f} seconds")

        settings = get_service_settings()
        token = CancellationToken.from_lambda_context(context)
        with _task_service(settings) as service:
            logger.info(f"Service started: {time.monotonic() - start:.3f} seconds")
            result = action(service, request, token)
        logger.info(f"Action finished: {time.monotonic() - start:.3f} seconds")
    except Exception as e:
        return error_response(e)

    response = json_response(result.model_dump(mode='json', exclude_none=True))
    logger.info(f"Completed: {time.monotonic() - start:.3f} seconds ({len(response['body'])} bytes)")
    return response


# =============================================================================
# Task Handlers
# =============================================================================

def create_handler(event, context):
    """
    AWS Lambda handler: create a task.

    Returns the stored task, including its assigned id and created_at.
    """
    def action(service, payload, token):
        task = payload.to_task()
        service.create(task, token)
        return TaskOut.from_orm(task)

    return _handle(event, context, lambda e: _parse_body(e, TaskIn), action)


def read_handler(event, context):
    """AWS Lambda handler: fetch one task by path id."""
    def action(service, task_id, token):
        return TaskOut.from_orm(service.read(task_id, token))

    return _handle(event, context, _parse_id, action)


def update_handler(event, context):
    """
    AWS Lambda handler: overwrite a task's user fields.

    The path id selects the task; the body replaces name, details and
    resolved_at. created_at is left as stored.
    """
    def parse(e):
        return _parse_id(e), _parse_body(e, TaskIn)

    def action(service, request, token):
        task_id, payload = request
        task = payload.to_task(task_id)
        service.update(task, token)
        return TaskOut.from_orm(service.read(task_id, token))

    return _handle(event, context, parse, action)


def delete_handler(event, context):
    """AWS Lambda handler: delete a task and return its final state."""
    def action(service, task_id, token):
        return TaskOut.from_orm(service.delete(task_id, token))

    return _handle(event, context, _parse_id, action)


def index_handler(event, context):
    """
    AWS Lambda handler: page through tasks ordered by id.

    limit defaults to 0, which returns no tasks.
    """
    def action(service, query, token):
        tasks = service.list(query.limit, query.offset, token)
        return TaskListOut(tasks=[TaskOut.from_orm(t) for t in tasks])

    return _handle(event, context, lambda e: _parse_body(e, ListQueryIn), action)


# =============================================================================
# Schema Handler
# =============================================================================

def migrate_handler(event, context):
    """
    AWS Lambda handler: run a schema lifecycle step.

    Invoked directly (not through API Gateway), so there is no warm-up
    filtering. Body: {"option": "up" | "down" | "drop"}, default "up".
    """
    start = time.monotonic()
    try:
        request = _parse_body(event or {}, MigrateIn)
        settings = get_service_settings()
        with _opened_store(settings) as store:
            logger.info(f"Store opened: {time.monotonic() - start:.3f} seconds")
            store.prepare(request.option, settings.migration_location)
            version = store.version(settings.migration_location)
        logger.info(f"Schema {request.option} finished: {time.monotonic() - start:.3f} seconds")
    except Exception as e:
        logger.exception(f"Schema migration failed: {e}")
        return error_response(e)

    return json_response({'success': True, 'version': version})
