"""
Integration tests for the Lambda handlers.

Every invocation opens and closes its own store, so the tests point the
handlers at a SQLite file and run migrate_handler first.
"""
import base64
import json
import os
import shutil
import tempfile
from unittest import TestCase, mock

import lambda_handlers
from apps.tasks.responses import WARMUP_BODY


def api_event(body=None, task_id=None):
    event = {'resource': '/tasks/{id}' if task_id is not None else '/tasks'}
    if body is not None:
        event['body'] = body if isinstance(body, str) else json.dumps(body)
    if task_id is not None:
        event['pathParameters'] = {'id': str(task_id)}
    return event


def body_of(response):
    return json.loads(response['body'])


class HandlerTestCase(TestCase):

    def setUp(self):
        directory = tempfile.mkdtemp(prefix='tasks-handlers-')
        self.addCleanup(shutil.rmtree, directory, True)

        patcher = mock.patch.dict(os.environ, {
            'DATABASE_CONNECTION_PARAMETERS': f"sqlite://{os.path.join(directory, 'tasks.sqlite3')}",
            'TASK_STORE_BACKEND': 'django',
            'ENVIRONMENT': 'test',
        })
        patcher.start()
        self.addCleanup(patcher.stop)

        response = lambda_handlers.migrate_handler({'body': '{"option": "up"}'}, None)
        self.assertEqual(response['statusCode'], 200)

    def create(self, **fields):
        response = lambda_handlers.create_handler(api_event(fields), None)
        self.assertEqual(response['statusCode'], 200, response['body'])
        return body_of(response)


class MigrateHandlerTest(HandlerTestCase):
    """Test migrate_handler."""

    def test_up_reports_version(self):
        response = lambda_handlers.migrate_handler({}, None)
        self.assertEqual(body_of(response), {
            'success': True,
            'version': '0002_tasks_updated_not_before_created',
        })

    def test_drop(self):
        response = lambda_handlers.migrate_handler({'body': '{"option": "drop"}'}, None)
        self.assertEqual(body_of(response), {'success': True, 'version': None})

    def test_unknown_option(self):
        response = lambda_handlers.migrate_handler({'body': '{"option": "sideways"}'}, None)
        self.assertEqual(response['statusCode'], 400)


class CreateHandlerTest(HandlerTestCase):
    """Test create_handler."""

    def test_warmup_is_ignored(self):
        response = lambda_handlers.create_handler({'source': 'aws.events'}, None)
        self.assertEqual(response['statusCode'], 200)
        self.assertEqual(response['body'], WARMUP_BODY)

    def test_create(self):
        created = self.create(name='write handlers', details='with tests')
        self.assertEqual(created['id'], 1)
        self.assertEqual(created['name'], 'write handlers')
        self.assertIn('created_at', created)
        self.assertNotIn('updated_at', created)

    def test_base64_body(self):
        event = api_event()
        event['body'] = base64.b64encode(b'{"name": "encoded"}').decode('ascii')
        event['isBase64Encoded'] = True
        response = lambda_handlers.create_handler(event, None)
        self.assertEqual(body_of(response)['name'], 'encoded')

    def test_malformed_body(self):
        response = lambda_handlers.create_handler(api_event('{not json'), None)
        self.assertEqual(response['statusCode'], 400)
        self.assertEqual(body_of(response)['errors'][0]['status'], '400')

    def test_missing_name(self):
        response = lambda_handlers.create_handler(api_event({'details': 'no name'}), None)
        self.assertEqual(response['statusCode'], 400)

    def test_invalid_name(self):
        response = lambda_handlers.create_handler(api_event({'name': 'bad_name'}), None)
        self.assertEqual(response['statusCode'], 422)

    def test_store_unreachable(self):
        with mock.patch.dict(os.environ, {'DATABASE_CONNECTION_PARAMETERS': 'mysql://nope/tasks'}):
            response = lambda_handlers.create_handler(api_event({'name': 'lost'}), None)
        self.assertEqual(response['statusCode'], 500)


class ReadUpdateDeleteHandlerTest(HandlerTestCase):
    """Test the handlers that address a task by id."""

    def test_read(self):
        created = self.create(name='read me')
        response = lambda_handlers.read_handler(api_event(task_id=created['id']), None)
        self.assertEqual(response['statusCode'], 200)
        self.assertEqual(body_of(response), created)

    def test_read_missing(self):
        response = lambda_handlers.read_handler(api_event(task_id=77), None)
        self.assertEqual(response['statusCode'], 404)

    def test_bad_id(self):
        for raw in ('abc', '-1'):
            event = api_event()
            event['pathParameters'] = {'id': raw}
            response = lambda_handlers.read_handler(event, None)
            self.assertEqual(response['statusCode'], 400)

    def test_update(self):
        created = self.create(name='before')
        response = lambda_handlers.update_handler(
            api_event({'name': 'after', 'resolved_at': '2024-06-01T10:00:00Z'}, task_id=created['id']),
            None,
        )
        updated = body_of(response)

        self.assertEqual(response['statusCode'], 200)
        self.assertEqual(updated['name'], 'after')
        self.assertEqual(updated['created_at'], created['created_at'])
        self.assertIn('updated_at', updated)
        self.assertTrue(updated['resolved_at'].startswith('2024-06-01T10:00:00'))

    def test_update_missing(self):
        response = lambda_handlers.update_handler(api_event({'name': 'ghost'}, task_id=5), None)
        self.assertEqual(response['statusCode'], 404)

    def test_delete(self):
        created = self.create(name='delete me')
        response = lambda_handlers.delete_handler(api_event(task_id=created['id']), None)
        self.assertEqual(body_of(response)['id'], created['id'])

        response = lambda_handlers.read_handler(api_event(task_id=created['id']), None)
        self.assertEqual(response['statusCode'], 404)


class IndexHandlerTest(HandlerTestCase):
    """Test index_handler."""

    def test_pages(self):
        for number in range(1, 8):
            self.create(name=f'task {number}')

        response = lambda_handlers.index_handler(api_event({'limit': 3, 'offset': 2}), None)
        tasks = body_of(response)['tasks']
        self.assertEqual([t['id'] for t in tasks], [3, 4, 5])

    def test_default_limit_returns_nothing(self):
        self.create(name='hidden')
        response = lambda_handlers.index_handler(api_event(), None)
        self.assertEqual(body_of(response), {'tasks': []})

    def test_negative_limit(self):
        response = lambda_handlers.index_handler(api_event({'limit': -1}), None)
        self.assertEqual(response['statusCode'], 400)
