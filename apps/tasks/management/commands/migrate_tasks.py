from django.core.management.base import BaseCommand, CommandError

from config.service import get_service_settings
from apps.tasks.exceptions import TaskError
from apps.tasks.store import PREPARE_OPTIONS, get_store


class Command(BaseCommand):
    help = 'Applies, reverts or erases the tasks schema, or reports its version'

    def add_arguments(self, parser):
        parser.add_argument('option', choices=PREPARE_OPTIONS + ('version',))
        parser.add_argument(
            '--database-url',
            help='Connection parameters (defaults to DATABASE_CONNECTION_PARAMETERS)',
        )
        parser.add_argument(
            '--location',
            help='Where the schema changes live (defaults to TASK_MIGRATION_LOCATION)',
        )

    def handle(self, *args, **options):
        settings = get_service_settings()
        database_url = options['database_url'] or settings.connection_parameters
        location = options['location'] or settings.migration_location

        store = get_store(settings)
        try:
            store.open(database_url)
        except TaskError as e:
            raise CommandError(str(e)) from e

        try:
            if options['option'] != 'version':
                store.prepare(options['option'], location)
                self.stdout.write(self.style.SUCCESS(f"Schema {options['option']} complete"))
            version = store.version(location)
        except TaskError as e:
            raise CommandError(str(e)) from e
        finally:
            store.close()

        if version is None:
            self.stdout.write(self.style.WARNING('No schema changes applied'))
        else:
            self.stdout.write(self.style.SUCCESS(f'Schema version: {version}'))
