"""
Service configuration for the task service.

Settings are read from the environment once per invocation and passed
explicitly to the store, the middleware and the handlers.

Environment Configuration:
    DATABASE_CONNECTION_PARAMETERS  # postgres://... or sqlite:///...
    TASK_MIGRATION_LOCATION         # migrations module or app label
    TASK_STORE_BACKEND=django       # Relational store (production)
    TASK_STORE_BACKEND=memory       # In-process store (development)
    ENVIRONMENT=test                # Discard service log lines
    LOG_LEVEL=INFO
"""
import os
import logging
from dataclasses import dataclass

DEFAULT_MIGRATION_LOCATION = 'apps.tasks.migrations'
SERVICE_LOGGER_NAME = 'task_service'


@dataclass(frozen=True)
class ServiceSettings:
    connection_parameters: str
    migration_location: str = DEFAULT_MIGRATION_LOCATION
    store_backend: str = 'django'
    environment: str = 'production'
    log_level: str = 'INFO'

    @property
    def is_test(self) -> bool:
        return self.environment == 'test'


def get_service_settings() -> ServiceSettings:
    """Build ServiceSettings from the process environment."""
    return ServiceSettings(
        connection_parameters=os.getenv('DATABASE_CONNECTION_PARAMETERS', ''),
        migration_location=os.getenv('TASK_MIGRATION_LOCATION', DEFAULT_MIGRATION_LOCATION),
        store_backend=os.getenv('TASK_STORE_BACKEND', 'django'),
        environment=os.getenv('ENVIRONMENT', 'production'),
        log_level=os.getenv('LOG_LEVEL', 'INFO').upper(),
    )


def build_service_logger(settings: ServiceSettings) -> logging.Logger:
    """
    Returns the logger sink handed to the logging middleware.

    In the test environment the lines are swallowed by a NullHandler so
    test output stays readable.
    """
    service_logger = logging.getLogger(SERVICE_LOGGER_NAME)
    service_logger.setLevel(settings.log_level)

    if settings.is_test:
        if not any(isinstance(h, logging.NullHandler) for h in service_logger.handlers):
            service_logger.addHandler(logging.NullHandler())
        service_logger.propagate = False
    else:
        service_logger.propagate = True

    return service_logger
