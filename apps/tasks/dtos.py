"""DTOs for Tasks app."""
import math
from dataclasses import dataclass
from datetime import datetime, timezone as dt_timezone
from typing import List, Literal, Optional

from django.core.exceptions import ValidationError
from django.core.validators import RegexValidator
from django.utils import timezone

from .exceptions import TaskValidationError


name_validator = RegexValidator(
    regex=r'\A[a-zA-Z0-9 \-:]{1,50}\Z',
    message=(
        "Name '%(value)s' must be comprised only of letters, numbers, spaces and "
        "hyphens/colons and may not be empty and may not exceed 50 characters"
    ),
    code='invalid_name',
)

details_validator = RegexValidator(
    regex=r'\A[a-zA-Z0-9 \-:]{0,512}\Z',
    message=(
        "Details '%(value)s' must be comprised only of letters, numbers, spaces and "
        "hyphens/colons and may not exceed 512 characters"
    ),
    code='invalid_details',
)


def to_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Normalise a timestamp to UTC; naive values are taken to be UTC already."""
    if value is None:
        return None
    if timezone.is_naive(value):
        return timezone.make_aware(value, dt_timezone.utc)
    return value.astimezone(dt_timezone.utc)


def _unix_seconds(value: datetime) -> int:
    return math.floor(value.timestamp())


def _same_second(left: Optional[datetime], right: Optional[datetime]) -> bool:
    if left is None or right is None:
        return left is None and right is None
    return _unix_seconds(left) == _unix_seconds(right)


@dataclass
class Task:
    """
    Data Transfer Object for Task - the only shape callers see.

    id == 0 means the task has not been persisted yet. created_at and
    updated_at belong to the store: callers leave them alone.
    """
    id: int = 0
    name: str = ''
    details: Optional[str] = None
    resolved_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def __str__(self):
        return (
            f"{{ID: {self.id}, Name: {self.name}, Details: {self.details or '<nil>'}, "
            f"ResolvedAt: {self.resolved_at or '<nil>'}, CreatedAt: {self.created_at or '<nil>'}, "
            f"UpdatedAt: {self.updated_at or '<nil>'}}}"
        )

    def sanitize(self) -> None:
        """
        Make the task internally consistent before validation.

        Idempotent and never fails:
        - an unsaved task cannot have been updated
        - empty details collapse to None
        - every timestamp is moved to UTC
        """
        if self.id == 0:
            self.updated_at = None

        if self.details == '':
            self.details = None

        self.resolved_at = to_utc(self.resolved_at)
        self.created_at = to_utc(self.created_at)
        self.updated_at = to_utc(self.updated_at)

    def validate(self) -> None:
        """Raise TaskValidationError for the first rule the task breaks."""
        self._validate_name()
        self._validate_details()
        self._validate_updated_at()

    def compare(self, other: 'Task') -> bool:
        """
        Field-by-field equality, timestamps to the second.

        Meant for checking round trips, not for business logic.
        """
        return (
            self.id == other.id
            and self.name == other.name
            and self.details == other.details
            and _same_second(self.resolved_at, other.resolved_at)
            and _same_second(self.created_at, other.created_at)
            and _same_second(self.updated_at, other.updated_at)
        )

    def _validate_name(self) -> None:
        if not isinstance(self.name, str):
            raise TaskValidationError(
                'name',
                f"Name '{self.name}' must be comprised only of letters, numbers, spaces and "
                "hyphens/colons and may not be empty and may not exceed 50 characters",
            )
        try:
            name_validator(self.name)
        except ValidationError as exc:
            raise TaskValidationError('name', exc.messages[0]) from exc

    def _validate_details(self) -> None:
        if self.details is None:
            return
        if not isinstance(self.details, str):
            raise TaskValidationError('details', f"Details '{self.details}' must be text")
        try:
            details_validator(self.details)
        except ValidationError as exc:
            raise TaskValidationError('details', exc.messages[0]) from exc

    def _validate_updated_at(self) -> None:
        if self.updated_at is None:
            return

        if self.id == 0:
            raise TaskValidationError(
                'updated_at',
                f"UpdatedAt '{self.updated_at}' should not be present when there is no pre-assigned ID",
            )

        if self.created_at is not None and _unix_seconds(self.created_at) > _unix_seconds(self.updated_at):
            raise TaskValidationError(
                'updated_at',
                f"UpdatedAt '{self.updated_at}' should not occur before the CreatedAt timestamp",
            )


from ninja import Field, Schema


class TaskIn(Schema):
    name: str
    details: Optional[str] = None
    resolved_at: Optional[datetime] = None

    def to_task(self, task_id: int = 0) -> Task:
        return Task(
            id=task_id,
            name=self.name,
            details=self.details,
            resolved_at=self.resolved_at,
        )


class TaskOut(Schema):
    id: int
    name: str
    details: Optional[str] = None
    resolved_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class TaskListOut(Schema):
    tasks: List[TaskOut]


class ListQueryIn(Schema):
    limit: int = Field(0, ge=0)
    offset: int = Field(0, ge=0)


class MigrateIn(Schema):
    option: Literal['up', 'down', 'drop'] = 'up'
