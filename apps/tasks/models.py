from django.db import models
from django.db.models import F, Q


class TaskRecord(models.Model):
    """
    Persisted row for a Task.

    Only the relational store touches this model; everything above the
    store works with the Task DTO from dtos.py.
    """
    id = models.BigAutoField(primary_key=True)

    # User fields
    name = models.CharField(max_length=50)
    details = models.CharField(max_length=512, null=True, blank=True)
    resolved_at = models.DateTimeField(null=True, blank=True)

    # Stamped by the store, never by clients
    created_at = models.DateTimeField()
    updated_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        db_table = 'tasks'
        ordering = ['id']
        constraints = [
            models.CheckConstraint(
                condition=Q(updated_at__isnull=True) | Q(updated_at__gte=F('created_at')),
                name='tasks_updated_not_before_created',
            ),
        ]

    def __str__(self):
        return f"{self.id} - {self.name}"
