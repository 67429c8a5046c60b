from django.db import migrations, models
from django.db.models import F, Q


class Migration(migrations.Migration):

    dependencies = [
        ('tasks', '0001_initial'),
    ]

    operations = [
        migrations.AddConstraint(
            model_name='taskrecord',
            constraint=models.CheckConstraint(
                condition=Q(updated_at__isnull=True) | Q(updated_at__gte=F('created_at')),
                name='tasks_updated_not_before_created',
            ),
        ),
    ]
