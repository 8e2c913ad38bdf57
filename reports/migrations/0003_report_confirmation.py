"""
Adds ReportConfirmation: one confirmation per (report, user).
"""

from django.conf import settings
from django.db import migrations, models
import django.db.models.deletion
import uuid


class Migration(migrations.Migration):

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
        ('reports', '0002_status_history_sequence'),
    ]

    operations = [
        migrations.CreateModel(
            name='ReportConfirmation',
            fields=[
                ('id', models.UUIDField(
                    default=uuid.uuid4,
                    editable=False,
                    help_text='Unique identifier (UUID v4)',
                    primary_key=True,
                    serialize=False
                )),
                ('created_at', models.DateTimeField(
                    auto_now_add=True,
                    db_index=True,
                    help_text='Timestamp when record was created'
                )),
                ('updated_at', models.DateTimeField(
                    auto_now=True,
                    help_text='Timestamp when record was last updated'
                )),
                ('report', models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE,
                    related_name='confirmations',
                    to='reports.report'
                )),
                ('user', models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE,
                    related_name='report_confirmations',
                    to=settings.AUTH_USER_MODEL
                )),
            ],
            options={
                'verbose_name': 'Report Confirmation',
                'verbose_name_plural': 'Report Confirmations',
                'db_table': 'report_confirmations',
                'ordering': ['-created_at'],
                'constraints': [
                    models.UniqueConstraint(fields=('report', 'user'), name='confirmation_once_per_user'),
                ],
            },
        ),
    ]
