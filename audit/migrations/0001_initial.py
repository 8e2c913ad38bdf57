# Generated manually for the lifecycle audit trail

import uuid
from django.db import migrations, models
import django.utils.timezone


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='AuditLog',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('user_id', models.CharField(
                    blank=True,
                    db_index=True,
                    help_text='UUID of user who performed the action (null for system)',
                    max_length=36,
                    null=True,
                )),
                ('action', models.CharField(
                    choices=[
                        ('report_created', 'Report Created'),
                        ('report_status_changed', 'Report Status Changed'),
                        ('report_assigned', 'Report Assigned'),
                        ('report_auto_assigned', 'Report Auto-Assigned'),
                        ('report_comment_added', 'Report Comment Added'),
                    ],
                    db_index=True,
                    help_text='Action being logged',
                    max_length=50,
                )),
                ('resource_type', models.CharField(
                    choices=[('report', 'Report'), ('assignment', 'Assignment'), ('comment', 'Comment')],
                    help_text='Type of entity being acted upon',
                    max_length=30,
                )),
                ('resource_id', models.CharField(
                    blank=True,
                    db_index=True,
                    help_text='UUID of target entity (as string)',
                    max_length=36,
                    null=True,
                )),
                ('details', models.JSONField(blank=True, default=dict, help_text='Additional structured data about the action')),
                ('timestamp', models.DateTimeField(db_index=True, default=django.utils.timezone.now, help_text='When the action occurred')),
            ],
            options={
                'verbose_name': 'Audit Log',
                'verbose_name_plural': 'Audit Logs',
                'db_table': 'audit_logs',
                'ordering': ['-timestamp'],
            },
        ),
        migrations.AddIndex(
            model_name='auditlog',
            index=models.Index(fields=['action', 'timestamp'], name='audit_action_ts_idx'),
        ),
        migrations.AddIndex(
            model_name='auditlog',
            index=models.Index(fields=['resource_type', 'resource_id'], name='audit_resource_idx'),
        ),
    ]
