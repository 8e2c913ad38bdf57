"""
Initial migration for report lifecycle models.

Introduces:
- Organization: assignment target for external bodies
- Report: citizen submission with lifecycle status
- ReportStatusHistory: immutable status timeline
- ReportAssignment: immutable assignment records
- ReportComment: report discussion
"""

from django.conf import settings
from django.db import migrations, models
import django.db.models.deletion
import uuid


def _base_fields():
    return [
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
    ]


STATUS_CHOICES = [
    ('new', 'New'),
    ('triaged', 'Triaged'),
    ('assigned', 'Assigned'),
    ('in_progress', 'In Progress'),
    ('resolved', 'Resolved'),
    ('rejected', 'Rejected'),
]


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Organization',
            fields=_base_fields() + [
                ('name', models.CharField(max_length=200)),
                ('contact_email', models.EmailField(blank=True, max_length=254)),
                ('contact_phone', models.CharField(blank=True, max_length=50)),
            ],
            options={
                'verbose_name': 'Organization',
                'verbose_name_plural': 'Organizations',
                'db_table': 'organizations',
                'ordering': ['name'],
            },
        ),
        migrations.CreateModel(
            name='Report',
            fields=_base_fields() + [
                ('title', models.CharField(help_text='Short summary of the issue', max_length=200)),
                ('description', models.TextField(blank=True, help_text='Full description from the reporter')),
                ('type', models.CharField(
                    choices=[
                        ('pothole', 'Pothole'),
                        ('streetlight', 'Streetlight'),
                        ('sidewalk', 'Sidewalk'),
                        ('drainage', 'Drainage'),
                        ('other', 'Other'),
                    ],
                    db_index=True,
                    default='other',
                    max_length=20
                )),
                ('severity', models.CharField(
                    choices=[('low', 'Low'), ('medium', 'Medium'), ('high', 'High')],
                    db_index=True,
                    default='medium',
                    max_length=10
                )),
                ('status', models.CharField(
                    choices=STATUS_CHOICES,
                    db_index=True,
                    default='new',
                    help_text='Current report status (written by the status ledger only)',
                    max_length=20
                )),
                ('latitude', models.DecimalField(blank=True, decimal_places=7, max_digits=10, null=True)),
                ('longitude', models.DecimalField(blank=True, decimal_places=7, max_digits=10, null=True)),
                ('address_text', models.CharField(blank=True, max_length=255)),
                ('reporter', models.ForeignKey(
                    blank=True,
                    help_text='Citizen who submitted the report',
                    null=True,
                    on_delete=django.db.models.deletion.SET_NULL,
                    related_name='reports',
                    to=settings.AUTH_USER_MODEL
                )),
            ],
            options={
                'verbose_name': 'Report',
                'verbose_name_plural': 'Reports',
                'db_table': 'reports',
                'ordering': ['-created_at'],
                'indexes': [
                    models.Index(fields=['status', 'created_at'], name='reports_status_created_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='ReportStatusHistory',
            fields=_base_fields() + [
                ('from_status', models.CharField(
                    blank=True,
                    choices=STATUS_CHOICES,
                    help_text='Previous status (null for initial submission)',
                    max_length=20,
                    null=True
                )),
                ('to_status', models.CharField(choices=STATUS_CHOICES, help_text='New status', max_length=20)),
                ('note', models.TextField(blank=True)),
                ('changed_by', models.ForeignKey(
                    blank=True,
                    help_text='User who changed the status (null for system actions)',
                    null=True,
                    on_delete=django.db.models.deletion.SET_NULL,
                    related_name='report_status_changes',
                    to=settings.AUTH_USER_MODEL
                )),
                ('report', models.ForeignKey(
                    on_delete=django.db.models.deletion.PROTECT,
                    related_name='status_history',
                    to='reports.report'
                )),
            ],
            options={
                'verbose_name': 'Report Status History',
                'verbose_name_plural': 'Report Status Histories',
                'db_table': 'report_status_history',
                'ordering': ['-created_at'],
            },
        ),
        migrations.CreateModel(
            name='ReportAssignment',
            fields=_base_fields() + [
                ('due_at', models.DateTimeField(blank=True, null=True)),
                ('assignee', models.ForeignKey(
                    blank=True,
                    null=True,
                    on_delete=django.db.models.deletion.PROTECT,
                    related_name='report_assignments',
                    to=settings.AUTH_USER_MODEL
                )),
                ('organization', models.ForeignKey(
                    blank=True,
                    null=True,
                    on_delete=django.db.models.deletion.PROTECT,
                    related_name='report_assignments',
                    to='reports.organization'
                )),
                ('report', models.ForeignKey(
                    on_delete=django.db.models.deletion.PROTECT,
                    related_name='assignments',
                    to='reports.report'
                )),
            ],
            options={
                'verbose_name': 'Report Assignment',
                'verbose_name_plural': 'Report Assignments',
                'db_table': 'report_assignments',
                'ordering': ['-created_at'],
                'indexes': [
                    models.Index(fields=['report', 'created_at'], name='assign_report_created_idx'),
                ],
                'constraints': [
                    models.CheckConstraint(
                        condition=models.Q(('assignee__isnull', False), ('organization__isnull', False), _connector='OR'),
                        name='assignment_has_target'
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name='ReportComment',
            fields=_base_fields() + [
                ('body', models.TextField()),
                ('author', models.ForeignKey(
                    blank=True,
                    null=True,
                    on_delete=django.db.models.deletion.SET_NULL,
                    related_name='report_comments',
                    to=settings.AUTH_USER_MODEL
                )),
                ('report', models.ForeignKey(
                    on_delete=django.db.models.deletion.PROTECT,
                    related_name='comments',
                    to='reports.report'
                )),
            ],
            options={
                'verbose_name': 'Report Comment',
                'verbose_name_plural': 'Report Comments',
                'db_table': 'report_comments',
                'ordering': ['created_at'],
            },
        ),
    ]
