"""
Adds ReportStatusHistory.sequence, a per-report timeline position.

Existing rows are numbered per report in (created_at, id) order before the
(report, sequence) uniqueness constraint is added.
"""

from django.db import migrations, models


def number_existing_rows(apps, schema_editor):
    ReportStatusHistory = apps.get_model('reports', 'ReportStatusHistory')

    positions = {}
    numbered = []
    for entry in ReportStatusHistory.objects.order_by('report_id', 'created_at', 'id'):
        positions[entry.report_id] = positions.get(entry.report_id, 0) + 1
        entry.sequence = positions[entry.report_id]
        numbered.append(entry)

    ReportStatusHistory.objects.bulk_update(numbered, ['sequence'], batch_size=500)


class Migration(migrations.Migration):

    dependencies = [
        ('reports', '0001_initial'),
    ]

    operations = [
        migrations.AddField(
            model_name='reportstatushistory',
            name='sequence',
            field=models.PositiveIntegerField(
                default=0,
                help_text="Position in the report's timeline, starting at 1"
            ),
            preserve_default=False,
        ),
        migrations.RunPython(number_existing_rows, migrations.RunPython.noop),
        migrations.AlterModelOptions(
            name='reportstatushistory',
            options={
                'verbose_name': 'Report Status History',
                'verbose_name_plural': 'Report Status Histories',
                'ordering': ['-created_at', '-sequence'],
            },
        ),
        migrations.AddConstraint(
            model_name='reportstatushistory',
            constraint=models.UniqueConstraint(
                fields=('report', 'sequence'),
                name='status_history_report_sequence'
            ),
        ),
    ]
