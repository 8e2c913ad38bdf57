from django.db import migrations, models


class Migration(migrations.Migration):

    dependencies = [
        ('audit', '0001_initial'),
    ]

    operations = [
        migrations.AlterField(
            model_name='auditlog',
            name='action',
            field=models.CharField(
                choices=[
                    ('report_created', 'Report Created'),
                    ('report_status_changed', 'Report Status Changed'),
                    ('report_assigned', 'Report Assigned'),
                    ('report_auto_assigned', 'Report Auto-Assigned'),
                    ('report_comment_added', 'Report Comment Added'),
                    ('report_confirmed', 'Report Confirmed'),
                ],
                db_index=True,
                help_text='Action being logged',
                max_length=50,
            ),
        ),
    ]
