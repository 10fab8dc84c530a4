# Document store table: one JSON document per path (dashboard/milestones, dashboard/weeklyPlans, ...)

from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='DashboardDocument',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('path', models.CharField(help_text='مثال: dashboard/milestones', max_length=200, unique=True)),
                ('data', models.JSONField(blank=True, default=dict)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'verbose_name': 'Dashboard Document',
                'verbose_name_plural': 'Dashboard Documents',
                'ordering': ['path'],
            },
        ),
    ]
