import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='AuditLog',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('actor_email', models.CharField(blank=True, max_length=255)),
                ('action', models.CharField(choices=[('CREATE', 'Create'), ('UPDATE', 'Update'), ('DELETE', 'Delete'), ('APPROVE', 'Approve'), ('REJECT', 'Reject'), ('ACTIVATE', 'Activate'), ('DEACTIVATE', 'Deactivate'), ('ISSUE', 'Issue'), ('PUBLISH', 'Publish'), ('PASSWORD_RESET', 'Password Reset'), ('OTHER', 'Other')], max_length=20)),
                ('entity_type', models.CharField(choices=[('user', 'User'), ('department', 'Department'), ('course', 'Course'), ('semester', 'Semester'), ('registration', 'Registration'), ('course_upload', 'Course Upload'), ('registration_card', 'Registration Card'), ('timetable', 'Timetable'), ('other', 'Other')], max_length=30)),
                ('entity_id', models.CharField(max_length=255)),
                ('entity_name', models.CharField(blank=True, max_length=500)),
                ('description', models.TextField(blank=True)),
                ('changes', models.JSONField(blank=True, default=dict)),
                ('created_at', models.DateTimeField(auto_now_add=True, db_index=True)),
                ('actor', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='audit_logs', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'verbose_name': 'Audit Log',
                'verbose_name_plural': 'Audit Logs',
                'ordering': ['-created_at'],
                'indexes': [
                    models.Index(fields=['actor', '-created_at'], name='audit_actor_created_idx'),
                    models.Index(fields=['action', '-created_at'], name='audit_action_created_idx'),
                    models.Index(fields=['entity_type', '-created_at'], name='audit_entity_created_idx'),
                ],
            },
        ),
    ]
