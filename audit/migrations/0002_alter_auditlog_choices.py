from django.db import migrations, models


class Migration(migrations.Migration):

    dependencies = [
        ('audit', '0001_initial'),
    ]

    operations = [
        migrations.AlterField(
            model_name='auditlog',
            name='action',
            field=models.CharField(choices=[('CREATE', 'Create'), ('UPDATE', 'Update'), ('DELETE', 'Delete'), ('APPROVE', 'Approve'), ('REJECT', 'Reject'), ('ACTIVATE', 'Activate'), ('DEACTIVATE', 'Deactivate'), ('ISSUE', 'Issue'), ('REVOKE', 'Revoke'), ('ASSIGN', 'Assign'), ('PUBLISH', 'Publish'), ('PASSWORD_RESET', 'Password Reset'), ('OTHER', 'Other')], max_length=20),
        ),
        migrations.AlterField(
            model_name='auditlog',
            name='entity_type',
            field=models.CharField(choices=[('user', 'User'), ('department', 'Department'), ('course', 'Course'), ('semester', 'Semester'), ('program', 'Program'), ('lecturer_course', 'Lecturer Course'), ('calendar_event', 'Calendar Event'), ('registration', 'Registration'), ('course_upload', 'Course Upload'), ('registration_card', 'Registration Card'), ('timetable', 'Timetable'), ('announcement', 'Announcement'), ('other', 'Other')], max_length=30),
        ),
    ]
