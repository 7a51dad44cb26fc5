import django.db.models.deletion
import uuid
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    dependencies = [
        ('academics', '0001_initial'),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Program',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('name', models.CharField(max_length=200)),
                ('code', models.CharField(max_length=20, unique=True)),
                ('program_type', models.CharField(choices=[('undergraduate', 'Undergraduate'), ('graduate', 'Graduate'), ('diploma', 'Diploma'), ('certificate', 'Certificate')], max_length=20)),
                ('duration', models.PositiveSmallIntegerField(help_text='Length of the programme in years')),
                ('description', models.TextField(blank=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('department', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='programs', to='academics.department')),
            ],
            options={
                'verbose_name': 'Program',
                'verbose_name_plural': 'Programs',
                'ordering': ['name'],
            },
        ),
        migrations.CreateModel(
            name='ProgramCourse',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('course', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='program_courses', to='academics.course')),
                ('program', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='program_courses', to='academics.program')),
            ],
            options={
                'verbose_name': 'Program Course',
                'verbose_name_plural': 'Program Courses',
                'ordering': ['program', 'course__code'],
            },
        ),
        migrations.AddField(
            model_name='program',
            name='courses',
            field=models.ManyToManyField(blank=True, related_name='programs', through='academics.ProgramCourse', to='academics.course'),
        ),
        migrations.AddConstraint(
            model_name='programcourse',
            constraint=models.UniqueConstraint(fields=('program', 'course'), name='unique_program_course'),
        ),
        migrations.CreateModel(
            name='LecturerCourse',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('course', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='lecturer_courses', to='academics.course')),
                ('lecturer', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='lecturer_courses', to=settings.AUTH_USER_MODEL)),
                ('semester', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='lecturer_courses', to='academics.semester')),
            ],
            options={
                'verbose_name': 'Lecturer Course',
                'verbose_name_plural': 'Lecturer Courses',
                'ordering': ['-created_at'],
            },
        ),
        migrations.AddConstraint(
            model_name='lecturercourse',
            constraint=models.UniqueConstraint(fields=('lecturer', 'course', 'semester'), name='unique_lecturer_course_semester'),
        ),
        migrations.CreateModel(
            name='AcademicCalendarEvent',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('title', models.CharField(max_length=200)),
                ('description', models.TextField(blank=True)),
                ('event_type', models.CharField(choices=[('registration', 'Registration'), ('exam', 'Examination'), ('holiday', 'Holiday'), ('semester', 'Semester'), ('other', 'Other')], default='other', max_length=20)),
                ('date', models.DateTimeField()),
                ('end_date', models.DateTimeField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('created_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='calendar_events', to=settings.AUTH_USER_MODEL)),
                ('semester', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.CASCADE, related_name='calendar_events', to='academics.semester')),
            ],
            options={
                'verbose_name': 'Academic Calendar Event',
                'verbose_name_plural': 'Academic Calendar Events',
                'ordering': ['date'],
                'indexes': [models.Index(fields=['semester', 'date'], name='calendar_semester_date_idx')],
            },
        ),
    ]
