from django.urls import path
from . import views

app_name = 'academics'

urlpatterns = [
    # Academic Year endpoints
    path('academic-years/', views.academic_years, name='academic_years'),

    # Department endpoints
    path('departments/', views.departments, name='departments'),
    path('departments/by-program/<uuid:program_id>/', views.departments_by_program, name='departments_by_program'),
    path('departments/<uuid:department_id>/', views.department_detail, name='department_detail'),

    # Course endpoints
    path('courses/', views.courses, name='courses'),
    path('courses/by-program-department/', views.courses_by_program_department, name='courses_by_program_department'),
    path('courses/<uuid:course_id>/', views.course_detail, name='course_detail'),

    # Program endpoints
    path('programs/', views.programs, name='programs'),
    path('programs/<uuid:program_id>/', views.program_detail, name='program_detail'),
    path('programs/<uuid:program_id>/courses/', views.program_courses, name='program_courses'),
    path(
        'programs/<uuid:program_id>/courses/<uuid:course_id>/',
        views.remove_program_course,
        name='remove_program_course'
    ),

    # Semester endpoints
    path('semesters/', views.semesters, name='semesters'),
    path('semesters/current/', views.current_semester, name='current_semester'),
    path('semesters/<uuid:semester_id>/', views.semester_detail, name='semester_detail'),
    path('semesters/<uuid:semester_id>/activate/', views.activate_semester, name='activate_semester'),
    path('semesters/<uuid:semester_id>/deactivate/', views.deactivate_semester, name='deactivate_semester'),
    path('semesters/<uuid:semester_id>/courses/', views.semester_courses, name='semester_courses'),
    path(
        'semesters/<uuid:semester_id>/courses/<uuid:course_id>/',
        views.remove_semester_course,
        name='remove_semester_course'
    ),

    # Lecturer assignment endpoints
    path('lecturer-courses/', views.lecturer_courses, name='lecturer_courses'),
    path('lecturer-courses/<uuid:assignment_id>/', views.lecturer_course_detail, name='lecturer_course_detail'),
    path('faculty/courses/', views.faculty_courses, name='faculty_courses'),

    # Academic calendar endpoints
    path('academic-calendar/', views.academic_calendar, name='academic_calendar'),
    path('academic-calendar/<uuid:event_id>/', views.calendar_event_detail, name='calendar_event_detail'),
]
