from django.urls import path
from . import views

app_name = 'timetables'

urlpatterns = [
    path('', views.timetables, name='timetables'),
    path('<uuid:timetable_id>/', views.timetable_detail, name='timetable_detail'),
    path('<uuid:timetable_id>/publish/', views.publish_timetable, name='publish_timetable'),
    path('<uuid:timetable_id>/slots/', views.timetable_slots, name='timetable_slots'),
    path('<uuid:timetable_id>/slots/<uuid:slot_id>/', views.timetable_slot_detail, name='timetable_slot_detail'),
]
