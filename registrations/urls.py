from django.urls import path
from . import views

app_name = 'registrations'

urlpatterns = [
    # Course uploads
    path('course-uploads/', views.CourseUploadListView.as_view(), name='course_upload_list'),
    path('course-uploads/<uuid:upload_id>/', views.CourseUploadDetailView.as_view(), name='course_upload_detail'),
    path('course-uploads/<uuid:upload_id>/approve/', views.CourseUploadApproveView.as_view(), name='course_upload_approve'),
    path('course-uploads/<uuid:upload_id>/reject/', views.CourseUploadRejectView.as_view(), name='course_upload_reject'),

    # Registrations
    path('registrations/', views.RegistrationListView.as_view(), name='registration_list'),
    path('registrations/<uuid:registration_id>/', views.RegistrationDetailView.as_view(), name='registration_detail'),
    path('registrations/<uuid:registration_id>/approve/', views.RegistrationApproveView.as_view(), name='registration_approve'),
    path('registrations/<uuid:registration_id>/reject/', views.RegistrationRejectView.as_view(), name='registration_reject'),

    # Cards
    path('registration-cards/', views.RegistrationCardListView.as_view(), name='registration_card_list'),
]
