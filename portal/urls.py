"""
URL configuration for the course registration portal.

Every application mounts its routes under ``/api/``.
"""

from django.contrib import admin
from django.urls import path, include
from rest_framework_simplejwt.views import (
    TokenObtainPairView,
    TokenRefreshView,
)
from .health_views import health_check

urlpatterns = [
    path('admin/', admin.site.urls),

    # Health check for deployment
    path('api/health/', health_check, name='health_check'),

    # Authentication
    path('api/token/', TokenObtainPairView.as_view(), name='token_obtain_pair'),
    path('api/token/refresh/', TokenRefreshView.as_view(), name='token_refresh'),

    # Users and accounts
    path('api/', include('users.urls')),

    # Departments, programs, courses, semesters, lecturer assignments, calendar
    path('api/', include('academics.urls')),

    # Course uploads, registrations, registration cards
    path('api/', include('registrations.urls')),

    # Timetables
    path('api/timetables/', include('timetables.urls')),

    # Notifications
    path('api/notifications/', include('notifications.urls')),
    path('api/announcements/', include('notifications.announcement_urls')),

    # Audit trail
    path('api/audit/', include('audit.urls')),
]
