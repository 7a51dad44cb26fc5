from django.urls import path
from . import views

urlpatterns = [
    # Accounts
    path('auth/register/', views.register_student, name='register_student'),
    path('auth/me/', views.current_user, name='current_user'),

    # User management
    path('users/', views.users_list, name='users_list'),
    path('users/<uuid:user_id>/', views.manage_user, name='manage_user'),
    path('users/<uuid:user_id>/password/', views.change_password, name='change_password'),
]
