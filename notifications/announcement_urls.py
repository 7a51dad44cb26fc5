from django.urls import path
from .announcement_views import announcements, announcement_detail

app_name = 'announcements'

urlpatterns = [
    path('', announcements, name='announcements'),
    path('<uuid:announcement_id>/', announcement_detail, name='announcement_detail'),
]
