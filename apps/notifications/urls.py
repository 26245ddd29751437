from django.urls import path, include
from rest_framework.routers import DefaultRouter
from . import views

app_name = 'notifications'

router = DefaultRouter()
router.register(r'logs', views.NotificationLogViewSet, basename='log')

urlpatterns = [
    # POST /api/notifications/run/    - Send today's reminders (admin)
    path('run/', views.run_notifications, name='run'),
    # GET  /api/notifications/logs/   - Notification history (?violation=, ?notification_type=)
    path('', include(router.urls)),
]
