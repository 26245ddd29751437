from django.contrib import admin
from .models import NotificationLog


@admin.register(NotificationLog)
class NotificationLogAdmin(admin.ModelAdmin):
    list_display = ['sent_at', 'notification_type', 'recipient_email', 'recipient_role', 'status']
    list_filter = ['notification_type', 'status']
    search_fields = ['recipient_email']
    readonly_fields = ['sent_at']
