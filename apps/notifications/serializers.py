from rest_framework import serializers
from .models import NotificationLog, NotificationType


# =============================================================================
# Input Serializers
# =============================================================================

class NotificationLogFilterSerializer(serializers.Serializer):
    """
    Query Parameters:
        violation (uuid): Logs of one violation
        notification_type (str): first, second, overdue or manual
    """

    violation = serializers.UUIDField(required=False)
    notification_type = serializers.ChoiceField(choices=NotificationType.choices, required=False)


class RunNotificationsSerializer(serializers.Serializer):
    date = serializers.DateField(required=False)
    dry_run = serializers.BooleanField(required=False, default=False)


# =============================================================================
# Output Serializers
# =============================================================================

class NotificationLogSerializer(serializers.ModelSerializer):

    class Meta:
        model = NotificationLog
        fields = [
            'id',
            'violation',
            'notification_type',
            'recipient_email',
            'recipient_role',
            'sent_at',
            'status',
        ]
        read_only_fields = fields
