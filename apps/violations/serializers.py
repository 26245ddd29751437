from rest_framework import serializers
from .models import Violation, ViolationStatus


# =============================================================================
# Input Serializers
# =============================================================================

class ViolationFilterSerializer(serializers.Serializer):
    """
    Validate query parameters for violation filtering.

    Query Parameters:
        search (str): Matches contractor, project or description
        status (str): Filter by ViolationStatus
        host_team (str): Host team of the violation's project
        date_from (date): Violations on or after this date
        date_to (date): Violations on or before this date
    """

    search = serializers.CharField(required=False, allow_blank=True)
    status = serializers.ChoiceField(choices=ViolationStatus.choices, required=False)
    host_team = serializers.CharField(required=False, allow_blank=True)
    date_from = serializers.DateField(required=False)
    date_to = serializers.DateField(required=False)

    def validate(self, attrs):
        """Validate date range."""
        date_from = attrs.get('date_from')
        date_to = attrs.get('date_to')

        if date_from and date_to and date_from > date_to:
            raise serializers.ValidationError({
                'date_to': 'End date must be after start date'
            })

        return attrs


class StatusChangeSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=ViolationStatus.choices)


class TicketFileUploadSerializer(serializers.Serializer):
    """Multipart upload of the fine ticket file."""

    file = serializers.FileField()


class ScanFileUploadSerializer(serializers.Serializer):
    """
    Multipart upload of the signed sign-off scan.

    Fields:
        file: The scan
        file_name (str): Stored name, defaults to 掃描檔_<yyyymmdd>
        replace_reason (str): Required to record history when replacing a scan
    """

    file = serializers.FileField()
    file_name = serializers.CharField(required=False, allow_blank=True, max_length=255)
    replace_reason = serializers.CharField(required=False, allow_blank=True, max_length=500)


class SendEmailSerializer(serializers.Serializer):
    """Manual e-mail about a violation."""

    to = serializers.EmailField()
    subject = serializers.CharField(max_length=255)
    body = serializers.CharField(allow_blank=True)
    cc = serializers.ListField(
        child=serializers.EmailField(),
        required=False,
        default=list
    )


# =============================================================================
# Output Serializers
# =============================================================================

class ViolationSerializer(serializers.ModelSerializer):
    """Main serializer for violations."""

    contractor_name = serializers.CharField(required=False, allow_blank=True, max_length=200)
    lecture_deadline = serializers.DateField(required=False)
    status_label = serializers.CharField(source='get_status_display', read_only=True)
    host_team = serializers.CharField(read_only=True)
    days_remaining = serializers.SerializerMethodField()

    class Meta:
        model = Violation
        fields = [
            'id',
            'project',
            'project_name',
            'contractor_name',
            'host_team',
            'violation_date',
            'lecture_deadline',
            'days_remaining',
            'description',
            'status',
            'status_label',
            'completion_date',
            'file_name',
            'file_url',
            'email_count',
            'document_url',
            'scan_file_name',
            'scan_file_url',
            'scan_file_history',
            'first_notify_date',
            'second_notify_date',
            'notify_status',
            'manager_email',
            'fine_amount',
            'is_major_violation',
            'participants',
            'source_ticket_number',
            'created_at',
            'updated_at',
        ]
        read_only_fields = [
            'id',
            'project',
            'completion_date',
            'file_name',
            'file_url',
            'email_count',
            'document_url',
            'scan_file_name',
            'scan_file_url',
            'scan_file_history',
            'first_notify_date',
            'second_notify_date',
            'notify_status',
            'source_ticket_number',
            'created_at',
            'updated_at',
        ]

    def get_days_remaining(self, obj) -> int:
        return obj.days_remaining()
