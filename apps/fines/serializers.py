from rest_framework import serializers
from .models import Fine, Section, FINE_ITEM_PRESETS


# =============================================================================
# Input Serializers
# =============================================================================

class FineFilterSerializer(serializers.Serializer):
    """
    Validate query parameters for line item filtering.

    Query Parameters:
        search (str): Matches ticket number, item, violator or contractor
        ticket_number (str): Exact ticket
        project_name (str): Exact project
        host_team (str): Exact host team
        date_from (date): Issued on or after this date
        date_to (date): Issued on or before this date
    """

    search = serializers.CharField(required=False, allow_blank=True)
    ticket_number = serializers.CharField(required=False, allow_blank=True)
    project_name = serializers.CharField(required=False, allow_blank=True)
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


class TicketItemInputSerializer(serializers.Serializer):
    violation_item = serializers.CharField(max_length=255)
    unit_price = serializers.DecimalField(max_digits=12, decimal_places=0, min_value=0)
    quantity = serializers.IntegerField(min_value=1, default=1)
    price_change_reason = serializers.CharField(required=False, allow_blank=True, max_length=255)
    relationship = serializers.CharField(required=False, allow_blank=True, max_length=50)
    violator_name = serializers.CharField(required=False, allow_blank=True, max_length=100)
    note = serializers.CharField(required=False, allow_blank=True)


class TicketInputSerializer(serializers.Serializer):
    """
    Whole ticket as submitted by the fine form.

    Fields:
        ticket_number (str): Only read on create; the URL names the ticket on update
        issue_date (date): Shared by every item
        project_name (str): Fills contractor and host team when known
        issuer (uuid): Section that issued the ticket
        items (list): At least one line item
    """

    ticket_number = serializers.CharField(required=False, max_length=50)
    issue_date = serializers.DateField()
    project_name = serializers.CharField(required=False, allow_blank=True, max_length=200)
    contractor = serializers.CharField(required=False, allow_blank=True, max_length=200)
    host_team = serializers.CharField(required=False, allow_blank=True, max_length=50)
    issuer = serializers.PrimaryKeyRelatedField(
        queryset=Section.objects.all(),
        required=False,
        allow_null=True
    )
    issuer_name = serializers.CharField(required=False, allow_blank=True, max_length=100)
    items = TicketItemInputSerializer(many=True, allow_empty=False)


class TicketConvertSerializer(serializers.Serializer):
    """Optional overrides when converting a ticket into a violation."""

    description = serializers.CharField(required=False, allow_blank=True)
    violation_date = serializers.DateField(required=False)


# =============================================================================
# Output Serializers
# =============================================================================

class SectionSerializer(serializers.ModelSerializer):
    """Main serializer for roster entries."""

    class Meta:
        model = Section
        fields = ['id', 'name', 'host_team', 'title', 'email', 'created_at', 'updated_at']
        read_only_fields = ['id', 'created_at', 'updated_at']
        # Upsert on (name, host_team) is handled by the service
        validators = []


class FineSerializer(serializers.ModelSerializer):
    """Main serializer for fine line items."""

    contractor = serializers.CharField(required=False, allow_blank=True, max_length=200)
    host_team = serializers.CharField(required=False, allow_blank=True, max_length=50)
    preset_unit_price = serializers.SerializerMethodField()

    class Meta:
        model = Fine
        fields = [
            'id',
            'ticket_number',
            'issue_date',
            'project',
            'project_name',
            'contractor',
            'host_team',
            'issuer',
            'issuer_name',
            'violation_item',
            'unit_price',
            'preset_unit_price',
            'quantity',
            'subtotal',
            'price_change_reason',
            'relationship',
            'violator_name',
            'note',
            'violation',
            'created_at',
            'updated_at',
        ]
        read_only_fields = ['id', 'project', 'subtotal', 'violation', 'created_at', 'updated_at']

    def get_preset_unit_price(self, obj):
        preset = FINE_ITEM_PRESETS.get(obj.violation_item)
        return str(preset) if preset is not None else None


class TicketSummarySerializer(serializers.Serializer):
    """Aggregated view of one ticket."""

    ticket_number = serializers.CharField()
    issue_date = serializers.DateField()
    project_name = serializers.CharField()
    contractor = serializers.CharField()
    host_team = serializers.CharField()
    issuer_name = serializers.CharField()
    total = serializers.DecimalField(max_digits=14, decimal_places=0)
    item_count = serializers.IntegerField()
    requires_lecture = serializers.BooleanField()
    converted = serializers.BooleanField()


class TicketDetailSerializer(TicketSummarySerializer):
    violation = serializers.UUIDField(allow_null=True)
    items = FineSerializer(many=True)
