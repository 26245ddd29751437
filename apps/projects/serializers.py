from rest_framework import serializers
from .models import Project


# =============================================================================
# Input Serializers
# =============================================================================

class ProjectFilterSerializer(serializers.Serializer):
    """
    Validate query parameters for project filtering.

    Query Parameters:
        search (str): Matches name, abbreviation or contractor
        host_team (str): Exact host team
    """

    search = serializers.CharField(required=False, allow_blank=True)
    host_team = serializers.CharField(required=False, allow_blank=True)


# =============================================================================
# Output Serializers
# =============================================================================

class ProjectSerializer(serializers.ModelSerializer):
    """Main serializer for projects."""

    sequence = serializers.IntegerField(required=False, min_value=0)

    class Meta:
        model = Project
        fields = [
            'id',
            'sequence',
            'abbreviation',
            'name',
            'contract_number',
            'contractor',
            'coordinator_name',
            'coordinator_email',
            'host_team',
            'manager_name',
            'manager_email',
            'created_at',
            'updated_at',
        ]
        read_only_fields = ['id', 'created_at', 'updated_at']
        extra_kwargs = {
            # Uniqueness is checked by the service with a domain error
            'name': {'validators': []},
        }
