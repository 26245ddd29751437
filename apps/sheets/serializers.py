from rest_framework import serializers


# =============================================================================
# Input Serializers
# =============================================================================

class WorkbookImportSerializer(serializers.Serializer):
    """Multipart upload of an xlsx backup."""

    file = serializers.FileField()

    def validate_file(self, value):
        if not value.name.lower().endswith('.xlsx'):
            raise serializers.ValidationError('Only .xlsx workbooks are accepted.')
        return value


# =============================================================================
# Output Serializers
# =============================================================================

class TableCountsSerializer(serializers.Serializer):
    table = serializers.CharField()
    created = serializers.IntegerField()
    updated = serializers.IntegerField()
    deleted = serializers.IntegerField()
    skipped = serializers.IntegerField()


class WorkbookImportResponseSerializer(serializers.Serializer):
    success = serializers.BooleanField()
    tables = serializers.DictField(child=TableCountsSerializer())
