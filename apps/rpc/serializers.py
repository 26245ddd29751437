from rest_framework import serializers

from apps.accounts.models import UserRole


# =============================================================================
# Input Serializers
# =============================================================================

class ExecRequestSerializer(serializers.Serializer):
    """Envelope of every call; a missing action means a plain fetch."""

    action = serializers.CharField(required=False, allow_blank=True, default='')


class LoginActionSerializer(serializers.Serializer):
    username = serializers.CharField(max_length=255)
    password = serializers.CharField(style={'input_type': 'password'})


class GoogleLoginActionSerializer(serializers.Serializer):
    credential = serializers.CharField()


class NewUserSerializer(serializers.Serializer):
    email = serializers.EmailField()
    password = serializers.CharField(min_length=6, style={'input_type': 'password'})
    name = serializers.CharField(required=False, allow_blank=True, max_length=100, default='')
    role = serializers.ChoiceField(choices=UserRole.choices, required=False, default=UserRole.USER)


class AddUserActionSerializer(serializers.Serializer):
    newUser = NewUserSerializer()


class SendEmailActionSerializer(serializers.Serializer):
    to = serializers.EmailField()
    subject = serializers.CharField(max_length=255)
    body = serializers.CharField(allow_blank=True)
    ccEmail = serializers.EmailField(required=False, allow_blank=True, default='')
    violationId = serializers.CharField(required=False, allow_blank=True, default='')
    projectName = serializers.CharField(required=False, allow_blank=True, default='')
    contractorName = serializers.CharField(required=False, allow_blank=True, default='')
    deadline = serializers.CharField(required=False, allow_blank=True, default='')


class ViolationActionSerializer(serializers.Serializer):
    violationId = serializers.CharField()


class UploadScanFileActionSerializer(ViolationActionSerializer):
    base64 = serializers.CharField(required=False, allow_blank=True, default='')
    fileData = serializers.CharField(required=False, allow_blank=True, default='')
    fileName = serializers.CharField(required=False, allow_blank=True, default='')
    mimeType = serializers.CharField(required=False, allow_blank=True, default='')
    replaceReason = serializers.CharField(required=False, allow_blank=True, default='')

    def validate(self, attrs):
        # Older clients send the payload as fileData
        attrs['base64'] = attrs['base64'] or attrs.pop('fileData', '')
        if not attrs['base64']:
            raise serializers.ValidationError({'base64': 'This field is required.'})
        return attrs


class UploadedFileSerializer(serializers.Serializer):
    name = serializers.CharField()
    type = serializers.CharField(required=False, allow_blank=True, default='')
    base64 = serializers.CharField()


class FileUploadSerializer(serializers.Serializer):
    violationId = serializers.CharField()
    fileData = UploadedFileSerializer()
    projectInfo = serializers.DictField(required=False, allow_null=True, default=None)
    violationDate = serializers.CharField(required=False, allow_blank=True, default='')


class SyncActionSerializer(serializers.Serializer):
    """Whole tables to replace; omitted tables stay as they are."""

    projects = serializers.ListField(child=serializers.DictField(), required=False)
    violations = serializers.ListField(child=serializers.DictField(), required=False)
    fines = serializers.ListField(child=serializers.DictField(), required=False)
    sections = serializers.ListField(child=serializers.DictField(), required=False)
    fileUpload = FileUploadSerializer(required=False, allow_null=True)
