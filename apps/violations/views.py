from django.db.models import Q
from drf_spectacular.utils import extend_schema
from rest_framework import viewsets, status
from rest_framework.decorators import action
from rest_framework.pagination import PageNumberPagination
from rest_framework.parsers import JSONParser, MultiPartParser, FormParser
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from apps.accounts.permissions import IsEditorOrReadOnly

from .models import Violation, COMMON_VIOLATIONS
from .serializers import (
    ViolationSerializer,
    ViolationFilterSerializer,
    StatusChangeSerializer,
    TicketFileUploadSerializer,
    ScanFileUploadSerializer,
    SendEmailSerializer,
)
from .services import (
    create_violation,
    update_violation,
    change_status,
    delete_violation,
    upload_ticket_file,
    upload_scan_file,
    generate_document,
    ViolationsServiceError,
)


class ViolationPagination(PageNumberPagination):
    """Custom pagination for violations."""
    page_size = 50
    page_size_query_param = 'page_size'
    max_page_size = 500


class ViolationViewSet(viewsets.ModelViewSet):
    """
    ViewSet for Violation CRUD operations.

    list: Filterable violation list, newest first
    create: Record a violation (contractor and deadline auto-filled)
    set_status: Move to another status
    ticket_file / scan_file: Upload attachments
    document: Generate the sign-off document
    send_email: Send a manual e-mail about the violation
    """

    queryset = Violation.objects.select_related('project')
    serializer_class = ViolationSerializer
    permission_classes = [IsAuthenticated, IsEditorOrReadOnly]
    pagination_class = ViolationPagination
    parser_classes = [JSONParser, MultiPartParser, FormParser]

    def get_queryset(self):
        """Filter violations using input serializer validation."""
        queryset = super().get_queryset()
        if self.action != 'list':
            return queryset

        filter_serializer = ViolationFilterSerializer(data=self.request.query_params)
        filter_serializer.is_valid(raise_exception=True)
        params = filter_serializer.validated_data

        search = params.get('search')
        if search:
            queryset = queryset.filter(
                Q(contractor_name__icontains=search) |
                Q(project_name__icontains=search) |
                Q(description__icontains=search)
            )

        if params.get('status'):
            queryset = queryset.filter(status=params['status'])

        if params.get('host_team'):
            queryset = queryset.filter(project__host_team=params['host_team'])

        if 'date_from' in params:
            queryset = queryset.filter(violation_date__gte=params['date_from'])
        if 'date_to' in params:
            queryset = queryset.filter(violation_date__lte=params['date_to'])

        return queryset.order_by('-violation_date', '-created_at')

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            violation = create_violation(**serializer.validated_data)
        except ViolationsServiceError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
        return Response(self.get_serializer(violation).data, status=status.HTTP_201_CREATED)

    def update(self, request, *args, **kwargs):
        partial = kwargs.pop('partial', False)
        violation = self.get_object()
        serializer = self.get_serializer(violation, data=request.data, partial=partial)
        serializer.is_valid(raise_exception=True)
        try:
            violation = update_violation(violation=violation, **serializer.validated_data)
        except ViolationsServiceError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
        return Response(self.get_serializer(violation).data)

    def perform_destroy(self, instance):
        delete_violation(violation=instance)

    @extend_schema(request=StatusChangeSerializer, responses={200: ViolationSerializer})
    @action(detail=True, methods=['post'], url_path='status')
    def set_status(self, request, pk=None):
        """
        Change the status of a violation.

        POST /api/violations/{id}/status/
        Body: {"status": "COMPLETED"}
        """
        violation = self.get_object()
        serializer = StatusChangeSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        violation = change_status(violation=violation, status=serializer.validated_data['status'])
        return Response(self.get_serializer(violation).data)

    @extend_schema(request=TicketFileUploadSerializer)
    @action(detail=True, methods=['post'], url_path='ticket-file')
    def ticket_file(self, request, pk=None):
        """
        Upload the fine ticket file (renamed after the project).

        POST /api/violations/{id}/ticket-file/
        """
        violation = self.get_object()
        serializer = TicketFileUploadSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        upload = serializer.validated_data['file']

        try:
            result = upload_ticket_file(
                violation=violation,
                content=upload.read(),
                original_name=upload.name,
                project=violation.project,
            )
        except ViolationsServiceError as e:
            return Response({'success': False, 'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
        return Response(result)

    @extend_schema(request=ScanFileUploadSerializer)
    @action(detail=True, methods=['post'], url_path='scan-file')
    def scan_file(self, request, pk=None):
        """
        Upload or replace the signed sign-off scan.

        POST /api/violations/{id}/scan-file/
        """
        violation = self.get_object()
        serializer = ScanFileUploadSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        params = serializer.validated_data
        upload = params['file']

        try:
            result = upload_scan_file(
                violation=violation,
                content=upload.read(),
                file_name=params.get('file_name') or None,
                mime_type=getattr(upload, 'content_type', None) or 'application/pdf',
                replace_reason=params.get('replace_reason') or None,
            )
        except ViolationsServiceError as e:
            return Response({'success': False, 'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
        return Response(result)

    @extend_schema(request=None)
    @action(detail=True, methods=['post'])
    def document(self, request, pk=None):
        """
        Generate the sign-off document.

        POST /api/violations/{id}/document/
        """
        violation = self.get_object()
        try:
            result = generate_document(violation=violation)
        except ViolationsServiceError as e:
            return Response({'success': False, 'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
        return Response(result)

    @extend_schema(request=SendEmailSerializer)
    @action(detail=True, methods=['post'], url_path='send-email')
    def send_email(self, request, pk=None):
        """
        Send a manual e-mail about this violation (admins are copied).

        POST /api/violations/{id}/send-email/
        """
        from apps.notifications.services import send_manual_email, NotificationsServiceError

        violation = self.get_object()
        serializer = SendEmailSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        params = serializer.validated_data

        try:
            result = send_manual_email(
                to=params['to'],
                subject=params['subject'],
                body=params['body'],
                cc=params.get('cc'),
                violation=violation,
            )
        except NotificationsServiceError as e:
            return Response({'success': False, 'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
        return Response(result)

    @action(detail=False, methods=['get'])
    def presets(self, request):
        """
        Common violation descriptions offered by the form.

        GET /api/violations/presets/
        """
        return Response({'descriptions': COMMON_VIOLATIONS})
