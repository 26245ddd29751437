from django.http import HttpResponse
from django.utils import timezone
from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.decorators import api_view, parser_classes, permission_classes
from rest_framework.parsers import MultiPartParser
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from apps.accounts.permissions import IsAdminRole

from .exceptions import SheetsServiceError
from .serializers import WorkbookImportSerializer, WorkbookImportResponseSerializer
from .workbook import export_workbook, import_workbook

XLSX_CONTENT_TYPE = 'application/vnd.openxmlformats-officedocument.spreadsheetml.sheet'


@extend_schema(
    responses={(200, XLSX_CONTENT_TYPE): OpenApiTypes.BINARY},
    description='Download every table as an Excel workbook.',
    tags=['sheets'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def export_data(request):
    """Workbook download - thin HTTP handler."""
    filename = f"safety_guard_{timezone.localdate():%Y%m%d}.xlsx"
    response = HttpResponse(export_workbook(), content_type=XLSX_CONTENT_TYPE)
    response['Content-Disposition'] = f'attachment; filename="{filename}"'
    return response


@extend_schema(
    request={'multipart/form-data': WorkbookImportSerializer},
    responses={200: WorkbookImportResponseSerializer},
    description='Restore tables from an Excel workbook. Each worksheet replaces its table.',
    tags=['sheets'],
)
@api_view(['POST'])
@permission_classes([IsAuthenticated, IsAdminRole])
@parser_classes([MultiPartParser])
def import_data(request):
    serializer = WorkbookImportSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    try:
        results = import_workbook(serializer.validated_data['file'])
    except SheetsServiceError as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

    return Response({'success': True, 'tables': results})
