from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import extend_schema, OpenApiParameter
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from .analytics import AnalyticsQueries
from .exceptions import AnalyticsServiceError
from .serializers import (
    # Input serializers
    PeriodQuerySerializer,
    ViewerQuerySerializer,
    # Response serializers
    DashboardResponseSerializer,
    FineStatsResponseSerializer,
    ViewerSummarySerializer,
    ErrorSerializer,
)


@extend_schema(
    parameters=[
        OpenApiParameter('period', OpenApiTypes.STR, description='Month period (YYYY-MM), defaults to the current month'),
    ],
    responses={
        200: DashboardResponseSerializer,
        400: ErrorSerializer,
    },
    description="Lecture counters, violation charts and the month's fines.",
    tags=['analytics'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def dashboard(request):
    """Dashboard aggregate - thin HTTP handler."""
    query_serializer = PeriodQuerySerializer(data=request.query_params)
    query_serializer.is_valid(raise_exception=True)
    params = query_serializer.validated_data

    try:
        data = AnalyticsQueries.dashboard(year=params.get('year'), month=params.get('month'))
    except AnalyticsServiceError as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

    return Response(data)


@extend_schema(
    responses={200: FineStatsResponseSerializer},
    description='Fine totals by project, host team and month.',
    tags=['analytics'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def fine_stats(request):
    """Fine statistics - thin HTTP handler."""
    return Response(AnalyticsQueries.fine_stats())


@extend_schema(
    parameters=[
        OpenApiParameter('offset', OpenApiTypes.INT, description='-1 for last month, 0 for this month', default=0),
    ],
    responses={
        200: ViewerSummarySerializer,
        400: ErrorSerializer,
    },
    description="Monthly fine list shown to viewer accounts.",
    tags=['analytics'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def viewer_summary(request):
    """Viewer monthly summary - thin HTTP handler."""
    query_serializer = ViewerQuerySerializer(data=request.query_params)
    query_serializer.is_valid(raise_exception=True)

    return Response(AnalyticsQueries.viewer_summary(offset=query_serializer.validated_data['offset']))
