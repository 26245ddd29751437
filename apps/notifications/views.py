from drf_spectacular.utils import extend_schema
from rest_framework import viewsets, status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from apps.accounts.permissions import IsAdminRole

from .models import NotificationLog
from .serializers import (
    NotificationLogSerializer,
    NotificationLogFilterSerializer,
    RunNotificationsSerializer,
)
from .services import send_daily_notifications


class NotificationLogViewSet(viewsets.ReadOnlyModelViewSet):
    """Sent and failed e-mails, newest first."""

    queryset = NotificationLog.objects.all()
    serializer_class = NotificationLogSerializer
    permission_classes = [IsAuthenticated]

    def get_queryset(self):
        queryset = super().get_queryset()

        filter_serializer = NotificationLogFilterSerializer(data=self.request.query_params)
        filter_serializer.is_valid(raise_exception=True)
        params = filter_serializer.validated_data

        if params.get('violation'):
            queryset = queryset.filter(violation_id=params['violation'])
        if params.get('notification_type'):
            queryset = queryset.filter(notification_type=params['notification_type'])

        return queryset


@extend_schema(request=RunNotificationsSerializer, responses={200: dict})
@api_view(['POST'])
@permission_classes([IsAuthenticated, IsAdminRole])
def run_notifications(request):
    """
    Send today's reminders now.

    POST /api/notifications/run/
    Body: {"date": "2025-03-09", "dry_run": false}
    """
    serializer = RunNotificationsSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    counts = send_daily_notifications(
        today=serializer.validated_data.get('date'),
        dry_run=serializer.validated_data['dry_run'],
    )
    return Response(counts, status=status.HTTP_200_OK)
