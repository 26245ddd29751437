from django.db.models import Q
from drf_spectacular.utils import extend_schema
from rest_framework import viewsets, status
from rest_framework.decorators import action, api_view, permission_classes
from rest_framework.pagination import PageNumberPagination
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from apps.accounts.permissions import IsEditorOrReadOnly
from apps.projects.models import HostTeam
from apps.violations.serializers import ViolationSerializer
from apps.violations.services import ViolationsServiceError

from .models import Fine, Section, SectionTitle, FINE_ITEM_PRESETS, RELATIONSHIP_OPTIONS
from .serializers import (
    FineSerializer,
    FineFilterSerializer,
    SectionSerializer,
    TicketInputSerializer,
    TicketConvertSerializer,
    TicketSummarySerializer,
    TicketDetailSerializer,
)
from .services import (
    create_fine_item,
    update_fine_item,
    save_ticket,
    delete_ticket,
    ticket_summaries,
    get_ticket,
    convert_ticket_to_violation,
    save_section,
    delete_section,
    FinesServiceError,
)


class FinePagination(PageNumberPagination):
    """Custom pagination for fine line items."""
    page_size = 100
    page_size_query_param = 'page_size'
    max_page_size = 1000


class FineViewSet(viewsets.ModelViewSet):
    """
    ViewSet for single fine line items.

    Subtotals are computed on save; known items fined at a non-standard
    price need a price change reason.
    """

    queryset = Fine.objects.select_related('issuer')
    serializer_class = FineSerializer
    permission_classes = [IsAuthenticated, IsEditorOrReadOnly]
    pagination_class = FinePagination

    def get_queryset(self):
        """Filter line items using input serializer validation."""
        queryset = super().get_queryset()
        if self.action != 'list':
            return queryset

        filter_serializer = FineFilterSerializer(data=self.request.query_params)
        filter_serializer.is_valid(raise_exception=True)
        params = filter_serializer.validated_data

        search = params.get('search')
        if search:
            queryset = queryset.filter(
                Q(ticket_number__icontains=search) |
                Q(violation_item__icontains=search) |
                Q(violator_name__icontains=search) |
                Q(contractor__icontains=search)
            )

        for field in ('ticket_number', 'project_name', 'host_team'):
            if params.get(field):
                queryset = queryset.filter(**{field: params[field]})

        if 'date_from' in params:
            queryset = queryset.filter(issue_date__gte=params['date_from'])
        if 'date_to' in params:
            queryset = queryset.filter(issue_date__lte=params['date_to'])

        return queryset

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            fine = create_fine_item(**serializer.validated_data)
        except FinesServiceError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
        return Response(self.get_serializer(fine).data, status=status.HTTP_201_CREATED)

    def update(self, request, *args, **kwargs):
        partial = kwargs.pop('partial', False)
        fine = self.get_object()
        serializer = self.get_serializer(fine, data=request.data, partial=partial)
        serializer.is_valid(raise_exception=True)
        try:
            fine = update_fine_item(fine=fine, **serializer.validated_data)
        except FinesServiceError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
        return Response(self.get_serializer(fine).data)


class TicketViewSet(viewsets.ViewSet):
    """
    Tickets are the line items sharing a ticket number.

    list: Ticket summaries with totals and the lecture flag
    retrieve: Summary plus items
    create / update: Replace the ticket's items
    destroy: Delete every item of the ticket
    convert: Turn the ticket into a violation
    """

    permission_classes = [IsAuthenticated, IsEditorOrReadOnly]
    lookup_field = 'ticket_number'
    lookup_value_regex = '[^/]+'

    def _save(self, request, ticket_number, success_status):
        serializer = TicketInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = dict(serializer.validated_data)
        items = data.pop('items')
        data.pop('ticket_number', None)

        try:
            save_ticket(ticket_number=ticket_number, header=data, items=items)
        except FinesServiceError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
        return Response(TicketDetailSerializer(get_ticket(ticket_number)).data, status=success_status)

    @extend_schema(responses={200: TicketSummarySerializer(many=True)})
    def list(self, request):
        return Response(TicketSummarySerializer(ticket_summaries(), many=True).data)

    @extend_schema(responses={200: TicketDetailSerializer})
    def retrieve(self, request, ticket_number=None):
        return Response(TicketDetailSerializer(get_ticket(ticket_number)).data)

    @extend_schema(request=TicketInputSerializer, responses={201: TicketDetailSerializer})
    def create(self, request):
        ticket_number = (request.data.get('ticket_number') or '').strip()
        if not ticket_number:
            return Response({'ticket_number': ['This field is required.']}, status=status.HTTP_400_BAD_REQUEST)
        if Fine.objects.filter(ticket_number=ticket_number).exists():
            return Response(
                {'error': f'Ticket {ticket_number} already exists'},
                status=status.HTTP_400_BAD_REQUEST
            )
        return self._save(request, ticket_number, status.HTTP_201_CREATED)

    @extend_schema(request=TicketInputSerializer, responses={200: TicketDetailSerializer})
    def update(self, request, ticket_number=None):
        return self._save(request, ticket_number, status.HTTP_200_OK)

    def destroy(self, request, ticket_number=None):
        delete_ticket(ticket_number=ticket_number)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @extend_schema(request=TicketConvertSerializer, responses={201: ViolationSerializer})
    @action(detail=True, methods=['post'])
    def convert(self, request, ticket_number=None):
        """
        Convert the ticket into a violation.

        POST /api/fines/tickets/{ticket_number}/convert/
        """
        serializer = TicketConvertSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            violation = convert_ticket_to_violation(
                ticket_number=ticket_number,
                **serializer.validated_data
            )
        except (FinesServiceError, ViolationsServiceError) as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
        return Response(ViolationSerializer(violation).data, status=status.HTTP_201_CREATED)


class SectionViewSet(viewsets.ModelViewSet):
    """Roster of people allowed to issue fines."""

    queryset = Section.objects.all()
    serializer_class = SectionSerializer
    permission_classes = [IsAuthenticated, IsEditorOrReadOnly]

    def get_queryset(self):
        queryset = super().get_queryset()
        host_team = self.request.query_params.get('host_team')
        if host_team:
            queryset = queryset.filter(host_team=host_team)
        return queryset

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            section, created = save_section(**serializer.validated_data)
        except FinesServiceError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
        return Response(
            self.get_serializer(section).data,
            status=status.HTTP_201_CREATED if created else status.HTTP_200_OK
        )

    def perform_destroy(self, instance):
        delete_section(section=instance)


@extend_schema(responses={200: dict})
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def presets(request):
    """
    Options offered by the fine and roster forms.

    GET /api/fines/presets/
    """
    return Response({
        'titles': SectionTitle.values,
        'host_teams': HostTeam.values,
        'relationships': RELATIONSHIP_OPTIONS,
        'items': [
            {'violation_item': item, 'unit_price': str(price)}
            for item, price in FINE_ITEM_PRESETS.items()
        ],
    })
