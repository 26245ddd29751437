from django.db.models import Q
from rest_framework import viewsets, status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from apps.accounts.permissions import IsEditorOrReadOnly

from .models import Project
from .serializers import ProjectSerializer, ProjectFilterSerializer
from .services import create_project, update_project, delete_project
from .exceptions import ProjectServiceError


class ProjectViewSet(viewsets.ModelViewSet):
    """
    ViewSet for Project CRUD operations.

    Business rules (required fields, sequence numbering, rename cascade)
    live in the service layer.
    """

    queryset = Project.objects.all()
    serializer_class = ProjectSerializer
    permission_classes = [IsAuthenticated, IsEditorOrReadOnly]

    def get_queryset(self):
        queryset = super().get_queryset()

        filter_serializer = ProjectFilterSerializer(data=self.request.query_params)
        filter_serializer.is_valid(raise_exception=True)
        params = filter_serializer.validated_data

        search = params.get('search')
        if search:
            queryset = queryset.filter(
                Q(name__icontains=search) |
                Q(abbreviation__icontains=search) |
                Q(contractor__icontains=search)
            )

        host_team = params.get('host_team')
        if host_team:
            queryset = queryset.filter(host_team=host_team)

        return queryset

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            project = create_project(**serializer.validated_data)
        except ProjectServiceError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
        return Response(self.get_serializer(project).data, status=status.HTTP_201_CREATED)

    def update(self, request, *args, **kwargs):
        partial = kwargs.pop('partial', False)
        project = self.get_object()
        serializer = self.get_serializer(project, data=request.data, partial=partial)
        serializer.is_valid(raise_exception=True)
        try:
            project = update_project(project=project, **serializer.validated_data)
        except ProjectServiceError as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
        return Response(self.get_serializer(project).data)

    def perform_destroy(self, instance):
        delete_project(project=instance)
