from django.urls import path, include
from rest_framework.routers import DefaultRouter
from . import views

app_name = 'projects'

router = DefaultRouter()
router.register(r'', views.ProjectViewSet, basename='project')

urlpatterns = [
    # GET    /api/projects/            - List projects (?search=, ?host_team=)
    # POST   /api/projects/            - Create project
    # GET    /api/projects/{id}/       - Project details
    # PUT    /api/projects/{id}/       - Update project (rename cascades)
    # DELETE /api/projects/{id}/       - Delete project
    path('', include(router.urls)),
]
