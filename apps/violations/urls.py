from django.urls import path, include
from rest_framework.routers import DefaultRouter
from . import views

app_name = 'violations'

router = DefaultRouter()
router.register(r'', views.ViolationViewSet, basename='violation')

urlpatterns = [
    # GET    /api/violations/                    - List (?search=, ?status=, ?host_team=, ?date_from=, ?date_to=)
    # POST   /api/violations/                    - Record violation
    # GET    /api/violations/presets/            - Common violation descriptions
    # POST   /api/violations/{id}/status/        - Change status
    # POST   /api/violations/{id}/ticket-file/   - Upload fine ticket file
    # POST   /api/violations/{id}/scan-file/     - Upload or replace sign-off scan
    # POST   /api/violations/{id}/document/      - Generate sign-off document
    # POST   /api/violations/{id}/send-email/    - Send manual e-mail
    path('', include(router.urls)),
]
