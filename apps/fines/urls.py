from django.urls import path, include
from rest_framework.routers import DefaultRouter
from . import views

app_name = 'fines'

router = DefaultRouter()
router.register(r'items', views.FineViewSet, basename='fine')
router.register(r'tickets', views.TicketViewSet, basename='ticket')
router.register(r'sections', views.SectionViewSet, basename='section')

urlpatterns = [
    # GET    /api/fines/presets/                          - Form options
    path('presets/', views.presets, name='presets'),
    # /api/fines/items/                                   - Line item CRUD
    # /api/fines/tickets/                                 - Ticket summaries and replace
    # POST   /api/fines/tickets/{ticket_number}/convert/  - Convert to violation
    # /api/fines/sections/                                - Issuer roster
    path('', include(router.urls)),
]
