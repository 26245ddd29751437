from django.urls import path
from . import views

app_name = 'analytics'

urlpatterns = [
    # Dashboard (?period=YYYY-MM)
    path('dashboard/', views.dashboard, name='dashboard'),

    # Fine statistics page
    path('fines/', views.fine_stats, name='fine-stats'),

    # Viewer monthly summary (?offset=-1|0)
    path('viewer/', views.viewer_summary, name='viewer-summary'),
]
