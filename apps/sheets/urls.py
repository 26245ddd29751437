from django.urls import path
from . import views

app_name = 'sheets'

urlpatterns = [
    # GET  /api/sheets/export/ - xlsx download of every table
    path('export/', views.export_data, name='export'),

    # POST /api/sheets/import/ - restore from an xlsx backup (admin)
    path('import/', views.import_data, name='import'),
]
