from django.urls import path
from . import views

app_name = 'rpc'

urlpatterns = [
    # POST /api/exec/ - {"action": ...}
    path('', views.exec_action, name='exec'),
]
