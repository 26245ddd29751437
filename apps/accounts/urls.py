from django.urls import path
from . import views

app_name = 'users'

urlpatterns = [
    # Authentication
    path('login/', views.login, name='login'),
    path('google-login/', views.google_login, name='google-login'),

    # User profile
    path('user/', views.get_current_user, name='current-user'),

    # Account management (admin)
    path('users/', views.users, name='users'),
]
