from django.urls import path
from .views import register, login_view, logout_view, password_reset, password_reset_confirm

app_name = 'accounts'

urlpatterns = [
    path('register', register, name='register'),
    path('login', login_view, name='login'),
    path('logout', logout_view, name='logout'),
    path('password-reset', password_reset, name='password_reset'),
    path('password-reset/confirm', password_reset_confirm, name='password_reset_confirm'),
]
