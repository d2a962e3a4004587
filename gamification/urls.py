from django.urls import path
from . import views

app_name = 'gamification'

urlpatterns = [
    path('status', views.status, name='status'),
    path('badges', views.badges, name='badges'),
    path('history', views.points_history, name='history'),
]
