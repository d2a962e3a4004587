from django.urls import path
from . import views

app_name = 'checkins'

urlpatterns = [
    path('dailyLog', views.create_daily_log, name='create_daily_log'),
    path('dailyLog/today', views.today_log, name='today_log'),
    path('dailyLog/history', views.log_history, name='log_history'),
    path('dailyLog/stats', views.log_stats, name='log_stats'),
]
