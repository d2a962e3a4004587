"""
URL configuration for the Sparq Connection API.
"""
from django.contrib import admin
from django.urls import path, include

urlpatterns = [
    path('admin/', admin.site.urls),
    path('api/', include('core.urls')),
    path('api/auth/', include('accounts.urls')),
    path('api/user/', include('accounts.profile_urls')),
    path('api/journey/', include('journeys.urls')),
    path('api/prompt/', include('prompts.urls')),
    path('api/', include('checkins.urls')),
    path('api/forum/', include('forum.urls')),
    path('api/notifications/', include('notifications.urls')),
    path('api/gamification/', include('gamification.urls')),
    path('health/', include('health_check.urls')),
]

handler404 = 'core.views.not_found'
handler500 = 'core.views.server_error'
