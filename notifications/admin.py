from django.contrib import admin
from .models import DeviceToken


@admin.register(DeviceToken)
class DeviceTokenAdmin(admin.ModelAdmin):
    list_display = ['user', 'platform', 'created_at', 'last_used_at']
    list_filter = ['platform']
    search_fields = ['user__email']
    readonly_fields = ['token', 'created_at', 'last_used_at']
