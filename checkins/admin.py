from django.contrib import admin
from .models import DailyLog


@admin.register(DailyLog)
class DailyLogAdmin(admin.ModelAdmin):
    list_display = ['user', 'date', 'mood', 'action']
    list_filter = ['date', 'mood']
    search_fields = ['user__email', 'action']
    date_hierarchy = 'date'
    readonly_fields = ['created_at', 'updated_at']
