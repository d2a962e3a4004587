from django.contrib import admin
from .models import Badge, GamificationProfile, PointsEntry


@admin.register(GamificationProfile)
class GamificationProfileAdmin(admin.ModelAdmin):
    list_display = ['user', 'points', 'current_streak', 'longest_streak', 'last_active_date']
    search_fields = ['user__email']
    readonly_fields = ['created_at', 'updated_at']


@admin.register(PointsEntry)
class PointsEntryAdmin(admin.ModelAdmin):
    list_display = ['user', 'points', 'source', 'created_at']
    list_filter = ['source']
    search_fields = ['user__email']
    date_hierarchy = 'created_at'


@admin.register(Badge)
class BadgeAdmin(admin.ModelAdmin):
    list_display = ['user', 'type', 'earned_at']
    list_filter = ['type']
    search_fields = ['user__email']
