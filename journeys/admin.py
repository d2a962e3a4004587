from django.contrib import admin
from .models import Journey, JourneyProgress


@admin.register(Journey)
class JourneyAdmin(admin.ModelAdmin):
    list_display = ['title', 'slug', 'duration_days', 'category', 'is_active']
    list_filter = ['is_active', 'category']
    search_fields = ['title', 'slug']
    prepopulated_fields = {'slug': ('title',)}
    readonly_fields = ['created_at', 'updated_at']


@admin.register(JourneyProgress)
class JourneyProgressAdmin(admin.ModelAdmin):
    list_display = ['user', 'journey', 'current_day', 'started_at', 'completed_at', 'last_activity']
    list_filter = ['journey', 'completed_at']
    search_fields = ['user__email', 'journey__slug']
    # Reflections are client-encrypted; nothing useful to edit here.
    readonly_fields = ['reflections', 'started_at', 'completed_at', 'last_activity']
