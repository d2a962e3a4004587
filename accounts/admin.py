from django.contrib import admin
from .models import PartnerInvite, UserProfile


@admin.register(UserProfile)
class UserProfileAdmin(admin.ModelAdmin):
    list_display = ['user', 'timezone', 'push_daily_reminder', 'is_moderator', 'created_at']
    list_filter = ['push_daily_reminder', 'is_moderator', 'timezone']
    search_fields = ['user__email']


@admin.register(PartnerInvite)
class PartnerInviteAdmin(admin.ModelAdmin):
    list_display = ['sender', 'recipient', 'code', 'status', 'created_at', 'accepted_at']
    list_filter = ['status']
    search_fields = ['sender__email', 'recipient', 'code']
    readonly_fields = ['code', 'created_at', 'accepted_at']
