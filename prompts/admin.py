from django.contrib import admin
from .models import Prompt, PromptResponse


@admin.register(Prompt)
class PromptAdmin(admin.ModelAdmin):
    list_display = ['prompt_id', 'category', 'active', 'created_at']
    list_filter = ['category', 'active']
    search_fields = ['prompt_id', 'text']

    def get_readonly_fields(self, request, obj=None):
        """Existing prompts can only be (de)activated."""
        if obj is not None:
            return ['prompt_id', 'text', 'category', 'created_at']
        return ['created_at']


@admin.register(PromptResponse)
class PromptResponseAdmin(admin.ModelAdmin):
    list_display = ['user', 'prompt', 'created_at']
    list_filter = ['prompt__category']
    search_fields = ['user__email', 'prompt__prompt_id']
    readonly_fields = ['created_at', 'updated_at']
