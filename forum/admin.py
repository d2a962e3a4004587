from django.contrib import admin
from .models import ForumComment, ForumPost


class ForumCommentInline(admin.TabularInline):
    model = ForumComment
    extra = 0
    fields = ('author', 'content', 'is_moderated', 'is_flagged')
    readonly_fields = ('author', 'content')


@admin.register(ForumPost)
class ForumPostAdmin(admin.ModelAdmin):
    list_display = ['title', 'author', 'category', 'is_moderated', 'is_flagged', 'is_hidden', 'created_at']
    list_filter = ['category', 'is_moderated', 'is_flagged', 'is_hidden']
    search_fields = ['title', 'content', 'author__email']
    readonly_fields = ['created_at', 'updated_at']
    filter_horizontal = ['likes']
    inlines = [ForumCommentInline]
    actions = ['approve_posts']

    @admin.action(description='Approve selected posts')
    def approve_posts(self, request, queryset):
        updated = queryset.update(is_moderated=True, is_flagged=False, is_hidden=False)
        self.message_user(request, f'{updated} posts approved.')


@admin.register(ForumComment)
class ForumCommentAdmin(admin.ModelAdmin):
    list_display = ['post', 'author', 'is_moderated', 'is_flagged', 'created_at']
    list_filter = ['is_moderated', 'is_flagged']
    search_fields = ['content', 'author__email']
    readonly_fields = ['created_at', 'updated_at']
