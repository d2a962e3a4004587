from django.contrib.auth import get_user_model
from django.core.exceptions import ValidationError
from django.core.validators import MinLengthValidator
from django.db import models
from django.db.models import Count

User = get_user_model()


def author_to_dict(user) -> dict:
    return {
        'id': user.id,
        'firstName': user.first_name,
        'lastName': user.last_name,
    }


class ForumPostQuerySet(models.QuerySet):
    def visible(self):
        """Posts a moderator approved and did not hide."""
        return self.filter(is_moderated=True, is_hidden=False)

    def with_counts(self):
        return self.annotate(
            comment_count=Count('comments', distinct=True),
            like_count=Count('likes', distinct=True),
        )


class ForumPost(models.Model):
    """
    A community forum post.

    New posts start unmoderated and only appear in listings once a moderator
    approves them. Field rules are enforced on every save.
    """
    class Category(models.TextChoices):
        GENERAL = 'General'
        ADVICE = 'Advice'
        SUCCESS_STORIES = 'Success Stories'
        SUPPORT = 'Support'
        EVENTS = 'Events'

    title = models.CharField(max_length=200, validators=[MinLengthValidator(5)])
    content = models.TextField(validators=[MinLengthValidator(20)])
    author = models.ForeignKey(User, on_delete=models.CASCADE, related_name='forum_posts')
    category = models.CharField(max_length=20, choices=Category.choices)
    tags = models.JSONField(default=list, blank=True)
    likes = models.ManyToManyField(User, related_name='liked_forum_posts', blank=True)
    is_moderated = models.BooleanField(default=False)
    is_flagged = models.BooleanField(default=False)
    is_hidden = models.BooleanField(default=False, help_text="Rejected by a moderator")
    moderation_notes = models.TextField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = ForumPostQuerySet.as_manager()

    class Meta:
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['category', '-created_at'], name='forumpost_category_idx'),
            models.Index(fields=['author', '-created_at'], name='forumpost_author_idx'),
            models.Index(fields=['is_flagged', 'is_moderated'], name='forumpost_moderation_idx'),
        ]

    def __str__(self) -> str:
        return self.title

    def clean_fields(self, exclude=None):
        # Lengths are checked on the trimmed text
        self.title = (self.title or '').strip()
        self.content = (self.content or '').strip()
        super().clean_fields(exclude=exclude)

    def clean(self):
        super().clean()
        if not isinstance(self.tags, list) or not all(isinstance(tag, str) for tag in self.tags):
            raise ValidationError({'tags': 'Tags must be a list of strings.'})
        self.tags = [tag.strip() for tag in self.tags if tag.strip()]

    def save(self, *args, **kwargs):
        self.full_clean()
        super().save(*args, **kwargs)

    def to_dict(self, user=None, include_moderation: bool = False) -> dict:
        comment_count = getattr(self, 'comment_count', None)
        if comment_count is None:
            comment_count = self.comments.count()
        like_count = getattr(self, 'like_count', None)
        if like_count is None:
            like_count = self.likes.count()

        data = {
            'id': self.pk,
            'title': self.title,
            'content': self.content,
            'author': author_to_dict(self.author),
            'category': self.category,
            'tags': self.tags,
            'likeCount': like_count,
            'commentCount': comment_count,
            'createdAt': self.created_at.isoformat(),
            'updatedAt': self.updated_at.isoformat(),
        }
        if user is not None and user.is_authenticated:
            data['liked'] = self.likes.filter(pk=user.pk).exists()
        if include_moderation:
            data.update({
                'isModerated': self.is_moderated,
                'isFlagged': self.is_flagged,
                'isHidden': self.is_hidden,
                'moderationNotes': self.moderation_notes,
            })
        return data


class ForumCommentQuerySet(models.QuerySet):
    def visible(self):
        return self.filter(is_moderated=True)

    def with_counts(self):
        return self.annotate(
            replies_count=Count('replies', distinct=True),
            like_count=Count('likes', distinct=True),
        )


class ForumComment(models.Model):
    """A comment on a post; `parent_comment` makes it a reply to another comment."""
    post = models.ForeignKey(ForumPost, on_delete=models.CASCADE, related_name='comments')
    content = models.TextField(validators=[MinLengthValidator(2)])
    author = models.ForeignKey(User, on_delete=models.CASCADE, related_name='forum_comments')
    likes = models.ManyToManyField(User, related_name='liked_forum_comments', blank=True)
    is_moderated = models.BooleanField(default=False)
    is_flagged = models.BooleanField(default=False)
    moderation_notes = models.TextField(null=True, blank=True)
    parent_comment = models.ForeignKey(
        'self',
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name='replies'
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = ForumCommentQuerySet.as_manager()

    class Meta:
        ordering = ['-created_at']

    def __str__(self) -> str:
        return f"{self.author.email} on {self.post_id}"

    def clean_fields(self, exclude=None):
        self.content = (self.content or '').strip()
        super().clean_fields(exclude=exclude)

    def clean(self):
        super().clean()
        if self.parent_comment_id and self.parent_comment.post_id != self.post_id:
            raise ValidationError({'parent_comment': 'Reply must belong to the same post.'})

    def save(self, *args, **kwargs):
        self.full_clean()
        super().save(*args, **kwargs)

    def to_dict(self) -> dict:
        replies_count = getattr(self, 'replies_count', None)
        if replies_count is None:
            replies_count = self.replies.count()
        like_count = getattr(self, 'like_count', None)
        if like_count is None:
            like_count = self.likes.count()
        return {
            'id': self.pk,
            'postId': self.post_id,
            'parentCommentId': self.parent_comment_id,
            'content': self.content,
            'author': author_to_dict(self.author),
            'likeCount': like_count,
            'repliesCount': replies_count,
            'createdAt': self.created_at.isoformat(),
        }
