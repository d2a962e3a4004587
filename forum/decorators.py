from functools import wraps

from accounts.models import UserProfile
from core.http import json_error

from .models import ForumPost


def is_moderator(user) -> bool:
    if not user.is_authenticated:
        return False
    profile, _ = UserProfile.objects.get_or_create(user=user)
    return profile.is_moderator


def moderator_required(view_func):
    @wraps(view_func)
    def _wrapped_view(request, *args, **kwargs):
        if not is_moderator(request.user):
            return json_error('Unauthorized: Moderator access required', status=403)
        return view_func(request, *args, **kwargs)
    return _wrapped_view


def visible_post_required(view_func):
    """Resolve `post_id` to an approved, unhidden post and pass it as `post`."""
    @wraps(view_func)
    def _wrapped_view(request, *args, **kwargs):
        post = ForumPost.objects.visible().select_related('author').filter(pk=kwargs.pop('post_id')).first()
        if post is None:
            return json_error('Post not found', status=404)
        return view_func(request, *args, post=post, **kwargs)
    return _wrapped_view
