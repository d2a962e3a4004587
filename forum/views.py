import logging

from django.core.exceptions import ValidationError
from django.db.models import Q
from django.http import HttpRequest, JsonResponse, QueryDict
from django.views.decorators.http import require_http_methods, require_GET, require_POST

from core.http import api_login_required, invalid_form, json_error, parse_json_body
from core.pagination import paginate
from notifications.services import queue_user_notification

from .decorators import moderator_required, visible_post_required
from .forms import CommentForm, FlagForm, ModerateForm
from .models import ForumComment, ForumPost

logger = logging.getLogger(__name__)


def validation_failed(error: ValidationError) -> JsonResponse:
    """400 for a model that failed full_clean(), naming the first problem."""
    errors = error.message_dict
    field, messages = next(iter(errors.items()))
    message = messages[0] if field == '__all__' else f"{field}: {messages[0]}"
    return json_error(message, status=400, errors=errors)


def _list_param(data, key: str) -> list:
    if isinstance(data, QueryDict):
        return data.getlist(key)
    value = data.get(key)
    return value if isinstance(value, list) else []


@require_http_methods(['GET', 'POST'])
@api_login_required
@paginate()
def posts(request: HttpRequest):
    """
    GET: approved posts, newest first. Query: page, limit, category, search.
    POST: create a post; it stays out of listings until a moderator approves it.
    """
    if request.method == 'POST':
        return create_post(request)

    queryset = ForumPost.objects.visible().select_related('author')
    category = request.GET.get('category')
    if category:
        queryset = queryset.filter(category=category)
    search = request.GET.get('search')
    if search:
        queryset = queryset.filter(Q(title__icontains=search) | Q(content__icontains=search))

    page = request.pagination.slice(queryset.with_counts())
    return {
        'data': [post.to_dict(user=request.user) for post in page],
        'total': queryset.count(),
    }


def create_post(request: HttpRequest) -> JsonResponse:
    data = parse_json_body(request)
    post = ForumPost(
        title=str(data.get('title') or ''),
        content=str(data.get('content') or ''),
        category=str(data.get('category') or ''),
        tags=_list_param(data, 'tags'),
        author=request.user,
        is_moderated=False,
    )
    try:
        post.save()
    except ValidationError as e:
        return validation_failed(e)

    logger.info(f"Forum post {post.pk} created by user {request.user.id}, awaiting moderation")
    return JsonResponse({
        'success': True,
        'data': post.to_dict(user=request.user, include_moderation=True),
    }, status=201)


@require_http_methods(['GET', 'POST'])
@api_login_required
@visible_post_required
@paginate()
def post_comments(request: HttpRequest, post: ForumPost):
    """
    GET: approved top-level comments with their reply counts.
    POST: {"content": string, "parentCommentId"?: int}
    """
    if request.method == 'POST':
        return create_comment(request, post)

    queryset = post.comments.visible().filter(parent_comment__isnull=True).select_related('author')
    page = request.pagination.slice(queryset.with_counts())
    return {
        'data': [comment.to_dict() for comment in page],
        'total': queryset.count(),
    }


def create_comment(request: HttpRequest, post: ForumPost) -> JsonResponse:
    form = CommentForm(parse_json_body(request))
    if not form.is_valid():
        return invalid_form(form)

    parent = None
    parent_id = form.cleaned_data['parentCommentId']
    if parent_id:
        parent = ForumComment.objects.filter(pk=parent_id).first()
        if parent is None:
            return json_error('Parent comment not found', status=404)

    comment = ForumComment(
        post=post,
        content=form.cleaned_data['content'],
        author=request.user,
        parent_comment=parent,
        is_moderated=False,
    )
    try:
        comment.save()
    except ValidationError as e:
        return validation_failed(e)

    return JsonResponse({'success': True, 'data': comment.to_dict()}, status=201)


@require_POST
@api_login_required
@visible_post_required
def toggle_like(request: HttpRequest, post: ForumPost) -> JsonResponse:
    if post.likes.filter(pk=request.user.pk).exists():
        post.likes.remove(request.user)
        liked = False
    else:
        post.likes.add(request.user)
        liked = True
    return JsonResponse({'success': True, 'liked': liked, 'likeCount': post.likes.count()})


@require_POST
@api_login_required
def flag_post(request: HttpRequest, post_id: int) -> JsonResponse:
    """Report a post for review. Flagged posts show up in the moderation queue."""
    form = FlagForm(parse_json_body(request))
    if not form.is_valid():
        return invalid_form(form)

    post = ForumPost.objects.filter(pk=post_id).first()
    if post is None:
        return json_error('Post not found', status=404)

    post.is_flagged = True
    post.moderation_notes = f"Flagged by {request.user.id} - Reason: {form.cleaned_data['reason']}"
    post.save()
    logger.info(f"Forum post {post.pk} flagged by user {request.user.id}")

    return JsonResponse({'success': True, 'message': 'Post flagged for review'})


@require_POST
@api_login_required
@moderator_required
def moderate_post(request: HttpRequest, post_id: int) -> JsonResponse:
    """
    Approve or reject a post (moderators only).

    Body: {"approved": boolean, "moderationNotes"?: string}
    """
    form = ModerateForm(parse_json_body(request))
    if not form.is_valid():
        return invalid_form(form)

    post = ForumPost.objects.filter(pk=post_id).select_related('author').first()
    if post is None:
        return json_error('Post not found', status=404)

    approved = form.cleaned_data['approved']
    notes = form.cleaned_data['moderationNotes']
    post.is_moderated = True
    post.is_flagged = False
    post.is_hidden = not approved
    post.moderation_notes = f"Moderated by {request.user.id} - {notes}"
    post.save()
    logger.info(f"Forum post {post.pk} {'approved' if approved else 'hidden'} by moderator {request.user.id}")

    queue_user_notification(
        post.author_id,
        'Your forum post was reviewed',
        f'"{post.title}" was {"approved" if approved else "not approved"}.',
        {'type': 'post_moderated', 'postId': post.pk, 'approved': approved},
    )

    return JsonResponse({
        'success': True,
        'message': 'Post moderated successfully',
        'data': post.to_dict(include_moderation=True),
    })


@require_POST
@api_login_required
@moderator_required
def moderate_comment(request: HttpRequest, comment_id: int) -> JsonResponse:
    form = ModerateForm(parse_json_body(request))
    if not form.is_valid():
        return invalid_form(form)

    comment = ForumComment.objects.filter(pk=comment_id).select_related('post', 'author').first()
    if comment is None:
        return json_error('Comment not found', status=404)

    if form.cleaned_data['approved']:
        comment.is_moderated = True
        comment.is_flagged = False
        comment.moderation_notes = f"Moderated by {request.user.id} - {form.cleaned_data['moderationNotes']}"
        comment.save()
        return JsonResponse({'success': True, 'data': comment.to_dict()})

    comment.delete()
    return JsonResponse({'success': True, 'message': 'Comment removed'})


@require_GET
@api_login_required
@moderator_required
@paginate()
def moderation_queue(request: HttpRequest):
    """Posts waiting for a moderator: new ones and flagged ones, oldest first."""
    queryset = (
        ForumPost.objects
        .filter(Q(is_moderated=False) | Q(is_flagged=True))
        .select_related('author')
        .order_by('created_at')
    )
    page = request.pagination.slice(queryset.with_counts())
    return {
        'data': [post.to_dict(include_moderation=True) for post in page],
        'total': queryset.count(),
    }
