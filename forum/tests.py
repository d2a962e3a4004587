"""
Tests for the community forum.

Covers:
- Post validation on every save
- Moderation visibility rules
- Comments, likes and flags
- Moderator-only endpoints
"""
import json
from unittest.mock import patch

from django.contrib.auth import get_user_model
from django.core.exceptions import ValidationError
from django.test import TestCase, Client
from django.urls import reverse

from .models import ForumComment, ForumPost

User = get_user_model()

LONG_CONTENT = 'We started a weekly walk and it really helps us talk.'


def make_post(author, **kwargs):
    defaults = {
        'title': 'Weekly walks',
        'content': LONG_CONTENT,
        'category': ForumPost.Category.ADVICE,
        'author': author,
        'is_moderated': True,
    }
    defaults.update(kwargs)
    return ForumPost.objects.create(**defaults)


class ForumPostModelTests(TestCase):
    def setUp(self):
        self.user = User.objects.create_user(username='a@example.com', email='a@example.com', password='pw')

    def test_short_content_rejected(self):
        with self.assertRaises(ValidationError) as ctx:
            make_post(self.user, content='Too short')
        self.assertIn('content', ctx.exception.message_dict)

    def test_title_is_trimmed_before_length_check(self):
        with self.assertRaises(ValidationError) as ctx:
            make_post(self.user, title='  ab  ')
        self.assertIn('title', ctx.exception.message_dict)

    def test_unknown_category_rejected(self):
        with self.assertRaises(ValidationError):
            make_post(self.user, category='Gossip')

    def test_tags_must_be_strings(self):
        with self.assertRaises(ValidationError):
            make_post(self.user, tags=['ok', 3])

    def test_reply_must_belong_to_same_post(self):
        post = make_post(self.user)
        other = make_post(self.user, title='Another post')
        parent = ForumComment.objects.create(post=post, author=self.user, content='Nice one')
        with self.assertRaises(ValidationError):
            ForumComment.objects.create(post=other, author=self.user, content='Reply', parent_comment=parent)


class ForumApiTestCase(TestCase):
    def setUp(self):
        self.user = User.objects.create_user(
            username='test@example.com',
            email='test@example.com',
            password='testpass123'
        )
        self.moderator = User.objects.create_user(
            username='mod@example.com',
            email='mod@example.com',
            password='modpass123'
        )
        self.moderator.profile.is_moderator = True
        self.moderator.profile.save()
        self.client = Client()
        self.client.login(username='test@example.com', password='testpass123')

    def post_json(self, url, data):
        return self.client.post(url, json.dumps(data), content_type='application/json')


class PostListTests(ForumApiTestCase):
    def test_only_approved_posts_are_listed(self):
        make_post(self.user, title='Approved post')
        make_post(self.user, title='Pending post', is_moderated=False)
        make_post(self.user, title='Hidden post', is_hidden=True)

        body = self.client.get(reverse('forum:posts')).json()

        self.assertEqual([p['title'] for p in body['data']], ['Approved post'])
        self.assertEqual(body['pagination']['total'], 1)

    def test_category_and_search_filters(self):
        make_post(self.user, title='Date night ideas', category=ForumPost.Category.GENERAL)
        make_post(self.user, title='Budget tips', category=ForumPost.Category.ADVICE)

        by_category = self.client.get(reverse('forum:posts'), {'category': 'General'}).json()
        self.assertEqual([p['title'] for p in by_category['data']], ['Date night ideas'])

        by_search = self.client.get(reverse('forum:posts'), {'search': 'budget'}).json()
        self.assertEqual([p['title'] for p in by_search['data']], ['Budget tips'])

    def test_counts_are_included(self):
        post = make_post(self.user)
        ForumComment.objects.create(post=post, author=self.user, content='First!', is_moderated=True)
        post.likes.add(self.moderator)

        data = self.client.get(reverse('forum:posts')).json()['data'][0]
        self.assertEqual(data['commentCount'], 1)
        self.assertEqual(data['likeCount'], 1)
        self.assertFalse(data['liked'])

    def test_requires_login(self):
        self.client.logout()
        self.assertEqual(self.client.get(reverse('forum:posts')).status_code, 401)


class CreatePostTests(ForumApiTestCase):
    def test_create_post_awaits_moderation(self):
        response = self.post_json(reverse('forum:posts'), {
            'title': 'Our first month',
            'content': LONG_CONTENT,
            'category': 'Success Stories',
            'tags': ['milestones'],
        })

        self.assertEqual(response.status_code, 201)
        data = response.json()['data']
        self.assertFalse(data['isModerated'])
        self.assertEqual(data['tags'], ['milestones'])
        self.assertEqual(self.client.get(reverse('forum:posts')).json()['pagination']['total'], 0)

    def test_short_content_returns_400(self):
        response = self.post_json(reverse('forum:posts'), {
            'title': 'Our first month',
            'content': 'Too short',
            'category': 'General',
        })

        self.assertEqual(response.status_code, 400)
        body = response.json()
        self.assertFalse(body['success'])
        self.assertIn('content', body['errors'])
        self.assertFalse(ForumPost.objects.exists())


class CommentTests(ForumApiTestCase):
    def setUp(self):
        super().setUp()
        self.post = make_post(self.user)

    def test_create_comment_and_reply(self):
        url = reverse('forum:post_comments', args=[self.post.pk])
        response = self.post_json(url, {'content': 'Great idea'})
        self.assertEqual(response.status_code, 201)
        parent_id = response.json()['data']['id']

        reply = self.post_json(url, {'content': 'Agreed', 'parentCommentId': parent_id})
        self.assertEqual(reply.status_code, 201)
        self.assertEqual(reply.json()['data']['parentCommentId'], parent_id)

    def test_list_shows_approved_top_level_comments(self):
        parent = ForumComment.objects.create(post=self.post, author=self.user, content='Top', is_moderated=True)
        ForumComment.objects.create(
            post=self.post, author=self.user, content='Reply', parent_comment=parent, is_moderated=True,
        )
        ForumComment.objects.create(post=self.post, author=self.user, content='Pending')

        body = self.client.get(reverse('forum:post_comments', args=[self.post.pk])).json()

        self.assertEqual(len(body['data']), 1)
        self.assertEqual(body['data'][0]['content'], 'Top')
        self.assertEqual(body['data'][0]['repliesCount'], 1)

    def test_non_numeric_parent_id_returns_400(self):
        response = self.post_json(
            reverse('forum:post_comments', args=[self.post.pk]),
            {'content': 'nice post', 'parentCommentId': 'abc'},
        )

        self.assertEqual(response.status_code, 400)
        self.assertIn('parentCommentId', response.json()['errors'])
        self.assertFalse(ForumComment.objects.exists())

    def test_unknown_parent_returns_404(self):
        response = self.post_json(
            reverse('forum:post_comments', args=[self.post.pk]),
            {'content': 'nice post', 'parentCommentId': 9999},
        )
        self.assertEqual(response.status_code, 404)

    def test_comment_on_pending_post_404(self):
        pending = make_post(self.user, title='Pending post', is_moderated=False)
        response = self.post_json(reverse('forum:post_comments', args=[pending.pk]), {'content': 'Hi there'})
        self.assertEqual(response.status_code, 404)


class LikeAndFlagTests(ForumApiTestCase):
    def setUp(self):
        super().setUp()
        self.post = make_post(self.moderator)

    def test_like_toggles(self):
        url = reverse('forum:toggle_like', args=[self.post.pk])

        first = self.client.post(url).json()
        self.assertTrue(first['liked'])
        self.assertEqual(first['likeCount'], 1)

        second = self.client.post(url).json()
        self.assertFalse(second['liked'])
        self.assertEqual(second['likeCount'], 0)

    def test_flag_post(self):
        response = self.post_json(reverse('forum:flag_post', args=[self.post.pk]), {'reason': 'Spam'})

        self.assertEqual(response.status_code, 200)
        self.post.refresh_from_db()
        self.assertTrue(self.post.is_flagged)
        self.assertEqual(self.post.moderation_notes, f'Flagged by {self.user.id} - Reason: Spam')

    def test_flag_requires_reason(self):
        response = self.post_json(reverse('forum:flag_post', args=[self.post.pk]), {})
        self.assertEqual(response.status_code, 400)


@patch('forum.views.queue_user_notification')
class ModerationTests(ForumApiTestCase):
    def setUp(self):
        super().setUp()
        self.pending = make_post(self.user, title='Pending post', is_moderated=False)

    def test_non_moderator_forbidden(self, mock_queue):
        response = self.post_json(reverse('forum:moderate_post', args=[self.pending.pk]), {'approved': True})

        self.assertEqual(response.status_code, 403)
        self.assertEqual(response.json()['message'], 'Unauthorized: Moderator access required')
        mock_queue.assert_not_called()

    def test_approve_post(self, mock_queue):
        self.client.login(username='mod@example.com', password='modpass123')
        response = self.post_json(reverse('forum:moderate_post', args=[self.pending.pk]), {
            'approved': True,
            'moderationNotes': 'Looks good',
        })

        self.assertEqual(response.status_code, 200)
        self.pending.refresh_from_db()
        self.assertTrue(self.pending.is_moderated)
        self.assertFalse(self.pending.is_hidden)
        self.assertEqual(self.pending.moderation_notes, f'Moderated by {self.moderator.id} - Looks good')
        self.assertEqual(mock_queue.call_args.args[0], self.user.id)
        self.assertIn(self.pending.pk, [p['id'] for p in self.client.get(reverse('forum:posts')).json()['data']])

    def test_reject_post_hides_it(self, mock_queue):
        self.client.login(username='mod@example.com', password='modpass123')
        self.post_json(reverse('forum:moderate_post', args=[self.pending.pk]), {'approved': False})

        self.pending.refresh_from_db()
        self.assertTrue(self.pending.is_moderated)
        self.assertTrue(self.pending.is_hidden)
        self.assertEqual(self.client.get(reverse('forum:posts')).json()['pagination']['total'], 0)

    def test_queue_lists_pending_and_flagged(self, mock_queue):
        flagged = make_post(self.user, title='Flagged post', is_flagged=True)
        make_post(self.user, title='Clean post')
        self.client.login(username='mod@example.com', password='modpass123')

        body = self.client.get(reverse('forum:moderation_queue')).json()

        self.assertEqual({p['id'] for p in body['data']}, {self.pending.pk, flagged.pk})

    def test_reject_comment_deletes_it(self, mock_queue):
        post = make_post(self.user)
        comment = ForumComment.objects.create(post=post, author=self.user, content='Buy my stuff')
        self.client.login(username='mod@example.com', password='modpass123')

        response = self.post_json(reverse('forum:moderate_comment', args=[comment.pk]), {'approved': False})

        self.assertEqual(response.status_code, 200)
        self.assertFalse(ForumComment.objects.filter(pk=comment.pk).exists())
