from django.urls import path
from . import views

app_name = 'forum'

urlpatterns = [
    path('posts', views.posts, name='posts'),
    path('posts/<int:post_id>/comments', views.post_comments, name='post_comments'),
    path('posts/<int:post_id>/like', views.toggle_like, name='toggle_like'),
    path('posts/<int:post_id>/flag', views.flag_post, name='flag_post'),
    path('posts/<int:post_id>/moderate', views.moderate_post, name='moderate_post'),
    path('comments/<int:comment_id>/moderate', views.moderate_comment, name='moderate_comment'),
    path('moderation', views.moderation_queue, name='moderation_queue'),
]
