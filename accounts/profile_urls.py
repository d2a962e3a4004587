from django.urls import path
from .views import profile, export_user_data, delete_account, send_invite, sent_invites

app_name = 'user'

urlpatterns = [
    path('profile', profile, name='profile'),
    path('export', export_user_data, name='export_data'),
    path('delete', delete_account, name='delete_account'),
    path('invite', send_invite, name='send_invite'),
    path('invites', sent_invites, name='sent_invites'),
]
