from django.urls import path
from . import views

app_name = 'notifications'

urlpatterns = [
    path('devices', views.devices, name='devices'),
    path('topics/subscribe', views.subscribe_topic, name='subscribe_topic'),
    path('topics/unsubscribe', views.unsubscribe_topic, name='unsubscribe_topic'),
    path('send', views.send_notification, name='send_notification'),
    path('send-topic', views.send_topic_notification, name='send_topic_notification'),
]
