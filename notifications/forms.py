from django import forms

from .models import DeviceToken

TOPIC_PATTERN = r'^[a-zA-Z0-9\-_.~%]+$'


class DeviceTokenForm(forms.Form):
    token = forms.CharField(max_length=512)
    platform = forms.ChoiceField(choices=DeviceToken.Platform.choices, required=False)


class TopicForm(forms.Form):
    topic = forms.RegexField(regex=TOPIC_PATTERN, max_length=900)


class SendNotificationForm(forms.Form):
    userId = forms.IntegerField()
    title = forms.CharField(max_length=200)
    body = forms.CharField()
    imageUrl = forms.URLField(required=False, assume_scheme='https')


class SendTopicNotificationForm(forms.Form):
    topic = forms.RegexField(regex=TOPIC_PATTERN, max_length=900)
    title = forms.CharField(max_length=200)
    body = forms.CharField()
    imageUrl = forms.URLField(required=False, assume_scheme='https')
