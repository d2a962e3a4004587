from django.urls import path
from . import views

app_name = 'prompts'

urlpatterns = [
    path('', views.prompt_list, name='prompt_list'),
    path('today', views.today_prompt, name='today_prompt'),
    path('response', views.submit_response, name='submit_response'),
    path('responses', views.my_responses, name='my_responses'),
]
