from django.urls import path
from . import views

app_name = 'journeys'

urlpatterns = [
    path('', views.journey_list, name='journey_list'),
    path('start', views.start_journey, name='start_journey'),
    path('current', views.current_journey, name='current_journey'),
    path('summaries', views.journey_summaries, name='journey_summaries'),
    path('<slug:journey_id>', views.journey_detail, name='journey_detail'),
    path('<slug:journey_id>/progress', views.journey_progress, name='journey_progress'),
    path('<slug:journey_id>/reflections', views.submit_reflection, name='submit_reflection'),
]
