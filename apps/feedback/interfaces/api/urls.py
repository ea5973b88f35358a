from django.urls import path

from .views import FeedbackAPI, FeedbackDeleteAPI

urlpatterns = [
    path("feedback/", FeedbackAPI.as_view(), name="api_feedback"),
    path("feedback/<int:feedback_id>", FeedbackDeleteAPI.as_view(), name="api_feedback_delete"),
]
