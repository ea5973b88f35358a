from __future__ import annotations

from rest_framework import serializers

from apps.feedback.models import Feedback


class FeedbackSerializer(serializers.ModelSerializer):
    class Meta:
        model = Feedback
        fields = ["id", "user", "name", "email", "rating", "category", "message", "created_at"]
