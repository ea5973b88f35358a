from __future__ import annotations

from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.accounts.domain.roles import UserRole
from apps.accounts.interfaces.api.permissions import HasRole
from apps.feedback.domain.errors import FeedbackDomainError
from apps.feedback.interfaces.api.serializers import FeedbackSerializer
from apps.feedback.services.feedback_service import FeedbackService
from consultdesk.api_errors import domain_error_response, error_response

FEEDBACK_READER_ROLES = frozenset({UserRole.ADMIN, UserRole.MANAGER})


class FeedbackAPI(APIView):
    permission_classes = [IsAuthenticated, HasRole]

    def get(self, request):
        if request.identity.role not in FEEDBACK_READER_ROLES:
            return error_response(
                message="Only admins and managers can read feedback.", http_status=status.HTTP_403_FORBIDDEN
            )
        feedback = FeedbackService.list_all()
        return Response({"success": True, "feedback": FeedbackSerializer(feedback, many=True).data})

    def post(self, request):
        try:
            feedback = FeedbackService.submit(user=request.user, identity=request.identity, data=request.data)
        except FeedbackDomainError as exc:
            return domain_error_response(exc)
        return Response(
            {"success": True, "feedback": FeedbackSerializer(feedback).data},
            status=status.HTTP_201_CREATED,
        )


class FeedbackDeleteAPI(APIView):
    permission_classes = [IsAuthenticated, HasRole.of(UserRole.ADMIN)]

    def delete(self, request, feedback_id: int):
        try:
            FeedbackService.delete(feedback_id)
        except FeedbackDomainError as exc:
            return domain_error_response(exc)
        return Response({"success": True})
