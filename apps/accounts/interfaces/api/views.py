from __future__ import annotations

from rest_framework import status
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.throttling import ScopedRateThrottle
from rest_framework.views import APIView
from rest_framework_simplejwt.views import TokenObtainPairView

from apps.accounts.application.services.identity_service import AccountIdentityService
from apps.accounts.application.use_cases.change_user_role import ChangeUserRoleCommand, ChangeUserRoleUseCase
from apps.accounts.application.use_cases.register_client import RegisterClientCommand, RegisterClientUseCase
from apps.accounts.domain.errors import AccountAlreadyExistsError, AccountNotFoundError, AccountValidationError
from apps.accounts.interfaces.api.permissions import HasRole
from apps.accounts.interfaces.api.serializers import (
    AuthSessionSerializer,
    ChangeRoleSerializer,
    ClientRegisterSerializer,
    RoleTokenObtainPairSerializer,
)
from apps.accounts.interfaces.cookies import clear_auth_cookies, set_auth_cookies
from apps.accounts.domain.roles import UserRole
from apps.accounts.services.audit_service import AccountAuditService


def _success(*, data: dict, http_status: int = status.HTTP_200_OK) -> Response:
    return Response({"success": True, "data": data}, status=http_status)


def _error(*, message: str, field: str | None = None, http_status: int = 400) -> Response:
    payload: dict = {"success": False, "error": {"message": message}}
    if field:
        payload["error"]["field"] = field
    return Response(payload, status=http_status)


class RoleTokenObtainPairView(TokenObtainPairView):
    serializer_class = RoleTokenObtainPairSerializer


class RegisterClientAPI(APIView):
    permission_classes = [AllowAny]
    authentication_classes = []
    throttle_classes = [ScopedRateThrottle]
    throttle_scope = "auth"

    def post(self, request):
        serializer = ClientRegisterSerializer(data=request.data)
        if not serializer.is_valid():
            return _error(message="Invalid input.", http_status=status.HTTP_400_BAD_REQUEST)

        data = serializer.validated_data
        try:
            result = RegisterClientUseCase.execute(
                RegisterClientCommand(
                    full_name=data["full_name"],
                    email=data["email"],
                    password=data["password"],
                    phone=data.get("phone", ""),
                    ip_address=AccountAuditService.client_ip(request),
                    user_agent=AccountAuditService.user_agent(request),
                )
            )
        except AccountAlreadyExistsError as exc:
            return _error(message=str(exc), field=getattr(exc, "field", None), http_status=status.HTTP_409_CONFLICT)
        except AccountValidationError as exc:
            return _error(message=str(exc), field=getattr(exc, "field", None), http_status=status.HTTP_400_BAD_REQUEST)

        tokens = AccountIdentityService.issue_tokens(result.user)
        return _success(
            data={"user_id": result.user.id, **tokens},
            http_status=status.HTTP_201_CREATED,
        )


class AuthSessionAPI(APIView):
    """Sets or clears the http-only session cookie and the role cookie used by the edge guard."""

    permission_classes = [AllowAny]
    authentication_classes = []
    throttle_classes = [ScopedRateThrottle]
    throttle_scope = "auth"

    def post(self, request):
        serializer = AuthSessionSerializer(data=request.data)
        if not serializer.is_valid():
            return _error(message="Invalid input.", http_status=status.HTTP_400_BAD_REQUEST)

        token = serializer.validated_data["token"]
        identity = AccountIdentityService.identity_from_token(token)
        if identity is None:
            return _error(message="Invalid or expired token.", http_status=status.HTTP_401_UNAUTHORIZED)

        AccountAuditService.record_request(
            request,
            user=None,
            action=AccountAuditService.ACTION_SESSION_OPENED,
            metadata={"user_id": identity.user_id, "role": identity.role.value},
        )
        response = _success(data={"role": identity.role.value})
        return set_auth_cookies(response, access_token=token, role=identity.role)

    def delete(self, request):
        AccountAuditService.record_request(
            request,
            user=None,
            action=AccountAuditService.ACTION_SESSION_CLOSED,
        )
        return clear_auth_cookies(_success(data={"cleared": True}))


class MeAPI(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request):
        identity = AccountIdentityService.identity_for_user(request.user)
        if identity is None:
            return _error(message="Account has no valid role.", http_status=status.HTTP_403_FORBIDDEN)
        return _success(
            data={
                "user_id": identity.user_id,
                "role": identity.role.value,
                "display_name": identity.display_name,
                "email": identity.email,
            }
        )


class ChangeUserRoleAPI(APIView):
    permission_classes = [IsAuthenticated, HasRole.of(UserRole.ADMIN)]

    def post(self, request, user_id: int):
        serializer = ChangeRoleSerializer(data=request.data)
        if not serializer.is_valid():
            return _error(message="Invalid role.", field="role", http_status=status.HTTP_400_BAD_REQUEST)
        try:
            profile = ChangeUserRoleUseCase.execute(
                ChangeUserRoleCommand(actor=request.user, user_id=user_id, role=serializer.validated_data["role"])
            )
        except AccountNotFoundError as exc:
            return _error(message=str(exc), http_status=status.HTTP_404_NOT_FOUND)
        except AccountValidationError as exc:
            return _error(message=str(exc), field=exc.field, http_status=status.HTTP_400_BAD_REQUEST)
        return _success(data={"user_id": user_id, "role": profile.role})
