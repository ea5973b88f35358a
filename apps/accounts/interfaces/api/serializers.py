from __future__ import annotations

from rest_framework import serializers
from rest_framework_simplejwt.serializers import TokenObtainPairSerializer

from apps.accounts.application.services.identity_service import ROLE_CLAIM, AccountIdentityService
from apps.accounts.domain.errors import AccountRoleMissingError, UnknownRoleError
from apps.accounts.domain.roles import UserRole


class ClientRegisterSerializer(serializers.Serializer):
    full_name = serializers.CharField(max_length=200)
    email = serializers.EmailField(max_length=254)
    password = serializers.CharField(min_length=8, write_only=True)
    phone = serializers.CharField(max_length=32, required=False, allow_blank=True)


class AuthSessionSerializer(serializers.Serializer):
    token = serializers.CharField()


class ChangeRoleSerializer(serializers.Serializer):
    role = serializers.ChoiceField(choices=[role.value for role in UserRole])


class RoleTokenObtainPairSerializer(TokenObtainPairSerializer):
    """Adds the provisioned role as a claim so the edge guard can read it without a lookup."""

    @classmethod
    def get_token(cls, user):
        token = super().get_token(user)
        try:
            token[ROLE_CLAIM] = AccountIdentityService.role_for_user(user).value
        except (AccountRoleMissingError, UnknownRoleError):
            pass
        return token
