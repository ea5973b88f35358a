from __future__ import annotations

from django.contrib.auth import get_user_model
from django.contrib.auth.backends import ModelBackend

from apps.accounts.domain.policies import normalize_email


class UsernameOrEmailBackend(ModelBackend):
    """
    Clients sign up with their e-mail as username. Staff accounts created in the
    Django admin may have a separate username, so an exact username match wins
    and the e-mail is the fallback.
    """

    def authenticate(self, request, username=None, password=None, **kwargs):
        UserModel = get_user_model()
        identifier = username or kwargs.get(UserModel.USERNAME_FIELD) or kwargs.get("email")
        identifier = str(identifier or "").strip()
        if not identifier or password is None:
            return None

        manager = UserModel._default_manager
        user = manager.filter(**{f"{UserModel.USERNAME_FIELD}__iexact": identifier}).order_by("id").first()
        if user is None and "@" in identifier:
            user = manager.filter(email__iexact=normalize_email(identifier)).order_by("id").first()
        if user is None:
            # Same hashing cost as a wrong password.
            UserModel().set_password(password)
            return None

        if user.check_password(password) and self.user_can_authenticate(user):
            return user
        return None
