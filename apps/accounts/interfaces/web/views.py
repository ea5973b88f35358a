from __future__ import annotations

from django.conf import settings
from django.contrib import messages
from django.contrib.auth import login, logout
from django.http import HttpRequest, HttpResponse
from django.shortcuts import redirect, render
from django.utils.http import url_has_allowed_host_and_scheme
from django.views.decorators.http import require_http_methods

from apps.accounts.application.services.identity_service import AccountIdentityService
from apps.accounts.application.use_cases.register_client import RegisterClientCommand, RegisterClientUseCase
from apps.accounts.application.use_cases.sign_in import SignInCommand, SignInUseCase
from apps.accounts.domain.access_policy import CALLBACK_PARAM
from apps.accounts.domain.errors import (
    AccountAlreadyExistsError,
    AccountRoleMissingError,
    AccountValidationError,
    InvalidCredentialsError,
)
from apps.accounts.domain.roles import home_path_for
from apps.accounts.interfaces.cookies import clear_auth_cookies, set_auth_cookies
from apps.accounts.interfaces.web.decorators import access_required
from apps.accounts.interfaces.web.forms import SignInForm, SignUpForm
from apps.accounts.services.audit_service import AccountAuditService


def _login_user(request: HttpRequest, user: object) -> None:
    backend = getattr(user, "backend", "") or (settings.AUTHENTICATION_BACKENDS[0] if settings.AUTHENTICATION_BACKENDS else "")
    if backend:
        login(request, user, backend=backend)
        return
    login(request, user)


def _safe_callback(request: HttpRequest) -> str:
    target = request.POST.get(CALLBACK_PARAM) or request.GET.get(CALLBACK_PARAM) or ""
    if target and url_has_allowed_host_and_scheme(
        target,
        allowed_hosts={request.get_host()},
        require_https=request.is_secure(),
    ):
        return target
    return ""


def _open_session(request: HttpRequest, user, tokens: dict) -> HttpResponse:
    _login_user(request, user)
    identity = AccountIdentityService.identity_for_user(user)
    target = _safe_callback(request) or home_path_for(identity.role)
    response = redirect(target)
    return set_auth_cookies(response, access_token=tokens["access"], role=identity.role)


@require_http_methods(["GET", "POST"])
def sign_in_view(request: HttpRequest) -> HttpResponse:
    form = SignInForm(request.POST or None)

    if request.method == "POST" and form.is_valid():
        try:
            result = SignInUseCase.execute(
                SignInCommand(
                    identifier=form.cleaned_data["identifier"],
                    password=form.cleaned_data["password"],
                    ip_address=AccountAuditService.client_ip(request),
                    user_agent=AccountAuditService.user_agent(request),
                ),
                request=request,
            )
        except InvalidCredentialsError as exc:
            form.add_error(None, str(exc))
        except AccountRoleMissingError:
            form.add_error(None, "This account has no role assigned. Contact an administrator.")
        else:
            messages.success(request, "Signed in successfully.")
            return _open_session(request, result.user, result.tokens)

    return render(
        request,
        "accounts/sign_in.html",
        {"form": form, "callback_url": _safe_callback(request)},
    )


@require_http_methods(["GET", "POST"])
def sign_up_view(request: HttpRequest) -> HttpResponse:
    form = SignUpForm(request.POST or None)

    if request.method == "POST" and form.is_valid():
        try:
            result = RegisterClientUseCase.execute(
                RegisterClientCommand(
                    full_name=form.cleaned_data["full_name"],
                    email=form.cleaned_data["email"],
                    password=form.cleaned_data["password"],
                    phone=form.cleaned_data.get("phone") or "",
                    ip_address=AccountAuditService.client_ip(request),
                    user_agent=AccountAuditService.user_agent(request),
                )
            )
        except (AccountAlreadyExistsError, AccountValidationError) as exc:
            field = getattr(exc, "field", None)
            form.add_error(field if field in form.fields else None, str(exc))
        else:
            messages.success(request, "Account created.")
            return _open_session(request, result.user, AccountIdentityService.issue_tokens(result.user))

    return render(request, "accounts/sign_up.html", {"form": form})


@require_http_methods(["GET", "POST"])
def sign_out_view(request: HttpRequest) -> HttpResponse:
    user = request.user if request.user.is_authenticated else None
    AccountAuditService.record_request(
        request,
        user=user,
        action=AccountAuditService.ACTION_SESSION_CLOSED,
    )
    logout(request)
    return clear_auth_cookies(redirect("auth:sign_in"))


def unauthorized_view(request: HttpRequest) -> HttpResponse:
    return render(request, "accounts/unauthorized.html", status=403)


@access_required()
def dashboard_redirect_view(request: HttpRequest) -> HttpResponse:
    return redirect(home_path_for(request.identity.role))
