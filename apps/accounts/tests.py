from __future__ import annotations

from django.apps import apps as django_apps
from django.contrib.auth import get_user_model
from django.contrib.auth.models import AnonymousUser
from django.core.cache import cache
from django.core.exceptions import ImproperlyConfigured
from django.http import HttpResponse
from django.test import Client, RequestFactory, TestCase, override_settings
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken

from apps.accounts.application.services.identity_service import AccountIdentityService
from apps.accounts.domain.access_policy import (
    AccessOutcome,
    DeniedMode,
    RouteRequirement,
    evaluate_access,
)
from apps.accounts.domain.errors import UnknownRoleError
from apps.accounts.domain.roles import UserRole, home_path_for
from apps.accounts.domain.routes import resolve_route_requirement
from apps.accounts.infrastructure.auth_backends import UsernameOrEmailBackend
from apps.accounts.interfaces.web.decorators import access_required
from apps.accounts.models import AccountAuditLog, AccountProfile
from apps.accounts.services.audit_service import AccountAuditService

PASSWORD = "StrongPass12345!"


def make_user(email: str, role: UserRole | None = UserRole.CLIENT, **extra):
    user = get_user_model().objects.create_user(username=email, email=email, password=PASSWORD, **extra)
    if role is not None:
        AccountProfile.objects.create(user=user, role=role.value, display_name=email.split("@")[0])
    return user


def access_token_for(user) -> str:
    return AccountIdentityService.issue_tokens(user)["access"]


class AccessDecisionTableTests(TestCase):
    def test_public_route_allows_anyone(self):
        decision = evaluate_access(RouteRequirement(auth_required=False), authenticated=False, role=None, path="/")
        self.assertEqual(decision.outcome, AccessOutcome.ALLOW)

    def test_unauthenticated_is_sent_to_sign_in_with_callback(self):
        decision = evaluate_access(RouteRequirement(), authenticated=False, role=None, path="/client/orders?x=1")
        self.assertEqual(decision.outcome, AccessOutcome.REDIRECT_SIGN_IN)
        self.assertEqual(decision.location, "/auth/sign-in?callbackUrl=%2Fclient%2Forders%3Fx%3D1")

    def test_any_role_allowed_when_no_roles_listed(self):
        decision = evaluate_access(RouteRequirement(), authenticated=True, role=UserRole.EMPLOYEE, path="/dashboard")
        self.assertTrue(decision.allowed)

    def test_role_in_allowed_set(self):
        requirement = RouteRequirement(allowed_roles=frozenset({UserRole.ADMIN}))
        decision = evaluate_access(requirement, authenticated=True, role=UserRole.ADMIN, path="/admin/")
        self.assertTrue(decision.allowed)

    def test_role_outside_allowed_set_redirects_to_unauthorized(self):
        requirement = RouteRequirement(allowed_roles=frozenset({UserRole.ADMIN}))
        decision = evaluate_access(requirement, authenticated=True, role=UserRole.CLIENT, path="/admin/")
        self.assertEqual(decision.outcome, AccessOutcome.REDIRECT_UNAUTHORIZED)
        self.assertEqual(decision.location, "/unauthorized")

    def test_role_outside_allowed_set_renders_denied_in_render_mode(self):
        requirement = RouteRequirement(allowed_roles=frozenset({UserRole.ADMIN}), denied_mode=DeniedMode.RENDER)
        decision = evaluate_access(requirement, authenticated=True, role=UserRole.CLIENT, path="/admin/")
        self.assertEqual(decision.outcome, AccessOutcome.RENDER_DENIED)

    def test_missing_role_never_matches_a_restricted_rule(self):
        requirement = RouteRequirement(allowed_roles=frozenset({UserRole.CLIENT}))
        decision = evaluate_access(requirement, authenticated=True, role=None, path="/client/")
        self.assertEqual(decision.outcome, AccessOutcome.REDIRECT_UNAUTHORIZED)


class RoleAndRouteTests(TestCase):
    def test_role_parse_accepts_exact_values_only(self):
        self.assertEqual(UserRole.parse("manager"), UserRole.MANAGER)
        for raw in ("Admin", "superuser", "", None, 3):
            with self.assertRaises(UnknownRoleError):
                UserRole.parse(raw)

    def test_home_paths(self):
        self.assertEqual(home_path_for(UserRole.CLIENT), "/client/")
        self.assertEqual(home_path_for(UserRole.MANAGER), "/employee/")
        self.assertEqual(home_path_for(UserRole.ADMIN), "/admin/")
        self.assertEqual(home_path_for(None), "/")

    def test_route_table(self):
        self.assertFalse(resolve_route_requirement("/").auth_required)
        self.assertFalse(resolve_route_requirement("/auth/sign-in").auth_required)
        self.assertFalse(resolve_route_requirement("/api/orders/").auth_required)
        self.assertFalse(resolve_route_requirement("/healthz").auth_required)
        self.assertEqual(resolve_route_requirement("/admin/reports").allowed_roles, frozenset({UserRole.ADMIN}))
        self.assertIn(UserRole.CLIENT, resolve_route_requirement("/client/").allowed_roles)
        self.assertNotIn(UserRole.CLIENT, resolve_route_requirement("/employee/").allowed_roles)
        # Prefix match is per path segment.
        self.assertTrue(resolve_route_requirement("/administrator").auth_required)
        self.assertEqual(resolve_route_requirement("/administrator").allowed_roles, frozenset())
        self.assertTrue(resolve_route_requirement("/settings").auth_required)

    def test_identity_without_profile_is_rejected_unless_superuser(self):
        user = make_user("noprofile@example.com", role=None)
        self.assertIsNone(AccountIdentityService.identity_for_user(user))
        root = make_user("root@example.com", role=None, is_superuser=True)
        self.assertEqual(AccountIdentityService.identity_for_user(root).role, UserRole.ADMIN)


class EdgeAccessGuardTests(TestCase):
    def setUp(self) -> None:
        super().setUp()
        self.web = Client()
        self.client_user = make_user("client@example.com", UserRole.CLIENT)
        self.employee = make_user("employee@example.com", UserRole.EMPLOYEE)
        self.admin = make_user("admin@example.com", UserRole.ADMIN)

    def _with_token(self, user, *, role_cookie: str | None = None) -> None:
        self.web.cookies["auth-token"] = access_token_for(user)
        if role_cookie is not None:
            self.web.cookies["user-role"] = role_cookie

    def test_unauthenticated_dashboard_redirects_to_sign_in(self):
        response = self.web.get("/client/")
        self.assertEqual(response.status_code, 302)
        self.assertEqual(response["Location"], "/auth/sign-in?callbackUrl=%2Fclient%2F")

    def test_public_home_is_reachable_without_cookies(self):
        response = self.web.get("/")
        self.assertEqual(response.status_code, 200)

    def test_client_reaches_client_dashboard(self):
        self._with_token(self.client_user)
        response = self.web.get("/client/")
        self.assertEqual(response.status_code, 200)
        self.assertContains(response, "My orders")

    def test_employee_on_client_area_redirects_to_unauthorized(self):
        self._with_token(self.employee)
        response = self.web.get("/client/")
        self.assertEqual(response.status_code, 302)
        self.assertEqual(response["Location"], "/unauthorized")

    def test_role_cookie_cannot_override_token_claim(self):
        self._with_token(self.employee, role_cookie="admin")
        response = self.web.get("/admin/")
        self.assertEqual(response.status_code, 302)
        self.assertEqual(response["Location"], "/unauthorized")

    def test_unknown_role_cookie_is_treated_as_no_role(self):
        self.web.cookies["auth-token"] = str(RefreshToken.for_user(self.admin).access_token)
        self.web.cookies["user-role"] = "superuser"
        response = self.web.get("/admin/")
        self.assertEqual(response.status_code, 302)
        self.assertEqual(response["Location"], "/unauthorized")

    def test_invalid_token_counts_as_unauthenticated(self):
        self.web.cookies["auth-token"] = "not-a-token"
        self.web.cookies["user-role"] = "admin"
        response = self.web.get("/admin/")
        self.assertEqual(response.status_code, 302)
        self.assertTrue(response["Location"].startswith("/auth/sign-in?callbackUrl="))

    def test_dashboard_redirects_to_role_home(self):
        self._with_token(self.employee)
        response = self.web.get("/dashboard")
        self.assertEqual(response.status_code, 302)
        self.assertEqual(response["Location"], "/employee/")

    @override_settings(
        ACCESS_GUARD_RULES=[{"prefix": "/admin", "allowed_roles": ["admin"], "denied_mode": "render"}]
    )
    def test_render_mode_rule_returns_403_page(self):
        web = Client()
        web.cookies["auth-token"] = access_token_for(self.client_user)
        with self.assertLogs("consultdesk.access", level="INFO") as logs:
            response = web.get("/admin/")
        self.assertEqual(response.status_code, 403)
        self.assertContains(response, "Access denied", status_code=403)
        self.assertTrue(any("edge_access_denied" in line for line in logs.output))


class AccessRequiredDecoratorTests(TestCase):
    def setUp(self) -> None:
        super().setUp()
        self.factory = RequestFactory()
        self.client_user = make_user("client@example.com", UserRole.CLIENT)

        @access_required({UserRole.ADMIN})
        def admin_only(request):
            return HttpResponse("secret")

        @access_required({UserRole.ADMIN}, denied_mode=DeniedMode.RENDER)
        def admin_only_render(request):
            return HttpResponse("secret")

        @access_required()
        def any_role(request):
            return HttpResponse(request.identity.role.value)

        self.admin_only = admin_only
        self.admin_only_render = admin_only_render
        self.any_role = any_role

    def _request(self, path: str, user=None):
        request = self.factory.get(path)
        request.user = user or AnonymousUser()
        return request

    def test_anonymous_is_redirected_before_view_body(self):
        response = self.admin_only(self._request("/admin/"))
        self.assertEqual(response.status_code, 302)
        self.assertEqual(response["Location"], "/auth/sign-in?callbackUrl=%2Fadmin%2F")

    def test_wrong_role_redirects(self):
        response = self.admin_only(self._request("/admin/", self.client_user))
        self.assertEqual(response.status_code, 302)
        self.assertEqual(response["Location"], "/unauthorized")

    def test_wrong_role_render_mode(self):
        response = self.admin_only_render(self._request("/admin/", self.client_user))
        self.assertEqual(response.status_code, 403)
        self.assertNotIn(b"secret", response.content)

    def test_identity_attached_on_success(self):
        response = self.any_role(self._request("/dashboard", self.client_user))
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.content, b"client")


class WebSignInTests(TestCase):
    def setUp(self) -> None:
        super().setUp()
        self.web = Client()
        self.user = make_user("client@example.com", UserRole.CLIENT)

    def test_sign_in_sets_cookies_and_follows_safe_callback(self):
        response = self.web.post(
            "/auth/sign-in",
            data={"identifier": "client@example.com", "password": PASSWORD, "callbackUrl": "/client/"},
        )
        self.assertEqual(response.status_code, 302)
        self.assertEqual(response["Location"], "/client/")
        self.assertTrue(response.cookies["auth-token"]["httponly"])
        self.assertEqual(response.cookies["user-role"].value, "client")
        self.assertEqual(response.cookies["auth-token"]["samesite"], "Lax")

    def test_sign_in_ignores_external_callback(self):
        response = self.web.post(
            "/auth/sign-in",
            data={"identifier": "client@example.com", "password": PASSWORD, "callbackUrl": "https://evil.example/"},
        )
        self.assertEqual(response["Location"], "/client/")

    def test_wrong_password_renders_form(self):
        response = self.web.post("/auth/sign-in", data={"identifier": "client@example.com", "password": "nope"})
        self.assertEqual(response.status_code, 200)
        self.assertContains(response, "Invalid credentials.")
        self.assertTrue(AccountAuditLog.objects.filter(action=AccountAuditLog.ACTION_LOGIN_FAILED).exists())

    def test_sign_out_clears_cookies(self):
        self.web.post("/auth/sign-in", data={"identifier": "client@example.com", "password": PASSWORD})
        response = self.web.post("/auth/sign-out")
        self.assertEqual(response.status_code, 302)
        self.assertEqual(response.cookies["auth-token"].value, "")
        self.assertEqual(response.cookies["user-role"].value, "")

    def test_sign_up_provisions_client_role(self):
        response = self.web.post(
            "/auth/sign-up",
            data={"full_name": "New Client", "email": "new@example.com", "phone": "", "password": PASSWORD},
        )
        self.assertEqual(response.status_code, 302)
        profile = AccountProfile.objects.get(user__email="new@example.com")
        self.assertEqual(profile.role, UserRole.CLIENT.value)

    def test_unauthorized_page(self):
        response = self.web.get("/unauthorized")
        self.assertEqual(response.status_code, 403)


class AccountsApiTests(TestCase):
    def setUp(self) -> None:
        super().setUp()
        cache.clear()
        self.api = APIClient()

    def test_register_returns_tokens_with_role_claim(self):
        response = self.api.post(
            "/api/auth/register",
            data={"full_name": "Client One", "email": "One@Example.com", "password": PASSWORD},
            format="json",
        )
        self.assertEqual(response.status_code, 201)
        payload = response.json()
        self.assertTrue(payload["success"])
        self.assertEqual(payload["data"]["role"], "client")
        self.assertIn("access", payload["data"])
        identity = AccountIdentityService.identity_from_token(payload["data"]["access"])
        self.assertEqual(identity.email, "one@example.com")

    def test_duplicate_registration_conflicts(self):
        make_user("dup@example.com")
        response = self.api.post(
            "/api/auth/register",
            data={"full_name": "Dup", "email": "dup@example.com", "password": PASSWORD},
            format="json",
        )
        self.assertEqual(response.status_code, 409)
        self.assertEqual(response.json()["error"]["field"], "email")

    def test_token_endpoint_includes_role(self):
        make_user("staff@example.com", UserRole.EMPLOYEE)
        response = self.api.post(
            "/api/auth/token/",
            data={"username": "staff@example.com", "password": PASSWORD},
            format="json",
        )
        self.assertEqual(response.status_code, 200)
        signals = AccountIdentityService.edge_signals(raw_token=response.json()["access"], raw_role=None)
        self.assertEqual(signals.role, UserRole.EMPLOYEE)

    def test_session_endpoint_sets_and_clears_cookies(self):
        user = make_user("client@example.com")
        response = self.api.post("/api/auth/session", data={"token": access_token_for(user)}, format="json")
        self.assertEqual(response.status_code, 200)
        self.assertTrue(response.cookies["auth-token"]["httponly"])
        self.assertEqual(response.cookies["auth-token"]["max-age"], 7 * 24 * 60 * 60)
        self.assertEqual(response.cookies["user-role"].value, "client")
        self.assertTrue(AccountAuditLog.objects.filter(action=AccountAuditLog.ACTION_SESSION_OPENED).exists())

        cleared = self.api.delete("/api/auth/session")
        self.assertEqual(cleared.status_code, 200)
        self.assertEqual(cleared.cookies["auth-token"].value, "")

    def test_session_endpoint_rejects_bad_token(self):
        response = self.api.post("/api/auth/session", data={"token": "garbage"}, format="json")
        self.assertEqual(response.status_code, 401)
        self.assertNotIn("auth-token", response.cookies)

    def test_me_requires_bearer(self):
        self.assertEqual(self.api.get("/api/auth/me").status_code, 401)
        user = make_user("me@example.com", UserRole.MANAGER)
        self.api.credentials(HTTP_AUTHORIZATION=f"Bearer {access_token_for(user)}")
        response = self.api.get("/api/auth/me")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["data"]["role"], "manager")

    def test_only_admin_changes_roles(self):
        target = make_user("target@example.com")
        manager = make_user("manager@example.com", UserRole.MANAGER)
        self.api.credentials(HTTP_AUTHORIZATION=f"Bearer {access_token_for(manager)}")
        denied = self.api.post(f"/api/accounts/{target.pk}/role", data={"role": "employee"}, format="json")
        self.assertEqual(denied.status_code, 403)

        admin = make_user("admin@example.com", UserRole.ADMIN)
        self.api.credentials(HTTP_AUTHORIZATION=f"Bearer {access_token_for(admin)}")
        response = self.api.post(f"/api/accounts/{target.pk}/role", data={"role": "employee"}, format="json")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(AccountProfile.objects.get(user=target).role, "employee")

        invalid = self.api.post(f"/api/accounts/{target.pk}/role", data={"role": "owner"}, format="json")
        self.assertEqual(invalid.status_code, 400)


class StartupCheckTests(TestCase):
    @override_settings(ENVIRONMENT="production", DEBUG=True, PAYMENT_GATEWAY="razorpay")
    def test_debug_in_production_is_rejected(self):
        with self.assertRaises(ImproperlyConfigured):
            django_apps.get_app_config("accounts").ready()

    @override_settings(ENVIRONMENT="production", DEBUG=False, PAYMENT_GATEWAY="sandbox")
    def test_sandbox_gateway_in_production_is_rejected(self):
        with self.assertRaises(ImproperlyConfigured):
            django_apps.get_app_config("accounts").ready()

    @override_settings(ENVIRONMENT="production", DEBUG=False, PAYMENT_GATEWAY="razorpay")
    def test_production_settings_pass(self):
        django_apps.get_app_config("accounts").ready()


class UsernameOrEmailBackendTests(TestCase):
    def setUp(self) -> None:
        super().setUp()
        self.backend = UsernameOrEmailBackend()
        self.client_user = make_user("client@example.com")
        self.staff_user = get_user_model().objects.create_user(
            username="priya", email="priya@consultdesk.test", password=PASSWORD
        )

    def test_email_in_any_case(self):
        user = self.backend.authenticate(None, username=" Client@Example.com ", password=PASSWORD)
        self.assertEqual(user, self.client_user)

    def test_staff_username_or_email(self):
        self.assertEqual(self.backend.authenticate(None, username="PRIYA", password=PASSWORD), self.staff_user)
        self.assertEqual(
            self.backend.authenticate(None, username="priya@consultdesk.test", password=PASSWORD), self.staff_user
        )

    def test_wrong_password_or_unknown_identifier(self):
        self.assertIsNone(self.backend.authenticate(None, username="priya", password="wrong"))
        self.assertIsNone(self.backend.authenticate(None, username="nobody@example.com", password=PASSWORD))
        self.assertIsNone(self.backend.authenticate(None, username="", password=PASSWORD))


class AccountAuditServiceTests(TestCase):
    def test_request_context_and_redaction(self):
        request = RequestFactory().post(
            "/auth/sign-in",
            HTTP_X_FORWARDED_FOR="203.0.113.7, 10.0.0.1",
            HTTP_USER_AGENT="x" * 600,
        )
        entry = AccountAuditService.record_request(
            request,
            action=AccountAuditService.ACTION_LOGIN_FAILED,
            metadata={"identifier": "client@example.com", "password": "hunter2"},
        )
        self.assertEqual(entry.ip_address, "203.0.113.7")
        self.assertEqual(len(entry.user_agent), 512)
        self.assertEqual(entry.metadata, {"identifier": "client@example.com"})
        self.assertIsNone(entry.user_id)
