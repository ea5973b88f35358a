from __future__ import annotations

from django.contrib.auth import get_user_model
from django.test import TestCase
from rest_framework.test import APIClient

from apps.accounts.application.services.identity_service import AccountIdentityService
from apps.accounts.domain.roles import UserRole
from apps.accounts.models import AccountProfile
from apps.feedback.models import Feedback

PASSWORD = "StrongPass12345!"


def make_user(email: str, role: UserRole = UserRole.CLIENT, display_name: str = ""):
    user = get_user_model().objects.create_user(username=email, email=email, password=PASSWORD)
    AccountProfile.objects.create(user=user, role=role.value, display_name=display_name or email.split("@")[0])
    return user


class FeedbackApiTests(TestCase):
    def setUp(self) -> None:
        super().setUp()
        self.api = APIClient()
        self.client_user = make_user("client@example.com", UserRole.CLIENT, "Asha Rao")
        self.manager = make_user("manager@example.com", UserRole.MANAGER)
        self.admin = make_user("admin@example.com", UserRole.ADMIN)

    def login(self, user) -> None:
        token = AccountIdentityService.issue_tokens(user)["access"]
        self.api.credentials(HTTP_AUTHORIZATION=f"Bearer {token}")

    def submit(self, **overrides):
        payload = {"rating": 4, "category": "service", "message": "Quick turnaround on my filing."}
        payload.update(overrides)
        return self.api.post("/api/feedback/", data=payload, format="json")

    def test_submit_defaults_name_and_email_to_the_account(self):
        self.login(self.client_user)
        response = self.submit()
        self.assertEqual(response.status_code, 201)
        feedback = Feedback.objects.get()
        self.assertEqual(feedback.user, self.client_user)
        self.assertEqual(feedback.name, "Asha Rao")
        self.assertEqual(feedback.email, "client@example.com")
        self.assertEqual(feedback.rating, 4)
        self.assertEqual(feedback.category, "service")

    def test_submit_validation(self):
        self.login(self.client_user)
        for rating in (0, 6, "five", True, None):
            response = self.submit(rating=rating)
            self.assertEqual(response.status_code, 400, msg=repr(rating))
            self.assertEqual(response.json()["error"]["field"], "rating")
        self.assertEqual(self.submit(message="  ").json()["error"]["field"], "message")
        self.assertEqual(self.submit(category="complaint").json()["error"]["field"], "category")
        self.assertEqual(self.submit(email="not-an-email").json()["error"]["field"], "email")
        self.assertFalse(Feedback.objects.exists())

    def test_requires_authentication(self):
        self.assertEqual(self.submit().status_code, 401)

    def test_listing_is_for_admins_and_managers(self):
        self.login(self.client_user)
        self.submit()
        self.assertEqual(self.api.get("/api/feedback/").status_code, 403)

        for user in (self.manager, self.admin):
            self.login(user)
            response = self.api.get("/api/feedback/")
            self.assertEqual(response.status_code, 200)
            self.assertEqual(len(response.json()["feedback"]), 1)

    def test_only_admin_deletes(self):
        self.login(self.client_user)
        feedback_id = self.submit().json()["feedback"]["id"]

        self.login(self.manager)
        self.assertEqual(self.api.delete(f"/api/feedback/{feedback_id}").status_code, 403)

        self.login(self.admin)
        self.assertEqual(self.api.delete(f"/api/feedback/{feedback_id}").status_code, 200)
        self.assertFalse(Feedback.objects.exists())
        self.assertEqual(self.api.delete(f"/api/feedback/{feedback_id}").status_code, 404)
