from __future__ import annotations

import json
import uuid

from django.db import DatabaseError
from django.test import Client, TestCase
from unittest.mock import patch


class HealthEndpointsTest(TestCase):
    def setUp(self):
        self.client = Client()

    def test_healthz_returns_ok(self):
        response = self.client.get("/healthz")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(json.loads(response.content)["status"], "ok")

    def test_readyz_reports_database(self):
        response = self.client.get("/readyz")
        self.assertEqual(response.status_code, 200)
        data = json.loads(response.content)
        self.assertEqual(data["status"], "ok")
        self.assertTrue(data["db"])

    def test_readyz_degraded_when_database_fails(self):
        with patch("apps.observability.views.connection.cursor", side_effect=DatabaseError("down")):
            response = self.client.get("/readyz")
        self.assertEqual(response.status_code, 503)
        self.assertFalse(json.loads(response.content)["db"])


class RequestIdMiddlewareTest(TestCase):
    def setUp(self):
        self.client = Client()

    def test_request_id_added_to_response(self):
        response = self.client.get("/healthz")
        self.assertIn("X-Request-Id", response)
        self.assertEqual(len(response["X-Request-Id"]), 36)

    def test_incoming_request_id_is_echoed(self):
        incoming = str(uuid.uuid4())
        response = self.client.get("/healthz", HTTP_X_REQUEST_ID=incoming)
        self.assertEqual(response["X-Request-Id"], incoming)

    def test_malformed_request_id_is_replaced(self):
        response = self.client.get("/healthz", HTTP_X_REQUEST_ID="not-a-uuid")
        self.assertNotEqual(response["X-Request-Id"], "not-a-uuid")
        uuid.UUID(response["X-Request-Id"])

    def test_timing_header_added(self):
        response = self.client.get("/healthz")
        self.assertGreaterEqual(int(response["X-Response-Time-ms"]), 0)

    def test_request_completed_is_logged(self):
        with self.assertLogs("consultdesk.request", level="INFO") as captured:
            self.client.get("/healthz")
        self.assertTrue(any("request_completed" in line for line in captured.output))
