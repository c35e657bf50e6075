import importlib
import json
import sys
from decimal import Decimal
from io import StringIO
from unittest.mock import patch

from django.core.management import call_command
from django.db.utils import OperationalError
from django.http import JsonResponse
from django.test import RequestFactory, SimpleTestCase

from common.exceptions import Conflict, InsufficientFunds, NotFound, api_exception_handler
from common.middleware import MASK, RequestResponseLoggingMiddleware, mask_sensitive
from common.utils import client_ip, growth_percent, to_money

# ============================================================
# Utility Tests
# ============================================================


class MoneyTest(SimpleTestCase):
    def test_to_money_rounds_half_up(self):
        self.assertEqual(to_money("10.005"), Decimal("10.01"))
        self.assertEqual(to_money(Decimal("2.344")), Decimal("2.34"))
        self.assertEqual(to_money(0), Decimal("0.00"))

    def test_growth_percent(self):
        self.assertEqual(growth_percent(150, 100), 50.0)
        self.assertEqual(growth_percent(50, 100), -50.0)
        self.assertEqual(growth_percent(10, 0), 100.0)
        self.assertEqual(growth_percent(0, 0), 0.0)

    def test_client_ip_prefers_forwarded_header(self):
        request = RequestFactory().get("/", HTTP_X_FORWARDED_FOR="10.0.0.1, 10.0.0.2")
        self.assertEqual(client_ip(request), "10.0.0.1")
        self.assertEqual(client_ip(RequestFactory().get("/")), "127.0.0.1")


class ExceptionHandlerTest(SimpleTestCase):
    def test_service_errors_render_as_error_body(self):
        response = api_exception_handler(NotFound("Order with ID 1 not found"), {})
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.data, {"error": "Order with ID 1 not found"})

        self.assertEqual(api_exception_handler(Conflict(), {}).status_code, 409)
        self.assertEqual(api_exception_handler(InsufficientFunds(), {}).status_code, 400)

    def test_unknown_exceptions_are_left_to_django(self):
        self.assertIsNone(api_exception_handler(RuntimeError("boom"), {}))

    def test_rest_framework_views_import_resolves_project_authentication(self):
        # APIView resolves DEFAULT_AUTHENTICATION_CLASSES at import time, which
        # loads accounts.authentication and through it common.exceptions.
        stale = [
            name
            for name in sys.modules
            if name.startswith("rest_framework") or name in ("common.exceptions", "accounts.authentication")
        ]
        with patch.dict(sys.modules):
            for name in stale:
                del sys.modules[name]
            views = importlib.import_module("rest_framework.views")
            self.assertTrue(callable(views.exception_handler))


# ============================================================
# Middleware Tests
# ============================================================


class RequestLoggingMiddlewareTest(SimpleTestCase):
    def test_mask_sensitive_nested(self):
        masked = mask_sensitive({"email": "a@b.c", "password": "x", "items": [{"token": "t"}]})
        self.assertEqual(masked, {"email": "a@b.c", "password": MASK, "items": [{"token": MASK}]})

    def test_logs_request_and_response_without_credentials(self):
        middleware = RequestResponseLoggingMiddleware(lambda request: JsonResponse({"access_token": "abc"}))
        request = RequestFactory().post(
            "/api/auth/login",
            data=json.dumps({"email": "a@b.c", "password": "hunter2"}),
            content_type="application/json",
        )

        with self.assertLogs("common.middleware", level="INFO") as logs:
            response = middleware(request)

        self.assertEqual(response.status_code, 200)
        output = "\n".join(logs.output)
        self.assertIn("API Request: POST /api/auth/login", output)
        self.assertIn("Status: 200", output)
        self.assertNotIn("hunter2", output)
        self.assertNotIn("abc", output)


# ============================================================
# Management Command Tests
# ============================================================


class WaitForDbCommandTest(SimpleTestCase):
    @patch("common.management.commands.wait_for_db.time.sleep")
    @patch("common.management.commands.wait_for_db.connections")
    def test_retries_until_available(self, mock_connections, mock_sleep):
        mock_connections.__getitem__.return_value.ensure_connection.side_effect = [OperationalError, None]
        out = StringIO()

        call_command("wait_for_db", stdout=out)

        self.assertEqual(mock_sleep.call_count, 1)
        self.assertIn("Database available!", out.getvalue())

    @patch("common.management.commands.wait_for_db.time.monotonic", side_effect=[0, 5])
    @patch("common.management.commands.wait_for_db.time.sleep")
    @patch("common.management.commands.wait_for_db.connections")
    def test_gives_up_after_timeout(self, mock_connections, mock_sleep, mock_monotonic):
        mock_connections.__getitem__.return_value.ensure_connection.side_effect = OperationalError

        with self.assertRaises(OperationalError):
            call_command("wait_for_db", timeout=1, stdout=StringIO(), stderr=StringIO())
        mock_sleep.assert_not_called()
