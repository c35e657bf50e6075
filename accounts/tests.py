import uuid
from datetime import timedelta
from unittest.mock import patch

from django.core import mail
from django.test import TestCase
from django.utils import timezone
from rest_framework.test import APIClient

from accounts.models import Admin, RefreshToken, User
from accounts.services import AuthService, TokenService, TOTP, UserAdminService
from accounts.tasks import (
    cleanup_expired_refresh_tokens,
    send_password_reset_email,
    send_verification_email,
)
from common.exceptions import (
    AuthenticationFailed,
    Conflict,
    InvalidOperation,
    NotFound,
    PermissionDenied,
)
from wallets.models import Wallet

PASSWORD = "Str0ng!Pass"


def make_user(email="user@example.com", role=User.Role.USER, verified=True, **extra):
    user = User.objects.create_user(
        email=email,
        password=PASSWORD,
        first_name="Jane",
        last_name="Doe",
        role=role,
        is_email_verified=verified,
        **extra,
    )
    Wallet.objects.create(user=user)
    return user


def bearer(user):
    return {"HTTP_AUTHORIZATION": f"Bearer {TokenService.create_access_token(user)}"}


# ============================================================
# Model Tests
# ============================================================


class UserModelTest(TestCase):
    def test_create_user_normalizes_email(self):
        user = User.objects.create_user(
            email="Mixed@Example.COM", password=PASSWORD, first_name="A", last_name="B"
        )
        self.assertEqual(user.email, "mixed@example.com")
        self.assertEqual(user.role, User.Role.USER)
        self.assertTrue(user.check_password(PASSWORD))

    def test_role_properties(self):
        moderator = make_user("mod@example.com", role=User.Role.MODERATOR)
        admin = make_user("admin@example.com", role=User.Role.ADMIN)
        customer = make_user()

        self.assertTrue(moderator.is_staff)
        self.assertFalse(moderator.is_admin)
        self.assertTrue(admin.is_admin)
        self.assertFalse(admin.is_super_admin)
        self.assertFalse(customer.is_staff)

    def test_admin_proxy_only_returns_staff(self):
        make_user()
        staff = make_user("admin@example.com", role=User.Role.ADMIN)
        self.assertEqual(list(Admin.objects.values_list("id", flat=True)), [staff.id])

    def test_refresh_token_validity(self):
        user = make_user()
        token = RefreshToken.objects.create(
            user=user, token="abc", expires_at=timezone.now() + timedelta(days=1)
        )
        self.assertTrue(token.is_valid())

        token.revoke()
        self.assertFalse(token.is_valid())
        self.assertIsNotNone(token.revoked_at)


# ============================================================
# Service Tests
# ============================================================


class TOTPTest(TestCase):
    # RFC 6238 SHA1 seed "12345678901234567890"
    SECRET = "GEZDGNBVGY3TQOJQGEZDGNBVGY3TQOJQ"

    def test_rfc_vector(self):
        self.assertEqual(TOTP().generate_code(self.SECRET, timestamp=59), "287082")
        self.assertEqual(TOTP().generate_code(self.SECRET, timestamp=1111111109), "081804")

    def test_verify_accepts_adjacent_window(self):
        totp = TOTP()
        code = totp.generate_code(self.SECRET, timestamp=1000)
        self.assertTrue(totp.verify_code(self.SECRET, code, timestamp=1030))
        self.assertFalse(totp.verify_code(self.SECRET, code, timestamp=1100))

    def test_provisioning_uri(self):
        uri = TOTP(issuer="Shop").provisioning_uri(self.SECRET, "admin@example.com")
        self.assertTrue(uri.startswith("otpauth://totp/Shop:"))
        self.assertIn(f"secret={self.SECRET}", uri)
        self.assertIn("issuer=Shop", uri)


class TokenServiceTest(TestCase):
    def setUp(self):
        self.user = make_user()

    def test_access_token_round_trip(self):
        payload = TokenService.decode_access_token(TokenService.create_access_token(self.user))
        self.assertEqual(payload["sub"], str(self.user.id))
        self.assertEqual(payload["role"], "user")

    def test_tampered_token_rejected(self):
        token = TokenService.create_access_token(self.user) + "x"
        with self.assertRaises(AuthenticationFailed):
            TokenService.decode_access_token(token)

    def test_rotate_revokes_presented_token(self):
        pair = TokenService.issue_pair(self.user)
        new_pair = TokenService.rotate(pair["refresh_token"])

        self.assertNotEqual(pair["refresh_token"], new_pair["refresh_token"])
        self.assertTrue(RefreshToken.objects.get(token=pair["refresh_token"]).is_revoked)
        with self.assertRaises(AuthenticationFailed):
            TokenService.rotate(pair["refresh_token"])

    def test_rotate_rejects_expired_token(self):
        token = TokenService.issue_refresh_token(self.user)
        RefreshToken.objects.filter(pk=token.pk).update(expires_at=timezone.now() - timedelta(seconds=1))
        with self.assertRaises(AuthenticationFailed):
            TokenService.rotate(token.token)

    def test_revoke_all(self):
        TokenService.issue_pair(self.user)
        TokenService.issue_pair(self.user)
        self.assertEqual(TokenService.revoke(self.user), 2)
        self.assertFalse(RefreshToken.objects.filter(user=self.user, is_revoked=False).exists())


class AuthServiceTest(TestCase):
    @patch("accounts.services.auth.send_verification_email.delay")
    def test_register_user_creates_wallet_and_queues_email(self, mock_delay):
        with self.captureOnCommitCallbacks(execute=True):
            user = AuthService.register_user("New@Example.com", PASSWORD, "New", "User")

        self.assertEqual(user.email, "new@example.com")
        self.assertFalse(user.is_email_verified)
        self.assertIsNotNone(user.email_verification_token)
        self.assertEqual(Wallet.objects.get(user=user).balance, 0)
        mock_delay.assert_called_once_with(str(user.id))

    def test_register_duplicate_email(self):
        make_user()
        with self.assertRaises(Conflict):
            AuthService.register_user("USER@example.com", PASSWORD, "Jane", "Doe")

    def test_first_admin_becomes_super_admin(self):
        admin = AuthService.register_admin("boss@example.com", PASSWORD, "Big", "Boss")
        self.assertEqual(admin.role, User.Role.SUPER_ADMIN)

    def test_later_admin_requires_super_admin_inviter(self):
        boss = AuthService.register_admin("boss@example.com", PASSWORD, "Big", "Boss")

        with self.assertRaises(PermissionDenied):
            AuthService.register_admin("second@example.com", PASSWORD, "Sec", "Ond")
        with self.assertRaises(NotFound):
            AuthService.register_admin("second@example.com", PASSWORD, "Sec", "Ond", invited_by=uuid.uuid4())

        admin = AuthService.register_admin("second@example.com", PASSWORD, "Sec", "Ond", invited_by=boss.id)
        self.assertEqual(admin.role, User.Role.ADMIN)

        with self.assertRaises(PermissionDenied):
            AuthService.register_admin("third@example.com", PASSWORD, "Thi", "Rd", invited_by=admin.id)

    def test_login_success(self):
        user = make_user()
        result = AuthService.login("user@example.com", PASSWORD)

        self.assertEqual(result["user"].id, user.id)
        self.assertEqual(result["token_type"], "Bearer")
        self.assertTrue(RefreshToken.objects.filter(token=result["refresh_token"]).exists())
        user.refresh_from_db()
        self.assertIsNotNone(user.last_login)

    def test_login_failures(self):
        make_user()
        make_user("unverified@example.com", verified=False)
        make_user("inactive@example.com", is_active=False)

        cases = (
            ("user@example.com", "wrong", "Invalid email or password"),
            ("nobody@example.com", PASSWORD, "Invalid email or password"),
            ("unverified@example.com", PASSWORD, "Please verify your email first"),
            ("inactive@example.com", PASSWORD, "Account is deactivated"),
        )
        for email, password, message in cases:
            with self.subTest(email=email):
                with self.assertRaisesMessage(AuthenticationFailed, message):
                    AuthService.login(email, password)

    def test_staff_only_login_rejects_customers(self):
        make_user()
        with self.assertRaises(PermissionDenied):
            AuthService.login("user@example.com", PASSWORD, staff_only=True)

    def test_two_factor_login(self):
        secret = TOTP().generate_secret()
        make_user(
            "admin@example.com",
            role=User.Role.ADMIN,
            is_two_factor_enabled=True,
            two_factor_secret=secret,
        )

        result = AuthService.login("admin@example.com", PASSWORD)
        self.assertTrue(result["requires_two_factor"])
        self.assertNotIn("access_token", result)

        with patch.object(TOTP, "verify_code", return_value=False):
            with self.assertRaisesMessage(AuthenticationFailed, "Invalid 2FA code"):
                AuthService.login("admin@example.com", PASSWORD, two_factor_code="123456")

        result = AuthService.login("admin@example.com", PASSWORD, two_factor_code=TOTP().generate_code(secret))
        self.assertIn("access_token", result)

    def test_verify_email(self):
        user = make_user(verified=False, email_verification_token="tok")
        AuthService.verify_email("tok")

        user.refresh_from_db()
        self.assertTrue(user.is_email_verified)
        self.assertIsNone(user.email_verification_token)
        with self.assertRaises(InvalidOperation):
            AuthService.verify_email("tok")

    @patch("accounts.services.auth.send_password_reset_email.delay")
    def test_password_reset_flow(self, mock_delay):
        user = make_user()
        TokenService.issue_pair(user)

        with self.captureOnCommitCallbacks(execute=True):
            AuthService.request_password_reset("user@example.com")
        mock_delay.assert_called_once_with(str(user.id))

        user.refresh_from_db()
        AuthService.reset_password(user.reset_password_token, "N3w!Password")

        user.refresh_from_db()
        self.assertTrue(user.check_password("N3w!Password"))
        self.assertIsNone(user.reset_password_token)
        self.assertFalse(RefreshToken.objects.filter(user=user, is_revoked=False).exists())

    def test_reset_password_expired_token(self):
        make_user(reset_password_token="tok", reset_password_expires=timezone.now() - timedelta(minutes=1))
        with self.assertRaises(InvalidOperation):
            AuthService.reset_password("tok", "N3w!Password")

    def test_password_reset_unknown_email_is_silent(self):
        with self.captureOnCommitCallbacks(execute=True) as callbacks:
            AuthService.request_password_reset("ghost@example.com")
        self.assertEqual(callbacks, [])

    def test_change_password(self):
        user = make_user()
        with self.assertRaises(AuthenticationFailed):
            AuthService.change_password(user, "wrong", "N3w!Password")
        with self.assertRaises(InvalidOperation):
            AuthService.change_password(user, PASSWORD, PASSWORD)

        AuthService.change_password(user, PASSWORD, "N3w!Password")
        self.assertTrue(User.objects.get(pk=user.pk).check_password("N3w!Password"))

    def test_update_admin_role(self):
        boss = make_user("boss@example.com", role=User.Role.SUPER_ADMIN)
        admin = make_user("admin@example.com", role=User.Role.ADMIN)
        customer = make_user()

        updated = AuthService.update_admin_role(boss, admin.id, User.Role.MODERATOR)
        self.assertEqual(updated.role, User.Role.MODERATOR)

        with self.assertRaises(InvalidOperation):
            AuthService.update_admin_role(boss, customer.id, User.Role.ADMIN)
        with self.assertRaises(PermissionDenied):
            AuthService.update_admin_role(boss, boss.id, User.Role.ADMIN)
        with self.assertRaises(PermissionDenied):
            AuthService.update_admin_role(admin, boss.id, User.Role.ADMIN)

    def test_enable_and_verify_two_factor(self):
        admin = make_user("admin@example.com", role=User.Role.ADMIN)
        setup = AuthService.enable_two_factor(admin)
        self.assertTrue(setup["otpauth_url"].startswith("otpauth://totp/"))

        AuthService.verify_two_factor(admin, TOTP().generate_code(setup["secret"]))
        admin.refresh_from_db()
        self.assertTrue(admin.is_two_factor_enabled)

        AuthService.disable_two_factor(admin)
        admin.refresh_from_db()
        self.assertFalse(admin.is_two_factor_enabled)
        self.assertIsNone(admin.two_factor_secret)

    def test_enable_two_factor_rejects_customers(self):
        with self.assertRaises(PermissionDenied):
            AuthService.enable_two_factor(make_user())


class UserAdminServiceTest(TestCase):
    def setUp(self):
        self.boss = make_user("boss@example.com", role=User.Role.SUPER_ADMIN)
        self.admin = make_user("admin@example.com", role=User.Role.ADMIN)
        self.customer = make_user()

    def test_list_users_filters(self):
        self.assertEqual(UserAdminService.list_users(role="admin").count(), 1)
        self.assertEqual(UserAdminService.list_users(search="boss").count(), 1)
        self.assertEqual(UserAdminService.list_users(is_active=False).count(), 0)

    def test_admin_cannot_modify_super_admin(self):
        with self.assertRaises(PermissionDenied):
            UserAdminService.update_user(self.admin, self.boss.id, first_name="Nope")

    def test_only_super_admin_grants_staff_roles(self):
        with self.assertRaises(PermissionDenied):
            UserAdminService.update_user(self.admin, self.customer.id, role=User.Role.MODERATOR)

        user = UserAdminService.update_user(self.boss, self.customer.id, role=User.Role.MODERATOR)
        self.assertEqual(user.role, User.Role.MODERATOR)

    def test_deactivate_revokes_tokens(self):
        TokenService.issue_pair(self.customer)
        user = UserAdminService.deactivate_user(self.admin, self.customer.id)

        self.assertFalse(user.is_active)
        self.assertFalse(RefreshToken.objects.filter(user=self.customer, is_revoked=False).exists())

    def test_deactivate_rules(self):
        with self.assertRaises(InvalidOperation):
            UserAdminService.deactivate_user(self.admin, self.admin.id)
        with self.assertRaises(PermissionDenied):
            UserAdminService.deactivate_user(self.admin, self.boss.id)
        with self.assertRaises(NotFound):
            UserAdminService.deactivate_user(self.admin, uuid.uuid4())

    def test_update_user_cannot_deactivate_self(self):
        with self.assertRaises(InvalidOperation):
            UserAdminService.update_user(self.admin, self.admin.id, is_active=False)

        self.admin.refresh_from_db()
        self.assertTrue(self.admin.is_active)

    def test_stats(self):
        stats = UserAdminService.stats()
        self.assertEqual(stats["total_users"], 3)
        self.assertEqual(stats["active_users"], 3)
        self.assertEqual(stats["by_role"]["super_admin"], 1)
        self.assertEqual(stats["by_role"]["moderator"], 0)


# ============================================================
# API Tests
# ============================================================


class AuthAPITest(TestCase):
    def setUp(self):
        self.client = APIClient()

    @patch("accounts.services.auth.send_verification_email.delay")
    def test_register(self, mock_delay):
        response = self.client.post(
            "/api/auth/register",
            {
                "email": "new@example.com",
                "password": PASSWORD,
                "first_name": "New",
                "last_name": "User",
            },
            format="json",
        )
        self.assertEqual(response.status_code, 201)
        self.assertTrue(User.objects.filter(id=response.data["user_id"]).exists())

    def test_register_weak_password(self):
        response = self.client.post(
            "/api/auth/register",
            {"email": "new@example.com", "password": "password", "first_name": "New", "last_name": "User"},
            format="json",
        )
        self.assertEqual(response.status_code, 400)
        self.assertIn("password", response.data)
        self.assertIn("special character (@$!%*?&)", str(response.data["password"][0]))

    def test_register_duplicate_email(self):
        make_user()
        response = self.client.post(
            "/api/auth/register",
            {"email": "user@example.com", "password": PASSWORD, "first_name": "Jane", "last_name": "Doe"},
            format="json",
        )
        self.assertEqual(response.status_code, 409)
        self.assertEqual(response.data["error"], "Email already registered")

    def test_login_and_me(self):
        make_user()
        response = self.client.post(
            "/api/auth/login", {"email": "user@example.com", "password": PASSWORD}, format="json"
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["user"]["email"], "user@example.com")

        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {response.data['access_token']}")
        response = self.client.get("/api/auth/me")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["email"], "user@example.com")

    def test_login_wrong_password(self):
        make_user()
        response = self.client.post(
            "/api/auth/login", {"email": "user@example.com", "password": "nope"}, format="json"
        )
        self.assertEqual(response.status_code, 401)

    def test_invalid_bearer_token(self):
        response = self.client.get("/api/auth/me", HTTP_AUTHORIZATION="Bearer not-a-token")
        self.assertEqual(response.status_code, 401)

    def test_deactivated_user_token_rejected(self):
        user = make_user()
        headers = bearer(user)
        User.objects.filter(pk=user.pk).update(is_active=False)

        response = self.client.get("/api/auth/me", **headers)
        self.assertEqual(response.status_code, 401)

    def test_refresh_and_logout(self):
        user = make_user()
        pair = TokenService.issue_pair(user)

        response = self.client.post("/api/auth/refresh", {"refresh_token": pair["refresh_token"]}, format="json")
        self.assertEqual(response.status_code, 200)
        new_refresh = response.data["refresh_token"]

        response = self.client.post("/api/auth/refresh", {"refresh_token": pair["refresh_token"]}, format="json")
        self.assertEqual(response.status_code, 401)

        response = self.client.post(
            "/api/auth/logout", {"refresh_token": new_refresh}, format="json", **bearer(user)
        )
        self.assertEqual(response.status_code, 200)
        self.assertTrue(RefreshToken.objects.get(token=new_refresh).is_revoked)

    def test_verify_email_via_query_string(self):
        make_user(verified=False, email_verification_token="tok")
        response = self.client.get("/api/auth/verify-email?token=tok")
        self.assertEqual(response.status_code, 200)

        response = self.client.get("/api/auth/verify-email?token=tok")
        self.assertEqual(response.status_code, 400)

    def test_forgot_password_same_response_for_unknown_email(self):
        response = self.client.post("/api/auth/forgot-password", {"email": "ghost@example.com"}, format="json")
        self.assertEqual(response.status_code, 200)

    def test_change_password(self):
        user = make_user()
        response = self.client.post(
            "/api/auth/change-password",
            {"current_password": PASSWORD, "new_password": "N3w!Password"},
            format="json",
            **bearer(user),
        )
        self.assertEqual(response.status_code, 200)


class AdminAuthAPITest(TestCase):
    def setUp(self):
        self.client = APIClient()

    @patch("accounts.services.auth.send_verification_email.delay")
    def test_bootstrap_then_invite(self, mock_delay):
        payload = {"email": "boss@example.com", "password": PASSWORD, "first_name": "Big", "last_name": "Boss"}
        response = self.client.post("/api/admin/auth/register", payload, format="json")
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.data["role"], "super_admin")

        payload["email"] = "second@example.com"
        response = self.client.post("/api/admin/auth/register", payload, format="json")
        self.assertEqual(response.status_code, 403)

        boss = User.objects.get(email="boss@example.com")
        response = self.client.post("/api/admin/auth/register", payload, format="json", **bearer(boss))
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.data["role"], "admin")

    def test_admin_login_rejects_customers(self):
        make_user()
        response = self.client.post(
            "/api/admin/auth/login", {"email": "user@example.com", "password": PASSWORD}, format="json"
        )
        self.assertEqual(response.status_code, 403)

    def test_admin_login_with_two_factor(self):
        secret = TOTP().generate_secret()
        make_user("admin@example.com", role=User.Role.ADMIN, is_two_factor_enabled=True, two_factor_secret=secret)

        response = self.client.post(
            "/api/admin/auth/login", {"email": "admin@example.com", "password": PASSWORD}, format="json"
        )
        self.assertEqual(response.status_code, 200)
        self.assertTrue(response.data["requires_two_factor"])

        response = self.client.post(
            "/api/admin/auth/login",
            {"email": "admin@example.com", "password": PASSWORD, "two_factor_code": TOTP().generate_code(secret)},
            format="json",
        )
        self.assertEqual(response.status_code, 200)
        self.assertIn("access_token", response.data)

    def test_update_role_requires_super_admin(self):
        admin = make_user("admin@example.com", role=User.Role.ADMIN)
        other = make_user("other@example.com", role=User.Role.ADMIN)

        response = self.client.patch(
            f"/api/admin/auth/{other.id}/role", {"role": "moderator"}, format="json", **bearer(admin)
        )
        self.assertEqual(response.status_code, 403)

        boss = make_user("boss@example.com", role=User.Role.SUPER_ADMIN)
        response = self.client.patch(
            f"/api/admin/auth/{other.id}/role", {"role": "moderator"}, format="json", **bearer(boss)
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["user"]["role"], "moderator")


class ProfileAPITest(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.user = make_user()
        self.client.force_authenticate(user=self.user)

    def test_get_profile_includes_wallet(self):
        response = self.client.get("/api/profile/")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["wallet"]["balance"], "0.00")

    def test_update_profile(self):
        response = self.client.patch(
            "/api/profile/", {"first_name": "Janet", "phone_number": "+15551234567"}, format="json"
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["first_name"], "Janet")
        self.assertEqual(response.data["phone_number"], "+15551234567")

    def test_update_profile_invalid_name(self):
        response = self.client.patch("/api/profile/", {"first_name": "J4net"}, format="json")
        self.assertEqual(response.status_code, 400)

    def test_admin_profile_requires_staff(self):
        response = self.client.get("/api/profile/admin")
        self.assertEqual(response.status_code, 403)


class UserAdminAPITest(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.admin = make_user("admin@example.com", role=User.Role.ADMIN)
        self.customer = make_user()
        self.client.force_authenticate(user=self.admin)

    def test_list_users(self):
        response = self.client.get("/api/users/?role=user")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["meta"]["total"], 1)
        self.assertEqual(response.data["data"][0]["email"], "user@example.com")

    def test_customer_cannot_list_users(self):
        self.client.force_authenticate(user=self.customer)
        response = self.client.get("/api/users/")
        self.assertEqual(response.status_code, 403)

    def test_update_and_deactivate(self):
        response = self.client.patch(f"/api/users/{self.customer.id}", {"last_name": "Smith"}, format="json")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["last_name"], "Smith")

        response = self.client.patch(f"/api/users/{self.customer.id}/deactivate")
        self.assertEqual(response.status_code, 200)
        self.assertFalse(response.data["user"]["is_active"])

    def test_unknown_user(self):
        response = self.client.get(f"/api/users/{uuid.uuid4()}")
        self.assertEqual(response.status_code, 404)

    def test_stats(self):
        response = self.client.get("/api/users/stats")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["total_users"], 2)


# ============================================================
# Celery Task Tests
# ============================================================


class EmailTaskTest(TestCase):
    def test_send_verification_email(self):
        user = make_user(verified=False, email_verification_token="tok123")

        result = send_verification_email.apply(args=[str(user.id)])

        self.assertTrue(result.get()["sent"])
        self.assertEqual(len(mail.outbox), 1)
        self.assertEqual(mail.outbox[0].to, ["user@example.com"])
        self.assertIn("verify-email?token=tok123", mail.outbox[0].body)

    def test_send_verification_email_skips_verified_user(self):
        user = make_user()
        result = send_verification_email.apply(args=[str(user.id)])

        self.assertFalse(result.get()["sent"])
        self.assertEqual(len(mail.outbox), 0)

    def test_send_password_reset_email(self):
        user = make_user(reset_password_token="reset123")
        result = send_password_reset_email.apply(args=[str(user.id)])

        self.assertTrue(result.get()["sent"])
        self.assertIn("reset-password?token=reset123", mail.outbox[0].body)

    def test_cleanup_expired_refresh_tokens(self):
        user = make_user()
        RefreshToken.objects.create(user=user, token="old", expires_at=timezone.now() - timedelta(days=1))
        RefreshToken.objects.create(user=user, token="new", expires_at=timezone.now() + timedelta(days=1))

        result = cleanup_expired_refresh_tokens.apply()

        self.assertEqual(result.get()["deleted"], 1)
        self.assertEqual(list(RefreshToken.objects.values_list("token", flat=True)), ["new"])
