import uuid
from datetime import timedelta
from decimal import Decimal

from django.test import TestCase, TransactionTestCase
from django.utils import timezone
from rest_framework.test import APIClient

from accounts.models import User
from common.exceptions import Conflict, InsufficientFunds, InvalidOperation, NotFound
from orders.models import Order
from wallets.models import Transaction, Wallet
from wallets.services import LedgerService, TransactionService, WalletService


def make_user(email="user@example.com", role=User.Role.USER, balance=None):
    user = User.objects.create_user(
        email=email,
        password="Str0ng!pass",
        first_name="Test",
        last_name="User",
        role=role,
        is_email_verified=True,
    )
    wallet = WalletService.create_wallet(user)
    if balance is not None:
        WalletService.deposit(user.id, balance)
        wallet.refresh_from_db()
    return user


def make_paid_order(user, total="150.00"):
    return Order.objects.create(
        user=user,
        subtotal=Decimal(total),
        total=Decimal(total),
        status=Order.Status.PROCESSING,
        is_paid=True,
        paid_at=timezone.now(),
    )


# ============================================================
# Model Tests
# ============================================================


class WalletModelTest(TestCase):
    def test_create_wallet(self):
        user = make_user()
        self.assertIsNotNone(user.wallet.id)
        self.assertEqual(user.wallet.balance, 0)
        self.assertIsNotNone(user.wallet.created_at)

    def test_wallet_str(self):
        user = make_user()
        self.assertIn(str(user.wallet.id), str(user.wallet))

    def test_create_wallet_is_idempotent(self):
        user = make_user()
        self.assertEqual(WalletService.create_wallet(user).id, user.wallet.id)
        self.assertEqual(Wallet.objects.filter(user=user).count(), 1)


class TransactionModelTest(TestCase):
    def setUp(self):
        self.user = make_user()
        self.wallet = self.user.wallet

    def test_transaction_str(self):
        tx = Transaction.objects.create(
            wallet=self.wallet,
            user=self.user,
            amount=Decimal("500.00"),
            transaction_type=Transaction.TransactionType.DEPOSIT,
            description="Deposit",
        )
        self.assertIn("deposit", str(tx))
        self.assertIn("500", str(tx))

    def test_is_credit(self):
        deposit = Transaction(transaction_type=Transaction.TransactionType.DEPOSIT)
        payment = Transaction(transaction_type=Transaction.TransactionType.PAYMENT)
        self.assertTrue(deposit.is_credit)
        self.assertFalse(payment.is_credit)

    def test_refunded_total_for_order_counts_completed_refunds_only(self):
        order_id = uuid.uuid4()
        for amount, status in (("10.00", "completed"), ("5.00", "completed"), ("7.00", "pending")):
            Transaction.objects.create(
                wallet=self.wallet,
                user=self.user,
                amount=Decimal(amount),
                transaction_type=Transaction.TransactionType.REFUND,
                status=status,
                description="Refund",
                reference_type="order",
                reference_id=str(order_id),
            )
        self.assertEqual(Transaction.refunded_total_for_order(order_id), Decimal("15.00"))
        self.assertEqual(Transaction.refunded_total_for_order(uuid.uuid4()), 0)


# ============================================================
# Service Tests
# ============================================================


class LedgerServiceTest(TestCase):
    def setUp(self):
        self.user = make_user(balance=Decimal("100.00"))

    def test_post_credit_snapshots_balances(self):
        wallet = LedgerService.lock_wallet(self.user.id)
        tx = LedgerService.post(wallet, Transaction.TransactionType.BONUS, "25.50", "Bonus")

        self.assertEqual(tx.balance_before, Decimal("100.00"))
        self.assertEqual(tx.balance_after, Decimal("125.50"))
        self.assertEqual(tx.user_id, self.user.id)
        wallet.refresh_from_db()
        self.assertEqual(wallet.balance, Decimal("125.50"))

    def test_post_debit_below_zero_raises(self):
        wallet = LedgerService.lock_wallet(self.user.id)
        with self.assertRaises(InsufficientFunds):
            LedgerService.post(wallet, Transaction.TransactionType.PENALTY, "100.01", "Penalty")

        wallet.refresh_from_db()
        self.assertEqual(wallet.balance, Decimal("100.00"))

    def test_post_pending_does_not_move_balance(self):
        wallet = LedgerService.lock_wallet(self.user.id)
        tx = LedgerService.post(
            wallet,
            Transaction.TransactionType.WITHDRAWAL,
            "40.00",
            "Pending withdrawal",
            status=Transaction.Status.PENDING,
        )

        self.assertEqual(tx.balance_after, Decimal("60.00"))
        wallet.refresh_from_db()
        self.assertEqual(wallet.balance, Decimal("100.00"))

    def test_post_rounds_half_up(self):
        wallet = LedgerService.lock_wallet(self.user.id)
        tx = LedgerService.post(wallet, Transaction.TransactionType.DEPOSIT, "0.005", "Deposit")
        self.assertEqual(tx.amount, Decimal("0.01"))

    def test_post_non_positive_amount_raises(self):
        wallet = LedgerService.lock_wallet(self.user.id)
        with self.assertRaises(InvalidOperation):
            LedgerService.post(wallet, Transaction.TransactionType.DEPOSIT, 0, "Deposit")

    def test_post_unknown_type_raises(self):
        wallet = LedgerService.lock_wallet(self.user.id)
        with self.assertRaises(InvalidOperation):
            LedgerService.post(wallet, "chargeback", "1.00", "Unknown")

    def test_post_reused_key_on_another_wallet_raises_conflict(self):
        key = uuid.uuid4()
        other = make_user("other@example.com", balance=Decimal("50.00"))
        LedgerService.post(
            LedgerService.lock_wallet(self.user.id),
            Transaction.TransactionType.DEPOSIT,
            "10.00",
            "Deposit",
            idempotency_key=key,
        )

        wallet = LedgerService.lock_wallet(other.id)
        with self.assertRaises(Conflict):
            LedgerService.post(
                wallet, Transaction.TransactionType.DEPOSIT, "10.00", "Deposit", idempotency_key=key
            )

        self.assertEqual(Wallet.objects.get(user=other).balance, Decimal("50.00"))
        self.assertEqual(Transaction.objects.filter(idempotency_key=key).count(), 1)


class WalletServiceTest(TransactionTestCase):
    def setUp(self):
        self.user = make_user()

    def test_deposit_success(self):
        tx = WalletService.deposit(self.user.id, Decimal("1000.00"))

        wallet = Wallet.objects.get(user=self.user)
        self.assertEqual(wallet.balance, Decimal("1000.00"))
        self.assertEqual(tx.status, Transaction.Status.COMPLETED)
        self.assertEqual(tx.transaction_type, Transaction.TransactionType.DEPOSIT)
        self.assertEqual(tx.balance_before, Decimal("0.00"))
        self.assertEqual(tx.balance_after, Decimal("1000.00"))

    def test_deposit_multiple(self):
        WalletService.deposit(self.user.id, 1000)
        WalletService.deposit(self.user.id, 2500)

        self.assertEqual(Wallet.objects.get(user=self.user).balance, Decimal("3500.00"))

    def test_deposit_zero_amount_raises(self):
        with self.assertRaises(InvalidOperation):
            WalletService.deposit(self.user.id, 0)

    def test_deposit_negative_amount_raises(self):
        with self.assertRaises(InvalidOperation):
            WalletService.deposit(self.user.id, -100)

    def test_deposit_nonexistent_wallet_raises(self):
        with self.assertRaises(NotFound):
            WalletService.deposit(uuid.uuid4(), 1000)

    def test_deposit_idempotency(self):
        key = uuid.uuid4()

        tx1 = WalletService.deposit(self.user.id, 1000, idempotency_key=key)
        self.assertEqual(tx1.idempotency_key, key)

        tx2 = WalletService.deposit(self.user.id, 1000, idempotency_key=key)

        self.assertEqual(tx1.id, tx2.id)
        self.assertEqual(Wallet.objects.get(user=self.user).balance, Decimal("1000.00"))

    def test_idempotency_key_reused_with_different_amount_conflicts(self):
        key = uuid.uuid4()
        WalletService.deposit(self.user.id, 1000, idempotency_key=key)

        with self.assertRaises(Conflict):
            WalletService.deposit(self.user.id, 999, idempotency_key=key)

    def test_withdraw_success(self):
        WalletService.deposit(self.user.id, 100)
        tx = WalletService.withdraw(self.user.id, Decimal("40.25"))

        self.assertEqual(tx.transaction_type, Transaction.TransactionType.WITHDRAWAL)
        self.assertEqual(Wallet.objects.get(user=self.user).balance, Decimal("59.75"))

    def test_withdraw_insufficient_balance(self):
        WalletService.deposit(self.user.id, 10)

        with self.assertRaises(InsufficientFunds):
            WalletService.withdraw(self.user.id, 10.01)

        self.assertEqual(Wallet.objects.get(user=self.user).balance, Decimal("10.00"))
        self.assertEqual(Transaction.objects.count(), 1)

    def test_withdraw_entire_balance(self):
        WalletService.deposit(self.user.id, 10)
        WalletService.withdraw(self.user.id, 10)
        self.assertEqual(Wallet.objects.get(user=self.user).balance, Decimal("0.00"))


class TransferServiceTest(TransactionTestCase):
    def setUp(self):
        self.sender = make_user("sender@example.com", balance=Decimal("100.00"))
        self.receiver = make_user("receiver@example.com")

    def test_transfer_success(self):
        outgoing, incoming = WalletService.transfer(self.sender.id, self.receiver.id, Decimal("30.00"))

        self.assertEqual(Wallet.objects.get(user=self.sender).balance, Decimal("70.00"))
        self.assertEqual(Wallet.objects.get(user=self.receiver).balance, Decimal("30.00"))
        self.assertEqual(outgoing.transaction_type, Transaction.TransactionType.TRANSFER_OUT)
        self.assertEqual(incoming.transaction_type, Transaction.TransactionType.TRANSFER_IN)
        self.assertEqual(outgoing.reference_id, str(self.receiver.id))
        self.assertEqual(incoming.reference_id, str(outgoing.id))

    def test_transfer_to_self_raises(self):
        with self.assertRaises(InvalidOperation):
            WalletService.transfer(self.sender.id, self.sender.id, 10)

    def test_transfer_insufficient_balance_changes_nothing(self):
        with self.assertRaises(InsufficientFunds):
            WalletService.transfer(self.sender.id, self.receiver.id, Decimal("100.01"))

        self.assertEqual(Wallet.objects.get(user=self.sender).balance, Decimal("100.00"))
        self.assertEqual(Wallet.objects.get(user=self.receiver).balance, Decimal("0.00"))

    def test_transfer_to_unknown_user_raises(self):
        with self.assertRaises(NotFound):
            WalletService.transfer(self.sender.id, uuid.uuid4(), 10)

    def test_transfer_idempotency(self):
        key = uuid.uuid4()
        first = WalletService.transfer(self.sender.id, self.receiver.id, 10, idempotency_key=key)
        second = WalletService.transfer(self.sender.id, self.receiver.id, 10, idempotency_key=key)

        self.assertEqual(first[0].id, second[0].id)
        self.assertEqual(first[1].id, second[1].id)
        self.assertEqual(Wallet.objects.get(user=self.sender).balance, Decimal("90.00"))

    def test_transfer_key_reused_for_other_receiver_raises_conflict(self):
        key = uuid.uuid4()
        third = make_user("third@example.com")
        WalletService.transfer(self.sender.id, self.receiver.id, 10, idempotency_key=key)

        with self.assertRaises(Conflict):
            WalletService.transfer(self.sender.id, third.id, 10, idempotency_key=key)

        self.assertEqual(Wallet.objects.get(user=self.sender).balance, Decimal("90.00"))
        self.assertEqual(Wallet.objects.get(user=third).balance, Decimal("0.00"))


class RefundServiceTest(TransactionTestCase):
    def setUp(self):
        self.user = make_user()
        self.order = make_paid_order(self.user, "150.00")

    def test_partial_refunds_up_to_total(self):
        WalletService.refund(self.user.id, self.order.id, Decimal("100.00"))
        tx = WalletService.refund(self.user.id, self.order.id, Decimal("50.00"), reason="Damaged")

        self.assertEqual(tx.reference_type, "order")
        self.assertIn("Damaged", tx.description)
        self.assertEqual(Wallet.objects.get(user=self.user).balance, Decimal("150.00"))

    def test_refund_over_remaining_amount_raises(self):
        WalletService.refund(self.user.id, self.order.id, Decimal("100.00"))

        with self.assertRaises(InvalidOperation):
            WalletService.refund(self.user.id, self.order.id, Decimal("50.01"))

    def test_refund_for_other_users_order_raises(self):
        other = make_user("other@example.com")
        with self.assertRaises(NotFound):
            WalletService.refund(other.id, self.order.id, 10)

    def test_refund_unpaid_order_raises(self):
        pending = Order.objects.create(
            user=self.user, subtotal=Decimal("150.00"), total=Decimal("150.00"), status=Order.Status.PENDING
        )

        with self.assertRaisesMessage(InvalidOperation, "Cannot refund an unpaid order"):
            WalletService.refund(self.user.id, pending.id, Decimal("150.00"))

        self.assertEqual(Wallet.objects.get(user=self.user).balance, Decimal("0.00"))
        self.assertFalse(Transaction.objects.filter(reference_id=str(pending.id)).exists())


class TransactionServiceTest(TestCase):
    def setUp(self):
        self.user = make_user(balance=Decimal("200.00"))
        WalletService.withdraw(self.user.id, Decimal("50.00"))
        self.admin = make_user("admin@example.com", role=User.Role.ADMIN)

    def test_wallet_summary(self):
        summary = TransactionService.wallet_summary(Wallet.objects.get(user=self.user))

        self.assertEqual(summary["total_credits"], Decimal("200.00"))
        self.assertEqual(summary["total_debits"], Decimal("50.00"))
        self.assertEqual(summary["total_transactions"], 2)
        self.assertEqual(summary["current_balance"], Decimal("150.00"))

    def test_filter_by_type_and_amount(self):
        queryset = TransactionService.filter_queryset(
            Transaction.objects.all(), {"type": "withdrawal", "min_amount": Decimal("10")}
        )
        self.assertEqual(queryset.count(), 1)

        queryset = TransactionService.filter_queryset(
            Transaction.objects.all(), {"max_amount": Decimal("10")}
        )
        self.assertEqual(queryset.count(), 0)

    def test_get_transaction_hidden_from_other_users(self):
        tx = Transaction.objects.filter(user=self.user).first()
        stranger = make_user("stranger@example.com")

        self.assertEqual(TransactionService.get_transaction(tx.id, self.admin).id, tx.id)
        with self.assertRaises(NotFound):
            TransactionService.get_transaction(tx.id, stranger)

    def test_create_pending_transaction_keeps_balance(self):
        tx = TransactionService.create_transaction(
            wallet_id=self.user.wallet.id,
            transaction_type=Transaction.TransactionType.BONUS,
            amount=Decimal("5.00"),
            description="Pending bonus",
            status=Transaction.Status.PENDING,
        )
        self.assertEqual(tx.status, Transaction.Status.PENDING)
        self.assertEqual(Wallet.objects.get(user=self.user).balance, Decimal("150.00"))

    def test_by_date_range_summary(self):
        today = timezone.localdate()
        result = TransactionService.by_date_range(today - timedelta(days=1), today)

        summary = result["summary"]
        self.assertEqual(summary["total_transactions"], 2)
        self.assertEqual(summary["total_credits"], Decimal("200.00"))
        self.assertEqual(summary["total_debits"], Decimal("50.00"))
        self.assertEqual(summary["net_amount"], Decimal("150.00"))

    def test_stats(self):
        stats = TransactionService.stats()

        self.assertEqual(stats["overview"]["total_transactions"], 2)
        self.assertEqual(stats["overview"]["this_month"]["count"], 2)
        self.assertEqual(stats["by_status"], {"completed": 2})
        self.assertEqual(len(stats["recent_transactions"]), 2)


# ============================================================
# API Tests
# ============================================================


class WalletAPITest(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.user = make_user(balance=Decimal("100.00"))
        self.client.force_authenticate(user=self.user)

    def test_balance(self):
        response = self.client.get("/api/wallet/balance")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["balance"], "100.00")

    def test_balance_requires_authentication(self):
        response = APIClient().get("/api/wallet/balance")
        self.assertEqual(response.status_code, 401)

    def test_history(self):
        response = self.client.get("/api/wallet/history")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["meta"]["total"], 1)
        self.assertEqual(response.data["data"][0]["transaction_type"], "deposit")


class DepositAPITest(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.user = make_user()
        self.client.force_authenticate(user=self.user)

    def test_deposit_success(self):
        response = self.client.post("/api/wallet/deposit", {"amount": "50.00"}, format="json")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["wallet"]["balance"], "50.00")
        self.assertEqual(response.data["transaction"]["amount"], "50.00")
        self.assertEqual(response.data["transaction"]["status"], "completed")

    def test_deposit_with_idempotency_key(self):
        key = str(uuid.uuid4())
        response1 = self.client.post(
            "/api/wallet/deposit", {"amount": "50.00"}, format="json", HTTP_IDEMPOTENCY_KEY=key
        )
        response2 = self.client.post(
            "/api/wallet/deposit", {"amount": "50.00"}, format="json", HTTP_IDEMPOTENCY_KEY=key
        )

        self.assertEqual(response2.status_code, 200)
        self.assertEqual(response1.data["transaction"]["id"], response2.data["transaction"]["id"])
        self.assertEqual(Wallet.objects.get(user=self.user).balance, Decimal("50.00"))

    def test_deposit_idempotency_conflict(self):
        key = str(uuid.uuid4())
        self.client.post("/api/wallet/deposit", {"amount": "50.00"}, format="json", HTTP_IDEMPOTENCY_KEY=key)
        response = self.client.post(
            "/api/wallet/deposit", {"amount": "60.00"}, format="json", HTTP_IDEMPOTENCY_KEY=key
        )
        self.assertEqual(response.status_code, 409)
        self.assertIn("error", response.data)

    def test_deposit_invalid_idempotency_key(self):
        response = self.client.post(
            "/api/wallet/deposit", {"amount": "50.00"}, format="json", HTTP_IDEMPOTENCY_KEY="not-a-uuid"
        )
        self.assertEqual(response.status_code, 400)

    def test_deposit_zero_amount(self):
        response = self.client.post("/api/wallet/deposit", {"amount": 0}, format="json")
        self.assertEqual(response.status_code, 400)

    def test_deposit_missing_amount(self):
        response = self.client.post("/api/wallet/deposit", {}, format="json")
        self.assertEqual(response.status_code, 400)


class WithdrawAndTransferAPITest(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.user = make_user(balance=Decimal("100.00"))
        self.other = make_user("other@example.com")
        self.client.force_authenticate(user=self.user)

    def test_withdraw_success(self):
        response = self.client.post("/api/wallet/withdraw", {"amount": "30.00"}, format="json")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["wallet"]["balance"], "70.00")

    def test_withdraw_insufficient_balance(self):
        response = self.client.post("/api/wallet/withdraw", {"amount": "100.01"}, format="json")
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data["error"], "Insufficient wallet balance")

    def test_transfer_success(self):
        response = self.client.post(
            "/api/wallet/transfer",
            {"to_user_id": str(self.other.id), "amount": "25.00"},
            format="json",
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["wallet"]["balance"], "75.00")
        self.assertIsNotNone(response.data["recipient_transaction_id"])
        self.assertEqual(Wallet.objects.get(user=self.other).balance, Decimal("25.00"))

    def test_transfer_to_self_rejected(self):
        response = self.client.post(
            "/api/wallet/transfer",
            {"to_user_id": str(self.user.id), "amount": "25.00"},
            format="json",
        )
        self.assertEqual(response.status_code, 400)

    def test_transfer_to_unknown_user(self):
        response = self.client.post(
            "/api/wallet/transfer",
            {"to_user_id": str(uuid.uuid4()), "amount": "25.00"},
            format="json",
        )
        self.assertEqual(response.status_code, 404)


class RefundAPITest(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.user = make_user()
        self.admin = make_user("admin@example.com", role=User.Role.ADMIN)
        self.order = make_paid_order(self.user, "80.00")

    def test_refund_requires_admin(self):
        self.client.force_authenticate(user=self.user)
        response = self.client.post(
            "/api/wallet/refund",
            {"user_id": str(self.user.id), "order_id": str(self.order.id), "amount": "10.00"},
            format="json",
        )
        self.assertEqual(response.status_code, 403)

    def test_refund_success(self):
        self.client.force_authenticate(user=self.admin)
        response = self.client.post(
            "/api/wallet/refund",
            {"user_id": str(self.user.id), "order_id": str(self.order.id), "amount": "80.00"},
            format="json",
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["transaction"]["transaction_type"], "refund")
        self.assertEqual(response.data["wallet"]["balance"], "80.00")

    def test_refund_exceeding_order_total(self):
        self.client.force_authenticate(user=self.admin)
        response = self.client.post(
            "/api/wallet/refund",
            {"user_id": str(self.user.id), "order_id": str(self.order.id), "amount": "80.01"},
            format="json",
        )
        self.assertEqual(response.status_code, 400)

    def test_refund_unpaid_order(self):
        self.client.force_authenticate(user=self.admin)
        self.order.is_paid = False
        self.order.save(update_fields=["is_paid"])
        response = self.client.post(
            "/api/wallet/refund",
            {"user_id": str(self.user.id), "order_id": str(self.order.id), "amount": "10.00"},
            format="json",
        )
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data["error"], "Cannot refund an unpaid order")


class TransactionAPITest(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.user = make_user(balance=Decimal("100.00"))
        WalletService.deposit(self.user.id, Decimal("50.00"))
        WalletService.withdraw(self.user.id, Decimal("30.00"))
        self.admin = make_user("admin@example.com", role=User.Role.ADMIN)
        self.client.force_authenticate(user=self.user)

    def test_my_transactions_with_summary(self):
        response = self.client.get("/api/transactions/my")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["meta"]["total"], 3)
        self.assertEqual(response.data["summary"]["total_credits"], Decimal("150.00"))
        self.assertEqual(response.data["summary"]["current_balance"], Decimal("120.00"))

    def test_filter_by_type(self):
        response = self.client.get("/api/transactions/my?type=deposit")
        self.assertEqual(response.data["meta"]["total"], 2)

    def test_sort_by_amount_ascending(self):
        response = self.client.get("/api/transactions/my?sort_by=amount&sort_order=asc")
        amounts = [row["amount"] for row in response.data["data"]]
        self.assertEqual(amounts, ["30.00", "50.00", "100.00"])

    def test_invalid_amount_range(self):
        response = self.client.get("/api/transactions/my?min_amount=50&max_amount=10")
        self.assertEqual(response.status_code, 400)

    def test_wallet_transactions_of_other_user_hidden(self):
        other = make_user("other@example.com")
        response = self.client.get(f"/api/transactions/wallet/{other.wallet.id}")
        self.assertEqual(response.status_code, 404)

    def test_transaction_detail(self):
        tx = Transaction.objects.filter(user=self.user).first()
        response = self.client.get(f"/api/transactions/{tx.id}")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["id"], str(tx.id))

    def test_admin_listing_requires_admin(self):
        response = self.client.get("/api/transactions/")
        self.assertEqual(response.status_code, 403)

    def test_admin_list_search_by_email(self):
        self.client.force_authenticate(user=self.admin)
        response = self.client.get("/api/transactions/?search=user@example")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["meta"]["total"], 3)
        self.assertEqual(response.data["data"][0]["user_email"], "user@example.com")

    def test_admin_create_transaction(self):
        self.client.force_authenticate(user=self.admin)
        response = self.client.post(
            "/api/transactions/",
            {
                "wallet_id": str(self.user.wallet.id),
                "type": "bonus",
                "amount": "5.00",
                "description": "Loyalty bonus",
            },
            format="json",
        )
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.data["balance_after"], "125.00")

    def test_admin_stats_and_date_range(self):
        self.client.force_authenticate(user=self.admin)
        response = self.client.get("/api/transactions/stats")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["overview"]["total_transactions"], 3)

        today = timezone.localdate().isoformat()
        response = self.client.post(
            "/api/transactions/date-range",
            {"start_date": today, "end_date": today},
            format="json",
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(len(response.data["data"]), 3)
