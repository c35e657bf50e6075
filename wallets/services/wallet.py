import logging

from django.db import transaction

from common.exceptions import Conflict, InsufficientFunds, InvalidOperation, NotFound
from common.utils import to_money
from orders.models import Order
from wallets.models import Transaction, Wallet
from wallets.services.ledger import LedgerService

logger = logging.getLogger(__name__)


def _positive(amount, message):
    amount = to_money(amount)
    if amount <= 0:
        raise InvalidOperation(message)
    return amount


class WalletService:
    """
    Wallet operations for a single user: deposit, withdraw, transfer, refund.

    Each write method runs in one atomic block and locks the wallet row(s)
    with select_for_update() before reading the balance, so concurrent
    operations on the same wallet serialize.
    """

    @staticmethod
    def get_wallet(user_id) -> Wallet:
        try:
            return Wallet.objects.get(user_id=user_id)
        except Wallet.DoesNotExist:
            raise NotFound("Wallet not found")

    @staticmethod
    def create_wallet(user) -> Wallet:
        wallet, created = Wallet.objects.get_or_create(user=user)
        if created:
            logger.info("Wallet created: wallet=%s user=%s", wallet.id, user.id)
        return wallet

    @staticmethod
    @transaction.atomic
    def deposit(
        user_id, amount, description="Deposit", idempotency_key=None, ip_address=None, user_agent=""
    ) -> Transaction:
        """
        Deposit the given amount into the user's wallet.

        Args:
            user_id: Owner of the target wallet.
            amount: Positive amount to deposit.
            description: Free text stored on the ledger row.
            idempotency_key: Optional UUID key; a repeat returns the first row.

        Returns:
            The created (or existing) COMPLETED Transaction.

        Raises:
            InvalidOperation: If amount is not positive.
            NotFound: If the user has no wallet.
        """
        amount = _positive(amount, "Deposit amount must be greater than zero")

        try:
            wallet = LedgerService.lock_wallet(user_id)
        except Wallet.DoesNotExist:
            raise NotFound("Wallet not found")

        existing_tx = LedgerService.find_idempotent(
            idempotency_key, wallet, amount, Transaction.TransactionType.DEPOSIT
        )
        if existing_tx:
            return existing_tx

        return LedgerService.post(
            wallet,
            Transaction.TransactionType.DEPOSIT,
            amount,
            description or "Deposit",
            idempotency_key=idempotency_key,
            ip_address=ip_address,
            user_agent=user_agent,
        )

    @staticmethod
    @transaction.atomic
    def withdraw(
        user_id, amount, description="Withdrawal", idempotency_key=None, ip_address=None, user_agent=""
    ) -> Transaction:
        """
        Withdraw the given amount from the user's wallet.

        Raises:
            InvalidOperation: If amount is not positive.
            InsufficientFunds: If the balance is lower than the amount.
            NotFound: If the user has no wallet.
        """
        amount = _positive(amount, "Amount must be greater than zero")

        try:
            wallet = LedgerService.lock_wallet(user_id)
        except Wallet.DoesNotExist:
            raise NotFound("Wallet not found")

        existing_tx = LedgerService.find_idempotent(
            idempotency_key, wallet, amount, Transaction.TransactionType.WITHDRAWAL
        )
        if existing_tx:
            return existing_tx

        if wallet.balance < amount:
            logger.warning(
                "Withdrawal rejected (insufficient balance): wallet=%s balance=%s amount=%s",
                wallet.id,
                wallet.balance,
                amount,
            )
            raise InsufficientFunds("Insufficient wallet balance")

        return LedgerService.post(
            wallet,
            Transaction.TransactionType.WITHDRAWAL,
            amount,
            description or "Withdrawal",
            idempotency_key=idempotency_key,
            ip_address=ip_address,
            user_agent=user_agent,
        )

    @staticmethod
    @transaction.atomic
    def transfer(from_user_id, to_user_id, amount, idempotency_key=None):
        """
        Move funds between two users' wallets.

        Both wallet rows are locked in primary-key order so two opposite
        transfers cannot deadlock.

        Returns:
            (outgoing Transaction, incoming Transaction)
        """
        if str(from_user_id) == str(to_user_id):
            raise InvalidOperation("Cannot transfer to the same wallet")

        amount = _positive(amount, "Transfer amount must be greater than zero")

        wallets = {
            str(wallet.user_id): wallet
            for wallet in Wallet.objects.select_for_update()
            .filter(user_id__in=[from_user_id, to_user_id])
            .order_by("id")
        }
        sender = wallets.get(str(from_user_id))
        receiver = wallets.get(str(to_user_id))
        if sender is None or receiver is None:
            raise NotFound("One or both wallets were not found")

        existing_tx = LedgerService.find_idempotent(
            idempotency_key, sender, amount, Transaction.TransactionType.TRANSFER_OUT
        )
        if existing_tx:
            if existing_tx.reference_id != str(to_user_id):
                raise Conflict("Idempotency key was already used for a different request")
            incoming = Transaction.objects.filter(
                transaction_type=Transaction.TransactionType.TRANSFER_IN,
                reference_type="transfer",
                reference_id=str(existing_tx.id),
            ).first()
            return existing_tx, incoming

        if sender.balance < amount:
            raise InsufficientFunds("Insufficient balance for transfer")

        outgoing = LedgerService.post(
            sender,
            Transaction.TransactionType.TRANSFER_OUT,
            amount,
            f"Transfer to user {to_user_id}",
            reference_type="user",
            reference_id=to_user_id,
            idempotency_key=idempotency_key,
        )
        incoming = LedgerService.post(
            receiver,
            Transaction.TransactionType.TRANSFER_IN,
            amount,
            f"Transfer from user {from_user_id}",
            reference_type="transfer",
            reference_id=outgoing.id,
        )

        logger.info(
            "Transfer completed: from=%s to=%s amount=%s sender_balance=%s receiver_balance=%s",
            from_user_id,
            to_user_id,
            amount,
            sender.balance,
            receiver.balance,
        )
        return outgoing, incoming

    @staticmethod
    def history(user_id):
        """Ledger rows for the user's wallet, newest first."""
        wallet = WalletService.get_wallet(user_id)
        return wallet.transactions.order_by("-created_at")

    @staticmethod
    @transaction.atomic
    def refund(user_id, order_id, amount, reason=None) -> Transaction:
        """
        Credit a refund for one of the user's orders back to their wallet.

        Only paid orders can be refunded, and the cumulative refunded amount
        can never exceed the order total. The order row is locked before the
        wallet, the same order a cancellation takes them in.
        """
        amount = _positive(amount, "Refund amount must be greater than zero")

        order = Order.objects.select_for_update().filter(id=order_id, user_id=user_id).first()
        if order is None:
            raise NotFound("Order not found")
        if not order.is_paid:
            raise InvalidOperation("Cannot refund an unpaid order")

        try:
            wallet = LedgerService.lock_wallet(user_id)
        except Wallet.DoesNotExist:
            raise NotFound("Wallet not found")

        already_refunded = Transaction.refunded_total_for_order(order.id)
        refundable = to_money(order.total) - to_money(already_refunded)
        if amount > refundable:
            raise InvalidOperation(
                f"Refund exceeds refundable amount. Refundable: {refundable}, Requested: {amount}"
            )

        description = f"Refund for order {order.id}"
        if reason:
            description = f"{description}: {reason}"

        tx = LedgerService.post(
            wallet,
            Transaction.TransactionType.REFUND,
            amount,
            description,
            reference_type="order",
            reference_id=order.id,
        )
        logger.info("Refund processed: order=%s user=%s amount=%s", order.id, user_id, amount)
        return tx
