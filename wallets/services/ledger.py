import logging

from django.db import IntegrityError, transaction

from common.exceptions import Conflict, InsufficientFunds, InvalidOperation
from common.utils import to_money
from wallets.models import Transaction, Wallet

logger = logging.getLogger(__name__)


class LedgerService:
    """
    The single place where wallet balances change.

    Every balance mutation goes through :meth:`post`, which must run inside
    ``transaction.atomic`` with the wallet row already locked via
    ``select_for_update()``. It snapshots the balance before and after,
    rejects debits that would take the balance below zero, appends the ledger row
    and saves the wallet.
    """

    @staticmethod
    def lock_wallet(user_id) -> Wallet:
        """Lock and return the wallet owned by ``user_id``."""
        return Wallet.objects.select_for_update().get(user_id=user_id)

    @staticmethod
    def find_idempotent(idempotency_key, wallet, amount, transaction_type):
        """
        Return the ledger row previously written for ``idempotency_key``.

        Raises Conflict when the key was used for a different wallet, amount
        or operation.
        """
        if not idempotency_key:
            return None

        existing_tx = Transaction.objects.filter(idempotency_key=idempotency_key).first()
        if existing_tx is None:
            return None

        if (
            existing_tx.wallet_id != wallet.pk
            or existing_tx.amount != to_money(amount)
            or existing_tx.transaction_type != transaction_type
        ):
            logger.warning(
                "Idempotency conflict: key=%s existing_amount=%s new_amount=%s",
                idempotency_key,
                existing_tx.amount,
                amount,
            )
            raise Conflict("Idempotency key was already used for a different request")

        logger.info(
            "Idempotent %s request: key=%s tx=%s",
            transaction_type,
            idempotency_key,
            existing_tx.id,
        )
        return existing_tx

    @staticmethod
    def post(
        wallet,
        transaction_type,
        amount,
        description,
        *,
        status=Transaction.Status.COMPLETED,
        reference_id="",
        reference_type="",
        metadata=None,
        ip_address=None,
        user_agent="",
        idempotency_key=None,
    ) -> Transaction:
        amount = to_money(amount)
        if amount <= 0:
            raise InvalidOperation("Amount must be greater than zero")

        balance_before = wallet.balance
        if transaction_type in Transaction.CREDIT_TYPES:
            balance_after = balance_before + amount
        elif transaction_type in Transaction.DEBIT_TYPES:
            balance_after = balance_before - amount
            if balance_after < 0:
                raise InsufficientFunds(
                    f"Insufficient balance. Available: {balance_before}, Required: {amount}"
                )
        else:
            raise InvalidOperation(f"Unknown transaction type: {transaction_type}")

        try:
            with transaction.atomic():
                tx = Transaction.objects.create(
                    wallet=wallet,
                    user_id=wallet.user_id,
                    transaction_type=transaction_type,
                    amount=amount,
                    balance_before=balance_before,
                    balance_after=balance_after,
                    status=status,
                    description=description,
                    reference_id=str(reference_id or ""),
                    reference_type=reference_type or "",
                    metadata=metadata,
                    ip_address=ip_address,
                    user_agent=(user_agent or "")[:255],
                    idempotency_key=idempotency_key,
                )
        except IntegrityError:
            if idempotency_key is None:
                raise
            logger.warning("Idempotency key collision on insert: key=%s wallet=%s", idempotency_key, wallet.id)
            raise Conflict("Idempotency key was already used for a different request")

        if status == Transaction.Status.COMPLETED:
            wallet.balance = balance_after
            wallet.save(update_fields=["balance", "updated_at"])

        logger.info(
            "Ledger entry: wallet=%s type=%s amount=%s balance=%s->%s status=%s tx=%s",
            wallet.id,
            transaction_type,
            amount,
            balance_before,
            balance_after,
            status,
            tx.id,
        )
        return tx
