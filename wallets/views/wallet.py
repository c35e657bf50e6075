import logging
import uuid

from rest_framework import status
from rest_framework.generics import ListAPIView
from rest_framework.response import Response
from rest_framework.views import APIView

from accounts.permissions import IsAdminRole
from common.exceptions import InvalidOperation
from common.utils import client_ip, user_agent
from wallets.serializers import (
    AmountSerializer,
    RefundSerializer,
    TransactionSerializer,
    TransferSerializer,
    WalletSerializer,
)
from wallets.services import WalletService

logger = logging.getLogger(__name__)


def idempotency_key(request):
    """Parse the optional ``Idempotency-Key`` header as a UUID."""
    raw = request.META.get("HTTP_IDEMPOTENCY_KEY")
    if not raw:
        return None
    try:
        return uuid.UUID(raw)
    except ValueError:
        raise InvalidOperation("Idempotency-Key header must be a valid UUID")


class WalletBalanceView(APIView):
    """GET /api/wallet/balance — Current balance of the caller's wallet."""

    def get(self, request, *args, **kwargs):
        wallet = WalletService.get_wallet(request.user.id)
        return Response(WalletSerializer(wallet).data)


class DepositView(APIView):
    """
    POST /api/wallet/deposit — Deposit into the caller's wallet.

    Request body: {"amount": "<decimal>", "description": "<optional>"}
    Optional header: Idempotency-Key: <uuid>
    """

    throttle_scope = "wallet"

    def post(self, request, *args, **kwargs):
        serializer = AmountSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        tx = WalletService.deposit(
            user_id=request.user.id,
            amount=serializer.validated_data["amount"],
            description=serializer.validated_data.get("description") or "Deposit",
            idempotency_key=idempotency_key(request),
            ip_address=client_ip(request),
            user_agent=user_agent(request),
        )

        return Response(
            {
                "wallet": WalletSerializer(tx.wallet).data,
                "transaction": TransactionSerializer(tx).data,
            },
            status=status.HTTP_200_OK,
        )


class WithdrawView(APIView):
    """POST /api/wallet/withdraw — Withdraw from the caller's wallet."""

    throttle_scope = "wallet"

    def post(self, request, *args, **kwargs):
        serializer = AmountSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        tx = WalletService.withdraw(
            user_id=request.user.id,
            amount=serializer.validated_data["amount"],
            description=serializer.validated_data.get("description") or "Withdrawal",
            idempotency_key=idempotency_key(request),
            ip_address=client_ip(request),
            user_agent=user_agent(request),
        )

        return Response(
            {
                "wallet": WalletSerializer(tx.wallet).data,
                "transaction": TransactionSerializer(tx).data,
            },
            status=status.HTTP_200_OK,
        )


class TransferView(APIView):
    """
    POST /api/wallet/transfer — Send funds to another user's wallet.

    Request body: {"to_user_id": "<uuid>", "amount": "<decimal>"}
    """

    throttle_scope = "transfer"

    def post(self, request, *args, **kwargs):
        serializer = TransferSerializer(data=request.data, context={"request": request})
        serializer.is_valid(raise_exception=True)

        outgoing, incoming = WalletService.transfer(
            from_user_id=request.user.id,
            to_user_id=serializer.validated_data["to_user_id"],
            amount=serializer.validated_data["amount"],
            idempotency_key=idempotency_key(request),
        )

        return Response(
            {
                "message": "Transfer completed successfully",
                "wallet": WalletSerializer(outgoing.wallet).data,
                "transaction": TransactionSerializer(outgoing).data,
                "recipient_transaction_id": str(incoming.id) if incoming else None,
            },
            status=status.HTTP_200_OK,
        )


class WalletHistoryView(ListAPIView):
    """GET /api/wallet/history — Ledger rows for the caller's wallet, newest first."""

    serializer_class = TransactionSerializer

    def get_queryset(self):
        return WalletService.history(self.request.user.id)


class RefundView(APIView):
    """POST /api/wallet/refund — Refund part or all of a user's order (admin only)."""

    permission_classes = [IsAdminRole]
    throttle_scope = "admin_write"

    def post(self, request, *args, **kwargs):
        serializer = RefundSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        tx = WalletService.refund(
            user_id=data["user_id"],
            order_id=data["order_id"],
            amount=data["amount"],
            reason=data.get("reason"),
        )
        logger.info("Refund issued by %s: tx=%s", request.user.id, tx.id)

        return Response(
            {
                "wallet": WalletSerializer(tx.wallet).data,
                "transaction": TransactionSerializer(tx).data,
            },
            status=status.HTTP_200_OK,
        )
