import logging

from rest_framework import status
from rest_framework.generics import ListAPIView, RetrieveAPIView
from rest_framework.response import Response
from rest_framework.views import APIView

from accounts.permissions import IsAdminRole
from common.utils import client_ip, user_agent
from wallets.serializers import (
    AdminTransactionSerializer,
    CreateTransactionSerializer,
    DateRangeSerializer,
    TransactionQuerySerializer,
    TransactionSerializer,
)
from wallets.services import TransactionService

logger = logging.getLogger(__name__)


class FilteredTransactionListView(ListAPIView):
    """
    Base for ledger listings. Query params:
        - type, status: exact match
        - start_date, end_date: ISO datetimes bounding created_at
        - min_amount, max_amount
        - search: description / reference id
        - sort_by (created_at, amount, type, status), sort_order (asc, desc)
    """

    serializer_class = TransactionSerializer
    summary = None

    def get_filters(self):
        serializer = TransactionQuerySerializer(data=self.request.query_params)
        serializer.is_valid(raise_exception=True)
        return serializer.validated_data

    def get_paginated_response(self, data):
        extra = {"summary": self.summary} if self.summary is not None else None
        return self.paginator.get_paginated_response(data, extra=extra)


class MyTransactionListView(FilteredTransactionListView):
    """GET /api/transactions/my — The caller's ledger rows plus a summary."""

    def get_queryset(self):
        queryset, self.summary = TransactionService.my_transactions(
            self.request.user, self.get_filters()
        )
        return queryset


class WalletTransactionListView(FilteredTransactionListView):
    """GET /api/transactions/wallet/<wallet_id> — Owner or admin only."""

    def get_queryset(self):
        queryset, self.summary = TransactionService.wallet_transactions(
            self.kwargs["wallet_id"], self.request.user, self.get_filters()
        )
        return queryset


class TransactionListCreateView(FilteredTransactionListView):
    """
    GET /api/transactions/ — Every ledger row, search also matches user email.
    POST /api/transactions/ — Write a ledger row by hand.

    Admin only.
    """

    serializer_class = AdminTransactionSerializer
    permission_classes = [IsAdminRole]

    def get_queryset(self):
        return TransactionService.list_transactions(self.get_filters())

    def post(self, request, *args, **kwargs):
        serializer = CreateTransactionSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        tx = TransactionService.create_transaction(
            wallet_id=data["wallet_id"],
            transaction_type=data["type"],
            amount=data["amount"],
            description=data["description"],
            status=data["status"],
            reference_id=data.get("reference_id", ""),
            reference_type=data.get("reference_type", ""),
            metadata=data.get("metadata"),
            ip_address=client_ip(request),
            user_agent=user_agent(request),
        )
        return Response(AdminTransactionSerializer(tx).data, status=status.HTTP_201_CREATED)


class TransactionDateRangeView(APIView):
    """POST /api/transactions/date-range — Completed rows in a date range (admin only)."""

    permission_classes = [IsAdminRole]

    def post(self, request, *args, **kwargs):
        serializer = DateRangeSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        result = TransactionService.by_date_range(
            data["start_date"], data["end_date"], data.get("type")
        )
        result["data"] = AdminTransactionSerializer(result.pop("transactions"), many=True).data
        return Response(result)


class TransactionStatsView(APIView):
    """GET /api/transactions/stats — Ledger statistics (admin only)."""

    permission_classes = [IsAdminRole]

    def get(self, request, *args, **kwargs):
        stats = TransactionService.stats()
        stats["large_transactions"] = AdminTransactionSerializer(
            stats["large_transactions"], many=True
        ).data
        stats["recent_transactions"] = AdminTransactionSerializer(
            stats["recent_transactions"], many=True
        ).data
        return Response(stats)


class TransactionDetailView(RetrieveAPIView):
    """GET /api/transactions/<id> — A single ledger row, owner or admin only."""

    serializer_class = TransactionSerializer

    def get_object(self):
        return TransactionService.get_transaction(self.kwargs["pk"], self.request.user)
