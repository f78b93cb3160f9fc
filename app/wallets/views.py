"""
API views for the wallets app.

Views are thin: they validate the payload with an input serializer, call
one service operation and serialize the result. Service operations
return a ServiceResult; failures are rendered with to_response() and
the HTTP status carried by the result.

URL Structure (prefixed with /api/v1/wallets/):
    balance/                                 GET
    transactions/                            GET
    transactions/loads/                      POST
    transactions/transfers/                  POST
    transactions/payouts/                    POST
    orders/                                  GET, POST
    orders/{id}/confirm-payment/             POST
    orders/{id}/tracking/                    POST
    admin/transactions/pending/              GET   (staff)
    admin/transactions/{id}/decision/        POST  (staff)
    admin/wallets/fund/                      POST  (staff)
    admin/orders/pending-tracking/           GET   (staff)
    admin/orders/{id}/tracking-decision/     POST  (staff)
    admin/orders/{id}/release/               POST  (staff)
    admin/stats/                             GET   (staff)
"""

from __future__ import annotations

import logging

from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiParameter, OpenApiResponse, extend_schema
from rest_framework import status
from rest_framework.pagination import PageNumberPagination
from rest_framework.permissions import IsAdminUser, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from core.services import ServiceResult
from wallets.ledger import ledger
from wallets.serializers import (
    BalanceSerializer,
    CreateOrderRequestSerializer,
    DecisionRequestSerializer,
    FundWalletRequestSerializer,
    LoadRequestSerializer,
    OrderSerializer,
    PayoutRequestSerializer,
    TrackingDecisionSerializer,
    TrackingRequestSerializer,
    TransactionSerializer,
    TransferRequestSerializer,
)
from wallets.services import (
    ApprovalGateway,
    OrderService,
    StatsService,
    TransactionService,
)

logger = logging.getLogger(__name__)


# =============================================================================
# Helpers
# =============================================================================


def error_response(result: ServiceResult) -> Response:
    """Render a failed service result with its HTTP status."""
    logger.info(
        f"Request rejected: {result.error}",
        extra={"error_code": result.error_code, "status": result.http_status},
    )
    return Response(result.to_response(), status=result.http_status)


def paginated(view: APIView, request, queryset, serializer_class) -> Response:
    paginator = PageNumberPagination()
    page = paginator.paginate_queryset(queryset, request, view=view)
    return paginator.get_paginated_response(serializer_class(page, many=True).data)


# =============================================================================
# Wallet & Transactions
# =============================================================================


class BalanceView(APIView):
    """GET the current user's balance partitions."""

    permission_classes = [IsAuthenticated]

    @extend_schema(
        operation_id="get_wallet_balance",
        summary="Get wallet balance",
        responses={200: BalanceSerializer},
        tags=["Wallets"],
    )
    def get(self, request):
        snapshot = ledger.get_balance(request.user.pk)
        return Response(BalanceSerializer(snapshot.to_dict()).data)


class TransactionListView(APIView):
    """GET the current user's transaction history, newest first."""

    permission_classes = [IsAuthenticated]

    @extend_schema(
        operation_id="list_transactions",
        summary="List my transactions",
        responses={200: TransactionSerializer(many=True)},
        tags=["Wallets - Transactions"],
    )
    def get(self, request):
        queryset = TransactionService.list_for_user(request.user)
        return paginated(self, request, queryset, TransactionSerializer)


class LoadView(APIView):
    """POST a load request; it waits for admin approval."""

    permission_classes = [IsAuthenticated]

    @extend_schema(
        operation_id="submit_load",
        summary="Load funds",
        request=LoadRequestSerializer,
        responses={201: TransactionSerializer, 400: OpenApiResponse(description="Invalid request")},
        tags=["Wallets - Transactions"],
    )
    def post(self, request):
        serializer = LoadRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        result = TransactionService.submit_load(
            request.user,
            data["method"],
            data["amount_cents"],
            code=data.get("code"),
            memo=data.get("memo"),
        )
        if not result:
            return error_response(result)
        return Response(TransactionSerializer(result.data).data, status=status.HTTP_201_CREATED)


class TransferView(APIView):
    """POST an instant peer transfer."""

    permission_classes = [IsAuthenticated]

    @extend_schema(
        operation_id="submit_transfer",
        summary="Send money",
        description="Moves funds immediately. Fails without side effects if the balance is short.",
        request=TransferRequestSerializer,
        responses={
            201: TransactionSerializer,
            400: OpenApiResponse(description="Invalid request or insufficient funds"),
            404: OpenApiResponse(description="Receiver not found"),
        },
        tags=["Wallets - Transactions"],
    )
    def post(self, request):
        serializer = TransferRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        result = TransactionService.submit_transfer(
            request.user,
            data["amount_cents"],
            receiver_id=data.get("receiver_id"),
            receiver_handle=data.get("receiver_handle"),
            memo=data.get("memo"),
        )
        if not result:
            return error_response(result)
        return Response(TransactionSerializer(result.data).data, status=status.HTTP_201_CREATED)


class PayoutView(APIView):
    """POST a payout request; it waits for admin approval."""

    permission_classes = [IsAuthenticated]

    @extend_schema(
        operation_id="submit_payout",
        summary="Cash out",
        request=PayoutRequestSerializer,
        responses={
            201: TransactionSerializer,
            400: OpenApiResponse(description="Invalid request or insufficient funds"),
        },
        tags=["Wallets - Transactions"],
    )
    def post(self, request):
        serializer = PayoutRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        result = TransactionService.submit_payout(
            request.user,
            data["bank_id"],
            data["amount_cents"],
            data["speed"],
        )
        if not result:
            return error_response(result)
        return Response(TransactionSerializer(result.data).data, status=status.HTTP_201_CREATED)


# =============================================================================
# Orders
# =============================================================================


class OrderListCreateView(APIView):
    """
    GET the current user's orders, POST a new escrow-backed order.

    Query parameters:
        role: Optional "buyer" or "seller"
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(
        operation_id="list_orders",
        summary="List my orders",
        parameters=[
            OpenApiParameter(
                name="role",
                type=OpenApiTypes.STR,
                location=OpenApiParameter.QUERY,
                description="Limit to orders where I am the buyer or the seller",
                required=False,
                enum=["buyer", "seller"],
            ),
        ],
        responses={200: OrderSerializer(many=True)},
        tags=["Wallets - Orders"],
    )
    def get(self, request):
        role = request.query_params.get("role")
        queryset = OrderService.list_for_user(request.user, role=role)
        return paginated(self, request, queryset, OrderSerializer)

    @extend_schema(
        operation_id="create_order",
        summary="Buy an item",
        description="Moves the amount from the buyer's balance into escrow.",
        request=CreateOrderRequestSerializer,
        responses={
            201: OrderSerializer,
            400: OpenApiResponse(description="Invalid request or insufficient funds"),
            404: OpenApiResponse(description="Seller not found"),
        },
        tags=["Wallets - Orders"],
    )
    def post(self, request):
        serializer = CreateOrderRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        result = OrderService.create_order(
            request.user,
            data["seller_handle"],
            data["amount_cents"],
            data["item_description"],
        )
        if not result:
            return error_response(result)
        return Response(OrderSerializer(result.data).data, status=status.HTTP_201_CREATED)


class ConfirmPaymentView(APIView):
    """POST buyer payment confirmation for an order."""

    permission_classes = [IsAuthenticated]

    @extend_schema(
        operation_id="confirm_order_payment",
        summary="Confirm payment",
        request=None,
        responses={200: OrderSerializer},
        tags=["Wallets - Orders"],
    )
    def post(self, request, order_id):
        result = OrderService.confirm_payment(order_id, request.user)
        if not result:
            return error_response(result)
        return Response(OrderSerializer(result.data).data)


class SubmitTrackingView(APIView):
    """POST seller tracking for an order."""

    permission_classes = [IsAuthenticated]

    @extend_schema(
        operation_id="submit_tracking",
        summary="Submit tracking",
        request=TrackingRequestSerializer,
        responses={200: OrderSerializer},
        tags=["Wallets - Orders"],
    )
    def post(self, request, order_id):
        serializer = TrackingRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        result = OrderService.submit_tracking(
            order_id, request.user, data["carrier"], data["tracking_number"]
        )
        if not result:
            return error_response(result)
        return Response(OrderSerializer(result.data).data)


# =============================================================================
# Administration
# =============================================================================


class PendingTransactionListView(APIView):
    """GET the approval queue, oldest first."""

    permission_classes = [IsAdminUser]

    @extend_schema(
        operation_id="list_pending_transactions",
        summary="List pending transactions",
        responses={200: TransactionSerializer(many=True)},
        tags=["Wallets - Admin"],
    )
    def get(self, request):
        return paginated(self, request, TransactionService.list_pending(), TransactionSerializer)


class TransactionDecisionView(APIView):
    """POST an approve/reject decision on a pending transaction."""

    permission_classes = [IsAdminUser]

    @extend_schema(
        operation_id="decide_transaction",
        summary="Approve or reject a transaction",
        request=DecisionRequestSerializer,
        responses={
            200: TransactionSerializer,
            400: OpenApiResponse(description="Missing reason or insufficient funds"),
            409: OpenApiResponse(description="Transaction already decided"),
        },
        tags=["Wallets - Admin"],
    )
    def post(self, request, transaction_id):
        serializer = DecisionRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        result = ApprovalGateway.decide(
            transaction_id, request.user, data["action"], data.get("reason")
        )
        if not result:
            return error_response(result)
        return Response(TransactionSerializer(result.data).data)


class FundWalletView(APIView):
    """POST an admin deposit into a user's wallet."""

    permission_classes = [IsAdminUser]

    @extend_schema(
        operation_id="fund_wallet",
        summary="Fund a user's wallet",
        request=FundWalletRequestSerializer,
        responses={201: TransactionSerializer},
        tags=["Wallets - Admin"],
    )
    def post(self, request):
        serializer = FundWalletRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        result = TransactionService.fund_wallet(
            request.user, data["handle"], data["amount_cents"], data.get("note")
        )
        if not result:
            return error_response(result)
        return Response(TransactionSerializer(result.data).data, status=status.HTTP_201_CREATED)


class PendingTrackingListView(APIView):
    """GET orders whose tracking awaits review."""

    permission_classes = [IsAdminUser]

    @extend_schema(
        operation_id="list_pending_tracking",
        summary="List tracking awaiting review",
        responses={200: OrderSerializer(many=True)},
        tags=["Wallets - Admin"],
    )
    def get(self, request):
        return paginated(self, request, OrderService.list_pending_tracking(), OrderSerializer)


class TrackingDecisionView(APIView):
    """POST an approve/reject decision on an order's tracking."""

    permission_classes = [IsAdminUser]

    @extend_schema(
        operation_id="decide_tracking",
        summary="Approve or reject tracking",
        request=TrackingDecisionSerializer,
        responses={200: OrderSerializer},
        tags=["Wallets - Admin"],
    )
    def post(self, request, order_id):
        serializer = TrackingDecisionSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        result = OrderService.decide_tracking(
            order_id, request.user, serializer.validated_data["approved"]
        )
        if not result:
            return error_response(result)
        return Response(OrderSerializer(result.data).data)


class ReleaseOrderView(APIView):
    """POST a manual escrow release for a delivered order."""

    permission_classes = [IsAdminUser]

    @extend_schema(
        operation_id="release_order",
        summary="Release escrow to seller",
        request=None,
        responses={
            200: OrderSerializer,
            409: OpenApiResponse(description="Order not awaiting release or already released"),
        },
        tags=["Wallets - Admin"],
    )
    def post(self, request, order_id):
        result = OrderService.release_order(order_id, actor=request.user)
        if not result:
            return error_response(result)
        return Response(OrderSerializer(result.data).data)


class PlatformStatsView(APIView):
    """GET platform totals for the admin dashboard."""

    permission_classes = [IsAdminUser]

    @extend_schema(
        operation_id="get_platform_stats",
        summary="Platform statistics",
        responses={200: OpenApiResponse(description="Platform totals in cents")},
        tags=["Wallets - Admin"],
    )
    def get(self, request):
        return Response(StatsService.platform_stats())
