"""
URL configuration for the wallets API.

All URLs are prefixed with /api/v1/wallets/ in the main URL configuration.
See wallets.views for the full route table.
"""

from django.urls import path

from wallets import views

app_name = "wallets"

urlpatterns = [
    path("balance/", views.BalanceView.as_view(), name="balance"),
    # Transactions
    path("transactions/", views.TransactionListView.as_view(), name="transaction-list"),
    path("transactions/loads/", views.LoadView.as_view(), name="transaction-load"),
    path(
        "transactions/transfers/",
        views.TransferView.as_view(),
        name="transaction-transfer",
    ),
    path("transactions/payouts/", views.PayoutView.as_view(), name="transaction-payout"),
    # Orders
    path("orders/", views.OrderListCreateView.as_view(), name="order-list"),
    path(
        "orders/<uuid:order_id>/confirm-payment/",
        views.ConfirmPaymentView.as_view(),
        name="order-confirm-payment",
    ),
    path(
        "orders/<uuid:order_id>/tracking/",
        views.SubmitTrackingView.as_view(),
        name="order-tracking",
    ),
    # Administration
    path(
        "admin/transactions/pending/",
        views.PendingTransactionListView.as_view(),
        name="admin-transaction-pending",
    ),
    path(
        "admin/transactions/<uuid:transaction_id>/decision/",
        views.TransactionDecisionView.as_view(),
        name="admin-transaction-decision",
    ),
    path("admin/wallets/fund/", views.FundWalletView.as_view(), name="admin-fund-wallet"),
    path(
        "admin/orders/pending-tracking/",
        views.PendingTrackingListView.as_view(),
        name="admin-order-pending-tracking",
    ),
    path(
        "admin/orders/<uuid:order_id>/tracking-decision/",
        views.TrackingDecisionView.as_view(),
        name="admin-order-tracking-decision",
    ),
    path(
        "admin/orders/<uuid:order_id>/release/",
        views.ReleaseOrderView.as_view(),
        name="admin-order-release",
    ),
    path("admin/stats/", views.PlatformStatsView.as_view(), name="admin-stats"),
]
