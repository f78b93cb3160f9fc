"""
Django admin registration for wallets.

Balances, entries and holds are read-only here: every change to money
must go through the ledger and order services.
"""

from django.contrib import admin

from wallets.models import EscrowHold, Order, Shipment, Transaction, Wallet, WalletEntry


class ReadOnlyAdminMixin:
    def has_add_permission(self, request, obj=None):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


class WalletEntryInline(ReadOnlyAdminMixin, admin.TabularInline):
    model = WalletEntry
    extra = 0
    fields = (
        "created_at",
        "direction",
        "bucket",
        "amount_cents",
        "balance_after_cents",
        "entry_type",
        "reference_type",
        "reference_id",
    )
    readonly_fields = fields
    ordering = ("-created_at",)


@admin.register(Wallet)
class WalletAdmin(ReadOnlyAdminMixin, admin.ModelAdmin):
    list_display = ("user", "available_cents", "pending_cents", "on_hold_cents", "updated_at")
    search_fields = ("user__email", "user__profile__username")
    readonly_fields = ("user", "available_cents", "pending_cents", "on_hold_cents", "created_at", "updated_at")
    inlines = (WalletEntryInline,)


@admin.register(WalletEntry)
class WalletEntryAdmin(ReadOnlyAdminMixin, admin.ModelAdmin):
    list_display = ("created_at", "wallet", "direction", "bucket", "amount_cents", "entry_type")
    list_filter = ("direction", "bucket", "entry_type")
    search_fields = ("idempotency_key", "reference_id", "wallet__user__email")
    ordering = ("-created_at",)


@admin.register(Transaction)
class TransactionAdmin(ReadOnlyAdminMixin, admin.ModelAdmin):
    """Decisions are made through the approval API so the ledger effect is applied."""

    list_display = (
        "id",
        "type",
        "amount_cents",
        "fee_cents",
        "sender",
        "receiver",
        "approval_status",
        "status",
        "created_at",
    )
    list_filter = ("type", "approval_status", "status")
    search_fields = ("id", "sender__email", "receiver__email", "memo")
    ordering = ("-created_at",)


class EscrowHoldInline(ReadOnlyAdminMixin, admin.TabularInline):
    model = EscrowHold
    extra = 0
    fields = ("side", "user", "amount_cents", "status", "released_at")
    readonly_fields = fields


class ShipmentInline(ReadOnlyAdminMixin, admin.TabularInline):
    model = Shipment
    extra = 0
    fields = ("carrier", "tracking_number", "submitted_by", "created_at")
    readonly_fields = fields


@admin.register(Order)
class OrderAdmin(ReadOnlyAdminMixin, admin.ModelAdmin):
    list_display = ("id", "buyer", "seller", "amount_cents", "status", "shipped_at", "delivered_at")
    list_filter = ("status",)
    search_fields = ("id", "buyer__email", "seller__email", "tracking_number")
    ordering = ("-created_at",)
    inlines = (EscrowHoldInline, ShipmentInline)
