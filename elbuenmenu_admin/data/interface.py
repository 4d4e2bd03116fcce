from __future__ import annotations

from typing import Optional, Protocol

from .models import (
    AdvancedSettings,
    ApiModel,
    ConnectionTestResult,
    CustomerLoyalty,
    CustomerLoyaltyUpdate,
    LoyaltyProgram,
    LoyaltyUser,
    Order,
    PaymentConfig,
    RealtimeAnalytics,
    SalesStats,
    StoreSettings,
    SystemLogs,
    SystemStatus,
    Transfer,
)
from .resources import Resource


class DataAccess(Protocol):
    """
    Backend-agnostic contract for the Streamlit views.

    Implementations return validated models; records the backend sends in an
    unexpected shape are skipped with a warning instead of failing the whole list.
    Failures surface as AdminApiError subclasses.
    """

    # Generic list + modal collections

    def list_records(self, resource: Resource, params: Optional[dict] = None) -> list[ApiModel]:
        """List a collection."""
        ...

    def create_record(self, resource: Resource, record: ApiModel) -> None:
        """Create a record in a collection."""
        ...

    def update_record(self, resource: Resource, record_id: str, record: ApiModel) -> None:
        """Replace a record in a collection."""
        ...

    def delete_record(self, resource: Resource, record_id: str) -> None:
        """Delete a record from a collection."""
        ...

    # Orders and transfers

    def get_orders(self, status: Optional[str] = None, limit: Optional[int] = None) -> list[Order]:
        """Get the store's orders, newest first."""
        ...

    def update_order(self, order_id: str, changes: dict) -> None:
        """Apply a partial update (status, payment_status, delivery_code) to an order."""
        ...

    def reject_order(self, order_id: str, reason: str) -> None:
        """Cancel an order with a reason shown to the customer."""
        ...

    def get_pending_transfers(self) -> list[Transfer]:
        """Get the transfers awaiting verification."""
        ...

    def update_transfer(self, transfer_id: str, changes: dict) -> None:
        """Apply a partial update to a transfer."""
        ...

    # Specialized collection actions

    def set_promo_code_active(self, promo_code_id: str, is_active: bool) -> None:
        """Enable or disable a promo code."""
        ...

    def respond_review(self, review_id: str, response: str) -> None:
        """Publish the store's answer to a review."""
        ...

    def clock_in(self, employee_id: str) -> None:
        """Open a shift for an employee."""
        ...

    def clock_out(self, employee_id: str) -> None:
        """Close the open shift of an employee."""
        ...

    # Loyalty

    def list_loyalty_customers(self) -> list[CustomerLoyalty]:
        """Get every customer's loyalty profile."""
        ...

    def update_loyalty_customer(self, customer_id: str, update: CustomerLoyaltyUpdate) -> None:
        """Override tier, discount and priority for a customer."""
        ...

    def recalculate_loyalty(self) -> None:
        """Ask the backend to recompute every customer's tier."""
        ...

    def get_loyalty_program(self) -> LoyaltyProgram:
        """Get the store's points program (defaults when none exists)."""
        ...

    def save_loyalty_program(self, program: LoyaltyProgram) -> None:
        """Create or replace the points program."""
        ...

    def list_loyalty_users(self) -> list[LoyaltyUser]:
        """Get program members and their points."""
        ...

    # Aggregates

    def get_sales_stats(self) -> SalesStats:
        """Get the sales dashboard aggregates."""
        ...

    def get_realtime_analytics(self) -> RealtimeAnalytics:
        """Get today's sales figures."""
        ...

    # Settings

    def get_store_settings(self, store_id: str) -> StoreSettings:
        """Get a store's panel settings merged over the defaults."""
        ...

    def save_store_settings(self, store_id: str, settings: StoreSettings) -> None:
        """Replace a store's panel settings."""
        ...

    def get_advanced_settings(self) -> AdvancedSettings:
        """Get the global dashboard settings merged over the defaults."""
        ...

    def save_advanced_settings(self, settings: AdvancedSettings) -> None:
        """Replace the global dashboard settings."""
        ...

    def save_payment_config(self, config: PaymentConfig) -> None:
        """Store the Mercado Pago credentials on the backend."""
        ...

    def test_mercadopago_connection(self) -> ConnectionTestResult:
        """Create a throwaway preference to check the Mercado Pago credentials."""
        ...

    # Operations

    def get_system_status(self) -> SystemStatus:
        """Get process status for the backend and the WhatsApp bot."""
        ...

    def get_system_logs(self, service: str, lines: int = 100) -> SystemLogs:
        """Get the last lines of a service's log."""
        ...

    def restart_service(self, service: str) -> None:
        """Restart the backend or the WhatsApp bot."""
        ...

    def disconnect_whatsapp(self) -> None:
        """Log the WhatsApp bot out of its session."""
        ...

    def get_whatsapp_qr(self) -> Optional[str]:
        """Get the pairing QR as a data:image URL, or None when not available."""
        ...
