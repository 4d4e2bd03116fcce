"""Order board rules: buckets, filters, status transitions and order actions."""
from __future__ import annotations

import random
from dataclasses import dataclass, field
from datetime import datetime, time, timedelta, tzinfo
from typing import Iterable, Optional

from elbuenmenu_admin.api.bot import BotNotifier
from elbuenmenu_admin.api.errors import InvalidTransitionError, ValidationError
from elbuenmenu_admin.config import get_config
from elbuenmenu_admin.data.interface import DataAccess
from elbuenmenu_admin.data.models import Order, OrderFilters, Transfer, store_tz, utc_now
from elbuenmenu_admin.data.models.stats import OrderStats
from elbuenmenu_admin.logging import get_logger

# Terminal statuses have no outgoing edges. Approval jumps straight from
# pending/confirmed to preparing (pickup) or ready (delivery).
TRANSITIONS: dict[str, frozenset[str]] = {
    "pending": frozenset({"confirmed", "preparing", "ready", "cancelled"}),
    "confirmed": frozenset({"preparing", "ready", "cancelled"}),
    "preparing": frozenset({"ready", "cancelled"}),
    "ready": frozenset({"assigned", "delivered", "cancelled"}),
    "assigned": frozenset({"in_transit", "cancelled"}),
    "in_transit": frozenset({"delivered", "cancelled"}),
    "delivered": frozenset(),
    "cancelled": frozenset(),
}

REVIEWABLE_STATUSES = frozenset({"pending", "confirmed"})
APPROVED_PAYMENT_STATUSES = frozenset({"approved", "completed"})


def can_transition(current: str, target: str) -> bool:
    return target in TRANSITIONS.get(current, frozenset())


def ensure_transition(order: Order, target: str) -> None:
    if not can_transition(order.status, target):
        raise InvalidTransitionError(order.status, target)


def can_approve(order: Order) -> bool:
    return order.status in REVIEWABLE_STATUSES


def can_reject(order: Order) -> bool:
    return order.status in REVIEWABLE_STATUSES


def can_notify_pickup(order: Order) -> bool:
    return order.is_pickup and order.status in ("preparing", "confirmed")


def approval_target(order: Order) -> str:
    """Delivery orders go straight to ready for dispatch; pickup orders start preparing."""
    return "ready" if order.is_delivery else "preparing"


# ---------- payment method ----------

def payment_family(method: Optional[str]) -> Optional[str]:
    """Map a free-form payment method onto mercadopago / transferencia / efectivo.

    Returns None when no method is chosen yet or it is none of the three.
    """
    if not is_payment_chosen(method):
        return None
    value = method.strip().lower()
    if "mercadopago" in value or "mercado pago" in value:
        return "mercadopago"
    if "transfer" in value:
        return "transferencia"
    if "efectivo" in value or "cash" in value:
        return "efectivo"
    return None


def is_payment_chosen(method: Optional[str]) -> bool:
    """False while the customer is still choosing; any other method counts, known or not."""
    value = (method or "").strip().lower()
    if value in ("", "null", "undefined"):
        return False
    return "pendiente" not in value and "sin definir" not in value


def pending_transfer_order_ids(transfers: Iterable[Transfer]) -> set[str]:
    return {t.order_id for t in transfers if t.status == "pending" and t.order_id}


# ---------- buckets ----------

def needs_review(order: Order, pending_transfer_ids: set[str]) -> bool:
    """Whether an order belongs in the pending tab.

    The order must be pending/confirmed, have a customer phone and a chosen payment
    method. Mercado Pago orders also need an approved payment; transfer orders and
    cash pickup orders need a pending transfer record.
    """
    if order.status not in REVIEWABLE_STATUSES or not order.customer_phone:
        return False

    family = payment_family(order.payment_method)
    if family is None:
        return False
    if family == "mercadopago":
        return (order.payment_status or "").lower() in APPROVED_PAYMENT_STATUSES
    if family == "transferencia" or order.is_pickup:
        return order.id in pending_transfer_ids
    return True


def in_bucket(order: Order, bucket: str, pending_transfer_ids: set[str]) -> bool:
    if bucket == "pending":
        return needs_review(order, pending_transfer_ids)
    if bucket == "cancelled":
        return order.status == "cancelled"
    if bucket == "completed":
        return order.status == "delivered"
    return True


def _window_start(date_range: str, now: datetime, tz: tzinfo) -> Optional[datetime]:
    if date_range == "today":
        local_today = now.astimezone(tz).date()
        return datetime.combine(local_today, time.min, tzinfo=tz)
    if date_range == "week":
        return now - timedelta(days=7)
    if date_range == "month":
        return now - timedelta(days=30)
    return None


def _matches_search(order: Order, term: str) -> bool:
    term = term.strip().lower()
    if not term:
        return True
    fields = (order.order_number, order.customer_name, order.customer_phone)
    return any(term in (value or "").lower() for value in fields)


def filter_orders(
    orders: Iterable[Order],
    transfers: Iterable[Transfer],
    filters: OrderFilters,
    now: Optional[datetime] = None,
    tz: Optional[tzinfo] = None,
) -> list[Order]:
    """Apply the board tab, fulfillment, payment, date and search filters, then sort."""
    now = now or utc_now()
    tz = tz or store_tz()
    pending_ids = pending_transfer_order_ids(transfers)
    start = _window_start(filters.date_range, now, tz)

    selected = []
    for order in orders:
        if not in_bucket(order, filters.bucket, pending_ids):
            continue
        if filters.fulfillment and order.fulfillment_type != filters.fulfillment:
            continue
        if filters.payment_method and payment_family(order.payment_method) != filters.payment_method:
            continue
        if start is not None and (order.created_at is None or order.created_at < start):
            continue
        if filters.search and not _matches_search(order, filters.search):
            continue
        selected.append(order)

    return sort_orders(selected, filters.sort)


def sort_orders(orders: list[Order], sort: str) -> list[Order]:
    if sort in ("amount_high", "amount_low"):
        return sorted(orders, key=lambda o: o.total, reverse=sort == "amount_high")
    # Orders without a timestamp always sink to the bottom
    dated = [o for o in orders if o.created_at is not None]
    undated = [o for o in orders if o.created_at is None]
    dated.sort(key=lambda o: o.created_at, reverse=sort != "oldest")
    return dated + undated


def order_stats(orders: Iterable[Order], transfers: Iterable[Transfer]) -> OrderStats:
    transfers = list(transfers)
    pending_ids = pending_transfer_order_ids(transfers)
    stats = OrderStats(pending_transfers=sum(1 for t in transfers if t.status == "pending"))
    for order in orders:
        if needs_review(order, pending_ids):
            stats.pending += 1
        if order.status == "cancelled":
            stats.cancelled += 1
        elif order.status == "delivered":
            stats.completed += 1
        if order.status == "pending" and order.customer_phone and is_payment_chosen(order.payment_method):
            if order.is_delivery:
                stats.pending_delivery += 1
            else:
                stats.pending_pickup += 1
    return stats


# ---------- new order detection ----------

@dataclass
class NewOrders:
    delivery: list[Order] = field(default_factory=list)
    pickup: list[Order] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.delivery) + len(self.pickup)


def is_complete_new_order(order: Order) -> bool:
    """A pending order the customer actually finished placing."""
    return (
        order.status == "pending"
        and len((order.customer_phone or "").strip()) >= 10
        and bool((order.customer_name or "").strip())
        and bool(order.items)
        and is_payment_chosen(order.payment_method)
        and order.total > 0
    )


def detect_new_orders(previous_ids: Optional[set[str]], orders: Iterable[Order]) -> NewOrders:
    """Orders that appeared since the last poll. Nothing is reported until a previous poll saw at least one order."""
    found = NewOrders()
    if not previous_ids:
        return found
    for order in orders:
        if order.id in previous_ids or not is_complete_new_order(order):
            continue
        (found.delivery if order.is_delivery else found.pickup).append(order)
    return found


# ---------- actions ----------

def pickup_ready_message(order: Order, address: Optional[str] = None) -> str:
    address = address or order.customer_address or get_config().pickup_address
    return (
        "✅ ¡Tu pedido está listo para ser retirado!\n\n"
        f"📦 Pedido: {order.order_number}\n"
        f"📍 {address}\n\n"
        f"🆔 Código: {order.order_number}\n\n"
        "Podés pasar a retirarlo cuando gustes.\n\n"
        "¡Gracias por tu compra! ❤️"
    )


class OrderService:
    """Status changes and customer notifications for the orders board."""

    def __init__(
        self,
        data: DataAccess,
        bot: Optional[BotNotifier] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.data = data
        self.bot = bot
        self.rng = rng or random.Random()
        self.logger = get_logger(__name__)

    def approve(self, order: Order) -> dict:
        """Approve a pending/confirmed order and return the changes sent to the backend.

        Pickup orders also get a 4-digit code the customer shows at the counter.
        """
        target = approval_target(order)
        if not can_approve(order):
            raise InvalidTransitionError(order.status, target)
        changes: dict = {"status": target}
        if order.is_pickup and not order.delivery_code:
            changes["delivery_code"] = str(self.rng.randint(1000, 9999))
        self.data.update_order(order.id, changes)
        self.logger.info(f"Order {order.order_number} approved -> {target}")
        return changes

    def reject(self, order: Order, reason: str) -> None:
        if not can_reject(order):
            raise InvalidTransitionError(order.status, "cancelled")
        if not reason or not reason.strip():
            raise ValidationError("Indicá el motivo del rechazo", field="reason")
        self.data.reject_order(order.id, reason.strip())
        self.logger.info(f"Order {order.order_number} rejected")

    def change_status(self, order: Order, target: str) -> None:
        ensure_transition(order, target)
        self.data.update_order(order.id, {"status": target})
        self.logger.info(f"Order {order.order_number}: {order.status} -> {target}")

    def notify_pickup(self, order: Order, address: Optional[str] = None) -> None:
        """Tell a pickup customer the order is ready, then mark it ready."""
        if not can_notify_pickup(order):
            raise InvalidTransitionError(order.status, "ready")
        if not order.customer_phone:
            raise ValidationError("El pedido no tiene teléfono del cliente", field="customer_phone")
        if self.bot is None:
            raise ValidationError("El bot de WhatsApp no está configurado")
        self.bot.notify_order(order.customer_phone, order.order_number, pickup_ready_message(order, address))
        self.data.update_order(order.id, {"status": "ready"})

    def approve_transfer(self, transfer: Transfer, now: Optional[datetime] = None) -> None:
        """Mark a transfer verified and release its order to the kitchen queue."""
        verified_at = (now or utc_now()).isoformat()
        self.data.update_transfer(transfer.id, {"status": "approved", "verified_at": verified_at})
        if transfer.order_id:
            self.data.update_order(transfer.order_id, {"payment_status": "completed", "status": "pending"})
        self.logger.info(f"Transfer {transfer.id} approved")

    def reject_transfer(self, transfer: Transfer, now: Optional[datetime] = None) -> None:
        verified_at = (now or utc_now()).isoformat()
        self.data.update_transfer(transfer.id, {"status": "rejected", "verified_at": verified_at})
        self.logger.info(f"Transfer {transfer.id} rejected")


def split_transfers(transfers: Iterable[Transfer]) -> tuple[list[Transfer], list[Transfer]]:
    """(pending, processed)."""
    pending, processed = [], []
    for transfer in transfers:
        (pending if transfer.status == "pending" else processed).append(transfer)
    return pending, processed
