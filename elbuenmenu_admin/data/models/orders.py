from __future__ import annotations

import json
from typing import Any, Literal, Optional

from pydantic import AliasChoices, Field, model_validator

from elbuenmenu_admin.logging import get_logger

from .base import ApiModel, Count, Id, Money, Text, UtcDatetime

OrderStatus = Literal[
    "pending",
    "confirmed",
    "preparing",
    "ready",
    "assigned",
    "in_transit",
    "delivered",
    "cancelled",
]
FulfillmentType = Literal["delivery", "pickup"]

STATUS_LABELS: dict[str, str] = {
    "pending": "Pendiente",
    "confirmed": "Confirmado",
    "preparing": "En preparación",
    "ready": "Listo",
    "assigned": "Asignado",
    "in_transit": "En camino",
    "delivered": "Entregado",
    "cancelled": "Cancelado",
}


def _option_entry(raw: Any) -> Optional[dict]:
    if isinstance(raw, dict) and raw.get("name"):
        return {"name": str(raw["name"]), "price": raw.get("price") or 0}
    if isinstance(raw, str) and raw.strip():
        return {"name": raw.strip(), "price": 0}
    return None


def normalize_selected_options(raw: Any) -> tuple[list[dict], list[str]]:
    """Flatten the historical selected_options shapes into (options, options_text).

    Accepted shapes, either as a JSON string or already decoded:
      - {"options": [...], "optionsText": [...]}
      - [{"name": ..., "price": ...}, ...]
      - {"<categoryId>": [{"name": ..., "price": ...}], ...}
    """
    if raw is None or raw == "":
        return [], []

    if isinstance(raw, str):
        try:
            raw = json.loads(raw)
        except ValueError:
            get_logger(__name__).warning(f"Unparseable selected_options: {raw[:80]!r}")
            return [], []

    if isinstance(raw, list):
        entries = raw
        texts: list[str] = []
    elif isinstance(raw, dict) and ("options" in raw or "optionsText" in raw):
        entries = raw.get("options") or []
        texts = [str(t) for t in raw.get("optionsText") or []]
    elif isinstance(raw, dict):
        entries = []
        for group in raw.values():
            if isinstance(group, list):
                entries.extend(group)
            else:
                entries.append(group)
        texts = []
    else:
        get_logger(__name__).warning(f"Unexpected selected_options type: {type(raw).__name__}")
        return [], []

    options = [opt for opt in (_option_entry(e) for e in entries) if opt is not None]
    return options, texts


class ItemOption(ApiModel):
    """An extra chosen for an order line."""
    name: str = Field(description="Option name")
    price: Money = Field(default=0.0, description="Extra price charged for the option")


class OrderItem(ApiModel):
    """One line of an order."""
    id: Optional[Id] = Field(default=None, description="Order item identifier")
    product_name: str = Field(default="", description="Product name at order time")
    quantity: Count = Field(default=1, description="Units ordered")
    unit_price: Money = Field(default=0.0, description="Unit price")
    subtotal: Money = Field(default=0.0, description="Line subtotal including extras")
    options: list[ItemOption] = Field(default_factory=list, description="Normalized extras")
    options_text: list[str] = Field(default_factory=list, description="Free-text option labels")

    @model_validator(mode="before")
    @classmethod
    def _normalize_options(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        data = dict(data)
        raw = data.pop("selected_options", None)
        if raw is None:
            raw = data.pop("selectedOptions", None)
        if raw is not None and "options" not in data:
            options, texts = normalize_selected_options(raw)
            data["options"] = options
            data.setdefault("options_text", texts)
        return data


class Order(ApiModel):
    """An order as the admin dashboard sees it."""
    id: Id = Field(description="Order identifier")
    order_number: Id = Field(default="", description="Human-facing order number")
    customer_name: Optional[str] = Field(default=None, description="Customer name")
    customer_phone: Optional[str] = Field(default=None, description="Customer phone (WhatsApp)")
    customer_address: Optional[str] = Field(default=None, description="Delivery address")
    payment_method: Optional[str] = Field(default=None, description="Payment method as chosen by the customer")
    payment_status: Optional[str] = Field(default=None, description="Payment status reported by the backend")
    total: Money = Field(
        default=0.0,
        validation_alias=AliasChoices("total", "total_amount", "totalAmount"),
        description="Order total including delivery",
    )
    delivery_fee: Money = Field(default=0.0, description="Delivery fee; zero means pickup")
    status: OrderStatus = Field(default="pending", description="Order lifecycle status")
    items: list[OrderItem] = Field(default_factory=list, description="Order lines")
    notes: Optional[Text] = Field(default=None, description="Free-form notes, sometimes JSON")
    created_at: Optional[UtcDatetime] = Field(default=None, description="Creation timestamp")
    delivery_person_id: Optional[Id] = Field(default=None, description="Assigned delivery person")
    delivery_code: Optional[Id] = Field(default=None, description="Pickup/delivery verification code")

    @property
    def fulfillment_type(self) -> FulfillmentType:
        return "delivery" if self.delivery_fee > 0 else "pickup"

    @property
    def is_delivery(self) -> bool:
        return self.fulfillment_type == "delivery"

    @property
    def is_pickup(self) -> bool:
        return self.fulfillment_type == "pickup"

    @property
    def status_label(self) -> str:
        return STATUS_LABELS.get(self.status, self.status)

    @property
    def subtotal(self) -> float:
        return self.total - self.delivery_fee
