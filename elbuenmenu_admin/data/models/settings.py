from __future__ import annotations

import json
from typing import Any, Literal, Optional

from pydantic import BaseModel, Field, field_serializer, field_validator
from pydantic import ValidationError as PydanticValidationError

from elbuenmenu_admin.logging import get_logger

from .base import ApiModel, CamelApiModel, Count, Money

WEEK_DAYS: tuple[str, ...] = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")


class DayHours(BaseModel):
    """Opening window for one weekday (HH:MM)."""
    open: str = "09:00"
    close: str = "22:00"
    enabled: bool = True


def default_week() -> dict[str, DayHours]:
    return {day: DayHours() for day in WEEK_DAYS}


def _parse_week(value: Any) -> dict[str, Any]:
    """Decode a stored week, keeping the default for every day that is missing or unreadable."""
    week: dict[str, Any] = default_week()
    if value is None or value == "":
        return week
    if isinstance(value, str):
        try:
            value = json.loads(value)
        except ValueError:
            get_logger(__name__).warning(f"Unreadable store hours, using defaults: {value[:80]!r}")
            return week
    if not isinstance(value, dict):
        get_logger(__name__).warning(f"Unexpected store hours type {type(value).__name__}, using defaults")
        return week
    for day, hours in value.items():
        if isinstance(hours, DayHours):
            week[day] = hours
        elif isinstance(hours, dict):
            try:
                week[day] = DayHours.model_validate(hours)
            except PydanticValidationError:
                get_logger(__name__).warning(f"Invalid hours for {day}, using defaults")
    return week


class StoreSettings(CamelApiModel):
    """Per-store configuration edited in the store panel."""
    # Basic data
    commercial_name: str = ""
    logo_url: str = ""
    short_description: str = ""
    long_description: str = ""
    store_type: str = "kiosco"
    address: str = ""
    phone: str = ""
    whatsapp_number: str = ""

    # Hours
    hours: dict[str, DayHours] = Field(default_factory=default_week)
    delivery_hours: dict[str, DayHours] = Field(default_factory=default_week)
    is_open: bool = True
    closed_message: str = "Este local está cerrado, vuelve más tarde"

    # Delivery
    delivery_enabled: bool = True
    pickup_enabled: bool = True
    delivery_price: Money = 0.0
    delivery_time_min: Count = 30
    delivery_time_max: Count = 45
    delivery_zone_info: str = ""
    delivery_temp_disabled: bool = False

    # Payments
    cash_enabled: bool = True
    transfer_enabled: bool = False
    transfer_alias: str = ""
    transfer_cvu: str = ""
    transfer_titular: str = ""
    transfer_notes: str = ""
    mercado_pago_enabled: bool = False
    mercado_pago_link: str = ""
    payment_notes: str = ""

    # WhatsApp bot
    whatsapp_bot_enabled: bool = False
    whatsapp_bot_number: str = ""
    welcome_message: str = "👋 ¡Hola! Somos {{storeName}}. Hacé tu pedido en {{storeUrl}} y seguimos por acá."
    order_confirm_message: str = (
        "✅ Pedido {{orderNumber}} confirmado. Código repartidor: {{deliveryCode}}. Seguimiento: {{trackingUrl}}"
    )
    order_on_way_message: str = "🚗 Pedido {{orderNumber}} en camino. Código: {{deliveryCode}}. Tracking: {{trackingUrl}}"

    # Other
    accept_scheduled_orders: bool = False
    promotions_enabled: bool = True
    min_order_amount: Money = 0.0
    max_orders_per_hour: Count = 0

    @field_validator("hours", "delivery_hours", mode="before")
    @classmethod
    def _decode_week(cls, value: Any) -> Any:
        return _parse_week(value)

    @field_validator(
        "commercial_name", "logo_url", "short_description", "long_description", "address", "phone",
        "whatsapp_number", "delivery_zone_info", "transfer_alias", "transfer_cvu", "transfer_titular",
        "transfer_notes", "mercado_pago_link", "payment_notes", "whatsapp_bot_number",
        mode="before",
    )
    @classmethod
    def _null_to_empty(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_serializer("hours", "delivery_hours", when_used="json")
    def _encode_week(self, week: dict[str, DayHours]) -> str:
        return json.dumps({day: hours.model_dump() for day, hours in week.items()})


class NotificationSettings(BaseModel):
    email: bool = True
    push: bool = True
    sms: bool = False
    order_alerts: bool = True
    stock_alerts: bool = True


class BusinessSettings(BaseModel):
    auto_approve_orders: bool = False
    require_payment_confirmation: bool = True
    delivery_enabled: bool = True
    pickup_enabled: bool = True


class IntegrationSettings(BaseModel):
    whatsapp_enabled: bool = True
    mercado_pago_enabled: bool = True


class AppearanceSettings(BaseModel):
    theme: Literal["light", "dark"] = "light"
    primary_color: str = "#f97316"


class AdvancedSettings(ApiModel):
    """Global dashboard preferences; partial backend data is completed with defaults."""
    notifications: NotificationSettings = Field(default_factory=NotificationSettings)
    business: BusinessSettings = Field(default_factory=BusinessSettings)
    integrations: IntegrationSettings = Field(default_factory=IntegrationSettings)
    appearance: AppearanceSettings = Field(default_factory=AppearanceSettings)

    @field_validator("notifications", "business", "integrations", "appearance", mode="before")
    @classmethod
    def _null_section(cls, value: Any) -> Any:
        return {} if value is None else value


class MercadoPagoConfig(CamelApiModel):
    public_key: str = ""
    access_token: str = ""
    enabled: bool = False


class TransferenciaConfig(CamelApiModel):
    alias: str = ""
    cvu: str = ""
    titular: str = ""
    enabled: bool = False


class EfectivoConfig(CamelApiModel):
    enabled: bool = True
    message: str = "Pagás en efectivo al recibir o retirar tu pedido"


class PaymentConfig(CamelApiModel):
    """Payment methods offered at checkout."""
    mercado_pago: MercadoPagoConfig = Field(default_factory=MercadoPagoConfig)
    transferencia: TransferenciaConfig = Field(default_factory=TransferenciaConfig)
    efectivo: EfectivoConfig = Field(default_factory=EfectivoConfig)

    def backend_payload(self) -> dict:
        """Subset the backend stores: only the Mercado Pago credentials."""
        return {
            "mercadoPago": {
                "accessToken": self.mercado_pago.access_token,
                "publicKey": self.mercado_pago.public_key,
            }
        }


class SaveReport(BaseModel):
    """Outcome of a save that writes to more than one place."""
    local_saved: bool = False
    backend_saved: bool = False
    errors: list[str] = Field(default_factory=list)

    @property
    def fully_saved(self) -> bool:
        return self.local_saved and self.backend_saved

    @property
    def saved_anywhere(self) -> bool:
        return self.local_saved or self.backend_saved


class ConnectionTestResult(BaseModel):
    ok: bool
    message: str
    preference_id: Optional[str] = None
