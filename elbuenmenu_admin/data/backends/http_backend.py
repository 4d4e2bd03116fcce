from __future__ import annotations

from typing import Any, Iterable, Optional, TypeVar

from pydantic import BaseModel, ValidationError as PydanticValidationError

from elbuenmenu_admin.api.client import AdminApiClient
from elbuenmenu_admin.api.errors import ApiResponseError
from elbuenmenu_admin.logging import get_logger

from ..interface import DataAccess
from ..models import (
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
    utc_now,
)
from ..resources import Resource

M = TypeVar("M", bound=BaseModel)

_LIST_KEYS = ("data", "items", "results")


def unwrap_list(payload: Any, key: Optional[str] = None) -> list:
    """Return the record list from a bare list or a {"<key>": [...]} envelope."""
    if payload is None:
        return []
    if isinstance(payload, list):
        return payload
    if isinstance(payload, dict):
        for candidate in ((key,) if key else ()) + _LIST_KEYS:
            value = payload.get(candidate)
            if isinstance(value, list):
                return value
    raise ApiResponseError(f"Respuesta inesperada: se esperaba una lista ({type(payload).__name__})")


def parse_records(model: type[M], rows: Iterable[Any], source: str = "") -> list[M]:
    """Validate rows one by one, skipping (and logging) the ones that don't fit the model."""
    logger = get_logger(__name__)
    records: list[M] = []
    for row in rows:
        try:
            records.append(model.model_validate(row))
        except PydanticValidationError as exc:
            row_id = row.get("id") if isinstance(row, dict) else None
            logger.warning(
                f"Skipping invalid {model.__name__} from {source or 'backend'} "
                f"(id={row_id}): {exc.error_count()} error(s), first: {exc.errors()[0]['msg']}"
            )
    return records


def parse_object(model: type[M], payload: Any, key: Optional[str] = None) -> M:
    """Validate a single object, unwrapping {"<key>": {...}} when present. None yields defaults."""
    if isinstance(payload, dict) and key and isinstance(payload.get(key), dict):
        payload = payload[key]
    try:
        return model.model_validate(payload or {})
    except PydanticValidationError as exc:
        get_logger(__name__).error(f"Invalid {model.__name__} payload: {exc.errors()[0]['msg']}")
        raise ApiResponseError(f"Respuesta inválida del servidor ({model.__name__})", details=exc.errors()) from exc


class HttpDataAccess(DataAccess):
    """
    REST implementation over AdminApiClient.
    - No caching: every call is a fresh request; polling cadence is decided by the views.
    """

    def __init__(self, client: AdminApiClient) -> None:
        self.client = client
        self.logger = get_logger(__name__)

    @property
    def store_id(self) -> Optional[str]:
        return self.client.context.store_id

    # ---------- generic collections ----------

    def _record_payload(self, resource: Resource, record: ApiModel) -> dict:
        payload = record.to_payload()
        if resource.send_store_id and self.store_id:
            payload["store_id"] = self.store_id
        return payload

    def list_records(self, resource: Resource, params: Optional[dict] = None) -> list[ApiModel]:
        payload = self.client.get(resource.path, params=params, scoped=resource.scoped)
        return parse_records(resource.model, unwrap_list(payload, resource.list_key), resource.path)

    def create_record(self, resource: Resource, record: ApiModel) -> None:
        self.client.post(resource.path, payload=self._record_payload(resource, record), scoped=resource.scoped)
        self.logger.info(f"Created {resource.name} record")

    def update_record(self, resource: Resource, record_id: str, record: ApiModel) -> None:
        self.client.put(
            f"{resource.path}/{record_id}",
            payload=self._record_payload(resource, record),
            scoped=resource.scoped,
        )
        self.logger.info(f"Updated {resource.name} {record_id}")

    def delete_record(self, resource: Resource, record_id: str) -> None:
        self.client.delete(f"{resource.path}/{record_id}", scoped=resource.scoped)
        self.logger.info(f"Deleted {resource.name} {record_id}")

    # ---------- orders and transfers ----------

    def get_orders(self, status: Optional[str] = None, limit: Optional[int] = None) -> list[Order]:
        params: dict[str, Any] = {}
        if status:
            params["status"] = status
        if limit:
            params["limit"] = limit
        payload = self.client.get("/orders", params=params)
        return parse_records(Order, unwrap_list(payload, "orders"), "/orders")

    def update_order(self, order_id: str, changes: dict) -> None:
        self.client.put(f"/orders/{order_id}", payload=changes)
        self.logger.info(f"Order {order_id} updated: {sorted(changes)}")

    def reject_order(self, order_id: str, reason: str) -> None:
        self.client.post(f"/orders/{order_id}/reject", payload={"reason": reason})
        self.logger.info(f"Order {order_id} rejected")

    def get_pending_transfers(self) -> list[Transfer]:
        payload = self.client.get("/transfers/pending")
        return parse_records(Transfer, unwrap_list(payload, "transfers"), "/transfers/pending")

    def update_transfer(self, transfer_id: str, changes: dict) -> None:
        self.client.put(f"/transfers/{transfer_id}", payload=changes)
        self.logger.info(f"Transfer {transfer_id} updated: {changes.get('status')}")

    # ---------- collection actions ----------

    def set_promo_code_active(self, promo_code_id: str, is_active: bool) -> None:
        self.client.put(f"/loyalty/promo-codes/{promo_code_id}/active", payload={"isActive": is_active})

    def respond_review(self, review_id: str, response: str) -> None:
        self.client.post(f"/reviews/{review_id}/respond", payload={"response": response})

    def clock_in(self, employee_id: str) -> None:
        self.client.post(f"/employees/{employee_id}/clock-in", payload={"clock_in": utc_now().isoformat()})

    def clock_out(self, employee_id: str) -> None:
        self.client.post(f"/employees/{employee_id}/clock-out", payload={"clock_out": utc_now().isoformat()})

    # ---------- loyalty ----------

    def list_loyalty_customers(self) -> list[CustomerLoyalty]:
        payload = self.client.get("/customers/loyalty")
        return parse_records(CustomerLoyalty, unwrap_list(payload, "customers"), "/customers/loyalty")

    def update_loyalty_customer(self, customer_id: str, update: CustomerLoyaltyUpdate) -> None:
        self.client.put(f"/customers/loyalty/{customer_id}", payload=update.model_dump(mode="json", by_alias=True))

    def recalculate_loyalty(self) -> None:
        self.client.post("/customers/loyalty/recalculate")

    def get_loyalty_program(self) -> LoyaltyProgram:
        return parse_object(LoyaltyProgram, self.client.get("/loyalty/program"), key="program")

    def save_loyalty_program(self, program: LoyaltyProgram) -> None:
        payload = program.to_payload()
        payload["store_id"] = self.store_id
        self.client.post("/loyalty/program", payload=payload)

    def list_loyalty_users(self) -> list[LoyaltyUser]:
        payload = self.client.get("/loyalty/users")
        return parse_records(LoyaltyUser, unwrap_list(payload, "users"), "/loyalty/users")

    # ---------- aggregates ----------

    def get_sales_stats(self) -> SalesStats:
        return parse_object(SalesStats, self.client.get("/stats/sales"))

    def get_realtime_analytics(self) -> RealtimeAnalytics:
        return parse_object(RealtimeAnalytics, self.client.get("/analytics/realtime"))

    # ---------- settings ----------

    def get_store_settings(self, store_id: str) -> StoreSettings:
        try:
            payload = self.client.get(f"/store-settings/{store_id}", scoped=False)
        except ApiResponseError as exc:
            if exc.status != 404:
                raise
            self.logger.info(f"No saved settings for store {store_id}; using defaults")
            payload = None
        return parse_object(StoreSettings, payload)

    def save_store_settings(self, store_id: str, settings: StoreSettings) -> None:
        self.client.put(f"/store-settings/{store_id}", payload=settings.to_payload(), scoped=False)

    def get_advanced_settings(self) -> AdvancedSettings:
        return parse_object(AdvancedSettings, self.client.get("/settings"), key="settings")

    def save_advanced_settings(self, settings: AdvancedSettings) -> None:
        self.client.put("/settings", payload=settings.to_payload())

    def save_payment_config(self, config: PaymentConfig) -> None:
        self.client.post("/admin/payment-config", payload=config.backend_payload(), scoped=False)

    def test_mercadopago_connection(self) -> ConnectionTestResult:
        payload = {
            "items": [{"title": "Prueba de conexión", "quantity": 1, "unit_price": 1}],
            "external_reference": f"connection-test-{int(utc_now().timestamp())}",
        }
        result = self.client.post("/payments/mercadopago/create-preference", payload=payload) or {}
        preference_id = result.get("id") or result.get("preferenceId") or result.get("preference_id")
        if not preference_id:
            return ConnectionTestResult(ok=False, message="Mercado Pago no devolvió una preferencia")
        return ConnectionTestResult(ok=True, message="Conexión con Mercado Pago exitosa", preference_id=str(preference_id))

    # ---------- operations ----------

    def get_system_status(self) -> SystemStatus:
        return parse_object(SystemStatus, self.client.get("/system/status", scoped=False))

    def get_system_logs(self, service: str, lines: int = 100) -> SystemLogs:
        payload = self.client.get("/system/logs", params={"service": service, "lines": lines}, scoped=False)
        raw = (payload.get("logs") if isinstance(payload, dict) else payload) or ""
        return SystemLogs(service=service, lines=raw.splitlines() if isinstance(raw, str) else list(raw))

    def restart_service(self, service: str) -> None:
        self.client.post("/system/restart", payload={"service": service}, scoped=False)
        self.logger.warning(f"Restart requested for {service}")

    def disconnect_whatsapp(self) -> None:
        self.client.post("/system/disconnect-whatsapp", scoped=False)
        self.logger.warning("WhatsApp session disconnect requested")

    def get_whatsapp_qr(self) -> Optional[str]:
        payload = self.client.get("/system/whatsapp-qr", scoped=False) or {}
        qr = payload.get("qr")
        if not payload.get("available") or not qr:
            return None
        if not str(qr).startswith("data:image"):
            self.logger.warning(f"QR is not a data URL: {str(qr)[:50]}")
            return None
        return qr
