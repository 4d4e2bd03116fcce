from __future__ import annotations

import json
import uuid
from collections import defaultdict
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Optional

from elbuenmenu_admin.api.errors import ApiResponseError
from elbuenmenu_admin.config import get_config
from elbuenmenu_admin.logging import get_logger
from elbuenmenu_admin.services.loyalty import history_points, tier_for

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
    store_date,
    utc_now,
)
from ..resources import Resource
from .http_backend import parse_object, parse_records

REQUIRED_FILES = ["orders.json"]


def compute_sales_stats(orders: list[Order], now: datetime) -> dict:
    """Build the /stats/sales payload from raw orders (cancelled orders excluded)."""
    sold = [o for o in orders if o.status != "cancelled"]

    def totals(subset: list[Order]) -> dict:
        revenue = sum(o.total for o in subset)
        fees = sum(o.delivery_fee for o in subset)
        return {
            "revenue": revenue,
            "orders": len(subset),
            "deliveryFee": fees,
            "subtotal": revenue - fees,
            "averageOrderValue": round(revenue / len(subset), 2) if subset else 0,
        }

    dated = [o for o in sold if o.created_at is not None]
    month = [o for o in dated if o.created_at.year == now.year and o.created_at.month == now.month]
    week = [o for o in dated if o.created_at >= now - timedelta(days=7)]

    by_method: dict[str, list[Order]] = defaultdict(list)
    for order in sold:
        by_method[order.payment_method or "desconocido"].append(order)
    grand_total = sum(o.total for o in sold) or 1.0
    payment_methods = [
        {
            "method": method,
            "count": len(group),
            "total": sum(o.total for o in group),
            "percentage": round(sum(o.total for o in group) * 100 / grand_total, 1),
        }
        for method, group in by_method.items()
    ]

    delivery = [o for o in sold if o.is_delivery]
    pickup = [o for o in sold if o.is_pickup]

    days = []
    for offset in range(29, -1, -1):
        day = (now - timedelta(days=offset)).date()
        group = [o for o in dated if o.created_at.date() == day]
        days.append({"date": day.isoformat(), "revenue": sum(o.total for o in group), "orders": len(group)})

    hours = []
    for offset in range(23, -1, -1):
        start = (now - timedelta(hours=offset)).replace(minute=0, second=0, microsecond=0)
        group = [o for o in dated if start <= o.created_at < start + timedelta(hours=1)]
        hours.append({"hour": start.strftime("%H:00"), "revenue": sum(o.total for o in group), "orders": len(group)})

    products: dict[str, dict] = defaultdict(lambda: {"quantity": 0, "revenue": 0.0})
    for order in sold:
        for item in order.items:
            products[item.product_name]["quantity"] += item.quantity
            products[item.product_name]["revenue"] += item.subtotal
    top_products = sorted(
        ({"name": name, **values} for name, values in products.items()),
        key=lambda row: row["quantity"],
        reverse=True,
    )[:10]

    return {
        "total": totals(sold),
        "currentMonth": totals(month),
        "currentWeek": totals(week),
        "paymentMethods": payment_methods,
        "delivery": {
            "deliveryOrders": len(delivery),
            "pickupOrders": len(pickup),
            "deliveryRevenue": sum(o.total for o in delivery),
            "pickupRevenue": sum(o.total for o in pickup),
        },
        "last30Days": days,
        "last24Hours": hours,
        "topProducts": top_products,
    }


class LocalDataAccess(DataAccess):
    """
    JSON-file implementation for local development and demos.
    - Loads every <collection>.json from `data_dir` at construction.
    - Writes go back to the same files, so the dashboard can be exercised without a backend.
    """

    def __init__(self, data_dir: str | Path = None) -> None:
        if data_dir is None:
            data_dir = get_config().data_dir
        self.data_dir = Path(data_dir)
        self.logger = get_logger(__name__)
        self._tables = self._load_tables(self.data_dir)

    # ---------- loading / saving ----------

    @staticmethod
    def _load_tables(data_dir: Path) -> dict[str, Any]:
        if not data_dir.exists():
            raise FileNotFoundError(
                f"Data directory not found: {data_dir}\n"
                f"Please either:\n"
                f"  1. Generate sample data: python -m elbuenmenu_admin.data.seed_data\n"
                f"  2. Set DATA_DIR environment variable to point to your data directory\n"
                f"  3. Set DATA_BACKEND=http to use the live API"
            )

        missing_files = [f for f in REQUIRED_FILES if not (data_dir / f).exists()]
        if missing_files:
            raise FileNotFoundError(
                f"Required JSON files missing in {data_dir}:\n"
                f"  Missing: {', '.join(missing_files)}\n\n"
                f"Generate sample data: python -m elbuenmenu_admin.data.seed_data --output-dir {data_dir}"
            )

        tables: dict[str, Any] = {}
        for path in sorted(data_dir.glob("*.json")):
            try:
                tables[path.stem] = json.loads(path.read_text(encoding="utf-8"))
            except ValueError as exc:
                raise RuntimeError(f"Invalid JSON in {path}: {exc}") from exc
        return tables

    def _rows(self, name: str) -> list[dict]:
        rows = self._tables.setdefault(name, [])
        if not isinstance(rows, list):
            raise RuntimeError(f"{name}.json must contain a list")
        return rows

    def _save(self, name: str) -> None:
        path = self.data_dir / f"{name}.json"
        path.write_text(json.dumps(self._tables[name], indent=2, ensure_ascii=False, default=str), encoding="utf-8")

    def _find(self, name: str, record_id: str, key: str = "id") -> dict:
        for row in self._rows(name):
            if str(row.get(key)) == str(record_id):
                return row
        raise ApiResponseError(f"{name} {record_id} no encontrado", status=404)

    def _patch(self, name: str, record_id: str, changes: dict, key: str = "id") -> None:
        self._find(name, record_id, key).update(changes)
        self._save(name)

    # ---------- generic collections ----------

    def list_records(self, resource: Resource, params: Optional[dict] = None) -> list[ApiModel]:
        rows = self._rows(resource.name)
        month = (params or {}).get("month")
        if month:
            rows = [r for r in rows if str(r.get("date", "")).startswith(month)]
        return parse_records(resource.model, rows, f"{resource.name}.json")

    def create_record(self, resource: Resource, record: ApiModel) -> None:
        row = record.to_payload()
        row["id"] = uuid.uuid4().hex[:12]
        self._rows(resource.name).append(row)
        self._save(resource.name)

    def update_record(self, resource: Resource, record_id: str, record: ApiModel) -> None:
        self._patch(resource.name, record_id, record.to_payload())

    def delete_record(self, resource: Resource, record_id: str) -> None:
        row = self._find(resource.name, record_id)
        self._rows(resource.name).remove(row)
        self._save(resource.name)

    # ---------- orders and transfers ----------

    def _orders(self) -> list[Order]:
        return parse_records(Order, self._rows("orders"), "orders.json")

    def get_orders(self, status: Optional[str] = None, limit: Optional[int] = None) -> list[Order]:
        orders = [o for o in self._orders() if status is None or o.status == status]
        orders.sort(key=lambda o: o.created_at or datetime.min.replace(tzinfo=timezone.utc), reverse=True)
        return orders[:limit] if limit else orders

    def update_order(self, order_id: str, changes: dict) -> None:
        self._patch("orders", order_id, changes)

    def reject_order(self, order_id: str, reason: str) -> None:
        self._patch("orders", order_id, {"status": "cancelled", "rejection_reason": reason})

    def get_pending_transfers(self) -> list[Transfer]:
        return parse_records(Transfer, self._rows("transfers"), "transfers.json")

    def update_transfer(self, transfer_id: str, changes: dict) -> None:
        self._patch("transfers", transfer_id, changes)

    # ---------- collection actions ----------

    def set_promo_code_active(self, promo_code_id: str, is_active: bool) -> None:
        self._patch("promo_codes", promo_code_id, {"isActive": is_active, "is_active": is_active})

    def respond_review(self, review_id: str, response: str) -> None:
        self._patch("reviews", review_id, {"response": response, "responded_at": utc_now().isoformat()})

    def clock_in(self, employee_id: str) -> None:
        now = utc_now()
        self._rows("time_clocks").append(
            {
                "id": uuid.uuid4().hex[:12],
                "employee_id": employee_id,
                "clock_in": now.isoformat(),
                "clock_out": None,
                "date": store_date(now).isoformat(),
            }
        )
        self._save("time_clocks")

    def clock_out(self, employee_id: str) -> None:
        for row in self._rows("time_clocks"):
            if str(row.get("employee_id")) == str(employee_id) and not row.get("clock_out"):
                row["clock_out"] = utc_now().isoformat()
                self._save("time_clocks")
                return
        raise ApiResponseError("El empleado no tiene un turno abierto", status=400)

    # ---------- loyalty ----------

    def list_loyalty_customers(self) -> list[CustomerLoyalty]:
        return parse_records(CustomerLoyalty, self._rows("loyalty_customers"), "loyalty_customers.json")

    def update_loyalty_customer(self, customer_id: str, update: CustomerLoyaltyUpdate) -> None:
        self._patch("loyalty_customers", customer_id, update.model_dump(by_alias=True), key="customerId")

    def recalculate_loyalty(self) -> None:
        stats: dict[str, list[float]] = defaultdict(lambda: [0, 0.0])
        for order in self._orders():
            if order.status != "cancelled" and order.customer_phone:
                stats[order.customer_phone][0] += 1
                stats[order.customer_phone][1] += order.total

        for row in self._rows("loyalty_customers"):
            total_orders, total_spent = stats.get(row.get("customerPhone") or "", (0, 0.0))
            tier, discount = tier_for(int(total_orders), total_spent)
            row.update(
                {
                    "tier": tier,
                    "totalOrders": int(total_orders),
                    "totalSpent": total_spent,
                    "discountPercentage": discount,
                    "points": history_points(int(total_orders), total_spent),
                    "priority": tier in ("vip", "gold"),
                }
            )
        self._save("loyalty_customers")
        self.logger.info("Loyalty tiers recalculated")

    def get_loyalty_program(self) -> LoyaltyProgram:
        return parse_object(LoyaltyProgram, self._tables.get("loyalty_program"))

    def save_loyalty_program(self, program: LoyaltyProgram) -> None:
        self._tables["loyalty_program"] = program.to_payload()
        self._save("loyalty_program")

    def list_loyalty_users(self) -> list[LoyaltyUser]:
        return parse_records(LoyaltyUser, self._rows("loyalty_users"), "loyalty_users.json")

    # ---------- aggregates ----------

    def get_sales_stats(self) -> SalesStats:
        return SalesStats.model_validate(compute_sales_stats(self._orders(), utc_now()))

    def get_realtime_analytics(self) -> RealtimeAnalytics:
        today = utc_now().date()
        todays = [
            o for o in self._orders()
            if o.created_at is not None and o.created_at.date() == today and o.status != "cancelled"
        ]
        return RealtimeAnalytics(today_sales=sum(o.total for o in todays), today_orders=len(todays))

    # ---------- settings ----------

    def get_store_settings(self, store_id: str) -> StoreSettings:
        return parse_object(StoreSettings, self._tables.get("store_settings", {}).get(store_id))

    def save_store_settings(self, store_id: str, settings: StoreSettings) -> None:
        self._tables.setdefault("store_settings", {})[store_id] = settings.to_payload()
        self._save("store_settings")

    def get_advanced_settings(self) -> AdvancedSettings:
        return parse_object(AdvancedSettings, self._tables.get("advanced_settings"))

    def save_advanced_settings(self, settings: AdvancedSettings) -> None:
        self._tables["advanced_settings"] = settings.to_payload()
        self._save("advanced_settings")

    def save_payment_config(self, config: PaymentConfig) -> None:
        self._tables["payment_config"] = config.backend_payload()
        self._save("payment_config")

    def test_mercadopago_connection(self) -> ConnectionTestResult:
        return ConnectionTestResult(ok=False, message="Sin conexión a Mercado Pago en modo local")

    # ---------- operations ----------

    def get_system_status(self) -> SystemStatus:
        return parse_object(SystemStatus, self._tables.get("system_status"))

    def get_system_logs(self, service: str, lines: int = 100) -> SystemLogs:
        return SystemLogs(service=service, lines=[])

    def restart_service(self, service: str) -> None:
        self.logger.info(f"Local mode: restart of {service} skipped")

    def disconnect_whatsapp(self) -> None:
        self.logger.info("Local mode: WhatsApp disconnect skipped")

    def get_whatsapp_qr(self) -> Optional[str]:
        return None
