from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .models import (
    ApiModel,
    Coupon,
    Employee,
    EmployeePayment,
    Expense,
    InventoryItem,
    PromoCode,
    Promotion,
    Review,
    StoreCategory,
    TimeClock,
)


@dataclass(frozen=True)
class Resource:
    """A REST collection managed with the list + modal CRUD pattern."""
    name: str
    path: str
    model: type[ApiModel]
    label: str
    # GET answers {"<list_key>": [...]} instead of a bare list
    list_key: Optional[str] = None
    # The backend expects store_id inside POST/PUT bodies
    send_store_id: bool = False
    # Collection is global, not per store
    scoped: bool = True


COUPONS = Resource("coupons", "/coupons", Coupon, "Cupones", send_store_id=True)
EMPLOYEES = Resource("employees", "/employees", Employee, "Empleados")
PROMOTIONS = Resource("promotions", "/promotions", Promotion, "Promociones", send_store_id=True)
PROMO_CODES = Resource("promo_codes", "/loyalty/promo-codes", PromoCode, "Códigos promocionales", list_key="codes")
STORE_CATEGORIES = Resource("store_categories", "/store-categories", StoreCategory, "Categorías de tiendas", scoped=False)
REVIEWS = Resource("reviews", "/reviews", Review, "Reseñas")
INVENTORY = Resource("inventory", "/inventory", InventoryItem, "Inventario")
EXPENSES = Resource("expenses", "/business/expenses", Expense, "Gastos", list_key="expenses")
TIME_CLOCKS = Resource("time_clocks", "/employees/time-clocks", TimeClock, "Fichajes")
EMPLOYEE_PAYMENTS = Resource("employee_payments", "/employees/payments", EmployeePayment, "Pagos a empleados")

RESOURCES: dict[str, Resource] = {
    resource.name: resource
    for resource in (
        COUPONS,
        EMPLOYEES,
        PROMOTIONS,
        PROMO_CODES,
        STORE_CATEGORIES,
        REVIEWS,
        INVENTORY,
        EXPENSES,
        TIME_CLOCKS,
        EMPLOYEE_PAYMENTS,
    )
}


def get_resource(name: str) -> Resource:
    try:
        return RESOURCES[name]
    except KeyError:
        raise ValueError(f"Unknown resource: {name}") from None
