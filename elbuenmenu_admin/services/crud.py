"""List + modal editing shared by the collection screens."""
from __future__ import annotations

import re
import unicodedata
from typing import Any, Callable, Optional

from elbuenmenu_admin.api.errors import AdminApiError, ValidationError
from elbuenmenu_admin.data.interface import DataAccess
from elbuenmenu_admin.data.models import (
    ApiModel,
    Coupon,
    Employee,
    EmployeePayment,
    Expense,
    InventoryItem,
    PromoCode,
    Promotion,
    StoreCategory,
)
from elbuenmenu_admin.data.resources import Resource
from elbuenmenu_admin.logging import get_logger

Validator = Callable[[Any], None]


def _require(value: Optional[str], message: str, field: str) -> None:
    if not value or not str(value).strip():
        raise ValidationError(message, field=field)


def slugify(text: str) -> str:
    normalized = unicodedata.normalize("NFKD", text).encode("ascii", "ignore").decode("ascii")
    return re.sub(r"[^a-z0-9]+", "-", normalized.lower()).strip("-")


def validate_coupon(coupon: Coupon) -> None:
    _require(coupon.code, "El código es obligatorio", "code")
    if coupon.discount_value <= 0:
        raise ValidationError("El descuento debe ser mayor a 0", field="discount_value")
    if coupon.discount_type == "percentage" and coupon.discount_value > 100:
        raise ValidationError("El porcentaje no puede superar 100", field="discount_value")
    if coupon.valid_from and coupon.valid_until and coupon.valid_until < coupon.valid_from:
        raise ValidationError("La fecha de fin es anterior a la de inicio", field="valid_until")


def validate_promo_code(promo: PromoCode) -> None:
    _require(promo.code, "El código es obligatorio", "code")
    if promo.value <= 0:
        raise ValidationError("El valor debe ser mayor a 0", field="value")


def validate_promotion(promotion: Promotion) -> None:
    _require(promotion.title, "El título es obligatorio", "title")
    if promotion.discount_percentage is not None and not 0 <= promotion.discount_percentage <= 100:
        raise ValidationError("El porcentaje debe estar entre 0 y 100", field="discount_percentage")


def validate_store_category(category: StoreCategory) -> None:
    _require(category.name, "El nombre es obligatorio", "name")
    _require(category.slug, "El slug es obligatorio", "slug")


def validate_employee(employee: Employee) -> None:
    _require(employee.name, "El nombre es obligatorio", "name")
    if employee.email and "@" not in employee.email:
        raise ValidationError("El email no es válido", field="email")
    for field in ("hourly_rate", "daily_rate", "delivery_rate", "base_salary"):
        if getattr(employee, field) < 0:
            raise ValidationError("Los montos no pueden ser negativos", field=field)


def validate_expense(expense: Expense) -> None:
    _require(expense.description, "La descripción es obligatoria", "description")
    if expense.amount <= 0:
        raise ValidationError("El monto debe ser mayor a 0", field="amount")


def validate_inventory_item(item: InventoryItem) -> None:
    _require(item.name, "El nombre es obligatorio", "name")
    for field in ("current_stock", "min_stock", "max_stock", "cost_per_unit"):
        if getattr(item, field) < 0:
            raise ValidationError("Los valores no pueden ser negativos", field=field)


def validate_employee_payment(payment: EmployeePayment) -> None:
    if payment.amount <= 0:
        raise ValidationError("El monto debe ser mayor a 0", field="amount")
    if payment.period_start and payment.period_end and payment.period_end < payment.period_start:
        raise ValidationError("El período es inválido", field="period_end")


def validate_review_response(response: Optional[str]) -> str:
    _require(response, "Escribí una respuesta", "response")
    return response.strip()


VALIDATORS: dict[str, Validator] = {
    "coupons": validate_coupon,
    "promo_codes": validate_promo_code,
    "promotions": validate_promotion,
    "store_categories": validate_store_category,
    "employees": validate_employee,
    "expenses": validate_expense,
    "inventory": validate_inventory_item,
    "employee_payments": validate_employee_payment,
}


class CrudController:
    """Holds a collection, the open draft and the save state of one screen.

    A save validates the draft, POSTs or PUTs it, then reloads the whole
    collection and closes the draft. Any failure leaves the draft open.
    """

    def __init__(
        self,
        data: DataAccess,
        resource: Resource,
        validator: Optional[Validator] = None,
        params: Optional[dict] = None,
    ) -> None:
        self.data = data
        self.resource = resource
        self.validator = validator or VALIDATORS.get(resource.name)
        self.params = params
        self.records: list[ApiModel] = []
        self.draft: Optional[ApiModel] = None
        self.editing_id: Optional[str] = None
        self.saving = False
        self.error: Optional[str] = None
        self.logger = get_logger(__name__)

    @property
    def is_open(self) -> bool:
        return self.draft is not None

    @property
    def is_editing(self) -> bool:
        return self.editing_id is not None

    def load(self) -> list[ApiModel]:
        self.records = self.data.list_records(self.resource, params=self.params)
        self.logger.debug(f"Loaded {len(self.records)} {self.resource.name}")
        return self.records

    def open_create(self, **defaults: Any) -> ApiModel:
        self.draft = self.resource.model(**defaults)
        self.editing_id = None
        self.error = None
        return self.draft

    def open_edit(self, record: ApiModel) -> ApiModel:
        self.draft = record.model_copy(deep=True)
        self.editing_id = getattr(record, "id", None)
        self.error = None
        return self.draft

    def close(self) -> None:
        self.draft = None
        self.editing_id = None
        self.error = None

    def submit(self, draft: Optional[ApiModel] = None) -> bool:
        """Save the draft. Returns False when a save is already in flight.

        Raises:
            ValidationError: The draft is incomplete; nothing was sent.
            AdminApiError: The backend refused the save.
        """
        if self.saving:
            self.logger.warning(f"Ignoring duplicate submit for {self.resource.name}")
            return False
        if draft is not None:
            self.draft = draft
        if self.draft is None:
            raise ValidationError("No hay nada para guardar")

        try:
            if self.validator is not None:
                self.validator(self.draft)
            self.saving = True
            if self.editing_id:
                self.data.update_record(self.resource, self.editing_id, self.draft)
            else:
                self.data.create_record(self.resource, self.draft)
        except AdminApiError as exc:
            self.error = exc.message
            self.logger.error(f"Saving {self.resource.name} failed: {exc.message}")
            raise
        finally:
            self.saving = False

        self.close()
        self.load()
        return True

    def delete(self, record_id: str) -> None:
        try:
            self.data.delete_record(self.resource, record_id)
        except AdminApiError as exc:
            self.error = exc.message
            self.logger.error(f"Deleting {self.resource.name} {record_id} failed: {exc.message}")
            raise
        self.load()
